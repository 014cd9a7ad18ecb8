"""
SCRIPTORIUM - Cross-Reference Timeline

Places a verse's cross references on a circle that runs through the canon
(Genesis at the top, clockwise to Revelation), groups neighbouring references
from the same book into clusters and computes the curves that connect the
source verse to each cluster.

Everything here is pure: references that do not resolve are dropped and no
function raises for bad input.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from config import TimelineConfig
from data.canon import Testament
from data.references import canon_position, resolve, testament
from data.schemas import (
    ClusterMember,
    CrossReference,
    CrossReferenceCluster,
    ScriptureReference,
)
from observability import get_logger

logger = get_logger(__name__)

Point = Tuple[float, float]

_DEFAULTS = TimelineConfig()

TESTAMENT_COLORS = {
    Testament.OLD: "#b45309",
    Testament.NEW: "#1d4ed8",
    None: "#6b7280",
}


@dataclass
class Timeline:
    """A resolved source verse and its clustered cross references."""

    source: ScriptureReference
    source_position: float
    clusters: List[CrossReferenceCluster] = field(default_factory=list)

    @property
    def reference_count(self) -> int:
        return sum(len(c) for c in self.clusters)


def _as_cross_reference(item: Union[str, CrossReference, Mapping[str, Any]]) -> CrossReference:
    if isinstance(item, CrossReference):
        return item
    if isinstance(item, str):
        return CrossReference(reference=item)
    return CrossReference.model_validate(item)


def build_timeline(
    source_reference: str,
    cross_references: Iterable[Union[str, CrossReference, Mapping[str, Any]]],
) -> Optional[Timeline]:
    """
    Resolve, order and cluster ``cross_references`` around ``source_reference``.

    Returns None when the source verse does not resolve. Cross references
    that do not resolve or do not validate are skipped. The survivors are stably sorted by canon
    position and a new cluster starts whenever the book changes, so the
    references of one book always form a single cluster.
    """
    source = resolve(source_reference)
    if source is None:
        logger.debug("Timeline source did not resolve", reference=source_reference)
        return None

    members: List[ClusterMember] = []
    for item in cross_references:
        try:
            ref = _as_cross_reference(item)
        except ValidationError as e:
            logger.debug("Dropping malformed cross reference", item=item, errors=e.error_count())
            continue
        resolved = resolve(ref.reference)
        if resolved is None:
            logger.debug("Dropping unresolvable cross reference", reference=ref.reference)
            continue
        members.append(ClusterMember(
            reference=resolved,
            source=ref.reference,
            position=canon_position(resolved.book),
            testament=testament(resolved.book),
            text=ref.text,
            connection=ref.connection,
            period=ref.period,
            original_text=ref.original_text,
        ))

    members.sort(key=lambda m: m.position)

    clusters: List[CrossReferenceCluster] = []
    for member in members:
        if not clusters or clusters[-1].book != member.book:
            clusters.append(CrossReferenceCluster(position=member.position, references=[member]))
        else:
            clusters[-1].references.append(member)

    return Timeline(
        source=source,
        source_position=canon_position(source.book),
        clusters=clusters,
    )


# =============================================================================
# GEOMETRY
# =============================================================================

def point_on_circle(
    position: float,
    center_x: float = _DEFAULTS.center_x,
    center_y: float = _DEFAULTS.center_y,
    radius: float = _DEFAULTS.radius,
) -> Point:
    """Map a canon position onto the circle; 0.0 is at the top, increasing clockwise."""
    angle = position * 2 * math.pi - math.pi / 2
    return (center_x + radius * math.cos(angle), center_y + radius * math.sin(angle))


def connection_curve(
    start: Point,
    end: Point,
    center: Point,
    pull: float = _DEFAULTS.curve_pull,
) -> Tuple[Point, Point, Point]:
    """
    Quadratic Bezier from ``start`` to ``end`` bowed toward ``center``.

    The control point is the chord midpoint moved ``pull`` of the way to the
    centre.
    """
    mid_x = (start[0] + end[0]) / 2
    mid_y = (start[1] + end[1]) / 2
    control = (mid_x + (center[0] - mid_x) * pull, mid_y + (center[1] - mid_y) * pull)
    return start, control, end


def arc_thickness(
    member_count: int,
    base: float = _DEFAULTS.thickness_base,
    per_member: float = _DEFAULTS.thickness_per_member,
    maximum: float = _DEFAULTS.thickness_max,
) -> float:
    return min(base + per_member * member_count, maximum)


def svg_path(curve: Tuple[Point, Point, Point]) -> str:
    """``M x0 y0 Q cx cy x1 y1`` path data for a quadratic curve."""
    (x0, y0), (cx, cy), (x1, y1) = curve
    return f"M {x0:.2f} {y0:.2f} Q {cx:.2f} {cy:.2f} {x1:.2f} {y1:.2f}"


# =============================================================================
# LAYOUT
# =============================================================================

@dataclass
class ClusterLayout:
    cluster: CrossReferenceCluster
    point: Point
    curve: Tuple[Point, Point, Point]
    thickness: float

    @property
    def path(self) -> str:
        return svg_path(self.curve)

    @property
    def color(self) -> str:
        return TESTAMENT_COLORS[self.cluster.references[0].testament]


@dataclass
class TimelineLayout:
    """Screen geometry for a Timeline."""

    timeline: Timeline
    center: Point
    radius: float
    source_point: Point
    clusters: List[ClusterLayout] = field(default_factory=list)

    def render_svg(self, size: Optional[float] = None) -> str:
        """Render the circle, connection curves and cluster markers as an SVG document."""
        size = size or max(self.center[0], self.center[1]) * 2
        cx, cy = self.center
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{size:g}" height="{size:g}" '
            f'viewBox="0 0 {size:g} {size:g}">',
            f'<circle cx="{cx:g}" cy="{cy:g}" r="{self.radius:g}" fill="none" stroke="#d1d5db" />',
        ]

        for layout in self.clusters:
            parts.append(
                f'<path d="{layout.path}" fill="none" stroke="{layout.color}" '
                f'stroke-width="{layout.thickness:.1f}" stroke-opacity="0.7" />'
            )

        for layout in self.clusters:
            x, y = layout.point
            title = ", ".join(m.source for m in layout.cluster.references)
            parts.append(
                f'<circle cx="{x:.2f}" cy="{y:.2f}" r="4" fill="{layout.color}">'
                f"<title>{_escape(title)}</title></circle>"
            )

        sx, sy = self.source_point
        parts.append(
            f'<circle cx="{sx:.2f}" cy="{sy:.2f}" r="6" fill="#111827">'
            f"<title>{_escape(str(self.timeline.source))}</title></circle>"
        )
        parts.append("</svg>")
        return "\n".join(parts)


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def layout_timeline(
    timeline: Timeline,
    center_x: Optional[float] = None,
    center_y: Optional[float] = None,
    radius: Optional[float] = None,
    config: Optional[TimelineConfig] = None,
) -> TimelineLayout:
    """Compute points, curves and thicknesses for every cluster of ``timeline``."""
    config = config or _DEFAULTS
    cx = config.center_x if center_x is None else center_x
    cy = config.center_y if center_y is None else center_y
    r = config.radius if radius is None else radius

    source_point = point_on_circle(timeline.source_position, cx, cy, r)
    layout = TimelineLayout(timeline=timeline, center=(cx, cy), radius=r, source_point=source_point)

    for cluster in timeline.clusters:
        point = point_on_circle(cluster.position, cx, cy, r)
        layout.clusters.append(ClusterLayout(
            cluster=cluster,
            point=point,
            curve=connection_curve(source_point, point, (cx, cy), config.curve_pull),
            thickness=arc_thickness(
                len(cluster),
                config.thickness_base,
                config.thickness_per_member,
                config.thickness_max,
            ),
        ))

    return layout
