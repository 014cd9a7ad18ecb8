"""
SCRIPTORIUM - Pipeline Module

Study workflows built on the resolver and the completion providers:
- CommentaryAccumulator / CommentarySession: sequential commentary that
  builds on the commentary of earlier verses
- build_timeline / layout_timeline: clustered cross references on the
  canon circle
- CrossReferenceFinder: LLM cross-reference discovery
"""

from pipeline.commentary import (
    CommentaryAccumulator,
    CommentarySession,
    CommentaryStore,
    GenerateFn,
    ProviderCommentaryGenerator,
    now_ms,
)
from pipeline.cross_references import CrossReferenceFinder
from pipeline.timeline import (
    ClusterLayout,
    Timeline,
    TimelineLayout,
    arc_thickness,
    build_timeline,
    connection_curve,
    layout_timeline,
    point_on_circle,
    svg_path,
)

__all__ = [
    "CommentaryAccumulator",
    "CommentarySession",
    "CommentaryStore",
    "GenerateFn",
    "ProviderCommentaryGenerator",
    "now_ms",
    "CrossReferenceFinder",
    "ClusterLayout",
    "Timeline",
    "TimelineLayout",
    "arc_thickness",
    "build_timeline",
    "connection_curve",
    "layout_timeline",
    "point_on_circle",
    "svg_path",
]
