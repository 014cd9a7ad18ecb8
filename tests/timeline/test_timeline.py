"""
Tests for cross-reference clustering and timeline geometry.
"""
import pytest


class TestBuildTimeline:
    """Tests for build_timeline()."""

    def test_same_book_references_share_a_cluster(self):
        """Genesis references merge; Isaiah stands alone, after Genesis."""
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", ["Genesis 1:1", "Genesis 3:15", "Isaiah 53:5"])

        assert len(timeline.clusters) == 2
        genesis, isaiah = timeline.clusters
        assert [str(m.reference) for m in genesis.references] == ["Genesis 1:1", "Genesis 3:15"]
        assert [str(m.reference) for m in isaiah.references] == ["Isaiah 53:5"]
        assert genesis.position < isaiah.position

    def test_input_order_does_not_matter(self, sample_cross_references):
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", sample_cross_references)

        assert [c.book for c in timeline.clusters] == ["Genesis", "Isaiah"]
        # Stable sort keeps input order inside a book
        assert [m.source for m in timeline.clusters[0].references] == ["Genesis 1:1", "Genesis 3:15"]

    def test_unresolvable_references_are_dropped(self):
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", ["NotABook 1:1", "Genesis 1:1", "garbage"])

        assert timeline.reference_count == 1
        assert all(m.book != "NotABook" for c in timeline.clusters for m in c.references)

    def test_malformed_mappings_are_dropped(self):
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", [
            "Genesis 1:1",
            {"text": "no reference"},
            {
                "reference": "Isaiah 53:5",
                "originalText": {"reference": "Isaiah 53:5", "text": "...", "language": "aramaic"},
            },
            {"reference": "Isaiah 53:6", "text": "All we like sheep"},
        ])

        assert timeline is not None
        assert [m.source for c in timeline.clusters for m in c.references] == ["Genesis 1:1", "Isaiah 53:6"]

    def test_unresolvable_source(self):
        from pipeline.timeline import build_timeline

        assert build_timeline("NotABook 1:1", ["Genesis 1:1"]) is None

    def test_empty_cross_references(self):
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", [])
        assert timeline.clusters == []
        assert timeline.source_position == pytest.approx(42 / 66)

    def test_annotations_pass_through(self, sample_cross_references):
        from data.canon import Testament
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16", sample_cross_references)
        isaiah = timeline.clusters[1].references[0]

        assert isaiah.text == "But he was wounded for our transgressions"
        assert isaiah.connection == "prophecy"
        assert isaiah.testament is Testament.OLD
        assert timeline.clusters[0].references[0].period == "creation"

    def test_ranges_resolve_to_first_verse(self):
        from pipeline.timeline import build_timeline

        timeline = build_timeline("John 3:16-18", ["Romans 5:8-10"])
        assert str(timeline.source) == "John 3:16"
        assert str(timeline.clusters[0].references[0].reference) == "Romans 5:8"


class TestGeometry:
    """Tests for the circle geometry helpers."""

    def test_genesis_is_at_the_top(self):
        from pipeline.timeline import point_on_circle

        x, y = point_on_circle(0.0, 200, 200, 150)
        assert x == pytest.approx(200)
        assert y == pytest.approx(50)

    def test_quarter_turn_is_on_the_right(self):
        from pipeline.timeline import point_on_circle

        x, y = point_on_circle(0.25, 200, 200, 150)
        assert x == pytest.approx(350)
        assert y == pytest.approx(200)

    def test_control_point_pulled_toward_centre(self):
        from pipeline.timeline import connection_curve

        start, control, end = connection_curve((0, 0), (100, 0), (50, 100))
        assert start == (0, 0)
        assert end == (100, 0)
        assert control == pytest.approx((50, 20))

    @pytest.mark.parametrize("members,expected", [
        (0, 1.5),
        (1, 1.8),
        (5, 3.0),
        (8, 3.9),
        (9, 4.0),
        (50, 4.0),
    ])
    def test_arc_thickness(self, members, expected):
        from pipeline.timeline import arc_thickness

        assert arc_thickness(members) == pytest.approx(expected)

    def test_svg_path(self):
        from pipeline.timeline import svg_path

        assert svg_path(((0, 0), (1.5, 2), (3, 4))) == "M 0.00 0.00 Q 1.50 2.00 3.00 4.00"


class TestLayout:
    """Tests for layout_timeline()."""

    def test_layout(self):
        from pipeline.timeline import build_timeline, layout_timeline, point_on_circle

        timeline = build_timeline("John 3:16", ["Genesis 1:1", "Genesis 3:15", "Isaiah 53:5"])
        layout = layout_timeline(timeline, 100, 100, 80)

        assert layout.source_point == pytest.approx(point_on_circle(42 / 66, 100, 100, 80))
        assert len(layout.clusters) == 2
        genesis = layout.clusters[0]
        assert genesis.point == pytest.approx((100, 20))
        assert genesis.thickness == pytest.approx(2.1)
        assert genesis.path.startswith("M ")
        assert genesis.curve[2] == genesis.point

    def test_defaults_come_from_config(self):
        from config import TimelineConfig
        from pipeline.timeline import build_timeline, layout_timeline

        timeline = build_timeline("Genesis 1:1", [])
        layout = layout_timeline(timeline, config=TimelineConfig(radius=10, center_x=20, center_y=30))

        assert layout.center == (20, 30)
        assert layout.source_point == pytest.approx((20, 20))

    def test_render_svg(self):
        from pipeline.timeline import build_timeline, layout_timeline

        timeline = build_timeline("John 3:16", ["Genesis 1:1", "Romans 5:8"])
        svg = layout_timeline(timeline).render_svg()

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert svg.count("<path") == 2
        assert "<title>John 3:16</title>" in svg
        assert "#1d4ed8" in svg  # New Testament colour for Romans
