"""
Property-Based Tests for Reference Resolution and Clustering

Tests resolver totality, range handling and the timeline clustering
invariants with generated references.
"""
import pytest
from hypothesis import example, given, settings, strategies as st

from data.canon import CANON_SIZE
from data.references import canon_position, resolve
from pipeline.timeline import build_timeline
from tests.property.strategies import (
    ALL_BOOKS,
    cross_reference_list_strategy,
    non_canonical_reference_strategy,
    ranged_reference_strategy,
    reference_strategy,
)


@pytest.mark.property
class TestResolveProperties:
    """Property-based tests for resolve()."""

    @given(reference_strategy(valid_only=True))
    @settings(max_examples=300)
    def test_valid_references_resolve(self, reference):
        """Canonical references resolve and format back to themselves."""
        resolved = resolve(reference)
        assert resolved is not None
        assert str(resolved) == reference
        assert resolved.book in ALL_BOOKS

    @given(ranged_reference_strategy())
    @settings(max_examples=200)
    def test_range_resolves_to_start(self, reference):
        """Anything after the first hyphen is ignored."""
        start = reference.split("-", 1)[0]
        assert resolve(reference) == resolve(start)

    @given(non_canonical_reference_strategy())
    def test_non_canonical_books_do_not_resolve(self, reference):
        assert resolve(reference) is None

    @given(reference_strategy(valid_only=False))
    @settings(max_examples=300)
    @example("")
    @example("   ")
    @example("John")
    @example("John 3")
    @example("John 3:")
    @example(":16")
    @example("3:16 John")
    @example("Ἰωάννης 3:16")
    def test_never_raises(self, text):
        """Malformed input yields None, never an exception."""
        result = resolve(text)
        assert result is None or result.book in ALL_BOOKS


@pytest.mark.property
class TestCanonPositionProperties:

    @given(st.sampled_from(ALL_BOOKS))
    def test_position_in_unit_interval(self, book):
        position = canon_position(book)
        assert 0.0 <= position < 1.0
        assert position * CANON_SIZE == pytest.approx(ALL_BOOKS.index(book))

    @given(st.sampled_from(ALL_BOOKS), st.sampled_from(ALL_BOOKS))
    def test_position_follows_canon_order(self, a, b):
        if ALL_BOOKS.index(a) < ALL_BOOKS.index(b):
            assert canon_position(a) < canon_position(b)


@pytest.mark.property
class TestClusteringProperties:
    """Invariants of build_timeline over arbitrary cross-reference lists."""

    @given(cross_reference_list_strategy())
    @settings(max_examples=200)
    def test_cluster_invariants(self, cross_refs):
        timeline = build_timeline("John 3:16", cross_refs)
        assert timeline is not None

        resolvable = [r for r in cross_refs if resolve(r) is not None]
        assert timeline.reference_count == len(resolvable)

        positions = [c.position for c in timeline.clusters]
        assert positions == sorted(positions)

        for cluster in timeline.clusters:
            assert len(cluster) >= 1
            assert {m.book for m in cluster.references} == {cluster.book}
            assert cluster.position == cluster.references[0].position

        # Sorting puts every book's references next to each other
        books = [c.book for c in timeline.clusters]
        assert len(books) == len(set(books))
