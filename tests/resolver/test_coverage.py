"""
Tests for reading coverage.
"""
from datetime import datetime, timezone

import pytest


NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


class TestUpdateCoverage:
    """Tests for update_coverage()."""

    def test_new_books_are_appended(self):
        from data.coverage import update_coverage

        result = update_coverage([], ["John 3:16", "John 1:1", "Genesis 1:1"], now=NOW)

        assert [c.book for c in result] == ["John", "Genesis"]
        assert result[0].chapters_read == [1, 3]
        assert result[0].last_studied == NOW.isoformat()

    def test_chapters_are_merged(self):
        from data.coverage import update_coverage
        from data.schemas import BookCoverage

        existing = [BookCoverage(book="John", chapters_read=[1, 3], last_studied="2020-01-01")]
        result = update_coverage(existing, ["John 3:17", "John 2:1"], now=NOW)

        assert result[0].chapters_read == [1, 2, 3]
        assert result[0].last_studied == NOW.isoformat()
        # Input left untouched
        assert existing[0].chapters_read == [1, 3]
        assert existing[0].last_studied == "2020-01-01"

    def test_unparseable_references_are_skipped(self):
        from data.coverage import update_coverage

        assert update_coverage([], ["NotABook 1:1", "nonsense"], now=NOW) == []

    def test_chapters_outside_the_book_are_skipped(self):
        from data.canon import Testament
        from data.coverage import testament_coverage, update_coverage

        result = update_coverage([], ["Jude 5:1", "Jude 1:3", "Genesis 51:1"], now=NOW)

        assert [c.book for c in result] == ["Jude"]
        assert result[0].chapters_read == [1]
        assert testament_coverage(result, Testament.NEW) == pytest.approx(100 / 27)


class TestPercentages:

    def test_coverage_percent(self):
        from data.coverage import coverage_percent
        from data.schemas import BookCoverage

        coverage = [BookCoverage(book="Genesis", chapters_read=list(range(1, 51)))]
        assert coverage_percent(coverage) == pytest.approx(50 / 1189 * 100)

    def test_testament_coverage(self):
        """Each book contributes its own completion fraction."""
        from data.canon import Testament
        from data.coverage import testament_coverage
        from data.schemas import BookCoverage

        coverage = [
            BookCoverage(book="Jude", chapters_read=[1]),
            BookCoverage(book="Genesis", chapters_read=[1]),
        ]
        assert testament_coverage(coverage, Testament.NEW) == pytest.approx(100 / 27)
        assert testament_coverage(coverage, Testament.OLD) == pytest.approx((1 / 50) * 100 / 39)

    def test_round_trip_dict(self):
        from data.schemas import BookCoverage

        entry = BookCoverage.from_dict({"book": "Ruth", "chaptersRead": [1, 2], "lastStudied": "x"})
        assert entry.to_dict() == {"book": "Ruth", "chaptersRead": [1, 2], "lastStudied": "x"}
