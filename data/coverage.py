"""
SCRIPTORIUM - Bible Coverage

Tracks which chapters of which books a reader has studied and summarizes
that as percentages of the canon. Pure functions over BookCoverage lists;
storing the result is the caller's job.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from data.canon import (
    BIBLE_STRUCTURE,
    NEW_TESTAMENT_BOOKS,
    OLD_TESTAMENT_BOOKS,
    TOTAL_CHAPTERS,
    Testament,
    chapter_count,
)
from data.references import extract_book_and_chapter
from data.schemas import BookCoverage


def chapters_by_book(references: Iterable[str]) -> Dict[str, Set[int]]:
    """
    Group the chapters touched by ``references`` by book.

    Unparseable references and chapters the book does not have are skipped.
    """
    grouped: Dict[str, Set[int]] = {}
    for reference in references:
        extracted = extract_book_and_chapter(reference)
        if extracted is None:
            continue
        book, chapter = extracted
        if not 1 <= chapter <= (chapter_count(book) or 0):
            continue
        grouped.setdefault(book, set()).add(chapter)
    return grouped


def update_coverage(
    existing: Iterable[BookCoverage],
    references: Iterable[str],
    now: Optional[datetime] = None,
) -> List[BookCoverage]:
    """
    Merge the chapters of ``references`` into ``existing`` coverage.

    Books already present get the union of their chapters and a fresh
    ``last_studied``; new books are appended in the order first seen.
    The input list is not modified.
    """
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    updated = [
        BookCoverage(book=c.book, chapters_read=list(c.chapters_read), last_studied=c.last_studied)
        for c in existing
    ]
    index = {c.book: i for i, c in enumerate(updated)}

    for book, chapters in chapters_by_book(references).items():
        if book in index:
            entry = updated[index[book]]
            entry.chapters_read = sorted(set(entry.chapters_read) | chapters)
            entry.last_studied = stamp
        else:
            index[book] = len(updated)
            updated.append(BookCoverage(book=book, chapters_read=sorted(chapters), last_studied=stamp))

    return updated


def coverage_percent(coverage: Iterable[BookCoverage]) -> float:
    """Share of all 1189 chapters that have been read, as a percentage."""
    read = sum(len(c.chapters_read) for c in coverage)
    return read / TOTAL_CHAPTERS * 100


def testament_coverage(coverage: Iterable[BookCoverage], which: Testament) -> float:
    """
    Mean per-book completion across one testament, as a percentage.

    Each book contributes ``chapters read / chapters in book``; the sum is
    divided by the number of books in the testament (39 or 27).
    """
    books = OLD_TESTAMENT_BOOKS if which is Testament.OLD else NEW_TESTAMENT_BOOKS
    members = set(books)
    total = sum(
        len(c.chapters_read) / BIBLE_STRUCTURE[c.book].chapters
        for c in coverage
        if c.book in members
    )
    return total * 100 / len(books)
