"""
SCRIPTORIUM - The Canon

Fixed, ordered table of the 66 canonical books with their chapter counts,
testament membership lists and the three-letter codes used by verse-text APIs.
Everything here is static data plus O(1) lookups over it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class Testament(str, Enum):
    """Testament designation."""
    OLD = "old"
    NEW = "new"


@dataclass(frozen=True)
class BookInfo:
    """Immutable representation of a single canonical book."""

    name: str
    order: int  # 1-based canonical position
    chapters: int
    code: str
    testament: Testament


# The position table spells the 19th book in the plural. External verse-text
# lookups use the singular. Each call site picks one of these explicitly.
POSITION_TABLE_PSALMS = "Psalms"
TEXT_API_PSALMS = "Psalm"

CANON_SIZE = 66

# (name, chapters, api code)
_OLD_TESTAMENT: Tuple[Tuple[str, int, str], ...] = (
    ("Genesis", 50, "GEN"),
    ("Exodus", 40, "EXO"),
    ("Leviticus", 27, "LEV"),
    ("Numbers", 36, "NUM"),
    ("Deuteronomy", 34, "DEU"),
    ("Joshua", 24, "JOS"),
    ("Judges", 21, "JDG"),
    ("Ruth", 4, "RUT"),
    ("1 Samuel", 31, "1SA"),
    ("2 Samuel", 24, "2SA"),
    ("1 Kings", 22, "1KI"),
    ("2 Kings", 25, "2KI"),
    ("1 Chronicles", 29, "1CH"),
    ("2 Chronicles", 36, "2CH"),
    ("Ezra", 10, "EZR"),
    ("Nehemiah", 13, "NEH"),
    ("Esther", 10, "EST"),
    ("Job", 42, "JOB"),
    (POSITION_TABLE_PSALMS, 150, "PSA"),
    ("Proverbs", 31, "PRO"),
    ("Ecclesiastes", 12, "ECC"),
    ("Song of Solomon", 8, "SNG"),
    ("Isaiah", 66, "ISA"),
    ("Jeremiah", 52, "JER"),
    ("Lamentations", 5, "LAM"),
    ("Ezekiel", 48, "EZK"),
    ("Daniel", 12, "DAN"),
    ("Hosea", 14, "HOS"),
    ("Joel", 3, "JOL"),
    ("Amos", 9, "AMO"),
    ("Obadiah", 1, "OBA"),
    ("Jonah", 4, "JON"),
    ("Micah", 7, "MIC"),
    ("Nahum", 3, "NAM"),
    ("Habakkuk", 3, "HAB"),
    ("Zephaniah", 3, "ZEP"),
    ("Haggai", 2, "HAG"),
    ("Zechariah", 14, "ZEC"),
    ("Malachi", 4, "MAL"),
)

_NEW_TESTAMENT: Tuple[Tuple[str, int, str], ...] = (
    ("Matthew", 28, "MAT"),
    ("Mark", 16, "MRK"),
    ("Luke", 24, "LUK"),
    ("John", 21, "JHN"),
    ("Acts", 28, "ACT"),
    ("Romans", 16, "ROM"),
    ("1 Corinthians", 16, "1CO"),
    ("2 Corinthians", 13, "2CO"),
    ("Galatians", 6, "GAL"),
    ("Ephesians", 6, "EPH"),
    ("Philippians", 4, "PHP"),
    ("Colossians", 4, "COL"),
    ("1 Thessalonians", 5, "1TH"),
    ("2 Thessalonians", 3, "2TH"),
    ("1 Timothy", 6, "1TI"),
    ("2 Timothy", 4, "2TI"),
    ("Titus", 3, "TIT"),
    ("Philemon", 1, "PHM"),
    ("Hebrews", 13, "HEB"),
    ("James", 5, "JAS"),
    ("1 Peter", 5, "1PE"),
    ("2 Peter", 3, "2PE"),
    ("1 John", 5, "1JN"),
    ("2 John", 1, "2JN"),
    ("3 John", 1, "3JN"),
    ("Jude", 1, "JUD"),
    ("Revelation", 22, "REV"),
)

OLD_TESTAMENT_BOOKS: Tuple[str, ...] = tuple(name for name, _, _ in _OLD_TESTAMENT)
NEW_TESTAMENT_BOOKS: Tuple[str, ...] = tuple(name for name, _, _ in _NEW_TESTAMENT)
BOOK_ORDER: Tuple[str, ...] = OLD_TESTAMENT_BOOKS + NEW_TESTAMENT_BOOKS


def _build_table() -> Dict[str, BookInfo]:
    table: Dict[str, BookInfo] = {}
    for testament, entries in ((Testament.OLD, _OLD_TESTAMENT), (Testament.NEW, _NEW_TESTAMENT)):
        for name, chapters, code in entries:
            table[name] = BookInfo(
                name=name,
                order=len(table) + 1,
                chapters=chapters,
                code=code,
                testament=testament,
            )
    return table


BIBLE_STRUCTURE: Mapping[str, BookInfo] = MappingProxyType(_build_table())

TOTAL_CHAPTERS: int = sum(book.chapters for book in BIBLE_STRUCTURE.values())

_OLD_TESTAMENT_SET = frozenset(OLD_TESTAMENT_BOOKS)
_NEW_TESTAMENT_SET = frozenset(NEW_TESTAMENT_BOOKS)


def canonical_book_name(name: str, psalms_spelling: str = POSITION_TABLE_PSALMS) -> Optional[str]:
    """
    Map a book name as written at a call site onto its table name.

    ``psalms_spelling`` is the spelling that call site uses for the Psalter;
    it is accepted in addition to the table's own spelling.
    """
    if name == psalms_spelling:
        return POSITION_TABLE_PSALMS
    if name in BIBLE_STRUCTURE:
        return name
    return None


def get_book(name: str, psalms_spelling: str = POSITION_TABLE_PSALMS) -> Optional[BookInfo]:
    """Look up a book by name; None when it is not in the canon."""
    canonical = canonical_book_name(name, psalms_spelling)
    return BIBLE_STRUCTURE[canonical] if canonical else None


def is_old_testament(book: str) -> bool:
    return book in _OLD_TESTAMENT_SET


def is_new_testament(book: str) -> bool:
    return book in _NEW_TESTAMENT_SET


def chapter_count(book: str, psalms_spelling: str = POSITION_TABLE_PSALMS) -> Optional[int]:
    """Number of chapters in ``book``, or None for an unknown book."""
    info = get_book(book, psalms_spelling)
    return info.chapters if info else None


def book_code(book: str, psalms_spelling: str = TEXT_API_PSALMS) -> Optional[str]:
    """Three-letter verse-text API code (``"Genesis" -> "GEN"``)."""
    info = get_book(book, psalms_spelling)
    return info.code if info else None
