"""
SCRIPTORIUM - Reference Resolver

Turns reference strings such as ``"1 John 3:16"`` into structured
``ScriptureReference`` values and places books on the canon.

Resolution failures are expected (LLM and user input is not always clean) and
are reported as ``None``, never raised.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from data.canon import (
    BIBLE_STRUCTURE,
    CANON_SIZE,
    POSITION_TABLE_PSALMS,
    Testament,
    canonical_book_name,
    is_new_testament,
    is_old_testament,
)
from data.schemas import ScriptureReference
from observability.logging import get_logger

logger = get_logger(__name__)

# <optional "<digit> "><book words> <chapter>:<verse>
_REFERENCE_PATTERN = re.compile(r"^(?:(\d) )?([A-Za-z]+(?: [A-Za-z]+)*) (\d+):(\d+)")

# Chapter-only variant used for coverage tracking
_BOOK_CHAPTER_PATTERN = re.compile(r"^(?:(\d)\s+)?([A-Za-z]+(?:\s+[A-Za-z]+)*)\s+(\d+):")


def _book_name(number: Optional[str], words: str) -> str:
    return f"{number} {words}" if number else words


def resolve(
    reference: str,
    psalms_spelling: str = POSITION_TABLE_PSALMS,
) -> Optional[ScriptureReference]:
    """
    Parse ``"Book Chapter:Verse"`` into a ScriptureReference.

    Anything after the first ``-`` (a verse range) is ignored, so
    ``"John 3:16-18"`` resolves to John 3:16. Returns None for malformed input
    or a book outside the canon.

    Args:
        reference: Reference string.
        psalms_spelling: How this call site spells the Psalter
            (``"Psalms"`` or ``"Psalm"``).
    """
    if not isinstance(reference, str):
        return None

    head = reference.split("-", 1)[0].strip()
    match = _REFERENCE_PATTERN.match(head)
    if not match:
        return None

    number, words, chapter, verse = match.groups()
    book = canonical_book_name(_book_name(number, words), psalms_spelling)
    if book is None:
        return None

    return ScriptureReference(book=book, chapter=int(chapter), verse=int(verse))


def format_reference(reference: ScriptureReference) -> str:
    """Render a reference back to ``"Book Chapter:Verse"``."""
    return str(reference)


def testament(book: str) -> Optional[Testament]:
    """
    Classify a book name as Old or New Testament.

    Returns None for names in neither list; coverage is not total.
    """
    if is_old_testament(book):
        return Testament.OLD
    if is_new_testament(book):
        return Testament.NEW
    return None


def canon_position(book: str, psalms_spelling: str = POSITION_TABLE_PSALMS) -> float:
    """
    Normalized position of ``book`` in the canon, in [0, 1).

    Position is ``(order - 1) / 66``: every reference inside one book shares
    the book's position. Unknown books resolve to 0.0, the same position as
    Genesis.
    """
    canonical = canonical_book_name(book, psalms_spelling)
    if canonical is None:
        logger.debug("Unknown book placed at canon start", book=book)
        return 0.0
    return (BIBLE_STRUCTURE[canonical].order - 1) / CANON_SIZE


def reference_position(reference: ScriptureReference) -> float:
    """Canon position of a resolved reference (chapter and verse are ignored)."""
    return canon_position(reference.book)


def extract_book_and_chapter(
    reference: str,
    psalms_spelling: str = POSITION_TABLE_PSALMS,
) -> Optional[Tuple[str, int]]:
    """Pull ``(book, chapter)`` out of a reference; None if the book is not canonical."""
    match = _BOOK_CHAPTER_PATTERN.match(reference.strip())
    if not match:
        return None

    number, words, chapter = match.groups()
    words = " ".join(words.split())
    book = canonical_book_name(_book_name(number, words), psalms_spelling)
    if book is None:
        return None
    return book, int(chapter)


def parse_reference_list(response: str) -> List[str]:
    """
    Split an LLM cross-reference answer into individual reference strings.

    Expected shape is ``"John 3:16,17; 1 John 3:16-19"`` possibly spread over
    several lines with ``##`` example headers, which are dropped.
    """
    lines = [line.strip() for line in response.splitlines() if line.strip()]
    body = " ".join(line for line in lines if not line.startswith("##"))
    return [ref.strip() for ref in body.split(";") if ref.strip()]
