"""
SCRIPTORIUM - Data Module

Canon tables, reference resolution, value schemas and coverage tracking.

Architecture:
- canon.py: the ordered 66-book table, testament lists, API book codes
- references.py: reference parsing and canon positions
- schemas.py: references, commentaries, cross references, clusters
- coverage.py: chapters-read bookkeeping
"""
from data.canon import (
    BIBLE_STRUCTURE,
    BOOK_ORDER,
    CANON_SIZE,
    NEW_TESTAMENT_BOOKS,
    OLD_TESTAMENT_BOOKS,
    POSITION_TABLE_PSALMS,
    TEXT_API_PSALMS,
    TOTAL_CHAPTERS,
    BookInfo,
    Testament,
    book_code,
    chapter_count,
)
from data.schemas import (
    BookCoverage,
    ClusterMember,
    Commentary,
    CommentaryPayload,
    CrossReference,
    CrossReferenceCluster,
    MarkdownCommentary,
    OriginalText,
    ScriptureReference,
    SectionedCommentary,
    parse_commentary_payload,
)
from data.references import (
    canon_position,
    extract_book_and_chapter,
    format_reference,
    parse_reference_list,
    resolve,
    testament,
)

__all__ = [
    "BIBLE_STRUCTURE",
    "BOOK_ORDER",
    "CANON_SIZE",
    "NEW_TESTAMENT_BOOKS",
    "OLD_TESTAMENT_BOOKS",
    "POSITION_TABLE_PSALMS",
    "TEXT_API_PSALMS",
    "TOTAL_CHAPTERS",
    "BookInfo",
    "Testament",
    "book_code",
    "chapter_count",
    "BookCoverage",
    "ClusterMember",
    "Commentary",
    "CommentaryPayload",
    "CrossReference",
    "CrossReferenceCluster",
    "MarkdownCommentary",
    "OriginalText",
    "ScriptureReference",
    "SectionedCommentary",
    "parse_commentary_payload",
    "canon_position",
    "extract_book_and_chapter",
    "format_reference",
    "parse_reference_list",
    "resolve",
    "testament",
]
