"""
SCRIPTORIUM - Data Schemas

Value types shared by the resolver, the commentary accumulator and the
timeline. Plain reference/cluster values are frozen dataclasses; anything that
crosses the LLM boundary (commentary payloads, cross references) is a pydantic
model so it can be validated and described as a JSON schema.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from data.canon import Testament


# =============================================================================
# REFERENCES
# =============================================================================

@dataclass(frozen=True)
class ScriptureReference:
    """A single verse: ``{book, chapter, verse}`` with ``book`` in the canon."""

    book: str
    chapter: int
    verse: int

    def __str__(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"

    def to_dict(self) -> Dict[str, Any]:
        return {"book": self.book, "chapter": self.chapter, "verse": self.verse}


# =============================================================================
# COMMENTARY PAYLOADS
# =============================================================================

class MarkdownCommentary(BaseModel):
    """Commentary returned as one markdown document."""

    model_config = ConfigDict(extra="ignore")

    markdown: str = Field(..., description="The commentary in markdown format")


class CommentaryContent(BaseModel):
    """One run of text inside a commentary section."""

    type: Literal["text", "greek", "hebrew", "emphasis", "reference"] = Field(
        default="text", description="How the run should be rendered"
    )
    text: str = Field(..., description="The text of this run")


class CommentarySection(BaseModel):
    title: str = Field(..., description="Section heading")
    content: List[CommentaryContent] = Field(default_factory=list)


class SectionedCommentary(BaseModel):
    """Commentary returned as titled sections of typed text runs."""

    model_config = ConfigDict(extra="ignore")

    sections: List[CommentarySection] = Field(..., description="Commentary sections in reading order")

    def to_markdown(self) -> str:
        blocks = []
        for section in self.sections:
            runs = []
            for item in section.content:
                if item.type in ("greek", "hebrew"):
                    runs.append(f"*{item.text}*")
                elif item.type == "emphasis":
                    runs.append(f"**{item.text}**")
                else:
                    runs.append(item.text)
            blocks.append(f"## {section.title}\n{''.join(runs)}")
        return "\n\n".join(blocks)


CommentaryPayload = Union[MarkdownCommentary, SectionedCommentary]

_payload_adapter: TypeAdapter[CommentaryPayload] = TypeAdapter(CommentaryPayload)


def parse_commentary_payload(data: Any) -> CommentaryPayload:
    """
    Validate raw provider output into a commentary payload.

    Raises pydantic.ValidationError when neither shape matches.
    """
    if isinstance(data, (MarkdownCommentary, SectionedCommentary)):
        return data
    if isinstance(data, str):
        return MarkdownCommentary(markdown=data)
    return _payload_adapter.validate_python(data)


def payload_markdown(payload: CommentaryPayload) -> str:
    """Markdown rendition of either payload shape."""
    if isinstance(payload, MarkdownCommentary):
        return payload.markdown
    return payload.to_markdown()


@dataclass(frozen=True)
class Commentary:
    """
    AI-generated commentary for one verse.

    ``timestamp`` is milliseconds since the epoch and orders commentaries by
    generation time.
    """

    verse_ref: str
    commentary: CommentaryPayload
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape: ``{verseRef, commentary, timestamp}``."""
        return {
            "verseRef": self.verse_ref,
            "commentary": self.commentary.model_dump(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commentary":
        return cls(
            verse_ref=data["verseRef"] if "verseRef" in data else data["verse_ref"],
            commentary=parse_commentary_payload(data["commentary"]),
            timestamp=int(data["timestamp"]),
        )


# =============================================================================
# CROSS REFERENCES
# =============================================================================

class OriginalText(BaseModel):
    """Verse text in the original language."""

    reference: str
    text: str
    language: Literal["hebrew", "greek"]
    verses: Optional[List[Dict[str, str]]] = None

    @property
    def language_label(self) -> str:
        return "Hebrew" if self.language == "hebrew" else "Greek"


class CrossReference(BaseModel):
    """
    A cross reference as delivered by the study data source.

    Only ``reference`` is required; annotation fields travel through the
    timeline untouched. Unknown fields are kept.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    reference: str
    text: Optional[str] = None
    connection: Optional[str] = None
    period: Optional[str] = None
    original_text: Optional[OriginalText] = Field(default=None, alias="originalText")


# =============================================================================
# TIMELINE CLUSTERS
# =============================================================================

@dataclass(frozen=True)
class ClusterMember:
    """A resolved cross reference placed on the timeline."""

    reference: ScriptureReference
    source: str  # the reference string as received
    position: float
    testament: Optional[Testament]
    text: Optional[str] = None
    connection: Optional[str] = None
    period: Optional[str] = None
    original_text: Optional[OriginalText] = None

    @property
    def book(self) -> str:
        return self.reference.book


@dataclass
class CrossReferenceCluster:
    """Contiguous run of same-book cross references after position sorting."""

    position: float
    references: List[ClusterMember] = field(default_factory=list)

    @property
    def book(self) -> str:
        return self.references[0].book

    def __len__(self) -> int:
        return len(self.references)


# =============================================================================
# COVERAGE
# =============================================================================

@dataclass
class BookCoverage:
    """Chapters of one book a reader has studied."""

    book: str
    chapters_read: List[int] = field(default_factory=list)
    last_studied: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book": self.book,
            "chaptersRead": list(self.chapters_read),
            "lastStudied": self.last_studied,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookCoverage":
        return cls(
            book=data["book"],
            chapters_read=list(data.get("chaptersRead", data.get("chapters_read", []))),
            last_studied=data.get("lastStudied", data.get("last_studied")),
        )
