"""Content domain models: pure Pydantic v2 data types.

These models describe the magazine content file: issue metadata plus
the articles, interests, chat highlights and imported Claude chats a
reader has collected.  The file uses camelCase keys, so every model
serialises by alias and accepts either spelling on input.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_TITLE = "My Personal Magazine"
DEFAULT_AUTHOR = "Your Name"
DEFAULT_DESCRIPTION = "A monthly compilation of my interests, discoveries, and insights."
DEFAULT_WORDS_PER_PAGE = 300


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(tz=UTC)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Priority(StrEnum):
    """How pressing an interest is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MagazineMetadata(_CamelModel):
    """Issue-level settings stored alongside the content."""

    title: str = DEFAULT_TITLE
    author: str = DEFAULT_AUTHOR
    description: str = DEFAULT_DESCRIPTION
    page_limit: int | None = None
    words_per_page: int = DEFAULT_WORDS_PER_PAGE
    enable_clustering: bool | None = None
    clustering_similarity: float | None = None

    @field_validator("words_per_page", mode="before")
    @classmethod
    def _positive_words_per_page(cls, value: object) -> object:
        # A hand-edited file may carry 0 or a negative value; page maths divides by it.
        if isinstance(value, int | float) and value <= 0:
            return DEFAULT_WORDS_PER_PAGE
        return value


class Article(_CamelModel):
    """A written article; ``content`` is HTML."""

    id: str = Field(default_factory=_new_id)
    title: str
    content: str
    category: str = "General"
    author: str | None = None
    tags: list[str] = Field(default_factory=list)
    date_added: datetime = Field(default_factory=_now)
    word_count: int = 0


class Interest(_CamelModel):
    """A topic the reader is currently exploring."""

    id: str = Field(default_factory=_new_id)
    topic: str
    description: str
    priority: Priority = Priority.MEDIUM
    date_added: datetime = Field(default_factory=_now)


class ChatHighlight(_CamelModel):
    """A saved excerpt of a conversation and what it taught."""

    id: str = Field(default_factory=_new_id)
    title: str
    conversation: str
    insights: str = ""
    category: str = "General"
    date_added: datetime = Field(default_factory=_now)


class ChatMessage(_CamelModel):
    """A single message of an imported Claude chat."""

    sender: str
    text: str
    timestamp: str | None = None


class ClaudeChat(_CamelModel):
    """A full Claude conversation imported from an export file."""

    id: str
    title: str
    conversation: list[ChatMessage] = Field(default_factory=list)
    insights: str = ""
    category: str = "Claude Import"
    date_added: datetime = Field(default_factory=_now)
    original_import_date: datetime | None = None
    selected: bool = False


class MagazineContent(_CamelModel):
    """Everything stored in the content file."""

    metadata: MagazineMetadata = Field(default_factory=MagazineMetadata)
    articles: list[Article] = Field(default_factory=list)
    interests: list[Interest] = Field(default_factory=list)
    chat_highlights: list[ChatHighlight] = Field(default_factory=list)
    claude_chats: list[ClaudeChat] = Field(default_factory=list)


class PageLimitInfo(BaseModel):
    """Snapshot of how full the issue is."""

    current_pages: int
    page_limit: int | None
    total_words: int
    words_per_page: int
    has_limit: bool
    is_at_limit: bool
    remaining_pages: int | None
