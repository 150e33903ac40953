"""Pure data models for the clustering engine.

No I/O and no business logic. Services import from this module; this
module only imports from stdlib and pydantic.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ContentItem(BaseModel):
    """One candidate piece of magazine content.

    ``id`` and ``payload`` are passed through untouched; the engine only
    reads ``title``, ``body``, ``category`` and ``tags``.  ``payload``
    usually holds the caller's original record so it can be recovered
    after clustering.
    """

    id: str = ""
    title: str = ""
    body: str = ""
    category: str | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)
    payload: Any = None

    @field_validator("title", "body", mode="before")
    @classmethod
    def _none_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags_are_empty(cls, value: Any) -> Any:
        return frozenset() if value is None else value


class Section(BaseModel):
    """A named, ordered group of items in the assembled magazine."""

    name: str
    items: list[ContentItem] = Field(default_factory=list)


class ClusteringOptions(BaseModel):
    """Knobs for :func:`magazeen.clustering.services.cluster_with_metrics`."""

    min_similarity: float = 30.0
    enable_clustering: bool = True


class ClusteringMetrics(BaseModel):
    """Diagnostics for one clustering run, for the caller to report."""

    total_items: int = 0
    cluster_count: int = 0
    average_cluster_size: float = 0.0
    clustered: bool = False


class ClusteringResult(BaseModel):
    """Ordered sections plus the metrics of the run that produced them."""

    sections: list[Section]
    metrics: ClusteringMetrics
