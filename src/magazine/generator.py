"""Magazine assembly: content store → clustered sections → EPUB."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path

from magazeen.clustering import (
    ClusteringMetrics,
    ClusteringOptions,
    ContentItem,
    Section,
    cluster_with_metrics,
)
from magazeen.config import MagazeenConfig
from magazeen.content.models import Article, ClaudeChat
from magazeen.content.store import ContentStore
from magazeen.errors import PageLimitExceededError
from magazeen.magazine.articles import ArticleGenerator
from magazeen.magazine.epub import EpubWriter
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CHAT_AUTHOR = "Claude Conversation"
CHAT_CATEGORY = "Claude Chats"

WriterFactory = Callable[[str, str, str], EpubWriter]


class MagazineResult(BaseModel):
    """Where the issue was written and how its content was arranged."""

    path: Path
    sections: list[Section]
    metrics: ClusteringMetrics


def render_chat(chat: ClaudeChat) -> str:
    """Render an imported chat as article HTML."""
    parts = [f"<h2>{html.escape(chat.title)}</h2>"]
    for message in chat.conversation:
        speaker = "You" if message.sender == "human" else "Claude"
        when = html.escape(message.timestamp) if message.timestamp else "N/A"
        text = html.escape(message.text).replace("\n", "<br/>")
        parts.append(
            f'<div class="claude-message"><strong>{speaker}</strong> ({when}):<br/>{text}</div>'
        )
    return "\n".join(parts)


def issue_filename(issue_date: date) -> str:
    return f"magazine-{issue_date.year}-{issue_date.month:02d}.epub"


class MagazineGenerator:
    """Builds an issue from everything in a content store.

    Roundup articles are refreshed first, then articles and selected
    chats are clustered into sections and written in section order.
    When clustering ran, each chapter is labelled with its section name
    instead of its own category.
    """

    def __init__(
        self,
        store: ContentStore,
        config: MagazeenConfig | None = None,
        *,
        article_generator: ArticleGenerator | None = None,
        writer_factory: WriterFactory | None = None,
    ) -> None:
        self._store = store
        self._config = config or MagazeenConfig()
        self._articles = article_generator or ArticleGenerator(
            store,
            max_interests=self._config.content.max_recent_interests,
            max_highlights=self._config.content.max_chat_highlights,
        )
        self._writer_factory = writer_factory or EpubWriter

    def resolve_options(
        self,
        enable_clustering: bool | None = None,
        min_similarity: float | None = None,
    ) -> ClusteringOptions:
        """Explicit arguments win over issue metadata, which wins over config."""
        options = self._config.to_clustering_options(self._store.content.metadata)
        if enable_clustering is not None:
            options.enable_clustering = enable_clustering
        if min_similarity is not None:
            options.min_similarity = min_similarity
        return options

    def refresh_roundups(self) -> None:
        for build in (
            self._articles.generate_interest_article,
            self._articles.generate_chat_highlights_article,
        ):
            try:
                build()
            except PageLimitExceededError as exc:
                logger.warning("Skipping roundup article: %s", exc)

    def generate(
        self,
        enable_clustering: bool | None = None,
        min_similarity: float | None = None,
        *,
        output_dir: Path | None = None,
        issue_date: date | None = None,
    ) -> MagazineResult:
        """Write the issue and return its path, sections and metrics."""
        self.refresh_roundups()

        options = self.resolve_options(enable_clustering, min_similarity)
        result = cluster_with_metrics(self._store.to_content_items(), options)
        metrics = result.metrics

        if metrics.clustered:
            logger.info(
                "Clustered %d item(s) into %d section(s), %.1f per section",
                metrics.total_items,
                metrics.cluster_count,
                metrics.average_cluster_size,
            )

        issue_date = issue_date or date.today()
        metadata = self._store.content.metadata
        writer = self._writer_factory(metadata.title, metadata.author, metadata.description)
        writer.issue_date = issue_date
        for section in result.sections:
            for item in section.items:
                self._add_item(writer, item, section.name if metrics.clustered else None)

        output_dir = output_dir or self._config.output_path
        path = writer.write(output_dir / issue_filename(issue_date))
        return MagazineResult(path=path, sections=result.sections, metrics=metrics)

    def _add_item(self, writer: EpubWriter, item: ContentItem, section_name: str | None) -> None:
        record = item.payload
        if isinstance(record, ClaudeChat):
            writer.add_article(
                record.title,
                render_chat(record),
                CHAT_AUTHOR,
                section_name or record.category or CHAT_CATEGORY,
            )
        elif isinstance(record, Article):
            writer.add_article(
                record.title,
                record.content,
                record.author,
                section_name or record.category,
            )
        else:
            writer.add_article(item.title, item.body, None, section_name or item.category or "General")
