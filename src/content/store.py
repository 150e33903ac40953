"""JSON-backed magazine content store.

Persists all magazine content in a single JSON file, loaded on init and
saved after every write operation.  Provides adding content, Claude
chat import and selection, page-limit accounting, and conversion into
clustering-engine items.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from magazeen.clustering.models import ContentItem
from magazeen.content.models import (
    Article,
    ChatHighlight,
    ChatMessage,
    ClaudeChat,
    Interest,
    MagazineContent,
    PageLimitInfo,
    Priority,
)
from magazeen.content.validation import validate_claude_chat
from magazeen.errors import ChatImportError, PageLimitExceededError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_FILE = Path("out") / "magazine-content.json"

_TAG_RE = re.compile(r"<[^>]*>")


def count_words(text: str) -> int:
    """Count words in HTML text, ignoring markup."""
    return len(_TAG_RE.sub(" ", text).split())


class ContentStore:
    """CRUD store over the magazine content file.

    Loads the file on init and saves after every mutation.  A missing
    file starts from defaults; a corrupt one is logged and replaced by
    defaults on the next save.
    """

    def __init__(self, path: Path = DEFAULT_CONTENT_FILE) -> None:
        self._path = Path(path)
        self.content = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> MagazineContent:
        if not self._path.exists():
            return MagazineContent()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return MagazineContent.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt content file at %s, starting fresh", self._path)
            return MagazineContent()

    def save(self) -> None:
        """Write the content file, creating parent directories as needed."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            self.content.model_dump_json(indent=2, by_alias=True),
            encoding="utf-8",
        )

    def _find_article(self, article_id: str) -> Article | None:
        for article in self.content.articles:
            if article.id == article_id:
                return article
        return None

    def _require_chat(self, chat_id: str) -> ClaudeChat:
        for chat in self.content.claude_chats:
            if chat.id == chat_id:
                return chat
        raise KeyError(chat_id)

    # ── Write operations ─────────────────────────────────────────

    def add_article(
        self,
        title: str,
        content: str,
        category: str = "General",
        author: str | None = None,
        tags: Iterable[str] = (),
        *,
        article_id: str | None = None,
    ) -> str:
        """Add an article and return its id.

        Passing the id of an existing article replaces it in place.

        Raises PageLimitExceededError if the article would not fit.
        """
        previous = self._find_article(article_id) if article_id else None
        words = count_words(content)
        extra = words - (count_words(previous.content) if previous else 0)
        if self.would_exceed_page_limit(extra):
            raise PageLimitExceededError(
                f"Adding {title!r} ({words} words) would exceed the "
                f"{self.content.metadata.page_limit}-page limit"
            )

        article = Article(
            title=title,
            content=content,
            category=category,
            author=author,
            tags=list(tags),
            word_count=words,
        )
        if article_id:
            article.id = article_id
        if previous is not None:
            index = self.content.articles.index(previous)
            self.content.articles[index] = article
        else:
            self.content.articles.append(article)
        self.save()
        logger.info("Added article %r (%d words)", title, words)
        return article.id

    def remove_article(self, article_id: str) -> bool:
        """Remove an article by id; returns False if it was not there."""
        article = self._find_article(article_id)
        if article is None:
            return False
        self.content.articles.remove(article)
        self.save()
        return True

    def add_interest(
        self,
        topic: str,
        description: str,
        priority: Priority | str = Priority.MEDIUM,
    ) -> str:
        """Add an interest and return its id."""
        interest = Interest(topic=topic, description=description, priority=Priority(priority))
        self.content.interests.append(interest)
        self.save()
        logger.info("Added interest %r", topic)
        return interest.id

    def add_chat_highlight(
        self,
        title: str,
        conversation: str,
        insights: str = "",
        category: str = "General",
    ) -> str:
        """Add a chat highlight and return its id."""
        highlight = ChatHighlight(
            title=title,
            conversation=conversation,
            insights=insights,
            category=category,
        )
        self.content.chat_highlights.append(highlight)
        self.save()
        logger.info("Added chat highlight %r", title)
        return highlight.id

    def set_page_limit(self, limit: int | None) -> None:
        """Set the page limit; ``None`` or 0 removes it."""
        self.content.metadata.page_limit = limit or None
        self.save()

    # ── Claude chats ─────────────────────────────────────────────

    def select_chat(self, chat_id: str) -> ClaudeChat:
        """Include a chat in the magazine.  Raises KeyError if unknown."""
        chat = self._require_chat(chat_id)
        chat.selected = True
        self.save()
        return chat

    def deselect_chat(self, chat_id: str) -> ClaudeChat:
        """Exclude a chat from the magazine.  Raises KeyError if unknown."""
        chat = self._require_chat(chat_id)
        chat.selected = False
        self.save()
        return chat

    def toggle_chat(self, chat_id: str) -> ClaudeChat:
        """Flip a chat's selection.  Raises KeyError if unknown."""
        chat = self._require_chat(chat_id)
        chat.selected = not chat.selected
        self.save()
        return chat

    def selected_chats(self) -> list[ClaudeChat]:
        return [chat for chat in self.content.claude_chats if chat.selected]

    def import_claude_chats(self, path: Path) -> int:
        """Import chats from a Claude JSON export.

        New chats are added unselected.  Chats already present are
        refreshed in place and keep their selection.  Entries missing
        ``uuid``, ``name`` or ``chat_messages`` are skipped.

        Returns:
            The number of chats that were not already in the store.

        Raises:
            ChatImportError: If the file is missing, not JSON, or not a list.
        """
        path = Path(path)
        if not path.exists():
            raise ChatImportError(f"File not found: {path}")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ChatImportError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(payload, list):
            raise ChatImportError("Expected an array of chats in the export file")

        positions = {chat.id: i for i, chat in enumerate(self.content.claude_chats)}
        imported_at = datetime.now(tz=UTC)
        added = 0
        updated = 0

        for raw in payload:
            try:
                validate_claude_chat(raw)
            except ValidationError as exc:
                logger.warning("Skipping chat: %s", exc)
                continue

            chat = ClaudeChat(
                id=raw["uuid"],
                title=raw["name"],
                conversation=[
                    ChatMessage(
                        sender=msg.get("sender", ""),
                        text=msg.get("text", ""),
                        timestamp=msg.get("created_at"),
                    )
                    for msg in raw["chat_messages"]
                ],
                date_added=raw.get("created_at") or imported_at,
                original_import_date=imported_at,
            )

            index = positions.get(chat.id)
            if index is None:
                positions[chat.id] = len(self.content.claude_chats)
                self.content.claude_chats.append(chat)
                added += 1
            else:
                chat.selected = self.content.claude_chats[index].selected
                self.content.claude_chats[index] = chat
                updated += 1

        if added or updated:
            self.save()
        logger.info("Imported %d new and refreshed %d existing chat(s) from %s", added, updated, path)
        return added

    # ── Page accounting ──────────────────────────────────────────

    def total_word_count(self) -> int:
        """Words in all articles plus every selected chat."""
        total = sum(count_words(article.content) for article in self.content.articles)
        for chat in self.selected_chats():
            total += sum(count_words(message.text) for message in chat.conversation)
        return total

    def estimated_pages(self) -> int:
        return math.ceil(self.total_word_count() / self.content.metadata.words_per_page)

    def would_exceed_page_limit(self, extra_words: int) -> bool:
        limit = self.content.metadata.page_limit
        if limit is None:
            return False
        max_words = limit * self.content.metadata.words_per_page
        return self.total_word_count() + extra_words > max_words

    def page_limit_info(self) -> PageLimitInfo:
        limit = self.content.metadata.page_limit
        pages = self.estimated_pages()
        return PageLimitInfo(
            current_pages=pages,
            page_limit=limit,
            total_words=self.total_word_count(),
            words_per_page=self.content.metadata.words_per_page,
            has_limit=limit is not None,
            is_at_limit=limit is not None and pages >= limit,
            remaining_pages=max(0, limit - pages) if limit is not None else None,
        )

    # ── Clustering bridge ────────────────────────────────────────

    def to_content_items(self) -> list[ContentItem]:
        """Articles then selected chats, as clustering-engine items.

        Each item's ``payload`` is the original record.
        """
        items = [
            ContentItem(
                id=article.id,
                title=article.title,
                body=article.content,
                category=article.category,
                tags=frozenset(article.tags),
                payload=article,
            )
            for article in self.content.articles
        ]
        for chat in self.selected_chats():
            items.append(
                ContentItem(
                    id=chat.id,
                    title=chat.title,
                    body="\n".join(message.text for message in chat.conversation),
                    category=chat.category,
                    payload=chat,
                )
            )
        return items
