"""Roundup articles generated from interests and chat highlights."""

from __future__ import annotations

import html
import logging

from magazeen.content.store import ContentStore

logger = logging.getLogger(__name__)

INTERESTS_ARTICLE_ID = "auto-interests"
HIGHLIGHTS_ARTICLE_ID = "auto-chat-highlights"


def _escape(text: str) -> str:
    return html.escape(str(text), quote=True)


class ArticleGenerator:
    """Builds the two roundup articles and stores them.

    Each roundup has a fixed id, so regenerating replaces the previous
    version instead of adding a duplicate.
    """

    def __init__(
        self,
        store: ContentStore,
        max_interests: int = 5,
        max_highlights: int = 3,
    ) -> None:
        self._store = store
        self._max_interests = max_interests
        self._max_highlights = max_highlights

    def generate_interest_article(self) -> str | None:
        """Write the "Current Interests" roundup; ``None`` if there are no interests."""
        interests = sorted(
            self._store.content.interests,
            key=lambda interest: interest.date_added,
            reverse=True,
        )[: self._max_interests]
        if not interests:
            logger.debug("No interests to generate article from")
            return None

        parts = [
            "<p>This month, several topics have captured my attention "
            "and sparked deeper exploration:</p>"
        ]
        for interest in interests:
            parts.append(f"<h2>{_escape(interest.topic)}</h2>")
            parts.append(
                f"<p><strong>Priority:</strong> {_escape(interest.priority.value.capitalize())}</p>"
            )
            parts.append(f"<p>{_escape(interest.description)}</p>")

        topics = ", ".join(_escape(interest.topic.lower()) for interest in interests)
        parts.append("<h2>Reflection</h2>")
        parts.append(
            f"<p>These interests reflect my ongoing curiosity about {topics}. "
            "I plan to explore these topics further in upcoming conversations and research.</p>"
        )

        return self._store.add_article(
            "Current Interests & Explorations",
            "\n".join(parts),
            "Personal Growth",
            None,
            ["interests", "exploration", "learning"],
            article_id=INTERESTS_ARTICLE_ID,
        )

    def generate_chat_highlights_article(self) -> str | None:
        """Write the "Insights from AI Conversations" roundup; ``None`` if empty."""
        highlights = sorted(
            self._store.content.chat_highlights,
            key=lambda highlight: highlight.date_added,
            reverse=True,
        )[: self._max_highlights]
        if not highlights:
            logger.debug("No chat highlights to generate article from")
            return None

        parts = [
            "<p>Here are some of the most insightful conversations and "
            "discoveries from my recent chats with Claude:</p>"
        ]
        for highlight in highlights:
            parts.append(f"<h2>{_escape(highlight.title)}</h2>")
            parts.append(f"<p><em>Category: {_escape(highlight.category)}</em></p>")
            parts.append("<h3>Key Insights</h3>")
            parts.append(f"<p>{_escape(highlight.insights)}</p>")
            parts.append("<h3>Notable Exchange</h3>")
            parts.append(f"<blockquote>{_escape(highlight.conversation)}</blockquote>")

        parts.append("<h2>Reflections</h2>")
        parts.append(
            "<p>These conversations highlight the value of AI as a thinking partner, "
            "helping me explore complex topics and gain new perspectives on familiar subjects.</p>"
        )

        return self._store.add_article(
            "Insights from AI Conversations",
            "\n".join(parts),
            "AI & Learning",
            "Claude AI",
            ["conversations", "insights", "learning"],
            article_id=HIGHLIGHTS_ARTICLE_ID,
        )
