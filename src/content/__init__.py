"""Content domain: magazine content models and the JSON content store.

The store is the only component that touches the content file.  It hands
the clustering engine plain ``ContentItem`` records via
``ContentStore.to_content_items``.
"""

from magazeen.content.models import (
    Article,
    ChatHighlight,
    ChatMessage,
    ClaudeChat,
    Interest,
    MagazineContent,
    MagazineMetadata,
    PageLimitInfo,
    Priority,
)
from magazeen.content.store import ContentStore, count_words

__all__ = [
    "Article",
    "ChatHighlight",
    "ChatMessage",
    "ClaudeChat",
    "ContentStore",
    "Interest",
    "MagazineContent",
    "MagazineMetadata",
    "PageLimitInfo",
    "Priority",
    "count_words",
]
