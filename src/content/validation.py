"""Input validation for content entering the store.

Every validator raises :class:`magazeen.errors.ValidationError` naming
the offending field; string validators return the trimmed value.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from magazeen.content.models import Priority
from magazeen.errors import ValidationError

MAX_PAGE_LIMIT = 1000
ALLOWED_UPLOAD_TYPES = ("application/json", "text/plain")

_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)


def validate_string(
    value: Any,
    field: str,
    min_length: int = 1,
    max_length: int | None = None,
) -> str:
    """Check that *value* is a string whose trimmed length is in range."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field, value)

    trimmed = value.strip()
    if len(trimmed) < min_length:
        plural = "" if min_length == 1 else "s"
        raise ValidationError(
            f"{field} must be at least {min_length} character{plural} long", field, value
        )
    if max_length is not None and len(trimmed) > max_length:
        raise ValidationError(f"{field} must be no more than {max_length} characters long", field, value)
    return trimmed


def validate_article(
    title: Any,
    content: Any,
    category: Any = None,
    author: Any = None,
    tags: Any = None,
) -> None:
    validate_string(title, "Title", 1, 200)
    validate_string(content, "Content", 1)
    if category is not None:
        validate_string(category, "Category", 1, 50)
    if author is not None:
        validate_string(author, "Author", 1, 100)
    if tags is not None:
        if isinstance(tags, str) or not isinstance(tags, Sequence):
            raise ValidationError("Tags must be an array", "tags", tags)
        for index, tag in enumerate(tags):
            if not isinstance(tag, str) or not tag.strip():
                raise ValidationError(f"Tag at index {index} must be a non-empty string", "tags", tags)


def validate_interest(topic: Any, description: Any, priority: Any = None) -> None:
    validate_string(topic, "Topic", 1, 200)
    validate_string(description, "Description", 1, 10000)
    if priority is not None and priority not in {p.value for p in Priority}:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Priority must be one of: {allowed}", "priority", priority)


def validate_chat_highlight(
    title: Any,
    conversation: Any,
    insights: Any = None,
    category: Any = None,
) -> None:
    validate_string(title, "Title", 1, 200)
    validate_string(conversation, "Conversation", 1)
    if insights is not None:
        validate_string(insights, "Insights", 0, 10000)
    if category is not None:
        validate_string(category, "Category", 1, 50)


def validate_claude_chat(chat: Any) -> None:
    """Check one entry of a Claude export has what the importer needs."""
    if not isinstance(chat, Mapping):
        raise ValidationError("Chat must be an object", "chat", chat)
    if not chat.get("uuid"):
        raise ValidationError("Chat must have a uuid field", "uuid", chat.get("uuid"))
    if not chat.get("name"):
        raise ValidationError("Chat must have a name field", "name", chat.get("name"))
    messages = chat.get("chat_messages")
    if not isinstance(messages, list):
        raise ValidationError("Chat must have a chat_messages array", "chat_messages", messages)
    if not messages:
        raise ValidationError("Chat must contain at least one message", "chat_messages", messages)


def validate_page_limit(limit: Any) -> None:
    """``None`` means unlimited; otherwise a positive int up to 1000."""
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValidationError("Page limit must be a positive integer or null", "pageLimit", limit)
    if limit > MAX_PAGE_LIMIT:
        raise ValidationError(f"Page limit cannot exceed {MAX_PAGE_LIMIT} pages", "pageLimit", limit)


def validate_upload(size: int, content_type: str | None, max_size: int) -> None:
    """Check an uploaded export against the size cap and allowed types."""
    if size > max_size:
        megabytes = round(max_size / 1024 / 1024)
        raise ValidationError(
            f"File size exceeds maximum allowed size of {megabytes}MB", "fileSize", size
        )
    if content_type not in ALLOWED_UPLOAD_TYPES:
        allowed = ", ".join(ALLOWED_UPLOAD_TYPES)
        raise ValidationError(f"File type not allowed. Allowed types: {allowed}", "mimetype", content_type)


def sanitize_string(value: Any) -> str:
    """Strip angle brackets, ``javascript:`` and inline event handlers."""
    if not isinstance(value, str):
        return ""
    value = value.replace("<", "").replace(">", "")
    value = _JS_PROTOCOL_RE.sub("", value)
    value = _EVENT_HANDLER_RE.sub("", value)
    return value.strip()
