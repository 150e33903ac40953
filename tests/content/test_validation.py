"""Tests for content input validation."""

import pytest
from magazeen.content.validation import (
    sanitize_string,
    validate_article,
    validate_chat_highlight,
    validate_claude_chat,
    validate_interest,
    validate_page_limit,
    validate_string,
    validate_upload,
)
from magazeen.errors import ValidationError


class TestValidateString:
    def test_returns_trimmed(self):
        assert validate_string("  hello  ", "Title") == "hello"

    def test_rejects_non_string(self):
        with pytest.raises(ValidationError, match="must be a string") as exc_info:
            validate_string(42, "Title")
        assert exc_info.value.field == "Title"
        assert exc_info.value.value == 42

    def test_rejects_blank(self):
        with pytest.raises(ValidationError, match="at least 1 character long"):
            validate_string("   ", "Title")

    def test_rejects_too_long(self):
        with pytest.raises(ValidationError, match="no more than 5"):
            validate_string("abcdefg", "Title", max_length=5)

    def test_min_length_zero_allows_empty(self):
        assert validate_string("", "Insights", 0) == ""


class TestValidateArticle:
    def test_valid(self):
        validate_article("Title", "<p>Body</p>", "Tech", "Me", ["a", "b"])

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            validate_article("x" * 201, "Body")

    def test_tags_must_be_a_list(self):
        with pytest.raises(ValidationError, match="array"):
            validate_article("Title", "Body", tags="tag")

    def test_blank_tag(self):
        with pytest.raises(ValidationError, match="index 1"):
            validate_article("Title", "Body", tags=["ok", " "])


class TestValidateInterest:
    def test_valid(self):
        validate_interest("Rust", "Ownership", "low")

    def test_bad_priority(self):
        with pytest.raises(ValidationError, match="low, medium, high"):
            validate_interest("Rust", "Ownership", "urgent")


class TestValidateChatHighlight:
    def test_empty_insights_allowed(self):
        validate_chat_highlight("Title", "Conversation", "")

    def test_missing_conversation(self):
        with pytest.raises(ValidationError):
            validate_chat_highlight("Title", "")


class TestValidateClaudeChat:
    def test_valid(self):
        validate_claude_chat({"uuid": "u", "name": "n", "chat_messages": [{"text": "x"}]})

    @pytest.mark.parametrize(
        "chat",
        [
            "string",
            {"name": "n", "chat_messages": [{}]},
            {"uuid": "u", "chat_messages": [{}]},
            {"uuid": "u", "name": "n", "chat_messages": "nope"},
            {"uuid": "u", "name": "n", "chat_messages": []},
        ],
    )
    def test_invalid(self, chat):
        with pytest.raises(ValidationError):
            validate_claude_chat(chat)


class TestValidatePageLimit:
    @pytest.mark.parametrize("limit", [None, 1, 1000])
    def test_valid(self, limit):
        validate_page_limit(limit)

    @pytest.mark.parametrize("limit", [0, -1, 1001, True, 2.5, "10"])
    def test_invalid(self, limit):
        with pytest.raises(ValidationError):
            validate_page_limit(limit)


class TestValidateUpload:
    def test_valid(self):
        validate_upload(100, "application/json", 1024)

    def test_too_large(self):
        with pytest.raises(ValidationError, match="10MB"):
            validate_upload(11 * 1024 * 1024, "application/json", 10 * 1024 * 1024)

    def test_bad_type(self):
        with pytest.raises(ValidationError, match="not allowed"):
            validate_upload(100, "image/png", 1024)


class TestSanitizeString:
    def test_strips_markup_characters(self):
        assert sanitize_string("<script>alert(1)</script>") == "scriptalert(1)/script"

    def test_strips_javascript_protocol_and_handlers(self):
        assert sanitize_string("JavaScript:go onclick=run") == "go run"

    def test_non_string(self):
        assert sanitize_string(None) == ""
