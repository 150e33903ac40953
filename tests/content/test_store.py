"""Tests for ContentStore: JSON-backed magazine content store."""

import json
from pathlib import Path

import pytest
from magazeen.content.models import ChatMessage, ClaudeChat, Priority
from magazeen.content.store import ContentStore, count_words
from magazeen.errors import ChatImportError, PageLimitExceededError


def _export(path: Path, chats: list[dict]) -> Path:
    path.write_text(json.dumps(chats), encoding="utf-8")
    return path


def _raw_chat(uuid: str, name: str, *texts: str) -> dict:
    return {
        "uuid": uuid,
        "name": name,
        "created_at": "2024-05-01T10:00:00Z",
        "chat_messages": [
            {"sender": "human" if i % 2 == 0 else "assistant", "text": text, "created_at": None}
            for i, text in enumerate(texts or ("hello there",))
        ],
    }


@pytest.fixture
def store(tmp_path: Path) -> ContentStore:
    return ContentStore(tmp_path / "magazine-content.json")


class TestCountWords:
    def test_ignores_markup(self):
        assert count_words("<p>one <b>two</b> three</p>") == 3

    def test_empty(self):
        assert count_words("") == 0


class TestLoadAndSave:
    def test_missing_file_starts_empty(self, store: ContentStore):
        assert store.content.articles == []
        assert not store.path.exists()

    def test_persists_to_disk(self, store: ContentStore):
        store.add_article("Title", "<p>Body text</p>")

        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["articles"][0]["title"] == "Title"
        assert data["articles"][0]["wordCount"] == 2
        assert "chatHighlights" in data

    def test_reloads(self, store: ContentStore):
        store.add_article("Title", "<p>Body</p>", "Tech")
        reloaded = ContentStore(store.path)
        assert reloaded.content.articles[0].category == "Tech"

    def test_corrupt_file_starts_fresh(self, tmp_path: Path):
        path = tmp_path / "content.json"
        path.write_text("{not json", encoding="utf-8")
        store = ContentStore(path)
        assert store.content.articles == []


class TestAddArticle:
    def test_returns_id(self, store: ContentStore):
        article_id = store.add_article("Title", "<p>Body</p>", tags=["a", "b"])
        article = store.content.articles[0]
        assert article.id == article_id
        assert article.tags == ["a", "b"]
        assert article.word_count == 1

    def test_explicit_id_replaces_in_place(self, store: ContentStore):
        store.add_article("First", "one")
        store.add_article("Roundup", "old text", article_id="auto")
        store.add_article("Roundup v2", "new text", article_id="auto")

        titles = [a.title for a in store.content.articles]
        assert titles == ["First", "Roundup v2"]

    def test_page_limit_exceeded(self, store: ContentStore):
        store.content.metadata.words_per_page = 10
        store.set_page_limit(1)
        store.add_article("Fits", " ".join(["word"] * 8))

        with pytest.raises(PageLimitExceededError):
            store.add_article("Too big", "extra words here")
        assert len(store.content.articles) == 1

    def test_replacement_counts_only_the_difference(self, store: ContentStore):
        store.content.metadata.words_per_page = 10
        store.set_page_limit(1)
        store.add_article("Roundup", " ".join(["word"] * 9), article_id="auto")
        store.add_article("Roundup", " ".join(["word"] * 10), article_id="auto")
        assert store.content.articles[0].word_count == 10

    def test_remove_article(self, store: ContentStore):
        article_id = store.add_article("Title", "Body")
        assert store.remove_article(article_id) is True
        assert store.remove_article(article_id) is False
        assert store.content.articles == []


class TestOtherContent:
    def test_add_interest(self, store: ContentStore):
        store.add_interest("Rust", "Ownership model", "high")
        interest = store.content.interests[0]
        assert interest.topic == "Rust"
        assert interest.priority is Priority.HIGH

    def test_add_chat_highlight(self, store: ContentStore):
        store.add_chat_highlight("Title", "Q and A", "Learned things", "Ideas")
        highlight = ContentStore(store.path).content.chat_highlights[0]
        assert highlight.insights == "Learned things"
        assert highlight.category == "Ideas"

    def test_set_page_limit(self, store: ContentStore):
        store.set_page_limit(20)
        assert store.content.metadata.page_limit == 20
        store.set_page_limit(0)
        assert store.content.metadata.page_limit is None


class TestImportClaudeChats:
    def test_imports_valid_chats(self, store: ContentStore, tmp_path: Path):
        export = _export(
            tmp_path / "export.json",
            [_raw_chat("uuid-1", "First chat", "Hi", "Hello"), _raw_chat("uuid-2", "Second chat")],
        )
        assert store.import_claude_chats(export) == 2

        chat = store.content.claude_chats[0]
        assert chat.id == "uuid-1"
        assert chat.selected is False
        assert [m.sender for m in chat.conversation] == ["human", "assistant"]
        assert chat.original_import_date is not None

    def test_skips_invalid_entries(self, store: ContentStore, tmp_path: Path):
        export = _export(
            tmp_path / "export.json",
            [
                _raw_chat("uuid-1", "Good"),
                {"uuid": "uuid-2", "chat_messages": []},
                {"name": "No id", "chat_messages": [{"sender": "human", "text": "x"}]},
                "not an object",
            ],
        )
        assert store.import_claude_chats(export) == 1
        assert [c.id for c in store.content.claude_chats] == ["uuid-1"]

    def test_reimport_keeps_selection(self, store: ContentStore, tmp_path: Path):
        export = _export(tmp_path / "export.json", [_raw_chat("uuid-1", "Old title")])
        store.import_claude_chats(export)
        store.select_chat("uuid-1")

        _export(export, [_raw_chat("uuid-1", "New title"), _raw_chat("uuid-2", "Other")])
        assert store.import_claude_chats(export) == 1

        chats = ContentStore(store.path).content.claude_chats
        assert [c.title for c in chats] == ["New title", "Other"]
        assert chats[0].selected is True

    def test_missing_file(self, store: ContentStore, tmp_path: Path):
        with pytest.raises(ChatImportError, match="not found"):
            store.import_claude_chats(tmp_path / "missing.json")

    def test_invalid_json(self, store: ContentStore, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ChatImportError, match="Invalid JSON"):
            store.import_claude_chats(path)

    def test_not_a_list(self, store: ContentStore, tmp_path: Path):
        path = tmp_path / "object.json"
        path.write_text('{"uuid": "x"}', encoding="utf-8")
        with pytest.raises(ChatImportError, match="array"):
            store.import_claude_chats(path)


class TestChatSelection:
    @pytest.fixture
    def chat_store(self, store: ContentStore) -> ContentStore:
        store.content.claude_chats = [
            ClaudeChat(id="one", title="One", conversation=[ChatMessage(sender="human", text="alpha beta")]),
            ClaudeChat(id="two", title="Two", conversation=[ChatMessage(sender="human", text="gamma")]),
        ]
        store.save()
        return store

    def test_select_and_deselect(self, chat_store: ContentStore):
        chat_store.select_chat("one")
        assert [c.id for c in chat_store.selected_chats()] == ["one"]
        chat_store.deselect_chat("one")
        assert chat_store.selected_chats() == []

    def test_toggle(self, chat_store: ContentStore):
        assert chat_store.toggle_chat("two").selected is True
        assert chat_store.toggle_chat("two").selected is False

    def test_unknown_chat(self, chat_store: ContentStore):
        with pytest.raises(KeyError):
            chat_store.toggle_chat("missing")

    def test_selected_chats_count_toward_words(self, chat_store: ContentStore):
        assert chat_store.total_word_count() == 0
        chat_store.select_chat("one")
        assert chat_store.total_word_count() == 2


class TestPageAccounting:
    def test_zero_words_per_page_in_file(self, tmp_path: Path):
        path = tmp_path / "content.json"
        path.write_text(
            json.dumps({"metadata": {"wordsPerPage": 0}, "articles": [{"title": "A", "content": "one two"}]}),
            encoding="utf-8",
        )
        store = ContentStore(path)
        assert store.content.articles[0].title == "A"
        assert store.estimated_pages() == 1

    def test_estimated_pages_rounds_up(self, store: ContentStore):
        store.content.metadata.words_per_page = 10
        store.add_article("A", " ".join(["word"] * 11))
        assert store.estimated_pages() == 2

    def test_no_limit(self, store: ContentStore):
        info = store.page_limit_info()
        assert info.has_limit is False
        assert info.remaining_pages is None
        assert store.would_exceed_page_limit(10**6) is False

    def test_limit_info(self, store: ContentStore):
        store.content.metadata.words_per_page = 10
        store.set_page_limit(3)
        store.add_article("A", " ".join(["word"] * 15))

        info = store.page_limit_info()
        assert info.current_pages == 2
        assert info.remaining_pages == 1
        assert info.is_at_limit is False
        assert info.total_words == 15


class TestToContentItems:
    def test_articles_then_selected_chats(self, store: ContentStore):
        store.add_article("Article", "<p>Body</p>", "Tech", tags=["py"])
        store.content.claude_chats = [
            ClaudeChat(
                id="c1",
                title="Chat",
                selected=True,
                conversation=[
                    ChatMessage(sender="human", text="question"),
                    ChatMessage(sender="assistant", text="answer"),
                ],
            ),
            ClaudeChat(id="c2", title="Skipped"),
        ]

        items = store.to_content_items()
        assert [i.title for i in items] == ["Article", "Chat"]
        assert items[0].tags == frozenset({"py"})
        assert items[0].payload is store.content.articles[0]
        assert items[1].body == "question\nanswer"
        assert items[1].category == "Claude Import"
