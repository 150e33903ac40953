"""Tests for pairwise similarity scoring."""

import pytest
from magazeen.clustering import ContentItem, score_similarity


def _item(title: str = "", body: str = "", category: str | None = None, tags=()) -> ContentItem:
    return ContentItem(title=title, body=body, category=category, tags=frozenset(tags))


class TestScoreSimilarity:
    def test_missing_item_scores_zero(self):
        item = _item("Python testing")
        assert score_similarity(None, item) == 0
        assert score_similarity(item, None) == 0

    def test_self_similarity_is_clamped(self):
        item = _item("Python testing", "pytest fixtures", "Tech", {"py"})
        # 70 keywords + 30 category + 5 tag, clamped
        assert score_similarity(item, item) == 100

    def test_symmetric(self):
        a = _item("Python Basics", "Learn Python fundamentals", "Tech", {"code"})
        b = _item("Advanced Python", "Master Python techniques", "Tech", {"code", "advanced"})
        assert score_similarity(a, b) == score_similarity(b, a)

    def test_disjoint_items_score_zero(self):
        assert score_similarity(_item("volcanoes erupt"), _item("gardens bloom")) == 0

    def test_keyword_jaccard(self):
        a = _item("python rust")
        b = _item("python golang")
        assert score_similarity(a, b) == pytest.approx(70 / 3)

    def test_category_bonus(self):
        a = _item("volcanoes erupt", category="Science")
        b = _item("gardens bloom", category="Science")
        assert score_similarity(a, b) == 30

    def test_category_match_is_case_sensitive(self):
        a = _item("volcanoes erupt", category="Science")
        b = _item("gardens bloom", category="science")
        assert score_similarity(a, b) == 0

    def test_missing_categories_never_match(self):
        a = _item("volcanoes erupt")
        b = _item("gardens bloom", category="")
        assert score_similarity(a, b) == 0

    def test_each_shared_tag_adds_five(self):
        a = _item(tags={"x", "y", "z"})
        b = _item(tags={"x", "y"})
        assert score_similarity(a, b) == 10

    def test_empty_items_score_zero(self):
        assert score_similarity(_item(), _item()) == 0

    def test_score_in_range(self):
        tags = {f"tag{i}" for i in range(40)}
        a = _item("python", category="Tech", tags=tags)
        b = _item("python", category="Tech", tags=tags)
        assert 0 <= score_similarity(a, b) <= 100

    def test_absent_fields_are_treated_as_empty(self):
        a = ContentItem(title="python", tags=None)
        b = ContentItem(title=None, body="python", tags=None)
        assert a.tags == frozenset()
        assert b.title == ""
        assert score_similarity(a, b) == 70

    def test_item_without_text_scores_zero(self):
        blank = ContentItem(title=None, body=None)
        assert score_similarity(blank, _item("python")) == 0
