"""Tests for the EPUB writer."""

import zipfile
from datetime import date
from pathlib import Path

import pytest
from magazeen.magazine.epub import EpubWriter


@pytest.fixture
def writer() -> EpubWriter:
    writer = EpubWriter("My Mag", "Me & You", "Monthly notes", issue_date=date(2024, 3, 15))
    writer.add_article("First <Story>", "<p>Hello</p>", "Author", "Tech")
    writer.add_article("Second", "<p>World</p>")
    return writer


class TestEpubWriter:
    def test_chapters_numbered(self, writer: EpubWriter):
        assert [c.filename for c in writer.chapters] == ["chapter1.xhtml", "chapter2.xhtml"]

    def test_issue_number_is_month(self, writer: EpubWriter):
        assert writer.issue_number == 3

    def test_mimetype_first_and_stored(self, writer: EpubWriter, tmp_path: Path):
        path = writer.write(tmp_path / "out" / "issue.epub")

        with zipfile.ZipFile(path) as zf:
            first = zf.infolist()[0]
            assert first.filename == "mimetype"
            assert first.compress_type == zipfile.ZIP_STORED
            assert zf.read("mimetype") == b"application/epub+zip"

    def test_contains_expected_files(self, writer: EpubWriter, tmp_path: Path):
        path = writer.write(tmp_path / "issue.epub")

        with zipfile.ZipFile(path) as zf:
            names = set(zf.namelist())
        assert {
            "META-INF/container.xml",
            "OEBPS/content.opf",
            "OEBPS/toc.ncx",
            "OEBPS/nav.xhtml",
            "OEBPS/index.xhtml",
            "OEBPS/toc.xhtml",
            "OEBPS/styles.css",
            "OEBPS/chapter1.xhtml",
            "OEBPS/chapter2.xhtml",
        } <= names

    def test_metadata_escaped(self, writer: EpubWriter, tmp_path: Path):
        path = writer.write(tmp_path / "issue.epub")

        with zipfile.ZipFile(path) as zf:
            opf = zf.read("OEBPS/content.opf").decode("utf-8")
            toc = zf.read("OEBPS/toc.xhtml").decode("utf-8")
            chapter = zf.read("OEBPS/chapter1.xhtml").decode("utf-8")
        assert "<dc:title>My Mag - Issue 3</dc:title>" in opf
        assert "<dc:creator>Me &amp; You</dc:creator>" in opf
        assert "<dc:date>2024-03-15</dc:date>" in opf
        assert 'idref="chapter2"' in opf
        assert "First &lt;Story&gt;" in toc
        assert '<span class="toc-category">Tech</span>' in toc
        assert "<p>Hello</p>" in chapter
        assert "by Author" in chapter

    def test_cover_shows_article_count(self, writer: EpubWriter, tmp_path: Path):
        path = writer.write(tmp_path / "issue.epub")
        with zipfile.ZipFile(path) as zf:
            cover = zf.read("OEBPS/index.xhtml").decode("utf-8")
        assert "2 Articles" in cover
        assert "March 2024" in cover
