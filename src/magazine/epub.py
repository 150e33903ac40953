"""EPUB 3 writer for magazine issues.

Produces a zip laid out as ``mimetype`` (stored, first entry),
``META-INF/container.xml`` and an ``OEBPS/`` folder holding the package
document, an NCX table for older readers, the EPUB 3 nav document, a
cover page, a table of contents page and one XHTML file per chapter.
"""

from __future__ import annotations

import html
import logging
import uuid
import zipfile
from datetime import date
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_XHTML_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" '
    '"http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">'
)

DEFAULT_STYLES = """\
body { font-family: Georgia, serif; line-height: 1.5; margin: 1em; }
.cover-container { text-align: center; margin-top: 20%; }
.magazine-title { font-size: 2.2em; }
.toc-list { list-style: none; padding: 0; }
.toc-item { margin-bottom: 0.8em; }
.toc-category, .article-category { font-size: 0.8em; text-transform: uppercase; color: #666; }
.toc-author, .article-author { font-style: italic; margin-left: 0.5em; }
.article-title { font-size: 1.6em; margin-bottom: 0.2em; }
.claude-message { margin: 0.8em 0; }
blockquote { margin: 1em 2em; font-style: italic; }
"""


def _esc(text: str | None) -> str:
    return html.escape(text or "", quote=True)


class Chapter(BaseModel):
    index: int
    title: str
    content: str
    author: str | None = None
    category: str = "General"

    @property
    def filename(self) -> str:
        return f"chapter{self.index}.xhtml"


class EpubWriter:
    """Collects chapters and writes them out as an ``.epub`` file."""

    def __init__(
        self,
        title: str,
        author: str,
        description: str = "",
        *,
        issue_date: date | None = None,
        styles: str = DEFAULT_STYLES,
    ) -> None:
        self.title = title
        self.author = author
        self.description = description
        self.issue_date = issue_date or date.today()
        self.styles = styles
        self.identifier = f"urn:uuid:{uuid.uuid4()}"
        self.chapters: list[Chapter] = []

    @property
    def issue_number(self) -> int:
        return self.issue_date.month

    def add_article(
        self,
        title: str,
        content: str,
        author: str | None = None,
        category: str = "General",
    ) -> Chapter:
        chapter = Chapter(
            index=len(self.chapters) + 1,
            title=title,
            content=content,
            author=author,
            category=category,
        )
        self.chapters.append(chapter)
        return chapter

    def write(self, path: Path) -> Path:
        """Write the EPUB to *path*, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(zipfile.ZipInfo("mimetype"), "application/epub+zip", compress_type=zipfile.ZIP_STORED)
            zf.writestr("META-INF/container.xml", self._container_xml())
            zf.writestr("OEBPS/styles.css", self.styles)
            zf.writestr("OEBPS/content.opf", self._opf())
            zf.writestr("OEBPS/toc.ncx", self._ncx())
            zf.writestr("OEBPS/nav.xhtml", self._nav_xhtml())
            zf.writestr("OEBPS/index.xhtml", self._cover_xhtml())
            zf.writestr("OEBPS/toc.xhtml", self._toc_xhtml())
            for chapter in self.chapters:
                zf.writestr(f"OEBPS/{chapter.filename}", self._chapter_xhtml(chapter))

        logger.info("Wrote EPUB with %d chapter(s) to %s", len(self.chapters), path)
        return path

    # ── Document builders ────────────────────────────────────────

    @property
    def _full_title(self) -> str:
        return f"{_esc(self.title)} - Issue {self.issue_number}"

    def _container_xml(self) -> str:
        return """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
    <rootfiles>
        <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
    </rootfiles>
</container>"""

    def _opf(self) -> str:
        manifest = [
            '<item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>',
            '<item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>',
            '<item id="css" href="styles.css" media-type="text/css"/>',
            '<item id="index" href="index.xhtml" media-type="application/xhtml+xml"/>',
            '<item id="toc" href="toc.xhtml" media-type="application/xhtml+xml"/>',
        ]
        spine = ['<itemref idref="index"/>', '<itemref idref="toc"/>']
        for chapter in self.chapters:
            manifest.append(
                f'<item id="chapter{chapter.index}" href="{chapter.filename}" '
                'media-type="application/xhtml+xml"/>'
            )
            spine.append(f'<itemref idref="chapter{chapter.index}"/>')

        manifest_xml = "\n        ".join(manifest)
        spine_xml = "\n        ".join(spine)
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" unique-identifier="bookid" version="3.0">
    <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
        <dc:title>{self._full_title}</dc:title>
        <dc:creator>{_esc(self.author)}</dc:creator>
        <dc:identifier id="bookid">{self.identifier}</dc:identifier>
        <dc:language>en</dc:language>
        <dc:date>{self.issue_date.isoformat()}</dc:date>
        <dc:description>{_esc(self.description)}</dc:description>
    </metadata>
    <manifest>
        {manifest_xml}
    </manifest>
    <spine toc="ncx">
        {spine_xml}
    </spine>
</package>"""

    def _ncx(self) -> str:
        nav_points = "".join(
            f"""
        <navPoint id="navpoint-{position}" playOrder="{position}">
            <navLabel><text>{_esc(chapter.title)}</text></navLabel>
            <content src="{chapter.filename}"/>
        </navPoint>"""
            for position, chapter in enumerate(self.chapters, start=3)
        )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
    <head>
        <meta name="dtb:uid" content="{self.identifier}"/>
        <meta name="dtb:depth" content="1"/>
        <meta name="dtb:totalPageCount" content="0"/>
        <meta name="dtb:maxPageNumber" content="0"/>
    </head>
    <docTitle><text>{self._full_title}</text></docTitle>
    <navMap>
        <navPoint id="navpoint-1" playOrder="1">
            <navLabel><text>Cover</text></navLabel>
            <content src="index.xhtml"/>
        </navPoint>
        <navPoint id="navpoint-2" playOrder="2">
            <navLabel><text>Table of Contents</text></navLabel>
            <content src="toc.xhtml"/>
        </navPoint>{nav_points}
    </navMap>
</ncx>"""

    def _nav_xhtml(self) -> str:
        items = "\n            ".join(
            f'<li><a href="{chapter.filename}">{_esc(chapter.title)}</a></li>'
            for chapter in self.chapters
        )
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
    <title>Navigation</title>
    <meta charset="utf-8"/>
</head>
<body>
    <nav epub:type="toc" id="toc">
        <h1>Table of Contents</h1>
        <ol>
            <li><a href="index.xhtml">Cover</a></li>
            <li><a href="toc.xhtml">Table of Contents</a></li>
            {items}
        </ol>
    </nav>
</body>
</html>"""

    def _page(self, title: str, body: str, body_class: str = "") -> str:
        class_attr = f' class="{body_class}"' if body_class else ""
        return f"""<?xml version="1.0" encoding="UTF-8"?>
{_XHTML_DOCTYPE}
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
    <title>{title}</title>
    <link rel="stylesheet" type="text/css" href="styles.css"/>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8"/>
</head>
<body{class_attr}>
{body}
</body>
</html>"""

    def _cover_xhtml(self) -> str:
        body = f"""    <div class="cover-container">
        <h1 class="magazine-title">{_esc(self.title)}</h1>
        <div class="issue-info">
            <p class="issue-number">Issue {self.issue_number}</p>
            <p class="issue-date">{self.issue_date.strftime("%B %Y")}</p>
        </div>
        <div class="cover-description">
            <p>{_esc(self.description)}</p>
        </div>
        <div class="article-count">
            <p>{len(self.chapters)} Articles</p>
        </div>
    </div>"""
        return self._page(_esc(self.title), body, "cover")

    def _toc_xhtml(self) -> str:
        entries = []
        for chapter in self.chapters:
            author = f'<span class="toc-author">by {_esc(chapter.author)}</span>' if chapter.author else ""
            entries.append(
                f"""<li class="toc-item">
                <a href="{chapter.filename}" class="toc-link">
                    <span class="toc-title">{_esc(chapter.title)}</span>
                    <span class="toc-category">{_esc(chapter.category)}</span>
                    {author}
                </a>
            </li>"""
            )
        items = "\n            ".join(entries)
        body = f"""    <div class="toc-container">
        <h1 class="toc-header">Table of Contents</h1>
        <ul class="toc-list">
            {items}
        </ul>
    </div>"""
        return self._page("Table of Contents", body)

    def _chapter_xhtml(self, chapter: Chapter) -> str:
        author = f'<span class="article-author">by {_esc(chapter.author)}</span>' if chapter.author else ""
        body = f"""    <article class="article">
        <header class="article-header">
            <h1 class="article-title">{_esc(chapter.title)}</h1>
            <div class="article-meta">
                <span class="article-category">{_esc(chapter.category)}</span>
                {author}
            </div>
        </header>
        <div class="article-content">
            {chapter.content}
        </div>
    </article>"""
        return self._page(_esc(chapter.title), body)
