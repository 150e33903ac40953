"""Starter content file for new users."""

from __future__ import annotations

import logging
from pathlib import Path

from magazeen.content.models import (
    Article,
    ChatHighlight,
    Interest,
    MagazineContent,
    MagazineMetadata,
    Priority,
)

logger = logging.getLogger(__name__)

_WELCOME_BODY = """\
<p>Welcome to your first personal magazine issue! This template will help you get started.</p>

<h2>How to Use This System</h2>
<p>Each month, you can collect:</p>
<ul>
    <li><strong>Articles:</strong> Write about topics that interest you</li>
    <li><strong>Interests:</strong> Track what you're curious about</li>
    <li><strong>Chat Highlights:</strong> Save interesting conversations with Claude</li>
</ul>

<h2>Getting Started</h2>
<p>Add your own content from the command line:</p>
<pre><code>magazeen add-article "My first article" --category Ideas</code></pre>

<blockquote>
"The best magazine is one that reflects your authentic interests and growth over time."
</blockquote>
"""


def build_template() -> MagazineContent:
    """Return starter content with one article, interest and highlight."""
    return MagazineContent(
        metadata=MagazineMetadata(
            author="Your Name Here",
            description=(
                "A monthly compilation of my interests, discoveries, "
                "and insights from conversations with Claude."
            ),
        ),
        articles=[
            Article(
                id="template-1",
                title="Welcome to Your Personal Magazine",
                content=_WELCOME_BODY,
                category="Getting Started",
                tags=["welcome", "instructions"],
                word_count=150,
            )
        ],
        interests=[
            Interest(
                id="interest-1",
                topic="Personal Knowledge Management",
                description=(
                    "Exploring ways to better organize and retain information "
                    "from conversations and reading"
                ),
                priority=Priority.HIGH,
            )
        ],
        chat_highlights=[
            ChatHighlight(
                id="highlight-1",
                title="Creating Personal EPUB Magazines",
                conversation=(
                    "I want to create a reproducible system for generating personal "
                    "magazines from my interests and conversations..."
                ),
                insights=(
                    "EPUB gives a portable, readable magazine that works on any device. "
                    "The key is making the process reproducible and automated."
                ),
                category="Productivity",
            )
        ],
    )


def create_template(path: Path) -> Path:
    """Write the starter content file to *path*, replacing any existing file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_template().model_dump_json(indent=2, by_alias=True), encoding="utf-8")
    logger.info("Template written to %s", path)
    return path
