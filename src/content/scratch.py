"""Scratch file for editing Claude chat selection and order offline.

Each non-comment line is ``+ [shortid] Title`` (selected) or
``- [shortid] Title`` (not selected), where ``shortid`` is the first
eight characters of the chat id.  Line order becomes chat order.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from magazeen.content.models import ClaudeChat
from magazeen.content.store import ContentStore
from magazeen.errors import ScratchFileError
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_SCRATCH_FILE = Path("out") / "magazine-scratch.txt"
SHORT_ID_LEN = 8

_LINE_RE = re.compile(r"^([+-])\s*\[([^\]]+)\]\s*(.+)$")

_HEADER = """\
# Magazine Scratch File - Chat Selection and Sequence
#
# Instructions:
#   - Lines starting with "#" are comments (ignored)
#   - Lines starting with "+" are SELECTED for inclusion
#   - Lines starting with "-" are NOT selected
#   - Reorder lines to change the sequence in the magazine
#   - Do not modify the chat IDs in [brackets]
#
# Format: [+/-] [chat-id] Title
#
"""


class ScratchEntry(BaseModel):
    short_id: str
    title: str
    selected: bool
    line_number: int


class ScratchExport(BaseModel):
    path: Path
    total_chats: int
    selected_chats: int


class ScratchApplyResult(BaseModel):
    total_chats: int
    selected_count: int = 0
    deselected_count: int = 0
    not_found_ids: list[str] = Field(default_factory=list)


def _short_id(chat: ClaudeChat) -> str:
    return chat.id[:SHORT_ID_LEN]


def render_scratch(chats: list[ClaudeChat]) -> str:
    """Render chats as scratch lines, selected ones first."""
    selected = [chat for chat in chats if chat.selected]
    unselected = [chat for chat in chats if not chat.selected]

    lines = [_HEADER]
    lines.extend(f"+ [{_short_id(chat)}] {chat.title}" for chat in selected)
    if selected and unselected:
        lines.extend(["", "# --- Unselected chats below ---", ""])
    lines.extend(f"- [{_short_id(chat)}] {chat.title}" for chat in unselected)
    return "\n".join(lines) + "\n"


def parse_scratch(text: str) -> list[ScratchEntry]:
    """Parse scratch text.

    Raises:
        ScratchFileError: Listing every malformed line.
    """
    entries: list[ScratchEntry] = []
    errors: list[str] = []

    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _LINE_RE.match(stripped)
        if not match:
            errors.append(f'Line {number}: Invalid format - "{stripped}"')
            continue
        prefix, short_id, title = match.groups()
        entries.append(
            ScratchEntry(
                short_id=short_id.strip(),
                title=title.strip(),
                selected=prefix == "+",
                line_number=number,
            )
        )

    if errors:
        raise ScratchFileError("Format errors in scratch file", errors)
    return entries


def export_scratch(store: ContentStore, path: Path = DEFAULT_SCRATCH_FILE) -> ScratchExport:
    """Write the store's chats to a scratch file.

    Raises:
        ScratchFileError: If there are no chats to export.
    """
    chats = store.content.claude_chats
    if not chats:
        raise ScratchFileError("No chats available to export")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_scratch(chats), encoding="utf-8")

    selected = sum(1 for chat in chats if chat.selected)
    logger.info("Scratch file exported to %s (%d chats, %d selected)", path, len(chats), selected)
    return ScratchExport(path=path, total_chats=len(chats), selected_chats=selected)


def apply_scratch(store: ContentStore, path: Path = DEFAULT_SCRATCH_FILE) -> ScratchApplyResult:
    """Apply selection and order from a scratch file to the store.

    Chats are reordered to match the file; chats the file does not list
    keep their relative order after the listed ones.  Nothing changes
    when the file has format errors.

    Raises:
        ScratchFileError: If the file is missing or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise ScratchFileError(f"Scratch file not found: {path}")

    entries = parse_scratch(path.read_text(encoding="utf-8"))

    chats = store.content.claude_chats
    by_short_id = {_short_id(chat): chat for chat in chats}
    result = ScratchApplyResult(total_chats=len(chats))
    ordered: list[ClaudeChat] = []
    seen: set[str] = set()

    for entry in entries:
        chat = by_short_id.get(entry.short_id)
        if chat is None:
            result.not_found_ids.append(entry.short_id)
            continue
        if chat.id in seen:
            continue
        seen.add(chat.id)

        if entry.selected and not chat.selected:
            result.selected_count += 1
        elif not entry.selected and chat.selected:
            result.deselected_count += 1
        chat.selected = entry.selected
        ordered.append(chat)

    ordered.extend(chat for chat in chats if chat.id not in seen)
    store.content.claude_chats = ordered
    store.save()

    if result.not_found_ids:
        logger.warning("Scratch file lists unknown chat id(s): %s", ", ".join(result.not_found_ids))
    logger.info(
        "Scratch file applied from %s (%d selected, %d deselected)",
        path,
        result.selected_count,
        result.deselected_count,
    )
    return result
