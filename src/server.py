"""Web upload flow: Claude export → chat selection → EPUB download."""

import html
import json
import logging
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import Annotated, Any

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import HTMLResponse, Response
from magazeen.config import MagazeenConfig, load_config
from magazeen.content.store import ContentStore
from magazeen.content.validation import validate_upload
from magazeen.errors import MagazeenError, ValidationError
from magazeen.magazine.articles import ArticleGenerator
from magazeen.magazine.generator import MagazineGenerator

logger = logging.getLogger(__name__)

UPLOAD_CATEGORY = "Chat Exports"


class SessionStore:
    """In-memory key/value store whose entries expire after *ttl* seconds."""

    def __init__(self, ttl: float, clock=time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, Any]] = {}

    def put(self, value: Any) -> str:
        key = str(uuid.uuid4())
        with self._lock:
            self._purge()
            self._entries[key] = (self._clock() + self._ttl, value)
        return key

    def get(self, key: str) -> Any | None:
        with self._lock:
            self._purge()
            entry = self._entries.get(key)
        return entry[1] if entry else None

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def _purge(self) -> None:
        now = self._clock()
        for key in [k for k, (expires, _) in self._entries.items() if expires <= now]:
            del self._entries[key]


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - Magazeen</title>
</head>
<body>
{body}
</body>
</html>"""


def error_page(message: str, status_code: int) -> HTMLResponse:
    body = f"""  <h1>An Error Occurred</h1>
  <div class="error-message">{html.escape(message)}</div>
  <a href="/">Go back to upload</a>"""
    return HTMLResponse(_page("Error", body), status_code=status_code)


UPLOAD_FORM = _page(
    "Upload Chat Export",
    """  <h1>Upload Chat Export</h1>
  <form action="/upload" method="post" enctype="multipart/form-data">
    <input type="file" name="chatExport" accept=".json" required>
    <button type="submit">Upload and Select Chats</button>
  </form>""",
)


def _summarise_chats(payload: list[Any]) -> list[dict[str, Any]]:
    chats = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            continue
        chats.append(
            {
                "id": str(raw.get("uuid") or f"chat_{index}"),
                "title": str(raw.get("name") or f"Chat {index + 1} (no name)"),
                "messages": [m for m in raw.get("chat_messages") or [] if isinstance(m, dict)],
            }
        )
    return chats


def _conversation_text(chat: dict[str, Any]) -> str:
    return "\n\n".join(
        f"{'Human' if msg.get('sender') == 'human' else 'Assistant'}: {msg.get('text', '')}"
        for msg in chat["messages"]
    )


def create_app(config: MagazeenConfig | None = None) -> FastAPI:
    """Build the upload app; sessions live as long as the app does."""
    config = config or load_config()
    sessions = SessionStore(ttl=config.server.session_timeout)

    app = FastAPI(title="Magazeen")
    app.state.sessions = sessions

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return UPLOAD_FORM

    @app.post("/upload", response_class=HTMLResponse)
    async def upload(
        chat_export: Annotated[UploadFile | None, File(alias="chatExport")] = None,
    ) -> Response:
        if chat_export is None:
            return error_page("No file uploaded. Please select a JSON file and try again.", 400)

        data = await chat_export.read()
        try:
            validate_upload(len(data), chat_export.content_type, config.epub.max_file_size)
        except ValidationError as exc:
            return error_page(str(exc), 400)

        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Rejected upload %s: not valid JSON", chat_export.filename)
            return error_page(
                "Error processing uploaded file. It might be corrupted or not in the expected format.",
                400,
            )

        chats = _summarise_chats(payload) if isinstance(payload, list) else []
        if not chats:
            return error_page(
                "No processable chats found in the uploaded file. Please check the file content.", 400
            )

        session_id = sessions.put(chats)
        logger.info("Upload %s parsed into %d chat(s)", chat_export.filename, len(chats))

        options = "\n".join(
            f"""    <div>
      <input type="checkbox" name="selectedChats" value="{html.escape(chat['id'])}" id="{html.escape(chat['id'])}">
      <label for="{html.escape(chat['id'])}">{html.escape(chat['title'])}</label>
    </div>"""
            for chat in chats
        )
        body = f"""  <h1>Select Chats to Include</h1>
  <form action="/generate-epub" method="post">
    <input type="hidden" name="sessionId" value="{session_id}">
{options}
    <button type="submit">Generate EPUB</button>
  </form>"""
        return HTMLResponse(_page("Select Chats", body))

    @app.post("/generate-epub")
    def generate_epub(
        session_id: Annotated[str | None, Form(alias="sessionId")] = None,
        selected_chats: Annotated[list[str] | None, Form(alias="selectedChats")] = None,
    ) -> Response:
        if not session_id or not selected_chats:
            return error_page(
                "Missing selection or session information. Please try uploading and selecting again.",
                400,
            )

        stored = sessions.get(session_id)
        if stored is None:
            return error_page("Chat data not found or session expired. Please upload your file again.", 404)

        wanted = set(selected_chats)
        chosen = [chat for chat in stored if chat["id"] in wanted]
        if not chosen:
            return error_page(
                "No chats were selected to include in the EPUB. Please select at least one chat.", 400
            )

        try:
            with tempfile.TemporaryDirectory(prefix="magazeen-") as tmp:
                workdir = Path(tmp)
                store = ContentStore(workdir / "magazine-content.json")
                store.content.metadata.title = config.epub.title
                store.content.metadata.author = config.epub.author
                store.content.metadata.description = config.epub.description
                for chat in chosen:
                    store.add_chat_highlight(
                        chat["title"],
                        _conversation_text(chat),
                        f"Highlights from chat: {chat['title']}",
                        UPLOAD_CATEGORY,
                    )
                roundups = ArticleGenerator(store, max_highlights=len(chosen))
                generator = MagazineGenerator(store, config, article_generator=roundups)
                result = generator.generate(output_dir=workdir)
                epub_bytes = result.path.read_bytes()
                filename = result.path.name
        except (MagazeenError, OSError):
            logger.exception("EPUB generation failed for session %s", session_id)
            return error_page(
                "An unexpected error occurred while generating the EPUB. Please check the server logs.",
                500,
            )
        finally:
            sessions.delete(session_id)

        return Response(
            content=epub_bytes,
            media_type="application/epub+zip",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
