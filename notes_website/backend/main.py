import logging
import os
import time
from typing import List, Optional

from fastapi import FastAPI, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, PlainTextResponse

from .config import configure_logging, parse_config
from .domain import NoteError, resolve_payload
from .models import NoteItem
from .services import NoteStore

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
WEBSITE_DIR = os.path.join(BASE_DIR, "..", "website")
UPLOAD_FORM = os.path.join(WEBSITE_DIR, "UploadForm.html")


def register_exception_handlers(app: FastAPI) -> None:
    """Map store errors to plain-text responses carrying their status code."""

    @app.exception_handler(NoteError)
    async def note_error_handler(request: Request, exc: NoteError) -> PlainTextResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return PlainTextResponse("Internal server error", status_code=500)


def create_app(store: NoteStore) -> FastAPI:
    """Build the notes API around the given store."""
    app = FastAPI(title="Notes API", description="Text notes stored as files in a directory", version="1.0.0")
    app.state.store = store
    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        logger.info("%s %s -> %d (%.2f ms)", request.method, request.url.path,
                    response.status_code, duration_ms)
        return response

    @app.get("/UploadForm.html", include_in_schema=False)
    async def upload_form():
        return FileResponse(UPLOAD_FORM, media_type="text/html")

    @app.get("/notes/{name}", response_class=PlainTextResponse)
    def get_note(name: str):
        """Return the raw text of a note."""
        return PlainTextResponse(store.fetch(name))

    @app.put("/notes/{name}", response_class=PlainTextResponse)
    async def update_note(name: str, request: Request):
        """Replace a note with a JSON (application/json) or plain text (text/plain) body."""
        payload = resolve_payload(request.headers.get("content-type", ""), await request.body())
        await run_in_threadpool(store.replace, name, payload.to_text())
        return PlainTextResponse("Note updated")

    @app.delete("/notes/{name}", response_class=PlainTextResponse)
    def delete_note(name: str):
        store.delete(name)
        return PlainTextResponse("Note deleted")

    @app.get("/notes", response_model=List[NoteItem])
    def list_notes():
        """List every note with its full text."""
        return [note.to_dict() for note in store.list_notes()]

    @app.post("/write", response_class=PlainTextResponse, status_code=201)
    def write_note(note_name: Optional[str] = Form(None), note: Optional[str] = Form(None)):
        """Create a note from the upload form fields."""
        logger.debug("Write form: note_name=%r, note=%d chars", note_name, len(note or ""))
        store.create(note_name or "", note or "")
        return PlainTextResponse("Note created", status_code=201)

    return app


def main(argv=None):
    config = parse_config(argv)
    configure_logging(config.log_level)

    import uvicorn

    app = create_app(NoteStore(str(config.cache_dir)))
    logger.info("Server is running at http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
