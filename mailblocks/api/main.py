"""
MAILBLOCKS — FastAPI app
Démarrer : uvicorn mailblocks.api.main:app --reload --port 8001
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from block_builder.errors import (
    BlockError, NotFoundError, PersistenceError, SaveInProgressError,
    UnauthenticatedError, ValidationError,
)

from ..config import cors_origins
from .routes import blocks

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="MAILBLOCKS — Blocs de templates email", version="0.1.0", docs_url="/docs")

app.add_middleware(CORSMiddleware, allow_origins=cors_origins(), allow_methods=["*"], allow_headers=["*"])

_STATUS = [
    (ValidationError, 400),
    (UnauthenticatedError, 401),
    (NotFoundError, 404),
    (SaveInProgressError, 409),
    (PersistenceError, 503),
]


@app.exception_handler(BlockError)
async def handle_block_error(request: Request, error: BlockError):
    status = next((code for cls, code in _STATUS if isinstance(error, cls)), 500)
    if status >= 500:
        log.warning("%s %s → %s : %s", request.method, request.url.path, status, error)
    return JSONResponse({"error": type(error).__name__, "message": str(error)}, status_code=status)


@app.on_event("startup")
def startup():
    from ..database import init_db
    init_db()


app.include_router(blocks.router)


@app.get("/health")
def health():
    return {"status": "ok"}
