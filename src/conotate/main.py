"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from conotate import __version__
from conotate.api.classify import router as classify_router
from conotate.api.dependencies import get_library_store, get_model_client, get_notebook
from conotate.api.library import router as library_router
from conotate.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Log resolved configuration at startup and release clients on shutdown."""
    s = get_settings()
    logger.info(
        "Conotate starting: data_path=%s, ai_mode=%s, model=%s",
        s.data_path,
        s.ai_mode,
        s.anthropic_model if s.ai_mode == "anthropic" else s.model,
    )
    client = get_model_client()
    if client is None:
        logger.warning(
            "No model credentials for %s mode, classification uses keywords only", s.ai_mode
        )
    yield
    await get_notebook().drain()
    if client is not None:
        await client.aclose()
    get_library_store().close()


app = FastAPI(
    title="Conotate",
    description="Note capture with automatic section classification",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=500)

app.include_router(classify_router)
app.include_router(library_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Return project information."""
    return {
        "name": "Conotate",
        "version": __version__,
        "description": "Note capture with automatic section classification",
    }


@app.get("/health")
@app.get("/api/v1/health")
async def health() -> dict[str, Any]:
    """Health check with model backend and storage status."""
    checks: dict[str, Any] = {"status": "ok"}

    client = get_model_client()
    checks["model"] = client.mode if client is not None else "keywords-only"

    try:
        checks["sections"] = len(get_library_store().list_sections())
        checks["storage"] = "ok"
    except Exception:
        logger.error("Health check could not read the library store", exc_info=True)
        checks["status"] = "error"
        checks["storage"] = "unavailable"

    return checks
