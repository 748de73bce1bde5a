"""FastAPI dependency injection for shared resources."""

import logging
from functools import lru_cache
from pathlib import Path

from conotate.classification.orchestrator import NoteClassifier
from conotate.config import Settings
from conotate.llm_client import ModelClient
from conotate.notebook import Notebook
from conotate.stores.library import LibraryStore

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_data_path() -> Path:
    """Get the data directory path."""
    settings = get_settings()
    data_path = Path(settings.data_path) if settings.data_path else Path("data")
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


@lru_cache
def get_library_store() -> LibraryStore:
    """Get cached library store instance."""
    settings = get_settings()
    return LibraryStore(get_data_path() / settings.library_db_name)


@lru_cache
def get_model_client() -> ModelClient | None:
    """Get cached model client, or None when the backend has no credentials."""
    client = ModelClient(get_settings())
    if not client.is_configured:
        logger.warning("Model backend '%s' not configured, using keyword fallback", client.mode)
        return None
    return client


@lru_cache
def get_classifier() -> NoteClassifier:
    """Get cached note classifier instance."""
    settings = get_settings()
    return NoteClassifier(get_model_client(), threshold=settings.confidence_threshold)


@lru_cache
def get_notebook() -> Notebook:
    """Get cached notebook service instance."""
    return Notebook(
        store=get_library_store(),
        classifier=get_classifier(),
        client=get_model_client(),
    )
