"""Shared test fixtures."""

import json
from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from conotate.classification.orchestrator import NoteClassifier
from conotate.main import app
from conotate.models import Section
from conotate.notebook import Notebook
from conotate.stores.library import LibraryStore


def make_model_client(reply=None, error=None):
    """Mock model client whose ``chat`` returns ``reply`` or raises ``error``.

    A dict ``reply`` is serialized as JSON, the way the model answers.
    """
    client = MagicMock()
    client.mode = "direct"
    client.model_name = "llama-3.1-8b-instant"
    if isinstance(reply, dict):
        reply = json.dumps(reply)
    client.chat = AsyncMock(return_value=reply, side_effect=error)
    client.aclose = AsyncMock()
    return client


def canonical_sections():
    return [
        Section(id="tasks", name="Tasks"),
        Section(id="ideas", name="Ideas"),
        Section(id="notes", name="Notes"),
        Section(id="unsorted", name="Unsorted"),
    ]


@pytest.fixture
def sections():
    return canonical_sections()


@pytest.fixture
def store(tmp_path):
    library = LibraryStore(tmp_path / "library.db")
    yield library
    library.close()


@pytest.fixture
def notebook(store):
    return Notebook(store=store, classifier=NoteClassifier(None), client=None)


@pytest.fixture
def api(store):
    """Patch the API's shared resources with a temporary store and no model backend.

    Yields a namespace-like dict so tests can swap in a mock model client.
    """
    resources = {"client": None, "store": store}

    def _notebook():
        return Notebook(
            store=store,
            classifier=NoteClassifier(resources["client"]),
            client=resources["client"],
        )

    with ExitStack() as stack:
        stack.enter_context(patch("conotate.api.library.get_library_store", return_value=store))
        stack.enter_context(patch("conotate.api.library.get_notebook", side_effect=_notebook))
        stack.enter_context(
            patch(
                "conotate.api.classify.get_classifier",
                side_effect=lambda: NoteClassifier(resources["client"]),
            )
        )
        stack.enter_context(
            patch("conotate.api.classify.get_model_client", side_effect=lambda: resources["client"])
        )
        yield resources


@pytest.fixture
def client(api):
    return TestClient(app)
