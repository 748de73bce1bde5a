"""Note classification: command parsing, model and keyword classifiers."""

from conotate.classification.commands import parse_commands
from conotate.classification.descriptions import generate_description
from conotate.classification.keywords import classify_by_keyword
from conotate.classification.model_classifier import classify_with_model
from conotate.classification.orchestrator import NoteClassifier, classify_note
from conotate.classification.session import ClassificationSession

__all__ = [
    "ClassificationSession",
    "NoteClassifier",
    "classify_by_keyword",
    "classify_note",
    "classify_with_model",
    "generate_description",
    "parse_commands",
]
