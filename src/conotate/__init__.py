"""Conotate: note classification and command-parsing engine."""

__version__ = "0.1.0"
