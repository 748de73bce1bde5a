"""Storage for sections and notes."""

from conotate.stores.library import LibraryStore

__all__ = ["LibraryStore"]
