"""API route modules."""

from conotate.api.classify import router as classify_router
from conotate.api.library import router as library_router

__all__ = ["classify_router", "library_router"]
