"""Search indexing of catalog content."""

from .index import ChromaSearchIndex, SearchHit, SearchIndexUnavailableError
from .items import SearchableItem, build_items, content_domains

__all__ = [
    "ChromaSearchIndex",
    "SearchHit",
    "SearchIndexUnavailableError",
    "SearchableItem",
    "build_items",
    "content_domains",
]
