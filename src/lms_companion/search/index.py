"""Chroma-based search index for catalog content."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from .items import SearchableItem

logger = logging.getLogger(__name__)

_KEYWORD_SEPARATOR = "|"


class SearchIndexUnavailableError(RuntimeError):
    """Raised when the Chroma client cannot be constructed."""


class CollectionProtocol(Protocol):
    """Protocol for the minimal Chroma collection API used by the index."""

    def upsert(
        self,
        *,
        ids: Iterable[str],
        documents: Iterable[str],
        metadatas: Iterable[dict[str, Any]],
    ) -> None:
        ...

    def get(
        self,
        *,
        ids: Iterable[str] | None = None,
        where: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> dict[str, list[Any]]:
        ...

    def delete(
        self,
        *,
        ids: Iterable[str] | None = None,
        where: dict[str, Any] | None = None,
    ) -> None:
        ...


class ClientProtocol(Protocol):
    """Protocol for the minimal Chroma client API used by the index."""

    def get_or_create_collection(self, name: str) -> CollectionProtocol:
        ...


@dataclass(slots=True)
class SearchHit:
    """A search result; ``identifier`` is a ``kind:uuid`` search identifier."""

    identifier: str
    domain: str
    title: str
    subject: str
    description: str
    metadata: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "domain": self.domain,
            "title": self.title,
            "subject": self.subject,
            "description": self.description,
        }


class ChromaSearchIndex:
    """Persist searchable catalog items in a ChromaDB collection."""

    def __init__(
        self,
        path: Path,
        *,
        collection_name: str = "lms_search",
        client_factory: Callable[[], ClientProtocol] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._collection_name = collection_name
        self._client_factory = client_factory or self._default_client_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._client: ClientProtocol | None = None
        self._collection: CollectionProtocol | None = None

    def _default_client_factory(self) -> ClientProtocol:
        try:
            import chromadb
        except ImportError as exc:  # pragma: no cover - depends on environment
            raise SearchIndexUnavailableError(
                "chromadb package is not installed; install lms-companion with persistence extras"
            ) from exc

        return chromadb.PersistentClient(path=str(self._path))

    def _ensure_collection(self) -> CollectionProtocol:
        if self._collection is None:
            client = self._client or self._client_factory()
            self._client = client
            self._collection = client.get_or_create_collection(self._collection_name)
        return self._collection

    def ping(self) -> bool:
        """Verify that the underlying collection can be obtained."""

        self._ensure_collection()
        return True

    @staticmethod
    def _metadata_for(item: SearchableItem) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "domain": item.domain,
            "title": item.title,
            "subject": item.subject,
            "keywords": _KEYWORD_SEPARATOR.join(item.keywords),
        }
        if item.expires_at is not None:
            metadata["expires_at"] = item.expires_at.timestamp()
        if item.due_date is not None:
            metadata["due_date"] = item.due_date.isoformat()
        return metadata

    def index_items(self, items: Iterable[SearchableItem]) -> int:
        """Add or replace items; returns how many were written."""

        batch = list(items)
        if not batch:
            return 0
        collection = self._ensure_collection()
        collection.upsert(
            ids=[item.identifier for item in batch],
            documents=[item.description for item in batch],
            metadatas=[self._metadata_for(item) for item in batch],
        )
        logger.info("Indexed searchable items", extra={"count": len(batch)})
        return len(batch)

    def deindex(self, identifier: str) -> None:
        self._ensure_collection().delete(ids=[identifier])
        logger.debug("Deindexed item", extra={"identifier": identifier})

    def deindex_domain(self, domain: str) -> None:
        self._ensure_collection().delete(where={"domain": domain})
        logger.debug("Deindexed domain", extra={"domain": domain})

    def deindex_all(self, domains: Iterable[str]) -> None:
        """Remove every item belonging to the given domains (e.g. on sign-out)."""

        for domain in domains:
            self.deindex_domain(domain)

    def reindex(self, items: Iterable[SearchableItem], domains: Iterable[str]) -> int:
        self.deindex_all(domains)
        return self.index_items(items)

    def indexed_count(self) -> int:
        result = self._ensure_collection().get()
        return len(result.get("ids", []))

    def _convert_result(self, result: dict[str, list[Any]]) -> list[SearchHit]:
        hits: list[SearchHit] = []
        ids = result.get("ids", [])
        documents = result.get("documents", [])
        metadatas = result.get("metadatas", [])
        for identifier, document, metadata in zip(ids, documents, metadatas):
            metadata = metadata or {}
            hits.append(
                SearchHit(
                    identifier=identifier,
                    domain=metadata.get("domain", ""),
                    title=metadata.get("title", ""),
                    subject=metadata.get("subject", ""),
                    description=document or "",
                    metadata=metadata,
                )
            )
        return hits

    def search(
        self,
        query: str | None = None,
        *,
        domain: str | None = None,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Case-insensitive match against title, description and keywords.

        Expired items are never returned.
        """

        collection = self._ensure_collection()
        where = {"domain": domain} if domain else None
        hits = self._convert_result(collection.get(where=where))

        now_ts = self._clock().timestamp()
        hits = [
            hit
            for hit in hits
            if not isinstance(hit.metadata.get("expires_at"), (int, float))
            or hit.metadata["expires_at"] > now_ts
        ]

        if query:
            needle = query.lower()
            hits = [
                hit
                for hit in hits
                if needle in hit.title.lower()
                or needle in hit.description.lower()
                or needle in str(hit.metadata.get("keywords", "")).lower()
            ]
        return hits[:limit] if limit else hits


__all__ = ["ChromaSearchIndex", "SearchHit", "SearchIndexUnavailableError"]
