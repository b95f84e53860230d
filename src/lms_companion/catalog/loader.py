"""Catalog loading from YAML documents.

A search path may be a directory, whose ``*.yml``/``*.yaml`` files are read in
name order, or a single document. Documents are merged in the order found, so
a later document replaces entities with the same id.
"""

from __future__ import annotations

import logging
from functools import reduce
from pathlib import Path
from typing import Iterable, Iterator

import yaml
from pydantic import ValidationError

from .models import Catalog

logger = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yml", ".yaml")


class CatalogLoadError(RuntimeError):
    """Raised when one or more catalog documents are unusable."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


def read_catalog_document(path: Path) -> Catalog:
    """Parse one document; an empty file yields an empty catalog."""

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise CatalogLoadError([f"{path}: invalid YAML ({exc})"]) from exc
    if document is None:
        return Catalog()
    try:
        return Catalog.model_validate(document)
    except ValidationError as exc:
        raise CatalogLoadError([f"{path}: {exc.error_count()} validation error(s)\n{exc}"]) from exc


class CatalogLoader:
    """Collects catalog documents from a list of search paths."""

    def __init__(self, search_paths: Iterable[Path] | None = None) -> None:
        self._search_paths = [Path(path) for path in (search_paths or []) if Path(path).exists()]

    @property
    def search_paths(self) -> list[Path]:
        return list(self._search_paths)

    def iter_documents(self) -> Iterator[Path]:
        for base in self._search_paths:
            if base.is_file():
                yield base
                continue
            yield from sorted(
                (path for path in base.iterdir() if path.is_file() and path.suffix in CATALOG_SUFFIXES),
                key=lambda path: path.name,
            )

    def load(self) -> Catalog:
        """Read every document, then merge; any bad document fails the load."""

        parsed: list[Catalog] = []
        errors: list[str] = []
        for path in self.iter_documents():
            try:
                parsed.append(read_catalog_document(path))
            except CatalogLoadError as exc:
                errors.extend(exc.errors)

        if errors:
            logger.error("Catalog load failed", extra={"error_count": len(errors)})
            raise CatalogLoadError(errors)

        catalog = reduce(Catalog.merge, parsed, Catalog())
        logger.debug("Loaded catalog", extra={"documents": len(parsed), **catalog.summary()})
        return catalog


def load_catalog(search_paths: Iterable[Path] | None = None) -> Catalog:
    return CatalogLoader(search_paths).load()


__all__ = ["CATALOG_SUFFIXES", "CatalogLoadError", "CatalogLoader", "load_catalog", "read_catalog_document"]
