"""Catalog store.

Holds the static catalog document served at /v2/dapp/catalog. The document
is read once when the store is created and is not mutated afterwards;
`reload()` is the only way to replace it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from services.edge_gateway_service.exceptions import CatalogLoadError
from services.edge_gateway_service.logging_utils import create_service_logger
from services.edge_gateway_service.protocols import ErrorLogProtocol

logger = create_service_logger("edge_gateway.catalog")

CATALOG_ERROR_DOCUMENT: dict[str, str] = {"error": "Catalog missing or invalid JSON"}


def read_catalog(path: Path) -> Any:
    """Read and parse the catalog file.

    Raises:
        CatalogLoadError: If the file is missing, unreadable or not valid JSON
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise CatalogLoadError(path, "file not found") from None
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogLoadError(path, str(e)) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(path, f"invalid JSON: {e}") from e


class CatalogStore:
    """Read-only holder of the catalog document."""

    def __init__(
        self,
        document: Any,
        path: Path | None = None,
        load_error: CatalogLoadError | None = None,
    ) -> None:
        self._document = document
        self._path = path
        self._load_error = load_error

    @classmethod
    def load(cls, path: Path) -> CatalogStore:
        """Load the catalog, degrading to the error document on failure."""
        try:
            document = read_catalog(path)
        except CatalogLoadError as e:
            logger.error(f"catalog load error: {e.reason}", catalog_path=str(path))
            return cls(dict(CATALOG_ERROR_DOCUMENT), path=path, load_error=e)

        logger.info("catalog loaded", catalog_path=str(path))
        return cls(document, path=path)

    @classmethod
    async def load_recorded(cls, path: Path, error_log: ErrorLogProtocol) -> CatalogStore:
        """Load the catalog and append a load failure to the error log."""
        store = cls.load(path)
        if store.load_error is not None:
            await error_log.record("Catalog load error", store.load_error.message)
        return store

    @property
    def document(self) -> Any:
        return self._document

    @property
    def loaded(self) -> bool:
        """False when the error document stands in for the catalog."""
        return self._load_error is None

    @property
    def load_error(self) -> CatalogLoadError | None:
        return self._load_error

    @property
    def path(self) -> Path | None:
        return self._path

    def render(self) -> str:
        """Serialize the catalog the way it is served: two-space indented JSON."""
        return json.dumps(self._document, indent=2, ensure_ascii=False)

    def reload(self) -> CatalogStore:
        """Re-read the catalog from its path and return the new store."""
        if self._path is None:
            return self
        return CatalogStore.load(self._path)
