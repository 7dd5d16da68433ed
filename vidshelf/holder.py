# vidshelf/holder.py
from __future__ import annotations

import threading

from vidshelf.models import Catalog, is_catalog


class CatalogHolder:
    """Single slot holding the catalog currently being served.

    Reads are a plain attribute load and never block. ``store`` swaps the
    reference under a writer lock; the lock never covers loading or parsing.
    """

    def __init__(self, catalog: Catalog) -> None:
        self._check(catalog)
        self._lock = threading.Lock()
        self._catalog = catalog
        self._version = 0

    @staticmethod
    def _check(catalog) -> None:
        if not is_catalog(catalog):
            raise TypeError(f"expected a tuple of VideoRecord, got {type(catalog).__name__}")

    def load(self) -> Catalog:
        return self._catalog

    def store(self, catalog: Catalog) -> None:
        self._check(catalog)
        with self._lock:
            self._catalog = catalog
            self._version += 1

    @property
    def version(self) -> int:
        """Number of catalogs published since construction."""
        return self._version
