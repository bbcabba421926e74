"""CatalogLoader Protocol — structural interface for reading and writing test catalogs."""

from pathlib import Path
from typing import Protocol

from ccx_tester.catalog.domain.entry import TestEntry


class CatalogLoader(Protocol):
    """Loads an ordered sequence of TestEntry records and can persist the same sequence."""

    def load(self, path: Path) -> list[TestEntry]: ...

    def save(self, entries: list[TestEntry], path: Path) -> None: ...
