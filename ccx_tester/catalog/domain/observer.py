"""Observer port for the catalog domain — defines events in domain language."""

from typing import Protocol


class CatalogObserver(Protocol):
    def catalog_loading_started(self, path: str) -> None: ...

    def catalog_entry_loaded(self, index: int, sample_file: str) -> None: ...

    def catalog_loading_completed(self, path: str, total_entries: int) -> None: ...

    def catalog_loading_failed(self, path: str, reason: str) -> None: ...

    def catalog_saved(self, path: str, total_entries: int) -> None: ...
