"""Structlog implementation of the CatalogObserver port."""

import structlog


class StructlogCatalogObserver:
    """Delegates catalog domain events to structlog.

    Satisfies the CatalogObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def catalog_loading_started(self, path: str) -> None:
        self._log.info("catalog.loading_started", path=path)

    def catalog_entry_loaded(self, index: int, sample_file: str) -> None:
        self._log.debug("catalog.entry_loaded", index=index, sample_file=sample_file)

    def catalog_loading_completed(self, path: str, total_entries: int) -> None:
        self._log.info(
            "catalog.loading_completed", path=path, total_entries=total_entries
        )

    def catalog_loading_failed(self, path: str, reason: str) -> None:
        self._log.error("catalog.loading_failed", path=path, reason=reason)

    def catalog_saved(self, path: str, total_entries: int) -> None:
        self._log.info("catalog.saved", path=path, total_entries=total_entries)
