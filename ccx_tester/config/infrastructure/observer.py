"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, path: str, comparer: str, parallel: bool) -> None:
        self._log.info("config.loaded", path=path, comparer=comparer, parallel=parallel)

    def config_single_worker_warning(self, max_concurrent: int) -> None:
        self._log.warning(
            "config.single_worker_warning",
            max_concurrent=max_concurrent,
            message="parallel execution with max_concurrent=1 runs entries one at a time",
        )
