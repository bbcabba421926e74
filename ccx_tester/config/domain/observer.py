"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, path: str, comparer: str, parallel: bool) -> None: ...

    def config_single_worker_warning(self, max_concurrent: int) -> None: ...
