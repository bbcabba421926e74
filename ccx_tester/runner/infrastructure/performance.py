"""Platform performance logging for tool processes."""

import sys

import structlog

from ccx_tester.runner.domain.performance import NullPerformanceLogger, PerformanceLogger


class ResourcePerformanceLogger:
    """Logs cumulative child-process CPU time and peak RSS after every tool exit.

    Figures come from getrusage(RUSAGE_CHILDREN) and cover every reaped child
    of this process, so under parallel execution they are running totals
    rather than per-entry numbers.

    Satisfies the PerformanceLogger protocol structurally.
    """

    def __init__(self) -> None:
        import resource

        self._resource = resource
        self._log = structlog.get_logger()

    def process_exited(
        self, command: str, exit_code: int, runtime_seconds: float
    ) -> None:
        usage = self._resource.getrusage(self._resource.RUSAGE_CHILDREN)
        self._log.debug(
            "performance.process_exited",
            command=command,
            exit_code=exit_code,
            runtime_seconds=round(runtime_seconds, 3),
            children_user_cpu_seconds=round(usage.ru_utime, 3),
            children_system_cpu_seconds=round(usage.ru_stime, 3),
            children_max_rss_kb=_max_rss_kb(usage.ru_maxrss),
        )


def load_performance_logger() -> PerformanceLogger:
    """Return the performance logger available on this platform, or a no-op one."""
    if sys.platform == "win32":
        return NullPerformanceLogger()
    return ResourcePerformanceLogger()


def _max_rss_kb(max_rss: int) -> int:
    # macOS reports bytes, Linux reports kilobytes.
    if sys.platform == "darwin":
        return max_rss // 1024
    return max_rss
