"""CLI entrypoint for ccx-tester — typer app with `run` and `export-catalog` commands."""

import asyncio
import logging
import sys
from pathlib import Path

import structlog
import typer

from ccx_tester.catalog.infrastructure.observer import StructlogCatalogObserver
from ccx_tester.catalog.infrastructure.xml_catalog import XmlCatalogLoader
from ccx_tester.comparison.infrastructure.registry import ComparerRegistry
from ccx_tester.config.domain.config import HarnessConfig
from ccx_tester.config.infrastructure.observer import StructlogConfigObserver
from ccx_tester.config.infrastructure.yaml_loader import YamlConfigLoader
from ccx_tester.core.errors import CcxTesterError
from ccx_tester.execution.application.orchestrator import Orchestrator
from ccx_tester.execution.domain.outcome import RunSummary
from ccx_tester.execution.infrastructure.observer import StructlogExecutionObserver
from ccx_tester.execution.infrastructure.progress_reporter import (
    ConsoleProgressReporter,
)
from ccx_tester.runner.infrastructure.observer import StructlogRunnerObserver
from ccx_tester.runner.infrastructure.performance import load_performance_logger
from ccx_tester.runner.infrastructure.subprocess_runner import SubprocessRunnerFactory

app = typer.Typer(add_completion=False)


def _configure_structlog(log_format: str, verbose: bool = False) -> None:
    """Configure structlog based on the requested format and verbosity."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def _apply_overrides(
    config: HarnessConfig, parallel: bool | None, comparer: str | None
) -> HarnessConfig:
    """Return config with any command-line overrides applied."""
    update: dict[str, object] = {}
    if comparer is not None:
        update["comparer"] = comparer
    if parallel is not None:
        update["execution"] = config.execution.model_copy(update={"parallel": parallel})
    if not update:
        return config
    return config.model_copy(update=update)


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_WHITE = "\033[97m"

# Failed entries listed individually before collapsing into a count.
_MAX_FAILURES_SHOWN = 10


def _rule(width: int = 72, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _print_summary(summary: RunSummary) -> None:
    """Print a colorized run summary to stdout, listing failed entries."""
    failed = [outcome for outcome in summary.outcomes if not outcome.succeeded]
    failed_color = _RED if failed else _GREEN

    typer.echo("")
    _rule(color=_CYAN)
    typer.echo(f"{_CYAN}{_BOLD}  ccx-tester  ·  Run Complete{_RESET}")
    _rule(color=_CYAN)
    typer.echo("")

    rows: list[tuple[str, str]] = [
        ("Run ID", f"{summary.run_id[:8]}-..."),
        ("Entries", str(summary.total_entries)),
        ("Compared", str(summary.compared_count)),
        ("Failed", f"{failed_color}{summary.failed_count}"),
        ("Elapsed", _format_elapsed(elapsed_seconds=summary.elapsed_seconds)),
        ("Report", str(summary.report_path)),
    ]
    label_w = max(len(label) for label, _ in rows)
    for label, value in rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {_WHITE}{value}{_RESET}")

    if failed:
        typer.echo("")
        for outcome in failed[:_MAX_FAILURES_SHOWN]:
            if outcome.error is not None:
                detail = outcome.error
            elif outcome.timed_out:
                detail = "timed out"
            else:
                detail = f"exit code {outcome.exit_code}"
            typer.echo(
                f"  {_RED}#{outcome.index}{_RESET} {outcome.sample_file}"
                f"  {_DIM}{detail}{_RESET}"
            )
        if len(failed) > _MAX_FAILURES_SHOWN:
            typer.echo(
                f"  {_DIM}… and {len(failed) - _MAX_FAILURES_SHOWN} more, see the log{_RESET}"
            )

    typer.echo("")
    _rule(color=_CYAN)
    typer.echo("")


@app.command()
def run(
    catalog_path: Path = typer.Argument(..., help="Path to the XML test catalog"),
    config_path: Path = typer.Option(
        Path("ccx-tester.yaml"),
        "--config",
        "-c",
        help="Path to the harness settings YAML",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Also log tool stdout and performance samples",
    ),
    parallel: bool | None = typer.Option(
        None,
        "--parallel/--sequential",
        help="Override execution.parallel from the settings file",
    ),
    comparer: str | None = typer.Option(
        None,
        "--comparer",
        help="Override the comparer: diff, difflib or difflib-reduced",
    ),
) -> None:
    """Run every catalog entry through the tool and write a comparison report."""
    _configure_structlog(log_format=log_format, verbose=verbose)
    try:
        loader = YamlConfigLoader(observer=StructlogConfigObserver())
        config = _apply_overrides(
            config=loader.load(path=config_path),
            parallel=parallel,
            comparer=comparer,
        )

        catalog_loader = XmlCatalogLoader(observer=StructlogCatalogObserver())
        entries = catalog_loader.load(path=catalog_path)

        orchestrator = Orchestrator(
            observer=StructlogExecutionObserver(),
            runner_factory=SubprocessRunnerFactory(
                observer=StructlogRunnerObserver(),
                performance_logger=load_performance_logger(),
                retry=config.execution.launch_retry,
            ),
            comparer_factory=ComparerRegistry(),
            progress_reporter=(
                ConsoleProgressReporter() if log_format != "json" else None
            ),
        )
        summary = asyncio.run(orchestrator.run_all(entries=entries, config=config))

        _print_summary(summary=summary)

    except KeyboardInterrupt:
        typer.echo("Run interrupted.")
        sys.exit(1)
    except CcxTesterError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)


@app.command("export-catalog")
def export_catalog(
    catalog_path: Path = typer.Argument(..., help="Catalog to read and validate"),
    output_path: Path = typer.Argument(..., help="Where to write the normalised catalog"),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Validate a catalog and write it back out with native path delimiters."""
    _configure_structlog(log_format=log_format)
    try:
        catalog_loader = XmlCatalogLoader(observer=StructlogCatalogObserver())
        entries = catalog_loader.load(path=catalog_path)
        catalog_loader.save(entries=entries, path=output_path)
        typer.echo(f"Wrote {len(entries)} entries to {output_path}")
    except CcxTesterError as exc:
        typer.echo(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    app()
