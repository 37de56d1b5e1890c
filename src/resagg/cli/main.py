"""CLI entrypoint for resagg."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version

import typer
from rich.console import Console
from rich.markup import escape

from resagg.application import execute_resource_aggregation
from resagg.config import AggregatorConfig, load_config
from resagg.infrastructure.logging_setup import configure_logging

app = typer.Typer(
    name="resagg",
    help="Effective pod resource requests and limits from workload manifests",
    no_args_is_help=True,
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("resagg")
    except PackageNotFoundError:
        return "0.1.0"


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    raise exc


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG shows skipped resource entries).",
    ),
) -> None:
    """Handle global CLI options."""
    if version:
        console.print(f"resagg {_resolve_version()}")
        raise typer.Exit(code=0)
    config = load_config()
    try:
        configure_logging(log_level or config.log_level)
    except ValueError as exc:
        _handle_error(exc)
    ctx.obj = config
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


@app.command("aggregate")
def aggregate_command(
    ctx: typer.Context,
    source: str = typer.Argument(
        "-",
        help="Manifest file (YAML or JSON). Use '-' to read stdin.",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Stdout format: table, text or json.",
    ),
    report: str | None = typer.Option(
        None,
        "--report",
        "-r",
        help=(
            "Persist report files under this directory. "
            "If omitted, prints stdout preview only."
        ),
    ),
) -> None:
    """Compute effective requests/limits of Pod and workload manifests.

    Init containers count by their largest single value, main containers by
    their sum; the effective value is the larger of the two.
    """
    config: AggregatorConfig = ctx.obj or load_config()
    if report is None and config.persists_reports:
        report = str(config.reports_root)
    try:
        run = execute_resource_aggregation(
            source,
            output_format=output or config.output_format,
            reports_root=report,
        )
        if run is not None:
            console.print(f"[green]Run:[/green] {run.output_dir}")
            console.print(f"[green]Manifest:[/green] {run.manifest_path}")
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `resagg` script."""
    app()


if __name__ == "__main__":
    main()
