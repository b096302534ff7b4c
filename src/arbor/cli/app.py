"""
Root Typer application for the arbor CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from arbor.cli.utils import err_console, output_json, output_report, output_tree
from arbor.core.errors import ArborError, ConfigError, DataLoadError, is_fatal
from arbor.core.logging import configure_logging
from arbor.core.settings import get_settings

app = Typer(
    name="arbor",
    help="arbor — declarative, data-driven API integration tests.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

EXIT_FAILED = 1
EXIT_FATAL = 2


def _version_callback(value: bool) -> None:
    if value:
        from arbor import __version__

        typer.echo(f"arbor {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """arbor CLI — run and inspect API test trees."""


@app.command("run")
def run(
    data_dirs: list[str] = typer.Argument(None, help="Data roots (default: ARBOR_DATA_DIRS)"),
    host: str | None = typer.Option(None, "--host", "-H", help="Base URL of the API under test"),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Worker threads; leaves of one data root always run one at a time",
    ),
    randomize: bool | None = typer.Option(None, "--randomize/--no-randomize"),
    seed: int | None = typer.Option(None, "--seed"),
    log_level: str | None = typer.Option(None, "--log-level"),
    json_out: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Run every suite and exit non-zero on failure."""
    from arbor.engine.framework import Framework

    overrides = {
        key: value
        for key, value in {
            "host": host,
            "data_dirs": data_dirs or None,
            "workers": workers,
            "randomize": randomize,
            "seed": seed,
            "log_level": log_level,
        }.items()
        if value is not None
    }
    try:
        settings = get_settings(**overrides)
    except ConfigError as e:
        err_console.print(f"[red]Invalid configuration:[/red] {e.message}")
        raise typer.Exit(EXIT_FATAL)

    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    if not settings.data_dirs:
        err_console.print("[red]No data roots given[/red] (argument or ARBOR_DATA_DIRS)")
        raise typer.Exit(EXIT_FATAL)

    with Framework.from_settings(settings) as framework:
        try:
            report = framework.run()
        except ArborError as e:
            err_console.print(f"[red]{type(e).__name__}:[/red] {e.message}")
            raise typer.Exit(EXIT_FATAL if is_fatal(e) else EXIT_FAILED)

    if json_out:
        output_json(report.to_dict())
    else:
        output_report(report)
    if not report.ok:
        raise typer.Exit(EXIT_FAILED)


@app.command("tree")
def tree(
    data_dir: str = typer.Argument(..., help="Data root to inspect"),
) -> None:
    """Load a data root and print its groups and cases."""
    from arbor.data.loader import load_tree

    try:
        node = load_tree(data_dir)
    except DataLoadError as e:
        err_console.print(f"[red]DataLoadError:[/red] {e.message}")
        raise typer.Exit(EXIT_FATAL)
    output_tree(node)


if __name__ == "__main__":
    app()
