from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from polltail import __version__
from polltail.config import DEFAULT_CONFIG, ConfigError, load_config, merge_cli
from polltail.monitor import run_follow

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Example: polltail -t -g 'logs/*.log' --first-lines 20",
)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    """Diagnostica su stderr; stdout resta solo per il contenuto dei file."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"polltail {__version__}")
        raise typer.Exit()


@app.command()
def main(
    files: List[str] = typer.Argument(..., metavar="FILES...", help="Files to follow (glob patterns with -g)."),
    show_time: bool = typer.Option(False, "-t", help="Prefix every header with a local timestamp."),
    glob_mode: bool = typer.Option(
        False, "--glob", "-g", help="Treat FILES as glob patterns, re-expanded on every poll."
    ),
    first_lines: Optional[int] = typer.Option(
        None,
        "--first-lines",
        min=0,
        metavar="NUM",
        help=f"Trailing lines shown when a file is first opened (default {DEFAULT_CONFIG.first_lines}).",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        min=0.01,
        metavar="SECONDS",
        help=f"Seconds between polls (default {DEFAULT_CONFIG.interval_s:g}).",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="YAML file with defaults (show_time, glob, first_lines, interval)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Follow FILES like `tail -f`, reporting when files appear, vanish or shrink."""
    setup_logging(verbose)

    try:
        cfg = load_config(config_path) if config_path is not None else DEFAULT_CONFIG
        cfg = merge_cli(
            cfg,
            show_time=show_time,
            glob_mode=glob_mode,
            first_lines=first_lines,
            interval_s=interval,
        )
    except ConfigError as e:
        raise typer.BadParameter(str(e), param_hint="'--config'") from e

    try:
        run_follow(files, cfg)
    except KeyboardInterrupt:
        typer.echo("\n[polltail] Stop requested by user (CTRL+C).", err=True)


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
