"""Main CLI application entry point.

Defines the ``rmp`` command: validate the given paths, then walk and
delete them with live progress and optional per-item confirmation.
"""

import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from rmp import __version__
from rmp.cli.display import DeletionProgress, make_prompter
from rmp.core.config import ConfigError, load_config
from rmp.deletion.errors import PathRejectedError, WalkError
from rmp.deletion.pipeline import DeletionPipeline, progress_message
from rmp.deletion.validator import NO_PRESERVE_MOUNT_ROOTS_FLAG, NO_PRESERVE_ROOT_FLAG
from rmp.utils.formatting import err_console, print_error, print_info, print_warning

app = typer.Typer(
    name="rmp",
    help="Delete files and directories recursively, with progress.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"rmp version {__version__}")
        raise typer.Exit()


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def main(
    paths: Annotated[
        list[str],
        typer.Argument(help="Files and directories to delete.", show_default=False),
    ],
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Don't delete anything, but go through the motions as if it were.",
        ),
    ] = False,
    interactive: Annotated[
        bool | None,
        typer.Option(
            "--interactive/--no-interactive",
            "-i",
            help="Prompt before deleting each item.",
            show_default=False,
        ),
    ] = None,
    prompt_on_descend: Annotated[
        bool,
        typer.Option(
            "--prompt-on-descend",
            help="In interactive mode, also ask before entering each directory.",
        ),
    ] = False,
    no_preserve_root: Annotated[
        bool,
        typer.Option(NO_PRESERVE_ROOT_FLAG, help="Don't fail if '/' is given as an argument."),
    ] = False,
    no_preserve_mount_roots: Annotated[
        bool,
        typer.Option(
            NO_PRESERVE_MOUNT_ROOTS_FLAG,
            help="Don't fail if an argument is the mount point of another filesystem.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Read settings from this TOML file."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v info, -vv debug)."),
    ] = 0,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Delete PATHS and everything beneath them, bottom-up."""
    _setup_logging(verbose)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    options = config.to_options(
        dry_run=dry_run,
        interactive=interactive,
        preserve_root=not no_preserve_root,
        preserve_mount_roots=not no_preserve_mount_roots,
        prompt_on_descend=prompt_on_descend,
    )

    display = DeletionProgress(err_console)
    pipeline = DeletionPipeline(
        options,
        prompter=make_prompter(display) if options.interactive else None,
        on_progress=display.update,
        on_error=display.print_error,
    )

    started = time.monotonic()
    try:
        with display:
            summary = pipeline.run(paths)
    except PathRejectedError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except WalkError as e:
        discovered, complete = pipeline.counters.snapshot()
        _print_totals(progress_message(pipeline.done, discovered, complete), started)
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _print_totals(progress_message(summary.done, summary.discovered, True), started)
    if summary.errors:
        print_warning(f"{len(summary.errors)} item(s) could not be removed.")
    if summary.dry_run:
        print_info("Dry run: nothing was deleted.")


def _print_totals(message: str, started: float) -> None:
    elapsed = timedelta(seconds=int(time.monotonic() - started))
    err_console.print(f"{message}, elapsed: {elapsed}", highlight=False, markup=False, soft_wrap=True)


if __name__ == "__main__":
    app()
