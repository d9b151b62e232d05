# src/ttt/cli/main.py

"""
CLI entrypoint.

One process = one command: configure logging, resolve the data file, load
and decrypt the store, run the command, save if it changed anything.
User-facing errors are printed to stderr and exit with code 2.
"""

import contextlib
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, List, Optional

import typer

from .. import __version__
from ..config import Settings
from ..core.ports import Prompter
from ..core.state import AppState
from ..core.windows import WindowKind
from ..errors import TrackerError
from . import commands
from .bootstrap import create_initial_state, data_file_for, init_runtime, persist_state
from .prompts import ConsolePrompter

logger = logging.getLogger(__name__)

EXAMPLES = """Examples:

  ttt start "Write docs"

  ttt pause

  ttt resume

  ttt status

  ttt report

  ttt stop

  ttt location

  ttt edit"""

app = typer.Typer(
    name="ttt",
    help="Track task time from the command line.",
    epilog=EXAMPLES,
    add_completion=False,
    no_args_is_help=True,
)


@dataclass
class CliContext:
    settings: Settings
    data_file: Path
    prompter: Prompter


@contextlib.contextmanager
def _user_errors() -> Iterator[None]:
    try:
        yield
    except TrackerError as exc:
        logger.debug("Command failed: %s", type(exc).__name__)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from None


def _cli(ctx: typer.Context) -> CliContext:
    cli = ctx.find_object(CliContext)
    if cli is None:
        raise RuntimeError("CLI context was not initialized by the app callback.")
    return cli


def _load(cli: CliContext, *, will_write: bool) -> AppState:
    return create_initial_state(
        settings=cli.settings,
        data_file=cli.data_file,
        prompter=cli.prompter,
        will_write=will_write,
    )


def _mutate(ctx: typer.Context, action: Callable[[AppState, CliContext], str]) -> None:
    cli = _cli(ctx)
    with _user_errors():
        state = _load(cli, will_write=True)
        message = action(state, cli)
        persist_state(state)
    typer.echo(message)
    if state.is_new_store:
        typer.echo(f"Created encrypted data file at {state.data_file}")


def _query(ctx: typer.Context, action: Callable[[AppState], str]) -> None:
    cli = _cli(ctx)
    with _user_errors():
        state = _load(cli, will_write=False)
        message = action(state)
    typer.echo(message)


@app.callback()
def main(
    ctx: typer.Context,
    data_file: Annotated[
        Optional[Path],
        typer.Option("--data-file", metavar="PATH", help="Override the default data file location"),
    ] = None,
) -> None:
    settings = init_runtime()
    ctx.obj = CliContext(
        settings=settings,
        data_file=data_file_for(settings, data_file),
        prompter=ConsolePrompter(),
    )


@app.command()
def start(
    ctx: typer.Context,
    task: Annotated[Optional[str], typer.Argument(metavar="TASK", help="Task name to track")] = None,
) -> None:
    """Start tracking a task."""
    _mutate(ctx, lambda state, cli: commands.cmd_start(state, cli.prompter, task))


@app.command()
def stop(ctx: typer.Context) -> None:
    """Stop the active or paused task."""
    _mutate(ctx, lambda state, cli: commands.cmd_stop(state))


@app.command()
def pause(ctx: typer.Context) -> None:
    """Pause the active task."""
    _mutate(ctx, lambda state, cli: commands.cmd_pause(state))


@app.command()
def resume(ctx: typer.Context) -> None:
    """Resume the paused task."""
    _mutate(ctx, lambda state, cli: commands.cmd_resume(state))


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the current task and elapsed time."""
    _query(ctx, commands.cmd_status)


@app.command()
def location(ctx: typer.Context) -> None:
    """Show the data file location."""
    typer.echo(str(_cli(ctx).data_file))


@app.command()
def report(
    ctx: typer.Context,
    today: Annotated[bool, typer.Option("--today", help="Report today's totals (default)")] = False,
    week: Annotated[bool, typer.Option("--week", help="Report this week's totals")] = False,
) -> None:
    """Show totals per task name (today by default)."""
    with _user_errors():
        kind = commands.window_from_flags(today, week, default=WindowKind.TODAY)
    _query(ctx, lambda state: commands.cmd_report(state, kind))


@app.command("list")
def list_command(
    ctx: typer.Context,
    today: Annotated[bool, typer.Option("--today", help="Only time tracked today")] = False,
    week: Annotated[bool, typer.Option("--week", help="Only time tracked this week")] = False,
) -> None:
    """List tasks with their totals (all time by default)."""
    with _user_errors():
        kind = commands.window_from_flags(today, week, default=WindowKind.ALL)
    _query(ctx, lambda state: commands.cmd_list(state, kind))


@app.command()
def edit(
    ctx: typer.Context,
    task_id: Annotated[
        Optional[str], typer.Option("--id", metavar="ID", help="Task id to edit")
    ] = None,
    index: Annotated[
        Optional[int],
        typer.Option("--index", metavar="INDEX", help="Task index from `ttt list` (1-based)"),
    ] = None,
    name: Annotated[
        Optional[str], typer.Option("--name", metavar="NAME", help="Rename the task")
    ] = None,
    created_at: Annotated[
        Optional[str],
        typer.Option(
            "--created-at", metavar="RFC3339|now", help="Override created time (RFC3339 or 'now')"
        ),
    ] = None,
    closed_at: Annotated[
        Optional[str],
        typer.Option(
            "--closed-at", metavar="RFC3339|open", help="Override closed time (RFC3339 or 'open')"
        ),
    ] = None,
    segment_edit: Annotated[
        Optional[List[str]],
        typer.Option(
            "--segment-edit",
            metavar="INDEX,START,END",
            help="Edit a segment (1-based). END can be 'open'. Repeatable.",
        ),
    ] = None,
) -> None:
    """Edit a task name or time segments."""
    _mutate(
        ctx,
        lambda state, cli: commands.cmd_edit(
            state,
            cli.prompter,
            typer.echo,
            task_id=task_id,
            index=index,
            name=name,
            created_at=created_at,
            closed_at=closed_at,
            segment_edits=segment_edit or (),
        ),
    )


@app.command()
def restore(ctx: typer.Context) -> None:
    """Restore the data file from a backup."""
    cli = _cli(ctx)
    with _user_errors():
        message = commands.cmd_restore(cli.settings, cli.data_file, cli.prompter, typer.echo)
    typer.echo(message)


@app.command()
def rekey(ctx: typer.Context) -> None:
    """Change the passphrase of the data file."""
    cli = _cli(ctx)
    with _user_errors():
        message = commands.cmd_rekey(cli.settings, cli.data_file, cli.prompter)
    typer.echo(message)


@app.command()
def version() -> None:
    """Show the version."""
    typer.echo(f"ttt {__version__}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
