"""Main CLI entry point for gitplumb."""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from gitplumb.config import Settings
from gitplumb.constants import (
    EXIT_DATA_ERROR,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    GIT_DIR,
    OBJECTS_DIR,
)
from gitplumb.core import ensure_store_exists, find_store, load_ignore_patterns, open_database
from gitplumb.core.render import (
    decode_text,
    format_tree_entries,
    pretty_print,
    size_string,
    type_string,
)
from gitplumb.exceptions import (
    GitPlumbError,
    ObjectDecodeError,
    ObjectEncodingError,
)
from gitplumb.objects.model import Commit
from gitplumb.storage import CommitBuilder, TreeBuilder
from gitplumb.storage.database import encode_object_from_bytes

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="gitplumb",
    help="Plumbing commands for a Git-compatible object database",
    add_completion=False,
)

logger = logging.getLogger(__name__)


def _fail(error: Exception) -> NoReturn:
    """Report an error and exit with the matching status code."""
    if isinstance(error, (ObjectDecodeError, ObjectEncodingError)):
        code = EXIT_DATA_ERROR
    elif isinstance(error, OSError):
        code = EXIT_SYSTEM_ERROR
    else:
        code = EXIT_USER_ERROR
    logger.debug("Command failed", exc_info=error)
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", style="red")
    raise typer.Exit(code)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug output to stderr",
    ),
) -> None:
    """Plumbing commands for a Git-compatible object database."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


@app.command()
def version() -> None:
    """Show gitplumb version."""
    from gitplumb import __version__
    typer.echo(f"gitplumb version {__version__}")


@app.command()
def init(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Create an empty repository in the current directory (idempotent)."""
    workspace_root = Path.cwd()
    existed = (workspace_root / GIT_DIR / OBJECTS_DIR).is_dir()

    try:
        git_dir = ensure_store_exists(workspace_root)
    except OSError as e:
        _fail(e)

    if quiet:
        return
    if existed:
        console.print(f"Reinitialized existing repository in {git_dir}")
        return
    console.print(
        Panel(
            f"[bold green]✓[/bold green] Initialized empty repository\n\n"
            f"[dim]Repository root:[/dim] {workspace_root}\n"
            f"[dim]Object store:[/dim]    {git_dir / OBJECTS_DIR}",
            border_style="green",
            title="gitplumb",
        )
    )


@app.command("cat-file")
def cat_file(
    object_id: str = typer.Argument(..., help="Object id (full or abbreviated)"),
    show_type: bool = typer.Option(False, "-t", help="Show the object type"),
    show_size: bool = typer.Option(False, "-s", help="Show the payload size"),
    pretty: bool = typer.Option(False, "-p", help="Pretty-print the object content"),
) -> None:
    """Show the type, size or content of a stored object."""
    if sum((show_type, show_size, pretty)) != 1:
        err_console.print(
            "[bold red]Error:[/bold red] exactly one of -t, -s or -p is required",
            style="red",
        )
        raise typer.Exit(EXIT_USER_ERROR)

    try:
        database = open_database(Path.cwd(), Settings.from_env())
        obj = database.decode_object(database.resolve_id(object_id), resolve=False)
        if show_type:
            typer.echo(type_string(obj))
        elif show_size:
            typer.echo(size_string(obj))
        elif isinstance(obj, Commit):
            typer.echo(decode_text(pretty_print(obj), "commit"), nl=False)
        else:
            typer.echo(pretty_print(obj), nl=False)
    except (GitPlumbError, OSError, ValueError) as e:
        _fail(e)


@app.command("hash-object")
def hash_object(
    path: Path = typer.Argument(..., help="File to hash"),
    write: bool = typer.Option(False, "-w", "--write", help="Write the object into the store"),
    object_type: str = typer.Option("blob", "-t", "--type", help="Object type (only blob)"),
) -> None:
    """Compute the id of a file's content, optionally storing it."""
    try:
        blob = encode_object_from_bytes(object_type, path.read_bytes())
        if write:
            database = open_database(Path.cwd(), Settings.from_env())
            database.persist(blob)
        typer.echo(blob.id)
    except (GitPlumbError, OSError, ValueError) as e:
        _fail(e)


@app.command("ls-tree")
def ls_tree(
    tree_id: str = typer.Argument(..., help="Tree or commit id"),
    name_only: bool = typer.Option(False, "--name-only", help="List only entry names"),
) -> None:
    """List the entries of a tree."""
    try:
        database = open_database(Path.cwd(), Settings.from_env())
        tree = database.decode_tree(database.resolve_id(tree_id))
        for line in format_tree_entries(tree, name_only=name_only):
            typer.echo(line)
    except (GitPlumbError, OSError, ValueError) as e:
        _fail(e)


@app.command("write-tree")
def write_tree() -> None:
    """Snapshot the working directory as a tree and print its id."""
    try:
        git_dir = find_store(Path.cwd())
        workspace_root = git_dir.parent
        database = open_database(workspace_root, Settings.from_env())
        builder = TreeBuilder(database, load_ignore_patterns(workspace_root))
        tree = builder.build_tree_from_directory(workspace_root)
        database.persist(tree)
        typer.echo(tree.id)
    except (GitPlumbError, OSError, ValueError) as e:
        _fail(e)


@app.command("commit-tree")
def commit_tree(
    tree_id: str = typer.Argument(..., help="Tree id to commit"),
    parents: Optional[List[str]] = typer.Option(
        None,
        "-p",
        "--parent",
        help="Parent commit id (repeatable)",
    ),
    message: str = typer.Option(..., "-m", "--message", help="Commit message"),
) -> None:
    """Create a commit object for a tree and print its id."""
    try:
        settings = Settings.from_env()
        database = open_database(Path.cwd(), settings)
        builder = CommitBuilder(database, settings.identity, tz_offset=settings.tz_offset)
        commit = builder.build_commit(
            message,
            database.resolve_id(tree_id),
            [database.resolve_id(parent) for parent in parents or []],
        )
        database.persist(commit)
        typer.echo(commit.id)
    except (GitPlumbError, OSError, ValueError) as e:
        _fail(e)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
