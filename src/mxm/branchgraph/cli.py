"""
mxm-branchgraph CLI: show how branches relate through their merge-bases.

Commands
--------
- graph    : print the reduced merge-base graph of the branches (DOT)
- branches : print the branch tips that would be graphed

Both commands take optional branch names; without any, every local branch
is used.

Global options
--------------
--format {plain,rich,json}  Select output format (default: plain)
--directory, -C PATH        Repository to inspect (default: current directory)
--remote / --no-remote      Also graph the remote-tracking branch of each
                            local branch (default: --no-remote)
--verbose, -v               More logging on stderr (repeatable)
--quiet, -q                 Only log errors

Exit codes
----------
0 = success
1 = graph computation failed (merge-base error, no root)
2 = invalid repository or unknown branch
"""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Annotated, Literal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
import typer

from mxm.branchgraph.api import branch_graph_for_repository, collect_branches
from mxm.branchgraph.errors import (
    BranchGraphError,
    BranchResolutionError,
    InvalidRepositoryError,
)
from mxm.branchgraph.log import setup_logging
from mxm.branchgraph.render import commit_label, graph_json, render_dot, render_rich

app = typer.Typer(help="mxm-branchgraph — merge-base graph of git branches")

Format = Literal["plain", "rich", "json"]

BranchesArg = Annotated[
    list[str] | None,
    typer.Argument(help="Branches to include (default: all local branches)."),
]


def _exit_code(exc: BranchGraphError) -> int:
    if isinstance(exc, (InvalidRepositoryError, BranchResolutionError)):
        return 2
    return 1


def _fail(exc: BranchGraphError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=_exit_code(exc))


@app.callback()
def _main_options(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    format: Annotated[
        Format,
        typer.Option(
            "--format",
            "-f",
            case_sensitive=False,
            help="Output format: plain, rich, or json (default: plain).",
        ),
    ] = "plain",
    directory: Annotated[
        Path | None,
        typer.Option(
            "--directory",
            "-C",
            envvar="MXM_BRANCHGRAPH_DIR",
            help="Path to the git repository (default: current directory).",
        ),
    ] = None,
    remote: Annotated[
        bool,
        typer.Option(
            "--remote/--no-remote",
            help="Include the remote-tracking branch of each local branch.",
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log verbosity."),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log errors."),
    ] = False,
) -> None:
    """
    Capture global CLI options, set up logging and stash options in the context.
    """
    setup_logging(-1 if quiet else verbose)
    ctx.obj = {
        "format": format,
        "directory": directory if directory is not None else Path.cwd(),
        "remote": remote,
    }


@app.command("graph")
def graph(ctx: typer.Context, branches: BranchesArg = None) -> None:
    """
    Print the reduced merge-base graph.
    - plain : Graphviz DOT text
    - rich  : the same DOT text in a panel, with colored labels
    - json  : { "root": ..., "nodes": [...], "edges": [{"u": 0, "v": 1}] }
    """
    fmt: Format = ctx.obj["format"]
    try:
        result = branch_graph_for_repository(
            ctx.obj["directory"], branches or [], remote=ctx.obj["remote"]
        )
    except BranchGraphError as exc:
        raise _fail(exc) from exc

    if fmt == "json":
        payload = graph_json(result.children, result.labels, result.root)
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return

    if fmt == "rich":
        console = Console()
        console.print(
            Panel.fit(
                render_rich(result.children, result.labels),
                title=f"root: {result.root or '-'}",
                border_style="cyan",
            )
        )
        return

    # plain
    typer.echo(render_dot(result.children, result.labels))


@app.command("branches")
def list_branches(ctx: typer.Context, branches: BranchesArg = None) -> None:
    """
    List the branch tips that would be graphed, one commit per line.
    """
    fmt: Format = ctx.obj["format"]
    try:
        source = collect_branches(
            ctx.obj["directory"], branches or [], remote=ctx.obj["remote"]
        )
    except BranchGraphError as exc:
        raise _fail(exc) from exc

    tips = sorted(source.labels)

    if fmt == "json":
        data = {commit: sorted(source.labels[commit]) for commit in tips}
        typer.echo(json.dumps({"branches": data}, separators=(",", ":")))
        return

    if fmt == "rich":
        console = Console()
        table = Table(title="Branch tips")
        table.add_column("Commit", style="red")
        table.add_column("Branches", style="green")
        for commit in tips:
            table.add_row(commit[:9], ", ".join(sorted(source.labels[commit])))
        console.print(table)
        return

    # plain
    for commit in tips:
        typer.echo(commit_label(commit, source.labels))


def main(argv: list[str] | None = None) -> int:
    """
    Entry point wrapper that returns an exit code (useful for script wiring/tests).
    """
    try:
        # click hands back the exit code instead of raising when not standalone
        rv = app(args=argv, standalone_mode=False)
        return rv if isinstance(rv, int) else 0
    except typer.Exit as e:
        return e.exit_code
    except Exception as exc:  # Safety net
        typer.echo(f"Unexpected error: {exc}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
