"""pychangesets CLI application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pychangesets.config import CommitMode, load_config, load_github_context
from pychangesets.errors import PyChangesetsError
from pychangesets.workspace import Workspace


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from pychangesets import __version__

        print(f"pychangesets {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="pychangesets",
    help="Changeset-driven release automation for monorepos",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
) -> None:
    """Changeset-driven release automation for monorepos."""
    pass


console = Console()
error_console = Console(stderr=True)


def get_workspace(cwd: Path | None, overrides: dict[str, Any] | None = None) -> Workspace:
    """Load configuration and workspace from cwd or the current directory."""
    root = (cwd or Path.cwd()).resolve()
    try:
        config = load_config(root, overrides)
        return Workspace.discover(root, config)
    except PyChangesetsError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e


@app.command("run")
def run_cmd(
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Workspace root"),
    ] = None,
    publish: Annotated[
        str | None,
        typer.Option("--publish", "-p", help="Command that publishes packages"),
    ] = None,
    version_command: Annotated[
        str | None,
        typer.Option("--version-command", help="Command that applies changesets"),
    ] = None,
    commit: Annotated[
        str | None,
        typer.Option("--commit", help="Commit message for the version branch"),
    ] = None,
    title: Annotated[
        str | None,
        typer.Option("--title", help="Title of the version pull request"),
    ] = None,
    commit_mode: Annotated[
        CommitMode | None,
        typer.Option("--commit-mode", help="Write through the git CLI or the GitHub API"),
    ] = None,
    base_branch: Annotated[
        str | None,
        typer.Option("--base-branch", help="Branch the version pull request targets"),
    ] = None,
    no_github_releases: Annotated[
        bool,
        typer.Option("--no-github-releases", help="Do not create GitHub releases"),
    ] = False,
    no_setup_git_user: Annotated[
        bool,
        typer.Option("--no-setup-git-user", help="Keep the configured git identity"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Do not push, tag or call the GitHub API"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output"),
    ] = False,
) -> None:
    """Open the version pull request, or publish when no changesets remain."""
    from pychangesets.cli.outputs import result_outputs, write_outputs
    from pychangesets.commands import PublishResult, run_release
    from pychangesets.log import configure_logging

    configure_logging(verbose, error_console)

    overrides: dict[str, Any] = {
        "publish": publish,
        "version": version_command,
        "commit": commit,
        "title": title,
        "commit_mode": commit_mode,
        "base_branch": base_branch,
    }
    if no_github_releases:
        overrides["create_github_releases"] = False
    if no_setup_git_user:
        overrides["setup_git_user"] = False

    workspace = get_workspace(cwd, overrides)

    try:
        github_context = load_github_context()
        result = asyncio.run(run_release(workspace, github_context, dry_run=dry_run))
    except PyChangesetsError as e:
        error_console.print(f"[red]Release failed:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    outputs = result_outputs(result)
    write_outputs(outputs)
    print_summary(result)

    if isinstance(result, PublishResult) and result.exit_code != 0:
        raise typer.Exit(1)


def print_summary(result: Any) -> None:
    """Print a one-screen summary of a run result."""
    from pychangesets.commands import NoOpResult, PublishResult, VersionResult

    if isinstance(result, NoOpResult):
        console.print(f"[yellow]{escape(result.reason)}[/yellow]")
        return

    if isinstance(result, VersionResult):
        if result.no_op:
            console.print("[yellow]No package versions changed[/yellow]")
            return
        table = Table()
        table.add_column("Package", style="cyan")
        table.add_column("Current", style="dim")
        table.add_column("Next", style="green")
        for changed in result.changed:
            table.add_row(changed.name, changed.old_version or "-", changed.new_version)
        console.print(table)
        if result.pull_request_number is not None:
            verb = "Created" if result.created else "Updated"
            console.print(f"[green]{verb} pull request #{result.pull_request_number}[/green]")
        elif result.dry_run:
            console.print("[yellow]Dry run - nothing was pushed[/yellow]")
        return

    if isinstance(result, PublishResult):
        if not result.published:
            console.print("[yellow]No packages were published[/yellow]")
            return
        console.print(f"[green]Published {len(result.packages)} packages[/green]")
        for package in result.packages:
            console.print(f"  {escape(package.tag)}")


@app.command()
def status(
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Workspace root"),
    ] = None,
) -> None:
    """Show pending changesets."""
    from pychangesets.changesets import read_changeset_state

    root = (cwd or Path.cwd()).resolve()
    try:
        plan = read_changeset_state(root)
    except PyChangesetsError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e

    if plan.pre_state is not None and plan.pre_state.is_active:
        console.print(f"[magenta]Pre mode:[/magenta] {escape(plan.pre_state.tag)}")

    if not plan.has_changesets:
        console.print("[yellow]No pending changesets[/yellow]")
        return

    table = Table()
    table.add_column("Changeset", style="cyan")
    table.add_column("Releases", style="green")
    table.add_column("Summary")
    for changeset in plan.changesets:
        releases = ", ".join(f"{name}: {bump.label}" for name, bump in changeset.releases.items())
        summary = changeset.summary.splitlines()[0] if changeset.summary else ""
        table.add_row(escape(changeset.id), escape(releases) or "[dim]empty[/dim]", escape(summary))
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
