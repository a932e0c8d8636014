"""Command line interface for lopper."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from lopper.git import DEFAULT_BRANCH, BranchRecord, GitError, GitRepo

app = typer.Typer(help="Interactively delete local git branches")
console = Console()
err_console = Console(stderr=True)


def get_repo(path: Optional[Path] = None) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        err_console.print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def render_labels(branches: list[BranchRecord], default_branch: str = DEFAULT_BRANCH) -> list[str]:
    """Build one display label per branch, in the same order."""
    labels = []
    for branch in branches:
        name = escape(branch.name)
        if branch.is_current:
            labels.append(f"* [green]{name}[/green]")
        elif branch.name == default_branch:
            labels.append(f"[green]{name}[/green]")
        else:
            labels.append(name)
    return labels


def select_branch(labels: list[str]) -> Optional[int]:
    """Show the numbered branch list and return the chosen index, or None to quit."""
    width = len(str(len(labels)))
    for number, label in enumerate(labels, start=1):
        console.print(f"  [dim]{number:>{width}}[/dim]  {label}")

    choices = [str(number) for number in range(1, len(labels) + 1)]
    try:
        answer = Prompt.ask(
            "Select a branch (enter 'q' to exit)",
            console=console,
            choices=[*choices, "q"],
            default="1",
            show_choices=False,
        )
    except EOFError:
        return None

    if answer == "q":
        return None
    return int(answer) - 1


def wait_for_refresh() -> bool:
    """Ask whether to list branches again. Returns False when the user quits."""
    try:
        answer = Prompt.ask("Press Enter to refresh (enter 'q' to exit)", console=console, default="", show_default=False)
    except EOFError:
        return False
    return answer.strip().lower() != "q"


def show_last_commit(branch: BranchRecord) -> None:
    """Print the short id, time and message of the branch tip."""
    commit = branch.last_commit
    console.print(f"Last commit: {commit.short_id} - {commit.time} - {escape(commit.message.strip())}", soft_wrap=True)


def confirm_delete(branch: BranchRecord) -> bool:
    """Ask before deleting. An empty answer means no."""
    try:
        return Confirm.ask(
            f"Do you want to delete branch [cyan]{escape(branch.name)}[/cyan]?",
            console=console,
            default=False,
        )
    except EOFError:
        return False


def prune(repo: GitRepo, default_branch: str = DEFAULT_BRANCH) -> None:
    """Run the select, confirm and delete loop until the user quits.

    Raises:
        GitError: On any failure while listing or deleting branches
    """
    while True:
        # Records from the previous pass are stale once anything was deleted
        branches = repo.list_local_branches()

        if not branches:
            console.print("[yellow]No local branches found[/yellow]")
            if not wait_for_refresh():
                console.print("No branch selected, exiting")
                return
            continue

        index = select_branch(render_labels(branches, default_branch))
        if index is None:
            console.print("No branch selected, exiting")
            return

        branch = branches[index]
        if branch.name == default_branch or branch.is_current:
            console.print(f"[yellow]Cannot delete {escape(default_branch)} or current branch[/yellow]\n")
            continue

        show_last_commit(branch)
        name = escape(branch.name)
        if not confirm_delete(branch):
            console.print(f"Branch [cyan]{name}[/cyan] not deleted\n")
            continue

        repo.delete_branch(branch.ref_name)
        console.print(f"Branch [cyan]{name}[/cyan] deleted.")
        console.print("To undo this action, run:")
        console.print(f"  git checkout -b {branch.name} {branch.last_commit.id}\n", soft_wrap=True, markup=False, highlight=False)


@app.command()
def main(
    default_branch: Annotated[
        str,
        typer.Option("--default-branch", envvar="LOPPER_DEFAULT_BRANCH", help="Branch that can never be deleted"),
    ] = DEFAULT_BRANCH,
) -> None:
    """Pick local branches from a list and delete them."""
    repo = get_repo()

    try:
        prune(repo, default_branch)
    except GitError as err:
        err_console.print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


if __name__ == "__main__":
    app()
