"""Click CLI group: run, rollback, status, and install-hook commands."""

from __future__ import annotations

from pathlib import Path

import click

from pushdeploy.config import get_settings
from pushdeploy.logging import configure_logging


@click.group()
def cli() -> None:
    """Push-to-deploy hook for bare git repositories."""
    settings = get_settings()
    configure_logging(settings.log_level, json_output=bool(settings.log_json))


@cli.command()
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Deploy BRANCH (default: master) without reading update records from stdin.",
)
@click.argument("branch", required=False)
def run(force: bool, branch: str | None) -> None:
    """Deploy pushed branches.

    Without -f, reads ``oldrev newrev refname`` lines from stdin the way git
    feeds a post-receive hook, and deploys each update of the target branch.
    """
    from pushdeploy.cli.deploy import run_deploy

    run_deploy(
        get_settings(),
        cwd=Path.cwd(),
        force=force,
        branch=branch,
        lines=click.get_text_stream("stdin") if not force else [],
    )


@cli.command()
def rollback() -> None:
    """Replace the live directory with the previous build."""
    from pushdeploy.cli.deploy import run_rollback

    run_rollback(get_settings(), cwd=Path.cwd())


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Print the raw state record as JSON.")
def status(json_output: bool) -> None:
    """Show the state of the last deployment."""
    from pushdeploy.cli.deploy import show_status

    show_status(get_settings(), cwd=Path.cwd(), json_output=json_output)


@cli.command("install-hook")
@click.argument(
    "repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option("--force", is_flag=True, help="Replace an existing post-receive hook.")
def install_hook_cmd(repo: Path, force: bool) -> None:
    """Install the post-receive hook into a bare repository."""
    from pushdeploy.cli.hook import install_hook

    try:
        dest, changed = install_hook(repo.resolve(), force=force)
    except (FileExistsError, NotADirectoryError) as exc:
        raise click.ClickException(str(exc)) from exc
    if changed:
        click.echo(f"{dest.name} hook installed at {dest}")
    else:
        click.echo(f"{dest.name} hook already installed")
