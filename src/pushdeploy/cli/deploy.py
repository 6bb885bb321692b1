"""CLI deploy commands: hook-driven and forced deployments, rollback, status."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import click

from pushdeploy.cli.output import failure, heading, info, print_state, success
from pushdeploy.config import Settings, validate_settings
from pushdeploy.errors import PushDeployError
from pushdeploy.layout import DeployLayout
from pushdeploy.pipeline import deploy_branch, read_state
from pushdeploy.swap import rollback
from pushdeploy.trigger import DEFAULT_FORCED_BRANCH, parse_update_records, select_branches


def _layout(settings: Settings, cwd: Path) -> DeployLayout:
    try:
        validate_settings(settings)
    except PushDeployError as exc:
        raise click.ClickException(str(exc)) from exc
    return DeployLayout.from_settings(settings, cwd)


def resolve_branches(
    settings: Settings,
    *,
    force: bool,
    branch: str | None,
    lines: Iterable[str],
) -> list[str]:
    if force:
        return [branch or DEFAULT_FORCED_BRANCH]
    if branch:
        raise click.UsageError("a BRANCH argument requires -f/--force")
    try:
        records = parse_update_records(lines)
    except PushDeployError as exc:
        raise click.ClickException(str(exc)) from exc
    return select_branches(records, settings.target_branch)


def run_deploy(
    settings: Settings,
    *,
    cwd: Path,
    force: bool,
    branch: str | None,
    lines: Iterable[str],
) -> None:
    """Deploy every selected branch, stopping at the first failure."""
    branches = resolve_branches(settings, force=force, branch=branch, lines=lines)
    if not branches:
        target = settings.target_branch or "any branch"
        click.echo(f"no update for {target}; nothing to deploy")
        return

    for selected in branches:
        heading(f"Deploying {selected}")
        try:
            result = deploy_branch(selected, settings, cwd, notify=print_state)
        except PushDeployError as exc:
            if exc.revert_command:
                failure(
                    f"Deployment of {selected} failed after the live directory was backed up."
                )
                info(f"To revert, run: {exc.revert_command}")
            else:
                failure(f"Deployment of {selected} failed; live directory left as it was.")
            raise click.ClickException(str(exc)) from exc
        success(f"Deployed {selected} ({result.duration_ms / 1000:.1f}s)")
        if result.revert_command:
            info(f"To revert, run: {result.revert_command}")


def run_rollback(settings: Settings, *, cwd: Path) -> None:
    layout = _layout(settings, cwd)
    try:
        rollback(layout)
    except PushDeployError as exc:
        raise click.ClickException(str(exc)) from exc
    success(f"Restored {layout.live} from {layout.backup}")


def show_status(settings: Settings, *, cwd: Path, json_output: bool = False) -> None:
    layout = _layout(settings, cwd)
    state = read_state(layout)
    if json_output:
        click.echo(json.dumps(state, indent=2, sort_keys=True))
        return
    if not state:
        click.echo(f"no deployment recorded under {layout.root}")
        return
    click.echo(f"branch:  {state.get('branch', '')}")
    click.echo(f"state:   {state.get('state', '')}")
    click.echo(f"detail:  {state.get('detail', '')}")
    click.echo(f"updated: {state.get('updated_at', '')}")
    click.echo(f"live:    {layout.live} ({'present' if layout.live.is_dir() else 'missing'})")
    click.echo(f"backup:  {layout.backup} ({'present' if layout.backup.is_dir() else 'missing'})")
