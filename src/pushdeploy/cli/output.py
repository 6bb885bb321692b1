"""Colored status lines for the operator watching ``git push``."""

from __future__ import annotations

import click

from pushdeploy.pipeline import DeployState


def _green(text: str) -> str:
    return f"\033[32m{text}\033[0m"


def _red(text: str) -> str:
    return f"\033[31m{text}\033[0m"


def _yellow(text: str) -> str:
    return f"\033[33m{text}\033[0m"


def _bold(text: str) -> str:
    return f"\033[1m{text}\033[0m"


def heading(text: str) -> None:
    click.echo(f"\n{_bold(text)}")


def info(text: str) -> None:
    click.echo(f"  {_yellow(text)}")


def success(text: str) -> None:
    click.echo(_green(text))


def failure(text: str) -> None:
    click.echo(_red(text))


def print_state(state: DeployState, detail: str) -> None:
    if state is DeployState.FAILED:
        click.echo(f"  {_red(chr(0x2717))} {_red(detail)}")
    else:
        click.echo(f"  {_green(chr(0x2713))} {state.value}: {detail}")
