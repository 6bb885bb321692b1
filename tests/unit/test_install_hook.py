import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from pushdeploy.cli.hook import HOOK_NAME, hook_script, install_hook
from pushdeploy.cli.main import cli


def test_hook_script_runs_pushdeploy() -> None:
    script = hook_script("/opt/venv/bin/python")
    assert script.startswith("#!/bin/sh\n")
    assert "exec /opt/venv/bin/python -m pushdeploy run" in script


def test_install_hook_writes_executable(bare_repo: Path) -> None:
    dest, changed = install_hook(bare_repo)
    assert changed is True
    assert dest == bare_repo / "hooks" / HOOK_NAME
    assert os.access(dest, os.X_OK)

    _, changed_again = install_hook(bare_repo)
    assert changed_again is False


def test_install_hook_keeps_foreign_hook_unless_forced(bare_repo: Path) -> None:
    dest = bare_repo / "hooks" / HOOK_NAME
    dest.parent.mkdir(exist_ok=True)
    dest.write_text("#!/bin/sh\necho custom\n")
    with pytest.raises(FileExistsError):
        install_hook(bare_repo)
    _, changed = install_hook(bare_repo, force=True)
    assert changed is True
    assert "pushdeploy" in dest.read_text()


def test_install_hook_rejects_non_repository(tmp_path: Path) -> None:
    with pytest.raises(NotADirectoryError):
        install_hook(tmp_path)


def test_install_hook_command(bare_repo: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["install-hook", str(bare_repo)])
    assert result.exit_code == 0
    assert "hook installed" in result.output
    result = runner.invoke(cli, ["install-hook", str(bare_repo)])
    assert result.exit_code == 0
    assert "already installed" in result.output
