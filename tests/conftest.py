import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path

import pytest

from pushdeploy.config import Settings, get_settings

INSTALL_NOOP = shlex.join([sys.executable, "-c", "pass"])
BUILD_COPY = shlex.join(
    [
        sys.executable,
        "-c",
        "import pathlib, shutil; pathlib.Path('dist').mkdir(); "
        "shutil.copy('index.html', 'dist/index.html')",
    ]
)
BUILD_FAIL = shlex.join([sys.executable, "-c", "import sys; sys.exit(3)"])
BUILD_UNDECODABLE = shlex.join(
    [
        sys.executable,
        "-c",
        "import pathlib, shutil, sys; "
        "sys.stdout.buffer.write(b'\\xff\\xfe built caf\\xe9\\n'); "
        "pathlib.Path('dist').mkdir(); shutil.copy('index.html', 'dist/index.html')",
    ]
)


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch):
    for key in list(os.environ):
        if key.startswith("DEPLOY_") or key.startswith("GIT_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    get_settings.cache_clear()


def git(*args: str | Path) -> str:
    proc = subprocess.run(
        ["git", *(str(arg) for arg in args)],
        check=True,
        capture_output=True,
        text=True,
    )
    return proc.stdout.strip()


def commit_file(work: Path, name: str, content: str, message: str) -> None:
    (work / name).write_text(content)
    git("-C", work, "add", ".")
    git("-C", work, "commit", "--quiet", "-m", message)


@pytest.fixture
def work_repo(tmp_path: Path) -> Path:
    work = tmp_path / "work"
    work.mkdir()
    git("init", "--quiet", work)
    git("-C", work, "symbolic-ref", "HEAD", "refs/heads/master")
    git("-C", work, "config", "user.email", "test@example.com")
    git("-C", work, "config", "user.name", "Test User")
    (work / "package.json").write_text('{"name": "site"}\n')
    commit_file(work, "index.html", "v1\n", "init")
    return work


@pytest.fixture
def bare_repo(tmp_path: Path, work_repo: Path) -> Path:
    app_root = tmp_path / "app"
    app_root.mkdir()
    bare = app_root / "repo.git"
    git("clone", "--bare", "--quiet", work_repo, bare)
    return bare


def _make_settings(repo: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "DEPLOY_REPO_PATH": str(repo),
        "DEPLOY_INSTALL_COMMAND": INSTALL_NOOP,
        "DEPLOY_BUILD_COMMAND": BUILD_COPY,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def make_settings():
    return _make_settings


@pytest.fixture
def push_change(work_repo: Path, bare_repo: Path):
    """Commit ``index.html`` with new content and push it to the bare repository."""

    def _push(content: str, branch: str = "master") -> None:
        current = git("-C", work_repo, "rev-parse", "--abbrev-ref", "HEAD")
        if current != branch:
            git("-C", work_repo, "checkout", "--quiet", "-B", branch)
        commit_file(work_repo, "index.html", content, f"update {branch}")
        git("-C", work_repo, "push", "--quiet", bare_repo, f"{branch}:{branch}")

    return _push


@pytest.fixture
def build_commands() -> dict[str, str]:
    return {
        "install": INSTALL_NOOP,
        "build": BUILD_COPY,
        "fail": BUILD_FAIL,
        "no_output": INSTALL_NOOP,
        "undecodable": BUILD_UNDECODABLE,
    }
