"""Install the post-receive hook into a bare repository."""

from __future__ import annotations

import os
import shlex
import sys
from pathlib import Path

HOOK_NAME = "post-receive"


def hook_script(python: str | None = None) -> str:
    interpreter = shlex.quote(python or sys.executable)
    return "\n".join(
        [
            "#!/bin/sh",
            "# Installed by pushdeploy: deploy on push.",
            f"exec {interpreter} -m pushdeploy run",
            "",
        ]
    )


def _read_text(path: Path) -> str:
    try:
        return path.read_text()
    except FileNotFoundError:
        return ""


def install_hook(repo: Path, *, force: bool = False) -> tuple[Path, bool]:
    """Write the hook. Returns (path, changed).

    Raises FileExistsError when a different hook is already installed and
    ``force`` is not set; raises NotADirectoryError when ``repo`` is not a
    bare repository.
    """
    if not (repo / "HEAD").is_file() or not (repo / "objects").is_dir():
        raise NotADirectoryError(f"not a bare git repository: {repo}")
    hooks_dir = repo / "hooks"
    hooks_dir.mkdir(parents=True, exist_ok=True)
    dest = hooks_dir / HOOK_NAME

    content = hook_script()
    existing = _read_text(dest)
    if existing == content:
        return dest, False
    if existing and not force:
        raise FileExistsError(f"{dest} already exists; use --force to replace it")

    dest.write_text(content)
    os.chmod(dest, 0o755)
    return dest, True
