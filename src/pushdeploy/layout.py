"""Filesystem layout of an application root served by a bare repository."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from pushdeploy.config import Settings


@dataclass(frozen=True, slots=True)
class DeployLayout:
    """Absolute paths touched by one deployment.

    The bare repository usually lives inside the application root
    (``<root>/repo.git``), next to the checkout, live and backup directories.
    """

    repo: Path
    root: Path
    checkout: Path
    dist: Path
    live: Path
    backup: Path
    cache: Path
    cache_name: str
    state_file: Path

    @classmethod
    def from_settings(cls, settings: Settings, cwd: Path) -> DeployLayout:
        repo = Path(settings.repo_path).expanduser() if settings.repo_path else cwd
        repo = repo.resolve()
        root = Path(settings.app_root).expanduser().resolve() if settings.app_root else repo.parent
        checkout = root / settings.checkout_dir
        return cls(
            repo=repo,
            root=root,
            checkout=checkout,
            dist=checkout / settings.dist_dir,
            live=root / settings.live_dir,
            backup=root / settings.backup_dir,
            cache=checkout / settings.cache_dir,
            cache_name=settings.cache_dir,
            state_file=root / settings.state_file,
        )

    def cache_parking_path(self, now: datetime | None = None) -> Path:
        stamp = now or datetime.now(UTC)
        return self.root / f"{Path(self.cache_name).name}_{int(stamp.timestamp())}"

    def repo_url(self) -> str:
        # file:// makes git honour --depth for a repository on local disk.
        return self.repo.as_uri()
