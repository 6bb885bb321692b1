from datetime import UTC, datetime
from pathlib import Path

from pushdeploy.config import Settings
from pushdeploy.layout import DeployLayout


def test_layout_derives_paths_from_repo_parent(tmp_path: Path) -> None:
    repo = tmp_path / "app" / "repo.git"
    repo.mkdir(parents=True)
    layout = DeployLayout.from_settings(Settings(), repo)
    root = (tmp_path / "app").resolve()
    assert layout.repo == repo.resolve()
    assert layout.root == root
    assert layout.checkout == root / "project.build"
    assert layout.dist == root / "project.build" / "dist"
    assert layout.live == root / "public"
    assert layout.backup == root / "public-last"
    assert layout.cache == root / "project.build" / "node_modules"
    assert layout.state_file == root / ".deploy-state.json"


def test_layout_prefers_configured_paths(tmp_path: Path) -> None:
    settings = Settings(
        DEPLOY_REPO_PATH=str(tmp_path / "git" / "site.git"),
        DEPLOY_APP_ROOT=str(tmp_path / "www"),
        DEPLOY_LIVE_DIR="htdocs",
    )  # type: ignore[call-arg]
    layout = DeployLayout.from_settings(settings, Path("/somewhere/else"))
    assert layout.repo == (tmp_path / "git" / "site.git").resolve()
    assert layout.root == (tmp_path / "www").resolve()
    assert layout.live == (tmp_path / "www").resolve() / "htdocs"


def test_cache_parking_path_uses_epoch_seconds(tmp_path: Path) -> None:
    layout = DeployLayout.from_settings(Settings(), tmp_path / "repo.git")
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    parked = layout.cache_parking_path(now)
    assert parked == layout.root / f"node_modules_{int(now.timestamp())}"


def test_repo_url_is_file_uri(tmp_path: Path) -> None:
    layout = DeployLayout.from_settings(Settings(), tmp_path / "repo.git")
    assert layout.repo_url().startswith("file://")
