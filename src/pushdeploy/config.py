"""Deployment configuration contract."""

from functools import lru_cache
from pathlib import PurePosixPath

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pushdeploy.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    repo_path: str = Field(alias="DEPLOY_REPO_PATH", default="")
    app_root: str = Field(alias="DEPLOY_APP_ROOT", default="")
    target_branch: str = Field(alias="DEPLOY_TARGET_BRANCH", default="master")
    checkout_dir: str = Field(alias="DEPLOY_CHECKOUT_DIR", default="project.build")
    dist_dir: str = Field(alias="DEPLOY_DIST_DIR", default="dist")
    live_dir: str = Field(alias="DEPLOY_LIVE_DIR", default="public")
    backup_dir: str = Field(alias="DEPLOY_BACKUP_DIR", default="public-last")
    cache_dir: str = Field(alias="DEPLOY_CACHE_DIR", default="node_modules")
    clone_depth: int = Field(alias="DEPLOY_CLONE_DEPTH", default=1)
    install_command: str = Field(alias="DEPLOY_INSTALL_COMMAND", default="npm install")
    build_command: str = Field(alias="DEPLOY_BUILD_COMMAND", default="gulp")
    command_timeout_seconds: int = Field(alias="DEPLOY_COMMAND_TIMEOUT_SECONDS", default=0)
    state_file: str = Field(alias="DEPLOY_STATE_FILE", default=".deploy-state.json")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")
    log_json: int = Field(alias="DEPLOY_LOG_JSON", default=0)


_RELATIVE_DIR_FIELDS = {
    "DEPLOY_CHECKOUT_DIR": "checkout_dir",
    "DEPLOY_DIST_DIR": "dist_dir",
    "DEPLOY_LIVE_DIR": "live_dir",
    "DEPLOY_BACKUP_DIR": "backup_dir",
    "DEPLOY_CACHE_DIR": "cache_dir",
    "DEPLOY_STATE_FILE": "state_file",
}


def _is_contained(value: str) -> bool:
    path = PurePosixPath(value)
    return bool(value.strip()) and not path.is_absolute() and ".." not in path.parts


def validate_settings(settings: Settings) -> None:
    problems: list[str] = []
    for key, field in _RELATIVE_DIR_FIELDS.items():
        if not _is_contained(getattr(settings, field)):
            problems.append(f"{key}(relative path inside the app root required)")
    if not settings.install_command.strip():
        problems.append("DEPLOY_INSTALL_COMMAND")
    if not settings.build_command.strip():
        problems.append("DEPLOY_BUILD_COMMAND")
    if settings.clone_depth < 1:
        problems.append("DEPLOY_CLONE_DEPTH(must be >= 1)")
    if settings.command_timeout_seconds < 0:
        problems.append("DEPLOY_COMMAND_TIMEOUT_SECONDS(must be >= 0)")
    if settings.live_dir.strip("/") == settings.backup_dir.strip("/"):
        problems.append("DEPLOY_BACKUP_DIR(must differ from DEPLOY_LIVE_DIR)")
    if settings.checkout_dir.strip("/") in {
        settings.live_dir.strip("/"),
        settings.backup_dir.strip("/"),
    }:
        problems.append("DEPLOY_CHECKOUT_DIR(must differ from live and backup)")

    if problems:
        keys = ", ".join(problems)
        raise ConfigError(f"invalid deployment configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
