"""Deployment pipeline: checkout, build, backup rotation and promotion.

A deployment walks a fixed sequence of states::

    idle -> cache-saved -> checked-out -> cache-restored -> built
         -> backed-up -> promoted -> done

Every step must succeed before the next one runs. A failure moves the
pipeline to ``failed`` and stops; nothing already done is reversed, except
that a parked dependency cache is always put back into the checkout. The
live directory is only touched after the build output has been verified.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import cast

from pushdeploy.cache import preserved_cache
from pushdeploy.commands import check_command, split_command
from pushdeploy.config import Settings, validate_settings
from pushdeploy.errors import BuildError, CheckoutError, PushDeployError, StateError
from pushdeploy.layout import DeployLayout
from pushdeploy.logging import bind_context, clear_context
from pushdeploy.swap import promote, revert_instruction, rotate_backup

logger = logging.getLogger(__name__)


class DeployState(str, Enum):
    IDLE = "idle"
    CACHE_SAVED = "cache-saved"
    CHECKED_OUT = "checked-out"
    CACHE_RESTORED = "cache-restored"
    BUILT = "built"
    BACKED_UP = "backed-up"
    PROMOTED = "promoted"
    DONE = "done"
    FAILED = "failed"


_NEXT_STATE: dict[DeployState, DeployState] = {
    DeployState.IDLE: DeployState.CACHE_SAVED,
    DeployState.CACHE_SAVED: DeployState.CHECKED_OUT,
    DeployState.CHECKED_OUT: DeployState.CACHE_RESTORED,
    DeployState.CACHE_RESTORED: DeployState.BUILT,
    DeployState.BUILT: DeployState.BACKED_UP,
    DeployState.BACKED_UP: DeployState.PROMOTED,
    DeployState.PROMOTED: DeployState.DONE,
}

Notify = Callable[[DeployState, str], None]


@dataclass(slots=True)
class DeployResult:
    branch: str
    state: DeployState
    backed_up: bool
    revert_command: str
    duration_ms: int


def write_state(layout: DeployLayout, branch: str, state: DeployState, detail: str = "") -> Path:
    layout.state_file.parent.mkdir(parents=True, exist_ok=True)
    layout.state_file.write_text(
        json.dumps(
            {
                "branch": branch,
                "state": state.value,
                "detail": detail,
                "updated_at": datetime.now(UTC).isoformat(),
            }
        )
    )
    return layout.state_file


def read_state(layout: DeployLayout) -> dict[str, str]:
    if not layout.state_file.exists():
        return {}
    decoded = json.loads(layout.state_file.read_text())
    return cast(dict[str, str], decoded if isinstance(decoded, dict) else {})


class DeployPipeline:
    def __init__(
        self,
        layout: DeployLayout,
        settings: Settings,
        notify: Notify | None = None,
    ) -> None:
        self.layout = layout
        self.settings = settings
        self.notify = notify
        self.state = DeployState.IDLE
        self.branch = ""
        self.backed_up = False

    @property
    def _timeout(self) -> float | None:
        seconds = self.settings.command_timeout_seconds
        return float(seconds) if seconds > 0 else None

    def _advance(self, target: DeployState, detail: str) -> None:
        expected = _NEXT_STATE.get(self.state)
        if expected is not target:
            raise StateError(f"cannot move from {self.state.value} to {target.value}")
        self.state = target
        write_state(self.layout, self.branch, target, detail)
        logger.info("deploy %s: %s", target.value, detail)
        if self.notify is not None:
            self.notify(target, detail)

    def _fail(self, exc: PushDeployError) -> None:
        detail = f"{self.state.value}: {exc}"
        self.state = DeployState.FAILED
        write_state(self.layout, self.branch, DeployState.FAILED, detail)
        logger.error("deploy failed after %s", detail)
        if self.backed_up and self.layout.backup.is_dir() and not self.layout.live.exists():
            exc.revert_command = revert_instruction(self.layout)
            logger.error("live directory missing; revert with: %s", exc.revert_command)
        if self.notify is not None:
            self.notify(DeployState.FAILED, str(exc))

    def _clone(self) -> None:
        check_command(
            [
                "git",
                "clone",
                "--quiet",
                "--depth",
                str(self.settings.clone_depth),
                "--single-branch",
                "--branch",
                self.branch,
                self.layout.repo_url(),
                str(self.layout.checkout),
            ],
            cwd=self.layout.root,
            timeout=self._timeout,
            error_cls=CheckoutError,
        )

    def _build(self) -> None:
        for command in (self.settings.install_command, self.settings.build_command):
            result = check_command(
                split_command(command),
                cwd=self.layout.checkout,
                timeout=self._timeout,
                error_cls=BuildError,
            )
            logger.info("%s finished in %sms", result.command, result.duration_ms)
        if not self.layout.dist.is_dir():
            raise BuildError(f"build finished without output at {self.layout.dist}")

    def run(self, branch: str) -> DeployResult:
        if self.state is not DeployState.IDLE:
            raise StateError(f"pipeline already used (state {self.state.value})")
        self.branch = branch
        started = time.monotonic()
        bind_context(branch=branch)
        try:
            with preserved_cache(self.layout) as cache:
                self._advance(
                    DeployState.CACHE_SAVED,
                    f"dependency cache parked at {cache.parking_path}"
                    if cache.parked
                    else "no dependency cache to preserve",
                )
                self._clone()
                self._advance(
                    DeployState.CHECKED_OUT, f"cloned {branch} into {self.layout.checkout}"
                )
                restored = cache.restore()
                self._advance(
                    DeployState.CACHE_RESTORED,
                    "dependency cache restored" if restored else "fresh dependency install",
                )
            self._build()
            self._advance(DeployState.BUILT, f"build output at {self.layout.dist}")
            self.backed_up = rotate_backup(self.layout)
            self._advance(
                DeployState.BACKED_UP,
                f"previous build kept at {self.layout.backup}"
                if self.backed_up
                else "first deployment, nothing to back up",
            )
            promote(self.layout)
            self._advance(DeployState.PROMOTED, f"{self.layout.live} now serves {branch}")
            self._advance(DeployState.DONE, "deployment complete")
        except PushDeployError as exc:
            self._fail(exc)
            raise
        except OSError as exc:
            error = PushDeployError(f"filesystem error: {exc}")
            self._fail(error)
            raise error from exc
        finally:
            clear_context()

        return DeployResult(
            branch=branch,
            state=self.state,
            backed_up=self.backed_up,
            revert_command=revert_instruction(self.layout) if self.backed_up else "",
            duration_ms=int((time.monotonic() - started) * 1000),
        )


def deploy_branch(
    branch: str,
    settings: Settings,
    cwd: Path,
    notify: Notify | None = None,
) -> DeployResult:
    validate_settings(settings)
    layout = DeployLayout.from_settings(settings, cwd)
    return DeployPipeline(layout, settings, notify=notify).run(branch)
