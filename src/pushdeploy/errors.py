"""pushdeploy exception hierarchy.

All pushdeploy-specific exceptions inherit from PushDeployError,
so the CLI can turn any deployment failure into a single exit path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pushdeploy.commands import CommandResult


class PushDeployError(Exception):
    """Base exception for all pushdeploy errors.

    ``retryable`` marks failures worth re-running unchanged (a timed-out
    command). ``revert_command`` is set by the pipeline when the live
    directory was already moved to the backup slot before the failure.
    """

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.revert_command = ""


class ConfigError(PushDeployError):
    """Invalid or missing configuration."""


class TriggerError(PushDeployError):
    """Malformed update record on the hook's stdin."""


class CommandError(PushDeployError):
    """An external command exited non-zero, timed out, or could not start."""

    def __init__(
        self,
        message: str = "",
        *,
        result: CommandResult | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.result = result

    @property
    def exit_code(self) -> int | None:
        return None if self.result is None else self.result.exit_code


class CheckoutError(CommandError):
    """The clone of the pushed branch failed."""


class BuildError(CommandError):
    """The install or build step failed."""


class PromotionError(PushDeployError):
    """Build output could not be swapped into the live location."""


class StateError(PushDeployError):
    """A pipeline step ran out of order."""
