"""Tests for error hierarchy."""

from pushdeploy.commands import CommandResult
from pushdeploy.errors import (
    BuildError,
    CheckoutError,
    CommandError,
    ConfigError,
    PromotionError,
    PushDeployError,
    StateError,
    TriggerError,
)


def test_hierarchy() -> None:
    assert issubclass(ConfigError, PushDeployError)
    assert issubclass(TriggerError, PushDeployError)
    assert issubclass(CommandError, PushDeployError)
    assert issubclass(CheckoutError, CommandError)
    assert issubclass(BuildError, CommandError)
    assert issubclass(PromotionError, PushDeployError)
    assert issubclass(StateError, PushDeployError)


def test_retryable_default() -> None:
    assert PushDeployError("test").retryable is False
    assert BuildError("test").retryable is False


def test_command_error_carries_result() -> None:
    result = CommandResult(
        command="gulp", exit_code=2, ok=False, stdout="", stderr="boom", duration_ms=5
    )
    err = BuildError("gulp failed", result=result)
    assert str(err) == "gulp failed"
    assert err.exit_code == 2
    assert err.result is result
    assert BuildError("no output").exit_code is None


def test_revert_command_defaults_to_empty() -> None:
    assert PushDeployError("test").revert_command == ""
