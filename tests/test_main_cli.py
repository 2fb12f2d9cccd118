"""Tests for command-line parsing, exit codes and bootstrap wiring."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path

import pytest

import installer.main as main_module
from installer.adapters import UnattendedOperatorPrompt
from installer.bootstrap import bootstrap_create_installation_orchestrator, bootstrap_open_operator_prompt
from installer.config import InstallerSettings, config_load_settings
from installer.domain import ExistingDirectoryPolicy
from installer.jobs import InstallationOrchestrator


@dataclass(frozen=True)
class _StubRunResult:
    status: str
    exit_code: int
    error_code: str | None = None
    error_message: str | None = None

    def run_exit_code(self) -> int:
        return self.exit_code


class _StubOrchestrator:
    """Test double orchestrator returning a fixed run result."""

    def __init__(self, result: _StubRunResult):
        self._result = result
        self.job_names: list[str] = []

    def job_execute(self, job_name: str = "install") -> _StubRunResult:
        self.job_names.append(job_name)
        return self._result


def _install_stub_orchestrator(monkeypatch: pytest.MonkeyPatch, result: _StubRunResult) -> list[dict[str, object]]:
    """Replace orchestrator wiring in the main module with a stub.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        result: Result the stub orchestrator returns.

    Returns:
        list[dict[str, object]]: Captured wiring calls.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    captured_calls: list[dict[str, object]] = []

    def _fake_create(
        settings: InstallerSettings,
        exit_stack: ExitStack,
        explicit_values: dict[str, str] | None = None,
        prompt_for_target: bool = False,
    ) -> _StubOrchestrator:
        captured_calls.append(
            {"settings": settings, "explicit_values": explicit_values, "prompt_for_target": prompt_for_target}
        )
        return _StubOrchestrator(result)

    monkeypatch.setattr(main_module, "bootstrap_create_installation_orchestrator", _fake_create)
    return captured_calls


def test_main_success_returns_normally_and_passes_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Wire parsed flags into settings and return on a successful run.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate settings and explicit values.

    Raises:
        AssertionError: Raised when flags are not honored.
    """

    captured_calls = _install_stub_orchestrator(monkeypatch, _StubRunResult(status="success", exit_code=0))

    main_module.main(
        [
            "-y",
            "--install-dir",
            str(tmp_path / "happy"),
            "--replace-existing",
            "--set",
            "PUBLIC_HOST=happy.example.com",
            "--set",
            "LISTEN_PORT=9000",
        ]
    )

    settings = captured_calls[0]["settings"]
    assert isinstance(settings, InstallerSettings)
    assert settings.non_interactive is True
    assert settings.install_directory == tmp_path / "happy"
    assert settings.existing_directory_policy is ExistingDirectoryPolicy.REPLACE
    assert captured_calls[0]["explicit_values"] == {"PUBLIC_HOST": "happy.example.com", "LISTEN_PORT": "9000"}
    assert captured_calls[0]["prompt_for_target"] is False


@pytest.mark.parametrize(("status", "exit_code"), [("failed", 1), ("degraded", 3)])
def test_main_non_success_status_exits_with_run_code(
    monkeypatch: pytest.MonkeyPatch,
    status: str,
    exit_code: int,
) -> None:
    _install_stub_orchestrator(
        monkeypatch,
        _StubRunResult(status=status, exit_code=exit_code, error_code="INSTALL_HEALTH_TIMEOUT", error_message="timeout"),
    )

    with pytest.raises(SystemExit) as exit_info:
        main_module.main(["-y"])
    assert exit_info.value.code == exit_code


def test_main_without_target_flags_asks_for_target(monkeypatch: pytest.MonkeyPatch) -> None:
    captured_calls = _install_stub_orchestrator(monkeypatch, _StubRunResult(status="aborted", exit_code=0))

    main_module.main([])

    assert captured_calls[0]["prompt_for_target"] is True


def test_main_malformed_set_value_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exit_info:
        main_module.main(["--set", "NO_SEPARATOR"])
    assert exit_info.value.code == 2


def test_main_invalid_settings_exit_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HAPPY_INSTALL_HEALTH_MAX_ATTEMPTS", "0")

    with pytest.raises(SystemExit) as exit_info:
        main_module.main(["-y"])
    assert exit_info.value.code == 1


def test_bootstrap_non_interactive_wiring_uses_unattended_prompt(tmp_path: Path) -> None:
    settings = config_load_settings(
        non_interactive=True,
        install_directory=tmp_path / "happy",
        access_key_directory=tmp_path / ".happy",
    )

    with ExitStack() as exit_stack:
        prompt = bootstrap_open_operator_prompt(non_interactive=True, exit_stack=exit_stack)
        orchestrator = bootstrap_create_installation_orchestrator(settings=settings, exit_stack=exit_stack)

    assert isinstance(prompt, UnattendedOperatorPrompt)
    assert isinstance(orchestrator, InstallationOrchestrator)
    assert orchestrator.job_supported_names() == ("install",)
