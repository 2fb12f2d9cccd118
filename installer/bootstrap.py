"""Installer bootstrap wiring for settings validation and dependency assembly."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Final

import httpx

from installer.adapters import (
    ConsoleOperatorPrompt,
    DockerComposeRuntime,
    GitRepositoryClient,
    OperatorPromptPort,
    PackageManagerPrerequisiteInstaller,
    SystemCommandRunner,
    UnattendedOperatorPrompt,
    host_detect_operating_system,
    host_detect_privilege,
)
from installer.config import InstallerSettings
from installer.credentials import AccessKeyStore, CredentialBootstrapper
from installer.domain import SecretGenerator
from installer.health import HealthGate, HttpMarkerProbe
from installer.jobs import (
    HostAdapterFactoryPort,
    HostAdapters,
    HostContext,
    HostInspectorPort,
    InstallationOrchestrator,
    InstallationOrchestratorConfig,
)

logger = logging.getLogger(__name__)

CONTROLLING_TERMINAL_PATH: Final[str] = "/dev/tty"
HEALTH_MARKER: Final[str] = "ok"
GREETING_MARKER: Final[str] = "Welcome to Happy Server"
FRONT_DOOR_INTERVAL_SECONDS: Final[float] = 3.0


class SystemHostInspector(HostInspectorPort):
    """Detect privilege and operating system of the running host."""

    def __init__(self, os_release_path: Path):
        self._os_release_path = os_release_path

    def host_inspect(self) -> HostContext:
        """Detect host context.

        Returns:
            HostContext: Privilege and operating system.

        Raises:
            PrivilegeError: Raised when neither root nor sudo is available.
            UnsupportedOperatingSystemError: Raised when the OS cannot be detected.
        """

        privilege = host_detect_privilege()
        operating_system = host_detect_operating_system(self._os_release_path)
        return HostContext(privilege=privilege, operating_system=operating_system)


class SystemHostAdapterFactory(HostAdapterFactoryPort):
    """Build command-backed adapters bound to the detected privilege context."""

    def host_build_adapters(self, host_context: HostContext) -> HostAdapters:
        runner = SystemCommandRunner(privilege_prefix=host_context.privilege.command_prefix)
        return HostAdapters(
            prerequisite_installer=PackageManagerPrerequisiteInstaller(
                runner=runner,
                operating_system=host_context.operating_system,
                privilege=host_context.privilege,
            ),
            repository_client=GitRepositoryClient(runner=runner, privilege=host_context.privilege),
            # The invoking user may not be in the docker group until the next login.
            container_runtime=DockerComposeRuntime(runner=runner, privileged=not host_context.privilege.is_root),
        )


def bootstrap_open_operator_prompt(non_interactive: bool, exit_stack: ExitStack) -> OperatorPromptPort:
    """Choose the operator prompt for this run.

    When standard input is piped (for example `curl ... | sh` style launches),
    answers are read from the controlling terminal instead.

    Args:
        non_interactive: Whether every prompt is answered with its default.
        exit_stack: Owner of any opened terminal handle.

    Returns:
        OperatorPromptPort: Console or unattended prompt.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if non_interactive:
        return UnattendedOperatorPrompt()
    if sys.stdin is not None and sys.stdin.isatty():
        return ConsoleOperatorPrompt()
    try:
        terminal_stream = exit_stack.enter_context(open(CONTROLLING_TERMINAL_PATH, encoding="utf-8"))
    except OSError as error:
        logger.warning("No terminal available for prompts (%s); continuing non-interactively", error)
        return UnattendedOperatorPrompt()
    return ConsoleOperatorPrompt(input_stream=terminal_stream)


def bootstrap_create_installation_orchestrator(
    settings: InstallerSettings,
    exit_stack: ExitStack,
    explicit_values: dict[str, str] | None = None,
    prompt_for_target: bool = False,
) -> InstallationOrchestrator:
    """Assemble a fully wired installation orchestrator.

    Args:
        settings: Validated installer settings.
        exit_stack: Owner of the HTTP client and terminal handle lifetimes.
        explicit_values: Operator-supplied environment values.
        prompt_for_target: Ask for repository URL and install directory interactively.

    Returns:
        InstallationOrchestrator: Orchestrator ready for `job_execute`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    prompt = bootstrap_open_operator_prompt(non_interactive=settings.non_interactive, exit_stack=exit_stack)
    http_client = exit_stack.enter_context(httpx.Client(timeout=settings.request_timeout_seconds))
    health_probe = HttpMarkerProbe(http_client, HEALTH_MARKER, settings.request_timeout_seconds)

    front_door_gate: HealthGate | None = None
    if settings.front_door_check_enabled:
        front_door_gate = HealthGate(
            probe=health_probe,
            interval_seconds=FRONT_DOOR_INTERVAL_SECONDS,
            max_attempts=settings.front_door_max_attempts,
        )

    return InstallationOrchestrator(
        config=InstallationOrchestratorConfig(
            repository_url=settings.repository_url,
            install_directory=settings.install_directory,
            existing_directory_policy=settings.existing_directory_policy,
            regenerate_secrets=settings.regenerate_secrets,
            explicit_values=tuple((explicit_values or {}).items()),
            prompt_for_target=prompt_for_target,
            front_door_check_enabled=settings.front_door_check_enabled,
            verification_delay_seconds=settings.verification_delay_seconds,
        ),
        host_inspector=SystemHostInspector(os_release_path=settings.os_release_path),
        adapter_factory=SystemHostAdapterFactory(),
        prompt=prompt,
        secret_generator=SecretGenerator(),
        application_gate=HealthGate(
            probe=health_probe,
            interval_seconds=settings.health_interval_seconds,
            max_attempts=settings.health_max_attempts,
            initial_delay_seconds=settings.health_initial_delay_seconds,
        ),
        credential_bootstrapper=CredentialBootstrapper(
            client=http_client,
            store=AccessKeyStore(directory=settings.access_key_directory),
            timeout_seconds=max(settings.request_timeout_seconds, 10.0),
        ),
        greeting_probe=HttpMarkerProbe(http_client, GREETING_MARKER, settings.request_timeout_seconds),
        health_probe=health_probe,
        front_door_gate=front_door_gate,
    )
