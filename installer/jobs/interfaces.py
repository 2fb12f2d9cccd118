"""Typed interfaces and stage results for installation orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from installer.adapters import (
    ContainerRuntimePort,
    OperatingSystemInfo,
    PrerequisiteInstallerPort,
    PrerequisiteStatus,
    PrivilegeContext,
    RepositoryClientPort,
)
from installer.credentials import CredentialBootstrapResult
from installer.domain import EnvironmentConfig, HealthCheckResult, InstallationTarget
from installer.topology import RenderedTopology, ScaffoldResult


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one installer workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state.
    """

    job_name: str
    status: str


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating installer workflows."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when the job name is unsupported.
        """


class InstallationState(str, Enum):
    """Installation pipeline states in the order they are reached."""

    PREREQUISITES_CHECKED = "prerequisites_checked"
    REPOSITORY_ACQUIRED = "repository_acquired"
    DIRECTORIES_PREPARED = "directories_prepared"
    CONFIG_RESOLVED = "config_resolved"
    TOPOLOGY_RENDERED = "topology_rendered"
    SERVICES_BUILT = "services_built"
    SERVICES_STARTED = "services_started"
    APPLICATION_HEALTHY = "application_healthy"
    CREDENTIAL_ISSUED = "credential_issued"
    VERIFIED = "verified"


class RepositoryAction(str, Enum):
    """How the installation directory was obtained."""

    CLONED = "cloned"
    REUSED = "reused"
    REPLACED = "replaced"


@dataclass(frozen=True)
class HostContext:
    """Detected privilege and operating system of the host.

    Attributes:
        privilege: Root or sudo context.
        operating_system: Parsed os-release identity.
    """

    privilege: PrivilegeContext
    operating_system: OperatingSystemInfo


@dataclass(frozen=True)
class HostAdapters:
    """Host-bound adapters created once privilege and OS are known.

    Attributes:
        prerequisite_installer: Ensure-installed capability.
        repository_client: Repository clone/remove capability.
        container_runtime: Compose build/start/status capability.
    """

    prerequisite_installer: PrerequisiteInstallerPort
    repository_client: RepositoryClientPort
    container_runtime: ContainerRuntimePort


class HostInspectorPort(Protocol):
    """Port detecting privilege and operating system."""

    def host_inspect(self) -> HostContext:
        """Detect host context.

        Returns:
            HostContext: Privilege and operating system.

        Raises:
            PrivilegeError: Raised when neither root nor sudo is available.
            UnsupportedOperatingSystemError: Raised when the OS cannot be detected.
        """


class HostAdapterFactoryPort(Protocol):
    """Port building host-bound adapters from the detected host context."""

    def host_build_adapters(self, host_context: HostContext) -> HostAdapters:
        """Build adapters for host context.

        Args:
            host_context: Detected host context.

        Returns:
            HostAdapters: Host-bound adapters.

        Raises:
            RuntimeError: Implementations do not raise runtime errors.
        """


@dataclass(frozen=True)
class PrerequisiteReport:
    """Prerequisite stage result.

    Attributes:
        host_context: Detected host context.
        statuses: Ensure-installed outcome per component.
    """

    host_context: HostContext
    statuses: tuple[PrerequisiteStatus, ...]

    def prerequisite_installed_now(self) -> tuple[str, ...]:
        """Return names of components installed in this run."""

        return tuple(status.component_name for status in self.statuses if status.installed_now)


@dataclass(frozen=True)
class RepositoryResult:
    """Repository stage result.

    Attributes:
        target: Repository source and destination.
        action: How the directory was obtained.
    """

    target: InstallationTarget
    action: RepositoryAction


@dataclass(frozen=True)
class DirectoryLayout:
    """Directory stage result.

    Attributes:
        install_directory: Deployment directory.
        data_directory: Persistent data root.
        data_subdirectories: Per-service data directories.
        env_file_path: Environment file location.
    """

    install_directory: Path
    data_directory: Path
    data_subdirectories: tuple[Path, ...]
    env_file_path: Path


@dataclass(frozen=True)
class ConfigResult:
    """Configuration stage result.

    Attributes:
        layout: Prepared directory layout.
        config: Resolved environment config.
        env_file_written: Whether the env file changed in this run.
    """

    layout: DirectoryLayout
    config: EnvironmentConfig
    env_file_written: bool


@dataclass(frozen=True)
class TopologyResult:
    """Topology stage result.

    Attributes:
        config_result: Configuration stage result.
        rendered: Rendered descriptor.
        written_paths: Files written by the render.
        scaffold: Build scaffolding outcome.
    """

    config_result: ConfigResult
    rendered: RenderedTopology
    written_paths: tuple[Path, ...]
    scaffold: ScaffoldResult


@dataclass(frozen=True)
class StartedServices:
    """Runtime stage result.

    Attributes:
        topology_result: Topology stage result.
        compose_command: Compose command used, for operator hints.
        application_base_url: Local base URL of the application service.
    """

    topology_result: TopologyResult
    compose_command: str
    application_base_url: str


@dataclass(frozen=True)
class VerificationReport:
    """Verification pass result.

    Attributes:
        greeting_check: Root endpoint greeting probe.
        health_check: Health endpoint probe.
        container_status: Container status listing, when available.
    """

    greeting_check: HealthCheckResult
    health_check: HealthCheckResult
    container_status: str | None

    def verification_passed(self) -> bool:
        """Return whether both endpoint checks passed."""

        return self.greeting_check.health_is_ready() and self.health_check.health_is_ready()


@dataclass(frozen=True)
class InstallationRunResult(JobExecutionResult):
    """Final installation run outcome.

    Status is one of `success`, `degraded` (services started but the
    application never reported healthy), `failed` (aborted before services
    started) or `aborted` (operator declined to continue).

    Attributes:
        error_code: Deterministic error code when failed.
        error_message: Failure message when failed.
        reached_states: Pipeline states reached in order.
        timeline: Stage timeline events.
        started_services: Runtime stage result when services started.
        application_health: Application health gate result.
        front_door_health: Front-door probe result when checked.
        credential: Credential bootstrap result when attempted.
        verification: Verification pass result.
    """

    error_code: str | None = None
    error_message: str | None = None
    reached_states: tuple[InstallationState, ...] = ()
    timeline: tuple[dict[str, object], ...] = field(default=(), repr=False)
    started_services: StartedServices | None = None
    application_health: HealthCheckResult | None = None
    front_door_health: HealthCheckResult | None = None
    credential: CredentialBootstrapResult | None = None
    verification: VerificationReport | None = None

    def run_exit_code(self) -> int:
        """Map run status to the process exit code.

        Returns:
            int: `0` success or aborted, `1` failed, `3` degraded.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.status == "failed":
            return 1
        if self.status == "degraded":
            return 3
        return 0
