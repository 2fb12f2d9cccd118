"""Job-layer installation orchestrator with a typed stage pipeline and timeline.

Stages up to `services_started` are fail-fast: the first error ends the run
with status `failed` and nothing after it runs. Stages after the services
are started are fail-soft: an unhealthy application, a rejected credential
handshake or a failed verification is reported and the run still completes.
"""

from __future__ import annotations

import logging
import os
import time
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final

from installer.adapters import DEFAULT_PREREQUISITES, OperatorPromptPort, PrerequisiteComponent
from installer.credentials import CredentialBootstrapper, CredentialBootstrapResult
from installer.domain import (
    ExistingDirectoryPolicy,
    HealthCheckResult,
    InstallationTarget,
    SecretGenerator,
    ServiceSpec,
    domain_build_stage_event,
)
from installer.environment import (
    DEFAULT_PUBLIC_HOST,
    ENV_FILE_NAME,
    LISTEN_PORT_KEY,
    PUBLIC_HOST_KEY,
    EnvironmentConfigurator,
)
from installer.errors import (
    ContainerRuntimeError,
    FatalPreconditionError,
    InstallerError,
    OperatorAbortedError,
    RepositoryAcquisitionError,
    TransientInfraError,
)
from installer.health import EndpointProbePort, HealthGate
from installer.logs import logs_success
from installer.topology import DATA_SUBDIRECTORIES, TopologyBuilder, scaffold_write_build_files, topology_default_services

from .interfaces import (
    ConfigResult,
    DirectoryLayout,
    HostAdapterFactoryPort,
    HostAdapters,
    HostInspectorPort,
    InstallationRunResult,
    InstallationState,
    JobOrchestratorPort,
    PrerequisiteReport,
    RepositoryAction,
    RepositoryResult,
    StartedServices,
    TopologyResult,
    VerificationReport,
)
from .summary import job_build_summary_lines

logger = logging.getLogger(__name__)

DATA_DIRECTORY_NAME: Final[str] = "data"
DATA_DIRECTORY_MODE: Final[int] = 0o755
_LOCAL_HOST_NAMES: Final[frozenset[str]] = frozenset({DEFAULT_PUBLIC_HOST, "127.0.0.1", "::1"})


@dataclass(frozen=True)
class InstallationOrchestratorConfig:
    """Configuration values for one installation run.

    Attributes:
        repository_url: Default repository URL.
        install_directory: Default installation directory.
        existing_directory_policy: Handling of a non-empty installation directory.
        regenerate_secrets: Mint new secrets even when the env file holds them.
        explicit_values: Operator-supplied environment values.
        prompt_for_target: Ask the operator for repository URL and directory.
        front_door_check_enabled: Probe the public host after the application is healthy.
        verification_delay_seconds: Delay before the verification pass.
        prerequisites: Components ensured before anything else.
    """

    repository_url: str
    install_directory: Path
    existing_directory_policy: ExistingDirectoryPolicy = ExistingDirectoryPolicy.REUSE
    regenerate_secrets: bool = False
    explicit_values: tuple[tuple[str, str], ...] = ()
    prompt_for_target: bool = False
    front_door_check_enabled: bool = True
    verification_delay_seconds: float = 5.0
    prerequisites: tuple[PrerequisiteComponent, ...] = DEFAULT_PREREQUISITES


class InstallationOrchestrator(JobOrchestratorPort):
    """Concrete job orchestrator for the single-host installation workflow."""

    _INSTALL_JOB_NAME = "install"

    def __init__(
        self,
        config: InstallationOrchestratorConfig,
        host_inspector: HostInspectorPort,
        adapter_factory: HostAdapterFactoryPort,
        prompt: OperatorPromptPort,
        secret_generator: SecretGenerator,
        application_gate: HealthGate,
        credential_bootstrapper: CredentialBootstrapper,
        greeting_probe: EndpointProbePort,
        health_probe: EndpointProbePort,
        front_door_gate: HealthGate | None = None,
        services: tuple[ServiceSpec, ...] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize installation orchestrator dependencies.

        Args:
            config: Run configuration.
            host_inspector: Privilege and OS detection.
            adapter_factory: Builder of host-bound adapters.
            prompt: Operator prompt adapter.
            secret_generator: Secret source for the environment configurator.
            application_gate: Health gate for the application endpoint.
            credential_bootstrapper: First credential issuance.
            greeting_probe: Probe for the root greeting marker.
            health_probe: Probe for the health marker.
            front_door_gate: Optional health gate for the public host.
            services: Service topology, defaults to the standard five services.
            sleep: Sleep function, replaceable in tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if host_inspector is None:
            raise ValueError("host_inspector must not be None")
        if adapter_factory is None:
            raise ValueError("adapter_factory must not be None")
        if prompt is None:
            raise ValueError("prompt must not be None")
        if secret_generator is None:
            raise ValueError("secret_generator must not be None")
        if application_gate is None:
            raise ValueError("application_gate must not be None")
        if credential_bootstrapper is None:
            raise ValueError("credential_bootstrapper must not be None")
        if greeting_probe is None or health_probe is None:
            raise ValueError("verification probes must not be None")
        if not config.repository_url.strip():
            raise ValueError("config.repository_url must not be blank")
        if config.verification_delay_seconds < 0:
            raise ValueError("config.verification_delay_seconds must be >= 0")

        self._config = config
        self._host_inspector = host_inspector
        self._adapter_factory = adapter_factory
        self._prompt = prompt
        self._secret_generator = secret_generator
        self._application_gate = application_gate
        self._credential_bootstrapper = credential_bootstrapper
        self._greeting_probe = greeting_probe
        self._health_probe = health_probe
        self._front_door_gate = front_door_gate
        self._services = topology_default_services() if services is None else services
        self._sleep = sleep

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._INSTALL_JOB_NAME,)

    def job_execute(self, job_name: str = _INSTALL_JOB_NAME) -> InstallationRunResult:
        """Execute the installation pipeline.

        Args:
            job_name: Name of job to execute.

        Returns:
            InstallationRunResult: Final run outcome with timeline.

        Raises:
            ValueError: Raised when job name is unsupported.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._INSTALL_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]
        reached_states: list[InstallationState] = []

        try:
            prerequisite_report, adapters = self._job_stage_prerequisites(timeline)
            reached_states.append(InstallationState.PREREQUISITES_CHECKED)

            repository_result = self._job_stage_repository(adapters, prerequisite_report, timeline)
            reached_states.append(InstallationState.REPOSITORY_ACQUIRED)

            layout = self._job_stage_directories(repository_result, timeline)
            reached_states.append(InstallationState.DIRECTORIES_PREPARED)

            config_result = self._job_stage_configuration(layout, timeline)
            reached_states.append(InstallationState.CONFIG_RESOLVED)

            topology_result = self._job_stage_topology(config_result, timeline)
            reached_states.append(InstallationState.TOPOLOGY_RENDERED)

            self._job_stage_build(adapters, topology_result, timeline)
            reached_states.append(InstallationState.SERVICES_BUILT)

            started_services = self._job_stage_start(adapters, topology_result, timeline)
            reached_states.append(InstallationState.SERVICES_STARTED)
        except OperatorAbortedError as error:
            logger.info("Installation cancelled")
            timeline.append(domain_build_stage_event(stage="run", status="aborted", details={"reason": str(error)}))
            return InstallationRunResult(
                job_name=normalized_job_name,
                status="aborted",
                error_code=error.error_code,
                error_message=str(error),
                reached_states=tuple(reached_states),
                timeline=tuple(timeline),
            )
        except (InstallerError, OSError, EOFError) as error:
            error_code = self._job_error_code_for_exception(error)
            logger.error("%s", error)
            timeline.append(
                domain_build_stage_event(
                    stage="run",
                    status="failed",
                    details={
                        "error_code": error_code,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                        "traceback": traceback.format_exc(),
                    },
                )
            )
            return InstallationRunResult(
                job_name=normalized_job_name,
                status="failed",
                error_code=error_code,
                error_message=str(error),
                reached_states=tuple(reached_states),
                timeline=tuple(timeline),
            )

        application_health = self._job_stage_application_health(started_services, timeline)
        front_door_health: HealthCheckResult | None = None
        credential: CredentialBootstrapResult | None = None
        if application_health.health_is_ready():
            reached_states.append(InstallationState.APPLICATION_HEALTHY)
            front_door_health = self._job_stage_front_door(started_services, timeline)
            credential = self._job_stage_credential(started_services, timeline)
            if credential.bootstrap_succeeded():
                reached_states.append(InstallationState.CREDENTIAL_ISSUED)
        else:
            timeline.append(
                domain_build_stage_event(
                    stage="credential",
                    status="skipped",
                    details={"reason": "application_not_healthy"},
                )
            )

        verification = self._job_stage_verification(adapters, started_services, timeline)
        if verification.verification_passed():
            reached_states.append(InstallationState.VERIFIED)

        status = "success" if application_health.health_is_ready() else "degraded"
        timeline.append(domain_build_stage_event(stage="run", status=status))
        result = InstallationRunResult(
            job_name=normalized_job_name,
            status=status,
            error_code=None if status == "success" else TransientInfraError.default_error_code,
            error_message=None if status == "success" else application_health.last_failure,
            reached_states=tuple(reached_states),
            timeline=tuple(timeline),
            started_services=started_services,
            application_health=application_health,
            front_door_health=front_door_health,
            credential=credential,
            verification=verification,
        )
        for summary_line in job_build_summary_lines(result):
            self._prompt.prompt_announce(summary_line)
        return result

    def _job_stage_prerequisites(
        self,
        timeline: list[dict[str, object]],
    ) -> tuple[PrerequisiteReport, HostAdapters]:
        """Detect the host, confirm with the operator and ensure prerequisites.

        Args:
            timeline: Mutable stage timeline events.

        Returns:
            tuple[PrerequisiteReport, HostAdapters]: Stage result and host-bound adapters.

        Raises:
            PrivilegeError: Raised when neither root nor sudo is available.
            UnsupportedOperatingSystemError: Raised when the OS cannot be detected.
            OperatorAbortedError: Raised when the operator declines to continue.
            MissingDependencyError: Raised when a prerequisite cannot be installed.
        """

        timeline.append(domain_build_stage_event(stage="prerequisites", status="started"))
        host_context = self._host_inspector.host_inspect()
        if not host_context.privilege.is_root:
            logger.info("Privileged commands will run through sudo")

        component_names = ", ".join(component.name for component in self._config.prerequisites)
        self._prompt.prompt_announce(f"Happy Server will be installed. Required components: {component_names}.")
        if not self._prompt.prompt_is_interactive():
            logger.info("Non-interactive mode, skipping confirmation")
        elif not self._prompt.prompt_confirm("Continue?", True):
            raise OperatorAbortedError("installation cancelled by operator")

        adapters = self._adapter_factory.host_build_adapters(host_context)
        statuses = tuple(
            adapters.prerequisite_installer.prereq_ensure_installed(component)
            for component in self._config.prerequisites
        )
        report = PrerequisiteReport(host_context=host_context, statuses=statuses)
        if report.prerequisite_installed_now() and not host_context.privilege.is_root:
            logger.warning("Docker was installed; log in again to use it without sudo")

        timeline.append(
            domain_build_stage_event(
                stage="prerequisites",
                status="completed",
                details={
                    "os_id": host_context.operating_system.os_id,
                    "package_family": host_context.operating_system.family,
                    "installed_now": list(report.prerequisite_installed_now()),
                },
            )
        )
        return report, adapters

    def _job_stage_repository(
        self,
        adapters: HostAdapters,
        prerequisite_report: PrerequisiteReport,
        timeline: list[dict[str, object]],
    ) -> RepositoryResult:
        """Clone, reuse or replace the installation directory.

        Args:
            adapters: Host-bound adapters.
            prerequisite_report: Prerequisite stage result.
            timeline: Mutable stage timeline events.

        Returns:
            RepositoryResult: Target and action taken.

        Raises:
            RepositoryAcquisitionError: Raised when the directory cannot be used or cloned.
        """

        timeline.append(domain_build_stage_event(stage="repository", status="started"))
        target = self._job_resolve_target()
        install_directory = target.install_directory

        if install_directory.exists() and not install_directory.is_dir():
            raise RepositoryAcquisitionError(f"{install_directory} exists and is not a directory")

        if not self._job_directory_has_content(install_directory):
            logger.info("Cloning %s into %s", target.repository_url, install_directory)
            adapters.repository_client.repository_clone(target.repository_url, install_directory)
            action = RepositoryAction.CLONED
        elif self._job_should_replace(install_directory):
            logger.info("Replacing existing directory %s", install_directory)
            adapters.repository_client.repository_remove(install_directory)
            adapters.repository_client.repository_clone(target.repository_url, install_directory)
            action = RepositoryAction.REPLACED
        else:
            logger.warning("Directory %s already exists, reusing it", install_directory)
            action = RepositoryAction.REUSED

        timeline.append(
            domain_build_stage_event(
                stage="repository",
                status="completed",
                details={
                    "repository_url": target.repository_url,
                    "install_directory": str(install_directory),
                    "action": action.value,
                    "invoking_user": prerequisite_report.host_context.privilege.invoking_user,
                },
            )
        )
        return RepositoryResult(target=target, action=action)

    def _job_stage_directories(
        self,
        repository_result: RepositoryResult,
        timeline: list[dict[str, object]],
    ) -> DirectoryLayout:
        """Create persistent data directories.

        Args:
            repository_result: Repository stage result.
            timeline: Mutable stage timeline events.

        Returns:
            DirectoryLayout: Prepared layout.

        Raises:
            FatalPreconditionError: Raised when a directory cannot be created.
        """

        timeline.append(domain_build_stage_event(stage="directories", status="started"))
        install_directory = repository_result.target.install_directory
        data_directory = install_directory / DATA_DIRECTORY_NAME
        data_subdirectories = tuple(data_directory / name for name in DATA_SUBDIRECTORIES)
        try:
            for directory in (data_directory, *data_subdirectories):
                directory.mkdir(parents=True, exist_ok=True)
                os.chmod(directory, DATA_DIRECTORY_MODE)
        except OSError as error:
            raise FatalPreconditionError(f"failed to create data directories under {data_directory}: {error}") from error

        logs_success(logger, "Data directories ready: %s", data_directory)
        logger.info("Back up %s to preserve all service data", data_directory)
        timeline.append(
            domain_build_stage_event(
                stage="directories",
                status="completed",
                details={"data_directory": str(data_directory)},
            )
        )
        return DirectoryLayout(
            install_directory=install_directory,
            data_directory=data_directory,
            data_subdirectories=data_subdirectories,
            env_file_path=install_directory / ENV_FILE_NAME,
        )

    def _job_stage_configuration(self, layout: DirectoryLayout, timeline: list[dict[str, object]]) -> ConfigResult:
        timeline.append(domain_build_stage_event(stage="configuration", status="started"))
        configurator = EnvironmentConfigurator(
            env_file_path=layout.env_file_path,
            secret_generator=self._secret_generator,
            prompt=self._prompt,
        )
        resolution = configurator.configurator_resolve(
            explicit_values=dict(self._config.explicit_values),
            regenerate=self._config.regenerate_secrets,
        )
        timeline.append(
            domain_build_stage_event(
                stage="configuration",
                status="completed",
                details={
                    "env_file_written": resolution.written,
                    "minted_keys": list(resolution.minted_keys),
                    "reused_keys": list(resolution.reused_keys),
                },
            )
        )
        return ConfigResult(layout=layout, config=resolution.config, env_file_written=resolution.written)

    def _job_stage_topology(self, config_result: ConfigResult, timeline: list[dict[str, object]]) -> TopologyResult:
        """Validate and render the topology, then write build scaffolding.

        Args:
            config_result: Configuration stage result.
            timeline: Mutable stage timeline events.

        Returns:
            TopologyResult: Rendered topology and written files.

        Raises:
            ConfigurationError: Raised for invalid topology or missing keys.
        """

        timeline.append(domain_build_stage_event(stage="topology", status="started"))
        builder = TopologyBuilder(self._services)
        rendered = builder.topology_render(config_result.config)
        install_directory = config_result.layout.install_directory
        written_paths = builder.topology_write(rendered, install_directory)
        scaffold = scaffold_write_build_files(install_directory)
        timeline.append(
            domain_build_stage_event(
                stage="topology",
                status="completed",
                details={
                    "service_order": list(rendered.service_order),
                    "scaffold_created": [path.name for path in scaffold.created_paths],
                },
            )
        )
        return TopologyResult(
            config_result=config_result,
            rendered=rendered,
            written_paths=written_paths,
            scaffold=scaffold,
        )

    def _job_stage_build(
        self,
        adapters: HostAdapters,
        topology_result: TopologyResult,
        timeline: list[dict[str, object]],
    ) -> None:
        timeline.append(domain_build_stage_event(stage="build", status="started"))
        adapters.container_runtime.runtime_build(topology_result.config_result.layout.install_directory)
        timeline.append(domain_build_stage_event(stage="build", status="completed"))

    def _job_stage_start(
        self,
        adapters: HostAdapters,
        topology_result: TopologyResult,
        timeline: list[dict[str, object]],
    ) -> StartedServices:
        """Start the topology detached.

        Args:
            adapters: Host-bound adapters.
            topology_result: Topology stage result.
            timeline: Mutable stage timeline events.

        Returns:
            StartedServices: Runtime stage result with the application base URL.

        Raises:
            ContainerRuntimeError: Raised when the runtime fails to start services.
            MissingConfigurationKeyError: Raised when the listen port is missing.
        """

        timeline.append(domain_build_stage_event(stage="start", status="started"))
        listen_port = topology_result.config_result.config.config_require(LISTEN_PORT_KEY)
        adapters.container_runtime.runtime_start(topology_result.config_result.layout.install_directory)
        logs_success(logger, "Services started")
        timeline.append(domain_build_stage_event(stage="start", status="completed"))
        return StartedServices(
            topology_result=topology_result,
            compose_command=adapters.container_runtime.runtime_command_label(),
            application_base_url=f"http://localhost:{listen_port}",
        )

    def _job_stage_application_health(
        self,
        started_services: StartedServices,
        timeline: list[dict[str, object]],
    ) -> HealthCheckResult:
        timeline.append(domain_build_stage_event(stage="application_health", status="started"))
        logger.info("Waiting for the application to become healthy...")
        result = self._application_gate.gate_wait(f"{started_services.application_base_url}/health")
        if result.health_is_ready():
            logs_success(logger, "Application is healthy")
        else:
            logger.warning(
                "Application did not become healthy after %s attempts (%s); check the container logs",
                result.attempt,
                result.last_failure,
            )
        timeline.append(
            domain_build_stage_event(
                stage="application_health",
                status=result.outcome.value,
                details={"attempt": result.attempt, "last_failure": result.last_failure},
            )
        )
        return result

    def _job_stage_front_door(
        self,
        started_services: StartedServices,
        timeline: list[dict[str, object]],
    ) -> HealthCheckResult | None:
        """Probe the public host, independently of the application result.

        Args:
            started_services: Runtime stage result.
            timeline: Mutable stage timeline events.

        Returns:
            HealthCheckResult | None: Probe result, or None when skipped.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        config = started_services.topology_result.config_result.config
        public_host = config.config_get(PUBLIC_HOST_KEY) or DEFAULT_PUBLIC_HOST
        if self._front_door_gate is None or not self._config.front_door_check_enabled:
            timeline.append(domain_build_stage_event(stage="front_door", status="skipped", details={"reason": "disabled"}))
            return None
        if public_host in _LOCAL_HOST_NAMES:
            timeline.append(
                domain_build_stage_event(stage="front_door", status="skipped", details={"reason": "local_public_host"})
            )
            return None

        result = self._front_door_gate.gate_wait(f"https://{public_host}/health")
        if result.health_is_ready():
            logs_success(logger, "Front door https://%s is reachable", public_host)
        else:
            logger.warning("Front door https://%s is not reachable yet: %s", public_host, result.last_failure)
        timeline.append(
            domain_build_stage_event(
                stage="front_door",
                status=result.outcome.value,
                details={"attempt": result.attempt, "last_failure": result.last_failure},
            )
        )
        return result

    def _job_stage_credential(
        self,
        started_services: StartedServices,
        timeline: list[dict[str, object]],
    ) -> CredentialBootstrapResult:
        timeline.append(domain_build_stage_event(stage="credential", status="started"))
        result = self._credential_bootstrapper.bootstrap_issue(started_services.application_base_url)
        if not result.bootstrap_succeeded():
            logger.warning("Could not issue access.key automatically; create it manually with the happy CLI")
        timeline.append(
            domain_build_stage_event(
                stage="credential",
                status=result.status.value,
                details={"failure_reason": result.failure_reason} if result.failure_reason else None,
            )
        )
        return result

    def _job_stage_verification(
        self,
        adapters: HostAdapters,
        started_services: StartedServices,
        timeline: list[dict[str, object]],
    ) -> VerificationReport:
        """Run the final greeting, health and container status checks.

        Args:
            adapters: Host-bound adapters.
            started_services: Runtime stage result.
            timeline: Mutable stage timeline events.

        Returns:
            VerificationReport: Verification outcome.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        timeline.append(domain_build_stage_event(stage="verification", status="started"))
        logger.info("Verifying installation...")
        if self._config.verification_delay_seconds > 0:
            self._sleep(self._config.verification_delay_seconds)

        base_url = started_services.application_base_url
        greeting_check = HealthGate(self._greeting_probe, interval_seconds=0, max_attempts=1).gate_wait(f"{base_url}/")
        health_check = HealthGate(self._health_probe, interval_seconds=0, max_attempts=1).gate_wait(f"{base_url}/health")
        for label, check in (("Base connection", greeting_check), ("Health check", health_check)):
            if check.health_is_ready():
                logs_success(logger, "%s OK", label)
            else:
                logger.error("%s failed: %s", label, check.last_failure)

        container_status: str | None
        try:
            container_status = adapters.container_runtime.runtime_status(
                started_services.topology_result.config_result.layout.install_directory
            )
        except ContainerRuntimeError as error:
            logger.warning("Unable to list container status: %s", error)
            container_status = None
        if container_status:
            self._prompt.prompt_announce("Container status:")
            self._prompt.prompt_announce(container_status.rstrip())

        report = VerificationReport(
            greeting_check=greeting_check,
            health_check=health_check,
            container_status=container_status,
        )
        timeline.append(
            domain_build_stage_event(
                stage="verification",
                status="completed" if report.verification_passed() else "failed",
                details={
                    "greeting": greeting_check.outcome.value,
                    "health": health_check.outcome.value,
                },
            )
        )
        return report

    def _job_resolve_target(self) -> InstallationTarget:
        repository_url = self._config.repository_url
        install_directory = self._config.install_directory
        if self._config.prompt_for_target and self._prompt.prompt_is_interactive():
            repository_url = self._prompt.prompt_text("Repository URL", repository_url).strip() or repository_url
            answered_directory = self._prompt.prompt_text("Install directory", str(install_directory)).strip()
            install_directory = Path(answered_directory).expanduser().resolve() if answered_directory else install_directory
        return InstallationTarget(repository_url=repository_url, install_directory=install_directory)

    def _job_directory_has_content(self, directory: Path) -> bool:
        if not directory.is_dir():
            return False
        return any(directory.iterdir())

    def _job_should_replace(self, directory: Path) -> bool:
        """Decide whether a non-empty directory is deleted and cloned again.

        Args:
            directory: Existing non-empty installation directory.

        Returns:
            bool: True only after explicit confirmation.

        Raises:
            EOFError: Raised when operator input closes during the prompt.
        """

        if self._prompt.prompt_is_interactive():
            return self._prompt.prompt_confirm(f"{directory} already exists. Delete it and clone again?", False)
        return self._config.existing_directory_policy is ExistingDirectoryPolicy.REPLACE

    def _job_error_code_for_exception(self, error: BaseException) -> str:
        """Map a pre-start failure to a deterministic error code.

        Args:
            error: Caught workflow exception.

        Returns:
            str: Deterministic error code.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if isinstance(error, InstallerError):
            return error.error_code
        if isinstance(error, EOFError):
            return "INSTALL_OPERATOR_INPUT_CLOSED"
        if isinstance(error, OSError):
            return "INSTALL_HOST_IO_ERROR"
        return "INSTALL_UNEXPECTED_ERROR"
