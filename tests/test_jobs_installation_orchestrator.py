"""Integration-style tests for the installation orchestrator.

Host-bound adapters are replaced with recording doubles, while the
environment configurator, topology builder, health gate and credential
bootstrapper run for real against a temporary directory.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import httpx
import pytest
import yaml

from installer.adapters import (
    OperatingSystemInfo,
    PrerequisiteComponent,
    PrerequisiteStatus,
    PrivilegeContext,
    UnattendedOperatorPrompt,
)
from installer.credentials import AccessKeyStore, CredentialBootstrapper
from installer.domain import ExistingDirectoryPolicy, HealthOutcome, SecretGenerator, domain_timeline_stage_statuses
from installer.environment import PUBLIC_HOST_KEY, REQUIRED_ENVIRONMENT_KEYS, env_file_read
from installer.errors import ContainerRuntimeError, MissingDependencyError, PrivilegeError
from installer.health import HealthGate, HttpMarkerProbe, ProbeObservation
from installer.jobs import (
    HostAdapters,
    HostContext,
    InstallationOrchestrator,
    InstallationOrchestratorConfig,
    InstallationState,
)
from installer.topology import COMPOSE_FILE_NAME

_REPOSITORY_URL = "https://github.com/example/happy-server.git"
_OPERATOR = PrivilegeContext(is_root=True, command_prefix=(), invoking_uid=0, invoking_gid=0, invoking_user=None)
_UBUNTU = OperatingSystemInfo(os_id="ubuntu", version_id="22.04", version_codename="jammy", family="apt")
_PREREQUISITES = (PrerequisiteComponent(name="docker", executables=("docker",)),)


class _StubHostInspector:
    """Test double host inspector returning a fixed context or raising."""

    def __init__(self, error: Exception | None = None):
        self._error = error

    def host_inspect(self) -> HostContext:
        if self._error is not None:
            raise self._error
        return HostContext(privilege=_OPERATOR, operating_system=_UBUNTU)


class _StubPrerequisiteInstaller:
    """Test double reporting every component as present unless told to fail."""

    def __init__(self, error: Exception | None = None):
        self._error = error
        self.ensured: list[str] = []

    def prereq_ensure_installed(self, component: PrerequisiteComponent) -> PrerequisiteStatus:
        self.ensured.append(component.name)
        if self._error is not None:
            raise self._error
        return PrerequisiteStatus(
            component_name=component.name,
            executable_paths=tuple((executable, f"/usr/bin/{executable}") for executable in component.executables),
            installed_now=False,
        )


class _StubRepositoryClient:
    """Test double clone that creates a checkout marker file."""

    def __init__(self):
        self.calls: list[tuple[str, Path]] = []

    def repository_clone(self, repository_url: str, destination: Path) -> None:
        self.calls.append(("clone", destination))
        destination.mkdir(parents=True, exist_ok=True)
        (destination / "package.json").write_text("{}\n", encoding="utf-8")

    def repository_remove(self, destination: Path) -> None:
        self.calls.append(("remove", destination))
        for child in destination.iterdir():
            child.unlink()
        destination.rmdir()


class _StubContainerRuntime:
    """Test double recording compose actions."""

    def __init__(self, start_error: Exception | None = None):
        self._start_error = start_error
        self.actions: list[str] = []

    def runtime_command_label(self) -> str:
        return "docker compose"

    def runtime_build(self, project_directory: Path) -> None:
        self.actions.append("build")

    def runtime_start(self, project_directory: Path) -> None:
        self.actions.append("start")
        if self._start_error is not None:
            raise self._start_error

    def runtime_status(self, project_directory: Path) -> str:
        self.actions.append("status")
        return "NAME           STATUS\nhappy-server   Up\n"


class _StubAdapterFactory:
    """Test double returning pre-built host adapters."""

    def __init__(self, adapters: HostAdapters):
        self._adapters = adapters
        self.host_contexts: list[HostContext] = []

    def host_build_adapters(self, host_context: HostContext) -> HostAdapters:
        self.host_contexts.append(host_context)
        return self._adapters


class _FixedProbe:
    """Test double probe with a constant observation."""

    def __init__(self, passed: bool):
        self._passed = passed
        self.endpoints: list[str] = []

    def probe_check(self, endpoint: str) -> ProbeObservation:
        self.endpoints.append(endpoint)
        if self._passed:
            return ProbeObservation(passed=True)
        return ProbeObservation(passed=False, failure_reason="ConnectError: connection refused")


class _ScriptedConsolePrompt(UnattendedOperatorPrompt):
    """Interactive test prompt answering confirmations from a queue."""

    def __init__(self, confirms: list[bool]):
        super().__init__(output_stream=io.StringIO())
        self._confirms = list(confirms)
        self.confirm_questions: list[str] = []

    def prompt_is_interactive(self) -> bool:
        return True

    def prompt_confirm(self, question: str, default: bool) -> bool:
        self.confirm_questions.append(question)
        return self._confirms.pop(0) if self._confirms else default


def _auth_transport(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "token": "issued-token"})


def _create_orchestrator(
    tmp_path: Path,
    healthy: bool = True,
    prompt: UnattendedOperatorPrompt | None = None,
    host_inspector: _StubHostInspector | None = None,
    prerequisite_installer: _StubPrerequisiteInstaller | None = None,
    container_runtime: _StubContainerRuntime | None = None,
    policy: ExistingDirectoryPolicy = ExistingDirectoryPolicy.REUSE,
    explicit_values: tuple[tuple[str, str], ...] = (),
    front_door_gate: HealthGate | None = None,
) -> tuple[InstallationOrchestrator, _StubRepositoryClient, _StubContainerRuntime, UnattendedOperatorPrompt, list[float]]:
    """Build an orchestrator wired with doubles rooted at `tmp_path`.

    Args:
        tmp_path: Pytest temporary directory fixture.
        healthy: Whether the application health probe passes.
        prompt: Optional prompt override.
        host_inspector: Optional host inspector override.
        prerequisite_installer: Optional prerequisite installer override.
        container_runtime: Optional container runtime override.
        policy: Existing directory policy.
        explicit_values: Operator-supplied environment values.
        front_door_gate: Optional health gate for the public host.

    Returns:
        tuple: Orchestrator with its repository client, runtime, prompt and sleep log.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    repository_client = _StubRepositoryClient()
    resolved_runtime = container_runtime or _StubContainerRuntime()
    resolved_prompt = prompt or UnattendedOperatorPrompt(output_stream=io.StringIO())
    sleep_calls: list[float] = []
    adapters = HostAdapters(
        prerequisite_installer=prerequisite_installer or _StubPrerequisiteInstaller(),
        repository_client=repository_client,
        container_runtime=resolved_runtime,
    )
    client = httpx.Client(transport=httpx.MockTransport(_auth_transport))
    orchestrator = InstallationOrchestrator(
        config=InstallationOrchestratorConfig(
            repository_url=_REPOSITORY_URL,
            install_directory=tmp_path / "happy-server",
            existing_directory_policy=policy,
            prerequisites=_PREREQUISITES,
            explicit_values=explicit_values,
        ),
        host_inspector=host_inspector or _StubHostInspector(),
        adapter_factory=_StubAdapterFactory(adapters),
        prompt=resolved_prompt,
        secret_generator=SecretGenerator(),
        application_gate=HealthGate(
            probe=_FixedProbe(healthy),
            interval_seconds=2,
            max_attempts=3,
            sleep=sleep_calls.append,
        ),
        credential_bootstrapper=CredentialBootstrapper(
            client=client,
            store=AccessKeyStore(directory=tmp_path / "home" / ".happy"),
        ),
        greeting_probe=_FixedProbe(healthy),
        health_probe=_FixedProbe(healthy),
        front_door_gate=front_door_gate,
        sleep=sleep_calls.append,
    )
    return orchestrator, repository_client, resolved_runtime, resolved_prompt, sleep_calls


def test_jobs_unattended_install_reaches_verified_state(tmp_path: Path) -> None:
    """Run the full pipeline on a fresh host and inspect every artifact.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate status, files, timeline and summary.

    Raises:
        AssertionError: Raised when the pipeline deviates from the happy path.
    """

    output_stream = io.StringIO()
    orchestrator, repository_client, runtime, _, sleep_calls = _create_orchestrator(
        tmp_path,
        prompt=UnattendedOperatorPrompt(output_stream=output_stream),
    )
    install_directory = tmp_path / "happy-server"

    result = orchestrator.job_execute()

    assert result.status == "success"
    assert result.run_exit_code() == 0
    assert result.error_code is None
    assert result.reached_states == (
        InstallationState.PREREQUISITES_CHECKED,
        InstallationState.REPOSITORY_ACQUIRED,
        InstallationState.DIRECTORIES_PREPARED,
        InstallationState.CONFIG_RESOLVED,
        InstallationState.TOPOLOGY_RENDERED,
        InstallationState.SERVICES_BUILT,
        InstallationState.SERVICES_STARTED,
        InstallationState.APPLICATION_HEALTHY,
        InstallationState.CREDENTIAL_ISSUED,
        InstallationState.VERIFIED,
    )
    assert repository_client.calls == [("clone", install_directory)]
    assert runtime.actions == ["build", "start", "status"]
    assert sleep_calls == [5.0]

    assert tuple(env_file_read(install_directory / ".env")) == REQUIRED_ENVIRONMENT_KEYS
    compose_document = yaml.safe_load((install_directory / COMPOSE_FILE_NAME).read_text(encoding="utf-8"))
    assert len(compose_document["services"]) == 5
    assert (install_directory / "data" / "postgres").is_dir()

    access_key = json.loads((tmp_path / "home" / ".happy" / "access.key").read_text(encoding="utf-8"))
    assert access_key["token"] == "issued-token"

    timeline = list(result.timeline)
    assert domain_timeline_stage_statuses(timeline, "application_health") == ["started", "ready"]
    assert domain_timeline_stage_statuses(timeline, "front_door") == ["skipped"]
    assert domain_timeline_stage_statuses(timeline, "run") == ["started", "success"]
    announced = output_stream.getvalue()
    assert "HAPPY_SERVER_URL=http://localhost:8080 happy daemon start" in announced
    assert "Container status:" in announced


def test_jobs_unhealthy_application_degrades_and_skips_credential(tmp_path: Path) -> None:
    """Finish in degraded state when the health gate is exhausted.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate degraded status and skipped credential.

    Raises:
        AssertionError: Raised when an unhealthy run is reported as success.
    """

    orchestrator, _, runtime, _, sleep_calls = _create_orchestrator(tmp_path, healthy=False)

    result = orchestrator.job_execute()

    assert result.status == "degraded"
    assert result.run_exit_code() == 3
    assert result.error_code == "INSTALL_HEALTH_TIMEOUT"
    assert result.error_message == "ConnectError: connection refused"
    assert result.credential is None
    assert result.application_health is not None and result.application_health.attempt == 3
    assert InstallationState.SERVICES_STARTED in result.reached_states
    assert InstallationState.APPLICATION_HEALTHY not in result.reached_states
    assert domain_timeline_stage_statuses(list(result.timeline), "credential") == ["skipped"]
    assert not (tmp_path / "home" / ".happy" / "access.key").exists()
    assert runtime.actions == ["build", "start", "status"]
    assert sleep_calls == [2, 2, 5.0]


@pytest.mark.parametrize(
    ("host_error", "installer_error", "expected_code"),
    [
        (PrivilegeError("root privileges or sudo are required; run as root"), None, "INSTALL_PRIVILEGE_ERROR"),
        (
            None,
            MissingDependencyError("docker is still missing", component_name="docker", executable="docker"),
            "INSTALL_MISSING_DEPENDENCY_ERROR",
        ),
    ],
)
def test_jobs_precondition_failure_stops_before_anything_is_written(
    tmp_path: Path,
    host_error: Exception | None,
    installer_error: Exception | None,
    expected_code: str,
) -> None:
    orchestrator, repository_client, runtime, _, _ = _create_orchestrator(
        tmp_path,
        host_inspector=_StubHostInspector(error=host_error),
        prerequisite_installer=_StubPrerequisiteInstaller(error=installer_error),
    )

    result = orchestrator.job_execute()

    assert result.status == "failed"
    assert result.run_exit_code() == 1
    assert result.error_code == expected_code
    assert result.reached_states == ()
    assert repository_client.calls == []
    assert runtime.actions == []
    assert not (tmp_path / "happy-server").exists()
    assert "traceback" in result.timeline[-1]["details"]


def test_jobs_start_failure_is_fatal_after_topology_is_written(tmp_path: Path) -> None:
    runtime = _StubContainerRuntime(start_error=ContainerRuntimeError("container runtime start failed"))
    orchestrator, _, _, _, _ = _create_orchestrator(tmp_path, container_runtime=runtime)

    result = orchestrator.job_execute()

    assert result.status == "failed"
    assert result.error_code == "INSTALL_CONTAINER_RUNTIME_ERROR"
    assert result.reached_states[-1] is InstallationState.SERVICES_BUILT
    assert (tmp_path / "happy-server" / COMPOSE_FILE_NAME).is_file()


def test_jobs_operator_decline_aborts_without_side_effects(tmp_path: Path) -> None:
    prompt = _ScriptedConsolePrompt(confirms=[False])
    orchestrator, repository_client, _, _, _ = _create_orchestrator(tmp_path, prompt=prompt)

    result = orchestrator.job_execute()

    assert result.status == "aborted"
    assert result.run_exit_code() == 0
    assert prompt.confirm_questions == ["Continue?"]
    assert repository_client.calls == []


def test_jobs_existing_directory_is_reused_unattended_by_default(tmp_path: Path) -> None:
    """Keep a non-empty directory and its `.env` on an unattended re-run.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate reuse and idempotent configuration.

    Raises:
        AssertionError: Raised when the directory is replaced or `.env` changes.
    """

    first_orchestrator, _, _, _, _ = _create_orchestrator(tmp_path)
    first_orchestrator.job_execute()
    env_file_path = tmp_path / "happy-server" / ".env"
    first_env_bytes = env_file_path.read_bytes()

    orchestrator, repository_client, _, _, _ = _create_orchestrator(tmp_path)
    result = orchestrator.job_execute()

    assert result.status == "success"
    assert repository_client.calls == []
    assert env_file_path.read_bytes() == first_env_bytes
    repository_events = [event for event in result.timeline if event["stage"] == "repository"]
    assert repository_events[-1]["details"]["action"] == "reused"


def test_jobs_replace_policy_deletes_and_clones_again(tmp_path: Path) -> None:
    install_directory = tmp_path / "happy-server"
    install_directory.mkdir()
    (install_directory / "stale.txt").write_text("old\n", encoding="utf-8")
    orchestrator, repository_client, _, _, _ = _create_orchestrator(tmp_path, policy=ExistingDirectoryPolicy.REPLACE)

    result = orchestrator.job_execute()

    assert result.status == "success"
    assert repository_client.calls == [("remove", install_directory), ("clone", install_directory)]
    assert not (install_directory / "stale.txt").exists()


def test_jobs_interactive_operator_confirms_replacement(tmp_path: Path) -> None:
    install_directory = tmp_path / "happy-server"
    install_directory.mkdir()
    (install_directory / "stale.txt").write_text("old\n", encoding="utf-8")
    prompt = _ScriptedConsolePrompt(confirms=[True, True])
    orchestrator, repository_client, _, _, _ = _create_orchestrator(tmp_path, prompt=prompt)

    result = orchestrator.job_execute()

    assert result.status == "success"
    assert prompt.confirm_questions[1] == f"{install_directory} already exists. Delete it and clone again?"
    assert [action for action, _ in repository_client.calls] == ["remove", "clone"]


def test_jobs_unsupported_job_name_is_rejected(tmp_path: Path) -> None:
    orchestrator, _, _, _, _ = _create_orchestrator(tmp_path)

    with pytest.raises(ValueError, match="unsupported job_name=upgrade"):
        orchestrator.job_execute("upgrade")


def test_jobs_unreachable_front_door_is_reported_without_failing_the_run(tmp_path: Path) -> None:
    """Probe the public host over HTTPS and keep the run successful when it is down.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the front-door result, timeline and exit code.

    Raises:
        AssertionError: Raised when the front door is skipped or fails the run.
    """

    requested_urls: list[str] = []

    def _front_door_handler(request: httpx.Request) -> httpx.Response:
        requested_urls.append(str(request.url))
        raise httpx.ConnectError("connection refused", request=request)

    front_door_sleeps: list[float] = []
    front_door_client = httpx.Client(transport=httpx.MockTransport(_front_door_handler))
    orchestrator, _, _, _, _ = _create_orchestrator(
        tmp_path,
        explicit_values=((PUBLIC_HOST_KEY, "happy.example.com"),),
        front_door_gate=HealthGate(
            probe=HttpMarkerProbe(client=front_door_client, marker="ok"),
            interval_seconds=3,
            max_attempts=2,
            sleep=front_door_sleeps.append,
        ),
    )

    result = orchestrator.job_execute()

    assert result.status == "success"
    assert result.run_exit_code() == 0
    assert result.front_door_health is not None
    assert result.front_door_health.outcome is HealthOutcome.EXHAUSTED
    assert result.front_door_health.last_failure == "ConnectError: connection refused"
    assert requested_urls == ["https://happy.example.com/health"] * 2
    assert front_door_sleeps == [3]
    assert domain_timeline_stage_statuses(list(result.timeline), "front_door") == ["exhausted"]
    assert InstallationState.CREDENTIAL_ISSUED in result.reached_states


def test_jobs_reachable_front_door_is_ready(tmp_path: Path) -> None:
    front_door_probe = _FixedProbe(True)
    orchestrator, _, _, _, _ = _create_orchestrator(
        tmp_path,
        explicit_values=((PUBLIC_HOST_KEY, "happy.example.com"),),
        front_door_gate=HealthGate(probe=front_door_probe, interval_seconds=3, max_attempts=2, sleep=lambda _: None),
    )

    result = orchestrator.job_execute()

    assert result.front_door_health is not None
    assert result.front_door_health.health_is_ready()
    assert front_door_probe.endpoints == ["https://happy.example.com/health"]
    assert domain_timeline_stage_statuses(list(result.timeline), "front_door") == ["ready"]


def test_jobs_local_public_host_skips_front_door(tmp_path: Path) -> None:
    front_door_probe = _FixedProbe(False)
    orchestrator, _, _, _, _ = _create_orchestrator(
        tmp_path,
        front_door_gate=HealthGate(probe=front_door_probe, interval_seconds=3, max_attempts=2, sleep=lambda _: None),
    )

    result = orchestrator.job_execute()

    assert result.status == "success"
    assert result.front_door_health is None
    assert front_door_probe.endpoints == []
    assert domain_timeline_stage_statuses(list(result.timeline), "front_door") == ["skipped"]


@pytest.mark.parametrize(
    ("env_file_bytes", "error_code"),
    [
        (b"HANDY_MASTER_SECRET=\xff\xfe\n", "INSTALL_ENVIRONMENT_FILE_ERROR"),
        (b"PUBLIC_HOST=example.com:notaport\n", "INSTALL_CONFIGURATION_ERROR"),
    ],
)
def test_jobs_unusable_env_file_fails_before_services_start(
    tmp_path: Path,
    env_file_bytes: bytes,
    error_code: str,
) -> None:
    install_directory = tmp_path / "happy-server"
    install_directory.mkdir()
    (install_directory / ".env").write_bytes(env_file_bytes)
    orchestrator, _, runtime, _, _ = _create_orchestrator(tmp_path)

    result = orchestrator.job_execute()

    assert result.status == "failed"
    assert result.run_exit_code() == 1
    assert result.error_code == error_code
    assert runtime.actions == []
    assert not (install_directory / COMPOSE_FILE_NAME).exists()
