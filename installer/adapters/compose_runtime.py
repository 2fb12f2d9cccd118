"""Docker Compose container runtime adapter."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from installer.errors import ContainerRuntimeError, MissingDependencyError

from .commands import CommandExecutionError, SystemCommandRunner
from .interfaces import ContainerRuntimePort

logger = logging.getLogger(__name__)


class DockerComposeRuntime(ContainerRuntimePort):
    """Build and start the rendered topology with `docker compose` or `docker-compose`."""

    def __init__(self, runner: SystemCommandRunner, privileged: bool = False):
        """Initialize compose runtime adapter.

        Args:
            runner: Host command runner.
            privileged: Run compose commands through the privilege prefix.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when runner is missing.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        self._runner = runner
        self._privileged = privileged
        self._compose_command: tuple[str, ...] | None = None

    def runtime_command_label(self) -> str:
        """Return the compose command in use.

        Returns:
            str: Space-joined compose command.

        Raises:
            MissingDependencyError: Raised when no compose command is available.
        """

        return shlex.join(self._runtime_compose_command())

    def runtime_build(self, project_directory: Path) -> None:
        """Build service images (the first build can take several minutes)."""

        logger.info("Building images (first build may take several minutes)...")
        self._runtime_run(project_directory=project_directory, arguments=("build",), action="build")

    def runtime_start(self, project_directory: Path) -> None:
        """Start services detached."""

        logger.info("Starting containers...")
        self._runtime_run(project_directory=project_directory, arguments=("up", "-d"), action="start")

    def runtime_status(self, project_directory: Path) -> str:
        """Return `ps` output for the project."""

        completed = self._runtime_run(
            project_directory=project_directory,
            arguments=("ps",),
            action="status",
            capture_output=True,
        )
        return completed.stdout

    def _runtime_compose_command(self) -> tuple[str, ...]:
        if self._compose_command is not None:
            return self._compose_command

        if self._runner.runner_succeeds(["docker", "compose", "version"]):
            self._compose_command = ("docker", "compose")
        elif self._runner.runner_which("docker-compose") is not None:
            self._compose_command = ("docker-compose",)
        else:
            raise MissingDependencyError(
                "docker compose command not found",
                component_name="docker",
                executable="docker compose",
            )
        logger.debug("Using compose command: %s", shlex.join(self._compose_command))
        return self._compose_command

    def _runtime_run(
        self,
        project_directory: Path,
        arguments: tuple[str, ...],
        action: str,
        capture_output: bool = False,
    ):
        try:
            return self._runner.runner_run(
                [*self._runtime_compose_command(), *arguments],
                cwd=project_directory,
                privileged=self._privileged,
                capture_output=capture_output,
            )
        except CommandExecutionError as error:
            raise ContainerRuntimeError(f"container runtime {action} failed: {error}") from error
