"""Package-manager backed implementation of the ensure-installed capability."""

from __future__ import annotations

import logging
from typing import Final

from installer.errors import MissingDependencyError
from installer.logs import logs_success

from .commands import CommandExecutionError, SystemCommandRunner
from .interfaces import (
    OperatingSystemInfo,
    PrerequisiteComponent,
    PrerequisiteInstallerPort,
    PrerequisiteStatus,
    PrivilegeContext,
)

logger = logging.getLogger(__name__)

BASELINE_TOOLS_COMPONENT: Final[PrerequisiteComponent] = PrerequisiteComponent(
    name="baseline-tools",
    executables=("curl", "wget", "openssl", "jq"),
    apt_packages=("curl", "wget", "openssl", "jq"),
    yum_packages=("curl", "wget", "openssl", "jq"),
)
GIT_COMPONENT: Final[PrerequisiteComponent] = PrerequisiteComponent(
    name="git",
    executables=("git",),
    apt_packages=("git",),
    yum_packages=("git",),
)
CONTAINER_RUNTIME_COMPONENT: Final[PrerequisiteComponent] = PrerequisiteComponent(
    name="docker",
    executables=("docker",),
    apt_packages=("docker-ce", "docker-ce-cli", "containerd.io", "docker-buildx-plugin", "docker-compose-plugin"),
    yum_packages=("docker-ce", "docker-ce-cli", "containerd.io", "docker-buildx-plugin", "docker-compose-plugin"),
)
DEFAULT_PREREQUISITES: Final[tuple[PrerequisiteComponent, ...]] = (
    BASELINE_TOOLS_COMPONENT,
    GIT_COMPONENT,
    CONTAINER_RUNTIME_COMPONENT,
)

_DOCKER_REPOSITORY_BASE_URL: Final[str] = "https://download.docker.com/linux"
_DOCKER_CONVENIENCE_SCRIPT_URL: Final[str] = "https://get.docker.com"


class PackageManagerPrerequisiteInstaller(PrerequisiteInstallerPort):
    """Install prerequisites with apt or yum, verifying executables afterwards."""

    def __init__(
        self,
        runner: SystemCommandRunner,
        operating_system: OperatingSystemInfo,
        privilege: PrivilegeContext,
    ):
        """Initialize prerequisite installer.

        Args:
            runner: Host command runner.
            operating_system: Detected operating system identity.
            privilege: Detected privilege context.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        if operating_system is None:
            raise ValueError("operating_system must not be None")
        if privilege is None:
            raise ValueError("privilege must not be None")

        self._runner = runner
        self._operating_system = operating_system
        self._privilege = privilege
        self._apt_index_refreshed = False

    def prereq_ensure_installed(self, component: PrerequisiteComponent) -> PrerequisiteStatus:
        """Ensure component executables are present, installing missing ones.

        Args:
            component: Prerequisite to ensure.

        Returns:
            PrerequisiteStatus: Resolved executable paths.

        Raises:
            MissingDependencyError: Raised when an executable is still missing after install.
        """

        missing_executables = self._prereq_missing_executables(component)
        if not missing_executables:
            logger.info("%s already installed", component.name)
            return self._prereq_build_status(component=component, installed_now=False)

        logger.info("Installing %s (missing: %s)...", component.name, ", ".join(missing_executables))
        try:
            if component.name == CONTAINER_RUNTIME_COMPONENT.name:
                self._prereq_install_container_runtime(component)
            else:
                self._prereq_install_packages(component)
        except CommandExecutionError as error:
            raise MissingDependencyError(
                f"failed to install {component.name}: {error}",
                component_name=component.name,
                executable=missing_executables[0],
            ) from error

        still_missing = self._prereq_missing_executables(component)
        if still_missing:
            raise MissingDependencyError(
                f"{component.name} is still missing executable '{still_missing[0]}' after install; install it manually",
                component_name=component.name,
                executable=still_missing[0],
            )

        logs_success(logger, "%s installed", component.name)
        return self._prereq_build_status(component=component, installed_now=True)

    def _prereq_missing_executables(self, component: PrerequisiteComponent) -> list[str]:
        return [executable for executable in component.executables if self._runner.runner_which(executable) is None]

    def _prereq_build_status(self, component: PrerequisiteComponent, installed_now: bool) -> PrerequisiteStatus:
        return PrerequisiteStatus(
            component_name=component.name,
            executable_paths=tuple(
                (executable, self._runner.runner_which(executable) or "") for executable in component.executables
            ),
            installed_now=installed_now,
        )

    def _prereq_install_packages(self, component: PrerequisiteComponent) -> None:
        """Install plain packages through the detected package manager.

        Args:
            component: Prerequisite to install.

        Returns:
            None: Packages are installed as side effect.

        Raises:
            CommandExecutionError: Raised when a package command fails.
            MissingDependencyError: Raised when the package family is unknown.
        """

        family = self._operating_system.family
        if family == "apt":
            self._prereq_refresh_apt_index()
            self._runner.runner_run(["apt-get", "install", "-y", *component.apt_packages], privileged=True)
            return
        if family == "yum":
            self._runner.runner_run(["yum", "install", "-y", *component.yum_packages], privileged=True)
            return
        raise MissingDependencyError(
            f"cannot install {component.name} on unsupported OS '{self._operating_system.os_id}'; install it manually",
            component_name=component.name,
            executable=component.executables[0],
        )

    def _prereq_install_container_runtime(self, component: PrerequisiteComponent) -> None:
        """Install and enable the container runtime.

        Args:
            component: Container runtime prerequisite.

        Returns:
            None: Runtime is installed and enabled as side effect.

        Raises:
            CommandExecutionError: Raised when an install command fails.
        """

        family = self._operating_system.family
        if family == "apt":
            self._prereq_configure_docker_apt_repository()
            self._prereq_refresh_apt_index(force=True)
            self._runner.runner_run(["apt-get", "install", "-y", *component.apt_packages], privileged=True)
        elif family == "yum":
            self._runner.runner_run(["yum", "install", "-y", "yum-utils"], privileged=True)
            self._runner.runner_run(
                [
                    "yum-config-manager",
                    "--add-repo",
                    f"{_DOCKER_REPOSITORY_BASE_URL}/centos/docker-ce.repo",
                ],
                privileged=True,
            )
            self._runner.runner_run(["yum", "install", "-y", *component.yum_packages], privileged=True)
        else:
            logger.warning("Unknown operating system, falling back to the generic container runtime install script")
            self._runner.runner_run(
                ["sh", "-c", f"curl -fsSL {_DOCKER_CONVENIENCE_SCRIPT_URL} | sh"],
                privileged=True,
            )

        self._runner.runner_run(["systemctl", "start", "docker"], privileged=True)
        self._runner.runner_run(["systemctl", "enable", "docker"], privileged=True)

        operator_user = self._privilege.invoking_user
        if operator_user and operator_user != "root":
            self._runner.runner_run(["usermod", "-aG", "docker", operator_user], privileged=True)
            logger.warning("Added %s to the docker group; log in again to use docker without sudo", operator_user)

    def _prereq_configure_docker_apt_repository(self) -> None:
        os_id = self._operating_system.os_id
        codename = self._operating_system.version_codename or os_id
        self._prereq_refresh_apt_index()
        self._runner.runner_run(["apt-get", "install", "-y", "ca-certificates", "curl", "gnupg"], privileged=True)
        self._runner.runner_run(["install", "-m", "0755", "-d", "/etc/apt/keyrings"], privileged=True)
        self._runner.runner_run(
            [
                "sh",
                "-c",
                f"curl -fsSL {_DOCKER_REPOSITORY_BASE_URL}/{os_id}/gpg | gpg --dearmor --yes -o /etc/apt/keyrings/docker.gpg",
            ],
            privileged=True,
        )
        self._runner.runner_run(["chmod", "a+r", "/etc/apt/keyrings/docker.gpg"], privileged=True)
        architecture = self._runner.runner_run(
            ["dpkg", "--print-architecture"],
            capture_output=True,
        ).stdout.strip()
        repository_line = (
            f"deb [arch={architecture} signed-by=/etc/apt/keyrings/docker.gpg] "
            f"{_DOCKER_REPOSITORY_BASE_URL}/{os_id} {codename} stable"
        )
        self._runner.runner_run(
            ["sh", "-c", f"echo '{repository_line}' > /etc/apt/sources.list.d/docker.list"],
            privileged=True,
        )

    def _prereq_refresh_apt_index(self, force: bool = False) -> None:
        if self._apt_index_refreshed and not force:
            return
        self._runner.runner_run(["apt-get", "update"], privileged=True)
        self._apt_index_refreshed = True
