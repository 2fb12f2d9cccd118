"""Typed interfaces for host, package, repository and runtime boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class PrivilegeContext:
    """Privilege state of the installer process.

    Attributes:
        is_root: Whether the process runs with effective uid 0.
        command_prefix: Prefix for privileged commands (`("sudo",)` or empty).
        invoking_uid: Uid of the human operator (from `SUDO_UID` when elevated).
        invoking_gid: Gid of the human operator.
        invoking_user: Login name of the human operator when known.
    """

    is_root: bool
    command_prefix: tuple[str, ...]
    invoking_uid: int
    invoking_gid: int
    invoking_user: str | None


@dataclass(frozen=True)
class OperatingSystemInfo:
    """Operating system identity parsed from os-release metadata.

    Attributes:
        os_id: Distribution identifier (`ubuntu`, `debian`, `fedora`, ...).
        version_id: Distribution version string.
        version_codename: Release codename when published.
        family: Package family (`apt`, `yum`, or `unknown`).
    """

    os_id: str
    version_id: str
    version_codename: str | None
    family: str


@dataclass(frozen=True)
class PrerequisiteComponent:
    """Prerequisite the installer needs on the host.

    Attributes:
        name: Component label used in diagnostics.
        executables: Executables that must be invocable afterwards.
        apt_packages: Packages installed on apt-based hosts.
        yum_packages: Packages installed on yum-based hosts.
    """

    name: str
    executables: tuple[str, ...]
    apt_packages: tuple[str, ...] = ()
    yum_packages: tuple[str, ...] = ()


@dataclass(frozen=True)
class PrerequisiteStatus:
    """Outcome of one ensure-installed call.

    Attributes:
        component_name: Component label.
        executable_paths: Resolved executable paths by name.
        installed_now: Whether an install was performed in this run.
    """

    component_name: str
    executable_paths: tuple[tuple[str, str], ...]
    installed_now: bool


class PrerequisiteInstallerPort(Protocol):
    """Port for the abstract ensure-installed capability."""

    def prereq_ensure_installed(self, component: PrerequisiteComponent) -> PrerequisiteStatus:
        """Ensure the component's executables are invocable, installing when absent.

        Args:
            component: Prerequisite to ensure.

        Returns:
            PrerequisiteStatus: Resolved executable paths.

        Raises:
            MissingDependencyError: Raised when an executable is still missing after installing.
        """


class RepositoryClientPort(Protocol):
    """Port for version-control repository acquisition."""

    def repository_clone(self, repository_url: str, destination: Path) -> None:
        """Clone repository into destination.

        Args:
            repository_url: Repository URL.
            destination: Absent or empty destination directory.

        Raises:
            RepositoryAcquisitionError: Raised when the clone fails.
        """

    def repository_remove(self, destination: Path) -> None:
        """Delete an existing checkout directory.

        Args:
            destination: Directory to delete.

        Raises:
            RepositoryAcquisitionError: Raised when deletion fails.
        """


class ContainerRuntimePort(Protocol):
    """Port for the container runtime that builds and starts the topology."""

    def runtime_command_label(self) -> str:
        """Return the compose command in use for operator hints.

        Raises:
            MissingDependencyError: Raised when no compose command is available.
        """

    def runtime_build(self, project_directory: Path) -> None:
        """Build service images for the rendered topology.

        Raises:
            ContainerRuntimeError: Raised when the build fails.
        """

    def runtime_start(self, project_directory: Path) -> None:
        """Start the rendered topology detached.

        Raises:
            ContainerRuntimeError: Raised when start fails.
        """

    def runtime_status(self, project_directory: Path) -> str:
        """Return a printable container status listing.

        Raises:
            ContainerRuntimeError: Raised when status cannot be listed.
        """


class OperatorPromptPort(Protocol):
    """Port for operator interaction (terminal prompts and one-time announcements)."""

    def prompt_is_interactive(self) -> bool:
        """Return whether prompts reach a human operator."""

    def prompt_text(self, question: str, default: str) -> str:
        """Ask for free text, returning default on empty answer."""

    def prompt_confirm(self, question: str, default: bool) -> bool:
        """Ask a yes/no question."""

    def prompt_choice(self, question: str, options: tuple[str, ...], default_index: int) -> int:
        """Ask the operator to pick one option, returning its zero-based index."""

    def prompt_announce(self, message: str) -> None:
        """Display a message to the operator without logging it."""
