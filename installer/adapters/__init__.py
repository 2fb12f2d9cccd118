"""Adapter layer package for host, package-manager, git and container runtime boundaries."""

from .commands import CommandExecutionError, SystemCommandRunner
from .compose_runtime import DockerComposeRuntime
from .git_repository import GitRepositoryClient
from .host import host_detect_operating_system, host_detect_privilege, host_package_family
from .interfaces import (
	ContainerRuntimePort,
	OperatingSystemInfo,
	OperatorPromptPort,
	PrerequisiteComponent,
	PrerequisiteInstallerPort,
	PrerequisiteStatus,
	PrivilegeContext,
	RepositoryClientPort,
)
from .operator_console import ConsoleOperatorPrompt, UnattendedOperatorPrompt
from .packages import (
	BASELINE_TOOLS_COMPONENT,
	CONTAINER_RUNTIME_COMPONENT,
	DEFAULT_PREREQUISITES,
	GIT_COMPONENT,
	PackageManagerPrerequisiteInstaller,
)

__all__ = [
	"BASELINE_TOOLS_COMPONENT",
	"CONTAINER_RUNTIME_COMPONENT",
	"CommandExecutionError",
	"ConsoleOperatorPrompt",
	"ContainerRuntimePort",
	"DEFAULT_PREREQUISITES",
	"DockerComposeRuntime",
	"GIT_COMPONENT",
	"GitRepositoryClient",
	"OperatingSystemInfo",
	"OperatorPromptPort",
	"PackageManagerPrerequisiteInstaller",
	"PrerequisiteComponent",
	"PrerequisiteInstallerPort",
	"PrerequisiteStatus",
	"PrivilegeContext",
	"RepositoryClientPort",
	"SystemCommandRunner",
	"UnattendedOperatorPrompt",
	"host_detect_operating_system",
	"host_detect_privilege",
	"host_package_family",
]
