"""Job layer package for installation workflow orchestration."""

from .interfaces import (
	ConfigResult,
	DirectoryLayout,
	HostAdapterFactoryPort,
	HostAdapters,
	HostContext,
	HostInspectorPort,
	InstallationRunResult,
	InstallationState,
	JobExecutionResult,
	JobOrchestratorPort,
	PrerequisiteReport,
	RepositoryAction,
	RepositoryResult,
	StartedServices,
	TopologyResult,
	VerificationReport,
)
from .installation_orchestrator import InstallationOrchestrator, InstallationOrchestratorConfig
from .summary import job_build_summary_lines

__all__ = [
	"ConfigResult",
	"DirectoryLayout",
	"HostAdapterFactoryPort",
	"HostAdapters",
	"HostContext",
	"HostInspectorPort",
	"InstallationOrchestrator",
	"InstallationOrchestratorConfig",
	"InstallationRunResult",
	"InstallationState",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"PrerequisiteReport",
	"RepositoryAction",
	"RepositoryResult",
	"StartedServices",
	"TopologyResult",
	"VerificationReport",
	"job_build_summary_lines",
]
