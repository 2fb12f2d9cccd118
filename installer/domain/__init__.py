"""Domain models used across installer stage boundaries."""

from .models import (
	AccessKey,
	BuildReference,
	Credential,
	EnvironmentConfig,
	ExistingDirectoryPolicy,
	HealthCheckResult,
	HealthOutcome,
	InstallationTarget,
	PortExposure,
	ReadinessPredicate,
	ReadinessProbe,
	ServiceSpec,
)
from .secrets import LONG_SECRET_LENGTH, SECRET_ALPHABET, SHORT_SECRET_LENGTH, SecretGenerator
from .timeline import domain_build_stage_event, domain_timeline_stage_statuses

__all__ = [
	"AccessKey",
	"BuildReference",
	"Credential",
	"EnvironmentConfig",
	"ExistingDirectoryPolicy",
	"HealthCheckResult",
	"HealthOutcome",
	"InstallationTarget",
	"LONG_SECRET_LENGTH",
	"PortExposure",
	"ReadinessPredicate",
	"ReadinessProbe",
	"SECRET_ALPHABET",
	"SHORT_SECRET_LENGTH",
	"SecretGenerator",
	"ServiceSpec",
	"domain_build_stage_event",
	"domain_timeline_stage_statuses",
]
