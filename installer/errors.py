"""Project-native typed exceptions for installer failures.

The hierarchy mirrors the propagation policy of the installation run:
precondition and configuration failures abort before any service starts,
while transient infrastructure and credential failures are reported and
the run continues.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base exception for installer failures.

    Attributes:
        error_code: Deterministic error code used in run diagnostics.
    """

    default_error_code = "INSTALL_UNEXPECTED_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code or self.default_error_code


class FatalPreconditionError(InstallerError):
    """Host precondition failure that aborts the run immediately."""

    default_error_code = "INSTALL_PRECONDITION_ERROR"


class PrivilegeError(FatalPreconditionError):
    """Neither root privileges nor a usable `sudo` are available."""

    default_error_code = "INSTALL_PRIVILEGE_ERROR"


class UnsupportedOperatingSystemError(FatalPreconditionError):
    """Operating system could not be detected or is not supported."""

    default_error_code = "INSTALL_UNSUPPORTED_OS_ERROR"


class MissingDependencyError(FatalPreconditionError):
    """Required executable is still missing after the install attempt.

    Attributes:
        component_name: Name of the prerequisite component.
        executable: Executable that could not be located.
    """

    default_error_code = "INSTALL_MISSING_DEPENDENCY_ERROR"

    def __init__(self, message: str, component_name: str, executable: str):
        super().__init__(message)
        self.component_name = component_name
        self.executable = executable


class SecretGenerationError(FatalPreconditionError):
    """Entropy source is unavailable; no weaker fallback is attempted."""

    default_error_code = "INSTALL_ENTROPY_ERROR"


class RepositoryAcquisitionError(FatalPreconditionError):
    """Repository clone or replacement failed."""

    default_error_code = "INSTALL_REPOSITORY_ERROR"


class ContainerRuntimeError(FatalPreconditionError):
    """Container runtime command failed while building or starting services."""

    default_error_code = "INSTALL_CONTAINER_RUNTIME_ERROR"


class OperatorAbortedError(FatalPreconditionError):
    """Operator declined to continue at a confirmation prompt."""

    default_error_code = "INSTALL_ABORTED_BY_OPERATOR"


class ConfigurationError(InstallerError):
    """Configuration failure detected before any service is started."""

    default_error_code = "INSTALL_CONFIGURATION_ERROR"


class UnknownDependencyError(ConfigurationError):
    """Service declares a dependency on a service that is not declared.

    Attributes:
        service_name: Declaring service.
        dependency_name: Unresolved dependency reference.
    """

    default_error_code = "INSTALL_UNKNOWN_DEPENDENCY_ERROR"

    def __init__(self, service_name: str, dependency_name: str):
        super().__init__(f"unknown dependency: service '{service_name}' depends on undeclared '{dependency_name}'")
        self.service_name = service_name
        self.dependency_name = dependency_name


class DependencyCycleError(ConfigurationError):
    """Service dependency graph contains a cycle.

    Attributes:
        cycle: Service names along the cycle, first name repeated at the end.
    """

    default_error_code = "INSTALL_DEPENDENCY_CYCLE_ERROR"

    def __init__(self, cycle: tuple[str, ...]):
        super().__init__(f"cycle detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class MissingConfigurationKeyError(ConfigurationError):
    """Required environment key is absent or blank when it is consumed."""

    default_error_code = "INSTALL_MISSING_CONFIG_KEY_ERROR"

    def __init__(self, key_name: str):
        super().__init__(f"required configuration key '{key_name}' is missing or blank")
        self.key_name = key_name


class EnvironmentFileError(ConfigurationError):
    """Persisted environment file could not be read or written."""

    default_error_code = "INSTALL_ENVIRONMENT_FILE_ERROR"


class TransientInfraError(InstallerError):
    """Infrastructure not ready yet; retried, then reported as a warning."""

    default_error_code = "INSTALL_HEALTH_TIMEOUT"


class CredentialBootstrapFailure(InstallerError):
    """Credential handshake was rejected or could not reach the service."""

    default_error_code = "INSTALL_CREDENTIAL_BOOTSTRAP_FAILED"
