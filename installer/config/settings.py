"""Typed installer settings with environment support and startup validation."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from installer.domain import ExistingDirectoryPolicy

DEFAULT_REPOSITORY_URL = "https://github.com/xuangong/happy-server.git"
DEFAULT_INSTALL_DIRECTORY = "/opt/happy-server"


class SettingsLoadError(RuntimeError):
    """Raised when installer settings cannot be loaded or validated."""


class InstallerSettings(BaseSettings):
    """Installer settings for one provisioning run.

    Environment variable names are the uppercase field names prefixed with
    `HAPPY_INSTALL_`. Example: `install_directory` reads from
    `HAPPY_INSTALL_INSTALL_DIRECTORY`. Command-line flags are applied as
    explicit overrides on top of the environment.

    Attributes:
        repository_url: Git URL of the server repository.
        install_directory: Checkout and deployment directory.
        access_key_directory: Directory receiving the issued `access.key`.
        existing_directory_policy: Handling of a pre-existing install directory.
        non_interactive: Skip every prompt and use defaults/generated values.
        regenerate_secrets: Mint new secrets even when the env file holds values.
        os_release_path: Location of the os-release metadata file.
        health_initial_delay_seconds: Delay before the first application probe.
        health_interval_seconds: Fixed delay between application probes.
        health_max_attempts: Application probe attempt ceiling.
        front_door_max_attempts: Front-door probe attempt ceiling.
        front_door_check_enabled: Whether to probe the public host after the app is up.
        verification_delay_seconds: Delay before the final verification pass.
        request_timeout_seconds: HTTP timeout for probes and the auth handshake.
    """

    model_config = SettingsConfigDict(
        env_prefix="HAPPY_INSTALL_",
        extra="ignore",
        case_sensitive=False,
    )

    repository_url: str = Field(default=DEFAULT_REPOSITORY_URL, min_length=1)
    install_directory: Path = Field(default=Path(DEFAULT_INSTALL_DIRECTORY))
    access_key_directory: Path = Field(default_factory=lambda: Path.home() / ".happy")
    existing_directory_policy: ExistingDirectoryPolicy = Field(default=ExistingDirectoryPolicy.REUSE)
    non_interactive: bool = Field(default=False)
    regenerate_secrets: bool = Field(default=False)
    os_release_path: Path = Field(default=Path("/etc/os-release"))
    health_initial_delay_seconds: float = Field(default=10.0, ge=0)
    health_interval_seconds: float = Field(default=2.0, ge=0)
    health_max_attempts: int = Field(default=30, ge=1)
    front_door_max_attempts: int = Field(default=5, ge=1)
    front_door_check_enabled: bool = Field(default=True)
    verification_delay_seconds: float = Field(default=5.0, ge=0)
    request_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("repository_url")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("install_directory", "access_key_directory")
    @classmethod
    def _validate_directory(cls, value: Path) -> Path:
        expanded_value = value.expanduser()
        if not str(expanded_value).strip():
            raise ValueError("directory must not be blank")
        if not expanded_value.is_absolute():
            expanded_value = expanded_value.resolve()
        return expanded_value


def config_load_settings(**overrides: object) -> InstallerSettings:
    """Load and validate installer settings from environment and overrides.

    Args:
        overrides: Explicit field values (command-line flags) taking precedence
            over environment variables. `None` values are ignored.

    Returns:
        InstallerSettings: Validated settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    explicit_values = {name: value for name, value in overrides.items() if value is not None}
    try:
        return InstallerSettings(**explicit_values)
    except ValidationError as error:
        raise SettingsLoadError(
            f"Installer configuration validation failed. Check flags or HAPPY_INSTALL_* variables. Details: {error}"
        ) from error
