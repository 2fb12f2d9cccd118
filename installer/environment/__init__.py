"""Environment configuration package: key catalog, env file and resolution."""

from .catalog import (
	DEFAULT_LISTEN_PORT,
	DEFAULT_PUBLIC_HOST,
	DEFAULT_S3_ACCESS_KEY,
	DNS_API_TOKEN_KEY,
	ENVIRONMENT_KEY_CATALOG,
	LISTEN_PORT_KEY,
	MASTER_SECRET_KEY,
	POSTGRES_PASSWORD_KEY,
	PUBLIC_HOST_KEY,
	REDIS_PASSWORD_KEY,
	REQUIRED_ENVIRONMENT_KEYS,
	S3_ACCESS_KEY_KEY,
	S3_SECRET_KEY_KEY,
	EnvironmentKeyKind,
	EnvironmentKeySpec,
	KeyResolution,
	ResolutionStrategy,
	catalog_is_host_name,
)
from .configurator import EnvironmentConfigurator, EnvironmentResolution
from .env_file import ENV_FILE_MODE, ENV_FILE_NAME, env_file_read, env_file_render, env_file_write

__all__ = [
	"DEFAULT_LISTEN_PORT",
	"DEFAULT_PUBLIC_HOST",
	"DEFAULT_S3_ACCESS_KEY",
	"DNS_API_TOKEN_KEY",
	"ENVIRONMENT_KEY_CATALOG",
	"ENV_FILE_MODE",
	"ENV_FILE_NAME",
	"EnvironmentConfigurator",
	"EnvironmentKeyKind",
	"EnvironmentKeySpec",
	"EnvironmentResolution",
	"KeyResolution",
	"LISTEN_PORT_KEY",
	"MASTER_SECRET_KEY",
	"POSTGRES_PASSWORD_KEY",
	"PUBLIC_HOST_KEY",
	"REDIS_PASSWORD_KEY",
	"REQUIRED_ENVIRONMENT_KEYS",
	"ResolutionStrategy",
	"S3_ACCESS_KEY_KEY",
	"S3_SECRET_KEY_KEY",
	"catalog_is_host_name",
	"env_file_read",
	"env_file_render",
	"env_file_write",
]
