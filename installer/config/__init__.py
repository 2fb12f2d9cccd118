"""Configuration package for installer settings and startup validation."""

from .settings import (
	DEFAULT_INSTALL_DIRECTORY,
	DEFAULT_REPOSITORY_URL,
	InstallerSettings,
	SettingsLoadError,
	config_load_settings,
)

__all__ = [
	"DEFAULT_INSTALL_DIRECTORY",
	"DEFAULT_REPOSITORY_URL",
	"InstallerSettings",
	"SettingsLoadError",
	"config_load_settings",
]
