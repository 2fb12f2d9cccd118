"""Environment configuration resolution and single-source-of-truth persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from installer.adapters import OperatorPromptPort
from installer.domain import EnvironmentConfig, SecretGenerator
from installer.errors import ConfigurationError, EnvironmentFileError
from installer.logs import logs_success

from .catalog import (
    ENVIRONMENT_KEY_CATALOG,
    EnvironmentKeyKind,
    EnvironmentKeySpec,
    KeyResolution,
    ResolutionStrategy,
)
from .env_file import env_file_read, env_file_render, env_file_write

logger = logging.getLogger(__name__)

_STRATEGY_LABELS = {
    ResolutionStrategy.DEFAULT: "Use default",
    ResolutionStrategy.GENERATE: "Generate random value",
    ResolutionStrategy.CUSTOM: "Enter custom value",
}


@dataclass(frozen=True)
class EnvironmentResolution:
    """Result of resolving and persisting the environment config.

    Attributes:
        config: Resolved config in persisted order.
        env_file_path: Environment file location.
        written: Whether the file was (re)written in this run.
        minted_keys: Keys whose value was generated or defaulted in this run.
        reused_keys: Keys whose value was kept from the persisted file.
    """

    config: EnvironmentConfig
    env_file_path: Path
    written: bool
    minted_keys: tuple[str, ...]
    reused_keys: tuple[str, ...]


class EnvironmentConfigurator:
    """Resolve every recognized key and persist the environment file.

    Resolution order per key: explicit operator value, value already on
    disk (unless regeneration is requested for secrets), then the default or
    a generated secret in unattended runs, or an interactive menu.
    """

    def __init__(
        self,
        env_file_path: Path,
        secret_generator: SecretGenerator,
        prompt: OperatorPromptPort,
        catalog: tuple[EnvironmentKeySpec, ...] = ENVIRONMENT_KEY_CATALOG,
    ):
        """Initialize environment configurator.

        Args:
            env_file_path: Environment file location.
            secret_generator: Secret source for generated values.
            prompt: Operator prompt adapter.
            catalog: Recognized keys in persisted order.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if secret_generator is None:
            raise ValueError("secret_generator must not be None")
        if prompt is None:
            raise ValueError("prompt must not be None")
        if not catalog:
            raise ValueError("catalog must not be empty")

        self._env_file_path = env_file_path
        self._secret_generator = secret_generator
        self._prompt = prompt
        self._catalog = catalog

    def configurator_resolve(
        self,
        explicit_values: dict[str, str] | None = None,
        regenerate: bool = False,
    ) -> EnvironmentResolution:
        """Resolve the complete config and persist it when it changed.

        Args:
            explicit_values: Operator-supplied values taking precedence over everything.
            regenerate: Mint new secrets even when the file already holds them.

        Returns:
            EnvironmentResolution: Resolved config and persistence outcome.

        Raises:
            ConfigurationError: Raised for unknown or invalid explicit or persisted values.
            EnvironmentFileError: Raised when the file cannot be read or written.
            SecretGenerationError: Raised when the entropy source is unavailable.
        """

        operator_values = dict(explicit_values or {})
        self._configurator_validate_explicit_values(operator_values)
        persisted_values = env_file_read(self._env_file_path)
        if persisted_values:
            logger.info("Loaded existing configuration from %s", self._env_file_path)

        resolved_values: dict[str, str] = {}
        minted_keys: list[str] = []
        reused_keys: list[str] = []
        for key_spec in self._catalog:
            persisted_value = persisted_values.get(key_spec.name, "")
            if key_spec.name in operator_values:
                resolution = KeyResolution(ResolutionStrategy.CUSTOM, operator_values[key_spec.name])
            elif persisted_value and not (regenerate and key_spec.key_is_secret()):
                validation_error = key_spec.key_validate(persisted_value)
                if validation_error is not None:
                    raise ConfigurationError(f"{self._env_file_path}: {validation_error}")
                reused_keys.append(key_spec.name)
                resolved_values[key_spec.name] = persisted_value
                continue
            elif self._prompt.prompt_is_interactive():
                resolution = self._configurator_resolve_interactive(key_spec)
            else:
                resolution = self._configurator_resolve_unattended(key_spec)

            resolution = self._configurator_guard_empty(key_spec, resolution)
            if resolution.strategy is not ResolutionStrategy.CUSTOM:
                minted_keys.append(key_spec.name)
            if self._configurator_should_persist(key_spec, resolution, key_spec.name in persisted_values):
                resolved_values[key_spec.name] = resolution.value

        for key, value in persisted_values.items():
            if key not in resolved_values and all(key != key_spec.name for key_spec in self._catalog):
                resolved_values[key] = value

        config = EnvironmentConfig.config_from_mapping(resolved_values)
        written = self._configurator_persist(config)
        self._configurator_announce_minted(config=config, minted_keys=minted_keys)
        return EnvironmentResolution(
            config=config,
            env_file_path=self._env_file_path,
            written=written,
            minted_keys=tuple(minted_keys),
            reused_keys=tuple(reused_keys),
        )

    def _configurator_validate_explicit_values(self, operator_values: dict[str, str]) -> None:
        catalog_by_name = {key_spec.name: key_spec for key_spec in self._catalog}
        for key, value in operator_values.items():
            key_spec = catalog_by_name.get(key)
            if key_spec is None:
                raise ConfigurationError(f"unknown configuration key '{key}'")
            validation_error = key_spec.key_validate(value)
            if validation_error is not None:
                raise ConfigurationError(validation_error)

    def _configurator_resolve_unattended(self, key_spec: EnvironmentKeySpec) -> KeyResolution:
        if key_spec.key_is_secret():
            return KeyResolution(ResolutionStrategy.GENERATE, self._configurator_generate(key_spec))
        return KeyResolution(ResolutionStrategy.DEFAULT, key_spec.default or "")

    def _configurator_resolve_interactive(self, key_spec: EnvironmentKeySpec) -> KeyResolution:
        """Present the per-key strategy menu and resolve the chosen strategy.

        Args:
            key_spec: Key being resolved.

        Returns:
            KeyResolution: Operator-selected resolution.

        Raises:
            SecretGenerationError: Raised when generation is chosen and entropy is unavailable.
        """

        strategies = key_spec.key_strategies()
        option_labels = tuple(self._configurator_option_label(key_spec, strategy) for strategy in strategies)
        chosen_index = self._prompt.prompt_choice(
            f"{key_spec.name}: {key_spec.description}",
            option_labels,
            0,
        )
        strategy = strategies[chosen_index]
        if strategy is ResolutionStrategy.GENERATE:
            return KeyResolution(strategy, self._configurator_generate(key_spec))
        if strategy is ResolutionStrategy.DEFAULT:
            return KeyResolution(strategy, key_spec.default or "")

        while True:
            custom_value = self._prompt.prompt_text(f"Enter {key_spec.name}", "")
            validation_error = key_spec.key_validate(custom_value)
            if validation_error is None:
                return KeyResolution(ResolutionStrategy.CUSTOM, custom_value)
            logger.warning(validation_error)

    def _configurator_option_label(self, key_spec: EnvironmentKeySpec, strategy: ResolutionStrategy) -> str:
        label = _STRATEGY_LABELS[strategy]
        if strategy is ResolutionStrategy.DEFAULT:
            shown_default = key_spec.default if key_spec.default else "empty"
            return f"{label} ({shown_default})"
        return label

    def _configurator_guard_empty(self, key_spec: EnvironmentKeySpec, resolution: KeyResolution) -> KeyResolution:
        """Replace empty values for keys that must never be blank.

        Args:
            key_spec: Key being resolved.
            resolution: Candidate resolution.

        Returns:
            KeyResolution: Resolution with a non-empty value when required.

        Raises:
            SecretGenerationError: Raised when entropy is unavailable.
        """

        if resolution.value:
            return resolution
        if key_spec.key_is_secret():
            logger.warning("%s must not be empty; using a freshly generated value", key_spec.name)
            return KeyResolution(ResolutionStrategy.GENERATE, self._configurator_generate(key_spec))
        if key_spec.required:
            logger.warning("%s must not be empty; using default %s", key_spec.name, key_spec.default)
            return KeyResolution(ResolutionStrategy.DEFAULT, key_spec.default or "")
        return resolution

    def _configurator_should_persist(
        self,
        key_spec: EnvironmentKeySpec,
        resolution: KeyResolution,
        was_persisted: bool,
    ) -> bool:
        if key_spec.required:
            return True
        if not resolution.value:
            return False
        return was_persisted or resolution.strategy is ResolutionStrategy.CUSTOM or resolution.value != key_spec.default

    def _configurator_generate(self, key_spec: EnvironmentKeySpec) -> str:
        if key_spec.kind is EnvironmentKeyKind.SHORT_SECRET:
            return self._secret_generator.secret_generate_short()
        return self._secret_generator.secret_generate_long()

    def _configurator_persist(self, config: EnvironmentConfig) -> bool:
        rendered_text = env_file_render(config)
        if self._env_file_path.exists():
            try:
                current_text = self._env_file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as error:
                raise EnvironmentFileError(f"failed to read environment file {self._env_file_path}: {error}") from error
            if current_text == rendered_text:
                logger.info("Configuration unchanged: %s", self._env_file_path)
                return False

        env_file_write(self._env_file_path, rendered_text)
        logs_success(logger, "Configuration saved to %s", self._env_file_path)
        return True

    def _configurator_announce_minted(self, config: EnvironmentConfig, minted_keys: list[str]) -> None:
        announced_keys = [key for key in minted_keys if config.config_get(key)]
        if not announced_keys:
            return
        self._prompt.prompt_announce("")
        self._prompt.prompt_announce("Generated/default configuration values (record them now, they are not shown again):")
        for key in announced_keys:
            self._prompt.prompt_announce(f"  {key}={config.config_get(key)}")
        self._prompt.prompt_announce("")
