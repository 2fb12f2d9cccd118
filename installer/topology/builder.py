"""Topology validation and deterministic container-runtime descriptor rendering."""

from __future__ import annotations

import heapq
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Iterable

import yaml

from installer.domain import EnvironmentConfig, ReadinessPredicate, ServiceSpec
from installer.environment import (
    DEFAULT_S3_ACCESS_KEY,
    DNS_API_TOKEN_KEY,
    LISTEN_PORT_KEY,
    PUBLIC_HOST_KEY,
    S3_ACCESS_KEY_KEY,
)
from installer.errors import ConfigurationError, DependencyCycleError, MissingConfigurationKeyError, UnknownDependencyError

from .services import APPLICATION_SERVICE_NAME

logger = logging.getLogger(__name__)

COMPOSE_FILE_NAME: Final[str] = "docker-compose.yaml"
PROXY_ROUTES_FILE_NAME: Final[str] = "Caddyfile"
DNS_PROVIDER_NAME: Final[str] = "cloudflare"

DEFAULT_INLINE_KEYS: Final[frozenset[str]] = frozenset({PUBLIC_HOST_KEY, LISTEN_PORT_KEY, S3_ACCESS_KEY_KEY})
DEFAULT_OPTIONAL_VALUES: Final[dict[str, str]] = {S3_ACCESS_KEY_KEY: DEFAULT_S3_ACCESS_KEY, DNS_API_TOKEN_KEY: ""}

_REFERENCE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_DEPENDENCY_CONDITIONS: Final[dict[ReadinessPredicate, str]] = {
    ReadinessPredicate.PROCESS_STARTED: "service_started",
    ReadinessPredicate.EXTERNAL_PROBE_PASSES: "service_healthy",
    ReadinessPredicate.PROCESS_COMPLETED: "service_completed_successfully",
}


@dataclass(frozen=True)
class RenderedTopology:
    """Rendered runtime descriptor and auxiliary configuration.

    Attributes:
        compose_text: Container runtime descriptor (YAML).
        proxy_routes_text: Front-door routing rules.
        service_order: Services in dependency order.
    """

    compose_text: str
    proxy_routes_text: str
    service_order: tuple[str, ...]

    def rendered_files(self) -> tuple[tuple[str, str], ...]:
        """Return file name and content pairs in write order."""

        return ((COMPOSE_FILE_NAME, self.compose_text), (PROXY_ROUTES_FILE_NAME, self.proxy_routes_text))


class TopologyBuilder:
    """Validate service dependencies and render the deployment descriptor."""

    def __init__(
        self,
        services: Iterable[ServiceSpec],
        application_service_name: str = APPLICATION_SERVICE_NAME,
        inline_keys: frozenset[str] = DEFAULT_INLINE_KEYS,
        optional_values: dict[str, str] | None = None,
    ):
        """Initialize topology builder.

        Args:
            services: Declared services.
            application_service_name: Service the front door routes to.
            inline_keys: Non-secret keys substituted literally into the descriptor.
            optional_values: Documented defaults for optional keys.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ConfigurationError: Raised for empty or duplicate service declarations.
        """

        self._services = tuple(services)
        if not self._services:
            raise ConfigurationError("topology must declare at least one service")

        service_names = [service.name for service in self._services]
        duplicate_names = sorted({name for name in service_names if service_names.count(name) > 1})
        if duplicate_names:
            raise ConfigurationError(f"duplicate service names: {', '.join(duplicate_names)}")

        self._services_by_name = {service.name: service for service in self._services}
        self._application_service_name = application_service_name
        self._inline_keys = inline_keys
        self._optional_values = dict(DEFAULT_OPTIONAL_VALUES if optional_values is None else optional_values)

    def topology_validate(self) -> tuple[str, ...]:
        """Validate references and acyclicity, returning a deterministic dependency order.

        Returns:
            tuple[str, ...]: Service names, dependencies first, ties broken by name.

        Raises:
            UnknownDependencyError: Raised when a dependency is not declared.
            DependencyCycleError: Raised when the dependency graph has a cycle.
            ConfigurationError: Raised when a probe-gated service has no probe.
        """

        for service in sorted(self._services, key=lambda candidate: candidate.name):
            for dependency_name in sorted(service.depends_on):
                if dependency_name not in self._services_by_name:
                    raise UnknownDependencyError(service_name=service.name, dependency_name=dependency_name)
            if service.readiness is ReadinessPredicate.EXTERNAL_PROBE_PASSES and service.probe is None:
                raise ConfigurationError(f"service '{service.name}' is probe-gated but declares no probe")

        cycle = self._topology_find_cycle()
        if cycle is not None:
            raise DependencyCycleError(cycle=cycle)

        return self._topology_dependency_order()

    def topology_render(self, config: EnvironmentConfig) -> RenderedTopology:
        """Render the descriptor and proxy routes for a resolved config.

        Args:
            config: Resolved environment config.

        Returns:
            RenderedTopology: Byte-stable rendered output.

        Raises:
            UnknownDependencyError: Raised when a dependency is not declared.
            DependencyCycleError: Raised when the dependency graph has a cycle.
            MissingConfigurationKeyError: Raised when a consumed key is absent.
        """

        service_order = self.topology_validate()
        self._topology_require_keys(config=config, keys=self._topology_consumed_keys())

        services_document: dict[str, Any] = {}
        for service_name in service_order:
            services_document[service_name] = self._topology_render_service(
                service=self._services_by_name[service_name],
                config=config,
            )
        compose_text = yaml.safe_dump(
            {"services": services_document},
            sort_keys=False,
            default_flow_style=False,
            width=4096,
        )
        return RenderedTopology(
            compose_text=compose_text,
            proxy_routes_text=self._topology_render_proxy_routes(config),
            service_order=service_order,
        )

    def topology_write(self, rendered: RenderedTopology, install_directory: Path) -> tuple[Path, ...]:
        """Write rendered files, overwriting any previous render.

        Args:
            rendered: Rendered topology.
            install_directory: Destination directory.

        Returns:
            tuple[Path, ...]: Written file paths.

        Raises:
            ConfigurationError: Raised when a file cannot be written.
        """

        written_paths: list[Path] = []
        for file_name, content in rendered.rendered_files():
            target_path = install_directory / file_name
            temporary_path = target_path.with_name(f".{file_name}.tmp")
            try:
                temporary_path.write_text(content, encoding="utf-8")
                os.replace(temporary_path, target_path)
            except OSError as error:
                raise ConfigurationError(f"failed to write {target_path}: {error}") from error
            finally:
                if temporary_path.exists():
                    temporary_path.unlink()
            written_paths.append(target_path)
            logger.info("Rendered %s", target_path)
        return tuple(written_paths)

    def _topology_find_cycle(self) -> tuple[str, ...] | None:
        """Return the first dependency cycle found by depth-first search.

        Returns:
            tuple[str, ...] | None: Cycle path with the start repeated at the end.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        visiting_state: dict[str, int] = {}
        for root_name in sorted(self._services_by_name):
            if visiting_state.get(root_name):
                continue
            path: list[str] = [root_name]
            iterators = [iter(sorted(self._services_by_name[root_name].depends_on))]
            visiting_state[root_name] = 1
            while iterators:
                next_name = next(iterators[-1], None)
                if next_name is None:
                    visiting_state[path.pop()] = 2
                    iterators.pop()
                    continue
                state = visiting_state.get(next_name, 0)
                if state == 1:
                    cycle_start = path.index(next_name)
                    return (*path[cycle_start:], next_name)
                if state == 0:
                    visiting_state[next_name] = 1
                    path.append(next_name)
                    iterators.append(iter(sorted(self._services_by_name[next_name].depends_on)))
        return None

    def _topology_dependency_order(self) -> tuple[str, ...]:
        remaining_dependencies = {
            service.name: set(service.depends_on) for service in self._services
        }
        dependents: dict[str, list[str]] = {name: [] for name in remaining_dependencies}
        for service_name, dependency_names in remaining_dependencies.items():
            for dependency_name in dependency_names:
                dependents[dependency_name].append(service_name)

        ready_names = [name for name, dependency_names in remaining_dependencies.items() if not dependency_names]
        heapq.heapify(ready_names)
        ordered_names: list[str] = []
        while ready_names:
            service_name = heapq.heappop(ready_names)
            ordered_names.append(service_name)
            for dependent_name in dependents[service_name]:
                remaining_dependencies[dependent_name].discard(service_name)
                if not remaining_dependencies[dependent_name]:
                    heapq.heappush(ready_names, dependent_name)
        return tuple(ordered_names)

    def _topology_consumed_keys(self) -> tuple[str, ...]:
        consumed_keys: set[str] = {PUBLIC_HOST_KEY, LISTEN_PORT_KEY}
        for service in self._services:
            for text in self._topology_service_texts(service):
                consumed_keys.update(_REFERENCE_PATTERN.findall(text))
        return tuple(sorted(consumed_keys))

    def _topology_require_keys(self, config: EnvironmentConfig, keys: Iterable[str]) -> None:
        for key in keys:
            if config.config_get(key):
                continue
            if key in self._optional_values:
                continue
            raise MissingConfigurationKeyError(key_name=key)

    def _topology_resolve_value(self, key: str, config: EnvironmentConfig) -> str:
        value = config.config_get(key)
        if value:
            return value
        return self._optional_values.get(key, "")

    def _topology_substitute(self, text: str, config: EnvironmentConfig) -> str:
        def _replace(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in self._inline_keys:
                return self._topology_resolve_value(key, config)
            return match.group(0)

        return _REFERENCE_PATTERN.sub(_replace, text)

    def _topology_service_texts(self, service: ServiceSpec) -> list[str]:
        texts = [value for _, value in service.environment]
        texts.extend(service.volumes)
        texts.extend(port.host for port in service.exposed_ports)
        texts.extend(service.command or ())
        texts.extend(service.entrypoint or ())
        if service.probe is not None:
            texts.extend(service.probe.test)
        if service.build is not None:
            texts.extend(value for _, value in service.build.args)
        return texts

    def _topology_render_service(self, service: ServiceSpec, config: EnvironmentConfig) -> dict[str, Any]:
        """Render one service entry with a fixed key order.

        Args:
            service: Service declaration.
            config: Resolved environment config.

        Returns:
            dict[str, Any]: Compose service mapping.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        def substitute(text: str) -> str:
            return self._topology_substitute(text, config)

        document: dict[str, Any] = {}
        if service.image is not None:
            document["image"] = service.image
        if service.build is not None:
            build_document: dict[str, Any] = {
                "context": service.build.context,
                "dockerfile": service.build.dockerfile,
            }
            if service.build.args:
                build_document["args"] = [f"{name}={substitute(value)}" for name, value in service.build.args]
            document["build"] = build_document
        if service.container_name is not None:
            document["container_name"] = service.container_name
        document["restart"] = service.restart
        if service.command is not None:
            document["command"] = [substitute(part) for part in service.command]
        if service.entrypoint is not None:
            document["entrypoint"] = [substitute(part) for part in service.entrypoint]
        if service.depends_on:
            document["depends_on"] = {
                dependency_name: {
                    "condition": _DEPENDENCY_CONDITIONS[self._services_by_name[dependency_name].readiness],
                }
                for dependency_name in sorted(service.depends_on)
            }
        if service.environment:
            document["environment"] = {name: substitute(value) for name, value in service.environment}
        if service.volumes:
            document["volumes"] = [substitute(volume) for volume in service.volumes]
        if service.exposed_ports:
            document["ports"] = [f"{substitute(port.host)}:{port.container}" for port in service.exposed_ports]
        if service.probe is not None:
            healthcheck_document: dict[str, Any] = {
                "test": [substitute(part) for part in service.probe.test],
                "interval": service.probe.interval,
                "timeout": service.probe.timeout,
                "retries": service.probe.retries,
            }
            if service.probe.start_period is not None:
                healthcheck_document["start_period"] = service.probe.start_period
            document["healthcheck"] = healthcheck_document
        return document

    def _topology_render_proxy_routes(self, config: EnvironmentConfig) -> str:
        """Render front-door routes for `/health` and `/v1/*` to the application.

        Args:
            config: Resolved environment config.

        Returns:
            str: Caddyfile text.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        public_host = self._topology_resolve_value(PUBLIC_HOST_KEY, config)
        listen_port = self._topology_resolve_value(LISTEN_PORT_KEY, config)
        upstream = f"localhost:{listen_port}"

        lines = [f"# Front door for {self._application_service_name}; regenerated on every install run.", f"{public_host} {{"]
        if self._topology_resolve_value(DNS_API_TOKEN_KEY, config):
            lines.extend(
                [
                    "\ttls {",
                    f"\t\tdns {DNS_PROVIDER_NAME} {{env.{DNS_API_TOKEN_KEY}}}",
                    "\t}",
                ]
            )
        for route in ("/health", "/v1/*"):
            lines.extend([f"\thandle {route} {{", f"\t\treverse_proxy {upstream}", "\t}"])
        lines.extend(["\thandle {", "\t\trespond 404", "\t}", "}"])
        return "\n".join(lines) + "\n"
