"""Tests for topology validation, deterministic rendering and build scaffolding."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest
import yaml

from installer.domain import EnvironmentConfig, ReadinessPredicate, ReadinessProbe, ServiceSpec
from installer.errors import (
    ConfigurationError,
    DependencyCycleError,
    MissingConfigurationKeyError,
    UnknownDependencyError,
)
from installer.topology import (
    COMPOSE_FILE_NAME,
    DOCKERFILE_NAME,
    ENTRYPOINT_NAME,
    PROXY_ROUTES_FILE_NAME,
    TopologyBuilder,
    scaffold_write_build_files,
    topology_default_services,
)


def _resolved_config(**overrides: str) -> EnvironmentConfig:
    values = {
        "HANDY_MASTER_SECRET": "MasterSecretValue0123456789abcde",
        "POSTGRES_PASSWORD": "PostgresPassword01234567",
        "REDIS_PASSWORD": "RedisPassword0123456789A",
        "S3_SECRET_KEY": "S3SecretValue0123456789abcdefghi",
        "PUBLIC_HOST": "localhost",
        "LISTEN_PORT": "8080",
    }
    values.update(overrides)
    return EnvironmentConfig.config_from_mapping(values)


def test_topology_default_services_are_five_and_acyclic() -> None:
    """Validate the default topology and its deterministic dependency order.

    Returns:
        None: Assertions validate service set and order.

    Raises:
        AssertionError: Raised when the default topology changes shape.
    """

    services = topology_default_services()

    service_order = TopologyBuilder(services).topology_validate()

    assert len(services) == 5
    assert service_order == ("minio", "minio-init", "postgres", "redis", "happy-server")


def test_topology_render_is_byte_stable_and_gates_on_readiness() -> None:
    """Render twice with the same config and inspect the resulting descriptor.

    Returns:
        None: Assertions validate determinism and dependency conditions.

    Raises:
        AssertionError: Raised when rendering is unstable or conditions are wrong.
    """

    config = _resolved_config()

    first = TopologyBuilder(topology_default_services()).topology_render(config)
    second = TopologyBuilder(topology_default_services()).topology_render(config)

    assert first == second
    document = yaml.safe_load(first.compose_text)
    assert list(document["services"]) == list(first.service_order)
    application = document["services"]["happy-server"]
    assert application["depends_on"] == {
        "minio": {"condition": "service_started"},
        "minio-init": {"condition": "service_completed_successfully"},
        "postgres": {"condition": "service_healthy"},
        "redis": {"condition": "service_healthy"},
    }
    assert application["ports"] == ["8080:3005", "9090:9090"]
    assert application["environment"]["S3_ACCESS_KEY"] == "happy"
    assert application["environment"]["HANDY_MASTER_SECRET"] == "${HANDY_MASTER_SECRET}"


def test_topology_render_never_embeds_secret_values() -> None:
    config = _resolved_config(PUBLIC_HOST="happy.example.com")

    rendered = TopologyBuilder(topology_default_services()).topology_render(config)

    for key in ("HANDY_MASTER_SECRET", "POSTGRES_PASSWORD", "REDIS_PASSWORD", "S3_SECRET_KEY"):
        assert config.config_require(key) not in rendered.compose_text
        assert f"${{{key}}}" in rendered.compose_text
    assert "http://happy.example.com:9000/happy" in rendered.compose_text


def test_topology_cycle_is_rejected_before_rendering_and_names_the_path() -> None:
    """Reject a dependency cycle even when the config is empty.

    Returns:
        None: Assertions validate cycle detection precedence and message.

    Raises:
        AssertionError: Raised when the cycle is not reported.
    """

    services = (
        ServiceSpec(name="a", image="busybox", depends_on=frozenset({"b"})),
        ServiceSpec(name="b", image="busybox", depends_on=frozenset({"a"})),
    )

    with pytest.raises(DependencyCycleError, match="cycle detected: a -> b -> a") as error_info:
        TopologyBuilder(services).topology_render(EnvironmentConfig())
    assert error_info.value.cycle == ("a", "b", "a")
    assert isinstance(error_info.value, ConfigurationError)


def test_topology_unknown_dependency_is_rejected() -> None:
    services = (ServiceSpec(name="app", image="busybox", depends_on=frozenset({"db"})),)

    with pytest.raises(UnknownDependencyError, match="unknown dependency") as error_info:
        TopologyBuilder(services).topology_validate()
    assert error_info.value.dependency_name == "db"


def test_topology_probe_gated_service_requires_probe() -> None:
    services = (
        ServiceSpec(name="db", image="postgres", readiness=ReadinessPredicate.EXTERNAL_PROBE_PASSES),
    )

    with pytest.raises(ConfigurationError, match="declares no probe"):
        TopologyBuilder(services).topology_validate()


def test_topology_duplicate_service_names_are_rejected() -> None:
    services = (ServiceSpec(name="db", image="postgres"), ServiceSpec(name="db", image="mysql"))

    with pytest.raises(ConfigurationError, match="duplicate service names: db"):
        TopologyBuilder(services)


def test_topology_missing_consumed_key_is_reported() -> None:
    config = EnvironmentConfig.config_from_mapping(
        {key: value for key, value in _resolved_config().entries if key != "REDIS_PASSWORD"}
    )

    with pytest.raises(MissingConfigurationKeyError, match="REDIS_PASSWORD"):
        TopologyBuilder(topology_default_services()).topology_render(config)


def test_topology_ties_are_broken_by_name() -> None:
    probe = ReadinessProbe(test=("CMD", "true"))
    services = (
        ServiceSpec(name="zeta", image="busybox"),
        ServiceSpec(name="alpha", image="busybox", readiness=ReadinessPredicate.EXTERNAL_PROBE_PASSES, probe=probe),
        ServiceSpec(name="mid", image="busybox", depends_on=frozenset({"zeta", "alpha"})),
    )

    assert TopologyBuilder(services).topology_validate() == ("alpha", "zeta", "mid")


def test_topology_proxy_routes_cover_health_and_api_only() -> None:
    rendered = TopologyBuilder(topology_default_services()).topology_render(_resolved_config(PUBLIC_HOST="happy.example.com"))

    assert rendered.proxy_routes_text.splitlines()[1] == "happy.example.com {"
    assert "\thandle /health {" in rendered.proxy_routes_text
    assert "\thandle /v1/* {" in rendered.proxy_routes_text
    assert "reverse_proxy localhost:8080" in rendered.proxy_routes_text
    assert "tls" not in rendered.proxy_routes_text


def test_topology_proxy_routes_enable_dns_challenge_when_token_is_set() -> None:
    rendered = TopologyBuilder(topology_default_services()).topology_render(_resolved_config(DNS_API_TOKEN="token-value"))

    assert "dns cloudflare {env.DNS_API_TOKEN}" in rendered.proxy_routes_text
    assert "token-value" not in rendered.proxy_routes_text


def test_topology_write_overwrites_previous_render(tmp_path: Path) -> None:
    builder = TopologyBuilder(topology_default_services())
    (tmp_path / COMPOSE_FILE_NAME).write_text("stale", encoding="utf-8")

    written_paths = builder.topology_write(builder.topology_render(_resolved_config()), tmp_path)

    assert [path.name for path in written_paths] == [COMPOSE_FILE_NAME, PROXY_ROUTES_FILE_NAME]
    assert (tmp_path / COMPOSE_FILE_NAME).read_text(encoding="utf-8").startswith("services:")


def test_topology_scaffold_creates_only_missing_files(tmp_path: Path) -> None:
    """Keep an existing Dockerfile and create the missing entrypoint script.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate create-if-absent behavior.

    Raises:
        AssertionError: Raised when an existing file is overwritten.
    """

    (tmp_path / DOCKERFILE_NAME).write_text("FROM scratch\n", encoding="utf-8")

    result = scaffold_write_build_files(tmp_path)

    assert result.kept_paths == (tmp_path / DOCKERFILE_NAME,)
    assert result.created_paths == (tmp_path / ENTRYPOINT_NAME,)
    assert (tmp_path / DOCKERFILE_NAME).read_text(encoding="utf-8") == "FROM scratch\n"
    assert stat.S_IMODE((tmp_path / ENTRYPOINT_NAME).stat().st_mode) == 0o755
    assert "prisma migrate deploy" in (tmp_path / ENTRYPOINT_NAME).read_text(encoding="utf-8")


def test_topology_write_failure_leaves_no_temporary_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove the temporary render when the final rename fails.

    Args:
        tmp_path: Pytest temporary directory fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate the error and the cleaned directory.

    Raises:
        AssertionError: Raised when a temporary file survives the failure.
    """

    def _failing_replace(source: object, destination: object) -> None:
        raise PermissionError("read-only install directory")

    builder = TopologyBuilder(topology_default_services())
    rendered = builder.topology_render(_resolved_config())
    monkeypatch.setattr(os, "replace", _failing_replace)

    with pytest.raises(ConfigurationError, match="read-only install directory"):
        builder.topology_write(rendered, tmp_path)
    assert list(tmp_path.iterdir()) == []
