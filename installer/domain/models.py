"""Typed domain models shared across installer stages.

Each stage of the installation pipeline consumes the previous stage's
immutable result, so these contracts are frozen dataclasses and enums.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from installer.errors import MissingConfigurationKeyError


class ExistingDirectoryPolicy(str, Enum):
    """Policy for a pre-existing, non-empty installation directory."""

    REUSE = "reuse"
    REPLACE = "replace"


@dataclass(frozen=True)
class InstallationTarget:
    """Repository source and local checkout destination.

    Attributes:
        repository_url: Git URL of the server repository.
        install_directory: Absolute checkout directory.
    """

    repository_url: str
    install_directory: Path


@dataclass(frozen=True)
class EnvironmentConfig:
    """Ordered mapping of environment keys to resolved string values.

    Attributes:
        entries: Key/value pairs in catalog order.
    """

    entries: tuple[tuple[str, str], ...] = ()

    @classmethod
    def config_from_mapping(cls, values: dict[str, str]) -> EnvironmentConfig:
        """Build config preserving the mapping insertion order.

        Args:
            values: Ordered key/value mapping.

        Returns:
            EnvironmentConfig: Immutable config instance.

        Raises:
            ValueError: Raised when a key is blank.
        """

        for key in values:
            if not key.strip():
                raise ValueError("environment key must not be blank")
        return cls(entries=tuple((key, str(value)) for key, value in values.items()))

    def config_get(self, key: str, default: str | None = None) -> str | None:
        """Return value for key or default when absent."""

        for entry_key, entry_value in self.entries:
            if entry_key == key:
                return entry_value
        return default

    def config_require(self, key: str) -> str:
        """Return a non-empty value for key.

        Args:
            key: Environment key name.

        Returns:
            str: Resolved value.

        Raises:
            MissingConfigurationKeyError: Raised when the key is absent or empty.
        """

        value = self.config_get(key)
        if not value:
            raise MissingConfigurationKeyError(key_name=key)
        return value

    def config_keys(self) -> tuple[str, ...]:
        """Return keys in persisted order."""

        return tuple(entry_key for entry_key, _ in self.entries)

    def config_as_dict(self) -> dict[str, str]:
        """Return an ordered mutable copy of the entries."""

        return dict(self.entries)


class ReadinessPredicate(str, Enum):
    """Container-runtime gating condition a dependent service waits for."""

    PROCESS_STARTED = "process_started"
    EXTERNAL_PROBE_PASSES = "external_probe_passes"
    PROCESS_COMPLETED = "process_completed"


@dataclass(frozen=True)
class ReadinessProbe:
    """Container healthcheck definition used by `external_probe_passes`.

    Attributes:
        test: Healthcheck command in exec or shell form.
        interval: Probe interval duration string.
        timeout: Probe timeout duration string.
        retries: Consecutive failures before unhealthy.
        start_period: Optional grace period duration string.
    """

    test: tuple[str, ...]
    interval: str = "5s"
    timeout: str = "5s"
    retries: int = 5
    start_period: str | None = None


@dataclass(frozen=True)
class PortExposure:
    """Host port published for one container port.

    Attributes:
        host: Host-side port or interpolation expression.
        container: Container-side port.
    """

    host: str
    container: int


@dataclass(frozen=True)
class BuildReference:
    """Local image build context.

    Attributes:
        context: Build context path relative to the install directory.
        dockerfile: Dockerfile name inside the context.
        args: Ordered build arguments.
    """

    context: str = "."
    dockerfile: str = "Dockerfile"
    args: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ServiceSpec:
    """Structural description of one service in the topology.

    Attributes:
        name: Unique service name.
        image: Image reference when pulled from a registry.
        build: Build reference when built locally.
        depends_on: Names of services this service waits for.
        readiness: Condition dependents gate on.
        probe: Healthcheck backing `external_probe_passes`.
        exposed_ports: Published host ports.
        environment: Ordered container environment entries.
        volumes: Bind mounts in `host:container` form.
        command: Optional command override in exec form.
        entrypoint: Optional entrypoint override in exec form.
        restart: Restart policy.
        container_name: Optional fixed container name.
    """

    name: str
    image: str | None = None
    build: BuildReference | None = None
    depends_on: frozenset[str] = frozenset()
    readiness: ReadinessPredicate = ReadinessPredicate.PROCESS_STARTED
    probe: ReadinessProbe | None = None
    exposed_ports: tuple[PortExposure, ...] = ()
    environment: tuple[tuple[str, str], ...] = ()
    volumes: tuple[str, ...] = ()
    command: tuple[str, ...] | None = None
    entrypoint: tuple[str, ...] | None = None
    restart: str = "always"
    container_name: str | None = None


class HealthOutcome(str, Enum):
    """Health gate outcome for one endpoint."""

    PENDING = "pending"
    READY = "ready"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class HealthCheckResult:
    """Transient result of polling one readiness endpoint.

    Attributes:
        endpoint: Probed endpoint URL.
        attempt: Number of probes performed.
        outcome: Final gate outcome.
        last_failure: Last observed failure reason when not ready.
    """

    endpoint: str
    attempt: int
    outcome: HealthOutcome
    last_failure: str | None = None

    def health_is_ready(self) -> bool:
        """Return whether the endpoint reported ready."""

        return self.outcome is HealthOutcome.READY


@dataclass(frozen=True)
class AccessKey:
    """Durable client credential persisted after a successful handshake.

    Attributes:
        secret: Base64 encoded 32-byte symmetric secret.
        token: Opaque token issued by the server.
    """

    secret: str
    token: str

    def access_key_payload(self) -> dict[str, str]:
        """Return the JSON payload shape of the access key file."""

        return {"secret": self.secret, "token": self.token}


@dataclass(frozen=True)
class Credential:
    """Full credential material of one bootstrap attempt.

    Only `symmetric_secret` and `issued_token` outlive the attempt; the
    signing keys, challenge and signature are discarded after use.

    Attributes:
        public_key: Raw 32-byte Ed25519 verification key.
        secret_key: Raw 32-byte Ed25519 private seed.
        challenge: Random 32-byte challenge.
        signature: Detached signature over `challenge`.
        issued_token: Token issued by the server.
        symmetric_secret: Client-side 32-byte secret never sent to the server.
    """

    public_key: bytes
    secret_key: bytes = field(repr=False)
    challenge: bytes
    signature: bytes
    issued_token: str
    symmetric_secret: bytes = field(repr=False)

    def credential_to_access_key(self) -> AccessKey:
        """Project the persisted subset of the credential.

        Returns:
            AccessKey: Secret and token pair written to disk.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return AccessKey(
            secret=base64.b64encode(self.symmetric_secret).decode("ascii"),
            token=self.issued_token,
        )
