"""Recognized environment keys and their resolution strategies."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum
from typing import Final


class EnvironmentKeyKind(str, Enum):
    """Value class of one environment key."""

    LONG_SECRET = "long_secret"
    SHORT_SECRET = "short_secret"
    LITERAL = "literal"


class ResolutionStrategy(str, Enum):
    """Operator-selectable way of resolving one key."""

    DEFAULT = "default"
    GENERATE = "generate"
    CUSTOM = "custom"


@dataclass(frozen=True)
class KeyResolution:
    """Tagged resolution outcome for one key.

    Attributes:
        strategy: How the value was obtained.
        value: Resolved value (empty only for optional keys left unset).
    """

    strategy: ResolutionStrategy
    value: str


@dataclass(frozen=True)
class EnvironmentKeySpec:
    """Declaration of one recognized environment key.

    Attributes:
        name: Environment variable name.
        description: Operator-facing description shown in prompts.
        kind: Secret profile or literal.
        default: Documented default; None for secrets without a safe default.
        required: Whether the key must be present with a non-empty value.
    """

    name: str
    description: str
    kind: EnvironmentKeyKind
    default: str | None = None
    required: bool = True

    def key_is_secret(self) -> bool:
        """Return whether the key holds a generated secret."""

        return self.kind is not EnvironmentKeyKind.LITERAL

    def key_strategies(self) -> tuple[ResolutionStrategy, ...]:
        """Return the menu of strategies offered for this key, default choice first.

        Returns:
            tuple[ResolutionStrategy, ...]: Offered strategies.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self.key_is_secret():
            if self.default is not None:
                return (ResolutionStrategy.GENERATE, ResolutionStrategy.DEFAULT, ResolutionStrategy.CUSTOM)
            return (ResolutionStrategy.GENERATE, ResolutionStrategy.CUSTOM)
        return (ResolutionStrategy.DEFAULT, ResolutionStrategy.CUSTOM)

    def key_validate(self, value: str) -> str | None:
        """Validate a candidate value.

        Args:
            value: Candidate value.

        Returns:
            str | None: Error message when invalid, otherwise None.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if any(character.isspace() for character in value):
            return f"{self.name} must not contain whitespace"
        if any(character in value for character in ("'", '"', "#", "\\")):
            return f"{self.name} must not contain quotes, '#' or backslashes"
        if self.name == LISTEN_PORT_KEY and value:
            if not value.isdigit() or not 1 <= int(value) <= 65535:
                return f"{self.name} must be a port number between 1 and 65535"
        if self.name == PUBLIC_HOST_KEY and value and not catalog_is_host_name(value):
            return f"{self.name} must be a host name or IP address without scheme, port or path"
        if self.kind is EnvironmentKeyKind.SHORT_SECRET and value and not value.isalnum():
            return f"{self.name} must contain only letters and digits to stay safe inside connection URLs"
        return None


MASTER_SECRET_KEY: Final[str] = "HANDY_MASTER_SECRET"
POSTGRES_PASSWORD_KEY: Final[str] = "POSTGRES_PASSWORD"
REDIS_PASSWORD_KEY: Final[str] = "REDIS_PASSWORD"
S3_SECRET_KEY_KEY: Final[str] = "S3_SECRET_KEY"
PUBLIC_HOST_KEY: Final[str] = "PUBLIC_HOST"
LISTEN_PORT_KEY: Final[str] = "LISTEN_PORT"
S3_ACCESS_KEY_KEY: Final[str] = "S3_ACCESS_KEY"
DNS_API_TOKEN_KEY: Final[str] = "DNS_API_TOKEN"

DEFAULT_PUBLIC_HOST: Final[str] = "localhost"
DEFAULT_LISTEN_PORT: Final[str] = "8080"
DEFAULT_S3_ACCESS_KEY: Final[str] = "happy"

ENVIRONMENT_KEY_CATALOG: Final[tuple[EnvironmentKeySpec, ...]] = (
    EnvironmentKeySpec(
        name=MASTER_SECRET_KEY,
        description="Master secret used by the server to sign authentication tokens",
        kind=EnvironmentKeyKind.LONG_SECRET,
    ),
    EnvironmentKeySpec(
        name=POSTGRES_PASSWORD_KEY,
        description="PostgreSQL password",
        kind=EnvironmentKeyKind.SHORT_SECRET,
    ),
    EnvironmentKeySpec(
        name=REDIS_PASSWORD_KEY,
        description="Redis password",
        kind=EnvironmentKeyKind.SHORT_SECRET,
    ),
    EnvironmentKeySpec(
        name=S3_SECRET_KEY_KEY,
        description="Object store (MinIO) secret key",
        kind=EnvironmentKeyKind.LONG_SECRET,
    ),
    EnvironmentKeySpec(
        name=PUBLIC_HOST_KEY,
        description="Public host name clients use to reach the server",
        kind=EnvironmentKeyKind.LITERAL,
        default=DEFAULT_PUBLIC_HOST,
    ),
    EnvironmentKeySpec(
        name=LISTEN_PORT_KEY,
        description="Host port the API server listens on",
        kind=EnvironmentKeyKind.LITERAL,
        default=DEFAULT_LISTEN_PORT,
    ),
    EnvironmentKeySpec(
        name=S3_ACCESS_KEY_KEY,
        description="Object store (MinIO) access key",
        kind=EnvironmentKeyKind.LITERAL,
        default=DEFAULT_S3_ACCESS_KEY,
        required=False,
    ),
    EnvironmentKeySpec(
        name=DNS_API_TOKEN_KEY,
        description="DNS provider API token for TLS certificate automation (empty disables it)",
        kind=EnvironmentKeyKind.LITERAL,
        default="",
        required=False,
    ),
)

REQUIRED_ENVIRONMENT_KEYS: Final[tuple[str, ...]] = tuple(
    key_spec.name for key_spec in ENVIRONMENT_KEY_CATALOG if key_spec.required
)

_HOST_LABEL_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?")


def catalog_is_host_name(value: str) -> bool:
    """Return whether value is a bare DNS host name or IP address.

    Args:
        value: Candidate host.

    Returns:
        bool: True for `example.com`, `localhost`, `10.0.0.5` or `::1`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        ipaddress.ip_address(value)
    except ValueError:
        pass
    else:
        return True
    if len(value) > 253:
        return False
    return all(_HOST_LABEL_PATTERN.fullmatch(label) for label in value.split("."))
