"""Health probe contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ProbeObservation:
    """Single probe observation.

    Attributes:
        passed: Whether the endpoint reported ready.
        failure_reason: Human-readable reason when not ready.
    """

    passed: bool
    failure_reason: str | None = None


class EndpointProbePort(Protocol):
    """Port performing one readiness probe against an endpoint."""

    def probe_check(self, endpoint: str) -> ProbeObservation:
        """Probe endpoint once without retrying.

        Args:
            endpoint: Endpoint URL.

        Returns:
            ProbeObservation: Probe outcome; transport errors are reported, not raised.

        Raises:
            RuntimeError: Implementations must not raise for unreachable endpoints.
        """
