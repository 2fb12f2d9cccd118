"""Bounded fixed-interval readiness polling."""

from __future__ import annotations

import logging
import time
from typing import Callable

from installer.domain import HealthCheckResult, HealthOutcome

from .interfaces import EndpointProbePort

logger = logging.getLogger(__name__)


class HealthGate:
    """Poll an endpoint until it reports ready or the attempt budget runs out.

    The gate sleeps between attempts but never after the final one, so an
    exhausted wait lasts `initial_delay + (max_attempts - 1) * interval` plus
    probe time.
    """

    def __init__(
        self,
        probe: EndpointProbePort,
        interval_seconds: float,
        max_attempts: int,
        initial_delay_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize health gate.

        Args:
            probe: Single-shot endpoint probe.
            interval_seconds: Fixed delay between attempts.
            max_attempts: Maximum number of probes.
            initial_delay_seconds: Delay before the first probe.
            sleep: Sleep function, replaceable in tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when timing values are invalid.
        """

        if probe is None:
            raise ValueError("probe must not be None")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0")

        self._probe = probe
        self._interval_seconds = interval_seconds
        self._max_attempts = max_attempts
        self._initial_delay_seconds = initial_delay_seconds
        self._sleep = sleep

    def gate_wait(self, endpoint: str) -> HealthCheckResult:
        """Wait for endpoint readiness.

        Args:
            endpoint: Endpoint URL.

        Returns:
            HealthCheckResult: `ready` on first passing probe, otherwise `exhausted`
            with the last failure reason after exactly `max_attempts` probes.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._initial_delay_seconds > 0:
            self._sleep(self._initial_delay_seconds)

        last_failure: str | None = None
        for attempt in range(1, self._max_attempts + 1):
            observation = self._probe.probe_check(endpoint)
            if observation.passed:
                logger.debug("Endpoint %s ready after %s attempt(s)", endpoint, attempt)
                return HealthCheckResult(endpoint=endpoint, attempt=attempt, outcome=HealthOutcome.READY)

            last_failure = observation.failure_reason or "probe failed"
            logger.info("Waiting for %s (%s/%s): %s", endpoint, attempt, self._max_attempts, last_failure)
            if attempt < self._max_attempts:
                self._sleep(self._interval_seconds)

        return HealthCheckResult(
            endpoint=endpoint,
            attempt=self._max_attempts,
            outcome=HealthOutcome.EXHAUSTED,
            last_failure=last_failure,
        )
