"""HTTP readiness probe implementation."""

from __future__ import annotations

import httpx

from .interfaces import EndpointProbePort, ProbeObservation


class HttpMarkerProbe(EndpointProbePort):
    """Probe an endpoint with `GET` and look for a literal marker in the body."""

    def __init__(self, client: httpx.Client, marker: str, timeout_seconds: float = 5.0):
        """Initialize HTTP marker probe.

        Args:
            client: HTTP client used for probes.
            marker: Literal text that must appear in the response body.
            timeout_seconds: Per-request timeout.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if client is None:
            raise ValueError("client must not be None")
        if not marker:
            raise ValueError("marker must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._client = client
        self._marker = marker
        self._timeout_seconds = timeout_seconds

    def probe_check(self, endpoint: str) -> ProbeObservation:
        """Probe endpoint once.

        Args:
            endpoint: Endpoint URL.

        Returns:
            ProbeObservation: Passed when the body contains the marker.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            response = self._client.get(endpoint, timeout=self._timeout_seconds)
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            return ProbeObservation(passed=False, failure_reason=f"{type(error).__name__}: {error}")

        if self._marker in response.text:
            return ProbeObservation(passed=True)
        return ProbeObservation(
            passed=False,
            failure_reason=f"HTTP {response.status_code}: marker '{self._marker}' not found in response body",
        )
