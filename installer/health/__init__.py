"""Readiness polling for started services."""

from .gate import HealthGate
from .interfaces import EndpointProbePort, ProbeObservation
from .probes import HttpMarkerProbe

__all__ = [
	"EndpointProbePort",
	"HealthGate",
	"HttpMarkerProbe",
	"ProbeObservation",
]
