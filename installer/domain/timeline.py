"""Shared timeline event helper utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured installation timeline event.

    Args:
        stage: Installation stage name.
        status: Stage status marker (`started`, `completed`, `skipped`, `failed`, ...).
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        event_payload["details"] = dict(details)
    return event_payload


def domain_timeline_stage_statuses(timeline: list[dict[str, object]], stage: str) -> list[str]:
    """Return ordered status markers recorded for one stage.

    Args:
        timeline: Installation timeline events.
        stage: Stage name to filter on.

    Returns:
        list[str]: Status markers in recording order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return [str(event.get("status")) for event in timeline if event.get("stage") == stage]
