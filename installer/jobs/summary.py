"""Operator-facing summary of a finished installation run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from installer.topology import APPLICATION_SERVICE_NAME

if TYPE_CHECKING:
    from .interfaces import InstallationRunResult

_RULE = "=" * 46


def job_build_summary_lines(result: InstallationRunResult) -> tuple[str, ...]:
    """Build the final summary shown after services were started.

    Args:
        result: Finished run result.

    Returns:
        tuple[str, ...]: Summary lines, empty when services never started.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    started_services = result.started_services
    if started_services is None:
        return ()

    layout = started_services.topology_result.config_result.layout
    base_url = started_services.application_base_url
    compose_command = started_services.compose_command
    headline = "Happy Server installation complete!"
    if result.status == "degraded":
        headline = "Happy Server started, but the application is not healthy yet."

    lines = [
        "",
        _RULE,
        headline,
        _RULE,
        "",
        f"Install directory: {layout.install_directory}",
        f"Data directory:    {layout.data_directory}",
        "",
        "Service endpoints:",
        f"  API server:   {base_url}/",
        f"  Health check: {base_url}/health",
        "",
        "Common commands:",
        f"  cd {layout.install_directory}",
        f"  {compose_command} logs -f {APPLICATION_SERVICE_NAME}",
        f"  {compose_command} restart",
        f"  {compose_command} down",
        f"  {compose_command} up -d",
        "",
        "Back up data:",
        f"  cp -r {layout.data_directory} /path/to/backup/",
        "",
        "Connect the CLI:",
        f"  HAPPY_SERVER_URL={base_url} happy daemon start",
        "",
    ]
    credential = result.credential
    if credential is not None and credential.access_key_path is not None:
        lines.extend([f"Access key: {credential.access_key_path}", "Keep this key safe; it encrypts all of your messages.", ""])
    elif credential is not None:
        lines.extend([f"Access key was not issued: {credential.failure_reason}", ""])
    lines.append(_RULE)
    return tuple(lines)
