"""Flat `KEY=value` environment file persistence."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Final

from dotenv import dotenv_values

from installer.domain import EnvironmentConfig
from installer.errors import EnvironmentFileError

ENV_FILE_NAME: Final[str] = ".env"
ENV_FILE_MODE: Final[int] = 0o600
_ENV_FILE_HEADER: Final[str] = (
    "# Happy Server configuration\n"
    "# Single source of truth for installer re-runs; secrets are displayed only once when generated.\n"
)


def env_file_read(path: Path) -> dict[str, str]:
    """Read persisted key/value pairs.

    Args:
        path: Environment file path.

    Returns:
        dict[str, str]: Ordered values; empty when the file does not exist.

    Raises:
        EnvironmentFileError: Raised when the file exists but cannot be read.
    """

    if not path.exists():
        return {}
    try:
        raw_values = dotenv_values(path, interpolate=False)
    except (OSError, UnicodeDecodeError) as error:
        raise EnvironmentFileError(f"failed to read environment file {path}: {error}") from error
    return {key: value for key, value in raw_values.items() if value is not None}


def env_file_render(config: EnvironmentConfig) -> str:
    """Render config to deterministic file text.

    Args:
        config: Resolved environment config.

    Returns:
        str: Header followed by one `KEY=value` line per key.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    lines = [f"{key}={value}\n" for key, value in config.entries]
    return _ENV_FILE_HEADER + "".join(lines)


def env_file_write(path: Path, content: str) -> None:
    """Atomically write content with owner-only permissions.

    Args:
        path: Destination path.
        content: File text.

    Returns:
        None: File is written as side effect.

    Raises:
        EnvironmentFileError: Raised when the file cannot be written.
    """

    temporary_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temporary_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(temporary_name, ENV_FILE_MODE)
        os.replace(temporary_name, path)
        temporary_name = None
    except OSError as error:
        raise EnvironmentFileError(f"failed to write environment file {path}: {error}") from error
    finally:
        if temporary_name is not None and os.path.exists(temporary_name):
            os.unlink(temporary_name)
