"""Subprocess execution helper for host-level commands."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from installer.errors import FatalPreconditionError

logger = logging.getLogger(__name__)


class CommandExecutionError(FatalPreconditionError):
    """Host command failed or could not be launched.

    Attributes:
        command: Executed argument vector.
        returncode: Process exit status, or None when the process never started.
        stderr: Captured standard error when available.
    """

    default_error_code = "INSTALL_COMMAND_ERROR"

    def __init__(self, command: tuple[str, ...], returncode: int | None, stderr: str | None = None):
        rendered_command = shlex.join(command)
        if returncode is None:
            message = f"command could not be started: {rendered_command}"
        else:
            message = f"command failed with exit status {returncode}: {rendered_command}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class SystemCommandRunner:
    """Run host commands, elevating privileged ones with the configured prefix."""

    def __init__(self, privilege_prefix: tuple[str, ...] = ()):
        """Initialize command runner.

        Args:
            privilege_prefix: Prefix for privileged commands, e.g. `("sudo",)`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._privilege_prefix = tuple(privilege_prefix)

    def runner_run(
        self,
        arguments: Sequence[str],
        cwd: Path | None = None,
        privileged: bool = False,
        capture_output: bool = False,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        """Run one command.

        Args:
            arguments: Argument vector without privilege prefix.
            cwd: Optional working directory.
            privileged: Prefix the command with the privilege prefix.
            capture_output: Capture stdout/stderr as text.
            check: Raise when the command exits non-zero.

        Returns:
            subprocess.CompletedProcess[str]: Completed process.

        Raises:
            CommandExecutionError: Raised when the command cannot start, or exits
                non-zero while `check` is True.
        """

        command = (*self._privilege_prefix, *arguments) if privileged else tuple(arguments)
        logger.debug("running: %s", shlex.join(command))
        try:
            completed = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd is not None else None,
                capture_output=capture_output,
                text=True,
                check=False,
            )
        except (FileNotFoundError, PermissionError) as error:
            raise CommandExecutionError(command=command, returncode=None) from error

        if check and completed.returncode != 0:
            raise CommandExecutionError(
                command=command,
                returncode=completed.returncode,
                stderr=completed.stderr if capture_output else None,
            )
        return completed

    def runner_succeeds(self, arguments: Sequence[str]) -> bool:
        """Return whether a command exits zero, treating launch failure as False."""

        try:
            return self.runner_run(arguments, capture_output=True, check=False).returncode == 0
        except CommandExecutionError:
            return False

    def runner_which(self, executable: str) -> str | None:
        """Return the resolved path of an executable on PATH."""

        return shutil.which(executable)
