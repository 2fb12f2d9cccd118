"""Git-backed repository acquisition adapter."""

from __future__ import annotations

import logging
from pathlib import Path

from installer.errors import RepositoryAcquisitionError

from .commands import CommandExecutionError, SystemCommandRunner
from .interfaces import PrivilegeContext, RepositoryClientPort

logger = logging.getLogger(__name__)


class GitRepositoryClient(RepositoryClientPort):
    """Clone repositories with `git` and hand ownership back to the operator."""

    def __init__(self, runner: SystemCommandRunner, privilege: PrivilegeContext):
        """Initialize git repository client.

        Args:
            runner: Host command runner.
            privilege: Detected privilege context.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if runner is None:
            raise ValueError("runner must not be None")
        if privilege is None:
            raise ValueError("privilege must not be None")
        self._runner = runner
        self._privilege = privilege

    def repository_clone(self, repository_url: str, destination: Path) -> None:
        """Clone repository and restore ownership to the invoking operator.

        Args:
            repository_url: Repository URL.
            destination: Absent or empty destination directory.

        Returns:
            None: Repository is cloned as side effect.

        Raises:
            RepositoryAcquisitionError: Raised when clone or ownership change fails.
        """

        normalized_url = repository_url.strip()
        if not normalized_url:
            raise ValueError("repository_url must not be blank")

        logger.info("Cloning %s into %s...", normalized_url, destination)
        try:
            self._runner.runner_run(["git", "clone", normalized_url, str(destination)], privileged=True)
            if self._privilege.invoking_uid != 0:
                ownership = f"{self._privilege.invoking_uid}:{self._privilege.invoking_gid}"
                self._runner.runner_run(["chown", "-R", ownership, str(destination)], privileged=True)
        except CommandExecutionError as error:
            raise RepositoryAcquisitionError(f"failed to clone {normalized_url}: {error}") from error

    def repository_remove(self, destination: Path) -> None:
        """Delete an existing checkout directory.

        Args:
            destination: Directory to delete.

        Returns:
            None: Directory is removed as side effect.

        Raises:
            RepositoryAcquisitionError: Raised when deletion fails.
        """

        if destination == Path("/") or len(destination.parts) < 2:
            raise RepositoryAcquisitionError(f"refusing to delete unsafe path {destination}")
        logger.warning("Removing existing directory %s", destination)
        try:
            self._runner.runner_run(["rm", "-rf", str(destination)], privileged=True)
        except CommandExecutionError as error:
            raise RepositoryAcquisitionError(f"failed to remove {destination}: {error}") from error
