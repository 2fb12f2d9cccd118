"""Owner-only persistence of the client access key."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Final

from installer.domain import AccessKey
from installer.errors import CredentialBootstrapFailure

ACCESS_KEY_FILE_NAME: Final[str] = "access.key"
ACCESS_KEY_MODE: Final[int] = 0o600


class AccessKeyStore:
    """Write `access.key` as indented JSON readable only by its owner."""

    def __init__(self, directory: Path):
        if directory is None:
            raise ValueError("directory must not be None")
        self._directory = directory

    @property
    def store_path(self) -> Path:
        """Return the access key file location."""

        return self._directory / ACCESS_KEY_FILE_NAME

    def store_write(self, access_key: AccessKey) -> Path:
        """Persist the access key atomically with mode 0600.

        Args:
            access_key: Secret and token pair.

        Returns:
            Path: Written file path.

        Raises:
            CredentialBootstrapFailure: Raised when the file cannot be written.
        """

        content = json.dumps(access_key.access_key_payload(), indent=2) + "\n"
        temporary_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            file_descriptor, temporary_name = tempfile.mkstemp(prefix=f".{ACCESS_KEY_FILE_NAME}.", dir=self._directory)
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.chmod(temporary_name, ACCESS_KEY_MODE)
            os.replace(temporary_name, self.store_path)
            temporary_name = None
        except OSError as error:
            raise CredentialBootstrapFailure(f"failed to write {self.store_path}: {error}") from error
        finally:
            if temporary_name is not None and os.path.exists(temporary_name):
                os.unlink(temporary_name)
        return self.store_path
