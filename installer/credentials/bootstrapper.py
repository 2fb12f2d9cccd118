"""Ed25519 challenge-response handshake that issues the first client credential.

A fresh signing keypair and 32-byte challenge are created for every attempt.
The raw public key, the challenge and a detached signature over the raw
challenge bytes are posted base64-encoded to `/v1/auth`. The server replies
with `{"success": true, "token": "..."}` on acceptance. The persisted access
key pairs that token with an independent 32-byte symmetric secret which never
leaves the host.
"""

from __future__ import annotations

import base64
import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Final

import httpx
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat, PublicFormat

from installer.domain import Credential
from installer.errors import CredentialBootstrapFailure
from installer.logs import logs_success

from .store import AccessKeyStore

logger = logging.getLogger(__name__)

AUTH_PATH: Final[str] = "/v1/auth"
CHALLENGE_LENGTH: Final[int] = 32
SYMMETRIC_SECRET_LENGTH: Final[int] = 32


class CredentialBootstrapStatus(str, Enum):
    """Outcome of one credential bootstrap attempt."""

    ISSUED = "issued"
    FAILED = "failed"


@dataclass(frozen=True)
class CredentialBootstrapResult:
    """Credential bootstrap outcome.

    Attributes:
        status: Issued or failed.
        access_key_path: Written access key file when issued.
        failure_reason: Reason when failed.
        error_code: Deterministic failure code when failed.
    """

    status: CredentialBootstrapStatus
    access_key_path: Path | None = None
    failure_reason: str | None = None
    error_code: str | None = None

    def bootstrap_succeeded(self) -> bool:
        """Return whether a credential was issued and persisted."""

        return self.status is CredentialBootstrapStatus.ISSUED


class CredentialBootstrapper:
    """Issue the first access key against a running server."""

    def __init__(
        self,
        client: httpx.Client,
        store: AccessKeyStore,
        timeout_seconds: float = 10.0,
        random_bytes_provider: Callable[[int], bytes] | None = None,
    ):
        """Initialize credential bootstrapper.

        Args:
            client: HTTP client used for the handshake.
            store: Access key persistence.
            timeout_seconds: Handshake request timeout.
            random_bytes_provider: Source of challenge and symmetric secret bytes.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if client is None:
            raise ValueError("client must not be None")
        if store is None:
            raise ValueError("store must not be None")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._client = client
        self._store = store
        self._timeout_seconds = timeout_seconds
        self._random_bytes_provider = random_bytes_provider or secrets.token_bytes

    def bootstrap_issue(self, base_url: str) -> CredentialBootstrapResult:
        """Run the handshake and persist the access key on success.

        Args:
            base_url: Server base URL, for example `http://localhost:8080`.

        Returns:
            CredentialBootstrapResult: Issued result with the written path, or a
            failed result with a reason. Nothing is written on failure.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            credential = self._bootstrap_handshake(base_url.rstrip("/"))
            access_key_path = self._store.store_write(credential.credential_to_access_key())
        except CredentialBootstrapFailure as error:
            logger.warning("Credential issuance failed: %s", error)
            return CredentialBootstrapResult(
                status=CredentialBootstrapStatus.FAILED,
                failure_reason=str(error),
                error_code=error.error_code,
            )

        logs_success(logger, "access.key saved to %s", access_key_path)
        return CredentialBootstrapResult(status=CredentialBootstrapStatus.ISSUED, access_key_path=access_key_path)

    def _bootstrap_handshake(self, base_url: str) -> Credential:
        """Sign a fresh challenge and exchange it for a token.

        Args:
            base_url: Server base URL without trailing slash.

        Returns:
            Credential: Full credential material of the attempt.

        Raises:
            CredentialBootstrapFailure: Raised for transport errors, malformed replies and rejections.
        """

        private_key = Ed25519PrivateKey.generate()
        public_key = private_key.public_key().public_bytes(encoding=Encoding.Raw, format=PublicFormat.Raw)
        secret_key = private_key.private_bytes(
            encoding=Encoding.Raw,
            format=PrivateFormat.Raw,
            encryption_algorithm=NoEncryption(),
        )
        challenge = self._bootstrap_random_bytes(CHALLENGE_LENGTH)
        signature = private_key.sign(challenge)

        request_payload = {
            "publicKey": base64.b64encode(public_key).decode("ascii"),
            "challenge": base64.b64encode(challenge).decode("ascii"),
            "signature": base64.b64encode(signature).decode("ascii"),
        }
        try:
            response = self._client.post(f"{base_url}{AUTH_PATH}", json=request_payload, timeout=self._timeout_seconds)
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            raise CredentialBootstrapFailure(f"auth request failed: {type(error).__name__}: {error}") from error

        try:
            response_payload = response.json()
        except ValueError as error:
            raise CredentialBootstrapFailure(
                f"auth response is not JSON (HTTP {response.status_code})"
            ) from error

        if not isinstance(response_payload, dict):
            raise CredentialBootstrapFailure("auth response is not a JSON object")
        token = response_payload.get("token")
        if response_payload.get("success") is not True or not isinstance(token, str) or not token:
            raise CredentialBootstrapFailure(f"auth rejected (HTTP {response.status_code}): {response.text[:200]}")

        return Credential(
            public_key=public_key,
            secret_key=secret_key,
            challenge=challenge,
            signature=signature,
            issued_token=token,
            symmetric_secret=self._bootstrap_random_bytes(SYMMETRIC_SECRET_LENGTH),
        )

    def _bootstrap_random_bytes(self, length: int) -> bytes:
        try:
            random_bytes = self._random_bytes_provider(length)
        except (OSError, NotImplementedError) as error:
            raise CredentialBootstrapFailure(f"entropy source unavailable: {error}") from error
        if len(random_bytes) != length:
            raise CredentialBootstrapFailure(f"entropy source returned {len(random_bytes)} bytes, expected {length}")
        return random_bytes
