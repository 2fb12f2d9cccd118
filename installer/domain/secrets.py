"""Cryptographically strong alphanumeric secret generation."""

from __future__ import annotations

import secrets
import string
from typing import Callable, Final

from installer.errors import SecretGenerationError

SECRET_ALPHABET: Final[str] = string.ascii_letters + string.digits
LONG_SECRET_LENGTH: Final[int] = 32
SHORT_SECRET_LENGTH: Final[int] = 24

# Largest multiple of the alphabet size that fits in one byte; bytes at or
# above it are rejected so every character is equally likely.
_REJECTION_THRESHOLD: Final[int] = 256 - (256 % len(SECRET_ALPHABET))


class SecretGenerator:
    """Generate secrets restricted to `[A-Za-z0-9]` from a strong entropy source."""

    def __init__(self, random_bytes_provider: Callable[[int], bytes] | None = None):
        """Initialize secret generator.

        Args:
            random_bytes_provider: Optional provider returning N random bytes.
                Defaults to `secrets.token_bytes`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._random_bytes_provider = random_bytes_provider or secrets.token_bytes

    def secret_generate(self, length: int) -> str:
        """Generate one alphanumeric secret of exact length.

        Args:
            length: Requested secret length.

        Returns:
            str: Secret of `length` characters from `SECRET_ALPHABET`.

        Raises:
            ValueError: Raised when length is not positive.
            SecretGenerationError: Raised when the entropy source is unavailable.
        """

        if length < 1:
            raise ValueError("length must be >= 1")

        characters: list[str] = []
        while len(characters) < length:
            for byte_value in self._secret_read_entropy(byte_count=2 * (length - len(characters))):
                if byte_value >= _REJECTION_THRESHOLD:
                    continue
                characters.append(SECRET_ALPHABET[byte_value % len(SECRET_ALPHABET)])
                if len(characters) == length:
                    break
        return "".join(characters)

    def secret_generate_long(self) -> str:
        """Generate a bearer/master secret (32 characters)."""

        return self.secret_generate(LONG_SECRET_LENGTH)

    def secret_generate_short(self) -> str:
        """Generate a URL-safe datastore password (24 characters)."""

        return self.secret_generate(SHORT_SECRET_LENGTH)

    def _secret_read_entropy(self, byte_count: int) -> bytes:
        try:
            random_bytes = bytes(self._random_bytes_provider(byte_count))
        except (OSError, NotImplementedError) as error:
            raise SecretGenerationError("entropy source unavailable; refusing to generate weak secrets") from error
        if len(random_bytes) != byte_count:
            raise SecretGenerationError(
                f"entropy source returned {len(random_bytes)} bytes, expected {byte_count}"
            )
        return random_bytes
