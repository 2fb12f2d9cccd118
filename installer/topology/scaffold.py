"""Build scaffolding written next to the checked-out server sources."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from installer.errors import ConfigurationError

logger = logging.getLogger(__name__)

DOCKERFILE_NAME: Final[str] = "Dockerfile"
ENTRYPOINT_NAME: Final[str] = "docker-entrypoint.sh"
ENTRYPOINT_MODE: Final[int] = 0o755

DOCKERFILE_TEXT: Final[str] = """FROM node:20-alpine AS builder

WORKDIR /app

COPY package.json yarn.lock ./
RUN yarn install --frozen-lockfile

COPY . .
RUN yarn generate

FROM node:20-alpine AS runner

WORKDIR /app

ENV NODE_ENV=production

COPY --from=builder /app/tsconfig.json ./tsconfig.json
COPY --from=builder /app/package.json ./package.json
COPY --from=builder /app/node_modules ./node_modules
COPY --from=builder /app/sources ./sources
COPY --from=builder /app/prisma ./prisma

EXPOSE 3005

COPY docker-entrypoint.sh /app/docker-entrypoint.sh
RUN chmod +x /app/docker-entrypoint.sh

CMD ["/app/docker-entrypoint.sh"]
"""

ENTRYPOINT_TEXT: Final[str] = """#!/bin/sh
set -e

echo "Running database migrations..."
npx prisma migrate deploy

echo "Starting Happy Server..."
exec yarn start
"""


@dataclass(frozen=True)
class ScaffoldResult:
    """Outcome of writing build scaffolding.

    Attributes:
        created_paths: Files created in this run.
        kept_paths: Files that already existed and were left untouched.
    """

    created_paths: tuple[Path, ...]
    kept_paths: tuple[Path, ...]


def scaffold_write_build_files(install_directory: Path) -> ScaffoldResult:
    """Create the image build files when the checkout does not ship them.

    Args:
        install_directory: Repository checkout directory.

    Returns:
        ScaffoldResult: Created and kept file paths.

    Raises:
        ConfigurationError: Raised when a file cannot be written.
    """

    created_paths: list[Path] = []
    kept_paths: list[Path] = []
    for file_name, content, mode in (
        (DOCKERFILE_NAME, DOCKERFILE_TEXT, None),
        (ENTRYPOINT_NAME, ENTRYPOINT_TEXT, ENTRYPOINT_MODE),
    ):
        target_path = install_directory / file_name
        if target_path.exists():
            logger.info("%s already exists, skipping", file_name)
            kept_paths.append(target_path)
            continue
        try:
            target_path.write_text(content, encoding="utf-8")
            if mode is not None:
                os.chmod(target_path, mode)
        except OSError as error:
            raise ConfigurationError(f"failed to write {target_path}: {error}") from error
        logger.info("Created %s", target_path)
        created_paths.append(target_path)

    return ScaffoldResult(created_paths=tuple(created_paths), kept_paths=tuple(kept_paths))
