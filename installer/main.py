"""Main module entrypoint for the `happy-install` command.

This module validates settings and runs one installation job. Exit codes:
`0` installed (or cancelled by the operator), `1` failed before services
started, `3` services started but the application never became healthy.
"""

from __future__ import annotations

import argparse
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Sequence

from installer import __version__
from installer.bootstrap import bootstrap_create_installation_orchestrator
from installer.config import DEFAULT_INSTALL_DIRECTORY, DEFAULT_REPOSITORY_URL, SettingsLoadError, config_load_settings
from installer.domain import ExistingDirectoryPolicy
from installer.logs import logs_configure

logger = logging.getLogger(__name__)


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Configured parser.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(
        prog="happy-install",
        description="Install and start a self-hosted Happy Server on this host",
    )
    argument_parser.add_argument(
        "-y",
        "--yes",
        dest="non_interactive",
        action="store_true",
        help="Non-interactive mode: skip confirmations and use default or generated values",
    )
    argument_parser.add_argument(
        "--repo-url",
        dest="repository_url",
        type=str,
        help=f"Server repository URL (default: {DEFAULT_REPOSITORY_URL})",
    )
    argument_parser.add_argument(
        "--install-dir",
        dest="install_directory",
        type=Path,
        help=f"Installation directory (default: {DEFAULT_INSTALL_DIRECTORY})",
    )
    argument_parser.add_argument(
        "--access-key-dir",
        dest="access_key_directory",
        type=Path,
        help="Directory receiving the issued access.key (default: ~/.happy)",
    )
    argument_parser.add_argument(
        "--replace-existing",
        dest="replace_existing",
        action="store_true",
        help="Delete and re-clone a non-empty installation directory in non-interactive mode",
    )
    argument_parser.add_argument(
        "--regenerate-secrets",
        dest="regenerate_secrets",
        action="store_true",
        help="Generate new secrets even when the environment file already holds values",
    )
    argument_parser.add_argument(
        "--set",
        dest="explicit_values",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set one environment value explicitly (repeatable)",
    )
    argument_parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    argument_parser.add_argument("--log-file", dest="log_file", type=Path, help="Also write logs to this file")
    argument_parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return argument_parser


def main_parse_explicit_values(argument_parser: argparse.ArgumentParser, raw_values: Sequence[str]) -> dict[str, str]:
    """Parse repeated `KEY=VALUE` arguments.

    Args:
        argument_parser: Parser used to report usage errors.
        raw_values: Raw `--set` arguments in order.

    Returns:
        dict[str, str]: Explicit values; later arguments win.

    Raises:
        SystemExit: Raised by the parser for malformed arguments.
    """

    explicit_values: dict[str, str] = {}
    for raw_value in raw_values:
        key, separator, value = raw_value.partition("=")
        if not separator or not key.strip():
            argument_parser.error(f"--set expects KEY=VALUE, got '{raw_value}'")
        explicit_values[key.strip()] = value
    return explicit_values


def main(argv: Sequence[str] | None = None) -> None:
    """Run one installation with validated settings.

    Args:
        argv: Command-line arguments, defaults to `sys.argv[1:]`.

    Returns:
        None: Returns normally on success.

    Raises:
        SystemExit: Raised with a non-zero code when the installation did not succeed.
    """

    argument_parser = main_build_argument_parser()
    parsed_arguments = argument_parser.parse_args(argv)
    explicit_values = main_parse_explicit_values(argument_parser, parsed_arguments.explicit_values)
    logs_configure(verbose=parsed_arguments.verbose, log_file=parsed_arguments.log_file)

    try:
        settings = config_load_settings(
            repository_url=parsed_arguments.repository_url,
            install_directory=parsed_arguments.install_directory,
            access_key_directory=parsed_arguments.access_key_directory,
            existing_directory_policy=ExistingDirectoryPolicy.REPLACE if parsed_arguments.replace_existing else None,
            non_interactive=True if parsed_arguments.non_interactive else None,
            regenerate_secrets=True if parsed_arguments.regenerate_secrets else None,
        )
    except SettingsLoadError as error:
        logger.error("%s", error)
        raise SystemExit(1) from error

    prompt_for_target = parsed_arguments.repository_url is None and parsed_arguments.install_directory is None
    with ExitStack() as exit_stack:
        orchestrator = bootstrap_create_installation_orchestrator(
            settings=settings,
            exit_stack=exit_stack,
            explicit_values=explicit_values,
            prompt_for_target=prompt_for_target,
        )
        execution_result = orchestrator.job_execute(job_name="install")

    if execution_result.status == "failed":
        logger.error("Installation failed [%s]: %s", execution_result.error_code, execution_result.error_message)
    elif execution_result.status == "degraded":
        logger.warning("Services are running but the application is not healthy; see the logs above")

    exit_code = execution_result.run_exit_code()
    if exit_code != 0:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
