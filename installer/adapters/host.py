"""Host privilege and operating system detection."""

from __future__ import annotations

import logging
import os
import pwd
import shutil
from pathlib import Path
from typing import Final

from dotenv import dotenv_values

from installer.errors import PrivilegeError, UnsupportedOperatingSystemError

from .interfaces import OperatingSystemInfo, PrivilegeContext

logger = logging.getLogger(__name__)

_APT_OS_IDS: Final[frozenset[str]] = frozenset({"ubuntu", "debian"})
_YUM_OS_IDS: Final[frozenset[str]] = frozenset({"centos", "rhel", "fedora"})


def host_detect_privilege(
    effective_uid: int | None = None,
    environment: dict[str, str] | None = None,
    sudo_path: str | None = None,
) -> PrivilegeContext:
    """Detect whether privileged commands run directly or through `sudo`.

    Args:
        effective_uid: Override of `os.geteuid()` for tests.
        environment: Override of `os.environ` for tests.
        sudo_path: Override of the resolved `sudo` path for tests.

    Returns:
        PrivilegeContext: Privilege state and invoking operator identity.

    Raises:
        PrivilegeError: Raised when not root and `sudo` is unavailable.
    """

    resolved_uid = os.geteuid() if effective_uid is None else effective_uid
    resolved_environment = dict(os.environ) if environment is None else environment

    if resolved_uid == 0:
        invoking_uid = int(resolved_environment.get("SUDO_UID", "0") or 0)
        invoking_gid = int(resolved_environment.get("SUDO_GID", "0") or 0)
        return PrivilegeContext(
            is_root=True,
            command_prefix=(),
            invoking_uid=invoking_uid,
            invoking_gid=invoking_gid,
            invoking_user=resolved_environment.get("SUDO_USER") or None,
        )

    resolved_sudo_path = sudo_path if sudo_path is not None else shutil.which("sudo")
    if not resolved_sudo_path:
        raise PrivilegeError("root privileges or sudo are required; run as root")

    return PrivilegeContext(
        is_root=False,
        command_prefix=("sudo",),
        invoking_uid=resolved_uid,
        invoking_gid=os.getegid(),
        invoking_user=resolved_environment.get("USER") or _host_lookup_user_name(resolved_uid),
    )


def host_detect_operating_system(os_release_path: Path) -> OperatingSystemInfo:
    """Parse os-release metadata into operating system identity.

    Args:
        os_release_path: Path to the os-release file.

    Returns:
        OperatingSystemInfo: Parsed identity with package family.

    Raises:
        UnsupportedOperatingSystemError: Raised when the file is missing or has no ID.
    """

    if not os_release_path.is_file():
        raise UnsupportedOperatingSystemError(f"unable to detect operating system: {os_release_path} not found")

    release_values = dotenv_values(os_release_path, interpolate=False)
    os_id = (release_values.get("ID") or "").strip().lower()
    if not os_id:
        raise UnsupportedOperatingSystemError(f"unable to detect operating system: ID missing in {os_release_path}")

    operating_system = OperatingSystemInfo(
        os_id=os_id,
        version_id=(release_values.get("VERSION_ID") or "").strip(),
        version_codename=(release_values.get("VERSION_CODENAME") or "").strip() or None,
        family=host_package_family(os_id),
    )
    logger.info("Detected operating system: %s %s", operating_system.os_id, operating_system.version_id)
    return operating_system


def host_package_family(os_id: str) -> str:
    """Map a distribution identifier to its package family.

    Args:
        os_id: Lowercase distribution identifier.

    Returns:
        str: `apt`, `yum` or `unknown`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if os_id in _APT_OS_IDS:
        return "apt"
    if os_id in _YUM_OS_IDS:
        return "yum"
    return "unknown"


def _host_lookup_user_name(uid: int) -> str | None:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None
