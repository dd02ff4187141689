"""Host status collection for the prompt.

Captures load averages, OS identity, the controlling terminal and the number
of logged-in users. Every lookup here is required: a failure raises
:class:`HostInfoError` and the caller aborts.

Uses:
- psutil: load average, user sessions, parent process terminal
- platform: OS name and version
- tty(1): terminal fallback when psutil cannot report one
"""

import logging
import os
import platform
import re
import subprocess
import sys
from dataclasses import dataclass

import psutil

from bash_prompt_vars.exceptions import HostInfoError

logger = logging.getLogger(__name__)

UNKNOWN_TERMINAL = "?"
_WORD_START = re.compile(r"(?<!\w)\w")


@dataclass(frozen=True)
class HostInfo:
    """Snapshot of host status at a point in time."""

    load: tuple[float, float, float]
    os_name: str
    os_version: str
    terminal: str
    users: int


def load_average() -> tuple[float, float, float]:
    """Return the 1, 5 and 15 minute load averages."""
    try:
        load_1min, load_5min, load_15min = psutil.getloadavg()
    except (OSError, psutil.Error) as e:
        raise HostInfoError("Could not get load average", {"cause": str(e)}) from e
    return load_1min, load_5min, load_15min


def format_os_name(name: str) -> str:
    """Title-case every word, words ending at any non-word character.

    ``darwin`` becomes ``MacOS``.
    """
    if name == "darwin":
        return "MacOS"
    return _WORD_START.sub(lambda match: match.group(0).upper(), name)


def platform_identity() -> tuple[str, str]:
    """Return ``(os_name, os_version)`` for the running system.

    On macOS the version is the product version (e.g. ``14.4``), elsewhere
    it is the kernel release.
    """
    system = platform.system().lower()
    if not system:
        raise HostInfoError("Could not obtain platform information")

    if system == "darwin":
        version = platform.mac_ver()[0]
    else:
        version = platform.release()

    return format_os_name(system), version


def format_terminal(name: str) -> str:
    """Strip the ``/dev/`` prefix (or a single leading slash) from a tty path."""
    name = name.strip()
    if name.startswith("/dev/"):
        return name[len("/dev/"):]
    return name.removeprefix("/")


def _tty_fallback() -> str:
    """Ask tty(1) for the terminal attached to our stdin."""
    try:
        result = subprocess.run(
            ["tty"],
            stdin=sys.stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except (OSError, ValueError) as e:
        logger.debug(f"tty fallback failed: {e}")
        return UNKNOWN_TERMINAL

    if result.returncode != 0:
        logger.debug(f"tty exited with {result.returncode}: {result.stdout.strip()}")
        return UNKNOWN_TERMINAL

    return result.stdout.strip()


def terminal_name() -> str:
    """Return the controlling terminal of the parent (shell) process."""
    try:
        my_process = psutil.Process(os.getpid())
    except psutil.Error as e:
        raise HostInfoError("Failed to get process", {"cause": str(e)}) from e

    try:
        parent = my_process.parent()
    except psutil.Error as e:
        raise HostInfoError("Failed to get parent process", {"cause": str(e)}) from e
    if parent is None:
        raise HostInfoError("Failed to get parent process", {"pid": my_process.pid})

    try:
        # Process.terminal() only exists on POSIX
        terminal = parent.terminal()
    except (AttributeError, psutil.Error) as e:
        logger.debug(f"psutil could not report a terminal: {e}")
        terminal = None

    if not terminal:
        terminal = _tty_fallback()

    return format_terminal(terminal)


def user_count() -> int:
    """Return the number of logged-in user sessions."""
    try:
        return len(psutil.users())
    except (OSError, psutil.Error) as e:
        raise HostInfoError("Could not enumerate users", {"cause": str(e)}) from e


def collect_host_info() -> HostInfo:
    """Collect every host value the prompt needs.

    Raises:
        HostInfoError: If any lookup fails.
    """
    os_name, os_version = platform_identity()
    info = HostInfo(
        load=load_average(),
        os_name=os_name,
        os_version=os_version,
        terminal=terminal_name(),
        users=user_count(),
    )
    logger.debug(f"Host info collected: {info}")
    return info
