"""Host facts and post-rename actions."""
from __future__ import annotations
import json
import logging
import os
import pwd
import subprocess

from .results import OpResult

logger = logging.getLogger(__name__)

SYSTEM_PROFILER = "/usr/sbin/system_profiler"
SHUTDOWN = "/sbin/shutdown"


def hardware_serial() -> str:
    """Return this Mac's hardware serial number.

    Raises:
        RuntimeError: If system_profiler fails or reports no serial
    """
    proc = subprocess.run(
        [SYSTEM_PROFILER, "SPHardwareDataType", "-json"], capture_output=True, text=True, check=False
    )
    if proc.returncode != 0:
        raise RuntimeError(f"system_profiler exited with {proc.returncode}: {proc.stderr.strip()}")
    try:
        items = json.loads(proc.stdout).get("SPHardwareDataType") or []
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Unreadable system_profiler output: {e}") from e
    for item in items:
        serial = (item.get("serial_number") or "").strip()
        if serial:
            return serial
    raise RuntimeError("system_profiler reported no serial number")


def console_user(console: str = "/dev/console") -> str:
    """Return the login name of the user owning the console."""
    return pwd.getpwuid(os.stat(console).st_uid).pw_name


class HostActions:
    """Inventory resync and restart, dispatched after a committed rename."""

    def __init__(self, jamf_binary: str, shutdown_path: str = SHUTDOWN):
        self.jamf_binary = jamf_binary
        self.shutdown_path = shutdown_path

    def submit_inventory(self) -> OpResult:
        logger.info("Performing an inventory update to Jamf Pro")
        try:
            proc = subprocess.run([self.jamf_binary, "recon"], capture_output=True, text=True, check=False)
        except OSError as e:
            return OpResult.failure(str(e), e.errno)
        if proc.returncode != 0:
            return OpResult.failure(proc.stderr.strip() or "jamf recon failed", proc.returncode)
        return OpResult.success()

    def schedule_restart(self, delay: int) -> OpResult:
        """Restart the computer ``delay`` seconds from now without blocking."""
        logger.info("Restarting the computer in %d seconds", delay)
        command = f"sleep {int(delay)}; {self.shutdown_path} -r now"
        try:
            subprocess.Popen(
                ["/bin/sh", "-c", command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            return OpResult.failure(str(e), e.errno)
        return OpResult.success()
