"""Local directory (identity store) access through ``dscl``.

Attributes are addressed by record key: ``/Users/<record_key>``. Renaming
the record key therefore changes the path that later reads and writes use.
"""
from __future__ import annotations
import logging
import plistlib
import subprocess
from typing import List, Optional

from .exceptions import DirectoryReadError
from .results import OpResult

logger = logging.getLogger(__name__)

RECORD_NAME = "RecordName"
REAL_NAME = "RealName"
HOME_DIRECTORY = "NFSHomeDirectory"

DSCL = "/usr/bin/dscl"


class IdentityStore:
    """Read/write access to the account attributes the rename touches."""

    def read_attribute(self, record_key: str, attribute: str) -> str:
        raise NotImplementedError

    def write_attribute(self, record_key: str, attribute: str, value: str) -> OpResult:
        raise NotImplementedError

    def has_record(self, record_key: str) -> bool:
        raise NotImplementedError


class DsclIdentityStore(IdentityStore):
    """Identity store backed by the macOS Directory Service command line tool."""

    def __init__(self, node: str = ".", dscl_path: str = DSCL):
        """Initialize the store.

        Args:
            node: Directory node to operate on ("." is the local node)
            dscl_path: Path of the dscl binary
        """
        self.node = node
        self.dscl_path = dscl_path

    def _record_path(self, record_key: str) -> str:
        return f"/Users/{record_key}"

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        return subprocess.run(args, capture_output=True, check=False)

    def read_attribute(self, record_key: str, attribute: str) -> str:
        """Return the first value of an attribute.

        Raises:
            DirectoryReadError: If dscl fails or the attribute is missing
        """
        try:
            proc = self._run([
                self.dscl_path, "-plist", self.node, "-read", self._record_path(record_key), attribute,
            ])
        except OSError as e:
            raise DirectoryReadError(record_key, attribute, e.errno or -1, e.strerror or str(e)) from e
        if proc.returncode != 0:
            raise DirectoryReadError(record_key, attribute, proc.returncode, _decode(proc.stderr))
        value = _first_value(proc.stdout, attribute)
        if value is None:
            raise DirectoryReadError(record_key, attribute, proc.returncode, "attribute not present")
        return value

    def write_attribute(self, record_key: str, attribute: str, value: str) -> OpResult:
        try:
            proc = self._run([
                self.dscl_path, self.node, "-create", self._record_path(record_key), attribute, value,
            ])
        except OSError as e:
            logger.error("Could not run %s to set %s on %s: %s", self.dscl_path, attribute, record_key, e)
            return OpResult.failure(e.strerror or str(e), e.errno)
        if proc.returncode != 0:
            message = _decode(proc.stderr) or f"dscl -create {attribute} failed"
            logger.error("Could not set %s on %s - error code:%s", attribute, record_key, proc.returncode)
            return OpResult.failure(message, proc.returncode)
        return OpResult.success()

    def has_record(self, record_key: str) -> bool:
        """Whether a record with this key exists.

        Raises:
            OSError: If dscl cannot be run
        """
        proc = self._run([
            self.dscl_path, self.node, "-read", self._record_path(record_key), RECORD_NAME,
        ])
        return proc.returncode == 0


def _decode(raw) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.strip()


def _first_value(raw_plist: bytes, attribute: str) -> Optional[str]:
    """Extract the first value of ``attribute`` from ``dscl -plist`` output."""
    try:
        data = plistlib.loads(raw_plist)
    except (plistlib.InvalidFileException, ValueError):
        return None
    for key in (f"dsAttrTypeStandard:{attribute}", attribute):
        values = data.get(key)
        if values:
            return str(values[0])
    return None
