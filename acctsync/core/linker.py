"""Alias from the old home path to the relocated home directory."""
from __future__ import annotations
import logging

from .filesystem import Filesystem
from .results import OpResult

logger = logging.getLogger(__name__)


class CompatibilityLinker:
    """Leave a symbolic link at the original home path after a committed rename.

    Best effort: a failure is logged and returned but never undoes the rename.
    """

    def __init__(self, fs: Filesystem):
        self.fs = fs

    def link(self, old_home: str, new_home: str) -> OpResult:
        if old_home == new_home:
            return OpResult.success("home path unchanged")
        if not self.fs.exists(new_home):
            result = OpResult.failure(f"{new_home} does not exist")
        elif self.fs.exists(old_home):
            result = OpResult.failure(f"{old_home} is still occupied")
        else:
            logger.info("Creating a link from the new home directory %s to the old directory %s", new_home, old_home)
            result = self.fs.symlink(new_home, old_home)

        if not result.ok:
            logger.error("Could not link %s to %s: %s", old_home, new_home, result.describe())
        return result
