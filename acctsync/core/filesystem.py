"""Filesystem operations used by the rename workflow."""
from __future__ import annotations
import errno
import logging
import os
import shutil

from .results import OpResult

logger = logging.getLogger(__name__)


class Filesystem:
    """Path inspection, moves and symbolic links."""

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def move(self, src: str, dst: str) -> OpResult:
        raise NotImplementedError

    def symlink(self, target: str, link_path: str) -> OpResult:
        raise NotImplementedError


class LocalFilesystem(Filesystem):
    """Filesystem backed by the local disk."""

    def exists(self, path: str) -> bool:
        # A dangling alias still occupies the path
        return os.path.lexists(path)

    def move(self, src: str, dst: str) -> OpResult:
        """Rename ``src`` to ``dst``, copying across volumes when a rename cannot.

        ``dst`` must not exist; callers check that before moving.
        """
        try:
            try:
                os.rename(src, dst)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                logger.info("%s and %s are on different volumes, copying", src, dst)
                shutil.move(src, dst)
        except OSError as e:
            logger.error("Could not move %s to %s - error code:%s", src, dst, e.errno)
            return OpResult.failure(e.strerror or str(e), e.errno)
        return OpResult.success()

    def symlink(self, target: str, link_path: str) -> OpResult:
        try:
            os.symlink(target, link_path)
        except OSError as e:
            return OpResult.failure(e.strerror or str(e), e.errno)
        return OpResult.success()
