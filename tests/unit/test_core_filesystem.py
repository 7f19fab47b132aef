"""Tests for the local filesystem operations."""
import errno
import os

from acctsync.core import filesystem
from acctsync.core.filesystem import LocalFilesystem


def _cross_device_rename(monkeypatch):
    def _rename(src, dst):
        raise OSError(errno.EXDEV, "Invalid cross-device link", src)

    monkeypatch.setattr(filesystem.os, "rename", _rename)


def test_move_renames_directory(old_home, users_root):
    result = LocalFilesystem().move(str(old_home), str(users_root / "jsmith"))

    assert result.ok
    assert not old_home.exists()
    assert (users_root / "jsmith" / "Documents" / "notes.txt").read_text() == "keep me"


def test_move_across_volumes_copies(old_home, users_root, monkeypatch):
    _cross_device_rename(monkeypatch)

    result = LocalFilesystem().move(str(old_home), str(users_root / "jsmith"))

    assert result.ok
    assert not old_home.exists()
    assert (users_root / "jsmith" / "Documents" / "notes.txt").read_text() == "keep me"


def test_move_missing_source_is_failure(users_root):
    result = LocalFilesystem().move(str(users_root / "ghost"), str(users_root / "jsmith"))

    assert not result.ok
    assert result.status_code == errno.ENOENT


def test_exists_sees_dangling_alias(users_root):
    link = users_root / "jdoe"
    os.symlink(str(users_root / "gone"), str(link))

    assert LocalFilesystem().exists(str(link))
