"""Pytest shared fixtures: in-memory identity store, real temp filesystem, fakes."""
import json
import pathlib
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from acctsync.core import audit
from acctsync.core.directory import HOME_DIRECTORY, REAL_NAME, RECORD_NAME, IdentityStore
from acctsync.core.exceptions import DirectoryReadError
from acctsync.core.filesystem import LocalFilesystem
from acctsync.core.identity import AccountIdentitySnapshot, CanonicalIdentity
from acctsync.core.jamf import ComputerNotFoundError
from acctsync.core.notifier import OperatorNotifier
from acctsync.core.results import OpResult


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Unit tests must never reach a real Jamf server."""

    def _fail(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {url}")

    monkeypatch.setattr(requests, "post", _fail)
    monkeypatch.setattr(requests, "get", _fail)


@pytest.fixture(autouse=True)
def audit_dir(monkeypatch, tmp_path):
    """Keep audit events inside the test's temp directory."""
    audit_dir = tmp_path / "audit"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_dir / "rename-events.jsonl")
    monkeypatch.setenv("ACCTSYNC_AUDIT_SIGNING_KEY", "test-signing-key")
    monkeypatch.delenv("ACCTSYNC_AUDIT_SIGNING_KEY_FILE", raising=False)
    return audit_dir


def read_audit_events(audit_dir: pathlib.Path) -> List[dict]:
    audit_file = audit_dir / "rename-events.jsonl"
    if not audit_file.exists():
        return []
    return [json.loads(line) for line in audit_file.read_text().splitlines() if line.strip()]



# ─────────────────────────────────────────────────────────────────────────────
# Identity store and filesystem doubles
# ─────────────────────────────────────────────────────────────────────────────
class InMemoryIdentityStore(IdentityStore):
    """Records keyed by RecordName; writing RecordName re-keys the record.

    ``fail_writes`` holds (attribute, value) pairs whose write must fail;
    ``raise_writes`` pairs make the write raise like a missing dscl binary.
    """

    def __init__(self):
        self.records = {}
        self.writes: List[Tuple[str, str, str]] = []
        self.fail_writes: Set[Tuple[str, str]] = set()
        self.raise_writes: Set[Tuple[str, str]] = set()

    def add_user(self, login: str, home: str, real_name: str) -> None:
        self.records[login] = {RECORD_NAME: login, HOME_DIRECTORY: home, REAL_NAME: real_name}

    def read_attribute(self, record_key, attribute):
        record = self.records.get(record_key)
        if record is None or attribute not in record:
            raise DirectoryReadError(record_key, attribute, 56, "eDSRecordNotFound")
        return record[attribute]

    def write_attribute(self, record_key, attribute, value):
        self.writes.append((record_key, attribute, value))
        if (attribute, value) in self.raise_writes:
            raise FileNotFoundError(2, "No such file or directory", "/usr/bin/dscl")
        if (attribute, value) in self.fail_writes:
            return OpResult.failure(f"injected failure writing {attribute}", 1)
        record = self.records.get(record_key)
        if record is None:
            return OpResult.failure("eDSRecordNotFound", 56)
        record[attribute] = value
        if attribute == RECORD_NAME:
            self.records[value] = self.records.pop(record_key)
        return OpResult.success()

    def has_record(self, record_key):
        return record_key in self.records


class RecordingFilesystem(LocalFilesystem):
    """Real filesystem that records mutations and can fail chosen moves."""

    def __init__(self):
        self.calls: List[Tuple[str, str, str]] = []
        self.fail_moves_to: Set[str] = set()

    def move(self, src, dst):
        self.calls.append(("move", src, dst))
        if dst in self.fail_moves_to:
            return OpResult.failure("injected move failure", 5)
        return super().move(src, dst)

    def symlink(self, target, link_path):
        self.calls.append(("symlink", target, link_path))
        return super().symlink(target, link_path)


@dataclass
class FakeProvider:
    identity: Optional[CanonicalIdentity] = None
    error: Optional[Exception] = None
    calls: List[str] = field(default_factory=list)

    def fetch(self, host_serial, fallback_display_name=None):
        self.calls.append(host_serial)
        if self.error is not None:
            raise self.error
        if self.identity is None:
            raise ComputerNotFoundError(f"No computer record for serial {host_serial}")
        return self.identity


class RecordingNotifier(OperatorNotifier):
    def __init__(self):
        self.events: List[tuple] = []

    def warn_before_change(self, old_name, new_name):
        self.events.append(("warn", old_name, new_name))
        return True

    def notify_failure(self):
        self.events.append(("failure",))
        return True

    def notify_rollback_failed(self):
        self.events.append(("rollback_failed",))
        return True


class RecordingHostActions:
    def __init__(self, recon_ok: bool = True):
        self.events: List[tuple] = []
        self.recon_ok = recon_ok

    def submit_inventory(self):
        self.events.append(("recon",))
        return OpResult.success() if self.recon_ok else OpResult.failure("recon failed", 1)

    def schedule_restart(self, delay):
        self.events.append(("restart", delay))
        return OpResult.success()


# ─────────────────────────────────────────────────────────────────────────────
# Example account: jdoe on a host whose Jamf record says jsmith
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def users_root(tmp_path):
    root = tmp_path / "Users"
    root.mkdir()
    return root


@pytest.fixture()
def old_home(users_root):
    home = users_root / "jdoe"
    home.mkdir()
    (home / "Documents").mkdir()
    (home / "Documents" / "notes.txt").write_text("keep me")
    return home


@pytest.fixture()
def store(old_home):
    store = InMemoryIdentityStore()
    store.add_user("jdoe", str(old_home), "J Doe")
    return store


@pytest.fixture()
def fs():
    return RecordingFilesystem()


@pytest.fixture()
def snapshot(old_home):
    return AccountIdentitySnapshot(
        login_name="jdoe", home_path=str(old_home), record_key="jdoe", display_name="J Doe"
    )


@pytest.fixture()
def target():
    return CanonicalIdentity(target_login_name="jsmith", target_display_name="Jane Smith")


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def host_actions():
    return RecordingHostActions()


@pytest.fixture()
def make_provider():
    """Build a provider returning ``identity`` or raising ``error``."""
    def _make(identity=None, error=None):
        return FakeProvider(identity=identity, error=error)
    return _make


@pytest.fixture()
def audit_events(audit_dir):
    """Callable returning the audit events written so far."""
    return lambda: read_audit_events(audit_dir)
