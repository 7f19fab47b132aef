import dataclasses

import pytest

from acctsync.core.exceptions import DirectoryReadError
from acctsync.core.identity import AccountIdentitySnapshot, CanonicalIdentity, capture_snapshot, home_path_for


def test_capture_snapshot_reads_all_attributes(store, old_home):
    snapshot = capture_snapshot(store, "jdoe")

    assert snapshot == AccountIdentitySnapshot(
        login_name="jdoe", home_path=str(old_home), record_key="jdoe", display_name="J Doe"
    )
    assert store.writes == []


def test_capture_snapshot_missing_account(store):
    with pytest.raises(DirectoryReadError):
        capture_snapshot(store, "nobody")


def test_snapshot_is_immutable(snapshot):
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.login_name = "other"


def test_canonical_identity_requires_login_name():
    with pytest.raises(ValueError):
        CanonicalIdentity(target_login_name="", target_display_name="Jane Smith")


def test_home_path_for():
    assert home_path_for("/Users", "jsmith") == "/Users/jsmith"
