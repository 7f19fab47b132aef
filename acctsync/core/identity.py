"""Identity records compared by the rename workflow."""
from __future__ import annotations
from dataclasses import dataclass, asdict
import logging
import posixpath

from .directory import HOME_DIRECTORY, REAL_NAME, RECORD_NAME, IdentityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountIdentitySnapshot:
    """Account attributes captured before any mutation; the rollback target."""

    login_name: str
    home_path: str
    record_key: str
    display_name: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CanonicalIdentity:
    """Login and display name asserted by Jamf Pro for this host."""

    target_login_name: str
    target_display_name: str

    def __post_init__(self):
        if not self.target_login_name:
            raise ValueError("Canonical identity requires a login name")

    def to_dict(self) -> dict:
        return asdict(self)


def home_path_for(users_root: str, login_name: str) -> str:
    """Return the home directory implied by a login name."""
    return posixpath.join(users_root, login_name)


def capture_snapshot(store: IdentityStore, login_name: str) -> AccountIdentitySnapshot:
    """Read the account's current attributes from the identity store.

    Args:
        store: Identity store holding the account
        login_name: Short name of the account (usually the console user)

    Returns:
        Snapshot of the account

    Raises:
        DirectoryReadError: If any attribute cannot be read
    """
    home_path = store.read_attribute(login_name, HOME_DIRECTORY)
    record_key = store.read_attribute(login_name, RECORD_NAME)
    display_name = store.read_attribute(login_name, REAL_NAME)
    snapshot = AccountIdentitySnapshot(
        login_name=login_name,
        home_path=home_path,
        record_key=record_key,
        display_name=display_name,
    )
    logger.info("The original local user is %s", snapshot.login_name)
    logger.info("The original RecordName is %s", snapshot.record_key)
    logger.info("The original RealName is %s", snapshot.display_name)
    logger.info("The original NFSHomeDirectory is %s", snapshot.home_path)
    if snapshot.record_key != snapshot.login_name:
        logger.warning(
            "RecordName %s does not match login name %s; a previous run may have stopped mid-way",
            snapshot.record_key, snapshot.login_name,
        )
    return snapshot
