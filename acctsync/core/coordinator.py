"""Top-level control for one reconciliation run.

    snapshot ──┐
               ├──> decide() ──> NOOP (exit 0, no writes)
    Jamf ──────┘          └────> warn ──> RenameTransaction ──> link ──> recon ──> restart

Every fatal path logs, notifies the operator and returns exit code 1.
"""
from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from . import audit
from .directory import IdentityStore
from .exceptions import DirectoryReadError, PendingRecoveryError
from .filesystem import Filesystem
from .host import HostActions
from .identity import AccountIdentitySnapshot, CanonicalIdentity, capture_snapshot, home_path_for
from .jamf import JamfError, JamfIdentityProvider
from .linker import CompatibilityLinker
from .notifier import OperatorNotifier
from .recovery import read_journal, write_journal
from .transaction import RenameTransaction, TransactionOutcome, TransactionState

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class Decision(str, Enum):
    NOOP = "noop"
    RUN_TRANSACTION = "run_transaction"


def decide(snapshot: AccountIdentitySnapshot, canonical: CanonicalIdentity) -> Decision:
    """Rename only when the local login name differs from the canonical one."""
    if snapshot.login_name == canonical.target_login_name:
        return Decision.NOOP
    return Decision.RUN_TRANSACTION


class RunCoordinator:
    """Fetch, compare, rename and dispatch post-rename actions for one account."""

    def __init__(
        self,
        provider: JamfIdentityProvider,
        store: IdentityStore,
        fs: Filesystem,
        notifier: OperatorNotifier,
        host_actions: HostActions,
        users_root: str = "/Users",
        restart_delay: int = 5,
        recovery_journal: Optional[Path] = None,
    ):
        self.provider = provider
        self.store = store
        self.fs = fs
        self.notifier = notifier
        self.host_actions = host_actions
        self.users_root = users_root
        self.restart_delay = restart_delay
        self.recovery_journal = recovery_journal

    def run(self, login_name: str, host_serial: str) -> int:
        """Reconcile ``login_name`` with the Jamf record for ``host_serial``.

        Returns:
            Process exit code
        """
        try:
            snapshot = capture_snapshot(self.store, login_name)
            canonical = self.provider.fetch(host_serial, fallback_display_name=snapshot.display_name)
        except (DirectoryReadError, JamfError) as e:
            return self._abort(login_name, None, e)

        if decide(snapshot, canonical) == Decision.NOOP:
            logger.info("The local username matches the Jamf username. Exiting 0")
            audit.safe_log_rename_event("rename_noop", snapshot.login_name, target=canonical.target_login_name)
            return EXIT_OK

        if self.recovery_journal is not None and read_journal(self.recovery_journal) is not None:
            return self._abort(snapshot.login_name, canonical, PendingRecoveryError(str(self.recovery_journal)))

        self.notifier.warn_before_change(snapshot.login_name, canonical.target_login_name)

        logger.info("The local username doesn't match the Jamf username, correcting")
        transaction = RenameTransaction(self.store, self.fs, self.users_root)
        outcome = transaction.run(snapshot, canonical)

        if outcome.state == TransactionState.COMMITTED:
            return self._on_committed(snapshot, canonical, outcome)
        if outcome.state == TransactionState.ROLLBACK_FAILED:
            return self._on_rollback_failed(snapshot, canonical, outcome)
        return self._on_rolled_back(snapshot, canonical, outcome)

    def _on_committed(
        self, snapshot: AccountIdentitySnapshot, canonical: CanonicalIdentity, outcome: TransactionOutcome
    ) -> int:
        new_home = home_path_for(self.users_root, canonical.target_login_name)
        link = CompatibilityLinker(self.fs).link(snapshot.home_path, new_home)

        logger.info(
            "The records have been successfully updated. Original Username:%s, Original Real Name:%s, "
            "Original Home Path:%s ========= New Username:%s, New Real Name:%s, New Home Path:%s",
            snapshot.record_key, snapshot.display_name, snapshot.home_path,
            canonical.target_login_name, canonical.target_display_name, new_home,
        )
        audit.safe_log_rename_event(
            "rename_committed",
            snapshot.login_name,
            target=canonical.target_login_name,
            details={"steps": outcome.committed, "new_home": new_home, "alias_created": link.ok},
        )

        recon = self.host_actions.submit_inventory()
        if not recon.ok:
            logger.error("Inventory update failed: %s", recon.describe())
        restart = self.host_actions.schedule_restart(self.restart_delay)
        if not restart.ok:
            logger.error("Could not schedule restart: %s", restart.describe())
        return EXIT_OK

    def _on_rolled_back(
        self, snapshot: AccountIdentitySnapshot, canonical: CanonicalIdentity, outcome: TransactionOutcome
    ) -> int:
        logger.error("Username change failed and was reverted: %s", outcome.failure)
        audit.safe_log_rename_event(
            "rename_rolled_back",
            snapshot.login_name,
            target=canonical.target_login_name,
            details=outcome.to_dict(),
            success=False,
        )
        self.notifier.notify_failure()
        return EXIT_FAILURE

    def _on_rollback_failed(
        self, snapshot: AccountIdentitySnapshot, canonical: CanonicalIdentity, outcome: TransactionOutcome
    ) -> int:
        logger.critical(
            "Username change failed (%s) and could not be reverted (%s)",
            outcome.failure, outcome.compensation_failure,
        )
        details = outcome.to_dict()
        if self.recovery_journal is not None:
            try:
                write_journal(self.recovery_journal, snapshot, canonical, outcome)
                details["journal"] = str(self.recovery_journal)
            except OSError as e:
                logger.critical("Could not write recovery journal %s: %s", self.recovery_journal, e)
        audit.safe_log_rename_event(
            "rename_rollback_failed",
            snapshot.login_name,
            target=canonical.target_login_name,
            details=details,
            success=False,
        )
        self.notifier.notify_rollback_failed()
        return EXIT_FAILURE

    def _abort(self, login_name: str, canonical: Optional[CanonicalIdentity], error: Exception) -> int:
        logger.error("%s. Exiting without making changes", error)
        audit.safe_log_rename_event(
            "rename_aborted",
            login_name,
            target=canonical.target_login_name if canonical else None,
            details={"error": str(error), "error_type": type(error).__name__},
            success=False,
        )
        self.notifier.notify_failure()
        return EXIT_FAILURE
