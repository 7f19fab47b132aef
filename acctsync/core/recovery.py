"""Recovery journal written when a rollback cannot be completed.

The journal records which steps committed and which were reverted so the
account can be repaired by hand. While it exists, no further rename is
attempted on this host.
"""
from __future__ import annotations
import datetime
import json
import logging
from pathlib import Path
from typing import Optional

from .identity import AccountIdentitySnapshot, CanonicalIdentity
from .transaction import TransactionOutcome

logger = logging.getLogger(__name__)


def write_journal(
    path: Path,
    snapshot: AccountIdentitySnapshot,
    target: CanonicalIdentity,
    outcome: TransactionOutcome,
) -> Path:
    """Persist the state needed for manual recovery.

    Raises:
        OSError: If the journal cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    journal = {
        "written_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "snapshot": snapshot.to_dict(),
        "target": target.to_dict(),
        "outcome": outcome.to_dict(),
    }
    path.write_text(json.dumps(journal, indent=2) + "\n", encoding="utf-8")
    path.chmod(0o600)
    logger.critical("Recovery journal written to %s", path)
    return path


def read_journal(path: Path) -> Optional[dict]:
    """Return the pending journal, or None when there is nothing to recover."""
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        # An unreadable journal still blocks further runs
        logger.error("Recovery journal %s is unreadable: %s", path, e)
        return {}
