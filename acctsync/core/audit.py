"""Audit logging for account rename runs."""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

AUDIT_LOG_DIR = Path(os.environ.get("ACCTSYNC_AUDIT_DIR", "/Library/Logs/acctsync"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "rename-events.jsonl"

EventType = Literal[
    "rename_noop",
    "rename_committed",
    "rename_rolled_back",
    "rename_rollback_failed",
    "rename_aborted",
]


def _get_signing_key() -> bytes:
    """Get the audit signing key from the environment (empty disables signing)."""
    key_file = os.environ.get("ACCTSYNC_AUDIT_SIGNING_KEY_FILE")
    if key_file:
        try:
            return Path(key_file).read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError:
            pass
    return os.environ.get("ACCTSYNC_AUDIT_SIGNING_KEY", "").strip().encode("utf-8")


def _ensure_audit_dir() -> None:
    """Create audit directory with restricted permissions."""
    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)


def _sign_event(event: dict[str, Any]) -> str:
    """Generate HMAC-SHA256 signature for audit event."""
    signing_key = _get_signing_key()
    if not signing_key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_rename_event(
    event_type: EventType,
    username: str,
    *,
    target: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a rename event to the audit trail with timestamp and signature.

    Args:
        event_type: Outcome of the run
        username: Login name before the run
        target: Canonical login name from Jamf, if one was fetched
        details: Additional context (steps, failures, paths)
        success: Whether the run ended in a consistent, intended state
    """
    _ensure_audit_dir()

    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "username": username,
        "target": target,
        "success": success,
        "details": details or {},
    }

    signature = _sign_event(event)
    if signature:
        event["signature"] = signature

    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")

    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_rename_event(
    event_type: EventType,
    username: str,
    *,
    target: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log a rename event without ever raising.

    Audit failures must not change the outcome of a rename.

    Returns:
        True if event was logged successfully, False if logging failed
    """
    try:
        log_rename_event(event_type, username, target=target, details=details, success=success)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Failed to log %s event for %s: %s", event_type, username, e)
        return False


def verify_audit_log() -> tuple[int, int]:
    """Verify all signatures in the audit log.

    Returns:
        Tuple of (total_events, valid_signatures)
    """
    if not AUDIT_LOG_FILE.exists():
        return 0, 0

    total = 0
    valid = 0

    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
                stored_sig = event.pop("signature", "")
                if not stored_sig:
                    continue
                computed_sig = _sign_event(event)
                if hmac.compare_digest(stored_sig, computed_sig):
                    valid += 1
            except (json.JSONDecodeError, KeyError):
                continue

    return total, valid
