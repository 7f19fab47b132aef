"""Input validation helpers for canonical identity values."""
from __future__ import annotations

MAX_LOGIN_NAME = 255


def login_name_from_jamf(raw: str, strip_email_domain: bool = True) -> str:
    """Turn the Jamf inventory username into a local login name.

    Jamf usernames are commonly mapped from email addresses; the domain is
    dropped so "jsmith@example.com" becomes "jsmith".
    """
    value = (raw or "").strip()
    if strip_email_domain:
        value = value.split("@", 1)[0].strip()
    return value


def validate_login_name(name: str) -> str:
    """Validate a local short name.

    Args:
        name: Candidate login name

    Returns:
        The login name unchanged

    Raises:
        ValueError: If the name cannot be used as a record key and home folder name
    """
    if not name:
        raise ValueError("Login name is required")
    if len(name) > MAX_LOGIN_NAME:
        raise ValueError("Login name exceeds maximum length")
    if name in {".", ".."} or name[0] in {"-", "."}:
        raise ValueError("Login name cannot start with '-' or '.'")
    if any(char in name for char in "/:") or any(char.isspace() for char in name):
        raise ValueError("Login name contains invalid characters")
    return name


def validate_display_name(name: str, fallback: str) -> str:
    """Trim a display name, falling back to the current one when Jamf has none."""
    name = (name or "").strip()
    if not name:
        return fallback
    if "\n" in name or "\x00" in name:
        raise ValueError("Display name contains invalid characters")
    return name
