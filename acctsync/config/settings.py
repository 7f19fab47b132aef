"""Settings loader with environment variable and secrets-file integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_JAMF_HELPER = "/Library/Application Support/JAMF/bin/jamfHelper.app/Contents/MacOS/jamfHelper"
DEFAULT_JAMF_BINARY = "/usr/local/bin/jamf"
DEFAULT_RECOVERY_DIR = "/Library/Application Support/acctsync"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets.

    Priority:
    1. /run/secrets/{secret_name}
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_flag(var_name: str, default: bool) -> bool:
    return os.environ.get(var_name, str(default)).strip().lower() in {"1", "true", "yes"}


def _require(var_name: str, value: Optional[str]) -> str:
    if value:
        return value
    raise RuntimeError(f"Environment variable {var_name} is required.")


@dataclass
class AppConfig:
    """Application configuration container."""
    # Jamf Pro API
    jamf_url: str
    jamf_client_id: str
    jamf_client_secret: str

    # Local host
    users_root: str = "/Users"
    directory_node: str = "."
    jamf_helper_path: str = DEFAULT_JAMF_HELPER
    jamf_binary: str = DEFAULT_JAMF_BINARY
    restart_delay: int = 5
    recovery_dir: str = DEFAULT_RECOVERY_DIR

    # Behaviour
    interactive: bool = True
    strip_email_domain: bool = True

    @property
    def recovery_journal_path(self) -> Path:
        """Location of the journal written when a rollback fails."""
        return Path(self.recovery_dir) / "recovery-journal.json"


def load_settings(
    jamf_url: Optional[str] = None,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
) -> AppConfig:
    """Load settings from explicit overrides, environment and /run/secrets.

    Explicit arguments (CLI flags or Jamf policy parameters) win over the
    environment.

    Raises:
        RuntimeError: If a Jamf connection value is missing
        ValueError: If ACCTSYNC_RESTART_DELAY is not an integer
    """
    jamf_url = _require("JAMF_URL", jamf_url or os.environ.get("JAMF_URL"))
    client_id = _require("JAMF_CLIENT_ID", client_id or os.environ.get("JAMF_CLIENT_ID"))
    client_secret = _require(
        "JAMF_CLIENT_SECRET",
        client_secret or _load_secret_from_file("jamf_client_secret", "JAMF_CLIENT_SECRET"),
    )

    restart_delay = int(os.environ.get("ACCTSYNC_RESTART_DELAY", "5"))
    if restart_delay < 0:
        raise ValueError("ACCTSYNC_RESTART_DELAY must not be negative")

    config = AppConfig(
        jamf_url=jamf_url.rstrip("/"),
        jamf_client_id=client_id,
        jamf_client_secret=client_secret,
        users_root=os.environ.get("ACCTSYNC_USERS_ROOT", "/Users"),
        directory_node=os.environ.get("ACCTSYNC_DIRECTORY_NODE", "."),
        jamf_helper_path=os.environ.get("JAMF_HELPER_PATH", DEFAULT_JAMF_HELPER),
        jamf_binary=os.environ.get("JAMF_BINARY", DEFAULT_JAMF_BINARY),
        restart_delay=restart_delay,
        recovery_dir=os.environ.get("ACCTSYNC_RECOVERY_DIR", DEFAULT_RECOVERY_DIR),
        interactive=_env_flag("ACCTSYNC_INTERACTIVE", True),
        strip_email_domain=_env_flag("ACCTSYNC_STRIP_EMAIL_DOMAIN", True),
    )
    logger.info("Settings loaded; jamf_url=%s; users_root=%s", config.jamf_url, config.users_root)
    return config
