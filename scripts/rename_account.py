"""Rename the console user's local account to match Jamf Pro.

This module is the command-line entry point around acctsync.core. It can be
run as a Jamf policy script: Jamf passes the mount point, computer name and
username as the first three positional arguments, and parameters 4-6 may carry
the Jamf URL, API client ID and client secret.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from acctsync.config import load_settings
from acctsync.config.settings import DEFAULT_JAMF_HELPER
from acctsync.core import audit
from acctsync.core.coordinator import EXIT_FAILURE, RunCoordinator
from acctsync.core.directory import DsclIdentityStore
from acctsync.core.filesystem import LocalFilesystem
from acctsync.core.host import HostActions, console_user, hardware_serial
from acctsync.core.jamf import JamfClient, JamfIdentityProvider
from acctsync.core.notifier import ConsoleNotifier, JamfHelperNotifier

LOG_FORMAT = "[%(levelname)s] [%(asctime)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("acctsync")


def _policy_parameter(params: List[str], number: int) -> Optional[str]:
    """Return Jamf policy parameter ``number`` ($4 is params[3])."""
    index = number - 1
    if index < len(params) and params[index].strip():
        return params[index].strip()
    return None


def _notifier(quiet: bool, helper_path: str):
    return ConsoleNotifier() if quiet else JamfHelperNotifier(helper_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Match the local account name to Jamf Pro")
    parser.add_argument("jamf_params", nargs="*", help="Positional parameters passed by a Jamf policy")
    parser.add_argument("--jamf-url", default=None)
    parser.add_argument("--client-id", default=None)
    parser.add_argument("--client-secret", default=None)
    parser.add_argument("--username", default=None, help="Account to reconcile (default: console user)")
    parser.add_argument("--serial", default=None, help="Hardware serial (default: read from system_profiler)")
    parser.add_argument("--no-prompt", action="store_true", help="Log operator messages instead of showing them")
    parser.add_argument("--verify-audit", action="store_true", help="Verify audit log signatures and exit")
    parser.add_argument("--log-level", default=os.environ.get("ACCTSYNC_LOG_LEVEL", "INFO"))
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    if args.verify_audit:
        total, valid = audit.verify_audit_log()
        print(f"Audit log: {valid}/{total} events with valid signatures")
        return 0 if total == valid else 1

    try:
        config = load_settings(
            jamf_url=args.jamf_url or _policy_parameter(args.jamf_params, 4),
            client_id=args.client_id or _policy_parameter(args.jamf_params, 5),
            client_secret=args.client_secret or _policy_parameter(args.jamf_params, 6),
        )
    except (RuntimeError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        _notifier(args.no_prompt, os.environ.get("JAMF_HELPER_PATH", DEFAULT_JAMF_HELPER)).notify_failure()
        return EXIT_FAILURE

    notifier = _notifier(args.no_prompt or not config.interactive, config.jamf_helper_path)

    try:
        username = args.username or console_user()
        serial = args.serial or hardware_serial()
    except (OSError, KeyError, RuntimeError) as e:
        logger.error("Could not identify the account or host: %s", e)
        notifier.notify_failure()
        return EXIT_FAILURE

    provider = JamfIdentityProvider(
        JamfClient(config.jamf_url),
        config.jamf_client_id,
        config.jamf_client_secret,
        strip_email_domain=config.strip_email_domain,
    )
    coordinator = RunCoordinator(
        provider=provider,
        store=DsclIdentityStore(config.directory_node),
        fs=LocalFilesystem(),
        notifier=notifier,
        host_actions=HostActions(config.jamf_binary),
        users_root=config.users_root,
        restart_delay=config.restart_delay,
        recovery_journal=config.recovery_journal_path,
    )
    return coordinator.run(username, serial)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
