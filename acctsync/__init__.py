"""Jamf-driven local account rename.

To run a reconciliation from the command line:
    python scripts/rename_account.py --help

To use the building blocks directly:
    from acctsync.core.coordinator import RunCoordinator
    from acctsync.core.jamf import JamfClient, JamfIdentityProvider
"""
