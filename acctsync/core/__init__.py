"""Core rename logic.

Module Structure:
    - jamf/            : Jamf Pro API client and canonical identity provider
    - identity.py      : Snapshot and canonical identity records
    - directory.py     : dscl-backed identity store
    - filesystem.py    : Home directory moves and symlinks
    - transaction.py   : Rename steps and the compensating transaction
    - linker.py        : Alias from the old home path
    - notifier.py      : jamfHelper prompts
    - host.py          : Serial number, console user, recon and restart
    - recovery.py      : Journal written when a rollback fails
    - audit.py         : Signed JSONL audit trail
    - coordinator.py   : One reconciliation run, end to end

These modules are not auto-imported; import them explicitly:
    from acctsync.core.coordinator import RunCoordinator
    from acctsync.core.transaction import RenameTransaction
"""
