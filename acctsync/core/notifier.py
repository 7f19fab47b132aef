"""Operator notifications shown to the logged-in user.

Every prompt has a single acknowledgment button; the rename proceeds or stops
independently of what the user clicks.
"""
from __future__ import annotations
import logging
import subprocess
from typing import List

logger = logging.getLogger(__name__)

STOP_ICON = "/System/Library/CoreServices/CoreTypes.bundle/Contents/Resources/AlertStopIcon.icns"
NOTE_ICON = "/System/Library/CoreServices/CoreTypes.bundle/Contents/Resources/AlertNoteIcon.icns"
CAUTION_ICON = "/System/Library/CoreServices/CoreTypes.bundle/Contents/Resources/AlertCautionIcon.icns"

WARN_DESCRIPTION = (
    "Your username is going to change from {old} to {new}, any files you don't save now will be lost. "
    "You will not be prompted after this point. Your computer will restart in about 30 seconds."
)
FAILURE_DESCRIPTION = (
    "We encountered an error changing your username, please reach out to IT. "
    "You may continue to work while the issue is investigated."
)
ROLLBACK_FAILED_DESCRIPTION = (
    "Your account could not be restored after a failed username change. "
    "Do not log out or restart. Contact IT immediately."
)


class OperatorNotifier:
    """Blocking notifications for the person at the keyboard."""

    def warn_before_change(self, old_name: str, new_name: str) -> bool:
        raise NotImplementedError

    def notify_failure(self) -> bool:
        raise NotImplementedError

    def notify_rollback_failed(self) -> bool:
        raise NotImplementedError


class JamfHelperNotifier(OperatorNotifier):
    """Notifier that shows jamfHelper utility windows."""

    def __init__(self, helper_path: str):
        self.helper_path = helper_path

    def _show(self, heading: str, description: str, icon: str, button: str, title: str) -> bool:
        args: List[str] = [
            self.helper_path,
            "-windowType", "utility",
            "-title", title,
            "-heading", heading,
            "-description", description,
            "-icon", icon,
            "-button1", button,
        ]
        try:
            proc = subprocess.run(args, capture_output=True, check=False)
        except OSError as e:
            logger.warning("Could not display jamfHelper window %r: %s", heading, e)
            return False
        if proc.returncode != 0:
            logger.warning("jamfHelper window %r exited with %s", heading, proc.returncode)
            return False
        return True

    def warn_before_change(self, old_name: str, new_name: str) -> bool:
        logger.info("Notifying the user that they need to save their work")
        return self._show(
            "Save your work!",
            WARN_DESCRIPTION.format(old=old_name, new=new_name),
            STOP_ICON,
            "I have saved",
            "Attention",
        )

    def notify_failure(self) -> bool:
        return self._show("Error Changing Username", FAILURE_DESCRIPTION, NOTE_ICON, "I understand", "Error")

    def notify_rollback_failed(self) -> bool:
        return self._show(
            "Username Change Could Not Be Reverted",
            ROLLBACK_FAILED_DESCRIPTION,
            CAUTION_ICON,
            "I understand",
            "Critical Error",
        )


class ConsoleNotifier(OperatorNotifier):
    """Notifier for unattended runs: messages go to the log only."""

    def warn_before_change(self, old_name: str, new_name: str) -> bool:
        logger.warning("Username is changing from %s to %s", old_name, new_name)
        return True

    def notify_failure(self) -> bool:
        logger.error(FAILURE_DESCRIPTION)
        return True

    def notify_rollback_failed(self) -> bool:
        logger.critical(ROLLBACK_FAILED_DESCRIPTION)
        return True
