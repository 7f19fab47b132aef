import subprocess

from acctsync.core import notifier as notifier_module
from acctsync.core.notifier import ConsoleNotifier, JamfHelperNotifier

HELPER = "/Library/Application Support/JAMF/bin/jamfHelper.app/Contents/MacOS/jamfHelper"


def _capture(monkeypatch, returncode=0):
    calls = []

    def _run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, returncode, b"", b"")

    monkeypatch.setattr(notifier_module.subprocess, "run", _run)
    return calls


def _option(args, flag):
    return args[args.index(flag) + 1]


def test_warning_names_both_accounts(monkeypatch):
    calls = _capture(monkeypatch)

    assert JamfHelperNotifier(HELPER).warn_before_change("jdoe", "jsmith") is True

    args = calls[0]
    assert args[0] == HELPER
    assert "from jdoe to jsmith" in _option(args, "-description")
    assert _option(args, "-button1") == "I have saved"
    assert "-button2" not in args


def test_failure_prompt_single_button(monkeypatch):
    calls = _capture(monkeypatch)

    JamfHelperNotifier(HELPER).notify_failure()

    assert _option(calls[0], "-heading") == "Error Changing Username"
    assert "-button2" not in calls[0]


def test_rollback_failed_prompt_is_distinct(monkeypatch):
    calls = _capture(monkeypatch)

    JamfHelperNotifier(HELPER).notify_rollback_failed()

    assert _option(calls[0], "-title") == "Critical Error"
    assert "Contact IT immediately" in _option(calls[0], "-description")


def test_helper_failure_returns_false(monkeypatch):
    _capture(monkeypatch, returncode=1)
    assert JamfHelperNotifier(HELPER).notify_failure() is False


def test_missing_helper_returns_false(tmp_path):
    assert JamfHelperNotifier(str(tmp_path / "jamfHelper")).notify_failure() is False


def test_console_notifier_logs(caplog):
    caplog.set_level("INFO")
    console = ConsoleNotifier()

    assert console.warn_before_change("jdoe", "jsmith")
    assert console.notify_rollback_failed()

    assert "jdoe to jsmith" in caplog.text
    assert any(r.levelname == "CRITICAL" for r in caplog.records)
