from fileguard.notify import DesktopNotifier


def test_missing_notifier_disables_notifications():
    notifier = DesktopNotifier(command="fileguard-no-such-notifier")

    assert notifier.available() is False
    # Calling a disabled notifier is a no-op.
    notifier("Mon Oct 19 12:00:00 2026", "IN_MODIFY")


def test_available_notifier_is_called():
    notifier = DesktopNotifier(command="true")

    assert notifier.available() is True
    notifier("Mon Oct 19 12:00:00 2026", "IN_MODIFY")
