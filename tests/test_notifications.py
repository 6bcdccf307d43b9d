from app.client.notifications import Notifier, ToastKind, handle_errors
from app.core.exceptions import NetworkError, ValidationError


def test_validation_error_toasts_first_field_message():
    notifier = Notifier()
    error = ValidationError(
        details={"errors": [{"loc": ["url"], "msg": "URL must start with http"}]}
    )

    handle_errors(error, "Failed to add link!", notifier)

    assert notifier.last.kind is ToastKind.ERROR
    assert notifier.last.message == "URL must start with http"


def test_other_errors_use_fallback_message_and_run_reset():
    notifier = Notifier()
    reset = []

    handle_errors(NetworkError(), "Could not like!", notifier, fn=lambda: reset.append(True))

    assert notifier.last.message == "Could not like!"
    assert reset == [True]


def test_dismissed_toasts_are_hidden():
    notifier = Notifier()
    first = notifier.error("Failed to set image!")
    notifier.success("Link added!")

    notifier.dismiss(first)

    assert [toast.message for toast in notifier.visible] == ["Link added!"]
    assert len(notifier.toasts) == 2
