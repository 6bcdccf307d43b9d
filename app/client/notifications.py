"""
Toast notifications and the shared mutation error handler.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from app.core.exceptions import ProfileShareException, ValidationError
from app.core.logging import get_logger

logger = get_logger(__name__)


class ToastKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Toast:
    """A dismissible notification."""

    kind: ToastKind
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    dismissed: bool = False


class Notifier:
    """Collects toasts for the rendering layer to display."""

    def __init__(self):
        self.toasts: List[Toast] = []

    def _push(self, kind: ToastKind, message: str) -> Toast:
        toast = Toast(kind=kind, message=message)
        self.toasts.append(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self._push(ToastKind.SUCCESS, message)

    def error(self, message: str) -> Toast:
        return self._push(ToastKind.ERROR, message)

    def dismiss(self, toast: Toast) -> None:
        toast.dismissed = True

    @property
    def visible(self) -> List[Toast]:
        return [toast for toast in self.toasts if not toast.dismissed]

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None


def handle_errors(
    error: Exception,
    message: str,
    notifier: Notifier,
    fn: Optional[Callable[[], None]] = None,
) -> None:
    """
    Turn a failed mutation into a toast and run the local reset callback.

    Validation errors show the first field message instead of ``message``.

    Args:
        error: The exception raised by the mutation
        message: Fallback text shown to the user
        notifier: Toast sink
        fn: Local state reset (e.g. clearing a loading flag)
    """
    if isinstance(error, ValidationError) and error.details.get("errors"):
        first = error.details["errors"][0]
        notifier.error(first.get("msg") or message)
    else:
        notifier.error(message)

    if isinstance(error, ProfileShareException):
        logger.info(f"{message} ({error.error_code}: {error.message})")
    else:
        logger.error(f"{message}: {error!r}")

    if fn is not None:
        fn()
