from __future__ import annotations

from typing import Callable, List, Optional

from .models import Verdict
from .utils.logging import get_logger

log = get_logger("reporter")

MSG_LOADED = "Keybox data loaded"
MSG_INVALID = "Invalid keybox file selected"
MSG_CLEARED = "Keybox data cleared"
MSG_STORE_ERROR = "Keybox storage is unavailable"

SUMMARY_LOADED = "Keybox data is loaded"
SUMMARY_EMPTY = "Select a keybox XML file to load"

Notifier = Callable[[str], None]


class OutcomeReporter:
    """Turns verdicts into user-facing messages.

    Reject reasons collapse to one generic message; the reason itself only
    goes to the log. `notifier` is the host's toast/notification hook.
    """

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier
        self.sent: List[str] = []

    def _send(self, message: str) -> str:
        self.sent.append(message)
        if self.notifier is not None:
            self.notifier(message)
        return message

    def report_import(self, verdict: Verdict) -> str:
        if verdict.accepted:
            log.info("keybox import accepted")
            return self._send(MSG_LOADED)
        log.warning("keybox import rejected: %s", verdict.reason.value if verdict.reason else "unknown")
        return self._send(MSG_INVALID)

    def report_cleared(self) -> str:
        return self._send(MSG_CLEARED)

    def report_clear_failed(self) -> str:
        return self._send(MSG_STORE_ERROR)


def summary_for(present: bool) -> str:
    return SUMMARY_LOADED if present else SUMMARY_EMPTY
