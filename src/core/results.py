from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

# matches App.notify(message, severity=...)
Notifier = Callable[..., None]


def silent(message: str, severity: str = "information") -> None:
    pass


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a user-initiated operation.

    Fields:
      - ok: the operation took effect
      - message: text to surface to the user (server message or local validation)
      - redirect: route the UI should move to, if any
      - field_errors: per-field validation messages, keyed by field name
    """

    ok: bool
    message: str = ""
    redirect: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, message: str = "", redirect: Optional[str] = None):
        return cls(True, message, redirect)

    @classmethod
    def failure(cls, message: str, redirect: Optional[str] = None):
        return cls(False, message, redirect)


# asks the user a yes/no question, e.g. a DialogModal pushed with push_screen_wait
Confirm = Callable[[str], Awaitable[bool]]
