from typing import Optional

from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to log out
    """

    bubble = True


class IdentityChangedMessage(Message):
    """
    Fired after the session resolved a new identity (or lost it).
    The app re-evaluates the route gate on it.
    """

    bubble = True

    def __init__(self, role: Optional[str]) -> None:
        super().__init__()
        self.role = role


class CartChangedMessage(Message):
    """
    Fired whenever a cart line was added, edited or removed.
    Will trigger a refresh of cart screen
    """

    bubble = True

