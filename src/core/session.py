from __future__ import annotations

from typing import Callable, List, Optional

import db.storage as storage
from api import endpoints
from api.client import ApiClient
from api.errors import ApiError, AuthenticationError
from api.models import Identity, Profile
from core.results import ActionResult
from utils.logger import get_logger

_logger = get_logger(__name__)

IdentityListener = Callable[[Optional[Identity]], None]


class SessionStore:
    """
    Holds the bearer credential and the identity it resolves to.

    The identity is the single source of truth for every role decision.
    Listeners registered with subscribe() are called after each resolution
    and after logout, so gated views can re-evaluate.

    The credential is persisted under a fixed key and survives restarts
    until logout. There is a single writer per process; another process
    sharing the same database file wins or loses by last write.
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        self.client.token_provider = lambda: self._token

        self._token: Optional[str] = None
        self.identity: Optional[Identity] = None
        self.profile: Optional[Profile] = None
        self.resolved = False
        self._listeners: List[IdentityListener] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def role(self) -> Optional[str]:
        return self.identity.role if self.identity else None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self.identity)

    async def restore(self) -> Optional[Identity]:
        """Load the persisted credential (if any) and resolve it. Called once at start-up."""
        self._token = await storage.get(storage.TOKEN_KEY)
        return await self.resolve_identity()

    async def resolve_identity(self) -> Optional[Identity]:
        """
        Ask the server who the current credential belongs to.

        Never raises: any failure leaves the identity absent. A 401 also
        drops the credential since it can no longer resolve.
        """
        token = self._token
        if not token:
            self.identity = None
            self.profile = None
            self.resolved = True
            self._emit()
            return None

        profile: Optional[Profile] = None
        rejected = False
        try:
            profile = await endpoints.get_profile(self.client)
        except AuthenticationError:
            rejected = True
        except (ApiError, ValueError) as exc:
            _logger.warning(f"Could not resolve identity: {exc}")

        if self._token != token:
            # logout or a newer login happened meanwhile and owns the state now
            return self.identity
        if rejected:
            _logger.info("Stored credential was rejected, discarding it.")
            await storage.delete(storage.TOKEN_KEY)
            self._token = None

        self.profile = profile
        self.identity = profile.identity if profile else None
        self.resolved = True
        if self.identity:
            _logger.info(f"Resolved identity {self.identity.id} ({self.identity.role}).")
        self._emit()
        return self.identity

    async def login(self, token: str) -> Optional[Identity]:
        """Store a credential obtained elsewhere and resolve it."""
        await storage.put(storage.TOKEN_KEY, token)
        self._token = token
        self.resolved = False
        return await self.resolve_identity()

    async def logout(self) -> None:
        """Drop credential and identity together."""
        await storage.delete(storage.TOKEN_KEY)
        self._token, self.identity, self.profile = None, None, None
        self.resolved = True
        _logger.info("Logged out.")
        self._emit()

    async def sign_in(self, email: str, password: str) -> ActionResult:
        """Credential exchange followed by login()."""
        email, password = email.strip(), password.strip()
        if not email or not password:
            return ActionResult.failure("Email or password cannot be empty!")

        try:
            token = await endpoints.login(self.client, email, password)
        except ApiError as exc:
            return ActionResult.failure(
                "Login failed! " + exc.describe("Check your credentials.")
            )
        if not token:
            _logger.error("Login response carried no token.")
            return ActionResult.failure("Login failed: Server didn't send a token.")

        identity = await self.login(token)
        if identity is None:
            return ActionResult.failure("Login failed: could not load your profile.")
        return ActionResult.success(f"Welcome, {identity.name or identity.email}!")

    async def register(
        self, name: str, email: str, password: str, role: str = "CUSTOMER"
    ) -> ActionResult:
        name, email, password = name.strip(), email.strip(), password.strip()
        if not name or not email or not password:
            return ActionResult.failure("Make sure all inputs are filled.")
        role = role.upper()
        if role not in ("CUSTOMER", "VENDOR"):
            return ActionResult.failure(f"Cannot register with role {role}.")
        try:
            await endpoints.register(self.client, name, email, password, role)  # type: ignore[arg-type]
        except ApiError as exc:
            return ActionResult.failure(
                "Registration Failed! " + exc.describe("Error occurred")
            )
        return ActionResult.success(
            "Registration Successful! Please Login.", redirect="/login"
        )
