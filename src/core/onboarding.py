from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from api import endpoints
from api.errors import ApiError
from api.models import Profile
from core.inventory import VendorInventory
from core.results import ActionResult, Notifier, silent
from core.session import SessionStore
from utils.logger import get_logger

_logger = get_logger(__name__)

REJECTED_NOTICE = (
    "Your previous application was rejected. "
    "Please update your details and submit again."
)


class OnboardingState(str, Enum):
    CHECKING = "CHECKING"
    NEW = "NEW"
    PENDING = "PENDING"
    APPROVED = "APPROVED"


def classify(profile: Profile) -> Tuple[OnboardingState, bool]:
    """
    Map a vendor profile to a state. The flag tells whether the server
    reported a rejection, which the caller surfaces once.
    """
    status = (profile.application_status or "").upper()
    if profile.approved or status == "APPROVED":
        return OnboardingState.APPROVED, False
    if status == "PENDING":
        return OnboardingState.PENDING, False
    if status == "REJECTED":
        return OnboardingState.NEW, True
    return OnboardingState.NEW, False


class VendorOnboardingMachine:
    """
    Application lifecycle of a vendor as seen by the client.

        CHECKING -> APPROVED | PENDING | NEW
        NEW --submit--> PENDING

    APPROVED and REJECTED are only ever observed by running check() again;
    nothing on the client moves an application out of PENDING. Any failure
    while checking lands in NEW, never in APPROVED.

    Results that arrive after detach() (or after a newer check) are dropped.
    """

    def __init__(
        self,
        session: SessionStore,
        inventory: VendorInventory,
        notify: Notifier = silent,
    ) -> None:
        self.session = session
        self.inventory = inventory
        self._notify = notify
        self.state = OnboardingState.CHECKING
        self.shop_name = ""
        self._generation = 0

    def detach(self) -> None:
        """The owning view is gone; discard whatever is still in flight."""
        self._generation += 1

    async def check(self) -> OnboardingState:
        self._generation += 1
        generation = self._generation
        self.state = OnboardingState.CHECKING

        identity = self.session.identity
        if identity is None or identity.role != "VENDOR":
            _logger.warning("Onboarding check without a vendor identity.")
            self.state = OnboardingState.NEW
            return self.state

        rejected = False
        profile: Optional[Profile] = None
        try:
            profile = await endpoints.get_profile(self.session.client)
        except ApiError as exc:
            _logger.warning(f"Failed to check application status: {exc}")
        except Exception:
            # malformed payloads included; the only safe answer is "apply"
            _logger.exception("Unexpected error while checking application status")

        if generation != self._generation:
            return self.state

        if profile is None:
            next_state = OnboardingState.NEW
        else:
            next_state, rejected = classify(profile)
            self.shop_name = profile.shop_name or self.shop_name

        self.state = next_state
        _logger.info(f"Vendor {identity.id} onboarding state: {next_state.value}")
        if rejected:
            self._notify(REJECTED_NOTICE, severity="warning")
        if next_state is OnboardingState.APPROVED:
            loaded = await self.inventory.load()
            if not loaded.ok and generation == self._generation:
                self._notify(loaded.message, severity="error")
        return self.state

    async def refresh(self) -> OnboardingState:
        return await self.check()

    async def submit(self, shop_name: str, description: str) -> ActionResult:
        if self.state is not OnboardingState.NEW:
            return ActionResult.failure(
                f"Cannot submit an application while {self.state.value}."
            )

        shop_name, description = shop_name.strip(), description.strip()
        errors = {}
        if not shop_name:
            errors["shop_name"] = "Shop name is required."
        if not description:
            errors["description"] = "Description is required."
        if errors:
            return ActionResult(False, next(iter(errors.values())), field_errors=errors)

        generation = self._generation
        try:
            await endpoints.submit_vendor_application(
                self.session.client, shop_name, description
            )
        except ApiError as exc:
            _logger.warning(f"Application error: {exc}")
            return ActionResult.failure(
                "Failed to submit: " + exc.describe("Server Error")
            )

        if generation == self._generation:
            self.state = OnboardingState.PENDING
            self.shop_name = shop_name
        self._notify("Application Submitted! Please wait for Admin approval.")
        return ActionResult.success()
