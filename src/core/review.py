from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from api import endpoints
from api.errors import ApiError, AuthorizationError
from api.models import VendorApplication, VendorPerformance
from core import gate
from core.results import ActionResult, Confirm, Notifier, silent
from core.session import SessionStore
from utils.logger import get_logger

_logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def order_applications(apps: List[VendorApplication]) -> List[VendorApplication]:
    """
    PENDING first, then everything else; newest first inside each group.
    Ties keep their input order. Missing timestamps count as oldest.
    """
    by_date = sorted(apps, key=lambda a: a.created_at or _OLDEST, reverse=True)
    return sorted(by_date, key=lambda a: a.status != "PENDING")


class AdminReviewQueue:
    """
    Vendor applications awaiting an admin decision.

    After approve/reject the whole list is fetched again instead of being
    patched locally, since another admin or the applicant may have changed
    it in the meantime.
    """

    def __init__(self, session: SessionStore, notify: Notifier = silent) -> None:
        self.session = session
        self._notify = notify
        self.applications: List[VendorApplication] = []
        self.vendor_stats: List[VendorPerformance] = []
        self._generation = 0

    def detach(self) -> None:
        self._generation += 1

    def _guard(self) -> Optional[ActionResult]:
        decision = gate.can_access(self.session.identity, "/admin")
        if decision.allowed:
            return None
        return ActionResult.failure(
            "Access Denied: Admin privileges required.", redirect=decision.redirect
        )

    async def fetch_applications(self) -> ActionResult:
        denied = self._guard()
        if denied:
            return denied

        self._generation += 1
        generation = self._generation
        try:
            apps = await endpoints.list_applications(self.session.client)
        except AuthorizationError:
            # "you should not be here", not "something broke": no alert
            _logger.info("Application list refused with 403, redirecting.")
            return ActionResult.failure("", redirect=gate.HOME_ROUTE)
        except ApiError as exc:
            message = "Failed to load data: " + exc.describe("Server error")
            if generation == self._generation:
                self._notify(message, severity="error")
            return ActionResult.failure(message)

        if generation != self._generation:
            _logger.debug("Dropping application list that arrived after detach.")
            return ActionResult.failure("")
        self.applications = order_applications(apps)
        return ActionResult.success()

    def pending(self) -> List[VendorApplication]:
        return [a for a in self.applications if a.status == "PENDING"]

    async def _decide(
        self, application_id: int, approve: bool, confirm: Confirm
    ) -> ActionResult:
        denied = self._guard()
        if denied:
            return denied

        verb = "Approve" if approve else "Reject"
        if not await confirm(f"{verb} this vendor?"):
            return ActionResult.failure("")

        call = endpoints.approve_application if approve else endpoints.reject_application
        try:
            await call(self.session.client, application_id)
        except ApiError as exc:
            noun = "Approval" if approve else "Rejection"
            message = f"{noun} failed: " + exc.describe("Server error")
            self._notify(message, severity="error")
            return ActionResult.failure(message)

        _logger.info(
            f"Application {application_id} {'approved' if approve else 'rejected'}."
        )
        await self.fetch_applications()
        return ActionResult.success()

    async def approve(self, application_id: int, confirm: Confirm) -> ActionResult:
        return await self._decide(application_id, True, confirm)

    async def reject(self, application_id: int, confirm: Confirm) -> ActionResult:
        return await self._decide(application_id, False, confirm)

    async def fetch_vendor_stats(self) -> ActionResult:
        denied = self._guard()
        if denied:
            return denied
        try:
            self.vendor_stats = await endpoints.vendor_stats(self.session.client)
        except AuthorizationError:
            return ActionResult.failure("", redirect=gate.HOME_ROUTE)
        except ApiError as exc:
            _logger.warning(f"Failed to load stats: {exc}")
            return ActionResult.failure(exc.describe("Failed to load stats."))
        return ActionResult.success()
