from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

import db.database as database
from api.client import ApiClient
from core.cart import CartStore
from core.checkout import CheckoutCoordinator
from core.inventory import VendorInventory
from core.onboarding import VendorOnboardingMachine
from core.results import Notifier, silent
from core.review import AdminReviewQueue
from core.session import SessionStore
from utils.config import Settings


@dataclass
class GlobalState:
    """
    Every stateful component of the client, built once and handed to the
    screens through the app.

    Fields:
      - settings: configuration read at start-up
      - client: HTTP client shared by all components
      - session: credential + identity
      - cart: persisted cart
      - checkout: cart -> order
      - inventory: approved vendor's stats and stock lines
      - onboarding: vendor application lifecycle
      - review: admin application queue and vendor analytics
    """

    settings: Settings
    client: ApiClient
    session: SessionStore
    cart: CartStore
    checkout: CheckoutCoordinator
    inventory: VendorInventory
    onboarding: VendorOnboardingMachine
    review: AdminReviewQueue

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        notify: Notifier = silent,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GlobalState":
        settings = settings or Settings.from_env()
        database.configure(settings.db_path)

        client = ApiClient(
            settings.api_url, timeout=settings.http_timeout, transport=transport
        )
        session = SessionStore(client)
        cart = CartStore(notify)
        inventory = VendorInventory(client, notify)
        return cls(
            settings=settings,
            client=client,
            session=session,
            cart=cart,
            checkout=CheckoutCoordinator(session, cart, notify),
            inventory=inventory,
            onboarding=VendorOnboardingMachine(session, inventory, notify),
            review=AdminReviewQueue(session, notify),
        )

    async def start(self) -> None:
        """Rehydrate the cart and resolve the stored credential."""
        await self.cart.load()
        await self.session.restore()

    async def close(self) -> None:
        await self.client.aclose()
