from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from api import endpoints
from api.errors import ApiError
from api.models import Order, OrderDraft, OrderItem, Product
from core import gate
from core.cart import CartLine, CartStore
from core.results import ActionResult, Notifier, silent
from core.session import SessionStore
from utils.logger import get_logger

_logger = get_logger(__name__)

SHIPPING_LABELS = {
    "street": "Street",
    "city": "City",
    "zip": "Zip code",
    "phone": "Phone",
}


@dataclass(frozen=True)
class ShippingFields:
    street: str = ""
    city: str = ""
    zip: str = ""
    phone: str = ""

    def cleaned(self) -> "ShippingFields":
        return ShippingFields(
            self.street.strip(), self.city.strip(), self.zip.strip(), self.phone.strip()
        )

    def missing(self) -> Dict[str, str]:
        return {
            name: f"{label} is required."
            for name, label in SHIPPING_LABELS.items()
            if not getattr(self, name).strip()
        }

    @property
    def address(self) -> str:
        return f"{self.street}, {self.city} {self.zip}"


@dataclass(frozen=True)
class CheckoutResult(ActionResult):
    order: Optional[Order] = None
    # product id -> message, for lines the server can no longer fill
    stock_errors: Dict[int, str] = field(default_factory=dict)


class CheckoutCoordinator:
    """
    Turns the cart into an order.

    The cart is cleared if and only if the server accepted the order. A
    failed submission leaves every line as it was and is never retried
    automatically.
    """

    def __init__(
        self,
        session: SessionStore,
        cart: CartStore,
        notify: Notifier = silent,
        revalidate_stock: bool = True,
    ) -> None:
        self.session = session
        self.cart = cart
        self._notify = notify
        self.revalidate_stock = revalidate_stock
        self.submitting = False

    async def add_to_cart(
        self, product: Product, amount: int = 1, available_stock: Optional[int] = None
    ) -> ActionResult:
        """
        Product page "add to cart". Anonymous users are sent to login and the
        cart is left alone; amount is bounded by the stock seen on the page.
        """
        decision = gate.can_access(self.session.identity, "/cart")
        if not decision.allowed:
            if self.session.identity is None:
                message = "Please login to add items to your cart!"
            else:
                message = "Only customers can shop."
            self._notify(message, severity="warning")
            return ActionResult.failure(message, redirect=decision.redirect)

        if amount < 1:
            return ActionResult.failure("Quantity must be at least 1.")
        if available_stock is not None:
            if available_stock <= 0:
                return ActionResult.failure("Out of Stock.")
            if amount > available_stock:
                return ActionResult.failure(f"Only {available_stock} left in stock.")

        await self.cart.add_item(product, amount)
        return ActionResult.success(f"Added {amount} item(s) to Cart!")

    def build_draft(self, lines: List[CartLine], shipping: ShippingFields) -> OrderDraft:
        identity = self.session.identity
        return OrderDraft(
            user_id=identity.id if identity else 0,
            shipping_address=shipping.address,
            phone=shipping.phone,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.unit_price,
                    product_name=line.name,
                )
                for line in lines
            ],
            total_amount=round(sum(line.subtotal for line in lines), 2),
        )

    async def _stock_problems(self, lines: List[CartLine]) -> Dict[int, str]:
        problems: Dict[int, str] = {}
        for line in lines:
            stock = await endpoints.available_stock(self.session.client, line.product_id)
            if stock <= 0:
                problems[line.product_id] = f"{line.name} is out of stock."
            elif line.quantity > stock:
                problems[line.product_id] = f"Only {stock} of {line.name} left in stock."
        return problems

    async def submit(self, shipping: ShippingFields) -> CheckoutResult:
        if self.submitting:
            return CheckoutResult(False, "Order submission already in progress.")

        decision = gate.can_access(self.session.identity, "/checkout")
        if not decision.allowed:
            return CheckoutResult(False, "Please login to place an order.", decision.redirect)

        if self.cart.is_empty():
            return CheckoutResult(False, "Your cart is empty!")

        shipping = shipping.cleaned()
        missing = shipping.missing()
        if missing:
            return CheckoutResult(
                False, next(iter(missing.values())), field_errors=missing
            )

        self.submitting = True
        try:
            lines = self.cart.lines
            if self.revalidate_stock:
                try:
                    problems = await self._stock_problems(lines)
                except ApiError as exc:
                    return CheckoutResult(
                        False, exc.describe("Could not verify stock. Please try again.")
                    )
                if problems:
                    return CheckoutResult(
                        False,
                        " ".join(problems.values()),
                        stock_errors=problems,
                    )

            draft = self.build_draft(lines, shipping)
            _logger.info(
                f"Submitting order of {len(draft.items)} line(s), total {draft.total_amount:.2f}"
            )
            try:
                order = await endpoints.create_order(self.session.client, draft)
            except ApiError as exc:
                _logger.warning(f"Order Failed: {exc}")
                return CheckoutResult(False, exc.describe("Failed to place order."))

            try:
                await self.cart.clear()
            except (OSError, sqlite3.Error):
                # the order exists server side; the cart keeps its lines on disk and in memory
                _logger.exception("Order placed but the cart could not be cleared")
                self._notify(
                    "Order placed, but your cart could not be cleared. "
                    "Please remove the items before ordering again.",
                    severity="warning",
                )
        finally:
            self.submitting = False

        self._notify("Order Placed Successfully!")
        return CheckoutResult(True, "Order Placed Successfully!", gate.HOME_ROUTE, order=order)
