from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import List, Optional

import db.storage as storage
from api.models import Product
from core.results import Notifier, silent
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: int
    name: str
    unit_price: float  # captured when added, may drift from the server price
    vendor_name: str
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity

    def to_snapshot(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "unitPrice": self.unit_price,
            "vendorName": self.vendor_name,
            "quantity": self.quantity,
        }

    @classmethod
    def from_snapshot(cls, data: dict) -> "CartLine":
        line = cls(
            product_id=int(data["productId"]),
            name=str(data.get("name", "")),
            unit_price=float(data["unitPrice"]),
            vendor_name=str(data.get("vendorName", "")),
            quantity=int(data["quantity"]),
        )
        if line.quantity < 1:
            raise ValueError(f"Bad quantity {line.quantity} for {line.product_id}")
        return line


class CartStore:
    """
    The browsing session's cart: an ordered list of CartLine, at most one
    per product.

    Every mutation persists the whole snapshot before returning. Stock is
    not consulted here; it is checked when a product is viewed and again at
    checkout. The cart is not tied to an identity: whoever logs in next
    inherits it.
    """

    def __init__(self, notify: Notifier = silent) -> None:
        self._lines: List[CartLine] = []
        self._notify = notify

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def get(self, product_id: int) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def total(self) -> float:
        return sum(line.unit_price * line.quantity for line in self._lines)

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    async def load(self) -> None:
        """Rehydrate from the last snapshot; anything unreadable means an empty cart."""
        raw = await storage.get(storage.CART_KEY)
        if raw is None:
            self._lines = []
            return
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("cart snapshot is not a list")
            lines: List[CartLine] = []
            for entry in data:
                line = CartLine.from_snapshot(entry)
                if any(existing.product_id == line.product_id for existing in lines):
                    raise ValueError(f"duplicate line for {line.product_id}")
                lines.append(line)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            _logger.warning(f"Discarding unreadable cart snapshot: {exc}")
            self._lines = []
            return
        self._lines = lines
        _logger.debug(f"Cart restored with {len(lines)} line(s).")

    async def _commit(self, lines: List[CartLine]) -> None:
        """Write the snapshot first; memory only follows a successful write."""
        await storage.put(
            storage.CART_KEY, json.dumps([line.to_snapshot() for line in lines])
        )
        self._lines = lines

    async def add_item(self, product: Product, amount: int = 1) -> CartLine:
        """
        Merge amount into the product's line, or append a new line.
        No stock ceiling is applied here.
        """
        if amount < 1:
            raise ValueError("amount must be at least 1")

        existing = self.get(product.id)
        if existing:
            line = replace(existing, quantity=existing.quantity + amount)
            lines = [
                line if other.product_id == product.id else other
                for other in self._lines
            ]
        else:
            line = CartLine(
                product_id=product.id,
                name=product.name,
                unit_price=product.price,
                vendor_name=product.vendor_name,
                quantity=amount,
            )
            lines = self._lines + [line]
        await self._commit(lines)
        self._notify(f"Added {amount} item(s) to Cart!")
        return line

    async def set_quantity(self, product_id: int, new_quantity: int) -> None:
        """Set a line's quantity. Values below 1 are ignored, not errors."""
        if new_quantity < 1:
            return
        if self.get(product_id) is None:
            return
        await self._commit(
            [
                replace(other, quantity=new_quantity)
                if other.product_id == product_id
                else other
                for other in self._lines
            ]
        )

    async def remove_item(self, product_id: int) -> None:
        if self.get(product_id) is None:
            return
        await self._commit(
            [other for other in self._lines if other.product_id != product_id]
        )

    async def clear(self) -> None:
        await self._commit([])
