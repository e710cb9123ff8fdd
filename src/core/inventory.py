from __future__ import annotations

from typing import List, Optional

from api import endpoints
from api.client import ApiClient
from api.errors import ApiError
from api.models import CATEGORIES, DashboardStats, InventoryItem, NewProduct
from core.results import ActionResult, Confirm, Notifier, silent
from utils.logger import get_logger

_logger = get_logger(__name__)


def _parse_int(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _parse_float(value) -> Optional[float]:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


class VendorInventory:
    """
    Dashboard data of an approved vendor: stats and inventory lines.

    Every mutation is followed by a full reload; the stock status of each
    line is computed by the server and only displayed here.
    """

    def __init__(self, client: ApiClient, notify: Notifier = silent) -> None:
        self.client = client
        self._notify = notify
        self.stats: Optional[DashboardStats] = None
        self.items: List[InventoryItem] = []

    async def load(self) -> ActionResult:
        try:
            stats = await endpoints.vendor_dashboard(self.client)
            items = await endpoints.my_inventory(self.client)
        except ApiError as exc:
            _logger.warning(f"Error loading dashboard: {exc}")
            return ActionResult.failure(exc.describe("Error loading dashboard."))
        self.stats, self.items = stats, items
        return ActionResult.success()

    async def restock(self, product_id: int, quantity) -> ActionResult:
        amount = _parse_int(quantity)
        if amount is None or amount <= 0:
            return ActionResult(
                False,
                "Quantity must be a positive number.",
                field_errors={"quantity": "Quantity must be a positive number."},
            )
        try:
            await endpoints.restock(self.client, product_id, amount)
        except ApiError as exc:
            return ActionResult.failure(exc.describe("Failed to restock inventory."))

        self._notify(f"Successfully restocked with {amount} units!")
        await self.load()
        return ActionResult.success()

    async def delete_product(self, product_id: int, confirm: Confirm) -> ActionResult:
        if not await confirm("Are you sure you want to delete this product?"):
            return ActionResult.failure("")
        try:
            await endpoints.delete_product(self.client, product_id)
        except ApiError as exc:
            return ActionResult.failure(
                "Failed to delete: " + exc.describe("Server Error")
            )

        self._notify("Product deleted successfully!")
        await self.load()
        return ActionResult.success()

    async def add_product(
        self,
        name: str,
        description: str,
        price,
        stock_quantity,
        category: str = "YARN",
        image_url: str = "",
    ) -> ActionResult:
        errors = {}
        name, description = name.strip(), description.strip()
        if not name:
            errors["name"] = "Product name is required."
        if not description:
            errors["description"] = "Description is required."
        parsed_price = _parse_float(price)
        if parsed_price is None or parsed_price < 0:
            errors["price"] = "Price must be zero or more."
        parsed_stock = _parse_int(stock_quantity)
        if parsed_stock is None or parsed_stock < 1:
            errors["stock_quantity"] = "Initial stock must be at least 1."
        if category not in CATEGORIES:
            errors["category"] = f"Unknown category {category}."
        if errors:
            return ActionResult(False, next(iter(errors.values())), field_errors=errors)

        product = NewProduct(
            name=name,
            description=description,
            price=parsed_price,
            stock_quantity=parsed_stock,
            category=category,
            image_url=image_url.strip(),
        )
        try:
            await endpoints.create_product(self.client, product)
        except ApiError as exc:
            return ActionResult.failure(exc.describe("Failed to add product."))

        self._notify("Product added successfully!")
        await self.load()
        return ActionResult.success(redirect="/vendor/dashboard")
