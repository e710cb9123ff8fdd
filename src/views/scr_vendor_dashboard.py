from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume, ScreenSuspend
from textual.widgets import (
    Button,
    ContentSwitcher,
    DataTable,
    Input,
    Label,
    LoadingIndicator,
    Markdown,
    TextArea,
)

from api.models import InventoryItem
from core.onboarding import OnboardingState
from utils.pure import generate_markdown_table, humanize_status, money
from views.base_screen import BaseScreen
from views.modal_add_product import AddProductModal
from views.modal_dialog import confirm_with
from views.modal_restock import RestockModal


class VendorDashboardScreen(BaseScreen):
    """
    One pane per onboarding state:

    - checking: spinner while the profile is fetched
    - new: application form
    - pending: waiting for an admin, with "Check Status Again"
    - approved: stats and inventory management
    """

    ROUTE = "/vendor/dashboard"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with ContentSwitcher(initial="pane-checking", id="switcher-onboarding"):
            yield LoadingIndicator(id="pane-checking")
            with Vertical(id="pane-new"):
                yield Label("Become a Seller", classes="label-title")
                yield Label("Shop Name")
                yield Input(placeholder="Cozy Knits", id="input-shop_name")
                yield Label("Description")
                yield TextArea(id="input-description")
                yield Button("Submit Application", id="btn-apply", variant="primary")
            with Vertical(id="pane-pending"):
                yield Label("Application Pending", classes="label-title")
                yield Markdown("", id="md-pending")
                yield Button("Check Status Again", id="btn-recheck")
            with Vertical(id="pane-approved"):
                yield Markdown("", id="md-stats")
                yield DataTable(id="table-inventory")
                with Horizontal(id="hort-inventory-control"):
                    yield Button("Add Product", id="btn-add", variant="success")
                    yield Button("Restock", id="btn-restock")
                    yield Button("Delete", id="btn-delete", variant="error")
                    yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one("#table-inventory", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Product", "Price", "Stock", "Status")

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-recheck")
    @work(exclusive=True, group="onboarding")
    async def handle_check(self) -> None:
        self._show(OnboardingState.CHECKING)
        state = await self.app.state.onboarding.check()
        self._show(state)

    @on(ScreenSuspend)
    def handle_suspend(self) -> None:
        self.app.state.onboarding.detach()

    def _show(self, state: OnboardingState) -> None:
        switcher = self.query_one(ContentSwitcher)
        switcher.current = f"pane-{state.value.lower()}"
        if state is OnboardingState.PENDING:
            shop = self.app.state.onboarding.shop_name or "your shop"
            self.query_one("#md-pending", Markdown).update(
                f"Your application for **{shop}** is under review. "
                "An admin will approve or reject it soon."
            )
        elif state is OnboardingState.APPROVED:
            self._render_inventory()

    def _render_inventory(self) -> None:
        inventory = self.app.state.inventory
        stats = inventory.stats
        if stats:
            rows = [
                ["Potential Revenue", money(stats.potential_revenue)],
                ["Total Sold", stats.total_sold],
                ["Active Products", stats.active_products],
                ["Low Stock", stats.low_stock_count],
            ]
            md = "### Dashboard\n\n" + generate_markdown_table(
                ["Metric", "Value"], rows, ["l", "r"]
            )
        else:
            md = "### Dashboard\n\nNo statistics available."
        self.query_one("#md-stats", Markdown).update(md)

        table = self.query_one("#table-inventory", DataTable)
        table.clear()
        for item in inventory.items:
            table.add_row(
                item.product_id,
                item.product_name,
                money(item.unit_price),
                item.stock_quantity,
                humanize_status(item.status),
                key=str(item.product_id),
            )

        has_items = bool(inventory.items)
        self.query_one("#btn-restock").disabled = not has_items
        self.query_one("#btn-delete").disabled = not has_items

    def _selected_item(self) -> Optional[InventoryItem]:
        table = self.query_one("#table-inventory", DataTable)
        if table.row_count == 0:
            return None
        row = table.get_row_at(table.cursor_row)
        pid = int(row[0])
        return next(
            (i for i in self.app.state.inventory.items if i.product_id == pid), None
        )

    @on(Button.Pressed, "#btn-apply")
    @work(exclusive=True, group="onboarding")
    async def handle_apply(self) -> None:
        shop_input = self.query_one("#input-shop_name", Input)
        desc_input = self.query_one("#input-description", TextArea)
        shop_input.remove_class("-invalid")
        desc_input.remove_class("-invalid")

        result = await self.app.state.onboarding.submit(
            shop_input.value, desc_input.text
        )
        if result.ok:
            self._show(self.app.state.onboarding.state)
            return
        for name in result.field_errors:
            self.query_one(f"#input-{name}").add_class("-invalid")
        self.notify(result.message, severity="error")

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="inventory")
    async def handle_refresh(self) -> None:
        result = await self.app.state.inventory.load()
        if not result.ok:
            self.notify(result.message, severity="error")
        self._render_inventory()

    @on(Button.Pressed, "#btn-add")
    @work(exclusive=True, group="inventory")
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(AddProductModal()):
            self._render_inventory()

    @on(Button.Pressed, "#btn-restock")
    @work(exclusive=True, group="inventory")
    async def handle_restock(self) -> None:
        item = self._selected_item()
        if item is None:
            self.notify("Select a product first.", severity="warning")
            return
        if await self.app.push_screen_wait(RestockModal(item)):
            self._render_inventory()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="inventory")
    async def handle_delete(self) -> None:
        item = self._selected_item()
        if item is None:
            self.notify("Select a product first.", severity="warning")
            return
        result = await self.app.state.inventory.delete_product(
            item.product_id, confirm_with(self.app, tone="error")
        )
        if result.message and not result.ok:
            self.notify(result.message, severity="error")
        self._render_inventory()
