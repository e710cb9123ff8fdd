from datetime import datetime, timezone
from typing import Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

from api import endpoints
from api.errors import ApiError
from api.models import Order
from utils.pure import generate_markdown_table, humanize_status, money, short_date
from views.base_screen import BaseScreen

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class OrdersScreen(BaseScreen):
    """
    Customers can browse their past orders and view details.

    Layout:
    - Markdown detail view at the top, showing selected order details.
    - Orders table below (reverse chronological).
    """

    ROUTE = "/orders"

    # Show some hints in footer
    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[int, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Shipping Address", "Total")

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    def handle_refresh(self):
        self._load_orders()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key.value is None:
            return
        self._render_detail(self._orders.get(int(event.row_key.value)))

    @work(exclusive=True, group="orders")
    async def _load_orders(self) -> None:
        try:
            orders: List[Order] = await endpoints.list_orders(self.app.state.client)
        except ApiError as exc:
            self.notify(exc.describe("Failed to load orders."), severity="error")
            return

        orders.sort(key=lambda o: o.order_date or _OLDEST, reverse=True)
        self._orders = {o.id: o for o in orders}

        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o.id,
                short_date(o.order_date),
                humanize_status(o.status) if o.status else "-",
                o.shipping_address,
                money(o.total_amount),
                key=str(o.id),
            )

        if orders:
            table.move_cursor(row=0)
            self._render_detail(orders[0])
        else:
            self._render_detail(None)

    def _render_detail(self, order: Optional[Order]) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if not order:
            if self._orders:
                md = "### Select an order to view its details."
            else:
                md = "### You have not placed any orders yet."
            viewer.document.update(md)
            return

        header = (
            f"### Order #{order.id}\n"
            f"Date: {short_date(order.order_date)}  \n"
            f"Ship To: {order.shipping_address}  \n"
            f"Phone: {order.phone}\n\n"
        )
        rows = [
            [
                item.product_name or f"Product {item.product_id}",
                item.quantity,
                money(item.price),
                money(item.price * item.quantity),
            ]
            for item in order.items
        ]
        table = generate_markdown_table(
            ["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
        )
        footer = f"\n\n**Grand Total:** {money(order.total_amount)}"
        viewer.document.update(header + table + footer)
