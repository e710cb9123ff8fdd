from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label

from api import endpoints
from api.errors import ApiError
from utils.pure import money
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class CatalogScreen(BaseScreen):
    """
    Product listing, open to everyone. Enter opens the detail modal.
    """

    # bindings here are only for the footer hints
    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
    ]

    ROUTE = "/"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-products")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Label("", id="label-product-cnt")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Category", "Price", "Sold by")
        table.focus()

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True)
    async def load_products(self) -> None:
        try:
            products = await endpoints.list_products(self.app.state.client)
        except ApiError as exc:
            self.notify(
                "Failed to load products: " + exc.describe("Server error"),
                severity="error",
            )
            return

        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.id,
                p.name,
                p.category or "-",
                money(p.price),
                p.vendor_name or "Unknown Vendor",
                key=str(p.id),
            )
        self.query_one("#label-product-cnt", Label).update(f" {len(products)} products")

    @on(DataTable.RowSelected)
    @work()
    async def handle_view_product(self, event: DataTable.RowSelected) -> None:
        product_id = int(event.row_key.value)
        redirect = await self.app.push_screen_wait(ProdDetailModal(product_id))
        if redirect:
            self.app.navigate(redirect)
        else:
            self.refresh_sidebar()
