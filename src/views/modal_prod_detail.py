from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from api import endpoints
from api.errors import ApiError
from api.models import Product
from utils.pure import generate_markdown_table, money


class ProdDetailModal(ModalScreen[Optional[str]]):
    """
    Product detail plus the quantity picker.
    Dismisses with a route when the user has to go elsewhere (login), else None.
    """

    order_qty = reactive(1)

    def __init__(self, product_id: int) -> None:
        super().__init__()

        self._product_id = product_id
        self._prod: Optional[Product] = None
        self._stock = 0

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail", classes="modal-body"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical(id="div-order"):
                yield Label("Loading yarn details...", id="label-stock")
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    def on_mount(self):
        self.query_one("#btn-addcart").disabled = True
        self.load_product()

    @work(exclusive=True)
    async def load_product(self) -> None:
        client = self.app.state.client
        try:
            self._prod = await endpoints.get_product(client, self._product_id)
        except ApiError as exc:
            await self.query_one(MarkdownViewer).document.update(
                "### Product not found!\n\n" + exc.describe("")
            )
            self.query_one("#label-stock", Label).update("")
            return

        try:
            self._stock = await endpoints.available_stock(client, self._product_id)
        except ApiError:
            self._stock = 0

        prod = self._prod
        table_rows = [
            ["Category", prod.category or "-"],
            ["Price", money(prod.price)],
            ["Sold by", prod.vendor_name or "Unknown Vendor"],
            ["Description", prod.description or "-"],
        ]
        md_table_str = generate_markdown_table(["Attribute", "Value"], table_rows, ["l", "l"])
        header_md = f"### {prod.name}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)

        stock_label = self.query_one("#label-stock", Label)
        order_btn = self.query_one("#btn-addcart", Button)
        if self._stock < 1:
            stock_label.update("Sold Out")
            order_btn.label = "Out of Stock"
            order_btn.variant = "warning"
            order_btn.disabled = True
            self.query_one("#btn-sub-qty").disabled = True
            self.query_one("#btn-add-qty").disabled = True
            self.query_one("#input-order-qty").disabled = True
            return

        stock_label.update(f"{self._stock} In Stock")
        order_btn.disabled = False
        self.query_one("#input-order-qty").validators = [
            Number(minimum=1, maximum=self._stock)
        ]
        self.order_qty = 1
        self.watch_order_qty(1)
        self.query_one("#input-order-qty").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
            and message.value
        ):
            self.order_qty = int(message.value)

    def validate_order_qty(self, qty: int) -> int:
        return max(1, min(qty, max(self._stock, 1)))

    def watch_order_qty(self, qty: int) -> None:
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        self.query_one("#btn-add-qty").disabled = qty >= self._stock
        self.query_one("#input-order-qty", Input).value = str(qty)
        self.query_one("#btn-addcart", Button).label = f"Add {qty} to Cart"

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(None)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        if self._prod is None:
            return
        result = await self.app.state.checkout.add_to_cart(
            self._prod, self.order_qty, self._stock
        )
        if result.redirect:
            self.dismiss(result.redirect)
            return
        if not result.ok:
            self.notify(result.message, severity="error")
            return
        self.dismiss(None)
