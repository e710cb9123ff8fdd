from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select, TextArea

from api.models import CATEGORIES
from utils.pure import humanize_status

_FIELDS = ("name", "description", "price", "stock_quantity", "category")


class AddProductModal(ModalScreen[bool]):
    """
    New product form of an approved vendor.
    """

    def compose(self) -> ComposeResult:
        with VerticalScroll(classes="modal-body"):
            yield Label("Add New Product", classes="label-title")
            yield Label("Product Name")
            yield Input(placeholder="Merino Wool Skein", id="input-name")
            yield Label("Description")
            yield TextArea(id="input-description")
            with Horizontal(id="hort-price-stock"):
                with Vertical():
                    yield Label("Price ($)")
                    yield Input(placeholder="0.00", id="input-price", type="number")
                with Vertical():
                    yield Label("Initial Stock")
                    yield Input(
                        placeholder="1", id="input-stock_quantity", type="integer"
                    )
            yield Label("Category")
            yield Select(
                [(humanize_status(c).title(), c) for c in CATEGORIES],
                value="YARN",
                allow_blank=False,
                id="input-category",
            )
            yield Label("Image URL (optional)")
            yield Input(placeholder="https://", id="input-image_url")
            with Horizontal():
                yield Button("Cancel", id="btn-quit")
                yield Button("Add Product", id="btn-submit", variant="success")

    def on_mount(self):
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        for name in _FIELDS:
            self.query_one(f"#input-{name}").remove_class("-invalid")

        result = await self.app.state.inventory.add_product(
            name=self.query_one("#input-name", Input).value,
            description=self.query_one("#input-description", TextArea).text,
            price=self.query_one("#input-price", Input).value,
            stock_quantity=self.query_one("#input-stock_quantity", Input).value,
            category=self.query_one("#input-category", Select).value,
            image_url=self.query_one("#input-image_url", Input).value,
        )
        if result.ok:
            self.dismiss(True)
            return

        for name in result.field_errors:
            self.query_one(f"#input-{name}").add_class("-invalid")
        self.notify(result.message, severity="error")

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
