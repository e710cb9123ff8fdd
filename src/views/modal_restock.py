from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label

from api.models import InventoryItem


class RestockModal(ModalScreen[bool]):
    """
    Ask for a restock amount; dismissed with True once the server took it.
    """

    def __init__(self, item: InventoryItem):
        super().__init__()
        self.item = item

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-body"):
            yield Label(f"Restock: {self.item.product_name}", classes="label-title")
            yield Label(f"Current stock: {self.item.stock_quantity}")
            yield Input(
                placeholder="Quantity to add",
                id="input-quantity",
                type="integer",
                validators=[Number(minimum=1)],
            )
            yield Label("", id="label-error", classes="label-error")
            with Horizontal():
                yield Button("Cancel", id="btn-quit")
                yield Button("Confirm Restock", id="btn-submit", variant="success")

    def on_mount(self):
        self.query_one("#input-quantity").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Input.Submitted)
    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        quantity = self.query_one("#input-quantity", Input)
        result = await self.app.state.inventory.restock(
            self.item.product_id, quantity.value
        )
        if result.ok:
            self.dismiss(True)
            return
        quantity.add_class("-invalid")
        quantity.focus()
        self.query_one("#label-error", Label).update(result.message)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
