from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from core.checkout import SHIPPING_LABELS, ShippingFields
from utils.pure import generate_markdown_table, money
from views.modal_dialog import confirm_with


class CheckoutModal(ModalScreen[Optional[str]]):
    """
    Order summary plus the shipping form.
    Dismisses with the route to go to after a placed order (or a required
    login), None when the user goes back.
    """

    def compose(self) -> ComposeResult:
        with Vertical(classes="modal-body"):
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Street Address")
            yield Input(placeholder="123 Yarn St", id="input-street")
            with Horizontal(id="hort-city-zip"):
                with Vertical():
                    yield Label("City")
                    yield Input(placeholder="New York", id="input-city")
                with Vertical():
                    yield Label("Zip Code")
                    yield Input(placeholder="10001", id="input-zip")
            yield Label("Phone")
            yield Input(placeholder="+1 234 567 890", id="input-phone")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        cart = self.app.state.cart
        headers = ["Product Name", "Unit Price", "Quantity", "Total Price"]
        rows = [
            [line.name, money(line.unit_price), line.quantity, money(line.subtotal)]
            for line in cart.lines
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            headers, rows, ["l", "c", "c", "c"]
        )
        md += f"\n\n**Total:** {money(cart.total())}"
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#btn-submit", Button).label = f"Confirm & Pay {money(cart.total())}"
        self.query_one("#input-street").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def _shipping(self) -> ShippingFields:
        return ShippingFields(
            street=self.query_one("#input-street", Input).value,
            city=self.query_one("#input-city", Input).value,
            zip=self.query_one("#input-zip", Input).value,
            phone=self.query_one("#input-phone", Input).value,
        )

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        for name in SHIPPING_LABELS:
            self.query_one(f"#input-{name}", Input).remove_class("-invalid")

        shipping = self._shipping()
        missing = shipping.missing()
        if missing:
            self._mark_invalid(missing)
            return

        confirm = confirm_with(self.app, tone="positive")
        if not await confirm("Place order? This cannot be undone."):
            return

        submit_btn = self.query_one("#btn-submit", Button)
        submit_btn.disabled = True
        try:
            result = await self.app.state.checkout.submit(shipping)
        finally:
            submit_btn.disabled = False

        if result.ok:
            self.dismiss(result.redirect or "/")
            return
        if result.field_errors:
            self._mark_invalid(result.field_errors)
            return
        if result.redirect:
            self.dismiss(result.redirect)
            return
        self.notify(f"Error: {result.message}", severity="error", timeout=8)

    def _mark_invalid(self, errors) -> None:
        first = None
        for name in errors:
            widget = self.query_one(f"#input-{name}", Input)
            widget.add_class("-invalid")
            first = first or widget
        if first:
            first.focus()
        self.notify(next(iter(errors.values())), severity="error")

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(None)
