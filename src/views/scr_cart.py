from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.widgets import Button, Label, Rule

from core.cart import CartLine
from utils.messages import CartChangedMessage
from utils.pure import money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import confirm_with


class CartLineWidget(HorizontalGroup):
    def __init__(self, line: CartLine):
        super().__init__(classes="cart-line")
        self.line = line

    def compose(self):
        with Container(classes="div-item"):
            yield Label(self.line.name, classes="label-item-name")
            yield Label(
                f"Sold by {self.line.vendor_name or 'Unknown Vendor'}",
                classes="label-item-vendor",
            )
            yield Label(f"{money(self.line.unit_price)} each", classes="label-item-price")
        with Horizontal(classes="div-actions"):
            yield Button("-", classes="btn-dec", disabled=self.line.quantity <= 1)
            yield Label(str(self.line.quantity), classes="label-item-qty")
            yield Button("+", classes="btn-inc")
            yield Label(money(self.line.subtotal), classes="label-item-subtotal")
            yield Button("Remove", classes="btn-remove", variant="error")

    @on(Button.Pressed, ".btn-dec")
    async def handle_decrement(self):
        # the store ignores anything below 1
        await self.app.state.cart.set_quantity(
            self.line.product_id, self.line.quantity - 1
        )
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, ".btn-inc")
    async def handle_increment(self):
        await self.app.state.cart.set_quantity(
            self.line.product_id, self.line.quantity + 1
        )
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, ".btn-remove")
    @work()
    async def handle_remove_item(self):
        confirm = confirm_with(self.app)
        if await confirm("Do you really want to remove this item from cart?"):
            await self.app.state.cart.remove_item(self.line.product_id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")


class CartScreen(BaseScreen):
    """
    Cart lines with quantity controls, total and checkout.
    """

    ROUTE = "/cart"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Continue Shopping", id="btn-shop")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)  # must exclusive, else might race cond and gen duplicate
    async def handle_cart_change(self):
        cart = self.app.state.cart
        lines = cart.lines

        content = self.query_one("#vertscroll-content")
        await content.remove_children()
        if lines:
            content.remove_class("no-items")
            await content.mount_all([CartLineWidget(line) for line in lines])
        else:
            content.add_class("no-items")
            await content.mount(Label("Your Cart is Empty", id="label-empty"))

        self.query_one("#label-cart-total", Label).update(
            f"Shopping Cart ({len(lines)} items)    Total: {money(cart.total())}"
        )
        self.query_one("#btn-checkout").disabled = not lines
        self.refresh_sidebar()

    @on(Button.Pressed, "#btn-shop")
    def handle_shop(self) -> None:
        self.app.navigate("/")

    @on(Button.Pressed, "#btn-checkout")
    @work(exclusive=True, group="checkout")
    async def handle_checkout(self) -> None:
        if self.app.state.cart.is_empty():
            self.app.notify("Cart is empty.", severity="warning")
            return

        redirect = await self.app.push_screen_wait(CheckoutModal())
        if redirect:
            self.app.navigate(redirect)
        else:
            self.post_message(CartChangedMessage())
