from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from core import gate
from utils.logger import get_logger
from utils.messages import (
    IdentityChangedMessage,
    QuitRequestedMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.base_screen import BaseScreen
from views.scr_admin_analytics import AdminAnalyticsScreen
from views.scr_admin_review import AdminReviewScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen
from views.scr_orders import OrdersScreen
from views.scr_vendor_dashboard import VendorDashboardScreen

_logger = get_logger(__name__)

# a gate redirect can itself be gated (login -> role home)
_MAX_REDIRECTS = 4


class MarketApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "orders": OrdersScreen,
        "vendor_dashboard": VendorDashboardScreen,
        "admin_review": AdminReviewScreen,
        "admin_analytics": AdminAnalyticsScreen,
    }

    ROUTE_MODES = {
        "/": "catalog",
        "/cart": "cart",
        "/checkout": "cart",
        "/orders": "orders",
        "/vendor/dashboard": "vendor_dashboard",
        "/admin": "admin_review",
        "/admin/analytics": "admin_analytics",
    }

    ROUTE_TITLES = {
        "/": "Shop",
        "/cart": "Cart",
        "/orders": "My Orders",
        "/vendor/dashboard": "Vendor Dashboard",
        "/admin": "Vendor Applications",
        "/admin/analytics": "Vendor Analytics",
    }

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/catalog.tcss",
        "styles/cart.tcss",
        "styles/orders.tcss",
        "styles/vendor.tcss",
        "styles/admin.tcss",
    ]

    state: GlobalState
    current_route: Optional[str] = None

    def __init__(self):
        super().__init__()
        self.state = GlobalState.create(notify=self.notify)
        self.state.session.subscribe(
            lambda identity: self.post_message(
                IdentityChangedMessage(identity.role if identity else None)
            )
        )

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def main_flow(self):
        await self.state.start()
        self.navigate(gate.home_for(self.state.session.identity))

    @work(exclusive=True, group="navigate")
    async def navigate(self, route: str) -> None:
        """
        Move to a route, following gate redirects. "/login" is a screen pushed
        on top of the current mode rather than a mode of its own.
        """
        for _ in range(_MAX_REDIRECTS):
            if route == gate.LOGIN_ROUTE:
                logged_in = await self.push_screen_wait(LoginScreen())
                if logged_in:
                    route = gate.home_for(self.state.session.identity)
                elif self.current_route:
                    return
                else:
                    route = gate.HOME_ROUTE
                continue

            decision = gate.evaluate(self.state.session, route)
            if decision.pending:
                await self.state.session.resolve_identity()
                continue
            if not decision.allowed:
                _logger.info(f"Route {route} denied, redirecting to {decision.redirect}")
                if decision.redirect == gate.LOGIN_ROUTE:
                    self.notify("Please login first.", severity="warning")
                route = decision.redirect
                continue

            self.current_route = route
            await self.switch_mode(self.ROUTE_MODES.get(route, "catalog"))
            return

        _logger.warning(f"Too many redirects while navigating to {route}")

    @on(IdentityChangedMessage)
    def handle_identity_changed(self, message: IdentityChangedMessage):
        # the login screen hands control back through its own dismissal
        if isinstance(self.screen, LoginScreen) or self.current_route is None:
            return
        if isinstance(self.screen, BaseScreen):
            self.screen.refresh_sidebar()
        if not gate.can_access(self.state.session.identity, self.current_route).allowed:
            self.navigate(gate.home_for(self.state.session.identity))

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.session.logout()
        self.notify("Logout successful.")
        self.navigate(gate.HOME_ROUTE)

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        await self.state.close()
        self.exit()


def run() -> None:
    MarketApp().run()


if __name__ == "__main__":
    run()
