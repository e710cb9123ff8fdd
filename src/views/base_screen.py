from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal

GUEST_MENU = {"/": "Shop"}
MENUS = {
    "CUSTOMER": {"/": "Shop", "/cart": "Cart", "/orders": "My Orders"},
    "VENDOR": {"/vendor/dashboard": "Vendor Dashboard"},
    "ADMIN": {"/admin": "Vendor Applications", "/admin/analytics": "Vendor Analytics"},
}


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log in", id="btn-login", variant="primary")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self):
        self.render_identity()

    @work(exclusive=True, group="sidebar")
    async def render_identity(self) -> None:
        state = self.app.state
        identity = state.session.identity

        if identity:
            table_rows = [
                ["Name", identity.name],
                ["Email", identity.email],
                ["Role", identity.role.title()],
            ]
            if identity.role == "CUSTOMER":
                table_rows.append(["Cart", f"{state.cart.item_count()} item(s)"])
        else:
            table_rows = [["Status", "Guest"]]
        md_table_str = generate_markdown_table(["", ""], table_rows, ["l", "l"])
        await self.query_one(Markdown).update(md_table_str)

        self.query_one("#btn-login").display = identity is None
        self.query_one("#btn-logout").display = identity is not None

        menu = MENUS.get(identity.role, GUEST_MENU) if identity else GUEST_MENU
        list_menu = self.query_one("#list-menu", ListView)
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(title), name=route) for route, title in menu.items()]
        )
        routes = list(menu)
        if self.app.current_route in routes:
            list_menu.index = routes.index(self.app.current_route)

    def on_list_view_selected(self, event: ListView.Selected):
        route = event.item.name
        if route and route != self.app.current_route:
            self.app.navigate(route)

    @on(Button.Pressed, "#btn-login")
    def handle_login(self):
        self.app.navigate("/login")

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    # route this screen is shown for
    ROUTE = "/"

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "YarnCraft Market"
        self.sub_title = header_sub_title or self.app.ROUTE_TITLES.get(self.ROUTE, "")
        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    def action_noop(self) -> None:
        # target of footer-hint bindings
        pass

    @on(ScreenResume)
    def refresh_sidebar(self) -> None:
        for sidebar in self.query(Sidebar):
            sidebar.render_identity()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
