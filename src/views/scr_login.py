from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, Select, TabbedContent, TabPane

from views.base_screen import BaseScreen


class LoginScreen(BaseScreen):
    """
    Login and sign-up tabs. Dismissed with True once an identity has been
    resolved, False if the user backs out.
    """

    BINDINGS = [
        Binding("escape", "back", "Back", show=True),
    ]

    ROUTE = "/login"

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email")
                    yield Input(placeholder="you@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Back", id="btn-back")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Name")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Email")
                    yield Input(placeholder="name@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd"
                    )
                    yield Label("I want to")
                    yield Select(
                        [
                            ("Customer (I want to buy)", "CUSTOMER"),
                            ("Vendor (I want to sell)", "VENDOR"),
                        ],
                        value="CUSTOMER",
                        allow_blank=False,
                        id="select-reg-role",
                    )
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if event.key == "enter" and self.focused == self.query_one("#input-reg-pwd"):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email_input = self.query_one("#input-login-email", Input)
        pwd_input = self.query_one("#input-login-pwd", Input)

        result = await self.app.state.session.sign_in(email_input.value, pwd_input.value)
        if result.ok:
            self.notify(result.message)
            self.dismiss(True)
            return

        self.notify(result.message, severity="error")
        pwd_input.value = ""
        pwd_input.focus()
        pwd_input.add_class("-invalid")

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        name = self.query_one("#input-reg-name", Input).value
        email = self.query_one("#input-reg-email", Input).value
        pwd = self.query_one("#input-reg-pwd", Input).value
        role = self.query_one("#select-reg-role", Select).value

        result = await self.app.state.session.register(name, email, pwd, str(role))
        if not result.ok:
            self.notify(result.message, severity="error")
            return

        self.query_one(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = email.strip()
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = pwd.strip()
        input_login_pwd.focus()

        self.notify(result.message)

    @on(Button.Pressed, "#btn-back")
    def action_back(self) -> None:
        self.dismiss(False)
