from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from utils.messages import UserLoginMessage
from utils.pure import STRENGTH_LABELS, password_strength
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Sign in, sign up, or reset a forgotten password.
    Dismisses once a session exists, or when the visitor continues as guest.
    """

    def __init__(self, allow_guest: bool = True):
        super().__init__()
        self.configure(header_sub_title="Sign in", show_sidebar=False)
        self._allow_guest = allow_guest
        self._reset_email = ""

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Sign in", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email or username")
                    yield Input(placeholder="you@example.com", id="input-login-id")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        if self._allow_guest:
                            yield Button("Browse as guest", id="btn-guest")
                        else:
                            yield Button("Back", id="btn-guest")
                        yield Button("Sign in", id="btn-login", variant="primary")

            with TabPane("Create account", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Username")
                    yield Input(placeholder="amina", id="input-reg-username")
                    yield Label("Email")
                    yield Input(placeholder="you@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd"
                    )
                    yield Label("", id="label-reg-strength")
                    yield Label("Confirm password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-confirm"
                    )
                    yield Button("Create account", id="btn-reg", variant="primary")

            with TabPane("Forgot password", id="tab-reset"):
                with Vertical(id="div-reset"):
                    yield Label("Email")
                    yield Input(placeholder="you@example.com", id="input-reset-email")
                    yield Button("Find account", id="btn-reset-lookup")
                    yield Label("New password")
                    yield Input(
                        password=True, id="input-reset-pwd", disabled=True
                    )
                    yield Label("Confirm new password")
                    yield Input(
                        password=True, id="input-reset-confirm", disabled=True
                    )
                    yield Button(
                        "Save new password",
                        id="btn-reset-save",
                        variant="primary",
                        disabled=True,
                    )

    def on_mount(self):
        self.query_one("#input-login-id").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if event.key == "enter" and self.focused == self.query_one("#input-reg-confirm"):
            self.handle_registration_submit()

    async def _signed_in(self, greeting: str) -> None:
        await self.app.state.refresh_user()
        self.notify(greeting)
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        identifier = self.query_one("#input-login-id", Input).value
        pwd = self.query_one("#input-login-pwd", Input).value

        result = await self.app.state.accounts.login(identifier, pwd)
        if result:
            await self._signed_in(f"Welcome back, {result.value.username}!")
            return

        self.notify(result.error.message, severity="error")
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = ""
        input_login_pwd.focus()
        input_login_pwd.add_class("-invalid")

    @on(Input.Changed, "#input-reg-pwd")
    def handle_reg_pwd_changed(self, event: Input.Changed) -> None:
        strength = STRENGTH_LABELS[password_strength(event.value)]
        self.query_one("#label-reg-strength", Label).update(
            f"Strength: {strength}" if strength else ""
        )

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        result = await self.app.state.accounts.register(
            self.query_one("#input-reg-username", Input).value,
            self.query_one("#input-reg-email", Input).value,
            self.query_one("#input-reg-pwd", Input).value,
            self.query_one("#input-reg-confirm", Input).value,
        )
        if not result:
            self.notify(result.error.message, severity="error")
            return
        await self._signed_in(f"Account created. Welcome, {result.value.username}!")

    @on(Button.Pressed, "#btn-reset-lookup")
    async def handle_reset_lookup(self) -> None:
        email = self.query_one("#input-reset-email", Input).value
        result = await self.app.state.accounts.find_account_by_email(email)
        if not result:
            self.notify(result.error.message, severity="error")
            return

        self._reset_email = result.value.email
        for widget_id in ("#input-reset-pwd", "#input-reset-confirm", "#btn-reset-save"):
            self.query_one(widget_id).disabled = False
        self.query_one("#input-reset-pwd").focus()

    @on(Button.Pressed, "#btn-reset-save")
    async def handle_reset_save(self) -> None:
        result = await self.app.state.accounts.reset_password(
            self._reset_email,
            self.query_one("#input-reset-pwd", Input).value,
            self.query_one("#input-reset-confirm", Input).value,
        )
        if not result:
            self.notify(result.error.message, severity="error")
            return

        self.notify("Password updated! You can sign in now.")
        for widget_id in ("#input-reset-pwd", "#input-reset-confirm"):
            widget = self.query_one(widget_id, Input)
            widget.value = ""
            widget.disabled = True
        self.query_one("#btn-reset-save").disabled = True
        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-id", Input).value = self._reset_email
        self.query_one("#input-login-pwd").focus()

    @on(Button.Pressed, "#btn-guest")
    def handle_guest(self) -> None:
        self.dismiss()

    def action_quit(self) -> None:
        self.app.push_screen(QuitDialogModal())
