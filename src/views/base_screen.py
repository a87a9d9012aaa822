from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import (
    CartChangedMessage,
    ModeSwitchedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.pure import generate_markdown_table
from views.modal_dialog import ConfirmModal, QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Account", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Sign in", id="btn-auth", variant="primary")
        yield Label("Menu", id="label-info-2")
        yield ListView(
            *[
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.MENU.items()
            ],
            id="list-menu",
        )

    async def on_mount(self):
        self.init_mode = self.app.current_mode
        self.highlight_item(self.init_mode)
        await self.refresh_info()

    async def refresh_info(self) -> None:
        state = self.app.state
        user = state.user
        cart_count = await state.cart.get_total_count()
        if user:
            rows = [["User", user.username], ["Email", user.email], ["Cart", cart_count]]
        else:
            rows = [["User", "Guest"], ["Cart", cart_count]]
        await self.query_one(Markdown).update(
            generate_markdown_table(None, rows, ["l", "l"])
        )

        btn = self.query_one("#btn-auth", Button)
        btn.label = "Sign out" if user else "Sign in"
        btn.variant = "error" if user else "primary"

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-auth")
    @work
    async def handle_auth(self):
        if self.app.state.user is None:
            if await self.app.require_login():
                self.app.post_message(UserLoginMessage())
                await self.refresh_info()
            return

        if await self.app.push_screen_wait(
            ConfirmModal("Are you sure you want to sign out?")
        ):
            self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        for item in self.query_one("#list-menu").children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

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
        self.app.title = "Storefront"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MENU[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(ScreenResume)
    @on(CartChangedMessage)
    async def refresh_sidebar(self):
        if self._show_sidebar:
            await self.query_one(Sidebar).refresh_info()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
