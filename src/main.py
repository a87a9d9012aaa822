from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger, route_to_rich, route_to_textual
from utils.messages import (
    ModeSwitchedMessage,
    QuitRequestedMessage,
    UserLoginMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_favorites import FavoritesScreen
from views.scr_login import LoginScreen
from views.scr_orders import OrdersScreen
from views.scr_profile import ProfileScreen

_logger = get_logger(__name__)

DARK_THEME = "textual-dark"
LIGHT_THEME = "solarized-light"


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "toggle_theme", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "orders": OrdersScreen,
        "favorites": FavoritesScreen,
        "profile": ProfileScreen,
    }

    MENU = {
        "catalog": "Shop",
        "cart": "Cart",
        "orders": "Your Orders",
        "favorites": "Favorites",
        "profile": "Profile",
    }

    CSS_PATH = "styles/storefront.tcss"

    state: GlobalState

    def __init__(self, state: GlobalState | None = None):
        super().__init__()
        self.state = state or GlobalState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        route_to_textual()
        await self.state.theme.load()
        self.state.theme.subscribe(self._apply_theme)
        self._apply_theme(self.state.theme.is_dark)
        await self.state.refresh_user()
        self.main_flow()

    def on_unmount(self) -> None:
        self.state.theme.unsubscribe(self._apply_theme)
        route_to_rich()

    def _apply_theme(self, is_dark: bool) -> None:
        self.theme = DARK_THEME if is_dark else LIGHT_THEME

    async def action_toggle_theme(self):
        await self.state.theme.toggle()
        self.notify(f"Switched to {self.state.theme.theme} mode.")

    async def require_login(self) -> bool:
        """
        Push the login screen for guests; True once someone is signed in.
        Must be awaited from a worker.
        """
        if self.state.user is None:
            self.notify("Please sign in first.", severity="warning")
            await self.push_screen_wait(LoginScreen(allow_guest=False))
        return self.state.user is not None

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.end_session()
        self.notify("Signed out.")
        self.main_flow()

    @on(UserLoginMessage)
    async def handle_user_login(self):
        await self.state.refresh_user()

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage):
        _logger.debug(f"Mode switched: {message.old_mode} -> {message.new_mode}")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self):
        if self.state.user is None:
            await self.push_screen_wait(LoginScreen())
        self.app.post_message(ModeSwitchedMessage(self.app.current_mode, "catalog"))
        await self.switch_mode("catalog")


def run() -> None:
    StorefrontApp().run()


if __name__ == "__main__":
    run()
