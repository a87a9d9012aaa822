from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label

from db.models import FavoriteEntry
from utils.messages import CartChangedMessage, FavoritesChangedMessage
from utils.pure import fmt_money
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmModal


class FavoritesScreen(BaseScreen):
    """
    The signed-in user's favorites. Guests see a prompt instead.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entries: list[FavoriteEntry] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Label("", id="label-fav-count")
        yield DataTable(id="table-favorites")
        with Horizontal():
            yield Button("Add to Cart", id="btn-fav-addcart", variant="primary")
            yield Button("Remove", id="btn-fav-remove", variant="warning")
            yield Button("Clear All", id="btn-fav-clear", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Price", "Rating")

    def _selected(self) -> FavoriteEntry | None:
        table = self.query_one(DataTable)
        if not table.row_count:
            return None
        product_id = table.get_row_at(table.cursor_row)[0]
        return next((e for e in self._entries if e.product.id == product_id), None)

    @on(ScreenResume)
    @on(FavoritesChangedMessage)
    @work(exclusive=True)
    async def handle_refresh(self) -> None:
        label = self.query_one("#label-fav-count", Label)
        if self.app.state.user is None:
            label.update("Sign in to see your favorites.")
            self._entries = []
        else:
            self._entries = await self.app.state.favorites.get_items()
            label.update(f"{len(self._entries)} saved item(s)")

        table = self.query_one(DataTable)
        table.clear()
        for e in self._entries:
            table.add_row(
                e.product.id,
                e.product.name,
                fmt_money(e.product.price),
                f"{e.product.rating:.1f}",
            )

    @on(Button.Pressed, "#btn-fav-addcart")
    async def handle_add_to_cart(self) -> None:
        entry = self._selected()
        if entry is None:
            return
        await self.app.state.cart.add_item(entry.product, 1)
        self.notify(f"{entry.product.name} added to cart!")
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-fav-remove")
    async def handle_remove(self) -> None:
        entry = self._selected()
        if entry is None:
            return
        await self.app.state.favorites.remove_item(entry.product.id)
        self.post_message(FavoritesChangedMessage())

    @on(Button.Pressed, "#btn-fav-clear")
    @work()
    async def handle_clear(self) -> None:
        if not self._entries:
            return
        if await self.app.push_screen_wait(
            ConfirmModal("Remove all favorites?", "error")
        ):
            await self.app.state.favorites.clear()
            self.post_message(FavoritesChangedMessage())
