from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.catalog import get_product
from db.models import Product
from utils.messages import FavoritesChangedMessage
from utils.pure import fmt_money, generate_markdown_table


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail with quantity picker, add to cart and favorite toggle.
    Records the view in recently viewed.
    Will return true if the cart changed, false if not
    """

    order_qty = reactive(1)

    def __init__(self, product_id: str) -> None:
        super().__init__()

        self._product_id = product_id
        self._prod: Product | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                yield Button("♡ Favorite", id="btn-fav")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        self._prod = get_product(self._product_id)
        if self._prod is None:
            self.notify("That product is no longer available.", severity="error")
            self.dismiss(False)
            return

        await self.app.state.recently_viewed.add_item(self._prod)

        p = self._prod
        table_rows = [
            ["Price", fmt_money(p.price)],
            ["Category", p.category],
            ["Rating", f"{p.rating:.1f} ({p.rating_count} reviews)"],
            [
                "Shipping",
                fmt_money(p.shipping_cost) if p.shipping_cost else "Free",
            ],
        ]
        md_table_str = generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )
        await self.query_one(MarkdownViewer).document.update(
            f"### {p.name}\n\n" + md_table_str
        )

        self.query_one("#input-order-qty").validators = [Number(minimum=1)]
        await self._refresh_fav_button()
        self.query_one("#input-order-qty").focus()

    async def _refresh_fav_button(self) -> None:
        is_fav = await self.app.state.favorites.is_favorited(self._product_id)
        btn = self.query_one("#btn-fav", Button)
        btn.label = "♥ Favorited" if is_fav else "♡ Favorite"
        btn.variant = "error" if is_fav else "default"

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and message.value
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int):
        self.query_one("#btn-sub-qty").disabled = qty <= 1
        input_order_qty = self.query_one("#input-order-qty", Input)
        if input_order_qty.value != str(qty):
            input_order_qty.value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        if self.order_qty > 1:
            self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-fav")
    @work(exclusive=True)
    async def handle_fav(self):
        if not await self.app.require_login():
            return
        was_added = await self.app.state.favorites.toggle(self._prod)
        self.notify(
            f"{self._prod.name} added to favorites."
            if was_added
            else f"{self._prod.name} removed from favorites."
        )
        self.app.post_message(FavoritesChangedMessage())
        await self._refresh_fav_button()

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        if not await self.app.require_login():
            return
        await self.app.state.cart.add_item(self._prod, self.order_qty)
        self.app.notify(f"{self.order_qty} x {self._prod.name} added to cart.")
        self.dismiss(True)
