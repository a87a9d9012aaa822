from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Rule

from utils.messages import CartChangedMessage, NewOrderMessage
from utils.pure import checkout_summary, fmt_money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import ConfirmModal


class CartScreen(BaseScreen):
    """
    Cart lines with quantity editing and removal, plus checkout.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Cart Subtotal: $0.00", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-qty"):
            yield Label("Quantity")
            yield Input("1", id="input-cart-qty", type="integer")
            yield Button("Update", id="btn-update-qty")
            yield Button("Remove", id="btn-remove-item", variant="warning")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Product", "Qty", "Price", "Shipping", "Arrives")

    def _selected_id(self) -> str | None:
        table = self.query_one(DataTable)
        if not table.row_count:
            return None
        return table.get_row_at(table.cursor_row)[0]

    @on(CartChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)  # must exclusive, else table rows race
    async def handle_cart_change(self):
        """
        Re-read the cart and rebuild the table
        """
        lines = await self.app.state.cart.get_items()
        table = self.query_one(DataTable)
        table.clear()
        for line in lines:
            table.add_row(
                line.id,
                line.name,
                line.qty,
                fmt_money(line.line_total),
                fmt_money(line.shipping_cost) if line.shipping_cost else "Free",
                line.delivery_date,
            )

        summary = checkout_summary(lines)
        self.query_one("#label-cart-total", Label).update(
            f"Cart Subtotal: {fmt_money(summary.subtotal)}"
        )

    @on(DataTable.RowHighlighted, "#table-cart")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        qty = event.data_table.get_row(event.row_key)[2]
        self.query_one("#input-cart-qty", Input).value = str(qty)

    @on(Button.Pressed, "#btn-update-qty")
    async def handle_update_qty(self) -> None:
        product_id = self._selected_id()
        if product_id is None:
            return
        qty = self.query_one("#input-cart-qty", Input).value
        await self.app.state.cart.update_qty(product_id, qty)
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-remove-item")
    @work()
    async def handle_remove_item(self):
        product_id = self._selected_id()
        if product_id is None:
            return
        if await self.app.push_screen_wait(
            ConfirmModal("Do you really want to remove this item from cart?")
        ):
            await self.app.state.cart.remove_item(product_id)
            self.post_message(CartChangedMessage())
            self.notify("Item removed from cart.", severity="information")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not await self.app.state.cart.get_items():
            self.app.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(
            ConfirmModal("Do you really want to remove all items from cart?", "error")
        ):
            await self.app.state.cart.clear_cart()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        """
        Open up checkout screen
        """
        if not await self.app.state.cart.get_items():
            self.app.notify("Cart is empty.", severity="warning")
            return
        if not await self.app.require_login():
            return

        if await self.app.push_screen_wait(CheckoutModal()):
            self.app.post_message(NewOrderMessage())
        self.post_message(CartChangedMessage())
