from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, MarkdownViewer

from db.models import Order
from utils.messages import CartChangedMessage, NewOrderMessage
from utils.pure import fmt_money
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmModal


class OrdersScreen(BaseScreen):
    """
    Order history, newest first.

    Layout:
    - Markdown detail view at the top, showing the highlighted order.
    - Orders table below, with buy-again for a line and clear-history.
    """

    def __init__(self) -> None:
        super().__init__()
        self._orders: list[Order] = []
        self._selected: Order | None = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
            yield DataTable(id="table-order-items")
        with Horizontal(id="hort-table-control"):
            yield Button("Buy Again", id="btn-buy-again", variant="primary")
            yield Button("Clear History", id="btn-clear-orders", variant="error")

    def on_mount(self) -> None:
        orders = self.query_one("#table-orders", DataTable)
        orders.cursor_type = "row"
        orders.zebra_stripes = True
        orders.add_columns("Order ID", "Placed", "Items", "Total")

        items = self.query_one("#table-order-items", DataTable)
        items.cursor_type = "row"
        items.add_columns("ID", "Product", "Qty", "Price")

    @on(ScreenResume)
    @on(NewOrderMessage)
    @work(exclusive=True, group="orders")
    async def handle_refresh(self):
        self._orders = await self.app.state.cart.get_orders()
        table = self.query_one("#table-orders", DataTable)
        table.clear()
        for o in self._orders:
            table.add_row(
                o.id, o.date_placed, sum(i.qty for i in o.items), fmt_money(o.total)
            )
        self._render_detail(self._orders[0] if self._orders else None)

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        order_id = event.data_table.get_row(event.row_key)[0]
        self._render_detail(next((o for o in self._orders if o.id == order_id), None))

    def _render_detail(self, order: Order | None) -> None:
        self._selected = order
        items = self.query_one("#table-order-items", DataTable)
        items.clear()
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if not order:
            viewer.document.update("### No orders yet.")
            return

        for line in order.items:
            items.add_row(line.id, line.name, line.qty, fmt_money(line.price))
        viewer.document.update(
            f"### Order {order.id}\n"
            f"Placed: {order.date_placed}  \n"
            f"Total (incl. 10% tax): {fmt_money(order.total)}"
        )

    @on(Button.Pressed, "#btn-buy-again")
    async def handle_buy_again(self) -> None:
        items = self.query_one("#table-order-items", DataTable)
        if self._selected is None or not items.row_count:
            return
        product_id = items.get_row_at(items.cursor_row)[0]
        if await self.app.state.cart.buy_again(self._selected.id, product_id):
            self.notify("Added to cart!")
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-clear-orders")
    @work()
    async def handle_clear(self) -> None:
        if not self._orders:
            return
        if await self.app.push_screen_wait(
            ConfirmModal("Clear your whole order history?", "error")
        ):
            await self.app.state.cart.clear_orders()
            self.post_message(NewOrderMessage())
