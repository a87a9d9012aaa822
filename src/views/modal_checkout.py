from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.models import CartLine
from utils.pure import checkout_summary, fmt_money, generate_markdown_table, is_valid_promo
from views.modal_dialog import ConfirmModal


class CheckoutModal(ModalScreen[bool]):
    """
    Order review with promo code, then order placement.
    Return True if an order was placed, False otherwise.
    """

    def __init__(self):
        super().__init__()
        self._lines: list[CartLine] = []
        self._promo_applied = False

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Promo code")
            with Horizontal():
                yield Input(placeholder="Promo code", id="input-promo")
                yield Button("Apply", id="btn-promo")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        self._lines = await self.app.state.cart.get_items()
        await self._render_summary()
        self.query_one("#input-promo").focus()

    async def _render_summary(self) -> None:
        summary = checkout_summary(self._lines, self._promo_applied)
        headers = ["Product", "Unit Price", "Quantity", "Total", "Arrives"]
        rows = [
            [
                line.name,
                fmt_money(line.price),
                line.qty,
                fmt_money(line.line_total),
                line.delivery_date,
            ]
            for line in self._lines
        ]
        md = "### Order Summary\n\n"
        md += generate_markdown_table(headers, rows, ["l", "r", "c", "r", "l"])
        md += f"\n\n**Items:** {fmt_money(summary.subtotal)}  \n"
        md += "**Shipping:** " + (
            fmt_money(summary.shipping) if summary.shipping else "Free"
        )
        md += "  \n"
        if self._promo_applied:
            md += f"**Promo:** -{fmt_money(summary.discount)}  \n"
        md += f"**Tax (10%):** {fmt_money(summary.tax)}  \n"
        md += f"**Order total:** {fmt_money(summary.total)}"
        await self.query_one(MarkdownViewer).document.update(md)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-promo")
    async def handle_promo(self) -> None:
        promo = self.query_one("#input-promo", Input)
        if not is_valid_promo(promo.value):
            promo.add_class("-invalid")
            self.notify("Invalid promo code.", severity="error")
            return

        self._promo_applied = True
        promo.disabled = True
        self.query_one("#btn-promo", Button).label = "Applied!"
        self.query_one("#btn-promo", Button).disabled = True
        await self._render_summary()

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        if not await self.app.push_screen_wait(
            ConfirmModal("Place order? This cannot be undone.", "positive")
        ):
            return

        # shipping picked per line at checkout
        overrides = {line.id: line.shipping_cost for line in self._lines}
        order = await self.app.state.cart.place_order(overrides)
        if order is None:
            self.notify("Your cart is empty.", severity="warning")
            self.dismiss(False)
            return

        self.notify(f"Order placed. Your order number is {order.id}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
