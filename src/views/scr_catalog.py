from textual import on, work
from textual.app import ComposeResult
from textual.events import ScreenResume
from textual.widgets import DataTable, Input, Markdown

from db.catalog import search_products
from utils.messages import CartChangedMessage
from utils.pure import fmt_money
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class CatalogScreen(BaseScreen):
    """
    Product search and browsing, plus the recently viewed strip.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Search products...")
        yield DataTable(id="table-products")
        yield Markdown("", id="md-recently-viewed")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Category", "Price", "Rating")
        self.update_search_result("")
        self.query_one("#input-search").focus()

    def on_input_changed(self, message: Input.Changed) -> None:
        if message.input.id == "input-search":
            self.update_search_result(message.value)

    @on(DataTable.RowSelected, "#table-products")
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        product_id = event.data_table.get_row(event.row_key)[0]
        self.open_product(product_id)

    @work
    async def open_product(self, product_id: str) -> None:
        if await self.app.push_screen_wait(ProdDetailModal(product_id)):
            self.post_message(CartChangedMessage())

    def update_search_result(self, query: str) -> None:
        table = self.query_one(DataTable)
        table.clear()
        table.add_rows(
            [
                (p.id, p.name, p.category, fmt_money(p.price), f"{p.rating:.1f}")
                for p in search_products(query)
            ]
        )

    @on(ScreenResume)
    @work(exclusive=True, group="recent")
    async def refresh_recently_viewed(self) -> None:
        entries = await self.app.state.recently_viewed.get_items(limit=6)
        md = self.query_one("#md-recently-viewed", Markdown)
        if not entries:
            await md.update("")
            return
        names = " · ".join(
            f"**{e.product.name}** {fmt_money(e.product.price)}" for e in entries
        )
        await md.update(f"#### Recently Viewed\n\n{names}")
