from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Input, Label, Markdown

from utils.pure import STRENGTH_LABELS, generate_markdown_table, password_strength
from views.base_screen import BaseScreen


class ProfileScreen(BaseScreen):
    """
    Account overview and in-session password change.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Markdown("", id="md-profile")
        with Vertical(id="div-change-pwd"):
            yield Label("Current password")
            yield Input(password=True, id="input-current-pwd")
            yield Label("New password")
            yield Input(password=True, id="input-new-pwd")
            yield Label("", id="label-pwd-strength")
            yield Label("Confirm new password")
            yield Input(password=True, id="input-confirm-pwd")
            yield Button("Save Password", id="btn-save-pwd", variant="primary")

    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_refresh(self) -> None:
        state = self.app.state
        if state.user is None:
            await self.query_one("#md-profile", Markdown).update(
                "### Sign in to manage your account."
            )
            self.query_one("#div-change-pwd").display = False
            return

        self.query_one("#div-change-pwd").display = True
        rows = [
            ["Username", state.user.username],
            ["Email", state.user.email],
            ["Orders", len(await state.cart.get_orders())],
            ["Favorites", await state.favorites.get_count()],
            ["Items in cart", await state.cart.get_total_count()],
        ]
        await self.query_one("#md-profile", Markdown).update(
            "### My Profile\n\n" + generate_markdown_table(None, rows, ["l", "l"])
        )

    @on(Input.Changed, "#input-new-pwd")
    def handle_new_pwd_changed(self, event: Input.Changed) -> None:
        strength = STRENGTH_LABELS[password_strength(event.value)]
        self.query_one("#label-pwd-strength", Label).update(
            f"Strength: {strength}" if strength else ""
        )

    @on(Button.Pressed, "#btn-save-pwd")
    async def handle_save_pwd(self) -> None:
        inputs = [
            self.query_one(f"#input-{name}-pwd", Input)
            for name in ("current", "new", "confirm")
        ]
        result = await self.app.state.accounts.change_password(
            *(i.value for i in inputs)
        )
        if not result:
            self.notify(result.error.message, severity="error")
            return

        for i in inputs:
            i.value = ""
        self.notify("Password updated successfully!")
