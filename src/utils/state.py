from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from db.database import LocalStorage
from db.models import Session
from stores.auth import AccountStore
from stores.cart import CartStore
from stores.favorites import FavoritesStore
from stores.recently_viewed import RecentlyViewedStore
from stores.theme import ThemeStore


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Owns the storage and builds every store exactly once. Favorites and
    recently viewed get the account store's user id resolver instead of
    reaching into the session themselves.

    Fields:
      - storage: the key-value store every store writes through
      - user: cached session of the logged-in user, None for guests
    """

    db_path: Optional[str] = None
    user: Optional[Session] = None

    storage: LocalStorage = field(init=False)
    accounts: AccountStore = field(init=False)
    cart: CartStore = field(init=False)
    favorites: FavoritesStore = field(init=False)
    recently_viewed: RecentlyViewedStore = field(init=False)
    theme: ThemeStore = field(init=False)

    def __post_init__(self) -> None:
        self.storage = LocalStorage(self.db_path)
        self.accounts = AccountStore(self.storage)
        self.cart = CartStore(self.storage)
        self.favorites = FavoritesStore(self.storage, self.accounts.current_user_id)
        self.recently_viewed = RecentlyViewedStore(
            self.storage, self.accounts.current_user_id
        )
        self.theme = ThemeStore(self.storage)

    async def refresh_user(self) -> Optional[Session]:
        """Re-read the session; call after login, registration or logout."""
        self.user = await self.accounts.get_current_user()
        return self.user

    async def end_session(self) -> None:
        """Log out the current user, if any."""
        if self.user is None:
            return
        await self.accounts.logout()
        self.user = None
