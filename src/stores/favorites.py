from __future__ import annotations

import time
from typing import Awaitable, Callable, List, Optional

from db.database import LocalStorage
from db.models import FavoriteEntry, Product, parse_many
from utils.logger import get_logger

_logger = get_logger(__name__)

FAVORITES_KEY_PREFIX = "favorites_v1_"

UserIdResolver = Callable[[], Awaitable[Optional[str]]]


class FavoritesStore:
    """
    Per-user favorite products. Guests have none: reads are empty and
    writes do nothing while no user is signed in.
    """

    def __init__(self, storage: LocalStorage, user_id: UserIdResolver) -> None:
        self._storage = storage
        self._user_id = user_id

    async def _key(self) -> Optional[str]:
        uid = await self._user_id()
        return f"{FAVORITES_KEY_PREFIX}{uid}" if uid else None

    async def _load(self, key: Optional[str]) -> List[FavoriteEntry]:
        if key is None:
            return []
        return parse_many(await self._storage.read(key, []), FavoriteEntry.from_dict)

    async def _save(self, key: str, entries: List[FavoriteEntry]) -> None:
        await self._storage.write(key, [e.to_dict() for e in entries])

    async def get_items(self) -> List[FavoriteEntry]:
        return await self._load(await self._key())

    async def get_count(self) -> int:
        return len(await self.get_items())

    async def is_favorited(self, product_id: str) -> bool:
        return any(e.product.id == product_id for e in await self.get_items())

    async def add_item(self, product: Product) -> None:
        key = await self._key()
        if key is None:
            return
        async with self._storage.lock:
            entries = await self._load(key)
            if any(e.product.id == product.id for e in entries):
                return
            entries.append(FavoriteEntry(product, int(time.time() * 1000)))
            await self._save(key, entries)

    async def remove_item(self, product_id: str) -> None:
        key = await self._key()
        if key is None:
            return
        async with self._storage.lock:
            entries = await self._load(key)
            await self._save(key, [e for e in entries if e.product.id != product_id])

    async def toggle(self, product: Product) -> bool:
        """
        Flip the favorite state of a product.
        Returns True if it was added, False if it was removed (or no user).
        """
        key = await self._key()
        if key is None:
            return False
        async with self._storage.lock:
            entries = await self._load(key)
            if any(e.product.id == product.id for e in entries):
                await self._save(key, [e for e in entries if e.product.id != product.id])
                _logger.debug(f"Unfavorited {product.id}.")
                return False
            entries.append(FavoriteEntry(product, int(time.time() * 1000)))
            await self._save(key, entries)
        _logger.debug(f"Favorited {product.id}.")
        return True

    async def clear(self) -> None:
        key = await self._key()
        if key is None:
            return
        async with self._storage.lock:
            await self._save(key, [])
