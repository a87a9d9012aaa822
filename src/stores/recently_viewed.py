from __future__ import annotations

import time
from typing import List, Optional

from db.database import LocalStorage
from db.models import Product, RecentlyViewedEntry, parse_many
from stores.favorites import UserIdResolver

RECENTLY_VIEWED_KEY_PREFIX = "recently_viewed_v1_"
GUEST_KEY = f"{RECENTLY_VIEWED_KEY_PREFIX}guest"

MAX_RECENTLY_VIEWED = 8


class RecentlyViewedStore:
    """Most-recent-first product views, per user or shared among guests."""

    def __init__(self, storage: LocalStorage, user_id: UserIdResolver) -> None:
        self._storage = storage
        self._user_id = user_id

    async def _key(self) -> str:
        uid = await self._user_id()
        return f"{RECENTLY_VIEWED_KEY_PREFIX}{uid}" if uid else GUEST_KEY

    async def _load(self, key: str) -> List[RecentlyViewedEntry]:
        return parse_many(
            await self._storage.read(key, []), RecentlyViewedEntry.from_dict
        )

    async def get_items(self, limit: Optional[int] = None) -> List[RecentlyViewedEntry]:
        entries = await self._load(await self._key())
        return entries[:limit] if limit is not None else entries

    async def add_item(self, product: Product) -> None:
        """Record a view, moving the product to the front if already listed."""
        key = await self._key()
        async with self._storage.lock:
            entries = [e for e in await self._load(key) if e.product.id != product.id]
            entries.insert(0, RecentlyViewedEntry(product, int(time.time() * 1000)))
            await self._storage.write(
                key, [e.to_dict() for e in entries[:MAX_RECENTLY_VIEWED]]
            )

    async def clear(self) -> None:
        key = await self._key()
        async with self._storage.lock:
            await self._storage.write(key, [])
