import os
import tempfile
import unittest

from db.database import LocalStorage
from db.models import Product
from stores.favorites import FAVORITES_KEY_PREFIX, FavoritesStore
from stores.recently_viewed import (
    GUEST_KEY,
    MAX_RECENTLY_VIEWED,
    RecentlyViewedStore,
)
from utils.state import GlobalState


class FakeSession:
    """Stands in for the account store's user id resolver."""

    def __init__(self, uid=None):
        self.uid = uid

    async def __call__(self):
        return self.uid


def make_product(pid):
    return Product(id=pid, name=f"Product {pid}", price=5.0, rating=4.5)


class FavoritesStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(os.path.join(self.temp_dir.name, "test.sqlite"))
        self.session = FakeSession("user-1")
        self.favorites = FavoritesStore(self.storage, self.session)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_toggle_reports_branch(self):
        p = make_product("p1")
        self.assertTrue(await self.favorites.toggle(p))
        self.assertTrue(await self.favorites.is_favorited("p1"))
        self.assertFalse(await self.favorites.toggle(p))
        self.assertFalse(await self.favorites.is_favorited("p1"))

    async def test_add_remove_clear(self):
        await self.favorites.add_item(make_product("p1"))
        await self.favorites.add_item(make_product("p1"))
        await self.favorites.add_item(make_product("p2"))
        self.assertEqual(await self.favorites.get_count(), 2)

        entries = await self.favorites.get_items()
        self.assertEqual([e.product.id for e in entries], ["p1", "p2"])
        self.assertGreater(entries[0].favorited_at, 0)
        self.assertEqual(entries[0].product.rating, 4.5)

        await self.favorites.remove_item("p1")
        self.assertEqual([e.product.id for e in await self.favorites.get_items()], ["p2"])

        await self.favorites.clear()
        self.assertEqual(await self.favorites.get_items(), [])

    async def test_guest_has_no_favorites(self):
        await self.favorites.add_item(make_product("p1"))
        self.session.uid = None

        self.assertEqual(await self.favorites.get_items(), [])
        self.assertFalse(await self.favorites.toggle(make_product("p2")))
        await self.favorites.add_item(make_product("p3"))
        await self.favorites.clear()
        self.assertFalse(await self.favorites.is_favorited("p3"))

        # the signed-in user's list was untouched
        self.session.uid = "user-1"
        self.assertEqual([e.product.id for e in await self.favorites.get_items()], ["p1"])

    async def test_favorites_are_per_user(self):
        await self.favorites.add_item(make_product("p1"))
        self.session.uid = "user-2"
        self.assertEqual(await self.favorites.get_items(), [])
        await self.favorites.add_item(make_product("p2"))

        stored = await self.storage.read(f"{FAVORITES_KEY_PREFIX}user-1", [])
        self.assertEqual([e["id"] for e in stored], ["p1"])
        self.assertIn("favoritedAt", stored[0])


class RecentlyViewedStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(os.path.join(self.temp_dir.name, "test.sqlite"))
        self.session = FakeSession("user-1")
        self.recent = RecentlyViewedStore(self.storage, self.session)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_capped_and_most_recent_first(self):
        for _ in range(9):
            await self.recent.add_item(make_product("same"))
        for i in range(7):
            await self.recent.add_item(make_product(f"p{i}"))

        entries = await self.recent.get_items()
        self.assertEqual(len(entries), MAX_RECENTLY_VIEWED)
        self.assertEqual(
            [e.product.id for e in entries],
            ["p6", "p5", "p4", "p3", "p2", "p1", "p0", "same"],
        )

        await self.recent.add_item(make_product("p9"))
        ids = [e.product.id for e in await self.recent.get_items()]
        self.assertEqual(ids[0], "p9")
        self.assertNotIn("same", ids)

    async def test_revisit_moves_to_front(self):
        for pid in ("a", "b", "c"):
            await self.recent.add_item(make_product(pid))
        await self.recent.add_item(make_product("a"))
        self.assertEqual([e.product.id for e in await self.recent.get_items()], ["a", "c", "b"])
        self.assertEqual(len(await self.recent.get_items(limit=2)), 2)

    async def test_guests_share_a_list(self):
        await self.recent.add_item(make_product("mine"))
        self.session.uid = None
        await self.recent.add_item(make_product("guest"))

        self.assertEqual([e.product.id for e in await self.recent.get_items()], ["guest"])
        self.assertEqual(len(await self.storage.read(GUEST_KEY, [])), 1)

        await self.recent.clear()
        self.assertEqual(await self.recent.get_items(), [])

        self.session.uid = "user-1"
        self.assertEqual([e.product.id for e in await self.recent.get_items()], ["mine"])


class SessionScopedStoresTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.state = GlobalState(os.path.join(self.temp_dir.name, "test.sqlite"))

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_favorites_follow_the_session(self):
        await self.state.accounts.register("amina", "a@x.com", "secret1")
        await self.state.refresh_user()
        self.assertTrue(await self.state.favorites.toggle(make_product("p1")))
        await self.state.recently_viewed.add_item(make_product("p1"))

        await self.state.end_session()
        self.assertIsNone(self.state.user)
        self.assertEqual(await self.state.favorites.get_items(), [])
        self.assertEqual(await self.state.recently_viewed.get_items(), [])

        await self.state.accounts.login("amina", "secret1")
        self.assertTrue(await self.state.favorites.is_favorited("p1"))
        self.assertEqual(len(await self.state.recently_viewed.get_items()), 1)
