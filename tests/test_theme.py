import os
import tempfile
import unittest
from unittest import mock

from db.database import LocalStorage
from stores.theme import THEME_KEY, ThemeStore, terminal_prefers_dark


class ThemeStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(os.path.join(self.temp_dir.name, "test.sqlite"))
        self.system_dark = False
        self.theme = ThemeStore(self.storage, lambda: self.system_dark)
        self.seen = []
        self.theme.subscribe(self.seen.append)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_defaults_to_light(self):
        self.assertFalse(await self.theme.load())
        self.assertEqual(self.theme.theme, "light")

    async def test_system_preference_used_without_persisting(self):
        self.system_dark = True
        self.assertTrue(await self.theme.load())
        self.assertIsNone(await self.storage.read(THEME_KEY))

    async def test_stored_preference_wins(self):
        self.system_dark = True
        await self.storage.write(THEME_KEY, "light")
        self.assertFalse(await self.theme.load())

    async def test_invalid_stored_value_is_ignored(self):
        self.system_dark = True
        await self.storage.write(THEME_KEY, "purple")
        self.assertTrue(await self.theme.load())

    async def test_toggle_persists_and_notifies(self):
        await self.theme.load()
        self.assertTrue(await self.theme.toggle())
        self.assertEqual(await self.storage.read(THEME_KEY), "dark")
        self.assertFalse(await self.theme.toggle())
        self.assertEqual(await self.storage.read(THEME_KEY), "light")
        self.assertEqual(self.seen, [True, False])

        # a fresh store picks up the saved choice
        other = ThemeStore(self.storage, lambda: True)
        self.assertFalse(await other.load())

    async def test_unsubscribe(self):
        await self.theme.load()
        self.theme.unsubscribe(self.seen.append)
        self.theme.unsubscribe(self.seen.append)
        await self.theme.set_dark(True)
        self.assertEqual(self.seen, [])
        self.assertTrue(self.theme.is_dark)

    async def test_system_changes_followed_until_explicit_choice(self):
        await self.theme.load()
        self.assertTrue(await self.theme.system_preference_changed(True))
        self.assertTrue(self.theme.is_dark)

        await self.theme.set_dark(False)
        self.assertFalse(await self.theme.system_preference_changed(True))
        self.assertFalse(self.theme.is_dark)
        self.assertEqual(self.seen, [True, False])

    async def test_clear_preference(self):
        await self.theme.load()
        await self.theme.set_dark(True)
        self.system_dark = False
        await self.theme.clear_preference()

        self.assertIsNone(await self.storage.read(THEME_KEY))
        self.assertFalse(self.theme.is_dark)
        self.assertTrue(await self.theme.system_preference_changed(True))


class TerminalPreferenceTestCase(unittest.TestCase):
    def test_colorfgbg(self):
        cases = {"15;0": True, "0;15": False, "7;default;8": True, "": False}
        for value, expected in cases.items():
            with mock.patch.dict(os.environ, {"COLORFGBG": value}):
                self.assertEqual(terminal_prefers_dark(), expected, value)

    def test_unset(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertFalse(terminal_prefers_dark())
