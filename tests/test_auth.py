import os
import tempfile
import unittest

from db.database import LocalStorage
from stores.auth import SESSION_KEY, USERS_KEY, AccountStore
from stores.errors import AuthError, ConflictError, NotFoundError, ValidationError


class AccountStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(os.path.join(self.temp_dir.name, "test.sqlite"))
        self.accounts = AccountStore(self.storage)

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Registration ----------

    async def test_register_logs_in_and_normalizes(self):
        result = await self.accounts.register("  amina ", "A@x.com ", "secret1")
        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual(result.value.username, "amina")
        self.assertEqual(result.value.email, "a@x.com")
        self.assertTrue(result.value.id.startswith("user-"))

        user = await self.accounts.get_current_user()
        self.assertEqual(user.id, result.value.id)
        self.assertTrue(await self.accounts.is_logged_in())

        # session never carries the password
        raw_session = await self.storage.read(SESSION_KEY, {})
        self.assertNotIn("password", raw_session)

    async def test_duplicate_email_any_case_conflicts(self):
        await self.accounts.register("amina", "A@x.com", "secret1")
        result = await self.accounts.register("someone", "a@x.com", "secret2")
        self.assertFalse(result.success)
        self.assertIsInstance(result.error, ConflictError)
        self.assertIn("email", result.error.message)
        self.assertEqual(len(await self.accounts.get_accounts()), 1)

    async def test_email_checked_before_username(self):
        await self.accounts.register("amina", "a@x.com", "secret1")
        result = await self.accounts.register("AMINA", "A@X.COM", "secret1")
        self.assertIsInstance(result.error, ConflictError)
        self.assertIn("email", result.error.message)

        result = await self.accounts.register("AMINA", "other@x.com", "secret1")
        self.assertIsInstance(result.error, ConflictError)
        self.assertIn("username", result.error.message)

    async def test_register_requires_all_fields(self):
        for args in (("", "a@x.com", "pw"), ("amina", "  ", "pw"), ("amina", "a@x.com", "")):
            result = await self.accounts.register(*args)
            self.assertIsInstance(result.error, ValidationError)
        self.assertEqual(await self.accounts.get_accounts(), [])
        self.assertFalse(await self.accounts.is_logged_in())

    async def test_register_password_rules(self):
        result = await self.accounts.register("amina", "a@x.com", "x")
        self.assertIsInstance(result.error, ValidationError)
        self.assertIn("6 characters", result.error.message)

        result = await self.accounts.register("amina", "a@x.com", "secret1", "secret2")
        self.assertIsInstance(result.error, ValidationError)
        self.assertIn("match", result.error.message)

        self.assertEqual(await self.accounts.get_accounts(), [])
        self.assertFalse(await self.accounts.is_logged_in())

        result = await self.accounts.register("amina", "a@x.com", "secret1", "secret1")
        self.assertTrue(result.success)

    async def test_password_rules_checked_before_duplicates(self):
        await self.accounts.register("amina", "a@x.com", "secret1")
        result = await self.accounts.register("amina", "a@x.com", "abc")
        self.assertIsInstance(result.error, ValidationError)

    async def test_account_ids_are_unique(self):
        first = await self.accounts.register("a", "a@x.com", "secret1")
        second = await self.accounts.register("b", "b@x.com", "secret1")
        self.assertNotEqual(first.value.id, second.value.id)

    # ---------- Login & logout ----------

    async def test_register_then_login(self):
        await self.accounts.register("amina", "A@x.com", "secret1")
        await self.accounts.logout()
        self.assertIsNone(await self.accounts.get_current_user())
        # accounts survive logout
        self.assertEqual(len(await self.accounts.get_accounts()), 1)

        by_email = await self.accounts.login("A@X.com", "secret1")
        self.assertTrue(by_email.success)
        await self.accounts.logout()

        by_username = await self.accounts.login("AMINA", "secret1")
        self.assertTrue(by_username.success)
        self.assertEqual(
            (await self.accounts.get_current_user()).username, "amina"
        )

    async def test_login_failures(self):
        await self.accounts.register("amina", "a@x.com", "secret1")
        await self.accounts.logout()

        result = await self.accounts.login("nobody", "secret1")
        self.assertIsInstance(result.error, NotFoundError)

        result = await self.accounts.login("amina", "SECRET1")
        self.assertIsInstance(result.error, AuthError)

        result = await self.accounts.login("", "secret1")
        self.assertIsInstance(result.error, ValidationError)

        self.assertFalse(await self.accounts.is_logged_in())

    async def test_malformed_session_is_logged_out(self):
        await self.storage.write(SESSION_KEY, {"id": "user-1"})
        self.assertIsNone(await self.accounts.get_current_user())
        await self.storage.write(SESSION_KEY, ["not", "a", "session"])
        self.assertIsNone(await self.accounts.current_user_id())

    async def test_stale_session_is_tolerated(self):
        await self.storage.write(
            SESSION_KEY, {"id": "user-1", "username": "ghost", "email": "g@x.com"}
        )
        self.assertEqual(await self.accounts.current_user_id(), "user-1")

    # ---------- Passwords ----------

    async def test_change_password(self):
        result = await self.accounts.change_password("secret1", "newpass", "newpass")
        self.assertIsInstance(result.error, AuthError)

        await self.accounts.register("amina", "a@x.com", "secret1")

        result = await self.accounts.change_password("secret1", "short", "short")
        self.assertIsInstance(result.error, ValidationError)
        result = await self.accounts.change_password("secret1", "newpass", "newpas")
        self.assertIsInstance(result.error, ValidationError)
        result = await self.accounts.change_password("wrong", "newpass", "newpass")
        self.assertIsInstance(result.error, AuthError)

        result = await self.accounts.change_password("secret1", "newpass", "newpass")
        self.assertTrue(result.success)

        await self.accounts.logout()
        self.assertIsInstance(
            (await self.accounts.login("amina", "secret1")).error, AuthError
        )
        self.assertTrue((await self.accounts.login("amina", "newpass")).success)

    async def test_password_recovery(self):
        await self.accounts.register("amina", "a@x.com", "secret1")
        await self.accounts.logout()

        self.assertIsInstance(
            (await self.accounts.find_account_by_email("")).error, ValidationError
        )
        self.assertIsInstance(
            (await self.accounts.find_account_by_email("b@x.com")).error, NotFoundError
        )
        found = await self.accounts.find_account_by_email(" A@X.COM ")
        self.assertTrue(found.success)
        self.assertEqual(found.value.username, "amina")

        result = await self.accounts.reset_password("a@x.com", "12345", "12345")
        self.assertIsInstance(result.error, ValidationError)
        result = await self.accounts.reset_password("a@x.com", "123456", "654321")
        self.assertIsInstance(result.error, ValidationError)
        result = await self.accounts.reset_password("b@x.com", "123456", "123456")
        self.assertIsInstance(result.error, NotFoundError)

        result = await self.accounts.reset_password("a@x.com", "123456", "123456")
        self.assertTrue(result.success)
        # reset does not sign anyone in
        self.assertFalse(await self.accounts.is_logged_in())
        self.assertTrue((await self.accounts.login("a@x.com", "123456")).success)

    async def test_corrupt_account_list_reads_empty(self):
        await self.storage.set_item(USERS_KEY, "[{broken")
        self.assertEqual(await self.accounts.get_accounts(), [])
        result = await self.accounts.register("amina", "a@x.com", "secret1")
        self.assertTrue(result.success)
