import os
import tempfile
import unittest

from db.storage import COOKIE_MAX_AGE, SessionStorage


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class SessionStorageTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # nested directory: storage has to create it
        self.db_path = os.path.join(self.temp_dir.name, "data", "session.sqlite")
        self.clock = FakeClock()
        self.storage = SessionStorage(self.db_path, clock=self.clock)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_empty_storage_loads_nothing(self):
        self.assertIsNone(await self.storage.load())
        self.assertIsNone(self.storage.cookie)
        self.assertIsNone(self.storage.gate_token())
        self.assertTrue(os.path.exists(self.db_path))

    async def test_persist_then_reload(self):
        await self.storage.persist_session("tok")

        reloaded = SessionStorage(self.db_path, clock=self.clock)
        self.assertEqual(await reloaded.load(), "tok")
        self.assertEqual(reloaded.cookie.value, "tok")
        self.assertEqual(reloaded.cookie_header(), "adminToken=tok")

    async def test_cookie_attributes(self):
        await self.storage.persist_session("tok", secure=True)

        set_cookie = self.storage.cookie.set_cookie()
        self.assertIn("adminToken=tok", set_cookie)
        self.assertIn("Path=/", set_cookie)
        self.assertIn(f"Max-Age={COOKIE_MAX_AGE}", set_cookie)
        self.assertIn("SameSite=Lax", set_cookie)
        self.assertIn("Secure", set_cookie)
        self.assertEqual(COOKIE_MAX_AGE, 604800)

        await self.storage.persist_session("tok")
        self.assertNotIn("Secure", self.storage.cookie.set_cookie())

    async def test_expired_cookie_is_dropped_but_token_stays(self):
        await self.storage.persist_session("tok")
        self.clock.now += COOKIE_MAX_AGE + 1

        self.assertIsNone(self.storage.cookie_header())

        reloaded = SessionStorage(self.db_path, clock=self.clock)
        self.assertEqual(await reloaded.load(), "tok")
        self.assertIsNone(reloaded.cookie)
        # with the cookie gone the gate falls back to the token
        self.assertEqual(reloaded.gate_token(), "tok")

    async def test_clear_session_removes_both(self):
        await self.storage.persist_session("tok")
        await self.storage.clear_session()

        self.assertIsNone(self.storage.token)
        self.assertIsNone(self.storage.cookie)

        reloaded = SessionStorage(self.db_path, clock=self.clock)
        self.assertIsNone(await reloaded.load())
        self.assertIsNone(reloaded.cookie)

    async def test_forget_is_memory_only(self):
        await self.storage.persist_session("tok")
        self.storage.forget()

        self.assertIsNone(self.storage.token)
        reloaded = SessionStorage(self.db_path, clock=self.clock)
        self.assertEqual(await reloaded.load(), "tok")

    async def test_gate_token_prefers_cookie(self):
        await self.storage.persist_session("cookie-tok")
        self.storage.token = "header-tok"
        self.assertEqual(self.storage.gate_token(), "cookie-tok")


if __name__ == "__main__":
    unittest.main()
