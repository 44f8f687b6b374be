import tempfile
import unittest

from fake_backend import FakeBackend, admin_json, make_client, make_storage
from utils.guard import (
    ADMIN_ROOT,
    LOGIN_PATH,
    REGISTER_PATH,
    Access,
    RouteGuard,
    gate_path,
    is_admin_path,
)
from utils.state import SessionStore


class GatePathTestCase(unittest.TestCase):
    def test_admin_paths(self):
        self.assertTrue(is_admin_path("/admin"))
        self.assertTrue(is_admin_path("/admin/orders"))
        self.assertFalse(is_admin_path("/administrator"))
        self.assertFalse(is_admin_path("/login"))

    def test_admin_without_token_goes_to_login(self):
        self.assertEqual(gate_path("/admin/orders", None), LOGIN_PATH)
        self.assertEqual(gate_path(ADMIN_ROOT, ""), LOGIN_PATH)

    def test_admin_with_token_passes(self):
        self.assertIsNone(gate_path("/admin/orders", "tok"))

    def test_login_with_token_goes_home(self):
        self.assertEqual(gate_path(LOGIN_PATH, "tok"), ADMIN_ROOT)
        self.assertIsNone(gate_path(LOGIN_PATH, None))

    def test_register_is_open_without_token(self):
        self.assertIsNone(gate_path(REGISTER_PATH, None))
        self.assertEqual(gate_path(REGISTER_PATH, "tok"), ADMIN_ROOT)

    def test_other_paths_pass(self):
        self.assertIsNone(gate_path("/", None))
        self.assertIsNone(gate_path("/products", "tok"))


class RouteGuardTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.backend = FakeBackend()
        self.storage = make_storage(self.temp_dir)
        self.client = make_client(self.backend, self.storage)
        self.session = SessionStore(self.client, self.storage)
        self.guard = RouteGuard(self.session)

    async def asyncTearDown(self):
        await self.client.aclose()

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_loading_until_bootstrapped(self):
        self.assertEqual(self.guard.decide(), Access.LOADING)

    async def test_valid_admin_token_is_allowed(self):
        await self.storage.persist_session("tok")
        self.backend.route("GET", "/api/admin/profile", (200, admin_json()))

        self.assertEqual(await self.guard.resolve(), Access.ALLOWED)

    async def test_super_admin_is_allowed(self):
        await self.storage.persist_session("tok")
        self.backend.route(
            "GET", "/api/admin/profile", (200, admin_json(role="super_admin"))
        )

        self.assertEqual(await self.guard.resolve(), Access.ALLOWED)

    async def test_invalid_token_is_sent_to_login(self):
        await self.storage.persist_session("revoked")
        self.backend.route("GET", "/api/admin/profile", (401, {}))

        self.assertEqual(await self.guard.resolve(), Access.LOGIN)
        self.assertIsNone(self.storage.token)

    async def test_non_admin_is_denied_not_redirected(self):
        await self.storage.persist_session("tok")
        self.backend.route("GET", "/api/admin/profile", (200, admin_json(role="user")))

        self.assertEqual(await self.guard.resolve(), Access.DENIED)
        # still logged in, just not allowed
        self.assertTrue(self.session.is_authenticated)

    async def test_no_token_is_sent_to_login(self):
        self.assertEqual(await self.guard.resolve(), Access.LOGIN)
        self.assertEqual(self.backend.requests, [])


if __name__ == "__main__":
    unittest.main()
