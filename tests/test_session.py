import asyncio
import unittest

import httpx

from fake_api import ADMIN, CUSTOMER, VENDOR, MarketTestCase, envelope

import db.storage as storage
from core import gate
from core.session import SessionStore


class SessionTestCase(MarketTestCase):
    @property
    def session(self) -> SessionStore:
        return self.state.session

    # ---------- Identity resolution ----------

    async def test_restore_without_token_is_resolved_anonymous(self):
        self.assertIsNone(await self.session.restore())
        self.assertTrue(self.session.resolved)
        self.assertIsNone(self.session.identity)
        self.assertEqual(self.api.requests, [])

    async def test_login_persists_and_resolves(self):
        await self.login_as(CUSTOMER)
        self.assertEqual(self.session.identity.role, "CUSTOMER")
        self.assertEqual(await storage.get(storage.TOKEN_KEY), "token-7")
        request = self.api.calls("GET", "/users/me")[0]
        self.assertEqual(request.headers["Authorization"], "Bearer token-7")

        # a fresh store on the same database picks the credential up again
        other = SessionStore(self.state.client)
        identity = await other.restore()
        self.assertEqual(identity.id, CUSTOMER["id"])

    async def test_failed_resolution_leaves_identity_absent_but_keeps_token(self):
        await storage.put(storage.TOKEN_KEY, "tok")
        self.api.on("GET", "/users/me", {"message": "down"}, status=503)

        self.assertIsNone(await self.session.restore())
        self.assertTrue(self.session.resolved)
        self.assertEqual(await storage.get(storage.TOKEN_KEY), "tok")

    async def test_rejected_token_is_dropped(self):
        await storage.put(storage.TOKEN_KEY, "expired")
        self.api.on("GET", "/users/me", {"message": "expired"}, status=401)

        self.assertIsNone(await self.session.restore())
        self.assertIsNone(self.session.token)
        self.assertIsNone(await storage.get(storage.TOKEN_KEY))

    async def test_unusable_profile_means_no_identity(self):
        await storage.put(storage.TOKEN_KEY, "tok")
        self.api.on("GET", "/users/me", envelope({"id": 3, "role": "GHOST"}))
        self.assertIsNone(await self.session.restore())

    async def test_logout_drops_credential_and_identity_together(self):
        await self.login_as(VENDOR)
        seen = []
        self.session.subscribe(seen.append)

        await self.session.logout()
        self.assertIsNone(self.session.token)
        self.assertIsNone(self.session.identity)
        self.assertIsNone(await storage.get(storage.TOKEN_KEY))
        self.assertEqual(seen, [None])

    async def test_late_profile_does_not_resurrect_logged_out_session(self):
        release = asyncio.Event()

        async def slow_profile(request):
            await release.wait()
            return httpx.Response(200, json=envelope(ADMIN))

        self.api.on("GET", "/users/me", handler=slow_profile)
        await storage.put(storage.TOKEN_KEY, "tok")

        pending = asyncio.create_task(self.session.restore())
        while not self.api.calls("GET", "/users/me"):
            await asyncio.sleep(0)
        await self.session.logout()
        release.set()
        await pending

        self.assertIsNone(self.session.identity)
        self.assertIsNone(self.session.token)

    async def test_unsubscribe(self):
        seen = []
        unsubscribe = self.session.subscribe(seen.append)
        await self.login_as(CUSTOMER)
        unsubscribe()
        await self.session.logout()
        self.assertEqual(len(seen), 1)

    # ---------- Sign in & registration ----------

    async def test_sign_in(self):
        self.api.on("POST", "/auth/login", envelope({"token": "t-9"}))
        self.api.on("GET", "/users/me", envelope(CUSTOMER))

        result = await self.session.sign_in(" cara@example.com ", "pw")
        self.assertTrue(result.ok)
        self.assertEqual(self.session.token, "t-9")
        self.assertEqual(
            self.api.json_of("POST", "/auth/login"),
            {"email": "cara@example.com", "password": "pw"},
        )

    async def test_sign_in_without_token_in_response(self):
        self.api.on("POST", "/auth/login", envelope({"message": "hi"}))
        result = await self.session.sign_in("a@b", "pw")
        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Login failed: Server didn't send a token.")
        self.assertIsNone(self.session.token)

    async def test_sign_in_with_bad_credentials(self):
        self.api.on("POST", "/auth/login", {"message": "Bad credentials"}, status=401)
        result = await self.session.sign_in("a@b", "pw")
        self.assertFalse(result.ok)
        self.assertIn("Bad credentials", result.message)

    async def test_register(self):
        self.api.on("POST", "/auth/register", envelope({"id": 12}))
        result = await self.session.register("Nia", "nia@x", "pw", "vendor")
        self.assertTrue(result.ok)
        self.assertEqual(result.redirect, gate.LOGIN_ROUTE)
        self.assertEqual(self.api.json_of("POST", "/auth/register")["role"], "VENDOR")

        refused = await self.session.register("Eve", "eve@x", "pw", "ADMIN")
        self.assertFalse(refused.ok)
        self.assertEqual(len(self.api.calls("POST", "/auth/register")), 1)


class GateTestCase(MarketTestCase):
    async def test_route_table(self):
        await self.login_as(CUSTOMER)
        customer = self.state.session.identity
        await self.login_as(VENDOR)
        vendor = self.state.session.identity
        await self.login_as(ADMIN)
        admin = self.state.session.identity

        self.assertTrue(gate.can_access(None, "/").allowed)
        self.assertTrue(gate.can_access(None, "/products/3").allowed)

        denied = gate.can_access(None, "/cart")
        self.assertFalse(denied.allowed)
        self.assertEqual(denied.redirect, gate.LOGIN_ROUTE)

        self.assertTrue(gate.can_access(customer, "/checkout").allowed)
        wrong_role = gate.can_access(customer, "/vendor/dashboard")
        self.assertFalse(wrong_role.allowed)
        self.assertEqual(wrong_role.redirect, gate.HOME_ROUTE)

        self.assertTrue(gate.can_access(vendor, "/vendor/dashboard").allowed)
        self.assertFalse(gate.can_access(vendor, "/orders").allowed)
        self.assertTrue(gate.can_access(admin, "/admin").allowed)
        self.assertTrue(gate.can_access(admin, "/admin/analytics").allowed)
        self.assertFalse(gate.can_access(admin, "/cart").allowed)

    async def test_role_home(self):
        await self.login_as(VENDOR)
        self.assertEqual(gate.home_for(self.state.session.identity), "/vendor/dashboard")
        self.assertEqual(gate.home_for(None), "/")

    async def test_gated_routes_wait_until_resolved(self):
        decision = gate.evaluate(self.state.session, "/admin")
        self.assertTrue(decision.pending)
        self.assertFalse(decision.allowed)
        # public routes never wait
        self.assertTrue(gate.evaluate(self.state.session, "/").allowed)

        await self.state.session.restore()
        decision = gate.evaluate(self.state.session, "/admin")
        self.assertFalse(decision.pending)
        self.assertEqual(decision.redirect, gate.LOGIN_ROUTE)


if __name__ == "__main__":
    unittest.main()
