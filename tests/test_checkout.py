import asyncio
import unittest
from unittest import mock

import httpx

from fake_api import CUSTOMER, VENDOR, MarketTestCase, envelope

from api.models import Product
from core import gate
from core.cart import CartStore
from core.checkout import ShippingFields

WOOL = Product(id=1, name="Merino Wool", price=5.0, vendor_name="Cozy Knits")
HOOK = Product(id=2, name="Bamboo Hook", price=3.25, vendor_name="Hooked")

SHIPPING = ShippingFields(
    street="1 Loop Lane", city="Purlton", zip="10001", phone="555-0101"
)


class CheckoutTestCase(MarketTestCase):
    def stock(self, available):
        for pid, qty in available.items():
            self.api.on(
                "GET",
                f"/inventory/available/{pid}",
                envelope({"productId": pid, "availableStock": qty}),
            )

    def snapshot(self):
        return [(line.product_id, line.quantity) for line in self.state.cart.lines]

    # ---------- Add to cart ----------

    async def test_anonymous_add_redirects_to_login(self):
        await self.state.session.restore()
        result = await self.state.checkout.add_to_cart(WOOL, 1, available_stock=10)

        self.assertFalse(result.ok)
        self.assertEqual(result.redirect, gate.LOGIN_ROUTE)
        self.assertTrue(self.state.cart.is_empty())
        self.assertIn(
            ("Please login to add items to your cart!", "warning"), self.notes
        )

    async def test_vendor_cannot_shop(self):
        await self.login_as(VENDOR)
        result = await self.state.checkout.add_to_cart(WOOL, 1)
        self.assertFalse(result.ok)
        self.assertEqual(result.redirect, gate.HOME_ROUTE)
        self.assertTrue(self.state.cart.is_empty())

    async def test_add_is_bounded_by_stock(self):
        await self.login_as(CUSTOMER)
        checkout = self.state.checkout

        self.assertFalse((await checkout.add_to_cart(WOOL, 0, 5)).ok)
        self.assertFalse((await checkout.add_to_cart(WOOL, 6, 5)).ok)
        self.assertFalse((await checkout.add_to_cart(WOOL, 1, 0)).ok)
        self.assertTrue(self.state.cart.is_empty())

        result = await checkout.add_to_cart(WOOL, 5, 5)
        self.assertTrue(result.ok)
        self.assertEqual(self.snapshot(), [(1, 5)])

    # ---------- Submission ----------

    async def test_successful_order_sends_total_and_empties_cart(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 2)
        self.stock({1: 10})
        self.api.on("POST", "/orders", envelope({"id": 31, "totalAmount": 10.0}))

        result = await self.state.checkout.submit(SHIPPING)

        self.assertTrue(result.ok)
        self.assertEqual(result.redirect, gate.HOME_ROUTE)
        self.assertEqual(result.order.id, 31)
        self.assertEqual(self.state.cart.lines, [])
        sent = self.api.json_of("POST", "/orders")
        self.assertEqual(sent["totalAmount"], 10.0)
        self.assertEqual(sent["userId"], CUSTOMER["id"])
        self.assertEqual(sent["shippingAddress"], "1 Loop Lane, Purlton 10001")
        self.assertEqual(sent["phone"], "555-0101")
        self.assertEqual(sent["items"], [{"productId": 1, "quantity": 2, "price": 5.0}])
        self.assertIn(("Order Placed Successfully!", "information"), self.notes)

    async def test_placed_order_survives_failing_cart_write(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 2)
        self.stock({1: 10})
        self.api.on("POST", "/orders", envelope({"id": 44}))

        with mock.patch("db.storage.put", side_effect=OSError("disk full")):
            result = await self.state.checkout.submit(SHIPPING)

        self.assertTrue(result.ok)
        self.assertEqual(result.order.id, 44)
        self.assertEqual(len(self.api.calls("POST", "/orders")), 1)
        self.assertFalse(self.state.checkout.submitting)
        self.assertTrue(any(sev == "warning" for _, sev in self.notes))
        # memory and disk still agree with each other
        self.assertEqual(self.snapshot(), [(1, 2)])
        restored = CartStore()
        await restored.load()
        self.assertEqual(restored.lines, self.state.cart.lines)

    async def test_order_without_echo_still_succeeds(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(HOOK, 1)
        self.stock({2: 3})
        self.api.on("POST", "/orders", envelope("Order created"))

        result = await self.state.checkout.submit(SHIPPING)
        self.assertTrue(result.ok)
        self.assertIsNone(result.order)
        self.assertTrue(self.state.cart.is_empty())

    async def test_failed_order_leaves_cart_untouched(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 2)
        await self.state.cart.add_item(HOOK, 3)
        before = self.snapshot()
        self.stock({1: 10, 2: 10})

        for status, body, message in [
            (400, {"message": "Insufficient stock for Merino Wool"},
             "Insufficient stock for Merino Wool"),
            (500, None, "Failed to place order."),
        ]:
            self.api.on("POST", "/orders", body, status=status)
            result = await self.state.checkout.submit(SHIPPING)
            self.assertFalse(result.ok)
            self.assertEqual(result.message, message)
            self.assertEqual(self.snapshot(), before)

    async def test_connection_failure_leaves_cart_untouched(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 1)
        self.stock({1: 10})

        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        self.api.on("POST", "/orders", handler=refuse)
        result = await self.state.checkout.submit(SHIPPING)
        self.assertFalse(result.ok)
        self.assertEqual(self.snapshot(), [(1, 1)])

    async def test_missing_shipping_fields(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 1)

        result = await self.state.checkout.submit(
            ShippingFields(street="1 Loop Lane", city="  ", zip="", phone="555")
        )
        self.assertFalse(result.ok)
        self.assertEqual(set(result.field_errors), {"city", "zip"})
        self.assertEqual(self.api.calls("POST", "/orders"), [])

    async def test_empty_cart_is_refused(self):
        await self.login_as(CUSTOMER)
        result = await self.state.checkout.submit(SHIPPING)
        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Your cart is empty!")

    async def test_anonymous_submit_redirects_to_login(self):
        await self.state.cart.add_item(WOOL, 1)
        result = await self.state.checkout.submit(SHIPPING)
        self.assertEqual(result.redirect, gate.LOGIN_ROUTE)
        self.assertEqual(self.snapshot(), [(1, 1)])

    async def test_stock_is_checked_again_before_ordering(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 4)
        await self.state.cart.add_item(HOOK, 1)
        self.stock({1: 2, 2: 0})

        result = await self.state.checkout.submit(SHIPPING)
        self.assertFalse(result.ok)
        self.assertEqual(set(result.stock_errors), {1, 2})
        self.assertIn("Only 2 of Merino Wool left", result.stock_errors[1])
        self.assertEqual(self.api.calls("POST", "/orders"), [])
        self.assertEqual(self.snapshot(), [(1, 4), (2, 1)])

    async def test_stock_check_can_be_disabled(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 1)
        self.state.checkout.revalidate_stock = False
        self.api.on("POST", "/orders", envelope({"id": 2}))

        self.assertTrue((await self.state.checkout.submit(SHIPPING)).ok)
        self.assertEqual(self.api.calls("GET", "/inventory/available/1"), [])

    async def test_second_submit_while_in_flight_is_refused(self):
        await self.login_as(CUSTOMER)
        await self.state.cart.add_item(WOOL, 1)
        self.stock({1: 10})
        release = asyncio.Event()

        async def slow_order(request):
            await release.wait()
            return httpx.Response(201, json=envelope({"id": 5}))

        self.api.on("POST", "/orders", handler=slow_order)
        first = asyncio.create_task(self.state.checkout.submit(SHIPPING))
        while not self.api.calls("POST", "/orders"):
            await asyncio.sleep(0)

        second = await self.state.checkout.submit(SHIPPING)
        self.assertFalse(second.ok)
        release.set()
        self.assertTrue((await first).ok)
        self.assertEqual(len(self.api.calls("POST", "/orders")), 1)
        self.assertFalse(self.state.checkout.submitting)


if __name__ == "__main__":
    unittest.main()
