import json
import random
import unittest
from unittest import mock

from fake_api import MarketTestCase

import db.storage as storage
from api.models import Product
from core.cart import CartStore

WOOL = Product(id=1, name="Merino Wool", price=5.0, vendor_name="Cozy Knits")
HOOK = Product(id=2, name="Bamboo Hook", price=3.25, vendor_name="Hooked")


class CartTestCase(MarketTestCase):
    @property
    def cart(self) -> CartStore:
        return self.state.cart

    async def test_adding_same_product_merges_lines(self):
        for a, b in [(1, 1), (2, 5), (10, 3)]:
            await self.cart.clear()
            await self.cart.add_item(WOOL, a)
            await self.cart.add_item(WOOL, b)
            self.assertEqual(len(self.cart), 1)
            self.assertEqual(self.cart.get(WOOL.id).quantity, a + b)

    async def test_add_rejects_non_positive_amount(self):
        with self.assertRaises(ValueError):
            await self.cart.add_item(WOOL, 0)
        self.assertTrue(self.cart.is_empty())

    async def test_add_notifies(self):
        await self.cart.add_item(HOOK, 2)
        self.assertIn(("Added 2 item(s) to Cart!", "information"), self.notes)

    async def test_quantity_below_one_is_ignored(self):
        await self.cart.add_item(WOOL, 3)
        await self.cart.set_quantity(WOOL.id, 0)
        await self.cart.set_quantity(WOOL.id, -4)
        self.assertEqual(self.cart.get(WOOL.id).quantity, 3)

        await self.cart.set_quantity(WOOL.id, 8)
        self.assertEqual(self.cart.get(WOOL.id).quantity, 8)

    async def test_set_quantity_of_missing_product_does_nothing(self):
        await self.cart.set_quantity(99, 2)
        self.assertTrue(self.cart.is_empty())

    async def test_total_matches_independent_sum(self):
        rng = random.Random(42)
        picks = []
        for pid in range(1, 8):
            price, qty = round(rng.uniform(0, 40), 2), rng.randint(1, 6)
            picks.append((price, qty))
            await self.cart.add_item(Product(id=pid, name=f"P{pid}", price=price), qty)
        # a second add to an existing line counts towards the same product
        await self.cart.add_item(Product(id=1, name="P1", price=picks[0][0]), 2)
        picks.append((picks[0][0], 2))

        expected = sum(price * qty for price, qty in picks)
        self.assertAlmostEqual(self.cart.total(), expected)
        self.assertEqual(self.cart.item_count(), sum(qty for _, qty in picks))

    async def test_empty_cart_total_is_zero(self):
        self.assertEqual(self.cart.total(), 0)

    async def test_remove_and_clear(self):
        await self.cart.add_item(WOOL)
        await self.cart.add_item(HOOK)
        await self.cart.remove_item(WOOL.id)
        await self.cart.remove_item(WOOL.id)
        self.assertEqual([line.product_id for line in self.cart.lines], [HOOK.id])

        await self.cart.clear()
        self.assertTrue(self.cart.is_empty())
        self.assertEqual(await storage.get(storage.CART_KEY), "[]")

    # ---------- Persistence ----------

    async def test_every_mutation_is_persisted(self):
        await self.cart.add_item(WOOL, 2)
        await self.cart.add_item(HOOK, 1)
        await self.cart.set_quantity(HOOK.id, 4)

        restored = CartStore()
        await restored.load()
        self.assertEqual(restored.lines, self.cart.lines)
        snapshot = json.loads(await storage.get(storage.CART_KEY))
        self.assertEqual(snapshot[0]["productId"], WOOL.id)
        self.assertEqual(snapshot[1]["quantity"], 4)

    async def test_line_keeps_price_seen_when_added(self):
        await self.cart.add_item(WOOL, 1)
        await self.cart.add_item(Product(id=WOOL.id, name=WOOL.name, price=9.0), 1)
        self.assertEqual(self.cart.get(WOOL.id).unit_price, 5.0)

    async def test_unreadable_snapshot_loads_empty(self):
        for raw in [
            "not json",
            '{"productId": 1}',
            '[{"productId": 1, "unitPrice": 2}]',
            '[{"productId": 1, "unitPrice": 2, "quantity": 0}]',
            '[{"productId": 1, "unitPrice": 2, "quantity": 1},'
            ' {"productId": 1, "unitPrice": 2, "quantity": 3}]',
            "[1, 2]",
        ]:
            await storage.put(storage.CART_KEY, raw)
            cart = CartStore()
            await cart.load()
            self.assertTrue(cart.is_empty(), raw)

    async def test_load_without_snapshot(self):
        cart = CartStore()
        await cart.load()
        self.assertEqual(cart.lines, [])

    async def test_failed_write_leaves_cart_as_it_was(self):
        await self.cart.add_item(WOOL, 2)
        before = self.cart.lines

        with mock.patch("db.storage.put", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                await self.cart.add_item(HOOK, 1)
            with self.assertRaises(OSError):
                await self.cart.add_item(WOOL, 1)
            with self.assertRaises(OSError):
                await self.cart.set_quantity(WOOL.id, 5)
            with self.assertRaises(OSError):
                await self.cart.remove_item(WOOL.id)
            with self.assertRaises(OSError):
                await self.cart.clear()

        self.assertEqual(self.cart.lines, before)
        restored = CartStore()
        await restored.load()
        self.assertEqual(restored.lines, before)
        self.assertEqual(len(self.notes), 1)


if __name__ == "__main__":
    unittest.main()
