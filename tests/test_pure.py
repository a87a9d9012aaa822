import unittest

from db.catalog import get_product, load_catalog, search_products
from db.models import CartLine
from utils.pure import (
    checkout_summary,
    fmt_money,
    generate_markdown_table,
    is_valid_promo,
    password_strength,
)


def line(pid, price, qty, shipping):
    return CartLine(
        id=pid,
        name=pid,
        price=price,
        image="",
        delivery_date="Monday, March 2",
        shipping_cost=shipping,
        qty=qty,
    )


class PureTestCase(unittest.TestCase):
    def test_markdown_table(self):
        table = generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(table, "| A | B |\n| :--- | ---: |\n| 1 | x |")

        # first row doubles as header
        table = generate_markdown_table(None, [["A"], ["1"]])
        self.assertEqual(table.splitlines()[0], "| A |")

        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])

    def test_money(self):
        self.assertEqual(fmt_money(1234.5), "$1,234.50")

    def test_promo(self):
        self.assertTrue(is_valid_promo("STOREFRONT10"))
        self.assertTrue(is_valid_promo(" storefront10 "))
        self.assertFalse(is_valid_promo("STOREFRONT20"))
        self.assertFalse(is_valid_promo(""))

    def test_checkout_summary(self):
        lines = [line("a", 5.0, 2, 3.0), line("b", 10.0, 1, 2.0)]

        summary = checkout_summary(lines)
        self.assertEqual(summary.subtotal, 20.0)
        # the qty 2 line pays its shipping once
        self.assertEqual(summary.shipping, 5.0)
        self.assertEqual(summary.discount, 0.0)
        self.assertEqual(summary.tax, 2.5)
        self.assertEqual(summary.total, 27.5)

        summary = checkout_summary(lines, promo_applied=True)
        self.assertEqual(summary.discount, 2.0)
        self.assertEqual(summary.tax, 2.3)
        self.assertEqual(summary.total, 25.3)

        self.assertEqual(checkout_summary([]).total, 0.0)

    def test_password_strength(self):
        self.assertEqual(password_strength(""), 0)
        self.assertEqual(password_strength("abc"), 0)
        self.assertEqual(password_strength("abcdefgh"), 1)
        self.assertEqual(password_strength("abcdefg1"), 2)
        self.assertEqual(password_strength("Abcdefg!"), 3)


class CatalogTestCase(unittest.TestCase):
    def test_catalog_loads(self):
        products = load_catalog()
        self.assertEqual(len(products), 10)
        self.assertEqual(len({p.id for p in products}), 10)

    def test_get_product(self):
        self.assertEqual(get_product("p-1002").shipping_cost, 4.99)
        self.assertIsNone(get_product("p-0000"))

    def test_search(self):
        self.assertEqual(len(search_products("")), 10)
        self.assertEqual(
            [p.id for p in search_products("SCARF")], ["p-1001", "p-1006"]
        )
        # phrase misses, so each word is tried in turn
        self.assertEqual(
            [p.id for p in search_products("silk scarves")],
            ["p-1002", "p-1001", "p-1007"],
        )
        self.assertEqual(search_products("tuxedo"), [])
