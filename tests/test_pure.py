import unittest
from datetime import date

from api.errors import ValidationError
from api.models import Order
from fake_backend import order_json
from utils.pure import (
    daily_sales,
    default_status_note,
    generate_markdown_table,
    matches_search,
    paginate_locally,
    parse_product_form,
    recent_orders,
    status_label,
    summarize_orders,
    total_pages,
    validate_login,
    validate_registration,
)


def order(n, **overrides) -> Order:
    return Order.from_json(order_json(n, **overrides))


class PaginationHelpersTestCase(unittest.TestCase):
    def test_total_pages(self):
        self.assertEqual(total_pages(0, 10), 0)
        self.assertEqual(total_pages(10, 10), 1)
        self.assertEqual(total_pages(11, 10), 2)
        with self.assertRaises(ValueError):
            total_pages(5, 0)

    def test_matches_search_on_nested_fields(self):
        o = order(7, customerInfo={"name": "Jane Roe", "email": "j@x.io"})
        fields = ("order_number", "customer_info.name")

        self.assertTrue(matches_search(o, "", fields))
        self.assertTrue(matches_search(o, "ord-0007", fields))
        self.assertTrue(matches_search(o, "  ROE ", fields))
        self.assertFalse(matches_search(o, "j@x.io", fields))
        self.assertFalse(matches_search(o, "jane", ("no_such_field",)))

    def test_paginate_locally(self):
        orders = [
            order(n, status="shipped" if n % 3 == 0 else "ordered")
            for n in range(1, 13)
        ]

        page, total = paginate_locally(orders, 2, 10)
        self.assertEqual(total, 12)
        self.assertEqual([o.order_number for o in page], ["ORD-0011", "ORD-0012"])

        page, total = paginate_locally(orders, 1, 10, status="shipped")
        self.assertEqual(total, 4)
        self.assertTrue(all(o.status == "shipped" for o in page))

        page, total = paginate_locally(
            orders, 1, 10, search="0012", search_fields=("order_number",)
        )
        self.assertEqual(total, 1)

        page, total = paginate_locally(orders, 5, 10)
        self.assertEqual((page, total), ([], 12))


class StatusHelpersTestCase(unittest.TestCase):
    def test_labels_and_notes(self):
        self.assertEqual(status_label("shipped"), "Shipped")
        self.assertEqual(default_status_note("completed"), "Status updated to Completed")


class FormChecksTestCase(unittest.TestCase):
    def test_validate_login(self):
        validate_login("ada@example.com", "pw")
        with self.assertRaises(ValidationError):
            validate_login("  ", "pw")
        with self.assertRaises(ValidationError):
            validate_login("ada@example.com", "")

    def test_validate_registration(self):
        validate_registration("Ada", "ada@example.com", "secret", "secret")
        cases = [
            (("", "a@b.c", "secret", "secret"), "Please fill in all fields"),
            (("Ada", "a@b.c", "secret", "secreT"), "Passwords do not match"),
            (
                ("Ada", "a@b.c", "short", "short"),
                "Password must be at least 6 characters long",
            ),
        ]
        for args, message in cases:
            with self.assertRaises(ValidationError) as ctx:
                validate_registration(*args)
            self.assertEqual(ctx.exception.message, message)

    def test_parse_product_form(self):
        payload = parse_product_form(
            name=" Tee ",
            price="19.5",
            category="shirts",
            stock="3",
            colors="red, blue,,",
            sizes="S,M",
            in_stock=False,
        )
        self.assertEqual(
            payload,
            {
                "name": "Tee",
                "description": "",
                "price": 19.5,
                "category": "shirts",
                "stock": 3,
                "colors": ["red", "blue"],
                "sizes": ["S", "M"],
                "inStock": False,
            },
        )

        with_image = parse_product_form("Tee", "1", "shirts", "1", image=" http://i ")
        self.assertEqual(with_image["image"], "http://i")

    def test_parse_product_form_rejects_bad_input(self):
        bad = [
            ("", "1", "shirts", "1"),
            ("Tee", "abc", "shirts", "1"),
            ("Tee", "1", "shirts", "1.5"),
            ("Tee", "-1", "shirts", "1"),
        ]
        for args in bad:
            with self.assertRaises(ValidationError):
                parse_product_form(*args)


class DashboardFiguresTestCase(unittest.TestCase):
    def setUp(self):
        self.orders = [
            order(1, total=10.0, createdAt="2024-03-01T09:00:00.000Z"),
            order(2, total=20.5, status="shipped", createdAt="2024-03-03T09:00:00Z"),
            order(
                3,
                total=5.0,
                status="completed",
                createdAt="2024-03-03T18:00:00Z",
                customerInfo={"name": "Customer 1", "email": "c1@example.com"},
            ),
            order(4, total=1.0, createdAt=""),
        ]

    def test_summarize_orders(self):
        summary = summarize_orders(self.orders)
        self.assertEqual(summary["total_revenue"], 36.5)
        self.assertEqual(summary["total_orders"], 4)
        self.assertEqual(summary["pending_orders"], 2)
        self.assertEqual(summary["shipped_orders"], 1)
        self.assertEqual(summary["completed_orders"], 1)
        # orders 1 and 3 share an email
        self.assertEqual(summary["unique_customers"], 3)

    def test_recent_orders(self):
        latest = recent_orders(self.orders, k=2)
        self.assertEqual([o.id for o in latest], ["o3", "o2"])
        self.assertEqual(recent_orders(self.orders, k=10)[-1].id, "o4")

    def test_daily_sales(self):
        self.assertEqual(
            daily_sales(self.orders),
            [(date(2024, 3, 1), 10.0, 1), (date(2024, 3, 3), 25.5, 2)],
        )
        self.assertEqual(daily_sales(self.orders, days=1), [(date(2024, 3, 3), 25.5, 2)])


class MarkdownTableTestCase(unittest.TestCase):
    def test_table(self):
        md = generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | x |")

    def test_first_row_as_header(self):
        md = generate_markdown_table(None, [["Name", "Ada"], ["Role", "admin"]])
        self.assertTrue(md.startswith("| Name | Ada |"))

    def test_empty(self):
        self.assertEqual(generate_markdown_table(["A"], []), "")


if __name__ == "__main__":
    unittest.main()
