import unittest

from api.models import DashboardStats, MonthlyRevenue, Order
from fake_backend import order_json
from views.scr_dashboard import dashboard_markdown
from views.scr_orders import order_detail_markdown


class OrderDetailTestCase(unittest.TestCase):
    def test_placeholder_without_order(self):
        self.assertIn("Select an order", order_detail_markdown(None))

    def test_detail_lists_items_totals_and_history(self):
        order = Order.from_json(
            order_json(
                5,
                status="shipped",
                statusHistory=[
                    {"status": "ordered", "updatedAt": "2024-03-01T09:00:00Z"},
                    {
                        "status": "shipped",
                        "updatedAt": "2024-03-02T09:00:00Z",
                        "note": "Left the warehouse",
                    },
                ],
            )
        )

        md = order_detail_markdown(order)

        self.assertIn("### Order #ORD-0005", md)
        self.assertIn("**Shipped**", md)
        self.assertIn("| product | p1 | 2 | 5.00 | 10.00 |", md)
        self.assertIn("**Total:** $10.00", md)
        self.assertIn("Left the warehouse", md)


class DashboardMarkdownTestCase(unittest.TestCase):
    def test_from_order_list_only(self):
        orders = [
            Order.from_json(order_json(1, total=12.5)),
            Order.from_json(order_json(2, total=7.5, status="completed")),
        ]

        md = dashboard_markdown(None, orders)

        self.assertIn("$20.00", md)
        self.assertIn("Customers", md)
        self.assertIn("ORD-0002", md)
        self.assertNotIn("Monthly Revenue", md)

    def test_stats_take_precedence(self):
        stats = DashboardStats(
            total_orders=40,
            total_revenue=999.0,
            total_users=12,
            recent_orders=[Order.from_json(order_json(9))],
            monthly_revenue=[MonthlyRevenue(month="2024-03", revenue=999.0)],
        )

        md = dashboard_markdown(stats, [])

        self.assertIn("$999.00", md)
        self.assertIn("Total Users", md)
        # no order list: recent orders come from the stats payload
        self.assertIn("ORD-0009", md)
        self.assertIn("Monthly Revenue", md)
        self.assertIn("No sales in the last 7 days.", md)


if __name__ == "__main__":
    unittest.main()
