import unittest

from invoice_builder.models import LineItem
from invoice_builder.totals import calculate_totals, compute_subtotal, compute_tax, compute_total


def item(description: str, quantity: float, price: float) -> LineItem:
    return LineItem(description=description, quantity=quantity, unit_price=price)


class TotalsTests(unittest.TestCase):
    def test_single_item_with_ten_percent_tax(self) -> None:
        totals = calculate_totals([item("Widget", 2, 9.99)], 10)

        self.assertAlmostEqual(totals.subtotal, 19.98, places=9)
        self.assertAlmostEqual(totals.tax, 1.998, places=9)
        self.assertAlmostEqual(totals.total, 21.978, places=9)

    def test_zero_tax_rate(self) -> None:
        totals = calculate_totals([item("A", 1, 10.00), item("B", 3, 5.00)], 0)

        self.assertEqual(totals.subtotal, 25.0)
        self.assertEqual(totals.tax, 0.0)
        self.assertEqual(totals.total, 25.0)

    def test_empty_items_subtotal_is_zero(self) -> None:
        self.assertEqual(compute_subtotal([]), 0)

    def test_subtotal_ignores_item_order(self) -> None:
        items = [item("A", 3, 0.1), item("B", 1, 0.2), item("C", 7, 19.99), item("D", 2, 0.3)]

        self.assertEqual(compute_subtotal(items), compute_subtotal(list(reversed(items))))
        self.assertEqual(compute_subtotal(items), compute_subtotal(items[2:] + items[:2]))

    def test_tax_is_linear(self) -> None:
        self.assertEqual(compute_tax(2 * 123.45, 7.5), 2 * compute_tax(123.45, 7.5))
        self.assertEqual(compute_tax(123.45, 0), 0)
        self.assertEqual(compute_tax(123.45, 100), 123.45)

    def test_tax_does_not_reject_out_of_range_rates(self) -> None:
        self.assertEqual(compute_tax(10.0, 150), 15.0)

    def test_total_is_exact_sum(self) -> None:
        self.assertEqual(compute_total(19.98, 1.998), 19.98 + 1.998)

    def test_totals_are_not_rounded(self) -> None:
        totals = calculate_totals([item("Widget", 2, 9.99)], 10)

        self.assertNotEqual(totals.tax, round(totals.tax, 2))
        self.assertEqual(
            totals.as_payload(),
            {"subtotal": totals.subtotal, "tax": totals.tax, "total": totals.total},
        )


if __name__ == "__main__":
    unittest.main()
