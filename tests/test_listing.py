import unittest

from invoice_builder.listing import InvoiceIndex, InvoiceRow, format_table

from tests.fixtures import persisted_invoice


class FakeSource:
    def __init__(self, invoices: list) -> None:
        self.invoices = invoices
        self.calls = 0

    def list(self) -> list:
        self.calls += 1
        return list(self.invoices)


class InvoiceIndexTests(unittest.TestCase):
    def setUp(self) -> None:
        self.invoice = persisted_invoice([{"description": "Widget", "quantity": 2, "price": 9.99}])
        self.source = FakeSource([self.invoice])
        self.index = InvoiceIndex(self.source)

    def test_fetches_once_until_refreshed(self) -> None:
        self.index.invoices()
        self.index.invoices()
        self.assertEqual(self.source.calls, 1)

        self.index.refresh()
        self.assertEqual(self.source.calls, 2)

    def test_record_appends_to_cached_list(self) -> None:
        self.index.invoices()
        other = persisted_invoice([], _id="inv-2")

        self.index.record(other)

        self.assertEqual([invoice.id for invoice in self.index.invoices()], ["inv-1", "inv-2"])
        self.assertEqual(self.source.calls, 1)

    def test_rows_format_date_and_total(self) -> None:
        self.assertEqual(self.index.rows(), [InvoiceRow("inv-1", "3/5/2024", "Jane Doe", "$21.98")])

    def test_format_table_includes_header(self) -> None:
        table = format_table(self.index.rows()).splitlines()

        self.assertTrue(table[0].startswith("Invoice #"))
        self.assertIn("Jane Doe", table[1])
        self.assertTrue(table[1].endswith("$21.98"))


if __name__ == "__main__":
    unittest.main()
