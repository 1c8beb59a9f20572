import unittest
from unittest import mock

import requests

from invoice_builder.errors import FetchFailure, SubmissionFailure
from invoice_builder.store import InvoiceStoreClient

RECORD = {
    "_id": "65f0c0ffee",
    "customerName": "Jane Doe",
    "customerEmail": "jane@acme.io",
    "customerAddress": "1 Main St",
    "items": [{"description": "Widget", "quantity": 2, "price": 9.99}],
    "taxRate": 10,
    "subtotal": 19.98,
    "tax": 1.998,
    "total": 21.978,
    "createdAt": "2024-03-05T14:30:00.000Z",
}


def response(status: int, body: object = None, json_error: bool = False) -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if json_error:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = body
    return resp


class InvoiceStoreClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = InvoiceStoreClient("http://store.test/", timeout_ms=2500, session=self.session)

    def test_create_posts_payload_and_parses_record(self) -> None:
        self.session.post.return_value = response(201, RECORD)
        payload = {"customerName": "Jane Doe", "subtotal": 19.98}

        invoice = self.client.create(payload)

        self.session.post.assert_called_once_with(
            "http://store.test/api/invoices", json=payload, timeout=2.5
        )
        self.assertEqual(invoice.id, "65f0c0ffee")
        self.assertEqual(invoice.total, 21.978)

    def test_create_raises_on_error_status(self) -> None:
        self.session.post.return_value = response(500, {"message": "boom"})

        with self.assertRaises(SubmissionFailure):
            self.client.create({})

    def test_create_raises_on_transport_error(self) -> None:
        self.session.post.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(SubmissionFailure) as ctx:
            self.client.create({})
        self.assertEqual(str(ctx.exception), "Failed to save invoice")

    def test_create_raises_on_unreadable_body(self) -> None:
        self.session.post.return_value = response(201, json_error=True)

        with self.assertRaises(SubmissionFailure):
            self.client.create({})

    def test_create_raises_when_record_is_incomplete(self) -> None:
        self.session.post.return_value = response(201, {"customerName": "Jane Doe"})

        with self.assertRaises(SubmissionFailure):
            self.client.create({})

    def test_list_parses_records(self) -> None:
        self.session.get.return_value = response(200, [RECORD, dict(RECORD, _id="second")])

        invoices = self.client.list()

        self.session.get.assert_called_once_with("http://store.test/api/invoices", timeout=2.5)
        self.assertEqual([invoice.id for invoice in invoices], ["65f0c0ffee", "second"])

    def test_list_keeps_records_with_odd_stored_items(self) -> None:
        odd = dict(RECORD, _id="odd", items=[{"description": "", "quantity": 0.5, "price": 0}])
        self.session.get.return_value = response(200, [RECORD, odd])

        invoices = self.client.list()

        self.assertEqual([invoice.id for invoice in invoices], ["65f0c0ffee", "odd"])
        self.assertEqual(invoices[1].items[0].quantity, 0.5)

    def test_list_raises_on_non_array_body(self) -> None:
        self.session.get.return_value = response(200, {"invoices": []})

        with self.assertRaises(FetchFailure):
            self.client.list()

    def test_list_raises_on_error_status(self) -> None:
        self.session.get.return_value = response(503)

        with self.assertRaises(FetchFailure):
            self.client.list()

    def test_context_manager_closes_session(self) -> None:
        with self.client:
            pass

        self.session.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
