from datetime import datetime, timezone
from typing import Any, Dict, List

from invoice_builder.models import PersistedInvoice, StoredLineItem

CREATED_AT = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


def draft_data(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "customerName": "Jane Doe",
        "customerEmail": "jane@acme.io",
        "customerAddress": "1 Main St, Springfield",
        "items": [{"description": "Widget", "quantity": 2, "price": 9.99}],
        "taxRate": 10,
    }
    data.update(overrides)
    return data


def persisted_invoice(items: List[Dict[str, Any]], tax_rate: float = 10, **overrides: Any) -> PersistedInvoice:
    line_items = [StoredLineItem.model_validate(item) for item in items]
    subtotal = sum(item.quantity * item.unit_price for item in line_items)
    tax = subtotal * (tax_rate / 100)
    data: Dict[str, Any] = {
        "_id": "inv-1",
        "customerName": "Jane Doe",
        "customerEmail": "jane@acme.io",
        "customerAddress": "1 Main St, Springfield",
        "items": items,
        "taxRate": tax_rate,
        "subtotal": subtotal,
        "tax": tax,
        "total": subtotal + tax,
        "createdAt": CREATED_AT,
    }
    data.update(overrides)
    return PersistedInvoice.model_validate(data)
