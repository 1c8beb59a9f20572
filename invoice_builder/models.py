"""Invoice data model: line items, drafts and persisted invoices."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Tuple

from dateutil import parser as dateutil_parser
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import FieldError, ValidationError

DEFAULT_TAX_RATE = 10.0

# Messages shown next to the offending form field, keyed by wire and attribute name.
FIELD_MESSAGES = {
    "customerName": "Customer name is required",
    "customerEmail": "Invalid email address",
    "customerAddress": "Address is required",
    "items": "At least one item is required",
    "description": "Description is required",
    "quantity": "Quantity must be greater than 0",
    "price": "Price must be greater than 0",
    "taxRate": "Tax rate must be between 0 and 100",
}
FIELD_MESSAGES.update(
    {
        "customer_name": FIELD_MESSAGES["customerName"],
        "customer_email": FIELD_MESSAGES["customerEmail"],
        "customer_address": FIELD_MESSAGES["customerAddress"],
        "unitPrice": FIELD_MESSAGES["price"],
        "unit_price": FIELD_MESSAGES["price"],
        "taxRatePercent": FIELD_MESSAGES["taxRate"],
        "tax_rate": FIELD_MESSAGES["taxRate"],
    }
)

_PRICE_ALIASES = AliasChoices("price", "unitPrice", "unit_price")
_TAX_RATE_ALIASES = AliasChoices("taxRate", "taxRatePercent", "tax_rate")


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class StoredLineItem(_WireModel):
    """Line item as kept by the store; only field types are checked."""

    description: str = ""
    quantity: float = 0.0
    unit_price: float = Field(
        0.0,
        validation_alias=_PRICE_ALIASES,
        serialization_alias="price",
    )

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class LineItem(StoredLineItem):
    description: str = Field(min_length=1)
    quantity: float = Field(ge=1, allow_inf_nan=False)
    unit_price: float = Field(
        ge=0.01,
        allow_inf_nan=False,
        validation_alias=_PRICE_ALIASES,
        serialization_alias="price",
    )


class InvoiceDraft(_WireModel):
    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_address: str = Field(min_length=1)
    items: List[LineItem] = Field(min_length=1)
    tax_rate: float = Field(
        DEFAULT_TAX_RATE,
        ge=0,
        le=100,
        allow_inf_nan=False,
        validation_alias=_TAX_RATE_ALIASES,
        serialization_alias="taxRate",
    )

    def add_item(self, item: LineItem) -> None:
        self.items.append(item)

    def remove_item(self, index: int) -> LineItem:
        """Remove and return the item at ``index``; the last item cannot be removed."""
        if len(self.items) <= 1:
            raise ValueError("An invoice draft must keep at least one item.")
        return self.items.pop(index)


class PersistedInvoice(_WireModel):
    """Invoice record as returned by the remote store."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    customer_name: str
    customer_email: str
    customer_address: str
    items: Tuple[StoredLineItem, ...] = ()
    tax_rate: float = Field(
        validation_alias=_TAX_RATE_ALIASES,
        serialization_alias="taxRate",
    )
    subtotal: float
    tax: float
    total: float
    created_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return dateutil_parser.parse(value.strip())
            except (ValueError, OverflowError) as exc:
                raise ValueError(f"Unrecognised timestamp: {value!r}") from exc
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def _field_path(loc: Tuple[Any, ...]) -> str:
    if not loc:
        return "draft"
    return ".".join(str(part) for part in loc)


def _field_message(loc: Tuple[Any, ...], fallback: str) -> str:
    for part in reversed(loc):
        if isinstance(part, str):
            return FIELD_MESSAGES.get(part, fallback)
    return fallback


def field_errors(exc: PydanticValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    seen = set()
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        path = _field_path(loc)
        if path in seen:
            continue
        seen.add(path)
        errors.append(FieldError(path, _field_message(loc, error.get("msg", "Invalid value"))))
    return errors


def validate_draft(data: Mapping[str, Any]) -> InvoiceDraft:
    """Build an :class:`InvoiceDraft` from raw form data or raise ``ValidationError``."""
    try:
        return InvoiceDraft.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from exc


def parse_persisted_invoice(data: Mapping[str, Any]) -> PersistedInvoice:
    return PersistedInvoice.model_validate(data)


def draft_payload(draft: InvoiceDraft) -> Dict[str, Any]:
    return draft.model_dump(mode="json", by_alias=True)
