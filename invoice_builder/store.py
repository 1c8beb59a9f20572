"""HTTP client for the remote invoice store."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from .config import STORE_TIMEOUT_MS, STORE_URL
from .errors import FetchFailure, SubmissionFailure
from .models import PersistedInvoice, parse_persisted_invoice

logger = logging.getLogger(__name__)

INVOICES_PATH = "/api/invoices"


class InvoiceStoreClient:
    """Creates and lists invoices through the store's ``/api/invoices`` endpoint."""

    def __init__(
        self,
        base_url: str = STORE_URL,
        *,
        timeout_ms: int = STORE_TIMEOUT_MS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000.0
        self.session = session if session is not None else requests.Session()

    @property
    def invoices_url(self) -> str:
        return f"{self.base_url}{INVOICES_PATH}"

    def create(self, payload: Mapping[str, Any]) -> PersistedInvoice:
        try:
            response = self.session.post(self.invoices_url, json=dict(payload), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Invoice store unreachable at %s: %s", self.invoices_url, exc)
            raise SubmissionFailure("Failed to save invoice") from exc

        if not response.ok:
            logger.error("Invoice store rejected create request: HTTP %s", response.status_code)
            raise SubmissionFailure(f"Failed to save invoice (HTTP {response.status_code})")

        try:
            invoice = parse_persisted_invoice(response.json())
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.error("Invoice store returned an unreadable invoice: %s", exc)
            raise SubmissionFailure("Failed to save invoice: unexpected response body") from exc

        logger.info("Saved invoice %s for %s", invoice.id, invoice.customer_name)
        return invoice

    def list(self) -> List[PersistedInvoice]:
        try:
            response = self.session.get(self.invoices_url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Invoice store unreachable at %s: %s", self.invoices_url, exc)
            raise FetchFailure("Failed to fetch invoices") from exc

        if not response.ok:
            logger.error("Invoice store rejected list request: HTTP %s", response.status_code)
            raise FetchFailure(f"Failed to fetch invoices (HTTP {response.status_code})")

        try:
            body = response.json()
            if not isinstance(body, list):
                raise TypeError("expected a JSON array")
            invoices = [parse_persisted_invoice(record) for record in body]
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.error("Invoice store returned an unreadable invoice list: %s", exc)
            raise FetchFailure("Failed to fetch invoices: unexpected response body") from exc

        logger.debug("Fetched %d invoices", len(invoices))
        return invoices

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "InvoiceStoreClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

