"""Exceptions raised while validating, submitting and listing invoices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class ValidationError(ValueError):
    """Raised when a draft does not satisfy the invoice form schema."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors: List[FieldError] = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(summary or "Invalid invoice draft")

    def as_payload(self) -> List[Dict[str, Any]]:
        return [error.as_dict() for error in self.errors]


class StoreError(RuntimeError):
    """Base class for failures talking to the remote invoice store."""


class SubmissionFailure(StoreError):
    """The store rejected a create request or did not answer it."""


class FetchFailure(StoreError):
    """The store could not return the invoice list."""


class ExportFailure(RuntimeError):
    """The document could not be produced or handed to the export sink.

    ``invoice`` is set when the store had already saved the record.
    """

    def __init__(self, message: str, invoice: Optional[Any] = None) -> None:
        super().__init__(message)
        self.invoice = invoice
