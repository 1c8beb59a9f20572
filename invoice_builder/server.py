"""HTTP server entrypoints for invoice totals and document rendering."""

from __future__ import annotations

import errno
import json
import sys
import threading
import traceback
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .config import (
    LISTEN_BACKLOG,
    MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG,
    MAX_INFLIGHT_RENDERS,
    MAX_PAGES as MAX_PAGES_CONFIG,
    RENDER_QUEUE_TIMEOUT_MS,
)
from .errors import ValidationError
from .layout import LayoutConfig, default_layout
from .models import PersistedInvoice, field_errors, parse_persisted_invoice, validate_draft
from .pagination import estimate_page_count, max_items_for_pages
from .totals import calculate_totals

RENDER_INFLIGHT_SEMAPHORE = threading.BoundedSemaphore(MAX_INFLIGHT_RENDERS)
ErrorResponse = Tuple[int, Dict[str, Any]]

DISCONNECT_ERRNOS = {
    errno.EPIPE,
    errno.ECONNRESET,
    errno.ETIMEDOUT,
}


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def load_renderer():
    try:
        from .rendering import DocumentRenderer
    except ModuleNotFoundError as exc:
        if exc.name == "fpdf":
            raise DependencyError(
                "Missing dependency 'fpdf2'. Install the project with 'pip install .'."
            ) from exc
        raise
    return DocumentRenderer


def decode_json_object(body: bytes) -> Tuple[Optional[Dict[str, Any]], Optional[ErrorResponse]]:
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, (
            400,
            {"error": "invalid_encoding", "detail": "Body must be UTF-8 encoded JSON."},
        )
    except json.JSONDecodeError as exc:
        return None, (
            400,
            {
                "error": "invalid_json",
                "detail": f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            },
        )

    if not isinstance(payload, dict):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "JSON root must be an object."},
        )
    return payload, None


def validate_totals_payload(body: bytes) -> Tuple[Optional[Dict[str, float]], Optional[ErrorResponse]]:
    payload, error = decode_json_object(body)
    if error is not None:
        return None, error

    try:
        draft = validate_draft(payload)
    except ValidationError as exc:
        return None, (
            400,
            {"error": "validation_failed", "detail": str(exc), "fields": exc.as_payload()},
        )

    return calculate_totals(draft.items, draft.tax_rate).as_payload(), None


def validate_invoice_payload(
    body: bytes,
    max_pages: int,
    layout: LayoutConfig,
) -> Tuple[Optional[PersistedInvoice], Optional[ErrorResponse]]:
    payload, error = decode_json_object(body)
    if error is not None:
        return None, error

    items = payload.get("items", [])
    if items is None:
        payload["items"] = items = []
    if not isinstance(items, list):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "'items' must be an array."},
        )

    estimated_pages = estimate_page_count(len(items), layout)
    if estimated_pages > max_pages:
        return None, (
            413,
            {
                "error": "invoice_too_large",
                "detail": f"Invoice would render {estimated_pages} pages; maximum is {max_pages}.",
                "max_items": max_items_for_pages(max_pages, layout),
            },
        )

    try:
        invoice = parse_persisted_invoice(payload)
    except PydanticValidationError as exc:
        errors = field_errors(exc)
        return None, (
            400,
            {
                "error": "invalid_payload",
                "detail": "Body is not a stored invoice record.",
                "fields": [item.as_dict() for item in errors],
            },
        )

    return invoice, None


class InvoiceHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG
    MAX_PAGES = MAX_PAGES_CONFIG
    LAYOUT = default_layout()

    def _write_response(
        self,
        status: int,
        content_type: str,
        body: bytes,
        headers: Optional[Dict[str, str]] = None,
    ) -> bool:
        try:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            for name, value in (headers or {}).items():
                self.send_header(name, value)
            self.end_headers()
            self.wfile.write(body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        body = json.dumps(payload).encode("utf-8")
        return self._write_response(status, "application/json", body)

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            self._send_json(
                411,
                {
                    "error": "missing_content_length",
                    "detail": "Content-Length header is required.",
                },
            )
            return None

        try:
            content_length = int(header)
        except ValueError:
            self._send_json(
                400,
                {
                    "error": "invalid_content_length",
                    "detail": "Content-Length must be an integer.",
                },
            )
            return None

        if content_length <= 0:
            self._send_json(400, {"error": "empty_body", "detail": "Request body cannot be empty."})
            return None

        if content_length > self.MAX_BODY_BYTES:
            self._send_json(
                413,
                {
                    "error": "payload_too_large",
                    "detail": f"Body exceeds {self.MAX_BODY_BYTES} bytes.",
                },
            )
            return None

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def _handle_totals(self, body: bytes) -> None:
        totals, error = validate_totals_payload(body)
        if error is not None:
            status, payload_body = error
            self._send_json(status, payload_body)
            return
        self._send_json(200, totals)

    def _handle_render(self, body: bytes) -> None:
        invoice, error = validate_invoice_payload(body, self.MAX_PAGES, self.LAYOUT)
        if error is not None:
            status, payload_body = error
            self._send_json(status, payload_body)
            return

        acquired = RENDER_INFLIGHT_SEMAPHORE.acquire(timeout=RENDER_QUEUE_TIMEOUT_MS / 1000.0)
        if not acquired:
            retry_after_seconds = max(1, (RENDER_QUEUE_TIMEOUT_MS + 999) // 1000)
            self._send_json(
                503,
                {
                    "error": "server_busy",
                    "detail": "Render queue is full; retry shortly.",
                    "retry_after_ms": RENDER_QUEUE_TIMEOUT_MS,
                    "retry_after_seconds": retry_after_seconds,
                    "max_inflight_renders": MAX_INFLIGHT_RENDERS,
                },
            )
            return

        try:
            document = load_renderer()(self.LAYOUT).render(invoice)
            pdf_bytes = document.to_pdf()
        except Exception as exc:
            traceback.print_exc(file=sys.stderr)
            self._send_json(500, {"error": "render_failed", "detail": str(exc)})
            return
        finally:
            RENDER_INFLIGHT_SEMAPHORE.release()

        self._write_response(
            200,
            "application/pdf",
            pdf_bytes,
            headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
        )

    def do_POST(self) -> None:
        if self.path == "/totals":
            handler = self._handle_totals
        elif self.path in ("/", "/invoice", "/render"):
            handler = self._handle_render
        else:
            self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})
            return

        body = self._read_body()
        if body is None:
            return
        handler(body)

    def do_GET(self) -> None:
        if self.path in ("/", "/health", "/healthz", "/ready"):
            self._send_json(200, {"status": "ok"})
            return
        self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        return


class InvoiceHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    load_renderer()
    server = InvoiceHTTPServer((host, port), InvoiceHandler)
    print(f"Invoice API server listening on http://{host}:{port}")
    server.serve_forever()
