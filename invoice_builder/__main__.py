"""Command line entrypoint: run the API server or submit, list and render invoices."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import ExportFailure, StoreError, ValidationError
from .server import DependencyError


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _cmd_serve(args: argparse.Namespace) -> int:
    from .server import run

    run(args.host, args.port)
    return 0


def _cmd_submit(args: argparse.Namespace) -> int:
    from .export import DirectorySink
    from .store import InvoiceStoreClient
    from .workflow import submit_invoice

    sink = DirectorySink(args.out)
    with InvoiceStoreClient(args.store_url) as store:
        result = submit_invoice(_load_json(args.draft), store, sink)
    print(f"Saved invoice {result.invoice.id} to {sink.last_path}")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    from .listing import InvoiceIndex, format_table
    from .store import InvoiceStoreClient

    with InvoiceStoreClient(args.store_url) as store:
        print(format_table(InvoiceIndex(store).rows()))
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    from .export import DirectorySink
    from .models import field_errors, parse_persisted_invoice
    from .rendering import render_invoice

    try:
        invoice = parse_persisted_invoice(_load_json(args.invoice))
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from exc
    document = render_invoice(invoice)
    sink = DirectorySink(args.out)
    sink.save(document.to_pdf(), document.filename)
    print(f"Wrote {sink.last_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    from .config import STORE_URL

    parser = argparse.ArgumentParser(prog="invoice_builder", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the invoice API server.")
    serve.add_argument("--host", default=os.getenv("INVOICE_HOST", "0.0.0.0"))
    serve.add_argument("--port", type=int, default=int(os.getenv("INVOICE_PORT", "8080")))
    serve.set_defaults(handler=_cmd_serve)

    submit = commands.add_parser("submit", help="Save a draft to the store and export its PDF.")
    submit.add_argument("draft", help="Path to an invoice draft JSON file.")
    submit.add_argument("--out", type=Path, default=Path("."), help="Directory for the PDF.")
    submit.add_argument("--store-url", default=STORE_URL)
    submit.set_defaults(handler=_cmd_submit)

    listing = commands.add_parser("list", help="List invoices held by the store.")
    listing.add_argument("--store-url", default=STORE_URL)
    listing.set_defaults(handler=_cmd_list)

    render = commands.add_parser("render", help="Render a stored invoice JSON file to PDF.")
    render.add_argument("invoice", help="Path to a stored invoice JSON file.")
    render.add_argument("--out", type=Path, default=Path("."), help="Directory for the PDF.")
    render.set_defaults(handler=_cmd_render)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if getattr(args, "handler", None) is None:
        args = parser.parse_args([*argv, "serve"])

    try:
        return args.handler(args)
    except ValidationError as exc:
        for error in exc.errors:
            print(f"{error.field}: {error.message}", file=sys.stderr)
        return 1
    except (StoreError, DependencyError, ExportFailure) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{exc.filename or 'file'}: {exc.strerror or exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
