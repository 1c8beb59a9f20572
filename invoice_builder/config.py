"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


STORE_URL = env_str("INVOICE_STORE_URL", "http://localhost:5000").rstrip("/")
STORE_TIMEOUT_MS = env_int("INVOICE_STORE_TIMEOUT_MS", 10000, minimum=100)

ISSUER_NAME = env_str("INVOICE_ISSUER_NAME", "Company Name")

MAX_INFLIGHT_RENDERS = env_int("INVOICE_MAX_INFLIGHT_RENDERS", 32, minimum=1)
RENDER_QUEUE_TIMEOUT_MS = env_int("INVOICE_RENDER_QUEUE_TIMEOUT_MS", 5000, minimum=0)

MAX_BODY_BYTES = env_int("INVOICE_MAX_BODY_BYTES", 1024 * 1024, minimum=1024)
MAX_PAGES = env_int("INVOICE_MAX_PAGES", 500, minimum=1)
LISTEN_BACKLOG = env_int("INVOICE_LISTEN_BACKLOG", 128, minimum=1)
