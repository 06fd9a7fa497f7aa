"""Debug logging utilities for the calendar server."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("py_calendar")
http_logger = logging.getLogger("py_calendar.http")


def is_json_content(content_type: str | None) -> bool:
    """Check if content type is JSON."""
    if not content_type:
        return False
    return "application/json" in content_type.lower()


def log_request(method: str, path: str, query: str, headers: dict[str, str]) -> None:
    """Log an incoming HTTP request.

    Args:
        method: HTTP method
        path: Request path
        query: Raw query string
        headers: Request headers
    """
    target = f"{path}?{query}" if query else path
    http_logger.info("=" * 80)
    http_logger.info(f">>> INCOMING REQUEST: {method} {target}")

    for header in ("Accept", "User-Agent", "If-None-Match"):
        value = headers.get(header.lower(), headers.get(header))
        if value:
            http_logger.info(f"  {header}: {value}")


def log_response(status_code: int, headers: dict[str, Any], body: bytes | None) -> None:
    """Log an outgoing HTTP response.

    JSON bodies are pretty-printed, other bodies are logged as a preview.
    """
    http_logger.info(f"<<< OUTGOING RESPONSE: {status_code}")

    content_type = headers.get("content-type", "")
    if content_type:
        http_logger.info(f"  Content-Type: {content_type}")

    if body:
        if is_json_content(content_type):
            try:
                formatted = json.dumps(json.loads(body), indent=2, ensure_ascii=False)
            except ValueError:
                formatted = body.decode("utf-8", errors="replace")
            for line in formatted.split("\n"):
                http_logger.info(f"  {line}")
        else:
            preview = body[:200].decode("utf-8", errors="replace")
            http_logger.info(f"  [{len(body)} bytes] {preview}")
            if len(body) > 200:
                http_logger.info(f"  ... ({len(body) - 200} more bytes)")

    http_logger.info("=" * 80)


def setup_debug_logging() -> None:
    """Configure debug logging for the calendar engine and server."""
    logger.setLevel(logging.DEBUG)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Message only, the helpers above format their own lines
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False
