"""Opt-in logging of outgoing API requests (KW_LOG_REQUESTS=true)."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

LOG_REQUESTS_ENV = "KW_LOG_REQUESTS"
_SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def should_log_requests() -> bool:
    """Check if request logging is enabled via the environment."""
    return os.getenv(LOG_REQUESTS_ENV, "").lower() == "true"


def _url_with_params(url: str, params: dict[str, Any] | None) -> str:
    if not params:
        return url
    query = "&".join(f"{key}={value}" for key, value in sorted(params.items()))
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def _redact(headers: dict[str, str]) -> dict[str, str]:
    return {
        key: "***REDACTED***" if key.lower() in _SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def _format_payload(payload: Any) -> str:
    if isinstance(payload, dict):
        try:
            return json.dumps(payload, indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            pass
    return str(payload)


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: Any = None,
) -> None:
    """Log an outgoing request when request logging is enabled.

    Args:
        method: HTTP method.
        url: Request URL.
        params: Query parameters.
        headers: Request headers; sensitive values are redacted.
        payload: Request body, e.g. a GraphQL query with variables.
    """
    if not should_log_requests():
        return

    parts = [f"{method} {_url_with_params(url, params)}"]
    if headers:
        parts.append(f"Headers: {json.dumps(_redact(headers), indent=2)}")
    if payload is not None:
        parts.append(f"Payload: {_format_payload(payload)}")
    logger.info("API Request:\n" + "\n".join(parts))
