"""Validation and masking helpers for webhook URLs."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit


def is_webhook_url(url: Any) -> bool:
    """Return True if url is an absolute http(s) URL with a host."""
    if not isinstance(url, str):
        return False
    parts = urlsplit(url.strip())
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def mask_webhook_url(url: str | None) -> str:
    """Return a webhook URL safe for logging (token path hidden).

    e.g. https://hooks.slack.com/services/T000/B000/XXXX -> https://hooks.slack.com/***
    """
    if not url:
        return "***"
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return "***"
    return f"{parts.scheme}://{parts.netloc}/***"
