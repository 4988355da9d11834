"""Opaque request references: provider prefix, base36 timestamp, random tail."""

from __future__ import annotations

import secrets
import string
import time

from .models import Provider

_ALPHABET = string.digits + string.ascii_uppercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_reference(provider: Provider | None = None, *, now_ms: int | None = None) -> str:
    prefix = provider.value[:2] if provider else "MM"
    timestamp = _base36(now_ms if now_ms is not None else time.time_ns() // 1_000_000)
    tail = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}{timestamp}{tail}"


def refund_reference(reference: str) -> str:
    return f"REFUND-{reference}"
