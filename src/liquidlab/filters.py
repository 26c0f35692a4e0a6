"""Template filters: asset_url, img_url, handle, money."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

ASSETS_PATH = "/assets/"

_NON_HANDLE = re.compile(r"[^A-Za-z0-9_\u00c0-\u024f]+")
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def handleize(value: Any) -> Any:
    """Slug a string: "Foo Bar!!" -> "foo-bar". Falsy values pass through."""
    if not value:
        return value
    return _NON_HANDLE.sub("-", str(value).lower()).strip("-")


def asset_url(value: Any) -> str:
    return f"{ASSETS_PATH}{value}"


def img_url(value: Any) -> Any:
    """Return the ``src`` of an image object, or the value itself."""
    if isinstance(value, Mapping):
        return value.get("src")
    return value


def _parse_float(value: Any) -> float:
    # same leniency as JavaScript's parseFloat: "12.5abc" -> 12.5
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    m = _LEADING_NUMBER.match(str(value))
    return float(m.group(1)) if m else math.nan


def _format_number(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def money(value: Any) -> Any:
    """Format an amount in cents: 500 -> "$5", 1999 -> "$19.99"."""
    if not value:
        return value
    return f"${_format_number(_parse_float(value) / 100)}"


FILTERS = {
    "asset_url": asset_url,
    "img_url": img_url,
    "handle": handleize,
    "money": money,
}
