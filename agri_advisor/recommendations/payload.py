"""
Defensive accessors for opaque ``AnalysisResult.data`` payloads.

Payloads arrive from the store exactly as the analysis tools wrote them, so
any field may be missing, null, or of the wrong type. Every accessor returns
``None`` (or an empty container) instead of raising; extractors treat that as
"rule does not fire".

Booleans are never accepted as numbers even though ``bool`` subclasses
``int`` in Python.
"""

from __future__ import annotations

import math
from typing import Any, Optional


def number(data: dict[str, Any], key: str) -> Optional[float]:
    """Return ``data[key]`` as a finite float, or ``None``."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        # JSON integers are unbounded; anything past float range is unusable.
        return None
    return value if math.isfinite(value) else None


def text(data: dict[str, Any], key: str, default: str) -> str:
    """Return ``data[key]`` if it is a non-empty string, else ``default``."""
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


def mapping(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``data[key]`` if it is a dict, else an empty dict."""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def records(data: dict[str, Any], key: str) -> Optional[list[dict[str, Any]]]:
    """Return the dict entries of list ``data[key]``, or ``None`` if not a list.

    Non-dict entries inside the list are dropped.
    """
    value = data.get(key)
    if not isinstance(value, list):
        return None
    return [entry for entry in value if isinstance(entry, dict)]


def numbers(entries: list[dict[str, Any]], key: str) -> list[float]:
    """Collect ``entry[key]`` across entries, skipping non-numeric values."""
    result: list[float] = []
    for entry in entries:
        value = number(entry, key)
        if value is not None:
            result.append(value)
    return result


def pct(ratio: float) -> str:
    """Render a ratio as a percentage with one decimal, e.g. ``0.312 -> '31.2%'``."""
    return f"{ratio * 100:.1f}%"
