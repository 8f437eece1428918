"""
app/importers/values.py

Text decoding and scalar coercion shared by all plan parsers.
"""

from __future__ import annotations

import math
from typing import Any

from app.errors import PlanParseError


def decode_plan_text(content: bytes, *, fallback_encoding: str | None = None) -> str:
    """
    Decode uploaded bytes as UTF-8 (BOM tolerated), then the fallback encoding.
    """

    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        if not fallback_encoding:
            raise PlanParseError("File must be UTF-8 encoded.") from exc
        try:
            return content.decode(fallback_encoding)
        except (UnicodeDecodeError, LookupError) as fallback_exc:
            raise PlanParseError(
                f"File is neither UTF-8 nor {fallback_encoding} encoded."
            ) from fallback_exc


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_number(value: Any) -> bool:
    raw = clean_text(value)
    try:
        return math.isfinite(float(raw))
    except ValueError:
        return False


def parse_number(value: Any, default: float = 0.0) -> float:
    """
    Parse a finite float; blank, non-numeric, NaN and infinite values yield default.
    """

    raw = clean_text(value)
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    if not math.isfinite(parsed):
        return default
    return parsed


def number_or_default(value: Any, default: float) -> float:
    """
    Like parse_number, but an explicit zero also falls back to the default.

    Used where a format has no true quantity and zero carries no meaning.
    """

    parsed = parse_number(value, 0.0)
    return parsed if parsed != 0 else default
