"""
Type Conversion Utilities for Snapshot Inputs

Safe conversion functions for values that arrive from configuration,
environment variables, CLI arguments and upstream JSON payloads. These
utilities handle null and garbage values gracefully instead of raising.

Usage:
    ```python
    from domain.converters import coerce_region_id, parse_region_ids, safe_float

    region_id = coerce_region_id(row.get('region_id'))  # None if invalid
    hubs = parse_region_ids("10000002, 10000043")       # [10000002, 10000043]
    price = safe_float(quote.get('price'))              # 0.0 if null
    ```
"""

import math
from typing import Iterable, Optional, Union

import pandas as pd


def coerce_region_id(value) -> Optional[int]:
    """
    Coerce a value to a positive integer region ID.

    Strings are stripped and parsed numerically. Zero, negative, non-numeric
    and non-integral values all return None.

    Examples:
        >>> coerce_region_id("10000002")
        10000002
        >>> coerce_region_id(10000043.0)
        10000043
        >>> coerce_region_id("abc") is None
        True
        >>> coerce_region_id(0) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if pd.isna(number) or number <= 0 or not number.is_integer():
        return None
    return int(number)


def parse_region_ids(raw: Union[str, Iterable, None]) -> list[int]:
    """
    Parse a comma separated string (or any iterable) into region IDs.

    Invalid entries are dropped; input order is preserved and duplicates
    are kept, since callers such as the health audit report exactly what
    was asked for.

    Args:
        raw: "10000002,10000043" style string, an iterable of values, or None

    Returns:
        List of valid region IDs
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    region_ids = []
    for item in items:
        region_id = coerce_region_id(item)
        if region_id is not None:
            region_ids.append(region_id)
    return region_ids


def safe_float(value, default: float = 0.0) -> float:
    """
    Convert value to float, returning default if null, invalid or infinite.

    Examples:
        >>> safe_float("4.5")
        4.5
        >>> safe_float(None)
        0.0
    """
    if value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if pd.isna(result) or not math.isfinite(result):
        return default
    return result
