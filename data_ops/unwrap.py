"""
Cell value decoding.

Table cells arrive as numpy/pandas scalars, timestamps, decimals or host
wrapper objects. Plotly JSON wants plain Python values, with missing
values as None.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import numpy as np
import pandas as pd

from errors import DecodeError


def unwrap_value(value: Any) -> Any:
    """Convert a raw cell value to a plain Python value.

    Raises:
        DecodeError: If the value has an unsupported type or cannot be converted.
    """
    if value is None or value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, (bool, str)):
        return value
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return float(value) if np.isfinite(value) else None
    if isinstance(value, Decimal):
        try:
            result = float(value)
        except (InvalidOperation, ValueError) as exc:
            raise DecodeError(f"Cannot convert decimal {value!r}") from exc
        return result if math.isfinite(result) else None
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return pd.Timestamp(value).isoformat()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Bytes value is not valid UTF-8: {value[:16]!r}") from exc
    if isinstance(value, (list, tuple, np.ndarray)):
        return [unwrap_value(item) for item in value]
    if callable(getattr(value, "value_of", None)):
        try:
            inner = value.value_of()
        except Exception as exc:
            raise DecodeError(f"Cannot unwrap {type(value).__name__}: {exc}") from exc
        return unwrap_value(inner)
    raise DecodeError(f"Unsupported cell value of type {type(value).__name__}")
