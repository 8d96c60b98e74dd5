import numpy as np
import pandas as pd

from table_errors import ValidationError


def is_missing(value) -> bool:
    if value is None:
        return True
    try:
        result = pd.isna(value)
    except (TypeError, ValueError):
        return False
    return result is True or result is np.True_


def coerce_number(value):
    """Parse ``value`` into an int or float.

    Integral text such as ``"42"`` becomes an ``int``; anything float() accepts
    becomes a ``float``. Blank, non-numeric and non-finite input raises
    ValidationError.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Cannot coerce '{value}' to number")
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        if not np.isfinite(value):
            raise ValidationError(f"Cannot coerce '{value}' to number")
        return float(value)

    text = "" if value is None else str(value)
    stripped = text.strip()
    if stripped == "":
        raise ValidationError("Cannot coerce empty value to number")

    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        raise ValidationError(f"Cannot coerce '{text}' to number") from None
    if not np.isfinite(number):
        raise ValidationError(f"Cannot coerce '{text}' to number")
    return number


def coerce_cell_value(column_type: str, value):
    if column_type == "number":
        return coerce_number(value)
    return "" if value is None else str(value)


def format_cell_value(value) -> str:
    if is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
