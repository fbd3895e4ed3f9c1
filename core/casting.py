from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any, default: float = math.nan) -> float:
    """Coerce value to float, returning default for missing or non-numeric input.

    The default is NaN so that a malformed coordinate flows through the
    distance math silently instead of raising.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
