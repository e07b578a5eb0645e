"""Input sanitizing for calculator fields."""

from __future__ import annotations

import logging
import math
from typing import Optional

logger = logging.getLogger(__name__)


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _parse(raw: object) -> Optional[float]:
    """Return raw as a finite float, or None if it isn't one."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def coerce_number(raw: object, default: float = 0.0) -> float:
    """Parse a free-form number box; anything unusable becomes ``default``."""
    value = _parse(raw)
    return default if value is None else value


class LastGoodValue:
    """Holds the most recent positive, finite value offered to it.

    Bad candidates (non-numeric, non-finite, zero or negative) are dropped and
    the previous value is kept, so callers always get something usable back.
    """

    def __init__(self, initial: float):
        value = _parse(initial)
        if value is None or value <= 0:
            raise ValueError(f"initial value must be positive and finite, got {initial!r}")
        self._value = value

    @property
    def value(self) -> float:
        return self._value

    def offer(self, raw: object) -> float:
        candidate = _parse(raw)
        if candidate is None or candidate <= 0:
            if raw is not None:
                logger.debug("Ignoring override %r; keeping %s", raw, self._value)
            return self._value
        self._value = candidate
        return self._value
