"""One-shot reference price lookup with a static fallback."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import requests

from lifespan import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    asset: str
    price: float
    source: str  # "live" or "fallback"
    last_updated_at: Optional[int] = None
    warning: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class PriceFetchError(Exception):
    """The quote endpoint answered with something unusable."""


def _fallback(asset: str, fallback_price: float, reason: str) -> PriceQuote:
    warning = (
        f"Live {asset} price unavailable ({reason}); "
        f"using fallback price of ${fallback_price:,.2f}."
    )
    logger.warning(warning)
    return PriceQuote(asset=asset, price=fallback_price, source="fallback", warning=warning)


def parse_quote(payload: object, asset: str) -> tuple[float, Optional[int]]:
    """Pull ``{asset: {usd, last_updated_at}}`` out of a quote payload."""
    if not isinstance(payload, dict):
        raise PriceFetchError("response is not a JSON object")
    entry = payload.get(asset)
    if not isinstance(entry, dict):
        raise PriceFetchError(f"response has no '{asset}' entry")

    price = entry.get("usd")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise PriceFetchError("price is missing or not a number")
    if not math.isfinite(price) or price <= 0:
        raise PriceFetchError(f"price {price!r} is not positive")

    updated = entry.get("last_updated_at")
    if isinstance(updated, bool) or not isinstance(updated, (int, float)):
        updated = None
    elif not math.isfinite(updated):
        # the timestamp is informational; a bad one doesn't void the price
        updated = None
    return float(price), int(updated) if updated is not None else None


def fetch_reference_price(
    asset: str = config.PRICE_ASSET,
    *,
    url: str = config.PRICE_URL,
    fallback_price: float = config.FALLBACK_PRICE,
    timeout: float = config.PRICE_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> PriceQuote:
    """
    Ask the quote endpoint for the asset's USD price, once.

    Never raises: a transport error, non-OK status, malformed payload or
    non-positive price all yield the fallback price plus a warning string.
    """
    http = session or requests
    params = {"ids": asset, "vs_currencies": "usd", "include_last_updated_at": "true"}

    try:
        response = http.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        price, updated = parse_quote(response.json(), asset)
    except requests.exceptions.JSONDecodeError as exc:
        return _fallback(asset, fallback_price, f"invalid JSON: {exc}")
    except requests.RequestException as exc:
        return _fallback(asset, fallback_price, f"request failed: {exc}")
    except PriceFetchError as exc:
        return _fallback(asset, fallback_price, str(exc))

    logger.info("Fetched %s price: $%.2f", asset, price)
    return PriceQuote(asset=asset, price=price, source="live", last_updated_at=updated)
