"""Application factory and app-wide configuration."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from lifespan.app.api.routes import api_bp
from lifespan.config import default_settings
from lifespan.core.inputs import coerce_number
from lifespan.core.price import PriceQuote, fetch_reference_price

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    # basicConfig is a no-op when the host (gunicorn, pytest) already set up handlers
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("lifespan").setLevel(level)


def _fallback_price(app: Flask) -> float:
    raw = app.config["FALLBACK_PRICE"]
    price = coerce_number(raw, default=-1.0)
    if price <= 0:
        raise ValueError(f"FALLBACK_PRICE must be a positive, finite number, got {raw!r}")
    return price


def _load_reference_price(app: Flask) -> PriceQuote:
    asset = app.config["PRICE_ASSET"]
    fallback_price = _fallback_price(app)
    if not app.config["FETCH_PRICE_ON_STARTUP"]:
        return PriceQuote(asset=asset, price=fallback_price, source="fallback")

    return fetch_reference_price(
        asset,
        url=app.config["PRICE_URL"],
        fallback_price=fallback_price,
        timeout=float(app.config["PRICE_TIMEOUT"]),
    )


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app instance.

    Settings are layered: package defaults, then LIFESPAN_* environment
    variables, then the ``config`` mapping.
    """
    app = Flask(__name__)
    app.config.from_mapping(default_settings())
    app.config.from_prefixed_env("LIFESPAN")
    if config:
        app.config.from_mapping(config)

    _configure_logging(app.config["LOG_LEVEL"])

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    quote = _load_reference_price(app)
    # read-only after startup; per-client overrides travel with each request
    app.extensions["lifespan"] = {"quote": quote}

    app.register_blueprint(api_bp, url_prefix="/api")
    logger.info("Lifespan API ready (reference price %s, %s)", quote.price, quote.source)
    return app
