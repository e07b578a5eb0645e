"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from lifespan.core.chart import chart_series
from lifespan.core.inputs import LastGoodValue
from lifespan.core.projection import ProjectionError, cached_project
from lifespan.schemas.projection import PriceQuoteResponse, ProjectionRequest

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _state() -> dict:
    return current_app.extensions["lifespan"]


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify({"detail": exc.errors(include_url=False)}), HTTPStatus.BAD_REQUEST


@api_bp.errorhandler(ProjectionError)
def _handle_projection_error(exc: ProjectionError):
    return jsonify({"detail": str(exc)}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.get("/health")
def health() -> Any:
    return jsonify({"status": "ok"})


@api_bp.get("/price")
def price() -> Any:
    """Reference price loaded at startup."""
    quote = _state()["quote"]
    response = PriceQuoteResponse(
        asset=quote.asset,
        price=quote.price,
        source=quote.source,
        lastUpdatedAt=quote.last_updated_at,
        warning=quote.warning,
    )
    return jsonify(response.model_dump())


@api_bp.post("/projection")
def projection() -> Any:
    """Series, summary and chart lines for the posted calculator state."""
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        return jsonify({"detail": "request body must be a JSON object"}), HTTPStatus.BAD_REQUEST

    projection_request = ProjectionRequest.model_validate(payload)

    starting_price = None
    if projection_request.usePrice:
        # startup quote -> this client's last accepted price -> new override;
        # each bad link keeps the price before it
        held = LastGoodValue(_state()["quote"].price)
        held.offer(projection_request.lastGoodPrice)
        starting_price = held.offer(projection_request.priceOverride)

    params = projection_request.to_params(starting_price)
    logger.debug("Projection request: %s", params)
    result = cached_project(params)

    body = {
        "params": params.model_dump(),
        "price": starting_price,
        "series": [point.model_dump() for point in result.series],
        "summary": result.summary.model_dump(),
        "chart": chart_series(result, projection_request.units),
    }
    return jsonify(body), HTTPStatus.OK
