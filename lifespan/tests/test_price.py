"""Tests for lifespan.core.price."""
from __future__ import annotations

import json

import pytest
import requests

from lifespan.core.price import PriceFetchError, fetch_reference_price, parse_quote

FALLBACK = 12345.0


def make_response(status: int, body) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    response.url = "https://quotes.test/simple/price"
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return response


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def fetch(session):
    return fetch_reference_price(
        "bitcoin",
        url="https://quotes.test/simple/price",
        fallback_price=FALLBACK,
        timeout=3,
        session=session,
    )


# ---------------------------------------------------------------------------
# parse_quote
# ---------------------------------------------------------------------------

def test_parse_quote_reads_price_and_timestamp():
    price, updated = parse_quote({"bitcoin": {"usd": 67000.5, "last_updated_at": 1700000000}}, "bitcoin")
    assert price == 67000.5
    assert updated == 1700000000


def test_parse_quote_timestamp_optional():
    assert parse_quote({"bitcoin": {"usd": 5}}, "bitcoin") == (5.0, None)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {},
        {"ethereum": {"usd": 3000}},
        {"bitcoin": {"usd": "67000"}},
        {"bitcoin": {"usd": 0}},
        {"bitcoin": {"usd": -1}},
        {"bitcoin": {}},
    ],
)
def test_parse_quote_rejects_malformed_payloads(payload):
    with pytest.raises(PriceFetchError):
        parse_quote(payload, "bitcoin")


@pytest.mark.parametrize("stamp", [float("inf"), float("nan")], ids=["inf", "nan"])
def test_parse_quote_drops_non_finite_timestamp(stamp):
    assert parse_quote({"bitcoin": {"usd": 67000, "last_updated_at": stamp}}, "bitcoin") == (67000.0, None)


@pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")], ids=["inf", "-inf", "nan"])
def test_parse_quote_rejects_non_finite_price(price):
    with pytest.raises(PriceFetchError):
        parse_quote({"bitcoin": {"usd": price}}, "bitcoin")


# ---------------------------------------------------------------------------
# fetch_reference_price
# ---------------------------------------------------------------------------

def test_fetch_live_price():
    session = FakeSession(make_response(200, {"bitcoin": {"usd": 67000.0, "last_updated_at": 1700000000}}))

    quote = fetch(session)

    assert quote.price == 67000.0
    assert quote.source == "live"
    assert quote.last_updated_at == 1700000000
    assert quote.warning is None
    assert not quote.is_fallback

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["params"]["ids"] == "bitcoin"
    assert call["params"]["vs_currencies"] == "usd"
    assert call["timeout"] == 3


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(make_response(503, {"error": "unavailable"})),
        FakeSession(make_response(200, b"<html>not json</html>")),
        FakeSession(make_response(200, {"bitcoin": {"usd": 0}})),
        FakeSession(make_response(200, {"bitcoin": {"usd": None}})),
        FakeSession(make_response(200, b'{"bitcoin": {"usd": 1e400}}')),
        FakeSession(make_response(200, b'{"bitcoin": {"usd": NaN, "last_updated_at": 1700000000}}')),
        FakeSession(error=requests.ConnectionError("connection refused")),
        FakeSession(error=requests.Timeout("timed out")),
    ],
    ids=["http-503", "not-json", "zero-price", "null-price", "overflow-price", "nan-price",
         "connection-error", "timeout"],
)
def test_fetch_failure_uses_fallback(session, caplog):
    with caplog.at_level("WARNING", logger="lifespan.core.price"):
        quote = fetch(session)

    assert quote.price == FALLBACK
    assert quote.source == "fallback"
    assert quote.is_fallback
    assert quote.warning
    assert "fallback" in quote.warning
    assert len(session.calls) == 1  # single attempt, no retry
    assert any("fallback" in record.getMessage() for record in caplog.records)


def test_fetch_uses_requests_when_no_session(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["url"] = url
        return make_response(200, {"bitcoin": {"usd": 42.0}})

    monkeypatch.setattr("lifespan.core.price.requests.get", fake_get)

    quote = fetch_reference_price(url="https://quotes.test/simple/price")

    assert quote.price == 42.0
    assert seen["url"] == "https://quotes.test/simple/price"


@pytest.mark.parametrize(
    "body",
    [
        b'{"bitcoin": {"usd": 67000, "last_updated_at": 1e400}}',
        b'{"bitcoin": {"usd": 67000, "last_updated_at": NaN}}',
    ],
    ids=["overflow-timestamp", "nan-timestamp"],
)
def test_fetch_keeps_live_price_with_unusable_timestamp(body):
    quote = fetch(FakeSession(make_response(200, body)))

    assert quote.price == 67000.0
    assert quote.source == "live"
    assert quote.last_updated_at is None
    assert quote.warning is None
