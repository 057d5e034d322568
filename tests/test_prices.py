from datetime import datetime, timezone

import pytest
import requests

from hex_stakes.errors import PriceFeedError
from hex_stakes.prices import build_ohlcv_query, fetch_ohlcv, latest_price, parse_ohlcv_response

SAMPLE = {
    "data": {
        "ethereum": {
            "dexTrades": [
                {
                    "timeInterval": {"minute": "2021-10-23 00:00:00"},
                    "quotePrice": 0.151,
                    "maximum_price": 0.155,
                    "minimum_price": 0.149,
                    "open_price": "0.150",
                    "close_price": "0.152",
                    "tradeAmount": 12345.6,
                },
                {
                    "timeInterval": {"minute": "2021-10-23 00:05:00"},
                    "quotePrice": 0.153,
                    "maximum_price": 0.16,
                    "minimum_price": 0.151,
                    "open_price": "0.152",
                    "close_price": "0.158",
                    "tradeAmount": 999.0,
                },
                {"timeInterval": {"minute": None}, "close_price": "1.0"},
            ]
        }
    }
}


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code != 200:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def test_build_query_targets_hex_usdc():
    query = build_ohlcv_query(since="2022-01-01", limit=10)
    assert '0x2b591e99afe9f32eaa6214f7b7629768c40eeb39' in query
    assert '0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48' in query
    assert 'since:"2022-01-01"' in query
    assert "limit:10" in query


def test_parse_ohlcv_response():
    candles = parse_ohlcv_response(SAMPLE)
    assert len(candles) == 2
    first = candles[0]
    assert first.time == datetime(2021, 10, 23, tzinfo=timezone.utc)
    assert first.open == pytest.approx(0.150)
    assert first.high == pytest.approx(0.155)
    assert first.low == pytest.approx(0.149)
    assert first.close == pytest.approx(0.152)
    assert first.volume == pytest.approx(12345.6)
    assert latest_price(candles) == pytest.approx(0.158)


@pytest.mark.parametrize("payload", [{}, {"data": None}, {"data": {"ethereum": {"dexTrades": "x"}}}, []])
def test_parse_ohlcv_response_rejects_malformed(payload):
    with pytest.raises(PriceFeedError):
        parse_ohlcv_response(payload)


def test_latest_price_empty():
    assert latest_price([]) is None


def test_fetch_ohlcv(monkeypatch):
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append((url, json, headers, timeout))
        return FakeResponse(SAMPLE)

    monkeypatch.setattr(requests, "post", fake_post)
    candles = fetch_ohlcv("secret", timeout_s=5)
    assert len(candles) == 2
    url, body, headers, timeout = calls[0]
    assert url == "https://graphql.bitquery.io/"
    assert headers["X-API-KEY"] == "secret"
    assert "dexTrades" in body["query"]
    assert timeout == 5


def test_fetch_ohlcv_http_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse({}, status_code=500))
    with pytest.raises(PriceFeedError):
        fetch_ohlcv("secret", timeout_s=5)
