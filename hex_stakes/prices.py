"""HEX/USD price history from the Bitquery DEX trades API."""

from datetime import datetime, timezone
from typing import Any

from hex_stakes.constants import (
    BITQUERY_URL,
    HEX_CONTRACT_ADDRESS,
    PRICE_CANDLE_MINUTES,
    PRICE_HISTORY_LIMIT,
    PRICE_HISTORY_SINCE,
    USDC_ADDRESS,
)
from hex_stakes.errors import PriceFeedError
from hex_stakes.models import OHLCVData

OHLCV_QUERY = (
    "query{ethereum(network:ethereum){dexTrades("
    'options:{limit:%(limit)d,asc:"timeInterval.minute"}'
    'date:{since:"%(since)s"}'
    'exchangeName:{is:"Uniswap"}'
    'baseCurrency:{is:"%(base)s"}'
    'quoteCurrency:{is:"%(quote)s"}'
    "){timeInterval{minute(count:%(minutes)d)}"
    "quotePrice maximum_price:quotePrice(calculate:maximum)"
    "minimum_price:quotePrice(calculate:minimum)"
    "open_price:minimum(of:block,get:quote_price)"
    "close_price:maximum(of:block,get:quote_price)"
    "tradeAmount(in:USD)}}}"
)


def build_ohlcv_query(*, since: str = PRICE_HISTORY_SINCE, limit: int = PRICE_HISTORY_LIMIT) -> str:
    return OHLCV_QUERY % {
        "limit": limit,
        "since": since,
        "base": HEX_CONTRACT_ADDRESS.lower(),
        "quote": USDC_ADDRESS,
        "minutes": PRICE_CANDLE_MINUTES,
    }


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_ohlcv_response(payload: Any) -> list[OHLCVData]:
    """Parse a Bitquery dexTrades response into candles."""
    try:
        trades = payload["data"]["ethereum"]["dexTrades"]
    except (KeyError, TypeError) as ex:
        raise PriceFeedError(f"Unexpected price feed payload: {payload!r:.200}") from ex
    if not isinstance(trades, list):
        raise PriceFeedError("Unexpected price feed payload: dexTrades is not a list")

    out: list[OHLCVData] = []
    for trade in trades:
        minute = (trade.get("timeInterval") or {}).get("minute")
        try:
            when = datetime.strptime(str(minute), "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
        except ValueError:
            continue
        out.append(
            OHLCVData(
                time=when,
                open=_as_float(trade.get("open_price")),
                high=_as_float(trade.get("maximum_price")),
                low=_as_float(trade.get("minimum_price")),
                close=_as_float(trade.get("close_price")),
                volume=_as_float(trade.get("tradeAmount")),
            )
        )
    return out


def fetch_ohlcv(api_key: str, *, timeout_s: int, since: str = PRICE_HISTORY_SINCE) -> list[OHLCVData]:
    """Fetch HEX/USDC candles. Raises PriceFeedError on HTTP or payload errors."""
    import requests

    body = {"query": build_ohlcv_query(since=since), "variables": {}}
    headers = {"Content-Type": "application/json", "X-API-KEY": api_key}
    try:
        resp = requests.post(BITQUERY_URL, json=body, headers=headers, timeout=timeout_s)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as ex:
        raise PriceFeedError(f"Price feed request failed: {ex}") from ex
    return parse_ohlcv_response(payload)


def latest_price(candles: list[OHLCVData]) -> float | None:
    """Close of the most recent candle, or None when there are none."""
    if not candles:
        return None
    return max(candles, key=lambda c: c.time).close
