from __future__ import annotations

from dataclasses import dataclass
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen
from time import monotonic
import json
import math

from .errors import DecodeError, NetworkError, PriceParseError, RequestDeadlineExceeded


BINANCE_API = "https://api.binance.com"
READ_CHUNK = 4096


@dataclass(frozen=True)
class PriceResponse:
    price: str
    symbol: Optional[str] = None


def build_ticker_url(symbol: str, base: str = BINANCE_API) -> str:
    qs = urlencode({"symbol": symbol})
    return f"{base}/api/v3/ticker/price?{qs}"


def _read_body(resp, deadline: Optional[float]) -> bytes:
    chunks = []
    while True:
        # read1 returns after a single socket read, so a slowly dripped body
        # still gets a deadline check between chunks
        chunk = resp.read1(READ_CHUNK)
        if deadline is not None and monotonic() >= deadline:
            raise RequestDeadlineExceeded("deadline passed while reading response body")
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def fetch_ticker_body(url: str, timeout: float, deadline: Optional[float] = None) -> str:
    """Issue one GET against the ticker endpoint and return the body text.

    timeout applies to each socket operation. deadline is an absolute
    time.monotonic() value; once it passes, the request is abandoned with
    RequestDeadlineExceeded. Name resolution cannot be interrupted.
    Transport errors, HTTP error statuses and timeouts are raised as NetworkError.
    """
    req = Request(url, headers={"User-Agent": "price-cache/1.0"})
    try:
        with urlopen(req, timeout=timeout) as resp:
            if deadline is not None and monotonic() >= deadline:
                raise RequestDeadlineExceeded("deadline passed before response headers arrived")
            raw = _read_body(resp, deadline)
    except HTTPError as e:
        raise NetworkError(f"HTTP {e.code} from {url}") from e
    except (OSError, HTTPException) as e:
        raise NetworkError(f"request to {url} failed: {e}") from e
    return raw.decode("utf-8", errors="replace")


def decode_price_response(body: str) -> PriceResponse:
    """Decode a ticker body such as {"symbol": "BTCUSDT", "price": "64123.45000000"}.

    Only the textual price field is required; other fields are ignored.
    """
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"body is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise DecodeError(f"expected JSON object, got {type(payload).__name__}")
    price = payload.get("price")
    if not isinstance(price, str):
        raise DecodeError("missing textual 'price' field")
    symbol = payload.get("symbol")
    return PriceResponse(price=price, symbol=symbol if isinstance(symbol, str) else None)


def parse_price(text: str) -> float:
    try:
        value = float(text)
    except ValueError as e:
        raise PriceParseError(f"price {text!r} is not a number") from e
    # float() accepts "nan" and "inf"
    if not math.isfinite(value):
        raise PriceParseError(f"price {text!r} is not finite")
    if value <= 0:
        raise PriceParseError(f"price {text!r} is not positive")
    return value
