from __future__ import annotations


class PriceCacheError(RuntimeError):
    """Base class for errors raised by the price cache feed."""


class UsageError(PriceCacheError):
    """Bad or missing command-line input."""


class NetworkError(PriceCacheError):
    """Ticker request failed at the transport or HTTP level."""


class RequestDeadlineExceeded(NetworkError):
    """Sampling deadline passed while a request was in flight."""


class DecodeError(PriceCacheError):
    """Response body is not the expected ticker JSON shape."""


class PriceParseError(PriceCacheError):
    """Ticker price field is not a finite number."""


class PersistError(PriceCacheError):
    """Result file could not be written or read."""


class NoSamplesError(PriceCacheError):
    """Sampling run finished without a single accepted sample."""
