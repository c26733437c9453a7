"""Binance BTCUSDT spot ticker price cache.

Implements ticker polling, averaging and result file persistence.
"""

__all__ = [
    "api",
    "cli",
    "errors",
    "persistence",
    "sampler",
]
