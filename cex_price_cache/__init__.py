"""CEX Price Cache - sampled average prices from cryptocurrency exchange tickers.

Provides:
- Binance spot ticker sampler (fixed-duration polling, averaged)
- Single-line result file persistence and read-back
"""

__version__ = "0.1.0"

# Expose main submodules
from . import binance

__all__ = ["binance", "__version__"]
