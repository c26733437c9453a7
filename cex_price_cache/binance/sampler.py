from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import monotonic
from typing import List

import pandas as pd

from .api import decode_price_response, fetch_ticker_body, parse_price
from .errors import DecodeError, NetworkError, NoSamplesError, PriceParseError, RequestDeadlineExceeded


MIN_REQUEST_WINDOW = 0.05


@dataclass(frozen=True)
class Sample:
    observed_at: datetime
    price: float


@dataclass
class SamplerConfig:
    url: str
    duration_s: int
    request_timeout: float = 10.0
    max_failures: int = 5
    debug: bool = False


@dataclass
class SampleRun:
    samples: List[Sample] = field(default_factory=list)
    requests: int = 0
    dropped: int = 0
    undecodable: int = 0
    failures: int = 0


def collect_samples(cfg: SamplerConfig) -> SampleRun:
    """Poll the ticker back to back until cfg.duration_s seconds have elapsed.

    - Requests are sequential with no pause in between.
    - Each request is bounded by the run deadline, so the run ends on schedule.
      No request is started with less than MIN_REQUEST_WINDOW seconds left.
    - Undecodable bodies and rejected prices are counted and skipped.
    - Network failures are counted and skipped until cfg.max_failures happen in a
      row, at which point NetworkError is raised and the collected samples are discarded.
      A request cut off by the deadline ends the loop without counting as a failure.
    """
    run = SampleRun()
    start = monotonic()
    deadline = start + cfg.duration_s
    consecutive_failures = 0

    while True:
        remaining = deadline - monotonic()
        if remaining < MIN_REQUEST_WINDOW:
            break

        run.requests += 1
        try:
            body = fetch_ticker_body(cfg.url, timeout=min(cfg.request_timeout, remaining), deadline=deadline)
        except NetworkError as e:
            if isinstance(e, RequestDeadlineExceeded) or monotonic() >= deadline:
                if cfg.debug:
                    print(f"[INFO] request {run.requests} cut off by run deadline: {e}", file=sys.stderr)
                break
            run.failures += 1
            consecutive_failures += 1
            print(
                f"[WARN] request {run.requests} failed ({consecutive_failures}/{cfg.max_failures}): {e}",
                file=sys.stderr,
            )
            if consecutive_failures >= cfg.max_failures:
                raise NetworkError(
                    f"giving up after {consecutive_failures} consecutive request failures: {e}"
                ) from e
            continue
        consecutive_failures = 0

        try:
            resp = decode_price_response(body)
        except DecodeError as e:
            run.undecodable += 1
            print(f"[WARN] skipping undecodable response: {e}", file=sys.stderr)
            continue

        print(f"Current BTC price in USD: {resp.price}")

        try:
            price = parse_price(resp.price)
        except PriceParseError as e:
            run.dropped += 1
            print(f"[WARN] dropping sample: {e}", file=sys.stderr)
            continue

        run.samples.append(Sample(observed_at=datetime.now(timezone.utc), price=price))

    if cfg.debug:
        elapsed = monotonic() - start
        print(f"[INFO] sampling finished after {elapsed:.2f}s", file=sys.stderr)
    return run


def samples_to_dataframe(samples: List[Sample]) -> pd.DataFrame:
    """Map samples into a DataFrame: timestamp (UTC-naive datetime64[ns]), price (float64)."""
    if not samples:
        return pd.DataFrame(columns=["timestamp", "price"]).astype(
            {"timestamp": "datetime64[ns]", "price": float}
        )
    df = pd.DataFrame(
        [
            {
                "timestamp": pd.Timestamp(s.observed_at).tz_convert(None),
                "price": float(s.price),
            }
            for s in samples
        ]
    )
    df = df.sort_values("timestamp", kind="mergesort").reset_index(drop=True)
    return df


def compute_average(df: pd.DataFrame) -> float:
    if df.empty:
        raise NoSamplesError("no samples collected; nothing to average")
    return float(df["price"].mean())
