from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .api import build_ticker_url
from .errors import NoSamplesError, UsageError
from .persistence import DEFAULT_RESULT_FILE, read_result, write_result
from .sampler import SamplerConfig, collect_samples, compute_average, samples_to_dataframe


DEFAULT_SYMBOL = "BTCUSDT"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_MAX_FAILURES = 5

MODE_CACHE = "cache"
MODE_READ = "read"


@dataclass
class RunConfig:
    mode: str
    result_path: Path
    duration_s: Optional[int] = None
    url: str = build_ticker_url(DEFAULT_SYMBOL)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_failures: int = DEFAULT_MAX_FAILURES
    debug: bool = False


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


def _seconds(text: str) -> int:
    if not text.strip().isdigit():
        raise argparse.ArgumentTypeError(f"expected a non-negative whole number of seconds, got {text!r}")
    return int(text)


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {text!r}") from None
    if not value > 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {text!r}")
    return value


def _positive_int(text: str) -> int:
    if not text.strip().isdigit() or int(text) < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text!r}")
    return int(text)


def run_cache(cfg: RunConfig) -> int:
    if cfg.duration_s is None:
        raise UsageError("-t/--times is required when --mode is cache")
    if cfg.debug:
        print(f"[INFO] sampling {cfg.url} for {cfg.duration_s}s", file=sys.stderr)

    run = collect_samples(
        SamplerConfig(
            url=cfg.url,
            duration_s=cfg.duration_s,
            request_timeout=cfg.request_timeout,
            max_failures=cfg.max_failures,
            debug=cfg.debug,
        )
    )
    df = samples_to_dataframe(run.samples)

    # Raises NoSamplesError on an empty run; the result file stays as it was
    average_price = compute_average(df)

    print(f"Cache complete. The average USD price of BTC is: {average_price}")
    out = write_result(cfg.result_path, average_price)

    print(
        f"requests={run.requests} samples={len(df)} dropped={run.dropped} "
        f"undecodable={run.undecodable} failures={run.failures} average={average_price} result={out}"
    )
    return 0


def run_read(cfg: RunConfig) -> int:
    content = read_result(cfg.result_path)
    sys.stdout.write(content)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(description="Average the Binance BTCUSDT spot price over a period, or show the last average")
    p.add_argument("-m", "--mode", required=True, choices=[MODE_CACHE, MODE_READ], help="cache: sample and store; read: show stored result")
    p.add_argument("-t", "--times", type=_seconds, metavar="SECONDS", help="Sampling duration in seconds (required for cache)")
    p.add_argument("--url", default=build_ticker_url(DEFAULT_SYMBOL), help="Ticker endpoint returning a JSON object with a 'price' field")
    p.add_argument("--result-file", type=Path, default=DEFAULT_RESULT_FILE, help="Where the average is stored")
    p.add_argument("--request-timeout", type=_positive_float, default=DEFAULT_REQUEST_TIMEOUT, help="Per-request timeout in seconds")
    p.add_argument("--max-failures", type=_positive_int, default=DEFAULT_MAX_FAILURES, help="Consecutive failed requests tolerated before aborting")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    args = build_parser().parse_args(argv)
    if args.mode == MODE_CACHE and args.times is None:
        raise UsageError("-t/--times is required when --mode is cache")

    return RunConfig(
        mode=args.mode,
        result_path=args.result_file,
        duration_s=args.times,
        url=args.url,
        request_timeout=args.request_timeout,
        max_failures=args.max_failures,
        debug=args.debug,
    )


def main(argv: Optional[list[str]] = None) -> int:
    try:
        cfg = parse_args(argv)
    except UsageError as e:
        build_parser().print_usage(sys.stderr)
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    try:
        if cfg.mode == MODE_CACHE:
            return run_cache(cfg)
        return run_read(cfg)
    except NoSamplesError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("[ERROR] interrupted; result file not updated", file=sys.stderr)
        return 130
    except Exception as e:  # surface clear error message
        print(f"[ERROR] {e}", file=sys.stderr)
        if cfg.debug:
            raise
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
