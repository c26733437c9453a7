from __future__ import annotations

import os
from contextlib import suppress
from pathlib import Path

from .errors import PersistError


DEFAULT_RESULT_FILE = Path("cache_results.txt")


def format_result(average_price: float) -> str:
    return f"Average USD price of BTC: {average_price}\n"


def write_result(path: Path, average_price: float) -> Path:
    """Replace the result file with a single line holding average_price.

    The line goes to a sibling temp file first and is then moved over path,
    so a previous result is either kept whole or replaced whole.
    """
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(format_result(average_price), encoding="utf-8")
        os.replace(tmp, path)
    except OSError as e:
        with suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise PersistError(f"cannot write result file {path}: {e}") from e
    return path


def read_result(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PersistError(f"cannot read result file {path} (no prior cache run?): {e}") from e
