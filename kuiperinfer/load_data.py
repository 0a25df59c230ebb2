"""Loading of CSV files into float32 matrices."""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Iterable

import numpy as np

logger = logging.getLogger(__name__)

_NUMBER = re.compile(
    r"[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)
_FLOAT32_MAX = float(np.finfo(np.float32).max)


def _parse_float(token: str) -> float | None:
    """Parse the leading number of ``token``; None when there is none."""
    match = _NUMBER.match(token.lstrip())
    if match is None:
        return None
    text = match.group(0)
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        return None
    if math.isfinite(value) and abs(value) > _FLOAT32_MAX:
        return None
    return value


def _strip_newline(line: str) -> str:
    return line.removesuffix("\n")


def matrix_size(lines: Iterable[str], split_char: str = ",") -> tuple[int, int]:
    """Count rows up to the first empty line and the widest row's columns."""
    rows = cols = 0
    for line in lines:
        line = _strip_newline(line)
        if not line:
            break
        cols = max(cols, len(line.split(split_char)))
        rows += 1
    return rows, cols


def load_data(file_path: str | os.PathLike, split_char: str = ",") -> np.ndarray:
    """Read a CSV file into a (rows, cols) float32 array.

    Reading stops at the first empty line. Short rows are padded with
    zeros and tokens that do not start with a number are left as zero.
    """
    if not str(file_path):
        raise ValueError("CSV file path is empty")
    if len(split_char) != 1:
        raise ValueError("split character must be a single character")

    with open(file_path, encoding="utf-8") as handle:
        lines = [_strip_newline(line) for line in handle]

    rows, cols = matrix_size(lines, split_char)
    data = np.zeros((rows, cols), dtype=np.float32)
    for row, line in enumerate(lines[:rows]):
        for col, token in enumerate(line.split(split_char)):
            value = _parse_float(token)
            if value is None:
                logger.debug(
                    "Parse CSV file meet error: %r row:%d col:%d", token, row, col
                )
                continue
            data[row, col] = value
    return data