"""wavpwl/pwl_parser.py — Read SPICE PWL / simulator output text.

Accepts the shapes simulators and hand-written stimulus files come in:
  - optional header line of whitespace-separated column names
      time  mid  out
  - data rows either comma-separated or whitespace-separated
      0.0, 0.0            0.0  0.1  0.2
  - `*` and `;` comment lines, blank lines

Field 0 of every row is time. The voltage column is resolved once per file
(by name from the header, or by index) and then read from each row's own
split, so comma rows and whitespace rows are indexed independently.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from wavpwl.errors import ConfigurationError, PwlFormatError, PwlIOError, StructuralError
from wavpwl.series import SampleSeries

DEFAULT_COLUMN_NAME = "out"
DEFAULT_HEADERLESS_COLUMN = 1
_COMMENT_PREFIXES = ("*", ";")
_INDEX_PATTERN = re.compile(r"^\+?[0-9]+$")


@dataclass(frozen=True)
class ColumnSelector:
    index: int
    name: Optional[str] = None
    columns: Optional[Tuple[str, ...]] = None

    @property
    def has_header(self) -> bool:
        return self.columns is not None


def _to_float(token: str) -> Optional[float]:
    # float() also takes "1_000"; simulators never write that
    if "_" in token:
        return None
    try:
        return float(token)
    except ValueError:
        return None


def _is_number(token: str) -> bool:
    return _to_float(token) is not None


def _parse_index(spec: str) -> Optional[int]:
    if _INDEX_PATTERN.match(spec):
        return int(spec)
    return None


def is_header_line(line: str) -> bool:
    """True if `line` looks like a column-name header.

    Any whitespace token that has no comma, is not a number and is not the
    literal "time" marks the line as a header. Numeric names such as "5"
    therefore do not count.
    """
    return any(
        "," not in token and not _is_number(token) and token != "time"
        for token in line.split()
    )


def resolve_column(header_line: Optional[str], column: Optional[str]) -> ColumnSelector:
    """Resolve the voltage column for a file.

    `header_line` is None for headerless files.
    """
    if header_line is None:
        if column is None:
            return ColumnSelector(index=DEFAULT_HEADERLESS_COLUMN)
        idx = _parse_index(column)
        if idx is None:
            raise ConfigurationError(
                f"No header found. Column must be numeric index, not '{column}'"
            )
        return ColumnSelector(index=idx)

    cols = tuple(header_line.split())

    if column is not None:
        idx = _parse_index(column)
        if idx is None:
            if column not in cols:
                raise ConfigurationError(
                    f"Column '{column}' not found. Available: {', '.join(cols)}"
                )
            idx = cols.index(column)
    elif DEFAULT_COLUMN_NAME in cols:
        idx = cols.index(DEFAULT_COLUMN_NAME)
    else:
        print("[PWL] Available columns:")
        for i, name in enumerate(cols):
            print(f"[PWL]   [{i}] {name}")
        print("[PWL] Using column 0 (time). Specify -c <name|index> to select another column.")
        idx = 0

    if idx >= len(cols):
        raise ConfigurationError(
            f"Column index {idx} out of range (have {len(cols)} columns)"
        )
    return ColumnSelector(index=idx, name=cols[idx], columns=cols)


def _parse_float(token: str, what: str, lineno: int) -> float:
    value = _to_float(token)
    if value is None:
        raise PwlFormatError(f"Line {lineno}: invalid {what} value '{token}'")
    if not math.isfinite(value):
        raise PwlFormatError(f"Line {lineno}: {what} value '{token}' is not finite")
    return value


def parse_row(line: str, column_index: int, lineno: int = 0) -> Optional[Tuple[float, float]]:
    """Parse one data row into (time, voltage); None for blank/comment rows."""
    line = line.strip()
    if not line or line.startswith(_COMMENT_PREFIXES):
        return None

    if "," in line:
        parts = [p.strip() for p in line.split(",")]
        time = _parse_float(parts[0], "time", lineno)
        if column_index >= len(parts):
            raise PwlFormatError(
                f"Line {lineno}: column {column_index} not found (line has {len(parts)} columns)"
            )
        voltage = _parse_float(parts[column_index], "voltage", lineno)
        return time, voltage

    parts = line.split()
    if column_index >= len(parts):
        raise PwlFormatError(
            f"Line {lineno}: column {column_index} not found (line has {len(parts)} columns)"
        )
    time = _parse_float(parts[0], "time", lineno)
    voltage = _parse_float(parts[column_index], "voltage", lineno)
    return time, voltage


def parse_lines(lines: List[str], column: Optional[str] = None) -> Tuple[SampleSeries, ColumnSelector]:
    if not lines:
        raise StructuralError("Empty file")

    first = lines[0]
    if is_header_line(first):
        selector = resolve_column(first, column)
        print(f"[PWL]   Extracting column: {selector.index} ({selector.name})")
        start = 1
    else:
        selector = resolve_column(None, column)
        print(f"[PWL]   Extracting column: {selector.index}")
        start = 0

    pairs = []
    for lineno, line in enumerate(lines[start:], start=start + 1):
        row = parse_row(line, selector.index, lineno)
        if row is not None:
            pairs.append(row)

    if not pairs:
        raise StructuralError("No valid samples found in PWL file")
    return SampleSeries.from_pairs(pairs), selector


def parse_pwl(path, column: Optional[str] = None) -> Tuple[SampleSeries, ColumnSelector]:
    """Read a PWL file into a SampleSeries plus the column it came from."""
    path = Path(path)
    print(f"[PWL] Reading file: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise PwlFormatError(f"{path} is not valid UTF-8 text: {exc}") from exc
    except OSError as exc:
        raise PwlIOError(f"Could not read {path}: {exc}") from exc

    series, selector = parse_lines(text.splitlines(), column)
    print(f"[PWL]   Found {len(series)} PWL points")
    return series, selector
