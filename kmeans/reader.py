"""
Reading delimited text into a data matrix.

Columns are selected by index (``"3"``) or inclusive range (``"2-5"``).
Rows that cannot be parsed are skipped unless ``fail_on_errors`` is set.
"""

import sys
from typing import Iterable, List, Optional, TextIO, Tuple

import numpy as np

from .errors import ParseError


def parse_columns(specs: Iterable[str]) -> List[int]:
    """
    Expand column arguments into a flat list of column indices.

    Args:
        specs: Strings such as ``"0"``, ``"4"`` or ``"2-5"``

    Returns:
        Column indices in the order given.
    """
    columns = []
    for spec in specs:
        spec = spec.strip()
        if "-" in spec:
            start, _, end = spec.partition("-")
            try:
                start, end = int(start), int(end)
            except ValueError:
                raise ValueError(
                    f"Could not parse range '{spec}', expected <digit>-<digit>"
                ) from None
            if start < 0 or end <= start:
                raise ValueError(f"Invalid range '{spec}'")
            columns.extend(range(start, end + 1))
        else:
            try:
                column = int(spec)
            except ValueError:
                raise ValueError(f"Could not parse column '{spec}' as an unsigned integer") from None
            if column < 0:
                raise ValueError(f"Could not parse column '{spec}' as an unsigned integer")
            columns.append(column)
    if not columns:
        raise ValueError("A set or range of columns is required")
    return columns


def parse_line(
    line: str,
    columns: List[int],
    field_separator: str = ",",
    decimal_separator: str = ".",
    line_number: Optional[int] = None,
) -> List[float]:
    """Pick the requested columns out of one line and parse them as floats."""
    if decimal_separator != ".":
        line = line.replace(decimal_separator, ".")
    fields = line.rstrip("\r\n").split(field_separator)

    values = []
    for column in columns:
        if column >= len(fields):
            raise ParseError(
                f"Could not find column {column}",
                {"line_number": line_number, "line": line.rstrip("\r\n")},
            )
        field = fields[column]
        try:
            # float() would also take digit separators such as "1_0".
            if "_" in field:
                raise ValueError(field)
            values.append(float(field))
        except ValueError:
            raise ParseError(
                f"Could not parse column {column} ('{fields[column]}')",
                {"line_number": line_number, "line": line.rstrip("\r\n")},
            ) from None
    return values


class RowBuffer:
    """Growable store of equal-length rows."""

    def __init__(self, width: int):
        self.width = width
        self._rows: List[List[float]] = []

    def append(self, row: List[float]) -> None:
        if len(row) != self.width:
            raise ValueError(f"Row has {len(row)} values, expected {self.width}")
        self._rows.append(row)

    def __len__(self) -> int:
        return len(self._rows)

    def to_array(self) -> np.ndarray:
        """Hand the rows over as an (n, width) float64 matrix and empty the buffer."""
        array = np.array(self._rows, dtype=np.float64).reshape(len(self._rows), self.width)
        self._rows = []
        return array


def read_dataset(
    stream: TextIO,
    columns: List[int],
    field_separator: str = ",",
    decimal_separator: str = ".",
    ignore_header: bool = False,
    fail_on_errors: bool = False,
    verbose: bool = False,
) -> Tuple[Optional[str], np.ndarray]:
    """
    Read rows from ``stream``.

    Args:
        stream: Text input, one row per line
        columns: Column indices to keep
        field_separator: Separator between fields, may be several characters
        decimal_separator: Character used as the decimal point
        ignore_header: Treat the first line as a header
        fail_on_errors: Raise ``ParseError`` instead of skipping bad rows
        verbose: Report skipped rows on stderr

    Returns:
        (header line or None, matrix of shape (n, len(columns)))
    """
    header = None
    buffer = RowBuffer(len(columns))
    skipped = 0

    for line_number, line in enumerate(stream, start=1):
        if ignore_header and line_number == 1:
            header = line.rstrip("\r\n")
            continue
        if not line.strip():
            continue
        try:
            buffer.append(parse_line(line, columns, field_separator, decimal_separator, line_number))
        except ParseError as exc:
            if fail_on_errors:
                raise
            skipped += 1
            if verbose:
                print(f"Skipping line {line_number}: {exc}", file=sys.stderr)

    if verbose:
        print(f"Read {len(buffer)} rows ({skipped} skipped)", file=sys.stderr)
    return header, buffer.to_array()
