from __future__ import annotations

import io
import math
import numbers
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd

from distribution import SampleSet
from errors import DecodeError, NoValidDataError
from utils.logger import get_logger

log = get_logger("data_processor")

# column D holds the age
AGE_COLUMN_INDEX = 3
MIN_AGE = 1
MAX_AGE = 150


@dataclass(frozen=True)
class ExtractionReport:
    rows_scanned: int
    accepted: int
    missing: int
    non_numeric: int
    out_of_range: int

    def as_text(self) -> str:
        lines = [
            f"Rows scanned (header skipped): {self.rows_scanned}",
            f"Accepted ages: {self.accepted}",
            f"Missing cells: {self.missing}",
            f"Non-numeric / non-integer cells: {self.non_numeric}",
            f"Out of range: {self.out_of_range}",
        ]
        return "\n".join(lines)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_)):
        return math.isnan(float(value))
    return False


def _as_age(value: Any) -> int | None:
    """Whole number for integer-like numeric cells, else None."""
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        return None
    as_float = float(value)
    if not math.isfinite(as_float) or not as_float.is_integer():
        return None
    return int(as_float)


def _cell(row: Sequence[Any], column_index: int) -> Any:
    if row is None or column_index >= len(row):
        return None
    return row[column_index]


def extract_ages_with_report(
    rows: Sequence[Sequence[Any]],
    column_index: int = AGE_COLUMN_INDEX,
    min_age: int = MIN_AGE,
    max_age: int = MAX_AGE,
) -> tuple[SampleSet, ExtractionReport]:
    ages: list[int] = []
    missing = non_numeric = out_of_range = 0

    # row 0 is always the header
    body = list(rows)[1:]
    for row in body:
        value = _cell(row, column_index)
        if _is_missing(value):
            missing += 1
            continue
        age = _as_age(value)
        if age is None:
            non_numeric += 1
            continue
        if not (min_age <= age <= max_age):
            out_of_range += 1
            continue
        ages.append(age)

    report = ExtractionReport(
        rows_scanned=len(body),
        accepted=len(ages),
        missing=missing,
        non_numeric=non_numeric,
        out_of_range=out_of_range,
    )
    log.debug("extraction report:\n%s", report.as_text())

    if not ages:
        raise NoValidDataError(
            f"No valid ages found in column {column_index}.",
            details=f"{report.rows_scanned} rows scanned",
        )
    return tuple(ages), report


def extract_ages(
    rows: Sequence[Sequence[Any]],
    column_index: int = AGE_COLUMN_INDEX,
    min_age: int = MIN_AGE,
    max_age: int = MAX_AGE,
) -> SampleSet:
    ages, _ = extract_ages_with_report(rows, column_index, min_age=min_age, max_age=max_age)
    return ages


def read_workbook_rows(content: bytes) -> list[list[Any]]:
    """First sheet of a workbook as raw rows; empty cells become None."""
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None)
    except Exception as exc:
        raise DecodeError("File could not be read as a spreadsheet.", details=str(exc)) from exc

    df = df.astype(object).where(df.notna(), None)
    return df.values.tolist()


def load_ages_from_workbook(
    content: bytes,
    column_index: int = AGE_COLUMN_INDEX,
    min_age: int = MIN_AGE,
    max_age: int = MAX_AGE,
) -> tuple[SampleSet, ExtractionReport]:
    rows = read_workbook_rows(content)
    return extract_ages_with_report(rows, column_index, min_age=min_age, max_age=max_age)
