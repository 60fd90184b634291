from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from data_processor import AGE_COLUMN_INDEX, MAX_AGE, MIN_AGE, load_ages_from_workbook
from distribution import DistributionSummary, SampleSet, aggregate
from utils.logger import get_logger

log = get_logger("source")

# Sample shown until a spreadsheet has been uploaded
DEFAULT_AGES: SampleSet = (
    7, 9, 11, 8, 10, 6, 12, 7, 9, 11, 8, 10, 6, 12,
    7, 10, 12, 6, 10, 11, 12, 9, 10, 6, 9, 11, 9, 7, 10, 12, 9, 12, 6, 9,
)

DEFAULT_TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"


@dataclass(frozen=True)
class DefaultSource:
    @property
    def samples(self) -> SampleSet:
        return DEFAULT_AGES


@dataclass(frozen=True)
class UploadedSource:
    samples: SampleSet
    file_name: str
    loaded_at: str


ActiveSource = Union[DefaultSource, UploadedSource]


def resolve_samples(active: ActiveSource) -> SampleSet:
    if isinstance(active, UploadedSource) and active.samples:
        return active.samples
    return DEFAULT_AGES


def summarize(active: ActiveSource) -> DistributionSummary:
    return aggregate(resolve_samples(active))


def handle_upload(
    active: ActiveSource,
    file_name: str,
    content: bytes,
    *,
    column_index: int = AGE_COLUMN_INDEX,
    min_age: int = MIN_AGE,
    max_age: int = MAX_AGE,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    clock: Optional[Callable[[], datetime]] = None,
) -> ActiveSource:
    """
    Turn uploaded workbook bytes into the next active source.

    Raises DecodeError or NoValidDataError before anything is built, so
    `active` stays the caller's current source on failure.
    """
    samples, report = load_ages_from_workbook(
        content, column_index, min_age=min_age, max_age=max_age
    )
    now = (clock or datetime.now)()
    uploaded = UploadedSource(
        samples=samples,
        file_name=file_name,
        loaded_at=now.strftime(timestamp_format),
    )
    log.info(
        "'%s' replaces %s: %d ages accepted of %d rows",
        file_name,
        type(active).__name__,
        report.accepted,
        report.rows_scanned,
    )
    return uploaded
