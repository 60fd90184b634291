from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from utils.logger import get_logger

log = get_logger("distribution")

SampleSet = Tuple[int, ...]

DEFAULT_LABEL_FORMAT = "{age} år"


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round with ties going up (2.5 -> 3), unlike the built-in round()."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class DistributionBucket:
    age: int
    count: int
    share: float  # count / total

    @property
    def percentage(self) -> int:
        return int(round_half_up(self.share * 100))

    def label(self, label_format: str = DEFAULT_LABEL_FORMAT) -> str:
        return label_format.format(age=self.age)


@dataclass(frozen=True)
class DistributionSummary:
    buckets: Tuple[DistributionBucket, ...]
    total: int
    mean: float

    def rounded_mean(self, decimals: int = 2) -> float:
        return round_half_up(self.mean, decimals)

    @property
    def reference_age(self) -> int:
        return int(round_half_up(self.mean))

    @property
    def reference_bucket(self) -> Optional[DistributionBucket]:
        """Bucket at the rounded mean, or None when nobody has that exact age."""
        target = self.reference_age
        for bucket in self.buckets:
            if bucket.age == target:
                return bucket
        return None

    def to_records(self, label_format: str = DEFAULT_LABEL_FORMAT) -> List[Dict[str, Any]]:
        reference = self.reference_bucket
        return [
            {
                "age": b.age,
                "label": b.label(label_format),
                "count": b.count,
                "percentage": b.percentage,
                "is_reference": reference is not None and b.age == reference.age,
            }
            for b in self.buckets
        ]

    def to_frame(self, label_format: str = DEFAULT_LABEL_FORMAT) -> pd.DataFrame:
        columns = ["age", "label", "count", "percentage", "is_reference"]
        return pd.DataFrame(self.to_records(label_format), columns=columns)


def aggregate(samples: Sequence[int]) -> DistributionSummary:
    """
    Group ages into a frequency table sorted ascending by age and compute the mean.

    `samples` must be non-empty; the caller falls back to the default sample
    before getting here, so an empty input is a bug rather than bad user data.
    """
    if len(samples) == 0:
        raise ValueError("aggregate() needs at least one sample.")

    series = pd.Series(list(samples), dtype="int64")
    counts = series.value_counts(sort=False).sort_index()
    total = int(series.size)

    buckets = tuple(
        DistributionBucket(age=int(age), count=int(count), share=int(count) / total)
        for age, count in counts.items()
    )
    mean = sum(int(s) for s in samples) / total

    log.debug("aggregated %d samples into %d buckets (mean=%.4f)", total, len(buckets), mean)
    return DistributionSummary(buckets=buckets, total=total, mean=mean)
