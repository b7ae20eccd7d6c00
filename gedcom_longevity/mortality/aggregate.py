"""
Aggregation of per-ancestor deviations into per-gender averages.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import EMPTY_BUCKET_POLICIES, MortalityConfig
from .model import SECONDS_IN_NON_LEAP_YEAR, Gender, GenderAggregateStats

logger = logging.getLogger(__name__)

DIFF_FIELDS = ('modal_diff', 'median_diff')


class InsufficientDataError(ValueError):
    """Raised when a gender has no qualifying records to average."""

    def __init__(self, gender: Optional[Gender]) -> None:
        self.gender = gender
        label = f"{gender} ancestors" if gender is not None else "ancestors"
        super().__init__(f"Insufficient data: no qualifying {label} to compare")


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round to a number of decimal places, halves away from zero.

    Works on the shortest decimal representation of value, so 2.675 rounds to 2.68.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass
class AggregateStatsCalculator:
    """
    Averages the modal and median deviations of each gender bucket.

    Each average is taken in seconds, rounded to 2 places, converted to years
    with seconds_per_year and rounded to 2 places again.

    Attributes:
        seconds_per_year: Divisor for converting seconds to years.
        empty_bucket_policy: 'raise', 'omit' or 'propagate' (see MortalityConfig).
        weight_by_generation: Weight each ancestor by 2 ** (highest generation - its generation).
    """
    seconds_per_year: int = SECONDS_IN_NON_LEAP_YEAR
    empty_bucket_policy: str = 'raise'
    weight_by_generation: bool = False

    def __post_init__(self) -> None:
        if self.empty_bucket_policy not in EMPTY_BUCKET_POLICIES:
            raise ValueError(f"Unknown empty_bucket_policy '{self.empty_bucket_policy}'")

    @classmethod
    def from_config(cls, config: MortalityConfig) -> AggregateStatsCalculator:
        return cls(
            seconds_per_year=int(config.seconds_per_year),
            empty_bucket_policy=config.empty_bucket_policy,
            weight_by_generation=config.weight_by_generation,
        )

    def calculate(self, buckets: Mapping[Any, Sequence[Any]]) -> Dict[Gender, Optional[GenderAggregateStats]]:
        """
        Average the deviations of each gender.

        Args:
            buckets: {gender: records}; records are EnrichedDeathRecords or mappings with
                'modal_diff' and 'median_diff' in seconds.

        Returns:
            {Gender.MALE: stats, Gender.FEMALE: stats}; a value is None only under the 'omit' policy.

        Raises:
            InsufficientDataError: a gender has no records and the policy is 'raise'.
            ZeroDivisionError: a gender has no records and the policy is 'propagate'.
        """
        highest = self._highest_generation([r for records in buckets.values() for r in records])
        return {
            gender: self._aggregate(gender, list(buckets.get(gender, [])), highest)
            for gender in (Gender.MALE, Gender.FEMALE)
        }

    def calculate_overall(self, buckets: Mapping[Any, Sequence[Any]]) -> Optional[GenderAggregateStats]:
        """Average the deviations of both genders together."""
        records = [r for gender in (Gender.MALE, Gender.FEMALE) for r in buckets.get(gender, [])]
        return self._aggregate(None, records, self._highest_generation(records))

    def _aggregate(self, gender: Optional[Gender], records: List[Any], highest: Optional[int]) -> Optional[GenderAggregateStats]:
        if not records:
            if self.empty_bucket_policy == 'raise':
                raise InsufficientDataError(gender)
            if self.empty_bucket_policy == 'omit':
                logger.warning(f"No qualifying {gender or 'overall'} records; omitting their statistics")
                return None
            # 'propagate' falls through to the division by zero

        weights = self._weights(records, highest)
        averages = {name: self._average_years(records, name, weights) for name in DIFF_FIELDS}

        life_expectancy_diff = None
        if records and all(_field(r, 'life_expectancy_diff') is not None for r in records):
            life_expectancy_diff = self._average_years(records, 'life_expectancy_diff', weights)

        return GenderAggregateStats(
            gender=gender,
            modal_diff=averages['modal_diff'],
            median_diff=averages['median_diff'],
            life_expectancy_diff=life_expectancy_diff,
            record_count=len(records),
        )

    def _average_years(self, records: List[Any], name: str, weights: Optional[List[int]]) -> float:
        total = 0.0
        if weights is None:
            # left fold, in input order
            for record in records:
                total = total + _field(record, name)
            mean_seconds = total / len(records)
        else:
            for record, weight in zip(records, weights):
                total = total + weight * _field(record, name)
            mean_seconds = total / sum(weights)
        return round_half_up(round_half_up(mean_seconds) / self.seconds_per_year)

    def _highest_generation(self, records: List[Any]) -> Optional[int]:
        if not self.weight_by_generation:
            return None
        generations = [_field(r, 'generations_removed') for r in records]
        if not generations or any(g is None for g in generations):
            if generations:
                logger.warning("Some ancestors have no generation; averaging without generation weights")
            return None
        return max(generations)

    def _weights(self, records: List[Any], highest: Optional[int]) -> Optional[List[int]]:
        if highest is None:
            return None
        generations = [_field(r, 'generations_removed') for r in records]
        if any(g is None for g in generations):
            return None
        return [2 ** (highest - g) for g in generations]


def calculate_death_diff_stats(
    buckets: Mapping[Any, Sequence[Any]],
    seconds_per_year: int = SECONDS_IN_NON_LEAP_YEAR,
    empty_bucket_policy: str = 'raise',
) -> Dict[Gender, Optional[GenderAggregateStats]]:
    """Convenience wrapper around AggregateStatsCalculator.calculate."""
    calculator = AggregateStatsCalculator(seconds_per_year=seconds_per_year, empty_bucket_policy=empty_bucket_policy)
    return calculator.calculate(buckets)


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)
