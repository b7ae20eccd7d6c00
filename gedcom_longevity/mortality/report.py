"""
Report wording for the mortality comparison.

Everything here returns strings or plain data so a command line (or any other
front end) can print results without re-deriving them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from .model import SECONDS_IN_DAY, EnrichedDeathRecord, Gender, GenderAggregateStats

Number = Union[int, float]


def compose_message(years: Number) -> str:
    """
    Describe a deviation in years.

    Args:
        years: Signed deviation; zero counts as 'more'.

    Returns:
        e.g. '5 more years', '3 fewer years', '1.75 more years'
    """
    if years < 0:
        return f"{abs(years)} fewer years"
    return f"{abs(years)} more years"


@dataclass(frozen=True)
class BucketSummary:
    """Counts and year span derived from one gender bucket."""
    ancestor_count: int
    earliest_death: Optional[int]
    latest_death: Optional[int]
    count_outlived_modal: int
    count_outlived_median: int
    count_outlived_life_expectancy: Optional[int] = None


def summarize_bucket(records: Sequence[EnrichedDeathRecord]) -> BucketSummary:
    """
    Derive the summary view of a bucket.

    Outlived counts include only strictly positive deviations. The life
    expectancy count is None when no record carries a life expectancy deviation.
    """
    years = [r.year_of_death for r in records]
    life_expectancy_diffs = [r.life_expectancy_diff for r in records if r.life_expectancy_diff is not None]
    return BucketSummary(
        ancestor_count=len(records),
        earliest_death=min(years) if years else None,
        latest_death=max(years) if years else None,
        count_outlived_modal=sum(1 for r in records if r.modal_diff > 0),
        count_outlived_median=sum(1 for r in records if r.median_diff > 0),
        count_outlived_life_expectancy=sum(1 for d in life_expectancy_diffs if d > 0) if life_expectancy_diffs else None,
    )


def summary_lines(gender: Union[Gender, str], stats: GenderAggregateStats, summary: BucketSummary,
                  country_label: str = "UK") -> List[str]:
    """
    Sentences describing one gender's comparison.

    Args:
        gender: Gender of the bucket.
        stats: Averages for the bucket, in years.
        summary: Counts for the bucket.
        country_label: Name of the reference population.

    Returns:
        List of lines, without trailing newlines.
    """
    g = str(gender)
    n = summary.ancestor_count
    lines = [
        f"{g} ancestors in the provided dataset lived {compose_message(stats.modal_diff)} than the "
        f"{country_label}'s {g} modal age of death in the year they died "
        f"({summary.count_outlived_modal}/{n} outlived the mode)",
        f"{g} ancestors in the provided dataset lived {compose_message(stats.median_diff)} than the "
        f"{country_label}'s {g} median age of death in the year they died "
        f"({summary.count_outlived_median}/{n} outlived the median)",
    ]
    if stats.life_expectancy_diff is not None and summary.count_outlived_life_expectancy is not None:
        lines.append(
            f"{g} ancestors in the provided dataset lived {compose_message(stats.life_expectancy_diff)} than the "
            f"{country_label}'s {g} life expectancy at birth in the year they died "
            f"({summary.count_outlived_life_expectancy}/{n} outlived it)"
        )
    lines.append(
        f"Calculated from {n} {g} ancestors who died between {summary.earliest_death} and {summary.latest_death}"
    )
    return lines


def report_lines(buckets: Mapping[Any, Sequence[EnrichedDeathRecord]],
                 aggregates: Mapping[Any, Optional[GenderAggregateStats]],
                 country_label: str = "UK") -> List[str]:
    """Blank-line separated summary blocks for each gender with statistics."""
    lines: List[str] = []
    for gender in (Gender.MALE, Gender.FEMALE):
        stats = aggregates.get(gender)
        lines.append("")
        if stats is None:
            lines.append(f"Not enough data to compare {gender} ancestors")
            continue
        lines.extend(summary_lines(gender, stats, summarize_bucket(buckets.get(gender, [])), country_label))
    return lines


def format_years_days(seconds: Number, signed: bool = False) -> str:
    """
    Express a duration in seconds as whole 365-day years and remaining days.

    Args:
        seconds: Duration, possibly negative.
        signed: Always show a sign ('+70 years 3 days').

    Returns:
        e.g. '70 years 151 days'
    """
    days_total = int(abs(seconds) // SECONDS_IN_DAY)
    years, days = divmod(days_total, 365)
    if seconds < 0:
        sign = "-"
    else:
        sign = "+" if signed else ""
    return f"{sign}{years} years {days} days"


def detail_lines(records: Iterable[EnrichedDeathRecord]) -> List[str]:
    """
    One row per ancestor, most recent death first, as an aligned table.
    """
    header = ["Year", "Generations removed", "Gender", "Age at death", "Modal death age diff", "Median death age diff"]
    rows = [header]
    for record in sorted(records, key=lambda r: r.year_of_death, reverse=True):
        age_seconds = record.age_at_death_seconds
        if age_seconds is None:
            age_seconds = record.age_at_death * 365 * SECONDS_IN_DAY
        rows.append([
            str(record.year_of_death),
            "" if record.generations_removed is None else str(record.generations_removed),
            str(record.gender or ""),
            format_years_days(age_seconds),
            format_years_days(record.modal_diff, signed=True),
            format_years_days(record.median_diff, signed=True),
        ])
    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    return ["  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in rows]
