"""
Mortality comparison module for ancestor longevity analysis.

Compares each deceased ancestor's age at death with national mortality
reference tables for their gender and year of death, then averages the
deviations per gender.

Main components:
    - ReferenceTableIndex: Male and female reference tables, looked up by year
    - is_sufficient: Pre-filter for records with birth date, death date and gender
    - DeathDetailExtractor: Classifies records and computes per-ancestor deviations
    - AggregateStatsCalculator: Averages deviations per gender, in years
    - compose_message / summary_lines: Report wording
    - MortalityComparison: Runs the whole comparison in one call
"""

from gedcom_longevity.mortality.model import (
    SECONDS_IN_NON_LEAP_YEAR,
    Accepted,
    EnrichedDeathRecord,
    Gender,
    GenderAggregateStats,
    RawIndividualRecord,
    ReferenceYearStats,
    Rejected,
    empty_buckets,
)
from gedcom_longevity.mortality.reference_table import ReferenceTableIndex
from gedcom_longevity.mortality.record_filter import is_sufficient
from gedcom_longevity.mortality.extractor import DeathDetailExtractor, bucket_outcomes, extract_death_details
from gedcom_longevity.mortality.aggregate import (
    AggregateStatsCalculator,
    InsufficientDataError,
    calculate_death_diff_stats,
    round_half_up,
)
from gedcom_longevity.mortality.report import (
    BucketSummary,
    compose_message,
    detail_lines,
    format_years_days,
    report_lines,
    summarize_bucket,
    summary_lines,
)
from gedcom_longevity.mortality.config import MortalityConfig
from gedcom_longevity.mortality.comparison import ComparisonResult, MortalityComparison

__all__ = [
    'SECONDS_IN_NON_LEAP_YEAR',
    'Accepted',
    'EnrichedDeathRecord',
    'Gender',
    'GenderAggregateStats',
    'RawIndividualRecord',
    'ReferenceYearStats',
    'Rejected',
    'empty_buckets',
    'ReferenceTableIndex',
    'is_sufficient',
    'DeathDetailExtractor',
    'bucket_outcomes',
    'extract_death_details',
    'AggregateStatsCalculator',
    'InsufficientDataError',
    'calculate_death_diff_stats',
    'round_half_up',
    'BucketSummary',
    'compose_message',
    'detail_lines',
    'format_years_days',
    'report_lines',
    'summarize_bucket',
    'summary_lines',
    'MortalityConfig',
    'ComparisonResult',
    'MortalityComparison',
]
