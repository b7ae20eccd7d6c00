"""gedcom_longevity package: Compares ancestors' ages at death with national mortality tables."""

from gedcom_longevity.date_parser import DateParser, parse_date
from gedcom_longevity.mortality import (
    AggregateStatsCalculator,
    DeathDetailExtractor,
    Gender,
    InsufficientDataError,
    MortalityComparison,
    MortalityConfig,
    RawIndividualRecord,
    ReferenceTableIndex,
)
from gedcom_longevity.csv_io import compile_death_stats, read_ancestors, write_details_csv
from gedcom_longevity.gedcom_ancestors import read_direct_ancestors

__all__ = [
    "AggregateStatsCalculator",
    "DateParser",
    "DeathDetailExtractor",
    "Gender",
    "InsufficientDataError",
    "MortalityComparison",
    "MortalityConfig",
    "RawIndividualRecord",
    "ReferenceTableIndex",
    "compile_death_stats",
    "parse_date",
    "read_ancestors",
    "read_direct_ancestors",
    "write_details_csv",
]
