"""
Per-gender index over national mortality reference tables.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple, Union

from .model import Gender, ReferenceYearStats

logger = logging.getLogger(__name__)

ReferenceRow = Union[ReferenceYearStats, Mapping[str, Any]]


class ReferenceTableIndex:
    """
    Holds the male and female mortality tables in the order they were read.

    Rows are not validated when the index is built: numeric fields are converted
    only when a lookup result is used. Lookups scan the table for the gender and
    return the first row whose year matches, so a duplicated year resolves to
    the row read first.
    """

    def __init__(self, male: Iterable[ReferenceRow] = (), female: Iterable[ReferenceRow] = ()) -> None:
        self._tables: Dict[Gender, Tuple[ReferenceYearStats, ...]] = {
            Gender.MALE: tuple(self._coerce_row(row) for row in male),
            Gender.FEMALE: tuple(self._coerce_row(row) for row in female),
        }
        self._warn_duplicate_years()

    @classmethod
    def build(cls, male_rows: Iterable[ReferenceRow], female_rows: Iterable[ReferenceRow]) -> ReferenceTableIndex:
        """
        Build an index from male and female table rows.

        Args:
            male_rows: Rows (mappings with 'year', 'modal_age_at_death', 'median_age_at_death'
                and optionally 'life_expectancy_at_birth', or ReferenceYearStats).
            female_rows: As male_rows, for the female table.

        Returns:
            ReferenceTableIndex
        """
        return cls(male=male_rows, female=female_rows)

    @classmethod
    def from_death_stats(cls, death_stats: Mapping[Any, Iterable[ReferenceRow]]) -> ReferenceTableIndex:
        """Build from a {'male': rows, 'female': rows} mapping."""
        male_rows: Iterable[ReferenceRow] = ()
        female_rows: Iterable[ReferenceRow] = ()
        for key, rows in death_stats.items():
            gender = Gender.parse(key)
            if gender is Gender.MALE:
                male_rows = rows
            elif gender is Gender.FEMALE:
                female_rows = rows
            else:
                logger.warning(f"Ignoring death stats for unrecognized gender '{key}'")
        return cls(male=male_rows, female=female_rows)

    def lookup(self, gender: Union[Gender, str], year: int) -> Optional[ReferenceYearStats]:
        """
        Find the reference row for a gender and calendar year.

        Args:
            gender: Gender or gender text ('male', 'Female', ...).
            year: Calendar year of death.

        Returns:
            The first matching ReferenceYearStats, or None if the year is absent.
        """
        for row in self.rows(gender):
            if row.year == year:
                return row
        return None

    def rows(self, gender: Union[Gender, str]) -> Tuple[ReferenceYearStats, ...]:
        """All rows for a gender, in stored order (empty for an unrecognized gender)."""
        parsed = Gender.parse(gender)
        if parsed is None:
            return ()
        return self._tables[parsed]

    def year_span(self, gender: Union[Gender, str]) -> Optional[Tuple[int, int]]:
        """(earliest, latest) year covered by a gender's table, or None if it has no usable years."""
        years = [row.year for row in self.rows(gender) if row.year is not None]
        if not years:
            return None
        return min(years), max(years)

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._tables.values())

    @staticmethod
    def _coerce_row(row: ReferenceRow) -> ReferenceYearStats:
        if isinstance(row, ReferenceYearStats):
            return row
        return ReferenceYearStats.from_mapping(row)

    def _warn_duplicate_years(self) -> None:
        for gender, rows in self._tables.items():
            seen: Set[int] = set()
            for row in rows:
                if row.year is None:
                    continue
                if row.year in seen:
                    logger.warning(f"Duplicate {gender} reference year {row.year}; the first row will be used")
                else:
                    seen.add(row.year)
