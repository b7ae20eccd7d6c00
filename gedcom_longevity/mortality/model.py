"""
Data models for the mortality comparison pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
import re
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from ged4py.date import DateValue

# 365-day year, used for every seconds <-> years conversion so results are reproducible.
SECONDS_IN_NON_LEAP_YEAR = 31536000
SECONDS_IN_DAY = 86400

BIRTH_DATE_FIELD = 'Birth date'
DEATH_DATE_FIELD = 'Death date'
GENDER_FIELD = 'Gender'

_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')


class Gender(str, Enum):
    """Gender buckets used by the reference tables."""
    MALE = 'male'
    FEMALE = 'female'

    @classmethod
    def parse(cls, value: Any) -> Optional[Gender]:
        """
        Normalize a gender value case-insensitively.

        Args:
            value: Gender text (e.g. 'Male', 'FEMALE') or a Gender.

        Returns:
            Gender, or None for empty or unrecognized values.
        """
        if isinstance(value, Gender):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        # Hash like the plain string so buckets['male'] finds Gender.MALE.
        return hash(self.value)


@dataclass(frozen=True)
class RawIndividualRecord:
    """
    One individual as supplied by a reader, before any validation.

    Attributes:
        birth_date: Birth date text (or ged4py DateValue), None if absent.
        death_date: Death date text (or ged4py DateValue), None if absent.
        gender: Gender text, None if absent.
        xref_id: Optional identifier (e.g. GEDCOM xref).
        name: Optional display name.
        generations_removed: Generations between the individual and the subject (parents = 1).
    """
    birth_date: Optional[Union[str, DateValue]] = None
    death_date: Optional[Union[str, DateValue]] = None
    gender: Optional[str] = None
    xref_id: Optional[str] = None
    name: Optional[str] = None
    generations_removed: Optional[int] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> RawIndividualRecord:
        """Create from a row keyed by 'Birth date', 'Death date' and 'Gender'."""
        generations = row.get('Generations removed')
        return cls(
            birth_date=row.get(BIRTH_DATE_FIELD),
            death_date=row.get(DEATH_DATE_FIELD),
            gender=row.get(GENDER_FIELD),
            xref_id=row.get('ID') or row.get('xref_id'),
            name=row.get('Name') or row.get('name'),
            generations_removed=_lenient_int(generations) if generations not in (None, '') else None,
        )

    @classmethod
    def coerce(cls, record: Union[RawIndividualRecord, Mapping[str, Any]]) -> RawIndividualRecord:
        """Return record unchanged if already a RawIndividualRecord, else build one from the mapping."""
        if isinstance(record, RawIndividualRecord):
            return record
        return cls.from_mapping(record)


@dataclass(frozen=True)
class ReferenceYearStats:
    """
    One row of a national mortality table.

    Values are stored exactly as read and converted when a field is used, so a
    row missing a column only matters to the computation that needs it.
    """
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ReferenceYearStats:
        return cls(raw=dict(row))

    @classmethod
    def from_values(cls, year: int, modal_age_at_death: float, median_age_at_death: float,
                    life_expectancy_at_birth: Optional[float] = None) -> ReferenceYearStats:
        raw = {
            'year': year,
            'modal_age_at_death': modal_age_at_death,
            'median_age_at_death': median_age_at_death,
        }
        if life_expectancy_at_birth is not None:
            raw['life_expectancy_at_birth'] = life_expectancy_at_birth
        return cls(raw=raw)

    @property
    def year(self) -> Optional[int]:
        return _lenient_int(self.raw.get('year'))

    @property
    def modal_age_at_death(self) -> Optional[float]:
        return _optional_float(self.raw.get('modal_age_at_death'))

    @property
    def median_age_at_death(self) -> Optional[float]:
        return _optional_float(self.raw.get('median_age_at_death'))

    @property
    def life_expectancy_at_birth(self) -> Optional[float]:
        return _optional_float(self.raw.get('life_expectancy_at_birth'))


@dataclass(frozen=True)
class EnrichedDeathRecord:
    """
    A qualifying individual compared against the reference year of death.

    Attributes:
        year_of_death: Calendar year of death.
        age_at_death: Whole years at death (seconds floor-divided by a 365-day year).
        modal_diff: Seconds lived beyond the modal age at death (negative if short of it).
        median_diff: Seconds lived beyond the median age at death.
        life_expectancy_diff: Seconds lived beyond life expectancy at birth, if the table has it.
        gender: Bucket the record belongs to.
        age_at_death_seconds: Exact age at death in seconds.
        generations_removed: Generations from the subject, if known.
        xref_id: Source identifier, if known.
        name: Display name, if known.
    """
    year_of_death: int
    age_at_death: int
    modal_diff: float
    median_diff: float
    life_expectancy_diff: Optional[float] = None
    gender: Optional[Gender] = None
    age_at_death_seconds: Optional[int] = None
    generations_removed: Optional[int] = None
    xref_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class GenderAggregateStats:
    """
    Average deviation of a bucket from the reference tables, in years.

    gender is None for statistics computed over both genders.
    """
    gender: Optional[Gender]
    modal_diff: float
    median_diff: float
    life_expectancy_diff: Optional[float] = None
    record_count: int = 0


RejectionReason = Literal[
    "insufficient_data",
    "unrecognized_gender",
    "unparseable_birth_date",
    "unparseable_death_date",
    "no_reference_year",
    "incomplete_reference_row",
    "childhood_death",
]


@dataclass(frozen=True)
class Accepted:
    """Outcome for a record that produced an EnrichedDeathRecord."""
    record: EnrichedDeathRecord
    accepted: bool = True


@dataclass(frozen=True)
class Rejected:
    """Outcome for a record skipped by the extractor, with the reason why."""
    reason: RejectionReason
    source: Optional[RawIndividualRecord] = None
    detail: str = ""
    accepted: bool = False


Outcome = Union[Accepted, Rejected]

Buckets = Dict[Gender, List[EnrichedDeathRecord]]


def empty_buckets() -> Buckets:
    """Return a fresh {male: [], female: []} mapping."""
    return {Gender.MALE: [], Gender.FEMALE: []}


def _lenient_int(value: Any) -> Optional[int]:
    """Leading integer of value ('1970', ' 1970 ', '1970.0' -> 1970), or None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def _optional_float(value: Any) -> Optional[float]:
    """Finite float value, or None for absent, non-numeric, infinite or NaN values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None
