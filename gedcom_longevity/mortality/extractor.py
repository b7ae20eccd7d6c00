"""
Death detail extraction: compares each individual against the reference year of death.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from gedcom_longevity.app_hooks import AppHooks
from gedcom_longevity.date_parser import DateParser

from .config import MortalityConfig
from .model import (
    SECONDS_IN_DAY,
    SECONDS_IN_NON_LEAP_YEAR,
    Accepted,
    Buckets,
    EnrichedDeathRecord,
    Gender,
    Outcome,
    RawIndividualRecord,
    Rejected,
    RejectionReason,
    empty_buckets,
)
from .record_filter import is_sufficient
from .reference_table import ReferenceTableIndex

logger = logging.getLogger(__name__)

RecordLike = Union[RawIndividualRecord, Mapping[str, Any]]


@dataclass
class DeathDetailExtractor:
    """
    Turns raw individual records into EnrichedDeathRecords, bucketed by gender.

    For each record, in order: the record must pass is_sufficient and have a
    recognised gender; birth and death dates must parse; the mortality table
    must have the year of death; the age at death must reach the childhood
    exclusion threshold. Records failing any step are skipped, never raised.

    Attributes:
        seconds_per_year: Divisor for converting reference ages and ages at death (365-day year).
        childhood_exclusion_years: Minimum age at death, in years, to be compared.
        date_parser: Parser used for birth and death dates.
        app_hooks: Optional application hooks for progress reporting
    """
    seconds_per_year: int = SECONDS_IN_NON_LEAP_YEAR
    childhood_exclusion_years: int = 10
    date_parser: DateParser = field(default_factory=DateParser)
    app_hooks: Optional[AppHooks] = None

    @classmethod
    def from_config(cls, config: MortalityConfig, app_hooks: Optional[AppHooks] = None) -> DeathDetailExtractor:
        return cls(
            seconds_per_year=int(config.seconds_per_year),
            childhood_exclusion_years=config.childhood_exclusion_years,
            app_hooks=app_hooks,
        )

    def extract(self, records: Iterable[RecordLike], index: ReferenceTableIndex) -> Buckets:
        """
        Extract enriched death records for every qualifying individual.

        Args:
            records: Raw records (RawIndividualRecord or rows keyed by 'Birth date', 'Death date', 'Gender').
            index: Reference tables to compare against.

        Returns:
            {Gender.MALE: [...], Gender.FEMALE: [...]} in input order.
        """
        return bucket_outcomes(self.extract_outcomes(records, index))

    def extract_outcomes(self, records: Iterable[RecordLike], index: ReferenceTableIndex) -> List[Outcome]:
        """
        Classify every record, keeping rejections for diagnostics.

        Args:
            records: Raw records.
            index: Reference tables to compare against.

        Returns:
            List of Accepted / Rejected outcomes, one per record processed.
        """
        records_list = list(records)
        total = len(records_list)
        self._report_step(info="Comparing ancestors with mortality tables", target=total, reset_counter=True, plus_step=0)

        outcomes: List[Outcome] = []
        for idx, record in enumerate(records_list):
            if idx % 100 == 0:
                if self._stop_requested("Death detail extraction stopped"):
                    break
                self._report_step(plus_step=100)
            outcomes.append(self.classify(record, index))

        reasons = Counter(o.reason for o in outcomes if isinstance(o, Rejected))
        accepted = len(outcomes) - sum(reasons.values())
        logger.info(f"Death details: {accepted} of {total} records compared, skipped {dict(reasons)}")
        return outcomes

    def classify(self, record: RecordLike, index: ReferenceTableIndex) -> Outcome:
        """
        Classify a single record.

        Args:
            record: Raw record.
            index: Reference tables to compare against.

        Returns:
            Accepted with the EnrichedDeathRecord, or Rejected with the reason.
        """
        raw = RawIndividualRecord.coerce(record)
        if not is_sufficient(raw):
            return self._reject("insufficient_data", raw)

        gender = Gender.parse(raw.gender)
        if gender is None:
            return self._reject("unrecognized_gender", raw, f"gender '{raw.gender}'")

        birth_date = self.date_parser.parse(raw.birth_date)
        if birth_date is None:
            return self._reject("unparseable_birth_date", raw, f"birth date '{raw.birth_date}'")

        death_date = self.date_parser.parse(raw.death_date)
        if death_date is None:
            return self._reject("unparseable_death_date", raw, f"death date '{raw.death_date}'")

        reference = index.lookup(gender, death_date.year)
        if reference is None:
            return self._reject("no_reference_year", raw, f"no {gender} stats for {death_date.year}")

        # Dates are midnight UTC instants, so the difference is whole days.
        age_at_death_seconds = (death_date - birth_date).days * SECONDS_IN_DAY

        if age_at_death_seconds < self.childhood_exclusion_years * self.seconds_per_year:
            return self._reject("childhood_death", raw, f"{age_at_death_seconds} seconds at death")

        modal_age = reference.modal_age_at_death
        median_age = reference.median_age_at_death
        if modal_age is None or median_age is None:
            return self._reject("incomplete_reference_row", raw, f"{gender} stats for {death_date.year}: {dict(reference.raw)}")

        life_expectancy = reference.life_expectancy_at_birth
        life_expectancy_diff = None
        if life_expectancy is not None:
            life_expectancy_diff = age_at_death_seconds - life_expectancy * self.seconds_per_year

        return Accepted(EnrichedDeathRecord(
            year_of_death=death_date.year,
            age_at_death=int(age_at_death_seconds // self.seconds_per_year),
            modal_diff=age_at_death_seconds - modal_age * self.seconds_per_year,
            median_diff=age_at_death_seconds - median_age * self.seconds_per_year,
            life_expectancy_diff=life_expectancy_diff,
            gender=gender,
            age_at_death_seconds=age_at_death_seconds,
            generations_removed=raw.generations_removed,
            xref_id=raw.xref_id,
            name=raw.name,
        ))

    def _reject(self, reason: RejectionReason, raw: RawIndividualRecord, detail: str = "") -> Rejected:
        logger.debug(f"Skipping {raw.xref_id or 'record'}: {reason} {detail}".rstrip())
        return Rejected(reason=reason, source=raw, detail=detail)

    def _report_step(self, info: str = "", target: int = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """Report a step via app hooks if available."""
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """Check if stop has been requested via app hooks."""
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.info(logger_stop_message)
                return True
        return False


def bucket_outcomes(outcomes: Iterable[Outcome]) -> Buckets:
    """Group the accepted records of outcomes by gender, keeping their order."""
    buckets = empty_buckets()
    for outcome in outcomes:
        if isinstance(outcome, Accepted):
            buckets[outcome.record.gender].append(outcome.record)
    return buckets


def extract_death_details(
    records: Iterable[RecordLike],
    index: ReferenceTableIndex,
    seconds_per_year: int = SECONDS_IN_NON_LEAP_YEAR,
    childhood_exclusion_years: int = 10,
) -> Buckets:
    """
    Convenience wrapper around DeathDetailExtractor.extract.

    Args:
        records: Raw records.
        index: Reference tables to compare against.
        seconds_per_year: Divisor for year conversions.
        childhood_exclusion_years: Minimum age at death to be compared.

    Returns:
        {Gender.MALE: [...], Gender.FEMALE: [...]}
    """
    extractor = DeathDetailExtractor(
        seconds_per_year=seconds_per_year,
        childhood_exclusion_years=childhood_exclusion_years,
    )
    return extractor.extract(records, index)
