"""
Pytest fixtures for mortality tests.
"""
from __future__ import annotations

import pytest
from typing import Dict, List, Optional

from gedcom_longevity.mortality.model import SECONDS_IN_NON_LEAP_YEAR, EnrichedDeathRecord, Gender
from gedcom_longevity.mortality.reference_table import ReferenceTableIndex


@pytest.fixture
def death_stats() -> Dict[str, List[Dict[str, object]]]:
    """Small male and female mortality tables for 1970 and 1971."""
    return {
        'male': [
            {'year': '1970', 'modal_age_at_death': '72', 'median_age_at_death': '73', 'life_expectancy_at_birth': '70'},
            {'year': '1971', 'modal_age_at_death': '73', 'median_age_at_death': '74', 'life_expectancy_at_birth': '71'},
        ],
        'female': [
            {'year': '1970', 'modal_age_at_death': '79', 'median_age_at_death': '80', 'life_expectancy_at_birth': '76'},
            {'year': '1971', 'modal_age_at_death': '80', 'median_age_at_death': '81', 'life_expectancy_at_birth': '77'},
        ],
    }


@pytest.fixture
def index(death_stats) -> ReferenceTableIndex:
    """Reference index built from the death_stats fixture."""
    return ReferenceTableIndex.from_death_stats(death_stats)


@pytest.fixture
def ancestor_rows() -> List[Dict[str, Optional[str]]]:
    """Ancestor rows as read from a CSV export, including ones that should be skipped."""
    return [
        {'Birth date': '1900-01-01', 'Death date': '1970-06-01', 'Gender': 'Male'},
        {'Birth date': '1901-01-01', 'Death date': '1971', 'Gender': 'Male'},
        {'Birth date': '1871-01-01', 'Death date': '1971-01-01', 'Gender': 'Female'},
        {'Birth date': '1880-01-01', 'Death date': '1 January 1970', 'Gender': 'Female'},
        {'Birth date': '1870-01-01', 'Death date': 'about 1970', 'Gender': 'Female'},
        {'Birth date': '1900-01-01', 'Death date': None, 'Gender': 'Male'},
        {'Birth date': '1965-01-01', 'Death date': '1970-01-01', 'Gender': 'Female'},
        {'Birth date': '1800-01-01', 'Death date': '1850-01-01', 'Gender': 'Male'},
    ]


@pytest.fixture
def make_enriched():
    """Build an EnrichedDeathRecord from deviations given in years."""
    def _create(modal_years: float, median_years: float, gender: Gender = Gender.MALE,
                year_of_death: int = 1970, generations_removed: Optional[int] = None,
                life_expectancy_years: Optional[float] = None) -> EnrichedDeathRecord:
        return EnrichedDeathRecord(
            year_of_death=year_of_death,
            age_at_death=70,
            modal_diff=modal_years * SECONDS_IN_NON_LEAP_YEAR,
            median_diff=median_years * SECONDS_IN_NON_LEAP_YEAR,
            life_expectancy_diff=None if life_expectancy_years is None else life_expectancy_years * SECONDS_IN_NON_LEAP_YEAR,
            gender=gender,
            generations_removed=generations_removed,
        )
    return _create


class RecordingHooks:
    """AppHooks implementation that records calls."""

    def __init__(self, stop_after: Optional[int] = None) -> None:
        self.steps = []
        self.values = {}
        self.stop_after = stop_after
        self.stop_checks = 0

    def report_step(self, info=None, target=None, reset_counter=False, plus_step=1):
        self.steps.append((info, target, reset_counter, plus_step))

    def stop_requested(self):
        self.stop_checks += 1
        return self.stop_after is not None and self.stop_checks > self.stop_after

    def update_key_value(self, key, value):
        self.values[key] = value


@pytest.fixture
def recording_hooks():
    """Factory for RecordingHooks."""
    return RecordingHooks
