"""
Tests for mortality.aggregate module.
"""
from __future__ import annotations

import pytest

from gedcom_longevity.mortality.aggregate import (
    AggregateStatsCalculator,
    InsufficientDataError,
    calculate_death_diff_stats,
    round_half_up,
)
from gedcom_longevity.mortality.extractor import extract_death_details
from gedcom_longevity.mortality.model import SECONDS_IN_NON_LEAP_YEAR, Gender


@pytest.fixture
def buckets(make_enriched):
    """Buckets whose averages are whole or quarter years."""
    return {
        Gender.MALE: [
            make_enriched(5, -3),
            make_enriched(6, -4),
            make_enriched(7, -5),
        ],
        Gender.FEMALE: [
            make_enriched(4, 1.5, Gender.FEMALE),
            make_enriched(5, 1.75, Gender.FEMALE),
            make_enriched(6, 2, Gender.FEMALE),
        ],
    }


class TestRoundHalfUp:
    """Tests for decimal rounding."""

    @pytest.mark.parametrize("value,expected", [
        (2.675, 2.68),
        (-2.675, -2.68),
        (1.005, 1.01),
        (0.125, 0.13),
        (3.0, 3.0),
        (-2.2465753424657535, -2.25),
    ])
    def test_rounds_halves_away_from_zero(self, value, expected):
        """Test rounding on the shortest decimal form of the value."""
        assert round_half_up(value) == expected


class TestCalculate:
    """Tests for per-gender averages."""

    def test_averages_in_years(self, buckets):
        """Test mean deviations converted to years."""
        stats = calculate_death_diff_stats(buckets)

        assert stats[Gender.MALE].modal_diff == 6.0
        assert stats[Gender.MALE].median_diff == -4.0
        assert stats[Gender.FEMALE].modal_diff == 5.0
        assert stats[Gender.FEMALE].median_diff == 1.75

    def test_record_count(self, buckets):
        """Test that each result counts its records."""
        stats = AggregateStatsCalculator().calculate(buckets)

        assert stats[Gender.MALE].record_count == 3
        assert stats[Gender.MALE].gender is Gender.MALE

    def test_accepts_mappings(self):
        """Test that records may be plain mappings of seconds."""
        buckets = {
            'male': [{'modal_diff': 5 * SECONDS_IN_NON_LEAP_YEAR, 'median_diff': -3 * SECONDS_IN_NON_LEAP_YEAR}],
            'female': [{'modal_diff': 4 * SECONDS_IN_NON_LEAP_YEAR, 'median_diff': 2 * SECONDS_IN_NON_LEAP_YEAR}],
        }
        stats = calculate_death_diff_stats(buckets)

        assert stats[Gender.MALE].modal_diff == 5.0
        assert stats[Gender.FEMALE].median_diff == 2.0

    def test_rounds_to_two_places(self, ancestor_rows, index):
        """Test averages of real deviations are rounded to two places."""
        stats = calculate_death_diff_stats(extract_death_details(ancestor_rows, index))

        assert stats[Gender.MALE].modal_diff == -2.25
        assert stats[Gender.MALE].median_diff == -3.25
        assert stats[Gender.FEMALE].modal_diff == 17.4
        assert stats[Gender.FEMALE].median_diff == 16.4

    def test_life_expectancy_average(self, ancestor_rows, index):
        """Test the life expectancy average when every record has a deviation."""
        stats = calculate_death_diff_stats(extract_death_details(ancestor_rows, index))

        assert stats[Gender.MALE].life_expectancy_diff == -0.25
        assert stats[Gender.FEMALE].life_expectancy_diff == 20.4

    def test_life_expectancy_missing(self, buckets):
        """Test that the life expectancy average is None when deviations are missing."""
        stats = calculate_death_diff_stats(buckets)

        assert stats[Gender.MALE].life_expectancy_diff is None

    def test_custom_seconds_per_year(self, buckets):
        """Test that seconds_per_year is the conversion divisor."""
        stats = AggregateStatsCalculator(seconds_per_year=SECONDS_IN_NON_LEAP_YEAR * 2).calculate(buckets)

        assert stats[Gender.MALE].modal_diff == 3.0


class TestEmptyBucketPolicy:
    """Tests for genders without qualifying records."""

    @pytest.fixture
    def male_only(self, make_enriched):
        return {Gender.MALE: [make_enriched(1, 2)], Gender.FEMALE: []}

    def test_raise_names_gender(self, male_only):
        """Test that the default policy raises naming the empty gender."""
        with pytest.raises(InsufficientDataError) as excinfo:
            AggregateStatsCalculator().calculate(male_only)

        assert excinfo.value.gender is Gender.FEMALE
        assert 'female' in str(excinfo.value)

    def test_raise_is_value_error(self, male_only):
        """Test that InsufficientDataError can be caught as ValueError."""
        with pytest.raises(ValueError):
            calculate_death_diff_stats(male_only)

    def test_omit(self, male_only):
        """Test that the omit policy maps the empty gender to None."""
        stats = AggregateStatsCalculator(empty_bucket_policy='omit').calculate(male_only)

        assert stats[Gender.FEMALE] is None
        assert stats[Gender.MALE].modal_diff == 1.0

    def test_propagate(self, male_only):
        """Test that the propagate policy lets the division by zero surface."""
        with pytest.raises(ZeroDivisionError):
            AggregateStatsCalculator(empty_bucket_policy='propagate').calculate(male_only)

    def test_unknown_policy(self):
        """Test that an unknown policy is rejected."""
        with pytest.raises(ValueError):
            AggregateStatsCalculator(empty_bucket_policy='ignore')


class TestGenerationWeighting:
    """Tests for generation-weighted averages."""

    def test_nearer_generations_weigh_more(self, make_enriched):
        """Test weights of 2 ** (highest generation - generation)."""
        buckets = {
            Gender.MALE: [
                make_enriched(4, 4, generations_removed=1),
                make_enriched(1, 1, generations_removed=2),
            ],
            Gender.FEMALE: [make_enriched(0, 0, Gender.FEMALE, generations_removed=2)],
        }
        stats = AggregateStatsCalculator(weight_by_generation=True).calculate(buckets)

        # (2 * 4 + 1 * 1) / 3
        assert stats[Gender.MALE].modal_diff == 3.0
        assert stats[Gender.FEMALE].modal_diff == 0.0

    def test_missing_generation_falls_back(self, make_enriched):
        """Test equal weights when a record has no generation."""
        buckets = {
            Gender.MALE: [
                make_enriched(4, 4, generations_removed=1),
                make_enriched(2, 2),
            ],
            Gender.FEMALE: [make_enriched(1, 1, Gender.FEMALE)],
        }
        stats = AggregateStatsCalculator(weight_by_generation=True).calculate(buckets)

        assert stats[Gender.MALE].modal_diff == 3.0


class TestCalculateOverall:
    """Tests for averages over both genders."""

    def test_overall(self, buckets):
        """Test the overall average combines both buckets."""
        overall = AggregateStatsCalculator().calculate_overall(buckets)

        assert overall.gender is None
        assert overall.record_count == 6
        assert overall.modal_diff == 5.5

    def test_overall_empty_omit(self):
        """Test that overall statistics of nothing are None under omit."""
        overall = AggregateStatsCalculator(empty_bucket_policy='omit').calculate_overall({})

        assert overall is None
