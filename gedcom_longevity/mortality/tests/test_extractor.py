"""
Tests for mortality.extractor module.
"""
from __future__ import annotations

import pytest

from gedcom_longevity.mortality.extractor import DeathDetailExtractor, bucket_outcomes, extract_death_details
from gedcom_longevity.mortality.model import (
    SECONDS_IN_NON_LEAP_YEAR,
    Accepted,
    Gender,
    RawIndividualRecord,
    ReferenceYearStats,
    Rejected,
)
from gedcom_longevity.mortality.reference_table import ReferenceTableIndex


class TestExtractDeathDetails:
    """Tests for extracting enriched records from ancestor rows."""

    def test_buckets_by_gender_in_input_order(self, ancestor_rows, index):
        """Test that qualifying rows land in their gender bucket, in order."""
        buckets = extract_death_details(ancestor_rows, index)

        assert [r.year_of_death for r in buckets[Gender.MALE]] == [1970, 1971]
        assert [r.year_of_death for r in buckets[Gender.FEMALE]] == [1971, 1970, 1970]

    def test_buckets_are_reachable_by_plain_string(self, ancestor_rows, index):
        """Test that buckets can be indexed with 'male' and 'female'."""
        buckets = extract_death_details(ancestor_rows, index)

        assert len(buckets['male']) == 2
        assert len(buckets['female']) == 3

    @pytest.mark.parametrize("position,gender,year,age,modal_diff,median_diff", [
        (0, Gender.MALE, 1970, 70, -48556800.0, -80092800.0),
        (1, Gender.MALE, 1971, 70, -93139200.0, -124675200.0),
        (0, Gender.FEMALE, 1971, 100, 632793600.0, 601257600.0),
        (1, Gender.FEMALE, 1970, 90, 348796800.0, 317260800.0),
        (2, Gender.FEMALE, 1970, 100, 664329600.0, 632793600.0),
    ])
    def test_deviations(self, ancestor_rows, index, position, gender, year, age, modal_diff, median_diff):
        """Test age at death and deviations from the modal and median ages."""
        record = extract_death_details(ancestor_rows, index)[gender][position]

        assert record.year_of_death == year
        assert record.age_at_death == age
        assert record.modal_diff == modal_diff
        assert record.median_diff == median_diff
        assert record.gender is gender

    def test_life_expectancy_diff(self, ancestor_rows, index):
        """Test the life expectancy deviation when the table carries it."""
        record = extract_death_details(ancestor_rows, index)[Gender.MALE][0]

        assert record.life_expectancy_diff == 14515200.0
        assert record.age_at_death_seconds == 2222035200

    def test_life_expectancy_diff_absent(self):
        """Test that a table without life expectancy leaves the deviation as None."""
        index = ReferenceTableIndex.build([ReferenceYearStats.from_values(1970, 72.0, 73.0)], [])
        buckets = extract_death_details(
            [{'Birth date': '1900-01-01', 'Death date': '1970-06-01', 'Gender': 'Male'}], index
        )

        assert buckets[Gender.MALE][0].life_expectancy_diff is None

    def test_no_qualifying_records(self, index):
        """Test that an empty input gives empty buckets."""
        buckets = extract_death_details([], index)

        assert buckets == {Gender.MALE: [], Gender.FEMALE: []}

    def test_gender_is_case_insensitive(self, index):
        """Test that gender text is matched ignoring case and whitespace."""
        buckets = extract_death_details(
            [{'Birth date': '1900-01-01', 'Death date': '1970-06-01', 'Gender': ' MALE '}], index
        )

        assert len(buckets[Gender.MALE]) == 1

    def test_exclusion_threshold_is_configurable(self, index):
        """Test that the childhood exclusion threshold can be changed."""
        rows = [{'Birth date': '1965-01-01', 'Death date': '1970-01-01', 'Gender': 'Female'}]

        assert extract_death_details(rows, index)[Gender.FEMALE] == []
        assert len(extract_death_details(rows, index, childhood_exclusion_years=5)[Gender.FEMALE]) == 1

    def test_death_exactly_at_threshold_is_kept(self, index):
        """Test that an age of exactly ten 365-day years is compared."""
        # three leap days in between, so exactly 3650 days
        rows = [{'Birth date': '1960-01-04', 'Death date': '1970-01-01', 'Gender': 'Male'}]
        buckets = extract_death_details(rows, index)

        assert buckets[Gender.MALE][0].age_at_death_seconds == 10 * SECONDS_IN_NON_LEAP_YEAR
        assert buckets[Gender.MALE][0].age_at_death == 10


class TestClassify:
    """Tests for per-record outcomes."""

    @pytest.mark.parametrize("row,reason", [
        ({'Birth date': None, 'Death date': '1970-01-01', 'Gender': 'Male'}, 'insufficient_data'),
        ({'Birth date': '1900-01-01', 'Death date': '1970-01-01', 'Gender': ''}, 'insufficient_data'),
        ({'Birth date': '1900-01-01', 'Death date': '1970-01-01', 'Gender': 'Unknown'}, 'unrecognized_gender'),
        ({'Birth date': 'invalid', 'Death date': '1970-01-01', 'Gender': 'Male'}, 'unparseable_birth_date'),
        ({'Birth date': '1900-01-01', 'Death date': 'unknown', 'Gender': 'Male'}, 'unparseable_death_date'),
        ({'Birth date': '1900-01-01', 'Death date': '1980-01-01', 'Gender': 'Male'}, 'no_reference_year'),
        ({'Birth date': '1965-01-01', 'Death date': '1970-01-01', 'Gender': 'Male'}, 'childhood_death'),
    ])
    def test_rejection_reasons(self, index, row, reason):
        """Test that each kind of unusable record is rejected with its reason."""
        outcome = DeathDetailExtractor().classify(row, index)

        assert isinstance(outcome, Rejected)
        assert outcome.accepted is False
        assert outcome.reason == reason

    def test_incomplete_reference_row(self):
        """Test that a reference row without a median age is rejected when used."""
        index = ReferenceTableIndex.build([{'year': '1970', 'modal_age_at_death': '72'}], [])
        outcome = DeathDetailExtractor().classify(
            RawIndividualRecord(birth_date='1900-01-01', death_date='1970-06-01', gender='Male'), index
        )

        assert isinstance(outcome, Rejected)
        assert outcome.reason == 'incomplete_reference_row'

    def test_infinite_reference_age(self):
        """Test that a non-finite modal age rejects the record instead of reaching the averages."""
        index = ReferenceTableIndex.build(
            [{'year': '1970', 'modal_age_at_death': 'inf', 'median_age_at_death': '73'}], []
        )
        outcome = DeathDetailExtractor().classify(
            RawIndividualRecord(birth_date='1900-01-01', death_date='1970-06-01', gender='Male'), index
        )

        assert isinstance(outcome, Rejected)
        assert outcome.reason == 'incomplete_reference_row'

    def test_accepted_carries_identity(self, index):
        """Test that identifying fields are copied to the enriched record."""
        raw = RawIndividualRecord(
            birth_date='1900-01-01', death_date='1970-06-01', gender='Male',
            xref_id='@I7@', name='John Smith', generations_removed=2,
        )
        outcome = DeathDetailExtractor().classify(raw, index)

        assert isinstance(outcome, Accepted)
        assert outcome.record.xref_id == '@I7@'
        assert outcome.record.name == 'John Smith'
        assert outcome.record.generations_removed == 2

    def test_bucket_outcomes_drops_rejections(self, ancestor_rows, index):
        """Test that only accepted outcomes are bucketed."""
        outcomes = DeathDetailExtractor().extract_outcomes(ancestor_rows, index)
        buckets = bucket_outcomes(outcomes)

        assert len(outcomes) == len(ancestor_rows)
        assert sum(len(records) for records in buckets.values()) == 5
        assert [o.reason for o in outcomes if isinstance(o, Rejected)] == [
            'insufficient_data', 'childhood_death', 'no_reference_year'
        ]


class TestExtractorHooks:
    """Tests for progress reporting and stop requests."""

    def test_reports_progress(self, ancestor_rows, index, recording_hooks):
        """Test that the extractor reports its target through app hooks."""
        hooks = recording_hooks()
        DeathDetailExtractor(app_hooks=hooks).extract(ancestor_rows, index)

        assert hooks.steps[0][1] == len(ancestor_rows)
        assert hooks.steps[0][2] is True

    def test_stop_requested(self, ancestor_rows, index, recording_hooks):
        """Test that a stop request ends extraction early."""
        hooks = recording_hooks(stop_after=0)
        outcomes = DeathDetailExtractor(app_hooks=hooks).extract_outcomes(ancestor_rows, index)

        assert outcomes == []
