"""
Unit Tests for the State Store.
"""
import math

import pandas as pd
import pytest

from heart_explorer.config import DEFAULT_PATIENT, FIELDS
from heart_explorer.errors import InvalidField
from heart_explorer.state import AgeRange, FilterState, StateStore, coerce_field, to_frame


class TestSetPatientField:

    def test_defaults(self):
        assert StateStore().patient == DEFAULT_PATIENT

    @pytest.mark.parametrize("field_name,raw,expected", [
        ("Age", "63", 63),
        ("Age", 63.0, 63),
        ("Cholesterol", "241.5", 241.5),
        ("MaxHR", 150, 150),
        ("HeartDisease", "1", 1),
        ("HeartDisease", 0.0, 0),
        ("Sex", "f", "F"),
        ("ExerciseAngina", " y ", "Y"),
        ("ChestPainType", " NAP ", "NAP"),
    ])
    def test_coercion(self, store, field_name, raw, expected):
        store.set_patient_field(field_name, raw)
        value = store.patient[field_name]
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("field_name,raw", [
        ("Weight", 80),
        ("Cholesterol", "abc"),
        ("Cholesterol", None),
        ("Age", float("nan")),
        ("HeartDisease", 2),
        ("Sex", "X"),
        ("ChestPainType", "   "),
    ])
    def test_rejected_input_leaves_patient_unchanged(self, store, field_name, raw):
        before = store.patient
        with pytest.raises(InvalidField) as exc:
            store.set_patient_field(field_name, raw)
        assert exc.value.code == "INVALID_FIELD"
        assert exc.value.field == field_name
        assert store.patient == before

    def test_does_not_touch_dataset_or_filters(self, store):
        rows = len(store)
        filters = store.filters
        store.set_patient_field("Age", 70)
        assert len(store) == rows
        assert store.filters is filters

    def test_coerce_field_unknown(self):
        with pytest.raises(InvalidField):
            coerce_field("HeartRate", 1)


class TestCommitPatient:

    def test_appends_one_record(self, store):
        rows = len(store)
        store.commit_patient()
        assert len(store) == rows + 1

    def test_snapshot_is_independent_of_later_edits(self, store):
        store.set_patient_field("Cholesterol", 300)
        snapshot = store.commit_patient()
        store.set_patient_field("Cholesterol", 150)
        store.set_patient_field("ChestPainType", "TA")

        last = store.dataset.iloc[-1]
        assert snapshot["Cholesterol"] == 300
        assert last["Cholesterol"] == 300
        assert last["ChestPainType"] == DEFAULT_PATIENT["ChestPainType"]
        assert store.patient["Cholesterol"] == 150

    def test_commit_into_empty_store(self):
        store = StateStore()
        store.commit_patient()
        assert len(store) == 1
        assert list(store.dataset.columns) == list(FIELDS)
        assert store.dataset.iloc[0]["Age"] == DEFAULT_PATIENT["Age"]


class TestLoadDataset:

    def test_replaces_wholesale(self, store):
        store.load_dataset([{"Age": 50, "ChestPainType": "ASY"}])
        assert len(store) == 1
        assert list(store.dataset.columns) == list(FIELDS)
        assert math.isnan(store.dataset.iloc[0]["Cholesterol"])

    def test_accepts_dataframe(self, store):
        df = pd.DataFrame({"Age": [30, 40], "MaxHR": [180, 170], "Extra": [1, 2]})
        store.load_dataset(df)
        assert len(store) == 2
        assert "Extra" not in store.dataset.columns

    def test_keeps_filters(self, store):
        store.toggle_chest_pain_filter("ATA")
        store.load_dataset([])
        assert store.filters.chest_pain == "ATA"
        assert len(store) == 0

    def test_unparseable_numbers_become_nan_not_zero(self):
        df = to_frame([{"Age": "old", "Cholesterol": "200"}])
        assert math.isnan(df.iloc[0]["Age"])
        assert df.iloc[0]["Cholesterol"] == 200


class TestFilters:

    def test_toggle_age_range_twice_clears(self, store):
        r = AgeRange(40, 44)
        store.toggle_age_range_filter(r)
        assert store.filters.age_range == r
        store.toggle_age_range_filter(r)
        assert store.filters.age_range is None

    def test_toggle_twice_restores_identical_active_range(self, store):
        r = AgeRange(60, 64)
        store.toggle_age_range_filter(r)
        before = store.filters
        store.toggle_age_range_filter(r)
        store.toggle_age_range_filter(r)
        assert store.filters == before

    def test_same_lower_bound_clears(self, store):
        store.toggle_age_range_filter(AgeRange(40, 44))
        store.toggle_age_range_filter(AgeRange(40, 48))
        assert store.filters.age_range is None

    def test_different_range_replaces(self, store):
        store.toggle_age_range_filter(AgeRange(40, 44))
        store.toggle_age_range_filter(AgeRange(44, 48))
        assert store.filters.age_range == AgeRange(44, 48)

    def test_chest_pain_toggle(self, store):
        store.toggle_chest_pain_filter("ATA")
        assert store.filters.chest_pain == "ATA"
        store.toggle_chest_pain_filter("ASY")
        assert store.filters.chest_pain == "ASY"
        store.toggle_chest_pain_filter("ASY")
        assert store.filters.chest_pain is None

    def test_filters_are_independent(self, store):
        store.toggle_age_range_filter(AgeRange(40, 44))
        store.toggle_chest_pain_filter("ATA")
        store.toggle_chest_pain_filter("ATA")
        assert store.filters == FilterState(age_range=AgeRange(40, 44))

    def test_filters_never_change_dataset(self, store):
        before = store.dataset.copy()
        store.toggle_age_range_filter(AgeRange(40, 44))
        store.toggle_chest_pain_filter("ATA")
        pd.testing.assert_frame_equal(store.dataset, before)

    def test_clear_filters(self, store):
        store.toggle_age_range_filter(AgeRange(40, 44))
        store.toggle_chest_pain_filter("ATA")
        assert store.filters.active
        store.clear_filters()
        assert not store.filters.active

    def test_age_range_contains_is_half_open(self):
        r = AgeRange(40, 44)
        assert r.contains(40)
        assert r.contains(43.9)
        assert not r.contains(44)
        assert not r.contains(None)
