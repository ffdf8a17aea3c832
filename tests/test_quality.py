"""
Unit tests for short profile voiding.
"""

import numpy as np
import pytest

from mmp_qc.exceptions import UnknownFieldError
from mmp_qc.processor.quality import is_short_profile, value_range, void_short_profiles
from mmp_qc.records import CtdRecord, EngRecord


@pytest.fixture
def eng_stream(make_eng):
    return [
        EngRecord.empty(0),
        make_eng(np.linspace(10, 200, 100), profile_number=1),
        make_eng([10, 11, 12], profile_number=2),
        EngRecord.empty(3),
        make_eng([10, 10, 10, 10, 10, 10], profile_number=4),
    ]


# =========================================================================
# Discriminator tests
# =========================================================================
class TestDiscriminators:

    def test_value_range(self):
        assert value_range([3, 9, 1]) == 8

    def test_value_range_empty_or_nonfinite_is_zero(self):
        assert value_range([]) == 0
        assert value_range([1, np.nan, 50]) == 0
        assert value_range([1, np.inf]) == 0

    def test_count_threshold_is_inclusive(self, make_eng):
        eng = make_eng([10, 20, 30])
        assert is_short_profile(eng, "pressure", 3, -1)
        assert not is_short_profile(eng, "pressure", 2, -1)

    def test_range_threshold_is_inclusive(self, make_eng):
        eng = make_eng([10, 20, 30])
        assert is_short_profile(eng, "pressure", -1, 20)
        assert not is_short_profile(eng, "pressure", -1, 19.9)


# =========================================================================
# void_short_profiles
# =========================================================================
class TestVoidShortProfiles:

    def test_disabled_thresholds_void_nothing(self, eng_stream):
        """npts_min = range_min = -1 never voids, even empty profiles."""
        _, voided = void_short_profiles(eng_stream, [1, 2, 3, 4], "pressure", -1, -1)
        assert voided == []
        assert all(eng_stream[p].data_status[-1] == "noChange" for p in [1, 2, 3, 4])

    def test_short_profiles_emptied(self, eng_stream):
        _, voided = void_short_profiles(eng_stream, [1, 2, 3, 4], "pressure", 5, 1.0)
        assert voided == [2, 3, 4]
        for p in voided:
            record = eng_stream[p]
            assert record.profile_number == p
            assert record.data_status[-1] == "allDataSetToEMPTY"
            for name in EngRecord.sensor_fields:
                assert len(getattr(record, name)) == 0
        assert eng_stream[1].data_status[-1] == "noChange"
        assert eng_stream[1].pressure.size == 100

    def test_void_keeps_metadata(self, eng_stream):
        date = eng_stream[2].profile_date
        void_short_profiles(eng_stream, [2], "pressure", 5, -1)
        assert eng_stream[2].profile_date == date
        assert eng_stream[2].profile_number == 2

    def test_unselected_records_untouched(self, eng_stream):
        history_before = list(eng_stream[2].operation_history)
        records, voided = void_short_profiles(eng_stream, [1, 4], "pressure", 5, 1.0)
        assert records is eng_stream
        assert len(records) == 5
        assert voided == [4]
        assert eng_stream[2].pressure.size == 3
        assert eng_stream[2].operation_history == history_before

    def test_stage_recorded_for_every_selected(self, eng_stream):
        void_short_profiles(eng_stream, [1, 2], "pressure", 5, 1.0)
        assert eng_stream[1].operation_history[-1] == "void_short_profiles"
        assert eng_stream[2].operation_history[-1] == "void_short_profiles"
        assert eng_stream[0].operation_history[-1] != "void_short_profiles"

    def test_nan_in_discriminator_counts_as_zero_range(self, make_ctd):
        ctd = [CtdRecord.empty(0), make_ctd([10, np.nan, 300], profile_number=1)]
        _, voided = void_short_profiles(ctd, [1], "pressure", -1, 0.5)
        assert voided == [1]

    def test_2d_fields_keep_columns(self, make_ad2cp):
        stream = [make_ad2cp([], profile_number=0), make_ad2cp([1, 1, 1], profile_number=1)]
        _, voided = void_short_profiles(stream, [1], "heading", -1, 5)
        assert voided == [1]
        assert stream[1].velocity.shape == (0, 3)

    def test_unknown_field_raises_before_mutation(self, eng_stream):
        with pytest.raises(UnknownFieldError):
            void_short_profiles(eng_stream, [1, 2], "salinity", 5, 1.0)
        assert eng_stream[2].pressure.size == 3
        assert eng_stream[2].operation_history[-1] != "void_short_profiles"
