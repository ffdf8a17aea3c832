"""
Integration tests for reconciling a whole deployment.
"""

import numpy as np
import pytest

from mmp_qc.processor.pipeline import reconcile_deployment, select_profiles
from mmp_qc.records import CtdRecord, EngRecord
from mmp_qc.settings import QcSettings


def _settings(code=3, npts_min=-1, range_min=-1):
    return QcSettings.from_flat(
        {
            "backtrack_processing_flag": code,
            "eng_pressure_nptsMin": npts_min,
            "eng_pressure_rangeMin_db": range_min,
            "ctd_pressure_nptsMin": npts_min,
            "ctd_pressure_rangeMin_db": range_min,
        }
    )


class TestSelectProfiles:

    def test_default_skips_profile_zero(self):
        assert select_profiles(4) == [1, 2, 3]

    def test_explicit_selection_drops_zero(self):
        assert select_profiles(4, [0, 2]) == [2]

    def test_out_of_range_rejected(self):
        with pytest.raises(IndexError):
            select_profiles(3, [5])


class TestReconcileDeployment:

    def test_stages_run_in_order(self, deployment):
        ctd, eng = deployment
        reconcile_deployment(ctd, eng, settings=_settings())
        assert eng[1].operation_history == [
            "import_profile",
            "flag_backtrack",
            "sync_ctd_eng",
            "void_short_profiles",
        ]
        assert ctd[1].operation_history == [
            "import_profile",
            "sync_ctd_eng",
            "void_short_profiles",
        ]

    def test_profile_zero_never_processed(self, deployment):
        ctd, eng = deployment
        reconcile_deployment(ctd, eng, settings=_settings())
        assert eng[0].operation_history == ["import_profile"]
        assert ctd[0].operation_history == ["import_profile"]

    def test_short_profiles_voided(self, deployment):
        ctd, eng = deployment
        summary = reconcile_deployment(ctd, eng, settings=_settings(npts_min=5))
        assert summary.voided == {"eng": [2], "ctd": [2]}
        assert eng[2].is_empty
        assert ctd[2].is_empty
        assert eng[1].pressure.size == 50

    def test_code_one_leaves_no_good_data(self, deployment):
        ctd, eng = deployment
        reconcile_deployment(ctd, eng, settings=_settings(code=1))
        assert not eng[1].profile_mask.any()
        assert not ctd[1].profile_mask.any()

    def test_code_three_syncs_leading_zeros(self, deployment):
        """Ctd samples recorded while eng pressure read 0 end up bad."""
        ctd, eng = deployment
        reconcile_deployment(ctd, eng, settings=_settings(code=3))
        assert ctd[1].profile_mask.tolist() == [False, False] + [True] * 48
        np.testing.assert_allclose(eng[1].pressure, ctd[1].pressure)

    def test_timing_fault_reported(self, deployment):
        ctd, eng = deployment
        ctd[1].time[5] = np.nan
        summary = reconcile_deployment(ctd, eng, settings=_settings())
        assert summary.timing_faults == [1]
        assert ctd[2].data_status[-2] == "sync'ed"

    def test_empty_profiles_reported_not_synced(self, deployment):
        ctd, eng = deployment
        ctd.append(CtdRecord.empty(3))
        eng.append(EngRecord.empty(3))
        summary = reconcile_deployment(ctd, eng, settings=_settings())
        assert summary.not_synced == [3]

    def test_misaligned_arrays_rejected(self, deployment):
        ctd, eng = deployment
        with pytest.raises(ValueError):
            reconcile_deployment(ctd[:2], eng, settings=_settings())

    def test_records_out_of_profile_order_rejected(self, deployment):
        ctd, eng = deployment
        ctd[1], ctd[2] = ctd[2], ctd[1]
        with pytest.raises(ValueError):
            reconcile_deployment(ctd, eng, settings=_settings())

    def test_ad2cp_stream_voided_on_heading(self, deployment, make_ad2cp):
        ctd, eng = deployment
        ad2cp = [
            make_ad2cp([], profile_number=0),
            make_ad2cp(np.linspace(0, 90, 30), profile_number=1),
            make_ad2cp([45, 45, 45], profile_number=2),
        ]
        settings = _settings()
        settings.ad2cp_void.range_min = 1.0
        summary = reconcile_deployment(ctd, eng, settings=settings, ad2cp=ad2cp)
        assert summary.voided["ad2cp"] == [2]
        assert ad2cp[2].velocity.shape == (0, 3)

    def test_profiles_are_independent(self, deployment, make_ctd, make_eng):
        """Processing a subset gives the same result as processing all."""
        ctd, eng = deployment
        reconcile_deployment(ctd, eng, settings=_settings(), profiles_selected=[1])
        subset_mask = ctd[1].profile_mask.copy()

        pressure = np.linspace(10, 100, 50)
        ctd_all = [CtdRecord.empty(0), make_ctd(pressure), make_ctd([1, 2], profile_number=2)]
        eng_all = [
            EngRecord.empty(0),
            make_eng(np.concatenate([[0, 0], pressure[2:]])),
            make_eng([1, 2], profile_number=2),
        ]
        reconcile_deployment(ctd_all, eng_all, settings=_settings())
        np.testing.assert_array_equal(ctd_all[1].profile_mask, subset_mask)
