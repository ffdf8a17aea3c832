"""
Synchronization of CTD and engineering profile masks.

The CTD and engineering streams of one profile are sampled by independent
clocks. Each stream's mask is resampled onto the other stream's timestamps
and the two are combined so that a sample survives only where both streams
agree the data are good. The processed 1 Hz CTD pressure is more accurate
than the raw engineering pressure, so afterwards the engineering pressure and
dP/dt are replaced by values interpolated from the CTD record.
"""
from typing import Tuple

import numpy as np
from loguru import logger

from mmp_qc.config import (
    STATUS_MASK_BAD,
    STATUS_NOT_SYNCED,
    STATUS_SYNCED,
    SYNC_STAGE,
)
from mmp_qc.records.models import CtdRecord, EngRecord, ProfileRecord


def _mask_values(record: ProfileRecord) -> np.ndarray:
    # a record with timestamps but no mask has nothing validated
    if record.profile_mask.size != record.time.size:
        return np.zeros(record.time.shape, dtype=float)
    return record.profile_mask.astype(float)


def interp_mask(source_time, source_mask, target_time) -> np.ndarray:
    """
    Linearly resample a 0/1 mask onto ``target_time``. Targets outside the
    source time range get 0.
    """
    return np.interp(
        np.asarray(target_time, dtype=float),
        np.asarray(source_time, dtype=float),
        np.asarray(source_mask, dtype=float),
        left=0.0,
        right=0.0,
    )


def good_interval_mask(source_time, source_mask, target_time) -> np.ndarray:
    """
    True where ``target_time`` lies inside a closed interval of good source
    samples. Targets between a good and a bad source sample interpolate to a
    fractional value and are bad.
    """
    return interp_mask(source_time, source_mask, target_time) == 1.0


def _interp_channel(source_time, values, target_time) -> np.ndarray:
    if values.size == 0:
        return np.full(target_time.shape, np.nan)
    return np.interp(target_time, source_time, values, left=np.nan, right=np.nan)


def sync_ctd_eng(ctd: CtdRecord, eng: EngRecord) -> Tuple[CtdRecord, EngRecord]:
    """
    Synchronize the profile masks of paired CTD and engineering records.

    Both records are modified in place and returned. The engineering profile
    date and backtrack flag are always transferred to the CTD record, since
    the eng timestamps give a profile date even when there are no data.
    """
    ctd.provenance.record(SYNC_STAGE)
    eng.provenance.record(SYNC_STAGE)

    ctd.profile_date = eng.profile_date
    ctd.backtrack_flag = eng.backtrack_flag

    if eng.pressure.size == 0 or ctd.pressure.size == 0 or eng.time.size == 0:
        ctd.provenance.note(STATUS_NOT_SYNCED)
        eng.provenance.note(STATUS_NOT_SYNCED)
        return ctd, eng

    eng.profile_direction = ctd.profile_direction

    # with several backtracks in one eng file the pressure records can be
    # valid while the ctd time is not
    if ctd.time.size == 0 or not np.all(np.isfinite(ctd.time)):
        logger.warning(
            "No valid ctd timestamps found while syncing: ctd profile mask "
            f"set to all false for profile {ctd.profile_number}."
        )
        ctd.provenance.note(STATUS_MASK_BAD)
        ctd.profile_mask = np.zeros(ctd.pressure.shape, dtype=bool)
        ctd.time = np.full(ctd.pressure.shape, np.nan)
        eng.provenance.note(STATUS_NOT_SYNCED)
        return ctd, eng

    ctd_from_eng = good_interval_mask(eng.time, _mask_values(eng), ctd.time)
    eng_from_ctd = good_interval_mask(ctd.time, _mask_values(ctd), eng.time)

    ctd.profile_mask = _mask_values(ctd).astype(bool) & ctd_from_eng
    eng.profile_mask = _mask_values(eng).astype(bool) & eng_from_ctd

    eng.pressure = _interp_channel(ctd.time, ctd.pressure, eng.time)
    eng.dpdt = _interp_channel(ctd.time, ctd.dpdt, eng.time)

    ctd.provenance.note(STATUS_SYNCED)
    eng.provenance.note(STATUS_SYNCED)
    return ctd, eng
