"""
Flagging of backtrack episodes in engineering profiles.

A backtrack is a period where the profiler stalls or reverses mid-cast. The
engineering pressure sensor reports exactly 0 during such episodes, the same
value it reports before profiling starts, so the import-time mask is
``pressure != 0``. The backtrack code chooses how much of the profile is
discarded once a backtrack has been signalled:

1. flag the entire profile bad (use when the data have not been examined)
2. flag data good up to about a minute before the first backtrack
3. flag bad only the zero pressure sections
"""
import math
from typing import Optional

import numpy as np
from loguru import logger

from mmp_qc.config import (
    BACKTRACK_STAGE,
    STATUS_BACKTRACK_FLAGGED,
    STATUS_BACKTRACK_ILLEGAL,
    STATUS_BACKTRACK_NOT_FLAGGED,
    TIMESHIFT_SECONDS,
)
from mmp_qc.records.models import ProfileRecord


def first_backtrack_index(profile_mask) -> Optional[int]:
    """Index of the first sample where the mask steps from good to bad"""
    steps = np.diff(np.asarray(profile_mask, dtype=np.int8))
    onsets = np.flatnonzero(steps < 0)
    if onsets.size == 0:
        return None
    return int(onsets[0]) + 1


def _shift_earlier(index: int, rate_hz: float, timeshift_seconds: float) -> int:
    shift = rate_hz * timeshift_seconds
    if not np.isfinite(shift):
        return 0
    return max(index - math.ceil(shift), 0)


def flag_backtrack(
    record: ProfileRecord,
    code: int,
    timeshift_seconds: float = TIMESHIFT_SECONDS,
) -> ProfileRecord:
    """
    Update the profile mask of an engineering record according to the
    backtrack code.

    Parameters
    ----------
    record : ProfileRecord
        Engineering profile; modified in place and returned
    code : int
        Backtrack processing code, one of 1, 2 or 3. Any other value leaves
        the mask untouched and is recorded in the data status.
    timeshift_seconds : float
        For code 2, how far before the detected backtrack the good data end.
        The detection lags the actual stall by about one minute.

    Returns
    -------
    ProfileRecord
        The same record
    """
    record.provenance.record(BACKTRACK_STAGE)

    if record.pressure.size == 0:
        record.provenance.note(STATUS_BACKTRACK_NOT_FLAGGED)
        return record

    if code == 1:
        record.profile_mask = np.zeros(record.pressure.shape, dtype=bool)
    elif code == 2:
        onset = first_backtrack_index(record.profile_mask)
        if onset is None:
            logger.debug(
                f"No backtrack found in profile {record.profile_number}, mask unchanged"
            )
        else:
            start = _shift_earlier(
                onset, record.acquisition_rate_hz, timeshift_seconds
            )
            mask = record.profile_mask.copy()
            mask[start:] = False
            record.profile_mask = mask
    elif code == 3:
        record.profile_mask = record.pressure != 0
    else:
        logger.warning(
            f"Illegal backtrack code {code!r} for profile {record.profile_number}; "
            "mask not modified"
        )
        record.provenance.note(STATUS_BACKTRACK_ILLEGAL)
        return record

    record.provenance.note(STATUS_BACKTRACK_FLAGGED.format(code=code))
    return record
