from typing import Iterable, List, Sequence, Tuple

import numpy as np
from loguru import logger

from mmp_qc.config import STATUS_NO_CHANGE, STATUS_VOIDED, VOID_STAGE
from mmp_qc.exceptions import UnknownFieldError
from mmp_qc.records.models import ProfileRecord


def value_range(values) -> float:
    """max - min, taken as 0 when there are no values or any is not finite"""
    values = np.asarray(values, dtype=float)
    if values.size == 0 or not np.all(np.isfinite(values)):
        return 0.0
    return float(values.max() - values.min())


def is_short_profile(
    record: ProfileRecord, field_name: str, npts_min: int, range_min: float
) -> bool:
    values = getattr(record, field_name)
    too_few = len(values) <= npts_min
    too_narrow = value_range(values) <= range_min
    return bool(too_few or too_narrow)


def void_short_profiles(
    records: Sequence[ProfileRecord],
    profiles_selected: Iterable[int],
    field_name: str,
    npts_min: int,
    range_min: float,
) -> Tuple[Sequence[ProfileRecord], List[int]]:
    """
    Empty the sensor data of selected profiles that have too few points or
    too small a range of values in ``field_name``.

    Parameters
    ----------
    records : list of ProfileRecord
        Deployment stream indexed by profile number; modified in place
    profiles_selected : iterable of int
        Profile numbers to evaluate; other records are left untouched
    field_name : str
        Sequence field used as discriminator, usually ``pressure``
        (``heading`` for current meter data)
    npts_min : int
        A profile with ``npts_min`` points or fewer is voided; -1 disables
    range_min : float
        A profile whose value range is ``range_min`` or less is voided;
        -1 disables

    Returns
    -------
    tuple
        The records and the list of voided profile numbers
    """
    profiles_selected = list(dict.fromkeys(int(p) for p in profiles_selected))
    selected = [records[p] for p in profiles_selected]

    for record in selected:
        if field_name not in record.array_fields():
            raise UnknownFieldError(
                f"{field_name} is not a sequence field of {record.stream} records"
            )

    voided = []
    for profile_number, record in zip(profiles_selected, selected):
        record.provenance.record(VOID_STAGE)
        if is_short_profile(record, field_name, npts_min, range_min):
            record.void()
            record.provenance.note(STATUS_VOIDED)
            voided.append(profile_number)
        else:
            record.provenance.note(STATUS_NO_CHANGE)

    stream = selected[0].stream if selected else "profile"
    if not voided:
        logger.info(f"Number of short {stream} profiles discarded: None")
    else:
        logger.info(f"Number of short {stream} profiles discarded: {len(voided)}")
        logger.info(f"Profile numbers discarded: {' '.join(map(str, voided))}")

    return records, voided
