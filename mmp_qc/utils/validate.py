"""
This module contains functions helpful for checking and validating
profile record arrays before they enter the processing stages.
"""
from typing import Sequence

import numpy as np
from loguru import logger

from mmp_qc.exceptions import DuplicateTimeStampError
from mmp_qc.records.models import ProfileRecord


def check_for_timestamp_duplicates(record: ProfileRecord) -> None:
    timestamps_sorted = np.sort(record.time[np.isfinite(record.time)])
    duplicate_indices = np.where(timestamps_sorted[1:] == timestamps_sorted[:-1])[0]

    if len(duplicate_indices) > 0:
        first_duplicate = timestamps_sorted[min(duplicate_indices)]
        last_duplicate = timestamps_sorted[max(duplicate_indices)]

        message = (
            f"There are {len(duplicate_indices)} duplicate time stamps between "
            f"{first_duplicate} and {last_duplicate} in {record.stream} profile "
            f"{record.profile_number}."
        )
        logger.error(message)
        raise DuplicateTimeStampError(message)


def check_index_alignment(records: Sequence[ProfileRecord]) -> None:
    """Every record must sit at the list index equal to its profile number"""
    misplaced = [
        (index, record.profile_number)
        for index, record in enumerate(records)
        if record.profile_number != index
    ]
    if misplaced:
        raise ValueError(
            f"Records are not indexed by profile number (index, profile): {misplaced[:5]}"
        )
