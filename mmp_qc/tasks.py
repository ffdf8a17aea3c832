from typing import List, Optional, Tuple

from prefect import get_run_logger, task

from mmp_qc.processor import flag_backtrack, sync_ctd_eng
from mmp_qc.processor.pipeline import void_stream
from mmp_qc.records.models import CtdRecord, EngRecord, ProfileRecord
from mmp_qc.settings.models import VoidThresholds
from mmp_qc.utils.store import load_records, save_records
from mmp_qc.utils.validate import check_index_alignment


@task
def load_stream(path: str, storage_options: Optional[dict] = None) -> List[ProfileRecord]:
    logger = get_run_logger()
    logger.info(f"=== Loading profiles from {path} ===")
    records = load_records(path, storage_options=storage_options)
    check_index_alignment(records)
    logger.info(f"Loaded {len(records)} {records[0].stream} records")
    return records


@task
def flag_backtracks(eng: List[EngRecord], profiles: List[int], code: int):
    logger = get_run_logger()
    logger.info(f"=== Flagging backtracks with code {code} ===")
    for profile in profiles:
        flag_backtrack(eng[profile], code)
    return eng


@task
def sync_profile(ctd: CtdRecord, eng: EngRecord) -> Tuple[CtdRecord, EngRecord]:
    return sync_ctd_eng(ctd, eng)


@task
def void_profiles(
    records: List[ProfileRecord],
    profiles: List[int],
    thresholds: VoidThresholds,
):
    logger = get_run_logger()
    logger.info(f"=== Voiding short {records[0].stream} profiles ===")
    voided = void_stream(records, profiles, thresholds)
    logger.info(f"Voided profiles: {voided if voided else 'None'}")
    return records, voided


@task
def write_stream(
    records: List[ProfileRecord],
    path: str,
    storage_options: Optional[dict] = None,
) -> str:
    logger = get_run_logger()
    logger.info(f"=== Writing reconciled profiles to {path} ===")
    return save_records(records, path, storage_options=storage_options)
