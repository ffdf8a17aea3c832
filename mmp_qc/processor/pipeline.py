from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from mmp_qc.config import STATUS_MASK_BAD, STATUS_NOT_SYNCED
from mmp_qc.processor.backtrack import flag_backtrack
from mmp_qc.processor.quality import void_short_profiles
from mmp_qc.processor.sync import sync_ctd_eng
from mmp_qc.records.models import Ad2cpRecord, CtdRecord, EngRecord, ProfileRecord
from mmp_qc.settings.main import QcSettings, qc_settings
from mmp_qc.settings.models import VoidThresholds
from mmp_qc.utils.validate import check_index_alignment


class ReconcileSummary(BaseModel):
    profiles: List[int] = []
    backtrack_code: int = 1
    timing_faults: List[int] = []
    not_synced: List[int] = []
    voided: Dict[str, List[int]] = {}


def select_profiles(
    n_records: int, profiles_selected: Optional[Iterable[int]] = None
) -> List[int]:
    """Profile numbers to process; profile 0 is never processed"""
    if profiles_selected is None:
        return list(range(1, n_records))
    profiles = []
    for profile in profiles_selected:
        if profile == 0:
            continue
        if not 0 < profile < n_records:
            raise IndexError(
                f"Profile {profile} is outside the deployment (0-{n_records - 1})"
            )
        profiles.append(int(profile))
    return profiles


def check_stream_pair(ctd: Sequence[CtdRecord], eng: Sequence[EngRecord]) -> None:
    """Both streams must hold one record per profile, in profile order"""
    if len(ctd) != len(eng):
        raise ValueError(
            f"ctd ({len(ctd)}) and eng ({len(eng)}) arrays must have one record per profile"
        )
    check_index_alignment(ctd)
    check_index_alignment(eng)


def record_sync_outcome(
    summary: ReconcileSummary, profile: int, ctd: CtdRecord, eng: EngRecord
) -> None:
    if ctd.provenance.last_status == STATUS_MASK_BAD:
        summary.timing_faults.append(profile)
    elif eng.provenance.last_status == STATUS_NOT_SYNCED:
        summary.not_synced.append(profile)


def log_sync_outcomes(summary: ReconcileSummary) -> None:
    if summary.timing_faults:
        logger.warning(f"Profiles with ctd timing faults: {summary.timing_faults}")
    if summary.not_synced:
        logger.info(f"Profiles not synced (no data): {summary.not_synced}")


def void_stream(
    records: Sequence[ProfileRecord], profiles: List[int], thresholds: VoidThresholds
) -> List[int]:
    """
    Void the short profiles of one stream and return their numbers. Profiles
    beyond the end of the stream are left out, the ad2cp stream may stop
    before the ctd and eng streams do.
    """
    profiles = [p for p in profiles if p < len(records)]
    if thresholds.disabled:
        logger.info("Short profile thresholds disabled, no profiles will be voided")
    _, voided = void_short_profiles(
        records,
        profiles,
        thresholds.field_name,
        thresholds.npts_min,
        thresholds.range_min,
    )
    return voided


def reconcile_deployment(
    ctd: Sequence[CtdRecord],
    eng: Sequence[EngRecord],
    settings: Optional[QcSettings] = None,
    profiles_selected: Optional[Iterable[int]] = None,
    ad2cp: Optional[Sequence[Ad2cpRecord]] = None,
) -> ReconcileSummary:
    """
    Run backtrack flagging, mask synchronization and short profile voiding
    over a deployment. Records are modified in place.

    Each profile is processed independently of the others; a fault in one
    profile is recorded in its data status and never stops the batch.
    """
    if settings is None:
        settings = qc_settings

    check_stream_pair(ctd, eng)
    if ad2cp is not None:
        check_index_alignment(ad2cp)

    profiles = select_profiles(len(eng), profiles_selected)
    code = settings.backtrack.processing_flag
    summary = ReconcileSummary(profiles=profiles, backtrack_code=code)

    logger.info(
        f"Reconciling {len(profiles)} profiles with backtrack code {code}"
    )
    for profile in profiles:
        flag_backtrack(eng[profile], code)
        sync_ctd_eng(ctd[profile], eng[profile])
        record_sync_outcome(summary, profile, ctd[profile], eng[profile])
    log_sync_outcomes(summary)

    summary.voided["eng"] = void_stream(eng, profiles, settings.eng_void)
    summary.voided["ctd"] = void_stream(ctd, profiles, settings.ctd_void)
    if ad2cp is not None:
        summary.voided["ad2cp"] = void_stream(ad2cp, profiles, settings.ad2cp_void)

    return summary
