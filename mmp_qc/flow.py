import os
from typing import List, Optional

from prefect import flow, get_run_logger

from mmp_qc.processor.pipeline import (
    ReconcileSummary,
    check_stream_pair,
    log_sync_outcomes,
    record_sync_outcome,
    select_profiles,
)
from mmp_qc.settings.main import load_settings
from mmp_qc.tasks import (
    flag_backtracks,
    load_stream,
    sync_profile,
    void_profiles,
    write_stream,
)


@flow
def reconcile_stores(
    ctd_path: str,
    eng_path: str,
    target_dir: str,
    config_path: Optional[str] = None,
    profiles: Optional[List[int]] = None,
    storage_options: Optional[dict] = None,
    ad2cp_path: Optional[str] = None,
) -> ReconcileSummary:
    """
    Reconcile the CTD and engineering streams of one deployment.

    Args:
        ctd_path (str): zarr store holding the imported CTD records
        eng_path (str): zarr store holding the imported engineering records
        target_dir (str): directory receiving the reconciled ``ctd.zarr`` and
            ``eng.zarr`` stores, and ``ad2cp.zarr`` when an ad2cp store is given
        config_path (Optional[str]): YAML processing configuration; the
            environment defaults are used when not given
        profiles (Optional[List[int]]): profile numbers to process, all but
            profile 0 when not given
        storage_options (Optional[dict]): fsspec options for remote stores
        ad2cp_path (Optional[str]): zarr store holding the imported ad2cp
            records; only short profile voiding applies to it

    Each profile pair is synced as its own task run; profiles share no data
    so the runs are independent.
    """
    logger = get_run_logger()
    settings = load_settings(config_path)

    ctd = load_stream(ctd_path, storage_options)
    eng = load_stream(eng_path, storage_options)
    check_stream_pair(ctd, eng)
    ad2cp = None
    if ad2cp_path is not None:
        ad2cp = load_stream(ad2cp_path, storage_options)

    selected = select_profiles(len(eng), profiles)
    code = settings.backtrack.processing_flag
    summary = ReconcileSummary(profiles=selected, backtrack_code=code)
    logger.info(f"Reconciling {len(selected)} profiles with backtrack code {code}")

    eng = flag_backtracks(eng, selected, code)

    futures = sync_profile.map(
        [ctd[p] for p in selected], [eng[p] for p in selected]
    )
    for profile, future in zip(selected, futures):
        ctd[profile], eng[profile] = future.result()
        record_sync_outcome(summary, profile, ctd[profile], eng[profile])
    log_sync_outcomes(summary)

    eng, summary.voided["eng"] = void_profiles(eng, selected, settings.eng_void)
    ctd, summary.voided["ctd"] = void_profiles(ctd, selected, settings.ctd_void)
    if ad2cp is not None:
        ad2cp, summary.voided["ad2cp"] = void_profiles(
            ad2cp, selected, settings.ad2cp_void
        )

    write_stream(ctd, os.path.join(target_dir, "ctd.zarr"), storage_options)
    write_stream(eng, os.path.join(target_dir, "eng.zarr"), storage_options)
    if ad2cp is not None:
        write_stream(ad2cp, os.path.join(target_dir, "ad2cp.zarr"), storage_options)

    logger.info("Reconciliation flow complete")
    return summary


if __name__ == "__main__":
    reconcile_stores(
        ctd_path=os.environ["MMP_QC_CTD_STORE"],
        eng_path=os.environ["MMP_QC_ENG_STORE"],
        target_dir=os.environ.get("MMP_QC_TARGET_DIR", os.getcwd()),
        ad2cp_path=os.environ.get("MMP_QC_AD2CP_STORE"),
    )
