"""
Zarr persistence of deployment streams.

A stream (one list of records, indexed by profile number) is written as a
single zarr group. Per-profile scalars live on the ``profile`` dimension;
each sequence field is concatenated over all profiles on its own
``<field>_obs`` dimension with a ``<field>_count`` variable giving the number
of samples each profile contributes, so that empty fields and empty profiles
survive the round trip unchanged. The provenance lists of each profile are
stored as JSON strings, since status text is free form.
"""
import datetime
import json
from typing import Dict, List, Optional, Sequence

import fsspec
import numpy as np
import xarray as xr
from loguru import logger

from mmp_qc.config import TIME_CALENDAR, TIME_UNITS
from mmp_qc.exceptions import StoreNotFoundError
from mmp_qc.records.models import RECORD_TYPES, ProfileDirection, ProfileRecord
from mmp_qc.records.provenance import ProvenanceLog
from mmp_qc.utils.validate import check_for_timestamp_duplicates

PROFILE_DIM = "profile"


def _join(items: List[str]) -> str:
    return json.dumps(items)


def _split(text: str) -> List[str]:
    if not text:
        return []
    return json.loads(text)


def _trailing_shape(record_cls, name: str, arrays) -> tuple:
    for values in arrays:
        if values.size > 0:
            return values.shape[1:]
    return getattr(record_cls(), name).shape[1:]


def records_to_dataset(records: Sequence[ProfileRecord]) -> xr.Dataset:
    """Pack a deployment stream into a dataset"""
    if not records:
        raise ValueError("Cannot build a dataset from an empty record list")
    record_cls = type(records[0])
    if any(type(record) is not record_cls for record in records):
        raise TypeError("All records of a stream must be of the same type")

    data_vars = {
        "profile_number": (
            PROFILE_DIM,
            np.array([r.profile_number for r in records], dtype=np.int64),
        ),
        "profile_date": (
            PROFILE_DIM,
            np.array([r.profile_date for r in records], dtype=float),
        ),
        "profile_direction": (
            PROFILE_DIM,
            np.array([r.profile_direction.value for r in records]),
        ),
        "backtrack_flag": (
            PROFILE_DIM,
            np.array([r.backtrack_flag or "" for r in records]),
        ),
        "acquisition_rate_hz": (
            PROFILE_DIM,
            np.array([r.acquisition_rate_hz for r in records], dtype=float),
        ),
        "deployment_id": (
            PROFILE_DIM,
            np.array([r.deployment_id for r in records]),
        ),
        "data_status": (
            PROFILE_DIM,
            np.array([_join(r.data_status) for r in records]),
        ),
        "operation_history": (
            PROFILE_DIM,
            np.array([_join(r.operation_history) for r in records]),
        ),
    }

    for name in record_cls.array_fields():
        arrays = [getattr(record, name) for record in records]
        trailing = _trailing_shape(record_cls, name, arrays)
        arrays = [
            values if values.size > 0 else np.zeros((0,) + trailing, dtype=values.dtype)
            for values in arrays
        ]
        dims = (f"{name}_obs",) + tuple(f"{name}_col{i}" for i in range(len(trailing)))
        data_vars[name] = (dims, np.concatenate(arrays, axis=0))
        data_vars[f"{name}_count"] = (
            PROFILE_DIM,
            np.array([len(values) for values in arrays], dtype=np.int64),
        )

    ds = xr.Dataset(data_vars)
    ds["time"].attrs.update({"units": TIME_UNITS, "calendar": TIME_CALENDAR})
    ds["profile_date"].attrs.update({"units": TIME_UNITS, "calendar": TIME_CALENDAR})
    ds.attrs["stream"] = record_cls.stream
    ds.attrs["date_processed"] = datetime.datetime.now().isoformat()
    return ds


def dataset_to_records(
    ds: xr.Dataset, check_duplicates: bool = True
) -> List[ProfileRecord]:
    """Unpack a dataset written by ``records_to_dataset``"""
    stream = ds.attrs.get("stream")
    if stream not in RECORD_TYPES:
        raise ValueError(f"Unknown record stream in dataset: {stream}")
    record_cls = RECORD_TYPES[stream]

    n_profiles = ds.sizes[PROFILE_DIM]
    fields: Dict[str, List[np.ndarray]] = {}
    for name in record_cls.array_fields():
        counts = ds[f"{name}_count"].values
        values = ds[name].values
        fields[name] = np.split(values, np.cumsum(counts)[:-1], axis=0)

    records = []
    for i in range(n_profiles):
        backtrack = str(ds["backtrack_flag"].values[i])
        record = record_cls(
            deployment_id=str(ds["deployment_id"].values[i]),
            profile_number=int(ds["profile_number"].values[i]),
            profile_date=float(ds["profile_date"].values[i]),
            profile_direction=ProfileDirection(str(ds["profile_direction"].values[i])),
            backtrack_flag=backtrack or None,
            acquisition_rate_hz=float(ds["acquisition_rate_hz"].values[i]),
            provenance=ProvenanceLog(
                data_status=_split(str(ds["data_status"].values[i])),
                operation_history=_split(str(ds["operation_history"].values[i])),
            ),
            **{name: pieces[i] for name, pieces in fields.items()},
        )
        if check_duplicates:
            check_for_timestamp_duplicates(record)
        records.append(record)
    return records


def is_store_ready(store) -> bool:
    return store.get(".zmetadata") is not None


def save_records(
    records: Sequence[ProfileRecord],
    path: str,
    storage_options: Optional[dict] = None,
) -> str:
    store = fsspec.get_mapper(path, **(storage_options or {}))
    ds = records_to_dataset(records)
    logger.info(f"Writing {len(records)} {ds.attrs['stream']} profiles to {path}")
    ds.to_zarr(store, mode="w", consolidated=True)
    return path


def load_records(
    path: str,
    storage_options: Optional[dict] = None,
    check_duplicates: bool = True,
) -> List[ProfileRecord]:
    store = fsspec.get_mapper(path, **(storage_options or {}))
    if not is_store_ready(store):
        raise StoreNotFoundError(f"No consolidated zarr store found at {path}")
    logger.info(f"Reading profiles from {path}")
    with xr.open_dataset(
        store, engine="zarr", consolidated=True, decode_times=False, chunks=None
    ) as ds:
        ds = ds.load()
    return dataset_to_records(ds, check_duplicates=check_duplicates)
