from enum import Enum
from typing import ClassVar, Dict, Literal, Optional, Tuple, Type

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from mmp_qc.config import IMPORT_STAGE, STATUS_IMPORTED, STATUS_NO_DATA
from mmp_qc.exceptions import RecordShapeError
from mmp_qc.records.provenance import ProvenanceLog


class ProfileDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"
    UNKNOWN = "unknown"


def _empty_float():
    return np.zeros(0, dtype=float)


def _empty_mask():
    return np.zeros(0, dtype=bool)


def acquisition_rate(time) -> float:
    """Sampling rate in Hz; NaN for fewer than 2 samples, inf for zero span"""
    time = np.asarray(time, dtype=float)
    if time.size < 2:
        return np.nan
    with np.errstate(divide="ignore", invalid="ignore"):
        return float((time.size - 1) / (time[-1] - time[0]))


def median_time(time) -> float:
    time = np.asarray(time, dtype=float)
    if not np.isfinite(time).any():
        return np.nan
    return float(np.nanmedian(time))


def detect_backtrack(pressure) -> Literal["yes", "no"]:
    """
    A backtrack shows up as exact zero pressure readings between nonzero
    readings. The leading zeros recorded before profiling starts, and any
    trailing ones after it stops, don't count.
    """
    pressure = np.asarray(pressure, dtype=float)
    profiling = np.flatnonzero(pressure != 0)
    if profiling.size == 0:
        return "no"
    inner = pressure[profiling[0]:profiling[-1] + 1]
    return "yes" if np.any(inner == 0) else "no"


class ProfileRecord(BaseModel):
    """
    One instrument stream's data for one profile.

    Sequence fields are numpy arrays whose first dimension is the sample
    axis. Records without data keep every field present with empty arrays
    and NaN scalars so that a deployment can be held in one homogeneous,
    profile-number indexed list.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    stream: ClassVar[str] = "profile"
    # fields emptied when a profile is voided, in processing order
    sensor_fields: ClassVar[Tuple[str, ...]] = ("time", "pressure", "dpdt")
    # field used to decide whether a profile holds enough data
    discriminator: ClassVar[str] = "pressure"

    deployment_id: str = ""
    profile_number: int = Field(0, ge=0)
    profile_date: float = np.nan
    profile_direction: ProfileDirection = ProfileDirection.UNKNOWN
    backtrack_flag: Optional[Literal["yes", "no"]] = None
    time: np.ndarray = Field(default_factory=_empty_float)
    pressure: np.ndarray = Field(default_factory=_empty_float)
    dpdt: np.ndarray = Field(default_factory=_empty_float)
    profile_mask: np.ndarray = Field(default_factory=_empty_mask)
    acquisition_rate_hz: float = np.nan
    provenance: ProvenanceLog = Field(default_factory=ProvenanceLog)

    @classmethod
    def array_fields(cls) -> Tuple[str, ...]:
        return cls.sensor_fields + ("profile_mask",)

    @model_validator(mode="before")
    @classmethod
    def coerce_arrays(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name in cls.array_fields():
            if name not in data or data[name] is None:
                continue
            dtype = bool if name == "profile_mask" else float
            data[name] = np.asarray(data[name], dtype=dtype)
        return data

    @model_validator(mode="after")
    def check_sample_axis(self):
        lengths = {
            name: len(getattr(self, name))
            for name in self.array_fields()
            if len(getattr(self, name)) > 0
        }
        if len(set(lengths.values())) > 1:
            raise RecordShapeError(
                f"{self.stream} profile {self.profile_number}: sequence fields "
                f"differ in length {lengths}"
            )
        return self

    @property
    def data_status(self):
        return self.provenance.data_status

    @property
    def operation_history(self):
        return self.provenance.operation_history

    @property
    def is_empty(self) -> bool:
        return all(len(getattr(self, name)) == 0 for name in self.array_fields())

    @classmethod
    def default_mask(cls, pressure: np.ndarray) -> np.ndarray:
        return np.ones(len(pressure), dtype=bool)

    @classmethod
    def empty(cls, profile_number: int, status: str = STATUS_NO_DATA, **kwargs):
        record = cls(profile_number=profile_number, **kwargs)
        record.provenance.record(IMPORT_STAGE, status)
        return record

    @classmethod
    def from_samples(
        cls,
        profile_number: int,
        time,
        pressure,
        profile_mask=None,
        **kwargs,
    ):
        """
        Build a populated record, deriving the profile date, the sampling
        rate and (unless given) the import-time profile mask.
        """
        time = np.asarray(time, dtype=float)
        pressure = np.asarray(pressure, dtype=float)
        if time.size == 0 and pressure.size == 0:
            return cls.empty(profile_number, **kwargs)
        if profile_mask is None:
            profile_mask = cls.default_mask(pressure)
        kwargs.setdefault("profile_date", median_time(time))
        kwargs.setdefault("acquisition_rate_hz", acquisition_rate(time))
        record = cls(
            profile_number=profile_number,
            time=time,
            pressure=pressure,
            profile_mask=profile_mask,
            **kwargs,
        )
        record.provenance.record(IMPORT_STAGE, STATUS_IMPORTED)
        return record

    def void(self) -> None:
        """Empty every sensor field and the mask, keeping trailing dimensions"""
        for name in self.array_fields():
            values = getattr(self, name)
            shape = (0,) + values.shape[1:]
            setattr(self, name, np.zeros(shape, dtype=values.dtype))


class CtdRecord(ProfileRecord):
    stream: ClassVar[str] = "ctd"
    sensor_fields: ClassVar[Tuple[str, ...]] = (
        "time",
        "pressure",
        "temperature",
        "conductivity",
        "dpdt",
    )

    temperature: np.ndarray = Field(default_factory=_empty_float)  # [degC]
    conductivity: np.ndarray = Field(default_factory=_empty_float)  # [mmho/cm]


class EngRecord(ProfileRecord):
    stream: ClassVar[str] = "eng"
    sensor_fields: ClassVar[Tuple[str, ...]] = (
        "time",
        "current",
        "voltage",
        "pressure",
        "oxygen",
        "optode_temperature",
        "chl",
        "bback",
        "eco_temperature",
        "dpdt",
    )

    current: np.ndarray = Field(default_factory=_empty_float)  # [mA]
    voltage: np.ndarray = Field(default_factory=_empty_float)  # [V]
    oxygen: np.ndarray = Field(default_factory=_empty_float)  # [uM]
    optode_temperature: np.ndarray = Field(default_factory=_empty_float)
    chl: np.ndarray = Field(default_factory=_empty_float)  # [counts]
    bback: np.ndarray = Field(default_factory=_empty_float)  # [counts]
    eco_temperature: np.ndarray = Field(default_factory=_empty_float)

    @classmethod
    def default_mask(cls, pressure: np.ndarray) -> np.ndarray:
        # raw eng pressure reads exactly 0 before profiling and during backtracks
        return np.asarray(pressure) != 0

    @classmethod
    def from_samples(cls, profile_number, time, pressure, profile_mask=None, **kwargs):
        kwargs.setdefault("backtrack_flag", detect_backtrack(pressure))
        return super().from_samples(
            profile_number, time, pressure, profile_mask=profile_mask, **kwargs
        )


def _empty_velocity():
    return np.zeros((0, 3), dtype=float)


class Ad2cpRecord(ProfileRecord):
    stream: ClassVar[str] = "ad2cp"
    sensor_fields: ClassVar[Tuple[str, ...]] = (
        "time",
        "pressure",
        "heading",
        "pitch",
        "roll",
        "velocity",
        "dpdt",
    )
    discriminator: ClassVar[str] = "heading"

    heading: np.ndarray = Field(default_factory=_empty_float)  # [deg]
    pitch: np.ndarray = Field(default_factory=_empty_float)  # [deg]
    roll: np.ndarray = Field(default_factory=_empty_float)  # [deg]
    # east, north, up components; one row per sample
    velocity: np.ndarray = Field(default_factory=_empty_velocity)  # [m/s]


RECORD_TYPES: Dict[str, Type[ProfileRecord]] = {
    CtdRecord.stream: CtdRecord,
    EngRecord.stream: EngRecord,
    Ad2cpRecord.stream: Ad2cpRecord,
}
