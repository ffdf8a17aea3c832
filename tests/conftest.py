"""
Shared pytest fixtures.

Provides:
- factories for ctd, eng and ad2cp profile records
- a small three-profile deployment (profile 0 placeholder + two profiles)
"""

import numpy as np
import pytest

from mmp_qc.records import Ad2cpRecord, CtdRecord, EngRecord, ProfileDirection

T0 = 3.8e9  # seconds since 1900, mid 2020


@pytest.fixture
def make_eng():
    """Factory for engineering records sampled at ``rate`` Hz."""

    def _make(pressure, profile_number=1, rate=1.0, t0=T0, **kwargs):
        pressure = np.asarray(pressure, dtype=float)
        time = t0 + np.arange(pressure.size) / rate
        return EngRecord.from_samples(profile_number, time, pressure, **kwargs)

    return _make


@pytest.fixture
def make_ctd():
    """Factory for ctd records sampled at ``rate`` Hz."""

    def _make(pressure, profile_number=1, rate=1.0, t0=T0, **kwargs):
        pressure = np.asarray(pressure, dtype=float)
        time = t0 + np.arange(pressure.size) / rate
        kwargs.setdefault("dpdt", np.gradient(pressure) * rate if pressure.size > 1 else np.zeros(pressure.size))
        kwargs.setdefault("profile_direction", ProfileDirection.ASCENDING)
        return CtdRecord.from_samples(profile_number, time, pressure, **kwargs)

    return _make


@pytest.fixture
def make_ad2cp():
    def _make(heading, profile_number=1, rate=1.0, t0=T0):
        heading = np.asarray(heading, dtype=float)
        n = heading.size
        time = t0 + np.arange(n) / rate
        return Ad2cpRecord.from_samples(
            profile_number,
            time,
            np.linspace(10, 20, n),
            heading=heading,
            pitch=np.zeros(n),
            roll=np.zeros(n),
            velocity=np.ones((n, 3)),
        )

    return _make


@pytest.fixture
def deployment(make_ctd, make_eng):
    """Index-aligned ctd and eng arrays: placeholder, one good, one short profile."""
    ctd = [CtdRecord.empty(0)]
    eng = [EngRecord.empty(0)]

    pressure = np.linspace(10, 100, 50)
    ctd.append(make_ctd(pressure, profile_number=1))
    eng.append(make_eng(np.concatenate([[0, 0], pressure[2:]]), profile_number=1))

    ctd.append(make_ctd([10, 10.5, 11], profile_number=2, t0=T0 + 3600))
    eng.append(make_eng([0, 10.2, 10.9], profile_number=2, t0=T0 + 3600))
    return ctd, eng
