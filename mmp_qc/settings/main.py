from pathlib import Path
from typing import Optional, Union

import yaml
from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from mmp_qc.settings.models import (
    Ad2cpVoidThresholds,
    BacktrackConfig,
    TimeConfig,
    VoidThresholds,
)


class QcSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="mmp_qc_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    backtrack: BacktrackConfig = BacktrackConfig()
    eng_void: VoidThresholds = VoidThresholds()
    ctd_void: VoidThresholds = VoidThresholds()
    ad2cp_void: Ad2cpVoidThresholds = Ad2cpVoidThresholds()
    time: TimeConfig = TimeConfig()

    @classmethod
    def from_flat(cls, config: dict) -> "QcSettings":
        """
        Build settings from the flat key names used in deployment
        metadata files, e.g. ``eng_pressure_nptsMin``.
        """
        nested = {"backtrack": {}, "eng_void": {}, "ctd_void": {}, "ad2cp_void": {}}
        for key, value in config.items():
            if key == "backtrack_processing_flag":
                nested["backtrack"]["backtrack_processing_flag"] = value
            elif key in FLAT_KEYS:
                section, attr = FLAT_KEYS[key]
                nested[section][attr] = value
            elif key in cls.model_fields:
                nested[key] = value
            else:
                logger.debug(f"Ignoring unknown configuration key: {key}")
        return cls(**nested)


FLAT_KEYS = {
    "eng_pressure_nptsMin": ("eng_void", "npts_min"),
    "eng_pressure_rangeMin_db": ("eng_void", "range_min"),
    "ctd_pressure_nptsMin": ("ctd_void", "npts_min"),
    "ctd_pressure_rangeMin_db": ("ctd_void", "range_min"),
    "ad2cp_heading_nptsMin": ("ad2cp_void", "npts_min"),
    "ad2cp_heading_rangeMin": ("ad2cp_void", "range_min"),
}


def load_settings(config_path: Optional[Union[str, Path]] = None) -> QcSettings:
    if config_path is None:
        return QcSettings()
    logger.info(f"Loading processing configuration from {config_path}")
    with Path(config_path).open() as f:
        config_json = yaml.safe_load(f) or {}
    return QcSettings.from_flat(config_json)


qc_settings = QcSettings()
