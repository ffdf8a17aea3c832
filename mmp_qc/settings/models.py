from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BacktrackConfig(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True)

    # 1: whole profile bad, 2: good until ~1 min before first backtrack,
    # 3: only the zero pressure sections bad
    processing_flag: int = Field(
        1, ge=1, le=3, validation_alias="backtrack_processing_flag"
    )


class VoidThresholds(BaseModel):
    field_name: str = "pressure"
    npts_min: int = Field(-1, ge=-1)
    range_min: float = Field(-1.0, ge=-1.0)

    @property
    def disabled(self) -> bool:
        return self.npts_min == -1 and self.range_min == -1


class TimeConfig(BaseModel):
    units: str = "seconds since 1900-01-01 0:0:0"
    calendar: str = "gregorian"


class Ad2cpVoidThresholds(VoidThresholds):
    field_name: str = "heading"
