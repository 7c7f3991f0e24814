"""Aircraft registration metadata returned by the dump1090 aircraft database."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AircraftMetadata(BaseModel):
    """Slow-changing enrichment attached to an aircraft track."""

    registration: Optional[str] = Field(
        default=None, validation_alias="r", description="Registration / tail number"
    )
    type_code: Optional[str] = Field(
        default=None, validation_alias="t", description="ICAO type designator"
    )
    type_description: Optional[str] = Field(
        default=None, validation_alias="desc", description="Long type description"
    )
    wake_turbulence_category: Optional[str] = Field(
        default=None, validation_alias="wtc", description="ICAO wake category"
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)


__all__ = ["AircraftMetadata"]
