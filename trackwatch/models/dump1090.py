"""Wire models for dump1090-fa ``aircraft.json`` and ``history_N.json`` batches."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Dump1090Aircraft(BaseModel):
    """A single per-aircraft report within a dump1090 batch.

    Every field apart from ``hex`` is optional; dump1090 only emits the
    attributes it has decoded recently.
    """

    hex: Optional[str] = Field(default=None, description="ICAO 24-bit address")
    lat: Optional[float] = Field(default=None, description="Latitude in degrees")
    lon: Optional[float] = Field(default=None, description="Longitude in degrees")

    track: Optional[float] = Field(default=None, description="Ground track angle (deg)")
    mag_heading: Optional[float] = Field(default=None, description="Magnetic heading (deg)")
    true_heading: Optional[float] = Field(default=None, description="True heading (deg)")

    alt_geom: Optional[float] = Field(default=None, description="Geometric altitude (ft)")
    alt_baro: Optional[Union[float, Literal["ground"]]] = Field(
        default=None, description="Barometric altitude (ft) or 'ground'"
    )
    geom_rate: Optional[float] = Field(default=None, description="Geometric rate (ft/min)")
    baro_rate: Optional[float] = Field(default=None, description="Barometric rate (ft/min)")

    mach: Optional[float] = Field(default=None, description="Mach number")
    ias: Optional[float] = Field(default=None, description="Indicated airspeed (kn)")
    tas: Optional[float] = Field(default=None, description="True airspeed (kn)")
    gs: Optional[float] = Field(default=None, description="Ground speed (kn)")

    flight: Optional[str] = Field(default=None, description="Flight ID / callsign")
    squawk: Optional[str] = Field(default=None, description="Mode A code")
    category: Optional[str] = Field(default=None, description="Emitter category (A0..C3)")
    rssi: Optional[float] = Field(default=None, description="Signal strength (dBFS)")

    seen: Optional[float] = Field(
        default=None, description="Seconds before batch time the aircraft was last heard"
    )
    seen_pos: Optional[float] = Field(
        default=None, description="Seconds before batch time the position was last updated"
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("alt_baro", mode="before")
    @classmethod
    def _coerce_alt_baro(cls, value: Any) -> Any:
        if isinstance(value, str) and value != "ground":
            return None
        return value

    @field_validator("hex", mode="before")
    @classmethod
    def _normalise_hex(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    def has_data(self) -> bool:
        """Return True if the report carries anything beyond its identifier."""

        return any(
            getattr(self, name) is not None
            for name in type(self).model_fields
            if name != "hex"
        )

    def has_position(self) -> bool:
        return self.lat is not None and self.lon is not None


class Dump1090Batch(BaseModel):
    """One ``aircraft.json`` (or history) snapshot."""

    now: float = Field(..., description="Source clock at snapshot time (epoch seconds)")
    messages: Optional[int] = Field(default=None, description="Total messages decoded")
    aircraft: list[Dump1090Aircraft] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class ReceiverInfo(BaseModel):
    """Subset of ``receiver.json`` needed to enumerate history files."""

    version: Optional[str] = Field(default=None, description="dump1090 version string")
    refresh: Optional[float] = Field(default=None, description="Refresh interval (ms)")
    history: int = Field(default=0, ge=0, description="Number of history files available")
    lat: Optional[float] = Field(default=None, description="Receiver latitude")
    lon: Optional[float] = Field(default=None, description="Receiver longitude")

    model_config = ConfigDict(extra="ignore")


__all__ = ["Dump1090Aircraft", "Dump1090Batch", "ReceiverInfo"]
