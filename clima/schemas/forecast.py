# clima/schemas/forecast.py
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

Locale = Literal["es", "en"]

Condition = Literal[
    "clear",
    "mostly_clear",
    "cloudy",
    "fog",
    "drizzle",
    "rain",
    "snow",
    "thunderstorm",
]


class DailySeries(SQLModel):
    """
    Open-Meteo `daily` block: parallel arrays, one entry per day.
    Index 0 is today.
    """

    model_config = ConfigDict(extra="ignore")

    time: list[str]
    temperature_2m_min: list[float | None] = Field(default_factory=list)
    temperature_2m_max: list[float | None] = Field(default_factory=list)
    rain_sum: list[float | None] = Field(default_factory=list)
    weathercode: list[int | None] = Field(default_factory=list)
    precipitation_probability_mean: list[float | None] | None = None


class HourlySeries(SQLModel):
    """Open-Meteo `hourly` block: parallel arrays, 24 entries per day."""

    model_config = ConfigDict(extra="ignore")

    time: list[str] = Field(default_factory=list)
    temperature_2m: list[float | None] = Field(default_factory=list)
    relativehumidity_2m: list[float | None] = Field(default_factory=list)
    windspeed_10m: list[float | None] = Field(default_factory=list)
    precipitation_probability: list[float | None] | None = None


class ForecastPayload(SQLModel):
    model_config = ConfigDict(extra="ignore")

    daily: DailySeries
    hourly: HourlySeries


class DayForecast(SQLModel):
    """One display card: a day plus its hourly chart data."""

    date: str
    temperature_min: float | None = None
    temperature_max: float | None = None
    rain_sum: float | None = None
    weather_code: int | None = None
    condition: Condition = "clear"
    precipitation_probability: int = 0
    hourly_temperature: list[float | None] = Field(default_factory=list)
    hourly_time: list[str] = Field(default_factory=list)
    humidity: int = 0
    wind_speed: int = 0


class ForecastView(SQLModel):
    today: DayForecast | None = None
    days: list[DayForecast]
