# clima/services/forecast_service.py
"""
Turn an Open-Meteo forecast payload into dashboard cards.

Pure functions: no I/O, no clock. Hourly data is assumed to be laid out
24 entries per day starting at daily index 0, which is what Open-Meteo
returns for `timezone=auto`.
"""
import math
from datetime import date, datetime
from typing import Sequence, TypeVar

from clima.schemas.forecast import (
    Condition,
    DayForecast,
    ForecastPayload,
    ForecastView,
    Locale,
)

HOURS_PER_DAY = 24

# Offset within a day's window used for humidity/wind ("noon-ish")
MIDDAY_OFFSET = 12

# Sunday-indexed, like JavaScript's Date.getDay()
WEEKDAY_NAMES: dict[str, list[str]] = {
    "es": ["domingo", "lunes", "martes", "miércoles", "jueves", "viernes", "sábado"],
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
}

TODAY_LABEL: dict[str, str] = {"es": "Hoy", "en": "Today"}

# WMO weather interpretation codes, grouped the way the dashboard draws icons
_WMO_GROUPS: dict[Condition, frozenset[int]] = {
    "clear": frozenset({0}),
    "mostly_clear": frozenset({1}),
    "cloudy": frozenset({2, 3}),
    "fog": frozenset({45, 48}),
    "drizzle": frozenset({51, 53, 55, 56, 57}),
    "rain": frozenset({61, 63, 65, 66, 67, 80, 81, 82}),
    "snow": frozenset({71, 73, 75, 77, 85, 86}),
    "thunderstorm": frozenset({95, 96, 99}),
}

T = TypeVar("T")


def describe_weather_code(code: int | None) -> Condition:
    """Map a WMO code to its icon group; unknown codes fall back to clear."""
    if code is not None:
        for condition, codes in _WMO_GROUPS.items():
            if code in codes:
                return condition
    return "clear"


def round_half_up(value: float | None) -> int:
    """Round like Math.round; None counts as 0."""
    if value is None:
        return 0
    return math.floor(value + 0.5)


def _at(values: Sequence[T] | None, index: int) -> T | None:
    if values is None or index < 0 or index >= len(values):
        return None
    return values[index]


def weekday_name(day: str, locale: Locale = "es") -> str:
    """Weekday of an ISO date (`2024-05-01` or `2024-05-01T00:00`)."""
    parsed = date.fromisoformat(day[:10])
    # date.weekday() is Monday=0; shift to Sunday=0
    return WEEKDAY_NAMES[locale][(parsed.weekday() + 1) % 7]


def hour_label(timestamp: str) -> str:
    return f"{datetime.fromisoformat(timestamp).hour}:00"


def _precipitation_probability(payload: ForecastPayload, day_index: int, start: int, end: int) -> int:
    """
    Mean of the hourly probabilities in the day's window when the hourly
    series exists, else the daily mean field, else 0.
    """
    hourly = payload.hourly.precipitation_probability
    if hourly is not None:
        window = [v for v in hourly[start:end] if v is not None]
        if not window:
            return 0
        return round_half_up(sum(window) / len(window))

    daily_mean = payload.daily.precipitation_probability_mean
    if daily_mean is not None:
        return round_half_up(_at(daily_mean, day_index))
    return 0


def build_day(payload: ForecastPayload, day_index: int, label: str) -> DayForecast:
    """Build the card for `day_index`, using hourly window [i*24, (i+1)*24)."""
    daily = payload.daily
    hourly = payload.hourly

    # day i reads its own hours, not the previous day's [(i-1)*24, i*24)
    start = day_index * HOURS_PER_DAY
    end = start + HOURS_PER_DAY
    code = _at(daily.weathercode, day_index)

    return DayForecast(
        date=label,
        temperature_min=_at(daily.temperature_2m_min, day_index),
        temperature_max=_at(daily.temperature_2m_max, day_index),
        rain_sum=_at(daily.rain_sum, day_index),
        weather_code=code,
        condition=describe_weather_code(code),
        precipitation_probability=_precipitation_probability(payload, day_index, start, end),
        hourly_temperature=list(hourly.temperature_2m[start:end]),
        hourly_time=[hour_label(t) for t in hourly.time[start:end]],
        humidity=round_half_up(_at(hourly.relativehumidity_2m, start + MIDDAY_OFFSET)),
        wind_speed=round_half_up(_at(hourly.windspeed_10m, start + MIDDAY_OFFSET)),
    )


def build_current_day(payload: ForecastPayload, locale: Locale = "es") -> DayForecast | None:
    """Today's card (daily index 0), or None for an empty payload."""
    if not payload.daily.time:
        return None
    return build_day(payload, 0, TODAY_LABEL[locale])


def build_future_days(payload: ForecastPayload, locale: Locale = "es") -> list[DayForecast]:
    """
    One card per day after today.

    A short hourly series yields shorter (possibly empty) hourly slices
    for the last days rather than an error.
    """
    return [
        build_day(payload, i, weekday_name(day, locale))
        for i, day in enumerate(payload.daily.time)
        if i > 0
    ]


def build_forecast_view(payload: ForecastPayload, locale: Locale = "es") -> ForecastView:
    return ForecastView(
        today=build_current_day(payload, locale),
        days=build_future_days(payload, locale),
    )
