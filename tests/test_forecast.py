"""Tests for the forecast view builder and its endpoint."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from clima.schemas.forecast import ForecastPayload
from clima.services.forecast_service import (
    build_current_day,
    build_future_days,
    describe_weather_code,
    round_half_up,
    weekday_name,
)

# 2024-01-01 is a Monday
START = date(2024, 1, 1)


def make_payload(days: int = 8, hours: int | None = None, with_hourly_probability: bool = True) -> dict:
    hours = days * 24 if hours is None else hours
    dates = [(START + timedelta(days=i)).isoformat() for i in range(days)]
    hourly_times = [
        f"{(START + timedelta(hours=h)).isoformat()}T{h % 24:02d}:00"
        for h in range(hours)
    ]
    payload = {
        "daily": {
            "time": dates,
            "temperature_2m_min": [10.0 + i for i in range(days)],
            "temperature_2m_max": [20.0 + i for i in range(days)],
            "rain_sum": [0.5 * i for i in range(days)],
            "weathercode": [61] * days,
            "precipitation_probability_mean": [30.4] * days,
        },
        "hourly": {
            "time": hourly_times,
            "temperature_2m": [float(h) for h in range(hours)],
            "relativehumidity_2m": [50.5 + (h % 24) for h in range(hours)],
            "windspeed_10m": [3.4 + (h % 24) for h in range(hours)],
        },
    }
    if with_hourly_probability:
        payload["hourly"]["precipitation_probability"] = [h % 24 for h in range(hours)]
    return payload


def test_eight_days_yield_seven_future_cards():
    days = build_future_days(ForecastPayload.model_validate(make_payload()))

    assert len(days) == 7
    assert all(len(day.hourly_temperature) == 24 for day in days)
    assert all(len(day.hourly_time) == 24 for day in days)


def test_future_card_fields():
    first = build_future_days(ForecastPayload.model_validate(make_payload()))[0]

    assert first.date == "martes"
    assert first.temperature_min == 11.0
    assert first.temperature_max == 21.0
    assert first.rain_sum == 0.5
    assert first.weather_code == 61
    assert first.condition == "rain"
    # day 1 covers hourly indexes 24..47
    assert first.hourly_temperature[0] == 24.0
    assert first.hourly_time[:2] == ["0:00", "1:00"]
    # mean of 0..23 is 11.5, rounded half up
    assert first.precipitation_probability == 12
    # 13th hourly entry of the day: 50.5 + 12, 3.4 + 12
    assert first.humidity == 63
    assert first.wind_speed == 15


def test_each_card_reads_its_own_day_of_hours():
    days = build_future_days(ForecastPayload.model_validate(make_payload()))

    for index, day in enumerate(days, start=1):
        assert day.hourly_temperature == [float(h) for h in range(index * 24, (index + 1) * 24)]


def test_precipitation_falls_back_to_daily_mean():
    payload = ForecastPayload.model_validate(make_payload(with_hourly_probability=False))

    assert build_future_days(payload)[0].precipitation_probability == 30


def test_precipitation_defaults_to_zero():
    raw = make_payload(with_hourly_probability=False)
    del raw["daily"]["precipitation_probability_mean"]

    assert build_future_days(ForecastPayload.model_validate(raw))[0].precipitation_probability == 0


def test_short_hourly_series_gives_short_slices():
    payload = ForecastPayload.model_validate(make_payload(days=3, hours=60))

    days = build_future_days(payload)

    assert [len(day.hourly_temperature) for day in days] == [24, 12]
    assert days[-1].humidity == 0
    assert days[-1].wind_speed == 0


def test_today_card_uses_index_zero():
    today = build_current_day(ForecastPayload.model_validate(make_payload()))

    assert today.date == "Hoy"
    assert today.temperature_min == 10.0
    assert today.hourly_temperature[0] == 0.0


def test_today_card_empty_payload():
    payload = ForecastPayload.model_validate({"daily": {"time": []}, "hourly": {}})

    assert build_current_day(payload) is None
    assert build_future_days(payload) == []


@pytest.mark.parametrize(
    "day, locale, expected",
    [
        ("2024-01-07", "es", "domingo"),
        ("2024-01-06", "es", "sábado"),
        ("2024-01-03", "es", "miércoles"),
        ("2024-01-07", "en", "Sunday"),
    ],
)
def test_weekday_name(day, locale, expected):
    assert weekday_name(day, locale) == expected


@pytest.mark.parametrize(
    "code, condition",
    [
        (0, "clear"),
        (1, "mostly_clear"),
        (3, "cloudy"),
        (48, "fog"),
        (55, "drizzle"),
        (81, "rain"),
        (86, "snow"),
        (99, "thunderstorm"),
        (42, "clear"),
        (None, "clear"),
    ],
)
def test_describe_weather_code(code, condition):
    assert describe_weather_code(code) == condition


@pytest.mark.parametrize("value, expected", [(2.5, 3), (2.4, 2), (-2.5, -2), (None, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_forecast_endpoint(client: TestClient):
    response = client.post("/api/forecast/days", json=make_payload(), params={"locale": "en"})

    assert response.status_code == 200
    body = response.json()
    assert body["today"]["date"] == "Today"
    assert len(body["days"]) == 7
    assert body["days"][0]["date"] == "Tuesday"


def test_forecast_endpoint_rejects_missing_daily(client: TestClient):
    response = client.post("/api/forecast/days", json={"hourly": {}})

    assert response.status_code == 400
