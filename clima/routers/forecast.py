# clima/routers/forecast.py
from fastapi import APIRouter, Query

from clima.schemas.forecast import ForecastPayload, ForecastView, Locale
from clima.services.forecast_service import build_forecast_view

router = APIRouter(prefix="/forecast", tags=["Forecast"])


@router.post("/days", response_model=ForecastView)
def forecast_days(
    payload: ForecastPayload,
    locale: Locale = Query(default="es"),
):
    """
    Derive the dashboard cards from an Open-Meteo payload.

    The payload is the unmodified JSON the client got from
    api.open-meteo.com (daily + hourly blocks).
    """
    return build_forecast_view(payload, locale)
