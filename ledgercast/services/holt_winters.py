from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ledgercast.core.config import (
    DEFAULT_CANDIDATE_LENGTHS,
    DEFAULT_SEASON_LENGTH,
    EPSILON,
    LOGGER_NAME,
    MIN_POINTS_FOR_DETECTION,
    MULTIPLICATIVE_CV_THRESHOLD,
    SMOOTHING,
    TREND_THRESHOLD,
    SeasonalStrengthBands,
)
from ledgercast.core.types import ForecastMethod, ForecastResult, SeasonalPattern, TrendDirection
from ledgercast.services.seasonality import describe_pattern
from ledgercast.services.stats import as_array, autocorrelations, sample_variance, seasonal_cv_spread

logger = logging.getLogger(LOGGER_NAME)


def _check_arguments(season_length: int, periods_to_forecast: int) -> None:
    if season_length < 1:
        raise ValueError(f"season_length must be at least 1, got {season_length}")
    if periods_to_forecast < 0:
        raise ValueError(f"periods_to_forecast must not be negative, got {periods_to_forecast}")


def _trend_direction(slope: float) -> TrendDirection:
    if slope > TREND_THRESHOLD:
        return TrendDirection.INCREASING
    if slope < -TREND_THRESHOLD:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def _initial_components(values: np.ndarray, season_length: int, multiplicative: bool) -> tuple[float, float, np.ndarray]:
    first_mean = float(np.mean(values[:season_length]))
    second_mean = float(np.mean(values[season_length : 2 * season_length]))
    if not multiplicative:
        trend = (second_mean - first_mean) / season_length
        return first_mean, trend, values[:season_length] - first_mean

    level = first_mean if first_mean > 0 else EPSILON
    trend = (second_mean - level) / season_length
    ratios = values[:season_length] / level
    return level, trend, np.where(ratios <= 0, EPSILON, ratios)


def _smooth(values: np.ndarray, season_length: int, multiplicative: bool) -> tuple[float, float, np.ndarray]:
    """Run the Holt-Winters recurrences over ``values``.

    Returns the final level, the final trend and the last ``season_length``
    smoothed seasonal factors in time order (the factor at offset ``j``
    belongs to period ``n + j``).
    """
    n = len(values)
    m = season_length
    alpha, beta, gamma = SMOOTHING.alpha, SMOOTHING.beta, SMOOTHING.gamma

    level0, trend0, initial = _initial_components(values, m, multiplicative)
    level = np.zeros(n)
    trend = np.zeros(n)
    seasonals = np.zeros(n + m)
    seasonals[:m] = initial
    # the t=0 seasonal update reduces to the initial factor of position 0
    seasonals[m] = initial[0]
    level[0] = level0
    trend[0] = trend0

    for t in range(1, n):
        prev_seasonal = seasonals[t]
        if multiplicative:
            if abs(prev_seasonal) < EPSILON:
                prev_seasonal = EPSILON
            level[t] = alpha * (values[t] / prev_seasonal) + (1 - alpha) * (level[t - 1] + trend[t - 1])
        else:
            level[t] = alpha * (values[t] - prev_seasonal) + (1 - alpha) * (level[t - 1] + trend[t - 1])

        trend[t] = beta * (level[t] - level[t - 1]) + (1 - beta) * trend[t - 1]

        if multiplicative:
            level_for_seasonal = level[t] if abs(level[t]) >= EPSILON else EPSILON
            seasonals[t + m] = gamma * (values[t] / level_for_seasonal) + (1 - gamma) * prev_seasonal
        else:
            seasonals[t + m] = gamma * (values[t] - level[t]) + (1 - gamma) * prev_seasonal

    return float(level[-1]), float(trend[-1]), seasonals[n : n + m]


def _by_cycle_position(recent: np.ndarray, n: int, season_length: int) -> list[float]:
    return [float(recent[(p - n) % season_length]) for p in range(season_length)]


def _holt_winters(
    values: np.ndarray,
    season_length: int,
    periods_to_forecast: int,
    multiplicative: bool,
) -> ForecastResult:
    n = len(values)
    last_level, last_trend, recent = _smooth(values, season_length, multiplicative)

    horizons = np.arange(1, periods_to_forecast + 1)
    slots = recent[(horizons - 1) % season_length]
    base = last_level + horizons * last_trend
    forecasts = base * slots if multiplicative else base + slots
    forecasts = np.maximum(forecasts, 0.0)

    factors = _by_cycle_position(recent, n, season_length)
    bands = SeasonalStrengthBands()
    if multiplicative:
        deviation = float(np.mean(np.abs(recent - 1)))
        strength = min(1.0, deviation * bands.multiplicative_scale)
    else:
        data_variance = sample_variance(values)
        strength = min(1.0, float(np.mean(recent**2)) / data_variance) if data_variance > 0 else 0.0

    pattern = SeasonalPattern(
        season_length=season_length,
        seasonal_factors=factors,
        seasonal_strength=strength,
        trend_direction=_trend_direction(last_trend),
        trend_slope=last_trend,
        description=describe_pattern(factors, season_length, strength, bands),
    )
    return ForecastResult(
        forecasted_values=[float(v) for v in forecasts],
        seasonal_pattern=pattern,
        final_level=last_level,
        final_trend=last_trend,
        method=ForecastMethod.MULTIPLICATIVE_HW if multiplicative else ForecastMethod.ADDITIVE_HW,
    )


def _simple_exponential(values: np.ndarray, season_length: int, periods_to_forecast: int) -> ForecastResult:
    if len(values) == 0:
        return ForecastResult(
            forecasted_values=[0.0] * periods_to_forecast,
            seasonal_pattern=SeasonalPattern(
                season_length=season_length,
                seasonal_factors=[0.0] * season_length,
                description="No historical data available for forecasting.",
            ),
            final_level=0.0,
            final_trend=0.0,
            method=ForecastMethod.NO_DATA,
        )

    alpha = SMOOTHING.alpha
    smoothed = float(values[0])
    for v in values[1:]:
        smoothed = alpha * float(v) + (1 - alpha) * smoothed

    trend = float(values[-1] - values[0]) / (len(values) - 1) if len(values) > 1 else 0.0
    forecasts = [max(0.0, smoothed + h * trend) for h in range(1, periods_to_forecast + 1)]
    return ForecastResult(
        forecasted_values=forecasts,
        seasonal_pattern=SeasonalPattern(
            season_length=season_length,
            seasonal_factors=[0.0] * season_length,
            trend_direction=_trend_direction(trend),
            trend_slope=trend,
            description="Insufficient data for seasonal analysis.",
        ),
        final_level=smoothed,
        final_trend=trend,
        method=ForecastMethod.SIMPLE_EXPONENTIAL,
    )


def fallback_forecast(
    series: Sequence[float],
    season_length: int = DEFAULT_SEASON_LENGTH,
    periods_to_forecast: int = 1,
) -> ForecastResult:
    """Simple exponential smoothing with a first-to-last linear trend.

    Used whenever a series is too short for seasonal decomposition; an empty
    series yields an all-zero forecast with method ``NO_DATA``.
    """
    _check_arguments(season_length, periods_to_forecast)
    return _simple_exponential(as_array(series), season_length, periods_to_forecast)


def forecast_additive(
    series: Sequence[float],
    season_length: int = DEFAULT_SEASON_LENGTH,
    periods_to_forecast: int = 1,
) -> ForecastResult:
    """Additive Holt-Winters forecast.

    Suited to series whose seasonal swings stay roughly constant in size.
    Needs two full seasons of history; shorter series fall back to simple
    exponential smoothing.
    """
    _check_arguments(season_length, periods_to_forecast)
    values = as_array(series)
    if len(values) < season_length * 2:
        logger.debug("Additive fallback: %d points < two seasons of %d", len(values), season_length)
        return _simple_exponential(values, season_length, periods_to_forecast)
    return _holt_winters(values, season_length, periods_to_forecast, multiplicative=False)


def forecast_multiplicative(
    series: Sequence[float],
    season_length: int = DEFAULT_SEASON_LENGTH,
    periods_to_forecast: int = 1,
) -> ForecastResult:
    """Multiplicative Holt-Winters forecast.

    Suited to series whose seasonal swings scale with the level. Series
    containing zero or negative values are forecast additively instead.
    """
    _check_arguments(season_length, periods_to_forecast)
    values = as_array(series)
    if len(values) < season_length * 2:
        logger.debug("Multiplicative fallback: %d points < two seasons of %d", len(values), season_length)
        return _simple_exponential(values, season_length, periods_to_forecast)
    if np.any(values <= 0):
        logger.debug("Non-positive values present, using additive smoothing")
        return _holt_winters(values, season_length, periods_to_forecast, multiplicative=False)
    return _holt_winters(values, season_length, periods_to_forecast, multiplicative=True)


def auto_forecast(
    series: Sequence[float],
    season_length: int = DEFAULT_SEASON_LENGTH,
    periods_to_forecast: int = 1,
) -> ForecastResult:
    """Pick additive or multiplicative smoothing from the data.

    Multiplicative is chosen when every value is positive and the
    coefficient of variation is consistent across seasonal positions.
    """
    _check_arguments(season_length, periods_to_forecast)
    values = as_array(series)
    if len(values) < season_length:
        return _simple_exponential(values, season_length, periods_to_forecast)
    if np.any(values <= 0):
        return forecast_additive(values, season_length, periods_to_forecast)

    cv_variation = seasonal_cv_spread(values, season_length)
    logger.debug("Seasonal CV spread %.4f for season length %d", cv_variation, season_length)
    if cv_variation < MULTIPLICATIVE_CV_THRESHOLD:
        return forecast_multiplicative(values, season_length, periods_to_forecast)
    return forecast_additive(values, season_length, periods_to_forecast)


def detect_season_length(
    series: Sequence[float],
    candidate_lengths: Sequence[int] = DEFAULT_CANDIDATE_LENGTHS,
) -> int:
    """Return the candidate cycle length with the highest autocorrelation.

    Series shorter than 24 points get the first candidate that fits twice
    into the series (0 when none does). For longer series only candidates up
    to half the series length are scored; if none qualifies the first
    candidate is returned.
    """
    candidates = [int(c) for c in candidate_lengths]
    if not candidates:
        raise ValueError("candidate_lengths must not be empty")
    if any(c < 1 for c in candidates):
        raise ValueError(f"candidate lengths must be at least 1, got {candidates}")

    values = as_array(series)
    limit = len(values) // 2
    fitting = [c for c in candidates if c <= limit]
    if len(values) < MIN_POINTS_FOR_DETECTION:
        return fitting[0] if fitting else 0
    if not fitting:
        return candidates[0]

    correlations = autocorrelations(values, max(fitting))
    return max(fitting, key=lambda c: correlations[c])
