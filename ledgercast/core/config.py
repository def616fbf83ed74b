from __future__ import annotations

from dataclasses import dataclass


LOGGER_NAME = "ledgercast"
EPSILON = 0.0001
DEFAULT_SEASON_LENGTH = 12
DEFAULT_CANDIDATE_LENGTHS = (12, 6, 4, 3)
MIN_POINTS_FOR_DETECTION = 24
MIN_POINTS_FOR_SEASONAL_PROJECTION = 12
TREND_THRESHOLD = 0.01
MULTIPLICATIVE_CV_THRESHOLD = 0.3
DEFAULT_RECENT_COUNT = 6
DEFAULT_MAX_RECORDS = 24
DEFAULT_FORECAST_METHOD = "Combined"


@dataclass(frozen=True)
class SmoothingParams:
    alpha: float = 0.3
    beta: float = 0.1
    gamma: float = 0.2


SMOOTHING = SmoothingParams()


@dataclass(frozen=True)
class SeasonalStrengthBands:
    significant: float = 0.1
    moderate: float = 0.25
    strong: float = 0.5
    multiplicative_scale: float = 5.0


@dataclass(frozen=True)
class AccuracyThresholds:
    excellent: float = 90.0
    good: float = 80.0
    moderate: float = 70.0
    trend_delta: float = 5.0
    min_records_for_trend: int = 4


@dataclass(frozen=True)
class ConfidenceWeights:
    points_per_observation: float = 1.5
    max_quantity_points: float = 35.0
    stability_bands: tuple[tuple[float, float], ...] = ((0.1, 25.0), (0.3, 20.0), (0.5, 15.0), (0.8, 10.0))
    min_stability_points: float = 5.0
    seasonal_points: float = 20.0
    weak_seasonal_points: float = 10.0
    accuracy_points: float = 20.0
    high_level: float = 80.0
    medium_level: float = 50.0
