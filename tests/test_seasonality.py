from __future__ import annotations

import pytest

from ledgercast.services.seasonality import describe_pattern, season_labels


def _peak_first_trough_last(season_length: int) -> list[float]:
    factors = [0.0] * season_length
    factors[0] = 1.0
    factors[-1] = -1.0
    return factors


@pytest.mark.parametrize(
    "season_length,cycle,peak,trough",
    [
        (12, "yearly", "January", "December"),
        (6, "bi-monthly", "Jan-Feb", "Nov-Dec"),
        (4, "quarterly", "Q1 (Jan-Mar)", "Q4 (Oct-Dec)"),
        (3, "3-month", "beginning", "end"),
        (2, "bi-monthly", "first month", "second month"),
        (5, "5-period", "period 1", "period 5"),
    ],
)
@pytest.mark.parametrize("strength,band", [(0.2, "mild"), (0.3, "moderate"), (0.6, "strong")])
def test_describe_pattern_labels_and_bands(season_length, cycle, peak, trough, strength, band):
    description = describe_pattern(_peak_first_trough_last(season_length), season_length, strength)
    assert description == f"A {band} {cycle} pattern detected. Peak at {peak} of cycle, lowest at {trough}."


@pytest.mark.parametrize("strength,band", [(0.1, "mild"), (0.25, "mild"), (0.5, "moderate")])
def test_strength_band_edges(strength, band):
    assert describe_pattern([1.0, 0.0, -1.0], 3, strength).startswith(f"A {band} ")


def test_weak_or_empty_pattern_is_not_significant():
    assert describe_pattern([1.0, -1.0], 2, 0.09) == "No significant seasonal pattern detected."
    assert describe_pattern([], 4, 0.9) == "No significant seasonal pattern detected."


def test_unknown_season_length_labels():
    labels = season_labels(7)
    assert labels.cycle == "7-period"
    assert labels.positions[0] == "period 1"
    assert len(labels.positions) == 7
