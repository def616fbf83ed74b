from __future__ import annotations

from dataclasses import dataclass

from ledgercast.core.config import SeasonalStrengthBands


@dataclass(frozen=True)
class SeasonLabels:
    cycle: str
    positions: tuple[str, ...]


SEASON_LABELS: dict[int, SeasonLabels] = {
    12: SeasonLabels(
        cycle="yearly",
        positions=(
            "January",
            "February",
            "March",
            "April",
            "May",
            "June",
            "July",
            "August",
            "September",
            "October",
            "November",
            "December",
        ),
    ),
    6: SeasonLabels(cycle="bi-monthly", positions=("Jan-Feb", "Mar-Apr", "May-Jun", "Jul-Aug", "Sep-Oct", "Nov-Dec")),
    4: SeasonLabels(cycle="quarterly", positions=("Q1 (Jan-Mar)", "Q2 (Apr-Jun)", "Q3 (Jul-Sep)", "Q4 (Oct-Dec)")),
    3: SeasonLabels(cycle="3-month", positions=("beginning", "middle", "end")),
    2: SeasonLabels(cycle="bi-monthly", positions=("first month", "second month")),
}


def season_labels(season_length: int) -> SeasonLabels:
    known = SEASON_LABELS.get(season_length)
    if known is not None:
        return known
    return SeasonLabels(
        cycle=f"{season_length}-period",
        positions=tuple(f"period {i + 1}" for i in range(season_length)),
    )


def strength_label(strength: float, bands: SeasonalStrengthBands | None = None) -> str:
    bands = bands or SeasonalStrengthBands()
    if strength > bands.strong:
        return "strong"
    if strength > bands.moderate:
        return "moderate"
    return "mild"


def describe_pattern(
    seasonal_factors: list[float],
    season_length: int,
    strength: float,
    bands: SeasonalStrengthBands | None = None,
) -> str:
    bands = bands or SeasonalStrengthBands()
    if strength < bands.significant or not seasonal_factors:
        return "No significant seasonal pattern detected."
    labels = season_labels(season_length)
    peak = seasonal_factors.index(max(seasonal_factors))
    trough = seasonal_factors.index(min(seasonal_factors))
    return (
        f"A {strength_label(strength, bands)} {labels.cycle} pattern detected. "
        f"Peak at {labels.positions[peak]} of cycle, lowest at {labels.positions[trough]}."
    )
