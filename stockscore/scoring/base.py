"""Shared machinery for the five category scorers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .curves import round_half_up
from .models import CategoryResult


DisplayValue = Union[float, str, None]


@dataclass(frozen=True)
class SubMetric:
    """One scored input of a category: label, weight, sub-score and display value."""

    label: str
    weight: float
    score: Optional[float]
    display: DisplayValue = None


def score_category(sub_metrics: Sequence[SubMetric]) -> CategoryResult:
    """
    Weighted average over the sub-metrics that produced a score.

    Absent sub-metrics drop out of both numerator and denominator. With no
    sub-metric available the score is 0 and `available_metrics` is 0, which
    callers read as "no data" rather than a genuine zero.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    available = 0
    display = {}

    for sub in sub_metrics:
        display[sub.label] = sub.display
        if sub.score is None:
            continue
        total_weight += sub.weight
        weighted_sum += sub.weight * sub.score
        available += 1

    score = round_half_up(weighted_sum / total_weight) if total_weight > 0 else 0

    return CategoryResult(
        score=score,
        metrics=display,
        available_metrics=available,
        total_metrics=len(sub_metrics),
    )


def format_percent(value: Optional[float], decimals: int = 1, signed: bool = False) -> Optional[str]:
    if value is None:
        return None
    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.{decimals}f}%"
