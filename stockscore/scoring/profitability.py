"""Profitability scorer: return on equity, operating margin and leverage."""

from __future__ import annotations

from .base import SubMetric, format_percent, score_category
from .curves import score_debt_to_equity, score_operating_margin, score_roe
from .models import CategoryResult, ScoringMetrics
from .weights import PROFITABILITY_WEIGHTS


def score_profitability(metrics: ScoringMetrics) -> CategoryResult:
    return score_category([
        SubMetric(
            "ROE",
            PROFITABILITY_WEIGHTS["roe"],
            score_roe(metrics.roe),
            format_percent(metrics.roe),
        ),
        SubMetric(
            "Operating Margin",
            PROFITABILITY_WEIGHTS["operating_margin"],
            score_operating_margin(metrics.operating_margin),
            format_percent(metrics.operating_margin),
        ),
        SubMetric(
            "Debt/Equity",
            PROFITABILITY_WEIGHTS["debt_to_equity"],
            score_debt_to_equity(metrics.debt_to_equity),
            metrics.debt_to_equity,
        ),
    ])
