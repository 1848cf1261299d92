"""Growth scorer: year-over-year revenue, EPS and profit growth on one shared curve."""

from __future__ import annotations

from .base import SubMetric, format_percent, score_category
from .curves import score_growth_rate
from .models import CategoryResult, ScoringMetrics
from .weights import GROWTH_WEIGHTS


def score_growth(metrics: ScoringMetrics) -> CategoryResult:
    return score_category([
        SubMetric(
            "Revenue Growth YoY",
            GROWTH_WEIGHTS["revenue_growth_yoy"],
            score_growth_rate(metrics.revenue_growth_yoy),
            format_percent(metrics.revenue_growth_yoy),
        ),
        SubMetric(
            "EPS Growth YoY",
            GROWTH_WEIGHTS["eps_growth_yoy"],
            score_growth_rate(metrics.eps_growth_yoy),
            format_percent(metrics.eps_growth_yoy),
        ),
        SubMetric(
            "Profit Growth YoY",
            GROWTH_WEIGHTS["profit_growth_yoy"],
            score_growth_rate(metrics.profit_growth_yoy),
            format_percent(metrics.profit_growth_yoy),
        ),
    ])
