"""
Technical scorer.

Rewards balanced momentum: a price mid-way through its 52-week range, a
neutral RSI and a price modestly above its 200-day average.
"""

from __future__ import annotations

from .base import SubMetric, format_percent, score_category
from .curves import range_position, score_price_vs_200dma, score_range_position, score_rsi
from .models import CategoryResult, ScoringMetrics
from .weights import TECHNICAL_WEIGHTS


def score_technical(metrics: ScoringMetrics) -> CategoryResult:
    price, low, high = metrics.current_price, metrics.week_low_52, metrics.week_high_52

    return score_category([
        SubMetric(
            "52W Range Position",
            TECHNICAL_WEIGHTS["range_position_52w"],
            score_range_position(price, low, high),
            format_percent(range_position(price, low, high)),
        ),
        SubMetric(
            "RSI (14)",
            TECHNICAL_WEIGHTS["rsi_14"],
            score_rsi(metrics.rsi_14),
            metrics.rsi_14,
        ),
        SubMetric(
            "Price vs 200 DMA",
            TECHNICAL_WEIGHTS["price_vs_200dma"],
            score_price_vs_200dma(metrics.price_vs_200dma),
            format_percent(metrics.price_vs_200dma, signed=True),
        ),
    ])
