"""
Valuation scorer.

Cheaper relative to the sector, to book value and to EBITDA scores higher;
dividend yield adds with diminishing returns above 4%.
"""

from __future__ import annotations

from .base import SubMetric, format_percent, score_category
from .curves import (
    score_dividend_yield,
    score_ev_to_ebitda,
    score_pb_ratio,
    score_pe_vs_sector,
)
from .models import CategoryResult, ScoringMetrics
from .weights import VALUATION_WEIGHTS


def score_valuation(metrics: ScoringMetrics) -> CategoryResult:
    pe, sector_pe = metrics.pe_ratio, metrics.sector_pe_ratio
    pe_display = (
        f"{pe:.1f} vs {sector_pe:.1f}" if pe is not None and sector_pe is not None else None
    )

    return score_category([
        SubMetric(
            "P/E vs Sector",
            VALUATION_WEIGHTS["pe_vs_sector"],
            score_pe_vs_sector(pe, sector_pe),
            pe_display,
        ),
        SubMetric(
            "P/B Ratio",
            VALUATION_WEIGHTS["pb_ratio"],
            score_pb_ratio(metrics.pb_ratio),
            metrics.pb_ratio,
        ),
        SubMetric(
            "EV/EBITDA",
            VALUATION_WEIGHTS["ev_to_ebitda"],
            score_ev_to_ebitda(metrics.ev_to_ebitda),
            metrics.ev_to_ebitda,
        ),
        SubMetric(
            "Dividend Yield",
            VALUATION_WEIGHTS["dividend_yield"],
            score_dividend_yield(metrics.dividend_yield),
            format_percent(metrics.dividend_yield, decimals=2),
        ),
    ])
