"""Category and sub-metric weights.

Sub-metric weights are only compared within their own category; when a
sub-metric is absent its weight drops out of that category's denominator.
"""

from __future__ import annotations

from typing import Dict

from .models import Category


CATEGORY_WEIGHTS: Dict[Category, float] = {
    Category.VALUATION: 0.30,
    Category.GROWTH: 0.25,
    Category.PROFITABILITY: 0.20,
    Category.TECHNICAL: 0.15,
    Category.SENTIMENT: 0.10,
}

VALUATION_WEIGHTS = {
    "pe_vs_sector": 0.35,
    "pb_ratio": 0.20,
    "ev_to_ebitda": 0.30,
    "dividend_yield": 0.15,
}

GROWTH_WEIGHTS = {
    "revenue_growth_yoy": 0.40,
    "eps_growth_yoy": 0.35,
    "profit_growth_yoy": 0.25,
}

PROFITABILITY_WEIGHTS = {
    "roe": 0.40,
    "operating_margin": 0.35,
    "debt_to_equity": 0.25,
}

TECHNICAL_WEIGHTS = {
    "range_position_52w": 0.30,
    "rsi_14": 0.35,
    "price_vs_200dma": 0.35,
}

SENTIMENT_WEIGHTS = {
    "analyst_consensus": 0.60,
    "news_sentiment": 0.40,
}
