"""
Deterministic narrative text.

Used for risk factors on every run, and for the other narrative fields when
the reasoning request fails.
"""

from __future__ import annotations

from typing import List

from .curves import round_half_up
from .models import CategoryResult, Grade, ScoringMetrics


RISK_DEBT_TO_EQUITY = 1.0
RISK_PE_PREMIUM = 1.5
RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30
RISK_OPERATING_MARGIN = 5
RISK_PROFIT_DECLINE = -10


def format_category_analysis(name: str, result: CategoryResult) -> str:
    entries = ", ".join(f"{k}: {v}" for k, v in result.metrics.items() if v is not None)
    coverage = f"{result.available_metrics}/{result.total_metrics} metrics available"
    return f"{name} Score: {result.score}/100 ({coverage}). {entries or 'No metric data available.'}"


def generate_risk_factors(metrics: ScoringMetrics, total_score: int) -> List[str]:
    """Risks triggered by metric thresholds; never empty."""
    risks: List[str] = []

    de = metrics.debt_to_equity
    if de is not None and de > RISK_DEBT_TO_EQUITY:
        risks.append(
            f"High debt-to-equity ratio of {de:.2f} indicates elevated financial leverage risk."
        )

    pe, sector_pe = metrics.pe_ratio, metrics.sector_pe_ratio
    if pe is not None and sector_pe is not None and pe > sector_pe * RISK_PE_PREMIUM:
        risks.append(
            f"P/E ratio of {pe:.1f} significantly exceeds sector average of {sector_pe:.1f}, "
            "suggesting potential overvaluation."
        )

    rsi = metrics.rsi_14
    if rsi is not None and rsi > RSI_OVERBOUGHT:
        risks.append(
            f"RSI of {rsi:.0f} indicates overbought conditions; short-term pullback risk elevated."
        )
    elif rsi is not None and rsi < RSI_OVERSOLD:
        risks.append(
            f"RSI of {rsi:.0f} indicates oversold conditions; may signal underlying weakness."
        )

    margin = metrics.operating_margin
    if margin is not None and margin < RISK_OPERATING_MARGIN:
        risks.append(
            f"Low operating margin of {margin:.1f}% leaves limited buffer against cost pressures."
        )

    revenue = metrics.revenue_growth_yoy
    if revenue is not None and revenue < 0:
        risks.append(
            f"Revenue declined {abs(revenue):.1f}% year-over-year, "
            "signalling potential demand weakness."
        )

    profit = metrics.profit_growth_yoy
    if profit is not None and profit < RISK_PROFIT_DECLINE:
        risks.append(
            f"Profit declined {abs(profit):.1f}% year-over-year, "
            "indicating deteriorating earnings quality."
        )

    if not risks:
        if total_score >= 80:
            risks.append(
                "High valuation expectations may limit further upside if earnings disappoint."
            )
        elif total_score >= 45:
            risks.append(
                "Market conditions and sector-specific risks may impact near-term performance."
            )
        else:
            risks.append(
                "Weak fundamental metrics suggest elevated investment risk across multiple dimensions."
            )

    return risks


def short_term_outlook(technical: CategoryResult, sentiment: CategoryResult, grade: Grade) -> str:
    avg = round_half_up((technical.score + sentiment.score) / 2)

    if avg >= 75:
        text = (
            "Short-term outlook is positive. Technical indicators and market sentiment "
            "both support upward momentum."
        )
    elif avg >= 50:
        text = (
            "Short-term outlook is neutral to cautiously positive. Technical positioning is "
            "balanced, and sentiment indicators suggest measured optimism."
        )
    elif avg >= 30:
        text = (
            "Short-term outlook is cautious. Technical signals show mixed momentum, and "
            "sentiment is subdued. Investors may consider waiting for clearer signals."
        )
    else:
        text = (
            "Short-term outlook is negative. Technical weakness and poor sentiment suggest "
            "potential further downside. Risk management is advisable."
        )
    return f"{text} Grade: {grade.value}."


def long_term_outlook(
    valuation: CategoryResult,
    growth: CategoryResult,
    profitability: CategoryResult,
    grade: Grade,
) -> str:
    avg = round_half_up((valuation.score + growth.score + profitability.score) / 3)

    if avg >= 75:
        text = (
            "Long-term outlook is strongly positive. Attractive valuation, a robust growth "
            "trajectory and solid profitability support sustained value creation."
        )
    elif avg >= 55:
        text = (
            "Long-term outlook is positive. Reasonable valuation combined with adequate growth "
            "and profitability provides a favourable risk-reward profile."
        )
    elif avg >= 35:
        text = (
            "Long-term outlook is neutral. Fundamental metrics present a mixed picture, and the "
            "stock may require a catalyst to unlock value."
        )
    else:
        text = (
            "Long-term outlook is challenging. Weak fundamentals suggest limited upside "
            "potential and elevated downside risk."
        )
    return f"{text} Grade: {grade.value}."


def fallback_reasoning(ticker: str, score: int, grade: Grade) -> str:
    return (
        f"{ticker} received an AI score of {score}/100 ({grade.value}). The analysis is based "
        "on available financial metrics across valuation, growth, profitability, technical, "
        "and sentiment categories."
    )
