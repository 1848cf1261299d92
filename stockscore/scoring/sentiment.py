"""
Sentiment scorer.

Analyst consensus and news sentiment arrive as free-form labels. They are
matched against known phrases, most specific first, so "Strong Buy" and
"Mostly Positive" are not swallowed by "buy" and "positive".
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .base import SubMetric, score_category
from .metrics import safe_number
from .models import CategoryResult, ScoringMetrics
from .weights import SENTIMENT_WEIGHTS


# Exact labels first, then substring fallbacks
ANALYST_EXACT = {
    "strong buy": 100.0,
    "strong_buy": 100.0,
    "strongbuy": 100.0,
    "strong sell": 5.0,
    "strong_sell": 5.0,
    "strongsell": 5.0,
    "buy": 80.0,
    "outperform": 80.0,
    "overweight": 80.0,
    "sell": 20.0,
    "underperform": 20.0,
    "underweight": 20.0,
    "hold": 50.0,
    "neutral": 50.0,
    "equal-weight": 50.0,
    "market perform": 50.0,
}

ANALYST_PHRASES: Sequence[Tuple[Tuple[str, ...], float]] = (
    (("strong buy", "strong_buy"), 100.0),
    (("strong sell", "strong_sell"), 5.0),
    (("underperform", "underweight"), 20.0),
    (("outperform", "overweight"), 80.0),
    (("buy",), 80.0),
    (("sell",), 20.0),
    (("hold", "neutral"), 50.0),
)

# Most specific phrase first; "very negative" must not fall through to "negative"
NEWS_PHRASES: Sequence[Tuple[Tuple[str, ...], float]] = (
    (("very positive", "strongly positive"), 95.0),
    (("very negative", "strongly negative"), 10.0),
    (("mostly positive", "slightly positive", "lean positive"), 70.0),
    (("mostly negative", "slightly negative", "lean negative"), 35.0),
    (("positive", "bullish", "optimistic"), 85.0),
    (("negative", "bearish", "pessimistic"), 20.0),
    (("mixed", "neutral", "balanced"), 50.0),
)

NEWS_SCORE_SCALE_MAX = 10.0


def _match(text: str, phrases: Sequence[Tuple[Tuple[str, ...], float]]) -> Optional[float]:
    for needles, score in phrases:
        if any(needle in text for needle in needles):
            return score
    return None


def score_analyst_consensus(consensus: Optional[str]) -> Optional[float]:
    if consensus is None:
        return None
    normalized = consensus.strip().lower()
    if not normalized:
        return None
    if normalized in ANALYST_EXACT:
        return ANALYST_EXACT[normalized]
    return _match(normalized, ANALYST_PHRASES)


def score_news_sentiment(sentiment: Optional[str]) -> Optional[float]:
    """
    Map a news-sentiment label to a score.

    A bare number is read as a 0-10 news score and scaled to 0-100; numbers
    outside that range are treated as unknown.
    """
    if sentiment is None:
        return None
    normalized = sentiment.strip().lower()
    if not normalized:
        return None

    numeric = safe_number(normalized)
    if numeric is not None:
        if 0 <= numeric <= NEWS_SCORE_SCALE_MAX:
            return numeric * (100 / NEWS_SCORE_SCALE_MAX)
        return None

    return _match(normalized, NEWS_PHRASES)


def score_sentiment(metrics: ScoringMetrics) -> CategoryResult:
    return score_category([
        SubMetric(
            "Analyst Consensus",
            SENTIMENT_WEIGHTS["analyst_consensus"],
            score_analyst_consensus(metrics.analyst_consensus),
            metrics.analyst_consensus,
        ),
        SubMetric(
            "News Sentiment",
            SENTIMENT_WEIGHTS["news_sentiment"],
            score_news_sentiment(metrics.news_sentiment),
            metrics.news_sentiment,
        ),
    ])
