"""
AI scoring engine.

Workflow for one ticker:
1. Fetch raw metrics from Perplexity and validate them as a JSON object
2. Flatten and coerce them into ScoringMetrics
3. Run the five category scorers
4. Combine category scores into a total, grade, classification and confidence
5. Ask Perplexity for a narrative; fall back to templates if that fails

Steps 3-4 are pure (`aggregate`); only steps 1 and 5 touch the network.
"""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional

from stockscore.cache import CachedResult, ResponseCache, cache_key
from stockscore.core.config import Settings
from stockscore.core.exceptions import AppException, NarrativeGenerationError
from stockscore.core.logging import get_logger
from stockscore.services.perplexity import (
    SYSTEM_PROMPT,
    ScoreReasoning,
    ScoringMetricsPayload,
    TextGenerator,
    build_score_reasoning_prompt,
    build_scoring_metrics_prompt,
    extract_and_validate,
)

from .curves import round_half_up
from .growth import score_growth
from .metrics import TOTAL_METRIC_FIELDS, parse_metrics
from .models import (
    AIScoreResult,
    Category,
    CategoryResult,
    Classification,
    Grade,
    ScoringMetrics,
)
from .narrative import (
    fallback_reasoning,
    format_category_analysis,
    generate_risk_factors,
    long_term_outlook,
    short_term_outlook,
)
from .profitability import score_profitability
from .sentiment import score_sentiment
from .technical import score_technical
from .valuation import score_valuation
from .weights import CATEGORY_WEIGHTS


logger = get_logger("scoring.engine")

MAX_REASONING_LENGTH = 1500

CATEGORY_SCORERS: Dict[Category, Callable[[ScoringMetrics], CategoryResult]] = {
    Category.VALUATION: score_valuation,
    Category.GROWTH: score_growth,
    Category.PROFITABILITY: score_profitability,
    Category.TECHNICAL: score_technical,
    Category.SENTIMENT: score_sentiment,
}


# =============================================================================
# Pure aggregation
# =============================================================================


def score_categories(metrics: ScoringMetrics) -> Dict[Category, CategoryResult]:
    """Run every category scorer. Order is irrelevant; scorers are independent."""
    return {category: scorer(metrics) for category, scorer in CATEGORY_SCORERS.items()}


def compute_weighted_total(
    results: Mapping[Category, CategoryResult],
    weights: Mapping[Category, float] = CATEGORY_WEIGHTS,
) -> int:
    """Weighted mean over categories with data; 0 when none have any."""
    weight_sum = 0.0
    weighted = 0.0
    for category, result in results.items():
        if result.available_metrics > 0:
            weight = weights[category]
            weight_sum += weight
            weighted += weight * result.score

    return round_half_up(weighted / weight_sum) if weight_sum > 0 else 0


def map_grade(score: int) -> Grade:
    if score >= 80:
        return Grade.STRONG_BUY
    if score >= 65:
        return Grade.BUY
    if score >= 45:
        return Grade.HOLD
    if score >= 25:
        return Grade.SELL
    return Grade.STRONG_SELL


def map_classification(score: int) -> Classification:
    if score >= 65:
        return Classification.BULLISH
    if score >= 35:
        return Classification.NEUTRAL
    return Classification.BEARISH


def calculate_confidence(metrics: ScoringMetrics) -> int:
    """Share of the full metric inventory that was present, as a whole percent."""
    present = len(metrics.available_fields())
    return round_half_up(present / TOTAL_METRIC_FIELDS * 100)


def clean_reasoning(text: str) -> str:
    text = text.replace("```", "").strip()
    if len(text) > MAX_REASONING_LENGTH:
        text = text[: MAX_REASONING_LENGTH - 3] + "..."
    return text


def aggregate(
    ticker: str,
    metrics: ScoringMetrics,
    results: Mapping[Category, CategoryResult],
    weights: Mapping[Category, float] = CATEGORY_WEIGHTS,
    narrative: Optional[ScoreReasoning] = None,
) -> AIScoreResult:
    """
    Assemble the final result from category results.

    With `narrative` the text fields come from it; without, every text field
    is built from templates over the scores.
    """
    total = compute_weighted_total(results, weights)
    grade = map_grade(total)

    valuation = results[Category.VALUATION]
    growth = results[Category.GROWTH]
    profitability = results[Category.PROFITABILITY]
    technical = results[Category.TECHNICAL]
    sentiment = results[Category.SENTIMENT]

    if narrative is not None:
        text = {
            "reasoning": clean_reasoning(narrative.summary),
            "valuation_analysis": narrative.valuation_analysis,
            "financial_health_analysis": narrative.financial_health_analysis,
            "growth_outlook": narrative.growth_outlook,
            "short_term_outlook": narrative.short_term_outlook,
            "long_term_outlook": narrative.long_term_outlook,
            "sentiment_summary": narrative.sentiment_summary,
            "narrative_source": "ai",
        }
    else:
        text = {
            "reasoning": fallback_reasoning(ticker, total, grade),
            "valuation_analysis": format_category_analysis("Valuation", valuation),
            "financial_health_analysis": format_category_analysis("Financial Health", profitability),
            "growth_outlook": format_category_analysis("Growth", growth),
            "short_term_outlook": short_term_outlook(technical, sentiment, grade),
            "long_term_outlook": long_term_outlook(valuation, growth, profitability, grade),
            "sentiment_summary": format_category_analysis("Sentiment", sentiment),
            "narrative_source": "template",
        }

    return AIScoreResult(
        ticker=ticker,
        score=total,
        grade=grade,
        classification=map_classification(total),
        breakdown=dict(results),
        confidence=calculate_confidence(metrics),
        risk_factors=generate_risk_factors(metrics, total),
        **text,
    )


# =============================================================================
# Engine
# =============================================================================


class ScoringEngine:
    """
    Computes AI scores through a text-generation client.

    Usage:
        engine = ScoringEngine(client, cache, settings)
        result = await engine.get_score("TCS")   # cached
        fresh = await engine.compute_score("TCS")  # always recomputes
    """

    def __init__(
        self,
        client: TextGenerator,
        cache: Optional[ResponseCache] = None,
        settings: Optional[Settings] = None,
        weights: Mapping[Category, float] = CATEGORY_WEIGHTS,
    ):
        self.client = client
        self.cache = cache
        self.settings = settings
        self.weights = weights

    async def fetch_metrics(self, ticker: str) -> ScoringMetrics:
        """
        Fetch and parse raw metrics.

        Raises:
            ExternalServiceError: upstream failure (fatal to the score)
            UpstreamValidationError: unparseable or non-object payload
        """
        text = await self.client.query(build_scoring_metrics_prompt(ticker), SYSTEM_PROMPT)
        payload = extract_and_validate(text, ScoringMetricsPayload)
        return parse_metrics(payload.root)

    async def generate_narrative(
        self, ticker: str, total: int, results: Mapping[Category, CategoryResult]
    ) -> ScoreReasoning:
        """
        Request narrative text for a computed score.

        Raises:
            NarrativeGenerationError: wraps any upstream or validation failure
        """
        prompt = build_score_reasoning_prompt(
            ticker, total, {category.label: result.score for category, result in results.items()}
        )
        try:
            text = await self.client.query(prompt, SYSTEM_PROMPT)
            return extract_and_validate(text, ScoreReasoning)
        except AppException as e:
            raise NarrativeGenerationError(
                f"Narrative generation failed for {ticker}: {e.message}",
                details={"cause": e.error_code},
            ) from e

    async def compute_score(self, ticker: str) -> AIScoreResult:
        metrics = await self.fetch_metrics(ticker)
        results = score_categories(metrics)
        total = compute_weighted_total(results, self.weights)

        narrative: Optional[ScoreReasoning] = None
        try:
            narrative = await self.generate_narrative(ticker, total, results)
        except NarrativeGenerationError as e:
            logger.warning(f"Using template narrative for {ticker}: {e.message}")

        result = aggregate(ticker, metrics, results, self.weights, narrative)
        logger.info(
            f"Scored {ticker}: {result.score}/100 ({result.grade.value})",
            extra={
                "ticker": ticker,
                "score": result.score,
                "confidence": result.confidence,
                "narrative_source": result.narrative_source,
            },
        )
        return result

    async def get_score(self, ticker: str) -> CachedResult[AIScoreResult]:
        """Cache-aside wrapper around `compute_score`."""
        if self.cache is None or self.settings is None:
            return CachedResult(data=await self.compute_score(ticker), cached=False)

        return await self.cache.get_or_set(
            cache_key("ai-score", ticker),
            self.settings.cache_ttl_ai_score,
            lambda: self.compute_score(ticker),
        )
