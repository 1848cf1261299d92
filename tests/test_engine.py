"""Tests for score aggregation and the scoring engine."""

import pytest

from helpers import FULL_METRICS, REASONING, SCENARIO_METRICS, FakeClock, FakeTextClient, as_json
from stockscore.cache import ResponseCache
from stockscore.core.exceptions import (
    ExternalServiceError,
    JSONExtractionError,
    SchemaValidationError,
    UpstreamTimeoutError,
)
from stockscore.scoring import (
    Category,
    CategoryResult,
    Classification,
    Grade,
    ScoringEngine,
    ScoringMetrics,
    aggregate,
    calculate_confidence,
    compute_weighted_total,
    map_classification,
    map_grade,
    parse_metrics,
    score_categories,
)
from stockscore.scoring.engine import MAX_REASONING_LENGTH, clean_reasoning
from stockscore.scoring.narrative import generate_risk_factors


LABEL_FIELDS = {"analyst_consensus", "news_sentiment"}


def _result(score: int, available: int = 1, total: int = 3) -> CategoryResult:
    return CategoryResult(score=score, metrics={}, available_metrics=available, total_metrics=total)


def _metrics_with(count: int) -> ScoringMetrics:
    """Metrics record with the first `count` fields present."""
    values = {}
    for name in list(ScoringMetrics.model_fields)[:count]:
        values[name] = "Buy" if name in LABEL_FIELDS else 1.0
    return ScoringMetrics(**values)


# =============================================================================
# Pure aggregation
# =============================================================================


class TestGradeAndClassification:
    """Boundaries are exact."""

    @pytest.mark.parametrize(
        "score, grade",
        [
            (100, Grade.STRONG_BUY),
            (80, Grade.STRONG_BUY),
            (79, Grade.BUY),
            (65, Grade.BUY),
            (64, Grade.HOLD),
            (45, Grade.HOLD),
            (44, Grade.SELL),
            (25, Grade.SELL),
            (24, Grade.STRONG_SELL),
            (0, Grade.STRONG_SELL),
        ],
    )
    def test_grade(self, score, grade):
        assert map_grade(score) == grade

    @pytest.mark.parametrize(
        "score, classification",
        [
            (65, Classification.BULLISH),
            (64, Classification.NEUTRAL),
            (35, Classification.NEUTRAL),
            (34, Classification.BEARISH),
        ],
    )
    def test_classification(self, score, classification):
        assert map_classification(score) == classification


class TestWeightedTotal:
    def test_all_categories(self):
        results = {category: _result(50) for category in Category}
        assert compute_weighted_total(results) == 50

    def test_categories_without_data_are_excluded(self):
        results = {category: _result(0, available=0) for category in Category}
        results[Category.GROWTH] = _result(90)
        results[Category.SENTIMENT] = _result(40)
        # (0.25 * 90 + 0.10 * 40) / 0.35 = 75.71
        assert compute_weighted_total(results) == 76

    def test_no_data_anywhere_is_zero(self):
        results = {category: _result(0, available=0) for category in Category}
        assert compute_weighted_total(results) == 0

    def test_custom_weights(self):
        results = {category: _result(0) for category in Category}
        results[Category.TECHNICAL] = _result(100)
        weights = {category: 0.0 for category in Category}
        weights[Category.TECHNICAL] = 1.0
        assert compute_weighted_total(results, weights) == 100


class TestConfidence:
    @pytest.mark.parametrize("present, expected", [(18, 100), (0, 0), (9, 50), (10, 56), (1, 6)])
    def test_coverage(self, present, expected):
        assert calculate_confidence(_metrics_with(present)) == expected


class TestRiskFactors:
    def test_thresholds(self):
        metrics = ScoringMetrics(
            debt_to_equity=1.8,
            pe_ratio=40,
            sector_pe_ratio=20,
            rsi_14=78,
            operating_margin=3,
            revenue_growth_yoy=-4,
            profit_growth_yoy=-22,
        )
        risks = generate_risk_factors(metrics, 30)
        assert len(risks) == 6
        assert "1.80" in risks[0]
        assert "overbought" in risks[2]

    def test_oversold(self):
        risks = generate_risk_factors(ScoringMetrics(rsi_14=22), 50)
        assert risks == [
            "RSI of 22 indicates oversold conditions; may signal underlying weakness."
        ]

    @pytest.mark.parametrize(
        "score, fragment",
        [(85, "High valuation expectations"), (50, "Market conditions"), (10, "Weak fundamental")],
    )
    def test_fallback_by_score_band(self, score, fragment):
        risks = generate_risk_factors(ScoringMetrics(), score)
        assert len(risks) == 1
        assert fragment in risks[0]


class TestAggregate:
    def test_template_narrative(self):
        metrics = parse_metrics(SCENARIO_METRICS)
        result = aggregate("TCS", metrics, score_categories(metrics))

        assert result.narrative_source == "template"
        assert result.reasoning.startswith(f"TCS received an AI score of {result.score}/100")
        assert result.valuation_analysis.startswith("Valuation Score: 100/100 (1/4 metrics available).")
        assert result.financial_health_analysis.startswith("Financial Health Score: 94/100")
        assert result.short_term_outlook.endswith(f"Grade: {result.grade.value}.")
        assert result.risk_factors

    def test_empty_category_analysis(self):
        metrics = ScoringMetrics(roe=20)
        result = aggregate("X", metrics, score_categories(metrics))
        assert result.sentiment_summary == (
            "Sentiment Score: 0/100 (0/2 metrics available). No metric data available."
        )

    def test_ai_narrative(self):
        from stockscore.services.perplexity import ScoreReasoning

        metrics = parse_metrics(SCENARIO_METRICS)
        narrative = ScoreReasoning.model_validate(REASONING)
        result = aggregate("TCS", metrics, score_categories(metrics), narrative=narrative)

        assert result.narrative_source == "ai"
        assert result.reasoning == REASONING["summary"]
        assert result.growth_outlook == REASONING["growthOutlook"]

    def test_reasoning_is_cleaned_and_truncated(self):
        cleaned = clean_reasoning("```" + "x" * 2000 + "```")
        assert len(cleaned) == MAX_REASONING_LENGTH
        assert cleaned.endswith("...")
        assert "`" not in cleaned

    def test_result_serializes(self):
        metrics = parse_metrics(SCENARIO_METRICS)
        data = aggregate("TCS", metrics, score_categories(metrics)).model_dump(mode="json")
        assert set(data["breakdown"]) == {"valuation", "growth", "profitability", "technical", "sentiment"}
        assert data["grade"] in {g.value for g in Grade}


# =============================================================================
# End-to-end scenario
# =============================================================================


class TestScenario:
    """The reference scenario from a partially populated metrics payload."""

    def test_scenario(self):
        metrics = parse_metrics(SCENARIO_METRICS)
        result = aggregate("INFY", metrics, score_categories(metrics))

        # 0.30*100 + 0.25*100 + 0.20*94 + 0.15*100 + 0.10*82
        assert result.score == 97
        assert result.score >= 65
        assert result.grade in (Grade.BUY, Grade.STRONG_BUY)
        assert result.classification == Classification.BULLISH
        assert result.confidence == 56
        assert result.confidence < 100

        breakdown = result.breakdown
        assert breakdown[Category.VALUATION].available_metrics == 1
        assert breakdown[Category.GROWTH].available_metrics == 1
        assert breakdown[Category.PROFITABILITY].score == 94
        assert breakdown[Category.TECHNICAL].available_metrics == 2
        assert breakdown[Category.SENTIMENT].score == 82


# =============================================================================
# Engine with a text client
# =============================================================================


class TestScoringEngine:
    """Tests for ScoringEngine against a scripted client."""

    @pytest.mark.asyncio
    async def test_ai_narrative(self):
        client = FakeTextClient(as_json(FULL_METRICS, fenced=True), as_json(REASONING))
        result = await ScoringEngine(client).compute_score("TCS")

        assert client.calls == 2
        assert result.narrative_source == "ai"
        assert result.confidence == 100
        assert result.ticker == "TCS"
        assert "TCS" in client.prompts[1]
        assert f"{result.score}/100" in client.prompts[1]

    @pytest.mark.asyncio
    async def test_narrative_upstream_failure_falls_back(self):
        client = FakeTextClient(
            as_json(SCENARIO_METRICS),
            UpstreamTimeoutError("Perplexity API request timed out after 30s"),
        )
        result = await ScoringEngine(client).compute_score("TCS")

        assert result.narrative_source == "template"
        assert result.score == 97
        assert result.grade == Grade.STRONG_BUY
        assert result.reasoning.startswith("TCS received an AI score of 97/100 (Strong Buy).")

    @pytest.mark.asyncio
    async def test_narrative_garbage_falls_back(self):
        client = FakeTextClient(as_json(SCENARIO_METRICS), "I cannot help with that.")
        result = await ScoringEngine(client).compute_score("TCS")
        assert result.narrative_source == "template"

    @pytest.mark.asyncio
    async def test_narrative_schema_mismatch_falls_back(self):
        client = FakeTextClient(as_json(SCENARIO_METRICS), as_json({"summary": "only"}))
        result = await ScoringEngine(client).compute_score("TCS")
        assert result.narrative_source == "template"

    @pytest.mark.asyncio
    async def test_deeply_nested_narrative_falls_back(self):
        client = FakeTextClient(as_json({"roe": 20}), "[" * 100_000 + "]" * 100_000)
        result = await ScoringEngine(client).compute_score("TCS")
        assert result.narrative_source == "template"
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_metrics_upstream_failure_is_fatal(self):
        client = FakeTextClient(ExternalServiceError("Perplexity API unreachable"))
        with pytest.raises(ExternalServiceError):
            await ScoringEngine(client).compute_score("TCS")
        assert client.calls == 1

    @pytest.mark.asyncio
    async def test_unparseable_metrics_are_fatal(self):
        client = FakeTextClient("Sorry, no data today.")
        with pytest.raises(JSONExtractionError):
            await ScoringEngine(client).compute_score("TCS")

    @pytest.mark.asyncio
    async def test_deeply_nested_metrics_are_fatal(self):
        client = FakeTextClient("{\"a\": " * 50_000 + "1" + "}" * 50_000)
        with pytest.raises(JSONExtractionError):
            await ScoringEngine(client).compute_score("TCS")
        assert client.calls == 1

    @pytest.mark.asyncio
    async def test_non_object_metrics_are_fatal(self):
        client = FakeTextClient(as_json([1, 2, 3]))
        with pytest.raises(SchemaValidationError):
            await ScoringEngine(client).compute_score("TCS")

    @pytest.mark.asyncio
    async def test_get_score_is_cached(self, test_settings):
        cache = ResponseCache(clock=FakeClock())
        client = FakeTextClient(as_json(SCENARIO_METRICS), as_json(REASONING))
        engine = ScoringEngine(client, cache, test_settings)

        first = await engine.get_score("TCS")
        second = await engine.get_score("TCS")

        assert first.cached is False
        assert second.cached is True
        assert second.data == first.data
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_get_score_failure_is_not_cached(self, test_settings):
        cache = ResponseCache(clock=FakeClock())
        client = FakeTextClient(ExternalServiceError("down"))
        engine = ScoringEngine(client, cache, test_settings)

        with pytest.raises(ExternalServiceError):
            await engine.get_score("TCS")
        assert len(cache) == 0
