"""
Perplexity integration - client, prompts, response schemas and parsing.

Usage:
    from stockscore.services.perplexity import (
        PerplexityClient,
        SYSTEM_PROMPT,
        build_overview_prompt,
        extract_and_validate,
        OverviewResponse,
    )
"""

from stockscore.services.perplexity.client import PerplexityClient, TextGenerator
from stockscore.services.perplexity.parse import (
    extract_and_validate,
    extract_json,
    extract_json_text,
    validate_payload,
)
from stockscore.services.perplexity.prompts import (
    SYSTEM_PROMPT,
    build_earnings_prompt,
    build_financials_prompt,
    build_historical_prompt,
    build_overview_prompt,
    build_score_reasoning_prompt,
    build_scoring_metrics_prompt,
    build_search_prompt,
)
from stockscore.services.perplexity.schemas import (
    EarningsResponse,
    FinancialPeriod,
    FinancialsResponse,
    HistoricalRange,
    HistoricalResponse,
    OverviewResponse,
    ScoreReasoning,
    ScoringMetricsPayload,
    SearchResult,
    StatementType,
)


__all__ = [
    # Client
    "PerplexityClient",
    "TextGenerator",
    # Parsing
    "extract_and_validate",
    "extract_json",
    "extract_json_text",
    "validate_payload",
    # Prompts
    "SYSTEM_PROMPT",
    "build_earnings_prompt",
    "build_financials_prompt",
    "build_historical_prompt",
    "build_overview_prompt",
    "build_score_reasoning_prompt",
    "build_scoring_metrics_prompt",
    "build_search_prompt",
    # Schemas
    "EarningsResponse",
    "FinancialPeriod",
    "FinancialsResponse",
    "HistoricalRange",
    "HistoricalResponse",
    "OverviewResponse",
    "ScoreReasoning",
    "ScoringMetricsPayload",
    "SearchResult",
    "StatementType",
]
