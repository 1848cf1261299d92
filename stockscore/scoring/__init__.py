"""
AI scoring - normalization curves, category scorers and aggregation.

Usage:
    from stockscore.scoring import ScoringEngine, parse_metrics, aggregate

    engine = ScoringEngine(client, cache, settings)
    result = await engine.get_score("INFY")
"""

from .engine import (
    ScoringEngine,
    aggregate,
    calculate_confidence,
    compute_weighted_total,
    map_classification,
    map_grade,
    score_categories,
)
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
from .profitability import score_profitability
from .sentiment import score_sentiment
from .technical import score_technical
from .valuation import score_valuation
from .weights import CATEGORY_WEIGHTS


__all__ = [
    # Engine
    "ScoringEngine",
    "aggregate",
    "calculate_confidence",
    "compute_weighted_total",
    "map_classification",
    "map_grade",
    "score_categories",
    # Parsing
    "TOTAL_METRIC_FIELDS",
    "parse_metrics",
    # Scorers
    "score_growth",
    "score_profitability",
    "score_sentiment",
    "score_technical",
    "score_valuation",
    # Models
    "AIScoreResult",
    "CATEGORY_WEIGHTS",
    "Category",
    "CategoryResult",
    "Classification",
    "Grade",
    "ScoringMetrics",
]
