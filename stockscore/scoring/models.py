"""
Pydantic models for the scoring pipeline.

All results are frozen: a re-score builds new objects rather than updating
old ones.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class Category(str, Enum):
    """Scoring categories."""

    VALUATION = "valuation"
    GROWTH = "growth"
    PROFITABILITY = "profitability"
    TECHNICAL = "technical"
    SENTIMENT = "sentiment"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Grade(str, Enum):
    """Investment recommendation derived from the total score."""

    STRONG_BUY = "Strong Buy"
    BUY = "Buy"
    HOLD = "Hold"
    SELL = "Sell"
    STRONG_SELL = "Strong Sell"


class Classification(str, Enum):
    """Coarse market-sentiment label derived from the total score."""

    BULLISH = "Bullish"
    NEUTRAL = "Neutral"
    BEARISH = "Bearish"


# =============================================================================
# Inputs
# =============================================================================


class ScoringMetrics(BaseModel):
    """
    Canonical flat metrics record.

    Every field is independently optional. None means "not available" and
    is never replaced by zero.
    """

    model_config = ConfigDict(frozen=True)

    # Valuation
    pe_ratio: float | None = None
    sector_pe_ratio: float | None = None
    pb_ratio: float | None = None
    ev_to_ebitda: float | None = None
    dividend_yield: float | None = None  # percent, 2.5 == 2.5%

    # Growth (percent)
    revenue_growth_yoy: float | None = None
    eps_growth_yoy: float | None = None
    profit_growth_yoy: float | None = None

    # Profitability
    roe: float | None = None
    operating_margin: float | None = None
    debt_to_equity: float | None = None

    # Technical
    current_price: float | None = None
    week_high_52: float | None = None
    week_low_52: float | None = None
    rsi_14: float | None = None
    price_vs_200dma: float | None = None  # percent above (+) or below (-)

    # Sentiment
    analyst_consensus: str | None = None
    news_sentiment: str | None = None

    def available_fields(self) -> list[str]:
        """Names of the fields that carry a value."""
        return [name for name, value in self if value is not None]


# =============================================================================
# Results
# =============================================================================


class CategoryResult(BaseModel):
    """Outcome of one category scorer."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    metrics: dict[str, float | str | None] = Field(
        default_factory=dict,
        description="Display value per sub-metric label, None when absent",
    )
    available_metrics: int = Field(..., ge=0)
    total_metrics: int = Field(..., ge=0)

    @property
    def has_data(self) -> bool:
        return self.available_metrics > 0


class AIScoreResult(BaseModel):
    """Terminal artifact of one scoring run."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    score: int = Field(..., ge=0, le=100)
    grade: Grade
    classification: Classification
    breakdown: dict[Category, CategoryResult]
    confidence: int = Field(..., ge=0, le=100)

    reasoning: str
    valuation_analysis: str
    financial_health_analysis: str
    growth_outlook: str
    short_term_outlook: str
    long_term_outlook: str
    sentiment_summary: str
    risk_factors: list[str] = Field(..., min_length=1)
    narrative_source: Literal["ai", "template"]

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
