"""
Pydantic models for structured Perplexity responses.

Field names on the wire are camelCase; Python attributes are snake_case.
Every model accepts both so cached payloads can be re-validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models parsed from camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Overview
# =============================================================================


class StockOverview(WireModel):
    ticker: str
    company_name: str
    current_price: Optional[float]
    previous_close: Optional[float]
    open: Optional[float]
    day_high: Optional[float]
    day_low: Optional[float]
    week_high_52: Optional[float] = Field(alias="weekHigh52")
    week_low_52: Optional[float] = Field(alias="weekLow52")
    market_cap: Optional[float]
    pe_ratio: Optional[float]
    pb_ratio: Optional[float]
    dividend_yield: Optional[float]
    volume: Optional[float]
    eps: Optional[float]
    beta: Optional[float]
    timestamp: str


class CompanyProfile(WireModel):
    symbol: str
    company_name: str
    ipo_date: Optional[str]
    ceo: Optional[str]
    full_time_employees: Optional[int]
    sector: Optional[str]
    industry: Optional[str]
    country: str
    exchange: str
    description: Optional[str]
    website: Optional[str]


class NewsArticle(WireModel):
    headline: str
    source: str
    date: str
    url: Optional[str]
    image_url: Optional[str]


class Development(WireModel):
    headline: str
    publication: str
    date: str
    description: Optional[str]


class IssueView(WireModel):
    summary: str
    rationale: str
    source_count: int


class KeyIssue(WireModel):
    topic: str
    bullish_view: IssueView
    bearish_view: IssueView


class OverviewResponse(WireModel):
    """Overview tab: quote snapshot, company profile, news and debates."""

    overview: StockOverview
    profile: CompanyProfile
    news: List[NewsArticle]
    developments: List[Development]
    key_issues: List[KeyIssue]


# =============================================================================
# Financials
# =============================================================================


class StatementType(str, Enum):
    KEY_STATS = "key-stats"
    INCOME_STATEMENT = "income-statement"
    BALANCE_SHEET = "balance-sheet"
    CASH_FLOW = "cash-flow"


class FinancialPeriod(str, Enum):
    ANNUAL = "annual"
    QUARTERLY = "quarterly"
    TTM = "ttm"


class FinancialRow(WireModel):
    label: str
    values: Dict[str, Optional[float]]


class FinancialsResponse(WireModel):
    """One financial statement across reporting dates."""

    statement_type: StatementType = Field(alias="type")
    period: FinancialPeriod
    dates: List[str]
    currency: str
    rows: List[FinancialRow]


# =============================================================================
# Earnings
# =============================================================================


class EarningsQuarter(WireModel):
    quarter: str
    date: Optional[str]
    eps_estimate: Optional[float]
    eps_actual: Optional[float]
    eps_surprise: Optional[float]
    revenue_estimate: Optional[float]
    revenue_actual: Optional[float]
    revenue_surprise: Optional[float]


class EarningsResponse(WireModel):
    quarters: List[EarningsQuarter]


# =============================================================================
# Historical prices
# =============================================================================


class HistoricalRange(str, Enum):
    ONE_DAY = "1D"
    FIVE_DAYS = "5D"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    YEAR_TO_DATE = "YTD"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    MAX = "MAX"


class HistoricalDataPoint(WireModel):
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float


class HistoricalResponse(WireModel):
    data: List[HistoricalDataPoint]


# =============================================================================
# Search
# =============================================================================


class SearchResult(WireModel):
    ticker: str
    company_name: str
    sector: Optional[str] = None


# =============================================================================
# Scoring
# =============================================================================


class ScoringMetricsPayload(RootModel[Dict[str, Any]]):
    """Raw metrics object; flattened and coerced by the metrics parser."""


class ScoreReasoning(WireModel):
    """Narrative returned for a computed score."""

    summary: str
    valuation_analysis: str
    financial_health_analysis: str
    growth_outlook: str
    short_term_outlook: str
    long_term_outlook: str
    sentiment_summary: str
