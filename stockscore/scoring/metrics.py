"""
Metrics parser.

Model output arrives nested by category or flat, with keys in camelCase,
snake_case or abbreviated. The payload is flattened, then each canonical
field is resolved from an ordered synonym list (first present key wins) and
coerced. Missing or unusable values become None; only a non-object payload
is an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from stockscore.core.exceptions import MetricsParseError
from stockscore.core.logging import get_logger

from .models import ScoringMetrics


logger = get_logger("scoring.metrics")

TOTAL_METRIC_FIELDS = len(ScoringMetrics.model_fields)

_NOT_AVAILABLE = "n/a"


def safe_number(value: Any) -> Optional[float]:
    """Coerce to a finite float, or None for blanks, "N/A", booleans and junk."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text or text.lower() == _NOT_AVAILABLE:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def safe_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for blanks and "N/A"."""
    if value is None:
        return None
    try:
        text = str(value).strip()
    except ValueError:
        # ints beyond the interpreter digit limit refuse to stringify
        return None
    if not text or text.lower() == _NOT_AVAILABLE:
        return None
    return text


def flatten(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flatten nested objects into one key->value map.

    Lists are kept as values. On duplicate keys the later key in document
    order wins.
    """
    flat: Dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, Mapping):
            flat.update(flatten(value))
        else:
            flat[key] = value
    return flat


@dataclass(frozen=True)
class FieldSpec:
    """Canonical field, accepted keys in priority order, and its coercion."""

    name: str
    keys: Tuple[str, ...]
    coerce: Callable[[Any], Any]

    def resolve(self, flat: Mapping[str, Any]) -> Any:
        # A key present with a null value falls through to the next synonym
        for key in self.keys:
            if flat.get(key) is not None:
                return self.coerce(flat[key])
        return None


FIELD_SPECS: Tuple[FieldSpec, ...] = (
    FieldSpec("pe_ratio", ("peRatio", "pe_ratio", "pe"), safe_number),
    FieldSpec(
        "sector_pe_ratio",
        ("sectorPeRatio", "sector_pe_ratio", "sectorPe", "sectorAvgPE", "sector_avg_pe"),
        safe_number,
    ),
    FieldSpec("pb_ratio", ("pbRatio", "pb_ratio", "pb"), safe_number),
    FieldSpec("ev_to_ebitda", ("evToEbitda", "ev_to_ebitda", "evEbitda"), safe_number),
    FieldSpec("dividend_yield", ("dividendYield", "dividend_yield"), safe_number),
    FieldSpec(
        "revenue_growth_yoy",
        ("revenueGrowthYoY", "revenue_growth_yoy", "revenueGrowth"),
        safe_number,
    ),
    FieldSpec("eps_growth_yoy", ("epsGrowthYoY", "eps_growth_yoy", "epsGrowth"), safe_number),
    FieldSpec(
        "profit_growth_yoy",
        (
            "profitGrowthYoY",
            "profit_growth_yoy",
            "profitGrowth",
            "netIncomeGrowthYoY",
            "net_income_growth_yoy",
        ),
        safe_number,
    ),
    FieldSpec("roe", ("roe", "returnOnEquity", "return_on_equity"), safe_number),
    FieldSpec("operating_margin", ("operatingMargin", "operating_margin"), safe_number),
    FieldSpec("debt_to_equity", ("debtToEquity", "debt_to_equity", "debtEquity"), safe_number),
    FieldSpec("current_price", ("currentPrice", "current_price", "price"), safe_number),
    FieldSpec("week_high_52", ("weekHigh52", "week_high_52", "high52w"), safe_number),
    FieldSpec("week_low_52", ("weekLow52", "week_low_52", "low52w"), safe_number),
    FieldSpec("rsi_14", ("rsi14", "rsi", "rsi_14"), safe_number),
    FieldSpec(
        "price_vs_200dma",
        (
            "priceVs200dma",
            "price_vs_200dma",
            "priceVs200DMA",
            "priceVsSMA200",
            "price_vs_sma_200",
        ),
        safe_number,
    ),
    FieldSpec(
        "analyst_consensus",
        ("analystConsensus", "analyst_consensus", "consensus", "analystRating", "analyst_rating"),
        safe_string,
    ),
    FieldSpec(
        "news_sentiment",
        ("newsSentiment", "news_sentiment", "sentiment", "newsScore"),
        safe_string,
    ),
)


def parse_metrics(payload: Any) -> ScoringMetrics:
    """
    Build a ScoringMetrics record from a raw metrics payload.

    Raises:
        MetricsParseError: if the payload is not a JSON object
    """
    if not isinstance(payload, Mapping):
        raise MetricsParseError(
            f"Scoring metrics payload must be an object, got {type(payload).__name__}",
            details={"type": type(payload).__name__},
        )

    flat = flatten(payload)
    values = {spec.name: spec.resolve(flat) for spec in FIELD_SPECS}
    metrics = ScoringMetrics(**values)

    logger.debug(
        f"Parsed {len(metrics.available_fields())}/{TOTAL_METRIC_FIELDS} metrics",
        extra={"missing": [name for name, value in values.items() if value is None]},
    )
    return metrics
