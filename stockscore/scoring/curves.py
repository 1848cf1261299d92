"""
Normalization curves.

Each metric maps to a 0-100 sub-score through a piecewise-linear curve:
an ordered list of (breakpoint, score) pairs, linear between neighbours and
flat beyond the outermost points. Every scoring function returns None for an
absent input so missing data never counts as a good or bad value.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


Point = Tuple[float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class PiecewiseCurve:
    """Linear interpolation over sorted breakpoints, clamped at both ends."""

    points: Tuple[Point, ...]

    def __post_init__(self):
        if len(self.points) < 2:
            raise ValueError("A curve needs at least two points")
        xs = [x for x, _ in self.points]
        if any(b <= a for a, b in zip(xs, xs[1:])):
            raise ValueError("Curve breakpoints must be strictly increasing")

    @classmethod
    def of(cls, points: Sequence[Point]) -> "PiecewiseCurve":
        return cls(tuple((float(x), float(y)) for x, y in points))

    def __call__(self, value: float) -> float:
        first_x, first_y = self.points[0]
        last_x, last_y = self.points[-1]
        if value <= first_x:
            return first_y
        if value >= last_x:
            return last_y

        xs = [x for x, _ in self.points]
        i = bisect_right(xs, value)
        x0, y0 = self.points[i - 1]
        x1, y1 = self.points[i]
        t = (value - x0) / (x1 - x0)
        return y0 + t * (y1 - y0)


# =============================================================================
# Curves
# =============================================================================

# Ratio of the stock's P/E to its sector average; cheaper is better
PE_VS_SECTOR_CURVE = PiecewiseCurve.of([(0.5, 100), (0.7, 100), (1.0, 70), (1.3, 40), (1.8, 20)])
PB_RATIO_CURVE = PiecewiseCurve.of([(1, 100), (2, 75), (3, 50), (5, 25), (8, 10)])
EV_EBITDA_CURVE = PiecewiseCurve.of([(8, 100), (12, 70), (18, 40), (25, 15)])
DIVIDEND_YIELD_CURVE = PiecewiseCurve.of([(0, 20), (1, 40), (2, 70), (4, 100)])

# Shared by revenue, EPS and profit growth (percent)
GROWTH_RATE_CURVE = PiecewiseCurve.of([(-15, 10), (0, 30), (5, 50), (15, 80), (25, 100)])

ROE_CURVE = PiecewiseCurve.of([(0, 10), (5, 30), (10, 50), (15, 80), (20, 100)])
OPERATING_MARGIN_CURVE = PiecewiseCurve.of([(0, 25), (8, 50), (15, 75), (25, 100)])
DEBT_TO_EQUITY_CURVE = PiecewiseCurve.of([(0.3, 100), (0.7, 75), (1.0, 50), (1.5, 25), (2.5, 10)])

# Technical curves peak mid-range and taper toward both extremes
RANGE_POSITION_CURVE = PiecewiseCurve.of([
    (0, 20), (10, 35), (20, 55), (30, 80), (40, 100),
    (60, 100), (70, 80), (80, 55), (90, 35), (100, 20),
])
RSI_CURVE = PiecewiseCurve.of([
    (0, 30), (20, 40), (30, 60), (40, 100), (60, 100), (70, 60), (80, 40), (100, 30),
])
PRICE_VS_200DMA_CURVE = PiecewiseCurve.of([(-25, 30), (-10, 50), (0, 100), (10, 100), (20, 60), (40, 30)])

NEGATIVE_PE_SCORE = 10.0
NEGATIVE_BOOK_SCORE = 10.0
NEGATIVE_EBITDA_SCORE = 15.0
NEGATIVE_MARGIN_SCORE = 0.0
NEGATIVE_EQUITY_SCORE = 10.0


# =============================================================================
# Valuation
# =============================================================================


def pe_vs_sector_ratio(pe: Optional[float], sector_pe: Optional[float]) -> Optional[float]:
    """P/E relative to sector; absent if either side is absent or the sector P/E is zero."""
    if pe is None or sector_pe is None or sector_pe == 0:
        return None
    return pe / sector_pe


def score_pe_vs_sector(pe: Optional[float], sector_pe: Optional[float]) -> Optional[float]:
    ratio = pe_vs_sector_ratio(pe, sector_pe)
    if ratio is None:
        return None
    if ratio <= 0:
        return NEGATIVE_PE_SCORE
    return PE_VS_SECTOR_CURVE(ratio)


def score_pb_ratio(pb: Optional[float]) -> Optional[float]:
    if pb is None:
        return None
    if pb <= 0:
        return NEGATIVE_BOOK_SCORE
    return PB_RATIO_CURVE(pb)


def score_ev_to_ebitda(ev_ebitda: Optional[float]) -> Optional[float]:
    if ev_ebitda is None:
        return None
    if ev_ebitda <= 0:
        return NEGATIVE_EBITDA_SCORE
    return EV_EBITDA_CURVE(ev_ebitda)


def score_dividend_yield(dividend_yield: Optional[float]) -> Optional[float]:
    if dividend_yield is None:
        return None
    return DIVIDEND_YIELD_CURVE(dividend_yield)


# =============================================================================
# Growth
# =============================================================================


def score_growth_rate(growth_pct: Optional[float]) -> Optional[float]:
    if growth_pct is None:
        return None
    return GROWTH_RATE_CURVE(growth_pct)


# =============================================================================
# Profitability
# =============================================================================


def score_roe(roe: Optional[float]) -> Optional[float]:
    if roe is None:
        return None
    return ROE_CURVE(roe)


def score_operating_margin(margin: Optional[float]) -> Optional[float]:
    if margin is None:
        return None
    if margin < 0:
        return NEGATIVE_MARGIN_SCORE
    return OPERATING_MARGIN_CURVE(margin)


def score_debt_to_equity(debt_to_equity: Optional[float]) -> Optional[float]:
    if debt_to_equity is None:
        return None
    if debt_to_equity < 0:
        return NEGATIVE_EQUITY_SCORE
    return DEBT_TO_EQUITY_CURVE(debt_to_equity)


# =============================================================================
# Technical
# =============================================================================


def range_position(
    price: Optional[float], low: Optional[float], high: Optional[float]
) -> Optional[float]:
    """Where the price sits in its 52-week range, as a percent of the range."""
    if price is None or low is None or high is None or high <= low:
        return None
    return (price - low) / (high - low) * 100


def score_range_position(
    price: Optional[float], low: Optional[float], high: Optional[float]
) -> Optional[float]:
    position = range_position(price, low, high)
    if position is None:
        return None
    return RANGE_POSITION_CURVE(position)


def score_rsi(rsi: Optional[float]) -> Optional[float]:
    if rsi is None:
        return None
    return RSI_CURVE(clamp(rsi, 0, 100))


def score_price_vs_200dma(pct: Optional[float]) -> Optional[float]:
    if pct is None:
        return None
    return PRICE_VS_200DMA_CURVE(pct)
