"""Test doubles and sample payloads shared across test modules."""

from __future__ import annotations

import json
from typing import Any, Callable, List, Optional, Union


# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Manually advanced clock usable for both seconds and milliseconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


Reply = Union[str, Exception, Callable[[str], str]]


class FakeTextClient:
    """
    Scripted stand-in for PerplexityClient.

    Replies are consumed in order; an Exception reply is raised instead of
    returned. Once the script runs out, `default` answers every prompt.
    """

    def __init__(self, *replies: Reply, default: Optional[Reply] = None):
        self.replies: List[Reply] = list(replies)
        self.default = default
        self.prompts: List[str] = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def query(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if reply is None:
            raise AssertionError(f"Unexpected prompt: {prompt[:80]}")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply

    async def close(self) -> None:
        self.closed = True


def as_json(payload: Any, fenced: bool = False) -> str:
    text = json.dumps(payload)
    return f"```json\n{text}\n```" if fenced else text


# =============================================================================
# Sample payloads
# =============================================================================


SCENARIO_METRICS = {
    "peRatio": 12,
    "sectorPeRatio": 20,
    "roe": 22,
    "operatingMargin": 18,
    "debtToEquity": 0.2,
    "revenueGrowthYoY": 30,
    "rsi14": 50,
    "priceVs200dma": 5,
    "analystConsensus": "Buy",
    "newsSentiment": "Positive",
}

FULL_METRICS = {
    "valuation": {
        "peRatio": 18,
        "sectorPeRatio": 24,
        "pbRatio": 2.5,
        "evToEbitda": 11,
        "dividendYield": 1.8,
    },
    "growth": {"revenueGrowthYoY": 12, "epsGrowthYoY": 9, "profitGrowthYoY": 10},
    "profitability": {"roe": 16, "operatingMargin": 21, "debtToEquity": 0.4},
    "technical": {
        "currentPrice": 1500,
        "weekHigh52": 1700,
        "weekLow52": 1200,
        "rsi14": 55,
        "priceVs200dma": 6,
    },
    "sentiment": {"analystConsensus": "Buy", "newsSentiment": "Mostly Positive"},
}

REASONING = {
    "summary": "Solid fundamentals at a fair price.",
    "valuationAnalysis": "Trades below its sector multiple.",
    "financialHealthAnalysis": "Low leverage and healthy margins.",
    "growthOutlook": "Double-digit revenue growth.",
    "shortTermOutlook": "Momentum is balanced.",
    "longTermOutlook": "Compounding looks durable.",
    "sentimentSummary": "Analysts lean positive.",
}

OVERVIEW = {
    "overview": {
        "ticker": "TCS",
        "companyName": "Tata Consultancy Services Ltd",
        "currentPrice": 4100.5,
        "previousClose": 4080.0,
        "open": 4090.0,
        "dayHigh": 4120.0,
        "dayLow": 4075.0,
        "weekHigh52": 4590.0,
        "weekLow52": 3310.0,
        "marketCap": 14800000000000,
        "peRatio": 31.2,
        "pbRatio": 14.1,
        "dividendYield": 1.4,
        "volume": 2100000,
        "eps": 131.4,
        "beta": 0.62,
        "timestamp": "2024-06-01T10:00:00Z",
    },
    "profile": {
        "symbol": "TCS",
        "companyName": "Tata Consultancy Services Ltd",
        "ipoDate": "2004-08-25",
        "ceo": "K. Krithivasan",
        "fullTimeEmployees": 601546,
        "sector": "Technology",
        "industry": "IT Services",
        "country": "India",
        "exchange": "NSE",
        "description": "IT services and consulting.",
        "website": "https://www.tcs.com",
    },
    "news": [
        {
            "headline": "TCS wins large deal",
            "source": "Mint",
            "date": "2024-05-30",
            "url": None,
            "imageUrl": None,
        }
    ],
    "developments": [],
    "keyIssues": [],
}
