"""Prompt builders for Perplexity requests."""

from __future__ import annotations

from typing import Mapping

from .schemas import FinancialPeriod, HistoricalRange, StatementType


SYSTEM_PROMPT = (
    "You are a financial data API for Indian NSE (National Stock Exchange) stocks. "
    "Always respond with valid JSON only. No markdown, no explanation text, "
    "no code fences. Just raw JSON."
)

PERIOD_LABELS = {
    FinancialPeriod.ANNUAL: "annual (last 4-5 fiscal years)",
    FinancialPeriod.QUARTERLY: "quarterly (last 4-6 quarters)",
    FinancialPeriod.TTM: "trailing twelve months (TTM)",
}

STATEMENT_ROWS = {
    StatementType.KEY_STATS: [
        "Market Cap", "P/E Ratio", "P/B Ratio", "EV/EBITDA", "Dividend Yield %",
        "Return on Equity %", "Return on Assets %", "Debt to Equity", "Current Ratio",
    ],
    StatementType.INCOME_STATEMENT: [
        "Revenue", "Cost of Revenue", "Gross Profit", "Gross Margin %",
        "Operating Expenses", "Operating Income", "Operating Margin %", "Net Income",
        "Net Margin %", "EPS (Basic)", "EPS (Diluted)", "EBITDA", "EBITDA Margin %",
    ],
    StatementType.BALANCE_SHEET: [
        "Total Assets", "Total Liabilities", "Total Equity", "Total Debt",
        "Cash & Equivalents", "Debt to Equity", "Current Ratio",
    ],
    StatementType.CASH_FLOW: [
        "Operating Cash Flow", "Capital Expenditure", "Free Cash Flow",
        "Dividends Paid", "Net Change in Cash",
    ],
}

RANGE_DESCRIPTIONS = {
    HistoricalRange.ONE_DAY: "today (intraday points every 15-30 minutes, 9:15 AM - 3:30 PM IST)",
    HistoricalRange.FIVE_DAYS: "the last 5 trading days (daily OHLCV)",
    HistoricalRange.ONE_MONTH: "the last 1 month (daily OHLCV)",
    HistoricalRange.SIX_MONTHS: "the last 6 months (weekly OHLCV)",
    HistoricalRange.YEAR_TO_DATE: "year-to-date from January 1 (weekly OHLCV)",
    HistoricalRange.ONE_YEAR: "the last 1 year (weekly OHLCV)",
    HistoricalRange.FIVE_YEARS: "the last 5 years (monthly OHLCV)",
    HistoricalRange.MAX: "all available history (monthly OHLCV, up to 20 years)",
}


def build_search_prompt(query: str) -> str:
    return (
        f'Search for NSE India stocks matching "{query}". Return a JSON array of '
        'matching stocks. Each item must have "ticker" (NSE symbol), "companyName" '
        'and optionally "sector". Return at most 10 results. Example: '
        '[{"ticker":"RELIANCE","companyName":"Reliance Industries Ltd","sector":"Energy"}]. '
        "Return ONLY the JSON array."
    )


def build_overview_prompt(ticker: str) -> str:
    return f"""Provide current data for the NSE India stock "{ticker}". Return a JSON object:

{{
  "overview": {{
    "ticker": "{ticker}", "companyName": string, "currentPrice": number|null,
    "previousClose": number|null, "open": number|null, "dayHigh": number|null,
    "dayLow": number|null, "weekHigh52": number|null, "weekLow52": number|null,
    "marketCap": number|null (full INR value), "peRatio": number|null,
    "pbRatio": number|null, "dividendYield": number|null (percent),
    "volume": number|null, "eps": number|null, "beta": number|null,
    "timestamp": "ISO 8601 timestamp"
  }},
  "profile": {{
    "symbol": "{ticker}", "companyName": string, "ipoDate": "YYYY-MM-DD"|null,
    "ceo": string|null, "fullTimeEmployees": number|null, "sector": string|null,
    "industry": string|null, "country": "India", "exchange": "NSE",
    "description": string|null (2-3 sentences), "website": string|null
  }},
  "news": [{{"headline": string, "source": string, "date": "YYYY-MM-DD", "url": string|null, "imageUrl": null}}] (5-8 items),
  "developments": [{{"headline": string, "publication": string, "date": "YYYY-MM-DD", "description": string|null}}] (3-5 items),
  "keyIssues": [{{
    "topic": string,
    "bullishView": {{"summary": string, "rationale": string, "sourceCount": number}},
    "bearishView": {{"summary": string, "rationale": string, "sourceCount": number}}
  }}] (2-4 items)
}}

All prices in INR. Use the most recent data available."""


def build_financials_prompt(
    ticker: str, statement_type: StatementType, period: FinancialPeriod
) -> str:
    rows = ", ".join(f'"{label}"' for label in STATEMENT_ROWS[statement_type])
    return f"""Provide {PERIOD_LABELS[period]} {statement_type.value} data for the NSE India stock "{ticker}". Return a JSON object:

{{
  "type": "{statement_type.value}",
  "period": "{period.value}",
  "dates": ["3/31/2024", "3/31/2023", ...],
  "currency": "INR",
  "rows": [{{"label": string, "values": {{"<date>": number|null}}}}]
}}

Include rows labelled {rows}. Monetary values are full INR numbers (not Cr or L). Use null for unavailable data points."""


def build_earnings_prompt(ticker: str) -> str:
    return f"""Provide the last 8 quarterly earnings for the NSE India stock "{ticker}". Return a JSON object:

{{
  "quarters": [{{
    "quarter": "Q3 '24", "date": "YYYY-MM-DD"|null,
    "epsEstimate": number|null, "epsActual": number|null, "epsSurprise": number|null (percent),
    "revenueEstimate": number|null, "revenueActual": number|null, "revenueSurprise": number|null (percent)
  }}]
}}

Order quarters from most recent to oldest using Indian fiscal quarters (Q1 = Apr-Jun). All values in INR. Use null for unavailable data."""


def build_historical_prompt(ticker: str, range_: HistoricalRange) -> str:
    return f"""Provide historical prices for the NSE India stock "{ticker}" for {RANGE_DESCRIPTIONS[range_]}. Return a JSON object:

{{
  "data": [{{"date": "YYYY-MM-DD" (or "YYYY-MM-DD HH:mm" intraday), "open": number, "high": number, "low": number, "close": number, "volume": number}}]
}}

Order data points from oldest to newest. All prices in INR."""


def build_scoring_metrics_prompt(ticker: str) -> str:
    return f"""Provide scoring metrics for the NSE India stock "{ticker}". Return a JSON object:

{{
  "valuation": {{
    "peRatio": number|null, "sectorPeRatio": number|null (sector average P/E),
    "pbRatio": number|null, "evToEbitda": number|null, "dividendYield": number|null (percent)
  }},
  "growth": {{
    "revenueGrowthYoY": number|null (percent), "epsGrowthYoY": number|null (percent),
    "profitGrowthYoY": number|null (net income growth, percent)
  }},
  "profitability": {{
    "roe": number|null (percent), "operatingMargin": number|null (percent),
    "debtToEquity": number|null
  }},
  "technical": {{
    "currentPrice": number|null, "weekHigh52": number|null, "weekLow52": number|null,
    "rsi14": number|null, "priceVs200dma": number|null (percent above/below the 200-day average)
  }},
  "sentiment": {{
    "analystConsensus": "Strong Buy"|"Buy"|"Hold"|"Sell"|"Strong Sell"|null,
    "newsSentiment": "Very Positive"|"Positive"|"Mixed"|"Negative"|"Very Negative"|null
  }}
}}

Use null for any value that is not available or cannot be reliably estimated."""


def build_score_reasoning_prompt(
    ticker: str, score: int, category_scores: Mapping[str, int]
) -> str:
    breakdown = ", ".join(f"{name}: {value}/100" for name, value in category_scores.items())
    return f"""The NSE India stock "{ticker}" received an overall AI score of {score}/100. Category breakdown: {breakdown}.

Return a JSON object:

{{
  "summary": "3-5 sentence rationale for the overall score",
  "valuationAnalysis": "2-4 sentences on valuation relative to peers",
  "financialHealthAnalysis": "2-4 sentences on balance sheet strength and debt",
  "growthOutlook": "2-4 sentences on revenue and earnings trajectory",
  "shortTermOutlook": "2-3 sentences for the next 3-6 months",
  "longTermOutlook": "2-3 sentences for the next 2-5 years",
  "sentimentSummary": "2-3 sentences on analyst views and market sentiment"
}}

Be specific and reference the stock's sector and the Indian market context."""
