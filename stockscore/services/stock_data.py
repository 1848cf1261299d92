"""Stock data service - cached Perplexity lookups for the stock page tabs.

Every lookup follows the same path: namespaced cache key, cache-aside read
with a per-area TTL, and on a miss one Perplexity query whose text is
extracted and validated against the area's response schema.
"""

from __future__ import annotations

from typing import List, Type, TypeVar

from stockscore.cache import CachedResult, ResponseCache, cache_key
from stockscore.core.config import Settings
from stockscore.core.logging import get_logger
from stockscore.services.perplexity import (
    SYSTEM_PROMPT,
    EarningsResponse,
    FinancialPeriod,
    FinancialsResponse,
    HistoricalRange,
    HistoricalResponse,
    OverviewResponse,
    SearchResult,
    StatementType,
    TextGenerator,
    build_earnings_prompt,
    build_financials_prompt,
    build_historical_prompt,
    build_overview_prompt,
    build_search_prompt,
    extract_and_validate,
)


logger = get_logger("services.stock_data")

T = TypeVar("T")


class StockDataService:
    """Overview, financials, earnings, historical prices and search."""

    def __init__(self, client: TextGenerator, cache: ResponseCache, settings: Settings):
        self.client = client
        self.cache = cache
        self.settings = settings

    async def _query(self, prompt: str, schema: Type[T]) -> T:
        text = await self.client.query(prompt, SYSTEM_PROMPT)
        return extract_and_validate(text, schema)

    async def get_overview(self, ticker: str) -> CachedResult[OverviewResponse]:
        async def fetch() -> OverviewResponse:
            logger.info(f"Fetching overview for {ticker}")
            return await self._query(build_overview_prompt(ticker), OverviewResponse)

        return await self.cache.get_or_set(
            cache_key("overview", ticker), self.settings.cache_ttl_overview, fetch
        )

    async def get_financials(
        self,
        ticker: str,
        statement_type: StatementType = StatementType.INCOME_STATEMENT,
        period: FinancialPeriod = FinancialPeriod.ANNUAL,
    ) -> CachedResult[FinancialsResponse]:
        async def fetch() -> FinancialsResponse:
            logger.info(f"Fetching {statement_type.value} ({period.value}) for {ticker}")
            return await self._query(
                build_financials_prompt(ticker, statement_type, period), FinancialsResponse
            )

        return await self.cache.get_or_set(
            cache_key("financials", ticker, statement_type.value, period.value),
            self.settings.cache_ttl_financials,
            fetch,
        )

    async def get_earnings(self, ticker: str) -> CachedResult[EarningsResponse]:
        async def fetch() -> EarningsResponse:
            logger.info(f"Fetching earnings for {ticker}")
            return await self._query(build_earnings_prompt(ticker), EarningsResponse)

        # Earnings move on the same quarterly cadence as statements
        return await self.cache.get_or_set(
            cache_key("earnings", ticker), self.settings.cache_ttl_financials, fetch
        )

    async def get_historical(
        self, ticker: str, range_: HistoricalRange = HistoricalRange.ONE_MONTH
    ) -> CachedResult[HistoricalResponse]:
        async def fetch() -> HistoricalResponse:
            logger.info(f"Fetching {range_.value} history for {ticker}")
            return await self._query(build_historical_prompt(ticker, range_), HistoricalResponse)

        return await self.cache.get_or_set(
            cache_key("historical", ticker, range_.value),
            self.settings.cache_ttl_historical,
            fetch,
        )

    async def search(self, query: str) -> CachedResult[List[SearchResult]]:
        normalized = query.strip()

        async def fetch() -> List[SearchResult]:
            logger.info(f"Searching stocks for '{normalized}'")
            return await self._query(build_search_prompt(normalized), List[SearchResult])

        return await self.cache.get_or_set(
            cache_key("search", normalized.lower()), self.settings.cache_ttl_search, fetch
        )
