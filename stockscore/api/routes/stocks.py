"""Stock data and AI score endpoints.

Every route is rate limited before the ticker is validated, and every body
carries `cached` so clients can tell fresh answers from stored ones.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from stockscore.api.dependencies import (
    get_scoring_engine,
    get_stock_data_service,
    rate_limit_api,
    valid_ticker,
)
from stockscore.cache import CachedResult
from stockscore.scoring import ScoringEngine
from stockscore.services.perplexity import FinancialPeriod, HistoricalRange, StatementType
from stockscore.services.stock_data import StockDataService


router = APIRouter(prefix="/stock", dependencies=[Depends(rate_limit_api)])


def _body(result: CachedResult) -> Dict[str, Any]:
    return {**result.data.model_dump(mode="json"), "cached": result.cached}


@router.get("/search", summary="Search stocks by name or symbol")
async def search_stocks(
    q: str = Query(..., min_length=1, max_length=100, description="Search text"),
    service: StockDataService = Depends(get_stock_data_service),
) -> Dict[str, Any]:
    result = await service.search(q)
    return {
        "results": [item.model_dump(mode="json") for item in result.data],
        "cached": result.cached,
    }


@router.get("/{ticker}/overview", summary="Quote, profile, news and key issues")
async def get_overview(
    ticker: str = Depends(valid_ticker),
    service: StockDataService = Depends(get_stock_data_service),
) -> Dict[str, Any]:
    return _body(await service.get_overview(ticker))


@router.get("/{ticker}/financials", summary="Financial statements")
async def get_financials(
    ticker: str = Depends(valid_ticker),
    statement_type: StatementType = Query(StatementType.INCOME_STATEMENT, alias="type"),
    period: FinancialPeriod = Query(FinancialPeriod.ANNUAL),
    service: StockDataService = Depends(get_stock_data_service),
) -> Dict[str, Any]:
    return _body(await service.get_financials(ticker, statement_type, period))


@router.get("/{ticker}/earnings", summary="Quarterly earnings history")
async def get_earnings(
    ticker: str = Depends(valid_ticker),
    service: StockDataService = Depends(get_stock_data_service),
) -> Dict[str, Any]:
    return _body(await service.get_earnings(ticker))


@router.get("/{ticker}/historical", summary="Historical OHLCV prices")
async def get_historical(
    ticker: str = Depends(valid_ticker),
    range_: HistoricalRange = Query(HistoricalRange.ONE_MONTH, alias="range"),
    service: StockDataService = Depends(get_stock_data_service),
) -> Dict[str, Any]:
    return _body(await service.get_historical(ticker, range_))


@router.get("/{ticker}/ai-score", summary="AI investment score")
async def get_ai_score(
    ticker: str = Depends(valid_ticker),
    engine: ScoringEngine = Depends(get_scoring_engine),
) -> Dict[str, Any]:
    return _body(await engine.get_score(ticker))
