"""Ticker symbol sanitization."""

from __future__ import annotations

import re

from .exceptions import InvalidTickerError


TICKER_PATTERN = re.compile(r"^[A-Z0-9&.\-]+$")
MAX_TICKER_LENGTH = 20


def sanitize_ticker(raw: str | None) -> str:
    """
    Normalize and validate a ticker symbol.

    Trims whitespace, uppercases, and accepts only A-Z, 0-9, '&', '.' and '-'
    up to 20 characters.

    Raises:
        InvalidTickerError: if the symbol is missing or malformed
    """
    if not raw or not isinstance(raw, str):
        raise InvalidTickerError("Ticker symbol is required")

    ticker = raw.strip().upper()

    if not ticker:
        raise InvalidTickerError("Ticker symbol cannot be empty")

    if len(ticker) > MAX_TICKER_LENGTH:
        raise InvalidTickerError(
            f"Ticker symbol exceeds maximum length of {MAX_TICKER_LENGTH} characters"
        )

    if not TICKER_PATTERN.match(ticker):
        raise InvalidTickerError(
            f'Invalid ticker symbol "{ticker}". Only A-Z, 0-9, &, ., and - are allowed.'
        )

    return ticker


def is_valid_ticker(raw: str | None) -> bool:
    """Check a ticker without raising."""
    try:
        sanitize_ticker(raw)
        return True
    except InvalidTickerError:
        return False
