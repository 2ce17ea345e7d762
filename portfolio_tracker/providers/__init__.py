"""External market data providers."""

from .base import DomesticPriceSource, PriceQuote, QuoteSource
from .naver_finance import NaverFinanceClient, NaverFinanceError
from .yahoo_finance import YahooFinanceClient, YahooFinanceError

__all__ = [
    "PriceQuote",
    "QuoteSource",
    "DomesticPriceSource",
    "NaverFinanceClient",
    "NaverFinanceError",
    "YahooFinanceClient",
    "YahooFinanceError",
]
