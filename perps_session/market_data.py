"""Market Data Reader - resolve a market and read its mark price."""

from __future__ import annotations

import logging

from .exchange import ExchangeGateway
from .schemas import Market, Price

logger = logging.getLogger(__name__)


class MarketDataReader:
    def __init__(self, gateway: ExchangeGateway):
        self.gateway = gateway

    def resolve(self, symbol: str) -> Market:
        """Raises MarketUnavailable for unknown symbols."""
        market = self.gateway.resolve_market(symbol)
        logger.debug("[MarketData] %s -> market index %d", symbol, market.market_index)
        return market

    def current_price(self, market: Market) -> Price:
        return self.gateway.current_mark_price(market)
