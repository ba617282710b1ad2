"""
Position Controller - ordered position changes against a READY account

open and reduce both go through the exchange's open_position primitive;
"reduce" is just an open in the opposite direction. The controller never
reads the position back, so it cannot tell whether a reduce overshoots.
"""

from __future__ import annotations

import logging

from .bootstrap import AccountBootstrapper
from .errors import AccountNotReady
from .exchange import ExchangeGateway
from .schemas import Direction, Market, TradeIntent, TxResult

logger = logging.getLogger(__name__)


class PositionController:
    def __init__(self, gateway: ExchangeGateway, bootstrapper: AccountBootstrapper):
        self.gateway = gateway
        self.bootstrapper = bootstrapper

    def _require_ready(self, operation: str) -> None:
        if not self.bootstrapper.is_ready:
            raise AccountNotReady(
                f"Cannot {operation}: margin account is {self.bootstrapper.state.value}, not READY"
            )

    def _submit(self, intent: TradeIntent) -> TxResult:
        result = self.gateway.open_position(intent.direction, intent.notional, intent.market.market_index)
        logger.info("[Positions] %s tx=%s", intent.describe(), result.signature)
        return result

    def open(self, direction: Direction, notional: int, market: Market) -> TxResult:
        self._require_ready("open")
        return self._submit(TradeIntent(direction=direction, notional=notional, market=market))

    def reduce(self, opposite_direction: Direction, notional: int, market: Market) -> TxResult:
        self._require_ready("reduce")
        logger.debug("[Positions] Reducing with %s", opposite_direction.value)
        return self._submit(TradeIntent(direction=opposite_direction, notional=notional, market=market))

    def close(self, market: Market) -> TxResult:
        """Flatten the market whatever the current size or sign."""
        self._require_ready("close")
        result = self.gateway.close_position(market.market_index)
        logger.info("[Positions] Closed %s tx=%s", market.symbol, result.signature)
        return result
