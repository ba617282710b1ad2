"""
Slippage Estimator - what a hypothetical trade would cost against the curve

The estimate is a fraction of mark price at MARK_PRICE_PRECISION
(0.0012 = 0.12%). By default it is reported only; a SlippagePolicy with a
limit turns an excessive estimate into a precondition failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import SlippageExceeded
from .exchange import ExchangeGateway
from .schemas import Direction, Market, Price, SlippageQuote

logger = logging.getLogger(__name__)


def slippage_pct(price: Price) -> float:
    return abs(price.to_number()) * 100


@dataclass(frozen=True)
class SlippagePolicy:
    """None = informational only"""
    max_slippage_pct: Optional[float] = None

    @property
    def enforced(self) -> bool:
        return self.max_slippage_pct is not None

    def check(self, estimate: Price) -> None:
        if not self.enforced:
            return
        pct = slippage_pct(estimate)
        if pct > self.max_slippage_pct:
            logger.warning("[Slippage] Blocked: %.4f%% > limit %.4f%%", pct, self.max_slippage_pct)
            raise SlippageExceeded(pct, self.max_slippage_pct)


class SlippageEstimator:
    def __init__(self, gateway: ExchangeGateway):
        self.gateway = gateway

    def quote(self, direction: Direction, notional: int, market: Market) -> SlippageQuote:
        return self.gateway.estimate_slippage(direction, notional, market)

    def estimate(self, direction: Direction, notional: int, market: Market) -> Price:
        """Average slippage for the trade, same fixed-point form as the mark price."""
        return self.quote(direction, notional, market).avg_slippage
