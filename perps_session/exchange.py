"""The exchange gateway interface the session components depend on.

``gateway_client.GatewayClient`` talks to the real gateway over HTTP; tests
substitute an in-memory fake with the same methods.
"""
from __future__ import annotations

from typing import Protocol

from .schemas import Direction, Market, Price, SlippageQuote, TxResult


class ExchangeGateway(Protocol):
    def get_native_balance(self, wallet: str) -> int: ...

    def resolve_market(self, symbol: str) -> Market: ...

    def current_mark_price(self, market: Market) -> Price: ...

    def estimate_slippage(self, direction: Direction, notional: int, market: Market) -> SlippageQuote: ...

    def account_exists(self, wallet: str) -> bool: ...

    def create_account_and_deposit(self, wallet: str, amount: int, funding_address: str) -> TxResult: ...

    def subscribe(self, wallet: str) -> TxResult: ...

    def open_position(self, direction: Direction, notional: int, market_index: int) -> TxResult: ...

    def close_position(self, market_index: int) -> TxResult: ...
