from __future__ import annotations

import pytest

from config import ENVIRONMENTS, SessionConfig
from perps_session.schemas import (
    MARK_PRICE_PRECISION,
    QUOTE_PRECISION,
    Direction,
    Market,
    Price,
    Session,
    SlippageQuote,
    TxResult,
)
from perps_session.errors import MarketUnavailable

WALLET = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"


class FakeExchange:
    """In-memory exchange: constant-product curve per market, net position per market."""

    def __init__(
        self,
        mark_price: float = 100.0,
        account_exists: bool = False,
        base_reserve: float = 1_000_000.0,
        markets=None,
        fail_on=None,
        native_balance: int = 2 * 10 ** 18,
    ):
        self.markets = markets or {"SOL": 0, "BTC": 1}
        self.base_reserve = base_reserve
        self.quote_reserve = base_reserve * mark_price
        self.accounts = {WALLET} if account_exists else set()
        self.fail_on = dict(fail_on or {})
        self.native_balance = native_balance
        self.calls = []
        self.net_position = {}  # market_index -> signed notional (QUOTE_PRECISION)

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise self.fail_on[op]

    def _tx(self, op: str) -> TxResult:
        return TxResult(signature=f"fake-{op}-{len(self.calls)}", raw={"status": "ok"})

    @property
    def mutations(self):
        reads = {"get_native_balance", "resolve_market", "current_mark_price", "estimate_slippage", "account_exists"}
        return [c for c in self.calls if c[0] not in reads]

    # ── reads ──

    def get_native_balance(self, wallet: str) -> int:
        self.calls.append(("get_native_balance", wallet))
        return self.native_balance

    def resolve_market(self, symbol: str) -> Market:
        self.calls.append(("resolve_market", symbol))
        if symbol not in self.markets:
            raise MarketUnavailable(f"No market found for {symbol}", operation="resolve_market")
        return Market(symbol=symbol, market_index=self.markets[symbol])

    def current_mark_price(self, market: Market) -> Price:
        self.calls.append(("current_mark_price", market.market_index))
        mark = self.quote_reserve / self.base_reserve
        return Price(raw=int(round(mark * MARK_PRICE_PRECISION)))

    def estimate_slippage(self, direction: Direction, notional: int, market: Market) -> SlippageQuote:
        self.calls.append(("estimate_slippage", direction, notional, market.market_index))
        q = notional / QUOTE_PRECISION
        k = self.base_reserve * self.quote_reserve
        mark = self.quote_reserve / self.base_reserve

        if direction is Direction.LONG:
            new_quote = self.quote_reserve + q
            new_base = k / new_quote
            entry = q / (self.base_reserve - new_base)
            avg = (entry - mark) / mark
        else:
            new_quote = self.quote_reserve - q
            new_base = k / new_quote
            entry = q / (new_base - self.base_reserve)
            avg = (mark - entry) / mark
        new_price = new_quote / new_base
        max_slip = abs(new_price - mark) / mark

        def p(x):
            return Price(raw=int(round(x * MARK_PRICE_PRECISION)))

        return SlippageQuote(avg_slippage=p(avg), max_slippage=p(max_slip), entry_price=p(entry), new_price=p(new_price))

    def account_exists(self, wallet: str) -> bool:
        self.calls.append(("account_exists", wallet))
        self._maybe_fail("account_exists")
        return wallet in self.accounts

    # ── mutations ──

    def create_account_and_deposit(self, wallet: str, amount: int, funding_address: str) -> TxResult:
        self.calls.append(("create_account_and_deposit", wallet, amount, funding_address))
        self._maybe_fail("create_account_and_deposit")
        self.accounts.add(wallet)
        return self._tx("create")

    def subscribe(self, wallet: str) -> TxResult:
        self.calls.append(("subscribe", wallet))
        self._maybe_fail("subscribe")
        return self._tx("subscribe")

    def open_position(self, direction: Direction, notional: int, market_index: int) -> TxResult:
        self.calls.append(("open_position", direction, notional, market_index))
        self._maybe_fail("open_position")
        signed = notional if direction is Direction.LONG else -notional
        self.net_position[market_index] = self.net_position.get(market_index, 0) + signed
        return self._tx("open")

    def close_position(self, market_index: int) -> TxResult:
        self.calls.append(("close_position", market_index))
        self._maybe_fail("close_position")
        # Flat market: accepted as a no-op
        self.net_position[market_index] = 0
        return self._tx("close")


@pytest.fixture
def fake_exchange():
    return FakeExchange()


@pytest.fixture
def session_config():
    return SessionConfig(environment=ENVIRONMENTS["devnet"], private_key="")


@pytest.fixture
def session():
    env = ENVIRONMENTS["devnet"]
    return Session(wallet=WALLET, rpc_url=env.rpc_url, program_id=env.program_id, env=env.name)
