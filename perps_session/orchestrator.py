"""
Session Orchestrator - the scripted session as an explicit state machine

    CREATED -> MARKET_RESOLVED -> PRICED -> SLIPPAGE_ESTIMATED
            -> ACCOUNT_READY -> POSITION_OPENED -> POSITION_REDUCED -> CLOSED

Each arrow is one public method and one blocking exchange round-trip (or a
few, for the account step). Calling a step out of order raises
InvalidTransition. The first failure moves the session to FAILED and is
re-raised; there is no resume point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from eth_account.signers.local import LocalAccount
from web3 import Web3

from config import SessionConfig

from .bootstrap import AccountBootstrapper
from .errors import InvalidTransition
from .exchange import ExchangeGateway
from .market_data import MarketDataReader
from .positions import PositionController
from .schemas import (
    Direction,
    Market,
    Price,
    Session,
    SlippageQuote,
    TxResult,
    quote_amount,
)
from .slippage import SlippageEstimator, SlippagePolicy, slippage_pct
from .token_address import collateral_token_address

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CREATED = "CREATED"
    MARKET_RESOLVED = "MARKET_RESOLVED"
    PRICED = "PRICED"
    SLIPPAGE_ESTIMATED = "SLIPPAGE_ESTIMATED"
    ACCOUNT_READY = "ACCOUNT_READY"
    POSITION_OPENED = "POSITION_OPENED"
    POSITION_REDUCED = "POSITION_REDUCED"
    CLOSED = "CLOSED"
    FAILED = "FAILED"


@dataclass
class SessionReport:
    """What the run observed and did, in order"""
    session: Session
    native_balance_wei: Optional[int] = None
    market: Optional[Market] = None
    mark_price: Optional[Price] = None
    slippage: Optional[Price] = None
    slippage_quote: Optional[SlippageQuote] = None
    account_created: bool = False
    transactions: List[Tuple[str, TxResult]] = field(default_factory=list)


def open_session(config: SessionConfig, signer: LocalAccount) -> Session:
    env = config.environment
    return Session(
        wallet=signer.address,
        rpc_url=env.rpc_url,
        program_id=env.program_id,
        env=env.name,
        gateway_url=env.gateway_url,
    )


class SessionOrchestrator:
    def __init__(self, config: SessionConfig, gateway: ExchangeGateway, session: Session):
        self.config = config
        self.gateway = gateway
        self.session = session

        self.market_data = MarketDataReader(gateway)
        self.slippage_estimator = SlippageEstimator(gateway)
        self.slippage_policy = SlippagePolicy(config.max_slippage_pct)
        self.funding_address = collateral_token_address(config.environment.collateral_mint, session.wallet)
        self.bootstrapper = AccountBootstrapper(
            gateway,
            session.wallet,
            quote_amount(config.initial_deposit),
            self.funding_address,
        )
        self.positions = PositionController(gateway, self.bootstrapper)

        self.state = SessionState.CREATED
        self.report = SessionReport(session=session)

    def _step(self, expected: SessionState, target: SessionState, fn: Callable[[], None]) -> None:
        if self.state is not expected:
            raise InvalidTransition(
                f"Cannot move to {target.value} from {self.state.value} (expected {expected.value})"
            )
        try:
            fn()
        except Exception:
            self.state = SessionState.FAILED
            raise
        logger.debug("[Session] %s -> %s", expected.value, target.value)
        self.state = target

    @property
    def market(self) -> Market:
        if self.report.market is None:
            raise InvalidTransition("Market has not been resolved yet")
        return self.report.market

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    def resolve(self) -> Market:
        def _do():
            s = self.session
            logger.info("[Session] env=%s wallet=%s program=%s", s.env, s.wallet, s.program_id)
            balance = self.gateway.get_native_balance(s.wallet)
            self.report.native_balance_wei = balance
            logger.info("[Session] Gas balance: %s", Web3.from_wei(balance, "ether"))
            self.report.market = self.market_data.resolve(self.config.market_symbol)

        self._step(SessionState.CREATED, SessionState.MARKET_RESOLVED, _do)
        return self.market

    def read_price(self) -> Price:
        def _do():
            self.report.mark_price = self.market_data.current_price(self.market)
            logger.info("[Session] Current Market Price is %s", self.report.mark_price)

        self._step(SessionState.MARKET_RESOLVED, SessionState.PRICED, _do)
        return self.report.mark_price

    def estimate_slippage(self) -> Price:
        def _do():
            check_notional = self.config.slippage_check_notional
            quote = self.slippage_estimator.quote(Direction.LONG, quote_amount(check_notional), self.market)
            self.report.slippage_quote = quote
            self.report.slippage = quote.avg_slippage
            logger.info(
                "[Session] Slippage for a $%d LONG on the %s market would be %.4f%% (entry ~%s)",
                check_notional,
                self.market.symbol,
                slippage_pct(quote.avg_slippage),
                quote.entry_price,
            )
            self.slippage_policy.check(quote.avg_slippage)

        self._step(SessionState.PRICED, SessionState.SLIPPAGE_ESTIMATED, _do)
        return self.report.slippage

    def bootstrap_account(self) -> None:
        def _do():
            self.bootstrapper.ensure_ready()
            self.report.account_created = self.bootstrapper.created
            if self.bootstrapper.creation_tx is not None:
                self.report.transactions.append(("create_account_and_deposit", self.bootstrapper.creation_tx))

        self._step(SessionState.SLIPPAGE_ESTIMATED, SessionState.ACCOUNT_READY, _do)

    def open_position(self) -> TxResult:
        def _do():
            tx = self.positions.open(Direction.LONG, quote_amount(self.config.open_notional), self.market)
            self.report.transactions.append(("open", tx))
            logger.info("[Session] LONGED $%d worth of %s", self.config.open_notional, self.market.symbol)

        self._step(SessionState.ACCOUNT_READY, SessionState.POSITION_OPENED, _do)
        return self.report.transactions[-1][1]

    def reduce_position(self) -> TxResult:
        def _do():
            tx = self.positions.reduce(Direction.LONG.opposite(), quote_amount(self.config.reduce_notional), self.market)
            self.report.transactions.append(("reduce", tx))
            logger.info("[Session] Reduced %s position by $%d", self.market.symbol, self.config.reduce_notional)

        self._step(SessionState.POSITION_OPENED, SessionState.POSITION_REDUCED, _do)
        return self.report.transactions[-1][1]

    def close_position(self) -> TxResult:
        def _do():
            tx = self.positions.close(self.market)
            self.report.transactions.append(("close", tx))

        self._step(SessionState.POSITION_REDUCED, SessionState.CLOSED, _do)
        return self.report.transactions[-1][1]

    def run(self) -> SessionReport:
        """Whole script, in order. Stops at the first failure."""
        self.resolve()
        self.read_price()
        self.estimate_slippage()
        self.bootstrap_account()
        self.open_position()
        self.reduce_position()
        self.close_position()
        logger.info("[Session] Done: %d transactions", len(self.report.transactions))
        return self.report
