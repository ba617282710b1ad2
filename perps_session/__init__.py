# Perps Session - one scripted trading session against a perp exchange gateway
#
# read mark price -> estimate slippage -> bootstrap margin account (once)
# -> open LONG -> reduce with SHORT -> close
#
# The orchestrator module owns the sequencing; the other modules are the
# single-purpose components it drives.

from .schemas import (
    Direction,
    Market,
    Price,
    Session,
    SlippageQuote,
    TradeIntent,
    TxResult,
    MARK_PRICE_PRECISION,
    QUOTE_PRECISION,
    quote_amount,
)

from .errors import (
    ExchangeError,
    MarketUnavailable,
    SubscriptionFailed,
    PositionOperationFailed,
    AccountBootstrapFailed,
    AccountNotReady,
    SlippageExceeded,
    InvalidTransition,
)

from .bootstrap import AccountBootstrapper, BootstrapState
from .positions import PositionController
from .orchestrator import (
    SessionOrchestrator,
    SessionReport,
    SessionState,
    open_session,
)
