"""
Perps Session Schemas - value types passed between the session components

Amounts and prices travel as fixed-point integers with an explicit scale
factor, exactly as the exchange gateway returns them. Conversion to float
only happens for display.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# Exchange-defined scale factors
MARK_PRICE_PRECISION = 10 ** 10
QUOTE_PRECISION = 10 ** 6


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    def opposite(self) -> "Direction":
        return Direction.SHORT if self is Direction.LONG else Direction.LONG


def quote_amount(usd: int) -> int:
    """Whole quote-currency units -> fixed-point integer the exchange expects."""
    return int(usd) * QUOTE_PRECISION


def convert_to_number(raw: int, precision: int) -> float:
    """Fixed-point integer -> float, for display only."""
    whole, frac = divmod(abs(raw), precision)
    value = whole + frac / precision
    return -value if raw < 0 else value


@dataclass(frozen=True)
class Price:
    """A fixed-point price: ``raw / precision``."""
    raw: int
    precision: int = MARK_PRICE_PRECISION

    def to_number(self) -> float:
        return convert_to_number(self.raw, self.precision)

    def __str__(self) -> str:
        return f"${self.to_number():,.4f}"


@dataclass(frozen=True)
class Market:
    """A perp market as known to the exchange"""
    symbol: str
    market_index: int


@dataclass(frozen=True)
class SlippageQuote:
    """What the pricing curve says a hypothetical trade would do"""
    avg_slippage: Price
    max_slippage: Price
    entry_price: Price
    new_price: Price

    @classmethod
    def from_response(cls, data: dict) -> "SlippageQuote":
        precision = int(data.get("precision", MARK_PRICE_PRECISION))
        return cls(
            avg_slippage=Price(int(data["avg_slippage"]), precision),
            max_slippage=Price(int(data.get("max_slippage", data["avg_slippage"])), precision),
            entry_price=Price(int(data.get("entry_price", 0)), precision),
            new_price=Price(int(data.get("new_price", 0)), precision),
        )


@dataclass(frozen=True)
class TradeIntent:
    """One position change to send to the exchange"""
    direction: Direction
    notional: int  # fixed-point, QUOTE_PRECISION
    market: Market

    def describe(self) -> str:
        usd = convert_to_number(self.notional, QUOTE_PRECISION)
        return f"{self.direction.value} ${usd:,.2f} {self.market.symbol}"


@dataclass
class TxResult:
    """Result of a confirmed exchange transaction"""
    signature: str = ""
    dry_run: bool = False
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_response(cls, resp: dict) -> "TxResult":
        """Parse from gateway response; callers check ``status`` first"""
        return cls(
            signature=resp.get("tx") or resp.get("signature") or "",
            dry_run=bool(resp.get("dry_run", False)),
            raw=resp,
        )


@dataclass(frozen=True)
class Session:
    """Wallet + endpoint + program identity for one process run"""
    wallet: str
    rpc_url: str
    program_id: str
    env: str = "devnet"
    gateway_url: Optional[str] = None
