"""Error taxonomy for a session run.

Gateway-side failures derive from ``ExchangeError``. ``AccountBootstrapFailed``
is deliberately not one of them: it is raised by the session itself and
wraps whatever the gateway raised.
"""
from __future__ import annotations

from typing import Optional


class ExchangeError(Exception):
    """Raised when the exchange gateway rejects a call or cannot be reached."""

    def __init__(self, message: str, *, operation: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class MarketUnavailable(ExchangeError):
    """Raised when a market symbol cannot be resolved to a market index."""
    pass


class SubscriptionFailed(ExchangeError):
    """Raised when the live account view cannot be established."""
    pass


class PositionOperationFailed(ExchangeError):
    """Raised when open/reduce/close is rejected or not confirmed."""
    pass


class AccountBootstrapFailed(Exception):
    """Raised when creating and funding the margin account fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class AccountNotReady(RuntimeError):
    """Raised when a position call is made before the account is READY."""
    pass


class SlippageExceeded(Exception):
    """Raised when the slippage policy rejects the quoted estimate."""

    def __init__(self, estimate_pct: float, limit_pct: float):
        super().__init__(f"Estimated slippage {estimate_pct:.4f}% > limit {limit_pct:.4f}%")
        self.estimate_pct = estimate_pct
        self.limit_pct = limit_pct


class InvalidTransition(RuntimeError):
    """Raised when a session step is called out of order."""
    pass
