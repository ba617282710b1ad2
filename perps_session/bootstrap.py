"""
Account Bootstrapper - make sure the wallet has a subscribed margin account

    UNKNOWN --check()--> CHECKED --ensure_ready()--> READY

Creation is attempted at most once per bootstrapper. If it fails the
state stays CHECKED and later calls refuse to try again; the run is over.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .errors import AccountBootstrapFailed
from .exchange import ExchangeGateway
from .schemas import QUOTE_PRECISION, TxResult, convert_to_number

logger = logging.getLogger(__name__)


class BootstrapState(str, Enum):
    UNKNOWN = "UNKNOWN"
    CHECKED = "CHECKED"
    READY = "READY"


class AccountBootstrapper:
    def __init__(
        self,
        gateway: ExchangeGateway,
        wallet: str,
        deposit_amount: int,
        funding_address: str,
    ):
        self.gateway = gateway
        self.wallet = wallet
        self.deposit_amount = deposit_amount
        self.funding_address = funding_address

        self.state = BootstrapState.UNKNOWN
        self.account_existed: Optional[bool] = None
        self.creation_attempted = False
        self.creation_tx: Optional[TxResult] = None

    @property
    def is_ready(self) -> bool:
        return self.state is BootstrapState.READY

    @property
    def created(self) -> bool:
        return self.creation_tx is not None

    def check(self) -> bool:
        """Fresh existence query. Read-only; safe to repeat."""
        exists = bool(self.gateway.account_exists(self.wallet))
        self.account_existed = exists
        if self.state is BootstrapState.UNKNOWN:
            self.state = BootstrapState.CHECKED
        logger.info("[Bootstrap] Margin account for %s %s", self.wallet, "exists" if exists else "not found")
        return exists

    def ensure_ready(self) -> BootstrapState:
        if self.state is BootstrapState.READY:
            return self.state
        if self.creation_attempted and not self.created:
            raise AccountBootstrapFailed(
                "Account creation already failed in this run; refusing to retry"
            )

        if self.state is BootstrapState.UNKNOWN:
            self.check()

        if not self.account_existed and not self.created:
            self._create()

        # Raises SubscriptionFailed straight through
        self.gateway.subscribe(self.wallet)
        self.state = BootstrapState.READY
        logger.info("[Bootstrap] Account READY (subscribed)")
        return self.state

    def _create(self) -> None:
        deposit_usd = convert_to_number(self.deposit_amount, QUOTE_PRECISION)
        logger.info(
            "[Bootstrap] Creating margin account with $%.2f collateral from %s",
            deposit_usd,
            self.funding_address,
        )
        self.creation_attempted = True
        try:
            self.creation_tx = self.gateway.create_account_and_deposit(
                self.wallet,
                self.deposit_amount,
                self.funding_address,
            )
        except Exception as e:
            logger.error("[Bootstrap] Account creation failed: %s", e)
            raise AccountBootstrapFailed(
                f"Unable to create margin account and deposit ${deposit_usd:.2f} collateral: {e}",
                cause=e,
            ) from e
        logger.info("[Bootstrap] Account created tx=%s", self.creation_tx.signature)
