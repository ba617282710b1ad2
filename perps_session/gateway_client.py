"""
Exchange Gateway Client - perp exchange calls over the gateway sidecar

The gateway sidecar owns the on-chain program calls (pricing curve, margin
accounts, position mutations). This client speaks its JSON API:

    GET  /markets                              -> {"markets": [{"symbol", "market_index"}]}
    GET  /markets/{index}/mark-price           -> {"price", "precision"}
    GET  /markets/{index}/slippage?direction=&notional=
                                               -> {"avg_slippage", "max_slippage",
                                                   "entry_price", "new_price", "precision"}
    GET  /users/{wallet}                       -> account body, {"exists": false} or 404 = no account
    POST /users                                -> {"status": "ok", "tx": "..."}
    POST /users/{wallet}/subscribe             -> {"status": "ok"}
    POST /positions/open                       -> {"status": "ok", "tx": "..."}
    POST /positions/close                      -> {"status": "ok", "tx": "..."}

Every POST carries the wallet address and an EIP-191 signature of the body.
In dry-run mode reads stay live and POSTs are only logged.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import requests
from eth_account.signers.local import LocalAccount
from web3 import Web3

from utils import http_client

from .errors import (
    ExchangeError,
    MarketUnavailable,
    PositionOperationFailed,
    SubscriptionFailed,
)
from .schemas import Direction, Market, Price, SlippageQuote, TxResult
from .wallet import sign_payload

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    ExchangeGateway over HTTP.

    Read calls use ``read_timeout``; transactions use ``tx_timeout`` because
    they block until the exchange confirms.
    """

    def __init__(
        self,
        base_url: str,
        signer: LocalAccount,
        rpc_url: str,
        dry_run: bool = True,
        read_timeout: float = 10.0,
        tx_timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.signer = signer
        self.rpc_url = rpc_url
        self.dry_run = dry_run
        self.read_timeout = (http_client.DEFAULT_TIMEOUT[0], read_timeout)
        self.tx_timeout = (http_client.DEFAULT_TIMEOUT[0], tx_timeout)
        self._web3: Optional[Web3] = None

    @property
    def wallet(self) -> str:
        return self.signer.address

    def _headers(self, payload: dict) -> dict:
        return {
            "Content-Type": "application/json",
            "X-Wallet-Address": self.wallet,
            "X-Wallet-Signature": sign_payload(self.signer, payload),
        }

    def _get(self, path: str, operation: str, error_cls=ExchangeError, **kwargs) -> dict:
        try:
            return http_client.get_json(f"{self.base_url}{path}", timeout=self.read_timeout, **kwargs)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise error_cls(f"{operation} failed: {e}", operation=operation, status_code=status) from e
        except requests.RequestException as e:
            raise error_cls(f"{operation} failed: {e}", operation=operation) from e

    def _post_tx(self, path: str, payload: dict, operation: str, error_cls=ExchangeError) -> TxResult:
        if self.dry_run:
            logger.info("[Gateway] DRY RUN: %s %s", operation, payload)
            return TxResult(
                signature=f"dry_run_{operation}_{int(time.time())}",
                dry_run=True,
                raw={"status": "ok", "dry_run": True, "payload": payload},
            )

        try:
            resp = http_client.post_json(
                f"{self.base_url}{path}",
                payload,
                timeout=self.tx_timeout,
                headers=self._headers(payload),
            )
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise error_cls(f"{operation} failed: {e}", operation=operation, status_code=status) from e
        except requests.RequestException as e:
            raise error_cls(f"{operation} failed: {e}", operation=operation) from e

        if resp.get("status") == "error":
            raise error_cls(
                f"{operation} rejected: {resp.get('error', 'Unknown error')}",
                operation=operation,
            )

        result = TxResult.from_response(resp)
        logger.debug("[Gateway] %s confirmed tx=%s", operation, result.signature)
        return result

    # ─────────────────────────────────────────────────────────────────
    # Chain reads
    # ─────────────────────────────────────────────────────────────────

    def get_native_balance(self, wallet: str) -> int:
        """Gas-token balance of ``wallet`` in wei, read straight from the RPC node."""
        if self._web3 is None:
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.read_timeout[1]}))
        try:
            return int(self._web3.eth.get_balance(Web3.to_checksum_address(wallet)))
        except (requests.RequestException, ValueError) as e:
            raise ExchangeError(f"get_balance failed: {e}", operation="get_balance") from e

    # ─────────────────────────────────────────────────────────────────
    # Market data
    # ─────────────────────────────────────────────────────────────────

    def resolve_market(self, symbol: str) -> Market:
        data = self._get("/markets", "resolve_market")
        for m in data.get("markets", []):
            if str(m.get("symbol", "")).upper() == symbol.upper():
                return Market(symbol=m["symbol"], market_index=int(m["market_index"]))
        raise MarketUnavailable(f"No market found for {symbol}", operation="resolve_market")

    def current_mark_price(self, market: Market) -> Price:
        try:
            data = self._get(f"/markets/{market.market_index}/mark-price", "mark_price")
        except ExchangeError as e:
            if e.status_code == 404:
                raise MarketUnavailable(
                    f"No market with index {market.market_index}", operation="mark_price", status_code=404
                ) from e
            raise
        return Price(raw=int(data["price"]), precision=int(data["precision"]))

    def estimate_slippage(self, direction: Direction, notional: int, market: Market) -> SlippageQuote:
        data = self._get(
            f"/markets/{market.market_index}/slippage",
            "estimate_slippage",
            params={"direction": direction.value, "notional": str(notional)},
        )
        return SlippageQuote.from_response(data)

    # ─────────────────────────────────────────────────────────────────
    # Account
    # ─────────────────────────────────────────────────────────────────

    def account_exists(self, wallet: str) -> bool:
        try:
            resp = http_client.request("GET", f"{self.base_url}/users/{wallet}", timeout=self.read_timeout)
        except requests.RequestException as e:
            raise ExchangeError(f"account_exists failed: {e}", operation="account_exists") from e

        if resp.status_code == 404:
            return False
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise ExchangeError(
                f"account_exists failed: {e}", operation="account_exists", status_code=resp.status_code
            ) from e
        # 200 means the account is there unless the body says otherwise
        return bool(resp.json().get("exists", True))

    def create_account_and_deposit(self, wallet: str, amount: int, funding_address: str) -> TxResult:
        payload = {
            "authority": wallet,
            "amount": str(amount),
            "collateral_account": funding_address,
        }
        return self._post_tx("/users", payload, "create_account_and_deposit")

    def subscribe(self, wallet: str) -> TxResult:
        return self._post_tx(f"/users/{wallet}/subscribe", {"authority": wallet}, "subscribe", SubscriptionFailed)

    # ─────────────────────────────────────────────────────────────────
    # Positions
    # ─────────────────────────────────────────────────────────────────

    def open_position(self, direction: Direction, notional: int, market_index: int) -> TxResult:
        payload = {
            "authority": self.wallet,
            "direction": direction.value,
            "notional": str(notional),
            "market_index": market_index,
        }
        return self._post_tx("/positions/open", payload, "open_position", PositionOperationFailed)

    def close_position(self, market_index: int) -> TxResult:
        payload = {"authority": self.wallet, "market_index": market_index}
        return self._post_tx("/positions/close", payload, "close_position", PositionOperationFailed)
