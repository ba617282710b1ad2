"""Run one scripted perps session.

Usage:
    python run_session.py

Everything is configured through the environment (or .env):
    BOT_PRIVATE_KEY   signing key, hex or JSON byte array (required)
    PERPS_ENV         devnet | mainnet-beta (default devnet)
    PERPS_DRY_RUN     true/false (default true)
    SESSION_CONFIG_FILE  optional YAML overrides for sizes and limits

Exit status is 0 when the whole sequence completed, 1 otherwise.
"""
from __future__ import annotations

import logging
from typing import Optional

from config import LOG_LEVEL, SessionConfig, load_session_config
from perps_session import (
    AccountBootstrapFailed,
    ExchangeError,
    SessionOrchestrator,
    open_session,
)
from perps_session.gateway_client import GatewayClient
from perps_session.wallet import load_signer

logger = logging.getLogger(__name__)


def build_orchestrator(config: SessionConfig) -> SessionOrchestrator:
    signer = load_signer(config.private_key)
    session = open_session(config, signer)
    gateway = GatewayClient(
        base_url=session.gateway_url or config.environment.gateway_url,
        signer=signer,
        rpc_url=session.rpc_url,
        dry_run=config.dry_run,
        read_timeout=config.read_timeout,
        tx_timeout=config.tx_timeout,
    )
    return SessionOrchestrator(config, gateway, session)


def main(config: Optional[SessionConfig] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = config or load_session_config()
        orchestrator = build_orchestrator(config)
    except (ValueError, RuntimeError) as e:
        logger.error("[Session] Configuration error: %s", e)
        return 1

    logger.info("[Session] Mode: %s", "DRY RUN" if config.dry_run else "LIVE")

    try:
        orchestrator.run()
    except AccountBootstrapFailed as e:
        logger.error("[Session] ERROR: %s", e)
        return 1
    except ExchangeError as e:
        logger.error("[Session] ERROR during %s: %s", e.operation or orchestrator.state.value, e)
        return 1
    except Exception as e:
        logger.exception("[Session] Aborted in state %s: %s", orchestrator.state.value, e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
