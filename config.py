"""Session-wide configuration values.

Everything the session needs is read here once and frozen into a
``SessionConfig`` that gets handed to the orchestrator. Nothing below the
entry point reads ``os.environ`` directly.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional

import yaml

# Load .env file from project root if it exists
_env_path = Path(__file__).parent / ".env"


def _strip_inline_comment(raw_value: str) -> str:
    # Drop trailing "  # comment", keep '#' inside quotes or glued to the value.
    in_single = False
    in_double = False
    for i, ch in enumerate(raw_value):
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "#" and not in_single and not in_double:
            if i == 0 or raw_value[i - 1].isspace():
                return raw_value[:i].rstrip()
    return raw_value.strip()


def load_dotenv_file(path: Path = _env_path) -> None:
    """Copy KEY=VALUE lines from ``path`` into os.environ without overriding."""
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if line.startswith("export "):
                line = line[len("export ") :].lstrip()

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = _strip_inline_comment(value.strip())

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            if key:
                os.environ.setdefault(key, value)


load_dotenv_file()


def _float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a float")


def _int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an int")


def _bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.lower() in {"1", "true", "yes"}


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return _float(name, 0.0)


# ─────────────────────────────────────────────────────────────
# Named environments (devnet / mainnet-beta)
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EnvironmentConfig:
    """Endpoints and program identities for one deployment of the exchange."""
    name: str
    rpc_url: str
    gateway_url: str
    program_id: str
    collateral_mint: str


ENVIRONMENTS: Dict[str, EnvironmentConfig] = {
    "devnet": EnvironmentConfig(
        name="devnet",
        rpc_url="https://rpc.devnet.example.org",
        gateway_url="http://localhost:4000",
        program_id="0x9Ec3dF1a2B9A6A2c1Cb0bA5e3A2d1F4C6b7E8d90",
        collateral_mint="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
    ),
    "mainnet-beta": EnvironmentConfig(
        name="mainnet-beta",
        rpc_url="https://rpc.mainnet.example.org",
        gateway_url="http://localhost:4000",
        program_id="0xdC0aE3b1a1D4A1B5f2C8e6a3F1b2C3d4E5f6A7b8",
        collateral_mint="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    ),
}


def get_environment(name: str) -> EnvironmentConfig:
    """Get an environment by name, with env var overrides for each endpoint."""
    if name not in ENVIRONMENTS:
        raise ValueError(f"Unknown environment {name!r}; expected one of {sorted(ENVIRONMENTS)}")

    env = ENVIRONMENTS[name]
    return replace(
        env,
        rpc_url=os.getenv("PERPS_RPC_URL") or env.rpc_url,
        gateway_url=os.getenv("PERPS_GATEWAY_URL") or env.gateway_url,
        program_id=os.getenv("PERPS_PROGRAM_ID") or env.program_id,
        collateral_mint=os.getenv("PERPS_COLLATERAL_MINT") or env.collateral_mint,
    )


# ─────────────────────────────────────────────────────────────
# Session configuration
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SessionConfig:
    """Everything one scripted session run needs, resolved up front."""

    environment: EnvironmentConfig
    private_key: str = field(repr=False, default="")

    # Market and the scripted trade sizes (whole quote-currency units)
    market_symbol: str = "SOL"
    initial_deposit: int = 10_000
    slippage_check_notional: int = 5_000
    open_notional: int = 5_000
    reduce_notional: int = 2_000

    # None = slippage estimate is reported only, never enforced
    max_slippage_pct: Optional[float] = None

    dry_run: bool = True

    # Transport deadlines (seconds)
    read_timeout: float = 10.0
    tx_timeout: float = 120.0

    def __post_init__(self):
        if not self.market_symbol:
            raise ValueError("market_symbol must not be empty")
        for name in ("initial_deposit", "slippage_check_notional", "open_notional", "reduce_notional"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.reduce_notional >= self.open_notional:
            raise ValueError(
                f"reduce_notional ({self.reduce_notional}) must be smaller than "
                f"open_notional ({self.open_notional})"
            )
        if self.max_slippage_pct is not None and self.max_slippage_pct < 0:
            raise ValueError(f"max_slippage_pct must be >= 0, got {self.max_slippage_pct}")
        if self.read_timeout <= 0 or self.tx_timeout <= 0:
            raise ValueError("timeouts must be positive")


# Keys allowed in the optional YAML overrides file
_YAML_KEYS = {
    "market_symbol",
    "initial_deposit",
    "slippage_check_notional",
    "open_notional",
    "reduce_notional",
    "max_slippage_pct",
    "dry_run",
    "read_timeout",
    "tx_timeout",
}


def _load_yaml_overrides(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ValueError(f"Cannot read session config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"Session config file {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Session config file {path} must contain a mapping")

    unknown = set(data) - _YAML_KEYS
    if unknown:
        raise ValueError(f"Unknown keys in {path}: {sorted(unknown)}")
    return data


def load_session_config(path: Optional[Path] = None) -> SessionConfig:
    """Build the SessionConfig from environment variables.

    Values from the YAML file (``path`` or ``SESSION_CONFIG_FILE``) win over
    the environment. The signing key only ever comes from ``BOT_PRIVATE_KEY``.
    """
    values = dict(
        market_symbol=os.getenv("PERPS_MARKET") or "SOL",
        initial_deposit=_int("PERPS_INITIAL_DEPOSIT", 10_000),
        slippage_check_notional=_int("PERPS_SLIPPAGE_CHECK_NOTIONAL", 5_000),
        open_notional=_int("PERPS_OPEN_NOTIONAL", 5_000),
        reduce_notional=_int("PERPS_REDUCE_NOTIONAL", 2_000),
        max_slippage_pct=_optional_float("PERPS_MAX_SLIPPAGE_PCT"),
        dry_run=_bool("PERPS_DRY_RUN", True),
        read_timeout=_float("PERPS_READ_TIMEOUT", 10.0),
        tx_timeout=_float("PERPS_TX_TIMEOUT", 120.0),
    )

    if path is None and os.getenv("SESSION_CONFIG_FILE"):
        path = Path(os.getenv("SESSION_CONFIG_FILE"))
    if path is not None:
        values.update(_load_yaml_overrides(Path(path)))

    environment = get_environment(os.getenv("PERPS_ENV") or "devnet")
    try:
        return SessionConfig(
            environment=environment,
            private_key=os.getenv("BOT_PRIVATE_KEY", ""),
            **values,
        )
    except TypeError as e:
        # wrong-typed YAML value, e.g. a string where a number is expected
        raise ValueError(f"Invalid session config value: {e}") from e


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
