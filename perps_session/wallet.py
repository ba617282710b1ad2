from __future__ import annotations

import json

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount


def _normalize_pk(pk: str) -> str:
    pk = pk.strip()
    if not pk:
        raise ValueError("Empty private key")

    # Byte-array form, e.g. "[12, 200, ...]" as exported by keypair tools.
    # A 64-byte array carries the public half after the secret; keep the first 32.
    if pk.startswith("["):
        try:
            raw = bytes(json.loads(pk))
        except (ValueError, TypeError):
            raise ValueError("Private key byte array must be a JSON list of ints 0-255")
        if len(raw) not in (32, 64):
            raise ValueError(f"Private key byte array must hold 32 or 64 bytes, got {len(raw)}")
        return "0x" + raw[:32].hex()

    if pk.startswith("0x"):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("Private key must be 32 bytes (64 hex chars), optionally prefixed by 0x")
    return "0x" + pk


def load_signer(private_key: str) -> LocalAccount:
    """Build the session signer from a hex or byte-array secret."""
    if not private_key:
        raise RuntimeError(
            "Missing required env var: BOT_PRIVATE_KEY. "
            "Set it in the session or add it to the repo-root .env."
        )
    return Account.from_key(_normalize_pk(private_key))


def canonical_payload(payload: dict) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def sign_payload(signer: LocalAccount, payload: dict) -> str:
    """EIP-191 signature over the canonical JSON of ``payload``, hex encoded."""
    message = encode_defunct(text=canonical_payload(payload))
    return "0x" + bytes(signer.sign_message(message).signature).hex()


def recover_signer(payload: dict, signature: str) -> str:
    message = encode_defunct(text=canonical_payload(payload))
    return Account.recover_message(message, signature=signature)
