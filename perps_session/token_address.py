"""
Associated token address derivation.

The collateral a wallet deposits sits in a token account whose address is a
pure function of (associated-token program, token program, mint, owner).
No network call is needed to compute it.
"""

from web3 import Web3

ASSOCIATED_TOKEN_PROGRAM_ID = "0x8c1E5b2A09F3B9d1E0c6D5aF4a2B7C3d9E1f0A6B"
TOKEN_PROGRAM_ID = "0x06E1a3C5f9b7D2e4A8c0B6d4F2a1E3c5B7d9F0a2"


def associated_token_address(
    program_constant: str,
    token_program_id: str,
    mint_address: str,
    owner_address: str,
) -> str:
    """Derive the owner's token account address for ``mint_address``.

    keccak256 over the four packed addresses; the last 20 bytes are the
    address, returned checksummed.
    """
    digest = Web3.solidity_keccak(
        ["address", "address", "address", "address"],
        [
            Web3.to_checksum_address(program_constant),
            Web3.to_checksum_address(token_program_id),
            Web3.to_checksum_address(mint_address),
            Web3.to_checksum_address(owner_address),
        ],
    )
    return Web3.to_checksum_address(Web3.to_hex(digest[-20:]))


def collateral_token_address(mint_address: str, owner_address: str) -> str:
    """Shortcut using the standard program constants."""
    return associated_token_address(
        ASSOCIATED_TOKEN_PROGRAM_ID,
        TOKEN_PROGRAM_ID,
        mint_address,
        owner_address,
    )
