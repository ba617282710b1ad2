from web3 import Web3

from perps_session.token_address import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    associated_token_address,
    collateral_token_address,
)

MINT = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
OWNER = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
OTHER_OWNER = "0xFFcf8FDEE72ac11b5c542428B35EEF5769C409f0"


def test_derivation_is_deterministic_and_checksummed():
    a = collateral_token_address(MINT, OWNER)
    b = collateral_token_address(MINT, OWNER)

    assert a == b
    assert Web3.is_checksum_address(a)


def test_lowercase_inputs_give_same_address():
    assert collateral_token_address(MINT.lower(), OWNER.lower()) == collateral_token_address(MINT, OWNER)


def test_each_input_changes_the_address():
    base = associated_token_address(ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID, MINT, OWNER)

    assert associated_token_address(ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID, MINT, OTHER_OWNER) != base
    assert associated_token_address(ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID, OWNER, MINT) != base
    assert associated_token_address(TOKEN_PROGRAM_ID, ASSOCIATED_TOKEN_PROGRAM_ID, MINT, OWNER) != base


def test_matches_packed_keccak():
    digest = Web3.solidity_keccak(
        ["address", "address", "address", "address"],
        [
            Web3.to_checksum_address(ASSOCIATED_TOKEN_PROGRAM_ID),
            Web3.to_checksum_address(TOKEN_PROGRAM_ID),
            Web3.to_checksum_address(MINT),
            Web3.to_checksum_address(OWNER),
        ],
    )
    assert collateral_token_address(MINT, OWNER) == Web3.to_checksum_address(Web3.to_hex(digest[-20:]))
