"""
eerc_sdk.protocol — Prover inputs for private ledger operations.
"""

from eerc_sdk.protocol.operations import (
    OperationInputs,
    build_burn_inputs,
    build_mint_inputs,
    build_registration_inputs,
    build_transfer_inputs,
    build_withdraw_inputs,
    mint_nullifier,
)

__all__ = [
    "OperationInputs",
    "build_burn_inputs",
    "build_mint_inputs",
    "build_registration_inputs",
    "build_transfer_inputs",
    "build_withdraw_inputs",
    "mint_nullifier",
]
