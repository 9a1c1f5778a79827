"""
Prover inputs for the ledger's private operations.

Each builder encrypts the amounts an operation needs (ElGamal for the
contract's homomorphic balance, PCTs for the holder and the auditor) and
returns them as the named witness the circuit expects, alongside the wire
values the caller submits with the proof. Proving and submission happen
elsewhere.

    register   PrivateKey, PublicKey, Address, ChainID, RegistrationHash
    mint       receiver EGCT + PCT, auditor PCT, nullifier
    transfer   sender EGCT, receiver EGCT + PCT, auditor PCT, new balance PCT
    burn       sender EGCT, auditor PCT, new balance PCT
    withdraw   auditor PCT, new balance PCT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from eerc_sdk.core.keys import Keypair
from eerc_sdk.crypto.babyjub import Point, random_scalar
from eerc_sdk.crypto.elgamal import EGCT, encrypt_message
from eerc_sdk.crypto.pct import PCT, encrypt_pct
from eerc_sdk.crypto.poseidon import poseidon_hash

logger = logging.getLogger("eerc_sdk.operations")


@dataclass(frozen=True)
class OperationInputs:
    """
    Everything produced for one private operation.

    Attributes:
        operation: "register", "mint", "transfer", "burn" or "withdraw".
        prover_input: Named circuit witness (ints and [x, y] lists).
        auditor_pct: Amount encrypted for the auditor.
        receiver_pct: Amount encrypted for the receiver (mint, transfer).
        balance_pct: Sender's new balance encrypted to itself (spends).
        nullifier_hash: Mint replay guard.
    """
    operation: str
    prover_input: dict[str, Any] = field(default_factory=dict)
    auditor_pct: PCT | None = None
    receiver_pct: PCT | None = None
    balance_pct: PCT | None = None
    nullifier_hash: int | None = None


def _pk(point: Point) -> list[int]:
    return [point[0], point[1]]


def _pct_for(amount: int, public_key: Point) -> tuple[PCT, int]:
    r = random_scalar()
    return encrypt_pct([amount], public_key, randomness=r), r


def _pct_fields(prefix: str, pct: PCT, randomness: int) -> dict[str, Any]:
    return {
        f"{prefix}PCT": list(pct.ciphertext),
        f"{prefix}PCTAuthKey": _pk(pct.auth_key),
        f"{prefix}PCTNonce": pct.nonce,
        f"{prefix}PCTRandom": randomness,
    }


def _sender_fields(sender: Keypair, balance: int, balance_egct: EGCT) -> dict[str, Any]:
    return {
        "SenderPrivateKey": sender.curve_private_key,
        "SenderPublicKey": _pk(sender.public_key),
        "SenderBalance": balance,
        "SenderBalanceC1": _pk(balance_egct.c1),
        "SenderBalanceC2": _pk(balance_egct.c2),
    }


def _check_amount(amount: int, balance: int | None = None) -> None:
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")
    if balance is not None and amount > balance:
        raise ValueError(f"amount {amount} exceeds balance {balance}")


def mint_nullifier(chain_id: int, auditor_pct: PCT) -> int:
    """Poseidon(chain_id, *auditor ciphertext): the contract rejects reuse."""
    return poseidon_hash([chain_id, *auditor_pct.ciphertext])


def build_registration_inputs(keypair: Keypair, address: str, chain_id: int) -> OperationInputs:
    """Witness proving knowledge of the private key behind a registered public key."""
    return OperationInputs(
        operation="register",
        prover_input={
            "SenderPrivateKey": keypair.curve_private_key,
            "SenderPublicKey": _pk(keypair.public_key),
            "SenderAddress": int(address, 16),
            "ChainID": chain_id,
            "RegistrationHash": keypair.registration_hash(chain_id, address),
        },
    )


def build_mint_inputs(
    amount: int,
    receiver_public_key: Point,
    auditor_public_key: Point,
    chain_id: int,
) -> OperationInputs:
    """
    Private mint of `amount` units to a receiver.

    Raises:
        ValueError: If amount is not positive.
    """
    _check_amount(amount)
    value = encrypt_message(receiver_public_key, amount)
    receiver_pct, receiver_r = _pct_for(amount, receiver_public_key)
    auditor_pct, auditor_r = _pct_for(amount, auditor_public_key)
    nullifier = mint_nullifier(chain_id, auditor_pct)

    prover_input = {
        "ValueToMint": amount,
        "ChainID": chain_id,
        "NullifierHash": nullifier,
        "ReceiverPublicKey": _pk(receiver_public_key),
        "ReceiverVTTC1": _pk(value.cipher.c1),
        "ReceiverVTTC2": _pk(value.cipher.c2),
        "ReceiverVTTRandom": value.randomness,
        **_pct_fields("Receiver", receiver_pct, receiver_r),
        "AuditorPublicKey": _pk(auditor_public_key),
        **_pct_fields("Auditor", auditor_pct, auditor_r),
    }
    logger.debug(f"Built mint inputs for {amount} units")
    return OperationInputs(
        operation="mint",
        prover_input=prover_input,
        auditor_pct=auditor_pct,
        receiver_pct=receiver_pct,
        nullifier_hash=nullifier,
    )


def build_transfer_inputs(
    sender: Keypair,
    sender_balance: int,
    sender_balance_egct: EGCT,
    receiver_public_key: Point,
    amount: int,
    auditor_public_key: Point,
) -> OperationInputs:
    """
    Private transfer of `amount` units from sender to receiver.

    Args:
        sender: Sender keypair.
        sender_balance: Sender's current plaintext balance (see BalanceReconciler).
        sender_balance_egct: Sender's current EGCT as read from the ledger.
        receiver_public_key: Receiver's registered public key.
        amount: Units to move.
        auditor_public_key: The ledger auditor's public key.

    Raises:
        ValueError: If amount is not positive or exceeds the balance.
    """
    _check_amount(amount, sender_balance)
    sender_value = encrypt_message(sender.public_key, amount)
    receiver_value = encrypt_message(receiver_public_key, amount)
    receiver_pct, receiver_r = _pct_for(amount, receiver_public_key)
    auditor_pct, auditor_r = _pct_for(amount, auditor_public_key)
    balance_pct = encrypt_pct([sender_balance - amount], sender.public_key)

    prover_input = {
        "ValueToTransfer": amount,
        **_sender_fields(sender, sender_balance, sender_balance_egct),
        "SenderVTTC1": _pk(sender_value.cipher.c1),
        "SenderVTTC2": _pk(sender_value.cipher.c2),
        "ReceiverPublicKey": _pk(receiver_public_key),
        "ReceiverVTTC1": _pk(receiver_value.cipher.c1),
        "ReceiverVTTC2": _pk(receiver_value.cipher.c2),
        "ReceiverVTTRandom": receiver_value.randomness,
        **_pct_fields("Receiver", receiver_pct, receiver_r),
        "AuditorPublicKey": _pk(auditor_public_key),
        **_pct_fields("Auditor", auditor_pct, auditor_r),
    }
    logger.debug(f"Built transfer inputs for {amount} units")
    return OperationInputs(
        operation="transfer",
        prover_input=prover_input,
        auditor_pct=auditor_pct,
        receiver_pct=receiver_pct,
        balance_pct=balance_pct,
    )


def build_burn_inputs(
    sender: Keypair,
    sender_balance: int,
    sender_balance_egct: EGCT,
    amount: int,
    auditor_public_key: Point,
) -> OperationInputs:
    """
    Private burn of `amount` units from the sender's balance.

    Raises:
        ValueError: If amount is not positive or exceeds the balance.
    """
    _check_amount(amount, sender_balance)
    burn_value = encrypt_message(sender.public_key, amount)
    auditor_pct, auditor_r = _pct_for(amount, auditor_public_key)
    balance_pct = encrypt_pct([sender_balance - amount], sender.public_key)

    prover_input = {
        "ValueToBurn": amount,
        **_sender_fields(sender, sender_balance, sender_balance_egct),
        "SenderVTBC1": _pk(burn_value.cipher.c1),
        "SenderVTBC2": _pk(burn_value.cipher.c2),
        "AuditorPublicKey": _pk(auditor_public_key),
        **_pct_fields("Auditor", auditor_pct, auditor_r),
    }
    return OperationInputs(
        operation="burn",
        prover_input=prover_input,
        auditor_pct=auditor_pct,
        balance_pct=balance_pct,
    )


def build_withdraw_inputs(
    sender: Keypair,
    sender_balance: int,
    sender_balance_egct: EGCT,
    amount: int,
    auditor_public_key: Point,
) -> OperationInputs:
    """
    Withdrawal of `amount` units back to the public token (converter mode).

    Raises:
        ValueError: If amount is not positive or exceeds the balance.
    """
    _check_amount(amount, sender_balance)
    auditor_pct, auditor_r = _pct_for(amount, auditor_public_key)
    balance_pct = encrypt_pct([sender_balance - amount], sender.public_key)

    prover_input = {
        "ValueToWithdraw": amount,
        **_sender_fields(sender, sender_balance, sender_balance_egct),
        "AuditorPublicKey": _pk(auditor_public_key),
        **_pct_fields("Auditor", auditor_pct, auditor_r),
    }
    return OperationInputs(
        operation="withdraw",
        prover_input=prover_input,
        auditor_pct=auditor_pct,
        balance_pct=balance_pct,
    )
