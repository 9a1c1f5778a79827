#!/usr/bin/env python3
"""
Example 02: Recover an encrypted balance.

Simulates a holder's ledger record (a private mint of 12.50 tokens followed by
a 2.50 token transfer out) and reconciles it the way a wallet would after
reading `balanceOf(user, tokenId)` from the contract.

Usage:
    python examples/02_check_balance.py
"""

import logging

from eerc_sdk import BalanceReconciler, EncryptedBalance, Keypair, ProtocolConfig
from eerc_sdk.core import format_units, parse_units
from eerc_sdk.crypto import EGCT, add_point, negate_point
from eerc_sdk.protocol import build_mint_inputs, build_transfer_inputs

logging.basicConfig(level=logging.INFO)

CHAIN_ID = 43113

holder = Keypair.generate()
auditor = Keypair.generate()
receiver = Keypair.generate()

# Mint
minted = parse_units("12.50")
mint = build_mint_inputs(minted, holder.public_key, auditor.public_key, CHAIN_ID)
egct = EGCT(c1=tuple(mint.prover_input["ReceiverVTTC1"]), c2=tuple(mint.prover_input["ReceiverVTTC2"]))

# Transfer out; the contract subtracts the sender's value ciphertext homomorphically
sent = parse_units("2.50")
transfer = build_transfer_inputs(holder, minted, egct, receiver.public_key, sent, auditor.public_key)
vtt = EGCT(
    c1=tuple(transfer.prover_input["SenderVTTC1"]),
    c2=tuple(transfer.prover_input["SenderVTTC2"]),
)
egct = EGCT(c1=add_point(egct.c1, negate_point(vtt.c1)), c2=add_point(egct.c2, negate_point(vtt.c2)))

# Shape of the contract's balanceOf return value
raw = (
    {"c1": {"x": egct.c1[0], "y": egct.c1[1]}, "c2": {"x": egct.c2[0], "y": egct.c2[1]}},
    0,
    [],
    transfer.balance_pct.to_scalars(),
    2,
)
record = EncryptedBalance.from_contract(raw)

config = ProtocolConfig.from_env()
report = BalanceReconciler(config).reconcile(holder, record)

print(f"Spendable balance: {format_units(report.balance, config.decimals)}")
print(f"Source:            {report.source.value}")
print(f"EGCT value:        {report.egct_value}")
print(f"PCT total:         {report.pct_total}")
print(f"Consistent:        {report.consistent}")
