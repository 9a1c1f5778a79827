"""
Ledger data models for encrypted balances.

All amounts are integer accounting units (see core.config for decimals).
The shapes mirror the ledger contract's `balanceOf(user, tokenId)` return:

    (eGCT{c1{x,y}, c2{x,y}}, nonce, amountPCTs[{pct[7], index}], balancePCT[7], transactionIndex)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eerc_sdk.crypto.babyjub import Point
from eerc_sdk.crypto.elgamal import EGCT
from eerc_sdk.crypto.pct import PCT, PCT_LENGTH, is_sentinel


def _parse_point(raw: Any) -> Point:
    if isinstance(raw, Mapping):
        return (int(raw["x"]), int(raw["y"]))
    x, y = raw
    return (int(x), int(y))


def _parse_egct(raw: Any) -> EGCT:
    if isinstance(raw, EGCT):
        return raw
    if isinstance(raw, Mapping):
        return EGCT(c1=_parse_point(raw["c1"]), c2=_parse_point(raw["c2"]))
    if len(raw) == 4:
        return EGCT.from_list(raw)
    c1, c2 = raw
    return EGCT(c1=_parse_point(c1), c2=_parse_point(c2))


class AmountPCT(BaseModel):
    """An amount PCT as stored in a holder's balance: the tuple and its transaction index."""
    pct: list[int]
    index: int = 0

    @field_validator("pct")
    @classmethod
    def _seven_scalars(cls, v: list[int]) -> list[int]:
        if len(v) != PCT_LENGTH:
            raise ValueError(f"PCT must have {PCT_LENGTH} scalars, got {len(v)}")
        return v

    @property
    def is_sentinel(self) -> bool:
        return is_sentinel(self.pct)

    def to_pct(self) -> PCT:
        return PCT.from_scalars(self.pct, index=self.index)


class EncryptedBalance(BaseModel):
    """A holder's encrypted balance for one asset, as read from the ledger."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    egct: EGCT = Field(default_factory=EGCT.empty)
    nonce: int = 0
    amount_pcts: list[AmountPCT] = Field(default_factory=list)
    balance_pct: list[int] = Field(default_factory=lambda: [0] * PCT_LENGTH)
    transaction_index: int = 0

    @field_validator("egct", mode="before")
    @classmethod
    def _coerce_egct(cls, v: Any) -> EGCT:
        return _parse_egct(v)

    @field_validator("balance_pct")
    @classmethod
    def _seven_scalars(cls, v: list[int]) -> list[int]:
        if len(v) != PCT_LENGTH:
            raise ValueError(f"balance PCT must have {PCT_LENGTH} scalars, got {len(v)}")
        return v

    @property
    def has_balance_pct(self) -> bool:
        return not is_sentinel(self.balance_pct)

    @property
    def live_amount_pcts(self) -> list[AmountPCT]:
        """Amount PCTs that are not the all-zero sentinel."""
        return [a for a in self.amount_pcts if not a.is_sentinel]

    @property
    def is_empty(self) -> bool:
        """Nothing has ever been written for this holder."""
        return self.egct.is_empty and not self.has_balance_pct and not self.live_amount_pcts

    @classmethod
    def from_contract(cls, raw: Sequence[Any]) -> EncryptedBalance:
        """
        Parse the raw `balanceOf` tuple returned by a contract call.

        Accepts dicts ({"x", "y"}, {"c1", "c2"}, {"pct", "index"}) or the
        positional tuples web3 libraries return for structs.
        """
        egct_raw, nonce, amount_raw, balance_raw, tx_index = raw
        amount_pcts = []
        for item in amount_raw:
            if isinstance(item, Mapping):
                amount_pcts.append(AmountPCT(pct=[int(s) for s in item["pct"]], index=int(item.get("index", 0))))
            else:
                pct, index = item
                amount_pcts.append(AmountPCT(pct=[int(s) for s in pct], index=int(index)))
        return cls(
            egct=_parse_egct(egct_raw),
            nonce=int(nonce),
            amount_pcts=amount_pcts,
            balance_pct=[int(s) for s in balance_raw],
            transaction_index=int(tx_index),
        )
