"""
KeyStore: optional on-disk cache of derived ledger keys.

Deriving keys costs a wallet signature prompt, so scripts cache the result in
a JSON file keyed by address. The cache is never authoritative: every loaded
entry is re-derived from its raw key and rejected if the public key no longer
matches, in which case callers fall back to derive_keypair().

SECURITY: the file holds private keys in clear. Keep it out of version
control and readable only by the owner.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from eerc_sdk.core.keys import Keypair

logger = logging.getLogger("eerc_sdk.keystore")


class StoredKeys(BaseModel):
    """One cached keypair, with integers stored as decimal strings."""
    user_address: str
    signature: str | None = None
    private_key: str
    formatted_private_key: str
    public_key: list[str]
    last_updated: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    keys_match: bool = True

    @classmethod
    def from_keypair(cls, address: str, keypair: Keypair, signature: str | None = None) -> StoredKeys:
        return cls(
            user_address=address.lower(),
            signature=signature,
            private_key=str(keypair.raw_private_key),
            formatted_private_key=str(keypair.curve_private_key),
            public_key=[str(keypair.public_key[0]), str(keypair.public_key[1])],
        )

    def to_keypair(self) -> Keypair:
        return Keypair(
            raw_private_key=int(self.private_key),
            curve_private_key=int(self.formatted_private_key),
            public_key=(int(self.public_key[0]), int(self.public_key[1])),
        )


class KeyStore:
    """
    JSON file mapping lower-cased addresses to StoredKeys.

    Usage:
        store = KeyStore("deployments/user-keys.json")
        keypair = store.load(address) or derive_keypair(address, signer)
        store.save(address, keypair)
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable key cache {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, address: str) -> Keypair | None:
        """
        Return the cached keypair for address, or None if absent or stale.

        An entry is stale when its stored fields do not re-derive to the same
        public key (edited file, changed derivation).
        """
        entry = self._read().get(address.lower())
        if entry is None:
            return None
        try:
            stored = StoredKeys.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Cached keys for {address} are malformed: {e}")
            return None
        if not stored.keys_match:
            return None

        try:
            keypair = stored.to_keypair()
            rederived = Keypair.from_private_key(keypair.raw_private_key)
        except ValueError as e:
            logger.warning(f"Cached keys for {address} are malformed: {e}")
            return None
        if rederived != keypair:
            logger.warning(f"Cached keys for {address} do not re-derive; ignoring cache entry")
            return None
        return keypair

    def save(self, address: str, keypair: Keypair, signature: str | None = None) -> None:
        """Insert or replace the entry for address."""
        data = self._read()
        data[address.lower()] = StoredKeys.from_keypair(address, keypair, signature).model_dump()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def forget(self, address: str) -> bool:
        """Remove the entry for address; returns True if one existed."""
        data = self._read()
        if data.pop(address.lower(), None) is None:
            return False
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return True
