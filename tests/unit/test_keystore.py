"""
Unit tests for eerc_sdk.core.keystore — the on-disk key cache.
"""

import json

from eerc_sdk.core.keys import Keypair
from eerc_sdk.core.keystore import KeyStore, StoredKeys

ADDRESS = "0xAbC0000000000000000000000000000000000001"


class TestKeyStore:
    """Save / load / forget against a temporary file."""

    def test_missing_file(self, tmp_path):
        """No cache file means no cached keys."""
        assert KeyStore(tmp_path / "keys.json").load(ADDRESS) is None

    def test_roundtrip(self, tmp_path):
        """A saved keypair loads back unchanged."""
        store = KeyStore(tmp_path / "keys.json")
        kp = Keypair.generate()
        store.save(ADDRESS, kp, signature="0xdead")
        assert store.load(ADDRESS) == kp

    def test_address_case_insensitive(self, tmp_path):
        """Lookups ignore address case."""
        store = KeyStore(tmp_path / "keys.json")
        kp = Keypair.generate()
        store.save(ADDRESS, kp)
        assert store.load(ADDRESS.lower()) == kp

    def test_creates_parent_directory(self, tmp_path):
        """save() creates missing directories."""
        path = tmp_path / "deployments" / "user-keys.json"
        KeyStore(path).save(ADDRESS, Keypair.generate())
        assert path.exists()

    def test_integers_stored_as_strings(self, tmp_path):
        """Scalars are persisted as decimal strings."""
        path = tmp_path / "keys.json"
        kp = Keypair.generate()
        KeyStore(path).save(ADDRESS, kp)
        entry = json.loads(path.read_text())[ADDRESS.lower()]
        assert entry["public_key"] == [str(kp.public_key[0]), str(kp.public_key[1])]
        assert entry["keys_match"] is True

    def test_multiple_addresses(self, tmp_path):
        """Entries for different addresses coexist."""
        store = KeyStore(tmp_path / "keys.json")
        a, b = Keypair.generate(), Keypair.generate()
        other = "0x0000000000000000000000000000000000000002"
        store.save(ADDRESS, a)
        store.save(other, b)
        assert store.load(ADDRESS) == a
        assert store.load(other) == b

    def test_tampered_public_key_rejected(self, tmp_path):
        """An entry that does not re-derive is ignored."""
        path = tmp_path / "keys.json"
        KeyStore(path).save(ADDRESS, Keypair.generate())
        data = json.loads(path.read_text())
        data[ADDRESS.lower()]["public_key"] = ["1", "2"]
        path.write_text(json.dumps(data))
        assert KeyStore(path).load(ADDRESS) is None

    def test_keys_match_false_rejected(self, tmp_path):
        """Entries flagged keys_match=False are ignored."""
        path = tmp_path / "keys.json"
        KeyStore(path).save(ADDRESS, Keypair.generate())
        data = json.loads(path.read_text())
        data[ADDRESS.lower()]["keys_match"] = False
        path.write_text(json.dumps(data))
        assert KeyStore(path).load(ADDRESS) is None

    def test_malformed_entry(self, tmp_path):
        """Entries missing fields are ignored."""
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({ADDRESS.lower(): {"user_address": ADDRESS}}))
        assert KeyStore(path).load(ADDRESS) is None

    def test_unreadable_file(self, tmp_path):
        """Invalid JSON is treated as an empty cache."""
        path = tmp_path / "keys.json"
        path.write_text("{not json")
        assert KeyStore(path).load(ADDRESS) is None

    def test_forget(self, tmp_path):
        """forget() removes an entry and reports whether one existed."""
        store = KeyStore(tmp_path / "keys.json")
        store.save(ADDRESS, Keypair.generate())
        assert store.forget(ADDRESS) is True
        assert store.load(ADDRESS) is None
        assert store.forget(ADDRESS) is False


class TestStoredKeys:
    """pydantic model conversions."""

    def test_from_keypair(self):
        """StoredKeys converts back to the same Keypair."""
        kp = Keypair.generate()
        stored = StoredKeys.from_keypair(ADDRESS, kp)
        assert stored.user_address == ADDRESS.lower()
        assert stored.to_keypair() == kp
        assert stored.last_updated
