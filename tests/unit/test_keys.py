"""
Unit tests for eerc_sdk.core.keys — signature-based key derivation.
"""

import hashlib

import pytest

from eerc_sdk.core.keys import (
    SIGNATURE_MIN_BYTES,
    InvalidSignature,
    Keypair,
    SigningRejected,
    decode_signature,
    derive_keypair,
    format_private_key,
    keccak256,
    registration_message,
    signature_to_private_key,
)
from eerc_sdk.core.wallet import LocalSigner
from eerc_sdk.crypto.babyjub import SUB_ORDER, in_subgroup, mul_base

SIGNER_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SAMPLE_SIGNATURE = "0x" + "ab" * 64 + "1b"


class TestMessage:
    """Registration message template."""

    def test_template(self):
        """Address is lower-cased into the fixed template."""
        msg = registration_message("0xAbCdEf0000000000000000000000000000000001")
        assert msg == "eERC\nRegistering user with\n Address:0xabcdef0000000000000000000000000000000001"

    def test_case_insensitive(self):
        """Checksummed and lower-case addresses sign the same message."""
        addr = "0x00000000000000000000000000000000000000Ff"
        assert registration_message(addr) == registration_message(addr.lower())


class TestSignatureDecoding:
    """Signature length and hex validation."""

    def test_accepts_prefixed(self):
        """A 0x-prefixed 65-byte signature decodes."""
        assert len(decode_signature(SAMPLE_SIGNATURE)) == SIGNATURE_MIN_BYTES

    def test_accepts_unprefixed(self):
        """The 0x prefix is optional."""
        assert decode_signature(SAMPLE_SIGNATURE[2:]) == decode_signature(SAMPLE_SIGNATURE)

    def test_rejects_short(self):
        """Signatures shorter than r || s || v are rejected."""
        with pytest.raises(InvalidSignature, match="too short"):
            decode_signature("0x" + "ab" * 64)

    def test_rejects_non_hex(self):
        """Non-hex characters are rejected."""
        with pytest.raises(InvalidSignature, match="hex"):
            decode_signature("0x" + "zz" * 65)

    def test_rejects_non_string(self):
        """Only hex strings are accepted."""
        with pytest.raises(InvalidSignature):
            decode_signature(b"\x00" * 65)


class TestDerivation:
    """Private key derivation steps."""

    def test_keccak_empty_vector(self):
        """Keccak-256, not NIST SHA3-256."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_signature_to_private_key_deterministic(self):
        """The same signature always yields the same raw key."""
        assert signature_to_private_key(SAMPLE_SIGNATURE) == signature_to_private_key(SAMPLE_SIGNATURE)

    def test_signature_to_private_key_range(self):
        """Raw keys lie in [1, l)."""
        sk = signature_to_private_key(SAMPLE_SIGNATURE)
        assert 0 < sk < SUB_ORDER

    def test_different_signatures_different_keys(self):
        """Distinct signatures give distinct raw keys."""
        other = "0x" + "cd" * 64 + "1c"
        assert signature_to_private_key(SAMPLE_SIGNATURE) != signature_to_private_key(other)

    def test_format_private_key_range(self):
        """Curve keys lie in [1, l)."""
        for raw in (1, 2, 12345, SUB_ORDER - 1):
            assert 0 < format_private_key(raw) < SUB_ORDER

    def test_format_private_key_deterministic(self):
        """Formatting is a pure function of the raw key."""
        assert format_private_key(987654321) == format_private_key(987654321)

    def test_format_changes_key(self):
        """The curve key is not the raw key."""
        raw = signature_to_private_key(SAMPLE_SIGNATURE)
        assert format_private_key(raw) != raw

    def test_format_private_key_uses_blake2b(self):
        """Pins the BLAKE2b-512 formatting, which differs from maci-crypto's BLAKE-512."""
        raw = signature_to_private_key(SAMPLE_SIGNATURE)
        h = bytearray(hashlib.blake2b(raw.to_bytes(32, "big"), digest_size=64).digest()[:32])
        h[0] &= 0b11111000
        h[31] &= 0b01111111
        h[31] |= 0b01000000
        expected = (int.from_bytes(h, "little") >> 3) % SUB_ORDER
        assert format_private_key(raw) == expected


class TestKeypair:
    """Keypair invariants and helpers."""

    def test_from_signature_invariant(self):
        """PK == curve_key·B8 and lies in the prime-order subgroup."""
        kp = Keypair.from_signature(SAMPLE_SIGNATURE)
        assert kp.public_key == mul_base(kp.curve_private_key)
        assert in_subgroup(kp.public_key)
        assert kp.verify()

    def test_from_private_key_matches(self):
        """Re-deriving from the raw key reproduces the keypair."""
        kp = Keypair.from_signature(SAMPLE_SIGNATURE)
        assert Keypair.from_private_key(kp.raw_private_key) == kp

    def test_from_private_key_rejects_zero(self):
        """Zero is not a valid raw key."""
        with pytest.raises(ValueError, match="positive"):
            Keypair.from_private_key(0)

    def test_generate_is_valid(self):
        """Random keypairs satisfy the public key invariant."""
        kp = Keypair.generate()
        assert kp.verify()

    def test_tampered_keypair_fails_verify(self):
        """A mismatched public key fails verify()."""
        kp = Keypair.generate()
        bad = Keypair(kp.raw_private_key, kp.curve_private_key, mul_base(5))
        assert not bad.verify()

    def test_repr_hides_private_key(self):
        """repr() never prints private scalars."""
        kp = Keypair.generate()
        assert str(kp.curve_private_key) not in repr(kp)
        assert str(kp.raw_private_key) not in repr(kp)

    def test_address_hash_stable(self):
        """The address hash depends only on the public key."""
        kp = Keypair.from_signature(SAMPLE_SIGNATURE)
        assert kp.address_hash == Keypair.from_signature(SAMPLE_SIGNATURE).address_hash

    def test_registration_hash_binds_chain(self):
        """Registration hashes differ across chain ids."""
        kp = Keypair.generate()
        addr = "0x0000000000000000000000000000000000000001"
        assert kp.registration_hash(43113, addr) != kp.registration_hash(43114, addr)


class TestDeriveKeypair:
    """End-to-end derivation through a signer callable."""

    def test_deterministic_with_local_signer(self):
        """A deterministic signer always derives the same keypair."""
        signer = LocalSigner(SIGNER_KEY)
        kp1 = derive_keypair(signer.address, signer)
        kp2 = derive_keypair(signer.address, signer)
        assert kp1 == kp2
        assert kp1.verify()

    def test_signs_registration_message(self):
        """The signer receives the registration message for the lower-cased address."""
        seen = []

        def sign(message):
            seen.append(message)
            return SAMPLE_SIGNATURE

        kp = derive_keypair("0xABC0000000000000000000000000000000000000", sign)
        assert seen == [registration_message("0xabc0000000000000000000000000000000000000")]
        assert kp == Keypair.from_signature(SAMPLE_SIGNATURE)

    def test_signer_exception_wrapped(self):
        """Signer failures surface as SigningRejected with the cause chained."""
        def refuse(message):
            raise RuntimeError("user rejected the request")

        with pytest.raises(SigningRejected, match="user rejected") as exc_info:
            derive_keypair("0x0000000000000000000000000000000000000001", refuse)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_short_signature_from_signer(self):
        """A malformed signature from the signer raises InvalidSignature."""
        with pytest.raises(InvalidSignature):
            derive_keypair("0x0000000000000000000000000000000000000001", lambda m: "0x1234")

    def test_different_wallets_different_keys(self):
        """Different wallets derive different public keys."""
        a = LocalSigner(SIGNER_KEY)
        b = LocalSigner.generate()
        assert derive_keypair(a.address, a).public_key != derive_keypair(b.address, b).public_key
