"""
Unit tests for eerc_sdk.crypto.elgamal — ElGamal over BabyJubJub.
"""

import pytest

from eerc_sdk.core.keys import Keypair
from eerc_sdk.crypto.babyjub import IDENTITY, SUB_ORDER, mul_base
from eerc_sdk.crypto.elgamal import (
    EGCT,
    decrypt_point,
    encrypt_message,
    encrypt_point,
)


@pytest.fixture(scope="module")
def keypair():
    return Keypair.generate()


class TestEncryptDecrypt:
    """encrypt_message / decrypt_point round trips."""

    @pytest.mark.parametrize("message", [0, 1, 1000, 100_000])
    def test_roundtrip_recovers_point(self, keypair, message):
        """decrypt_point returns m·B8 for the holder's key."""
        enc = encrypt_message(keypair.public_key, message)
        recovered = decrypt_point(keypair.curve_private_key, enc.cipher.c1, enc.cipher.c2)
        assert recovered == mul_base(message)

    def test_zero_message_decrypts_to_identity(self, keypair):
        """A zero balance decrypts to the identity."""
        enc = encrypt_message(keypair.public_key, 0)
        assert decrypt_point(keypair.curve_private_key, enc.cipher.c1, enc.cipher.c2) == IDENTITY

    def test_c1_is_randomness_times_base(self, keypair):
        """c1 == r·B8 for the randomness used."""
        enc = encrypt_message(keypair.public_key, 5, randomness=12345)
        assert enc.randomness == 12345
        assert enc.cipher.c1 == mul_base(12345)

    def test_fresh_randomness_each_call(self, keypair):
        """Two encryptions of the same value differ."""
        a = encrypt_message(keypair.public_key, 5)
        b = encrypt_message(keypair.public_key, 5)
        assert a.cipher != b.cipher

    def test_wrong_key_does_not_recover(self, keypair):
        """Another key decrypts to a different point."""
        other = Keypair.generate()
        enc = encrypt_message(keypair.public_key, 77)
        assert decrypt_point(other.curve_private_key, enc.cipher.c1, enc.cipher.c2) != mul_base(77)

    def test_encrypt_point_directly(self, keypair):
        """encrypt_point accepts an arbitrary message point."""
        m = mul_base(31)
        cipher = encrypt_point(keypair.public_key, m, randomness=99)
        assert decrypt_point(keypair.curve_private_key, cipher.c1, cipher.c2) == m

    def test_negative_message_rejected(self, keypair):
        """Negative amounts are not encodable."""
        with pytest.raises(ValueError, match="non-negative"):
            encrypt_message(keypair.public_key, -1)


class TestRandomness:
    """Out-of-range randomness is re-drawn, not reduced."""

    @pytest.mark.parametrize("bad", [0, SUB_ORDER, SUB_ORDER + 7])
    def test_out_of_range_regenerated(self, keypair, bad):
        """Randomness outside [1, l) is replaced and reported."""
        enc = encrypt_message(keypair.public_key, 10, randomness=bad)
        assert 0 < enc.randomness < SUB_ORDER
        assert enc.cipher.c1 == mul_base(enc.randomness)

    def test_regenerated_still_decrypts(self, keypair):
        """A ciphertext with re-drawn randomness still decrypts."""
        enc = encrypt_message(keypair.public_key, 10, randomness=0)
        assert decrypt_point(keypair.curve_private_key, enc.cipher.c1, enc.cipher.c2) == mul_base(10)


class TestEGCT:
    """Ciphertext container and homomorphic addition."""

    def test_empty_sentinel(self):
        """The empty EGCT is four zero coordinates."""
        assert EGCT.empty().is_empty
        assert EGCT.empty().to_list() == [0, 0, 0, 0]

    def test_list_roundtrip(self, keypair):
        """to_list / from_list preserve the ciphertext."""
        cipher = encrypt_message(keypair.public_key, 3).cipher
        assert EGCT.from_list(cipher.to_list()) == cipher

    def test_from_list_wrong_length(self):
        """Wire lists must hold exactly 4 coordinates."""
        with pytest.raises(ValueError, match="4 coordinates"):
            EGCT.from_list([1, 2, 3])

    def test_homomorphic_addition(self, keypair):
        """Enc(600) + Enc(400) decrypts to 1000·B8."""
        a = encrypt_message(keypair.public_key, 600).cipher
        b = encrypt_message(keypair.public_key, 400).cipher
        total = a + b
        assert decrypt_point(keypair.curve_private_key, total.c1, total.c2) == mul_base(1000)

    def test_adding_empty_is_noop(self, keypair):
        """The empty EGCT is the additive identity."""
        a = encrypt_message(keypair.public_key, 600).cipher
        assert a + EGCT.empty() == a
        assert EGCT.empty() + a == a
