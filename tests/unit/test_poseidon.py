"""
Unit tests for eerc_sdk.crypto.poseidon — permutation, hash and duplex encryption.
"""

import pytest

from eerc_sdk.crypto.babyjub import FIELD_P, mul_base
from eerc_sdk.crypto.poseidon import (
    PARTIAL_ROUNDS,
    TWO_128,
    poseidon_decrypt,
    poseidon_encrypt,
    poseidon_hash,
    poseidon_permutation,
)

KEY = mul_base(123456789)
OTHER_KEY = mul_base(987654321)


class TestPermutation:
    """Poseidon permutation over BN254."""

    def test_preserves_width(self):
        """Output width equals input width."""
        assert len(poseidon_permutation([0, 1, 2])) == 3
        assert len(poseidon_permutation([0, 1, 2, 3])) == 4

    def test_outputs_reduced(self):
        """Every output lane is a reduced field element."""
        out = poseidon_permutation([FIELD_P - 1, FIELD_P - 2, 7])
        assert all(0 <= v < FIELD_P for v in out)

    def test_not_identity(self):
        """The permutation changes its input."""
        state = [0, 1, 2]
        assert poseidon_permutation(state) != state

    def test_rejects_unsupported_width(self):
        """Width 1 has no parameter set."""
        with pytest.raises(ValueError):
            poseidon_permutation([1])


class TestHash:
    """circomlib-compatible poseidon_hash."""

    def test_deterministic(self):
        """Same inputs, same hash."""
        assert poseidon_hash([1, 2]) == poseidon_hash([1, 2])

    def test_order_sensitive(self):
        """Swapping inputs changes the hash."""
        assert poseidon_hash([1, 2]) != poseidon_hash([2, 1])

    def test_arity_sensitive(self):
        """A trailing zero input is not ignored."""
        assert poseidon_hash([1]) != poseidon_hash([1, 0])

    def test_in_field(self):
        """The hash is a reduced field element."""
        assert 0 <= poseidon_hash([FIELD_P - 1, 5, 6]) < FIELD_P

    def test_rejects_empty(self):
        """At least one input is required."""
        with pytest.raises(ValueError, match="inputs"):
            poseidon_hash([])

    def test_rejects_too_many(self):
        """Arity is bounded by the available parameter sets."""
        with pytest.raises(ValueError, match="inputs"):
            poseidon_hash(list(range(len(PARTIAL_ROUNDS) + 1)))


class TestEncryption:
    """Duplex-sponge authenticated encryption."""

    @pytest.mark.parametrize("message", [[42], [1, 2], [1, 2, 3], [5, 6, 7, 8, 9]])
    def test_roundtrip(self, message):
        """Decryption recovers messages of any length."""
        nonce = 5
        ct = poseidon_encrypt(message, KEY, nonce)
        assert poseidon_decrypt(ct, KEY, nonce, len(message))[: len(message)] == message

    def test_ciphertext_length(self):
        """Ciphertexts are padded to a multiple of 3 plus the tag."""
        assert len(poseidon_encrypt([1], KEY, 1)) == 4
        assert len(poseidon_encrypt([1, 2, 3], KEY, 1)) == 4
        assert len(poseidon_encrypt([1, 2, 3, 4], KEY, 1)) == 7

    def test_nonce_changes_ciphertext(self):
        """Different nonces give different ciphertexts."""
        assert poseidon_encrypt([10], KEY, 1) != poseidon_encrypt([10], KEY, 2)

    def test_wrong_key_fails_authentication(self):
        """The tag rejects a different shared key."""
        ct = poseidon_encrypt([100], KEY, 9)
        with pytest.raises(ValueError, match="does not match"):
            poseidon_decrypt(ct, OTHER_KEY, 9, 1)

    def test_wrong_nonce_fails_authentication(self):
        """The tag rejects a different nonce."""
        ct = poseidon_encrypt([100], KEY, 9)
        with pytest.raises(ValueError):
            poseidon_decrypt(ct, KEY, 10, 1)

    def test_tampered_ciphertext_fails(self):
        """Flipping a ciphertext element breaks the tag."""
        ct = poseidon_encrypt([100], KEY, 9)
        ct[0] = (ct[0] + 1) % FIELD_P
        with pytest.raises(ValueError):
            poseidon_decrypt(ct, KEY, 9, 1)

    def test_length_mismatch(self):
        """A claimed length longer than the ciphertext raises."""
        ct = poseidon_encrypt([1, 2, 3, 4], KEY, 3)
        with pytest.raises(ValueError, match="cannot hold"):
            poseidon_decrypt(ct, KEY, 3, 2)

    def test_nonce_bound(self):
        """Nonces must be below 2^128."""
        with pytest.raises(ValueError, match="2\\^128"):
            poseidon_encrypt([1], KEY, TWO_128)

    def test_field_element_plaintext(self):
        """Negative-equivalent amounts (p - x) round trip."""
        message = [FIELD_P - 300]
        ct = poseidon_encrypt(message, KEY, 77)
        assert poseidon_decrypt(ct, KEY, 77, 1)[0] == FIELD_P - 300
