#!/usr/bin/env python3
"""
Example 01: Derive ledger keys from a wallet signature.

Signs the registration message with a local secp256k1 key, derives the
BabyJubJub keypair and caches it in a JSON key store. Running it twice
prints the same public key; the second run is served from the cache.

Usage:
    python examples/01_derive_keys.py
    python examples/01_derive_keys.py 0x<private key hex> [keys.json]
"""

import logging
import sys

from eerc_sdk import LocalSigner, derive_keypair
from eerc_sdk.core import KeyStore
from eerc_sdk.protocol import build_registration_inputs

logging.basicConfig(level=logging.INFO)

DEFAULT_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
CHAIN_ID = 43113  # Avalanche Fuji

signer = LocalSigner(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_KEY)
store = KeyStore(sys.argv[2] if len(sys.argv) > 2 else "user-keys.json")

keypair = store.load(signer.address)
if keypair is None:
    print("No cached keys, asking the wallet to sign...")
    keypair = derive_keypair(signer.address, signer)
    store.save(signer.address, keypair)
else:
    print("Loaded keys from cache")

print(f"Address:     {signer.address}")
print(f"Public key:  ({keypair.public_key[0]},")
print(f"              {keypair.public_key[1]})")
print(f"Valid:       {keypair.verify()}")

registration = build_registration_inputs(keypair, signer.address, CHAIN_ID)
print(f"Registration hash: {registration.prover_input['RegistrationHash']}")
