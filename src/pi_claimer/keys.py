"""Deterministic keypair derivation from a BIP-39 recovery phrase.

Pi wallets derive their single account key with SLIP-10 ed25519 at
``m/44'/314159'/0'`` (314159 is Pi's registered coin type). The 32-byte
private key at that path is the raw ed25519 seed of the Stellar keypair.
"""

from __future__ import annotations

import logging

from bip_utils import Bip32Slip10Ed25519, Bip39MnemonicValidator, Bip39SeedGenerator
from stellar_sdk import Keypair

from pi_claimer.errors import InvalidPhrase

log = logging.getLogger(__name__)

PI_COIN_TYPE = 314159
DERIVATION_PATH = f"m/44'/{PI_COIN_TYPE}'/0'"


def normalize_phrase(phrase: str) -> str:
    """Collapse whitespace and lower-case the words."""
    return " ".join(phrase.lower().split())


def derive(phrase: str, path: str = DERIVATION_PATH, label: str = "phrase") -> Keypair:
    """Derive the account keypair for ``phrase``.

    ``label`` names the phrase in error messages; the words themselves are
    never included. Raises InvalidPhrase if the BIP-39 checksum fails.
    """
    words = normalize_phrase(phrase)
    if not words or not Bip39MnemonicValidator().IsValid(words):
        raise InvalidPhrase(f"{label} is not a valid BIP-39 mnemonic")

    seed = Bip39SeedGenerator(words).Generate()
    node = Bip32Slip10Ed25519.FromSeed(seed).DerivePath(path)
    keypair = Keypair.from_raw_ed25519_seed(node.PrivateKey().Raw().ToBytes())
    log.debug("Derived %s address %s... at %s", label, keypair.public_key[:8], path)
    return keypair
