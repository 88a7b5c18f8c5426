"""Checks for Solana addresses and transaction signatures."""

import re

import base58

from solana_team_supply.utils.error_handling import ValidationError

BASE58_PUBKEY = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
BASE58_SIGNATURE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{43,128}$")

PUBKEY_LENGTH = 32


class InvalidPublicKeyError(Exception):
    """An address handed to the RPC client is not a public key."""

    def __init__(self, pubkey: str):
        super().__init__(f"Invalid public key: {pubkey}")
        self.pubkey = pubkey


def validate_public_key(pubkey: str) -> bool:
    """True when ``pubkey`` is base58 text that decodes to exactly 32 bytes."""
    if not isinstance(pubkey, str) or not BASE58_PUBKEY.match(pubkey):
        return False
    try:
        return len(base58.b58decode(pubkey)) == PUBKEY_LENGTH
    except ValueError:
        return False


def validate_solana_address(address: str, field_name: str = "address") -> None:
    """Raise ValidationError, keyed by ``field_name``, unless ``address`` is a public key."""
    if not validate_public_key(address):
        raise ValidationError(f"Invalid Solana {field_name}: {address}", {field_name: address})


def validate_transaction_signature(signature: str) -> bool:
    # Signatures are 64 bytes, so their base58 form is longer than a key's
    return isinstance(signature, str) and bool(BASE58_SIGNATURE.match(signature))
