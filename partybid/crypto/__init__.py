"""
Cryptographic primitives for PartyBid.

This module provides:
- Keccak-256 hashing (Ethereum-style)
- secp256k1 key generation
- Address derivation and EIP-55 checksumming

Design Notes:
-------------
Every identity the settlement engine deals with (contributors, the party
itself, the fee recipient, bidders on the external market) is an
Ethereum-style account address. Addresses are compared in their EIP-55
checksummed form so that the same account written in different cases
maps to a single ledger entry.
"""

import secrets
from dataclasses import dataclass

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1

from partybid.errors import InvalidAddress


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

ZERO_ADDRESS = "0x" + "00" * 20


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, EIP-55 checksums.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes  # 32 bytes
    public_key: bytes   # 64 bytes (uncompressed, no 0x04 prefix)

    @property
    def address(self) -> str:
        """Checksummed address derived from the public key."""
        return to_checksum_address(address_from_public_key(self.public_key))


def generate_keypair() -> KeyPair:
    """
    Generate a new random keypair.

    Uses cryptographically secure random number generator.
    """
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


# =============================================================================
# Addresses
# =============================================================================


def address_from_public_key(public_key: bytes) -> bytes:
    """
    Derive address from public key (Ethereum-style).

    address = keccak256(public_key)[-20:]
    """
    if len(public_key) != 64:
        raise ValueError("Public key must be 64 bytes")
    return keccak256(public_key)[-20:]


def is_valid_address(address: str) -> bool:
    """Check that a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str) or not address.startswith("0x") or len(address) != 42:
        return False
    try:
        bytes.fromhex(address[2:])
    except ValueError:
        return False
    return True


def to_checksum_address(address) -> str:
    """
    Return the EIP-55 checksummed form of an address.

    Accepts 20 raw bytes or a 0x-prefixed hex string in any case.
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != 20:
            raise InvalidAddress(f"Address must be 20 bytes, got {len(address)}")
        hex_addr = bytes(address).hex()
    else:
        if not is_valid_address(address):
            raise InvalidAddress(f"Invalid address: {address!r}")
        hex_addr = address[2:].lower()

    digest = keccak256(hex_addr.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(hex_addr)
    )


def random_address() -> str:
    """Generate the address of a fresh random keypair."""
    return generate_keypair().address


__all__ = [
    "SECP256K1_ORDER",
    "ZERO_ADDRESS",
    "keccak256",
    "KeyPair",
    "generate_keypair",
    "private_key_to_public_key",
    "address_from_public_key",
    "is_valid_address",
    "to_checksum_address",
    "random_address",
]
