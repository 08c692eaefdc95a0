"""
Wallet Keys - Ed25519 key pairs and hierarchical account derivation.

Ed25519 has no public (non-hardened) derivation, so every child is derived
from the master's private seed:

    child_seed = HMAC-SHA512(
        key=master_private_seed,
        msg=b"smwallet/ed25519-child/v1" || be32(44') || be32(540') || be32(index'),
    )[:32]

The master is the key whose private seed is the first 32 bytes of the BIP-39
seed. This construction is version 1 of the wallet format; changing it
changes every derived account.
"""

import hashlib
import hmac
import struct
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .config import DEFAULT_CONFIG
from .errors import AccountLimitExceeded, InvalidSeedLength
from .hexcodec import decode_hex, encode_hex


# ============================================
# Constants
# ============================================

ED25519_SEED_SIZE = 32
ED25519_PUBLIC_KEY_SIZE = 32
ED25519_SECRET_KEY_SIZE = 64  # seed || public key

HARDENED_OFFSET = 0x80000000

BIP44_PURPOSE = 44
SMESH_COIN_TYPE = 540

CHILD_DERIVATION_DOMAIN = b"smwallet/ed25519-child/v1"


def hardened(index: int) -> int:
    return index | HARDENED_OFFSET


def format_path(components: tuple[int, ...]) -> str:
    """Format path components as e.g. "m/44'/540'/0'"."""
    parts = ["m"]
    for c in components:
        if c & HARDENED_OFFSET:
            parts.append(f"{c & ~HARDENED_OFFSET}'")
        else:
            parts.append(str(c))
    return "/".join(parts)


MASTER_PATH = (hardened(BIP44_PURPOSE), hardened(SMESH_COIN_TYPE))


def account_path(index: int) -> tuple[int, ...]:
    """HD path of the account at the given index."""
    return MASTER_PATH + (hardened(index),)


# ============================================
# Key Pair
# ============================================

@dataclass(frozen=True)
class EDKeyPair:
    """An Ed25519 signing key pair at a position in the wallet hierarchy."""
    index: int            # Account index, -1 for the master
    path: str             # HD path (e.g., "m/44'/540'/0'")
    display_name: str     # User-friendly name
    public_key: bytes     # 32 bytes
    secret_key: bytes     # 64 bytes: private seed || public key

    def __repr__(self) -> str:
        # Never show the secret key
        return (
            f"EDKeyPair(index={self.index}, path={self.path!r}, "
            f"public_key={self.public_key.hex()!r})"
        )

    @classmethod
    def from_private_seed(cls, private_seed: bytes, index: int, path: str,
                          display_name: str = "") -> "EDKeyPair":
        """Build a key pair from a 32-byte Ed25519 private seed."""
        if len(private_seed) != ED25519_SEED_SIZE:
            raise InvalidSeedLength(
                f"Ed25519 seed must be {ED25519_SEED_SIZE} bytes, got {len(private_seed)}"
            )
        private_key = Ed25519PrivateKey.from_private_bytes(bytes(private_seed))
        public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return cls(
            index=index,
            path=path,
            display_name=display_name,
            public_key=public_key,
            secret_key=bytes(private_seed) + public_key,
        )

    @property
    def private_seed(self) -> bytes:
        """The 32-byte Ed25519 private seed."""
        return self.secret_key[:ED25519_SEED_SIZE]

    @property
    def public_key_hex(self) -> str:
        return encode_hex(self.public_key)

    def sign(self, message: str | bytes) -> bytes:
        """Sign a message. Returns a 64-byte Ed25519 signature."""
        if isinstance(message, str):
            message = message.encode('utf-8')
        private_key = Ed25519PrivateKey.from_private_bytes(self.private_seed)
        return private_key.sign(message)

    def verify(self, signature: bytes, message: str | bytes) -> bool:
        """Check a signature against this key pair's public key."""
        if isinstance(message, str):
            message = message.encode('utf-8')
        try:
            Ed25519PublicKey.from_public_bytes(self.public_key).verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def to_dict(self) -> dict:
        """Plaintext representation (only ever stored encrypted)."""
        return {
            "displayName": self.display_name,
            "path": self.path,
            "publicKey": encode_hex(self.public_key),
            "secretKey": encode_hex(self.secret_key),
        }

    @classmethod
    def from_dict(cls, data: dict, index: int) -> "EDKeyPair":
        """
        Rebuild a key pair from its plaintext representation.

        Raises:
            ValueError: If the keys have the wrong size or do not match
            KeyError: If a field is missing
        """
        secret_key = decode_hex(data["secretKey"])
        public_key = decode_hex(data["publicKey"])
        if len(secret_key) != ED25519_SECRET_KEY_SIZE:
            raise ValueError(f"Secret key must be {ED25519_SECRET_KEY_SIZE} bytes")
        pair = cls.from_private_seed(
            secret_key[:ED25519_SEED_SIZE],
            index=index,
            path=data["path"],
            display_name=data.get("displayName", ""),
        )
        if pair.public_key != public_key or pair.secret_key != secret_key:
            raise ValueError(f"Public key does not match secret key for account {index}")
        return pair


# ============================================
# Derivation
# ============================================

def master_from_seed(seed_prefix: bytes) -> EDKeyPair:
    """
    Derive the master key pair from the first 32 bytes of a seed.

    The bytes are used directly as the Ed25519 private seed.

    Raises:
        InvalidSeedLength: If seed_prefix is not exactly 32 bytes
    """
    if len(seed_prefix) != ED25519_SEED_SIZE:
        raise InvalidSeedLength(
            f"Master seed must be {ED25519_SEED_SIZE} bytes, got {len(seed_prefix)}"
        )
    return EDKeyPair.from_private_seed(
        seed_prefix,
        index=-1,
        path=format_path(MASTER_PATH),
        display_name="Master Key",
    )


def derive_child(master: EDKeyPair, index: int,
                 max_accounts: int = DEFAULT_CONFIG.max_accounts_per_wallet) -> EDKeyPair:
    """
    Derive the account key pair at the given index.

    Pure function of (master private seed, index).

    Raises:
        AccountLimitExceeded: If index is outside [0, max_accounts)
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < max_accounts:
        raise AccountLimitExceeded(
            f"Account index must be in [0, {max_accounts}), got {index!r}"
        )

    path = account_path(index)
    message = CHILD_DERIVATION_DOMAIN + struct.pack(f">{len(path)}I", *path)
    digest = hmac.new(master.private_seed, message, hashlib.sha512).digest()

    return EDKeyPair.from_private_seed(
        digest[:ED25519_SEED_SIZE],
        index=index,
        path=format_path(path),
        display_name=f"Child Key {index}",
    )


def derive_accounts(seed: bytes, n: int,
                    max_accounts: int = DEFAULT_CONFIG.max_accounts_per_wallet) -> tuple[EDKeyPair, ...]:
    """
    Derive n accounts with sequential indices 0..n-1.

    Args:
        seed: BIP-39 seed (only the first 32 bytes are used)
        n: Number of accounts
        max_accounts: Per-wallet account limit

    Raises:
        AccountLimitExceeded: If n is outside [0, max_accounts]
        InvalidSeedLength: If seed is shorter than 32 bytes
    """
    if isinstance(n, bool) or not isinstance(n, int) or not 0 <= n <= max_accounts:
        raise AccountLimitExceeded(
            f"Number of accounts must be in [0, {max_accounts}], got {n!r}"
        )
    master = master_from_seed(seed[:ED25519_SEED_SIZE])
    return tuple(derive_child(master, i, max_accounts) for i in range(n))
