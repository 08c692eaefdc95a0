"""
Seed Phrase - BIP-39 phrase generation, validation and seed stretching.

Thin layer over the reference `mnemonic` implementation with the English
word list.
"""

from mnemonic import Mnemonic

from .errors import InvalidEntropySize


# Entropy sizes allowed by BIP-39 (12, 15, 18, 21, 24 words)
VALID_ENTROPY_BITS = (128, 160, 192, 224, 256)

SEED_SIZE = 64

_mnemo = Mnemonic("english")


def generate(entropy_bits: int = 256) -> str:
    """
    Generate a random mnemonic phrase.

    Args:
        entropy_bits: 128, 160, 192, 224 or 256

    Raises:
        InvalidEntropySize: If entropy_bits is not a BIP-39 size
    """
    if isinstance(entropy_bits, bool) or entropy_bits not in VALID_ENTROPY_BITS:
        raise InvalidEntropySize(
            f"Entropy must be one of {VALID_ENTROPY_BITS} bits, got {entropy_bits!r}"
        )
    return _mnemo.generate(strength=entropy_bits)


def normalize(mnemonic: str) -> str:
    """Collapse runs of whitespace to single spaces."""
    return " ".join(mnemonic.split())


def validate(mnemonic: str) -> bool:
    """Check word list membership, word count and checksum."""
    if not isinstance(mnemonic, str):
        return False
    try:
        return _mnemo.check(normalize(mnemonic))
    except (ValueError, LookupError):
        return False


def to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """
    Stretch a mnemonic into a 64-byte seed.

    Intentionally permissive: the checksum is not verified here. Callers
    that care must call validate() first.
    """
    return Mnemonic.to_seed(mnemonic, passphrase=passphrase)
