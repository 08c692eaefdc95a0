"""
Hex Codec - Explicit encode/decode pair for binary container fields.

Binary values (ciphertext, IV, salt, keys) are written as lowercase hex.
Decoding accepts either case.
"""

import re

from .errors import MalformedHex

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def encode_hex(data: bytes) -> str:
    """Encode bytes as a lowercase hex string."""
    return bytes(data).hex()


def decode_hex(text: str) -> bytes:
    """
    Decode a hex string (upper, lower or mixed case).

    Unlike bytes.fromhex, whitespace is rejected.

    Raises:
        MalformedHex: If text is not a string, has odd length or contains
            a non-hex character
    """
    if not isinstance(text, str):
        raise MalformedHex(f"Expected hex string, got {type(text).__name__}")
    if len(text) % 2:
        raise MalformedHex(f"Odd-length hex string ({len(text)} characters)")
    if not _HEX_RE.fullmatch(text):
        raise MalformedHex("Non-hexadecimal character in hex string")
    return bytes.fromhex(text)
