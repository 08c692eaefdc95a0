"""
Wallet Config - Limits and defaults injected into the wallet core.

A WalletConfig is passed to the derivation functions, the wallet aggregate,
the container codec and the manager. Nothing in the core reads global
settings at run time.
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

from utils import get_settings_path


logger = logging.getLogger(__name__)


# ============================================
# Algorithm Identifiers
# ============================================

CIPHER_AES_256_GCM = "AES-256-GCM"

KDF_PBKDF2 = "PBKDF2"
KDF_ARGON2ID = "ARGON2ID"

HASH_SHA256 = "SHA-256"
HASH_SHA512 = "SHA-512"
HASH_BLAKE2B = "BLAKE2B"  # Argon2 is built on BLAKE2b

# Version of the container layout and of the child derivation scheme.
# Bumping it breaks compatibility with previously derived accounts.
WALLET_FORMAT_VERSION = 1


def _default_min_iterations() -> dict:
    return {
        KDF_PBKDF2: 100_000,
        KDF_ARGON2ID: 2,
    }


@dataclass(frozen=True)
class WalletConfig:
    """Configuration for key derivation and wallet encryption."""
    max_accounts_per_wallet: int = 1024
    entropy_bits: int = 256         # 24 words, one Ed25519 seed worth of entropy
    default_display_name: str = "Main Wallet"

    # Container encryption
    cipher: str = CIPHER_AES_256_GCM
    salt_size: int = 16
    iv_size: int = 12               # 96 bits (recommended for GCM)

    # Default KDF
    kdf: str = KDF_PBKDF2
    kdf_hash: str = HASH_SHA256
    kdf_iterations: int = 210_000   # OWASP recommendation for PBKDF2-HMAC-SHA256
    min_kdf_iterations: dict = field(default_factory=_default_min_iterations)

    # Argon2id parameters (used when kdf is ARGON2ID)
    argon2_memory_cost: int = 65536  # 64 MB
    argon2_parallelism: int = 4

    def min_iterations_for(self, kdf: str) -> int:
        """Minimum accepted iteration count for a KDF (0 if unknown)."""
        return self.min_kdf_iterations.get(kdf, 0)

    def with_overrides(self, **overrides) -> "WalletConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: dict) -> "WalletConfig":
        """
        Build a config from a settings dict, ignoring unknown keys.

        Raises:
            TypeError: If a known setting has the wrong type
        """
        types = {f.name: f.type for f in fields(cls)}
        unknown = sorted(set(data) - set(types))
        if unknown:
            logger.warning(f"Ignoring unknown wallet settings: {', '.join(unknown)}")

        values = {k: v for k, v in data.items() if k in types}
        for name, value in values.items():
            _check_setting(name, value, types[name])
        for kdf, minimum in values.get("min_kdf_iterations", {}).items():
            _check_setting(f"min_kdf_iterations.{kdf}", minimum, int)
        return cls(**values)


def _check_setting(name: str, value, expected: type) -> None:
    # bool is an int subclass but never a valid numeric setting
    if isinstance(value, bool) or not isinstance(value, expected):
        raise TypeError(
            f"Wallet setting '{name}' must be {expected.__name__}, got {type(value).__name__}"
        )


DEFAULT_CONFIG = WalletConfig()


def load_config(path: Optional[Path] = None) -> WalletConfig:
    """
    Load wallet settings from the "wallet" section of settings.json.

    Falls back to defaults if the file is missing or unreadable.

    Args:
        path: Settings file (default: application settings.json)
    """
    settings_path = Path(path) if path is not None else get_settings_path()
    if not settings_path.exists():
        return WalletConfig()

    try:
        with open(settings_path, 'r') as f:
            settings = json.load(f)
        section = settings.get("wallet", {})
        if not isinstance(section, dict):
            raise TypeError("'wallet' settings must be an object")
        return WalletConfig.from_dict(section)
    except (json.JSONDecodeError, OSError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load wallet settings: {e}")
        return WalletConfig()
