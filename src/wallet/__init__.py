"""
Wallet package - Key derivation and encrypted storage for smwallet.

Contains:
- seedphrase: BIP-39 generation, validation and seed stretching
- keys: Ed25519 key pairs and account derivation
- Wallet, WalletMetadata, WalletSecrets: The in-memory wallet
- WalletCodec, EncryptedContainer: Password-encrypted wallet container
- WalletSession: Unlocked state that wipes itself
- WalletManager: Wallet files on disk
"""

from . import seedphrase
from .config import (
    WalletConfig,
    load_config,
    DEFAULT_CONFIG,
    WALLET_FORMAT_VERSION,
)
from .errors import (
    WalletError,
    InvalidEntropySize,
    InvalidMnemonic,
    InvalidSeedLength,
    AccountLimitExceeded,
    DecryptionFailed,
    MalformedHex,
    MalformedContainer,
    UnsupportedAlgorithm,
    InvalidKdfParameters,
    InvalidWalletSecrets,
    InvalidPassword,
    WalletLocked,
)
from .hexcodec import encode_hex, decode_hex
from .keys import (
    EDKeyPair,
    master_from_seed,
    derive_child,
    derive_accounts,
)
from .model import Wallet, WalletMetadata, WalletSecrets
from .session import SecretBuffer, WalletSession
from .crypto import (
    WalletCodec,
    EncryptedContainer,
    KdfParams,
    CipherParams,
)
from .manager import WalletManager, read_container, write_container

__all__ = [
    "seedphrase",
    # Config
    "WalletConfig",
    "load_config",
    "DEFAULT_CONFIG",
    "WALLET_FORMAT_VERSION",
    # Errors
    "WalletError",
    "InvalidEntropySize",
    "InvalidMnemonic",
    "InvalidSeedLength",
    "AccountLimitExceeded",
    "DecryptionFailed",
    "MalformedHex",
    "MalformedContainer",
    "UnsupportedAlgorithm",
    "InvalidKdfParameters",
    "InvalidWalletSecrets",
    "InvalidPassword",
    "WalletLocked",
    # Hex
    "encode_hex",
    "decode_hex",
    # Keys
    "EDKeyPair",
    "master_from_seed",
    "derive_child",
    "derive_accounts",
    # Wallet
    "Wallet",
    "WalletMetadata",
    "WalletSecrets",
    "SecretBuffer",
    "WalletSession",
    # Container
    "WalletCodec",
    "EncryptedContainer",
    "KdfParams",
    "CipherParams",
    # Files
    "WalletManager",
    "read_container",
    "write_container",
]
