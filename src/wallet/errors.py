"""
Wallet Errors - Failure kinds raised by the wallet core.

Every error derives from WalletError. Kinds that describe bad caller input
also derive from ValueError, so callers that already catch ValueError keep
working.
"""


class WalletError(Exception):
    """Base class for all wallet errors."""


class InvalidEntropySize(WalletError, ValueError):
    """Requested mnemonic entropy is not a BIP-39 size."""


class InvalidMnemonic(WalletError, ValueError):
    """Mnemonic failed the word list, word count or checksum check."""


class InvalidSeedLength(WalletError, ValueError):
    """Seed material is not the Ed25519 seed width."""


class AccountLimitExceeded(WalletError, ValueError):
    """Account index or count is outside [0, max_accounts_per_wallet]."""


class DecryptionFailed(WalletError):
    """
    Wrong password or corrupted container.

    Deliberately coarse: it does not say whether key derivation,
    authentication or plaintext parsing failed.
    """

    def __init__(self, message: str = "Wrong password or corrupted wallet file"):
        super().__init__(message)


class MalformedHex(WalletError, ValueError):
    """Hex field has odd length or non-hex characters."""


class MalformedContainer(WalletError, ValueError):
    """Wallet file is not a structurally valid container."""


class UnsupportedAlgorithm(WalletError, ValueError):
    """Cipher, KDF or hash identifier is not supported."""


class InvalidKdfParameters(WalletError, ValueError):
    """KDF parameters are below the configured safety floor or mismatch the cipher."""


class WalletLocked(WalletError):
    """Session was used after its secrets were wiped."""


class InvalidWalletSecrets(WalletError, ValueError):
    """Wallet secrets are not in a form the codec can store and read back."""


class InvalidPassword(WalletError, ValueError):
    """Password is not a string that can be encoded as UTF-8."""
