"""
Wallet Model - The in-memory wallet aggregate.

A Wallet combines metadata, the seed phrase and the ordered accounts
derived from it. It is only ever persisted through the container codec
(see crypto.py).
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from utils import now_time_string

from . import seedphrase
from .config import WalletConfig
from .errors import AccountLimitExceeded, InvalidMnemonic
from .keys import EDKeyPair, derive_accounts, derive_child, master_from_seed, ED25519_SEED_SIZE


logger = logging.getLogger(__name__)


# ============================================
# Data Classes
# ============================================

@dataclass
class WalletMetadata:
    """Cleartext wallet metadata. `created` cannot change once set."""
    display_name: str
    created: str          # ISO-8601 UTC timestamp
    genesis_id: str = ""  # Empty means unset

    def __setattr__(self, name, value):
        if name == "created" and "created" in self.__dict__:
            raise AttributeError("Wallet creation time is immutable")
        super().__setattr__(name, value)

    def to_dict(self) -> dict:
        return {
            "displayName": self.display_name,
            "created": self.created,
            "genesisID": self.genesis_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WalletMetadata":
        return cls(
            display_name=data["displayName"],
            created=data["created"],
            genesis_id=data.get("genesisID", ""),
        )


@dataclass(frozen=True)
class WalletSecrets:
    """The secret half of a wallet: seed phrase and derived accounts."""
    mnemonic: str
    accounts: tuple[EDKeyPair, ...] = ()

    def __repr__(self) -> str:
        return f"WalletSecrets(mnemonic=<hidden>, accounts={len(self.accounts)})"

    def to_dict(self) -> dict:
        return {
            "mnemonic": self.mnemonic,
            "accounts": [a.to_dict() for a in self.accounts],
        }

    def to_bytes(self) -> bytes:
        """Canonical byte form used as the encryption plaintext."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode('utf-8')

    @classmethod
    def from_dict(cls, data: dict) -> "WalletSecrets":
        """
        Rebuild secrets from their plaintext form.

        Raises:
            KeyError, TypeError, ValueError: If the structure is invalid
        """
        mnemonic = data["mnemonic"]
        if not isinstance(mnemonic, str):
            raise TypeError("mnemonic must be a string")
        accounts = tuple(
            EDKeyPair.from_dict(entry, index=i)
            for i, entry in enumerate(data["accounts"])
        )
        return cls(mnemonic=mnemonic, accounts=accounts)

    @classmethod
    def from_bytes(cls, plaintext: bytes) -> "WalletSecrets":
        return cls.from_dict(json.loads(plaintext.decode('utf-8')))


# ============================================
# Wallet Class
# ============================================

class Wallet:
    """
    HD wallet of Ed25519 accounts derived from one seed phrase.

    Usage:
        # Create new wallet with 3 accounts
        wallet = Wallet.new_from_random_mnemonic(3)
        phrase = wallet.mnemonic  # Store securely offline

        # Restore from an existing phrase
        wallet = Wallet.new_from_mnemonic(phrase, 3)

        # Sign with the first account
        signature = wallet.accounts[0].sign(b"message")
    """

    def __init__(self, meta: WalletMetadata, secrets: WalletSecrets,
                 config: Optional[WalletConfig] = None, passphrase: Optional[str] = None):
        """
        Initialize from already-derived parts (use the new_* constructors).

        passphrase is None when it is not known, e.g. for a wallet read
        back from a file.
        """
        self._config = config or WalletConfig()
        if len(secrets.accounts) > self._config.max_accounts_per_wallet:
            raise AccountLimitExceeded(
                f"Wallet holds {len(secrets.accounts)} accounts, "
                f"limit is {self._config.max_accounts_per_wallet}"
            )
        self.meta = meta
        self._secrets = secrets
        self._passphrase = passphrase

    @classmethod
    def new_from_random_mnemonic(cls, n: int, config: Optional[WalletConfig] = None,
                                 display_name: Optional[str] = None,
                                 genesis_id: str = "",
                                 clock: Optional[Callable[[], str]] = None) -> "Wallet":
        """
        Create a wallet from a fresh random seed phrase.

        Args:
            n: Number of accounts to derive
            config: Limits and defaults (entropy size, account cap)
            display_name: Wallet name (default from config)
            genesis_id: Network genesis identifier
            clock: Returns the creation timestamp (default: now, UTC)
        """
        config = config or WalletConfig()
        _check_account_count(n, config)
        mnemonic = seedphrase.generate(config.entropy_bits)
        return cls.new_from_mnemonic(
            mnemonic, n, config=config, display_name=display_name,
            genesis_id=genesis_id, clock=clock,
        )

    @classmethod
    def new_from_mnemonic(cls, mnemonic: str, n: int, config: Optional[WalletConfig] = None,
                          display_name: Optional[str] = None,
                          genesis_id: str = "",
                          passphrase: str = "",
                          clock: Optional[Callable[[], str]] = None) -> "Wallet":
        """
        Restore a wallet from an existing seed phrase.

        Same phrase, passphrase and n always give the same accounts.

        Raises:
            AccountLimitExceeded: If n is outside [0, max_accounts_per_wallet]
            InvalidMnemonic: If the phrase fails the BIP-39 checks
        """
        config = config or WalletConfig()
        _check_account_count(n, config)
        if not seedphrase.validate(mnemonic):
            raise InvalidMnemonic("Invalid seed phrase")

        mnemonic = seedphrase.normalize(mnemonic)
        seed = seedphrase.to_seed(mnemonic, passphrase)
        accounts = derive_accounts(seed, n, config.max_accounts_per_wallet)

        meta = WalletMetadata(
            display_name=display_name if display_name is not None else config.default_display_name,
            created=(clock or now_time_string)(),
            genesis_id=genesis_id,
        )
        logger.info(f"Derived wallet with {n} account(s)")
        return cls(meta, WalletSecrets(mnemonic=mnemonic, accounts=accounts),
                   config=config, passphrase=passphrase)

    @classmethod
    def from_secrets(cls, meta: WalletMetadata, secrets: WalletSecrets,
                     config: Optional[WalletConfig] = None) -> "Wallet":
        """Rebuild a wallet from decrypted secrets."""
        return cls(meta, secrets, config=config)

    @property
    def mnemonic(self) -> str:
        """The seed phrase (sensitive - only show during backup!)."""
        return self._secrets.mnemonic

    @property
    def accounts(self) -> tuple[EDKeyPair, ...]:
        """All derived accounts, in derivation order."""
        return self._secrets.accounts

    @property
    def secrets(self) -> WalletSecrets:
        return self._secrets

    @property
    def config(self) -> WalletConfig:
        return self._config

    def get_account(self, index: int) -> EDKeyPair:
        """Get the account at the given index."""
        if not 0 <= index < len(self.accounts):
            raise IndexError(f"No account at index {index}")
        return self.accounts[index]

    def add_account(self, passphrase: Optional[str] = None) -> EDKeyPair:
        """
        Derive the account at the next unused index.

        Existing accounts are left untouched. The passphrase is not stored
        in wallet files, so a wallet restored from a file with a non-empty
        passphrase must be given it again here.

        Raises:
            AccountLimitExceeded: If the wallet is full
            InvalidMnemonic: If the passphrase does not reproduce account 0
            ValueError: If the passphrase is unknown and the wallet has no accounts
        """
        if passphrase is None:
            passphrase = self._passphrase
        if passphrase is None:
            if not self.accounts:
                raise ValueError(
                    "Passphrase is unknown and there is no account to check it against; "
                    "pass it explicitly (\"\" if none was used)"
                )
            passphrase = ""
        index = len(self.accounts)
        limit = self._config.max_accounts_per_wallet
        seed = seedphrase.to_seed(self.mnemonic, passphrase)
        master = master_from_seed(seed[:ED25519_SEED_SIZE])
        if self.accounts and derive_child(master, 0, limit).public_key != self.accounts[0].public_key:
            raise InvalidMnemonic("Passphrase does not match the wallet's accounts")
        account = derive_child(master, index, limit)
        self._passphrase = passphrase
        self._secrets = WalletSecrets(
            mnemonic=self.mnemonic,
            accounts=self.accounts + (account,),
        )
        logger.info(f"Added account {index} ({account.path})")
        return account

    def to_dict(self) -> dict:
        """In-memory plaintext representation. Never write this to disk."""
        return {
            "meta": self.meta.to_dict(),
            "crypto": self._secrets.to_dict(),
        }

    def __repr__(self) -> str:
        return f"Wallet(name={self.meta.display_name!r}, accounts={len(self.accounts)})"


def _check_account_count(n: int, config: WalletConfig) -> None:
    limit = config.max_accounts_per_wallet
    if isinstance(n, bool) or not isinstance(n, int) or not 0 <= n <= limit:
        raise AccountLimitExceeded(f"Number of accounts must be in [0, {limit}], got {n!r}")
