"""
Wallet Manager - Wallet files on disk.

Reads and writes encrypted wallet containers in a wallet directory. Files
are written atomically and with owner-only permissions.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from utils import get_wallet_dir

from .config import WalletConfig
from .crypto import EncryptedContainer, KdfParams, WalletCodec
from .model import Wallet
from .session import WalletSession


logger = logging.getLogger(__name__)


WALLET_FILE_SUFFIX = ".json"

# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect sensitive wallet data.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError as e:
            # Best effort - the file is encrypted either way
            logger.warning(f"Could not restrict permissions on {filepath.name}: {e}")


def write_container(container: EncryptedContainer, filepath: str | Path) -> None:
    """Write a container via a temp file, then atomically replace the target."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    temp_path = filepath.with_suffix('.tmp')
    with open(temp_path, 'w', encoding='utf-8') as f:
        f.write(container.to_json())
    set_secure_permissions(temp_path)

    temp_path.replace(filepath)
    set_secure_permissions(filepath)


def read_container(filepath: str | Path) -> EncryptedContainer:
    """
    Read a container from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedContainer: If the file is not a valid container
    """
    with open(filepath, 'rb') as f:
        return EncryptedContainer.from_json(f.read())


class WalletManager:
    """
    Manages the wallet files in one directory.

    Usage:
        manager = WalletManager()
        wallet = manager.create_wallet("main", "password", n=3)

        with manager.open_session("main", "password") as session:
            signature = session.sign(0, b"payload")
    """

    def __init__(self, wallet_dir: Optional[str | Path] = None,
                 config: Optional[WalletConfig] = None,
                 codec: Optional[WalletCodec] = None):
        """
        Initialize wallet manager.

        Args:
            wallet_dir: Directory to store wallet files (default: app wallet dir)
            config: Wallet limits and KDF defaults
            codec: Container codec (default: built from config)
        """
        self.wallet_dir = Path(wallet_dir) if wallet_dir is not None else get_wallet_dir()
        self.wallet_dir.mkdir(parents=True, exist_ok=True)
        self.config = config or (codec.config if codec else WalletConfig())
        self.codec = codec or WalletCodec(self.config)

    def list_wallets(self) -> list[str]:
        """List all wallet files (by name)."""
        return sorted(f.stem for f in self.wallet_dir.glob(f"*{WALLET_FILE_SUFFIX}"))

    def wallet_path(self, name: str) -> Path:
        """Get the file path for a wallet by name."""
        if not name or Path(name).name != name or name.startswith("."):
            raise ValueError(f"Invalid wallet name: {name!r}")
        return self.wallet_dir / f"{name}{WALLET_FILE_SUFFIX}"

    def exists(self, name: str) -> bool:
        """Check if a wallet file exists."""
        return self.wallet_path(name).exists()

    def create_wallet(self, name: str, password: str, n: int = 1,
                      display_name: Optional[str] = None,
                      genesis_id: str = "") -> Wallet:
        """Create a new wallet with a random seed phrase and save it."""
        self._require_new(name)
        wallet = Wallet.new_from_random_mnemonic(
            n, config=self.config, display_name=display_name, genesis_id=genesis_id,
        )
        self.save_wallet(wallet, name, password)
        return wallet

    def restore_wallet(self, name: str, mnemonic: str, password: str, n: int = 1,
                       display_name: Optional[str] = None,
                       genesis_id: str = "") -> Wallet:
        """Restore a wallet from an existing seed phrase and save it."""
        self._require_new(name)
        wallet = Wallet.new_from_mnemonic(
            mnemonic, n, config=self.config, display_name=display_name, genesis_id=genesis_id,
        )
        self.save_wallet(wallet, name, password)
        return wallet

    def save_wallet(self, wallet: Wallet, name: str, password: str,
                    kdf_params: Optional[KdfParams] = None) -> Path:
        """Encrypt and save a wallet. Overwrites an existing file."""
        path = self.wallet_path(name)
        container = self.codec.encrypt_wallet(wallet, password, kdf_params)
        write_container(container, path)
        logger.info(f"Saved wallet '{name}' ({len(wallet.accounts)} account(s))")
        return path

    def read_container(self, name: str) -> EncryptedContainer:
        """Read a wallet's container without decrypting it."""
        return read_container(self.wallet_path(name))

    def load_wallet(self, name: str, password: str) -> Wallet:
        """
        Load and decrypt a wallet by name.

        Raises:
            FileNotFoundError: If the wallet doesn't exist
            MalformedContainer: If the file is corrupted beyond parsing
            DecryptionFailed: If the password is wrong
        """
        container = self.read_container(name)
        wallet = self.codec.decrypt_wallet(container, password)
        logger.info(f"Loaded wallet '{name}'")
        return wallet

    def open_session(self, name: str, password: str) -> WalletSession:
        """Load a wallet into a session that wipes itself on exit."""
        return WalletSession(self.load_wallet(name, password))

    def _require_new(self, name: str) -> None:
        if self.exists(name):
            raise ValueError(f"Wallet '{name}' already exists")
