"""
Wallet Session - Transient unlocked state.

Decrypted material lives here, owned by the caller, never on the persisted
structures. Leaving the `with` block locks the session and zeroes the
buffers it owns.
"""

import logging
from typing import Optional

from .errors import WalletLocked
from .keys import EDKeyPair
from .model import Wallet


logger = logging.getLogger(__name__)


class SecretBuffer:
    """
    Mutable byte buffer that is zeroed on wipe() or when its scope ends.

    Python may still hold copies of immutable bytes elsewhere; this only
    guarantees the buffer itself is cleared.
    """

    def __init__(self, data: bytes | bytearray = b""):
        self._buf = bytearray(data)

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        return f"SecretBuffer(<{len(self._buf)} bytes>)"

    @property
    def wiped(self) -> bool:
        return not any(self._buf)

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0

    def __del__(self):
        """Attempt to clear sensitive data on destruction."""
        if hasattr(self, "_buf"):
            self.wipe()


class WalletSession:
    """
    An unlocked wallet held for signing.

    Usage:
        with WalletSession(wallet) as session:
            signature = session.sign(0, b"payload")
        # wallet secrets dropped, private seeds zeroed
    """

    def __init__(self, wallet: Wallet):
        self._private_seeds = [SecretBuffer(a.private_seed) for a in wallet.accounts]
        self._wallet: Optional[Wallet] = wallet

    def __enter__(self) -> "WalletSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lock()

    @property
    def unlocked(self) -> bool:
        return self._wallet is not None

    @property
    def wallet(self) -> Wallet:
        return self._require_unlocked()

    def public_key(self, index: int) -> bytes:
        """Public key of the account at the given index."""
        return self._require_unlocked().get_account(index).public_key

    def sign(self, index: int, message: str | bytes) -> bytes:
        """Sign a message with the account at the given index."""
        wallet = self._require_unlocked()
        account = wallet.get_account(index)
        signer = EDKeyPair.from_private_seed(
            bytes(self._private_seeds[index]),
            index=account.index,
            path=account.path,
        )
        return signer.sign(message)

    def lock(self) -> None:
        """
        Lock the session, clearing sensitive data from memory.

        After locking, the session cannot sign.
        """
        if getattr(self, "_wallet", None) is None:
            return
        for buf in self._private_seeds:
            buf.wipe()
        self._private_seeds = []
        self._wallet = None
        logger.debug("Wallet session locked")

    def _require_unlocked(self) -> Wallet:
        if self._wallet is None:
            raise WalletLocked("Wallet session is locked")
        return self._wallet

    def __del__(self):
        """Attempt to clear sensitive data on destruction."""
        self.lock()
