"""
Wallet Crypto - Encrypted wallet container.

Industry-standard security:
- PBKDF2-HMAC-SHA256 (default) or Argon2id key derivation
- AES-256-GCM authenticated encryption
- Fresh salt and IV for every encryption
- KDF and cipher parameters bound to the ciphertext as associated data

Container layout (JSON, all binary fields lowercase hex):

    {
      "version": 1,
      "meta": {"displayName": ..., "created": ..., "genesisID": ...},
      "crypto": {
        "cipher": "AES-256-GCM",
        "cipherText": "...",
        "cipherParams": {"iv": "..."},
        "kdf": "PBKDF2",
        "kdfparams": {"dklen": 32, "hash": "SHA-256", "salt": "...", "iterations": 210000}
      }
    }

Keys never exist unencrypted on disk.
"""

import json
import logging
import secrets
from dataclasses import dataclass, replace
from typing import Callable, Optional

# Cryptography
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from argon2.low_level import hash_secret_raw, Type

from utils import now_time_string

from .config import (
    CIPHER_AES_256_GCM,
    HASH_BLAKE2B,
    HASH_SHA256,
    HASH_SHA512,
    KDF_ARGON2ID,
    KDF_PBKDF2,
    WALLET_FORMAT_VERSION,
    WalletConfig,
)
from .errors import (
    AccountLimitExceeded,
    DecryptionFailed,
    InvalidKdfParameters,
    InvalidMnemonic,
    InvalidPassword,
    InvalidWalletSecrets,
    MalformedContainer,
    UnsupportedAlgorithm,
)
from .hexcodec import decode_hex, encode_hex
from .keys import account_path, format_path
from .model import Wallet, WalletMetadata, WalletSecrets
from . import seedphrase
from .session import SecretBuffer


logger = logging.getLogger(__name__)


# ============================================
# Supported Algorithms
# ============================================

# Cipher id -> key size in bytes
CIPHER_KEY_SIZES = {
    CIPHER_AES_256_GCM: 32,
}

AES_GCM_TAG_SIZE = 16

# KDF id -> accepted hash ids
KDF_HASHES = {
    KDF_PBKDF2: (HASH_SHA256, HASH_SHA512),
    KDF_ARGON2ID: (HASH_BLAKE2B,),
}

_PBKDF2_HASHES = {
    HASH_SHA256: hashes.SHA256,
    HASH_SHA512: hashes.SHA512,
}

MIN_SALT_SIZE = 8  # Argon2 requires at least 8 bytes


# ============================================
# Data Classes
# ============================================

@dataclass(frozen=True)
class KdfParams:
    """Password KDF parameters, stored in cleartext next to the ciphertext."""
    kdf: str
    iterations: int
    dklen: int
    hash: str
    salt: bytes = b""
    memory_cost: Optional[int] = None   # Argon2id only (KiB)
    parallelism: Optional[int] = None   # Argon2id only

    def to_dict(self) -> dict:
        d = {
            "dklen": self.dklen,
            "hash": self.hash,
            "salt": encode_hex(self.salt),
            "iterations": self.iterations,
        }
        if self.memory_cost is not None:
            d["memoryCost"] = self.memory_cost
        if self.parallelism is not None:
            d["parallelism"] = self.parallelism
        return d

    @classmethod
    def from_dict(cls, kdf: str, data: dict) -> "KdfParams":
        return cls(
            kdf=kdf,
            iterations=_require_int(data, "iterations"),
            dklen=_require_int(data, "dklen"),
            hash=_require_str(data, "hash"),
            salt=decode_hex(_require_str(data, "salt")),
            memory_cost=_optional_int(data, "memoryCost"),
            parallelism=_optional_int(data, "parallelism"),
        )


@dataclass(frozen=True)
class CipherParams:
    """Symmetric cipher parameters and the ciphertext (GCM tag appended)."""
    cipher: str
    iv: bytes
    ciphertext: bytes


@dataclass(frozen=True)
class EncryptedContainer:
    """The persisted shape of a wallet: cleartext metadata + encrypted secrets."""
    meta: WalletMetadata
    kdf_params: KdfParams
    cipher_params: CipherParams
    version: int = WALLET_FORMAT_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "meta": self.meta.to_dict(),
            "crypto": {
                "cipher": self.cipher_params.cipher,
                "cipherText": encode_hex(self.cipher_params.ciphertext),
                "cipherParams": {
                    "iv": encode_hex(self.cipher_params.iv),
                },
                "kdf": self.kdf_params.kdf,
                "kdfparams": self.kdf_params.to_dict(),
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict) -> "EncryptedContainer":
        """
        Parse a container dict.

        Raises:
            MalformedContainer: If a group or field is missing or mistyped
            MalformedHex: If a binary field is not valid hex
        """
        if not isinstance(data, dict):
            raise MalformedContainer("Wallet file must contain a JSON object")

        version = data.get("version", WALLET_FORMAT_VERSION)
        if isinstance(version, bool) or not isinstance(version, int) \
                or version != WALLET_FORMAT_VERSION:
            raise MalformedContainer(f"Unsupported wallet version: {version!r}")

        meta_data = _require_dict(data, "meta")
        crypto = _require_dict(data, "crypto")
        cipher_params = _require_dict(crypto, "cipherParams")

        meta = WalletMetadata(
            display_name=_require_str(meta_data, "displayName"),
            created=_require_str(meta_data, "created"),
            genesis_id=_optional_str(meta_data, "genesisID", ""),
        )
        kdf_params = KdfParams.from_dict(
            _require_str(crypto, "kdf"),
            _require_dict(crypto, "kdfparams"),
        )
        cipher = CipherParams(
            cipher=_require_str(crypto, "cipher"),
            iv=decode_hex(_require_str(cipher_params, "iv")),
            ciphertext=decode_hex(_require_str(crypto, "cipherText")),
        )
        return cls(meta=meta, kdf_params=kdf_params, cipher_params=cipher, version=version)

    @classmethod
    def from_json(cls, text: str | bytes) -> "EncryptedContainer":
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedContainer(f"Wallet file is not valid JSON: {e}") from e
        return cls.from_dict(data)


# ============================================
# Key Derivation
# ============================================

def derive_key(password: str, params: KdfParams) -> bytes:
    """
    Derive the symmetric key from a password.

    Deliberately slow: PBKDF2 with hundreds of thousands of iterations, or
    memory-hard Argon2id.

    Raises:
        InvalidPassword: If the password cannot be encoded as UTF-8
        UnsupportedAlgorithm: If the KDF or hash is unknown
    """
    try:
        secret = password.encode('utf-8')
    except (UnicodeEncodeError, AttributeError) as e:
        raise InvalidPassword("Password must be a UTF-8 encodable string") from e

    if params.kdf == KDF_PBKDF2:
        hash_cls = _PBKDF2_HASHES.get(params.hash)
        if hash_cls is None:
            raise UnsupportedAlgorithm(f"Unsupported PBKDF2 hash: {params.hash}")
        kdf = PBKDF2HMAC(
            algorithm=hash_cls(),
            length=params.dklen,
            salt=params.salt,
            iterations=params.iterations,
        )
        return kdf.derive(secret)

    if params.kdf == KDF_ARGON2ID:
        return hash_secret_raw(
            secret=secret,
            salt=params.salt,
            time_cost=params.iterations,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=params.dklen,
            type=Type.ID
        )

    raise UnsupportedAlgorithm(f"Unsupported KDF: {params.kdf}")


def check_kdf_params(params: KdfParams, cipher: str, config: WalletConfig) -> None:
    """
    Reject unknown algorithms and parameters weaker than the config allows.

    Raises:
        UnsupportedAlgorithm: If the cipher, KDF or hash is unknown
        InvalidKdfParameters: If a parameter is out of range
    """
    if cipher not in CIPHER_KEY_SIZES:
        raise UnsupportedAlgorithm(f"Unsupported cipher: {cipher}")
    if params.kdf not in KDF_HASHES:
        raise UnsupportedAlgorithm(f"Unsupported KDF: {params.kdf}")
    if params.hash not in KDF_HASHES[params.kdf]:
        raise UnsupportedAlgorithm(f"Unsupported hash for {params.kdf}: {params.hash}")

    if params.dklen != CIPHER_KEY_SIZES[cipher]:
        raise InvalidKdfParameters(
            f"Derived key length {params.dklen} does not match {cipher} "
            f"key size {CIPHER_KEY_SIZES[cipher]}"
        )
    min_iterations = config.min_iterations_for(params.kdf)
    if params.iterations < max(min_iterations, 1):
        raise InvalidKdfParameters(
            f"{params.kdf} iterations must be at least {min_iterations}, got {params.iterations}"
        )
    if len(params.salt) < MIN_SALT_SIZE:
        raise InvalidKdfParameters(f"Salt must be at least {MIN_SALT_SIZE} bytes")

    if params.kdf == KDF_ARGON2ID:
        if params.parallelism is None or params.parallelism < 1:
            raise InvalidKdfParameters("Argon2id parallelism must be at least 1")
        if params.memory_cost is None or params.memory_cost < 8 * params.parallelism:
            raise InvalidKdfParameters("Argon2id memory cost must be at least 8 KiB per lane")


def associated_data(version: int, cipher: str, params: KdfParams) -> bytes:
    """Canonical bytes binding the format version and parameters to the ciphertext."""
    return json.dumps(
        {
            "cipher": cipher,
            "kdf": params.kdf,
            "kdfparams": params.to_dict(),
            "version": version,
        },
        sort_keys=True,
        separators=(",", ":"),
    ).encode('utf-8')


# ============================================
# Codec
# ============================================

class WalletCodec:
    """
    Encrypts wallet secrets into containers and back.

    Usage:
        codec = WalletCodec()
        container = codec.encrypt_wallet(wallet, "my-password")
        text = container.to_json()

        wallet = codec.decrypt_wallet(EncryptedContainer.from_json(text), "my-password")
    """

    def __init__(self, config: Optional[WalletConfig] = None,
                 random_source: Optional[Callable[[int], bytes]] = None):
        """
        Args:
            config: KDF defaults and safety floors
            random_source: Returns n unpredictable bytes (default: secrets.token_bytes)
        """
        self._config = config or WalletConfig()
        self._random = random_source or secrets.token_bytes

    @property
    def config(self) -> WalletConfig:
        return self._config

    def default_kdf_params(self) -> KdfParams:
        """KDF parameters from the config (salt is filled in per encryption)."""
        config = self._config
        if config.kdf == KDF_ARGON2ID:
            return KdfParams(
                kdf=KDF_ARGON2ID,
                iterations=config.kdf_iterations,
                dklen=CIPHER_KEY_SIZES.get(config.cipher, 32),
                hash=HASH_BLAKE2B,
                memory_cost=config.argon2_memory_cost,
                parallelism=config.argon2_parallelism,
            )
        return KdfParams(
            kdf=config.kdf,
            iterations=config.kdf_iterations,
            dklen=CIPHER_KEY_SIZES.get(config.cipher, 32),
            hash=config.kdf_hash,
        )

    def encrypt(self, wallet_secrets: WalletSecrets, password: str,
                kdf_params: Optional[KdfParams] = None,
                meta: Optional[WalletMetadata] = None) -> EncryptedContainer:
        """
        Encrypt wallet secrets with a password.

        A fresh salt and IV are drawn on every call; any salt in kdf_params
        is replaced.

        Secrets that decrypt() would not accept back are refused up front.

        Raises:
            InvalidMnemonic: If the stored seed phrase is invalid
            AccountLimitExceeded: If there are more accounts than allowed
            InvalidWalletSecrets: If the accounts are out of order or do not
                survive serialization unchanged
            InvalidPassword: If the password cannot be encoded as UTF-8
            UnsupportedAlgorithm: If the cipher, KDF or hash is unknown
            InvalidKdfParameters: If the KDF parameters are too weak
        """
        plaintext = self._serialize(wallet_secrets)
        cipher = self._config.cipher
        params = kdf_params or self.default_kdf_params()
        params = replace(params, salt=self._random(self._config.salt_size))
        check_kdf_params(params, cipher, self._config)

        if meta is None:
            meta = WalletMetadata(
                display_name=self._config.default_display_name,
                created=now_time_string(),
            )

        iv = self._random(self._config.iv_size)
        aad = associated_data(WALLET_FORMAT_VERSION, cipher, params)

        with SecretBuffer(plaintext) as buffer, \
                SecretBuffer(derive_key(password, params)) as key:
            ciphertext = AESGCM(bytes(key)).encrypt(iv, bytes(buffer), aad)

        logger.debug(f"Encrypted wallet secrets with {cipher}/{params.kdf}")
        return EncryptedContainer(
            meta=meta,
            kdf_params=params,
            cipher_params=CipherParams(cipher=cipher, iv=iv, ciphertext=ciphertext),
        )

    def decrypt(self, container: EncryptedContainer, password: str) -> WalletSecrets:
        """
        Decrypt the secrets in a container.

        Raises:
            UnsupportedAlgorithm: If the container names an unknown algorithm
            InvalidKdfParameters: If the stored KDF parameters are too weak
            MalformedContainer: If the IV has the wrong size
            DecryptionFailed: Wrong password, tampered data or unreadable plaintext
        """
        params = container.kdf_params
        cipher_params = container.cipher_params
        check_kdf_params(params, cipher_params.cipher, self._config)
        if len(cipher_params.iv) != self._config.iv_size:
            raise MalformedContainer(
                f"IV must be {self._config.iv_size} bytes, got {len(cipher_params.iv)}"
            )
        if len(cipher_params.ciphertext) < AES_GCM_TAG_SIZE:
            raise MalformedContainer("Ciphertext is shorter than the authentication tag")

        aad = associated_data(container.version, cipher_params.cipher, params)
        try:
            with SecretBuffer(derive_key(password, params)) as key:
                plaintext = AESGCM(bytes(key)).decrypt(
                    cipher_params.iv, cipher_params.ciphertext, aad
                )
        except InvalidTag as e:
            logger.warning("Wallet decryption failed")
            raise DecryptionFailed() from e

        with SecretBuffer(plaintext) as buffer:
            try:
                wallet_secrets = WalletSecrets.from_bytes(bytes(buffer))
                self._check_structure(wallet_secrets)
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning("Decrypted wallet secrets failed the structure check")
                raise DecryptionFailed() from e

        return wallet_secrets

    def encrypt_wallet(self, wallet: Wallet, password: str,
                       kdf_params: Optional[KdfParams] = None) -> EncryptedContainer:
        """Encrypt a whole wallet (metadata stays in cleartext)."""
        return self.encrypt(wallet.secrets, password, kdf_params, meta=wallet.meta)

    def decrypt_wallet(self, container: EncryptedContainer, password: str) -> Wallet:
        """Decrypt a container into a complete wallet."""
        wallet_secrets = self.decrypt(container, password)
        meta = WalletMetadata(
            display_name=container.meta.display_name,
            created=container.meta.created,
            genesis_id=container.meta.genesis_id,
        )
        return Wallet.from_secrets(meta, wallet_secrets, config=self._config)

    def _serialize(self, wallet_secrets: WalletSecrets) -> bytes:
        """Plaintext for wallet_secrets, checked to read back as the same secrets."""
        try:
            plaintext = wallet_secrets.to_bytes()
            reparsed = WalletSecrets.from_bytes(plaintext)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise InvalidWalletSecrets(f"Wallet secrets cannot be stored: {e}") from e
        self._check_structure(wallet_secrets)
        if reparsed != wallet_secrets:
            raise InvalidWalletSecrets("Wallet secrets do not read back unchanged")
        return plaintext

    def _check_structure(self, wallet_secrets: WalletSecrets) -> None:
        """Plaintext must look like something this codec wrote."""
        if not seedphrase.validate(wallet_secrets.mnemonic):
            raise InvalidMnemonic("Stored seed phrase is invalid")
        limit = self._config.max_accounts_per_wallet
        if len(wallet_secrets.accounts) > limit:
            raise AccountLimitExceeded(
                f"Wallet holds {len(wallet_secrets.accounts)} accounts, limit is {limit}"
            )
        for i, account in enumerate(wallet_secrets.accounts):
            if account.index != i or account.path != format_path(account_path(i)):
                raise InvalidWalletSecrets(f"Account {i} has unexpected path {account.path!r}")


# ============================================
# Field Helpers
# ============================================

def _require_dict(data: dict, key: str) -> dict:
    value = data.get(key)
    if not isinstance(value, dict):
        raise MalformedContainer(f"Missing or invalid '{key}' group")
    return value


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise MalformedContainer(f"Missing or invalid '{key}' field")
    return value


def _optional_str(data: dict, key: str, default: str) -> str:
    if key not in data:
        return default
    return _require_str(data, key)


def _require_int(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedContainer(f"Missing or invalid '{key}' field")
    return value


def _optional_int(data: dict, key: str) -> Optional[int]:
    if key not in data:
        return None
    return _require_int(data, key)
