"""Shared fixtures for the wallet tests."""

import pytest

from wallet import WalletCodec, WalletConfig


# The well-known all-zero-entropy BIP-39 vector - FOR TESTING ONLY
TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)

TEST_MNEMONIC_24 = " ".join(["abandon"] * 23 + ["art"])

FIXED_CREATED = "2024-01-01T00:00:00Z"

# KDF floors low enough for fast tests. Production defaults are covered by
# the golden fixture test.
FAST_CONFIG = WalletConfig(
    kdf_iterations=1000,
    min_kdf_iterations={"PBKDF2": 1000, "ARGON2ID": 1},
    argon2_memory_cost=1024,
    argon2_parallelism=1,
)


class SequenceRandom:
    """Random source that hands out fixed chunks in order."""

    def __init__(self, *chunks: bytes):
        self._chunks = list(chunks)

    def __call__(self, n: int) -> bytes:
        chunk = self._chunks.pop(0)
        assert len(chunk) == n, f"expected request for {len(chunk)} bytes, got {n}"
        return chunk


def fixed_clock() -> str:
    return FIXED_CREATED


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    """Keep settings, logs and default wallets out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("SMWALLET_HOME", str(home))
    return home


@pytest.fixture
def fast_config() -> WalletConfig:
    return FAST_CONFIG


@pytest.fixture
def codec(fast_config) -> WalletCodec:
    return WalletCodec(fast_config)
