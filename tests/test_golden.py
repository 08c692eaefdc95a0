"""
End-to-end check against a stored wallet file.

tests/fixtures/golden_wallet.json was produced from TEST_MNEMONIC with three
accounts, password "test1234", the production KDF settings, and fixed salt
and IV. Any change to derivation, the plaintext layout or the container
layout breaks this test, and would break existing wallet files too.
"""

from pathlib import Path

import pytest

from wallet import EncryptedContainer, Wallet, WalletCodec, DecryptionFailed
from conftest import SequenceRandom, TEST_MNEMONIC, fixed_clock


GOLDEN_PATH = Path(__file__).parent / "fixtures" / "golden_wallet.json"

PASSWORD = "test1234"
SALT = bytes(range(16))
IV = bytes(range(0xa0, 0xac))

EXPECTED_PUBLIC_KEYS = [
    "3ad652b9dc30acb29da413b7d55df9f15dcc99a1f3f257446f91d99bc938418d",
    "9f297bbb8e65e1841ccff14e01f7e102ce58c2d031757c2a609416f0bf87f0c2",
    "544f434477f724e1a69a5cc72b94a5c2dba4a0ae7f4277115f996e390f9a646e",
]


@pytest.fixture(scope="module")
def wallet() -> Wallet:
    return Wallet.new_from_mnemonic(TEST_MNEMONIC, 3, clock=fixed_clock)


@pytest.mark.slow
def test_golden_wallet_file(wallet):
    assert [a.public_key.hex() for a in wallet.accounts] == EXPECTED_PUBLIC_KEYS

    codec = WalletCodec(random_source=SequenceRandom(SALT, IV))
    container = codec.encrypt_wallet(wallet, PASSWORD)
    assert container.to_json() == GOLDEN_PATH.read_text().rstrip("\n")

    restored = codec.decrypt_wallet(container, PASSWORD)
    assert restored.secrets == wallet.secrets
    assert restored.meta == wallet.meta


@pytest.mark.slow
def test_golden_wallet_file_decrypts(wallet):
    container = EncryptedContainer.from_json(GOLDEN_PATH.read_bytes())
    codec = WalletCodec()
    assert codec.decrypt(container, PASSWORD) == wallet.secrets
    with pytest.raises(DecryptionFailed):
        codec.decrypt(container, "test12345")
