import os
import stat

import pytest

from wallet import (
    DecryptionFailed,
    MalformedContainer,
    WalletManager,
    WalletSession,
    read_container,
)
from conftest import TEST_MNEMONIC


PASSWORD = "hunter22"


@pytest.fixture
def manager(tmp_path, codec) -> WalletManager:
    return WalletManager(tmp_path / "wallets", codec=codec)


def test_create_then_load(manager):
    created = manager.create_wallet("main", PASSWORD, n=2, display_name="Primary")
    loaded = manager.load_wallet("main", PASSWORD)
    assert loaded.mnemonic == created.mnemonic
    assert loaded.accounts == created.accounts
    assert loaded.meta == created.meta


def test_restore_is_deterministic(manager):
    first = manager.restore_wallet("a", TEST_MNEMONIC, PASSWORD, n=3)
    second = manager.restore_wallet("b", TEST_MNEMONIC, "other password", n=3)
    assert first.accounts == second.accounts
    assert manager.load_wallet("b", "other password").accounts == first.accounts


def test_wrong_password(manager):
    manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD)
    with pytest.raises(DecryptionFailed):
        manager.load_wallet("main", "not the password")


def test_file_is_encrypted_and_private(manager):
    manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD)
    path = manager.wallet_path("main")
    text = path.read_text()
    assert "abandon" not in text
    assert '"cipher": "AES-256-GCM"' in text
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert not list(manager.wallet_dir.glob("*.tmp"))


def test_save_overwrites_with_fresh_salt(manager):
    wallet = manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD)
    before = manager.read_container("main")
    wallet.add_account()
    manager.save_wallet(wallet, "main", PASSWORD)
    after = manager.read_container("main")
    assert after.kdf_params.salt != before.kdf_params.salt
    assert len(manager.load_wallet("main", PASSWORD).accounts) == 2


def test_duplicate_name_is_rejected(manager):
    manager.create_wallet("main", PASSWORD)
    with pytest.raises(ValueError):
        manager.create_wallet("main", PASSWORD)
    with pytest.raises(ValueError):
        manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD)


@pytest.mark.parametrize("name", ["", "../escape", "a/b", ".hidden"])
def test_invalid_names(manager, name):
    with pytest.raises(ValueError):
        manager.wallet_path(name)


def test_list_wallets(manager):
    assert manager.list_wallets() == []
    manager.restore_wallet("beta", TEST_MNEMONIC, PASSWORD)
    manager.restore_wallet("alpha", TEST_MNEMONIC, PASSWORD)
    assert manager.list_wallets() == ["alpha", "beta"]
    assert manager.exists("alpha")
    assert not manager.exists("gamma")


def test_missing_wallet(manager):
    with pytest.raises(FileNotFoundError):
        manager.load_wallet("missing", PASSWORD)


def test_corrupted_file(manager):
    manager.wallet_path("broken").write_text("{not json")
    with pytest.raises(MalformedContainer):
        manager.load_wallet("broken", PASSWORD)


def test_open_session(manager):
    wallet = manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD, n=1)
    with manager.open_session("main", PASSWORD) as session:
        assert isinstance(session, WalletSession)
        signature = session.sign(0, b"payload")
    assert wallet.accounts[0].verify(signature, b"payload")
    assert not session.unlocked


def test_read_container_helper(manager):
    manager.restore_wallet("main", TEST_MNEMONIC, PASSWORD)
    container = read_container(manager.wallet_path("main"))
    assert container.meta.display_name == "Main Wallet"


def test_default_wallet_dir(app_home, fast_config):
    manager = WalletManager(config=fast_config)
    assert manager.wallet_dir == app_home / "wallets"
    assert manager.wallet_dir.is_dir()
