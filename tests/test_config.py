import json
import logging

import pytest

from wallet import Wallet, WalletConfig, load_config
from conftest import TEST_MNEMONIC


def test_defaults():
    config = WalletConfig()
    assert config.max_accounts_per_wallet == 1024
    assert config.entropy_bits == 256
    assert config.default_display_name == "Main Wallet"
    assert config.kdf == "PBKDF2"
    assert config.kdf_iterations >= config.min_iterations_for("PBKDF2")
    assert config.min_iterations_for("UNKNOWN") == 0


def test_missing_settings_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.json") == WalletConfig()


def test_default_settings_path(app_home):
    (app_home / "settings.json").write_text(json.dumps({"wallet": {"entropy_bits": 128}}))
    assert load_config().entropy_bits == 128


def test_settings_override(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "theme": "dark",
        "wallet": {"max_accounts_per_wallet": 10, "default_display_name": "Cold"},
    }))
    config = load_config(path)
    assert config.max_accounts_per_wallet == 10
    assert config.default_display_name == "Cold"
    assert config.kdf_iterations == WalletConfig().kdf_iterations


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"wallet": {"bogus": 1, "entropy_bits": 160}}))
    with caplog.at_level(logging.WARNING):
        config = load_config(path)
    assert config.entropy_bits == 160
    assert "bogus" in caplog.text


def test_unreadable_settings_fall_back(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{broken")
    with caplog.at_level(logging.WARNING):
        assert load_config(path) == WalletConfig()
    assert "Failed to load wallet settings" in caplog.text

    path.write_text(json.dumps({"wallet": ["not", "a", "dict"]}))
    assert load_config(path) == WalletConfig()


def test_injected_config_reaches_wallet():
    config = WalletConfig(default_display_name="Injected", max_accounts_per_wallet=3)
    wallet = Wallet.new_from_mnemonic(TEST_MNEMONIC, 3, config=config)
    assert wallet.meta.display_name == "Injected"
    assert wallet.config is config


@pytest.mark.parametrize("section", [
    {"max_accounts_per_wallet": "10"},
    {"max_accounts_per_wallet": True},
    {"kdf_iterations": 210000.0},
    {"default_display_name": 7},
    {"min_kdf_iterations": [100000]},
    {"min_kdf_iterations": {"PBKDF2": "100000"}},
])
def test_mistyped_settings_fall_back(tmp_path, caplog, section):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"wallet": section}))
    with caplog.at_level(logging.WARNING):
        config = load_config(path)
    assert config == WalletConfig()
    assert "Failed to load wallet settings" in caplog.text

    # The defaults it falls back to are usable
    assert len(Wallet.new_from_mnemonic(TEST_MNEMONIC, 1, config=config).accounts) == 1
