import pytest

from wallet import SecretBuffer, Wallet, WalletLocked, WalletSession
from conftest import TEST_MNEMONIC


@pytest.fixture
def wallet() -> Wallet:
    return Wallet.new_from_mnemonic(TEST_MNEMONIC, 2)


def test_secret_buffer_wipes_on_exit():
    with SecretBuffer(b"\x01\x02\x03") as buf:
        assert bytes(buf) == b"\x01\x02\x03"
        assert len(buf) == 3
        assert not buf.wiped
    assert buf.wiped
    assert bytes(buf) == b"\x00\x00\x00"


def test_secret_buffer_wipes_on_error():
    with pytest.raises(RuntimeError):
        with SecretBuffer(b"\xff" * 8) as buf:
            raise RuntimeError("boom")
    assert buf.wiped


def test_secret_buffer_repr_hides_contents():
    assert "ab" not in repr(SecretBuffer(b"\xab"))


def test_session_signs_with_account_keys(wallet):
    with WalletSession(wallet) as session:
        assert session.unlocked
        signature = session.sign(1, b"payload")
        assert wallet.accounts[1].verify(signature, b"payload")
        assert session.public_key(0) == wallet.accounts[0].public_key


def test_session_locks_on_exit(wallet):
    with WalletSession(wallet) as session:
        buffers = list(session._private_seeds)
        assert not any(buf.wiped for buf in buffers)
    assert not session.unlocked
    assert all(buf.wiped for buf in buffers)
    with pytest.raises(WalletLocked):
        session.sign(0, b"payload")
    with pytest.raises(WalletLocked):
        session.wallet


def test_lock_is_idempotent(wallet):
    session = WalletSession(wallet)
    session.lock()
    session.lock()
    assert not session.unlocked


def test_session_locks_when_body_raises(wallet):
    with pytest.raises(ValueError):
        with WalletSession(wallet) as session:
            raise ValueError("caller error")
    assert not session.unlocked


def test_session_rejects_unknown_account(wallet):
    with WalletSession(wallet) as session:
        with pytest.raises(IndexError):
            session.sign(5, b"payload")
