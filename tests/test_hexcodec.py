import pytest

from wallet import MalformedHex, decode_hex, encode_hex


@pytest.mark.parametrize("data", [b"", b"\x00", b"\xff\x10\xab", bytes(range(256))])
def test_encode_then_decode_is_identity(data):
    assert decode_hex(encode_hex(data)) == data


def test_encode_is_lowercase():
    assert encode_hex(b"\xab\xcd\xef") == "abcdef"


def test_decode_accepts_upper_and_mixed_case():
    assert decode_hex("ABCDEF") == b"\xab\xcd\xef"
    assert decode_hex("aBcDeF") == b"\xab\xcd\xef"


@pytest.mark.parametrize("text", ["a", "abc", "0"])
def test_decode_rejects_odd_length(text):
    with pytest.raises(MalformedHex):
        decode_hex(text)


@pytest.mark.parametrize("text", ["zz", "0g", "ab cd", " abc", "ab\n", "0x00", "éé"])
def test_decode_rejects_non_hex_characters(text):
    with pytest.raises(MalformedHex):
        decode_hex(text)


@pytest.mark.parametrize("value", [None, 12, b"ab"])
def test_decode_rejects_non_strings(value):
    with pytest.raises(MalformedHex):
        decode_hex(value)


def test_malformed_hex_is_a_value_error():
    with pytest.raises(ValueError):
        decode_hex("xyz0")
