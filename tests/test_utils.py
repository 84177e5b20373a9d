import binascii
from typing import Any
from typing import Mapping
from typing import Type

import pytest

from ihexrec.utils import HEX_DIGITS
from ihexrec.utils import hexlify
from ihexrec.utils import parse_int
from ihexrec.utils import unhex_pair
from ihexrec.utils import unhexlify

PARSE_INT_PASS: Mapping[Any, int] = {
    None: None,

    '123': 123,
    ' 123 ': 123,
    '\t123\t': 123,
    '+123': 123,
    '-123': -123,
    ' - 123 ': -123,

    '0xDEADBEEF': 0xDEADBEEF,
    '0XDEADBEEF': 0xDEADBEEF,
    'DEADBEEFh': 0xDEADBEEF,
    'DEADBEEFH': 0xDEADBEEF,

    '0b101100111000': 0b101100111000,

    '01234567': 0o1234567,
    '0o1234567': 0o1234567,

    '1k': 2**10,
    '1 mib': 2**20,
    '1 KB': 10**3,

    b'456': 456,
    123: 123,
    135.7: 135,
}

PARSE_INT_FAIL: Mapping[Any, Type[BaseException]] = {
    Ellipsis: TypeError,
    'x': ValueError,
    '0b1h': ValueError,
    '0o1h': ValueError,
    (1,): TypeError,
}


def test_hexlify_doctest():
    ans_out = hexlify(b'\xAA\xBB\xCC')
    ans_ref = b'AABBCC'
    assert ans_out == ans_ref

    ans_out = hexlify(b'\xAA\xBB\xCC', sep=b' ')
    ans_ref = b'AA BB CC'
    assert ans_out == ans_ref

    ans_out = hexlify(b'\xAA\xBB\xCC', upper=False)
    ans_ref = b'aabbcc'
    assert ans_out == ans_ref


def test_parse_int_doctest():
    assert parse_int('-0xABk') == -175104
    assert parse_int(None) is None
    assert parse_int(123) == 123


def test_parse_int_fail():
    for value_in, raised_exception in PARSE_INT_FAIL.items():
        with pytest.raises(raised_exception):
            parse_int(value_in)


def test_parse_int_pass():
    for value_in, value_out in PARSE_INT_PASS.items():
        assert parse_int(value_in) == value_out


def test_unhex_pair():
    assert unhex_pair('0', '0') == 0x00
    assert unhex_pair('F', 'F') == 0xFF
    assert unhex_pair('f', 'f') == 0xFF
    assert unhex_pair('A', 'f') == 0xAF
    assert unhex_pair('1', '0') == 0x10
    assert unhex_pair('0', '1') == 0x01


def test_unhex_pair_all():
    for high in HEX_DIGITS:
        for low in HEX_DIGITS:
            assert unhex_pair(high, low) == int(high + low, 16)


def test_unhex_pair_raises():
    with pytest.raises(KeyError):
        unhex_pair('G', '0')
    with pytest.raises(KeyError):
        unhex_pair('0', ' ')


def test_unhexlify_doctest():
    ans_out = unhexlify(b'AABBCC')
    ans_ref = b'\xaa\xbb\xcc'
    assert ans_out == ans_ref

    ans_out = unhexlify(b'AA BB CC', delete=...)
    ans_ref = b'\xaa\xbb\xcc'
    assert ans_out == ans_ref

    ans_out = unhexlify(b'AA/BB/CC', delete=b'/')
    ans_ref = b'\xaa\xbb\xcc'
    assert ans_out == ans_ref


def test_unhexlify_raises():
    with pytest.raises(binascii.Error):
        unhexlify(b'ABC')
