"""Tests for BigNumberish conversions."""

import pytest

from starkaccount.constants import FIELD_PRIME
from starkaccount.errors import EncodingError
from starkaccount.number import to_decimal_strings, to_felt, to_hex, to_int


class TestToInt:
    def test_int_passthrough(self):
        assert to_int(42) == 42

    def test_hex_string(self):
        assert to_int("0x2a") == 42
        assert to_int("0X2A") == 42

    def test_decimal_string(self):
        assert to_int("100") == 100

    def test_whitespace_trimmed(self):
        assert to_int(" 7 ") == 7

    def test_bool_rejected(self):
        with pytest.raises(EncodingError):
            to_int(True)

    def test_float_rejected(self):
        with pytest.raises(EncodingError):
            to_int(1.5)

    def test_garbage_string_rejected(self):
        with pytest.raises(EncodingError):
            to_int("hello")

    def test_negative_string_rejected(self):
        with pytest.raises(EncodingError):
            to_int("-1")

    def test_malformed_hex_rejected(self):
        with pytest.raises(EncodingError):
            to_int("0xzz")

    def test_encoding_error_is_value_error(self):
        with pytest.raises(ValueError):
            to_int(None)


class TestToFelt:
    def test_zero_and_max(self):
        assert to_felt(0) == 0
        assert to_felt(FIELD_PRIME - 1) == FIELD_PRIME - 1

    def test_prime_out_of_range(self):
        with pytest.raises(EncodingError, match="outside the field range"):
            to_felt(FIELD_PRIME)

    def test_negative_out_of_range(self):
        with pytest.raises(EncodingError):
            to_felt(-1)


class TestFormatting:
    def test_to_hex(self):
        assert to_hex(255) == "0xff"
        assert to_hex("10") == "0xa"

    def test_to_decimal_strings(self):
        assert to_decimal_strings(["0x2", 100]) == ["2", "100"]
