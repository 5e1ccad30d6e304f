"""Tests for calldata compilation, selectors and short strings."""

import pytest

from starkaccount.calldata import (
    compile_calldata,
    decode_array,
    decode_short_string,
    encode_short_string,
    get_selector_from_name,
)
from starkaccount.constants import FIELD_PRIME
from starkaccount.errors import EncodingError


class TestCompileCalldata:
    def test_scalars_in_argument_order(self):
        assert compile_calldata({"to": "0x2", "amount": 100}) == [2, 100]

    def test_array_is_length_prefixed(self):
        assert compile_calldata({"values": [7, 8, 9]}) == [3, 7, 8, 9]

    def test_mixed(self):
        calldata = compile_calldata({"hash": "0x10", "signature": ["1", "2"]})
        assert calldata == [16, 2, 1, 2]

    def test_empty_array(self):
        assert compile_calldata({"a": 1, "b": []}) == [1, 0]

    def test_nested_arrays_get_own_prefix(self):
        assert compile_calldata({"m": [[1, 2], [3]]}) == [2, 2, 1, 2, 1, 3]

    def test_struct_flattened_without_prefix(self):
        args = {"point": {"x": 1, "y": 2}, "tail": 3}
        assert compile_calldata(args) == [1, 2, 3]

    def test_array_of_structs(self):
        args = {"points": [{"x": 1, "y": 2}, {"x": 3, "y": 4}]}
        assert compile_calldata(args) == [2, 1, 2, 3, 4]

    def test_empty_args(self):
        assert compile_calldata({}) == []

    def test_out_of_range_fails(self):
        with pytest.raises(EncodingError):
            compile_calldata({"x": FIELD_PRIME})

    def test_malformed_value_fails(self):
        with pytest.raises(EncodingError):
            compile_calldata({"x": object()})

    def test_non_mapping_fails(self):
        with pytest.raises(EncodingError, match="mapping"):
            compile_calldata([1, 2, 3])


class TestDecodeArray:
    def test_round_trip(self):
        a, b, c = 11, 22, 33
        calldata = compile_calldata({"arr": [a, b, c]})
        assert calldata[0] == 3
        elements, end = decode_array(calldata)
        assert elements == [a, b, c]
        assert end == len(calldata)

    def test_offset(self):
        calldata = compile_calldata({"head": 5, "arr": [1, 2]})
        elements, end = decode_array(calldata, offset=1)
        assert elements == [1, 2]
        assert end == 4

    def test_truncated(self):
        with pytest.raises(EncodingError, match="declares 3 elements"):
            decode_array([3, 1, 2])

    def test_missing_length(self):
        with pytest.raises(EncodingError):
            decode_array([], 0)


class TestSelector:
    def test_transfer(self):
        assert get_selector_from_name("transfer") == (
            0x83AFD3F4CAEDC6EEBF44246FE54E38C95E3179A5EC9EA81740ECA5B482D12E
        )

    def test_default_entrypoints_are_zero(self):
        assert get_selector_from_name("__default__") == 0
        assert get_selector_from_name("__l1_default__") == 0

    def test_fits_in_250_bits(self):
        for name in ("execute", "get_nonce", "is_valid_signature"):
            assert get_selector_from_name(name) < 2**250

    def test_deterministic_and_distinct(self):
        assert get_selector_from_name("execute") == get_selector_from_name("execute")
        assert get_selector_from_name("execute") != get_selector_from_name("get_nonce")


class TestShortString:
    def test_encode(self):
        assert encode_short_string("A") == 0x41
        assert encode_short_string("StarkNet Message") == int.from_bytes(
            b"StarkNet Message", "big"
        )

    def test_decode(self):
        assert decode_short_string(encode_short_string("hello")) == "hello"
        assert decode_short_string(0) == ""

    def test_too_long(self):
        with pytest.raises(EncodingError, match="31"):
            encode_short_string("x" * 32)

    def test_max_length_ok(self):
        assert encode_short_string("x" * 31) < FIELD_PRIME

    def test_non_ascii(self):
        with pytest.raises(EncodingError):
            encode_short_string("héllo")
