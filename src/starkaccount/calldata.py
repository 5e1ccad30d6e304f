"""Calldata encoding: named arguments -> flat list of field elements.

Convention:
    scalar      -> [value]
    list/tuple  -> [len, *encoded elements]   (nested lists get their own prefix)
    mapping     -> encoded values in insertion order, no prefix (structs)
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Sequence

from web3 import Web3

from starkaccount.constants import (
    DEFAULT_ENTRY_POINT_NAME,
    DEFAULT_ENTRY_POINT_SELECTOR,
    DEFAULT_L1_ENTRY_POINT_NAME,
    MASK_250,
    MAX_SHORT_STRING_LENGTH,
)
from starkaccount.errors import EncodingError
from starkaccount.number import to_felt


def _encode_value(value: Any, out: list[int]) -> None:
    if isinstance(value, Mapping):
        for member in value.values():
            _encode_value(member, out)
    elif isinstance(value, (list, tuple)):
        out.append(len(value))
        for element in value:
            _encode_value(element, out)
    else:
        out.append(to_felt(value))


def compile_calldata(args: Mapping[str, Any]) -> list[int]:
    """Flatten named arguments into calldata, depth-first, in argument order."""
    if not isinstance(args, Mapping):
        raise EncodingError(
            f"Calldata arguments must be a mapping, got {type(args).__name__}"
        )
    out: list[int] = []
    for value in args.values():
        _encode_value(value, out)
    return out


def decode_array(calldata: Sequence[int], offset: int = 0) -> tuple[list[int], int]:
    """Read one length-prefixed array starting at ``offset``.

    Returns (elements, offset just past the array).
    """
    if offset >= len(calldata):
        raise EncodingError(f"No array length at offset {offset}")
    length = calldata[offset]
    start = offset + 1
    end = start + length
    if end > len(calldata):
        raise EncodingError(
            f"Array at offset {offset} declares {length} elements, "
            f"only {len(calldata) - start} available"
        )
    return list(calldata[start:end]), end


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 truncated to 250 bits, so it always fits in a field element."""
    return int.from_bytes(Web3.keccak(data), "big") & MASK_250


def get_selector_from_name(name: str) -> int:
    if name in (DEFAULT_ENTRY_POINT_NAME, DEFAULT_L1_ENTRY_POINT_NAME):
        return DEFAULT_ENTRY_POINT_SELECTOR
    return starknet_keccak(name.encode("utf-8"))


def encode_short_string(text: str) -> int:
    """Pack an ASCII string of at most 31 characters into one field element."""
    if not text.isascii():
        raise EncodingError(f"Short string must be ASCII: {text!r}")
    if len(text) > MAX_SHORT_STRING_LENGTH:
        raise EncodingError(
            f"Short string longer than {MAX_SHORT_STRING_LENGTH} characters: {text!r}"
        )
    return int.from_bytes(text.encode("ascii"), "big")


def decode_short_string(value: int) -> str:
    if value == 0:
        return ""
    data = value.to_bytes((value.bit_length() + 7) // 8, "big")
    if len(data) > MAX_SHORT_STRING_LENGTH:
        raise EncodingError(f"Value {value:#x} is too large to be a short string")
    try:
        return data.decode("ascii")
    except UnicodeDecodeError as e:
        raise EncodingError(f"Value {value:#x} is not an ASCII short string") from e
