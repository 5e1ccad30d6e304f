"""Conversions between caller-friendly numbers and field elements.

Anything "BigNumberish" may be passed where a field element is expected:
an ``int``, a ``0x``-prefixed hex string, or a decimal string.
"""

from __future__ import annotations
from typing import Iterable, Union

from web3 import Web3

from starkaccount.constants import FIELD_PRIME
from starkaccount.errors import EncodingError

BigNumberish = Union[int, str]


def is_hex_string(value: str) -> bool:
    return value[:2].lower() == "0x"


def is_decimal_string(value: str) -> bool:
    return value.isascii() and value.isdigit()


def to_int(value: BigNumberish) -> int:
    """Parse a BigNumberish into a Python int (no range check)."""
    if isinstance(value, bool):
        raise EncodingError(f"Booleans are not valid field elements: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if is_hex_string(text):
                return Web3.to_int(hexstr=text)
            if is_decimal_string(text):
                return int(text)
        except ValueError as e:
            raise EncodingError(f"Malformed number {value!r}: {e}") from e
        raise EncodingError(f"Not a hex or decimal number: {value!r}")
    raise EncodingError(
        f"Cannot convert {type(value).__name__} to a field element: {value!r}"
    )


def to_felt(value: BigNumberish) -> int:
    """Parse a BigNumberish and check it lies in [0, FIELD_PRIME)."""
    number = to_int(value)
    if not 0 <= number < FIELD_PRIME:
        raise EncodingError(f"Value {value!r} is outside the field range")
    return number


def to_hex(value: BigNumberish) -> str:
    return Web3.to_hex(to_int(value))


def to_decimal_strings(values: Iterable[BigNumberish]) -> list[str]:
    """Render values the way the gateway expects calldata and signatures."""
    return [str(to_felt(v)) for v in values]
