"""STARK-curve primitives used by the signing core.

Thin facade over ``starknet_py.hash.utils`` (Pedersen hash and the curve's
ECDSA with RFC 6979 nonces). Range checks live here so the rest of the
package sees ``SigningError`` / ``EncodingError`` instead of library errors.
"""

from __future__ import annotations
from typing import Sequence

from starknet_py.hash.utils import (
    compute_hash_on_elements as _compute_hash_on_elements,
    message_signature,
    pedersen_hash as _pedersen_hash,
    private_to_stark_key,
    verify_message_signature,
)

from starkaccount.constants import EC_ORDER, FIELD_PRIME, MAX_SIGNABLE_HASH
from starkaccount.errors import EncodingError, SigningError

Signature = tuple[int, int]


def _check_felt(value: int) -> int:
    if not 0 <= value < FIELD_PRIME:
        raise EncodingError(f"Value {value:#x} is outside the field range")
    return value


def pedersen_hash(left: int, right: int) -> int:
    return _pedersen_hash(_check_felt(left), _check_felt(right))


def compute_hash_on_elements(elements: Sequence[int]) -> int:
    """Chain Pedersen over the elements starting from 0, then fold in the count."""
    return _compute_hash_on_elements([_check_felt(e) for e in elements])


def get_public_key(private_key: int) -> int:
    """Return the stark key (x coordinate of private_key * G)."""
    if not 1 <= private_key < EC_ORDER:
        raise SigningError("Private key is outside the curve's scalar range")
    return private_to_stark_key(private_key)


def sign(msg_hash: int, private_key: int) -> Signature:
    """Sign a hash with a deterministic (RFC 6979) nonce."""
    if not 0 <= msg_hash < MAX_SIGNABLE_HASH:
        raise SigningError(f"Hash {msg_hash:#x} is outside the signable range")
    if not 1 <= private_key < EC_ORDER:
        raise SigningError("Private key is outside the curve's scalar range")
    r, s = message_signature(msg_hash, private_key)
    return r, s


def verify_signature(msg_hash: int, signature: Sequence[int], public_key: int) -> bool:
    """Check the ECDSA equation. Malformed input verifies as False."""
    if len(signature) != 2:
        return False
    r, s = signature
    if not 0 <= msg_hash < MAX_SIGNABLE_HASH:
        return False
    if not 0 <= public_key < FIELD_PRIME:
        return False
    # r must be a valid x coordinate and s a nonzero scalar
    if not (1 <= r < MAX_SIGNABLE_HASH and 1 <= s < EC_ORDER):
        return False
    try:
        return verify_message_signature(msg_hash, [r, s], public_key)
    except ValueError:
        return False
