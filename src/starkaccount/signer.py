"""Key pair and signer for account-held STARK keys.

The key pair is supplied by the caller; nothing here generates, derives,
or persists keys.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Mapping, Sequence, Union

from starkaccount import crypto
from starkaccount.crypto import Signature
from starkaccount.errors import SigningError
from starkaccount.number import BigNumberish, to_int
from starkaccount.transaction import (
    InvocationLike,
    InvocationsDetails,
    hash_execute_transaction,
    normalize_invocations,
)
from starkaccount.typed_data import TypedData, get_message_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPair:
    private_key: int = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.private_key, int) or isinstance(self.private_key, bool):
            raise SigningError("Private key must be an integer")

    @classmethod
    def from_private_key(cls, private_key: BigNumberish) -> KeyPair:
        return cls(to_int(private_key))

    @cached_property
    def public_key(self) -> int:
        return crypto.get_public_key(self.private_key)


class Signer:
    """Signs transaction hashes and typed messages with one key pair."""

    def __init__(self, key_pair: KeyPair):
        self._key_pair = key_pair

    def get_public_key(self) -> int:
        return self._key_pair.public_key

    def sign_hash(self, msg_hash: BigNumberish) -> Signature:
        """Sign an already-computed hash. Same key + same hash -> same (r, s)."""
        return crypto.sign(to_int(msg_hash), self._key_pair.private_key)

    def sign_transaction(self,
                         invocations: Union[InvocationLike, Sequence[InvocationLike]],
                         details: InvocationsDetails,
                         account_address: BigNumberish,
                         abis: Sequence[Any] = ()) -> Signature:
        """Sign the execute hash for a single invocation.

        ``details.nonce`` must already be resolved.
        """
        invocation = normalize_invocations(invocations, abis)
        if details.nonce is None:
            raise SigningError("Cannot sign a transaction without a nonce")
        nonce = to_int(details.nonce)
        tx_hash = hash_execute_transaction(account_address, invocation, nonce)
        logger.debug(
            "Signing execute of %s on %#x (nonce=%d, hash=%#x)",
            invocation.entrypoint, invocation.contract_address, nonce, tx_hash,
        )
        return self.sign_hash(tx_hash)

    def sign_message(self, typed_data: Union[TypedData, Mapping[str, Any]],
                     account_address: BigNumberish) -> Signature:
        return self.sign_hash(get_message_hash(typed_data, account_address))
