"""Account façade: execute calls, sign and verify messages for one account.

The account composes a provider (for ``call_contract`` / ``invoke_function``)
with a signer holding the account's key pair. Only the nonce lookup, the
submission and delegated verification touch the network; hashing and
signing are synchronous.

Concurrent ``execute()`` calls on the same account race on the fetched
nonce. Serialize them or pass explicit nonces in ``InvocationsDetails``.
"""

from __future__ import annotations
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from starkaccount.calldata import compile_calldata
from starkaccount.constants import GET_NONCE_ENTRYPOINT, IS_VALID_SIGNATURE_ENTRYPOINT
from starkaccount.crypto import Signature, verify_signature
from starkaccount.errors import (
    ContractReadError,
    NetworkError,
    SigningError,
    StarkAccountError,
)
from starkaccount.number import BigNumberish, to_felt, to_int
from starkaccount.provider import AddTransactionResponse, ProviderInterface
from starkaccount.signer import KeyPair, Signer
from starkaccount.transaction import (
    Invocation,
    InvocationLike,
    InvocationsDetails,
    build_execute_invocation,
    normalize_invocations,
)
from starkaccount.typed_data import TypedData, get_message_hash

logger = logging.getLogger(__name__)

TypedDataLike = Union[TypedData, Mapping[str, Any]]


class Account:
    """An on-chain account contract controlled by a local key pair."""

    def __init__(self, provider: ProviderInterface, address: BigNumberish,
                 key_pair: Optional[KeyPair] = None):
        self.provider = provider
        self.address = to_felt(address)
        # without a key pair the account is watch-only: it can read and verify
        self._signer = Signer(key_pair) if key_pair is not None else None

    @property
    def signer(self) -> Signer:
        if self._signer is None:
            raise SigningError(f"Account {self.address:#x} has no key pair")
        return self._signer

    @property
    def public_key(self) -> int:
        return self.signer.get_public_key()

    async def get_nonce(self) -> int:
        """Read the account's current nonce from its ``get_nonce`` entrypoint."""
        response = await self.provider.call_contract(
            Invocation(contract_address=self.address, entrypoint=GET_NONCE_ENTRYPOINT)
        )
        if not response.result:
            raise ContractReadError(f"get_nonce on {self.address:#x} returned no result")
        return to_int(response.result[0])

    async def execute(self,
                      invocations: Union[InvocationLike, Sequence[InvocationLike]],
                      abis: Sequence[Any] = (),
                      details: Optional[InvocationsDetails] = None) -> AddTransactionResponse:
        """Sign and submit one invocation through the account's ``execute``.

        Raises ``UsageError`` for batches before any network call. Errors from
        the nonce lookup and submission propagate unchanged.
        """
        invocation = normalize_invocations(invocations, abis)
        signer = self.signer
        details = details or InvocationsDetails()

        if details.nonce is None:
            nonce = await self.get_nonce()
            logger.debug("Resolved nonce %d for %#x", nonce, self.address)
        else:
            nonce = to_felt(details.nonce)

        signature = signer.sign_transaction(
            invocation, InvocationsDetails(nonce=nonce), self.address, abis,
        )
        outer = build_execute_invocation(self.address, invocation, nonce)
        logger.info(
            "Submitting execute(%s) on %#x from %#x (nonce=%d)",
            invocation.entrypoint, invocation.contract_address, self.address, nonce,
        )
        return await self.provider.invoke_function(outer, signature)

    def sign_message(self, typed_data: TypedDataLike) -> Signature:
        return self.signer.sign_message(typed_data, self.address)

    def hash_message(self, typed_data: TypedDataLike) -> int:
        return get_message_hash(typed_data, self.address)

    async def verify_message_hash(self, msg_hash: BigNumberish,
                                  signature: Sequence[BigNumberish]) -> bool:
        """Ask the account contract whether ``signature`` is valid for ``msg_hash``.

        Returns False on any failure, including network errors: a rejected
        signature and an unreachable gateway are not distinguished here.
        """
        try:
            calldata = compile_calldata({
                "hash": msg_hash,
                "signature": list(signature),
            })
            await self.provider.call_contract(Invocation(
                contract_address=self.address,
                entrypoint=IS_VALID_SIGNATURE_ENTRYPOINT,
                calldata=tuple(calldata),
            ))
        except NetworkError as e:
            logger.warning("Signature check on %#x could not reach the network: %s",
                           self.address, e)
            return False
        except StarkAccountError as e:
            logger.info("Signature rejected by %#x: %s", self.address, e)
            return False
        return True

    async def verify_message(self, typed_data: TypedDataLike,
                             signature: Sequence[BigNumberish]) -> bool:
        try:
            msg_hash = self.hash_message(typed_data)
        except StarkAccountError as e:
            logger.info("Cannot hash typed data for verification: %s", e)
            return False
        return await self.verify_message_hash(msg_hash, signature)

    def verify_message_hash_locally(self, msg_hash: BigNumberish,
                                    signature: Sequence[BigNumberish]) -> bool:
        """Check the signature against this account's own public key, no I/O.

        Accounts with rotated or multiple keys may accept signatures this
        rejects; ``verify_message_hash`` is authoritative.
        """
        try:
            values = [to_int(v) for v in signature]
            return verify_signature(to_int(msg_hash), values, self.public_key)
        except StarkAccountError:
            return False

    def verify_message_locally(self, typed_data: TypedDataLike,
                               signature: Sequence[BigNumberish]) -> bool:
        try:
            msg_hash = self.hash_message(typed_data)
        except StarkAccountError:
            return False
        return self.verify_message_hash_locally(msg_hash, signature)
