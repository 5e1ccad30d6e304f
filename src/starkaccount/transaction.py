"""Assembly of the account's ``execute`` call and the hash it signs."""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from starkaccount.calldata import get_selector_from_name
from starkaccount.constants import EXECUTE_ENTRYPOINT, MAX_BATCH_SIZE
from starkaccount.crypto import compute_hash_on_elements
from starkaccount.errors import EncodingError, UsageError
from starkaccount.number import BigNumberish, to_felt


@dataclass(frozen=True)
class Invocation:
    """A single contract call: target, entrypoint name, and calldata."""

    contract_address: int
    entrypoint: str
    calldata: tuple[int, ...] = ()

    @classmethod
    def create(cls, contract_address: BigNumberish, entrypoint: str,
               calldata: Optional[Sequence[BigNumberish]] = None) -> Invocation:
        """Build an invocation from BigNumberish inputs, range-checking each."""
        if not entrypoint:
            raise EncodingError("Invocation needs an entrypoint name")
        return cls(
            contract_address=to_felt(contract_address),
            entrypoint=entrypoint,
            calldata=tuple(to_felt(v) for v in (calldata or ())),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Invocation:
        try:
            return cls.create(
                data["contract_address"] if "contract_address" in data
                else data["contractAddress"],
                data["entrypoint"],
                data.get("calldata"),
            )
        except KeyError as e:
            raise EncodingError(f"Invocation is missing {e.args[0]!r}") from e

    @property
    def selector(self) -> int:
        return get_selector_from_name(self.entrypoint)


@dataclass
class InvocationsDetails:
    """Optional per-call overrides. ``nonce=None`` means fetch it."""

    nonce: Optional[int] = None


InvocationLike = Union[Invocation, Mapping[str, Any]]


def _coerce(invocation: InvocationLike) -> Invocation:
    if isinstance(invocation, Invocation):
        return invocation
    if isinstance(invocation, Mapping):
        return Invocation.from_dict(invocation)
    raise UsageError(f"Not an invocation: {type(invocation).__name__}")


def normalize_invocations(invocations: Union[InvocationLike, Sequence[InvocationLike]],
                          abis: Sequence[Any] = ()) -> Invocation:
    """Return the single invocation to wrap, rejecting batches."""
    if isinstance(invocations, (Invocation, Mapping)):
        batch = [invocations]
    else:
        batch = list(invocations)
    if len(batch) != MAX_BATCH_SIZE:
        raise UsageError(
            f"Only {MAX_BATCH_SIZE} invocation per execute() is supported, "
            f"got {len(batch)}"
        )
    if abis and len(abis) != len(batch):
        raise UsageError(
            f"ABI must be provided for each invocation or none, "
            f"got {len(abis)} for {len(batch)}"
        )
    return _coerce(batch[0])


def build_execute_calldata(invocation: Invocation, nonce: int) -> list[int]:
    """Outer calldata: [to, selector, len(calldata), *calldata, nonce]."""
    return [
        invocation.contract_address,
        invocation.selector,
        len(invocation.calldata),
        *invocation.calldata,
        to_felt(nonce),
    ]


def hash_execute_transaction(account_address: BigNumberish,
                             invocation: Invocation, nonce: BigNumberish) -> int:
    """Hash bound to (account, to, selector, calldata, nonce).

    ``compute_hash_on_elements`` folds the element count in last, so the
    five-element schema is part of the digest.
    """
    calldata_hash = compute_hash_on_elements(invocation.calldata)
    return compute_hash_on_elements([
        to_felt(account_address),
        invocation.contract_address,
        invocation.selector,
        calldata_hash,
        to_felt(nonce),
    ])


def build_execute_invocation(account_address: BigNumberish,
                             invocation: Invocation, nonce: int) -> Invocation:
    """The call actually submitted: the account's own execute entrypoint."""
    return Invocation(
        contract_address=to_felt(account_address),
        entrypoint=EXECUTE_ENTRYPOINT,
        calldata=tuple(build_execute_calldata(invocation, nonce)),
    )
