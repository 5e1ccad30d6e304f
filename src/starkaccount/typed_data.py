"""Domain-separated hashing of structured messages ("typed data").

A typed data document looks like::

    {
        "types": {
            "StarkNetDomain": [{"name": "name", "type": "felt"}, ...],
            "Mail": [{"name": "from", "type": "Person"}, ...],
            ...
        },
        "primaryType": "Mail",
        "domain": {"name": "StarkNet Mail", "version": "1", "chainId": 1},
        "message": {...},
    }

Each struct type gets a type hash (the selector of its encoded type string),
and a struct's hash chains the type hash with its encoded field values in
declared field order. The final message hash binds the domain and the
signing account address under the "StarkNet Message" prefix.
"""

from __future__ import annotations
import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from starkaccount.calldata import encode_short_string, get_selector_from_name
from starkaccount.constants import (
    ARRAY_SUFFIX,
    DOMAIN_TYPE_NAME,
    STARKNET_MESSAGE_PREFIX,
)
from starkaccount.crypto import compute_hash_on_elements
from starkaccount.errors import EncodingError
from starkaccount.number import BigNumberish, is_decimal_string, is_hex_string, to_felt

logger = logging.getLogger(__name__)


class StarkNetType(BaseModel):
    """One field declaration inside a struct type."""

    name: str
    type: str


class TypedData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    types: dict[str, list[StarkNetType]]
    primary_type: str = Field(..., alias="primaryType")
    domain: dict[str, Any]
    message: dict[str, Any]


def parse_typed_data(data: TypedData | Mapping[str, Any]) -> TypedData:
    """Accept either a TypedData model or the raw JSON-like mapping."""
    if isinstance(data, TypedData):
        return data
    try:
        typed_data = TypedData.model_validate(data)
    except ValidationError as e:
        raise EncodingError(f"Invalid typed data: {e}") from e
    if DOMAIN_TYPE_NAME not in typed_data.types:
        raise EncodingError(f"Typed data must declare the '{DOMAIN_TYPE_NAME}' type")
    if typed_data.primary_type not in typed_data.types:
        raise EncodingError(
            f"Primary type '{typed_data.primary_type}' is not declared in types"
        )
    return typed_data


def _base_type(type_name: str) -> str:
    return type_name[:-len(ARRAY_SUFFIX)] if type_name.endswith(ARRAY_SUFFIX) else type_name


def get_dependencies(typed_data: TypedData, type_name: str,
                     dependencies: Optional[list[str]] = None) -> list[str]:
    """Return ``type_name`` followed by every struct type it references."""
    if dependencies is None:
        dependencies = []
    type_name = _base_type(type_name)
    if type_name in dependencies or type_name not in typed_data.types:
        return dependencies
    dependencies.append(type_name)
    for field in typed_data.types[type_name]:
        get_dependencies(typed_data, field.type, dependencies)
    return dependencies


def encode_type(typed_data: TypedData, type_name: str) -> str:
    primary, *dependencies = get_dependencies(typed_data, type_name)
    return "".join(
        f"{name}(" + ",".join(f"{f.name}:{f.type}" for f in typed_data.types[name]) + ")"
        for name in [primary, *sorted(dependencies)]
    )


def get_type_hash(typed_data: TypedData, type_name: str) -> int:
    return get_selector_from_name(encode_type(typed_data, type_name))


def _encode_scalar(value: BigNumberish) -> int:
    if isinstance(value, str) and not (is_hex_string(value) or is_decimal_string(value)):
        return encode_short_string(value)
    return to_felt(value)


def encode_value(typed_data: TypedData, type_name: str, value: Any) -> int:
    if type_name in typed_data.types:
        return get_struct_hash(typed_data, type_name, value)
    if type_name.endswith(ARRAY_SUFFIX):
        if not isinstance(value, (list, tuple)):
            raise EncodingError(
                f"Expected a list for '{type_name}', got {type(value).__name__}"
            )
        element_type = _base_type(type_name)
        return compute_hash_on_elements(
            [encode_value(typed_data, element_type, v) for v in value]
        )
    return _encode_scalar(value)


def encode_data(typed_data: TypedData, type_name: str,
                data: Mapping[str, Any]) -> list[int]:
    """Type hash followed by each field's encoded value, in declared order."""
    if not isinstance(data, Mapping):
        raise EncodingError(
            f"Expected an object for struct '{type_name}', got {type(data).__name__}"
        )
    values = [get_type_hash(typed_data, type_name)]
    for field in typed_data.types[type_name]:
        if data.get(field.name) is None:
            raise EncodingError(
                f"Cannot encode data: missing data for '{field.name}' in '{type_name}'"
            )
        values.append(encode_value(typed_data, field.type, data[field.name]))
    return values


def get_struct_hash(typed_data: TypedData, type_name: str,
                    data: Mapping[str, Any]) -> int:
    return compute_hash_on_elements(encode_data(typed_data, type_name, data))


def get_message_hash(typed_data: TypedData | Mapping[str, Any],
                     account_address: BigNumberish) -> int:
    """Final hash a signer approves: prefix, domain, account, message."""
    typed_data = parse_typed_data(typed_data)
    message_hash = compute_hash_on_elements([
        encode_short_string(STARKNET_MESSAGE_PREFIX),
        get_struct_hash(typed_data, DOMAIN_TYPE_NAME, typed_data.domain),
        to_felt(account_address),
        get_struct_hash(typed_data, typed_data.primary_type, typed_data.message),
    ])
    logger.debug("Typed data '%s' hashed to %#x", typed_data.primary_type, message_hash)
    return message_hash
