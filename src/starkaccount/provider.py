"""Provider capability and a StarkNet gateway implementation of it.

The account only needs two operations from the network: a read-only
``call_contract`` and a state-changing ``invoke_function``. Anything
implementing ``ProviderInterface`` can back an ``Account``; ``GatewayProvider``
talks to the StarkNet feeder gateway / gateway over HTTP.
"""

from __future__ import annotations
import logging
from typing import Any, Optional, Protocol, Union

import httpx
from pydantic import BaseModel, ValidationError

from starkaccount.constants import (
    DEFAULT_BLOCK_ID,
    DEFAULT_REQUEST_TIMEOUT,
    INVOKE_FUNCTION_TX_TYPE,
)
from starkaccount.crypto import Signature
from starkaccount.errors import ContractReadError, NetworkError
from starkaccount.number import to_decimal_strings, to_hex
from starkaccount.transaction import Invocation

logger = logging.getLogger(__name__)

BlockId = Union[int, str]


class CallContractResponse(BaseModel):
    result: list[str]


class AddTransactionResponse(BaseModel):
    code: str
    transaction_hash: str
    address: Optional[str] = None


class TransactionStatusResponse(BaseModel):
    tx_status: str
    block_hash: Optional[str] = None
    tx_failure_reason: Optional[dict[str, Any]] = None


class ProviderInterface(Protocol):
    """What an ``Account`` needs from the network.

    Implementations report failures as ``NetworkError`` (transport, timeouts,
    rejected submissions) or ``ContractReadError`` (the contract call itself
    failed). Other exceptions are not caught by the account and propagate out
    of verification.
    """

    async def call_contract(self, invocation: Invocation,
                            block_id: Optional[BlockId] = None) -> CallContractResponse:
        ...

    async def invoke_function(self, invocation: Invocation,
                              signature: Signature) -> AddTransactionResponse:
        ...


def _invocation_body(invocation: Invocation, signature: Signature = ()) -> dict:
    return {
        "contract_address": to_hex(invocation.contract_address),
        "entry_point_selector": to_hex(invocation.selector),
        "calldata": to_decimal_strings(invocation.calldata),
        "signature": to_decimal_strings(signature),
    }


def _error_details(response: httpx.Response) -> tuple[Optional[str], str]:
    """Extract the gateway's (code, message) from an error response."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return None, str(body)
    return body.get("code"), body.get("message", str(body))


class GatewayProvider:
    """StarkNet feeder gateway + gateway client.

    Transport failures and timeouts raise ``NetworkError``. A gateway error
    response to a read call raises ``ContractReadError``. Nothing is retried.
    """

    def __init__(self, base_url: str,
                 feeder_gateway_url: Optional[str] = None,
                 gateway_url: Optional[str] = None,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None):
        base_url = base_url.rstrip("/")
        self.feeder_gateway_url = (feeder_gateway_url or f"{base_url}/feeder_gateway").rstrip("/")
        self.gateway_url = (gateway_url or f"{base_url}/gateway").rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> GatewayProvider:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

    @staticmethod
    def _parse(model: type[BaseModel], response: httpx.Response):
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise NetworkError(f"Unexpected gateway response: {e}") from e

    async def call_contract(self, invocation: Invocation,
                            block_id: Optional[BlockId] = None) -> CallContractResponse:
        url = f"{self.feeder_gateway_url}/call_contract"
        block = DEFAULT_BLOCK_ID if block_id is None else block_id
        logger.debug("call_contract %s on %#x", invocation.entrypoint,
                     invocation.contract_address)
        response = await self._request(
            "POST", url, params={"blockId": block}, json=_invocation_body(invocation),
        )
        if response.is_error:
            code, message = _error_details(response)
            if code is None and response.status_code >= 500:
                raise NetworkError(
                    f"Feeder gateway error (HTTP {response.status_code}): {message}"
                )
            raise ContractReadError(
                f"Call to {invocation.entrypoint} failed: {message}", code=code,
            )
        return self._parse(CallContractResponse, response)

    async def invoke_function(self, invocation: Invocation,
                              signature: Signature) -> AddTransactionResponse:
        url = f"{self.gateway_url}/add_transaction"
        body = {"type": INVOKE_FUNCTION_TX_TYPE, **_invocation_body(invocation, signature)}
        response = await self._request("POST", url, json=body)
        if response.is_error:
            code, message = _error_details(response)
            raise NetworkError(f"Transaction rejected by gateway: {message}", code=code)
        result = self._parse(AddTransactionResponse, response)
        logger.info("Transaction submitted: %s (%s)", result.transaction_hash, result.code)
        return result

    async def get_transaction_status(self, tx_hash: str) -> TransactionStatusResponse:
        url = f"{self.feeder_gateway_url}/get_transaction_status"
        response = await self._request("GET", url, params={"transactionHash": tx_hash})
        if response.is_error:
            code, message = _error_details(response)
            raise NetworkError(f"Status lookup failed: {message}", code=code)
        return self._parse(TransactionStatusResponse, response)
