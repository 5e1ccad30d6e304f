"""Tests for execute calldata assembly and transaction hashing."""

import pytest

from starkaccount.calldata import get_selector_from_name
from starkaccount.constants import MAX_BATCH_SIZE
from starkaccount.crypto import compute_hash_on_elements
from starkaccount.errors import EncodingError, UsageError
from starkaccount.transaction import (
    Invocation,
    build_execute_calldata,
    build_execute_invocation,
    hash_execute_transaction,
    normalize_invocations,
)

from conftest import ACCOUNT_ADDRESS


@pytest.fixture
def transfer():
    return Invocation.create("0x1", "transfer", ["0x2", 100])


class TestInvocation:
    def test_create_normalizes(self, transfer):
        assert transfer.contract_address == 1
        assert transfer.calldata == (2, 100)

    def test_calldata_defaults_to_empty(self):
        assert Invocation.create("0x1", "ping").calldata == ()
        assert Invocation(contract_address=1, entrypoint="ping").calldata == ()

    def test_from_dict_camel_case(self):
        inv = Invocation.from_dict(
            {"contractAddress": "0x1", "entrypoint": "transfer", "calldata": ["0x2", 100]}
        )
        assert inv == Invocation.create("0x1", "transfer", ["0x2", 100])

    def test_from_dict_missing_key(self):
        with pytest.raises(EncodingError, match="entrypoint"):
            Invocation.from_dict({"contract_address": "0x1"})

    def test_empty_entrypoint(self):
        with pytest.raises(EncodingError):
            Invocation.create("0x1", "")

    def test_immutable(self, transfer):
        with pytest.raises(AttributeError):
            transfer.entrypoint = "approve"


class TestNormalize:
    def test_single(self, transfer):
        assert normalize_invocations(transfer) is transfer

    def test_list_of_one(self, transfer):
        assert normalize_invocations([transfer]) is transfer

    def test_mapping(self):
        inv = normalize_invocations({"contract_address": 1, "entrypoint": "ping"})
        assert inv.entrypoint == "ping"

    def test_batch_rejected(self, transfer):
        assert MAX_BATCH_SIZE == 1
        with pytest.raises(UsageError, match="got 2"):
            normalize_invocations([transfer, transfer])

    def test_empty_rejected(self):
        with pytest.raises(UsageError):
            normalize_invocations([])

    def test_abi_count_mismatch(self, transfer):
        with pytest.raises(UsageError, match="ABI"):
            normalize_invocations([transfer], abis=[{}, {}])

    def test_matching_abi_ok(self, transfer):
        assert normalize_invocations([transfer], abis=[{}]) is transfer


class TestExecuteCalldata:
    def test_layout(self, transfer):
        assert build_execute_calldata(transfer, 5) == [
            1, get_selector_from_name("transfer"), 2, 2, 100, 5,
        ]

    def test_empty_calldata(self):
        inv = Invocation.create("0x1", "ping")
        assert build_execute_calldata(inv, 0) == [1, get_selector_from_name("ping"), 0, 0]

    def test_outer_invocation(self, transfer):
        outer = build_execute_invocation(ACCOUNT_ADDRESS, transfer, 5)
        assert outer.contract_address == ACCOUNT_ADDRESS
        assert outer.entrypoint == "execute"
        assert list(outer.calldata) == build_execute_calldata(transfer, 5)


class TestTransactionHash:
    def test_schema(self, transfer):
        expected = compute_hash_on_elements([
            ACCOUNT_ADDRESS,
            1,
            get_selector_from_name("transfer"),
            compute_hash_on_elements([2, 100]),
            5,
        ])
        assert hash_execute_transaction(ACCOUNT_ADDRESS, transfer, 5) == expected

    def test_deterministic(self, transfer):
        same = Invocation.create(1, "transfer", [2, "100"])
        assert hash_execute_transaction(ACCOUNT_ADDRESS, transfer, 5) == (
            hash_execute_transaction(hex(ACCOUNT_ADDRESS), same, "0x5")
        )

    @pytest.mark.parametrize("account,contract,entrypoint,calldata,nonce", [
        (ACCOUNT_ADDRESS + 1, "0x1", "transfer", ["0x2", 100], 5),
        (ACCOUNT_ADDRESS, "0x3", "transfer", ["0x2", 100], 5),
        (ACCOUNT_ADDRESS, "0x1", "approve", ["0x2", 100], 5),
        (ACCOUNT_ADDRESS, "0x1", "transfer", ["0x2", 101], 5),
        (ACCOUNT_ADDRESS, "0x1", "transfer", ["0x2", 100, 0], 5),
        (ACCOUNT_ADDRESS, "0x1", "transfer", ["0x2", 100], 6),
    ])
    def test_every_input_is_bound(self, transfer, account, contract, entrypoint,
                                  calldata, nonce):
        base = hash_execute_transaction(ACCOUNT_ADDRESS, transfer, 5)
        other = Invocation.create(contract, entrypoint, calldata)
        assert hash_execute_transaction(account, other, nonce) != base
