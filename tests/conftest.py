"""Shared pytest fixtures for starkaccount tests."""

import copy

import pytest

from starkaccount.account import Account
from starkaccount.signer import KeyPair

from stub_provider import StubProvider

TEST_PRIVATE_KEY = 0x3C1E9550E66958296D11B60F8E8E7A7AD990D07FA65D5F7652C4A6C87D4E3CC
OTHER_PRIVATE_KEY = 0x1234567890ABCDEF1234567890ABCDEF
ACCOUNT_ADDRESS = 0x33F45F07E1BD1A51B45FC24EC8C8C9908DB9E42191BE9E169BFCAC0C0D99745

MAIL_TYPED_DATA = {
    "types": {
        "StarkNetDomain": [
            {"name": "name", "type": "felt"},
            {"name": "version", "type": "felt"},
            {"name": "chainId", "type": "felt"},
        ],
        "Person": [
            {"name": "name", "type": "felt"},
            {"name": "wallet", "type": "felt"},
        ],
        "Mail": [
            {"name": "from", "type": "Person"},
            {"name": "to", "type": "Person"},
            {"name": "contents", "type": "felt"},
        ],
    },
    "primaryType": "Mail",
    "domain": {"name": "StarkNet Mail", "version": "1", "chainId": 1},
    "message": {
        "from": {
            "name": "Cow",
            "wallet": "0xCD2a3d9F938E13CD947Ec05AbC7FE734Df8DD826",
        },
        "to": {
            "name": "Bob",
            "wallet": "0xbBbBBBBbbBBBbbbBbbBbbbbBBbBbbbbBbBbbBBbB",
        },
        "contents": "Hello, Bob!",
    },
}


@pytest.fixture
def key_pair():
    return KeyPair(TEST_PRIVATE_KEY)


@pytest.fixture
def provider():
    return StubProvider(nonce=5)


@pytest.fixture
def account(provider, key_pair):
    return Account(provider, ACCOUNT_ADDRESS, key_pair)


@pytest.fixture
def mail_typed_data():
    """Fresh deep copy so tests can mutate it freely."""
    return copy.deepcopy(MAIL_TYPED_DATA)
