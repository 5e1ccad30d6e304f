"""YAML configuration loading for starkaccount."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from starkaccount.constants import (
    ALPHA_GOERLI_URL,
    ALPHA_MAINNET_URL,
    DEFAULT_NETWORK,
    DEFAULT_REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)

NETWORK_URLS = {
    "alpha-goerli": ALPHA_GOERLI_URL,
    "alpha-mainnet": ALPHA_MAINNET_URL,
}


@dataclass
class NetworkConfig:
    name: str = DEFAULT_NETWORK
    gateway_url: Optional[str] = None
    feeder_gateway_url: Optional[str] = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class AccountConfig:
    address: Optional[str] = None


@dataclass
class StarkAccountConfig:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    account: AccountConfig = field(default_factory=AccountConfig)
    log_level: str = "INFO"


def load_config(path: Path) -> StarkAccountConfig:
    """Load configuration from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = StarkAccountConfig()

    if "network" in raw:
        n = raw["network"]
        config.network = NetworkConfig(
            name=n.get("name", DEFAULT_NETWORK),
            gateway_url=n.get("gateway_url"),
            feeder_gateway_url=n.get("feeder_gateway_url"),
            timeout=float(n.get("timeout", DEFAULT_REQUEST_TIMEOUT)),
        )

    if "account" in raw:
        config.account = AccountConfig(address=raw["account"].get("address"))

    config.log_level = raw.get("log_level", "INFO")
    return config


def get_base_url(config: NetworkConfig) -> str:
    """Resolve the gateway host from the network name."""
    if config.name not in NETWORK_URLS:
        logger.warning("Unknown network '%s', falling back to %s",
                       config.name, DEFAULT_NETWORK)
    return NETWORK_URLS.get(config.name, NETWORK_URLS[DEFAULT_NETWORK])


def get_gateway_url(config: NetworkConfig) -> str:
    if config.gateway_url:
        return config.gateway_url
    return f"{get_base_url(config)}/gateway"


def get_feeder_gateway_url(config: NetworkConfig) -> str:
    if config.feeder_gateway_url:
        return config.feeder_gateway_url
    return f"{get_base_url(config)}/feeder_gateway"
