"""Chain configuration and contract construction."""

import os
from typing import TYPE_CHECKING, Any

from hex_stakes.constants import (
    DEFAULT_PUBLIC_ETH_RPC_URLS,
    DEFAULT_PUBLIC_PULSECHAIN_RPC_URLS,
    HEX_CONTRACT_ADDRESS,
    HEX_MIN_ABI,
)
from hex_stakes.errors import ConfigurationError
from hex_stakes.models import Chain, ChainConfig

if TYPE_CHECKING:
    from web3 import Web3  # pragma: no cover


CHAIN_CONFIGS: dict[Chain, ChainConfig] = {
    Chain.ETHEREUM: ChainConfig(
        chain=Chain.ETHEREUM,
        chain_id=1,
        rpc_env_var="ETH_RPC_URL",
        default_rpc_urls=DEFAULT_PUBLIC_ETH_RPC_URLS,
        contract_address=HEX_CONTRACT_ADDRESS,
    ),
    Chain.PULSECHAIN: ChainConfig(
        chain=Chain.PULSECHAIN,
        chain_id=369,
        rpc_env_var="PULSECHAIN_RPC_URL",
        default_rpc_urls=DEFAULT_PUBLIC_PULSECHAIN_RPC_URLS,
        contract_address=HEX_CONTRACT_ADDRESS,
    ),
}


def parse_chain(name: str) -> Chain:
    """Resolve a chain name given on the command line."""
    try:
        return Chain(name.strip().lower())
    except ValueError as ex:
        valid = ", ".join(c.value for c in Chain)
        raise ConfigurationError(f"Unknown chain {name!r} (expected one of: {valid})") from ex


def rpc_urls(chain: Chain, override: str | None = None) -> tuple[str, ...]:
    """
    RPC URLs to try for `chain`, in order.

    An explicit override wins, then the chain's environment variable, then the public defaults.
    """
    if override:
        return (override,)
    config = CHAIN_CONFIGS[chain]
    env_url = os.getenv(config.rpc_env_var)
    if env_url:
        return (env_url,)
    return config.default_rpc_urls


def hex_contract(w3: "Web3", chain: Chain) -> Any:
    """Build the HEX contract object for `chain`."""
    config = CHAIN_CONFIGS[chain]
    return w3.eth.contract(
        address=w3.to_checksum_address(config.contract_address),
        abi=HEX_MIN_ABI,
    )
