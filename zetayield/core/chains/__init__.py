"""Chain registry and ABI encoding helpers."""

from .registry import (
    ChainTag,
    ChainContracts,
    NativeCurrency,
    Zrc20Token,
    ZETA_TESTNET_CHAIN_ID,
    SEPOLIA_CHAIN_ID,
    BSC_TESTNET_CHAIN_ID,
    CONTRACTS,
    ZRC20_TOKENS,
    ZERO_ADDRESS,
    chain_id_for,
    chain_tag_for,
    contracts_for,
    native_currency_for,
    resolve_zrc20,
    wallet_chain_params,
)

__all__ = [
    "ChainTag",
    "ChainContracts",
    "NativeCurrency",
    "Zrc20Token",
    "ZETA_TESTNET_CHAIN_ID",
    "SEPOLIA_CHAIN_ID",
    "BSC_TESTNET_CHAIN_ID",
    "CONTRACTS",
    "ZRC20_TOKENS",
    "ZERO_ADDRESS",
    "chain_id_for",
    "chain_tag_for",
    "contracts_for",
    "native_currency_for",
    "resolve_zrc20",
    "wallet_chain_params",
]
