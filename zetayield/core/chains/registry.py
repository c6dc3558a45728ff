"""Static contract addresses and chain metadata for ZetaChain athens and its connected testnets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..errors import UnsupportedAsset, UnsupportedChain


class ChainTag(str, Enum):
    """Chain identifiers used by strategy steps."""

    ETH = "ETH"
    BSC = "BSC"
    SOLANA = "Solana"
    ZETACHAIN = "ZetaChain"


ZETA_TESTNET_CHAIN_ID = 7001
SEPOLIA_CHAIN_ID = 11155111
BSC_TESTNET_CHAIN_ID = 97

# Solana is intentionally absent: there is no EVM calldata path for it.
CHAIN_IDS: Dict[ChainTag, int] = {
    ChainTag.ETH: SEPOLIA_CHAIN_ID,
    ChainTag.BSC: BSC_TESTNET_CHAIN_ID,
    ChainTag.ZETACHAIN: ZETA_TESTNET_CHAIN_ID,
}

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Gas budget forwarded with revert options on deposits and withdrawals.
REVERT_GAS_LIMIT = 200_000


@dataclass(frozen=True)
class ChainContracts:
    """Entry/exit contracts deployed on one chain."""

    gateway: str
    router: Optional[str] = None


CONTRACTS: Dict[ChainTag, ChainContracts] = {
    ChainTag.ZETACHAIN: ChainContracts(
        gateway="0x6c533f7fe93fae114d0954697069df33c9b74fd7",
        router="0x2ca7d64a7efe2d62a725e2b35cf7230d6677ffee",
    ),
    ChainTag.ETH: ChainContracts(gateway="0x0c487a766110c85d301d96e33579c5b317fa4995"),
    ChainTag.BSC: ChainContracts(gateway="0x0c487a766110c85d301d96e33579c5b317fa4995"),
}


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


# Native gas currency of each connected chain; bridge deposits move this asset.
NATIVE_CURRENCIES: Dict[ChainTag, NativeCurrency] = {
    ChainTag.ETH: NativeCurrency(name="Sepolia ETH", symbol="ETH"),
    ChainTag.BSC: NativeCurrency(name="tBNB", symbol="BNB"),
    ChainTag.ZETACHAIN: NativeCurrency(name="ZETA", symbol="ZETA"),
}


@dataclass(frozen=True)
class Zrc20Token:
    """A ZRC20 wrapper living on ZetaChain for a connected chain's asset."""

    symbol: str
    address: str
    decimals: int
    foreign_chain: ChainTag
    aliases: Tuple[str, ...] = field(default_factory=tuple)


ZRC20_TOKENS: Dict[str, Zrc20Token] = {
    "ETH.ETHSEP": Zrc20Token(
        symbol="ETH.ETHSEP",
        address="0x05ba149a7bd6dc1f937fa9046a9e05c05f3b18b0",
        decimals=18,
        foreign_chain=ChainTag.ETH,
        aliases=("zrc20-eth", "eth", "eth.sepolia", "seth"),
    ),
    "BNB.BSC": Zrc20Token(
        symbol="BNB.BSC",
        address="0xd97b1de3619ed2c6beb3860147e30ca8a7dc9891",
        decimals=18,
        foreign_chain=ChainTag.BSC,
        aliases=("zrc20-bnb", "bnb", "tbnb"),
    ),
}

ZRC20_ALIAS_TO_SYMBOL: Dict[str, str] = {
    alias: symbol
    for symbol, token in ZRC20_TOKENS.items()
    for alias in (symbol.lower(), *token.aliases)
}

# Payloads for wallet_addEthereumChain; rpc urls are filled from settings.
WALLET_CHAIN_METADATA: Dict[ChainTag, Dict[str, Any]] = {
    ChainTag.ETH: {
        "chainName": "Sepolia Testnet",
        "blockExplorerUrls": ["https://sepolia.etherscan.io"],
        "rpc_setting": "sepolia_rpc_url",
    },
    ChainTag.BSC: {
        "chainName": "BSC Testnet",
        "blockExplorerUrls": ["https://testnet.bscscan.com"],
        "rpc_setting": "bsc_testnet_rpc_url",
    },
    ChainTag.ZETACHAIN: {
        "chainName": "ZetaChain Athens Testnet",
        "blockExplorerUrls": ["https://athens.explorer.zetachain.com"],
        "rpc_setting": "zetachain_rpc_url",
    },
}


def _coerce_tag(chain: ChainTag | str) -> ChainTag:
    if isinstance(chain, ChainTag):
        return chain
    try:
        return ChainTag(chain)
    except ValueError:
        raise UnsupportedChain(f"Unknown chain: {chain}") from None


def chain_id_for(chain: ChainTag | str) -> int:
    """Map a chain tag to its numeric EVM chain id."""

    tag = _coerce_tag(chain)
    chain_id = CHAIN_IDS.get(tag)
    if chain_id is None:
        raise UnsupportedChain(f"Unsupported chain for tx preparation: {tag.value}")
    return chain_id


def chain_tag_for(chain_id: int) -> ChainTag:
    for tag, candidate in CHAIN_IDS.items():
        if candidate == chain_id:
            return tag
    raise UnsupportedChain(f"Unsupported chain id: {chain_id}")


def contracts_for(chain: ChainTag | str) -> ChainContracts:
    tag = _coerce_tag(chain)
    contracts = CONTRACTS.get(tag)
    if contracts is None:
        raise UnsupportedChain(f"No contracts registered for chain: {tag.value}")
    return contracts


def native_currency_for(chain: ChainTag | str) -> NativeCurrency:
    tag = _coerce_tag(chain)
    currency = NATIVE_CURRENCIES.get(tag)
    if currency is None:
        raise UnsupportedChain(f"No native currency registered for chain: {tag.value}")
    return currency


def resolve_zrc20(symbol: str) -> Zrc20Token:
    """Resolve a user-facing symbol (``ZRC20-ETH``, ``BNB``, ``ETH.ETHSEP``...) to its ZRC20 token."""

    key = (symbol or "").strip().lower()
    canonical = ZRC20_ALIAS_TO_SYMBOL.get(key)
    if canonical is None:
        raise UnsupportedAsset(f"No ZRC20 token registered for asset: {symbol!r}")
    return ZRC20_TOKENS[canonical]


def wallet_chain_params(chain_id: int, rpc_urls: Dict[str, str]) -> Dict[str, Any]:
    """Build the ``wallet_addEthereumChain`` parameter object for a chain id.

    ``rpc_urls`` maps the settings field names referenced in the metadata to URLs.
    """

    tag = chain_tag_for(chain_id)
    meta = WALLET_CHAIN_METADATA[tag]
    currency = NATIVE_CURRENCIES[tag]
    return {
        "chainId": hex(chain_id),
        "chainName": meta["chainName"],
        "rpcUrls": [rpc_urls[meta["rpc_setting"]]],
        "blockExplorerUrls": list(meta["blockExplorerUrls"]),
        "nativeCurrency": {
            "name": currency.name,
            "symbol": currency.symbol,
            "decimals": currency.decimals,
        },
    }


__all__ = [
    "ChainTag",
    "ChainContracts",
    "NativeCurrency",
    "Zrc20Token",
    "ZETA_TESTNET_CHAIN_ID",
    "SEPOLIA_CHAIN_ID",
    "BSC_TESTNET_CHAIN_ID",
    "CHAIN_IDS",
    "CONTRACTS",
    "NATIVE_CURRENCIES",
    "ZRC20_TOKENS",
    "ZERO_ADDRESS",
    "REVERT_GAS_LIMIT",
    "chain_id_for",
    "chain_tag_for",
    "contracts_for",
    "native_currency_for",
    "resolve_zrc20",
    "wallet_chain_params",
]
