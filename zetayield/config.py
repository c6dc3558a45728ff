from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="auto",
        description="Log renderer: json, console, or auto (console at DEBUG, json otherwise)",
    )

    # ZetaChain RPC
    zetachain_rpc_url: str = Field(
        default="https://zetachain-athens-evm.blockpi.network/v1/rpc/public",
        description="ZetaChain athens EVM JSON-RPC endpoint used for contract reads",
    )
    rpc_timeout_seconds: float = Field(default=15.0, description="Timeout for JSON-RPC reads")

    # Connected chains (surfaced to wallets through wallet_addEthereumChain)
    sepolia_rpc_url: str = Field(default="https://rpc.sepolia.org", description="Sepolia RPC URL")
    bsc_testnet_rpc_url: str = Field(
        default="https://data-seed-prebsc-1-s1.binance.org:8545",
        description="BSC testnet RPC URL",
    )

    # Batch executor (swap + withdraw fusion)
    zetachain_batch_executor: Optional[str] = Field(
        default=None,
        description="Deployed ZetaBatchExecutor address; enables swap+withdraw fusion when set",
        validation_alias=AliasChoices("zetachain_batch_executor", "ZETACHAIN_BATCH_EXECUTOR", "batch_executor_address"),
    )

    # CCTX registry
    zeta_testnet_api_url: str = Field(
        default="https://zetachain-athens.blockpi.network/lcd/v1/public",
        description="Base URL of the ZetaChain LCD API exposing crosschain CCTX lookups",
    )
    cctx_proxy_url: Optional[str] = Field(
        default=None,
        description="Optional HTTP proxy used only for CCTX lookups",
    )
    cctx_request_timeout_seconds: float = Field(default=10.0, description="Per-request timeout for CCTX lookups")
    cctx_poll_interval_seconds: float = Field(default=3.0, gt=0, description="Delay between CCTX polls")
    cctx_default_track_timeout_seconds: int = Field(
        default=120,
        ge=10,
        description="Tracking deadline used when callers do not supply one",
    )

    # Compilation
    strict_step_support: bool = Field(
        default=True,
        description="Fail compilation on steps without an on-chain encoding instead of reporting them as skipped",
    )

    # Execution
    receipt_poll_attempts: int = Field(default=60, ge=1, description="Receipt polls before giving up on a transaction")
    receipt_poll_interval_seconds: float = Field(default=1.0, gt=0, description="Delay between receipt polls")
    bridge_track_timeout_seconds: int = Field(
        default=180,
        ge=10,
        description="Tracking deadline applied to bridge legs during execution",
    )

    @property
    def has_batch_executor(self) -> bool:
        return bool(self.zetachain_batch_executor)


# Global settings instance
settings = Settings()
