"""Async client for ZetaChain's crosschain CCTX lookup endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings


NOT_FOUND_STATUSES = (400, 404)


@dataclass(frozen=True)
class HttpClientConfig:
    """Per-client HTTP settings. Passed explicitly, never read from process env at call time."""

    base_url: str
    timeout_s: float = 10.0
    proxy: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "HttpClientConfig":
        return cls(
            base_url=settings.zeta_testnet_api_url,
            timeout_s=settings.cctx_request_timeout_seconds,
            proxy=settings.cctx_proxy_url,
        )


class CctxProvider:
    """Thin wrapper around the ``zeta-chain/crosschain`` LCD endpoints."""

    def __init__(
        self,
        config: Optional[HttpClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or HttpClientConfig.from_settings()
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "ZetaYieldCctxClient/0.1",
        }

    async def _get(self, path: str) -> Optional[Dict[str, Any]]:
        """GET ``path``; ``None`` when the registry reports the hash as unknown."""

        client_kwargs: Dict[str, Any] = {
            "base_url": self.config.base_url.rstrip("/"),
            "timeout": self.config.timeout_s,
            "headers": self._headers(),
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        elif self.config.proxy:
            client_kwargs["proxy"] = self.config.proxy

        async with httpx.AsyncClient(**client_kwargs) as client:
            response = await client.get(path)
            if response.status_code in NOT_FOUND_STATUSES:
                return None
            response.raise_for_status()
            return response.json()

    async def cctxs_by_inbound_hash(self, tx_hash: str) -> List[Dict[str, Any]]:
        """All CCTX records created by an inbound (source chain) transaction."""

        data = await self._get(f"/zeta-chain/crosschain/inboundHashToCctxData/{tx_hash}")
        cctxs = (data or {}).get("CrossChainTxs")
        return cctxs if isinstance(cctxs, list) else []

    async def cctx_by_hash(self, cctx_hash: str) -> Optional[Dict[str, Any]]:
        """A single CCTX looked up by its own index hash."""

        data = await self._get(f"/zeta-chain/crosschain/cctx/{cctx_hash}")
        cctx = (data or {}).get("CrossChainTx")
        return cctx if isinstance(cctx, dict) else None
