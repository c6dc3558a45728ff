"""Read-only JSON-RPC access to ZetaChain contracts."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

import httpx
from eth_abi.exceptions import DecodingError

from ..config import settings
from ..core.chains import abi
from ..core.errors import RpcReadFailure


logger = logging.getLogger(__name__)


class ZetaRpcProvider:
    """Thin ``eth_call`` client against the ZetaChain EVM endpoint."""

    def __init__(
        self,
        *,
        rpc_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url or settings.zetachain_rpc_url
        self.timeout_s = timeout_s or settings.rpc_timeout_seconds
        self._transport = transport

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RpcReadFailure(f"{method} against {self.rpc_url} failed: {exc}") from exc

        if "error" in result:
            raise RpcReadFailure(f"RPC error: {result['error']}")

        return result.get("result")

    async def eth_call(self, to: str, data: str) -> str:
        result = await self._rpc_call("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str) or result in ("0x", ""):
            raise RpcReadFailure(f"eth_call to {to} returned no data")
        return result

    async def withdraw_gas_fee(self, zrc20_address: str) -> Tuple[str, int]:
        """Return ``(gas_token, fee)`` the ZRC20 charges for a withdrawal."""

        raw = await self.eth_call(zrc20_address, abi.encode_call(abi.ZRC20_WITHDRAW_GAS_FEE, []))
        try:
            gas_token, fee = abi.decode_result(["address", "uint256"], raw)
        except (DecodingError, ValueError) as exc:
            raise RpcReadFailure(f"Could not decode withdrawGasFee() from {zrc20_address}: {exc}") from exc

        logger.debug("withdrawGasFee for %s: token=%s fee=%s", zrc20_address, gas_token, fee)
        return gas_token.lower(), int(fee)
