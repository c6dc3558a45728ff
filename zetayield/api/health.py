from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Liveness plus the integration points this instance is configured against"""
    return {
        "status": "healthy",
        "zetachain_rpc": settings.zetachain_rpc_url,
        "cctx_api": settings.zeta_testnet_api_url,
        "batch_executor": settings.zetachain_batch_executor,
        "strict_step_support": settings.strict_step_support,
    }
