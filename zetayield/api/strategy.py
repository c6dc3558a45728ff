import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, HTTPException

from ..config import settings
from ..core.compiler import get_plan_assembler
from ..core.errors import CompilationError, RpcReadFailure
from ..core.tracking import get_cctx_tracker
from ..types.strategy import PrepareStrategyRequest, TrackCctxRequest

router = APIRouter(prefix="/api/strategy")

logger = logging.getLogger(__name__)


@router.post("/prepare")
async def prepare_strategy(request: PrepareStrategyRequest) -> Dict[str, Any]:
    try:
        plan = await get_plan_assembler().build(request.steps, request.address)
    except CompilationError as exc:
        raise HTTPException(status_code=400, detail=exc.as_dict())
    except RpcReadFailure as exc:
        logger.warning("RPC read failed while preparing strategy: %s", exc.message)
        raise HTTPException(status_code=502, detail=exc.as_dict())
    return plan.to_dict()


@router.post("/track")
async def track_strategy_transaction(request: TrackCctxRequest) -> Dict[str, Any]:
    timeout = request.timeout_seconds
    if timeout is None:
        timeout = settings.cctx_default_track_timeout_seconds
    try:
        result = await get_cctx_tracker().track(request.hash, timeout)
    except httpx.HTTPError as exc:
        logger.warning("CCTX lookup failed for %s: %s", request.hash, exc)
        raise HTTPException(status_code=502, detail=f"CCTX lookup failed: {exc}")
    return result.to_dict()
