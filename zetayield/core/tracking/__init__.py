"""Cross-chain completion tracking."""

from .models import (
    CCTX_FAILURE_STATUSES,
    CCTX_SUCCESS_STATUSES,
    CctxRecord,
    TrackingResult,
    TrackingStatus,
    classify,
)
from ...providers.cctx import CctxProvider, HttpClientConfig
from .tracker import (
    MIN_TRACK_TIMEOUT_SECONDS,
    CctxSource,
    CctxTracker,
    get_cctx_tracker,
    track_cctx_status,
)

__all__ = [
    "CctxProvider",
    "HttpClientConfig",
    "CCTX_FAILURE_STATUSES",
    "CCTX_SUCCESS_STATUSES",
    "CctxRecord",
    "TrackingResult",
    "TrackingStatus",
    "classify",
    "MIN_TRACK_TIMEOUT_SECONDS",
    "CctxSource",
    "CctxTracker",
    "get_cctx_tracker",
    "track_cctx_status",
]
