from .strategy import (
    SWAP_SEPARATOR,
    PrepareStrategyRequest,
    StepStatus,
    StepType,
    StrategyStep,
    TrackCctxRequest,
)

__all__ = [
    "SWAP_SEPARATOR",
    "PrepareStrategyRequest",
    "StepStatus",
    "StepType",
    "StrategyStep",
    "TrackCctxRequest",
]
