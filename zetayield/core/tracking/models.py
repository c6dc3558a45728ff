"""Typed models used by CCTX tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Vocabulary of the hub chain's cctx_status.status field that this tracker acts on.
CCTX_SUCCESS_STATUSES = frozenset({"OutboundMined"})
CCTX_FAILURE_STATUSES = frozenset({"Aborted", "Reverted"})


class TrackingStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class CctxRecord:
    """One cross-chain transaction as reported by the hub chain."""

    index: Optional[str]
    status: Optional[str]
    status_message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "CctxRecord":
        cctx_status = payload.get("cctx_status") or {}
        status = cctx_status.get("status")
        return cls(
            index=payload.get("index"),
            status=status if isinstance(status, str) else None,
            status_message=cctx_status.get("status_message"),
            raw=payload,
        )

    @property
    def is_failure(self) -> bool:
        return self.status in CCTX_FAILURE_STATUSES

    @property
    def is_success(self) -> bool:
        return self.status in CCTX_SUCCESS_STATUSES


def classify(records: List[CctxRecord]) -> TrackingStatus:
    """Aggregate a poll's records into one status.

    Any failure wins. Success needs at least one record that reports a status
    and every reported status to be a success; anything mixed is still pending.
    """
    statuses = [record for record in records if record.status is not None]
    if any(record.is_failure for record in statuses):
        return TrackingStatus.FAILED
    if statuses and all(record.is_success for record in statuses):
        return TrackingStatus.COMPLETED
    return TrackingStatus.PENDING


@dataclass
class TrackingResult:
    """Outcome of a tracking call; ``pending`` means the deadline elapsed first."""

    status: TrackingStatus
    records: List[CctxRecord] = field(default_factory=list)
    polls: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status != TrackingStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status.value}
        if self.records:
            payload["details"] = {"cctxs": [record.raw for record in self.records]}
        return payload
