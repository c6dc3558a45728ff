"""
Execution log models.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RecordStatus(str, Enum):
    """Status of a submitted transaction in the execution log."""
    PENDING = "pending"          # Submitted; receipt or bridge completion not yet known
    COMPLETED = "completed"      # Mined (and, for bridges, settled on ZetaChain)
    FAILED = "failed"            # Reverted, or the bridge CCTX aborted


class RunStatus(str, Enum):
    """Overall state of one orchestrator run."""
    COMPLETED = "completed"      # Every transaction completed or was already done
    INCOMPLETE = "incomplete"    # Stopped on a pending leg; safe to resume later


@dataclass
class ExecutionRecord:
    """One submitted transaction, keyed by ``id``."""
    id: str
    run_id: str
    address: str
    hash: str
    chain_id: int
    description: str
    from_address: str
    to_address: str
    status: RecordStatus = RecordStatus.PENDING
    timestamp: int = 0                           # Unix milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "runId": self.run_id,
            "address": self.address,
            "hash": self.hash,
            "chainId": self.chain_id,
            "description": self.description,
            "from": self.from_address,
            "to": self.to_address,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }

    def copy_with(self, **changes: Any) -> "ExecutionRecord":
        values = asdict(self)
        values.update({key: value for key, value in changes.items() if value is not None})
        values["status"] = RecordStatus(values["status"])
        return ExecutionRecord(**values)


@dataclass
class ExecutionReport:
    """Result of running (or resuming) a compiled plan."""
    run_id: str
    status: RunStatus
    records: List[ExecutionRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)        # Descriptions already completed earlier
    pending_record_id: Optional[str] = None                 # Leg that stopped an incomplete run

    @property
    def is_complete(self) -> bool:
        return self.status == RunStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runId": self.run_id,
            "status": self.status.value,
            "records": [record.to_dict() for record in self.records],
            "skipped": list(self.skipped),
            "pendingRecordId": self.pending_record_id,
        }
