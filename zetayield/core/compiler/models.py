"""
Compiled plan models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TransactionType(str, Enum):
    """Types of compiled transactions."""
    APPROVE = "approve"
    BRIDGE = "bridge"
    SWAP = "swap"
    BATCH_SWAP_WITHDRAW = "batch_swap_withdraw"
    WITHDRAW = "withdraw"


@dataclass(frozen=True)
class UnsignedTransaction:
    """A transaction descriptor ready for an external signer."""
    chain_id: int
    to: str
    data: str                                   # Encoded calldata (hex)
    description: str
    value: Optional[int] = None                 # Wei, native deposits only
    tx_type: TransactionType = TransactionType.APPROVE
    step_id: Optional[str] = None               # Step that produced it

    @property
    def value_hex(self) -> Optional[str]:
        if not self.value:
            return None
        return hex(self.value)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape returned to clients."""
        tx: Dict[str, Any] = {
            "chainId": self.chain_id,
            "to": self.to,
            "data": self.data,
            "description": self.description,
        }
        if self.value_hex:
            tx["value"] = self.value_hex
        return tx

    def to_send_params(self, from_address: str) -> Dict[str, str]:
        """Payload for ``eth_sendTransaction`` once the active account is known."""
        params = {
            "from": from_address,
            "to": self.to,
            "data": self.data,
        }
        if self.value_hex:
            params["value"] = self.value_hex
        return params


@dataclass(frozen=True)
class SkippedStep:
    """A step that produced no transactions, and why."""
    step_id: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"stepId": self.step_id, "reason": self.reason}


@dataclass
class FusionPlan:
    """Which withdraw step each swap absorbs into a batch executor call."""
    executor: Optional[str] = None
    swap_to_withdraw: Dict[str, str] = field(default_factory=dict)

    @property
    def consumed(self) -> set:
        return set(self.swap_to_withdraw.values())

    def is_fused_swap(self, step_id: str) -> bool:
        return step_id in self.swap_to_withdraw

    def is_consumed(self, step_id: str) -> bool:
        return step_id in self.consumed


@dataclass
class CompiledPlan:
    """Ordered transactions for a strategy, plus how they were derived."""
    address: str
    deadline: int
    transactions: List[UnsignedTransaction] = field(default_factory=list)
    fusion: FusionPlan = field(default_factory=FusionPlan)
    skipped_steps: List[SkippedStep] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.transactions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactions": [tx.to_dict() for tx in self.transactions],
            "fusedSteps": dict(self.fusion.swap_to_withdraw),
            "skippedSteps": [skipped.to_dict() for skipped in self.skipped_steps],
            "deadline": self.deadline,
        }
