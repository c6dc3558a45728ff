"""
Error Classification

Every failure surfaced by compilation, tracking, or execution is a
``ZetaYieldError`` carrying a human-readable message and a category.
Compilation errors are fatal to the whole plan; execution errors stop
forward progress but never undo already-mined transactions.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors surfaced to callers."""

    UNSUPPORTED_CHAIN = "unsupported_chain"
    UNSUPPORTED_ASSET = "unsupported_asset"
    UNSUPPORTED_STEP = "unsupported_step"
    MALFORMED_STEP = "malformed_step"
    RPC_READ = "rpc_read"
    SIGNER_UNAVAILABLE = "signer_unavailable"
    SIGNER_REJECTED = "signer_rejected"
    TRANSACTION_REVERTED = "transaction_reverted"
    BRIDGE_FAILED = "bridge_failed"
    IN_FLIGHT = "in_flight"
    UNKNOWN = "unknown"


class ZetaYieldError(Exception):
    """Base class for all package errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, *, step_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step_id = step_id

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.message,
            "category": self.category.value,
        }
        if self.step_id:
            payload["stepId"] = self.step_id
        return payload


# Compilation errors: no partial plan is ever returned.
class CompilationError(ZetaYieldError):
    """A step list could not be turned into transactions."""


class UnsupportedChain(CompilationError):
    """A chain tag has no numeric id or contract registry entry."""

    category = ErrorCategory.UNSUPPORTED_CHAIN


class UnsupportedAsset(CompilationError):
    """An asset symbol has no ZRC20 registry entry."""

    category = ErrorCategory.UNSUPPORTED_ASSET


class UnsupportedStep(CompilationError):
    """A step type or chain pair has no on-chain encoding."""

    category = ErrorCategory.UNSUPPORTED_STEP


class MalformedStep(CompilationError):
    """A step's fields do not match the shape its type requires."""

    category = ErrorCategory.MALFORMED_STEP


class RpcReadFailure(ZetaYieldError):
    """A read-only contract call failed; not retried locally."""

    category = ErrorCategory.RPC_READ


# Execution errors
class ExecutionError(ZetaYieldError):
    """Base exception for plan execution errors."""

    def __init__(
        self,
        message: str,
        *,
        step_id: Optional[str] = None,
        tx_hash: Optional[str] = None,
        record_id: Optional[str] = None,
    ):
        super().__init__(message, step_id=step_id)
        self.tx_hash = tx_hash
        self.record_id = record_id

    def as_dict(self) -> Dict[str, Any]:
        payload = super().as_dict()
        if self.tx_hash:
            payload["hash"] = self.tx_hash
        return payload


class SignerUnavailable(ExecutionError):
    """No signer is attached, or it exposes no usable account."""

    category = ErrorCategory.SIGNER_UNAVAILABLE


class SignerRejected(ExecutionError):
    """The user declined a chain switch or a signature."""

    category = ErrorCategory.SIGNER_REJECTED


class TransactionReverted(ExecutionError):
    """A submitted transaction was mined with failure status."""

    category = ErrorCategory.TRANSACTION_REVERTED


class BridgeFailed(ExecutionError):
    """The hub chain reported the bridge CCTX as aborted or reverted."""

    category = ErrorCategory.BRIDGE_FAILED


class TransactionInFlight(ExecutionError):
    """A matching transaction from an earlier run is still unconfirmed."""

    category = ErrorCategory.IN_FLIGHT
