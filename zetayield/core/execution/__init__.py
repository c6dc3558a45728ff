"""
Plan Execution Layer

Runs a compiled plan through a wallet-style signer:
- ExecutionOrchestrator: sequential submit / confirm / track loop
- InMemoryTransactionLog: keyed upsert store of submitted transactions
- Signer: the ``request(method, params)`` interface wallets expose
"""

from .models import (
    RecordStatus,
    RunStatus,
    ExecutionRecord,
    ExecutionReport,
)

from .signer import (
    USER_REJECTED_REQUEST,
    UNRECOGNIZED_CHAIN,
    Signer,
    SignerRequestError,
)

from .transaction_log import (
    TransactionLog,
    InMemoryTransactionLog,
    get_transaction_log,
)

from .orchestrator import (
    BridgeTracker,
    ExecutionOrchestrator,
    is_bridge_description,
    is_bridge_transaction,
    receipt_failed,
)

__all__ = [
    # Models
    "RecordStatus",
    "RunStatus",
    "ExecutionRecord",
    "ExecutionReport",
    # Signer
    "USER_REJECTED_REQUEST",
    "UNRECOGNIZED_CHAIN",
    "Signer",
    "SignerRequestError",
    # Transaction log
    "TransactionLog",
    "InMemoryTransactionLog",
    "get_transaction_log",
    # Orchestrator
    "BridgeTracker",
    "ExecutionOrchestrator",
    "is_bridge_description",
    "is_bridge_transaction",
    "receipt_failed",
]
