"""
Client-side execution of a compiled plan through an external signer.

Handles, strictly in order for each transaction:
- Resume checks against the transaction log
- Chain switching (and adding) on the signer
- Active account resolution
- Submission and receipt polling
- CCTX completion tracking for bridge legs
"""

import asyncio
import logging
import secrets
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Set, Union

from structlog.contextvars import bound_contextvars

from ...config import settings
from ..chains.abi import is_evm_address
from ..chains.registry import wallet_chain_params
from ..compiler.models import CompiledPlan, UnsignedTransaction
from ..errors import (
    BridgeFailed,
    ExecutionError,
    SignerRejected,
    SignerUnavailable,
    TransactionInFlight,
    TransactionReverted,
)
from ..tracking.models import TrackingResult, TrackingStatus
from ..tracking.tracker import get_cctx_tracker
from .models import ExecutionRecord, ExecutionReport, RecordStatus, RunStatus
from .signer import UNRECOGNIZED_CHAIN, Signer, SignerRequestError
from .transaction_log import TransactionLog, get_transaction_log


logger = logging.getLogger(__name__)


class BridgeTracker(Protocol):
    async def track(self, tx_hash: str, timeout_seconds: float) -> TrackingResult:
        ...


def is_bridge_description(description: str) -> bool:
    return "bridge" in description.lower()


def is_bridge_transaction(tx: UnsignedTransaction) -> bool:
    return is_bridge_description(tx.description)


def receipt_failed(receipt: Dict[str, Any]) -> bool:
    """``True`` when a receipt reports status 0 (reverted)."""
    status = receipt.get("status")
    if isinstance(status, str):
        try:
            return int(status, 16) == 0
        except ValueError:
            return False
    return status == 0


def _rpc_urls() -> Dict[str, str]:
    return {
        "sepolia_rpc_url": settings.sepolia_rpc_url,
        "bsc_testnet_rpc_url": settings.bsc_testnet_rpc_url,
        "zetachain_rpc_url": settings.zetachain_rpc_url,
    }


class ExecutionOrchestrator:
    """
    Drives an external signer through a compiled plan.

    Never retries a reverted transaction and never rolls back mined ones: on a
    failure the records already written stay as they are and the run stops.
    A bridge leg that has not settled by its deadline ends the run as
    ``incomplete``; ``resume_tracking`` picks it up later.
    """

    def __init__(
        self,
        signer: Optional[Signer],
        *,
        tracker: Optional[BridgeTracker] = None,
        transaction_log: Optional[TransactionLog] = None,
        receipt_attempts: Optional[int] = None,
        receipt_interval: Optional[float] = None,
        bridge_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
    ):
        self.signer = signer
        self.tracker = tracker or get_cctx_tracker()
        self.transaction_log = transaction_log or get_transaction_log()
        self.receipt_attempts = receipt_attempts or settings.receipt_poll_attempts
        self.receipt_interval = receipt_interval or settings.receipt_poll_interval_seconds
        self.bridge_timeout = bridge_timeout or settings.bridge_track_timeout_seconds
        self._sleep = sleep
        self._clock_ms = clock_ms

    @staticmethod
    def generate_id(prefix: str) -> str:
        return f"{prefix}_{secrets.token_hex(16)}"

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if self.signer is None:
            raise SignerUnavailable("Wallet not available")
        try:
            return await self.signer.request(method, params)
        except SignerRequestError as exc:
            if exc.is_user_rejection:
                raise SignerRejected(f"User rejected {method}") from exc
            raise ExecutionError(f"{method} failed: {exc}") from exc

    async def ensure_chain(self, chain_id: int) -> None:
        """Switch the signer to ``chain_id``, adding the chain if the wallet lacks it."""
        current = await self._request("eth_chainId")
        if isinstance(current, str):
            current = int(current, 16)
        if current == chain_id:
            return

        if self.signer is None:
            raise SignerUnavailable("Wallet not available")
        target = hex(chain_id)
        try:
            await self.signer.request("wallet_switchEthereumChain", [{"chainId": target}])
        except SignerRequestError as exc:
            if exc.code == UNRECOGNIZED_CHAIN:
                logger.info("Adding chain %s to wallet", chain_id)
                await self._request("wallet_addEthereumChain", [wallet_chain_params(chain_id, _rpc_urls())])
                return
            if exc.is_user_rejection:
                raise SignerRejected(f"User rejected switching to chain {chain_id}") from exc
            raise ExecutionError(f"Could not switch to chain {chain_id}: {exc}") from exc

    async def resolve_account(self) -> str:
        """The signer's currently authorized account, asking for access if none is exposed."""
        for method in ("eth_accounts", "eth_requestAccounts"):
            accounts = await self._request(method)
            if isinstance(accounts, list):
                for account in accounts:
                    if isinstance(account, str) and is_evm_address(account.strip()):
                        return account.strip()
        raise SignerUnavailable("No valid wallet account is connected")

    async def wait_for_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        for _ in range(self.receipt_attempts):
            receipt = await self._request("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                return receipt
            await self._sleep(self.receipt_interval)
        return None

    async def _set_status(self, record: ExecutionRecord, status: RecordStatus) -> ExecutionRecord:
        record.status = status
        await self.transaction_log.upsert(record)
        return record

    async def execute(
        self,
        plan: Union[CompiledPlan, Sequence[UnsignedTransaction]],
        address: str,
    ) -> ExecutionReport:
        """
        Execute every transaction in ``plan`` for the wallet ``address``.

        Each log record answers for at most one transaction of a run, so a plan
        with two identical legs submits both unless two matching records from
        earlier runs are already completed.

        Returns:
            ExecutionReport, ``completed`` or ``incomplete``

        Raises:
            SignerUnavailable / SignerRejected: signer missing or user declined
            TransactionInFlight: a matching earlier transaction is still pending
            TransactionReverted: a transaction mined with status 0
            BridgeFailed: the hub chain aborted or reverted a bridge
        """
        transactions = plan.transactions if isinstance(plan, CompiledPlan) else list(plan)
        if not transactions:
            raise ExecutionError("No transactions to execute")
        if self.signer is None:
            raise SignerUnavailable("Wallet not available")

        report = ExecutionReport(run_id=self.generate_id("run"), status=RunStatus.COMPLETED)
        # Record ids already answering for a transaction of this run
        matched: Set[str] = set()

        with bound_contextvars(run_id=report.run_id):
            await self.resolve_account()
            for tx in transactions:
                finished = await self._execute_transaction(tx, address, report, matched)
                if not finished:
                    report.status = RunStatus.INCOMPLETE
                    return report

        return report

    async def _execute_transaction(
        self,
        tx: UnsignedTransaction,
        address: str,
        report: ExecutionReport,
        matched: Set[str],
    ) -> bool:
        """Run one transaction; ``False`` when it is left pending."""
        existing = await self.transaction_log.find(address, tx.description, tx.chain_id, exclude=matched)
        if existing is not None and existing.status == RecordStatus.COMPLETED:
            logger.info("Skipping already completed transaction: %s", tx.description)
            matched.add(existing.id)
            report.skipped.append(tx.description)
            return True
        if existing is not None and existing.status == RecordStatus.PENDING:
            raise TransactionInFlight(
                f"Previous transaction is still confirming: {tx.description}",
                tx_hash=existing.hash,
                record_id=existing.id,
            )

        await self.ensure_chain(tx.chain_id)
        account = await self.resolve_account()
        if not is_evm_address(tx.to):
            raise ExecutionError(f"Invalid transaction target: {tx.to}", step_id=tx.step_id)

        logger.info("Submitting %r from %s to %s on chain %s", tx.description, account, tx.to, tx.chain_id)
        tx_hash = await self._request("eth_sendTransaction", [tx.to_send_params(account)])
        if not tx_hash:
            raise ExecutionError(f"Signer returned no hash for {tx.description}", step_id=tx.step_id)

        record = ExecutionRecord(
            id=self.generate_id("tx"),
            run_id=report.run_id,
            address=address,
            hash=str(tx_hash),
            chain_id=tx.chain_id,
            description=tx.description,
            from_address=account,
            to_address=tx.to,
            status=RecordStatus.PENDING,
            timestamp=self._clock_ms(),
        )
        matched.add(record.id)
        await self.transaction_log.upsert(record)
        report.records.append(record)

        with bound_contextvars(tx_hash=record.hash, chain_id=record.chain_id):
            status = await self._settle(record, step_id=tx.step_id)

        if status == RecordStatus.PENDING:
            report.pending_record_id = record.id
            return False
        return True

    async def _settle(
        self,
        record: ExecutionRecord,
        step_id: Optional[str] = None,
        bridge_timeout: Optional[float] = None,
    ) -> RecordStatus:
        """
        Drive a submitted record to its final status, or leave it pending.

        Waits for the receipt, then, for bridge legs, for the CCTX on ZetaChain.
        """
        receipt = await self.wait_for_receipt(record.hash)
        if receipt is None:
            logger.warning("No receipt for %s after %d polls", record.hash, self.receipt_attempts)
            return record.status

        if receipt_failed(receipt):
            await self._set_status(record, RecordStatus.FAILED)
            raise TransactionReverted(
                f"Transaction reverted: {record.description}. Check balances and minimum amounts before retrying.",
                step_id=step_id,
                tx_hash=record.hash,
                record_id=record.id,
            )

        if is_bridge_description(record.description):
            return await self._track_bridge(record, step_id, bridge_timeout)

        await self._set_status(record, RecordStatus.COMPLETED)
        return record.status

    async def _track_bridge(
        self,
        record: ExecutionRecord,
        step_id: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> RecordStatus:
        result = await self.tracker.track(record.hash, timeout_seconds or self.bridge_timeout)
        if result.status == TrackingStatus.FAILED:
            await self._set_status(record, RecordStatus.FAILED)
            raise BridgeFailed(
                "Bridge failed on ZetaChain",
                step_id=step_id,
                tx_hash=record.hash,
                record_id=record.id,
            )
        if result.status == TrackingStatus.COMPLETED:
            await self._set_status(record, RecordStatus.COMPLETED)
        return record.status

    async def resume_tracking(self, record_id: str, timeout_seconds: Optional[float] = None) -> ExecutionRecord:
        """
        Re-check a pending record and store whatever status it reaches.

        The receipt is polled first. A bridge leg then waits on its CCTX; any
        other transaction is complete once mined. Without a signer only the
        CCTX of a bridge leg can be checked.

        Raises:
            TransactionReverted / BridgeFailed: the record ended up failed
            SignerUnavailable: a non-bridge record needs a signer to read its receipt
        """
        record = await self.transaction_log.get(record_id)
        if record is None:
            raise ExecutionError(f"Unknown transaction record: {record_id}")
        if record.status != RecordStatus.PENDING:
            return record

        with bound_contextvars(run_id=record.run_id, tx_hash=record.hash, chain_id=record.chain_id):
            if self.signer is None and is_bridge_description(record.description):
                await self._track_bridge(record, timeout_seconds=timeout_seconds)
            else:
                await self._settle(record, bridge_timeout=timeout_seconds)
        return record
