from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..core.execution import ExecutionRecord, RecordStatus, get_transaction_log

router = APIRouter(prefix="/api/transactions")


class TransactionRecordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Record id; existing records are replaced")
    run_id: str = Field(default="", alias="runId")
    address: str = Field(..., description="Wallet that owns the record")
    hash: str = Field(..., description="Transaction hash")
    chain_id: int = Field(..., alias="chainId")
    description: str
    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    status: RecordStatus = RecordStatus.PENDING
    timestamp: int = Field(default=0, description="Unix milliseconds")

    def to_record(self) -> ExecutionRecord:
        return ExecutionRecord(**self.model_dump())


class TransactionRecordUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hash: Optional[str] = None
    description: Optional[str] = None
    status: Optional[RecordStatus] = None
    timestamp: Optional[int] = None


@router.get("/{address}")
async def list_transactions(address: str) -> Dict[str, Any]:
    records = await get_transaction_log().list_for_address(address)
    return {"transactions": [record.to_dict() for record in records]}


@router.post("")
async def upsert_transaction(request: TransactionRecordRequest) -> Dict[str, Any]:
    record = request.to_record()
    await get_transaction_log().upsert(record)
    return record.to_dict()


@router.put("/{record_id}")
async def update_transaction(record_id: str, request: TransactionRecordUpdate) -> Dict[str, Any]:
    try:
        record = await get_transaction_log().update(record_id, **request.model_dump(exclude_none=True))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Transaction {record_id} not found")
    return record.to_dict()
