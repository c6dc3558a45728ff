from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator

from ..core.chains.registry import ChainTag


SWAP_SEPARATOR = "->"


class StepType(str, Enum):
    BRIDGE = "bridge"
    SWAP = "swap"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    STAKE = "stake"


class StepStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"
    BROADCASTED = "broadcasted"
    SUCCESS = "success"
    FAILED = "failed"


class StrategyStep(BaseModel):
    """One step of a generated strategy.

    Swap steps carry explicit ``from_asset``/``to_asset`` legs. Records from the
    strategy generator encode them as ``asset="<from>-><to>"``; the legs are
    recovered here, once, at the validation boundary and the compound string is
    re-emitted on serialization.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Opaque step identifier")
    type: StepType = Field(description="Step kind")
    from_chain: ChainTag = Field(alias="fromChain", description="Chain the step starts on")
    to_chain: ChainTag = Field(alias="toChain", description="Chain the step ends on")
    asset: str = Field(default="", description="Asset symbol, or '<from>-><to>' for swaps")
    amount: Decimal = Field(description="Quantity in human units")
    protocol: Optional[str] = Field(default=None, description="Display label, not used for control flow")
    status: StepStatus = Field(default=StepStatus.PENDING, description="Lifecycle tag owned by the caller")
    from_asset: Optional[str] = Field(default=None, alias="fromAsset", description="Swap input symbol")
    to_asset: Optional[str] = Field(default=None, alias="toAsset", description="Swap output symbol")

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_from_float(cls, value: Any) -> Any:
        # floats go through their shortest repr so 0.01 stays 0.01
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @model_validator(mode="before")
    @classmethod
    def _split_swap_asset(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("type") not in (StepType.SWAP, StepType.SWAP.value):
            return data
        has_legs = (data.get("fromAsset") or data.get("from_asset")) and (data.get("toAsset") or data.get("to_asset"))
        asset = data.get("asset") or ""
        if has_legs or SWAP_SEPARATOR not in asset:
            return data
        from_asset, _, to_asset = asset.partition(SWAP_SEPARATOR)
        return {**data, "fromAsset": from_asset.strip() or None, "toAsset": to_asset.strip() or None}

    @property
    def is_swap(self) -> bool:
        return self.type == StepType.SWAP

    @property
    def swap_legs(self) -> Optional[tuple[str, str]]:
        if self.from_asset and self.to_asset:
            return self.from_asset, self.to_asset
        return None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        data = handler(self)
        legs = self.swap_legs
        if self.is_swap and legs and not self.asset:
            data["asset"] = f"{legs[0]}{SWAP_SEPARATOR}{legs[1]}"
        return data


class PrepareStrategyRequest(BaseModel):
    address: str = Field(description="Wallet address that will sign the plan")
    steps: List[StrategyStep] = Field(min_length=1, description="Ordered strategy steps")


class TrackCctxRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hash: str = Field(min_length=1, description="Inbound transaction hash on the source chain")
    timeout_seconds: Optional[int] = Field(
        default=None,
        alias="timeoutSeconds",
        description="Tracking deadline in seconds (floored at 10)",
    )
