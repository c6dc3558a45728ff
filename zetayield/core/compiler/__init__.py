"""
Strategy Compilation Layer

Turns a strategy's step list into wallet-signable transactions:
- PlanAssembler: compiles a full step list, handling swap+withdraw fusion
- StepCompiler: per-step calldata encoding
- TransactionBuilder: individual call shapes (approve, deposit, swap, withdraw)

Usage:
    from zetayield.core.compiler import get_plan_assembler

    plan = await get_plan_assembler().build(steps, address)
    for tx in plan.transactions:
        print(tx.to_dict())
"""

from .models import (
    TransactionType,
    UnsignedTransaction,
    SkippedStep,
    FusionPlan,
    CompiledPlan,
)

from .tx_builder import (
    TransactionBuilder,
)

from .step_compiler import (
    SWAP_DEADLINE_SECONDS,
    CompileContext,
    GasFeeReader,
    StepCompiler,
    to_base_units,
)

from .assembler import (
    PlanAssembler,
    build_fusion_plan,
    get_plan_assembler,
)

__all__ = [
    # Models
    "TransactionType",
    "UnsignedTransaction",
    "SkippedStep",
    "FusionPlan",
    "CompiledPlan",
    # Transaction Builder
    "TransactionBuilder",
    # Step Compiler
    "SWAP_DEADLINE_SECONDS",
    "CompileContext",
    "GasFeeReader",
    "StepCompiler",
    "to_base_units",
    # Assembler
    "PlanAssembler",
    "build_fusion_plan",
    "get_plan_assembler",
]
