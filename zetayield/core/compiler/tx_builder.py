"""
Transaction builder for the gateway, router and batch executor call shapes.
"""

from typing import Optional

from ..chains import abi
from .models import TransactionType, UnsignedTransaction


class TransactionBuilder:
    """
    Builds unsigned transactions for ZetaChain flows.

    Handles:
    - ERC20/ZRC20 approvals
    - Native deposits into a connected chain's gateway
    - Uniswap V2 router swaps on ZetaChain
    - Batch executor swap+withdraw
    - Gateway withdrawals from ZetaChain
    """

    @staticmethod
    def build_erc20_approve(
        chain_id: int,
        token_address: str,
        spender_address: str,
        amount: int,
        description: str = "",
        step_id: Optional[str] = None,
    ) -> UnsignedTransaction:
        """
        Build an ERC20 approval transaction.

        Args:
            chain_id: The chain ID
            token_address: The token contract
            spender_address: The address being approved to spend
            amount: The amount to approve, in base units
            description: Human-readable description
            step_id: Step that produced the approval

        Returns:
            UnsignedTransaction ready to be signed
        """
        calldata = abi.encode_call(
            abi.ERC20_APPROVE,
            [abi.checksum(spender_address), amount],
        )

        return UnsignedTransaction(
            chain_id=chain_id,
            to=token_address.lower(),
            data=calldata,
            description=description or f"Approve {spender_address[:10]}... to spend tokens",
            tx_type=TransactionType.APPROVE,
            step_id=step_id,
        )

    @staticmethod
    def build_gateway_deposit(
        chain_id: int,
        gateway_address: str,
        receiver: str,
        amount_wei: int,
        description: str,
        step_id: Optional[str] = None,
    ) -> UnsignedTransaction:
        """
        Build a native-asset deposit into a connected chain's gateway.

        The receiver on ZetaChain is also the revert address.
        """
        calldata = abi.encode_call(
            abi.GATEWAY_EVM_DEPOSIT,
            [abi.checksum(receiver), abi.revert_options(receiver)],
        )

        return UnsignedTransaction(
            chain_id=chain_id,
            to=gateway_address.lower(),
            data=calldata,
            value=amount_wei,
            description=description,
            tx_type=TransactionType.BRIDGE,
            step_id=step_id,
        )

    @staticmethod
    def build_router_swap(
        chain_id: int,
        router_address: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        recipient: str,
        deadline: int,
        description: str,
        amount_out_min: int = 0,
        step_id: Optional[str] = None,
    ) -> UnsignedTransaction:
        """
        Build a two-hop ``swapExactTokensForTokens`` router call.
        """
        calldata = abi.encode_call(
            abi.ROUTER_SWAP_EXACT_TOKENS,
            [
                amount_in,
                amount_out_min,
                [abi.checksum(token_in), abi.checksum(token_out)],
                abi.checksum(recipient),
                deadline,
            ],
        )

        return UnsignedTransaction(
            chain_id=chain_id,
            to=router_address.lower(),
            data=calldata,
            description=description,
            tx_type=TransactionType.SWAP,
            step_id=step_id,
        )

    @staticmethod
    def build_batch_swap_and_withdraw(
        chain_id: int,
        executor_address: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        receiver: str,
        deadline: int,
        description: str,
        amount_out_min: int = 0,
        step_id: Optional[str] = None,
    ) -> UnsignedTransaction:
        """
        Build a batch executor call that swaps and withdraws the output in one transaction.
        """
        calldata = abi.encode_call(
            abi.BATCH_SWAP_AND_WITHDRAW,
            [
                abi.checksum(token_in),
                abi.checksum(token_out),
                amount_in,
                amount_out_min,
                abi.address_bytes(receiver),
                deadline,
            ],
        )

        return UnsignedTransaction(
            chain_id=chain_id,
            to=executor_address.lower(),
            data=calldata,
            description=description,
            tx_type=TransactionType.BATCH_SWAP_WITHDRAW,
            step_id=step_id,
        )

    @staticmethod
    def build_gateway_withdraw(
        chain_id: int,
        gateway_address: str,
        zrc20_address: str,
        receiver: str,
        amount: int,
        description: str,
        step_id: Optional[str] = None,
    ) -> UnsignedTransaction:
        """
        Build a ZetaChain gateway ``withdraw`` to the ZRC20's connected chain.
        """
        calldata = abi.encode_call(
            abi.GATEWAY_ZEVM_WITHDRAW,
            [
                abi.address_bytes(receiver),
                amount,
                abi.checksum(zrc20_address),
                abi.revert_options(receiver),
            ],
        )

        return UnsignedTransaction(
            chain_id=chain_id,
            to=gateway_address.lower(),
            data=calldata,
            description=description,
            tx_type=TransactionType.WITHDRAW,
            step_id=step_id,
        )
