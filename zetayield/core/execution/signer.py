"""EIP-1193 style signer interface consumed by the orchestrator."""

from typing import Any, List, Optional, Protocol


# EIP-1193 / MetaMask provider error codes
USER_REJECTED_REQUEST = 4001
UNRECOGNIZED_CHAIN = 4902


class SignerRequestError(Exception):
    """An error returned by the signer for a ``request`` call."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"Signer request failed with code {code}")
        self.code = code
        self.message = message

    @property
    def is_user_rejection(self) -> bool:
        return self.code == USER_REJECTED_REQUEST


class Signer(Protocol):
    """Anything exposing ``request(method, params)`` like an injected wallet."""

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        ...
