# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Protocol error types and error code mapping."""

from typing import Iterable, List, Optional


class X402Error(Exception):
    """Base error for x402 protocol."""
    pass


class ProtocolDecodeError(X402Error):
    """A challenge, payment header or receipt could not be decoded."""
    pass


class InvalidRequirementsError(X402Error):
    """Payment requirements are missing data needed to build a transfer."""
    pass


class NoSuitableRequirementError(X402Error):
    """No offered requirement matches the exact scheme on a Solana network.

    The offered networks are kept for diagnostics.
    """

    def __init__(self, offered_networks: Iterable[str]):
        self.offered_networks: List[str] = list(offered_networks)
        super().__init__(
            "No suitable Solana payment requirements found. "
            f"Available networks: {self.offered_networks}"
        )


class AmountExceedsLimitError(X402Error):
    """The requested amount is above the client's spending ceiling."""

    def __init__(self, amount: int, limit: int):
        self.amount = amount
        self.limit = limit
        super().__init__(
            f"Payment amount {amount} exceeds maximum allowed {limit}"
        )


class MissingWalletCapabilityError(X402Error):
    """The wallet exposes no address or cannot sign transactions."""
    pass


class MissingSourceAccountError(X402Error):
    """The payer has no associated token account for the asset."""

    def __init__(self, owner: str, mint: str):
        self.owner = owner
        self.mint = mint
        super().__init__(
            f"User does not have an Associated Token Account for {mint}. "
            "Please create one first or ensure you have the required token."
        )


class MissingDestinationAccountError(X402Error):
    """The receiver has no associated token account for the asset."""

    def __init__(self, owner: str, mint: str):
        self.owner = owner
        self.mint = mint
        super().__init__(
            f"Destination does not have an Associated Token Account for {mint}. "
            "The receiver must create their token account before receiving payments."
        )


class FacilitatorNetworkUnsupportedError(X402Error):
    """The facilitator offers no exact-scheme fee payer for the network."""

    def __init__(self, network: str):
        self.network = network
        super().__init__(
            f'Facilitator does not support network "{network}" with scheme '
            '"exact" or feePayer not provided'
        )


class FacilitatorTransportError(X402Error):
    """The facilitator could not be reached or answered with a non-2xx status.

    Operational and retryable, unlike a :class:`FacilitatorRejection`.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        path: Optional[str] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class FacilitatorRejection(X402Error):
    """The facilitator answered but rejected the payment."""

    def __init__(self, reason: Optional[str]):
        self.reason = reason or "invalid_payment"
        super().__init__(f"Payment rejected by facilitator: {self.reason}")


class X402ErrorCode:
    """Reason strings carried in verify/settle results and 402 bodies."""
    UNEXPECTED_VERIFY_ERROR = "unexpected_verify_error"
    UNEXPECTED_SETTLE_ERROR = "unexpected_settle_error"
    INVALID_PAYMENT_HEADER = "invalid_payment_header"
    INVALID_PAYMENT = "invalid_payment"
    PAYMENT_REQUIRED = "payment_required"
    NETWORK_MISMATCH = "network_mismatch"
    INVALID_AMOUNT = "invalid_amount"
    SETTLEMENT_FAILED = "settlement_failed"

    @classmethod
    def get_all_codes(cls) -> list[str]:
        """Returns all defined error codes."""
        return [
            cls.UNEXPECTED_VERIFY_ERROR,
            cls.UNEXPECTED_SETTLE_ERROR,
            cls.INVALID_PAYMENT_HEADER,
            cls.INVALID_PAYMENT,
            cls.PAYMENT_REQUIRED,
            cls.NETWORK_MISMATCH,
            cls.INVALID_AMOUNT,
            cls.SETTLEMENT_FAILED,
        ]


def map_error_to_code(error: Exception) -> str:
    """Maps implementation errors to wire reason codes."""
    if isinstance(error, FacilitatorRejection):
        return error.reason
    if isinstance(error, FacilitatorTransportError):
        if error.path == "/settle":
            return X402ErrorCode.UNEXPECTED_SETTLE_ERROR
        return X402ErrorCode.UNEXPECTED_VERIFY_ERROR
    error_mapping = {
        ProtocolDecodeError: X402ErrorCode.INVALID_PAYMENT_HEADER,
        NoSuitableRequirementError: X402ErrorCode.NETWORK_MISMATCH,
        AmountExceedsLimitError: X402ErrorCode.INVALID_AMOUNT,
        FacilitatorNetworkUnsupportedError: X402ErrorCode.NETWORK_MISMATCH,
    }
    for error_type, code in error_mapping.items():
        if isinstance(error, error_type):
            return code
    return "UNKNOWN_ERROR"
