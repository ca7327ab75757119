"""Core protocol checks on facilitator verification results."""

import logging

from ..types import FacilitatorRejection, VerifyResponse

logger = logging.getLogger(__name__)


def ensure_verified(verify_response: VerifyResponse) -> VerifyResponse:
    """Raise FacilitatorRejection unless the facilitator accepted the payment."""
    if not verify_response.is_valid:
        logger.info(f"Payment rejected: {verify_response.invalid_reason}")
        raise FacilitatorRejection(verify_response.invalid_reason)
    return verify_response
