"""Client and server middleware for x402 on Solana."""

from .client import (
    PaymentFetch,
    X402Client,
    create_payment_fetch,
    create_x402_client,
    select_payment_requirements,
    check_payment_amount,
    decode_payment_response
)
from .server import X402PaymentHandler, X402Response, SettlementFailureHook

__all__ = [
    "PaymentFetch",
    "X402Client",
    "create_payment_fetch",
    "create_x402_client",
    "select_payment_requirements",
    "check_payment_amount",
    "decode_payment_response",

    "X402PaymentHandler",
    "X402Response",
    "SettlementFailureHook"
]
