"""Core package exports for x402_solana."""

from .codec import (
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_SIGNATURE_HEADER,
    PAYMENT_RESPONSE_HEADER,
    X_PAYMENT_HEADER,
    get_header,
    detect_protocol_version,
    decode_payment_required,
    encode_payment_required_header,
    serialize_transaction,
    payment_header_name,
    create_payment_payload,
    encode_payment_header,
    decode_payment_header,
    encode_settle_response_header,
    decode_settle_response_header
)
from .utils import (
    USDC_MAINNET_ADDRESS,
    USDC_DEVNET_ADDRESS,
    to_atomic_units,
    from_atomic_units,
    get_default_rpc_url,
    get_rpc_url_for_network,
    get_default_token_asset
)
from .wallet import WalletAdapter, SolanaWallet, KeypairWallet, normalize_wallet
from .transaction import create_solana_payment_transaction, derive_associated_token_address
from .auth import TokenProvider, JwtTokenProvider
from .facilitator import FacilitatorClient
from .merchant import create_payment_requirements, create_payment_required_response
from .protocol import ensure_verified

__all__ = [
    # Wire encoding
    "PAYMENT_REQUIRED_HEADER",
    "PAYMENT_SIGNATURE_HEADER",
    "PAYMENT_RESPONSE_HEADER",
    "X_PAYMENT_HEADER",
    "get_header",
    "detect_protocol_version",
    "decode_payment_required",
    "encode_payment_required_header",
    "serialize_transaction",
    "payment_header_name",
    "create_payment_payload",
    "encode_payment_header",
    "decode_payment_header",
    "encode_settle_response_header",
    "decode_settle_response_header",

    # Helpers
    "USDC_MAINNET_ADDRESS",
    "USDC_DEVNET_ADDRESS",
    "to_atomic_units",
    "from_atomic_units",
    "get_default_rpc_url",
    "get_rpc_url_for_network",
    "get_default_token_asset",

    # Wallet and transaction
    "WalletAdapter",
    "SolanaWallet",
    "KeypairWallet",
    "normalize_wallet",
    "create_solana_payment_transaction",
    "derive_associated_token_address",

    # Facilitator
    "TokenProvider",
    "JwtTokenProvider",
    "FacilitatorClient",

    # Merchant/protocol functions
    "create_payment_requirements",
    "create_payment_required_response",
    "ensure_verified"
]
