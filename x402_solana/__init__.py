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
"""x402_solana - x402 pay-per-call HTTP payments settled on Solana."""

# Protocol Types
from .types import (
    # Networks
    SOLANA_MAINNET_CAIP2,
    SOLANA_DEVNET_CAIP2,
    SolanaNetwork,
    to_caip2,
    to_simple_network,
    is_solana_network,
    is_solana_mainnet,
    is_solana_devnet,

    # Wire models
    ProtocolVersion,
    ResourceInfo,
    PaymentRequirements,
    PaymentRequired,
    ExactSvmPayload,
    PaymentPayload,
    VerifyResponse,
    SettleResponse,
    SupportedKind,
    SupportedResponse,

    # Configuration
    TokenAsset,
    RouteConfig,
    FacilitatorConfig,
    X402ClientConfig,
    X402ServerConfig,

    # Error Types
    X402Error,
    ProtocolDecodeError,
    InvalidRequirementsError,
    NoSuitableRequirementError,
    AmountExceedsLimitError,
    MissingWalletCapabilityError,
    MissingSourceAccountError,
    MissingDestinationAccountError,
    FacilitatorNetworkUnsupportedError,
    FacilitatorTransportError,
    FacilitatorRejection,
    X402ErrorCode,
    map_error_to_code,

    NegotiationState
)

# Core Functions
from .core import (
    to_atomic_units,
    from_atomic_units,
    get_default_rpc_url,
    get_rpc_url_for_network,
    get_default_token_asset,
    KeypairWallet,
    create_solana_payment_transaction,
    FacilitatorClient,
    create_payment_requirements,
    create_payment_required_response
)

# Middleware
from .middleware import (
    X402Client,
    create_x402_client,
    create_payment_fetch,
    select_payment_requirements,
    X402PaymentHandler,
    X402Response
)

__version__ = "0.1.0"

__all__ = [
    "SOLANA_MAINNET_CAIP2",
    "SOLANA_DEVNET_CAIP2",
    "SolanaNetwork",
    "to_caip2",
    "to_simple_network",
    "is_solana_network",
    "is_solana_mainnet",
    "is_solana_devnet",

    "ProtocolVersion",
    "ResourceInfo",
    "PaymentRequirements",
    "PaymentRequired",
    "ExactSvmPayload",
    "PaymentPayload",
    "VerifyResponse",
    "SettleResponse",
    "SupportedKind",
    "SupportedResponse",

    "TokenAsset",
    "RouteConfig",
    "FacilitatorConfig",
    "X402ClientConfig",
    "X402ServerConfig",

    "X402Error",
    "ProtocolDecodeError",
    "InvalidRequirementsError",
    "NoSuitableRequirementError",
    "AmountExceedsLimitError",
    "MissingWalletCapabilityError",
    "MissingSourceAccountError",
    "MissingDestinationAccountError",
    "FacilitatorNetworkUnsupportedError",
    "FacilitatorTransportError",
    "FacilitatorRejection",
    "X402ErrorCode",
    "map_error_to_code",
    "NegotiationState",

    "to_atomic_units",
    "from_atomic_units",
    "get_default_rpc_url",
    "get_rpc_url_for_network",
    "get_default_token_asset",
    "KeypairWallet",
    "create_solana_payment_transaction",
    "FacilitatorClient",
    "create_payment_requirements",
    "create_payment_required_response",

    "X402Client",
    "create_x402_client",
    "create_payment_fetch",
    "select_payment_requirements",
    "X402PaymentHandler",
    "X402Response"
]
