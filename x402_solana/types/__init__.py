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
"""Types package for x402_solana - wire models, networks, errors and config."""

from .networks import (
    SOLANA_NAMESPACE,
    SOLANA_MAINNET_CAIP2,
    SOLANA_DEVNET_CAIP2,
    SolanaNetwork,
    ChainId,
    NetworkLike,
    parse_chain_id,
    is_solana_network,
    is_solana_mainnet,
    is_solana_devnet,
    to_caip2,
    to_simple_network,
    same_network_family
)

from .protocol import (
    SCHEME_EXACT,
    ProtocolVersion,
    ResourceInfo,
    PaymentRequirements,
    PaymentRequired,
    ExactSvmPayload,
    PaymentPayload,
    VerifyResponse,
    SettleResponse,
    SupportedKind,
    SupportedResponse
)

from .errors import (
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
    map_error_to_code
)

from .config import (
    DEFAULT_FACILITATOR_URL,
    TokenAsset,
    RouteConfig,
    FacilitatorConfig,
    X402ClientConfig,
    X402ServerConfig
)

from .state import NegotiationState

__all__ = [
    "SOLANA_NAMESPACE",
    "SOLANA_MAINNET_CAIP2",
    "SOLANA_DEVNET_CAIP2",
    "SolanaNetwork",
    "ChainId",
    "NetworkLike",
    "parse_chain_id",
    "is_solana_network",
    "is_solana_mainnet",
    "is_solana_devnet",
    "to_caip2",
    "to_simple_network",
    "same_network_family",

    "SCHEME_EXACT",
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

    "DEFAULT_FACILITATOR_URL",
    "TokenAsset",
    "RouteConfig",
    "FacilitatorConfig",
    "X402ClientConfig",
    "X402ServerConfig",

    "NegotiationState"
]
