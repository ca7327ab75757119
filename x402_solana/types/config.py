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
"""Configuration types for x402_solana."""

import os
from typing import Any, Optional, Union

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .networks import SolanaNetwork, is_solana_network


DEFAULT_FACILITATOR_URL = "https://facilitator.payai.network"
DEFAULT_DESCRIPTION = "Payment required"
DEFAULT_MIME_TYPE = "application/json"
DEFAULT_TIMEOUT_SECONDS = 300


def _check_network(value: Union[str, SolanaNetwork]) -> str:
    value = value.value if isinstance(value, SolanaNetwork) else str(value)
    if not is_solana_network(value):
        raise ValueError(f"Unsupported Solana network: {value}")
    return value


class TokenAsset(BaseModel):
    """SPL token mint and its decimals."""
    address: str
    decimals: int = 6


class RouteConfig(BaseModel):
    """Pricing for one protected resource.

    ``amount`` is in atomic units of ``asset``; without an asset the
    server's default token is used.
    """
    model_config = ConfigDict(populate_by_name=True)

    amount: str
    asset: Optional[TokenAsset] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    max_timeout_seconds: Optional[int] = Field(default=None, alias="maxTimeoutSeconds")

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_str(cls, value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class FacilitatorConfig(BaseModel):
    """Where the facilitator lives and how to authenticate to it."""
    url: str = DEFAULT_FACILITATOR_URL
    api_key_id: Optional[str] = None
    api_key_secret: Optional[str] = None
    timeout: float = 30.0
    supported_cache_ttl_seconds: float = 0

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key_id and self.api_key_secret)


class X402ClientConfig(BaseModel):
    """Configuration for a paying client.

    ``max_payment_amount`` is a ceiling in atomic units; ``0`` disables it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    wallet: Any
    network: str = SolanaNetwork.DEVNET.value
    rpc_url: Optional[str] = None
    max_payment_amount: int = 0
    http_client: Optional[httpx.AsyncClient] = None
    verbose: bool = False

    @field_validator("network", mode="before")
    @classmethod
    def _validate_network(cls, value: Any) -> str:
        return _check_network(value)

    @field_validator("max_payment_amount")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_payment_amount must be >= 0")
        return value


class X402ServerConfig(BaseModel):
    """Configuration for how a server expects to be paid."""
    network: str
    treasury_address: str
    facilitator_url: str = DEFAULT_FACILITATOR_URL
    api_key_id: Optional[str] = None
    api_key_secret: Optional[str] = None
    rpc_url: Optional[str] = None
    default_token: Optional[TokenAsset] = None
    default_description: str = DEFAULT_DESCRIPTION
    default_mime_type: str = DEFAULT_MIME_TYPE
    default_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    supported_cache_ttl_seconds: float = 0

    @field_validator("network", mode="before")
    @classmethod
    def _validate_network(cls, value: Any) -> str:
        return _check_network(value)

    def facilitator_config(self) -> FacilitatorConfig:
        return FacilitatorConfig(
            url=self.facilitator_url,
            api_key_id=self.api_key_id,
            api_key_secret=self.api_key_secret,
            supported_cache_ttl_seconds=self.supported_cache_ttl_seconds,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> "X402ServerConfig":
        """Build a server config from ``X402_*`` environment variables.

        A ``.env`` file in the working directory is loaded first. Keyword
        overrides take precedence over the environment.
        """
        load_dotenv()
        env = {
            "network": os.getenv("X402_NETWORK", SolanaNetwork.DEVNET.value),
            "treasury_address": os.getenv("X402_TREASURY_ADDRESS"),
            "facilitator_url": os.getenv("X402_FACILITATOR_URL", DEFAULT_FACILITATOR_URL),
            "api_key_id": os.getenv("X402_API_KEY_ID"),
            "api_key_secret": os.getenv("X402_API_KEY_SECRET"),
            "rpc_url": os.getenv("X402_RPC_URL"),
        }
        ttl = os.getenv("X402_SUPPORTED_CACHE_TTL_SECONDS")
        if ttl:
            env["supported_cache_ttl_seconds"] = float(ttl)
        env.update(overrides)
        return cls(**{k: v for k, v in env.items() if v is not None})
