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
"""x402 wire models shared by the client and the server.

Field names are snake_case in Python and camelCase on the wire. Models are
dumped with ``by_alias=True, exclude_none=True``; unknown fields are kept so
values received from a peer can be echoed back unchanged.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


SCHEME_EXACT = "exact"


class ProtocolVersion(IntEnum):
    """x402 wire generations.

    V1 carries the challenge in the response body and the proof in
    ``X-PAYMENT``; V2 carries both in dedicated base64 headers.
    """
    V1 = 1
    V2 = 2


class X402Model(BaseModel):
    """Base model for wire types."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump using wire (camelCase) names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ResourceInfo(X402Model):
    """Describes the protected resource in V2 challenges and payloads."""
    url: str
    description: str = ""
    mime_type: str = Field(default="application/json", alias="mimeType")


class PaymentRequirements(X402Model):
    """One acceptable way of paying for a resource."""

    scheme: str = SCHEME_EXACT
    network: str
    amount: str = Field(
        validation_alias=AliasChoices("amount", "maxAmountRequired"),
        serialization_alias="amount",
    )
    pay_to: str = Field(alias="payTo")
    asset: str
    max_timeout_seconds: int = Field(default=300, alias="maxTimeoutSeconds")
    extra: Optional[Dict[str, Any]] = None

    # V1 servers put these at the top level instead of in ``extra``.
    resource: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    output_schema: Optional[Any] = Field(default=None, alias="outputSchema")

    @field_validator("amount", mode="before")
    @classmethod
    def _validate_amount(cls, value: Any) -> str:
        if isinstance(value, bool):
            raise ValueError("amount must be an integer amount of atomic units")
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
            raise ValueError(
                f"amount must be a non-negative integer string, got {value!r}"
            )
        return value

    @property
    def amount_atomic(self) -> int:
        return int(self.amount)

    @property
    def fee_payer(self) -> Optional[str]:
        return (self.extra or {}).get("feePayer")

    def extra_value(self, key: str, default: Any = None) -> Any:
        """Look a field up in ``extra`` first, then at the V1 top level."""
        extra = self.extra or {}
        if extra.get(key) is not None:
            return extra[key]
        legacy = {
            "description": self.description,
            "mimeType": self.mime_type,
            "resource": self.resource,
        }.get(key)
        return legacy if legacy is not None else default


class PaymentRequired(X402Model):
    """The challenge sent with HTTP 402."""
    x402_version: int = Field(default=ProtocolVersion.V2, alias="x402Version")
    error: Optional[str] = None
    resource: Optional[ResourceInfo] = None
    accepts: List[PaymentRequirements] = Field(default_factory=list)
    extensions: Optional[Dict[str, Any]] = None


class ExactSvmPayload(X402Model):
    """Scheme payload: a base64 serialized, partially signed transaction."""
    transaction: str


class PaymentPayload(X402Model):
    """Proof of payment sent by the client on retry.

    V2 payloads carry ``resource`` and ``accepted``; V1 payloads carry flat
    ``scheme`` and ``network`` instead.
    """
    x402_version: int = Field(alias="x402Version")
    scheme: Optional[str] = None
    network: Optional[str] = None
    resource: Optional[ResourceInfo] = None
    accepted: Optional[PaymentRequirements] = None
    payload: ExactSvmPayload
    extensions: Optional[Dict[str, Any]] = None

    @property
    def protocol_version(self) -> ProtocolVersion:
        return ProtocolVersion.V1 if self.x402_version == 1 else ProtocolVersion.V2

    def to_wire(self) -> Dict[str, Any]:
        """Dump without filling in defaults, so ``accepted`` echoes the challenge."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude_unset=True, mode="json")


class VerifyResponse(X402Model):
    """Facilitator verification outcome."""
    is_valid: bool = Field(alias="isValid")
    invalid_reason: Optional[str] = Field(default=None, alias="invalidReason")
    payer: Optional[str] = None


class SettleResponse(X402Model):
    """Facilitator settlement outcome."""
    success: bool
    transaction: Optional[str] = None
    network: Optional[str] = None
    error_reason: Optional[str] = Field(default=None, alias="errorReason")
    payer: Optional[str] = None


class SupportedKind(X402Model):
    """A (version, scheme, network) combination a facilitator accepts."""
    x402_version: int = Field(default=ProtocolVersion.V2, alias="x402Version")
    scheme: str
    network: str
    extra: Optional[Dict[str, Any]] = None

    @property
    def fee_payer(self) -> Optional[str]:
        return (self.extra or {}).get("feePayer")


class SupportedResponse(X402Model):
    """Body of the facilitator's ``GET /supported``."""
    kinds: List[SupportedKind] = Field(default_factory=list)
