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
"""Wire encoding for challenges, payment headers and settlement receipts.

V2 moves everything into base64-encoded JSON headers; V1 keeps the challenge
in the response body and sends a flat payload in ``X-PAYMENT``. The version
is detected once from the 402 response and passed explicitly afterwards.
"""

import base64
import binascii
import json
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError
from solders.transaction import VersionedTransaction

from ..types import (
    ExactSvmPayload,
    PaymentPayload,
    PaymentRequired,
    PaymentRequirements,
    ProtocolDecodeError,
    ProtocolVersion,
    ResourceInfo,
    SettleResponse
)


PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"
X_PAYMENT_HEADER = "X-PAYMENT"


def get_header(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """Case-insensitive header lookup over any mapping.

    List values (as produced by some frameworks) yield their first element.
    """
    if not headers:
        return None
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() != lowered:
            continue
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if isinstance(value, bytes):
            value = value.decode("latin-1")
        return value or None
    return None


def encode_json_header(data: Mapping[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_json_header(value: str) -> Any:
    """Decode a base64 JSON header value.

    Raises:
        ProtocolDecodeError: If the value is not base64 or not JSON.
    """
    try:
        raw = base64.b64decode(value.strip(), validate=True)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, AttributeError) as e:
        raise ProtocolDecodeError(f"Malformed base64 JSON header: {e}") from e


def detect_protocol_version(headers: Optional[Mapping[str, Any]]) -> ProtocolVersion:
    if get_header(headers, PAYMENT_REQUIRED_HEADER):
        return ProtocolVersion.V2
    return ProtocolVersion.V1


def decode_payment_required(
    headers: Optional[Mapping[str, Any]],
    body: Union[bytes, str, Mapping[str, Any], None]
) -> Tuple[ProtocolVersion, PaymentRequired]:
    """Decode a 402 challenge and report which generation it belongs to.

    Args:
        headers: Response headers
        body: Raw response body, or an already-parsed JSON object

    Returns:
        The detected protocol version and the parsed challenge

    Raises:
        ProtocolDecodeError: If the challenge cannot be parsed
    """
    version = detect_protocol_version(headers)
    if version == ProtocolVersion.V2:
        data = decode_json_header(get_header(headers, PAYMENT_REQUIRED_HEADER))
    elif isinstance(body, Mapping):
        data = dict(body)
    else:
        try:
            data = json.loads(body or b"")
        except ValueError as e:
            raise ProtocolDecodeError(f"402 response body is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProtocolDecodeError("Payment challenge must be a JSON object")
    data.setdefault("x402Version", int(version))
    try:
        return version, PaymentRequired.model_validate(data)
    except ValidationError as e:
        raise ProtocolDecodeError(f"Invalid payment challenge: {e}") from e


def encode_payment_required_header(challenge: PaymentRequired) -> str:
    return encode_json_header(challenge.to_wire())


def serialize_transaction(transaction: Union[VersionedTransaction, bytes]) -> str:
    """Base64 wire form of a signed transaction."""
    raw = transaction if isinstance(transaction, bytes) else bytes(transaction)
    return base64.b64encode(raw).decode("ascii")


def payment_header_name(version: ProtocolVersion) -> str:
    if version == ProtocolVersion.V2:
        return PAYMENT_SIGNATURE_HEADER
    return X_PAYMENT_HEADER


def create_payment_payload(
    transaction: Union[VersionedTransaction, bytes, str],
    requirements: PaymentRequirements,
    version: ProtocolVersion,
    resource_url: Optional[str] = None,
    resource: Optional[ResourceInfo] = None
) -> PaymentPayload:
    """Wrap a signed transaction into the payload shape for ``version``.

    V2 payloads echo the chosen requirement as ``accepted`` and describe the
    resource, preferring the challenge's own ``resource`` when it had one.
    V1 payloads are flat.
    """
    if not isinstance(transaction, str):
        transaction = serialize_transaction(transaction)
    inner = ExactSvmPayload(transaction=transaction)

    if version == ProtocolVersion.V1:
        return PaymentPayload(
            x402_version=ProtocolVersion.V1,
            scheme=requirements.scheme,
            network=requirements.network,
            payload=inner
        )

    if resource is None:
        resource = ResourceInfo(
            url=resource_url or requirements.extra_value("resource", ""),
            description=requirements.extra_value("description", ""),
            mime_type=requirements.extra_value("mimeType", "application/json")
        )
    return PaymentPayload(
        x402_version=ProtocolVersion.V2,
        resource=resource,
        accepted=requirements,
        payload=inner
    )


def encode_payment_header(payload: PaymentPayload) -> str:
    return encode_json_header(payload.to_wire())


def validate_payment_payload(data: Any) -> PaymentPayload:
    try:
        return PaymentPayload.model_validate(data)
    except ValidationError as e:
        raise ProtocolDecodeError(f"Invalid payment payload: {e}") from e


def decode_payment_header(header: str) -> PaymentPayload:
    """Parse a ``PAYMENT-SIGNATURE`` or ``X-PAYMENT`` value.

    Raises:
        ProtocolDecodeError: If the header is not a valid payment payload
    """
    return validate_payment_payload(decode_json_header(header))


def encode_settle_response_header(settle_response: SettleResponse) -> str:
    return encode_json_header(settle_response.to_wire())


def decode_settle_response_header(header: str) -> SettleResponse:
    data = decode_json_header(header)
    try:
        return SettleResponse.model_validate(data)
    except ValidationError as e:
        raise ProtocolDecodeError(f"Invalid settlement receipt: {e}") from e
