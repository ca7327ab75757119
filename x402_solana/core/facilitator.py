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
"""HTTP client for the facilitator's ``/supported``, ``/verify`` and ``/settle``."""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import httpx
from pydantic import ValidationError

from ..types import (
    SCHEME_EXACT,
    FacilitatorConfig,
    FacilitatorNetworkUnsupportedError,
    FacilitatorTransportError,
    NetworkLike,
    PaymentPayload,
    PaymentRequirements,
    SettleResponse,
    SupportedResponse,
    VerifyResponse,
    X402ErrorCode,
    same_network_family
)
from .auth import JwtTokenProvider, TokenProvider
from .codec import decode_json_header, validate_payment_payload

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", VerifyResponse, SettleResponse, SupportedResponse)


class FacilitatorClient:
    """Talks to an x402 facilitator over HTTP.

    Verification and settlement outcomes, including non-2xx answers, are
    returned as data. Only failures to reach the facilitator raise
    :class:`FacilitatorTransportError`.
    """

    def __init__(
        self,
        config: Optional[FacilitatorConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token_provider: Optional[TokenProvider] = None
    ):
        self.config = config or FacilitatorConfig()
        self._base_url = self.config.url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=self.config.timeout)

        if token_provider is None and self.config.has_credentials:
            token_provider = JwtTokenProvider(
                self.config.api_key_id,
                self.config.api_key_secret
            )
        self._token_provider = token_provider

        self._supported: Optional[SupportedResponse] = None
        self._supported_at = 0.0
        self._clock = time.monotonic

    @property
    def url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "FacilitatorClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _auth_headers(self) -> Dict[str, str]:
        if self._token_provider is None:
            return {}
        try:
            token = await self._token_provider.get_token()
        except (ValueError, TypeError) as e:
            raise FacilitatorTransportError(f"Could not obtain facilitator token: {e}") from e
        return {"Authorization": f"Bearer {token}"}

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            headers = await self._auth_headers()
        except FacilitatorTransportError as e:
            e.path = e.path or path
            raise
        try:
            return await self._http_client.request(
                method,
                f"{self._base_url}{path}",
                json=json,
                headers=headers
            )
        except httpx.HTTPError as e:
            raise FacilitatorTransportError(
                f"Facilitator {path} request failed: {e}", path=path
            ) from e

    @staticmethod
    def _parse(response: httpx.Response, model: Type[ResponseT], path: str) -> ResponseT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise FacilitatorTransportError(
                f"Facilitator {path} returned an unreadable body: {e}",
                status_code=response.status_code,
                path=path
            ) from e

    async def get_supported(self) -> SupportedResponse:
        """Fetch the payment kinds the facilitator accepts.

        Results are cached for ``supported_cache_ttl_seconds``; the default
        of zero asks the facilitator every time.
        """
        ttl = self.config.supported_cache_ttl_seconds
        if ttl > 0 and self._supported is not None:
            if self._clock() - self._supported_at < ttl:
                return self._supported

        response = await self._send("GET", "/supported")
        if not response.is_success:
            raise FacilitatorTransportError(
                f"Facilitator /supported returned {response.status_code}",
                status_code=response.status_code,
                path="/supported"
            )
        supported = self._parse(response, SupportedResponse, "/supported")
        if ttl > 0:
            self._supported = supported
            self._supported_at = self._clock()
        return supported

    async def get_fee_payer(self, network: NetworkLike) -> str:
        """Find the facilitator's fee payer for a network in any spelling.

        Raises:
            FacilitatorNetworkUnsupportedError: No exact-scheme kind with a fee
                payer matches the network's mainnet/devnet flavour
        """
        supported = await self.get_supported()
        for kind in supported.kinds:
            if kind.scheme == SCHEME_EXACT and same_network_family(kind.network, network):
                if kind.fee_payer:
                    return kind.fee_payer
        raise FacilitatorNetworkUnsupportedError(str(getattr(network, "value", network)))

    @staticmethod
    def _request_body(
        payment_payload: Union[PaymentPayload, Mapping[str, Any]],
        payment_requirements: PaymentRequirements
    ) -> Dict[str, Any]:
        if isinstance(payment_payload, PaymentPayload):
            payment_payload = payment_payload.to_wire()
        return {
            "paymentPayload": dict(payment_payload),
            "paymentRequirements": payment_requirements.to_wire(),
        }

    async def verify(
        self,
        payment_payload: Union[PaymentPayload, Mapping[str, Any]],
        payment_requirements: PaymentRequirements
    ) -> VerifyResponse:
        """Ask the facilitator to verify a payload.

        A mapping is forwarded as is; use it to pass on the client's JSON
        exactly as received.
        """
        body = self._request_body(payment_payload, payment_requirements)
        response = await self._send("POST", "/verify", json=body)
        if not response.is_success:
            logger.error(f"Facilitator /verify returned {response.status_code}: {response.text}")
            return VerifyResponse(
                is_valid=False,
                invalid_reason=X402ErrorCode.UNEXPECTED_VERIFY_ERROR
            )
        return self._parse(response, VerifyResponse, "/verify")

    async def settle(
        self,
        payment_payload: Union[PaymentPayload, Mapping[str, Any]],
        payment_requirements: PaymentRequirements
    ) -> SettleResponse:
        body = self._request_body(payment_payload, payment_requirements)
        response = await self._send("POST", "/settle", json=body)
        if not response.is_success:
            logger.error(f"Facilitator /settle returned {response.status_code}: {response.text}")
            return SettleResponse(
                success=False,
                error_reason=X402ErrorCode.UNEXPECTED_SETTLE_ERROR,
                transaction="",
                network=payment_requirements.network
            )
        settle_response = self._parse(response, SettleResponse, "/settle")
        if settle_response.network:
            return settle_response
        # Some facilitators omit the network
        return settle_response.model_copy(update={"network": payment_requirements.network})

    def _decode_forwardable(self, payment_header: str) -> Dict[str, Any]:
        data = decode_json_header(payment_header)
        validate_payment_payload(data)
        return data

    async def verify_payment(
        self,
        payment_header: str,
        payment_requirements: PaymentRequirements
    ) -> VerifyResponse:
        """Verify a raw payment header against the requirements.

        The decoded JSON is forwarded untouched once it has been validated.

        Args:
            payment_header: Base64 ``PAYMENT-SIGNATURE`` or ``X-PAYMENT`` value
            payment_requirements: Requirements the payment must satisfy

        Returns:
            The facilitator's verdict, or a local failure on non-2xx

        Raises:
            ProtocolDecodeError: If the header is malformed
            FacilitatorTransportError: If the facilitator is unreachable
        """
        return await self.verify(self._decode_forwardable(payment_header), payment_requirements)

    async def settle_payment(
        self,
        payment_header: str,
        payment_requirements: PaymentRequirements
    ) -> SettleResponse:
        """Settle a raw payment header; see :meth:`verify_payment`."""
        return await self.settle(self._decode_forwardable(payment_header), payment_requirements)
