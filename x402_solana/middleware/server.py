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
"""Framework-agnostic server-side payment handling."""

import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field

from ..core.codec import (
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PAYMENT_SIGNATURE_HEADER,
    X_PAYMENT_HEADER,
    encode_payment_required_header,
    encode_settle_response_header,
    get_header
)
from ..core.facilitator import FacilitatorClient
from ..core.merchant import create_payment_required_response
from ..core.merchant import create_payment_requirements as build_payment_requirements
from ..core.protocol import ensure_verified
from ..core.utils import get_default_rpc_url, get_default_token_asset
from ..types import (
    FacilitatorRejection,
    FacilitatorTransportError,
    PaymentRequirements,
    ProtocolDecodeError,
    ProtocolVersion,
    RouteConfig,
    SettleResponse,
    VerifyResponse,
    X402ErrorCode,
    X402ServerConfig,
    to_caip2
)

logger = logging.getLogger(__name__)

SettlementFailureHook = Callable[[SettleResponse, PaymentRequirements], Any]


class X402Response(BaseModel):
    """An HTTP response for the host framework to send."""
    status_code: int = 402
    body: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class X402PaymentHandler:
    """Server-side x402 payment processing, independent of web framework.

    Example:
        handler = X402PaymentHandler(X402ServerConfig(
            network="solana-devnet",
            treasury_address="...",
        ))
        response = await handler.process(
            request.headers, RouteConfig(amount="1000000"), str(request.url), handler_fn
        )
    """

    def __init__(
        self,
        config: X402ServerConfig,
        facilitator_client: Optional[FacilitatorClient] = None,
        on_settlement_failure: Optional[SettlementFailureHook] = None
    ):
        self.config = config
        self.network = to_caip2(config.network)
        self.rpc_url = config.rpc_url or get_default_rpc_url(config.network)
        self.default_token = config.default_token or get_default_token_asset(config.network)
        self.facilitator_client = facilitator_client or FacilitatorClient(
            config.facilitator_config()
        )
        self.on_settlement_failure = on_settlement_failure

    def get_network(self) -> str:
        """The configured network in CAIP-2 form."""
        return self.network

    def get_treasury_address(self) -> str:
        return self.config.treasury_address

    def extract_payment(self, headers: Optional[Mapping[str, Any]]) -> Optional[str]:
        """Return the payment header value, preferring the V2 header name."""
        return (
            get_header(headers, PAYMENT_SIGNATURE_HEADER)
            or get_header(headers, X_PAYMENT_HEADER)
        )

    async def create_payment_requirements(
        self,
        route_config: Union[RouteConfig, Mapping[str, Any]],
        resource_url: str
    ) -> PaymentRequirements:
        """Price a resource using the facilitator's fee payer.

        Raises:
            FacilitatorNetworkUnsupportedError: If the facilitator has no fee
                payer for the configured network
            FacilitatorTransportError: If the facilitator is unreachable
        """
        if not isinstance(route_config, RouteConfig):
            route_config = RouteConfig.model_validate(route_config)

        fee_payer = await self.facilitator_client.get_fee_payer(self.network)
        return build_payment_requirements(
            amount=route_config.amount,
            asset=route_config.asset or self.default_token,
            pay_to_address=self.config.treasury_address,
            network=self.network,
            fee_payer=fee_payer,
            resource=resource_url,
            description=route_config.description or self.config.default_description,
            mime_type=route_config.mime_type or self.config.default_mime_type,
            max_timeout_seconds=(
                route_config.max_timeout_seconds or self.config.default_timeout_seconds
            )
        )

    def create_402_response(
        self,
        requirements: PaymentRequirements,
        resource_url: str,
        error: str = "Payment required"
    ) -> X402Response:
        """Build the 402 challenge, carried both in the header and the body."""
        challenge = create_payment_required_response(
            requirements,
            resource_url,
            error=error,
            version=ProtocolVersion.V2
        )
        return X402Response(
            status_code=402,
            body=challenge.to_wire(),
            headers={PAYMENT_REQUIRED_HEADER: encode_payment_required_header(challenge)}
        )

    async def verify_payment(
        self,
        payment_header: str,
        requirements: PaymentRequirements
    ) -> VerifyResponse:
        return await self.facilitator_client.verify_payment(payment_header, requirements)

    async def settle_payment(
        self,
        payment_header: str,
        requirements: PaymentRequirements
    ) -> SettleResponse:
        return await self.facilitator_client.settle_payment(payment_header, requirements)

    async def process(
        self,
        headers: Optional[Mapping[str, Any]],
        route_config: Union[RouteConfig, Mapping[str, Any]],
        resource_url: str,
        protected: Callable[[], Any]
    ) -> X402Response:
        """Run the full verify, execute and settle cycle for one request.

        Args:
            headers: Incoming request headers
            route_config: Price of the resource
            resource_url: URL of the resource
            protected: Sync or async callable producing the response body,
                or an X402Response

        Returns:
            A 402 challenge when payment is missing or invalid, otherwise the
            protected result. Settlement failure does not change the result.
        """
        requirements = await self.create_payment_requirements(route_config, resource_url)
        payment_header = self.extract_payment(headers)
        if not payment_header:
            logger.info(f"No payment provided for {resource_url}, sending challenge")
            return self.create_402_response(requirements, resource_url)

        try:
            ensure_verified(await self.verify_payment(payment_header, requirements))
        except ProtocolDecodeError as e:
            logger.warning(f"Malformed payment header for {resource_url}: {e}")
            return self.create_402_response(
                requirements, resource_url, error=X402ErrorCode.INVALID_PAYMENT_HEADER
            )
        except FacilitatorRejection as e:
            logger.warning(f"Payment verification failed: {e.reason}")
            return self.create_402_response(requirements, resource_url, error=e.reason)

        logger.info("Payment verified successfully. Executing protected resource.")
        result = await _maybe_await(protected())
        response = result if isinstance(result, X402Response) else X402Response(
            status_code=200, body=result
        )

        try:
            settle_response = await self.settle_payment(payment_header, requirements)
        except FacilitatorTransportError as e:
            logger.warning(f"Settlement request failed: {e}")
            settle_response = SettleResponse(
                success=False,
                error_reason=X402ErrorCode.UNEXPECTED_SETTLE_ERROR,
                network=requirements.network
            )

        if settle_response.success:
            logger.info(f"Settlement successful: {settle_response.transaction}")
            return response.model_copy(update={"headers": {
                **response.headers,
                PAYMENT_RESPONSE_HEADER: encode_settle_response_header(settle_response),
            }})

        logger.warning(f"Settlement failed: {settle_response.error_reason}")
        if self.on_settlement_failure is not None:
            try:
                await _maybe_await(self.on_settlement_failure(settle_response, requirements))
            except Exception:
                logger.exception("Settlement failure hook raised")
        return response
