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
"""Client-side payment negotiation for x402 protected HTTP resources."""

import logging
from typing import Any, Optional, Sequence

import httpx
from solana.rpc.async_api import AsyncClient

from ..core.codec import (
    PAYMENT_RESPONSE_HEADER,
    create_payment_payload,
    decode_payment_required,
    decode_settle_response_header,
    encode_payment_header,
    get_header,
    payment_header_name
)
from ..core.transaction import create_solana_payment_transaction
from ..core.utils import get_default_rpc_url
from ..core.wallet import normalize_wallet
from ..types import (
    SCHEME_EXACT,
    AmountExceedsLimitError,
    NegotiationState,
    NoSuitableRequirementError,
    PaymentRequirements,
    SettleResponse,
    X402ClientConfig,
    X402Error,
    is_solana_network
)

logger = logging.getLogger(__name__)

PAYMENT_REQUIRED_STATUS = 402


def select_payment_requirements(accepts: Sequence[PaymentRequirements]) -> PaymentRequirements:
    """Pick the first exact-scheme requirement on any Solana network.

    Raises:
        NoSuitableRequirementError: If nothing offered can be paid on Solana
    """
    for requirements in accepts:
        if requirements.scheme == SCHEME_EXACT and is_solana_network(requirements.network):
            return requirements
    raise NoSuitableRequirementError(req.network for req in accepts)


def check_payment_amount(requirements: PaymentRequirements, max_value: int) -> None:
    """Enforce the spending ceiling; ``0`` means no ceiling."""
    amount = requirements.amount_atomic
    if max_value > 0 and amount > max_value:
        raise AmountExceedsLimitError(amount, max_value)


class PaymentFetch:
    """An HTTP request function that pays 402 challenges automatically.

    Each call sends the request once. On 402 it decodes the challenge,
    selects a Solana requirement, has the wallet sign a transfer, and retries
    once with the payment header for the challenge's protocol version. The
    retry's response is returned whatever its status.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        wallet: Any,
        rpc_url: str,
        max_value: int = 0,
        verbose: bool = False,
        rpc_client: Optional[AsyncClient] = None
    ):
        self.http_client = http_client
        self.wallet = normalize_wallet(wallet)
        self.rpc_url = rpc_url
        self.max_value = max_value
        self.rpc_client = rpc_client
        self._log_level = logging.INFO if verbose else logging.DEBUG

    def _transition(self, state: NegotiationState, detail: str = "") -> None:
        logger.log(self._log_level, f"[x402] {state.value}{': ' + detail if detail else ''}")

    async def __call__(self, url: str, method: str = "GET", **kwargs: Any) -> httpx.Response:
        self._transition(NegotiationState.INIT, f"{method} {url}")
        self._transition(NegotiationState.REQUESTED)
        response = await self.http_client.request(method, url, **kwargs)
        if response.status_code != PAYMENT_REQUIRED_STATUS:
            self._transition(NegotiationState.DONE, f"status {response.status_code}")
            return response

        try:
            version, challenge = decode_payment_required(response.headers, response.content)
            self._transition(NegotiationState.CHALLENGED, f"x402 v{int(version)}")

            self._transition(NegotiationState.SELECTING)
            requirements = select_payment_requirements(challenge.accepts)
            check_payment_amount(requirements, self.max_value)

            self._transition(
                NegotiationState.BUILDING,
                f"{requirements.amount} of {requirements.asset} on {requirements.network}"
            )
            signed = await create_solana_payment_transaction(
                self.wallet,
                requirements,
                self.rpc_url,
                rpc_client=self.rpc_client
            )

            self._transition(NegotiationState.ENCODING)
            payload = create_payment_payload(
                signed,
                requirements,
                version,
                resource_url=url,
                resource=challenge.resource
            )
            header_name = payment_header_name(version)
            header_value = encode_payment_header(payload)
        except X402Error as e:
            self._transition(NegotiationState.FAILED, str(e))
            raise

        headers = httpx.Headers(kwargs.pop("headers", None))
        headers[header_name] = header_value
        self._transition(NegotiationState.RETRYING, f"with {header_name}")
        retry_response = await self.http_client.request(method, url, headers=headers, **kwargs)
        self._transition(NegotiationState.DONE, f"status {retry_response.status_code}")
        return retry_response


def create_payment_fetch(
    http_client: httpx.AsyncClient,
    wallet: Any,
    rpc_url: str,
    max_value: int = 0,
    verbose: bool = False
) -> PaymentFetch:
    """Wrap an httpx client so that 402 responses are paid automatically.

    Args:
        http_client: Transport used for both the plain and the paid request
        wallet: Wallet with ``public_key`` or ``address`` and ``sign_transaction``
        rpc_url: Solana RPC endpoint
        max_value: Maximum payment in atomic units (0 = no limit)
        verbose: Log negotiation steps at INFO instead of DEBUG
    """
    return PaymentFetch(http_client, wallet, rpc_url, max_value, verbose)


def decode_payment_response(response: httpx.Response) -> Optional[SettleResponse]:
    """Read the settlement receipt from a paid response, if present."""
    header = get_header(response.headers, PAYMENT_RESPONSE_HEADER)
    if header is None:
        return None
    return decode_settle_response_header(header)


class X402Client:
    """x402 Solana client that pays for protected endpoints automatically.

    Example:
        async with X402Client(X402ClientConfig(wallet=wallet)) as client:
            response = await client.fetch("https://api.example.com/premium")
    """

    def __init__(self, config: X402ClientConfig):
        self.config = config
        rpc_url = config.rpc_url or get_default_rpc_url(config.network)
        self._owns_http_client = config.http_client is None
        self._http_client = config.http_client or httpx.AsyncClient()
        self._payment_fetch = create_payment_fetch(
            self._http_client,
            config.wallet,
            rpc_url,
            config.max_payment_amount,
            config.verbose
        )

    async def fetch(self, url: str, method: str = "GET", **kwargs: Any) -> httpx.Response:
        """Make a request, paying for it if the server answers 402."""
        return await self._payment_fetch(url, method=method, **kwargs)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await self._payment_fetch(url, method=method, **kwargs)

    @staticmethod
    def decode_payment_response(response: httpx.Response) -> Optional[SettleResponse]:
        return decode_payment_response(response)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "X402Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def create_x402_client(config: X402ClientConfig) -> X402Client:
    """Create an x402 client instance."""
    return X402Client(config)
