"""Payment requirements and challenge creation functions."""

from typing import Any, Optional, Sequence, Union

from ..types import (
    SCHEME_EXACT,
    NetworkLike,
    PaymentRequired,
    PaymentRequirements,
    ProtocolVersion,
    ResourceInfo,
    TokenAsset,
    to_caip2
)


def create_payment_requirements(
    amount: Union[str, int],
    asset: Union[str, TokenAsset],
    pay_to_address: str,
    network: NetworkLike,
    fee_payer: str,
    resource: str,
    description: str = "Payment required",
    mime_type: str = "application/json",
    max_timeout_seconds: int = 300,
    scheme: str = SCHEME_EXACT,
    **extra: Any
) -> PaymentRequirements:
    """Creates PaymentRequirements for a Solana SPL payment.

    Args:
        amount: Price in atomic units of the asset (e.g. "1000000" for 1 USDC)
        asset: SPL token mint address, or a TokenAsset
        pay_to_address: Treasury wallet that receives the payment
        network: Solana network in any spelling; emitted as CAIP-2
        fee_payer: Facilitator address that pays transaction fees
        resource: URL of the protected resource
        description: Human-readable description
        mime_type: Expected response content type
        max_timeout_seconds: Payment validity timeout
        scheme: Payment scheme (default: "exact")
        **extra: Additional fields placed in ``extra``

    Returns:
        PaymentRequirements ready for a 402 challenge
    """
    asset_address = asset.address if isinstance(asset, TokenAsset) else asset
    return PaymentRequirements(
        scheme=scheme,
        network=to_caip2(network),
        amount=str(amount),
        pay_to=pay_to_address,
        asset=asset_address,
        max_timeout_seconds=max_timeout_seconds,
        extra={
            "feePayer": fee_payer,
            "description": description,
            "mimeType": mime_type,
            "resource": resource,
            **extra,
        }
    )


def create_payment_required_response(
    requirements: Union[PaymentRequirements, Sequence[PaymentRequirements]],
    resource_url: str,
    error: Optional[str] = "Payment required",
    version: ProtocolVersion = ProtocolVersion.V2
) -> PaymentRequired:
    """Build the challenge body sent with HTTP 402.

    V2 challenges describe the resource once at the top level. V1 challenges
    have no such field, so the description is copied onto each requirement.
    """
    if isinstance(requirements, PaymentRequirements):
        requirements = [requirements]
    accepts = list(requirements)
    first = accepts[0] if accepts else None
    description = first.extra_value("description", "") if first else ""
    mime_type = first.extra_value("mimeType", "application/json") if first else "application/json"

    if version == ProtocolVersion.V1:
        return PaymentRequired(
            x402_version=ProtocolVersion.V1,
            accepts=[
                req.model_copy(update={
                    "resource": req.extra_value("resource", resource_url),
                    "description": req.extra_value("description", ""),
                    "mime_type": req.extra_value("mimeType", "application/json"),
                })
                for req in accepts
            ],
            error=error
        )

    return PaymentRequired(
        x402_version=ProtocolVersion.V2,
        resource=ResourceInfo(url=resource_url, description=description, mime_type=mime_type),
        accepts=accepts,
        error=error
    )
