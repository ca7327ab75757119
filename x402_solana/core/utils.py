"""Amount conversion and per-network default helpers."""

from decimal import ROUND_FLOOR, Decimal
from typing import Union

from ..types import (
    NetworkLike,
    SolanaNetwork,
    TokenAsset,
    is_solana_mainnet,
    to_simple_network
)


USDC_MAINNET_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDC_DEVNET_ADDRESS = "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"
USDC_DECIMALS = 6

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
DEVNET_RPC_URL = "https://api.devnet.solana.com"


def to_atomic_units(amount: Union[int, float, str, Decimal], decimals: int) -> str:
    """Convert a human amount to atomic units, rounding down.

    Args:
        amount: Decimal amount, e.g. ``2.5`` USDC
        decimals: Token decimals

    Returns:
        Atomic units as a decimal string, e.g. ``"2500000"``
    """
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return str(int(scaled.to_integral_value(rounding=ROUND_FLOOR)))


def from_atomic_units(atomic_units: Union[int, str], decimals: int) -> float:
    """Convert atomic units back to a human amount."""
    return float(Decimal(int(atomic_units)) / (Decimal(10) ** decimals))


def get_default_rpc_url(network: NetworkLike) -> str:
    """Public RPC endpoint for a network in any spelling."""
    if to_simple_network(network) == SolanaNetwork.MAINNET:
        return MAINNET_RPC_URL
    return DEVNET_RPC_URL


def get_rpc_url_for_network(network: str) -> str:
    """Public RPC endpoint for a CAIP-2 network id."""
    return MAINNET_RPC_URL if is_solana_mainnet(network) else DEVNET_RPC_URL


def get_default_token_asset(network: NetworkLike) -> TokenAsset:
    """USDC mint for the network."""
    if to_simple_network(network) == SolanaNetwork.MAINNET:
        return TokenAsset(address=USDC_MAINNET_ADDRESS, decimals=USDC_DECIMALS)
    return TokenAsset(address=USDC_DEVNET_ADDRESS, decimals=USDC_DECIMALS)
