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
"""Solana network identifiers and CAIP-2 normalization."""

from enum import Enum
from typing import NamedTuple, Optional, Union


SOLANA_NAMESPACE = "solana"

SOLANA_MAINNET_CAIP2 = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"
SOLANA_DEVNET_CAIP2 = "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"


class SolanaNetwork(str, Enum):
    """Human-readable Solana network names used in configuration."""
    MAINNET = "solana"
    DEVNET = "solana-devnet"


class ChainId(NamedTuple):
    """A CAIP-2 chain identifier split into namespace and reference."""
    namespace: str
    reference: str

    def __str__(self) -> str:
        return f"{self.namespace}:{self.reference}"


_SIMPLE_TO_CAIP2 = {
    SolanaNetwork.MAINNET: SOLANA_MAINNET_CAIP2,
    SolanaNetwork.DEVNET: SOLANA_DEVNET_CAIP2,
}

NetworkLike = Union[str, SolanaNetwork]


def _value(network: NetworkLike) -> str:
    if isinstance(network, SolanaNetwork):
        return network.value
    return str(network)


def parse_chain_id(network: NetworkLike) -> Optional[ChainId]:
    """Split a CAIP-2 identifier, returning None for human-readable names."""
    value = _value(network)
    namespace, sep, reference = value.partition(":")
    if not sep or not namespace or not reference:
        return None
    return ChainId(namespace, reference)


def is_solana_network(network: NetworkLike) -> bool:
    """Check if a network string is a Solana network in any format."""
    value = _value(network)
    if value in (SolanaNetwork.MAINNET.value, SolanaNetwork.DEVNET.value):
        return True
    chain_id = parse_chain_id(value)
    return chain_id is not None and chain_id.namespace == SOLANA_NAMESPACE


def is_solana_mainnet(network: NetworkLike) -> bool:
    value = _value(network)
    return value in (SolanaNetwork.MAINNET.value, SOLANA_MAINNET_CAIP2)


def is_solana_devnet(network: NetworkLike) -> bool:
    value = _value(network)
    return value in (SolanaNetwork.DEVNET.value, SOLANA_DEVNET_CAIP2)


def to_caip2(network: NetworkLike) -> str:
    """Convert a human-readable network name to its CAIP-2 identifier.

    CAIP-2 input for one of the two recognised networks is returned as-is.

    Raises:
        ValueError: If the network is not a recognised Solana network.
    """
    value = _value(network)
    if value in (SOLANA_MAINNET_CAIP2, SOLANA_DEVNET_CAIP2):
        return value
    try:
        return _SIMPLE_TO_CAIP2[SolanaNetwork(value)]
    except ValueError:
        raise ValueError(f"Unsupported Solana network: {value}") from None


def to_simple_network(network: NetworkLike) -> SolanaNetwork:
    """Convert any network spelling to its human-readable name.

    Anything that is not recognisably mainnet resolves to devnet, so an
    unknown Solana chain is never treated as production.
    """
    if is_solana_mainnet(network):
        return SolanaNetwork.MAINNET
    return SolanaNetwork.DEVNET


def same_network_family(left: NetworkLike, right: NetworkLike) -> bool:
    """True when both networks are Solana and share the mainnet/devnet flavour."""
    if not (is_solana_network(left) and is_solana_network(right)):
        return False
    return to_simple_network(left) == to_simple_network(right)
