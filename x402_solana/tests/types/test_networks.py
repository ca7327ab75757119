"""Unit tests for x402_solana.types.networks module."""

import pytest

from x402_solana.types.networks import (
    SOLANA_DEVNET_CAIP2,
    SOLANA_MAINNET_CAIP2,
    ChainId,
    SolanaNetwork,
    is_solana_devnet,
    is_solana_mainnet,
    is_solana_network,
    parse_chain_id,
    same_network_family,
    to_caip2,
    to_simple_network
)


class TestCaip2Conversion:
    """Test conversion between human names and CAIP-2 ids."""

    def test_to_caip2_human_names(self):
        assert to_caip2("solana") == SOLANA_MAINNET_CAIP2
        assert to_caip2("solana-devnet") == SOLANA_DEVNET_CAIP2
        assert to_caip2(SolanaNetwork.DEVNET) == SOLANA_DEVNET_CAIP2

    def test_to_caip2_passes_known_ids_through(self):
        assert to_caip2(SOLANA_MAINNET_CAIP2) == SOLANA_MAINNET_CAIP2
        assert to_caip2(SOLANA_DEVNET_CAIP2) == SOLANA_DEVNET_CAIP2

    def test_to_caip2_unknown_name_raises(self):
        with pytest.raises(ValueError):
            to_caip2("base")

    @pytest.mark.parametrize("caip2", [SOLANA_MAINNET_CAIP2, SOLANA_DEVNET_CAIP2])
    def test_round_trip(self, caip2):
        """Canonical ids survive a trip through the human name."""
        assert to_caip2(to_simple_network(caip2)) == caip2

    def test_unknown_solana_chain_resolves_to_devnet(self):
        assert to_simple_network("solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z") == SolanaNetwork.DEVNET

    def test_to_simple_network_human_names(self):
        assert to_simple_network("solana") == SolanaNetwork.MAINNET
        assert to_simple_network("solana-devnet") == SolanaNetwork.DEVNET


class TestNetworkPredicates:
    """Test Solana family and flavour checks."""

    @pytest.mark.parametrize("network", [
        "solana",
        "solana-devnet",
        SOLANA_MAINNET_CAIP2,
        SOLANA_DEVNET_CAIP2,
        "solana:somethingElse",
    ])
    def test_is_solana_network(self, network):
        assert is_solana_network(network)

    @pytest.mark.parametrize("network", ["base", "eip155:8453", "solana:", "", "solanas"])
    def test_is_not_solana_network(self, network):
        assert not is_solana_network(network)

    def test_mainnet_devnet(self):
        assert is_solana_mainnet("solana")
        assert is_solana_mainnet(SOLANA_MAINNET_CAIP2)
        assert not is_solana_mainnet(SOLANA_DEVNET_CAIP2)
        assert is_solana_devnet(SOLANA_DEVNET_CAIP2)
        assert not is_solana_devnet("solana")

    def test_parse_chain_id(self):
        assert parse_chain_id(SOLANA_DEVNET_CAIP2) == ChainId(
            "solana", "EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
        )
        assert str(parse_chain_id(SOLANA_DEVNET_CAIP2)) == SOLANA_DEVNET_CAIP2
        assert parse_chain_id("solana-devnet") is None

    def test_same_network_family(self):
        assert same_network_family("solana-devnet", SOLANA_DEVNET_CAIP2)
        assert same_network_family("solana", SOLANA_MAINNET_CAIP2)
        assert not same_network_family(SOLANA_MAINNET_CAIP2, SOLANA_DEVNET_CAIP2)
        assert not same_network_family("base", "base")
