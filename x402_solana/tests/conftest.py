"""Shared pytest fixtures for x402_solana tests."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from x402_solana.core.codec import create_payment_payload, encode_payment_header
from x402_solana.core.transaction import TOKEN_PROGRAM_ID
from x402_solana.core.utils import USDC_DEVNET_ADDRESS
from x402_solana.core.wallet import KeypairWallet
from x402_solana.types import (
    SOLANA_DEVNET_CAIP2,
    SOLANA_MAINNET_CAIP2,
    PaymentRequired,
    PaymentRequirements,
    ProtocolVersion,
    ResourceInfo
)


RESOURCE_URL = "https://api.example.com/premium"
FACILITATOR_URL = "https://facilitator.test"


class FakeWallet:
    """Wallet exposing ``address`` that records what it was asked to sign."""

    def __init__(self, address: str = None):
        self.address = address or str(Pubkey.new_unique())
        self.signed = []

    def sign_transaction(self, transaction):
        self.signed.append(transaction)
        return transaction


def mint_account(owner=TOKEN_PROGRAM_ID, decimals=6):
    """RPC account stub shaped like an SPL mint."""
    return SimpleNamespace(owner=owner, data=bytes(44) + bytes([decimals]) + bytes(37))


@pytest.fixture
def payer_keypair():
    return Keypair()


@pytest.fixture
def keypair_wallet(payer_keypair):
    return KeypairWallet(payer_keypair)


@pytest.fixture
def fake_wallet():
    return FakeWallet()


@pytest.fixture
def treasury_address():
    return str(Pubkey.new_unique())


@pytest.fixture
def fee_payer_address():
    return str(Pubkey.new_unique())


@pytest.fixture
def sample_payment_requirements(treasury_address, fee_payer_address):
    """Create sample V2 PaymentRequirements for testing."""
    return PaymentRequirements(
        scheme="exact",
        network=SOLANA_DEVNET_CAIP2,
        amount="1000000",
        pay_to=treasury_address,
        asset=USDC_DEVNET_ADDRESS,
        max_timeout_seconds=300,
        extra={
            "feePayer": fee_payer_address,
            "description": "Premium data",
            "mimeType": "application/json",
            "resource": RESOURCE_URL,
        }
    )


@pytest.fixture
def sample_v1_requirements_dict(treasury_address, fee_payer_address):
    """A legacy requirement as a V1 server would put it in the 402 body."""
    return {
        "scheme": "exact",
        "network": "solana-devnet",
        "maxAmountRequired": "1000000",
        "payTo": treasury_address,
        "asset": USDC_DEVNET_ADDRESS,
        "maxTimeoutSeconds": 60,
        "resource": RESOURCE_URL,
        "description": "Legacy data",
        "mimeType": "application/json",
        "extra": {"feePayer": fee_payer_address},
    }


@pytest.fixture
def sample_payment_required(sample_payment_requirements):
    """Create a sample V2 challenge."""
    return PaymentRequired(
        x402_version=2,
        resource=ResourceInfo(url=RESOURCE_URL, description="Premium data"),
        accepts=[sample_payment_requirements],
        error="Payment required"
    )


@pytest.fixture
def sample_payment_header(sample_payment_requirements):
    """Base64 V2 payment header wrapping a dummy transaction."""
    payload = create_payment_payload(
        b"signed-transaction",
        sample_payment_requirements,
        ProtocolVersion.V2,
        resource_url=RESOURCE_URL
    )
    return encode_payment_header(payload)


@pytest.fixture
def mock_rpc_client():
    """Solana RPC client stub with an existing mint and token accounts."""
    client = AsyncMock()
    client.get_account_info.return_value = SimpleNamespace(value=mint_account())
    client.get_multiple_accounts.return_value = SimpleNamespace(
        value=[SimpleNamespace(), SimpleNamespace()]
    )
    client.get_latest_blockhash.return_value = SimpleNamespace(
        value=SimpleNamespace(blockhash=Hash.new_unique())
    )
    return client


@pytest.fixture
def supported_body(fee_payer_address):
    """Facilitator /supported response covering both Solana networks."""
    return {
        "kinds": [
            {
                "x402Version": 2,
                "scheme": "exact",
                "network": SOLANA_MAINNET_CAIP2,
                "extra": {"feePayer": "MainnetFeePayer1111111111111111111111111111"},
            },
            {
                "x402Version": 2,
                "scheme": "exact",
                "network": SOLANA_DEVNET_CAIP2,
                "extra": {"feePayer": fee_payer_address},
            },
        ]
    }


def mock_http_client(handler):
    """httpx.AsyncClient answering every request through ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
