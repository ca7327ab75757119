"""Unit tests for x402_solana.core.transaction module."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature

from x402_solana.core.transaction import (
    COMPUTE_BUDGET_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    create_solana_payment_transaction,
    derive_associated_token_address
)
from x402_solana.tests.conftest import mint_account
from x402_solana.types import (
    InvalidRequirementsError,
    MissingDestinationAccountError,
    MissingSourceAccountError,
    MissingWalletCapabilityError
)


RPC_URL = "https://rpc.test"


def _instruction_parts(transaction):
    message = transaction.message
    keys = list(message.account_keys)
    return [(keys[ix.program_id_index], bytes(ix.data)) for ix in message.instructions]


class TestTransactionLayout:
    """Test the compiled transfer transaction."""

    @pytest.mark.asyncio
    async def test_instruction_order_and_data(
        self, keypair_wallet, sample_payment_requirements, mock_rpc_client
    ):
        transaction = await create_solana_payment_transaction(
            keypair_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )
        parts = _instruction_parts(transaction)

        assert len(parts) == 3
        limit_program, limit_data = parts[0]
        assert limit_program == COMPUTE_BUDGET_PROGRAM_ID
        assert limit_data[0] == 2
        assert int.from_bytes(limit_data[1:5], "little") == 7000

        price_program, price_data = parts[1]
        assert price_program == COMPUTE_BUDGET_PROGRAM_ID
        assert price_data[0] == 3
        assert int.from_bytes(price_data[1:9], "little") == 1

        transfer_program, transfer_data = parts[2]
        assert transfer_program == TOKEN_PROGRAM_ID
        assert transfer_data[0] == 12
        assert int.from_bytes(transfer_data[1:9], "little") == 1_000_000
        assert transfer_data[9] == 6

    @pytest.mark.asyncio
    async def test_fee_payer_and_partial_signature(
        self, keypair_wallet, payer_keypair, sample_payment_requirements, mock_rpc_client
    ):
        transaction = await create_solana_payment_transaction(
            keypair_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )
        message = transaction.message

        assert message.account_keys[0] == Pubkey.from_string(sample_payment_requirements.fee_payer)
        assert message.header.num_required_signatures == 2
        assert transaction.signatures[0] == Signature.default()
        assert transaction.signatures[1].verify(payer_keypair.pubkey(), to_bytes_versioned(message))

    @pytest.mark.asyncio
    async def test_accounts_derived_and_checked_in_one_call(
        self, fake_wallet, sample_payment_requirements, mock_rpc_client
    ):
        await create_solana_payment_transaction(
            fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )

        mint = Pubkey.from_string(sample_payment_requirements.asset)
        expected = [
            derive_associated_token_address(
                Pubkey.from_string(fake_wallet.address), mint, TOKEN_PROGRAM_ID
            ),
            derive_associated_token_address(
                Pubkey.from_string(sample_payment_requirements.pay_to), mint, TOKEN_PROGRAM_ID
            ),
        ]
        mock_rpc_client.get_multiple_accounts.assert_awaited_once_with(expected)
        assert len(fake_wallet.signed) == 1

    @pytest.mark.asyncio
    async def test_token_2022_mint(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        mock_rpc_client.get_account_info.return_value = SimpleNamespace(
            value=mint_account(owner=TOKEN_2022_PROGRAM_ID, decimals=9)
        )

        transaction = await create_solana_payment_transaction(
            fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )
        program, data = _instruction_parts(transaction)[2]

        assert program == TOKEN_2022_PROGRAM_ID
        assert data[9] == 9

    @pytest.mark.asyncio
    async def test_wallet_result_returned_as_is(
        self, sample_payment_requirements, mock_rpc_client
    ):
        class OpaqueWallet:
            address = str(Pubkey.new_unique())
            sign_transaction = AsyncMock(return_value="wallet-result")

        result = await create_solana_payment_transaction(
            OpaqueWallet(), sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )
        assert result == "wallet-result"


class TestTransactionFailures:
    """Test failure modes of transaction assembly."""

    @pytest.mark.asyncio
    async def test_missing_fee_payer(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        requirements = sample_payment_requirements.model_copy(update={"extra": {}})

        with pytest.raises(InvalidRequirementsError):
            await create_solana_payment_transaction(
                fake_wallet, requirements, RPC_URL, rpc_client=mock_rpc_client
            )
        mock_rpc_client.get_account_info.assert_not_called()

    @pytest.mark.asyncio
    async def test_amount_above_u64(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        requirements = sample_payment_requirements.model_copy(update={"amount": str(2**64)})

        with pytest.raises(InvalidRequirementsError):
            await create_solana_payment_transaction(
                fake_wallet, requirements, RPC_URL, rpc_client=mock_rpc_client
            )
        mock_rpc_client.get_account_info.assert_not_called()
        assert fake_wallet.signed == []

    @pytest.mark.asyncio
    async def test_largest_u64_amount_is_encoded(
        self, fake_wallet, sample_payment_requirements, mock_rpc_client
    ):
        requirements = sample_payment_requirements.model_copy(update={"amount": str(2**64 - 1)})

        transaction = await create_solana_payment_transaction(
            fake_wallet, requirements, RPC_URL, rpc_client=mock_rpc_client
        )

        transfer_data = _instruction_parts(transaction)[-1][1]
        assert transfer_data[1:9] == b"\xff" * 8

    @pytest.mark.asyncio
    async def test_unknown_mint_owner(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        mock_rpc_client.get_account_info.return_value = SimpleNamespace(
            value=mint_account(owner=Pubkey.new_unique())
        )

        with pytest.raises(InvalidRequirementsError):
            await create_solana_payment_transaction(
                fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
            )

    @pytest.mark.asyncio
    async def test_missing_mint(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        mock_rpc_client.get_account_info.return_value = SimpleNamespace(value=None)

        with pytest.raises(InvalidRequirementsError):
            await create_solana_payment_transaction(
                fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
            )

    @pytest.mark.asyncio
    async def test_missing_source_account(
        self, fake_wallet, sample_payment_requirements, mock_rpc_client
    ):
        mock_rpc_client.get_multiple_accounts.return_value = SimpleNamespace(
            value=[None, SimpleNamespace()]
        )

        with pytest.raises(MissingSourceAccountError):
            await create_solana_payment_transaction(
                fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
            )
        assert fake_wallet.signed == []

    @pytest.mark.asyncio
    async def test_missing_destination_account(
        self, fake_wallet, sample_payment_requirements, mock_rpc_client
    ):
        mock_rpc_client.get_multiple_accounts.return_value = SimpleNamespace(
            value=[SimpleNamespace(), None]
        )

        with pytest.raises(MissingDestinationAccountError) as exc_info:
            await create_solana_payment_transaction(
                fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
            )
        assert exc_info.value.owner == sample_payment_requirements.pay_to

    @pytest.mark.asyncio
    async def test_wallet_without_signer(self, sample_payment_requirements, mock_rpc_client):
        class ReadOnlyWallet:
            address = str(Pubkey.new_unique())

        with pytest.raises(MissingWalletCapabilityError):
            await create_solana_payment_transaction(
                ReadOnlyWallet(), sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
            )


class TestRpcClientLifecycle:

    @pytest.mark.asyncio
    async def test_internal_client_is_closed(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        with patch(
            "x402_solana.core.transaction.AsyncClient", return_value=mock_rpc_client
        ) as client_cls:
            await create_solana_payment_transaction(fake_wallet, sample_payment_requirements, RPC_URL)

        assert client_cls.call_args.args[0] == RPC_URL
        mock_rpc_client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_internal_client_closed_on_failure(
        self, fake_wallet, sample_payment_requirements, mock_rpc_client
    ):
        mock_rpc_client.get_multiple_accounts.return_value = SimpleNamespace(value=[None, None])

        with patch("x402_solana.core.transaction.AsyncClient", return_value=mock_rpc_client):
            with pytest.raises(MissingSourceAccountError):
                await create_solana_payment_transaction(
                    fake_wallet, sample_payment_requirements, RPC_URL
                )
        mock_rpc_client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_supplied_client_left_open(self, fake_wallet, sample_payment_requirements, mock_rpc_client):
        await create_solana_payment_transaction(
            fake_wallet, sample_payment_requirements, RPC_URL, rpc_client=mock_rpc_client
        )
        mock_rpc_client.close.assert_not_called()
