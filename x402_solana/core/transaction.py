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
"""Assembly of the SPL ``TransferChecked`` transaction for the exact scheme."""

import logging
from typing import Any, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ..types import (
    InvalidRequirementsError,
    MissingDestinationAccountError,
    MissingSourceAccountError,
    PaymentRequirements
)
from .wallet import normalize_wallet

logger = logging.getLogger(__name__)


TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
COMPUTE_BUDGET_PROGRAM_ID = Pubkey.from_string("ComputeBudget111111111111111111111111111111")

COMPUTE_UNIT_LIMIT = 7000
COMPUTE_UNIT_PRICE_MICROLAMPORTS = 1

# Offset of the u8 decimals field in the SPL mint layout.
MINT_DECIMALS_OFFSET = 44

MAX_TOKEN_AMOUNT = 2**64 - 1

_SET_COMPUTE_UNIT_LIMIT = 2
_SET_COMPUTE_UNIT_PRICE = 3
_TRANSFER_CHECKED = 12


def _parse_pubkey(value: Optional[str], field: str) -> Pubkey:
    if not value:
        raise InvalidRequirementsError(f"Payment requirements are missing {field}")
    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise InvalidRequirementsError(f"Invalid {field} address: {value}") from e


def derive_associated_token_address(owner: Pubkey, mint: Pubkey, token_program: Pubkey) -> Pubkey:
    """Derive the associated token account for ``owner`` and ``mint``."""
    ata, _ = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID
    )
    return ata


def set_compute_unit_limit_instruction(units: int) -> Instruction:
    return Instruction(
        program_id=COMPUTE_BUDGET_PROGRAM_ID,
        accounts=[],
        data=bytes([_SET_COMPUTE_UNIT_LIMIT]) + units.to_bytes(4, "little")
    )


def set_compute_unit_price_instruction(micro_lamports: int) -> Instruction:
    return Instruction(
        program_id=COMPUTE_BUDGET_PROGRAM_ID,
        accounts=[],
        data=bytes([_SET_COMPUTE_UNIT_PRICE]) + micro_lamports.to_bytes(8, "little")
    )


def transfer_checked_instruction(
    token_program: Pubkey,
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int
) -> Instruction:
    return Instruction(
        program_id=token_program,
        accounts=[
            AccountMeta(source, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(destination, is_signer=False, is_writable=True),
            AccountMeta(owner, is_signer=True, is_writable=False),
        ],
        data=bytes([_TRANSFER_CHECKED]) + amount.to_bytes(8, "little") + bytes([decimals])
    )


async def _resolve_mint(rpc_client: AsyncClient, mint: Pubkey):
    response = await rpc_client.get_account_info(mint)
    account = response.value
    if account is None:
        raise InvalidRequirementsError(f"Token mint not found: {mint}")

    if account.owner == TOKEN_PROGRAM_ID:
        token_program = TOKEN_PROGRAM_ID
    elif account.owner == TOKEN_2022_PROGRAM_ID:
        token_program = TOKEN_2022_PROGRAM_ID
    else:
        raise InvalidRequirementsError(
            f"Asset {mint} is not owned by a token program (owner {account.owner})"
        )

    data = bytes(account.data)
    if len(data) <= MINT_DECIMALS_OFFSET:
        raise InvalidRequirementsError(f"Account {mint} is not a token mint")
    return token_program, data[MINT_DECIMALS_OFFSET]


async def create_solana_payment_transaction(
    wallet: Any,
    requirements: PaymentRequirements,
    rpc_url: Optional[str],
    *,
    rpc_client: Optional[AsyncClient] = None
) -> VersionedTransaction:
    """Build and sign a transfer satisfying ``requirements``.

    The facilitator's fee payer pays for the transaction and signs it later;
    the wallet only adds its own signature.

    Args:
        wallet: Wallet with ``public_key`` or ``address`` and ``sign_transaction``
        requirements: The selected payment requirement
        rpc_url: Solana RPC endpoint, used when ``rpc_client`` is not given
        rpc_client: Optional existing RPC client; left open when provided

    Returns:
        The transaction exactly as returned by the wallet's signer

    Raises:
        InvalidRequirementsError: Missing fee payer, receiver or asset, an
            amount above u64, or a mint not owned by a token program
        MissingSourceAccountError: The payer has no token account
        MissingDestinationAccountError: The receiver has no token account
        MissingWalletCapabilityError: The wallet cannot sign
    """
    solana_wallet = normalize_wallet(wallet)

    fee_payer = _parse_pubkey(requirements.fee_payer, "extra.feePayer")
    destination_owner = _parse_pubkey(requirements.pay_to, "payTo")
    mint = _parse_pubkey(requirements.asset, "asset")
    source_owner = _parse_pubkey(solana_wallet.address, "wallet address")
    amount = requirements.amount_atomic
    if amount > MAX_TOKEN_AMOUNT:
        raise InvalidRequirementsError(f"Amount {amount} does not fit in a u64 token amount")

    owns_client = rpc_client is None
    if owns_client:
        if not rpc_url:
            raise InvalidRequirementsError("An RPC URL is required to build the payment")
        rpc_client = AsyncClient(rpc_url, commitment=Confirmed)

    try:
        token_program, decimals = await _resolve_mint(rpc_client, mint)

        source_ata = derive_associated_token_address(source_owner, mint, token_program)
        destination_ata = derive_associated_token_address(destination_owner, mint, token_program)

        accounts = await rpc_client.get_multiple_accounts([source_ata, destination_ata])
        source_account, destination_account = accounts.value
        if source_account is None:
            raise MissingSourceAccountError(str(source_owner), str(mint))
        if destination_account is None:
            raise MissingDestinationAccountError(str(destination_owner), str(mint))

        blockhash_response = await rpc_client.get_latest_blockhash()
        blockhash = blockhash_response.value.blockhash
    finally:
        if owns_client:
            await rpc_client.close()

    instructions = [
        set_compute_unit_limit_instruction(COMPUTE_UNIT_LIMIT),
        set_compute_unit_price_instruction(COMPUTE_UNIT_PRICE_MICROLAMPORTS),
        transfer_checked_instruction(
            token_program,
            source_ata,
            mint,
            destination_ata,
            source_owner,
            amount,
            decimals
        ),
    ]
    message = MessageV0.try_compile(
        payer=fee_payer,
        instructions=instructions,
        address_lookup_table_accounts=[],
        recent_blockhash=blockhash
    )
    unsigned = VersionedTransaction.populate(
        message,
        [Signature.default()] * message.header.num_required_signatures
    )

    logger.debug(
        f"Built transfer of {amount} {mint} from {source_ata} to {destination_ata}, "
        f"fee payer {fee_payer}"
    )
    return await solana_wallet.sign_transaction(unsigned)
