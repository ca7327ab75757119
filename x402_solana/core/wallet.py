"""Wallet capability: an address plus a transaction signer."""

import inspect
from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from ..types import MissingWalletCapabilityError


SignResult = Union[VersionedTransaction, Awaitable[VersionedTransaction]]


@runtime_checkable
class WalletAdapter(Protocol):
    """Anything that can sign a Solana transaction.

    Wallets expose their address either as ``public_key`` (any object whose
    ``str()`` is base58, e.g. a ``Pubkey``) or as an ``address`` string.
    ``sign_transaction`` may be sync or async.
    """

    def sign_transaction(self, transaction: VersionedTransaction) -> SignResult:
        ...


class SolanaWallet:
    """A wallet normalized to one shape: ``address`` and async signing."""

    def __init__(self, address: str, wallet: Any):
        self.address = address
        self._wallet = wallet

    @property
    def pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.address)

    async def sign_transaction(self, transaction: VersionedTransaction) -> VersionedTransaction:
        result = self._wallet.sign_transaction(transaction)
        if inspect.isawaitable(result):
            result = await result
        return result


def normalize_wallet(wallet: Any) -> SolanaWallet:
    """Unify the accepted wallet shapes behind :class:`SolanaWallet`.

    Raises:
        MissingWalletCapabilityError: If the wallet has no address or
            cannot sign transactions
    """
    if isinstance(wallet, SolanaWallet):
        return wallet
    if wallet is None:
        raise MissingWalletCapabilityError("No wallet configured")

    public_key = getattr(wallet, "public_key", None)
    if callable(public_key):
        public_key = public_key()
    address = str(public_key) if public_key is not None else getattr(wallet, "address", None)
    if not address:
        raise MissingWalletCapabilityError(
            "Wallet must expose either public_key or address"
        )
    if not callable(getattr(wallet, "sign_transaction", None)):
        raise MissingWalletCapabilityError(
            "Wallet does not support signing versioned transactions"
        )
    return SolanaWallet(str(address), wallet)


class KeypairWallet:
    """Wallet backed by a local ``solders`` keypair.

    Only fills in its own signature slot, leaving the fee payer's slot for
    the facilitator.
    """

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    def sign_transaction(self, transaction: VersionedTransaction) -> VersionedTransaction:
        """Partially sign a transaction.

        Args:
            transaction: Transaction whose message lists this wallet as a signer

        Returns:
            A new transaction with this wallet's signature in place

        Raises:
            MissingWalletCapabilityError: If this wallet is not a required signer
        """
        message = transaction.message
        signer = self._keypair.pubkey()
        required = message.header.num_required_signatures
        signer_keys = list(message.account_keys)[:required]
        if signer not in signer_keys:
            raise MissingWalletCapabilityError(
                f"Wallet {signer} is not a required signer of this transaction"
            )
        signatures = list(transaction.signatures)
        signatures[signer_keys.index(signer)] = self._keypair.sign_message(
            to_bytes_versioned(message)
        )
        return VersionedTransaction.populate(message, signatures)

    @classmethod
    def from_base58(cls, private_key: str) -> "KeypairWallet":
        return cls(Keypair.from_base58_string(private_key))

    @classmethod
    def from_bytes(cls, private_key: bytes) -> "KeypairWallet":
        return cls(Keypair.from_bytes(private_key))
