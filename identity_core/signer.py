"""Identity generation and transaction signing."""

from typing import Callable, Dict, Optional, Union
import secrets

from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from .models import Identity, SignedTransaction, TransactionIntent


class SigningError(ValueError):
    """Raised when an intent cannot be signed by the given identity."""


def generate_identity(
    label: str = "",
    entropy_provider: Optional[Callable[[int], bytes]] = None,
) -> Identity:
    provider = entropy_provider or secrets.token_bytes
    return identity_from_key(provider(32), label=label)


def identity_from_key(private_key: Union[bytes, str], label: str = "") -> Identity:
    account = Account.from_key(private_key)
    return Identity(address=account.address, label=label, _account=account)


def sign_intent(
    identity: Identity, intent: TransactionIntent, chain_id: Optional[int] = None
) -> SignedTransaction:
    """Sign a legacy transaction; it is replay protected only when ``chain_id`` is given."""

    if identity._account is None:
        raise SigningError(f"Identity {identity.address} carries no signing key.")

    transaction: Dict[str, object] = {
        "nonce": intent.nonce,
        "gasPrice": intent.gas_price,
        "gas": intent.gas_limit,
        "value": intent.value,
        "data": intent.data,
    }
    if chain_id is not None:
        transaction["chainId"] = chain_id
    if intent.to is not None:
        transaction["to"] = to_checksum_address(intent.to)

    signed = identity._account.sign_transaction(transaction)
    return SignedTransaction(
        intent=intent,
        sender=identity.address,
        raw=bytes(signed.raw_transaction),
        tx_hash=to_hex(signed.hash),
    )


def recover_sender(raw: bytes) -> str:
    return Account.recover_transaction(raw)
