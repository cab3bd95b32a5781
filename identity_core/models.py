"""Signer identities and the transactions they produce."""

from dataclasses import dataclass, field
from typing import Any, Optional

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class Identity:
    """A signer's address; the key stays inside the signing module."""

    address: str
    label: str = ""
    _account: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class TransactionIntent:
    """Unsigned description of one state-changing transaction."""

    to: Optional[str]
    data: bytes
    nonce: int
    gas_limit: int
    gas_price: int = 0
    value: int = 0

    @property
    def is_contract_creation(self) -> bool:
        return self.to is None


@dataclass(frozen=True)
class SignedTransaction:
    intent: TransactionIntent
    sender: str
    raw: bytes
    tx_hash: str
