"""Ledger simulator models for messages, logs and receipts."""

from dataclasses import dataclass
from typing import Optional, Tuple

from identity_core.models import ZERO_ADDRESS


@dataclass(frozen=True)
class LedgerConfig:
    block_gas_limit: int = 30_000_000
    call_gas_limit: int = 10_000_000


@dataclass(frozen=True)
class CallMessage:
    to: str
    data: bytes
    sender: str = ZERO_ADDRESS
    gas_limit: Optional[int] = None


@dataclass(frozen=True)
class LogEntry:
    address: str
    topics: Tuple[bytes, ...]
    data: bytes
    block_number: int
    log_index: int


@dataclass(frozen=True)
class Receipt:
    transaction_hash: str
    status: int
    block_number: int
    gas_used: int
    contract_address: Optional[str] = None
    logs: Tuple[LogEntry, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == 1
