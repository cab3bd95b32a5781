"""In-process, explicitly committed ledger backed by eth-tester and py-evm."""

from typing import Any, Dict, Mapping, Optional, Set
import logging

from eth.validation import validate_gas_limit
from eth.vm.forks import PragueVM
from eth_tester import EthereumTester, PyEVMBackend
from eth_tester.exceptions import TransactionFailed, TransactionNotFound
from eth_tester.exceptions import ValidationError as TesterValidationError
from eth_utils import ValidationError as EVMValidationError
from eth_utils import to_bytes, to_checksum_address, to_hex
from rlp.exceptions import RLPException

from identity_core.models import SignedTransaction
from identity_core.signer import recover_sender

from .models import CallMessage, LedgerConfig, LogEntry, Receipt

logger = logging.getLogger(__name__)


class LedgerError(RuntimeError):
    """Base class for ledger simulator failures."""


class SubmissionError(LedgerError):
    """Raised when a transaction is rejected before reaching a block."""


class CallError(LedgerError):
    """Raised when a read-only call reverts or targets an account without code."""


class NotFoundError(LedgerError):
    """Raised when a receipt is requested for a transaction not yet committed."""


class ZeroBaseFeeVM(PragueVM):
    """Prague rules with the base fee held at zero in every header."""

    @staticmethod
    def create_header_from_parent(parent_header, **header_params):
        header_params.pop("base_fee_per_gas", None)
        header = PragueVM.create_header_from_parent(parent_header, **header_params)
        return header.copy(base_fee_per_gas=0)

    @classmethod
    def validate_gas(cls, header, parent_header) -> None:
        validate_gas_limit(header.gas_limit, parent_header.gas_limit)


class LedgerSimulator:
    """Single-party chain that only produces blocks when ``commit`` is called.

    The base fee never rises above zero, so freshly generated, unfunded
    identities can transact at a zero gas price however full blocks get.
    Accepted transactions are applied to the backend's pending block, which
    lets one sender queue several nonces before the next commit.
    """

    def __init__(self, config: Optional[LedgerConfig] = None) -> None:
        self._config = config or LedgerConfig()
        genesis = PyEVMBackend.generate_genesis_params(
            overrides={"gas_limit": self._config.block_gas_limit}
        )
        backend = PyEVMBackend(
            genesis_parameters=genesis,
            vm_configuration=((0, ZeroBaseFeeVM),),
        )
        self._tester = EthereumTester(backend=backend, auto_mine_transactions=False)
        self._pending: Dict[str, str] = {}
        self._pending_counts: Dict[str, int] = {}
        self._committed: Set[str] = set()

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def chain_id(self) -> int:
        return self._tester.backend.chain.chain_id

    @property
    def block_number(self) -> int:
        return self._tester.get_block_by_number("latest")["number"]

    @property
    def base_fee(self) -> int:
        return self._tester.backend.get_base_fee("pending")

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def send_transaction(self, signed: SignedTransaction) -> str:
        try:
            recovered = recover_sender(signed.raw)
        except (RLPException, EVMValidationError, ValueError, TypeError) as exc:
            raise SubmissionError(f"Malformed transaction {signed.tx_hash}: {exc}") from exc
        if recovered != to_checksum_address(signed.sender):
            raise SubmissionError(
                f"Signature of {signed.tx_hash} recovers {recovered}, not {signed.sender}."
            )

        expected_nonce = self.pending_nonce_at(recovered)
        if signed.intent.nonce != expected_nonce:
            raise SubmissionError(
                f"Nonce {signed.intent.nonce} for {recovered} does not match "
                f"expected pending nonce {expected_nonce}."
            )

        # EthereumTester.send_raw_transaction validates against committed state
        # only; the backend applies on top of the pending block.
        try:
            tx_hash = self._tester.backend.send_raw_transaction(bytes(signed.raw))
        except (TesterValidationError, EVMValidationError, RLPException, ValueError) as exc:
            raise SubmissionError(f"Ledger rejected {signed.tx_hash}: {exc}") from exc

        tx_hash = _as_hex(tx_hash)
        self._pending[tx_hash] = recovered
        self._pending_counts[recovered] = self._pending_counts.get(recovered, 0) + 1
        logger.debug("Queued %s from %s with nonce %d", tx_hash, recovered, signed.intent.nonce)
        return tx_hash

    def commit(self) -> int:
        """Seal pending transactions into one new block and return its number."""

        self._tester.mine_blocks(1)
        self._committed.update(self._pending)
        sealed = len(self._pending)
        self._pending.clear()
        self._pending_counts.clear()
        number = self.block_number
        logger.debug("Committed block %d with %d transactions", number, sealed)
        return number

    def commit_blocks(self, count: int) -> int:
        if count < 0:
            raise ValueError("Block count must be non-negative.")
        for _ in range(count):
            self.commit()
        return self.block_number

    def call_contract(self, msg: CallMessage) -> bytes:
        transaction = {
            "from": to_checksum_address(msg.sender),
            "to": to_checksum_address(msg.to),
            "data": to_hex(msg.data),
            "gas": msg.gas_limit or self._config.call_gas_limit,
            "value": 0,
            "gas_price": 0,
        }
        try:
            output = _as_bytes(self._tester.call(transaction, "latest"))
        except TransactionFailed as exc:
            raise CallError(f"Call to {msg.to} reverted: {exc}") from exc
        except (TesterValidationError, EVMValidationError) as exc:
            raise CallError(f"Call to {msg.to} is invalid: {exc}") from exc

        if not output and not self.code_at(msg.to):
            raise CallError(f"No contract code at {msg.to}.")
        return output

    def transaction_receipt(self, tx_hash: str) -> Receipt:
        tx_hash = _as_hex(tx_hash)
        if tx_hash in self._pending:
            raise NotFoundError(f"Transaction {tx_hash} is pending; commit a block first.")
        try:
            raw = self._tester.get_transaction_receipt(tx_hash)
        except TransactionNotFound as exc:
            raise NotFoundError(f"Unknown transaction {tx_hash}.") from exc
        if raw.get("block_number") is None:
            raise NotFoundError(f"Transaction {tx_hash} has not been committed.")
        return _to_receipt(raw)

    def pending_nonce_at(self, address: str) -> int:
        address = to_checksum_address(address)
        return self._tester.get_nonce(address) + self._pending_counts.get(address, 0)

    def balance_at(self, address: str) -> int:
        return self._tester.get_balance(to_checksum_address(address))

    def code_at(self, address: str) -> bytes:
        return _as_bytes(self._tester.get_code(to_checksum_address(address)))


def _to_receipt(raw: Mapping[str, Any]) -> Receipt:
    contract_address = raw.get("contract_address")
    return Receipt(
        transaction_hash=_as_hex(raw["transaction_hash"]),
        status=int(raw["status"]),
        block_number=int(raw["block_number"]),
        gas_used=int(raw["gas_used"]),
        contract_address=to_checksum_address(contract_address) if contract_address else None,
        logs=tuple(_to_log(entry) for entry in raw.get("logs", ())),
    )


def _to_log(raw: Mapping[str, Any]) -> LogEntry:
    return LogEntry(
        address=to_checksum_address(raw["address"]),
        topics=tuple(_as_bytes(topic) for topic in raw["topics"]),
        data=_as_bytes(raw["data"]),
        block_number=int(raw["block_number"]),
        log_index=int(raw["log_index"]),
    )


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def _as_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    return value.lower()
