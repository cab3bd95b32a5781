"""Deploy one compiled contract to a private simulated chain and drive it."""

from pathlib import Path
from typing import Any, List, Optional, Tuple, Union
import logging

from abi_descriptor.descriptor import DescriptorError, InterfaceDescriptor
from abi_descriptor.models import DecodedEvent
from compiler_adapter.adapter import compile_contract
from compiler_adapter.models import CompiledUnit, CompilerConfig
from identity_core.models import Identity, TransactionIntent
from identity_core.signer import SigningError, generate_identity, sign_intent
from ledger_sim.models import CallMessage, Receipt
from ledger_sim.simulator import LedgerError, LedgerSimulator

from .config import BindingConfig

logger = logging.getLogger(__name__)


class BindingStateError(RuntimeError):
    """Raised when a binding is used before deployment or deployed twice."""


class DeployError(RuntimeError):
    """Raised when the deployment transaction was committed with a failed status."""

    def __init__(self, message: str, receipt: Receipt) -> None:
        super().__init__(message)
        self.receipt = receipt


class CallFailure(RuntimeError):
    """Raised when a read-only call cannot be encoded, executed or decoded."""


class ExecuteFailure(RuntimeError):
    """Raised when a transaction cannot be encoded, signed, submitted or looked up."""


class ContractBinding:
    """One deployed contract instance on its own simulator.

    The binding owns a fresh ``LedgerSimulator`` and a fresh deployer identity
    unless they are passed in. ``call`` and ``low_call`` never advance the
    chain; ``deploy`` and ``execute`` each commit exactly one block.
    """

    def __init__(
        self,
        unit: CompiledUnit,
        simulator: Optional[LedgerSimulator] = None,
        deployer: Optional[Identity] = None,
        config: Optional[BindingConfig] = None,
    ) -> None:
        self._unit = unit
        self._simulator = simulator or LedgerSimulator()
        self._deployer = deployer or generate_identity(label="deployer")
        self._config = config or BindingConfig()
        self._address: Optional[str] = None
        self._block_deployed: Optional[int] = None
        self._constructor_args: Tuple[Any, ...] = ()

    @classmethod
    def from_source(
        cls,
        path: Union[str, Path],
        name: str,
        compiler_config: Optional[CompilerConfig] = None,
        **kwargs: Any,
    ) -> "ContractBinding":
        return cls(compile_contract(path, name, compiler_config), **kwargs)

    @property
    def unit(self) -> CompiledUnit:
        return self._unit

    @property
    def descriptor(self) -> InterfaceDescriptor:
        return self._unit.descriptor

    @property
    def simulator(self) -> LedgerSimulator:
        return self._simulator

    @property
    def deployer(self) -> Identity:
        return self._deployer

    @property
    def owner(self) -> str:
        return self._deployer.address

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def block_deployed(self) -> Optional[int]:
        return self._block_deployed

    @property
    def constructor_args(self) -> Tuple[Any, ...]:
        return self._constructor_args

    @property
    def deployed(self) -> bool:
        return self._address is not None

    @property
    def block_number(self) -> int:
        return self._simulator.block_number

    def deploy(self, *constructor_args: Any) -> Receipt:
        if self.deployed:
            raise BindingStateError(
                f"{self._unit.contract_name} is already deployed at {self._address}."
            )

        arguments = self.descriptor.pack("", *constructor_args)
        intent = TransactionIntent(
            to=None,
            data=self._unit.bytecode + arguments,
            nonce=self._simulator.pending_nonce_at(self._deployer.address),
            gas_limit=self._config.deploy_gas_limit,
            gas_price=self._config.gas_price,
        )
        signed = sign_intent(self._deployer, intent)
        tx_hash = self._simulator.send_transaction(signed)
        self._simulator.commit()

        receipt = self._simulator.transaction_receipt(tx_hash)
        if not receipt.succeeded:
            logger.warning(
                "Deployment of %s failed in block %d", self._unit.key, receipt.block_number
            )
            raise DeployError(f"status of deploy tx receipt: {receipt.status}", receipt)

        self._address = receipt.contract_address
        self._block_deployed = receipt.block_number
        self._constructor_args = tuple(constructor_args)
        logger.info(
            "Deployed %s at %s in block %d", self._unit.key, self._address, self._block_deployed
        )
        return receipt

    def call(self, target: Any, method: str, *args: Any) -> Any:
        """Run a read-only method and decode its outputs into ``target``."""

        output = self._probe(method, args)
        try:
            return self.descriptor.unpack(target, method, output)
        except DescriptorError as exc:
            raise CallFailure(f"Cannot decode {method} output: {exc}") from exc

    def low_call(self, method: str, *args: Any) -> List[Any]:
        output = self._probe(method, args)
        try:
            return self.descriptor.unpack_values(method, output)
        except DescriptorError as exc:
            raise CallFailure(f"Cannot decode {method} output: {exc}") from exc

    def execute(self, method: str, *args: Any, signer: Optional[Identity] = None) -> Receipt:
        """Send ``method`` as a transaction and commit it in a new block.

        ``signer`` defaults to the deployer. A reverted transaction is returned
        as a receipt with a failed status, not raised.
        """

        address = self._require_deployed()
        signer = signer or self._deployer
        try:
            data = self.descriptor.pack(method, *args)
            intent = TransactionIntent(
                to=address,
                data=data,
                nonce=self._simulator.pending_nonce_at(signer.address),
                gas_limit=self._config.execute_gas_limit,
                gas_price=self._config.gas_price,
            )
            signed = sign_intent(signer, intent)
            tx_hash = self._simulator.send_transaction(signed)
        except (DescriptorError, SigningError, LedgerError) as exc:
            raise ExecuteFailure(f"Cannot execute {method}: {exc}") from exc

        self._simulator.commit()
        try:
            receipt = self._simulator.transaction_receipt(tx_hash)
        except LedgerError as exc:
            raise ExecuteFailure(f"No receipt for {method} ({tx_hash}): {exc}") from exc

        outcome = "succeeded" if receipt.succeeded else "failed"
        log = logger.debug if receipt.succeeded else logger.warning
        log("%s by %s %s in block %d", method, signer.address, outcome, receipt.block_number)
        return receipt

    def advance_blocks(self, count: int) -> int:
        return self._simulator.commit_blocks(count)

    def events(self, receipt: Receipt, event_name: str) -> Tuple[DecodedEvent, ...]:
        own_logs = [log for log in receipt.logs if log.address == self._address]
        return self.descriptor.filter_logs(own_logs, event_name)

    def _probe(self, method: str, args: Tuple[Any, ...]) -> bytes:
        address = self._require_deployed()
        try:
            data = self.descriptor.pack(method, *args)
            return self._simulator.call_contract(CallMessage(to=address, data=data))
        except (DescriptorError, LedgerError) as exc:
            raise CallFailure(f"Cannot call {method}: {exc}") from exc

    def _require_deployed(self) -> str:
        if self._address is None:
            raise BindingStateError(f"{self._unit.contract_name} has not been deployed.")
        return self._address
