"""Compiler inputs and outputs."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from abi_descriptor.descriptor import InterfaceDescriptor


@dataclass(frozen=True)
class CompilerConfig:
    solc_version: Optional[str] = None
    optimize: bool = False
    optimize_runs: int = 200
    evm_version: Optional[str] = None
    allow_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContractInfo:
    abi_definition: Tuple[Dict[str, Any], ...]
    userdoc: Dict[str, Any] = field(default_factory=dict)
    devdoc: Dict[str, Any] = field(default_factory=dict)
    compiler_version: str = ""
    language: str = "Solidity"


@dataclass(frozen=True)
class CompiledUnit:
    source_path: str
    contract_name: str
    bytecode: bytes
    descriptor: InterfaceDescriptor
    info: ContractInfo

    @property
    def key(self) -> str:
        return f"{self.source_path}:{self.contract_name}"
