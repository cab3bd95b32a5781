"""Compile Solidity sources, or load prebuilt artifacts, into compiled units."""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import json
import logging

import solcx
from eth_utils import to_bytes
from solcx.exceptions import SolcError, SolcNotInstalled

from abi_descriptor.descriptor import DescriptorError, InterfaceDescriptor

from .models import CompiledUnit, CompilerConfig, ContractInfo

logger = logging.getLogger(__name__)

_OUTPUT_VALUES = ["abi", "bin", "userdoc", "devdoc", "metadata"]


class CompilationError(RuntimeError):
    """Raised when the toolchain fails or the named contract is not in its output."""


def compile_contract(
    path: Union[str, Path], name: str, config: Optional[CompilerConfig] = None
) -> CompiledUnit:
    """Compile ``path`` and return the unit for contract ``name`` declared in it."""

    config = config or CompilerConfig()
    source_path = Path(path)
    if not source_path.is_file():
        raise CompilationError(f"Source file not found: {source_path}")

    try:
        output = solcx.compile_files([str(source_path)], **_solc_options(config))
    except (SolcError, SolcNotInstalled) as exc:
        raise CompilationError(f"Compilation of {source_path} failed: {exc}") from exc

    entry = _select_file_entry(output, source_path, name)
    unit = _unit_from_combined(str(source_path), name, entry)
    logger.info("Compiled %s (%d bytes)", unit.key, len(unit.bytecode))
    return unit


def compile_source(
    source: str, name: str, config: Optional[CompilerConfig] = None
) -> CompiledUnit:
    config = config or CompilerConfig()
    try:
        output = solcx.compile_source(source, **_solc_options(config))
    except (SolcError, SolcNotInstalled) as exc:
        raise CompilationError(f"Compilation of inline source failed: {exc}") from exc

    key = f"<stdin>:{name}"
    if key not in output:
        raise CompilationError(_missing_message(name, output))
    unit = _unit_from_combined("<stdin>", name, output[key])
    logger.info("Compiled %s (%d bytes)", unit.key, len(unit.bytecode))
    return unit


def load_artifact(path: Union[str, Path], name: Optional[str] = None) -> CompiledUnit:
    """Build a unit from a JSON artifact written by solc, Foundry or Hardhat."""

    artifact_path = Path(path)
    if not artifact_path.is_file():
        raise CompilationError(f"Artifact not found: {artifact_path}")
    try:
        data = json.loads(artifact_path.read_text())
    except ValueError as exc:
        raise CompilationError(f"Artifact {artifact_path} is not valid JSON: {exc}") from exc

    contract_name = name or data.get("contractName") or artifact_path.stem
    source_name = data.get("sourceName", str(artifact_path))

    if "contracts" in data:
        abi, bytecode, source_name = _from_compiler_output(data["contracts"], contract_name)
    else:
        abi = data.get("abi")
        bytecode = data.get("bytecode")
        if isinstance(bytecode, Mapping):
            bytecode = bytecode.get("object")

    if not abi:
        raise CompilationError(f"ABI not found in artifact {artifact_path}")
    if not bytecode:
        raise CompilationError(f"Bytecode not found in artifact {artifact_path}")

    return _build_unit(
        source_path=source_name,
        name=contract_name,
        abi=abi,
        bytecode=bytecode,
        info=ContractInfo(
            abi_definition=tuple(abi),
            userdoc=data.get("userdoc", {}),
            devdoc=data.get("devdoc", {}),
        ),
    )


def _solc_options(config: CompilerConfig) -> Dict[str, Any]:
    options: Dict[str, Any] = {"output_values": list(_OUTPUT_VALUES)}
    if config.solc_version:
        options["solc_version"] = config.solc_version
    if config.optimize:
        options["optimize"] = True
        options["optimize_runs"] = config.optimize_runs
    if config.evm_version:
        options["evm_version"] = config.evm_version
    if config.allow_paths:
        options["allow_paths"] = list(config.allow_paths)
    return options


def _select_file_entry(
    output: Mapping[str, Any], source_path: Path, name: str
) -> Mapping[str, Any]:
    exact = f"{source_path}:{name}"
    if exact in output:
        return output[exact]

    resolved = source_path.resolve()
    for key, entry in output.items():
        file_part, _, contract = key.rpartition(":")
        if contract == name and Path(file_part).resolve() == resolved:
            return entry
    raise CompilationError(_missing_message(name, output))


def _missing_message(name: str, output: Mapping[str, Any]) -> str:
    available = ", ".join(sorted(output)) or "none"
    return f"{name} contract is not in the compiler output (available: {available})"


def _unit_from_combined(source_path: str, name: str, entry: Mapping[str, Any]) -> CompiledUnit:
    abi = _json_field(entry.get("abi"), [])
    metadata = _json_field(entry.get("metadata"), {})
    info = ContractInfo(
        abi_definition=tuple(abi),
        userdoc=_json_field(entry.get("userdoc"), {}),
        devdoc=_json_field(entry.get("devdoc"), {}),
        compiler_version=metadata.get("compiler", {}).get("version", ""),
        language=metadata.get("language", "Solidity"),
    )
    if not entry.get("bin"):
        raise CompilationError(
            f"{source_path}:{name} has no deployable bytecode (abstract contract or interface)"
        )
    return _build_unit(source_path, name, abi, entry["bin"], info)


def _from_compiler_output(contracts: Mapping[str, Any], name: str):
    for key, value in contracts.items():
        if ":" in key:
            # Combined JSON keys look like "<file>:<name>".
            file_part, _, contract = key.rpartition(":")
            if contract == name:
                return _json_field(value.get("abi"), []), value.get("bin"), file_part
        elif isinstance(value, Mapping) and name in value:
            # Standard JSON nests contracts by file.
            contract = value[name]
            bytecode = contract.get("evm", {}).get("bytecode", {}).get("object")
            return contract.get("abi"), bytecode, key
    raise CompilationError(_missing_message(name, contracts))


def _build_unit(
    source_path: str, name: str, abi: Any, bytecode: str, info: ContractInfo
) -> CompiledUnit:
    try:
        descriptor = InterfaceDescriptor(abi)
    except (DescriptorError, KeyError, TypeError) as exc:
        raise CompilationError(f"Malformed ABI for {source_path}:{name}: {exc}") from exc
    try:
        code = to_bytes(hexstr=bytecode)
    except ValueError as exc:
        raise CompilationError(f"Malformed bytecode for {source_path}:{name}: {exc}") from exc
    if not code:
        raise CompilationError(f"{source_path}:{name} has empty bytecode")
    return CompiledUnit(
        source_path=source_path,
        contract_name=name,
        bytecode=code,
        descriptor=descriptor,
        info=info,
    )


def _json_field(value: Any, default: Any) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value
