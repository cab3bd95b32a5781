"""Parsed ABI entries for methods and events."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from eth_utils import event_signature_to_log_topic, function_signature_to_4byte_selector


@dataclass(frozen=True)
class AbiParameter:
    name: str
    type: str
    indexed: bool = False
    components: Tuple["AbiParameter", ...] = ()

    @property
    def canonical_type(self) -> str:
        if self.type.startswith("tuple"):
            inner = ",".join(component.canonical_type for component in self.components)
            return f"({inner}){self.type[len('tuple'):]}"
        return self.type

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AbiParameter":
        return AbiParameter(
            name=data.get("name", ""),
            type=data["type"],
            indexed=bool(data.get("indexed", False)),
            components=tuple(
                AbiParameter.from_dict(component) for component in data.get("components", ())
            ),
        )


@dataclass(frozen=True)
class AbiFunction:
    name: str
    inputs: Tuple[AbiParameter, ...]
    outputs: Tuple[AbiParameter, ...] = ()
    state_mutability: str = "nonpayable"

    @property
    def signature(self) -> str:
        types = ",".join(param.canonical_type for param in self.inputs)
        return f"{self.name}({types})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AbiFunction":
        mutability = data.get("stateMutability")
        if mutability is None:
            # Pre-0.4.16 compilers only emit the constant/payable flags.
            if data.get("constant"):
                mutability = "view"
            elif data.get("payable"):
                mutability = "payable"
            else:
                mutability = "nonpayable"
        return AbiFunction(
            name=data.get("name", ""),
            inputs=tuple(AbiParameter.from_dict(item) for item in data.get("inputs", ())),
            outputs=tuple(AbiParameter.from_dict(item) for item in data.get("outputs", ())),
            state_mutability=mutability,
        )


@dataclass(frozen=True)
class AbiEvent:
    name: str
    inputs: Tuple[AbiParameter, ...]
    anonymous: bool = False

    @property
    def signature(self) -> str:
        types = ",".join(param.canonical_type for param in self.inputs)
        return f"{self.name}({types})"

    @property
    def topic(self) -> bytes:
        return event_signature_to_log_topic(self.signature)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AbiEvent":
        return AbiEvent(
            name=data["name"],
            inputs=tuple(AbiParameter.from_dict(item) for item in data.get("inputs", ())),
            anonymous=bool(data.get("anonymous", False)),
        )


@dataclass(frozen=True)
class DecodedEvent:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    log: Any = None
