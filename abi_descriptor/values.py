"""Tagged argument values checked against declared ABI types."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from eth_utils import is_address, is_hexstr, to_bytes, to_checksum_address


class ValueKind(Enum):
    INTEGER = "INTEGER"
    ADDRESS = "ADDRESS"
    BOOLEAN = "BOOLEAN"
    BYTES = "BYTES"
    STRING = "STRING"
    LIST = "LIST"


class ValueConversionError(ValueError):
    """Raised when a value does not fit the requested kind or ABI type."""


@dataclass(frozen=True)
class AbiValue:
    kind: ValueKind
    payload: Any

    def to_native(self) -> Any:
        if self.kind == ValueKind.LIST:
            return tuple(item.to_native() for item in self.payload)
        return self.payload


def integer(value: int) -> AbiValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueConversionError(f"Expected an integer, got {type(value).__name__}.")
    return AbiValue(ValueKind.INTEGER, value)


def address(value: Any) -> AbiValue:
    if isinstance(value, (bytes, bytearray)) and len(value) == 20:
        return AbiValue(ValueKind.ADDRESS, to_checksum_address(bytes(value)))
    if not isinstance(value, str) or not is_address(value):
        raise ValueConversionError(f"Expected an address, got {value!r}.")
    return AbiValue(ValueKind.ADDRESS, to_checksum_address(value))


def boolean(value: bool) -> AbiValue:
    if not isinstance(value, bool):
        raise ValueConversionError(f"Expected a bool, got {type(value).__name__}.")
    return AbiValue(ValueKind.BOOLEAN, value)


def byte_string(value: Any) -> AbiValue:
    if isinstance(value, (bytes, bytearray)):
        return AbiValue(ValueKind.BYTES, bytes(value))
    if isinstance(value, str) and value.startswith("0x") and is_hexstr(value):
        return AbiValue(ValueKind.BYTES, to_bytes(hexstr=value))
    raise ValueConversionError(f"Expected bytes or a 0x-prefixed hex string, got {value!r}.")


def text(value: str) -> AbiValue:
    if not isinstance(value, str):
        raise ValueConversionError(f"Expected a str, got {type(value).__name__}.")
    return AbiValue(ValueKind.STRING, value)


def array(items: Any) -> AbiValue:
    if isinstance(items, (str, bytes, bytearray)) or not isinstance(items, (list, tuple)):
        raise ValueConversionError(f"Expected a list or tuple, got {type(items).__name__}.")
    return AbiValue(ValueKind.LIST, tuple(infer(item) for item in items))


def infer(value: Any) -> AbiValue:
    """Wrap a plain Python value without a declared type to guide it."""

    if isinstance(value, AbiValue):
        return value
    if isinstance(value, bool):
        return boolean(value)
    if isinstance(value, int):
        return integer(value)
    if isinstance(value, (bytes, bytearray)):
        return byte_string(value)
    if isinstance(value, str):
        if len(value) == 42 and is_address(value):
            return address(value)
        return text(value)
    if isinstance(value, (list, tuple)):
        return array(value)
    raise ValueConversionError(f"Unsupported argument type: {type(value).__name__}.")


_CONSTRUCTORS: Dict[ValueKind, Callable[[Any], AbiValue]] = {
    ValueKind.INTEGER: integer,
    ValueKind.ADDRESS: address,
    ValueKind.BOOLEAN: boolean,
    ValueKind.BYTES: byte_string,
    ValueKind.STRING: text,
}


def kind_for(abi_type: str) -> ValueKind:
    if array_element_type(abi_type) is not None or tuple_component_types(abi_type) is not None:
        return ValueKind.LIST
    if abi_type.startswith(("uint", "int")):
        return ValueKind.INTEGER
    if abi_type == "address":
        return ValueKind.ADDRESS
    if abi_type == "bool":
        return ValueKind.BOOLEAN
    if abi_type == "string":
        return ValueKind.STRING
    if abi_type.startswith("bytes") or abi_type == "function":
        return ValueKind.BYTES
    raise ValueConversionError(f"Unsupported ABI type: {abi_type}.")


def coerce(abi_type: str, value: Any) -> AbiValue:
    """Convert ``value`` to the tagged form required by ``abi_type``.

    Plain Python values are converted; tagged values must already carry the
    matching kind. Decoded return values pass through the same path, which is
    how results are tagged.
    """

    kind = kind_for(abi_type)
    if kind != ValueKind.LIST:
        if isinstance(value, AbiValue):
            if value.kind != kind:
                raise ValueConversionError(
                    f"{abi_type} requires {kind.value}, got {value.kind.value}."
                )
            return value
        return _CONSTRUCTORS[kind](value)

    if isinstance(value, AbiValue):
        if value.kind != ValueKind.LIST:
            raise ValueConversionError(f"{abi_type} requires LIST, got {value.kind.value}.")
        items = value.payload
    elif isinstance(value, (list, tuple)):
        items = tuple(value)
    else:
        raise ValueConversionError(f"{abi_type} requires a list or tuple, got {value!r}.")

    element_type = array_element_type(abi_type)
    if element_type is not None:
        return AbiValue(ValueKind.LIST, tuple(coerce(element_type, item) for item in items))

    component_types = tuple_component_types(abi_type) or ()
    if len(component_types) != len(items):
        raise ValueConversionError(
            f"{abi_type} requires {len(component_types)} components, got {len(items)}."
        )
    return AbiValue(
        ValueKind.LIST,
        tuple(coerce(component, item) for component, item in zip(component_types, items)),
    )


def array_element_type(abi_type: str) -> Optional[str]:
    if abi_type.endswith("]") and "[" in abi_type:
        return abi_type[: abi_type.rindex("[")]
    return None


def tuple_component_types(abi_type: str) -> Optional[Tuple[str, ...]]:
    if not (abi_type.startswith("(") and abi_type.endswith(")")):
        return None
    return _split_top_level(abi_type[1:-1])


def is_reference_type(abi_type: str) -> bool:
    return (
        abi_type in ("string", "bytes")
        or array_element_type(abi_type) is not None
        or tuple_component_types(abi_type) is not None
    )


def _split_top_level(inner: str) -> Tuple[str, ...]:
    parts = []
    depth = 0
    current = []
    for char in inner:
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current.append(char)
    if current:
        parts.append("".join(current))
    return tuple(parts)
