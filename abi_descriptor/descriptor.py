"""Encode calls and decode results through a contract's JSON ABI."""

from dataclasses import fields, is_dataclass
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from eth_abi import decode, encode, is_encodable
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.exceptions import ParseError
from eth_utils import to_checksum_address

from .models import AbiEvent, AbiFunction, AbiParameter, DecodedEvent
from .values import (
    AbiValue,
    ValueConversionError,
    array_element_type,
    coerce,
    is_reference_type,
    tuple_component_types,
)


class DescriptorError(ValueError):
    """Raised when a method or event is not described by the ABI."""


class EncodingError(DescriptorError):
    """Raised when arguments do not match a declared signature."""


class DecodingError(DescriptorError):
    """Raised when returned data or a log does not match its declaration."""


class InterfaceDescriptor:
    """Lookup table over the methods, constructor and events of one contract."""

    def __init__(self, abi_definition: Sequence[Mapping[str, Any]]) -> None:
        self._definition = tuple(dict(entry) for entry in abi_definition)
        self._constructor: Optional[AbiFunction] = None
        self._functions: Dict[str, Tuple[AbiFunction, ...]] = {}
        self._functions_by_signature: Dict[str, AbiFunction] = {}
        self._events: Dict[str, AbiEvent] = {}
        self._events_by_topic: Dict[bytes, AbiEvent] = {}

        for entry in self._definition:
            entry_type = entry.get("type", "function")
            if entry_type == "constructor":
                self._constructor = AbiFunction.from_dict({**entry, "name": ""})
            elif entry_type == "function":
                function = AbiFunction.from_dict(entry)
                self._functions[function.name] = self._functions.get(function.name, ()) + (
                    function,
                )
                self._functions_by_signature[function.signature] = function
            elif entry_type == "event":
                event = AbiEvent.from_dict(entry)
                self._events[event.name] = event
                self._events[event.signature] = event
                if not event.anonymous:
                    self._events_by_topic[event.topic] = event

    @property
    def definition(self) -> Tuple[Dict[str, Any], ...]:
        return self._definition

    @property
    def constructor(self) -> Optional[AbiFunction]:
        return self._constructor

    @property
    def method_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._functions))

    @property
    def event_names(self) -> Tuple[str, ...]:
        return tuple(sorted({event.name for event in self._events.values()}))

    def has_method(self, method_name: str) -> bool:
        return method_name in self._functions or method_name in self._functions_by_signature

    def pack(self, method_name: str, *args: Any) -> bytes:
        """Encode call data; an empty name encodes constructor arguments."""

        if not method_name:
            inputs = self._constructor.inputs if self._constructor else ()
            return self._encode_arguments("constructor", inputs, args)
        function = self._resolve_for_arguments(method_name, args)
        return function.selector + self._encode_arguments(function.signature, function.inputs, args)

    def unpack(self, target: Any, method_name: str, data: bytes) -> Any:
        """Decode method outputs into ``target`` and return the populated value.

        ``target`` may be a dataclass type (a new instance is returned), a
        mutable mapping (filled in place), a plain type for single-output
        methods, or any object whose attributes are named after the outputs.
        """

        function = self._resolve_for_outputs(method_name)
        values = self._decode(function.signature, function.outputs, data)
        names = [_output_name(param) for param in function.outputs]
        return _assign(target, names, values, function.signature)

    def unpack_values(self, method_name: str, data: bytes) -> List[Any]:
        function = self._resolve_for_outputs(method_name)
        return list(self._decode(function.signature, function.outputs, data))

    def unpack_tagged(self, method_name: str, data: bytes) -> Tuple[AbiValue, ...]:
        function = self._resolve_for_outputs(method_name)
        values = self._decode(function.signature, function.outputs, data)
        try:
            return tuple(
                coerce(param.canonical_type, value)
                for param, value in zip(function.outputs, values)
            )
        except ValueConversionError as exc:
            raise DecodingError(f"Cannot tag outputs of {function.signature}: {exc}") from exc

    def event(self, name: str) -> AbiEvent:
        if name not in self._events:
            raise DescriptorError(f"Event not declared in ABI: {name}")
        return self._events[name]

    def event_topic(self, name: str) -> bytes:
        return self.event(name).topic

    def decode_log(self, log: Any) -> DecodedEvent:
        topics = tuple(bytes(topic) for topic in log.topics)
        if not topics:
            raise DecodingError("Log has no topics; anonymous events cannot be matched.")
        event = self._events_by_topic.get(topics[0])
        if event is None:
            raise DecodingError(f"No declared event matches topic 0x{topics[0].hex()}.")

        indexed = [param for param in event.inputs if param.indexed]
        if len(indexed) != len(topics) - 1:
            raise DecodingError(
                f"{event.signature} declares {len(indexed)} indexed inputs, "
                f"log carries {len(topics) - 1}."
            )

        collected: Dict[int, Any] = {}
        indexed_positions = [i for i, param in enumerate(event.inputs) if param.indexed]
        for position, topic in zip(indexed_positions, topics[1:]):
            param = event.inputs[position]
            if is_reference_type(param.canonical_type):
                # Indexed reference types are stored as their keccak hash.
                collected[position] = topic
            else:
                collected[position] = self._decode(event.signature, (param,), topic)[0]

        plain_positions = [i for i, param in enumerate(event.inputs) if not param.indexed]
        plain = tuple(event.inputs[i] for i in plain_positions)
        for position, value in zip(plain_positions, self._decode(event.signature, plain, log.data)):
            collected[position] = value

        args = {
            param.name or f"arg{position}": collected[position]
            for position, param in enumerate(event.inputs)
        }
        return DecodedEvent(name=event.name, args=args, log=log)

    def filter_logs(self, logs: Iterable[Any], event_name: str) -> Tuple[DecodedEvent, ...]:
        topic = self.event_topic(event_name)
        return tuple(
            self.decode_log(log)
            for log in logs
            if log.topics and bytes(log.topics[0]) == topic
        )

    def _candidates(self, method_name: str) -> Tuple[AbiFunction, ...]:
        if "(" in method_name:
            signature = method_name.replace(" ", "")
            if signature in self._functions_by_signature:
                return (self._functions_by_signature[signature],)
        elif method_name in self._functions:
            return self._functions[method_name]
        return ()

    def _resolve_for_arguments(self, method_name: str, args: Sequence[Any]) -> AbiFunction:
        candidates = self._candidates(method_name)
        if not candidates:
            raise EncodingError(f"Method not declared in ABI: {method_name}")
        if len(candidates) == 1:
            return candidates[0]

        matching = [
            function
            for function in candidates
            if len(function.inputs) == len(args) and _fits(function.inputs, args)
        ]
        if len(matching) != 1:
            signatures = ", ".join(function.signature for function in candidates)
            raise EncodingError(
                f"Cannot choose an overload of {method_name} for {len(args)} arguments "
                f"among: {signatures}"
            )
        return matching[0]

    def _resolve_for_outputs(self, method_name: str) -> AbiFunction:
        candidates = self._candidates(method_name)
        if not candidates:
            raise DecodingError(f"Method not declared in ABI: {method_name}")
        output_types = {
            tuple(param.canonical_type for param in function.outputs) for function in candidates
        }
        if len(output_types) > 1:
            raise DecodingError(
                f"Overloads of {method_name} return different types; use a full signature."
            )
        return candidates[0]

    def _encode_arguments(
        self, label: str, inputs: Sequence[AbiParameter], args: Sequence[Any]
    ) -> bytes:
        if len(args) != len(inputs):
            raise EncodingError(f"{label} expects {len(inputs)} arguments, got {len(args)}.")
        types = [param.canonical_type for param in inputs]
        try:
            values = [coerce(abi_type, arg).to_native() for abi_type, arg in zip(types, args)]
            return encode(types, values)
        except (ValueConversionError, AbiEncodingError, ParseError) as exc:
            raise EncodingError(f"Cannot encode arguments for {label}: {exc}") from exc

    def _decode(self, label: str, params: Sequence[AbiParameter], data: bytes) -> Tuple[Any, ...]:
        types = [param.canonical_type for param in params]
        try:
            values = decode(types, bytes(data))
        except (AbiDecodingError, ParseError) as exc:
            raise DecodingError(f"Cannot decode data for {label}: {exc}") from exc
        return tuple(_normalize(abi_type, value) for abi_type, value in zip(types, values))


def _fits(inputs: Sequence[AbiParameter], args: Sequence[Any]) -> bool:
    for param, arg in zip(inputs, args):
        try:
            native = coerce(param.canonical_type, arg).to_native()
        except ValueConversionError:
            return False
        if not is_encodable(param.canonical_type, native):
            return False
    return True


def _normalize(abi_type: str, value: Any) -> Any:
    element_type = array_element_type(abi_type)
    if element_type is not None:
        return tuple(_normalize(element_type, item) for item in value)
    component_types = tuple_component_types(abi_type)
    if component_types is not None:
        return tuple(_normalize(component, item) for component, item in zip(component_types, value))
    if abi_type == "address":
        return to_checksum_address(value)
    return value


def _output_name(param: AbiParameter) -> Optional[str]:
    return param.name.lstrip("_") or None


def _assign(target: Any, names: Sequence[Optional[str]], values: Sequence[Any], label: str) -> Any:
    if isinstance(target, type) and is_dataclass(target):
        field_names = [item.name for item in fields(target) if item.init]
        if len(field_names) != len(values):
            raise DecodingError(
                f"{target.__name__} has {len(field_names)} fields, {label} returns {len(values)}."
            )
        if all(name in field_names for name in names):
            return target(**dict(zip(names, values)))
        return target(**dict(zip(field_names, values)))

    if isinstance(target, MutableMapping):
        for index, (name, value) in enumerate(zip(names, values)):
            target[name if name else index] = value
        return target

    if isinstance(target, type):
        if len(values) != 1:
            raise DecodingError(f"{label} returns {len(values)} values, not one {target.__name__}.")
        mismatched = not isinstance(values[0], target) or (
            isinstance(values[0], bool) and target is int
        )
        if mismatched:
            raise DecodingError(
                f"{label} returns {type(values[0]).__name__}, not {target.__name__}."
            )
        return values[0]

    for name, value in zip(names, values):
        if name is None or not hasattr(target, name):
            raise DecodingError(f"{type(target).__name__} has no attribute for output {name!r}.")
        setattr(target, name, value)
    return target
