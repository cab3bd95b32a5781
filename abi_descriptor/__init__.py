from .descriptor import DecodingError, DescriptorError, EncodingError, InterfaceDescriptor
from .models import AbiEvent, AbiFunction, AbiParameter, DecodedEvent
from .values import AbiValue, ValueConversionError, ValueKind

__all__ = [
    "AbiEvent",
    "AbiFunction",
    "AbiParameter",
    "AbiValue",
    "DecodedEvent",
    "DecodingError",
    "DescriptorError",
    "EncodingError",
    "InterfaceDescriptor",
    "ValueConversionError",
    "ValueKind",
]
