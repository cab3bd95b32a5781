from .assertions import BindingAssertions, to_int
from .binding import (
    BindingStateError,
    CallFailure,
    ContractBinding,
    DeployError,
    ExecuteFailure,
)
from .config import BindingConfig

__all__ = [
    "BindingAssertions",
    "BindingConfig",
    "BindingStateError",
    "CallFailure",
    "ContractBinding",
    "DeployError",
    "ExecuteFailure",
    "to_int",
]
