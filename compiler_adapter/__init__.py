from .adapter import CompilationError, compile_contract, compile_source, load_artifact
from .models import CompiledUnit, CompilerConfig, ContractInfo
from .prebuilt import owned_storage_unit, registry_unit

__all__ = [
    "CompilationError",
    "CompiledUnit",
    "CompilerConfig",
    "ContractInfo",
    "compile_contract",
    "compile_source",
    "load_artifact",
    "owned_storage_unit",
    "registry_unit",
]
