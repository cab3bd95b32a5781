"""Gas and pricing settings applied to every transaction a binding sends."""

from dataclasses import dataclass


@dataclass(frozen=True)
class BindingConfig:
    deploy_gas_limit: int = 3_000_000
    execute_gas_limit: int = 10_000_000
    gas_price: int = 0

    def __post_init__(self) -> None:
        if self.deploy_gas_limit <= 0 or self.execute_gas_limit <= 0:
            raise ValueError("Gas limits must be positive.")
        if self.gas_price < 0:
            raise ValueError("Gas price must be non-negative.")
