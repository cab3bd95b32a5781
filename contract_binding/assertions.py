"""unittest helpers for scenarios written against a ContractBinding."""

from typing import Any, Optional

from identity_core.models import Identity
from ledger_sim.models import Receipt

from .binding import ContractBinding


def to_int(value10: str) -> int:
    """Parse a base-10 string such as a token amount in wei."""

    try:
        return int(value10, 10)
    except ValueError as exc:
        raise ValueError(f"Not a base-10 integer: {value10!r}") from exc


class BindingAssertions:
    """Mixin for ``unittest.TestCase`` subclasses."""

    def assert_variable(self, binding: ContractBinding, method: str, expected: Any) -> Any:
        """Check that the first output of a getter equals ``expected``."""

        values = binding.low_call(method)
        self.assertTrue(values, f"{method} returned no values")
        self.assertEqual(values[0], expected)
        return values[0]

    def execute_change_method(
        self,
        binding: ContractBinding,
        name: str,
        arg: Any,
        signer: Optional[Identity] = None,
    ) -> Receipt:
        """Run ``change_<name>(arg)`` and check that getter ``name`` now returns ``arg``."""

        receipt = self.expect_success(binding, f"change_{name}", arg, signer=signer)
        self.assert_variable(binding, name, arg)
        return receipt

    def expect_failure(
        self,
        binding: ContractBinding,
        method: str,
        *args: Any,
        signer: Optional[Identity] = None,
    ) -> Receipt:
        receipt = binding.execute(method, *args, signer=signer)
        self.assertFalse(receipt.succeeded, f"{method} was expected to revert")
        return receipt

    def expect_success(
        self,
        binding: ContractBinding,
        method: str,
        *args: Any,
        signer: Optional[Identity] = None,
    ) -> Receipt:
        receipt = binding.execute(method, *args, signer=signer)
        self.assertTrue(receipt.succeeded, f"{method} was expected to succeed")
        return receipt
