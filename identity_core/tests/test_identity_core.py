"""Unit tests for identity generation and transaction signing."""

import unittest

import rlp

from identity_core.models import Identity, TransactionIntent
from identity_core.signer import (
    SigningError,
    generate_identity,
    identity_from_key,
    recover_sender,
    sign_intent,
)

KEY_ONE = b"\x00" * 31 + b"\x01"
KEY_ONE_ADDRESS = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"


class IdentityCoreTests(unittest.TestCase):
    def test_known_key_derives_known_address(self) -> None:
        identity = identity_from_key(KEY_ONE, label="one")
        self.assertEqual(identity.address, KEY_ONE_ADDRESS)
        self.assertEqual(identity.label, "one")

    def test_entropy_provider_is_injectable(self) -> None:
        first = generate_identity(entropy_provider=lambda n: b"\x07" * n)
        second = generate_identity(entropy_provider=lambda n: b"\x07" * n)
        other = generate_identity(entropy_provider=lambda n: b"\x08" * n)

        self.assertEqual(first, second)
        self.assertNotEqual(first.address, other.address)

    def test_generated_identities_are_distinct(self) -> None:
        self.assertNotEqual(generate_identity().address, generate_identity().address)

    def test_repr_does_not_expose_key(self) -> None:
        identity = identity_from_key(KEY_ONE)
        self.assertNotIn(KEY_ONE.hex(), repr(identity))
        self.assertNotIn("_account", repr(identity))

    def test_signature_recovers_to_sender(self) -> None:
        identity = identity_from_key(KEY_ONE)
        intent = TransactionIntent(
            to="0x" + "22" * 20, data=b"\x01\x02", nonce=3, gas_limit=100_000
        )
        signed = sign_intent(identity, intent)

        self.assertEqual(signed.sender, KEY_ONE_ADDRESS)
        self.assertEqual(recover_sender(signed.raw), KEY_ONE_ADDRESS)
        self.assertTrue(signed.tx_hash.startswith("0x"))
        self.assertEqual(len(signed.tx_hash), 66)
        self.assertIs(signed.intent, intent)

    def test_contract_creation_intent(self) -> None:
        intent = TransactionIntent(to=None, data=b"\x00", nonce=0, gas_limit=100_000)
        self.assertTrue(intent.is_contract_creation)

        signed = sign_intent(identity_from_key(KEY_ONE), intent)
        self.assertEqual(recover_sender(signed.raw), KEY_ONE_ADDRESS)

    def test_signature_v_depends_on_chain_id(self) -> None:
        identity = identity_from_key(KEY_ONE)
        intent = TransactionIntent(to=None, data=b"", nonce=0, gas_limit=53_000)

        unprotected = rlp.decode(sign_intent(identity, intent).raw)
        self.assertIn(int.from_bytes(unprotected[6], "big"), (27, 28))

        protected = sign_intent(identity, intent, chain_id=1)
        self.assertIn(int.from_bytes(rlp.decode(protected.raw)[6], "big"), (37, 38))
        self.assertEqual(recover_sender(protected.raw), KEY_ONE_ADDRESS)

    def test_identity_without_key_cannot_sign(self) -> None:
        intent = TransactionIntent(to=None, data=b"", nonce=0, gas_limit=21_000)
        with self.assertRaises(SigningError):
            sign_intent(Identity(address=KEY_ONE_ADDRESS), intent, chain_id=1)


if __name__ == "__main__":
    unittest.main()
