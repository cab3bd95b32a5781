"""Encoding, decoding and event lookup tests for the interface descriptor."""

from dataclasses import dataclass
from types import SimpleNamespace
import unittest

from eth_abi import encode
from eth_utils import keccak

from abi_descriptor.descriptor import (
    DecodingError,
    DescriptorError,
    EncodingError,
    InterfaceDescriptor,
)

HOLDER = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"
SPENDER = "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"

TOKEN_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "ecoFund", "type": "address"},
            {"name": "treasury", "type": "address"},
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "stakeInfo",
        "inputs": [],
        "outputs": [
            {"name": "_owner", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "partners",
        "inputs": [],
        "outputs": [{"name": "", "type": "address[]"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "stake",
        "inputs": [{"name": "amount", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "stake",
        "inputs": [
            {"name": "amount", "type": "uint256"},
            {"name": "beneficiary", "type": "address"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "Transfer",
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
        "anonymous": False,
    },
    {
        "type": "event",
        "name": "Note",
        "inputs": [
            {"name": "tag", "type": "string", "indexed": True},
            {"name": "", "type": "bytes", "indexed": False},
        ],
        "anonymous": False,
    },
]


@dataclass(frozen=True)
class StakeInfo:
    owner: str
    amount: int


@dataclass(frozen=True)
class Triple:
    a: int
    b: int
    c: int


class MutableStake:
    def __init__(self) -> None:
        self.owner = None
        self.amount = None


def _word(abi_type, value) -> bytes:
    return encode([abi_type], [value])


class InterfaceDescriptorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.descriptor = InterfaceDescriptor(TOKEN_ABI)

    def test_pack_prefixes_selector(self) -> None:
        data = self.descriptor.pack("transfer", HOLDER, 5)

        self.assertEqual(data[:4], bytes.fromhex("a9059cbb"))
        self.assertEqual(data[4:], encode(["address", "uint256"], [HOLDER, 5]))

    def test_pack_constructor_has_no_selector(self) -> None:
        data = self.descriptor.pack("", HOLDER, SPENDER)
        self.assertEqual(data, encode(["address", "address"], [HOLDER, SPENDER]))

    def test_pack_accepts_lowercase_addresses(self) -> None:
        lower = self.descriptor.pack("balanceOf", HOLDER.lower())
        checksum = self.descriptor.pack("balanceOf", HOLDER)
        self.assertEqual(lower, checksum)

    def test_pack_rejects_wrong_arity(self) -> None:
        with self.assertRaises(EncodingError):
            self.descriptor.pack("transfer", HOLDER)
        with self.assertRaises(EncodingError):
            self.descriptor.pack("", HOLDER)

    def test_pack_rejects_wrong_types(self) -> None:
        with self.assertRaises(EncodingError):
            self.descriptor.pack("transfer", 5, 5)
        with self.assertRaises(EncodingError):
            self.descriptor.pack("transfer", HOLDER, True)
        with self.assertRaises(EncodingError):
            self.descriptor.pack("transfer", HOLDER, -1)

    def test_pack_rejects_unknown_method(self) -> None:
        with self.assertRaises(EncodingError):
            self.descriptor.pack("mint", 1)

    def test_overloads_resolve_by_arguments(self) -> None:
        single = self.descriptor.pack("stake", 10)
        double = self.descriptor.pack("stake", 10, SPENDER)
        explicit = self.descriptor.pack("stake(uint256,address)", 10, SPENDER)

        self.assertEqual(single[:4], keccak(text="stake(uint256)")[:4])
        self.assertEqual(double, explicit)
        self.assertEqual(double[:4], keccak(text="stake(uint256,address)")[:4])

    def test_unpack_values_checksums_addresses(self) -> None:
        data = encode(["address", "uint256"], [HOLDER.lower(), 7])
        self.assertEqual(self.descriptor.unpack_values("stakeInfo", data), [HOLDER, 7])

        data = encode(["address[]"], [[HOLDER.lower(), SPENDER.lower()]])
        self.assertEqual(self.descriptor.unpack_values("partners", data), [(HOLDER, SPENDER)])

    def test_unpack_into_dataclass_by_name(self) -> None:
        data = encode(["address", "uint256"], [HOLDER, 7])
        result = self.descriptor.unpack(StakeInfo, "stakeInfo", data)
        self.assertEqual(result, StakeInfo(owner=HOLDER, amount=7))

    def test_unpack_into_mapping_and_object(self) -> None:
        data = encode(["address", "uint256"], [HOLDER, 7])

        target = {}
        returned = self.descriptor.unpack(target, "stakeInfo", data)
        self.assertIs(returned, target)
        self.assertEqual(target, {"owner": HOLDER, "amount": 7})

        holder = self.descriptor.unpack(MutableStake(), "stakeInfo", data)
        self.assertEqual((holder.owner, holder.amount), (HOLDER, 7))

    def test_unpack_single_value_type(self) -> None:
        data = _word("uint256", 42)
        self.assertEqual(self.descriptor.unpack(int, "balanceOf", data), 42)
        with self.assertRaises(DecodingError):
            self.descriptor.unpack(str, "balanceOf", data)

    def test_unpack_bool_is_not_an_int(self) -> None:
        data = _word("bool", True)
        self.assertIs(self.descriptor.unpack(bool, "transfer", data), True)
        with self.assertRaises(DecodingError):
            self.descriptor.unpack(int, "transfer", data)

    def test_unpack_shape_mismatch(self) -> None:
        data = encode(["address", "uint256"], [HOLDER, 7])
        with self.assertRaises(DecodingError):
            self.descriptor.unpack(Triple, "stakeInfo", data)
        with self.assertRaises(DecodingError):
            self.descriptor.unpack_values("stakeInfo", data[:20])
        with self.assertRaises(DecodingError):
            self.descriptor.unpack_values("unknown", data)

    def test_unpack_tagged(self) -> None:
        data = encode(["address", "uint256"], [HOLDER, 7])
        owner, amount = self.descriptor.unpack_tagged("stakeInfo", data)
        self.assertEqual(owner.kind.value, "ADDRESS")
        self.assertEqual(amount.payload, 7)

    def test_event_topic(self) -> None:
        self.assertEqual(
            self.descriptor.event_topic("Transfer").hex(),
            "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",
        )
        self.assertEqual(
            self.descriptor.event_topic("Transfer(address,address,uint256)"),
            self.descriptor.event_topic("Transfer"),
        )
        with self.assertRaises(DescriptorError):
            self.descriptor.event_topic("Approval")

    def test_decode_log_with_indexed_arguments(self) -> None:
        log = SimpleNamespace(
            topics=(
                self.descriptor.event_topic("Transfer"),
                _word("address", HOLDER),
                _word("address", SPENDER),
            ),
            data=_word("uint256", 10),
        )
        event = self.descriptor.decode_log(log)

        self.assertEqual(event.name, "Transfer")
        self.assertEqual(event.args, {"from": HOLDER, "to": SPENDER, "value": 10})
        self.assertIs(event.log, log)

    def test_decode_log_reference_types_and_unnamed(self) -> None:
        log = SimpleNamespace(
            topics=(self.descriptor.event_topic("Note"), keccak(text="hello")),
            data=_word("bytes", b"\x01\x02"),
        )
        event = self.descriptor.decode_log(log)
        self.assertEqual(event.args, {"tag": keccak(text="hello"), "arg1": b"\x01\x02"})

    def test_decode_log_rejects_unknown_topic(self) -> None:
        with self.assertRaises(DecodingError):
            self.descriptor.decode_log(SimpleNamespace(topics=(b"\x00" * 32,), data=b""))
        with self.assertRaises(DecodingError):
            self.descriptor.decode_log(SimpleNamespace(topics=(), data=b""))

    def test_filter_logs_selects_one_event_type(self) -> None:
        transfer = SimpleNamespace(
            topics=(
                self.descriptor.event_topic("Transfer"),
                _word("address", HOLDER),
                _word("address", SPENDER),
            ),
            data=_word("uint256", 3),
        )
        note = SimpleNamespace(
            topics=(self.descriptor.event_topic("Note"), keccak(text="x")),
            data=_word("bytes", b""),
        )
        events = self.descriptor.filter_logs([note, transfer, note], "Transfer")
        self.assertEqual([event.args["value"] for event in events], [3])

    def test_introspection(self) -> None:
        self.assertEqual(
            self.descriptor.method_names,
            ("balanceOf", "partners", "stake", "stakeInfo", "transfer"),
        )
        self.assertEqual(self.descriptor.event_names, ("Note", "Transfer"))
        self.assertTrue(self.descriptor.has_method("stake(uint256)"))
        self.assertFalse(self.descriptor.has_method("mint"))
        self.assertEqual(len(self.descriptor.constructor.inputs), 2)

    def test_empty_abi_packs_empty_constructor(self) -> None:
        self.assertEqual(InterfaceDescriptor([]).pack(""), b"")


if __name__ == "__main__":
    unittest.main()
