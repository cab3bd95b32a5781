"""Units assembled directly as EVM bytecode, usable without a compiler.

``owned_storage_unit`` behaves like::

    contract OwnedStorage {
        address owner;          // slot 1
        uint256 public value;   // slot 0
        event ValueChanged(uint256 newValue);
        constructor(uint256 initial) { owner = msg.sender; value = initial; }
        function setValue(uint256 newValue) external {
            require(msg.sender == owner);
            value = newValue;
            emit ValueChanged(newValue);
        }
    }

The runtime dispatches on calldata length rather than on selectors: 4 bytes
reads the value, 36 bytes writes it.

``registry_unit`` mirrors the ownership registry used by the binding scenarios
(owner, ecoFund, treasury and rate in slots 0 to 3) and dispatches on the
usual four-byte selectors.
"""

from eth_utils import event_signature_to_log_topic, function_signature_to_4byte_selector

from abi_descriptor.descriptor import InterfaceDescriptor

from .models import CompiledUnit, ContractInfo

OWNED_STORAGE_ABI = (
    {
        "type": "constructor",
        "inputs": [{"name": "initial", "type": "uint256"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "value",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "setValue",
        "inputs": [{"name": "newValue", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "ValueChanged",
        "inputs": [{"name": "newValue", "type": "uint256", "indexed": False}],
        "anonymous": False,
    },
)

# owner = CALLER; value = last constructor word; return runtime (0x53 bytes at 0x1d)
_INIT = bytes.fromhex(
    "33600155"
    "6020803803600039600051600055"
    "6053"
    "80601d6000396000f3"
)

_RUNTIME_HEAD = bytes.fromhex(
    # CALLDATASIZE == 0x24 ? jump to write : return slot 0
    "36602414601257"
    "60005460005260206000f3"
    # write: require(CALLER == slot 1)
    "5b600154331460" "1f" "57" "600080fd"
    # slot 0 = calldata[4:36]; LOG1(mem[0:32], topic)
    "5b600435600055"
    "600435600052" "7f"
)
_RUNTIME_TAIL = bytes.fromhex("602060" "00" "a1" "00")


def owned_storage_unit() -> CompiledUnit:
    topic = event_signature_to_log_topic("ValueChanged(uint256)")
    runtime = _RUNTIME_HEAD + topic + _RUNTIME_TAIL
    return CompiledUnit(
        source_path="<prebuilt>",
        contract_name="OwnedStorage",
        bytecode=_INIT + runtime,
        descriptor=InterfaceDescriptor(OWNED_STORAGE_ABI),
        info=ContractInfo(abi_definition=OWNED_STORAGE_ABI, language="EVM"),
    )


REGISTRY_ABI = (
    {
        "type": "constructor",
        "inputs": [
            {"name": "ecoFund_", "type": "address"},
            {"name": "treasury_", "type": "address"},
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "owner",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "ecoFund",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "treasury",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "rate",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "transferOwnership",
        "inputs": [{"name": "newOwner", "type": "address"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "change_rate",
        "inputs": [{"name": "rate_", "type": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "OwnershipTransferred",
        "inputs": [
            {"name": "previousOwner", "type": "address", "indexed": True},
            {"name": "newOwner", "type": "address", "indexed": True},
        ],
        "anonymous": False,
    },
    {
        "type": "event",
        "name": "RateChanged",
        "inputs": [{"name": "rate", "type": "uint256", "indexed": False}],
        "anonymous": False,
    },
)

# owner = CALLER; ecoFund, treasury = the two constructor words; return runtime (0x106 bytes at 0x25)
_REGISTRY_INIT = bytes.fromhex(
    "33600055"
    "6040803803600039"
    "600051600155"
    "602051600255"
    "610106806100256000396000f3"
)

# selector = calldata[0:4]
_REGISTRY_SELECTOR = bytes.fromhex("60003560e01c")

_REGISTRY_ROUTES = (
    ("owner()", 0x4C),
    ("ecoFund()", 0x58),
    ("treasury()", 0x64),
    ("rate()", 0x70),
    ("transferOwnership(address)", 0x7C),
    ("change_rate(uint256)", 0xC6),
)

_REGISTRY_FALLBACK = bytes.fromhex("600080fd")


def _getter(slot: int) -> bytes:
    # return slot as one word
    return bytes.fromhex(f"5b60{slot:02x}5460005260206000f3")


def _only_owner(proceed: int) -> bytes:
    return bytes.fromhex(f"5b600054331461{proceed:04x}57600080fd")


def _registry_runtime() -> bytes:
    dispatch = b"".join(
        b"\x80\x63"
        + function_signature_to_4byte_selector(signature)
        + b"\x14\x61"
        + dest.to_bytes(2, "big")
        + b"\x57"
        for signature, dest in _REGISTRY_ROUTES
    )
    transferred = event_signature_to_log_topic("OwnershipTransferred(address,address)")
    rate_changed = event_signature_to_log_topic("RateChanged(uint256)")
    transfer_ownership = (
        _only_owner(0x8A)
        # require(newOwner != 0)
        + bytes.fromhex("5b6004358061009757600080fd")
        # LOG3(previous, new); slot 0 = newOwner
        + bytes.fromhex("5b806000547f")
        + transferred
        + bytes.fromhex("60006000a360005500")
    )
    change_rate = (
        _only_owner(0xD4)
        # slot 3 = rate_; LOG1(mem[0:32], topic)
        + bytes.fromhex("5b600435806003556000527f")
        + rate_changed
        + bytes.fromhex("60206000a100")
    )
    return (
        _REGISTRY_SELECTOR
        + dispatch
        + _REGISTRY_FALLBACK
        + b"".join(_getter(slot) for slot in range(4))
        + transfer_ownership
        + change_rate
    )


def registry_unit() -> CompiledUnit:
    return CompiledUnit(
        source_path="<prebuilt>",
        contract_name="Registry",
        bytecode=_REGISTRY_INIT + _registry_runtime(),
        descriptor=InterfaceDescriptor(REGISTRY_ABI),
        info=ContractInfo(abi_definition=REGISTRY_ABI, language="EVM"),
    )
