"""Transaction payloads, unsigned/signed transactions and submission results."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from ledger_client.errors import RejectionReason
from ledger_client.models.address import Address

# Prefix hashed into every signing message so signatures cannot be replayed
# as signatures over some other kind of message.
RAW_TRANSACTION_SALT = hashlib.sha3_256(b"LEDGER::RawTransaction").digest()

FRAMEWORK_ADDRESS = "0x1"
NATIVE_COIN = "0x1::aptos_coin::AptosCoin"


def _encode_argument(value: Any) -> Any:
    """Render an entry-function argument in the node's JSON convention.

    Integers travel as decimal strings (u64/u128 overflow JSON numbers).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Address):
        return value.hex()
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_encode_argument(v) for v in value]
    return value


def canonical_json(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True)
class EntryFunctionAbi:
    """Expected arity of an entry function, used for structural validation."""

    type_param_count: int
    param_count: int


@dataclass(frozen=True)
class ContractCallSpec:
    """An entry-function call: ``module_address::module_name::function_name``."""

    module_address: Address
    module_name: str
    function_name: str
    type_arguments: tuple[str, ...] = ()
    arguments: tuple[Any, ...] = ()
    abi: EntryFunctionAbi | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "module_address", Address.coerce(self.module_address))
        object.__setattr__(self, "type_arguments", tuple(self.type_arguments))
        object.__setattr__(self, "arguments", tuple(self.arguments))

    @property
    def function_id(self) -> str:
        return f"{self.module_address.hex()}::{self.module_name}::{self.function_name}"

    def to_payload(self) -> dict:
        return {
            "type": "entry_function_payload",
            "function": self.function_id,
            "type_arguments": list(self.type_arguments),
            "arguments": [_encode_argument(a) for a in self.arguments],
        }


@dataclass(frozen=True)
class NativeTransfer:
    """Transfer of the chain's native coin."""

    recipient: Address
    amount: int

    def to_payload(self) -> dict:
        return {
            "type": "entry_function_payload",
            "function": f"{Address.from_hex(FRAMEWORK_ADDRESS).hex()}::coin::transfer",
            "type_arguments": [NATIVE_COIN],
            "arguments": [self.recipient.hex(), str(self.amount)],
        }


Payload = Union[ContractCallSpec, NativeTransfer]


@dataclass(frozen=True)
class UnsignedTransaction:
    """A raw transaction ready for signing. Built fresh for every attempt."""

    sender: Address
    sequence_number: int
    payload: Payload
    max_gas_amount: int
    gas_unit_price: int
    expiration_timestamp_secs: int
    chain_id: int

    def to_dict(self) -> dict:
        return {
            "sender": self.sender.hex(),
            "sequence_number": str(self.sequence_number),
            "max_gas_amount": str(self.max_gas_amount),
            "gas_unit_price": str(self.gas_unit_price),
            "expiration_timestamp_secs": str(self.expiration_timestamp_secs),
            "payload": self.payload.to_payload(),
            "chain_id": self.chain_id,
        }

    def signing_message(self) -> bytes:
        """Canonical byte encoding that the signer signs."""
        return RAW_TRANSACTION_SALT + canonical_json(self.to_dict())


@dataclass(frozen=True)
class SignedTransaction:
    """An unsigned transaction plus the Ed25519 signature over its exact bytes."""

    unsigned: UnsignedTransaction
    public_key: bytes
    signature: bytes
    message: bytes

    @property
    def sender(self) -> Address:
        return self.unsigned.sender

    @property
    def sequence_number(self) -> int:
        return self.unsigned.sequence_number

    def to_submission(self) -> dict:
        """JSON body for the node's transaction submission endpoint."""
        body = self.unsigned.to_dict()
        body["signature"] = {
            "type": "ed25519_signature",
            "public_key": "0x" + self.public_key.hex(),
            "signature": "0x" + self.signature.hex(),
        }
        return body

    def to_bytes(self) -> bytes:
        return canonical_json(self.to_submission())

    @property
    def hash(self) -> str:
        return "0x" + hashlib.sha3_256(self.to_bytes()).hexdigest()


@dataclass
class SubmitResponse:
    """What the network collaborator reports for one submission."""

    accepted: bool
    tx_hash: str = ""
    reason: RejectionReason | None = None
    message: str = ""


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class SubmissionResult:
    """Outcome of SubmissionCoordinator.submit()."""

    status: SubmissionStatus
    sender: str
    sequence_number: int
    tx_hash: str = ""
    attempts: int = 1
    reason: RejectionReason | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is SubmissionStatus.ACCEPTED


@dataclass
class TransactionStatus:
    """Committed state of a transaction looked up by hash."""

    tx_hash: str
    committed: bool
    success: bool | None = None
    vm_status: str = ""
    gas_used: int | None = None
    version: int | None = None
    events: list[dict] = field(default_factory=list)
