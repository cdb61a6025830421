"""Assembles unsigned transactions from calls and transfers."""

from __future__ import annotations

from ledger_client.errors import InvalidSpec
from ledger_client.models.address import Address
from ledger_client.models.transactions import (
    FRAMEWORK_ADDRESS,
    ContractCallSpec,
    EntryFunctionAbi,
    NativeTransfer,
    Payload,
    UnsignedTransaction,
)
from ledger_client.transactions.payloads import FRAMEWORK_ABIS

_FRAMEWORK = Address.from_hex(FRAMEWORK_ADDRESS)


def _check_argument(function_id: str, value: object) -> None:
    """Entry-function arguments must have a JSON rendering."""
    if value is None or isinstance(value, (bool, int, str, bytes, bytearray, Address)):
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _check_argument(function_id, item)
        return
    raise InvalidSpec(f"{function_id}: unsupported argument type {type(value).__name__}")


class TransactionBuilder:
    """Pure transformation from a payload plus gas/sequence parameters.

    Validation is structural only. The network decides semantic validity.
    """

    def __init__(self, known_abis: dict[tuple[str, str], EntryFunctionAbi] | None = None) -> None:
        self._known_abis = FRAMEWORK_ABIS if known_abis is None else known_abis

    def validate(self, payload: Payload) -> None:
        """Raise InvalidSpec if the payload is malformed."""
        if isinstance(payload, NativeTransfer):
            if not isinstance(payload.recipient, Address):
                raise InvalidSpec("transfer recipient must be an Address")
            if isinstance(payload.amount, bool) or not isinstance(payload.amount, int):
                raise InvalidSpec("transfer amount must be an integer")
            if payload.amount < 0:
                raise InvalidSpec("transfer amount must be non-negative")
            return

        if not isinstance(payload, ContractCallSpec):
            raise InvalidSpec(f"unsupported payload type: {type(payload).__name__}")
        if not payload.module_name or not payload.module_name.strip():
            raise InvalidSpec("module name is empty")
        if not payload.function_name or not payload.function_name.strip():
            raise InvalidSpec("function name is empty")
        if any(not t or not t.strip() for t in payload.type_arguments):
            raise InvalidSpec(f"{payload.function_id}: empty type argument")
        for argument in payload.arguments:
            _check_argument(payload.function_id, argument)

        abi = payload.abi
        if abi is None and payload.module_address == _FRAMEWORK:
            abi = self._known_abis.get((payload.module_name, payload.function_name))
        if abi is None:
            return
        if len(payload.type_arguments) != abi.type_param_count:
            raise InvalidSpec(
                f"{payload.function_id}: expected {abi.type_param_count} type arguments, "
                f"got {len(payload.type_arguments)}"
            )
        if len(payload.arguments) != abi.param_count:
            raise InvalidSpec(
                f"{payload.function_id}: expected {abi.param_count} arguments, "
                f"got {len(payload.arguments)}"
            )

    def build(
        self,
        payload: Payload,
        sender: Address,
        sequence_number: int,
        gas_budget: int,
        gas_price: int,
        expiration: int,
        network_time: int,
        chain_id: int,
    ) -> UnsignedTransaction:
        """Build an UnsignedTransaction.

        ``expiration`` and ``network_time`` are unix seconds; the expiration
        must lie strictly after the network's reported time.
        """
        if not isinstance(sender, Address):
            raise InvalidSpec("sender must be an Address")
        if sequence_number < 0:
            raise InvalidSpec(f"sequence number must be non-negative, got {sequence_number}")
        if gas_budget <= 0:
            raise InvalidSpec(f"gas budget must be positive, got {gas_budget}")
        if gas_price < 0:
            raise InvalidSpec(f"gas price must be non-negative, got {gas_price}")
        if expiration <= network_time:
            raise InvalidSpec(
                f"expiration {expiration} is not after network time {network_time}"
            )
        self.validate(payload)

        return UnsignedTransaction(
            sender=sender,
            sequence_number=sequence_number,
            payload=payload,
            max_gas_amount=gas_budget,
            gas_unit_price=gas_price,
            expiration_timestamp_secs=expiration,
            chain_id=chain_id,
        )
