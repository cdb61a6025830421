"""Standard framework calls: transfers and managed-coin lifecycle."""

from __future__ import annotations

from ledger_client.models.address import Address
from ledger_client.models.transactions import (
    FRAMEWORK_ADDRESS,
    ContractCallSpec,
    EntryFunctionAbi,
    NativeTransfer,
)

COIN_MODULE = "coin"
MANAGED_COIN_MODULE = "managed_coin"

# Arity of framework entry functions, checked by the builder when a call
# targets 0x1 without carrying its own ABI.
FRAMEWORK_ABIS: dict[tuple[str, str], EntryFunctionAbi] = {
    (COIN_MODULE, "transfer"): EntryFunctionAbi(type_param_count=1, param_count=2),
    (COIN_MODULE, "register"): EntryFunctionAbi(type_param_count=1, param_count=0),
    ("aptos_account", "transfer"): EntryFunctionAbi(type_param_count=0, param_count=2),
    (MANAGED_COIN_MODULE, "initialize"): EntryFunctionAbi(type_param_count=1, param_count=4),
    (MANAGED_COIN_MODULE, "register"): EntryFunctionAbi(type_param_count=1, param_count=0),
    (MANAGED_COIN_MODULE, "mint"): EntryFunctionAbi(type_param_count=1, param_count=2),
    (MANAGED_COIN_MODULE, "burn"): EntryFunctionAbi(type_param_count=1, param_count=1),
}


def _framework_call(module: str, function: str, type_args: list[str], args: list) -> ContractCallSpec:
    return ContractCallSpec(
        module_address=Address.from_hex(FRAMEWORK_ADDRESS),
        module_name=module,
        function_name=function,
        type_arguments=tuple(type_args),
        arguments=tuple(args),
    )


def native_transfer(recipient: Address | str, amount: int) -> NativeTransfer:
    return NativeTransfer(recipient=Address.coerce(recipient), amount=amount)


def coin_transfer(token_type: str, recipient: Address | str, amount: int) -> ContractCallSpec:
    return _framework_call(COIN_MODULE, "transfer", [token_type], [Address.coerce(recipient), amount])


def initialize_coin(
    token_type: str,
    name: str,
    symbol: str,
    decimals: int,
    monitor_supply: bool = True,
) -> ContractCallSpec:
    """Create a new managed coin. The coin type must be published by the sender."""
    return _framework_call(
        MANAGED_COIN_MODULE, "initialize", [token_type],
        [name.encode("utf-8"), symbol.encode("utf-8"), decimals, monitor_supply],
    )


def register_coin(token_type: str) -> ContractCallSpec:
    return _framework_call(MANAGED_COIN_MODULE, "register", [token_type], [])


def mint_coin(token_type: str, recipient: Address | str, amount: int) -> ContractCallSpec:
    return _framework_call(MANAGED_COIN_MODULE, "mint", [token_type], [Address.coerce(recipient), amount])


def burn_coin(token_type: str, amount: int) -> ContractCallSpec:
    return _framework_call(MANAGED_COIN_MODULE, "burn", [token_type], [amount])
