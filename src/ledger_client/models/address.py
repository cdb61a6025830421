"""Account addresses derived from Ed25519 public keys."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from ledger_client.errors import InvalidSpec

ADDRESS_LENGTH = 32

# Appended to the public key before hashing (single-signer Ed25519 scheme)
ED25519_SCHEME = b"\x00"


@dataclass(frozen=True)
class Address:
    """A 32-byte account address. Equality is byte-exact."""

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray)) or len(self.value) != ADDRESS_LENGTH:
            raise InvalidSpec(f"address must be {ADDRESS_LENGTH} bytes")
        object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def from_public_key(cls, public_key: bytes) -> Address:
        """Derive the account address as sha3_256(public_key || scheme)."""
        return cls(hashlib.sha3_256(public_key + ED25519_SCHEME).digest())

    @classmethod
    def from_hex(cls, text: str) -> Address:
        """Parse ``0x``-prefixed hex. Short special addresses (``0x1``) are left-padded."""
        raw = text[2:] if text.startswith(("0x", "0X")) else text
        if not raw or len(raw) > ADDRESS_LENGTH * 2:
            raise InvalidSpec(f"invalid address: {text!r}")
        try:
            return cls(bytes.fromhex(raw.rjust(ADDRESS_LENGTH * 2, "0")))
        except ValueError as exc:
            raise InvalidSpec(f"invalid address: {text!r}") from exc

    @classmethod
    def coerce(cls, value: Address | str) -> Address:
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        raise InvalidSpec(f"not an address: {value!r}")

    def hex(self) -> str:
        return "0x" + self.value.hex()

    def short(self) -> str:
        """Truncated form for log lines."""
        return self.hex()[:10]

    def __str__(self) -> str:
        return self.hex()
