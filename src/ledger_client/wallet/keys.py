"""Ed25519 key material and address derivation."""

from __future__ import annotations

import base64
import logging

from stellar_sdk import Keypair
from stellar_sdk.exceptions import BadSignatureError

from ledger_client.errors import InvalidSpec, SigningError
from ledger_client.models.address import Address

log = logging.getLogger(__name__)

SEED_LENGTH = 32


class KeyMaterial:
    """Owns exactly one Ed25519 private key and signs on its behalf.

    The private key never leaves the object except through
    export_private_key_hex(). After close() the key is dropped and any
    signing attempt raises SigningError.
    """

    def __init__(self, keypair: Keypair) -> None:
        if not keypair.can_sign():
            raise SigningError("keypair has no private key")
        self._keypair: Keypair | None = keypair
        self._public_key = keypair.raw_public_key()
        self._address = Address.from_public_key(self._public_key)

    # ── Construction ───────────────────────────────────────

    @classmethod
    def generate(cls) -> KeyMaterial:
        return cls(Keypair.random())

    @classmethod
    def from_seed(cls, seed: bytes) -> KeyMaterial:
        if len(seed) != SEED_LENGTH:
            raise InvalidSpec(f"Ed25519 seed must be {SEED_LENGTH} bytes, got {len(seed)}")
        return cls(Keypair.from_raw_ed25519_seed(seed))

    @classmethod
    def from_private_key_hex(cls, private_key_hex: str) -> KeyMaterial:
        raw = private_key_hex.strip()
        if raw.startswith(("0x", "0X")):
            raw = raw[2:]
        try:
            seed = bytes.fromhex(raw)
        except ValueError as exc:
            raise InvalidSpec("private key is not valid hex") from exc
        return cls.from_seed(seed)

    @classmethod
    def from_private_key_base64(cls, private_key_b64: str) -> KeyMaterial:
        try:
            seed = base64.b64decode(private_key_b64, validate=True)
        except ValueError as exc:
            raise InvalidSpec("private key is not valid base64") from exc
        return cls.from_seed(seed)

    # ── Identity ───────────────────────────────────────────

    @property
    def address(self) -> Address:
        return self._address

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def public_key_hex(self) -> str:
        return "0x" + self._public_key.hex()

    @property
    def closed(self) -> bool:
        return self._keypair is None

    # ── Signing ────────────────────────────────────────────

    def sign(self, message: bytes) -> bytes:
        """Sign the exact bytes given. Ed25519 signatures are deterministic."""
        if self._keypair is None:
            raise SigningError(f"key for {self._address.short()} is closed")
        return self._keypair.sign(message)

    def verify(self, message: bytes, signature: bytes) -> bool:
        verifier = Keypair.from_raw_ed25519_public_key(self._public_key)
        try:
            verifier.verify(message, signature)
        except BadSignatureError:
            return False
        return True

    def export_private_key_hex(self) -> str:
        """Explicit export of the private seed."""
        if self._keypair is None:
            raise SigningError(f"key for {self._address.short()} is closed")
        return "0x" + self._keypair.raw_secret_key().hex()

    # ── Lifecycle ──────────────────────────────────────────

    def close(self) -> None:
        if self._keypair is not None:
            log.debug("Dropping key material for %s", self._address.short())
        self._keypair = None

    def __enter__(self) -> KeyMaterial:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"KeyMaterial(address={self._address.hex()}, {state})"
