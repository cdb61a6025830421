"""Key material: address derivation, signing and lifecycle."""

from __future__ import annotations

import base64
import hashlib

import pytest

from ledger_client.errors import InvalidSpec, SigningError
from ledger_client.models.address import Address
from ledger_client.wallet.keys import KeyMaterial
from tests.conftest import TEST_SECRET, TEST_SEED


# ── Address derivation ────────────────────────────────────────────


def test_address_is_sha3_of_public_key_and_scheme(key):
    expected = hashlib.sha3_256(key.public_key + b"\x00").digest()
    assert key.address == Address(expected)
    assert key.address.hex() == "0x" + expected.hex()


def test_same_seed_same_address():
    a = KeyMaterial.from_seed(TEST_SEED)
    b = KeyMaterial.from_private_key_hex(TEST_SECRET)
    c = KeyMaterial.from_private_key_base64(base64.b64encode(TEST_SEED).decode())
    assert a.address == b.address == c.address


def test_generated_keys_differ():
    assert KeyMaterial.generate().address != KeyMaterial.generate().address


def test_short_special_address_is_left_padded():
    addr = Address.from_hex("0x1")
    assert addr.value == b"\x00" * 31 + b"\x01"
    assert addr == Address.from_hex("0x" + "0" * 63 + "1")


@pytest.mark.parametrize("text", ["", "0x", "0xzz", "0x" + "1" * 65])
def test_invalid_address_raises(text):
    with pytest.raises(InvalidSpec):
        Address.from_hex(text)


def test_bad_seed_length_raises():
    with pytest.raises(InvalidSpec):
        KeyMaterial.from_seed(b"\x01" * 31)
    with pytest.raises(InvalidSpec):
        KeyMaterial.from_private_key_hex("not-hex")


# ── Signing ───────────────────────────────────────────────────────


def test_sign_and_verify(key):
    sig = key.sign(b"hello ledger")
    assert len(sig) == 64
    assert key.verify(b"hello ledger", sig)
    assert not key.verify(b"hello ledgeR", sig)


def test_signatures_are_deterministic(key):
    assert key.sign(b"same bytes") == key.sign(b"same bytes")


def test_export_round_trips(key):
    exported = key.export_private_key_hex()
    assert exported == TEST_SECRET
    assert KeyMaterial.from_private_key_hex(exported).address == key.address


# ── Lifecycle ─────────────────────────────────────────────────────


def test_closed_key_cannot_sign():
    k = KeyMaterial.from_seed(TEST_SEED)
    k.close()
    assert k.closed
    with pytest.raises(SigningError):
        k.sign(b"anything")
    with pytest.raises(SigningError):
        k.export_private_key_hex()


def test_context_manager_closes():
    with KeyMaterial.from_seed(TEST_SEED) as k:
        assert not k.closed
    assert k.closed
    assert "closed" in repr(k)


def test_closed_key_still_verifies():
    k = KeyMaterial.from_seed(TEST_SEED)
    sig = k.sign(b"payload")
    k.close()
    assert k.verify(b"payload", sig)
