"""Wallet key material."""

from ledger_client.wallet.keys import KeyMaterial

__all__ = ["KeyMaterial"]
