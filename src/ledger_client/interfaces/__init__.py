"""Protocol interfaces for ledger_client collaborators."""

from ledger_client.interfaces.network import NetworkClient

__all__ = ["NetworkClient"]
