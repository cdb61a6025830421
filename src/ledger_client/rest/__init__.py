"""Node REST API integration."""

from ledger_client.rest.network import RestNetworkClient

__all__ = ["RestNetworkClient"]
