"""LedgerClient - wires key material, network, submission and event bus together."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ledger_client.errors import NetworkError, SigningError
from ledger_client.events.bus import EventBus
from ledger_client.events.subscription import Subscription
from ledger_client.interfaces.network import NetworkClient
from ledger_client.models.address import Address
from ledger_client.models.config import ClientConfig
from ledger_client.models.events import EventTopic
from ledger_client.models.transactions import (
    ContractCallSpec,
    Payload,
    SubmissionResult,
    TransactionStatus,
)
from ledger_client.rest.network import RestNetworkClient
from ledger_client.transactions import payloads
from ledger_client.transactions.coordinator import SubmissionCoordinator
from ledger_client.wallet.keys import KeyMaterial

log = logging.getLogger(__name__)


class LedgerClient:
    """Application-facing entry point.

    Holds one SubmissionCoordinator and one EventBus over a shared
    NetworkClient. The wallet key is optional; read and subscribe
    operations work without it.
    """

    def __init__(
        self,
        cfg: ClientConfig,
        network: NetworkClient | None = None,
        wallet: KeyMaterial | None = None,
    ) -> None:
        self._cfg = cfg
        self.network: NetworkClient = network or RestNetworkClient(
            cfg.node_url, timeout=cfg.request_timeout,
        )
        self._owns_wallet = wallet is None and bool(cfg.private_key)
        if self._owns_wallet:
            wallet = KeyMaterial.from_private_key_hex(cfg.private_key)
        self.wallet = wallet
        self.coordinator = SubmissionCoordinator(self.network, cfg.chain_id, cfg.submission)
        self.bus = EventBus(self.network, cfg.events)

        if wallet is not None:
            log.info("Client ready for %s on %s", wallet.address.hex(), cfg.network)

    def _require_wallet(self, wallet: KeyMaterial | None) -> KeyMaterial:
        key = wallet or self.wallet
        if key is None:
            raise SigningError("no wallet configured")
        return key

    # ── Submission ─────────────────────────────────────────

    async def submit(
        self,
        payload: Payload,
        wallet: KeyMaterial | None = None,
        **options: Any,
    ) -> SubmissionResult:
        """Submit any payload. ``options`` are gas_budget, gas_price, expiration_secs."""
        return await self.coordinator.submit(payload, self._require_wallet(wallet), **options)

    async def call(
        self, call: ContractCallSpec, wallet: KeyMaterial | None = None, **options: Any
    ) -> SubmissionResult:
        return await self.submit(call, wallet, **options)

    async def transfer(
        self, recipient: Address | str, amount: int, wallet: KeyMaterial | None = None, **options: Any
    ) -> SubmissionResult:
        return await self.submit(payloads.native_transfer(recipient, amount), wallet, **options)

    async def transfer_coin(
        self,
        token_type: str,
        recipient: Address | str,
        amount: int,
        wallet: KeyMaterial | None = None,
        **options: Any,
    ) -> SubmissionResult:
        return await self.submit(
            payloads.coin_transfer(token_type, recipient, amount), wallet, **options,
        )

    async def create_token(
        self,
        token_type: str,
        name: str,
        symbol: str,
        decimals: int,
        monitor_supply: bool = True,
        wallet: KeyMaterial | None = None,
        **options: Any,
    ) -> SubmissionResult:
        call = payloads.initialize_coin(token_type, name, symbol, decimals, monitor_supply)
        return await self.submit(call, wallet, **options)

    async def register_token(
        self, token_type: str, wallet: KeyMaterial | None = None, **options: Any
    ) -> SubmissionResult:
        return await self.submit(payloads.register_coin(token_type), wallet, **options)

    async def mint_token(
        self,
        token_type: str,
        recipient: Address | str,
        amount: int,
        wallet: KeyMaterial | None = None,
        **options: Any,
    ) -> SubmissionResult:
        return await self.submit(payloads.mint_coin(token_type, recipient, amount), wallet, **options)

    async def burn_token(
        self, token_type: str, amount: int, wallet: KeyMaterial | None = None, **options: Any
    ) -> SubmissionResult:
        return await self.submit(payloads.burn_coin(token_type, amount), wallet, **options)

    async def wait_for_transaction(
        self, tx_hash: str, timeout: float | None = None
    ) -> TransactionStatus:
        """Poll until the transaction is committed. Raises NetworkError on timeout."""
        timeout = self._cfg.submission.confirm_timeout if timeout is None else timeout
        interval = self._cfg.submission.confirm_poll_interval
        deadline = time.monotonic() + timeout
        while True:
            try:
                status = await self.network.fetch_transaction(tx_hash)
                if status.committed:
                    log.info(
                        "Tx %s committed (success=%s, vm_status=%s)",
                        tx_hash[:18], status.success, status.vm_status,
                    )
                    return status
            except NetworkError as exc:
                log.debug("Transaction lookup for %s failed: %s", tx_hash[:18], exc)
            if time.monotonic() >= deadline:
                raise NetworkError(f"transaction {tx_hash} not committed after {timeout}s")
            await asyncio.sleep(interval)

    # ── Reads ──────────────────────────────────────────────

    async def sequence_number(self, address: Address | str | None = None) -> int:
        target = Address.coerce(address) if address is not None else self._require_wallet(None).address
        return await self.network.fetch_sequence_number(target)

    async def read_resource(self, address: Address | str, resource_type: str) -> dict[str, Any] | None:
        return await self.network.read_resource(Address.coerce(address), resource_type)

    async def view(self, call: ContractCallSpec) -> list[Any]:
        return await self.network.view(call)

    # ── Events ─────────────────────────────────────────────

    async def subscribe(
        self,
        address: Address | str,
        event_type: str,
        *,
        start_after: int | None = None,
        capacity: int | None = None,
    ) -> Subscription:
        topic = EventTopic.of(address, event_type)
        return await self.bus.subscribe(topic, start_after=start_after, capacity=capacity)

    async def unsubscribe(self, subscription: Subscription) -> None:
        await self.bus.unsubscribe(subscription)

    # ── Lifecycle ──────────────────────────────────────────

    async def close(self) -> None:
        await self.bus.close()
        await self.network.close()
        if self._owns_wallet and self.wallet is not None:
            self.wallet.close()
        log.info("Client shut down cleanly")

    async def __aenter__(self) -> LedgerClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
