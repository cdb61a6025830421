"""Submission coordinator - per-sender ordering and sequence-number management."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ledger_client.errors import (
    NetworkError,
    RejectionReason,
    SequenceConflict,
    SubmissionFailed,
)
from ledger_client.interfaces.network import NetworkClient
from ledger_client.models.address import Address
from ledger_client.models.config import SubmissionConfig
from ledger_client.models.transactions import (
    Payload,
    SubmissionResult,
    SubmissionStatus,
    SubmitResponse,
)
from ledger_client.transactions.builder import TransactionBuilder
from ledger_client.transactions.signer import TransactionSigner
from ledger_client.wallet.keys import KeyMaterial

log = logging.getLogger(__name__)


@dataclass
class AccountSequenceState:
    """Last known sequence number for one sender, guarded by its own lock."""

    sequence_number: int | None = None
    stale: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def needs_refresh(self) -> bool:
        return self.sequence_number is None or self.stale


class SubmissionCoordinator:
    """Builds, signs and submits transactions one at a time per sender.

    Each sender address has its own lock, so concurrent callers for the same
    sender queue in lock-acquisition order while unrelated senders proceed
    in parallel. Only a SEQUENCE_CONFLICT rejection is retried, always with
    a freshly fetched sequence number and freshly signed bytes.
    """

    def __init__(
        self,
        network: NetworkClient,
        chain_id: int,
        config: SubmissionConfig | None = None,
        builder: TransactionBuilder | None = None,
        signer: TransactionSigner | None = None,
    ) -> None:
        self._network = network
        self._chain_id = chain_id
        self._cfg = config or SubmissionConfig()
        self._builder = builder or TransactionBuilder()
        self._signer = signer or TransactionSigner()
        self._accounts: dict[Address, AccountSequenceState] = {}

    def _state(self, address: Address) -> AccountSequenceState:
        state = self._accounts.get(address)
        if state is None:
            state = self._accounts[address] = AccountSequenceState()
        return state

    def cached_sequence(self, address: Address) -> int | None:
        state = self._accounts.get(address)
        return None if state is None or state.stale else state.sequence_number

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def invalidate(self, address: Address) -> None:
        """Force the next submission for this sender to refetch its sequence number."""
        state = self._accounts.get(address)
        if state is not None:
            state.stale = True

    async def submit(
        self,
        payload: Payload,
        key: KeyMaterial,
        *,
        gas_budget: int | None = None,
        gas_price: int | None = None,
        expiration_secs: int | None = None,
    ) -> SubmissionResult:
        """Build, sign and submit ``payload`` from ``key``'s account.

        Returns an ACCEPTED result, or a REJECTED result for rejections other
        than sequence conflicts. Raises InvalidSpec before any network call
        for malformed payloads, SigningError if the key is closed,
        NetworkError on transport failures and SubmissionFailed when
        sequence conflicts persist past max_submit_attempts.
        """
        self._builder.validate(payload)
        chain_id = await self._ensure_chain_id()

        gas_budget = self._cfg.max_gas_amount if gas_budget is None else gas_budget
        gas_price = self._cfg.gas_unit_price if gas_price is None else gas_price
        expiration_secs = self._cfg.expiration_secs if expiration_secs is None else expiration_secs

        sender = key.address
        state = self._state(sender)

        async with state.lock:
            last_conflict: SequenceConflict | None = None
            rejected: set[bytes] = set()
            for attempt in range(1, self._cfg.max_submit_attempts + 1):
                if state.needs_refresh:
                    state.sequence_number = await self._fetch_sequence(sender)
                    state.stale = False
                sequence_number = state.sequence_number
                assert sequence_number is not None

                now = await self._network.fetch_current_time()
                unsigned = self._builder.build(
                    payload,
                    sender,
                    sequence_number,
                    gas_budget,
                    gas_price,
                    now + expiration_secs,
                    now,
                    chain_id,
                )
                signed = self._signer.sign(unsigned, key)

                # Bytes already rejected for a conflict are never resent.
                if signed.to_bytes() in rejected:
                    state.stale = True
                    log.debug(
                        "Refetched seq=%d for %s repeats a rejected tx, waiting",
                        sequence_number, sender.short(),
                    )
                    await asyncio.sleep(self._cfg.sequence_fetch_backoff)
                    continue

                log.info(
                    "Submitting tx sender=%s seq=%d (attempt %d/%d)",
                    sender.short(), sequence_number, attempt, self._cfg.max_submit_attempts,
                )
                # NetworkError propagates with the cache untouched: the send
                # may or may not have reached the node.
                try:
                    response = await self._network.submit_transaction(signed)
                except SequenceConflict as exc:
                    response = SubmitResponse(
                        accepted=False,
                        reason=RejectionReason.SEQUENCE_CONFLICT,
                        message=str(exc),
                    )

                if response.accepted:
                    state.sequence_number = sequence_number + 1
                    tx_hash = response.tx_hash or signed.hash
                    log.info(
                        "Tx accepted sender=%s seq=%d tx=%s",
                        sender.short(), sequence_number, tx_hash[:18],
                    )
                    return SubmissionResult(
                        status=SubmissionStatus.ACCEPTED,
                        sender=sender.hex(),
                        sequence_number=sequence_number,
                        tx_hash=tx_hash,
                        attempts=attempt,
                    )

                if response.reason is RejectionReason.SEQUENCE_CONFLICT:
                    state.stale = True
                    rejected.add(signed.to_bytes())
                    last_conflict = SequenceConflict(sequence_number, response.message)
                    log.warning(
                        "Sequence conflict sender=%s seq=%d: %s",
                        sender.short(), sequence_number, response.message,
                    )
                    continue

                log.warning(
                    "Tx rejected sender=%s seq=%d reason=%s: %s",
                    sender.short(), sequence_number,
                    response.reason.value if response.reason else "?", response.message,
                )
                return SubmissionResult(
                    status=SubmissionStatus.REJECTED,
                    sender=sender.hex(),
                    sequence_number=sequence_number,
                    tx_hash=response.tx_hash,
                    attempts=attempt,
                    reason=response.reason or RejectionReason.OTHER,
                    message=response.message,
                )

        raise SubmissionFailed(
            f"sequence conflict persisted after {self._cfg.max_submit_attempts} attempts "
            f"for {sender.short()}: {last_conflict}",
            reason=RejectionReason.SEQUENCE_CONFLICT,
            attempts=self._cfg.max_submit_attempts,
        ) from last_conflict

    async def _ensure_chain_id(self) -> int:
        if not self._chain_id:
            self._chain_id = await self._network.fetch_chain_id()
            log.info("Using chain id %d reported by the node", self._chain_id)
        return self._chain_id

    async def _fetch_sequence(self, address: Address) -> int:
        """Read the on-chain sequence number, retrying transient failures."""
        delay = self._cfg.sequence_fetch_backoff
        attempts = max(1, self._cfg.sequence_fetch_attempts)
        for attempt in range(1, attempts + 1):
            try:
                seq = await self._network.fetch_sequence_number(address)
                log.debug("Fetched sequence %d for %s", seq, address.short())
                return seq
            except NetworkError as exc:
                if attempt == attempts:
                    raise
                log.warning(
                    "Sequence fetch failed for %s (attempt %d/%d): %s",
                    address.short(), attempt, attempts, exc,
                )
                await asyncio.sleep(delay)
                delay *= 2
        raise NetworkError(f"could not fetch sequence number for {address.short()}")
