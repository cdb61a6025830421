"""REST network client - node HTTP API access via httpx."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import quote

import httpx

from ledger_client.errors import GapBeyondRetention, NetworkError, RejectionReason
from ledger_client.models.address import Address
from ledger_client.models.events import EventRecord, EventTopic
from ledger_client.models.transactions import (
    ContractCallSpec,
    SignedTransaction,
    SubmitResponse,
    TransactionStatus,
)

log = logging.getLogger(__name__)

BLOCK_HEIGHT_HEADER = "x-aptos-block-height"
MICROS_PER_SECOND = 1_000_000


def _classify_rejection(body: dict[str, Any]) -> RejectionReason:
    """Map a node error body onto a RejectionReason."""
    text = " ".join(
        str(body.get(k, "")) for k in ("error_code", "vm_error_code", "message")
    ).lower()
    if "sequence_number" in text:
        return RejectionReason.SEQUENCE_CONFLICT
    if "insufficient_balance" in text or "insufficient funds" in text:
        return RejectionReason.INSUFFICIENT_FUNDS
    if "simulation" in text or "vm_error" in text:
        return RejectionReason.SIMULATION_FAILED
    return RejectionReason.OTHER


def _json_body(resp: httpx.Response) -> dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {"message": resp.text}
    return body if isinstance(body, dict) else {"message": str(body)}


class RestNetworkClient:
    """Implements the NetworkClient protocol against a node's REST API.

    One httpx.AsyncClient is shared by all calls; close() releases it.
    Transport failures and 5xx responses raise NetworkError.
    """

    def __init__(
        self,
        node_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = node_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=5),
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            log.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"{method} {path}: {exc}") from exc
        if resp.status_code >= 500:
            raise NetworkError(f"{method} {path}: node HTTP {resp.status_code}")
        return resp

    def _raise_for_status(self, resp: httpx.Response, what: str) -> None:
        if resp.is_error:
            body = _json_body(resp)
            raise NetworkError(
                f"{what}: HTTP {resp.status_code} {body.get('message', '')}".rstrip()
            )

    @contextmanager
    def _parsing(self, what: str) -> Iterator[None]:
        """Turn a malformed success body (proxy page, missing field) into NetworkError."""
        try:
            yield
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            log.warning("%s: malformed node response: %s", what, exc)
            raise NetworkError(f"{what}: malformed node response: {exc}") from exc

    # ── Accounts ───────────────────────────────────────────

    async def fetch_sequence_number(self, address: Address) -> int:
        resp = await self._request("GET", f"/accounts/{address.hex()}")
        if resp.status_code == 404:
            # Account not created on chain yet; its first transaction uses 0
            return 0
        self._raise_for_status(resp, "fetch_sequence_number")
        with self._parsing("fetch_sequence_number"):
            return int(resp.json()["sequence_number"])

    async def read_resource(self, address: Address, resource_type: str) -> dict[str, Any] | None:
        path = f"/accounts/{address.hex()}/resource/{quote(resource_type, safe=':')}"
        resp = await self._request("GET", path)
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, "read_resource")
        with self._parsing("read_resource"):
            return resp.json().get("data")

    # ── Ledger ─────────────────────────────────────────────

    async def fetch_ledger_info(self) -> dict[str, Any]:
        resp = await self._request("GET", "/")
        self._raise_for_status(resp, "fetch_ledger_info")
        with self._parsing("fetch_ledger_info"):
            info = resp.json()
            if not isinstance(info, dict):
                raise TypeError(f"expected object, got {type(info).__name__}")
            return info

    async def fetch_current_time(self) -> int:
        info = await self.fetch_ledger_info()
        with self._parsing("fetch_current_time"):
            return int(info["ledger_timestamp"]) // MICROS_PER_SECOND

    async def fetch_chain_id(self) -> int:
        info = await self.fetch_ledger_info()
        with self._parsing("fetch_chain_id"):
            return int(info["chain_id"])

    # ── Transactions ───────────────────────────────────────

    async def submit_transaction(self, signed: SignedTransaction) -> SubmitResponse:
        resp = await self._request(
            "POST",
            "/transactions",
            content=signed.to_bytes(),
            headers={"Content-Type": "application/json"},
        )
        body = _json_body(resp)
        if resp.is_success:
            return SubmitResponse(accepted=True, tx_hash=str(body.get("hash", "")))

        reason = _classify_rejection(body)
        log.debug("Node rejected tx (HTTP %d, %s): %s", resp.status_code, reason.value, body)
        return SubmitResponse(
            accepted=False,
            reason=reason,
            message=str(body.get("message", "")),
        )

    async def fetch_transaction(self, tx_hash: str) -> TransactionStatus:
        resp = await self._request("GET", f"/transactions/by_hash/{tx_hash}")
        if resp.status_code == 404:
            return TransactionStatus(tx_hash=tx_hash, committed=False)
        self._raise_for_status(resp, "fetch_transaction")
        with self._parsing("fetch_transaction"):
            body = resp.json()
            if body.get("type") == "pending_transaction":
                return TransactionStatus(tx_hash=tx_hash, committed=False)
            return TransactionStatus(
                tx_hash=str(body.get("hash", tx_hash)),
                committed=True,
                success=bool(body.get("success")),
                vm_status=str(body.get("vm_status", "")),
                gas_used=int(body["gas_used"]) if "gas_used" in body else None,
                version=int(body["version"]) if "version" in body else None,
                events=list(body.get("events", [])),
            )

    async def view(self, call: ContractCallSpec) -> list[Any]:
        payload = call.to_payload()
        payload.pop("type")
        resp = await self._request("POST", "/view", json=payload)
        self._raise_for_status(resp, f"view {call.function_id}")
        with self._parsing(f"view {call.function_id}"):
            return list(resp.json())

    # ── Events ─────────────────────────────────────────────

    async def fetch_events(
        self, topic: EventTopic, after_sequence: int | None, limit: int
    ) -> list[EventRecord]:
        path = f"/accounts/{topic.address.hex()}/events/{quote(topic.event_type, safe='/:')}"
        params: dict[str, Any] = {"limit": limit}
        if after_sequence is not None:
            params["start"] = after_sequence + 1  # node's start is inclusive

        resp = await self._request("GET", path, params=params)
        if resp.status_code == 410:
            body = _json_body(resp)
            earliest = str(body.get("earliest_sequence_number", ""))
            raise GapBeyondRetention(
                str(body.get("message", "")),
                earliest_available=int(earliest) if earliest.isdigit() else None,
            )
        if resp.status_code == 404:
            # Handle not created yet: nothing emitted
            return []
        self._raise_for_status(resp, f"fetch_events {topic}")

        records = []
        with self._parsing(f"fetch_events {topic}"):
            block_height = int(resp.headers.get(BLOCK_HEIGHT_HEADER, 0))
            page = resp.json()
            if not isinstance(page, list):
                raise TypeError(f"expected event list, got {type(page).__name__}")
            for item in page:
                records.append(
                    EventRecord(
                        topic=topic,
                        sequence_number=int(item["sequence_number"]),
                        event_type=str(item.get("type", "")),
                        transaction_hash=str(item.get("transaction_hash", "")),
                        block_height=block_height,
                        data=item.get("data") or {},
                    )
                )
        records.sort(key=lambda r: r.sequence_number)
        return records
