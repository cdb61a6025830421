"""Tier 2 fixtures: a local fake node serving the REST API over aiohttp."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web

from ledger_client.rest.network import RestNetworkClient

NODE_PORT = 9311
LEDGER_TIMESTAMP_US = 1_700_000_000_123_456
BLOCK_HEIGHT = 8_812


@dataclass
class FakeNodeState:
    """Mutable ledger state behind the fake node's handlers."""

    accounts: dict[str, int] = field(default_factory=dict)
    resources: dict[tuple[str, str], dict] = field(default_factory=dict)
    events: dict[str, list[dict]] = field(default_factory=dict)  # keyed by "addr/event_type"
    retention_floor: dict[str, int] = field(default_factory=dict)
    transactions: dict[str, dict] = field(default_factory=dict)
    submitted: list[dict] = field(default_factory=list)
    event_queries: list[dict[str, str]] = field(default_factory=list)
    reject_next: dict | None = None
    fail_next: int = 0  # number of upcoming requests answered with 503
    garbage_next: int = 0  # number of upcoming requests answered 200 with an HTML body


def _error(status: int, message: str, error_code: str, **extra: Any) -> web.Response:
    body = {"message": message, "error_code": error_code, **extra}
    return web.json_response(body, status=status)


def build_app(state: FakeNodeState) -> web.Application:

    @web.middleware
    async def flaky(request, handler):
        if state.fail_next > 0:
            state.fail_next -= 1
            return web.Response(status=503, text="upstream unavailable")
        if state.garbage_next > 0:
            state.garbage_next -= 1
            return web.Response(status=200, text="<html>bad gateway</html>", content_type="text/html")
        return await handler(request)

    async def ledger_info(request):
        return web.json_response({
            "chain_id": 4,
            "ledger_version": "1000",
            "ledger_timestamp": str(LEDGER_TIMESTAMP_US),
            "block_height": str(BLOCK_HEIGHT),
        })

    async def account(request):
        addr = request.match_info["addr"]
        if addr not in state.accounts:
            return _error(404, f"Account not found by Address({addr})", "account_not_found")
        return web.json_response({
            "sequence_number": str(state.accounts[addr]),
            "authentication_key": addr,
        })

    async def resource(request):
        key = (request.match_info["addr"], request.match_info["rtype"])
        if key not in state.resources:
            return _error(404, "Resource not found", "resource_not_found")
        return web.json_response({"type": key[1], "data": state.resources[key]})

    async def submit(request):
        raw = await request.read()
        body = json.loads(raw)
        state.submitted.append(body)
        if state.reject_next is not None:
            rejection, state.reject_next = state.reject_next, None
            return web.json_response(rejection, status=400)

        sender = body["sender"]
        expected = state.accounts.get(sender, 0)
        if int(body["sequence_number"]) != expected:
            return _error(
                400,
                "Invalid transaction: Type: Validation Code: SEQUENCE_NUMBER_TOO_OLD",
                "vm_error",
                vm_error_code=3,
            )
        state.accounts[sender] = expected + 1
        tx_hash = "0x" + hashlib.sha3_256(raw).hexdigest()
        state.transactions[tx_hash] = {
            "type": "user_transaction",
            "hash": tx_hash,
            "version": "1001",
            "success": True,
            "vm_status": "Executed successfully",
            "gas_used": "9",
            "events": [],
        }
        return web.json_response({"type": "pending_transaction", "hash": tx_hash}, status=202)

    async def by_hash(request):
        tx = state.transactions.get(request.match_info["hash"])
        if tx is None:
            return _error(404, "Transaction not found", "transaction_not_found")
        return web.json_response(tx)

    async def view(request):
        body = await request.json()
        if body.get("function", "").endswith("::coin::balance"):
            return web.json_response(["5000"])
        return _error(400, "function not found", "invalid_input")

    async def events(request):
        key = f"{request.match_info['addr']}/{request.match_info['etype']}"
        state.event_queries.append(dict(request.query))
        start = int(request.query.get("start", 0))
        limit = int(request.query.get("limit", 25))
        floor = state.retention_floor.get(key)
        if floor is not None and start < floor:
            return _error(
                410, "events have been pruned", "event_pruned",
                earliest_sequence_number=str(floor),
            )
        if key not in state.events:
            return _error(404, "Event handle not found", "resource_not_found")
        page = [e for e in state.events[key] if int(e["sequence_number"]) >= start][:limit]
        return web.json_response(page, headers={"X-Aptos-Block-Height": str(BLOCK_HEIGHT)})

    app = web.Application(middlewares=[flaky])
    app.router.add_get("/v1", ledger_info)
    app.router.add_get("/v1/", ledger_info)
    app.router.add_get("/v1/accounts/{addr}", account)
    app.router.add_get("/v1/accounts/{addr}/resource/{rtype}", resource)
    app.router.add_get("/v1/accounts/{addr}/events/{etype:.+}", events)
    app.router.add_post("/v1/transactions", submit)
    app.router.add_get("/v1/transactions/by_hash/{hash}", by_hash)
    app.router.add_post("/v1/view", view)
    return app


@pytest.fixture
async def fake_node():
    """Local HTTP server emulating a node. Returns (base_url, state)."""
    state = FakeNodeState()
    runner = web.AppRunner(build_app(state))
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", NODE_PORT)
    await site.start()
    yield f"http://127.0.0.1:{NODE_PORT}/v1", state
    await runner.cleanup()


@pytest.fixture
async def rest(fake_node):
    """RestNetworkClient pointed at the fake node."""
    base_url, _ = fake_node
    client = RestNetworkClient(base_url, timeout=5.0)
    yield client
    await client.close()
