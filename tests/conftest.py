"""Shared fixtures for ledger_client tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from ledger_client.events.bus import EventBus
from ledger_client.models.config import ClientConfig, EventsConfig, SubmissionConfig
from ledger_client.transactions.coordinator import SubmissionCoordinator
from ledger_client.wallet.keys import KeyMaterial

from tests.mocks import MockNetwork

# Deterministic test keys: 32-byte seeds
TEST_SEED = bytes(range(32))
OTHER_SEED = bytes(range(32, 64))
TEST_SECRET = "0x" + TEST_SEED.hex()

CHAIN_ID = 4  # local testing chain


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "mock ledger (in-process)"
    meta["Chain ID"] = str(CHAIN_ID)
    meta["Test Account"] = KeyMaterial.from_seed(TEST_SEED).address.hex()


def make_submission_config(**overrides) -> SubmissionConfig:
    """SubmissionConfig with sleeps short enough for tests."""
    defaults = dict(
        expiration_secs=30,
        max_gas_amount=2000,
        gas_unit_price=100,
        max_submit_attempts=3,
        sequence_fetch_attempts=3,
        sequence_fetch_backoff=0.001,
        confirm_timeout=1,
        confirm_poll_interval=0.01,
    )
    defaults.update(overrides)
    return SubmissionConfig(**defaults)


def make_events_config(**overrides) -> EventsConfig:
    """EventsConfig that polls fast and backs off briefly."""
    defaults = dict(
        poll_interval=0.01,
        page_limit=100,
        backoff_base=0.01,
        backoff_max=0.05,
        channel_capacity=100,
    )
    defaults.update(overrides)
    return EventsConfig(**defaults)


def make_test_config(**overrides) -> ClientConfig:
    """Build a ClientConfig suitable for testing."""
    defaults = dict(
        network="localnet",
        node_url="http://127.0.0.1:9311/v1",
        chain_id=CHAIN_ID,
        request_timeout=2.0,
        private_key="",
        submission=make_submission_config(),
        events=make_events_config(),
    )
    defaults.update(overrides)
    return ClientConfig(**defaults)


@pytest.fixture
def test_config():
    """Default ClientConfig for tests."""
    return make_test_config()


@pytest.fixture
def key():
    k = KeyMaterial.from_seed(TEST_SEED)
    yield k
    k.close()


@pytest.fixture
def other_key():
    k = KeyMaterial.from_seed(OTHER_SEED)
    yield k
    k.close()


@pytest.fixture
def network():
    return MockNetwork()


@pytest.fixture
def coordinator(network):
    """SubmissionCoordinator over the mock network."""
    return SubmissionCoordinator(network, CHAIN_ID, make_submission_config())


@pytest.fixture
async def bus(network):
    """EventBus over the mock network, closed after the test."""
    b = EventBus(network, make_events_config())
    yield b
    await b.close()
