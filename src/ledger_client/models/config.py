"""Configuration models for the client."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SubmissionConfig:
    """Defaults for building and submitting transactions."""

    expiration_secs: int = 30  # seconds past network time
    max_gas_amount: int = 2000
    gas_unit_price: int = 100
    max_submit_attempts: int = 3  # sequence-conflict retries included
    sequence_fetch_attempts: int = 3
    sequence_fetch_backoff: float = 0.5  # seconds, doubled per attempt
    confirm_timeout: int = 30  # seconds for wait_for_transaction
    confirm_poll_interval: float = 0.5


@dataclass
class EventsConfig:
    """Event polling and fan-out configuration."""

    poll_interval: float = 2.0  # seconds between polls per topic
    page_limit: int = 100  # max events requested per poll
    backoff_base: float = 1.0  # first delay after a failed poll
    backoff_max: float = 30.0
    channel_capacity: int = 100  # buffered events per subscription


@dataclass
class ClientConfig:
    """Complete client configuration."""

    # Network
    network: str = "testnet"
    node_url: str = ""  # empty -> derived from network
    chain_id: int = 2  # 0 -> read from the node's ledger info
    request_timeout: float = 10.0

    # Wallet
    private_key: str = ""  # hex Ed25519 seed, loaded from env var LEDGER_CLIENT_SECRET

    log_level: str = "info"

    submission: SubmissionConfig = field(default_factory=SubmissionConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
