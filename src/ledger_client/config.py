"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from ledger_client.models.config import ClientConfig

NODE_URLS = {
    "mainnet": "https://fullnode.mainnet.aptoslabs.com/v1",
    "testnet": "https://fullnode.testnet.aptoslabs.com/v1",
    "devnet": "https://fullnode.devnet.aptoslabs.com/v1",
}

CHAIN_IDS = {
    "mainnet": 1,
    "testnet": 2,
}

# Networks without a fixed id (devnet, local) read it from the node at first submit
CHAIN_ID_FROM_NODE = 0


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "LEDGER_CLIENT_",
) -> ClientConfig:
    """Load client configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (LEDGER_CLIENT_SECRET, etc.)
        2. TOML config file
        3. Defaults from ClientConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ClientConfig()

    # ── Network section ────────────────────────────────────
    network = raw.get("network", {})
    if v := network.get("name"):
        cfg.network = str(v)
    if v := network.get("node_url"):
        cfg.node_url = str(v)
    if (v := network.get("chain_id")) is not None:
        cfg.chain_id = int(v)
    else:
        cfg.chain_id = CHAIN_IDS.get(cfg.network, CHAIN_ID_FROM_NODE)
    if v := network.get("request_timeout"):
        cfg.request_timeout = float(v)

    # ── Wallet section ─────────────────────────────────────
    wallet = raw.get("wallet", {})
    if v := wallet.get("private_key"):
        cfg.private_key = str(v)

    # ── Submission section ─────────────────────────────────
    sub = raw.get("submission", {})
    s = cfg.submission
    if v := sub.get("expiration_secs"):
        s.expiration_secs = int(v)
    if v := sub.get("max_gas_amount"):
        s.max_gas_amount = int(v)
    if v := sub.get("gas_unit_price"):
        s.gas_unit_price = int(v)
    if v := sub.get("max_submit_attempts"):
        s.max_submit_attempts = int(v)
    if v := sub.get("sequence_fetch_attempts"):
        s.sequence_fetch_attempts = int(v)
    if v := sub.get("confirm_timeout"):
        s.confirm_timeout = int(v)

    # ── Events section ─────────────────────────────────────
    ev = raw.get("events", {})
    e = cfg.events
    if v := ev.get("poll_interval"):
        e.poll_interval = float(v)
    if v := ev.get("page_limit"):
        e.page_limit = int(v)
    if v := ev.get("backoff_base"):
        e.backoff_base = float(v)
    if v := ev.get("backoff_max"):
        e.backoff_max = float(v)
    if v := ev.get("channel_capacity"):
        e.channel_capacity = int(v)

    # ── Logging section ────────────────────────────────────
    if v := raw.get("logging", {}).get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.private_key = secret
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
        cfg.chain_id = CHAIN_IDS.get(net, CHAIN_ID_FROM_NODE)
    if url := os.environ.get(f"{env_prefix}NODE_URL"):
        cfg.node_url = url
    if chain := os.environ.get(f"{env_prefix}CHAIN_ID"):
        cfg.chain_id = int(chain)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    if not cfg.node_url:
        cfg.node_url = NODE_URLS.get(cfg.network, NODE_URLS["testnet"])

    return cfg
