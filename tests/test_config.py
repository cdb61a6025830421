"""Config loading from TOML and environment overrides."""

from __future__ import annotations

import pytest

from ledger_client.config import CHAIN_ID_FROM_NODE, NODE_URLS, load_config

ENV_VARS = [
    "LEDGER_CLIENT_SECRET",
    "LEDGER_CLIENT_NETWORK",
    "LEDGER_CLIENT_NODE_URL",
    "LEDGER_CLIENT_CHAIN_ID",
    "LEDGER_CLIENT_LOG_LEVEL",
]

CONFIG_TOML = """
[network]
name = "mainnet"
request_timeout = 4.5

[wallet]
private_key = "0x0101"

[submission]
expiration_secs = 90
max_gas_amount = 5000
gas_unit_price = 150
max_submit_attempts = 5

[events]
poll_interval = 0.5
page_limit = 25
channel_capacity = 16

[logging]
level = "debug"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file():
    cfg = load_config()
    assert cfg.network == "testnet"
    assert cfg.chain_id == 2
    assert cfg.node_url == NODE_URLS["testnet"]
    assert cfg.private_key == ""
    assert cfg.submission.max_submit_attempts == 3
    assert cfg.events.channel_capacity == 100


def test_missing_file_falls_back_to_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.toml")
    assert cfg.network == "testnet"


def test_toml_sections_applied(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)

    cfg = load_config(path)

    assert cfg.network == "mainnet"
    assert cfg.chain_id == 1
    assert cfg.node_url == NODE_URLS["mainnet"]
    assert cfg.request_timeout == 4.5
    assert cfg.private_key == "0x0101"
    assert cfg.submission.expiration_secs == 90
    assert cfg.submission.max_gas_amount == 5000
    assert cfg.submission.gas_unit_price == 150
    assert cfg.submission.max_submit_attempts == 5
    assert cfg.events.poll_interval == 0.5
    assert cfg.events.page_limit == 25
    assert cfg.events.channel_capacity == 16
    assert cfg.log_level == "debug"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    monkeypatch.setenv("LEDGER_CLIENT_SECRET", "0xfeed")
    monkeypatch.setenv("LEDGER_CLIENT_NODE_URL", "http://127.0.0.1:8080/v1")
    monkeypatch.setenv("LEDGER_CLIENT_CHAIN_ID", "4")
    monkeypatch.setenv("LEDGER_CLIENT_LOG_LEVEL", "warning")

    cfg = load_config(path)

    assert cfg.private_key == "0xfeed"
    assert cfg.node_url == "http://127.0.0.1:8080/v1"
    assert cfg.chain_id == 4
    assert cfg.log_level == "warning"


def test_env_network_sets_url_and_chain(monkeypatch):
    monkeypatch.setenv("LEDGER_CLIENT_NETWORK", "mainnet")
    cfg = load_config()
    assert cfg.network == "mainnet"
    assert cfg.chain_id == 1
    assert cfg.node_url == NODE_URLS["mainnet"]


def test_env_devnet_reads_chain_from_node(monkeypatch):
    monkeypatch.setenv("LEDGER_CLIENT_NETWORK", "devnet")
    cfg = load_config()
    assert cfg.network == "devnet"
    assert cfg.chain_id == CHAIN_ID_FROM_NODE
    assert cfg.node_url == NODE_URLS["devnet"]


def test_toml_devnet_without_chain_id(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[network]\nname = "devnet"\n')
    assert load_config(path).chain_id == CHAIN_ID_FROM_NODE


def test_env_chain_id_wins_over_network(monkeypatch):
    monkeypatch.setenv("LEDGER_CLIENT_NETWORK", "devnet")
    monkeypatch.setenv("LEDGER_CLIENT_CHAIN_ID", "77")
    assert load_config().chain_id == 77
