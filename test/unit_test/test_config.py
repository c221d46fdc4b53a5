"""
Test Config Module

Tests for environment-driven configuration and logging setup.
"""

import sys
import logging
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from stableswap_client.config import (
    Config,
    LoggingConfig,
    TxConfig,
    enable_file_logging,
    setup_logging,
)
from stableswap_client.infra import TxBuilderConfig


def test_tx_config_defaults(monkeypatch):
    """Test TxConfig defaults when no environment is set"""
    print("Testing TxConfig defaults...")

    for key in (
        "TX_COMPUTE_UNITS",
        "TX_COMPUTE_UNIT_PRICE",
        "TX_SEND_MAX_RETRIES",
        "TX_CONFIRMATION_MAX_POLLS",
        "TX_CONFIRMATION_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)

    config = TxConfig()

    assert config.compute_units == 0, "Compute budget should be off by default"
    assert config.compute_unit_price == 0
    assert config.send_max_retries == 3
    assert config.confirmation_max_polls == 30
    assert config.confirmation_timeout == 30.0

    print("  TxConfig defaults: PASSED")


def test_tx_config_from_env(monkeypatch):
    """Test TxConfig reads typed values from the environment"""
    print("Testing TxConfig from env...")

    monkeypatch.setenv("TX_CONFIRMATION_MAX_POLLS", "12")
    monkeypatch.setenv("TX_CONFIRMATION_POLL_INTERVAL", "0.25")
    monkeypatch.setenv("TX_SKIP_PREFLIGHT", "yes")

    config = TxConfig()

    assert config.confirmation_max_polls == 12
    assert config.confirmation_poll_interval == 0.25
    assert config.skip_preflight is True

    print("  TxConfig from env: PASSED")


def test_invalid_env_falls_back(monkeypatch):
    monkeypatch.setenv("TX_CONFIRMATION_MAX_POLLS", "many")
    monkeypatch.setenv("TX_RETRY_DELAY", "soon")

    config = TxConfig()

    assert config.confirmation_max_polls == 30
    assert config.retry_delay == 2.0


def test_rpc_config_from_env(monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", "https://a.example.com,https://b.example.com")
    monkeypatch.setenv("RPC_COMMITMENT", "finalized")

    config = Config()

    assert config.rpc.url == "https://a.example.com,https://b.example.com"
    assert config.rpc.commitment == "finalized"


def test_rpc_client_from_config(monkeypatch):
    from stableswap_client.config import config
    from stableswap_client.infra import RpcClient

    monkeypatch.setattr(config.rpc, "url", "https://a.example.com, https://b.example.com")

    client = RpcClient.from_config()
    assert client.endpoint == "https://a.example.com"


def test_tx_builder_config_override():
    """Per-builder overrides win, unset values come from global config"""
    from stableswap_client.config import config

    builder_config = TxBuilderConfig(confirmation_max_polls=7)

    assert builder_config.confirmation_max_polls == 7
    assert builder_config.confirmation_timeout == config.tx.confirmation_timeout
    assert builder_config.send_max_retries == config.tx.send_max_retries


def test_setup_logging(tmp_path):
    """Test rotating file logging on the package logger"""
    print("Testing setup_logging...")

    log_file = tmp_path / "logs" / "stableswap.log"
    log_config = LoggingConfig(
        log_file=str(log_file),
        log_level="DEBUG",
        console_output=False,
    )

    logger = setup_logging(log_config, logger_name="stableswap_client_test")
    try:
        logger.info("hello from test")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
        assert logger.level == logging.DEBUG
    finally:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    print("  setup_logging: PASSED")


def test_enable_file_logging(tmp_path):
    log_file = tmp_path / "quick.log"

    logger = enable_file_logging(str(log_file), level="WARNING", console=False)
    try:
        assert logger.name == "stableswap_client"
        assert logger.level == logging.WARNING
        assert log_file.exists()
    finally:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)


def test_reload_config(monkeypatch):
    import stableswap_client.config as config_module

    original = config_module.config
    # Restored at teardown
    monkeypatch.setattr(config_module, "config", original)
    monkeypatch.setenv("TX_CONFIRMATION_MAX_POLLS", "9")

    reloaded = config_module.reload_config()

    assert reloaded is config_module.config
    assert reloaded is not original
    assert reloaded.tx.confirmation_max_polls == 9
