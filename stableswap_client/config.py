"""
Configuration management for the StableSwap client

Loads settings from environment variables and .env file.
Includes logging configuration with file output and correlation ID support.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # stableswap_client package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class RpcConfig:
    """RPC client configuration"""
    url: str = field(default_factory=lambda: _get_env("SOLANA_RPC_URL", ""))
    timeout_seconds: float = field(default_factory=lambda: _get_env_float("RPC_TIMEOUT_SECONDS", 30.0))
    max_retries: int = field(default_factory=lambda: _get_env_int("RPC_MAX_RETRIES", 3))
    retry_delay_seconds: float = field(default_factory=lambda: _get_env_float("RPC_RETRY_DELAY_SECONDS", 0.5))
    commitment: str = field(default_factory=lambda: _get_env("RPC_COMMITMENT", "confirmed"))


@dataclass
class SignerConfig:
    """Signer configuration for local keypair signing"""
    keypair_path: str = field(default_factory=lambda: _get_env("SOLANA_KEYPAIR_PATH", ""))


@dataclass
class TxConfig:
    """
    Transaction configuration

    Confirmation polling is bounded twice: by a poll count and by a wall-clock
    cutoff. Whichever is hit first ends the wait with ConfirmationTimeoutError.
    """
    # Compute budget instructions are only added when > 0
    compute_units: int = field(default_factory=lambda: _get_env_int("TX_COMPUTE_UNITS", 0))
    compute_unit_price: int = field(default_factory=lambda: _get_env_int("TX_COMPUTE_UNIT_PRICE", 0))
    skip_preflight: bool = field(default_factory=lambda: _get_env_bool("TX_SKIP_PREFLIGHT", False))
    preflight_commitment: str = field(default_factory=lambda: _get_env("TX_PREFLIGHT_COMMITMENT", "confirmed"))
    # Resubmission before ledger acceptance (each attempt is rebuilt and re-signed)
    send_max_retries: int = field(default_factory=lambda: _get_env_int("TX_SEND_MAX_RETRIES", 3))
    retry_delay: float = field(default_factory=lambda: _get_env_float("TX_RETRY_DELAY", 2.0))
    # Confirmation polling
    confirmation_poll_interval: float = field(default_factory=lambda: _get_env_float("TX_CONFIRMATION_POLL_INTERVAL", 1.0))
    confirmation_max_polls: int = field(default_factory=lambda: _get_env_int("TX_CONFIRMATION_MAX_POLLS", 30))
    confirmation_timeout: float = field(default_factory=lambda: _get_env_float("TX_CONFIRMATION_TIMEOUT", 30.0))


def _get_default_log_path() -> str:
    """Get default log file path under stableswap_client/log/ with UTC timestamp"""
    from datetime import datetime, timezone
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(__file__).parent / "log"
    return str(log_dir / f"stableswap_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging configuration with file output and correlation ID support.

    Environment variables:
        LOG_FILE: Path to log file (overrides default)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", _get_default_log_path()))

    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))

    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))

    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))

    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from stableswap_client.config import config

        print(config.rpc.url)
        print(config.tx.confirmation_max_polls)
    """
    rpc: RpcConfig = field(default_factory=RpcConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "stableswap_client",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close before removing to release file handles
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    # Child loggers inherit handlers from parent
    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.program",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger


def enable_file_logging(
    log_file: Optional[str] = None,
    level: str = "INFO",
    console: bool = True,
) -> logging.Logger:
    """
    Quick setup for file logging.

    Args:
        log_file: Path to log file (defaults to stableswap_client/log/)
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        console: Also output to console

    Returns:
        Configured logger
    """
    if log_file is None:
        log_file = config.logging.log_file

    log_config = LoggingConfig(
        log_file=log_file,
        log_level=level,
        console_output=console,
    )
    return setup_logging(log_config)
