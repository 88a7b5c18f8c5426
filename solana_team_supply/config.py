"""Configuration module for Solana Team Supply.

Every setting is read from the process environment (a local ``.env`` file is
loaded first) and converted by a small validator so that a bad value fails at
startup with the variable's name in the message.
"""

# Standard library imports
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
import httpx
from dotenv import load_dotenv

load_dotenv()

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Read an environment variable, converting it with ``validator``.

    Unset variables yield ``default`` unless ``required`` is set. Any failure,
    missing or malformed, surfaces as a ValueError naming ``key``.
    """
    raw = os.environ.get(key)
    if raw is None:
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default
    if validator is None:
        return raw
    try:
        return validator(raw)
    except Exception as e:
        raise ValueError(f"Invalid value for environment variable '{key}': {e}") from e


def _convert(value: str, kind: Callable[[str], Any], label: str) -> Any:
    try:
        return kind(value)
    except (ValueError, InvalidOperation):
        raise ValueError(f"'{value}' is not a valid {label}") from None


def int_validator(value: str) -> int:
    return _convert(value, int, "integer")


def float_validator(value: str) -> float:
    return _convert(value, float, "number")


def decimal_validator(value: str) -> Decimal:
    """Parse a fraction such as ``0.001`` without going through float."""
    return _convert(value.strip(), Decimal, "decimal number")


def url_validator(value: str) -> str:
    """Accept only absolute http(s) URLs with a host; the query may carry an API key."""
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        raise ValueError(f"'{value}' is not a valid URL") from None
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    level = value.lower()
    if level not in COMMITMENT_LEVELS:
        raise ValueError(f"Commitment must be one of: {', '.join(COMMITMENT_LEVELS)}")
    return level


def log_level_validator(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
    return level


@dataclass
class SolanaConfig:
    """Where and how fast the RPC client talks to the cluster."""

    rpc_url: str
    rpc_user: Optional[str] = None
    rpc_password: Optional[str] = None
    commitment: str = "confirmed"
    timeout: int = 30  # seconds
    max_retries: int = 3
    max_concurrent_requests: int = 5
    requests_per_second: float = 10.0  # 0 disables pacing

    @property
    def has_auth(self) -> bool:
        """Basic auth is sent only when both halves are configured."""
        return bool(self.rpc_user and self.rpc_password)


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Build the RPC settings from ``SOLANA_*`` variables (cached)."""
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com",
                            validator=url_validator),
        rpc_user=get_env_var("SOLANA_RPC_USER"),
        rpc_password=get_env_var("SOLANA_RPC_PASSWORD"),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed", validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30, validator=int_validator),
        max_retries=get_env_var("SOLANA_MAX_RETRIES", 3, validator=int_validator),
        max_concurrent_requests=get_env_var("SOLANA_MAX_CONCURRENT_REQUESTS", 5, validator=int_validator),
        requests_per_second=get_env_var("SOLANA_REQUESTS_PER_SECOND", 10.0, validator=float_validator),
    )


@dataclass
class AnalysisConfig:
    """Thresholds and pacing for one team supply analysis."""

    batch_size: int = 5
    batch_delay_seconds: float = 0.2
    wallet_timeout_seconds: float = 30.0
    supply_threshold: Decimal = Decimal("0.001")  # 0.1% of total supply
    fresh_wallet_threshold: int = 100
    excessive_transaction_threshold: int = 1000
    inactivity_threshold_days: int = 30
    funding_max_signature_pages: int = 5
    holder_max_accounts: int = 0  # 0 fetches every token account

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError(f"Invalid batch_size: {self.batch_size}")
        if self.wallet_timeout_seconds <= 0:
            raise ValueError(f"Invalid wallet_timeout_seconds: {self.wallet_timeout_seconds}")
        if self.batch_delay_seconds < 0:
            raise ValueError(f"Invalid batch_delay_seconds: {self.batch_delay_seconds}")


@lru_cache()
def get_analysis_config() -> AnalysisConfig:
    """Build the analysis thresholds from the environment (cached)."""
    return AnalysisConfig(
        batch_size=get_env_var("BATCH_SIZE", 5, validator=int_validator),
        batch_delay_seconds=get_env_var("BATCH_DELAY_SECONDS", 0.2, validator=float_validator),
        wallet_timeout_seconds=get_env_var("WALLET_TIMEOUT_SECONDS", 30.0, validator=float_validator),
        supply_threshold=get_env_var("SUPPLY_THRESHOLD", Decimal("0.001"), validator=decimal_validator),
        fresh_wallet_threshold=get_env_var("FRESH_WALLET_THRESHOLD", 100, validator=int_validator),
        excessive_transaction_threshold=get_env_var("EXCESSIVE_TRANSACTION_THRESHOLD", 1000,
                                                    validator=int_validator),
        inactivity_threshold_days=get_env_var("INACTIVITY_THRESHOLD_DAYS", 30, validator=int_validator),
        funding_max_signature_pages=get_env_var("FUNDING_MAX_SIGNATURE_PAGES", 5, validator=int_validator),
        holder_max_accounts=get_env_var("HOLDER_MAX_ACCOUNTS", 0, validator=int_validator),
    )


@dataclass
class LoggingConfig:
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT


@lru_cache()
def get_logging_config() -> LoggingConfig:
    return LoggingConfig(
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator),
        log_format=get_env_var("LOG_FORMAT", DEFAULT_LOG_FORMAT),
    )
