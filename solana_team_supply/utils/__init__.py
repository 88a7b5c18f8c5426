"""Utility helpers shared across Solana Team Supply."""

from solana_team_supply.utils.error_handling import (
    AnalysisCancelledError,
    ConfigurationError,
    ErrorCode,
    HolderLimitExceededError,
    TeamSupplyError,
    TokenNotFoundError,
    ValidationError,
    WalletAnalysisTimeoutError,
)
from solana_team_supply.utils.rate_limiter import RateLimiter
from solana_team_supply.utils.validation import InvalidPublicKeyError, validate_public_key

__all__ = [
    "AnalysisCancelledError",
    "ConfigurationError",
    "ErrorCode",
    "HolderLimitExceededError",
    "InvalidPublicKeyError",
    "RateLimiter",
    "TeamSupplyError",
    "TokenNotFoundError",
    "ValidationError",
    "WalletAnalysisTimeoutError",
    "validate_public_key",
]
