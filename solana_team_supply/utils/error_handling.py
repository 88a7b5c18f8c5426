"""
Error handling utilities for Solana Team Supply.

This module defines the exception hierarchy shared by the analysis pipeline:
- A base exception carrying an error code and structured details
- Fatal errors that abort a whole analysis run
- Wallet-local errors that are contained by the batch scheduler
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for Solana Team Supply."""
    # General errors
    UNKNOWN_ERROR = 1000
    CONFIGURATION_ERROR = 1001
    VALIDATION_ERROR = 1002

    # Data source errors
    TOKEN_NOT_FOUND = 2000
    HOLDER_LIMIT_EXCEEDED = 2001

    # Analysis errors
    ANALYSIS_CANCELLED = 3000
    WALLET_TIMEOUT = 3001


# Base exception classes
class TeamSupplyError(Exception):
    """Base exception class for all Solana Team Supply errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize a new TeamSupplyError.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        # Format the error message
        formatted_message = f"[{error_code.name}] {message}"
        if details:
            formatted_message += f" - Details: {details}"

        super().__init__(formatted_message)


class ConfigurationError(TeamSupplyError):
    """Error related to configuration issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(TeamSupplyError):
    """Error related to validation failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class TokenNotFoundError(TeamSupplyError):
    """Raised when no token information can be found for a mint."""

    def __init__(self, token_address: str):
        """
        Initialize the error.

        Args:
            token_address: The mint that could not be resolved
        """
        self.token_address = token_address
        super().__init__(
            "No token info found",
            ErrorCode.TOKEN_NOT_FOUND,
            {"token_address": token_address}
        )


class HolderLimitExceededError(TeamSupplyError):
    """Raised when a mint has more token accounts than the configured holder cap.

    A partial holder list would understate team supply, so the run is aborted.
    """

    def __init__(self, token_address: str, max_accounts: int):
        self.token_address = token_address
        self.max_accounts = max_accounts
        super().__init__(
            f"Holder list exceeds {max_accounts} token accounts",
            ErrorCode.HOLDER_LIMIT_EXCEEDED,
            {"token_address": token_address, "max_accounts": max_accounts}
        )


class AnalysisCancelledError(TeamSupplyError):
    """Raised when the caller cancels a running analysis.

    Kept separate from other fatal errors so callers can tell a user abort
    apart from a system failure.
    """

    def __init__(self, message: str = "Analysis cancelled by user"):
        super().__init__(message, ErrorCode.ANALYSIS_CANCELLED)


class WalletAnalysisTimeoutError(TeamSupplyError):
    """Raised when a single wallet classification exceeds its time budget."""

    def __init__(self, wallet_address: str, timeout: float):
        """
        Initialize the timeout error.

        Args:
            wallet_address: Address of the wallet being classified
            timeout: The timeout that elapsed, in seconds
        """
        self.wallet_address = wallet_address
        self.timeout = timeout
        super().__init__(
            f"Wallet analysis timeout for {wallet_address[:8]}...",
            ErrorCode.WALLET_TIMEOUT,
            {"timeout_seconds": timeout}
        )
