"""
Common plumbing for the services that sit on top of SolanaClient.

Each service holds the shared client plus the analysis thresholds, and can
time a block of work with ``async with self.log_timing("...")``.
"""

import logging
import time
from typing import Optional

from solana_team_supply.config import AnalysisConfig, get_analysis_config
from solana_team_supply.solana_client import SolanaClient


class BaseService:
    """Holds the RPC client, the analysis settings and a per-class logger."""

    def __init__(
        self,
        solana_client: SolanaClient,
        config: Optional[AnalysisConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.solana_client = solana_client
        self.config = config or get_analysis_config()
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """Time the enclosed block and log its duration at DEBUG."""
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Async context manager that logs how long its body took, and whether it raised."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.started = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.started = time.perf_counter()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.perf_counter() - self.started
        if exc_val is None:
            self.logger.debug(f"{self.operation_name} completed in {elapsed:.2f}s")
        else:
            self.logger.debug(f"{self.operation_name} failed after {elapsed:.2f}s: {exc_val}")
