"""Bounded-concurrency batch scheduling of wallet classifications."""

import asyncio
import logging
import math
from typing import Awaitable, Callable, List, Optional, Sequence

from solana_team_supply.config import AnalysisConfig, get_analysis_config
from solana_team_supply.logging_config import short_address
from solana_team_supply.services.team_supply.cancellation import CancellationToken, raise_if_cancelled
from solana_team_supply.services.team_supply.models import ClassifiedWallet, Holder
from solana_team_supply.utils.error_handling import AnalysisCancelledError, WalletAnalysisTimeoutError

logger = logging.getLogger(__name__)

ClassifyFn = Callable[[Holder], Awaitable[ClassifiedWallet]]
ProgressCallback = Callable[[int, int], None]


class BatchScheduler:
    """
    Runs a classification over many holders in fixed-size batches.

    Batches run one after another. Inside a batch every holder is classified
    concurrently and raced against a per-wallet timeout. A wallet that times
    out or raises becomes an ``Error`` wallet; only cancellation aborts the
    run. The output preserves input order.
    """

    def __init__(
        self,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        wallet_timeout: Optional[float] = None,
        config: Optional[AnalysisConfig] = None,
        operation_id: str = "-"
    ):
        """
        Initialize the scheduler.

        Args:
            batch_size: Maximum number of concurrent classifications
            batch_delay: Pause between batches in seconds
            wallet_timeout: Time budget for a single wallet in seconds
            config: Source of defaults for the three values above
            operation_id: Correlation id used in log lines
        """
        config = config or get_analysis_config()
        self.batch_size = batch_size if batch_size is not None else config.batch_size
        self.batch_delay = batch_delay if batch_delay is not None else config.batch_delay_seconds
        self.wallet_timeout = wallet_timeout if wallet_timeout is not None else config.wallet_timeout_seconds
        self.operation_id = operation_id

        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")

    async def _pause(self) -> None:
        """Wait between batches to keep request bursts short."""
        await asyncio.sleep(self.batch_delay)

    async def _classify_with_timeout(self, holder: Holder, classify_fn: ClassifyFn) -> ClassifiedWallet:
        """Classify one holder, turning timeouts and failures into ``Error`` wallets."""
        try:
            return await asyncio.wait_for(classify_fn(holder), timeout=self.wallet_timeout)
        except AnalysisCancelledError:
            raise
        except asyncio.TimeoutError:
            error = WalletAnalysisTimeoutError(holder.address, self.wallet_timeout)
            logger.warning(f"[{self.operation_id}] Wallet analysis failed for {short_address(holder.address)}: {error.message}")
            return ClassifiedWallet.failed(holder, error.message)
        except Exception as e:
            logger.warning(f"[{self.operation_id}] Wallet analysis failed for {short_address(holder.address)}: {str(e)}")
            return ClassifiedWallet.failed(holder, str(e) or e.__class__.__name__)

    async def run_all(
        self,
        holders: Sequence[Holder],
        classify_fn: ClassifyFn,
        cancellation_token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[ClassifiedWallet]:
        """
        Classify every holder.

        Args:
            holders: Holders to classify
            classify_fn: Coroutine function classifying a single holder
            cancellation_token: Polled before every batch
            on_progress: Called with (processed, total) roughly every 10% of holders

        Returns:
            One classified wallet per holder, in input order

        Raises:
            AnalysisCancelledError: If cancellation is requested; no partial result is returned
        """
        total = len(holders)
        total_batches = math.ceil(total / self.batch_size)
        progress_step = max(1, math.ceil(total / 10))
        last_reported = 0
        processed = 0
        results: List[ClassifiedWallet] = []

        for batch_number, start in enumerate(range(0, total, self.batch_size), start=1):
            if cancellation_token is not None and cancellation_token.is_cancelled():
                logger.warning(f"[{self.operation_id}] Analysis cancelled during batch processing")
            raise_if_cancelled(cancellation_token)

            batch = holders[start:start + self.batch_size]
            logger.debug(f"[{self.operation_id}] Processing batch {batch_number}/{total_batches}")

            batch_results = await asyncio.gather(
                *[self._classify_with_timeout(holder, classify_fn) for holder in batch],
                return_exceptions=True
            )
            for outcome in batch_results:
                if isinstance(outcome, BaseException):
                    raise outcome
            results.extend(batch_results)

            processed += len(batch)
            if processed - last_reported >= progress_step or processed == total:
                last_reported = processed
                logger.info(
                    f"[{self.operation_id}] Progress: analyzed {processed}/{total} wallets "
                    f"({round(processed / total * 100)}%)"
                )
                if on_progress is not None:
                    on_progress(processed, total)

            if start + self.batch_size < total:
                await self._pause()

        logger.info(f"[{self.operation_id}] Completed analysis of all {total} wallets")
        return results
