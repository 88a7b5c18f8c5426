"""Team supply analysis orchestration.

Sequences token info retrieval, holder filtering, batched wallet
classification and aggregation into a single run, recording timestamped
progress steps along the way.
"""

import logging
import uuid
from typing import List, Optional

from solana_team_supply.config import AnalysisConfig, get_analysis_config
from solana_team_supply.services.funding import FundingAnalyzer
from solana_team_supply.services.inactivity import InactivityChecker
from solana_team_supply.services.team_supply.aggregator import aggregate
from solana_team_supply.services.team_supply.cancellation import CancellationToken
from solana_team_supply.services.team_supply.classifier import WalletClassifier
from solana_team_supply.services.team_supply.filters import filter_significant_holders
from solana_team_supply.services.team_supply.models import (
    AnalysisResult,
    AnalysisRun,
    ClassifiedWallet,
    Holder,
    ProgressSink,
)
from solana_team_supply.services.team_supply.scheduler import BatchScheduler
from solana_team_supply.services.token_service import HolderService, TokenService
from solana_team_supply.services.wallet_activity import WalletActivityService
from solana_team_supply.solana_client import SolanaClient, get_solana_client
from solana_team_supply.utils.error_handling import AnalysisCancelledError
from solana_team_supply.utils.validation import validate_solana_address

logger = logging.getLogger(__name__)


class TeamSupplyAnalyzer:
    """
    Runs a full team supply analysis for one token at a time.

    Collaborators:
        token_source: ``get_token_info(address, main_context) -> TokenInfo``
        holder_source: ``get_holders(address, main_context) -> List[Holder]``
        classifier: a WalletClassifier
    """

    def __init__(
        self,
        token_source,
        holder_source,
        classifier: WalletClassifier,
        config: Optional[AnalysisConfig] = None,
        progress_sink: Optional[ProgressSink] = None
    ):
        self.token_source = token_source
        self.holder_source = holder_source
        self.classifier = classifier
        self.config = config or get_analysis_config()
        self.progress_sink = progress_sink
        self.last_run: Optional[AnalysisRun] = None

    @classmethod
    def from_client(
        cls,
        solana_client: SolanaClient,
        config: Optional[AnalysisConfig] = None,
        progress_sink: Optional[ProgressSink] = None
    ) -> "TeamSupplyAnalyzer":
        """Build an analyzer backed by Solana RPC services."""
        config = config or get_analysis_config()
        classifier = WalletClassifier(
            activity_oracle=WalletActivityService(solana_client, config),
            inactivity_oracle=InactivityChecker(solana_client, config),
            funding_oracle=FundingAnalyzer(solana_client, config),
            config=config
        )
        return cls(
            token_source=TokenService(solana_client, config),
            holder_source=HolderService(solana_client, config),
            classifier=classifier,
            config=config,
            progress_sink=progress_sink
        )

    def _check_cancellation(self, run: AnalysisRun, cancellation_token: Optional[CancellationToken]) -> None:
        if cancellation_token is not None and cancellation_token.is_cancelled():
            self._log_step(run, "Operation cancelled by user")
            raise AnalysisCancelledError()

    def _log_step(self, run: AnalysisRun, step: str) -> None:
        entry = run.log_step(step)
        logger.debug(f"[{run.operation_id}] {step} ({entry.elapsed_ms}ms elapsed)")

    async def _classify_all(
        self,
        holders: List[Holder],
        token_address: str,
        context: str,
        run: AnalysisRun,
        cancellation_token: Optional[CancellationToken]
    ) -> List[ClassifiedWallet]:
        scheduler = BatchScheduler(config=self.config, operation_id=run.operation_id)

        async def classify_fn(holder: Holder) -> ClassifiedWallet:
            return await self.classifier.classify(
                holder, token_address, context=context, cancellation_token=cancellation_token
            )

        def on_progress(done: int, total: int) -> None:
            self._log_step(run, f"Progress: analyzed {done}/{total} wallets")

        return await scheduler.run_all(
            holders, classify_fn, cancellation_token=cancellation_token, on_progress=on_progress
        )

    async def analyze(
        self,
        token_address: str,
        context: str = "default",
        cancellation_token: Optional[CancellationToken] = None
    ) -> AnalysisResult:
        """
        Analyze how much of a token's supply is held by team wallets.

        Args:
            token_address: Mint address of the token
            context: Attribution label for API call accounting
            cancellation_token: Polled between steps; owned by the caller

        Returns:
            Both result views built from one classification pass

        Raises:
            AnalysisCancelledError: If cancellation was requested
            TokenNotFoundError: If the token is unknown
            ValidationError: If the token address is not a valid public key
        """
        run = AnalysisRun(operation_id=uuid.uuid4().hex[:8], sink=self.progress_sink)
        self.last_run = run
        logger.info(f"Starting team supply analysis for {token_address} (ID: {run.operation_id})")

        try:
            validate_solana_address(token_address, "token_address")
            self._check_cancellation(run, cancellation_token)
            self._log_step(run, "Fetching token info")
            token_info = await self.token_source.get_token_info(token_address, main_context=context)
            self._log_step(run, f"Token info received: {token_info.symbol}")

            self._check_cancellation(run, cancellation_token)
            self._log_step(run, "Fetching token holders")
            holders = await self.holder_source.get_holders(token_address, main_context=context)
            self._log_step(run, f"Found {len(holders)} total holders")

            self._check_cancellation(run, cancellation_token)
            threshold = self.config.supply_threshold
            significant_holders = filter_significant_holders(holders, token_info.total_supply, threshold)
            self._log_step(
                run,
                f"Filtered {len(significant_holders)} significant holders (threshold: {threshold * 100}%)"
            )

            self._check_cancellation(run, cancellation_token)
            self._log_step(run, "Analyzing wallets")
            analyzed_wallets = await self._classify_all(
                significant_holders, token_address, context, run, cancellation_token
            )
            self._log_step(run, f"Analyzed {len(analyzed_wallets)} wallets")

            self._check_cancellation(run, cancellation_token)
            result = aggregate(token_info, analyzed_wallets)
            self._log_step(run, f"Filtered {len(result.scan_data.team_wallets)} team wallets")
            self._log_step(run, f"Team supply controlled: {result.scan_data.total_supply_controlled:.2f}%")

            logger.info(
                f"[{run.operation_id}] Completed team supply analysis for {token_address}: "
                f"{result.scan_data.total_supply_controlled:.2f}% controlled by "
                f"{len(result.scan_data.team_wallets)} team wallets"
            )
            return result

        except Exception as e:
            if cancellation_token is not None and cancellation_token.is_cancelled():
                logger.warning(f"[{run.operation_id}] Analysis cancelled for {token_address}")
                if isinstance(e, AnalysisCancelledError):
                    raise
                raise AnalysisCancelledError() from e
            logger.error(f"[{run.operation_id}] Error analyzing team supply for {token_address}: {str(e)}", exc_info=True)
            raise


async def analyze_team_supply(
    token_address: str,
    context: str = "default",
    cancellation_token: Optional[CancellationToken] = None,
    solana_client: Optional[SolanaClient] = None,
    config: Optional[AnalysisConfig] = None,
    progress_sink: Optional[ProgressSink] = None
) -> AnalysisResult:
    """
    Analyze the team supply of a token.

    Args:
        token_address: Mint address of the token
        context: Attribution label for API call accounting
        cancellation_token: Polled between steps; owned by the caller
        solana_client: Client to use; a client from the environment config is
            opened and closed around the run if omitted
        config: Analysis settings
        progress_sink: Receives (step, timestamp) for every progress step

    Returns:
        The analysis result

    Raises:
        AnalysisCancelledError: If cancellation was requested
        TokenNotFoundError: If the token is unknown
    """
    if solana_client is not None:
        analyzer = TeamSupplyAnalyzer.from_client(solana_client, config, progress_sink)
        return await analyzer.analyze(token_address, context, cancellation_token)

    async with get_solana_client() as client:
        analyzer = TeamSupplyAnalyzer.from_client(client, config, progress_sink)
        return await analyzer.analyze(token_address, context, cancellation_token)
