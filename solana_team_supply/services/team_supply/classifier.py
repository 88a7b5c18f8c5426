"""Per-wallet classification.

A wallet goes through a fixed sequence of checks, cheapest and most decisive
first:

1. Excessive activity: wallets with 1000+ signatures are ``Normal`` and skip
   every other check.
2. Freshness: fewer than 100 signatures makes a wallet ``Fresh``.
3. Inactivity and provenance (non-fresh wallets only): ``No Token``,
   ``No ATA Transaction`` or ``Inactive``, otherwise ``Normal``.
4. Funding source: annotates the wallet with its funder; never changes the
   category.

Every oracle call is wrapped into a LookupOutcome, and the decide_* helpers
turn outcomes into decisions without touching the network. A failed lookup
always decides in the wallet's favour (not excessive, not fresh, not
inactive, no funder).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from solana_team_supply.config import AnalysisConfig, get_analysis_config
from solana_team_supply.logging_config import short_address
from solana_team_supply.services.team_supply.cancellation import CancellationToken, raise_if_cancelled
from solana_team_supply.services.team_supply.models import ClassifiedWallet, Holder, WalletCategory
from solana_team_supply.utils.error_handling import AnalysisCancelledError

logger = logging.getLogger(__name__)


class LookupStatus(Enum):
    """Outcome of an oracle call."""
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class LookupOutcome:
    """Tagged result of an oracle call."""

    status: LookupStatus
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "LookupOutcome":
        return cls(LookupStatus.OK, value=value)

    @classmethod
    def failed(cls, error: str) -> "LookupOutcome":
        return cls(LookupStatus.FAILED, error=error)

    @property
    def succeeded(self) -> bool:
        return self.status is LookupStatus.OK


async def run_lookup(operation: Callable[[], Awaitable[Any]]) -> LookupOutcome:
    """Await an oracle call and capture its result or failure.

    Cancellation is never captured.
    """
    try:
        return LookupOutcome.ok(await operation())
    except AnalysisCancelledError:
        raise
    except Exception as e:
        return LookupOutcome.failed(str(e) or e.__class__.__name__)


def decide_excessive(outcome: LookupOutcome, threshold: int) -> bool:
    """True if the signature count reached the excessive-activity threshold."""
    return outcome.succeeded and outcome.value >= threshold


def decide_fresh(outcome: LookupOutcome, threshold: int) -> bool:
    """True if the signature count is below the fresh-wallet threshold."""
    return outcome.succeeded and outcome.value < threshold


def decide_inactivity(outcome: LookupOutcome) -> Tuple[WalletCategory, Optional[int]]:
    """Map an inactivity check result to a category and inactivity age."""
    if not outcome.succeeded or not outcome.value:
        return WalletCategory.NORMAL, None

    result = outcome.value
    category = result.get("category")
    if category == WalletCategory.NO_TOKEN.value:
        return WalletCategory.NO_TOKEN, None
    if category == WalletCategory.NO_ATA_TRANSACTION.value:
        return WalletCategory.NO_ATA_TRANSACTION, None
    if result.get("is_inactive"):
        return WalletCategory.INACTIVE, result.get("days_since_last_activity")
    return WalletCategory.NORMAL, None


def decide_funding(outcome: LookupOutcome) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
    """Extract funder address and details from a funding analysis result.

    Anything other than a non-empty list whose first entry is a mapping means
    no funder; funding never changes the wallet's category.
    """
    if not outcome.succeeded or not isinstance(outcome.value, (list, tuple)) or not outcome.value:
        return None, None

    funding_info = outcome.value[0]
    if not isinstance(funding_info, dict):
        return None, None
    return funding_info.get("funder_address"), funding_info.get("funding_details")


class WalletClassifier:
    """Assigns a WalletCategory to a single holder.

    Collaborators:
        activity_oracle: ``get_signature_count(address, limit, main_context, sub_context)``
        inactivity_oracle: ``check_inactivity(wallet, token, main_context)``
        funding_oracle: ``analyze_funding([{"address": ...}], main_context)``
    """

    def __init__(
        self,
        activity_oracle,
        inactivity_oracle,
        funding_oracle,
        config: Optional[AnalysisConfig] = None
    ):
        self.activity_oracle = activity_oracle
        self.inactivity_oracle = inactivity_oracle
        self.funding_oracle = funding_oracle
        self.config = config or get_analysis_config()

    async def classify(
        self,
        holder: Holder,
        token_address: str,
        context: str = "default",
        cancellation_token: Optional[CancellationToken] = None
    ) -> ClassifiedWallet:
        """Classify one holder.

        Business failures never raise: oracle errors are absorbed and any
        other unexpected error yields an ``Error`` wallet.

        Raises:
            AnalysisCancelledError: If cancellation is requested between steps
        """
        address = holder.address
        raise_if_cancelled(cancellation_token)

        try:
            excessive_threshold = self.config.excessive_transaction_threshold
            activity = await run_lookup(lambda: self.activity_oracle.get_signature_count(
                address, excessive_threshold + 1,
                main_context=context, sub_context="checkTransactionCount"
            ))
            if decide_excessive(activity, excessive_threshold):
                return ClassifiedWallet.from_holder(holder, WalletCategory.NORMAL)
            if not activity.succeeded:
                logger.debug(f"Transaction count unavailable for {short_address(address)}: {activity.error}")

            raise_if_cancelled(cancellation_token)
            fresh_threshold = self.config.fresh_wallet_threshold
            freshness = await run_lookup(lambda: self.activity_oracle.get_signature_count(
                address, fresh_threshold + 1,
                main_context=context, sub_context="isFreshWallet"
            ))
            if not freshness.succeeded:
                logger.debug(f"Freshness check failed for {short_address(address)}: {freshness.error}")

            days_since_last_activity = None
            if decide_fresh(freshness, fresh_threshold):
                category = WalletCategory.FRESH
            else:
                raise_if_cancelled(cancellation_token)
                inactivity = await run_lookup(lambda: self.inactivity_oracle.check_inactivity(
                    address, token_address, main_context=context
                ))
                if not inactivity.succeeded:
                    logger.debug(f"Inactivity check error for {short_address(address)}: {inactivity.error}")
                category, days_since_last_activity = decide_inactivity(inactivity)

            raise_if_cancelled(cancellation_token)
            funding = await run_lookup(lambda: self.funding_oracle.analyze_funding(
                [{"address": address}], main_context=context
            ))
            if not funding.succeeded:
                logger.debug(f"Funding analysis error for {short_address(address)}: {funding.error}")
            funder_address, funding_details = decide_funding(funding)

            return ClassifiedWallet.from_holder(
                holder,
                category,
                days_since_last_activity=days_since_last_activity,
                funder_address=funder_address,
                funding_details=funding_details
            )

        except AnalysisCancelledError:
            raise
        except Exception as e:
            logger.error(f"Error analyzing wallet {short_address(address)}: {str(e)}", exc_info=True)
            return ClassifiedWallet.failed(holder, str(e))
