"""Team supply analysis pipeline."""

from solana_team_supply.services.team_supply.models import (
    TEAM_CATEGORIES,
    AnalysisResult,
    ClassifiedWallet,
    Holder,
    TokenInfo,
    WalletCategory,
)
from solana_team_supply.services.team_supply.cancellation import CancellationToken
from solana_team_supply.services.team_supply.filters import filter_significant_holders, is_team_category
from solana_team_supply.services.team_supply.classifier import WalletClassifier
from solana_team_supply.services.team_supply.scheduler import BatchScheduler
from solana_team_supply.services.team_supply.aggregator import aggregate

__all__ = [
    "TEAM_CATEGORIES",
    "AnalysisResult",
    "BatchScheduler",
    "CancellationToken",
    "ClassifiedWallet",
    "Holder",
    "TokenInfo",
    "WalletCategory",
    "WalletClassifier",
    "aggregate",
    "filter_significant_holders",
    "is_team_category",
]
