"""Holder filtering and team category checks."""

from decimal import Decimal
from typing import AbstractSet, Iterable, List

from solana_team_supply.constants import KNOWN_LP_POOLS
from solana_team_supply.services.team_supply.models import TEAM_CATEGORIES, Holder, WalletCategory
from solana_team_supply.services.team_supply.precision import supply_ratio

SUPPLY_THRESHOLD = Decimal("0.001")  # 0.1%


def is_team_category(category: WalletCategory) -> bool:
    """Return True if wallets in this category count as team-controlled."""
    return category in TEAM_CATEGORIES


def filter_significant_holders(
    holders: Iterable[Holder],
    total_supply: int,
    threshold: Decimal = SUPPLY_THRESHOLD,
    excluded_addresses: AbstractSet[str] = KNOWN_LP_POOLS
) -> List[Holder]:
    """Keep holders worth classifying.

    Liquidity pools are dropped regardless of size. Every other holder is
    kept when ``balance / total_supply`` reaches the threshold. Input order
    is preserved.

    Args:
        holders: Raw holder list
        total_supply: Raw total supply of the token
        threshold: Minimum share of supply, as a fraction
        excluded_addresses: Addresses that are never team wallets

    Returns:
        Significant holders
    """
    return [
        holder for holder in holders
        if holder.address not in excluded_addresses
        and supply_ratio(holder.balance, total_supply) >= threshold
    ]
