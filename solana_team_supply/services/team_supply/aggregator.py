"""Reduction of classified wallets into supply-control figures."""

from decimal import Decimal
from typing import Sequence, Tuple

from solana_team_supply.services.team_supply.filters import is_team_category
from solana_team_supply.services.team_supply.models import (
    AnalysisResult,
    ClassifiedWallet,
    ScanData,
    TeamWallet,
    TokenInfo,
    TrackingInfo,
)
from solana_team_supply.services.team_supply.precision import supply_percentage


def select_team_wallets(
    analyzed_wallets: Sequence[ClassifiedWallet],
    total_supply: int
) -> Tuple[TeamWallet, ...]:
    """Reshape every team-category wallet into a TeamWallet."""
    return tuple(
        TeamWallet(
            address=wallet.address,
            balance=str(wallet.balance),
            percentage=float(supply_percentage(wallet.balance, total_supply)),
            category=wallet.category,
            funder_address=wallet.funder_address,
            funding_details=wallet.funding_details,
        )
        for wallet in analyzed_wallets
        if is_team_category(wallet.category)
    )


def team_supply_held(analyzed_wallets: Sequence[ClassifiedWallet]) -> int:
    """Sum of raw balances held by team-category wallets."""
    return sum(wallet.balance for wallet in analyzed_wallets if is_team_category(wallet.category))


def aggregate(token_info: TokenInfo, analyzed_wallets: Sequence[ClassifiedWallet]) -> AnalysisResult:
    """Build both result views from a single classification pass.

    Balances are summed as integers before the single division, so the
    controlled percentage is exact up to the 18-digit truncation.
    """
    wallets = tuple(analyzed_wallets)
    team_wallets = select_team_wallets(wallets, token_info.total_supply)
    total_supply_controlled: Decimal = supply_percentage(
        team_supply_held(wallets), token_info.total_supply
    )

    scan_data = ScanData(
        token_info=token_info,
        analyzed_wallets=wallets,
        team_wallets=team_wallets,
        total_supply_controlled=total_supply_controlled,
        token_address=token_info.address,
    )
    tracking_info = TrackingInfo(
        token_address=token_info.address,
        token_symbol=token_info.symbol,
        total_supply=token_info.total_supply,
        decimals=token_info.decimals,
        total_supply_controlled=total_supply_controlled,
        team_wallets=team_wallets,
        all_wallets_details=wallets,
    )
    return AnalysisResult(scan_data=scan_data, tracking_info=tracking_info)
