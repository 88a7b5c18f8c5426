"""Inactivity and token provenance checks for holder wallets."""

import time
from typing import Any, Dict, List, Optional

from solders.pubkey import Pubkey

from solana_team_supply.constants import ASSOCIATED_TOKEN_PROGRAM_ID, SECONDS_PER_DAY, TOKEN_PROGRAM_ID
from solana_team_supply.logging_config import short_address
from solana_team_supply.services.base_service import BaseService
from solana_team_supply.services.team_supply.models import WalletCategory


def derive_associated_token_address(
    owner: str,
    mint: str,
    token_program_id: str = TOKEN_PROGRAM_ID
) -> str:
    """Derive the associated token account address of ``owner`` for ``mint``."""
    seeds = [
        bytes(Pubkey.from_string(owner)),
        bytes(Pubkey.from_string(token_program_id)),
        bytes(Pubkey.from_string(mint)),
    ]
    address, _bump = Pubkey.find_program_address(seeds, Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID))
    return str(address)


def days_since(block_time: int, now: Optional[float] = None) -> int:
    """Whole days elapsed since a unix block time."""
    now = time.time() if now is None else now
    return max(0, int((now - block_time) // SECONDS_PER_DAY))


def token_program_of(token_accounts: List[Dict[str, Any]]) -> str:
    """Program owning the first token account, falling back to SPL Token."""
    account = token_accounts[0].get("account") or {}
    return account.get("owner") or TOKEN_PROGRAM_ID


class InactivityChecker(BaseService):
    """Decides whether a holder is inactive or holds the token without an ATA history.

    Result dicts carry either ``category`` (``"No Token"`` or
    ``"No ATA Transaction"``) or ``is_inactive`` together with
    ``days_since_last_activity``.
    """

    async def check_inactivity(
        self,
        wallet_address: str,
        token_address: str,
        main_context: str = "default"
    ) -> Dict[str, Any]:
        token_accounts = await self.solana_client.get_token_accounts_by_owner(
            wallet_address,
            mint=token_address,
            main_context=main_context,
            sub_context="checkInactivity"
        )
        if not token_accounts:
            return {"category": WalletCategory.NO_TOKEN.value}

        ata = derive_associated_token_address(wallet_address, token_address, token_program_of(token_accounts))
        signatures = await self.solana_client.get_signatures_for_address(
            ata,
            limit=1,
            main_context=main_context,
            sub_context="checkInactivity"
        )
        if not signatures:
            return {"category": WalletCategory.NO_ATA_TRANSACTION.value}

        block_time = signatures[0].get("blockTime")
        if block_time is None:
            self.logger.debug(f"No block time on latest ATA signature of {short_address(wallet_address)}")
            return {"is_inactive": False, "days_since_last_activity": None}

        days = days_since(block_time)
        return {
            "is_inactive": days >= self.config.inactivity_threshold_days,
            "days_since_last_activity": days,
        }
