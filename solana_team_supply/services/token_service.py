"""Token metadata and holder list sources."""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from solana_team_supply.services.base_service import BaseService
from solana_team_supply.services.team_supply.models import Holder, TokenInfo
from solana_team_supply.utils.error_handling import TokenNotFoundError


def token_info_from_asset(token_address: str, asset: Optional[Dict[str, Any]]) -> TokenInfo:
    """Normalise a DAS asset record into a TokenInfo.

    Raises:
        TokenNotFoundError: If the record is missing or carries no supply
    """
    if not asset:
        raise TokenNotFoundError(token_address)

    token_info = asset.get("token_info") or {}
    metadata = (asset.get("content") or {}).get("metadata") or {}

    supply = token_info.get("supply")
    if supply is None:
        raise TokenNotFoundError(token_address)

    return TokenInfo(
        address=token_address,
        symbol=token_info.get("symbol") or metadata.get("symbol") or token_address[:6],
        name=metadata.get("name") or "Unknown Token",
        decimals=int(token_info.get("decimals", 0)),
        total_supply=int(supply),
    )


class TokenService(BaseService):
    """Fetches token information."""

    async def get_token_info(self, token_address: str, main_context: str = "default") -> TokenInfo:
        """Fetch token info for a mint.

        Raises:
            TokenNotFoundError: If the token is unknown
        """
        async with self.log_timing(f"Token info for {token_address}"):
            asset = await self.solana_client.get_asset(
                token_address, main_context=main_context, sub_context="analyzeTeamSupply"
            )
        return token_info_from_asset(token_address, asset)


def holders_from_token_accounts(token_accounts: List[Dict[str, Any]]) -> List[Holder]:
    """Collapse token accounts into one holder per owner.

    Zero balances are dropped. Holders are sorted by balance, largest first,
    with ties broken by address.
    """
    balances: Dict[str, int] = defaultdict(int)
    for account in token_accounts:
        owner = account.get("owner")
        amount = int(account.get("amount") or 0)
        if not owner or amount <= 0:
            continue
        balances[owner] += amount

    holders = [Holder(address=owner, balance=balance) for owner, balance in balances.items()]
    holders.sort(key=lambda h: (-h.balance, h.address))
    return holders


class HolderService(BaseService):
    """Fetches the holder list of a token."""

    async def get_holders(self, token_address: str, main_context: str = "default") -> List[Holder]:
        """Fetch every holder of a mint with its raw balance.

        Raises:
            HolderLimitExceededError: If ``holder_max_accounts`` is set and the mint has more accounts
        """
        async with self.log_timing(f"Holder list for {token_address}"):
            token_accounts = await self.solana_client.helius_get_token_accounts_by_mint(
                token_address,
                max_accounts_to_fetch=self.config.holder_max_accounts or None,
                main_context=main_context,
                sub_context="getHolders"
            )
        return holders_from_token_accounts(token_accounts)
