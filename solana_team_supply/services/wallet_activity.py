"""Wallet activity lookups."""

from typing import Optional

from solana_team_supply.services.base_service import BaseService

# getSignaturesForAddress returns at most this many signatures per call
MAX_SIGNATURES_PER_PAGE = 1000


class WalletActivityService(BaseService):
    """Counts a wallet's transaction signatures up to a cap."""

    async def get_signature_count(
        self,
        address: str,
        limit: int,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> int:
        """Return the number of signatures for an address, capped at ``limit``.

        Pages backwards through history when ``limit`` exceeds one RPC page.
        """
        count = 0
        before = None

        while count < limit:
            page_limit = min(MAX_SIGNATURES_PER_PAGE, limit - count)
            signatures = await self.solana_client.get_signatures_for_address(
                address,
                before=before,
                limit=page_limit,
                main_context=main_context,
                sub_context=sub_context
            )
            count += len(signatures)
            if len(signatures) < page_limit:
                break
            before = signatures[-1]["signature"]

        return min(count, limit)
