"""Funding source analysis.

The funder of a wallet is the account that sent it lamports in its oldest
known transaction, through a System Program ``transfer`` or
``createAccount`` instruction.
"""

from typing import Any, Dict, Iterator, List, Optional

import httpx

from solana_team_supply.constants import LAMPORTS_PER_SOL, SYSTEM_PROGRAM_ID
from solana_team_supply.logging_config import short_address
from solana_team_supply.services.base_service import BaseService
from solana_team_supply.services.wallet_activity import MAX_SIGNATURES_PER_PAGE
from solana_team_supply.solana_client import SolanaRpcError
from solana_team_supply.utils.validation import InvalidPublicKeyError

TRANSFER_TYPES = ("transfer", "transferWithSeed")
CREATE_ACCOUNT_TYPES = ("createAccount", "createAccountWithSeed")


def _iter_instructions(transaction: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    message = (transaction.get("transaction") or {}).get("message") or {}
    yield from message.get("instructions") or []

    meta = transaction.get("meta") or {}
    for inner in meta.get("innerInstructions") or []:
        yield from inner.get("instructions") or []


def find_funding_transfer(transaction: Dict[str, Any], wallet_address: str) -> Optional[Dict[str, Any]]:
    """Find the System Program instruction that funded ``wallet_address``.

    Args:
        transaction: A jsonParsed transaction
        wallet_address: The funded wallet

    Returns:
        ``{"source", "lamports"}`` or None if the transaction did not fund the wallet
    """
    for instruction in _iter_instructions(transaction):
        if instruction.get("program") != "system" and instruction.get("programId") != SYSTEM_PROGRAM_ID:
            continue
        parsed = instruction.get("parsed")
        if not isinstance(parsed, dict):
            continue

        info = parsed.get("info") or {}
        instruction_type = parsed.get("type")
        if instruction_type in TRANSFER_TYPES and info.get("destination") == wallet_address:
            return {"source": info.get("source"), "lamports": info.get("lamports")}
        if instruction_type in CREATE_ACCOUNT_TYPES and info.get("newAccount") == wallet_address:
            return {"source": info.get("source"), "lamports": info.get("lamports")}

    return None


class FundingAnalyzer(BaseService):
    """Finds the funding source of wallets."""

    async def _oldest_signature(self, wallet_address: str, main_context: str) -> Optional[Dict[str, Any]]:
        oldest = None
        before = None

        for _ in range(self.config.funding_max_signature_pages):
            page = await self.solana_client.get_signatures_for_address(
                wallet_address,
                before=before,
                limit=MAX_SIGNATURES_PER_PAGE,
                main_context=main_context,
                sub_context="analyzeFunding"
            )
            if not page:
                break
            oldest = page[-1]
            if len(page) < MAX_SIGNATURES_PER_PAGE:
                break
            before = oldest["signature"]
        else:
            self.logger.debug(
                f"Signature history of {short_address(wallet_address)} exceeds "
                f"{self.config.funding_max_signature_pages} pages; using oldest fetched"
            )

        return oldest

    async def find_funder(self, wallet_address: str, main_context: str = "default") -> Dict[str, Any]:
        """Find the funder of a single wallet.

        Returns:
            ``{"funder_address", "funding_details"}``, both None when no funding
            transfer was found
        """
        oldest = await self._oldest_signature(wallet_address, main_context)
        if oldest is None:
            return {"funder_address": None, "funding_details": None}

        signature = oldest["signature"]
        transaction = await self.solana_client.get_transaction(
            signature, main_context=main_context, sub_context="analyzeFunding"
        )
        transfer = find_funding_transfer(transaction or {}, wallet_address)
        if transfer is None:
            return {"funder_address": None, "funding_details": None}

        lamports = int(transfer["lamports"] or 0)
        return {
            "funder_address": transfer["source"],
            "funding_details": {
                "signature": signature,
                "lamports": lamports,
                "sol": lamports / LAMPORTS_PER_SOL,
                "block_time": (transaction or {}).get("blockTime", oldest.get("blockTime")),
            },
        }

    async def analyze_funding(
        self,
        wallets: List[Dict[str, Any]],
        main_context: str = "default"
    ) -> List[Dict[str, Any]]:
        """Find the funder of every wallet.

        Args:
            wallets: Items with an ``address`` key
            main_context: Attribution label for API call accounting

        Returns:
            One result per wallet, in input order; an empty dict where the
            lookup failed
        """
        results: List[Dict[str, Any]] = []
        for wallet in wallets:
            address = wallet["address"]
            try:
                async with self.log_timing(f"Funding analysis for {short_address(address)}"):
                    results.append(await self.find_funder(address, main_context))
            except (SolanaRpcError, InvalidPublicKeyError, httpx.HTTPError, KeyError, ValueError) as e:
                self.logger.debug(f"Funding lookup failed for {short_address(address)}: {str(e)}")
                results.append({})
        return results
