"""Async JSON-RPC client for the handful of Solana and Helius methods the analysis needs.

Every request is paced by a RateLimiter, retried with exponential backoff on
throttling and transient network failures, and recorded in an ApiCallCounter
under the caller's (main_context, sub_context) pair.
"""

# Standard library imports
import asyncio
import json
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Union

# Third-party library imports
import httpx

# Internal imports
from solana_team_supply.config import SolanaConfig, get_solana_config
from solana_team_supply.logging_config import get_logger
from solana_team_supply.monitoring import ApiCallCounter, api_call_counter
from solana_team_supply.utils.error_handling import HolderLimitExceededError
from solana_team_supply.utils.rate_limiter import RateLimiter
from solana_team_supply.utils.validation import (
    InvalidPublicKeyError,
    validate_public_key,
    validate_transaction_signature,
)

logger = get_logger(__name__)

API_NAME = "SolanaRPC"

RETRIABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}
RATE_LIMIT_ERROR_CODE = -32005
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError)

FIRST_RETRY_DELAY = 1.0  # seconds
MAX_RETRY_DELAY = 10.0
HELIUS_PAGE_SIZE = 1000

Params = Union[List[Any], Dict[str, Any]]


class SolanaRpcError(Exception):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, message: str, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_data = error_data or {}


class _TransientFailure(Exception):
    """Raised inside one attempt when the next attempt may succeed."""


def _describe_rpc_error(error: Dict[str, Any]) -> str:
    message = f"Solana RPC error: {error.get('message', 'Unknown error')}"
    if "data" in error:
        message += f" - {json.dumps(error['data'])}"
    return message


def _is_rate_limit(error: Dict[str, Any]) -> bool:
    return error.get("code") == RATE_LIMIT_ERROR_CODE or "rate limited" in str(error.get("message", "")).lower()


def _backoff_delay(attempt: int) -> float:
    return min(FIRST_RETRY_DELAY * (2 ** attempt), MAX_RETRY_DELAY)


def _require_public_key(*addresses: Optional[str]) -> None:
    for address in addresses:
        if address is not None and not validate_public_key(address):
            raise InvalidPublicKeyError(address)


class SolanaClient:
    """Thin RPC wrapper; use as ``async with SolanaClient(config) as client``."""

    def __init__(
        self,
        config: SolanaConfig = None,
        rate_limiter: Optional[RateLimiter] = None,
        call_counter: Optional[ApiCallCounter] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            config: RPC settings; read from the environment when omitted.
            rate_limiter: Shared gate for outgoing requests.
            call_counter: Accounting sink; the process-wide counter by default.
            http_client: Injected transport, used by tests.
        """
        self.config = config or get_solana_config()
        self.auth = (self.config.rpc_user, self.config.rpc_password) if self.config.has_auth else None
        self.rate_limiter = rate_limiter or RateLimiter(
            max_concurrent=self.config.max_concurrent_requests,
            requests_per_second=self.config.requests_per_second
        )
        self.call_counter = call_counter or api_call_counter
        self._http_client = http_client

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=self.auth,
                headers={"Content-Type": "application/json"},
            )
        return self._http_client

    def _with_commitment(self, params: Params) -> Params:
        """Merge the configured commitment into the trailing options object.

        Named-param (DAS and Helius) methods take no commitment and pass through.
        """
        if isinstance(params, dict):
            return params
        params = list(params)
        if params and isinstance(params[-1], dict):
            params[-1] = {"commitment": self.config.commitment, **params[-1]}
        else:
            params.append({"commitment": self.config.commitment})
        return params

    async def _attempt(self, payload: Dict[str, Any], last_attempt: bool) -> Any:
        """Send one request; throttling raises _TransientFailure unless it is the last try."""
        http_client = self._get_http_client()
        response = await self.rate_limiter.enqueue(
            lambda: http_client.post(self.config.rpc_url, json=payload)
        )
        if response.status_code in RETRIABLE_STATUS_CODES and not last_attempt:
            raise _TransientFailure(f"HTTP {response.status_code}")
        response.raise_for_status()

        body = response.json()
        error = body.get("error")
        if error is None:
            return body.get("result")
        if _is_rate_limit(error) and not last_attempt:
            raise _TransientFailure(f"rate limited ({error.get('code')})")
        raise SolanaRpcError(_describe_rpc_error(error), error)

    async def _make_request(
        self,
        method: str,
        params: Params,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> Any:
        """Call ``method`` and return the ``result`` member of the response.

        Raises:
            SolanaRpcError: The node returned an error object.
            httpx.HTTPStatusError: A non-2xx status survived every retry.
            httpx.RequestError: The network failed on the last attempt.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": self._with_commitment(params)}
        logger.debug("RPC %s %.200s", method, json.dumps(payload["params"]))

        max_retries = self.config.max_retries
        started = time.monotonic()
        success = False
        try:
            for attempt in range(max_retries + 1):
                last_attempt = attempt == max_retries
                try:
                    result = await self._attempt(payload, last_attempt)
                    success = True
                    return result
                except _TransientFailure as e:
                    reason = str(e)
                except TRANSIENT_ERRORS as e:
                    if last_attempt:
                        logger.error(f"{method} failed after {attempt + 1} attempts: {e}")
                        raise
                    reason = str(e) or type(e).__name__

                delay = _backoff_delay(attempt)
                logger.warning(f"{method} attempt {attempt + 1}/{max_retries + 1} failed ({reason}), "
                               f"retrying in {delay}s")
                await asyncio.sleep(delay)
        finally:
            self.call_counter.record(
                API_NAME,
                method,
                main_context=main_context,
                sub_context=sub_context,
                success=success,
                latency_ms=(time.monotonic() - started) * 1000
            )

    async def get_asset(
        self,
        mint: str,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Fetch the DAS asset record (supply, decimals, metadata) for a mint, or None."""
        _require_public_key(mint)
        return await self._make_request(
            "getAsset",
            {"id": mint, "displayOptions": {"showFungible": True}},
            main_context,
            sub_context
        )

    async def get_token_accounts_by_owner(
        self,
        owner: str,
        mint: str,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """List ``owner``'s token accounts for ``mint`` as ``{pubkey, account}`` items."""
        _require_public_key(owner, mint)
        result = await self._make_request(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed"}],
            main_context,
            sub_context
        )
        # Response shape is {"context": {...}, "value": [...]}
        if isinstance(result, dict):
            return result.get("value") or []
        return result or []

    async def get_signatures_for_address(
        self,
        address: str,
        before: Optional[str] = None,
        limit: int = 100,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Return up to ``limit`` (node cap 1000) signatures, newest first, older than ``before``."""
        _require_public_key(address)
        options: Dict[str, Any] = {"limit": limit}
        if before:
            options["before"] = before
        signatures = await self._make_request(
            "getSignaturesForAddress", [address, options], main_context, sub_context
        )
        return signatures or []

    async def get_transaction(
        self,
        signature: str,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Fetch a transaction in jsonParsed encoding; None when the node has pruned it."""
        if not validate_transaction_signature(signature):
            raise ValueError(f"Invalid transaction signature format: {signature}")
        return await self._make_request(
            "getTransaction",
            [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0}],
            main_context,
            sub_context
        )

    async def helius_get_token_accounts_by_mint(
        self,
        mint_address: str,
        max_accounts_to_fetch: Optional[int] = None,
        main_context: str = "default",
        sub_context: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Page through Helius ``getTokenAccounts`` for every account holding ``mint_address``.

        Pages are not ordered by balance, so paging only stops at a short page.
        ``max_accounts_to_fetch`` is a safety cap: reaching it while pages are
        still full raises instead of returning a partial list.

        Returns:
            Account dicts with at least ``owner`` and ``amount`` (raw units).

        Raises:
            HolderLimitExceededError: The mint has more accounts than the cap.
            SolanaRpcError: A page came back without a ``token_accounts`` list.
        """
        _require_public_key(mint_address)

        accounts: List[Dict[str, Any]] = []
        page = 1
        while True:
            page_result = await self._make_request(
                "getTokenAccounts",
                {"page": page, "limit": HELIUS_PAGE_SIZE, "mint": mint_address},
                main_context,
                sub_context
            )
            batch = page_result.get("token_accounts") if isinstance(page_result, dict) else None
            if not isinstance(batch, list):
                raise SolanaRpcError(
                    f"Unexpected getTokenAccounts page {page} for {mint_address}: {page_result!r:.200}"
                )

            accounts.extend(batch)
            logger.debug(f"Holder page {page} for {mint_address}: {len(batch)} accounts ({len(accounts)} total)")
            if len(batch) < HELIUS_PAGE_SIZE:
                break
            if max_accounts_to_fetch is not None and len(accounts) >= max_accounts_to_fetch:
                logger.warning(f"Holder list for {mint_address} reached the {max_accounts_to_fetch} account cap")
                raise HolderLimitExceededError(mint_address, max_accounts_to_fetch)
            page += 1

        logger.info(f"Fetched {len(accounts)} token accounts for {mint_address}")
        return accounts

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the pooled HTTP connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


@asynccontextmanager
async def get_solana_client(config: Optional[SolanaConfig] = None):
    """Yield a SolanaClient that is closed on exit."""
    client = SolanaClient(config)
    try:
        yield client
    finally:
        await client.close()
