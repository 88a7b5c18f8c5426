"""Unit tests for SolanaClient.

HTTP traffic is served by httpx.MockTransport; no test reaches the network.
"""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from solana_team_supply.config import SolanaConfig
from solana_team_supply.monitoring import ApiCallCounter
from solana_team_supply.solana_client import SolanaClient, SolanaRpcError
from solana_team_supply.utils.error_handling import HolderLimitExceededError
from solana_team_supply.utils.validation import InvalidPublicKeyError
from tests.fixtures.common import TOKEN_ADDRESS, WALLET_ADDRESS

RPC_URL = "https://rpc.test"
SIGNATURE = "5" * 88


def _rpc_result(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


def _rpc_error(code, message):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}})


class RecordingHandler:
    """Serves queued responses and records request payloads."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.payloads = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def _make_client(handler, counter=None, max_retries=2):
    config = SolanaConfig(rpc_url=RPC_URL, max_retries=max_retries, requests_per_second=0)
    return SolanaClient(
        config,
        call_counter=counter or ApiCallCounter(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


@pytest.fixture
def no_sleep():
    """Skip retry backoff delays."""
    with patch("solana_team_supply.solana_client.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


class TestRequests:
    """Test suite for request shaping."""

    @pytest.mark.asyncio
    async def test_get_asset_uses_named_params(self):
        handler = RecordingHandler(_rpc_result({"id": TOKEN_ADDRESS}))

        async with _make_client(handler) as client:
            asset = await client.get_asset(TOKEN_ADDRESS)

        assert asset == {"id": TOKEN_ADDRESS}
        payload = handler.payloads[0]
        assert payload["method"] == "getAsset"
        assert payload["params"] == {"id": TOKEN_ADDRESS, "displayOptions": {"showFungible": True}}

    @pytest.mark.asyncio
    async def test_signatures_carry_commitment(self):
        handler = RecordingHandler(_rpc_result([{"signature": SIGNATURE}]))

        async with _make_client(handler) as client:
            signatures = await client.get_signatures_for_address(WALLET_ADDRESS, before="abc", limit=10)

        assert signatures == [{"signature": SIGNATURE}]
        assert handler.payloads[0]["params"] == [
            WALLET_ADDRESS, {"limit": 10, "before": "abc", "commitment": "confirmed"}
        ]

    @pytest.mark.asyncio
    async def test_null_signatures_become_empty_list(self):
        handler = RecordingHandler(_rpc_result(None))

        async with _make_client(handler) as client:
            assert await client.get_signatures_for_address(WALLET_ADDRESS) == []

    @pytest.mark.asyncio
    async def test_token_accounts_by_owner_unwraps_value(self):
        accounts = [{"pubkey": "acc", "account": {"owner": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"}}]
        handler = RecordingHandler(_rpc_result({"context": {"slot": 1}, "value": accounts}))

        async with _make_client(handler) as client:
            result = await client.get_token_accounts_by_owner(WALLET_ADDRESS, mint=TOKEN_ADDRESS)

        assert result == accounts
        assert handler.payloads[0]["params"] == [
            WALLET_ADDRESS, {"mint": TOKEN_ADDRESS}, {"encoding": "jsonParsed", "commitment": "confirmed"}
        ]

    @pytest.mark.asyncio
    async def test_get_transaction(self):
        handler = RecordingHandler(_rpc_result({"blockTime": 1700000000}))

        async with _make_client(handler) as client:
            transaction = await client.get_transaction(SIGNATURE)

        assert transaction == {"blockTime": 1700000000}
        assert handler.payloads[0]["params"] == [
            SIGNATURE,
            {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0, "commitment": "confirmed"}
        ]

    @pytest.mark.asyncio
    async def test_invalid_public_key_rejected_before_request(self):
        handler = RecordingHandler(_rpc_result(None))

        async with _make_client(handler) as client:
            with pytest.raises(InvalidPublicKeyError):
                await client.get_signatures_for_address("not-a-valid-solana-public-key")

        assert handler.payloads == []

    @pytest.mark.asyncio
    async def test_invalid_signature_rejected(self):
        handler = RecordingHandler(_rpc_result(None))

        async with _make_client(handler) as client:
            with pytest.raises(ValueError):
                await client.get_transaction("short")

    @pytest.mark.asyncio
    async def test_helius_pagination(self):
        first_page = [{"owner": f"owner{i}", "amount": 1} for i in range(1000)]
        second_page = [{"owner": "last", "amount": 1}]
        handler = RecordingHandler(
            _rpc_result({"token_accounts": first_page}),
            _rpc_result({"token_accounts": second_page}),
        )

        async with _make_client(handler) as client:
            accounts = await client.helius_get_token_accounts_by_mint(TOKEN_ADDRESS, max_accounts_to_fetch=5000)

        assert len(accounts) == 1001
        assert [p["params"]["page"] for p in handler.payloads] == [1, 2]

    @pytest.mark.asyncio
    async def test_helius_pagination_reads_every_page(self):
        """A large holder on a late page is still returned."""
        full_page = [{"owner": f"owner{i}", "amount": 1} for i in range(1000)]
        whale = {"owner": WALLET_ADDRESS, "amount": 10_000_000}
        handler = RecordingHandler(
            _rpc_result({"token_accounts": full_page}),
            _rpc_result({"token_accounts": full_page}),
            _rpc_result({"token_accounts": [whale]}),
        )

        async with _make_client(handler) as client:
            accounts = await client.helius_get_token_accounts_by_mint(TOKEN_ADDRESS)

        assert len(accounts) == 2001
        assert accounts[-1] == whale
        assert [p["params"]["page"] for p in handler.payloads] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_helius_cap_raises_instead_of_truncating(self):
        full_page = [{"owner": f"owner{i}", "amount": 1} for i in range(1000)]
        handler = RecordingHandler(_rpc_result({"token_accounts": full_page}))

        async with _make_client(handler) as client:
            with pytest.raises(HolderLimitExceededError) as exc_info:
                await client.helius_get_token_accounts_by_mint(TOKEN_ADDRESS, max_accounts_to_fetch=2000)

        assert exc_info.value.details == {"token_address": TOKEN_ADDRESS, "max_accounts": 2000}
        assert len(handler.payloads) == 2

    @pytest.mark.asyncio
    async def test_helius_short_last_page_within_cap(self):
        handler = RecordingHandler(_rpc_result({"token_accounts": [{"owner": "only", "amount": 5}]}))

        async with _make_client(handler) as client:
            accounts = await client.helius_get_token_accounts_by_mint(TOKEN_ADDRESS, max_accounts_to_fetch=1)

        assert accounts == [{"owner": "only", "amount": 5}]

    @pytest.mark.asyncio
    async def test_helius_malformed_page_raises(self):
        handler = RecordingHandler(_rpc_result({"unexpected": True}))

        async with _make_client(handler) as client:
            with pytest.raises(SolanaRpcError):
                await client.helius_get_token_accounts_by_mint(TOKEN_ADDRESS)


class TestErrorsAndRetries:
    """Test suite for error handling and retries."""

    @pytest.mark.asyncio
    async def test_rpc_error_raised(self):
        handler = RecordingHandler(_rpc_error(-32602, "Invalid params"))

        async with _make_client(handler) as client:
            with pytest.raises(SolanaRpcError) as exc_info:
                await client.get_asset(TOKEN_ADDRESS)

        assert "Invalid params" in str(exc_info.value)
        assert exc_info.value.error_data["code"] == -32602

    @pytest.mark.asyncio
    async def test_retries_http_429(self, no_sleep):
        handler = RecordingHandler(httpx.Response(429), _rpc_result({"id": TOKEN_ADDRESS}))

        async with _make_client(handler) as client:
            asset = await client.get_asset(TOKEN_ADDRESS)

        assert asset == {"id": TOKEN_ADDRESS}
        assert len(handler.payloads) == 2
        no_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_retries_rpc_rate_limit(self, no_sleep):
        handler = RecordingHandler(_rpc_error(-32005, "Node is behind"), _rpc_result([]))

        async with _make_client(handler) as client:
            assert await client.get_signatures_for_address(WALLET_ADDRESS) == []

        assert len(handler.payloads) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, no_sleep):
        handler = RecordingHandler(httpx.Response(503))

        async with _make_client(handler, max_retries=2) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get_asset(TOKEN_ADDRESS)

        assert len(handler.payloads) == 3
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_network_error_retried(self, no_sleep):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return _rpc_result({"id": TOKEN_ADDRESS})

        async with _make_client(handler) as client:
            assert await client.get_asset(TOKEN_ADDRESS) == {"id": TOKEN_ADDRESS}

        assert len(calls) == 2


class TestAccounting:
    """Test suite for rate limiting and call accounting."""

    @pytest.mark.asyncio
    async def test_calls_counted_per_context(self):
        counter = ApiCallCounter()
        handler = RecordingHandler(_rpc_result([]))

        async with _make_client(handler, counter=counter) as client:
            await client.get_signatures_for_address(WALLET_ADDRESS, main_context="search", sub_context="isFreshWallet")
            await client.get_signatures_for_address(WALLET_ADDRESS, main_context="search", sub_context="isFreshWallet")
            await client.get_asset(TOKEN_ADDRESS, main_context="other")

        snapshot = counter.snapshot()
        assert snapshot["SolanaRPC.getSignaturesForAddress[search/isFreshWallet]"]["requests"] == 2
        assert snapshot["SolanaRPC.getAsset[other/-]"]["requests"] == 1
        assert counter.total_calls("search") == 2
        assert counter.total_calls() == 3

    @pytest.mark.asyncio
    async def test_failed_calls_counted_as_errors(self):
        counter = ApiCallCounter()
        handler = RecordingHandler(_rpc_error(-32602, "Invalid params"))

        async with _make_client(handler, counter=counter) as client:
            with pytest.raises(SolanaRpcError):
                await client.get_asset(TOKEN_ADDRESS, main_context="search")

        entry = counter.snapshot()["SolanaRPC.getAsset[search/-]"]
        assert entry["requests"] == 1
        assert entry["errors"] == 1

    @pytest.mark.asyncio
    async def test_requests_go_through_rate_limiter(self, no_sleep):
        handler = RecordingHandler(httpx.Response(429), _rpc_result([]))

        async with _make_client(handler) as client:
            await client.get_signatures_for_address(WALLET_ADDRESS)

        assert client.rate_limiter.total_enqueued == 2

    @pytest.mark.asyncio
    async def test_context_manager_closes_http_client(self):
        handler = RecordingHandler(_rpc_result([]))
        client = _make_client(handler)

        async with client:
            await client.get_signatures_for_address(WALLET_ADDRESS)

        assert client._http_client is None
