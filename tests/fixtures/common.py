"""Common test fixtures for Solana Team Supply tests.

This module provides fixtures that can be reused across different test modules.
"""

import pytest
from unittest.mock import AsyncMock

from solana_team_supply.config import AnalysisConfig
from solana_team_supply.services.funding import FundingAnalyzer
from solana_team_supply.services.inactivity import InactivityChecker
from solana_team_supply.services.team_supply.classifier import WalletClassifier
from solana_team_supply.services.team_supply.models import TokenInfo
from solana_team_supply.services.wallet_activity import WalletActivityService
from solana_team_supply.solana_client import SolanaClient

# Well-known mainnet addresses, valid base58 public keys
TOKEN_ADDRESS = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WALLET_ADDRESS = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
FUNDER_ADDRESS = "So11111111111111111111111111111111111111112"


@pytest.fixture
def analysis_config():
    """Analysis settings with pacing disabled and a short wallet timeout."""
    return AnalysisConfig(batch_delay_seconds=0.0, wallet_timeout_seconds=1.0)


@pytest.fixture
def mock_solana_client():
    """Create a mock Solana client."""
    client = AsyncMock(spec=SolanaClient)

    client.get_signatures_for_address.return_value = [
        {
            "signature": "test_signature",
            "slot": 12345,
            "blockTime": 1628000000,
            "err": None
        }
    ]
    client.get_token_accounts_by_owner.return_value = []
    client.get_transaction.return_value = None

    return client


@pytest.fixture
def activity_oracle():
    """Activity oracle reporting an ordinary, established wallet."""
    oracle = AsyncMock(spec=WalletActivityService)
    oracle.get_signature_count.return_value = 500
    return oracle


@pytest.fixture
def inactivity_oracle():
    """Inactivity oracle reporting a recently active wallet."""
    oracle = AsyncMock(spec=InactivityChecker)
    oracle.check_inactivity.return_value = {"is_inactive": False, "days_since_last_activity": 2}
    return oracle


@pytest.fixture
def funding_oracle():
    """Funding oracle that finds no funder."""
    oracle = AsyncMock(spec=FundingAnalyzer)
    oracle.analyze_funding.return_value = [{}]
    return oracle


@pytest.fixture
def wallet_classifier(activity_oracle, inactivity_oracle, funding_oracle, analysis_config):
    """Create a WalletClassifier with mock oracles."""
    return WalletClassifier(activity_oracle, inactivity_oracle, funding_oracle, config=analysis_config)


# Test data fixtures
@pytest.fixture
def sample_token_info():
    """Token with a supply of one million raw units."""
    return TokenInfo(
        address=TOKEN_ADDRESS,
        symbol="TEST",
        name="Test Token",
        decimals=6,
        total_supply=1_000_000
    )


@pytest.fixture
def sample_asset_data():
    """Sample DAS getAsset response for a fungible token."""
    return {
        "interface": "FungibleToken",
        "id": TOKEN_ADDRESS,
        "content": {
            "metadata": {
                "name": "Test Token",
                "symbol": "TEST"
            }
        },
        "token_info": {
            "symbol": "TEST",
            "supply": 1000000000000,
            "decimals": 6,
            "token_program": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
        }
    }
