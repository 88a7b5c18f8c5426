"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    analysis_config,
    mock_solana_client,
    activity_oracle,
    inactivity_oracle,
    funding_oracle,
    wallet_classifier,
    sample_token_info,
    sample_asset_data,
)
