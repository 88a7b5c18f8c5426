"""Command-line entry point for team supply analysis."""

import argparse
import asyncio
import dataclasses
import json
import signal
import sys

from solana_team_supply.config import get_logging_config, get_solana_config, url_validator
from solana_team_supply.logging_config import configure_logging, get_logger
from solana_team_supply.monitoring import api_call_counter
from solana_team_supply.services.team_supply.analyzer import analyze_team_supply
from solana_team_supply.services.team_supply.cancellation import CancellationToken
from solana_team_supply.solana_client import SolanaClient
from solana_team_supply.utils.error_handling import AnalysisCancelledError, ConfigurationError

logger = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


async def run_analysis(token_address, rpc_url=None, context="cli"):
    """Run one analysis, cancelling it cleanly on SIGINT."""
    config = get_solana_config()
    if rpc_url:
        try:
            config = dataclasses.replace(config, rpc_url=url_validator(rpc_url))
        except ValueError as e:
            raise ConfigurationError(str(e), {"rpc_url": rpc_url})

    cancellation_token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancellation_token.cancel)
    except NotImplementedError:
        # Windows event loops have no signal handler support
        pass

    try:
        async with SolanaClient(config) as client:
            return await analyze_team_supply(
                token_address,
                context=context,
                cancellation_token=cancellation_token,
                solana_client=client
            )
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            pass


def main(argv=None):
    parser = argparse.ArgumentParser(description='Estimate the share of a Solana token held by team wallets')
    parser.add_argument('token', help='Solana token mint address')
    parser.add_argument('--rpc', default=None, help='Solana RPC URL (defaults to SOLANA_RPC_URL)')
    parser.add_argument('--context', default='cli', help='Label used for API call accounting')
    parser.add_argument('--log-level', default=None, help='Log level (defaults to LOG_LEVEL)')

    args = parser.parse_args(argv)

    logging_config = get_logging_config()
    configure_logging(args.log_level or logging_config.log_level, logging_config.log_format, stream=sys.stderr)

    try:
        result = asyncio.run(run_analysis(args.token, args.rpc, args.context))
    except AnalysisCancelledError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_CANCELLED
    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(result.to_dict(), indent=2))
    logger.info(f"API calls: {api_call_counter.total_calls(args.context)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
