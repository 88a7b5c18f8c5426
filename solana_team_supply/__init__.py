"""Solana Team Supply Package.

Estimates how much of a Solana token's supply is held by team-controlled
wallets by classifying its significant holders.
"""

__version__ = "0.1.0"
__author__ = "Solana Team Supply Contributors"
__email__ = "maintainers@solana-team-supply.dev"
