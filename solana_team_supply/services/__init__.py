"""Services backed by the Solana RPC client."""
