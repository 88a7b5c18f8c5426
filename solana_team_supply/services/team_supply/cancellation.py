"""Cooperative cancellation for analysis runs."""

from typing import Optional

from solana_team_supply.utils.error_handling import AnalysisCancelledError


class CancellationToken:
    """Flag owned by the caller and polled by the pipeline.

    The pipeline never sets the flag; it only checks it before starting new
    work. In-flight requests are left to finish.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        """Request cancellation."""
        self._cancelled = True

    def is_cancelled(self) -> bool:
        """Return True once cancellation has been requested."""
        return self._cancelled


def raise_if_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise AnalysisCancelledError if the token has been cancelled.

    Raises:
        AnalysisCancelledError: If cancellation was requested
    """
    if token is not None and token.is_cancelled():
        raise AnalysisCancelledError()
