"""Cooperative cancellation for analysis runs."""

from typing import Optional

from holder_intel.core.exceptions import AnalysisCancelled


class CancellationToken:
    """Flag shared by every stage of one run and polled at stage boundaries."""

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "Scanning stopped by user") -> None:
        if not self._cancelled:
            self._cancelled = True
            self.reason = reason

    def raise_if_cancelled(self, partial=None) -> None:
        """Raise AnalysisCancelled if cancellation was requested."""
        if self._cancelled:
            raise AnalysisCancelled(self.reason, partial=partial)
