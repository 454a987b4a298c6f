"""Error taxonomy for holder analysis runs.

Stage-level errors (token, holder and supply lookups, rate limits) abort a
run. WalletScoreFailure is absorbed by the wallet scorer. AnalysisCancelled
marks a stop requested by the caller and is never reported as an error.
"""

from typing import List, Optional, Union


class HolderIntelError(Exception):
    """Base error for holder intelligence analysis."""
    pass


class TokenNotFoundError(HolderIntelError):
    """Token could not be resolved by address or symbol."""

    def __init__(self, identifier: str):
        super().__init__(f"Token not found: {identifier}")
        self.identifier = identifier


class HoldersNotFoundError(HolderIntelError):
    """Holder provider returned no holders for a token."""

    def __init__(self, token_address: str):
        super().__init__("Failed to retrieve token holders")
        self.token_address = token_address


class SupplyUnavailableError(HolderIntelError):
    """Total supply could not be determined for a token."""

    def __init__(self, token_address: str):
        super().__init__(f"Total supply unavailable for {token_address}")
        self.token_address = token_address


class UpstreamNetworkError(HolderIntelError):
    """Network failure while fetching token, holder or supply data."""
    pass


class RateLimitedError(HolderIntelError):
    """Intelligence service quota exceeded."""

    def __init__(self, resets_at: Optional[Union[float, str]], limit: Optional[int] = None):
        message = "Daily analysis limit exceeded"
        if limit is not None:
            message += f" ({limit} analyses)"
        super().__init__(message)
        self.resets_at = resets_at
        self.limit = limit


class PrivacyAnalysisError(HolderIntelError):
    """Orderbook analysis service reported an error."""
    pass


class WalletScoreFailure(HolderIntelError):
    """A single wallet could not be scored."""

    def __init__(self, wallet_address: str, reason: str):
        super().__init__(f"Wallet analysis failed for {wallet_address}: {reason}")
        self.wallet_address = wallet_address
        self.reason = reason


class AnalysisCancelled(HolderIntelError):
    """Run stopped by request; carries any records produced before the stop."""

    def __init__(self, reason: str = "Scanning stopped by user", partial: Optional[List] = None):
        super().__init__(reason)
        self.reason = reason
        self.partial = list(partial or [])
