"""Data models for holder intelligence analysis."""

from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import (
    AnalysisEvent,
    AnalysisStage,
    CacheEntry,
    CompositeScore,
    HolderRecord,
    Rating,
    TokenIdentity,
    TrendingToken,
    WalletIntelligence,
)

__all__ = [
    "HolderIntelConfig",
    "AnalysisEvent",
    "AnalysisStage",
    "CacheEntry",
    "CompositeScore",
    "HolderRecord",
    "Rating",
    "TokenIdentity",
    "TrendingToken",
    "WalletIntelligence",
]
