"""
Token Holder Intelligence

Scores the top holders of a token through a wallet intelligence service and
aggregates their behavior into a single composite intelligence score.
"""

__version__ = "1.0.0"
__author__ = "Holder Intelligence Team"
__description__ = "Composite holder intelligence scoring for Solana tokens"

from holder_intel.core.cache import CacheStore
from holder_intel.core.orchestrator import AnalysisOrchestrator
from holder_intel.models.config import HolderIntelConfig
from holder_intel.service import HolderIntelService

__all__ = [
    "AnalysisOrchestrator",
    "CacheStore",
    "HolderIntelConfig",
    "HolderIntelService",
]
