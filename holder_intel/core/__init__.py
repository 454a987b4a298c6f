"""Core holder analysis components."""

from holder_intel.core.aggregator import CompositeAggregator
from holder_intel.core.cache import CacheStore
from holder_intel.core.cancellation import CancellationToken
from holder_intel.core.classifier import HolderClassifier, ClassifiedHolders
from holder_intel.core.countdown import CountdownTimer, format_countdown
from holder_intel.core.orchestrator import AnalysisOrchestrator
from holder_intel.core.wallet_scorer import WalletScorer

__all__ = [
    "AnalysisOrchestrator",
    "CacheStore",
    "CancellationToken",
    "ClassifiedHolders",
    "CompositeAggregator",
    "CountdownTimer",
    "HolderClassifier",
    "WalletScorer",
    "format_countdown",
]
