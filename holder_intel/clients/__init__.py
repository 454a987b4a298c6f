"""Upstream data and intelligence clients."""

from holder_intel.clients.backend import IntelligenceBackendClient
from holder_intel.clients.dexscreener import DexScreenerClient
from holder_intel.clients.holders import FallbackHolderProvider
from holder_intel.clients.solana_rpc import SolanaRPCClient, SolanaRPCError

__all__ = [
    "DexScreenerClient",
    "FallbackHolderProvider",
    "IntelligenceBackendClient",
    "SolanaRPCClient",
    "SolanaRPCError",
]
