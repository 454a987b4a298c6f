"""Holder provider that falls back from the backend to public RPC."""

from typing import List

import structlog

from holder_intel.clients.backend import IntelligenceBackendClient
from holder_intel.clients.solana_rpc import SolanaRPCClient
from holder_intel.core.exceptions import UpstreamNetworkError
from holder_intel.models.token_data import HolderRecord

logger = structlog.get_logger(__name__)


class FallbackHolderProvider:
    """Backend holder list first; largest RPC token accounts when it is unavailable."""

    def __init__(self, backend: IntelligenceBackendClient, rpc: SolanaRPCClient, limit: int = 30):
        self.backend = backend
        self.rpc = rpc
        self.limit = limit
        self.logger = logger.bind(component="holder_provider")

    async def top_holders(self, token_address: str) -> List[HolderRecord]:
        try:
            return await self.backend.top_holders(token_address)
        except UpstreamNetworkError as e:
            self.logger.info("Backend holders endpoint not available, using RPC fallback",
                             token=token_address, error=str(e))

        return await self.rpc.largest_accounts(token_address, limit=self.limit)
