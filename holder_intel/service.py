"""Wiring of upstream clients, cache and orchestrator for one process."""

from typing import Optional

import httpx
import structlog

from holder_intel.clients.backend import IntelligenceBackendClient
from holder_intel.clients.base import USER_AGENT
from holder_intel.clients.dexscreener import DexScreenerClient
from holder_intel.clients.holders import FallbackHolderProvider
from holder_intel.clients.solana_rpc import SolanaRPCClient
from holder_intel.core.cache import CacheStore
from holder_intel.core.orchestrator import AnalysisOrchestrator
from holder_intel.models.config import HolderIntelConfig

logger = structlog.get_logger(__name__)


class HolderIntelService:
    """
    Process-level entry point.

    Owns one HTTP connection pool and one cache shared by every analysis.

        async with HolderIntelService(config) as service:
            async for event in service.orchestrator.run("BONK"):
                ...
    """

    def __init__(self, config: HolderIntelConfig,
                 http_client: Optional[httpx.AsyncClient] = None,
                 cache: Optional[CacheStore] = None):
        self.config = config
        self.cache = cache if cache is not None else CacheStore()

        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=config.request_timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

        self.dexscreener = DexScreenerClient(config, self.http_client, cache=self.cache)
        self.backend = IntelligenceBackendClient(config, self.http_client)
        self.rpc = SolanaRPCClient(config, self.http_client)
        self.holders = FallbackHolderProvider(self.backend, self.rpc, limit=config.max_holders)

        self.orchestrator = AnalysisOrchestrator(
            config,
            token_provider=self.dexscreener,
            holder_provider=self.holders,
            supply_provider=self.rpc,
            wallet_service=self.backend,
            privacy_service=self.backend,
            cache=self.cache,
        )

        logger.info("Holder intelligence service initialized",
                    backend=config.backend_base_url,
                    privacy_mode=config.privacy_mode)

    async def close(self) -> None:
        self.orchestrator.cancel("Service shutting down")
        await self.orchestrator.wait_closed()
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "HolderIntelService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
