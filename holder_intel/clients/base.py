"""Shared HTTP session handling for upstream clients."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from holder_intel.models.config import HolderIntelConfig

USER_AGENT = "holder-intel/1.0.0"


class AsyncHTTPClient:
    """Base for clients that may share an injected httpx.AsyncClient."""

    def __init__(self, config: HolderIntelConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http_client = http_client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a short-lived one when none was injected."""
        if self._http_client is not None:
            yield self._http_client
            return

        async with httpx.AsyncClient(
            timeout=self.config.request_timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        ) as client:
            yield client
