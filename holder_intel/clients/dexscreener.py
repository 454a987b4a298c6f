"""
DexScreener client for token metadata and trending tokens.

DexScreener is free and keyless. Token lookups prefer a pair on the
configured chain and fall back to the first pair returned.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from holder_intel.clients.base import AsyncHTTPClient
from holder_intel.core.cache import CacheStore
from holder_intel.core.exceptions import TokenNotFoundError, UpstreamNetworkError
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import TokenIdentity, TrendingToken

logger = structlog.get_logger(__name__)

TRENDING_CACHE_KEY = CacheStore.make_key("trending", "dexscreener")
MAX_TRENDING = 50


def _social(links: Optional[List[Dict[str, Any]]], kind: str) -> Optional[str]:
    for link in links or []:
        if link.get("type") == kind:
            return link.get("url")
    return None


class DexScreenerClient(AsyncHTTPClient):
    """Token info provider backed by the DexScreener public API."""

    def __init__(self, config: HolderIntelConfig,
                 http_client: Optional[httpx.AsyncClient] = None,
                 cache: Optional[CacheStore] = None):
        super().__init__(config, http_client)
        self.base_url = config.dexscreener_url.rstrip('/')
        self.cache = cache
        self.logger = logger.bind(component="dexscreener_client")

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            async with self._session() as client:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            self.logger.error("DexScreener request failed", path=path, error=str(e))
            raise UpstreamNetworkError(f"DexScreener request failed: {e}") from e
        except ValueError as e:
            raise UpstreamNetworkError(f"DexScreener returned invalid JSON: {e}") from e

    def _pick_pair(self, pairs: List[Dict[str, Any]]) -> Dict[str, Any]:
        for pair in pairs:
            if pair.get("chainId") == self.config.preferred_chain:
                return pair
        return pairs[0]

    @staticmethod
    def _parse_pair(pair: Dict[str, Any]) -> TokenIdentity:
        """Build a TokenIdentity from a DexScreener pair object."""
        base = pair.get("baseToken") or {}
        info = pair.get("info") or {}
        websites = info.get("websites") or []

        try:
            price = float(pair.get("priceUsd") or 0)
        except (TypeError, ValueError):
            price = 0.0

        created_at = pair.get("pairCreatedAt")

        return TokenIdentity(
            symbol=base.get("symbol", ""),
            name=base.get("name", ""),
            address=base.get("address", ""),
            price=price,
            market_cap=pair.get("fdv") or pair.get("marketCap") or 0,
            liquidity=(pair.get("liquidity") or {}).get("usd") or 0,
            image=info.get("imageUrl"),
            volume_24h=(pair.get("volume") or {}).get("h24") or 0,
            price_change_24h=(pair.get("priceChange") or {}).get("h24") or 0,
            created_timestamp=created_at / 1000 if created_at else None,
            twitter=_social(info.get("socials"), "twitter"),
            telegram=_social(info.get("socials"), "telegram"),
            website=websites[0].get("url") if websites else None,
        )

    async def _lookup(self, identifier: str, path: str,
                      params: Optional[Dict[str, Any]] = None) -> TokenIdentity:
        data = await self._get(path, params)
        pairs = (data or {}).get("pairs") or []

        if not pairs:
            raise TokenNotFoundError(identifier)

        token = self._parse_pair(self._pick_pair(pairs))
        self.logger.debug("Token resolved", identifier=identifier, symbol=token.symbol, address=token.address)
        return token

    async def by_address(self, address: str) -> TokenIdentity:
        """Resolve a token by contract address."""
        return await self._lookup(address, f"/latest/dex/tokens/{address}")

    async def by_symbol(self, query: str) -> TokenIdentity:
        """Resolve a token by symbol or name search."""
        return await self._lookup(query, "/latest/dex/search", params={"q": query})

    async def trending(self, force_refresh: bool = False) -> List[TrendingToken]:
        """
        Latest promoted tokens on the configured chain.

        Returns an empty list when the provider is unavailable.
        """
        if self.cache is not None and not force_refresh:
            cached = self.cache.get(TRENDING_CACHE_KEY, self.config.trending_ttl_seconds)
            if cached is not None:
                return cached

        try:
            profiles = await self._get("/token-profiles/latest/v1")
        except UpstreamNetworkError:
            return []

        tokens = []
        for profile in profiles or []:
            if profile.get("chainId") != self.config.preferred_chain:
                continue

            address = profile.get("tokenAddress", "")
            url = profile.get("url") or ""
            description = profile.get("description") or ""
            links = profile.get("links")

            tokens.append(TrendingToken(
                address=address,
                symbol=url.rstrip('/').split('/')[-1] if url else address[:6],
                name=description.split('\n')[0] if description else "New Token",
                image=profile.get("icon"),
                description=description or "No description available",
                twitter=_social(links, "twitter"),
                telegram=_social(links, "telegram"),
                website=_social(links, "website"),
            ))

            if len(tokens) >= MAX_TRENDING:
                break

        if self.cache is not None:
            self.cache.set(TRENDING_CACHE_KEY, tokens)

        return tokens
