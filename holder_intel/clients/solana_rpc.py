"""Solana JSON-RPC client for token supply and largest token accounts."""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
import structlog

from holder_intel.clients.base import AsyncHTTPClient
from holder_intel.core.exceptions import UpstreamNetworkError
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import HolderRecord

logger = structlog.get_logger(__name__)


class SolanaRPCError(UpstreamNetworkError):
    """Solana RPC specific error."""
    pass


def _ui_amount(value: Dict[str, Any]) -> float:
    """Human-readable amount from an RPC token amount object."""
    ui_string = value.get("uiAmountString")
    if ui_string is not None:
        return float(ui_string)
    if value.get("uiAmount") is not None:
        return float(value["uiAmount"])
    return int(value.get("amount") or 0) / (10 ** int(value.get("decimals") or 0))


class SolanaRPCClient(AsyncHTTPClient):
    """Supply provider and fallback holder source over public Solana RPC."""

    def __init__(self, config: HolderIntelConfig, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(config, http_client)
        self.rpc_url = config.solana_rpc_url
        self.logger = logger.bind(component="solana_rpc")

    async def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make RPC request with retry logic."""
        payload = {
            "jsonrpc": "2.0",
            "id": int(time.time() * 1000),
            "method": method,
            "params": params or [],
        }
        attempts = self.config.rpc_retry_attempts

        for attempt in range(attempts):
            try:
                async with self._session() as client:
                    response = await client.post(self.rpc_url, json=payload)
                    response.raise_for_status()
                    data = response.json()

                if data.get("error") is not None:
                    error_msg = data["error"].get("message", "Unknown RPC error")
                    error_code = data["error"].get("code", -1)
                    raise SolanaRPCError(f"RPC Error {error_code}: {error_msg}")

                return data.get("result")

            except (httpx.HTTPError, ValueError) as e:
                self.logger.warning("RPC request failed",
                                    method=method,
                                    attempt=attempt + 1,
                                    error=str(e))

                if attempt == attempts - 1:
                    raise SolanaRPCError(f"RPC request failed after {attempts} attempts: {e}") from e

                await asyncio.sleep(self.config.rpc_retry_delay)

        raise SolanaRPCError("Unexpected error in RPC request")

    async def total_supply(self, token_address: str) -> float:
        """Total supply of a mint in UI units."""
        result = await self._make_request("getTokenSupply", [token_address])
        value = (result or {}).get("value") or {}
        return _ui_amount(value)

    async def largest_accounts(self, token_address: str, limit: int = 30) -> List[HolderRecord]:
        """Largest token accounts of a mint with a positive balance, descending."""
        result = await self._make_request("getTokenLargestAccounts", [token_address])

        holders = []
        for account in (result or {}).get("value") or []:
            amount = _ui_amount(account)
            if amount > 0:
                holders.append(HolderRecord(address=account["address"], amount=amount))

        holders.sort(key=lambda h: h.amount, reverse=True)
        return holders[:limit]
