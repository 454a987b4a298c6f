"""
Client for the wallet intelligence backend.

All keyed upstream calls (holder lists, wallet scoring, orderbook analysis)
go through the backend so no API keys live in this process. The backend
enforces a daily per-access-code quota and answers HTTP 429 with the reset
time once it is exhausted.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog

from holder_intel.clients.base import AsyncHTTPClient
from holder_intel.core.exceptions import RateLimitedError, UpstreamNetworkError, WalletScoreFailure
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import HolderRecord, WalletIntelligence, PATTERN_UNKNOWN

logger = structlog.get_logger(__name__)


def _first(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First truthy value among camelCase/snake_case variants of a field."""
    for key in keys:
        value = payload.get(key)
        if value:
            return value
    return default


class IntelligenceBackendClient(AsyncHTTPClient):
    """Holder provider, wallet intelligence service and privacy analysis service."""

    def __init__(self, config: HolderIntelConfig, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(config, http_client)
        self.base_url = config.backend_base_url
        self.logger = logger.bind(component="backend_client")

    def _rate_limited(self, response: httpx.Response) -> RateLimitedError:
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            body = {}

        # resets_at is passed through as sent; its unit is the backend's business
        error = RateLimitedError(resets_at=body.get("resets_at"), limit=body.get("limit"))
        self.logger.warning("Analysis quota exceeded", limit=error.limit, resets_at=error.resets_at)
        return error

    # ========================================================================
    # HOLDERS
    # ========================================================================

    async def top_holders(self, token_address: str) -> List[HolderRecord]:
        """Largest holders of a token, ordered by amount descending."""
        try:
            async with self._session() as client:
                response = await client.post(
                    f"{self.base_url}/api/token/holders",
                    json={"token_address": token_address},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamNetworkError(f"Holder lookup failed: {e}") from e

        raw_holders = data.get("holders", []) if isinstance(data, dict) else data

        holders = [
            HolderRecord(address=h["address"], amount=float(h.get("amount") or 0))
            for h in raw_holders or []
            if h.get("address")
        ]
        holders.sort(key=lambda h: h.amount, reverse=True)
        return holders

    # ========================================================================
    # WALLET INTELLIGENCE
    # ========================================================================

    @staticmethod
    def parse_wallet(wallet_address: str, holding_percent: float, payload: Dict[str, Any]) -> WalletIntelligence:
        """Normalize a wallet analysis response, wrapped or not."""
        data = payload.get("data") or payload

        return WalletIntelligence(
            address=wallet_address,
            iq=_first(data, "iq", default=50),
            win_rate=str(_first(data, "winRate", "win_rate", default="0.0")),
            trades=_first(data, "trades", default=0),
            trades_score=_first(data, "tradesScore", "trades_score", default=0),
            portfolio=_first(data, "portfolio", default=0),
            pattern=_first(data, "pattern", default=PATTERN_UNKNOWN),
            hold_score=_first(data, "holdScore", "hold_score", default=0),
            holding_percent=holding_percent,
            first_buy_time=_first(data, "firstBuyTime", "first_buy_time"),
        )

    async def analyze_wallet(self, wallet_address: str, token_address: str,
                             holding_percent: float) -> WalletIntelligence:
        """
        Score one wallet's behavior for a token.

        Raises:
            RateLimitedError: quota exhausted (HTTP 429)
            WalletScoreFailure: any other failure for this wallet
        """
        try:
            async with self._session() as client:
                response = await client.post(
                    f"{self.base_url}/api/wallet/analyze",
                    json={
                        "wallet_address": wallet_address,
                        "token_address": token_address,
                        "holding_percent": holding_percent,
                        "access_code": self.config.access_code,
                    },
                )

                if response.status_code == 429:
                    raise self._rate_limited(response)

                if response.is_error:
                    raise WalletScoreFailure(wallet_address, f"Backend returned {response.status_code}")

                payload = response.json()
        except httpx.HTTPError as e:
            raise WalletScoreFailure(wallet_address, str(e)) from e
        except ValueError as e:
            raise WalletScoreFailure(wallet_address, f"Malformed response: {e}") from e

        if not isinstance(payload, dict):
            raise WalletScoreFailure(wallet_address, "Malformed response: expected an object")

        return self.parse_wallet(wallet_address, holding_percent, payload)

    # ========================================================================
    # PRIVACY ANALYSIS
    # ========================================================================

    async def privacy_analysis(self, token_address: str) -> Dict[str, Any]:
        """
        Orderbook microstructure analysis for a token.

        Returns the backend payload, or a neutral payload with an "error" key
        when the backend is unreachable.

        Raises:
            RateLimitedError: quota exhausted (HTTP 429)
        """
        try:
            async with self._session() as client:
                response = await client.post(
                    f"{self.base_url}/analyze",
                    json={"token_address": token_address, "access_code": self.config.access_code},
                )

                if response.status_code == 429:
                    raise self._rate_limited(response)

                response.raise_for_status()
                return response.json()

        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("Privacy analysis failed", token=token_address, error=str(e))
            return {
                "overall": 0,
                "rating": "ERROR",
                "state": "NEUTRAL",
                "severity": "LOW",
                "confidence": 0,
                "action": "Backend unavailable. Try again.",
                "signals": [],
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "cached": False,
                "error": "Backend not reachable",
            }

    # ========================================================================
    # SIGNAL FUSION
    # ========================================================================

    async def _request(self, method: str, path: str, action: str, **kwargs) -> Any:
        """JSON request against the backend; any failure becomes UpstreamNetworkError."""
        try:
            async with self._session() as client:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            self.logger.error(f"{action} failed", path=path, status=e.response.status_code)
            raise UpstreamNetworkError(f"{action} failed: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"{action} failed", path=path, error=str(e))
            raise UpstreamNetworkError(f"{action} failed: {e}") from e

    async def fused_signal(self, token_address: str, force_refresh: bool = False) -> Dict[str, Any]:
        """Signal fusing real-time metrics with slippage analysis."""
        params = {"force_refresh": "true"} if force_refresh else None
        return await self._request("GET", f"/signal/fused/{token_address}", "Fusion signal", params=params)

    async def signal_explanation(self, token_address: str) -> Dict[str, Any]:
        """Natural-language breakdown of the fused signal."""
        return await self._request("GET", f"/signal/explain/{token_address}", "Explanation")

    async def batch_fused_signals(self, token_addresses: List[str]) -> Dict[str, Any]:
        """Fused signals for several tokens in one call."""
        return await self._request("POST", "/signal/batch", "Batch fusion",
                                   json={"token_addresses": list(token_addresses)})

    async def realtime_metrics(self, token_address: str) -> Optional[Dict[str, Any]]:
        """
        Latest metrics snapshot (phase, VTS/PII/VEI values, transition predictions).

        Returns None when the backend has no metrics for the token yet or
        cannot be reached.
        """
        try:
            async with self._session() as client:
                response = await client.get(f"{self.base_url}/metrics/realtime/{token_address}")
                if response.status_code == 404:
                    self.logger.info("No metrics available yet", token=token_address)
                    return None
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error("Metrics fetch failed", token=token_address, error=str(e))
            return None

    # ========================================================================
    # ALERTS
    # ========================================================================

    async def enable_alerts(self, token_address: str) -> Dict[str, Any]:
        return await self._request("POST", "/alerts/enable", "Enable alerts",
                                   json={"token_address": token_address})

    async def disable_alerts(self, token_address: str) -> Dict[str, Any]:
        return await self._request("POST", "/alerts/disable", "Disable alerts",
                                   json={"token_address": token_address})

    async def alert_status(self, token_address: str) -> Dict[str, Any]:
        return await self._request("GET", f"/alerts/status/{token_address}", "Alert status")

    async def token_alerts(self, token_address: str, limit: int = 20) -> Dict[str, Any]:
        """Most recent alerts raised for a token."""
        return await self._request("GET", f"/alerts/get/{token_address}", "Alert list",
                                   params={"limit": limit})

    async def clear_alerts(self, token_address: str) -> Dict[str, Any]:
        return await self._request("POST", f"/alerts/clear/{token_address}", "Clear alerts")

    # ========================================================================
    # TRACKING
    # ========================================================================

    async def tracking_status(self) -> Dict[str, Any]:
        """Tokens currently monitored by the real-time system."""
        return await self._request("GET", "/tracking/status", "Tracking status")

    async def start_tracking(self, token_address: str) -> Dict[str, Any]:
        return await self._request("POST", "/tracking/start", "Start tracking",
                                   json={"token_address": token_address})

    async def stop_tracking(self, token_address: str) -> Dict[str, Any]:
        return await self._request("POST", "/tracking/stop", "Stop tracking",
                                   json={"token_address": token_address})

    # ========================================================================
    # HEALTH
    # ========================================================================

    async def check_health(self) -> bool:
        """Check whether the backend is reachable."""
        try:
            async with self._session() as client:
                response = await client.get(f"{self.base_url}/health", timeout=self.config.health_timeout)
                return response.is_success
        except httpx.HTTPError:
            return False
