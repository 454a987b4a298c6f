"""Configuration for the holder intelligence pipeline."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class HolderIntelConfig(BaseSettings):
    """Configuration for token holder analysis."""

    # Upstream Endpoints
    backend_url: str = Field(
        default="https://orbonsolana.up.railway.app",
        description="Wallet intelligence backend base URL"
    )
    dexscreener_url: str = Field(default="https://api.dexscreener.com", description="DexScreener API base URL")
    solana_rpc_url: str = Field(default="https://api.mainnet-beta.solana.com", description="Solana JSON-RPC endpoint")
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    health_timeout: float = Field(default=5.0, gt=0, description="Backend health check timeout in seconds")
    access_code: str = Field(default="anonymous", description="Access code sent with analysis requests")
    preferred_chain: str = Field(default="solana", description="Chain used when picking a DEX pair")

    # RPC Retry Settings
    rpc_retry_attempts: int = Field(default=3, ge=1, description="Retry attempts for RPC calls")
    rpc_retry_delay: float = Field(default=1.0, ge=0, description="Delay between RPC retries in seconds")

    # Analysis Settings
    max_holders: int = Field(default=30, ge=1, description="Maximum holders analyzed per token")
    address_min_length: int = Field(
        default=20,
        description="Identifiers longer than this are resolved as contract addresses"
    )
    privacy_mode: bool = Field(default=False, description="Use orderbook analysis instead of wallet scoring")

    # Cache Settings
    token_info_ttl_seconds: float = Field(default=60.0, ge=0, description="Token info cache TTL")
    holders_ttl_seconds: float = Field(default=60.0, ge=0, description="Analyzed holders cache TTL")
    trending_ttl_seconds: float = Field(default=30.0, ge=0, description="Trending tokens cache TTL")

    # Countdown Settings
    countdown_seconds: int = Field(default=180, ge=0, description="Estimated analysis duration shown to users")
    countdown_tick_seconds: float = Field(default=1.0, gt=0, description="Countdown tick interval")

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json|text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = "HOLDER_INTEL_"

    @property
    def backend_base_url(self) -> str:
        """Backend URL without a trailing slash."""
        return self.backend_url.rstrip('/')

    def is_address(self, identifier: str) -> bool:
        """Check whether an identifier should be resolved as a contract address."""
        return len(identifier) > self.address_min_length
