"""Data models for token holder analysis."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List


PATTERN_LIQUIDITY_POOL = "LIQUIDITY POOL"
PATTERN_ERROR = "ERROR"
PATTERN_UNKNOWN = "Unknown"


class Rating(str, Enum):
    """Token-level rating buckets."""
    ELITE = "ELITE"
    SMART = "SMART"
    AVERAGE = "AVERAGE"
    DEGEN = "DEGEN"
    UNKNOWN = "UNKNOWN"


class AnalysisStage(str, Enum):
    """Stages of a single analysis run."""
    IDLE = "IDLE"
    FETCHING_TOKEN = "FETCHING_TOKEN"
    PRIVACY_ANALYSIS = "PRIVACY_ANALYSIS"
    CLASSIFYING_HOLDERS = "CLASSIFYING_HOLDERS"
    SCORING = "SCORING"
    AGGREGATING = "AGGREGATING"
    DONE = "DONE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStage.DONE, AnalysisStage.CANCELLED)


@dataclass(frozen=True)
class TokenIdentity:
    """Token snapshot resolved once per analysis request."""
    symbol: str
    name: str
    address: str
    price: float = 0.0
    market_cap: float = 0.0
    liquidity: float = 0.0

    # Presentation metadata
    image: Optional[str] = None
    volume_24h: float = 0.0
    price_change_24h: float = 0.0
    created_timestamp: Optional[float] = None
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "address": self.address,
            "price": self.price,
            "market_cap": self.market_cap,
            "liquidity": self.liquidity,
            "volume_24h": self.volume_24h,
            "price_change_24h": self.price_change_24h,
        }


@dataclass(frozen=True)
class HolderRecord:
    """A single token holder as reported by the holder provider."""
    address: str
    amount: float


@dataclass(frozen=True)
class WalletIntelligence:
    """Per-wallet behavioral intelligence for one analysis run."""
    address: str
    iq: float
    win_rate: str = "0.0"
    trades: int = 0
    trades_score: float = 0
    portfolio: float = 0
    pattern: str = PATTERN_UNKNOWN
    hold_score: float = 0
    holding_amount: float = 0
    holding_percent: float = 0.0
    first_buy_time: Optional[float] = None

    @property
    def win_rate_value(self) -> float:
        """Win rate as a number, treating missing or malformed values as 0."""
        try:
            return float(self.win_rate)
        except (TypeError, ValueError):
            return 0.0

    @property
    def is_liquidity_pool(self) -> bool:
        return self.pattern == PATTERN_LIQUIDITY_POOL

    @property
    def is_degraded(self) -> bool:
        return self.pattern == PATTERN_ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "iq": self.iq,
            "win_rate": self.win_rate,
            "trades": self.trades,
            "trades_score": self.trades_score,
            "portfolio": self.portfolio,
            "pattern": self.pattern,
            "hold_score": self.hold_score,
            "holding_amount": f"{self.holding_amount:.0f}",
            "holding_percent": f"{self.holding_percent:.2f}",
            "first_buy_time": self.first_buy_time,
        }


@dataclass(frozen=True)
class CompositeScore:
    """Token-level intelligence score derived from wallet records."""
    overall: int
    smart_money_percent: float
    avg_win_rate: float
    rating: str
    privacy_metrics: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "overall": self.overall,
            "smart_money": f"{self.smart_money_percent:.1f}",
            "avg_win_rate": f"{self.avg_win_rate:.1f}",
            "rating": self.rating,
        }
        if self.privacy_metrics is not None:
            result["privacy_metrics"] = self.privacy_metrics
        return result


@dataclass(frozen=True)
class CacheEntry:
    """Cached payload with its creation time."""
    key: str
    payload: Any
    created_at: float


@dataclass(frozen=True)
class TrendingToken:
    """Recently promoted token from the DEX provider."""
    address: str
    symbol: str
    name: str
    image: Optional[str] = None
    description: str = ""
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None


@dataclass
class AnalysisEvent:
    """Progress message produced by the orchestrator for any consumer."""
    stage: AnalysisStage
    current: int = 0
    total: int = 0
    countdown: Optional[int] = None
    token: Optional[TokenIdentity] = None
    wallets: List[WalletIntelligence] = field(default_factory=list)
    result: Optional[CompositeScore] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.stage.is_terminal

    @property
    def is_countdown_tick(self) -> bool:
        return self.countdown is not None
