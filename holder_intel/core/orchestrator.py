"""
Analysis pipeline orchestration.

Stages of one run:

    IDLE -> FETCHING_TOKEN -> CLASSIFYING_HOLDERS -> SCORING -> AGGREGATING -> DONE
    IDLE -> FETCHING_TOKEN -> PRIVACY_ANALYSIS -> DONE

CANCELLED is reachable from every non-terminal stage. Token lookups and
analyzed holder sets are cached; a fresh cached holder set skips scoring.
Consumers drain an event stream from run() and may call cancel() at any time.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Set

import structlog

from holder_intel.core.aggregator import CompositeAggregator
from holder_intel.core.cache import CacheStore
from holder_intel.core.cancellation import CancellationToken
from holder_intel.core.classifier import HolderClassifier
from holder_intel.core.countdown import CountdownTimer
from holder_intel.core.exceptions import (
    AnalysisCancelled,
    HolderIntelError,
    HoldersNotFoundError,
    PrivacyAnalysisError,
    TokenNotFoundError,
)
from holder_intel.core.wallet_scorer import WalletIntelligenceService, WalletScorer
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import (
    AnalysisEvent,
    AnalysisStage,
    CompositeScore,
    HolderRecord,
    Rating,
    TokenIdentity,
    WalletIntelligence,
)

logger = structlog.get_logger(__name__)

TOKEN_INFO_CACHE = "token_info"
HOLDERS_CACHE = "holders"


class TokenInfoProvider(Protocol):
    async def by_address(self, address: str) -> Optional[TokenIdentity]:
        ...

    async def by_symbol(self, query: str) -> Optional[TokenIdentity]:
        ...


class HolderProvider(Protocol):
    async def top_holders(self, token_address: str) -> List[HolderRecord]:
        ...


class SupplyProvider(Protocol):
    async def total_supply(self, token_address: str) -> float:
        ...


class PrivacyAnalysisService(Protocol):
    async def privacy_analysis(self, token_address: str) -> Dict[str, Any]:
        ...


class _ActiveRun:
    """State owned by one in-flight run."""

    def __init__(self, identifier: str, countdown: CountdownTimer):
        self.identifier = identifier
        self.cancel_token = CancellationToken()
        self.countdown = countdown
        self.events: asyncio.Queue = asyncio.Queue()
        self.stage = AnalysisStage.IDLE
        self.current = 0
        self.total = 0
        self.finished = False


class AnalysisOrchestrator:
    """Runs token analyses one at a time and reports progress as events."""

    def __init__(self,
                 config: HolderIntelConfig,
                 token_provider: TokenInfoProvider,
                 holder_provider: HolderProvider,
                 supply_provider: SupplyProvider,
                 wallet_service: WalletIntelligenceService,
                 privacy_service: Optional[PrivacyAnalysisService] = None,
                 cache: Optional[CacheStore] = None):
        self.config = config
        self.token_provider = token_provider
        self.holder_provider = holder_provider
        self.supply_provider = supply_provider
        self.privacy_service = privacy_service
        self.cache = cache if cache is not None else CacheStore()

        self.classifier = HolderClassifier()
        self.scorer = WalletScorer(wallet_service)
        self.aggregator = CompositeAggregator()

        self.stage = AnalysisStage.IDLE
        self._active: Optional[_ActiveRun] = None
        self._tasks: Set[asyncio.Task] = set()

        self.logger = logger.bind(component="orchestrator")

    @property
    def is_running(self) -> bool:
        return self._active is not None

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def run(self, identifier: str, force_refresh: bool = False,
                  privacy_mode: Optional[bool] = None) -> AsyncIterator[AnalysisEvent]:
        """
        Analyze a token and stream progress events until a terminal event.

        A run already in flight is cancelled first.

        Args:
            identifier: Contract address or symbol/name query
            force_refresh: Bypass cached token info and holder sets
            privacy_mode: Override the configured privacy mode

        Yields:
            AnalysisEvent messages; the last one has stage DONE or CANCELLED
        """
        identifier = identifier.strip()
        if not identifier:
            # Nothing to look up; an in-flight run is left alone
            error = TokenNotFoundError(identifier)
            yield AnalysisEvent(stage=AnalysisStage.DONE, error=error, message=str(error))
            return

        if privacy_mode is None:
            privacy_mode = self.config.privacy_mode

        if self._active is not None:
            self.logger.info("Cancelling in-flight analysis", identifier=self._active.identifier)
            self.cancel("Superseded by a new analysis")

        active = _ActiveRun(
            identifier,
            CountdownTimer(self.config.countdown_seconds, self.config.countdown_tick_seconds),
        )
        self._active = active
        self._advance(active, AnalysisStage.FETCHING_TOKEN)
        active.countdown.start(lambda remaining: self._on_tick(active, remaining))

        task = asyncio.get_running_loop().create_task(
            self._execute(active, force_refresh, privacy_mode)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        try:
            while True:
                event = await active.events.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            if not active.finished:
                # Consumer stopped listening before the run ended
                active.cancel_token.cancel("Analysis abandoned by consumer")
                self._finish(active, AnalysisEvent(stage=AnalysisStage.CANCELLED,
                                                   message=active.cancel_token.reason))

    async def analyze(self, identifier: str, force_refresh: bool = False,
                      privacy_mode: Optional[bool] = None) -> AnalysisEvent:
        """Run an analysis to completion and return its terminal event."""
        final = None
        async for event in self.run(identifier, force_refresh=force_refresh, privacy_mode=privacy_mode):
            final = event
        return final

    def cancel(self, reason: str = "Scanning stopped by user") -> None:
        """Stop the in-flight run, if any."""
        active = self._active
        if active is None:
            return

        active.cancel_token.cancel(reason)
        self.logger.info("Analysis cancelled", identifier=active.identifier,
                         stage=active.stage.value, reason=reason)
        self._finish(active, AnalysisEvent(stage=AnalysisStage.CANCELLED,
                                           current=active.current,
                                           total=active.total,
                                           message=reason))

    async def wait_closed(self) -> None:
        """Wait for background work of finished or cancelled runs to exit."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ========================================================================
    # PIPELINE
    # ========================================================================

    async def _execute(self, active: _ActiveRun, force_refresh: bool, privacy_mode: bool) -> None:
        try:
            token = await self._resolve_token(active, force_refresh)
            active.cancel_token.raise_if_cancelled()

            if privacy_mode:
                result = await self._privacy_analysis(active, token)
                records: List[WalletIntelligence] = []
            else:
                records = await self._analyze_holders(active, token, force_refresh)
                active.cancel_token.raise_if_cancelled()

                self._advance(active, AnalysisStage.AGGREGATING, token=token)
                result = self.aggregator.aggregate(records)

            self.logger.info("Analysis completed",
                             token=token.address,
                             symbol=token.symbol,
                             overall=result.overall,
                             rating=result.rating)

            self._finish(active, AnalysisEvent(stage=AnalysisStage.DONE,
                                               current=active.current,
                                               total=active.total,
                                               token=token,
                                               wallets=records,
                                               result=result))

        except AnalysisCancelled as e:
            self.logger.info("Analysis stopped", identifier=active.identifier,
                             reason=e.reason, discarded=len(e.partial))
            self._finish(active, AnalysisEvent(stage=AnalysisStage.CANCELLED,
                                               current=active.current,
                                               total=active.total,
                                               message=e.reason))

        except HolderIntelError as e:
            self.logger.error("Analysis failed", identifier=active.identifier,
                              stage=active.stage.value, error=str(e))
            self._finish(active, AnalysisEvent(stage=AnalysisStage.DONE, error=e, message=str(e)))

        except Exception as e:
            self.logger.exception("Unexpected error during analysis", identifier=active.identifier,
                                  stage=active.stage.value)
            self._finish(active, AnalysisEvent(stage=AnalysisStage.DONE, error=e,
                                               message=str(e) or "Error analyzing token"))

    async def _resolve_token(self, active: _ActiveRun, force_refresh: bool) -> TokenIdentity:
        identifier = active.identifier
        cache_key = self.cache.make_key(TOKEN_INFO_CACHE, identifier)

        if not force_refresh:
            cached = self.cache.get(cache_key, self.config.token_info_ttl_seconds)
            if cached is not None:
                self.logger.debug("Token info cache hit", identifier=identifier)
                return cached

        if self.config.is_address(identifier):
            token = await self.token_provider.by_address(identifier)
        else:
            token = await self.token_provider.by_symbol(identifier)

        if token is None:
            raise TokenNotFoundError(identifier)

        self.cache.set(cache_key, token)
        return token

    async def _privacy_analysis(self, active: _ActiveRun, token: TokenIdentity) -> CompositeScore:
        self._advance(active, AnalysisStage.PRIVACY_ANALYSIS, token=token)

        if self.privacy_service is None:
            raise PrivacyAnalysisError("Privacy analysis service not configured")

        data = await self.privacy_service.privacy_analysis(token.address)
        active.cancel_token.raise_if_cancelled()

        if data.get("error"):
            raise PrivacyAnalysisError(data["error"])

        overall = data.get("overall") or (data.get("scores") or {}).get("pre_pump_score") or 0
        return CompositeScore(
            overall=int(overall),
            smart_money_percent=0.0,
            avg_win_rate=0.0,
            rating=data.get("rating") or Rating.UNKNOWN.value,
            privacy_metrics=data,
        )

    async def _analyze_holders(self, active: _ActiveRun, token: TokenIdentity,
                               force_refresh: bool) -> List[WalletIntelligence]:
        self._advance(active, AnalysisStage.CLASSIFYING_HOLDERS, token=token)

        cache_key = self.cache.make_key(HOLDERS_CACHE, token.address)
        if not force_refresh:
            cached = self.cache.get(cache_key, self.config.holders_ttl_seconds)
            if cached is not None:
                self.logger.debug("Analyzed holders cache hit", token=token.address, count=len(cached))
                return list(cached)

        holders = await self.holder_provider.top_holders(token.address)
        active.cancel_token.raise_if_cancelled()
        if not holders:
            raise HoldersNotFoundError(token.address)

        total_supply = await self.supply_provider.total_supply(token.address)
        active.cancel_token.raise_if_cancelled()

        classified = self.classifier.classify(token.address, holders[:self.config.max_holders], total_supply)

        self._advance(active, AnalysisStage.SCORING, token=token, current=0, total=len(classified.wallets))
        scored = await self.scorer.score(
            classified.wallets,
            token.address,
            active.cancel_token,
            on_progress=lambda current, total: self._on_progress(active, current, total),
        )

        analyzed = sorted(classified.liquidity_pools + scored, key=lambda r: r.iq, reverse=True)
        self.cache.set(cache_key, analyzed)
        return analyzed

    # ========================================================================
    # EVENT CHANNEL
    # ========================================================================

    def _emit(self, active: _ActiveRun, event: AnalysisEvent) -> None:
        if not active.finished:
            active.events.put_nowait(event)

    def _advance(self, active: _ActiveRun, stage: AnalysisStage,
                 token: Optional[TokenIdentity] = None,
                 current: Optional[int] = None, total: Optional[int] = None) -> None:
        if active.finished:
            return
        active.stage = stage
        if current is not None:
            active.current = current
        if total is not None:
            active.total = total
        if self._active is active:
            self.stage = stage
        self._emit(active, AnalysisEvent(stage=stage, current=active.current,
                                         total=active.total, token=token))

    def _on_progress(self, active: _ActiveRun, current: int, total: int) -> None:
        active.current = current
        active.total = total
        self._emit(active, AnalysisEvent(stage=active.stage, current=current, total=total))

    def _on_tick(self, active: _ActiveRun, remaining: int) -> None:
        self._emit(active, AnalysisEvent(stage=active.stage, current=active.current,
                                         total=active.total, countdown=remaining))

    def _finish(self, active: _ActiveRun, event: AnalysisEvent) -> None:
        if active.finished:
            return
        active.countdown.stop()
        active.stage = event.stage
        active.events.put_nowait(event)
        active.finished = True
        if self._active is active:
            self.stage = event.stage
            self._active = None
