"""Pytest configuration and fixtures for holder intelligence tests."""

import asyncio
import pytest
from typing import Any, Callable, Dict, List, Optional

from holder_intel.core.cache import CacheStore
from holder_intel.core.exceptions import TokenNotFoundError
from holder_intel.core.orchestrator import AnalysisOrchestrator
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import HolderRecord, TokenIdentity, WalletIntelligence


TOKEN_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
OTHER_MINT = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"


def wallet_address(index: int) -> str:
    return f"Wallet{index:04d}" + "1" * 34


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


# ============================================================================
# FAKE COLLABORATORS
# ============================================================================

class FakeTokenProvider:
    """Token info provider keyed by address and symbol."""

    def __init__(self, tokens: List[TokenIdentity]):
        self.tokens = {t.address: t for t in tokens}
        self.symbols = {t.symbol: t for t in tokens}
        self.calls: List[str] = []

    async def by_address(self, address: str) -> TokenIdentity:
        self.calls.append(address)
        if address not in self.tokens:
            raise TokenNotFoundError(address)
        return self.tokens[address]

    async def by_symbol(self, query: str) -> TokenIdentity:
        self.calls.append(query)
        if query not in self.symbols:
            raise TokenNotFoundError(query)
        return self.symbols[query]


class FakeHolderProvider:
    def __init__(self, holders: Dict[str, List[HolderRecord]]):
        self.holders = holders
        self.calls: List[str] = []

    async def top_holders(self, token_address: str) -> List[HolderRecord]:
        self.calls.append(token_address)
        return list(self.holders.get(token_address, []))


class FakeSupplyProvider:
    def __init__(self, supply: float = 100.0):
        self.supply = supply
        self.calls: List[str] = []

    async def total_supply(self, token_address: str) -> float:
        self.calls.append(token_address)
        return self.supply


class FakeWalletService:
    """
    Wallet intelligence service returning canned metrics.

    responses maps wallet address to a dict of WalletIntelligence fields or
    an exception instance to raise. on_call runs before each response with
    the 1-based call number.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None,
                 on_call: Optional[Callable[[int], Any]] = None,
                 delay: float = 0.0):
        self.responses = responses or {}
        self.on_call = on_call
        self.delay = delay
        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def analyze_wallet(self, wallet_address: str, token_address: str,
                             holding_percent: float) -> WalletIntelligence:
        self.calls.append((wallet_address, token_address, holding_percent))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.on_call is not None:
                outcome = self.on_call(len(self.calls))
                if asyncio.iscoroutine(outcome):
                    await outcome
            await asyncio.sleep(self.delay)

            response = self.responses.get(wallet_address, {"iq": 60, "win_rate": "50.0"})
            if isinstance(response, Exception):
                raise response
            return WalletIntelligence(address=wallet_address, holding_percent=holding_percent, **response)
        finally:
            self.in_flight -= 1


class FakePrivacyService:
    def __init__(self, payload: Dict[str, Any]):
        self.payload = payload
        self.calls: List[str] = []

    async def privacy_analysis(self, token_address: str) -> Dict[str, Any]:
        self.calls.append(token_address)
        return self.payload


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def config():
    """Test configuration with a countdown too slow to tick during tests."""
    return HolderIntelConfig(
        countdown_seconds=180,
        countdown_tick_seconds=60.0,
        token_info_ttl_seconds=60.0,
        holders_ttl_seconds=60.0,
        _env_file=None,
    )


@pytest.fixture
def token():
    return TokenIdentity(
        symbol="BONK",
        name="Bonk",
        address=TOKEN_MINT,
        price=0.000021,
        market_cap=1_400_000_000,
        liquidity=12_000_000,
    )


@pytest.fixture
def other_token():
    return TokenIdentity(symbol="WIF", name="dogwifhat", address=OTHER_MINT, price=1.9)


@pytest.fixture
def holders():
    """One 30% pool and two ordinary wallets at 2% and 1% of a 100 supply."""
    return [
        HolderRecord(address="PoolVault" + "1" * 35, amount=30),
        HolderRecord(address=wallet_address(1), amount=2),
        HolderRecord(address=wallet_address(2), amount=1),
    ]


@pytest.fixture
def wallet_responses():
    return {
        wallet_address(1): {"iq": 80, "win_rate": "70.0", "hold_score": 20, "pattern": "DIAMOND HANDS"},
        wallet_address(2): {"iq": 40, "win_rate": "20.0", "hold_score": 5, "pattern": "PAPER HANDS"},
    }


@pytest.fixture
def cache():
    return CacheStore()


@pytest.fixture
def make_orchestrator(config, cache, token, other_token, holders):
    """Factory building an orchestrator around fake collaborators."""

    def _make(wallet_service, holder_map=None, supply=100.0, privacy_service=None, cfg=None):
        token_provider = FakeTokenProvider([token, other_token])
        holder_provider = FakeHolderProvider(holder_map if holder_map is not None else {TOKEN_MINT: holders})
        supply_provider = FakeSupplyProvider(supply)
        orchestrator = AnalysisOrchestrator(
            cfg or config,
            token_provider=token_provider,
            holder_provider=holder_provider,
            supply_provider=supply_provider,
            wallet_service=wallet_service,
            privacy_service=privacy_service,
            cache=cache,
        )
        return orchestrator, token_provider, holder_provider, supply_provider

    return _make
