"""Sequential per-wallet scoring against the wallet intelligence service."""

import dataclasses
from typing import Callable, List, Optional, Protocol, Tuple

import structlog

from holder_intel.core.cancellation import CancellationToken
from holder_intel.core.exceptions import AnalysisCancelled, RateLimitedError
from holder_intel.models.token_data import HolderRecord, WalletIntelligence, PATTERN_ERROR

logger = structlog.get_logger(__name__)

ProgressObserver = Callable[[int, int], None]


class WalletIntelligenceService(Protocol):
    async def analyze_wallet(self, wallet_address: str, token_address: str,
                             holding_percent: float) -> WalletIntelligence:
        ...


class WalletScorer:
    """
    Scores ordinary wallets one at a time.

    Calls are issued strictly in sequence; the service enforces a per-caller
    quota and the loop is the only throttle in front of it. A failure for one
    wallet yields a degraded record and the loop continues. A rate limit or a
    cancellation stops the loop.
    """

    DEGRADED_IQ = 50

    def __init__(self, service: WalletIntelligenceService):
        self.service = service
        self.logger = logger.bind(component="wallet_scorer")

    @classmethod
    def degraded_record(cls, holder: HolderRecord, holding_percent: float) -> WalletIntelligence:
        """Placeholder record for a wallet the service could not score."""
        return WalletIntelligence(
            address=holder.address,
            iq=cls.DEGRADED_IQ,
            win_rate="0.0",
            trades=0,
            trades_score=0,
            portfolio=0,
            pattern=PATTERN_ERROR,
            hold_score=0,
            holding_amount=holder.amount,
            holding_percent=holding_percent,
        )

    async def score(self,
                    wallets: List[Tuple[HolderRecord, float]],
                    token_address: str,
                    cancel_token: CancellationToken,
                    on_progress: Optional[ProgressObserver] = None) -> List[WalletIntelligence]:
        """
        Score each wallet in order.

        Args:
            wallets: (holder, holding percent) pairs to score
            token_address: Token being analyzed
            cancel_token: Checked before every service call
            on_progress: Called with (processed, total) after every call

        Returns:
            One record per input wallet, in input order

        Raises:
            AnalysisCancelled: with the records produced so far
            RateLimitedError: when the service quota is exhausted
        """
        total = len(wallets)
        records: List[WalletIntelligence] = []

        for index, (holder, holding_percent) in enumerate(wallets):
            cancel_token.raise_if_cancelled(partial=records)

            try:
                result = await self.service.analyze_wallet(holder.address, token_address, holding_percent)
                record = dataclasses.replace(
                    result,
                    address=holder.address,
                    holding_amount=holder.amount,
                    holding_percent=holding_percent,
                )
            except (RateLimitedError, AnalysisCancelled):
                raise
            except Exception as e:
                self.logger.warning("Wallet analysis failed, using degraded record",
                                    wallet=holder.address,
                                    token=token_address,
                                    error=str(e))
                record = self.degraded_record(holder, holding_percent)

            records.append(record)

            if on_progress is not None:
                on_progress(index + 1, total)

        self.logger.info("Wallet scoring completed",
                         token=token_address,
                         wallets=total,
                         degraded=sum(1 for r in records if r.is_degraded))

        return records
