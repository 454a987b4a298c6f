"""Composite token intelligence score."""

import math
from typing import List

import structlog

from holder_intel.models.token_data import CompositeScore, Rating, WalletIntelligence

logger = structlog.get_logger(__name__)


class CompositeAggregator:
    """
    Combines wallet records into one token-level score.

    overall = floor(weighted_avg_iq * 0.5
                    + smart_money_percent * 0.3
                    + min(major_holders, 20))

    The weights and cut-offs are business heuristics carried over unchanged
    and pending confirmation by the domain owner.
    """

    WALLET_IQ_WEIGHT = 0.5
    SMART_MONEY_WEIGHT = 0.3
    SMART_MONEY_MIN_IQ = 75
    MAJOR_HOLDER_MIN_PERCENT = 0.5
    MAJOR_HOLDER_MIN_HOLD_SCORE = 17
    MAJOR_HOLDERS_CAP = 20

    RATING_CUTOFFS = (
        (80, Rating.ELITE),
        (60, Rating.SMART),
        (40, Rating.AVERAGE),
    )

    def __init__(self):
        self.logger = logger.bind(component="composite_aggregator")

    @classmethod
    def rate(cls, overall: int) -> Rating:
        for cutoff, rating in cls.RATING_CUTOFFS:
            if overall >= cutoff:
                return rating
        return Rating.DEGEN

    def aggregate(self, records: List[WalletIntelligence]) -> CompositeScore:
        """Compute the composite score for liquidity pools and scored wallets together."""
        if not records:
            return CompositeScore(
                overall=0,
                smart_money_percent=0.0,
                avg_win_rate=0.0,
                rating=Rating.UNKNOWN.value,
            )

        count = len(records)

        # 1. Holding-weighted IQ
        weighted_iq_sum = 0.0
        total_percent = 0.0
        for record in records:
            percent = record.holding_percent or 0.0
            weighted_iq_sum += (record.iq or 0) * percent
            total_percent += percent

        weighted_avg_iq = weighted_iq_sum / total_percent if total_percent > 0 else 0.0
        wallet_iq_component = weighted_avg_iq * self.WALLET_IQ_WEIGHT

        # 2. Smart money share
        smart_money_count = sum(1 for r in records if r.iq >= self.SMART_MONEY_MIN_IQ)
        smart_money_percent = smart_money_count / count * 100
        smart_money_component = smart_money_percent * self.SMART_MONEY_WEIGHT

        # 3. Major holders with strong hold scores
        major_holders = sum(
            1 for r in records
            if r.holding_percent > self.MAJOR_HOLDER_MIN_PERCENT
            and r.hold_score > self.MAJOR_HOLDER_MIN_HOLD_SCORE
        )
        major_holders_component = min(major_holders, self.MAJOR_HOLDERS_CAP)

        overall = math.floor(wallet_iq_component + smart_money_component + major_holders_component)
        avg_win_rate = sum(r.win_rate_value for r in records) / count

        score = CompositeScore(
            overall=overall,
            smart_money_percent=smart_money_percent,
            avg_win_rate=avg_win_rate,
            rating=self.rate(overall).value,
        )

        self.logger.debug("Composite score calculated",
                          overall=overall,
                          rating=score.rating,
                          weighted_avg_iq=round(weighted_avg_iq, 2),
                          smart_money_percent=round(smart_money_percent, 1),
                          major_holders=major_holders)

        return score
