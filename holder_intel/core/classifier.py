"""Holder classification into liquidity pools and ordinary wallets."""

from dataclasses import dataclass, field
from typing import List, Tuple

import structlog

from holder_intel.core.exceptions import SupplyUnavailableError
from holder_intel.models.token_data import HolderRecord, WalletIntelligence, PATTERN_LIQUIDITY_POOL

logger = structlog.get_logger(__name__)


@dataclass
class ClassifiedHolders:
    """Result of splitting a holder list by share of supply."""
    liquidity_pools: List[WalletIntelligence] = field(default_factory=list)
    wallets: List[Tuple[HolderRecord, float]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.liquidity_pools) + len(self.wallets)


class HolderClassifier:
    """Separates structural holders (pools) from wallets worth scoring."""

    # Share of supply (percent, inclusive) at which a holder is treated as a pool
    LIQUIDITY_POOL_THRESHOLD = 25.0

    def __init__(self):
        self.logger = logger.bind(component="holder_classifier")

    @staticmethod
    def holding_percent(amount: float, total_supply: float) -> float:
        """Share of total supply held, rounded to two decimals."""
        return round(amount / total_supply * 100, 2)

    def classify(self, token_address: str, holders: List[HolderRecord],
                 total_supply: float) -> ClassifiedHolders:
        """
        Classify holders by their share of total supply.

        Pools receive a synthetic zero-score record and are never scored.

        Args:
            token_address: Token the holders belong to
            holders: Holders ordered by amount, descending
            total_supply: Token total supply in the same units as holder amounts

        Returns:
            ClassifiedHolders with every input holder in exactly one bucket
        """
        if not total_supply or total_supply <= 0:
            raise SupplyUnavailableError(token_address)

        result = ClassifiedHolders()

        for holder in holders:
            percent = self.holding_percent(holder.amount, total_supply)

            if percent >= self.LIQUIDITY_POOL_THRESHOLD:
                result.liquidity_pools.append(WalletIntelligence(
                    address=holder.address,
                    iq=0,
                    win_rate="0.0",
                    pattern=PATTERN_LIQUIDITY_POOL,
                    holding_amount=holder.amount,
                    holding_percent=percent,
                ))
            else:
                result.wallets.append((holder, percent))

        self.logger.debug("Holders classified",
                          token=token_address,
                          liquidity_pools=len(result.liquidity_pools),
                          wallets=len(result.wallets))

        return result
