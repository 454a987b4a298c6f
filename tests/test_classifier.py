"""Unit tests for holder classification."""

import pytest

from holder_intel.core.classifier import HolderClassifier
from holder_intel.core.exceptions import SupplyUnavailableError
from holder_intel.models.token_data import HolderRecord, PATTERN_LIQUIDITY_POOL

from conftest import TOKEN_MINT, wallet_address


class TestHolderClassifier:
    """Tests for HolderClassifier."""

    @pytest.fixture
    def classifier(self):
        return HolderClassifier()

    def test_exact_threshold_is_liquidity_pool(self, classifier):
        """Test a holder at exactly 25.00% is classified as a pool."""
        holders = [HolderRecord(address="pool", amount=2500)]

        result = classifier.classify(TOKEN_MINT, holders, total_supply=10000)

        assert len(result.liquidity_pools) == 1
        assert result.wallets == []
        assert result.liquidity_pools[0].holding_percent == 25.0
        assert result.liquidity_pools[0].is_liquidity_pool

    def test_just_below_threshold_is_wallet(self, classifier):
        """Test a holder at 24.99% is scored as a wallet."""
        holders = [HolderRecord(address="whale", amount=2499)]

        result = classifier.classify(TOKEN_MINT, holders, total_supply=10000)

        assert result.liquidity_pools == []
        assert result.wallets == [(holders[0], 24.99)]

    def test_liquidity_pool_record_is_zeroed(self, classifier):
        """Test pools get a synthetic zero-score record."""
        holders = [HolderRecord(address="pool", amount=600)]

        pool = classifier.classify(TOKEN_MINT, holders, total_supply=1000).liquidity_pools[0]

        assert pool.address == "pool"
        assert pool.iq == 0
        assert pool.win_rate == "0.0"
        assert pool.trades == 0
        assert pool.hold_score == 0
        assert pool.pattern == PATTERN_LIQUIDITY_POOL
        assert pool.holding_amount == 600
        assert pool.holding_percent == 60.0
        assert pool.first_buy_time is None

    def test_every_holder_classified_exactly_once(self, classifier):
        """Test the two buckets partition the input."""
        holders = [HolderRecord(address="pool", amount=400)]
        holders += [HolderRecord(address=wallet_address(i), amount=20) for i in range(30)]

        result = classifier.classify(TOKEN_MINT, holders, total_supply=1000)

        assert result.total == len(holders)
        addresses = [r.address for r in result.liquidity_pools] + [h.address for h, _ in result.wallets]
        assert sorted(addresses) == sorted(h.address for h in holders)

    def test_wallet_order_preserved(self, classifier):
        holders = [HolderRecord(address=wallet_address(i), amount=10 - i) for i in range(5)]

        result = classifier.classify(TOKEN_MINT, holders, total_supply=1000)

        assert [h.address for h, _ in result.wallets] == [h.address for h in holders]

    def test_holding_percent_rounded_to_two_decimals(self, classifier):
        holders = [HolderRecord(address="w", amount=1)]

        _, percent = classifier.classify(TOKEN_MINT, holders, total_supply=3).wallets[0]

        assert percent == 33.33

    def test_empty_holders(self, classifier):
        result = classifier.classify(TOKEN_MINT, [], total_supply=1000)

        assert result.total == 0

    @pytest.mark.parametrize("supply", [0, -1, None])
    def test_missing_supply_raises(self, classifier, supply):
        """Test a zero or missing supply is a supply lookup failure."""
        with pytest.raises(SupplyUnavailableError):
            classifier.classify(TOKEN_MINT, [HolderRecord(address="w", amount=1)], total_supply=supply)
