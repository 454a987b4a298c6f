"""Unit tests for the composite aggregator."""

import pytest

from holder_intel.core.aggregator import CompositeAggregator
from holder_intel.models.token_data import Rating, WalletIntelligence


def record(iq, pct, hold_score=0, win_rate="0.0", address="w"):
    return WalletIntelligence(address=address, iq=iq, holding_percent=pct,
                              hold_score=hold_score, win_rate=win_rate)


class TestCompositeAggregator:
    """Tests for CompositeAggregator."""

    @pytest.fixture
    def aggregator(self):
        return CompositeAggregator()

    def test_reference_case(self, aggregator):
        """Test weighted IQ 66.67 and 50% smart money give 48 / AVERAGE."""
        score = aggregator.aggregate([record(80, 2), record(40, 1)])

        assert score.overall == 48
        assert score.smart_money_percent == 50.0
        assert score.rating == Rating.AVERAGE.value

    def test_empty_records_are_unknown(self, aggregator):
        """Test no records yields 0 / UNKNOWN rather than DEGEN."""
        score = aggregator.aggregate([])

        assert score.overall == 0
        assert score.rating == "UNKNOWN"
        assert score.smart_money_percent == 0.0
        assert score.avg_win_rate == 0.0

    def test_zero_total_percent_drops_iq_component(self, aggregator):
        """Test weighted IQ is 0 when no record carries a holding share."""
        score = aggregator.aggregate([record(100, 0), record(100, 0)])

        # Only smart money contributes: 100% * 0.3
        assert score.overall == 30
        assert score.rating == Rating.DEGEN.value

    def test_major_holders_require_both_conditions(self, aggregator):
        records = [
            record(0, 1.0, hold_score=18),   # qualifies
            record(0, 0.5, hold_score=30),   # percent not above 0.5
            record(0, 2.0, hold_score=17),   # hold score not above 17
        ]

        score = aggregator.aggregate(records)

        assert score.overall == 1

    def test_major_holders_capped_at_twenty(self, aggregator):
        records = [record(0, 1.0, hold_score=50, address=str(i)) for i in range(30)]

        score = aggregator.aggregate(records)

        assert score.overall == 20

    def test_liquidity_pools_dilute_weighted_iq(self, aggregator):
        """Test zero-IQ pool records still weigh into the holding-weighted IQ."""
        records = [record(0, 30), record(80, 2, hold_score=20), record(40, 1)]

        score = aggregator.aggregate(records)

        # 200/33*0.5 = 3.03, 33.3%*0.3 = 10, one major holder
        assert score.overall == 14
        assert score.rating == Rating.DEGEN.value

    def test_elite_rating(self, aggregator):
        records = [record(120, 5, hold_score=40, address=str(i)) for i in range(10)]

        score = aggregator.aggregate(records)

        # 60 + 30 + 10
        assert score.overall == 100
        assert score.rating == Rating.ELITE.value

    @pytest.mark.parametrize("overall,expected", [
        (100, Rating.ELITE),
        (80, Rating.ELITE),
        (79, Rating.SMART),
        (60, Rating.SMART),
        (59, Rating.AVERAGE),
        (40, Rating.AVERAGE),
        (39, Rating.DEGEN),
        (0, Rating.DEGEN),
    ])
    def test_rating_boundaries(self, overall, expected):
        assert CompositeAggregator.rate(overall) == expected

    def test_smart_money_threshold_inclusive(self, aggregator):
        score = aggregator.aggregate([record(75, 1), record(74, 1)])

        assert score.smart_money_percent == 50.0

    def test_avg_win_rate_treats_malformed_as_zero(self, aggregator):
        records = [
            record(50, 1, win_rate="60.0"),
            record(50, 1, win_rate="N/A"),
            record(50, 1, win_rate=None),
            record(50, 1, win_rate="20"),
        ]

        score = aggregator.aggregate(records)

        assert score.avg_win_rate == pytest.approx(20.0)

    def test_to_dict_formats_percentages(self, aggregator):
        score = aggregator.aggregate([record(80, 2, win_rate="33.33"), record(40, 1)])

        data = score.to_dict()

        assert data["overall"] == 48
        assert data["smart_money"] == "50.0"
        assert data["avg_win_rate"] == "16.7"
        assert data["rating"] == "AVERAGE"
        assert "privacy_metrics" not in data
