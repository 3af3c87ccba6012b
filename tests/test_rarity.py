# ============================================================================
# tests/test_rarity.py
# Weighted picker, tiers and the YxxDxxx code
# ============================================================================

from datetime import datetime, timedelta, timezone

import pytest

from hashing import hash32
from models import RarityOption
from rarity import (
    format_rarity_code,
    overall_rating,
    pick_by_probability,
    probability_to_tier,
    rarity_from_pair,
    rarity_from_timestamp,
    validate_probability_table,
)
from sigil_engine import SIGIL_COLORS, SIGIL_FRAMES, SIGIL_INTERIORS

TABLE = [
    RarityOption("a", "A", 0.5),
    RarityOption("b", "B", 0.3),
    RarityOption("c", "C", 0.2),
]

UTC = timezone.utc


class TestPicker:
    """Cumulative scan in table order."""

    def test_zero_roll_returns_first(self):
        assert pick_by_probability(TABLE, 0.0).id == "a"

    def test_roll_just_under_one_returns_last(self):
        assert pick_by_probability(TABLE, 0.999999).id == "c"

    def test_middle_of_range(self):
        assert pick_by_probability(TABLE, 0.6).id == "b"

    def test_roll_of_one_falls_through_to_last(self):
        assert pick_by_probability(TABLE, 1.0).id == "c"

    @pytest.mark.parametrize("table", [SIGIL_COLORS, SIGIL_INTERIORS, SIGIL_FRAMES])
    def test_sigil_tables_cover_both_ends(self, table):
        assert pick_by_probability(table, 0.0) is table[0]
        assert pick_by_probability(table, 0.999999) is table[-1]

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            pick_by_probability([], 0.5)


class TestTableValidation:
    def test_valid_table_passes(self):
        validate_probability_table(TABLE)

    def test_sum_below_one_rejected(self):
        with pytest.raises(ValueError, match="sums to"):
            validate_probability_table(TABLE[:2])

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            validate_probability_table([RarityOption("a", "A", 0.5), RarityOption("a", "B", 0.5)])

    def test_zero_probability_rejected(self):
        with pytest.raises(ValueError):
            validate_probability_table([RarityOption("a", "A", 1.0), RarityOption("b", "B", 0.0)])


class TestTiers:
    def test_thresholds(self):
        assert probability_to_tier(1) == "legendary"
        assert probability_to_tier(4.5) == "rare"
        assert probability_to_tier(10) == "uncommon"
        assert probability_to_tier(50) == "common"
        assert probability_to_tier(None) == "common"

    def test_overall_rating(self):
        assert overall_rating(["legendary", "common", "common"]) == "Legendary sigil"
        assert overall_rating(["rare", "rare", "common"]) == "Very rare sigil"
        assert overall_rating(["rare", "uncommon", "common"]) == "Rare sigil"
        assert overall_rating(["uncommon", "uncommon", "uncommon"]) == "Uncommon sigil"
        assert overall_rating(["common"] * 3) == "Common sigil"


class TestTimeCode:
    """Naive 365-day project years counted from 2026-01-01 UTC."""

    def test_epoch_day_is_day_one(self):
        info = rarity_from_timestamp(datetime(2026, 1, 1, tzinfo=UTC))
        assert info.code == "Y00D001"
        assert (info.project_year, info.day_in_year) == (0, 1)

    def test_late_on_epoch_day(self):
        assert rarity_from_timestamp(datetime(2026, 1, 1, 23, 59, 59, tzinfo=UTC)).code == "Y00D001"

    def test_before_epoch_is_pinned(self):
        info = rarity_from_timestamp(datetime(2025, 12, 31, 23, 59, 59, tzinfo=UTC))
        assert info.code == "Y00D000"
        assert (info.project_year, info.day_in_year) == (0, 0)

    def test_mid_march(self):
        assert rarity_from_timestamp(datetime(2026, 3, 14, 12, tzinfo=UTC)).code == "Y00D073"

    def test_year_rollover(self):
        epoch = datetime(2026, 1, 1, tzinfo=UTC)
        assert rarity_from_timestamp(epoch + timedelta(days=364)).code == "Y01D000"
        assert rarity_from_timestamp(epoch + timedelta(days=365)).code == "Y01D001"

    def test_naive_datetime_is_utc(self):
        assert rarity_from_timestamp(datetime(2026, 1, 2)).code == "Y00D002"

    def test_offset_is_normalized_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        # 23:30 on Jan 1 in UTC-5 is already Jan 2 in UTC
        assert rarity_from_timestamp(datetime(2026, 1, 1, 23, 30, tzinfo=eastern)).code == "Y00D002"

    def test_default_is_now(self):
        assert rarity_from_timestamp().code.startswith("Y")


class TestPairCode:
    def test_matches_hash(self):
        h = hash32("addr_a|addr_b")
        info = rarity_from_pair("addr_a", "addr_b")
        assert info.pair_hash == h
        assert info.code == f"Y{h % 100:02d}D{(h // 100) % 1000:03d}"

    def test_direction_matters(self):
        assert rarity_from_pair("x", "y").pair_hash != rarity_from_pair("y", "x").pair_hash

    def test_format(self):
        assert format_rarity_code(3, 7) == "Y03D007"
        assert format_rarity_code(123, 4567) == "Y23D567"
