# rarity.py
"""
Weighted option picking and the "YxxDxxx" rarity / time code.

Two explicitly named derivations exist for the code:

* rarity_from_timestamp - days elapsed since the matotam epoch (current mints)
* rarity_from_pair      - hash of the sender|receiver pair (legacy tokens)
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, TypeVar

from constants import DAYS_PER_PROJECT_YEAR, MATOTAM_EPOCH_UTC, PRE_EPOCH_CODE
from hashing import hash32
from models import RarityInfo, RarityOption

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=RarityOption)

SECONDS_PER_DAY = 24 * 3600

TIER_LEGENDARY = "legendary"
TIER_RARE = "rare"
TIER_UNCOMMON = "uncommon"
TIER_COMMON = "common"


# ----------------------
# Weighted picker
# ----------------------
def pick_by_probability(options: Sequence[T], roll: float) -> T:
    """
    Cumulative-probability scan over ``options`` in table order.

    Returns the first option whose running sum exceeds ``roll``. Floating
    point drift (or a table summing below 1.0) falls through to the last
    option.
    """
    if not options:
        raise ValueError("Cannot pick from an empty option table")

    acc = 0.0
    for option in options:
        acc += option.probability
        if roll < acc:
            return option
    return options[-1]


def validate_probability_table(options: Sequence[RarityOption], name: str = "table",
                               tolerance: float = 1e-6) -> None:
    """Raise ValueError unless the table's probabilities sum to 1.0."""
    if not options:
        raise ValueError(f"Probability {name} is empty")
    ids = [o.id for o in options]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Probability {name} has duplicate ids")
    for option in options:
        if not 0 < option.probability <= 1:
            raise ValueError(
                f"Probability {name}: option {option.id!r} has probability {option.probability}"
            )
    total = sum(o.probability for o in options)
    if abs(total - 1.0) > tolerance:
        raise ValueError(f"Probability {name} sums to {total:.6f}, expected 1.0")


def probability_to_tier(percent: Optional[float]) -> str:
    """Lower probability means higher tier. ``percent`` is 0..100."""
    if percent is None:
        return TIER_COMMON
    if percent <= 1:
        return TIER_LEGENDARY
    if percent <= 5:
        return TIER_RARE
    if percent <= 20:
        return TIER_UNCOMMON
    return TIER_COMMON


def overall_rating(tiers: Iterable[str]) -> str:
    """Fold per-dimension tiers into one human label."""
    tiers = list(tiers)
    rare_count = tiers.count(TIER_RARE)
    if TIER_LEGENDARY in tiers:
        return "Legendary sigil"
    if rare_count >= 2:
        return "Very rare sigil"
    if rare_count == 1:
        return "Rare sigil"
    if TIER_UNCOMMON in tiers:
        return "Uncommon sigil"
    return "Common sigil"


# ----------------------
# Rarity / time code
# ----------------------
def format_rarity_code(year: int, day: int) -> str:
    return f"Y{max(0, year) % 100:02d}D{max(0, day) % 1000:03d}"


def _utc_midnight(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def rarity_from_timestamp(mint_time: Optional[datetime] = None,
                          epoch: datetime = MATOTAM_EPOCH_UTC) -> RarityInfo:
    """
    Time-based code: ``Y`` = project year, ``D`` = day within it.

    The epoch day is D001. Years are a flat 365 days (leap days ignored), so
    day 365 after the epoch rolls over to Y01D000.
    """
    if mint_time is None:
        mint_time = datetime.now(timezone.utc)

    mint_day = _utc_midnight(mint_time)
    epoch_day = _utc_midnight(epoch)

    if mint_day < epoch_day:
        return RarityInfo(code=PRE_EPOCH_CODE, project_year=0, day_in_year=0)

    diff_days = int((mint_day - epoch_day).total_seconds() // SECONDS_PER_DAY) + 1
    project_year = diff_days // DAYS_PER_PROJECT_YEAR
    day_in_year = diff_days % DAYS_PER_PROJECT_YEAR

    code = format_rarity_code(project_year, day_in_year)
    logger.debug(f"Rarity code {code} for {mint_day.date().isoformat()} ({diff_days} days since epoch)")
    return RarityInfo(code=code, project_year=project_year, day_in_year=day_in_year)


def rarity_from_pair(sender_addr: str, recipient_addr: str) -> RarityInfo:
    """Legacy pair-hash code; independent of the mint date."""
    h = hash32(f"{sender_addr}|{recipient_addr}")
    year = h % 100
    day = (h // 100) % 1000
    return RarityInfo(code=format_rarity_code(year, day), pair_hash=h)
