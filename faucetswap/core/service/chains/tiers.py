"""
Contribution tier thresholds and cooldown arithmetic shared by every chain adapter.
"""

from decimal import Decimal
from typing import List, Optional, Tuple, Union

MS_PER_HOUR = 3_600_000
DEFAULT_COOLDOWN_MS = 24 * MS_PER_HOUR

LEVEL_NAMES = {
    0: "None",
    1: "Bronze",
    2: "Silver",
    3: "Gold",
    4: "Diamond",
}

# Ascending (threshold in human token units, level)
TIER_THRESHOLDS: List[Tuple[Decimal, int]] = [
    (Decimal("0.1"), 1),
    (Decimal("1.0"), 2),
    (Decimal("5.0"), 3),
    (Decimal("10.0"), 4),
]

MAX_LEVEL = TIER_THRESHOLDS[-1][1]

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 stay 0.1
    return Decimal(str(value))


def tier_of(total_donated: Number) -> int:
    """Highest level whose threshold is met or exceeded, 0 when none is"""
    total = _to_decimal(total_donated)
    level = 0
    for threshold, threshold_level in TIER_THRESHOLDS:
        if total >= threshold:
            level = threshold_level
    return level


def level_name(level: int) -> str:
    return LEVEL_NAMES.get(level, "None")


def threshold_for(level: int) -> Optional[Decimal]:
    for threshold, threshold_level in TIER_THRESHOLDS:
        if threshold_level == level:
            return threshold
    return None


def next_level_requirement(total_donated: Number) -> Optional[Decimal]:
    """Amount still missing for the next level, None at the top level"""
    total = _to_decimal(total_donated)
    level = tier_of(total)
    if level >= MAX_LEVEL:
        return None
    return threshold_for(level + 1) - total


def from_smallest_unit(raw_amount: int, decimals: int) -> Decimal:
    """wei / MIST to human units"""
    return Decimal(int(raw_amount)) / (Decimal(10) ** decimals)


def format_amount(value: Decimal) -> str:
    """Plain decimal string without exponent or trailing zeros"""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def compute_remaining_ms(last_claim_ms: Optional[int], cooldown_ms: int, now_ms: int) -> int:
    """max(0, last_claim + cooldown - now); no prior claim means nothing remains"""
    if not last_claim_ms:
        return 0
    return max(0, last_claim_ms + cooldown_ms - now_ms)


def remaining_hours(remaining_ms: int) -> int:
    """Remaining cooldown in whole hours, rounded up"""
    return -(-remaining_ms // MS_PER_HOUR)
