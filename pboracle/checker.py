"""
Powerball Winning Checker
=========================

Compares a play against a winning drawing and maps the result to the
official Powerball prize structure. Also provides batch checking of the
numerology methods and summary statistics over the checked results.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from pboracle.config import (
    POWERBALL_MAX,
    POWERBALL_MIN,
    WHITE_BALL_COUNT,
    WHITE_BALL_MAX,
    WHITE_BALL_MIN,
)
from pboracle.models import DrawRecord
from pboracle.recovery import safe_execute


class PrizeTier(Enum):
    JACKPOT = "5+PB"
    MATCH_5 = "5+0"
    MATCH_4_PB = "4+PB"
    MATCH_4 = "4+0"
    MATCH_3_PB = "3+PB"
    MATCH_3 = "3+0"
    MATCH_2_PB = "2+PB"
    MATCH_1_PB = "1+PB"
    MATCH_PB = "0+PB"
    NONE = "NONE"


@dataclass(frozen=True)
class Prize:
    label: str
    amount: Optional[int]  # None for the variable jackpot
    display: str


PRIZE_TABLE: Dict[PrizeTier, Prize] = {
    PrizeTier.JACKPOT: Prize("Jackpot", None, "JACKPOT!"),
    PrizeTier.MATCH_5: Prize("Second", 1000000, "$1,000,000"),
    PrizeTier.MATCH_4_PB: Prize("Third", 50000, "$50,000"),
    PrizeTier.MATCH_4: Prize("Fourth", 100, "$100"),
    PrizeTier.MATCH_3_PB: Prize("Fourth", 100, "$100"),
    PrizeTier.MATCH_3: Prize("Fifth", 7, "$7"),
    PrizeTier.MATCH_2_PB: Prize("Fifth", 7, "$7"),
    PrizeTier.MATCH_1_PB: Prize("Sixth", 4, "$4"),
    PrizeTier.MATCH_PB: Prize("Sixth", 4, "$4"),
    PrizeTier.NONE: Prize("None", 0, "No win"),
}

# (white matches, Powerball matched) -> tier; anything missing is NONE
_TIER_LOOKUP: Dict[Tuple[int, bool], PrizeTier] = {
    (5, True): PrizeTier.JACKPOT,
    (5, False): PrizeTier.MATCH_5,
    (4, True): PrizeTier.MATCH_4_PB,
    (4, False): PrizeTier.MATCH_4,
    (3, True): PrizeTier.MATCH_3_PB,
    (3, False): PrizeTier.MATCH_3,
    (2, True): PrizeTier.MATCH_2_PB,
    (1, True): PrizeTier.MATCH_1_PB,
    (0, True): PrizeTier.MATCH_PB,
}

# Best first
TIER_ORDER: List[PrizeTier] = list(PrizeTier)

NOTABLE_TIERS = {
    PrizeTier.JACKPOT,
    PrizeTier.MATCH_5,
    PrizeTier.MATCH_4_PB,
    PrizeTier.MATCH_4,
    PrizeTier.MATCH_3_PB,
}


@dataclass(frozen=True)
class CheckResult:
    tier: PrizeTier
    white_matches: int
    red_match: bool

    @property
    def prize(self) -> Prize:
        return PRIZE_TABLE[self.tier]

    @property
    def is_win(self) -> bool:
        return self.tier is not PrizeTier.NONE


@dataclass
class CheckedMethod:
    """A numerology result together with how it fared against the winning draw."""
    result: Any  # NumerologyResult
    check: Optional[CheckResult]
    status: str = "checked"

    @property
    def is_win(self) -> bool:
        return self.check is not None and self.check.is_win


def _is_play(white: Any) -> bool:
    return isinstance(white, (list, tuple, set, frozenset)) and len(white) == WHITE_BALL_COUNT


def _evaluate(candidate_white, candidate_red, winning_white, winning_red) -> CheckResult:
    if not _is_play(candidate_white) or not _is_play(winning_white):
        logger.error(f"Invalid white ball count for winning check: {candidate_white!r} vs {winning_white!r}")
        return CheckResult(PrizeTier.NONE, 0, False)

    white_matches = len(set(candidate_white) & set(winning_white))
    red_match = candidate_red == winning_red
    tier = _TIER_LOOKUP.get((white_matches, red_match), PrizeTier.NONE)
    logger.debug(f"Match analysis: {white_matches} white, Powerball {red_match} -> {tier.value}")
    return CheckResult(tier, white_matches, red_match)


def evaluate_play(
    candidate_white: Sequence[int],
    candidate_red: int,
    winning_white: Sequence[int],
    winning_red: int,
) -> CheckResult:
    """
    Compares a play against the winning numbers.

    Matching uses set membership, so order and repeated numbers in the play
    do not matter. Malformed input evaluates to PrizeTier.NONE.
    """
    return safe_execute(
        "evaluate_play",
        _evaluate,
        CheckResult(PrizeTier.NONE, 0, False),
        candidate_white,
        candidate_red,
        winning_white,
        winning_red,
    )


def check_winnings(
    candidate_white: Sequence[int],
    candidate_red: int,
    winning_white: Sequence[int],
    winning_red: int,
) -> PrizeTier:
    """Returns the prize tier of a play against the winning numbers."""
    return evaluate_play(candidate_white, candidate_red, winning_white, winning_red).tier


def validate_numbers(white: Any, red: Any) -> List[str]:
    """
    Lists every rule a play breaks; an empty list means the play is valid.
    """
    errors = []
    if not isinstance(white, (list, tuple)):
        errors.append("White numbers must be a list")
    else:
        if len(white) != WHITE_BALL_COUNT:
            errors.append(f"White numbers must contain {WHITE_BALL_COUNT} numbers, got {len(white)}")
        for index, number in enumerate(white, start=1):
            if not isinstance(number, int) or isinstance(number, bool) or not WHITE_BALL_MIN <= number <= WHITE_BALL_MAX:
                errors.append(f"White ball {index} invalid: {number} (must be {WHITE_BALL_MIN}-{WHITE_BALL_MAX})")
        if len(set(white)) != len(white):
            errors.append("White numbers contain duplicates")

    if not isinstance(red, int) or isinstance(red, bool) or not POWERBALL_MIN <= red <= POWERBALL_MAX:
        errors.append(f"Red Powerball invalid: {red} (must be {POWERBALL_MIN}-{POWERBALL_MAX})")

    return errors


def check_methods_against_winning(method_results: Sequence[Any], winning: Optional[DrawRecord]) -> List[CheckedMethod]:
    """
    Checks every numerology result against the winning drawing.

    Results with invalid numbers are marked instead of checked. Without a
    winning drawing nothing is compared.
    """
    if winning is None:
        logger.warning("No winning numbers available for comparison")
        return [CheckedMethod(result, None, status="no comparison available") for result in method_results]

    checked = []
    for result in method_results:
        errors = validate_numbers(list(result.whites), result.red)
        if errors:
            logger.error(f"Number validation failed for {result.name}: {errors}")
            checked.append(CheckedMethod(result, None, status="invalid numbers"))
            continue
        check = evaluate_play(result.whites, result.red, winning.white, winning.red)
        checked.append(CheckedMethod(result, check))

    summary: Dict[str, int] = {}
    for item in checked:
        tier = item.check.tier.value if item.check else PrizeTier.NONE.value
        summary[tier] = summary.get(tier, 0) + 1
    logger.debug(f"Batch checking completed for {len(checked)} methods: {summary}")
    return checked


def compare_prize_tiers(first: PrizeTier, second: PrizeTier) -> int:
    """1 if `first` is the better tier, -1 if worse, 0 if equal."""
    first_index = TIER_ORDER.index(first)
    second_index = TIER_ORDER.index(second)
    if first_index < second_index:
        return 1
    if first_index > second_index:
        return -1
    return 0


def calculate_win_statistics(checked_methods: Sequence[CheckedMethod]) -> Dict[str, Any]:
    """
    Summarizes a batch of checked methods.

    `total_winnings` excludes the jackpot, whose amount is not fixed.
    """
    stats: Dict[str, Any] = {
        "total_methods": len(checked_methods),
        "winning_methods": 0,
        "total_winnings": 0,
        "prize_breakdown": {},
        "biggest_win": None,
        "win_percentage": 0.0,
    }

    best_tier: Optional[PrizeTier] = None
    for item in checked_methods:
        if not item.is_win:
            continue
        tier = item.check.tier
        stats["winning_methods"] += 1
        stats["prize_breakdown"][tier.value] = stats["prize_breakdown"].get(tier.value, 0) + 1

        amount = PRIZE_TABLE[tier].amount
        if amount is not None:
            stats["total_winnings"] += amount

        if best_tier is None or compare_prize_tiers(tier, best_tier) > 0:
            best_tier = tier
            stats["biggest_win"] = {
                "method": item.result.name,
                "tier": tier.value,
                "prize": PRIZE_TABLE[tier].display,
            }

    if stats["total_methods"]:
        stats["win_percentage"] = round(stats["winning_methods"] / stats["total_methods"] * 100, 1)

    logger.debug(f"Win statistics calculated: {stats}")
    return stats


def find_notable_wins(checked_methods: Sequence[CheckedMethod]) -> List[Dict[str, Any]]:
    """Returns the wins of $100 or more (and the jackpot)."""
    notable = []
    for item in checked_methods:
        if item.is_win and item.check.tier in NOTABLE_TIERS:
            prize = PRIZE_TABLE[item.check.tier]
            notable.append({
                "method": item.result.name,
                "tier": item.check.tier.value,
                "prize": prize.display,
                "amount": format_prize_amount(prize.amount),
                "numbers": f"{', '.join(str(n) for n in item.result.whites)} + {item.result.red}",
            })

    for win in notable:
        logger.info(f"NOTABLE WIN: {win['method']} - {win['prize']}")
    return notable


def format_prize_amount(amount: Optional[int]) -> str:
    """$1.0M / $50K / $7 style amounts; None means the jackpot."""
    if amount is None:
        return "Jackpot"
    if amount == 0:
        return "$0"
    if amount >= 1000000:
        return f"${amount / 1000000:.1f}M"
    if amount >= 1000:
        return f"${amount / 1000:.0f}K"
    return f"${amount}"


def format_jackpot_amount(jackpot: Optional[str]) -> str:
    """Formats a stored jackpot digit string as 1.2B, 350M, 50K or a plain amount."""
    if not jackpot or jackpot in ("0", "Unknown"):
        return "Unknown"
    try:
        amount = int(jackpot)
    except ValueError:
        return "Unknown"

    if amount >= 1000000000:
        return f"{amount / 1000000000:.1f}B"
    if amount >= 1000000:
        return f"{amount / 1000000:.0f}M"
    if amount >= 1000:
        return f"{amount / 1000:.0f}K"
    return f"{amount:,}"
