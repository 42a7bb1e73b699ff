"""
Numerology Generators
=====================

Twenty-five "prediction" methods that turn the current moment (and, for the
frequency method, the stored history) into a Powerball play. They are for
entertainment only: every method is a deterministic formula over calendar
values and a few famous constants.

Every generator returns a NumerologyResult whose whites are 5 distinct
ascending numbers in [1, 69] and whose red is in [1, 26].
"""
import math
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Sequence

from loguru import logger

from pboracle.config import (
    POWERBALL_MAX,
    POWERBALL_MIN,
    WHITE_BALL_COUNT,
    WHITE_BALL_MAX,
    WHITE_BALL_MIN,
)
from pboracle.date_utils import DateManager, day_of_year, julian_day
from pboracle.models import Dataset
from pboracle.recovery import safe_execute

# Mathematical constants
PI_DIGITS = "31415926535"
EULER_DIGITS = "27182818284"
GOLDEN_RATIO = 1.618033989
FIBONACCI_SEQUENCE = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144, 233, 377, 610, 987, 1597, 2584, 4181, 6765]
PRIME_NUMBERS = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67]
CATALAN_NUMBERS = [1, 1, 2, 5, 14, 42, 132, 429, 1430, 4862, 16796, 58786]

# Sacred alphabets
GEMATRIA_VALUES = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8, "I": 9, "J": 10,
    "K": 20, "L": 30, "M": 40, "N": 50, "O": 60, "P": 70, "Q": 80, "R": 90, "S": 100,
    "T": 200, "U": 300, "V": 400, "W": 500, "X": 600, "Y": 700, "Z": 800,
}
ELDER_FUTHARK_RUNES = {
    "F": 1, "U": 2, "TH": 3, "A": 4, "R": 5, "K": 6, "G": 7, "W": 8, "H": 9, "N": 10,
    "I": 11, "J": 12, "EI": 13, "P": 14, "Z": 15, "S": 16, "T": 17, "B": 18, "E": 19,
    "M": 20, "L": 21, "NG": 22, "D": 23, "O": 24,
}
OGHAM_TREE_VALUES = {
    "Birch": 1, "Rowan": 2, "Alder": 3, "Willow": 4, "Ash": 5, "Hawthorn": 6, "Oak": 7,
    "Holly": 8, "Hazel": 9, "Vine": 10, "Ivy": 11, "Reed": 12, "Blackthorn": 13,
    "Elder": 14, "Fir": 15, "Furze": 16, "Heather": 17, "Poplar": 18, "Yew": 19, "Grove": 20,
}

# Vedic and eastern traditions
VEDIC_PLANETS = {"Sun": 1, "Moon": 2, "Jupiter": 3, "Rahu": 4, "Mercury": 5, "Venus": 6, "Ketu": 7, "Saturn": 8, "Mars": 9}
VEDIC_NAKSHATRAS = list(range(1, 28))
ISLAMIC_SACRED = [3, 7, 19, 40, 99, 313, 786]
ISLAMIC_BISMILLAH = 786
BUDDHIST_PRIMARY = 108

# Astrology (orbital periods in days)
PLANETARY_CYCLES = {
    "Mercury": 87.97, "Venus": 224.7, "Earth": 365.25, "Mars": 686.98,
    "Jupiter": 4332.59, "Saturn": 10759.22, "Uranus": 30688.5, "Neptune": 60182,
}
ZODIAC_DEGREES = {
    "Aries": 0, "Taurus": 30, "Gemini": 60, "Cancer": 90, "Leo": 120, "Virgo": 150,
    "Libra": 180, "Scorpio": 210, "Sagittarius": 240, "Capricorn": 270, "Aquarius": 300, "Pisces": 330,
}
LUNAR_REFERENCE_NEW_MOON = datetime(2024, 1, 11)
LUNAR_CYCLE_DAYS = 29.53059
PLANETARY_EPOCH = datetime(2000, 1, 1)

# Divination and calendars
TAROT_TOTAL_CARDS = 78
TAROT_MAJOR_ARCANA = 22
MAYAN_TZOLKIN_DAYS = 260
MAYAN_BASE_DATE = datetime(2012, 12, 21)
MAYAN_DAY_SIGNS = list(range(1, 21))
MAYAN_TRECENA = list(range(1, 14))
CHINESE_BASE_YEAR = 1924  # Year of the Rat
CHINESE_ANIMALS = ["Rat", "Ox", "Tiger", "Rabbit", "Dragon", "Snake", "Horse", "Goat", "Monkey", "Rooster", "Dog", "Pig"]
CHINESE_ELEMENTS = ["Wood", "Fire", "Earth", "Metal", "Water"]
HEBREW_YEAR_OFFSET = 3760
JEWISH_DAYS_IN_MONTH = [30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29]
KABBALAH_SEPHIROT = list(range(1, 11))
KABBALAH_PATHS = 22
I_CHING_HEXAGRAMS = 64
I_CHING_LINES = 6

ERROR_PLACEHOLDER_WHITES = [1, 2, 3, 4, 5]
ERROR_PLACEHOLDER_RED = 1
NO_DATA_WHITES = [6, 8, 20, 26, 32]
NO_DATA_RED = 13
EMPTY_FREQUENCY_WHITES = [1, 15, 30, 45, 60]
EMPTY_FREQUENCY_RED = 1


@dataclass
class NumerologyResult:
    name: str
    category: str
    whites: List[int] = field(default_factory=list)
    red: int = POWERBALL_MIN
    note: str = ""
    has_error: bool = False

    def numbers_display(self) -> str:
        return f"{', '.join(str(n) for n in self.whites)} + {self.red}"


class CalculationMethod(NamedTuple):
    name: str
    category: str
    func: Callable[..., NumerologyResult]


def _reduce(number: int, minimum: int, maximum: int) -> int:
    return (number - minimum) % (maximum - minimum + 1) + minimum


def ensure_valid_numbers(
    numbers: Sequence[int],
    minimum: int,
    maximum: int,
    count: int,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """
    Reduces candidates to `count` distinct numbers in [minimum, maximum].

    Candidates are taken in order; out-of-range values are folded back into
    the range and later duplicates are discarded. Missing slots are padded
    with random unused numbers. The result is sorted ascending.
    """
    rng = rng or random
    valid: List[int] = []
    for number in numbers:
        if len(valid) >= count:
            break
        number = int(number)
        if not minimum <= number <= maximum:
            number = _reduce(number, minimum, maximum)
        if number not in valid:
            valid.append(number)

    while len(valid) < count:
        number = rng.randint(minimum, maximum)
        if number not in valid:
            valid.append(number)

    return sorted(valid)


def _whites(numbers: Sequence[int]) -> List[int]:
    return ensure_valid_numbers(numbers, WHITE_BALL_MIN, WHITE_BALL_MAX, WHITE_BALL_COUNT)


def _red(number: int) -> int:
    return _reduce(int(number), POWERBALL_MIN, POWERBALL_MAX)


def _naive(moment: datetime) -> datetime:
    return moment.replace(tzinfo=None)


def _days_between(moment: datetime, reference: datetime) -> float:
    return (_naive(moment) - reference).total_seconds() / 86400


def lunar_phase(moment: datetime) -> int:
    """Index 0-7 of the lunar phase (0 is new moon)."""
    days_since_new = _days_between(moment, LUNAR_REFERENCE_NEW_MOON)
    phase = (days_since_new % LUNAR_CYCLE_DAYS) / LUNAR_CYCLE_DAYS
    return int(phase * 8)


def planetary_position(planet: str, moment: datetime) -> int:
    """Simplified heliocentric longitude in whole degrees, 0-359."""
    cycle = PLANETARY_CYCLES.get(planet, 365.25)
    position = _days_between(moment, PLANETARY_EPOCH) / cycle * 360
    return int(math.floor(position % 360))


def chinese_zodiac_index(year: int) -> int:
    return (year - CHINESE_BASE_YEAR) % 12


def hebrew_year(moment: datetime) -> int:
    return moment.year + HEBREW_YEAR_OFFSET


def mayan_tzolkin(moment: datetime) -> int:
    days = math.floor(_days_between(moment, MAYAN_BASE_DATE))
    return days % MAYAN_TZOLKIN_DAYS


def calculate_gematria(text: str) -> int:
    return sum(GEMATRIA_VALUES.get(char, 0) for char in text.upper())


# Mathematical methods

def calculate_lunar_numbers(now: datetime) -> NumerologyResult:
    phase = lunar_phase(now)
    lunar_day = now.day + phase
    numbers = [(lunar_day * (i + 1) * 7) % 69 + 1 for i in range(8)]
    return NumerologyResult(
        "Lunar Calculations", "mathematical", _whites(numbers), _red(phase * 3 + now.day + 1),
        f"Dynamic - Lunar Phase: {phase}/8, Lunar influence: {lunar_day}",
    )


def calculate_fibonacci_numbers(now: datetime) -> NumerologyResult:
    start = day_of_year(now) % 15
    numbers = [FIBONACCI_SEQUENCE[(start + i) % len(FIBONACCI_SEQUENCE)] % 69 + 1 for i in range(8)]
    red = FIBONACCI_SEQUENCE[start % len(FIBONACCI_SEQUENCE)] % 26 + 1
    return NumerologyResult(
        "Fibonacci Sequence", "mathematical", _whites(numbers), _red(red),
        f"Static - Fibonacci sequence starting at index {start}",
    )


def calculate_golden_ratio_numbers(now: datetime) -> NumerologyResult:
    timestamp = int(now.timestamp() * 1000)
    numbers = [int((GOLDEN_RATIO * timestamp * i) % 69) + 1 for i in range(1, 9)]
    red = int((GOLDEN_RATIO * timestamp) % 26) + 1
    return NumerologyResult(
        "Golden Ratio", "mathematical", _whites(numbers), _red(red),
        f"Hourly - Golden Ratio phi = {GOLDEN_RATIO:.6f}",
    )


def _digit_pairs(digits: str, start: int, default_first: str, default_second: str) -> List[int]:
    numbers = []
    for i in range(8):
        first = digits[start + i] if start + i < len(digits) else default_first
        second = digits[start + i + 1] if start + i + 1 < len(digits) else default_second
        numbers.append((int(first) * 10 + int(second)) % 69 + 1)
    return numbers


def calculate_pi_numbers(now: datetime) -> NumerologyResult:
    start = day_of_year(now) % (len(PI_DIGITS) - 2)
    numbers = _digit_pairs(PI_DIGITS, start, "3", "1")
    red = (int(PI_DIGITS[start % len(PI_DIGITS)]) * 3) % 26 + 1
    return NumerologyResult(
        "Pi Sequence", "mathematical", _whites(numbers), _red(red),
        f"Daily - Pi digits starting at position {start}",
    )


def calculate_euler_numbers(now: datetime) -> NumerologyResult:
    start = day_of_year(now) % (len(EULER_DIGITS) - 2)
    numbers = _digit_pairs(EULER_DIGITS, start, "2", "7")
    red = (int(EULER_DIGITS[start % len(EULER_DIGITS)]) * 3) % 26 + 1
    return NumerologyResult(
        "Euler Numbers", "mathematical", _whites(numbers), _red(red),
        f"Daily - Euler's e digits starting at position {start}",
    )


def calculate_sacred_geometry(now: datetime) -> NumerologyResult:
    ratios = [1.732, GOLDEN_RATIO, math.pi, math.e, math.sqrt(2)]
    numbers = [int((ratios[i % len(ratios)] * now.day * (i + 1)) % 69) + 1 for i in range(8)]
    red = int((GOLDEN_RATIO * now.day) % 26) + 1
    return NumerologyResult(
        "Sacred Geometry", "mathematical", _whites(numbers), _red(red),
        f"Daily - Sacred geometry: sqrt3, phi, pi, e, sqrt2 on day {now.day}",
    )


# Sacred methods

def calculate_gematria_numbers(now: datetime) -> NumerologyResult:
    date_letters = "".join(char for char in now.strftime("%a %b %d %Y").upper() if char.isalpha())
    total = calculate_gematria(date_letters)
    numbers = [(total * i) % 69 + 1 for i in range(1, 9)]
    return NumerologyResult(
        "Gematria", "sacred", _whites(numbers), _red(total % 26 + 1),
        f'Daily - Gematria sum of "{date_letters}": {total}',
    )


def calculate_kabbalah_numbers(now: datetime) -> NumerologyResult:
    numbers = [(KABBALAH_SEPHIROT[i % 10] * now.day * (i + 1)) % 69 + 1 for i in range(8)]
    red = (KABBALAH_PATHS + now.day) % 26 + 1
    return NumerologyResult(
        "Kabbalah Tree", "sacred", _whites(numbers), _red(red),
        f"Daily - Tree of Life: 10 Sephirot, 22 Paths, Day: {now.day}",
    )


def calculate_vedic_numbers(now: datetime) -> NumerologyResult:
    nakshatra = VEDIC_NAKSHATRAS[day_of_year(now) % 27]
    numbers = [(planet * nakshatra * (i + 1)) % 69 + 1 for i, planet in enumerate(VEDIC_PLANETS.values())]
    return NumerologyResult(
        "Vedic Numbers", "sacred", _whites(numbers), _red(BUDDHIST_PRIMARY % 26 + 1),
        f"Daily - Vedic Nakshatra: {nakshatra}/27, Sacred 108",
    )


def calculate_rune_numbers(now: datetime) -> NumerologyResult:
    runes = list(ELDER_FUTHARK_RUNES.values())
    numbers = [(runes[(now.day + i) % len(runes)] * (i + 1) * 3) % 69 + 1 for i in range(8)]
    red = runes[now.day % len(runes)] % 26 + 1
    return NumerologyResult(
        "Elder Futhark Runes", "sacred", _whites(numbers), _red(red),
        f"Daily - Elder Futhark Runes, Day: {now.day}",
    )


def calculate_tarot_numbers(now: datetime) -> NumerologyResult:
    card = day_of_year(now) % TAROT_TOTAL_CARDS
    numbers = [(((card + i) % TAROT_TOTAL_CARDS) * 3 + i * 7) % 69 + 1 for i in range(8)]
    arcana = "Major" if card < TAROT_MAJOR_ARCANA else "Minor"
    return NumerologyResult(
        "Tarot Cards", "sacred", _whites(numbers), _red(card % 26 + 1),
        f"Daily - Tarot Card: {card}/78 ({arcana} Arcana)",
    )


def calculate_islamic_numbers(now: datetime) -> NumerologyResult:
    name_index = now.day % 99
    numbers = [(sacred + name_index * (i + 1)) % 69 + 1 for i, sacred in enumerate(ISLAMIC_SACRED)]
    return NumerologyResult(
        "Islamic Sacred", "sacred", _whites(numbers), _red(ISLAMIC_BISMILLAH % 26 + 1),
        f"Daily - 99 Names {name_index + 1}/99, Bismillah: {ISLAMIC_BISMILLAH}",
    )


def calculate_ogham_numbers(now: datetime) -> NumerologyResult:
    trees = list(OGHAM_TREE_VALUES.values())
    numbers = [(trees[(now.month + i) % len(trees)] * (i + 1) * 5) % 69 + 1 for i in range(8)]
    red = trees[now.month % len(trees)] % 26 + 1
    return NumerologyResult(
        "Celtic Ogham", "sacred", _whites(numbers), _red(red),
        f"Monthly - Celtic Ogham Trees, Month: {now.month}",
    )


def calculate_angel_numbers(now: datetime) -> NumerologyResult:
    pattern = now.hour // 3 + 1
    numbers = [(pattern * 11 * i + now.minute) % 69 + 1 for i in range(1, 9)]
    red = (pattern * 3 + now.minute) % 26 + 1
    return NumerologyResult(
        "Angel Numbers", "sacred", _whites(numbers), _red(red),
        f"Hourly - Angel pattern: {str(pattern) * 3}, Time: {now.hour}:{now.minute:02d}",
    )


def calculate_i_ching(now: datetime) -> NumerologyResult:
    day = day_of_year(now)
    hexagram = day % I_CHING_HEXAGRAMS + 1
    numbers = [(hexagram * i * I_CHING_LINES) % 69 + 1 for i in range(1, 9)]
    return NumerologyResult(
        "I Ching", "sacred", _whites(numbers), _red(hexagram % 26 + 1),
        f"Daily - I Ching Hexagram: {hexagram}/64, Day: {day}",
    )


# Astrological methods

def calculate_planetary_numbers(now: datetime) -> NumerologyResult:
    planets = ["Mercury", "Venus", "Mars", "Jupiter", "Saturn"]
    numbers = [(planetary_position(planet, now) + i * 13) % 69 + 1 for i, planet in enumerate(planets)]
    jupiter = planetary_position("Jupiter", now)
    return NumerologyResult(
        "Planetary Positions", "astrological", _whites(numbers), _red(jupiter % 26 + 1),
        f"Dynamic - Planetary positions, Jupiter: {jupiter} deg",
    )


def calculate_zodiac_numbers(now: datetime) -> NumerologyResult:
    sign_index = int(day_of_year(now) / 30.44) % 12
    sign = list(ZODIAC_DEGREES)[sign_index]
    base_angle = ZODIAC_DEGREES[sign]
    numbers = [((base_angle + i * 15) % 360) // 5 % 69 + 1 for i in range(8)]
    red = base_angle // 13 % 26 + 1
    return NumerologyResult(
        "Zodiac Degrees", "astrological", _whites(numbers), _red(red),
        f"Daily - Zodiac: {sign}, Base: {base_angle} deg",
    )


def calculate_solar_cycle_numbers(now: datetime) -> NumerologyResult:
    jdn = julian_day(now)
    solar_cycle = jdn % 11
    numbers = [(solar_cycle * (i + 1) * 17 + jdn) % 69 + 1 for i in range(8)]
    return NumerologyResult(
        "Solar Cycles", "astrological", _whites(numbers), _red((solar_cycle * 3) % 26 + 1),
        f"Dynamic - Solar Cycle: {solar_cycle}/11, Julian Day: {jdn}",
    )


# Advanced methods

def calculate_chaos_numbers(now: datetime) -> NumerologyResult:
    # Logistic map seeded by the hour
    current = (now.hour + 1) / 24
    numbers = []
    for _ in range(8):
        current = (current * 3.7 * (1 - current)) % 1
        numbers.append(int(current * 69) + 1)
    return NumerologyResult(
        "Chaos Theory", "advanced", _whites(numbers), _red(int(current * 26) + 1),
        f"Hourly - Chaos Theory (Logistic Map), Hour: {now.hour}",
    )


def calculate_prime_gap_numbers(now: datetime) -> NumerologyResult:
    start = day_of_year(now) % (len(PRIME_NUMBERS) - 1)
    numbers = []
    for i in range(8):
        index = (start + i) % len(PRIME_NUMBERS)
        gap = PRIME_NUMBERS[(index + 1) % len(PRIME_NUMBERS)] - PRIME_NUMBERS[index]
        numbers.append((PRIME_NUMBERS[index] + gap * 5) % 69 + 1)
    return NumerologyResult(
        "Prime Gaps", "advanced", _whites(numbers), _red(PRIME_NUMBERS[start] % 26 + 1),
        f"Daily - Prime gaps, Starting prime: {PRIME_NUMBERS[start]}",
    )


def calculate_catalan_numbers(now: datetime) -> NumerologyResult:
    start = now.minute % len(CATALAN_NUMBERS)
    numbers = [(CATALAN_NUMBERS[(start + i) % len(CATALAN_NUMBERS)] * (i + 1)) % 69 + 1 for i in range(8)]
    return NumerologyResult(
        "Catalan Numbers", "advanced", _whites(numbers), _red(CATALAN_NUMBERS[start] % 26 + 1),
        f"Hourly - Catalan numbers, Index: {start}, Minute: {now.minute}",
    )


# Temporal methods

def calculate_chinese_numbers(now: datetime) -> NumerologyResult:
    animal_index = chinese_zodiac_index(now.year)
    element_index = (animal_index // 2) % 5
    numbers = [(animal_index * (i + 1) * 7 + element_index * 11) % 69 + 1 for i in range(8)]
    return NumerologyResult(
        "Chinese Calendar", "temporal", _whites(numbers), _red((animal_index + element_index) % 26 + 1),
        f"Yearly - Chinese: {CHINESE_ELEMENTS[element_index]} {CHINESE_ANIMALS[animal_index]}, "
        f"Cycle: {now.year % 60}/60",
    )


def calculate_jewish_numbers(now: datetime) -> NumerologyResult:
    year = hebrew_year(now)
    numbers = [(days * now.month * (i + 1)) % 69 + 1 for i, days in enumerate(JEWISH_DAYS_IN_MONTH)]
    return NumerologyResult(
        "Jewish Calendar", "temporal", _whites(numbers), _red(year % 26 + 1),
        f"Monthly - Hebrew year: {year}, Month: {now.month}",
    )


def calculate_mayan_numbers(now: datetime) -> NumerologyResult:
    tzolkin = mayan_tzolkin(now)
    day_sign = MAYAN_DAY_SIGNS[tzolkin % 20]
    trecena = MAYAN_TRECENA[tzolkin // 20]
    numbers = [(day_sign * trecena * (i + 1)) % 69 + 1 for i in range(8)]
    return NumerologyResult(
        "Mayan Tzolkin", "temporal", _whites(numbers), _red(tzolkin % 26 + 1),
        f"Daily - Mayan Tzolkin: {tzolkin}/260, Sign: {day_sign}, Trecena: {trecena}",
    )


# Statistical method

def calculate_frequency_analysis(now: datetime, dataset: Optional[Dataset] = None) -> NumerologyResult:
    """
    Hot numbers (most drawn) on even days of the month, cold numbers (least
    drawn) on odd days. Falls back to fixed sets when there is no history.
    """
    name, category = "Frequency Analysis", "statistical"
    if dataset is None or not dataset.results:
        return NumerologyResult(
            name, category, list(NO_DATA_WHITES), NO_DATA_RED,
            "Error - No lottery data available",
        )

    white_counts = dataset.frequency.get("white", {})
    red_counts = dataset.frequency.get("red", {})
    if not sum(white_counts.values()) or not sum(red_counts.values()):
        return NumerologyResult(
            name, category, list(EMPTY_FREQUENCY_WHITES), EMPTY_FREQUENCY_RED,
            f"Error - Frequency data is empty. Results: {len(dataset.results)}",
        )

    # Stable sort keeps ties in ascending number order
    white_ranked = sorted(sorted(white_counts), key=lambda n: white_counts[n], reverse=True)
    red_ranked = sorted(sorted(red_counts), key=lambda n: red_counts[n], reverse=True)

    use_hot = now.day % 2 == 0
    if use_hot:
        whites, red = white_ranked[:WHITE_BALL_COUNT], red_ranked[0]
    else:
        whites, red = white_ranked[-WHITE_BALL_COUNT:], red_ranked[-1]

    updated = DateManager.format_date_for_display(dataset.last_updated[:10]) if dataset.last_updated else "Unknown"
    return NumerologyResult(
        name, category, sorted(whites), red,
        f"Dynamic - {'Hot' if use_hot else 'Cold'} numbers from {len(dataset.results)} drawings (Updated: {updated})",
    )


CALCULATION_METHODS: List[CalculationMethod] = [
    CalculationMethod("Lunar Calculations", "mathematical", calculate_lunar_numbers),
    CalculationMethod("Fibonacci Sequence", "mathematical", calculate_fibonacci_numbers),
    CalculationMethod("Golden Ratio", "mathematical", calculate_golden_ratio_numbers),
    CalculationMethod("Pi Sequence", "mathematical", calculate_pi_numbers),
    CalculationMethod("Euler Numbers", "mathematical", calculate_euler_numbers),
    CalculationMethod("Gematria", "sacred", calculate_gematria_numbers),
    CalculationMethod("Kabbalah Tree", "sacred", calculate_kabbalah_numbers),
    CalculationMethod("Vedic Numbers", "sacred", calculate_vedic_numbers),
    CalculationMethod("Elder Futhark Runes", "sacred", calculate_rune_numbers),
    CalculationMethod("Tarot Cards", "sacred", calculate_tarot_numbers),
    CalculationMethod("Islamic Sacred", "sacred", calculate_islamic_numbers),
    CalculationMethod("Celtic Ogham", "sacred", calculate_ogham_numbers),
    CalculationMethod("Planetary Positions", "astrological", calculate_planetary_numbers),
    CalculationMethod("Zodiac Degrees", "astrological", calculate_zodiac_numbers),
    CalculationMethod("Solar Cycles", "astrological", calculate_solar_cycle_numbers),
    CalculationMethod("Chaos Theory", "advanced", calculate_chaos_numbers),
    CalculationMethod("Prime Gaps", "advanced", calculate_prime_gap_numbers),
    CalculationMethod("Catalan Numbers", "advanced", calculate_catalan_numbers),
    CalculationMethod("Chinese Calendar", "temporal", calculate_chinese_numbers),
    CalculationMethod("Jewish Calendar", "temporal", calculate_jewish_numbers),
    CalculationMethod("Mayan Tzolkin", "temporal", calculate_mayan_numbers),
    CalculationMethod("Angel Numbers", "sacred", calculate_angel_numbers),
    CalculationMethod("I Ching", "sacred", calculate_i_ching),
    CalculationMethod("Sacred Geometry", "mathematical", calculate_sacred_geometry),
    CalculationMethod("Frequency Analysis", "statistical", calculate_frequency_analysis),
]

STATISTICAL_METHODS = {"Frequency Analysis"}


def is_valid_play(whites: Sequence[int], red: int) -> bool:
    return (
        len(whites) == WHITE_BALL_COUNT
        and len(set(whites)) == WHITE_BALL_COUNT
        and all(WHITE_BALL_MIN <= n <= WHITE_BALL_MAX for n in whites)
        and POWERBALL_MIN <= red <= POWERBALL_MAX
    )


def error_placeholder(method: CalculationMethod, reason: str) -> NumerologyResult:
    return NumerologyResult(
        method.name, method.category, list(ERROR_PLACEHOLDER_WHITES), ERROR_PLACEHOLDER_RED,
        f"Error - {reason}", has_error=True,
    )


def generate_all_methods(now: Optional[datetime] = None, dataset: Optional[Dataset] = None) -> List[NumerologyResult]:
    """
    Runs every registered method.

    A method that raises or produces an invalid play is replaced by an error
    placeholder, so the result always has one entry per registered method in
    registry order.

    Args:
        now: Moment the formulas are evaluated at (defaults to the current ET time)
        dataset: Stored history for the frequency method

    Returns:
        List[NumerologyResult]: One result per method.
    """
    now = now or DateManager.get_current_et_time()
    logger.info(f"Generating numbers with {len(CALCULATION_METHODS)} methods for {now.isoformat()}")

    results = []
    for method in CALCULATION_METHODS:
        args = (now, dataset) if method.name in STATISTICAL_METHODS else (now,)
        result = safe_execute(f"Generate {method.name}", method.func, None, *args)

        if result is None:
            results.append(error_placeholder(method, "Calculation failed. Check log for details."))
            continue
        if not is_valid_play(result.whites, result.red):
            logger.error(f"Invalid numbers from {method.name}: {result.whites} + {result.red}")
            results.append(error_placeholder(method, "Invalid numbers generated"))
            continue
        results.append(result)

    failed = sum(1 for result in results if result.has_error)
    logger.info(f"Generated {len(results)} method results ({failed} errors)")
    return results
