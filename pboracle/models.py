from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pboracle.config import POWERBALL_MAX, POWERBALL_MIN, WHITE_BALL_MAX, WHITE_BALL_MIN

Frequency = Dict[str, Dict[int, int]]


def empty_frequency() -> Frequency:
    """Zero counters for every white ball and every Powerball."""
    return {
        "white": {n: 0 for n in range(WHITE_BALL_MIN, WHITE_BALL_MAX + 1)},
        "red": {n: 0 for n in range(POWERBALL_MIN, POWERBALL_MAX + 1)},
    }


@dataclass(frozen=True)
class DrawRecord:
    """One drawing. Built by the parser, which enforces the number rules."""
    date: str
    white: Tuple[int, ...]
    red: int
    jackpot: Optional[str] = None
    multiplier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"date": self.date, "white": list(self.white), "red": self.red}
        if self.jackpot is not None:
            data["jackpot"] = self.jackpot
        if self.multiplier is not None:
            data["multiplier"] = self.multiplier
        return data

    def numbers_display(self) -> str:
        return f"{', '.join(str(n) for n in self.white)} + {self.red}"


@dataclass
class Dataset:
    """
    Rolling history of drawings, newest first, with frequency counts
    derived from `results`.
    """
    last_updated: Optional[str] = None
    results: List[DrawRecord] = field(default_factory=list)
    frequency: Frequency = field(default_factory=empty_frequency)
    source: Optional[str] = None

    @property
    def latest(self) -> Optional[DrawRecord]:
        return self.results[0] if self.results else None

    @property
    def dates(self) -> List[str]:
        return [record.date for record in self.results]

    def to_dict(self) -> Dict[str, Any]:
        """JSON document layout; frequency keys are written as strings."""
        return {
            "last_updated": self.last_updated,
            "results": [record.to_dict() for record in self.results],
            "frequency": {
                domain: {str(number): count for number, count in counts.items()}
                for domain, counts in self.frequency.items()
            },
            "source": self.source,
        }
