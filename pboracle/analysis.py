from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from loguru import logger

from pboracle.checker import PRIZE_TABLE, PrizeTier, evaluate_play
from pboracle.date_utils import DateManager
from pboracle.models import Dataset

WHITE_BALL_COLUMNS = [f"n{i}" for i in range(1, 6)]
TICKET_COST = 2.0


def results_to_dataframe(dataset: Dataset) -> pd.DataFrame:
    """
    Converts the stored results into a DataFrame.

    Returns:
        pd.DataFrame: Columns ['draw_date', 'n1'..'n5', 'pb', 'jackpot',
        'multiplier'], newest first. Empty when the dataset has no results.
    """
    columns = ["draw_date"] + WHITE_BALL_COLUMNS + ["pb", "jackpot", "multiplier"]
    rows = []
    for record in dataset.results:
        row = {"draw_date": record.date, "pb": record.red, "jackpot": record.jackpot, "multiplier": record.multiplier}
        row.update(dict(zip(WHITE_BALL_COLUMNS, record.white)))
        rows.append(row)

    df = pd.DataFrame(rows, columns=columns)
    if not df.empty:
        df["draw_date"] = pd.to_datetime(df["draw_date"])
    return df


def frequency_to_dataframe(dataset: Dataset, domain: str = "white") -> pd.DataFrame:
    """
    Frequency table for one domain ("white" or "red") as a DataFrame with
    columns ['number', 'count', 'percent'], ordered by number.
    """
    counts = dataset.frequency.get(domain, {})
    df = pd.DataFrame(sorted(counts.items()), columns=["number", "count"])
    total_draws = len(dataset.results)
    df["percent"] = (df["count"] / total_draws * 100).round(1) if total_draws else 0.0
    return df


def hot_and_cold_numbers(dataset: Dataset, count: int = 5) -> Dict[str, Any]:
    """
    Most and least drawn numbers for both domains.

    Ties are broken by the lower number first.
    """
    report: Dict[str, Any] = {"total_draws": len(dataset.results)}
    for domain in ("white", "red"):
        df = frequency_to_dataframe(dataset, domain)
        hottest = df.sort_values(["count", "number"], ascending=[False, True]).head(count)
        coldest = df.sort_values(["count", "number"], ascending=[True, True]).head(count)
        report[domain] = {
            "hot": list(zip(hottest["number"].astype(int), hottest["count"].astype(int))),
            "cold": list(zip(coldest["number"].astype(int), coldest["count"].astype(int))),
        }
    logger.debug(f"Hot/cold report computed over {report['total_draws']} draws")
    return report


def plays_to_dataframe(plays: Sequence[Any]) -> pd.DataFrame:
    """
    Builds a plays DataFrame from objects with `whites` and `red` (such as
    numerology results) or from (whites, red) tuples.
    """
    rows = []
    for play in plays:
        if isinstance(play, tuple):
            whites, red, name = play[0], play[1], "Custom play"
        else:
            whites, red, name = play.whites, play.red, play.name
        row = {"name": name, "pb": red}
        row.update(dict(zip(WHITE_BALL_COLUMNS, sorted(whites))))
        rows.append(row)
    return pd.DataFrame(rows, columns=["name"] + WHITE_BALL_COLUMNS + ["pb"])


def run_backtest(plays_df: pd.DataFrame, historical_data: pd.DataFrame, ticket_cost: float = TICKET_COST) -> Dict[str, Any]:
    """
    Runs a backtest of the given plays against historical draw data.

    Every play is checked against every historical draw. The jackpot has no
    fixed amount, so jackpot hits are counted but not added to the winnings.

    Args:
        plays_df (pd.DataFrame): Plays with columns ['name', 'n1'..'n5', 'pb'].
        historical_data (pd.DataFrame): Draws as produced by results_to_dataframe.
        ticket_cost (float): The cost per ticket.

    Returns:
        dict: A summary report of the backtest results.
    """
    logger.info(f"Running backtest for {len(plays_df)} plays against {len(historical_data)} historical draws...")

    total_cost = len(plays_df) * len(historical_data) * ticket_cost
    total_winnings = 0
    win_counts = {tier.value: 0 for tier in PrizeTier if tier is not PrizeTier.NONE}
    per_play: Dict[str, int] = {name: 0 for name in plays_df.get("name", [])}

    for _, draw in historical_data.iterrows():
        winning_numbers = [int(draw[col]) for col in WHITE_BALL_COLUMNS]
        winning_pb = int(draw["pb"])

        for _, play in plays_df.iterrows():
            play_numbers = [int(play[col]) for col in WHITE_BALL_COLUMNS]
            result = evaluate_play(play_numbers, int(play["pb"]), winning_numbers, winning_pb)
            if not result.is_win:
                continue
            win_counts[result.tier.value] += 1
            per_play[play["name"]] = per_play.get(play["name"], 0) + 1
            amount = PRIZE_TABLE[result.tier].amount
            if amount is not None:
                total_winnings += amount

    roi = ((total_winnings - total_cost) / total_cost) * 100 if total_cost > 0 else 0

    report = {
        "total_plays_simulated": len(plays_df) * len(historical_data),
        "total_cost": f"${total_cost:,.2f}",
        "total_winnings": f"${total_winnings:,.2f}",
        "roi_percent": f"{roi:.2f}%",
        "win_distribution": win_counts,
        "wins_by_play": per_play,
    }

    logger.info("Backtest complete.")
    logger.info(f"ROI: {roi:.2f}% | Total Winnings: ${total_winnings:,.2f} | Total Cost: ${total_cost:,.2f}")
    return report


def backtest_plays(plays: Sequence[Any], dataset: Dataset, ticket_cost: float = TICKET_COST) -> Dict[str, Any]:
    """Backtests plays (see plays_to_dataframe) against the stored history."""
    return run_backtest(plays_to_dataframe(plays), results_to_dataframe(dataset), ticket_cost)


def draws_per_weekday(dataset: Dataset) -> List[tuple]:
    """(weekday name, draw count) pairs for the stored results, Monday first."""
    df = results_to_dataframe(dataset)
    if df.empty:
        return []
    counts = df["draw_date"].dt.day_name().value_counts()
    order = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    return [(day, int(counts[day])) for day in order if day in counts.index]


def missing_drawing_dates(dataset: Dataset, count: int = 10, reference_date: Optional[datetime] = None) -> List[str]:
    """
    Scheduled drawing dates among the last `count` that are not stored,
    oldest first. An empty list means the recent history is complete.
    """
    stored = set(dataset.dates)
    missing = [day for day in DateManager.get_recent_drawing_dates(count, reference_date) if day not in stored]
    if missing:
        logger.warning(f"{len(missing)} of the last {count} scheduled drawings are not stored: {missing}")
    return missing
