import argparse
import json
import sys
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd
from loguru import logger

from pboracle.config import (
    ALLOW_FALLBACK,
    DEFAULT_CONFIG_PATH,
    FETCH_TIMEOUT_SECONDS,
    LOG_FILE_PATH,
    MAX_STORED_RESULTS,
    NY_OPEN_DATA_LIMIT,
    get_source_names,
    load_config,
)
from pboracle.date_utils import DateManager


def main(argv=None):
    """Main entry point for the Powerball Oracle CLI."""
    parser = argparse.ArgumentParser(description="Powerball Oracle - results tracker and numerology checker")
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH, help="Path to configuration file.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- Update Command ---
    parser_update = subparsers.add_parser("update", help="Download the latest Powerball results.")
    parser_update.set_defaults(func=update_data_command)

    # --- Predict Command ---
    parser_predict = subparsers.add_parser("predict", help="Run every numerology method and check it against the latest drawing.")
    parser_predict.add_argument("--date", type=str, help="Evaluate the methods for this date instead of now.")
    parser_predict.set_defaults(func=predict_command)

    # --- Check Command ---
    parser_check = subparsers.add_parser("check", help="Check a play against a stored drawing.")
    parser_check.add_argument("--white", type=int, nargs=5, required=True, metavar="N", help="The five white balls.")
    parser_check.add_argument("--red", type=int, required=True, help="The Powerball.")
    parser_check.add_argument("--date", type=str, help="Drawing date to check against (default: latest).")
    parser_check.set_defaults(func=check_play_command)

    # --- Stats Command ---
    parser_stats = subparsers.add_parser("stats", help="Show hot and cold numbers from the stored history.")
    parser_stats.add_argument("--top", type=int, default=None, help="How many numbers to list (default from config).")
    parser_stats.set_defaults(func=stats_command)

    # --- Backtest Command ---
    parser_backtest = subparsers.add_parser("backtest", help="Backtest plays against the stored history.")
    parser_backtest.add_argument("--white", type=int, nargs=5, metavar="N", help="Backtest this play instead of today's methods.")
    parser_backtest.add_argument("--red", type=int, help="Powerball of the play to backtest.")
    parser_backtest.set_defaults(func=backtest_command)

    args = parser.parse_args(argv)
    setup_logging(args.verbose, load_config(args.config).get("paths", "log_file", fallback=LOG_FILE_PATH))
    args.func(args)


def setup_logging(verbose: bool = False, log_file: str = LOG_FILE_PATH):
    """Console logging on stderr so command output on stdout stays readable."""
    logger.remove()
    logger.add(sys.stderr, format="{time:HH:mm:ss} | {level: <8} | {message}", level="DEBUG" if verbose else "WARNING")
    logger.add(log_file, rotation="10 MB", retention="30 days", level="DEBUG")


def load_cli_defaults(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Loads default values for CLI arguments from config.ini."""
    config = load_config(config_path)
    defaults: Dict[str, Any] = {}
    if "cli_defaults" in config:
        for key, value in config["cli_defaults"].items():
            # Convert to integer if possible, otherwise use as string
            try:
                defaults[key] = int(value)
            except ValueError:
                defaults[key] = value
    return defaults


def _moment_for(date_value: Optional[str]) -> datetime:
    """Noon ET on the given date, or the current ET time."""
    if not date_value:
        return DateManager.get_current_et_time()
    normalized = DateManager.normalize_date(date_value)
    if normalized is None:
        raise ValueError(f"Unrecognized date: {date_value}")
    return DateManager.convert_to_et(datetime.strptime(normalized, "%Y-%m-%d").replace(hour=12))


def update_data_command(args):
    """Handles the 'update' command."""
    logger.info("Received 'update' command. Updating dataset from sources...")
    try:
        from pboracle.fetcher import build_sources
        from pboracle.loader import update_dataset_from_sources
        from pboracle.persistence_manager import get_persistence_manager

        config = load_config(args.config)
        result = update_dataset_from_sources(
            get_persistence_manager(config),
            build_sources(get_source_names(config), config.getint("fetch", "ny_limit", fallback=NY_OPEN_DATA_LIMIT)),
            max_results=config.getint("dataset", "max_results", fallback=MAX_STORED_RESULTS),
            timeout=config.getfloat("fetch", "timeout_seconds", fallback=FETCH_TIMEOUT_SECONDS),
            allow_fallback=config.getboolean("fetch", "allow_fallback", fallback=ALLOW_FALLBACK),
        )
    except Exception as e:
        logger.error(f"An error occurred during data update: {e}")
        print(f"\nUpdate failed: {e}\n")
        sys.exit(1)

    print("\n--- Update Result ---")
    print(f"Status: {result.status}")
    print(f"Source: {result.source or 'none'}")
    print(f"New drawings: {result.added}")
    print(f"Stored drawings: {result.total}")
    if result.latest:
        label = " (synthetic)" if result.is_fallback else ""
        print(f"Latest drawing{label}: {result.latest.date}  {result.latest.numbers_display()}")
    print(f"Next drawing: {DateManager.calculate_next_drawing_date()}")
    print("---------------------\n")

    if not result.succeeded:
        sys.exit(1)


def predict_command(args):
    """Handles the 'predict' command."""
    logger.info("Received 'predict' command.")
    try:
        from pboracle.checker import calculate_win_statistics, check_methods_against_winning, find_notable_wins
        from pboracle.loader import get_latest_winning_numbers
        from pboracle.numerology import generate_all_methods
        from pboracle.persistence_manager import get_persistence_manager

        dataset = get_persistence_manager(load_config(args.config)).load_dataset()
        results = generate_all_methods(now=_moment_for(args.date), dataset=dataset)
        winning = get_latest_winning_numbers(dataset)
        checked = check_methods_against_winning(results, winning)
    except Exception as e:
        logger.error(f"An error occurred during prediction: {e}")
        sys.exit(1)

    rows = [
        {
            "method": item.result.name,
            "category": item.result.category,
            "numbers": item.result.numbers_display(),
            "result": item.check.tier.value if item.check else item.status,
        }
        for item in checked
    ]
    plays_df = pd.DataFrame(rows)

    print("\n--- Numerology Methods ---")
    if winning:
        print(f"Checked against {winning.date}: {winning.numbers_display()}\n")
    print(plays_df.to_string(index=False))

    stats = calculate_win_statistics(checked)
    print(f"\nWinning methods: {stats['winning_methods']}/{stats['total_methods']} ({stats['win_percentage']}%)")
    for win in find_notable_wins(checked):
        print(f"Notable: {win['method']} - {win['prize']} ({win['numbers']})")
    print("--------------------------\n")


def check_play_command(args):
    """Handles the 'check' command."""
    from pboracle.checker import PRIZE_TABLE, evaluate_play, validate_numbers
    from pboracle.persistence_manager import get_persistence_manager

    errors = validate_numbers(args.white, args.red)
    if errors:
        print("\nInvalid play:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    try:
        dataset = get_persistence_manager(load_config(args.config)).load_dataset()
    except Exception as e:
        logger.error(f"An error occurred while loading the dataset: {e}")
        sys.exit(1)

    if args.date:
        target = DateManager.normalize_date(args.date)
        winning = next((record for record in dataset.results if record.date == target), None)
    else:
        winning = dataset.latest

    if winning is None:
        print("\nNo matching drawing is stored. Run 'update' first.\n")
        sys.exit(1)

    result = evaluate_play(args.white, args.red, winning.white, winning.red)
    prize = PRIZE_TABLE[result.tier]

    print("\n--- Check Result ---")
    print(f"Drawing {winning.date}: {winning.numbers_display()}")
    print(f"Your play: {', '.join(str(n) for n in sorted(args.white))} + {args.red}")
    print(f"Matched {result.white_matches} white ball(s){' and the Powerball' if result.red_match else ''}")
    print(f"Tier: {result.tier.value} ({prize.label}) - {prize.display}")
    print("--------------------\n")


def stats_command(args):
    """Handles the 'stats' command."""
    try:
        from pboracle.analysis import draws_per_weekday, hot_and_cold_numbers, missing_drawing_dates
        from pboracle.checker import format_jackpot_amount
        from pboracle.persistence_manager import get_persistence_manager

        top = args.top if args.top is not None else load_cli_defaults(args.config).get("top", 5)
        dataset = get_persistence_manager(load_config(args.config)).load_dataset()
        report = hot_and_cold_numbers(dataset, top)
    except Exception as e:
        logger.error(f"An error occurred while computing statistics: {e}")
        sys.exit(1)

    def _fmt(pairs):
        return ", ".join(f"{number} ({times}x)" for number, times in pairs)

    print("\n--- Frequency Statistics ---")
    print(f"Drawings analysed: {report['total_draws']}")
    if dataset.latest:
        print(f"Latest: {dataset.latest.date}  {dataset.latest.numbers_display()}  "
              f"jackpot {format_jackpot_amount(dataset.latest.jackpot)}")
    print(f"Hot white balls:  {_fmt(report['white']['hot'])}")
    print(f"Cold white balls: {_fmt(report['white']['cold'])}")
    print(f"Hot Powerballs:   {_fmt(report['red']['hot'])}")
    print(f"Cold Powerballs:  {_fmt(report['red']['cold'])}")
    for day, count in draws_per_weekday(dataset):
        print(f"  {day}: {count} drawings")
    missing = missing_drawing_dates(dataset)
    if missing:
        print(f"Missing recent drawings: {', '.join(missing)}")
    print(f"Next drawing: {DateManager.calculate_next_drawing_date()} "
          f"(in {DateManager.days_until_next_drawing()} day(s))")
    print("----------------------------\n")


def backtest_command(args):
    """Handles the 'backtest' command."""
    logger.info("Received 'backtest' command.")
    if (args.white is None) != (args.red is None):
        print("\nBoth --white and --red are required to backtest a custom play.\n")
        sys.exit(1)

    try:
        from pboracle.analysis import backtest_plays
        from pboracle.checker import validate_numbers
        from pboracle.numerology import generate_all_methods
        from pboracle.persistence_manager import get_persistence_manager

        dataset = get_persistence_manager(load_config(args.config)).load_dataset()
        if args.white is not None:
            errors = validate_numbers(args.white, args.red)
            if errors:
                raise ValueError("; ".join(errors))
            plays = [(args.white, args.red)]
        else:
            plays = [result for result in generate_all_methods(dataset=dataset) if not result.has_error]

        report = backtest_plays(plays, dataset)
    except Exception as e:
        logger.error(f"An error occurred during backtest: {e}")
        print(f"\nBacktest failed: {e}\n")
        sys.exit(1)

    print("\n--- Backtest Report ---")
    print(json.dumps(report, indent=2))
    print("-----------------------\n")


if __name__ == "__main__":
    main()
