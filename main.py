#!/usr/bin/env python3
"""
Powerball Oracle Pipeline
=========================

Batch entry point that runs the pipeline steps:
1. Data Update
2. Predictions
3. Report

Usage:
    python main.py                    # Run full pipeline
    python main.py --step data        # Run specific step
    python main.py --status           # Check pipeline status
    python main.py --help             # Show help

Exit code is 0 on success (including "already up to date" and runs served
by the fallback drawing) and 1 when the update fails or the dataset cannot
be read or written.
"""

import argparse
import sys
import traceback

from pboracle.config import DEFAULT_CONFIG_PATH
from pboracle.orchestrator import PipelineOrchestrator


def print_status(status):
    print("\n" + "=" * 50)
    print("POWERBALL ORACLE PIPELINE STATUS")
    print("=" * 50)

    for key, value in status.items():
        if key not in ("recent_execution_status", "source_health"):
            print(f"{key.replace('_', ' ').title()}: {value}")

    if status.get("recent_execution_status"):
        print("\nRecent Execution Status:")
        for step, step_status in status["recent_execution_status"].items():
            status_symbol = "✓" if step_status.get("status") == "success" else "✗"
            print(f"  {status_symbol} {step}: {step_status.get('status', 'unknown')}")

    if status.get("source_health"):
        print("\nData Source Health:")
        for name, health in status["source_health"].items():
            status_symbol = "✓" if health["status"] == "healthy" else "✗"
            detail = f"{health['response_time_ms']} ms" if health["status"] == "healthy" else health["error"]
            print(f"  {status_symbol} {name}: {detail}")

    print("=" * 50)


def main():
    """Main entry point for the pipeline orchestrator."""
    parser = argparse.ArgumentParser(
        description="Powerball Oracle Pipeline Orchestrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                    # Run full pipeline
  python main.py --step data        # Run data update step only
  python main.py --step predictions # Run numerology predictions only
  python main.py --status           # Check pipeline status

Available steps:
  data, predictions, report
        """
    )

    parser.add_argument(
        "--step",
        type=str,
        help="Run a specific pipeline step only"
    )

    parser.add_argument(
        "--status",
        action="store_true",
        help="Check pipeline status and exit"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output"
    )

    args = parser.parse_args()

    try:
        orchestrator = PipelineOrchestrator(config_path=args.config, verbose=args.verbose)

        if args.status:
            print_status(orchestrator.get_pipeline_status())
            return

        if args.step:
            result = orchestrator.run_single_step(args.step)

            print(f"\nStep '{args.step}' execution result:")
            print(f"Status: {result.get('status', 'unknown')}")
            print(f"Execution time: {result.get('execution_time', 'unknown')}")

            if result.get("status") == "failed":
                print(f"Error: {result.get('error', 'unknown error')}")
                sys.exit(1)
            else:
                print("Step completed successfully!")
            return

        result = orchestrator.run_full_pipeline()

        print("\n" + "=" * 60)
        print("PIPELINE EXECUTION SUMMARY")
        print("=" * 60)
        print(f"Status: {result.get('status', 'unknown')}")
        print(f"Execution time: {result.get('execution_time', 'unknown')}")

        if result.get("summary"):
            summary = result["summary"]
            print(f"Steps completed: {summary.get('successful_steps', 0)}/{summary.get('total_steps', 0)}")
            print(f"Success rate: {summary.get('success_rate', '0%')}")
            print(f"Pipeline health: {summary.get('pipeline_health', 'unknown')}")

        update = result.get("results", {}).get("data_update", {}).get("result") or {}
        if update.get("is_fallback"):
            print(f"WARNING: no source responded, showing synthetic numbers from {update.get('source')}")

        if result.get("status") == "failed":
            print(f"Error: {result.get('error', 'unknown error')}")
            sys.exit(1)
        else:
            print("Pipeline execution completed successfully!")

    except KeyboardInterrupt:
        print("\nPipeline execution interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nFATAL ERROR: {e}")
        if args.verbose:
            print(f"Traceback: {traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    main()
