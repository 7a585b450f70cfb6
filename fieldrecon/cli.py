"""
fieldrecon CLI

Usage:
    fieldrecon compare data/execution_results/exec_1.json
    fieldrecon compare data/execution_results/exec_1.json --json
    fieldrecon learn data/execution_results/exec_1.json --interactive
    fieldrecon usage
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import config
from .errors import ReconciliationError, create_error_response, format_error_for_logging
from .matching.comparator import compare_fundamental_fields
from .registry.store import load_registry
from .reporting import format_comparison_stats, format_update_summary


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def _load_execution(path: str):
    p = Path(path)
    if not p.exists():
        print(f"❌ Error: file not found {p}", file=sys.stderr)
        return None
    with open(p, "r", encoding="utf-8") as f:
        return json.load(f)


def _cmd_compare(args) -> int:
    execution = _load_execution(args.execution)
    if execution is None:
        return 1
    registry = load_registry(args.registry)
    report = compare_fundamental_fields(registry, execution, threshold=config.fuzzy_threshold)
    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_comparison_stats(report))
    return 0


def _cmd_learn(args) -> int:
    from .llm_factory import setup_classifier
    from .reconcile import reconcile_and_learn
    from .usage import UsageTracker

    execution = _load_execution(args.execution)
    if execution is None:
        return 1

    print(f"📖 Processing execution: {Path(args.execution).name}")
    tracker = UsageTracker(config.usage_file)
    summary = asyncio.run(reconcile_and_learn(
        execution,
        args.registry,
        mode="interactive" if args.interactive else "automatic",
        classifier=setup_classifier(),
        record_usage=tracker.record_usage,
    ))
    print(format_update_summary(summary))

    print("\n📊 Comparison with the updated registry:")
    report = compare_fundamental_fields(load_registry(args.registry), execution, threshold=config.fuzzy_threshold)
    print(format_comparison_stats(report))
    return 0


def _cmd_usage(args) -> int:
    from .usage import UsageTracker

    stats = UsageTracker(config.usage_file).summary()
    print("📊 AI consumption:")
    print(f"   Requests: {stats['requests']}")
    print(f"   Input tokens: {stats['input_tokens']}")
    print(f"   Output tokens: {stats['output_tokens']}")
    print(f"   Field mapping uses: {stats['topic_detection_uses']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldrecon",
        description="Reconcile form field labels with the fundamental field registry"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    compare_parser = subparsers.add_parser("compare", help="Report fundamental field coverage (no AI)")
    compare_parser.add_argument("execution", help="Execution record JSON file")
    compare_parser.add_argument("-r", "--registry", default=str(config.registry_path),
                                help="Registry JSON file")
    compare_parser.add_argument("--json", action="store_true", help="Print the full report as JSON")

    learn_parser = subparsers.add_parser("learn", help="Map fields with AI and update the registry")
    learn_parser.add_argument("execution", help="Execution record JSON file")
    learn_parser.add_argument("-r", "--registry", default=str(config.registry_path),
                              help="Registry JSON file")
    learn_parser.add_argument("-i", "--interactive", action="store_true",
                              help="Ask for confirmation before each correction or new field")

    subparsers.add_parser("usage", help="Show AI consumption counters")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    _setup_logging(args.verbose)

    commands = {
        "compare": _cmd_compare,
        "learn": _cmd_learn,
        "usage": _cmd_usage,
    }
    try:
        return commands[args.command](args)
    except (ReconciliationError, OSError, ValueError) as e:
        if getattr(args, "json", False):
            # Machine-readable runs get the error envelope on stdout
            print(json.dumps(create_error_response(e, context=args.command), ensure_ascii=False, indent=2))
        else:
            print(format_error_for_logging(e, context=args.command), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
