"""Command-line entrypoint comparing two build trees of Java archives."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from jar_compat.analysis import MatchResult, classify, index_by_filename, list_matching_files
from jar_compat.android import filter_to_deployed_only
from jar_compat.config import (
    DEFAULT_OUTPUT_SECTIONS,
    REPORT_FORMATS,
    CliOverrides,
    ConfigError,
    Options,
    default_parallelism,
    load_effective_options,
    normalize_thread_count,
)
from jar_compat.logging import JsonlRunLogger, event_from_outcome, setup_logging
from jar_compat.paths import cleanup_directory, ensure_directory, trailing_segments
from jar_compat.reporting import build_reporter, emit_listing_sections, emit_result_sections
from jar_compat.results import ResultCollector, classify_results
from jar_compat.tasks import CompatibilityCheckTask, TaskOutcome, TaskScheduler

logger = logging.getLogger(__name__)

VERSION_LABEL_DEPTH = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argument parser; option names follow the published flags."""
    parser = argparse.ArgumentParser(
        prog="jar-compat-checker",
        usage="%(prog)s [options] <directory of old jar> <directory of new jar>",
        description=__doc__,
    )
    parser.add_argument("old_dir", nargs="?", default=None, help=argparse.SUPPRESS)
    parser.add_argument("new_dir", nargs="?", default=None, help=argparse.SUPPRESS)
    parser.add_argument(
        "-j",
        "--numOfThreads",
        dest="num_threads",
        default=None,
        help=f"Specify number of threads (default:{default_parallelism()})",
    )
    parser.add_argument(
        "-a",
        "--androidBuiltOutMode",
        dest="android_built_out_mode",
        action="store_true",
        default=None,
        help="Only compare jars deployed to Android partitions (default:False)",
    )
    parser.add_argument(
        "-o",
        "--outputDir",
        dest="output_dir",
        default=None,
        help="Specify compat_reports output directory (default:.)",
    )
    parser.add_argument(
        "-t",
        "--temp",
        dest="temp_dir",
        default=None,
        help="Specify temporary directory (default:temp)",
    )
    parser.add_argument(
        "-u",
        "--reportBase",
        dest="report_base",
        default=None,
        help="Specify compat_reports base URL (default:output directory)",
    )
    parser.add_argument(
        "-r",
        "--reportFormat",
        dest="report_format",
        default=None,
        help=f"Specify report format {'|'.join(REPORT_FORMATS)} (default:markdown)",
    )
    parser.add_argument(
        "-s",
        "--outputSections",
        dest="output_sections",
        default=None,
        help=f"Specify output sections (default:{DEFAULT_OUTPUT_SECTIONS})",
    )
    parser.add_argument(
        "-d",
        "--dontReportIfNoIssue",
        dest="dont_report_if_no_issue",
        action="store_true",
        default=None,
        help="Specify to stop reporting if no issue found",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        default=None,
        help="Enable verbose status output",
    )
    parser.add_argument(
        "-k",
        "--keep-converted-jars",
        dest="keep_converted_jars",
        action="store_true",
        help="Keep converted jars",
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config",
        default=None,
        help="Read settings from a TOML file (default:./jar_compat.toml when present)",
    )
    parser.add_argument(
        "--run-log",
        dest="run_log",
        default=None,
        help="Append one JSON line per finished comparison to this file",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed arguments into highest-precedence overrides."""
    return CliOverrides(
        num_threads=(
            normalize_thread_count(args.num_threads) if args.num_threads is not None else None
        ),
        temp_dir=Path(args.temp_dir) if args.temp_dir is not None else None,
        output_dir=Path(args.output_dir) if args.output_dir is not None else None,
        report_base=args.report_base,
        report_format=args.report_format,
        output_sections=args.output_sections,
        dont_report_if_no_issue=args.dont_report_if_no_issue,
        verbose=args.verbose,
        cleanup_temporary=False if args.keep_converted_jars else None,
        android_built_out_mode=args.android_built_out_mode,
    )


def collect_archives(root: Path, options: Options) -> dict[str, str]:
    """List archives under a build root keyed by bare filename."""
    files = index_by_filename(list_matching_files(root, options.jar_pattern))
    if options.android_built_out_mode:
        files = filter_to_deployed_only(files)
    return files


def run_compatibility_checks(
    match: MatchResult,
    old_label: str,
    new_label: str,
    options: Options,
    collector: ResultCollector,
) -> list[TaskOutcome]:
    """Check every common archive concurrently and return the task outcomes."""
    with TaskScheduler(options.num_threads) as scheduler:
        for common in match.common_files:
            scheduler.add_task(
                CompatibilityCheckTask(
                    jar_name=common.target_file,
                    old_path=common.old_path,
                    new_path=common.new_path,
                    old_label=old_label,
                    new_label=new_label,
                    options=options,
                    sink=collector.add_result,
                )
            )
        return scheduler.execute_all()


def resolve_directories(options: Options) -> Options:
    """Pin the output and temporary directories to the current directory.

    External tools run with these directories as their working directory, so
    relative settings would otherwise resolve against the wrong place.
    """
    return replace(
        options,
        output_dir=options.output_dir.absolute(),
        temp_dir=options.temp_dir.absolute(),
    )


def _validate_directories(args: argparse.Namespace, parser: argparse.ArgumentParser) -> bool:
    if args.old_dir is None or args.new_dir is None:
        parser.print_help(sys.stdout)
        return False
    for candidate in (args.old_dir, args.new_dir):
        if not Path(candidate).is_dir():
            print(f"{candidate} is not found")
            return False
    return True


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    """Entrypoint for the jar compatibility checker."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if not _validate_directories(args, parser):
        return 1

    try:
        options = load_effective_options(
            config_path=Path(args.config) if args.config is not None else None,
            overrides=overrides_from_args(args),
        )
    except ConfigError as error:
        print(f"Invalid configuration: {error}", file=sys.stderr)
        return 1
    options = resolve_directories(options)
    setup_logging(options.verbose)
    logger.debug("effective options: %s", options.to_public_dict())

    old_root = Path(args.old_dir)
    new_root = Path(args.new_dir)
    old_label = trailing_segments(old_root, VERSION_LABEL_DEPTH)
    new_label = trailing_segments(new_root, VERSION_LABEL_DEPTH)
    reporter = build_reporter(options.report_format, out or sys.stdout)

    match = classify(collect_archives(old_root, options), collect_archives(new_root, options))
    emit_listing_sections(reporter, match, options)

    try:
        ensure_directory(options.output_dir)
        collector = ResultCollector()
        outcomes = run_compatibility_checks(match, old_label, new_label, options, collector)
        if args.run_log is not None:
            run_logger = JsonlRunLogger(Path(args.run_log))
            for outcome in outcomes:
                run_logger.append(event_from_outcome(outcome))
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        if failed:
            logger.warning("%d of %d comparison task(s) failed", failed, len(outcomes))

        emit_result_sections(reporter, classify_results(collector.snapshot()), options)
    finally:
        if options.cleanup_temporary:
            cleanup_directory(options.temp_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
