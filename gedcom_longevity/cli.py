"""
cli.py - Command-line entry point for the ancestor longevity comparison.

Reads male and female mortality tables plus either an ancestor CSV export or a
GEDCOM tree, then prints how much longer (or shorter) the ancestors lived than
the national modal and median ages at death in the years they died.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from gedcom_longevity.csv_io import compile_death_stats, read_ancestors, write_details_csv
from gedcom_longevity.gedcom_ancestors import read_direct_ancestors
from gedcom_longevity.mortality import InsufficientDataError, MortalityComparison, MortalityConfig, compose_message

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gedcom-longevity',
        description="Compare ancestors' ages at death with national mortality tables.",
    )
    parser.add_argument('--male-death-stats', type=Path, default=Path('male_death_stats.csv'),
                        help='Male mortality table CSV (year, modal and median age at death).')
    parser.add_argument('--female-death-stats', type=Path, default=Path('female_death_stats.csv'),
                        help='Female mortality table CSV.')
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--ancestors', type=Path, default=None,
                        help="Ancestor CSV export with 'Birth date', 'Death date' and 'Gender' columns "
                             "(default: direct-ancestors.csv).")
    source.add_argument('--tree-file', type=Path, default=None,
                        help='GEDCOM file to read direct ancestors from.')
    parser.add_argument('--subject', type=str, default=None,
                        help='Xref of the individual whose ancestors are compared (default: first in the GEDCOM file).')
    parser.add_argument('--config', type=Path, default=None,
                        help="YAML config file with a 'mortality' section.")
    parser.add_argument('--details-csv', type=Path, default=None,
                        help='Write one row per compared ancestor to this CSV file.')
    parser.add_argument('--details', action='store_true',
                        help='Print one line per compared ancestor.')
    parser.add_argument('--log-level', choices=LOG_LEVELS, default='WARNING',
                        help='Logging level (default: WARNING).')
    return parser


def _overall_lines(comparison: MortalityComparison) -> List[str]:
    overall = comparison.results.overall if comparison.results else None
    if overall is None:
        return []
    weighting = " (weighted by generation)" if comparison.config.weight_by_generation else ""
    country = comparison.config.country_label
    return [
        "",
        f"Overall{weighting}, {overall.record_count} ancestors lived {compose_message(overall.modal_diff)} than "
        f"the {country}'s modal age of death and {compose_message(overall.median_diff)} than the median",
    ]


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format='%(levelname)s %(name)s: %(message)s')

    try:
        death_stats = compile_death_stats(args.male_death_stats, args.female_death_stats)
        if args.tree_file:
            records = read_direct_ancestors(args.tree_file, args.subject)
        else:
            records = read_ancestors(args.ancestors or Path('direct-ancestors.csv'))
    except FileNotFoundError as e:
        print(f"Input file not found: {e.filename or e}")
        return 1
    except ValueError as e:
        print(f"Unable to read input: {e}")
        return 1

    config = MortalityConfig(config_file=args.config) if args.config else MortalityConfig()
    try:
        comparison = MortalityComparison(records=records, death_stats=death_stats, config=config)
    except InsufficientDataError as e:
        logger.error(str(e))
        print(f"Not enough data to compare {e.gender} ancestors")
        return 1

    results = comparison.results
    for line in results.report_lines():
        print(line)
    for line in _overall_lines(comparison):
        print(line)

    if args.details:
        print("")
        for line in results.detail_lines():
            print(line)

    if args.details_csv:
        write_details_csv(results.buckets, args.details_csv)

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
