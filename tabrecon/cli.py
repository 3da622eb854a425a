"""
Command-line entry point.
Reconcile two delimited files and write prefix-qualified reports.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config.manager import ConfigError, ConfigManager, create_sample_config
from .core.key_resolver import KeyResolutionError
from .core.reconciler import Reconciler
from .reporting.exports import ReportWriter
from .ui.progress import get_progress_monitor
from .utils.logger import configure_logger, get_logger


logger = get_logger()


EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_KEY_ERROR = 3

SAMPLE_CONFIG = Path("reconcile_sample.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabrecon",
        description="Reconcile two delimited files by key columns and report "
                    "missing, extra, duplicate and mismatched records."
    )
    
    parser.add_argument("-s", "--source", help="Source file (required)")
    parser.add_argument("-t", "--target", help="Target file (required)")
    parser.add_argument(
        "-k", "--keys", dest="key_spec",
        help="Key columns, comma-separated. Header names with -H 1, "
             "1-based indexes with -H 0 (required)"
    )
    parser.add_argument(
        "-d", "--delimiter",
        help="Field delimiter (default ','). Use '\\t' or 'tab' for TAB"
    )
    parser.add_argument(
        "-H", "--header", dest="has_header", choices=["1", "0"],
        help="Header present? 1=yes (default), 0=no"
    )
    parser.add_argument(
        "-T", "--tolerance",
        help="Numeric tolerance (default 0.0)"
    )
    parser.add_argument(
        "-p", "--prefix",
        help="Report file prefix (default 'reconcile')"
    )
    parser.add_argument(
        "-c", "--config", type=Path,
        help="YAML run configuration; flags override its values"
    )
    parser.add_argument(
        "--encoding",
        help="Input text encoding (default utf-8-sig)"
    )
    parser.add_argument(
        "--log-file", type=Path,
        help="Append JSON log lines to this file"
    )
    
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors, no progress output"
    )
    
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable Rich progress bars"
    )
    parser.add_argument(
        "--create-sample",
        action="store_true",
        help=f"Create {SAMPLE_CONFIG} and exit"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"tabrecon v{__version__}"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    
    Returns:
        0 on success, 2 for bad arguments or unreadable inputs,
        3 for an unresolvable key specification
    """
    args = build_parser().parse_args(argv)
    
    configure_logger(verbose=args.verbose, log_file=args.log_file)
    if args.quiet:
        logger.min_level = "WARN"
    
    if args.create_sample:
        create_sample_config(SAMPLE_CONFIG)
        return EXIT_OK
    
    progress = get_progress_monitor(use_rich=not args.no_rich, verbose=not args.quiet)
    overrides = {
        "source": args.source,
        "target": args.target,
        "key_spec": args.key_spec,
        "delimiter": args.delimiter,
        "has_header": args.has_header,
        "tolerance": args.tolerance,
        "prefix": args.prefix,
        "encoding": args.encoding,
    }
    
    try:
        manager = ConfigManager(args.config)
        manager.load()
        config = manager.build(overrides)
        
        result = Reconciler(config, progress=None if args.quiet else progress).run()
        paths = ReportWriter(config.prefix).write(result)
    except KeyResolutionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_KEY_ERROR
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Use --help for usage or --create-sample for a sample configuration",
              file=sys.stderr)
        return EXIT_CONFIG_ERROR
    
    if not args.quiet:
        progress.show_summary(result.summary)
        progress.show_reports(paths)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
