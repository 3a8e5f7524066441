"""Command line entry point: fold a level-annotated BOM file into ItemSync tables."""

import argparse
import logging
import sys
from typing import List, Optional

from .config import LOG_LEVELS, load_settings, parse_log_level, parse_output_format, parse_root_level
from .exceptions import BomFoldError
from .folder import BomFolder
from .logging_config import setup_logging
from .schema import OUTPUT_FORMATS

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bomfold",
        description="Parse a level ordered BOM flat file and write ItemSync compatible BOM tables."
    )
    parser.add_argument("--input", required=True, help="Input BOM file (.csv, .tsv or .xlsx)")
    parser.add_argument("--output", default=None,
                        help="Output directory for boms and bom_entries; prints the folded tree when omitted")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="Output table format")
    parser.add_argument("--sub-boms", action="store_true",
                        help="Also emit BOM records for nested sub-assemblies")
    parser.add_argument("--root-level", default=None, help="Level value that starts a top-level assembly")
    parser.add_argument("--env-file", default=None, help="Settings file (default: ./.env)")
    parser.add_argument("--log-level", default=None, help=f"Logging level ({', '.join(LOG_LEVELS)})")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--structured-logs", action="store_true", help="Emit JSON log lines")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        settings = load_settings(env_file=args.env_file)
        if args.format is not None:
            settings.output_format = parse_output_format(args.format)
        if args.sub_boms:
            settings.rules.include_sub_boms = True
        if args.root_level is not None:
            settings.rules.root_level = parse_root_level(args.root_level, "--root-level")
        if args.log_level is not None:
            settings.log_level = parse_log_level(args.log_level, "--log-level")
    except BomFoldError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level=settings.log_level,
        log_file=args.log_file or settings.log_file,
        structured=args.structured_logs
    )

    folder = BomFolder(rules=settings.rules)
    try:
        result = folder.convert(args.input, output_dir=args.output, format=settings.output_format)
    except (BomFoldError, FileNotFoundError, ValueError, OSError) as e:
        logger.debug(f"Conversion of {args.input} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.output is None:
        print(result)
    else:
        for path in result:
            logger.info(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
