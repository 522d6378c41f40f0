"""Command-line interface for the xlsx translator."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from . import __version__
from .dictionary import DictionaryStore, DUPLICATE_POLICIES
from .errors import XlsxTranslatorError
from .providers import OpenAIProvider
from .translation import ExcelTranslator
from .utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xlsx-translator",
        description="Translate the text cells of an xlsx workbook using a dictionary and OpenAI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Dictionary format (UTF-8, one entry per line, EN DASH separator):
  source text – translated text

Examples:
  # Basic translation
  xlsx-translator --api-key sk-... terms.txt input.xlsx output.xlsx

  # French, two sheets only, keep header rows
  xlsx-translator terms.txt input.xlsx output.xlsx \\
    --target-lang French --sheet Prices --sheet Notes --skip-header

Environment variables:
  OPENAI_API_KEY    Used when --api-key is not given (also read from .env)
  OPENAI_MODEL      Default model
        """
    )

    parser.add_argument(
        "-k", "--api-key",
        default=os.getenv("OPENAI_API_KEY"),
        help="OpenAI API key (default: $OPENAI_API_KEY)"
    )

    # Required arguments
    parser.add_argument("dictionary_path", help="Dictionary file path")
    parser.add_argument("source_path", help="Source xlsx file path")
    parser.add_argument("destination_path", help="Destination xlsx file path")

    parser.add_argument(
        "--model",
        default=os.getenv("OPENAI_MODEL", "gpt-4o"),
        help="Model to use for translation (default: $OPENAI_MODEL or gpt-4o)"
    )

    parser.add_argument(
        "--target-lang",
        default="Romanian",
        help="Language to translate into (default: Romanian)"
    )

    parser.add_argument(
        "--sheet",
        action="append",
        dest="sheets",
        metavar="NAME",
        help="Worksheet to translate; repeat for several (default: all worksheets)"
    )

    parser.add_argument(
        "--skip-header",
        action="store_true",
        help="Leave the first row of each sheet untranslated"
    )

    parser.add_argument(
        "--duplicates",
        default="last",
        choices=DUPLICATE_POLICIES,
        help="Which translation wins for repeated dictionary keys (default: last)"
    )

    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=1,
        help="Number of provider requests in flight at once (default: 1)"
    )

    parser.add_argument(
        "--requests-per-minute",
        type=int,
        default=60,
        help="Provider request budget per minute, 0 for unlimited (default: 60)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=90.0,
        help="Provider request timeout in seconds (default: 90)"
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not display a progress bar"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        help="Optional log file path (default: None - console only)"
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def get_provider(args: argparse.Namespace) -> OpenAIProvider:
    """Build the translation provider from parsed arguments."""
    return OpenAIProvider(
        api_key=args.api_key,
        model=args.model,
        timeout=args.timeout,
        requests_per_minute=args.requests_per_minute
    )


def run(args: argparse.Namespace) -> int:
    """Translate the workbook described by args and return an exit code."""
    dictionary = DictionaryStore.load(args.dictionary_path, duplicates=args.duplicates)

    translator = ExcelTranslator(
        dictionary=dictionary,
        provider=get_provider(args),
        target_lang=args.target_lang,
        sheet_names=args.sheets,
        skip_header=args.skip_header,
        max_concurrency=args.max_concurrency,
        show_progress=not args.no_progress
    )

    print(f"Translating {args.source_path} -> {args.destination_path}")
    print(f"Model: {args.model}, Language: {args.target_lang}, Dictionary entries: {len(dictionary)}")

    summary = translator.translate_file_sync(args.source_path, args.destination_path)

    print(f"Translation completed successfully! {summary.cells_translated} of {summary.cells_seen} cells translated")
    print(f"Output saved to: {args.destination_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.api_key:
        parser.error("an OpenAI API key is required: pass --api-key or set OPENAI_API_KEY")
    if args.max_concurrency < 1:
        parser.error("--max-concurrency must be at least 1")
    if args.requests_per_minute < 0:
        parser.error("--requests-per-minute must not be negative")

    setup_logging(args.log_level, args.log_file)

    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nTranslation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED
    except XlsxTranslatorError as e:
        logger.error(f"Translation failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
