"""
Command-line interface for converting Hindi SRT files to Hinglish.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import load_settings
from .decisions import KeepShortWords, PromptedChoice, WordDecisionStrategy
from .errors import ConfigurationError, InvalidDocumentError
from .progress import TqdmProgress, format_percent, progress_fraction
from .session import ConversionSession
from .srt_utils import write_document
from .transliteration import build_service

logger = logging.getLogger("romanizer")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Convert Hindi SRT subtitles to Hinglish (chunked)")

    # IO
    ap.add_argument("input", help="Path to the Hindi .srt file")
    ap.add_argument("--output", "-o", default=None, help="Output file (default: <name>_hinglish.srt)")
    ap.add_argument("--outdir", default=None, help="Directory for the derived output file name")
    ap.add_argument("--suffix", default=None, help="Suffix for the derived output name")
    ap.add_argument("--env-file", default=None, help="Load settings from this .env file")

    # Model & chunking
    ap.add_argument("--model", default=None, help="OpenAI model (default: $ROMANIZER_MODEL or gpt-4o-mini)")
    ap.add_argument(
        "--max-chunk-size",
        type=int,
        default=None,
        help="Max subtitle blocks per request (default: $ROMANIZER_MAX_CHUNK_SIZE or 50)",
    )
    ap.add_argument("--async", dest="use_async", action="store_true", help="Use the async OpenAI client")

    # Word handling
    words = ap.add_mutually_exclusive_group()
    words.add_argument(
        "--keep-short-words",
        type=int,
        default=None,
        metavar="N",
        help="Keep words shorter than N characters in the original script",
    )
    words.add_argument("--ask-words", action="store_true", help="Ask whether to transliterate unsure words")

    # Failure handling
    ap.add_argument(
        "--allow-partial",
        action="store_true",
        help="Write whatever was converted if a chunk fails",
    )

    # Logging
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = ap.parse_args(argv)
    if args.max_chunk_size is not None and args.max_chunk_size < 1:
        ap.error("--max-chunk-size must be >= 1")
    if args.keep_short_words is not None and args.keep_short_words < 1:
        ap.error("--keep-short-words must be >= 1")
    return args


def make_strategy(args: argparse.Namespace) -> WordDecisionStrategy | None:
    if args.ask_words:
        return PromptedChoice()
    if args.keep_short_words is not None:
        return KeepShortWords(args.keep_short_words)
    return None


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.env_file)
        if args.model:
            settings.model = args.model
        if args.max_chunk_size is not None:
            settings.max_chunk_size = args.max_chunk_size
        if args.suffix is not None:
            settings.output_suffix = args.suffix
        service = build_service(settings, make_strategy(args), use_async=args.use_async)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    with TqdmProgress(desc="Converting") as progress:
        session = ConversionSession(
            service,
            max_chunk_size=settings.max_chunk_size,
            output_suffix=settings.output_suffix,
            on_progress=progress,
        )
        try:
            session.load(args.input)
        except InvalidDocumentError as e:
            logger.error(f"{e}. Please provide a valid .srt file.")
            return 2
        except FileNotFoundError:
            logger.error(f"Input file not found: {args.input}")
            return 2

        if args.use_async:
            result = asyncio.run(session.convert_async())
        else:
            result = session.convert()

    if result.is_empty:
        logger.warning("Input contains no subtitle blocks; nothing written")
        return 0

    if not result.succeeded:
        logger.error(
            f"Conversion failed at {format_percent(progress_fraction(result.completed, result.total))} "
            f"({result.completed}/{result.total} chunks): {result.error}. "
            "Please try again."
        )
        if not (args.allow_partial and result.output):
            return 1

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        write_document(result.output, out_path)
        logger.info(f"Saved {'partial ' if not result.succeeded else ''}output -> {out_path}")
    else:
        session.save(args.outdir, allow_partial=args.allow_partial)

    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
