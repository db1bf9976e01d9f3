"""Command-line interface for the Quran recitation checker.

WHY: Learners and their instructors want to check a recitation from the
terminal: pick a passage, hand in what the speech engine heard, and
get a per-word verdict. The CLI wires together the reference lookup,
the session tracker, and the pluggable report renderers behind a
single command.

HOW: Uses argparse to accept a reference selection (surah/verse range,
a random verse, or literal text) and a candidate (one transcript, or a
file of cumulative updates replayed through ReplaySource). Runs the
async flow via asyncio.run(). Status messages go to stderr; reports go
to stdout, or to files in --output-dir.

RULES:
- Exactly one reference: --surah, --random, or --reference-text
- Exactly one candidate: --transcript or --transcript-file
- --verse-index picks one fetched verse (default 1); --whole-range
  joins every fetched verse instead
- --formats: comma-separated reporter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts
  (-report-2.json)
- Status output goes to stderr (not stdout)
- Python 3.9 compatible
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import httpx

from recitation_checker.api.client import (
    InvalidVerseRangeError,
    QuranAPIError,
    QuranClient,
    random_verse,
)
from recitation_checker.config import LOG_LEVEL, SESSION_THRESHOLD
from recitation_checker.core.aligner import ThresholdError
from recitation_checker.core.session import RecitationSession, SessionUpdate
from recitation_checker.reports import REPORTERS
from recitation_checker.reports.base import ReportOutput
from recitation_checker.transcription.replay import ReplaySource
from recitation_checker.transcription.tracking import track_recitation


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _parse_formats(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(REPORTERS.keys())

    keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in keys:
        if key not in REPORTERS:
            available = ", ".join(sorted(REPORTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _selection_stem(surah: int, start: Optional[int], end: Optional[int]) -> str:
    if start is None:
        return "surah-{}".format(surah)
    if end is None or end == start:
        return "surah-{}-{}".format(surah, start)
    return "surah-{}-{}-{}".format(surah, start, end)


async def _resolve_reference(args: argparse.Namespace) -> Tuple[str, str]:
    """Work out the reference text and the output stem.

    HOW: Literal --reference-text is used as-is. Otherwise the selection
    is fetched through QuranClient; a random selection is drawn first.
    One verse is practised unless --whole-range is given.

    Returns:
        (reference_text, stem) tuple.
    """
    if args.reference_text:
        return args.reference_text, "recitation"

    if args.random:
        surah, verse = random_verse()
        start, end = verse, verse
        _status("Random verse: surah {}, verse {}".format(surah, verse))
    else:
        surah, start, end = args.surah, args.start, args.end

    _status("Fetching surah {}...".format(surah))
    async with QuranClient() as client:
        verses = await client.fetch_verses(surah, start, end)

    if not verses:
        _fail("No verses returned for surah {}".format(surah))

    stem = _selection_stem(surah, start, end)
    if args.whole_range:
        _status("  Practising {} verse(s)".format(len(verses)))
        return " ".join(verses), stem

    if not 1 <= args.verse_index <= len(verses):
        _fail("--verse-index must be between 1 and {}".format(len(verses)))
    return verses[args.verse_index - 1], stem


def _describe(update: SessionUpdate) -> str:
    return "  Update {}: accuracy {:.0f}%, progress {:.0f}%, result {}".format(
        update.sequence,
        update.report.accuracy * 100,
        update.verse_progress * 100,
        update.tier.value,
    )


async def _run_session(
    session: RecitationSession,
    args: argparse.Namespace,
) -> Optional[SessionUpdate]:
    if args.transcript is not None:
        update = session.update(args.transcript)
        if update is not None:
            _status(_describe(update))
        return update

    source = ReplaySource.from_file(args.transcript_file)
    return await track_recitation(
        source,
        session,
        on_update=lambda u: _status(_describe(u)),
    )


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return {stem}{suffix} in output_dir, or the first free numbered variant."""
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    # "-report.json" -> ("-report", ".json")
    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _emit(output: ReportOutput, stem: str, output_dir: Optional[Path]) -> None:
    if output_dir is None:
        sys.stdout.write(output.content)
        if not output.content.endswith("\n"):
            sys.stdout.write("\n")
        return

    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    _status("  Saved: {}".format(path.name))


async def _run(args: argparse.Namespace) -> None:
    """Execute the check: reference, session, reports."""
    format_keys = _parse_formats(args.formats)

    output_dir = None  # type: Optional[Path]
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            _fail("Output directory does not exist: {}".format(output_dir))

    if args.transcript_file and not Path(args.transcript_file).is_file():
        _fail("File not found: {}".format(args.transcript_file))

    try:
        reference_text, stem = await _resolve_reference(args)
        session = RecitationSession(reference_text, threshold=args.threshold)
    except (InvalidVerseRangeError, ThresholdError, QuranAPIError) as e:
        _fail(str(e))
    except httpx.HTTPError as e:
        _fail("Could not reach the Quran API: {}".format(e))

    _status("Checking recitation ({} reference words)...".format(len(session.reference_words)))
    update = await _run_session(session, args)
    if update is None:
        _fail("No transcript updates to check")

    for key in format_keys:
        reporter = REPORTERS[key]()
        for output in reporter.render(update):
            _emit(output, stem, output_dir)

    _status("Done: {} recitation".format(update.tier.value) if update.complete else "Done: not complete yet")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Kept separate from main() so tests can inspect the parser without
    running a check.
    """
    parser = argparse.ArgumentParser(
        prog="recitation_checker",
        description="Check a Quran recitation transcript word by word against "
                    "the reference text.",
    )

    reference = parser.add_mutually_exclusive_group(required=True)
    reference.add_argument(
        "--surah",
        type=int,
        default=None,
        help="Surah number (1-114) to fetch the reference from.",
    )
    reference.add_argument(
        "--random",
        action="store_true",
        help="Practise a randomly chosen verse.",
    )
    reference.add_argument(
        "--reference-text",
        default=None,
        help="Use this Arabic text as the reference instead of fetching one.",
    )

    parser.add_argument(
        "--start",
        type=int,
        default=None,
        help="First verse of the range (1-indexed).",
    )
    parser.add_argument(
        "--end",
        type=int,
        default=None,
        help="Last verse of the range (inclusive). Requires --start.",
    )
    parser.add_argument(
        "--verse-index",
        type=int,
        default=1,
        help="Which fetched verse to practise, 1-indexed (default: %(default)s).",
    )
    parser.add_argument(
        "--whole-range",
        action="store_true",
        help="Practise all fetched verses joined together.",
    )

    candidate = parser.add_mutually_exclusive_group(required=True)
    candidate.add_argument(
        "--transcript",
        default=None,
        help="What the speech engine heard, as a single transcript.",
    )
    candidate.add_argument(
        "--transcript-file",
        default=None,
        help="UTF-8 file with one cumulative transcript update per line.",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=SESSION_THRESHOLD,
        help="Similarity threshold for a matched word (default: %(default)s).",
    )
    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of report formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(REPORTERS.keys()))),
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save report files (default: print to stdout).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m recitation_checker`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.end is not None and args.start is None:
        parser.error("--end requires --start")

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
