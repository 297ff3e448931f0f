"""Command-line entry point.

Usage:
    lexirecall convert words.csv --from csv --to anki --language es
    lexirecall stats [--words words.json --language es]
    lexirecall add-card hola hello [--id w1]
    lexirecall review w1 5 [--response-time 1200 --adjust]
    lexirecall due [--limit 20]
    lexirecall upcoming [--days 7]

Study commands read and write the JSON study file at LEXIRECALL_STORE_PATH
(default data/study.json) unless --store is given.
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from adapter.file.study_repository import open_study_file
from adapter.memory.vocabulary_store import VocabularyStore
from adapter.system.clock import SystemClock
from codec.formats import EXPORT_FORMATS, IMPORT_FORMATS
from codec.models import CardRecord
from domain.model.errors import DomainError, VocabularyImportError
from port.clock import Clock
from services import study_service
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = "data/study.json"


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _card_json(card) -> dict:
    return CardRecord.from_domain(card).model_dump(mode='json', by_alias=True)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise VocabularyImportError(f"{path} is not valid UTF-8 text: {e}") from e


def _load_store(path: str, format: str, language: str, clock: Clock) -> VocabularyStore:
    store = VocabularyStore(clock=clock)
    store.import_words(_read_text(path), format, language)
    return store


# ── commands ─────────────────────────────────────────────────


def cmd_convert(args: argparse.Namespace, clock: Clock) -> int:
    store = _load_store(args.input, args.from_format, args.language, clock)
    output = store.export_words(args.to_format)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info("Wrote export", extra={"path": args.output, "words": len(store)})
    else:
        print(output)
    return 0


def cmd_stats(args: argparse.Namespace, clock: Clock) -> int:
    cards, review_log = open_study_file(args.store)
    result = {
        "study": asdict(study_service.get_overview(cards, review_log, clock)),
        "patterns": asdict(study_service.get_learning_patterns(cards, review_log, clock)),
    }
    if args.words:
        store = _load_store(args.words, args.from_format, args.language, clock)
        result["words"] = asdict(store.get_word_statistics(args.language))
    _print_json(result)
    return 0


def cmd_add_card(args: argparse.Namespace, clock: Clock) -> int:
    cards, _ = open_study_file(args.store)
    card_id = args.id or args.word
    card = study_service.create_card(cards, card_id, args.word, args.translation, clock)
    _print_json(_card_json(card))
    return 0


def cmd_review(args: argparse.Namespace, clock: Clock) -> int:
    cards, review_log = open_study_file(args.store)
    card = study_service.record_review(
        cards,
        review_log,
        args.card_id,
        args.quality,
        clock,
        response_time=args.response_time,
        adjust_for_response_time=args.adjust,
    )
    _print_json(_card_json(card))
    return 0


def cmd_due(args: argparse.Namespace, clock: Clock) -> int:
    cards, _ = open_study_file(args.store)
    queue = study_service.get_due_queue(cards, clock, limit=args.limit)
    _print_json([_card_json(card) for card in queue])
    return 0


def cmd_upcoming(args: argparse.Namespace, clock: Clock) -> int:
    cards, _ = open_study_file(args.store)
    forecast = study_service.get_forecast(cards, clock, days=args.days)
    _print_json([asdict(day) for day in forecast])
    return 0


# ── parser ───────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lexirecall", description="Vocabulary store and SM-2 review scheduler")
    parser.add_argument("--store", default=os.getenv("LEXIRECALL_STORE_PATH", DEFAULT_STORE_PATH),
                        help="JSON study file (cards and review log)")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    convert = commands.add_parser("convert", help="Convert a word list between formats")
    convert.add_argument("input", help="Input file, or - for stdin")
    convert.add_argument("--from", dest="from_format", choices=IMPORT_FORMATS, default="json")
    convert.add_argument("--to", dest="to_format", choices=EXPORT_FORMATS, default="json")
    convert.add_argument("--language", required=True, help="Language assigned to imported words")
    convert.add_argument("--output", "-o", default=None, help="Output file (stdout if omitted)")
    convert.set_defaults(handler=cmd_convert)

    stats = commands.add_parser("stats", help="Study statistics and learning patterns")
    stats.add_argument("--words", default=None, help="Also report statistics for this word list")
    stats.add_argument("--from", dest="from_format", choices=IMPORT_FORMATS, default="json")
    stats.add_argument("--language", default="unknown", help="Language assigned to the word list")
    stats.set_defaults(handler=cmd_stats)

    add_card = commands.add_parser("add-card", help="Create a review card")
    add_card.add_argument("word")
    add_card.add_argument("translation")
    add_card.add_argument("--id", default=None, help="Card id (defaults to the word)")
    add_card.set_defaults(handler=cmd_add_card)

    review = commands.add_parser("review", help="Record a review of a card")
    review.add_argument("card_id")
    review.add_argument("quality", type=float, help="Recall quality 0-5")
    review.add_argument("--response-time", type=int, default=0, help="Answer latency in milliseconds")
    review.add_argument("--adjust", action="store_true", help="Adjust quality by response time")
    review.set_defaults(handler=cmd_review)

    due = commands.add_parser("due", help="Cards due now, hardest first")
    due.add_argument("--limit", type=int, default=None)
    due.set_defaults(handler=cmd_due)

    upcoming = commands.add_parser("upcoming", help="Reviews scheduled per day")
    upcoming.add_argument("--days", type=int, default=7)
    upcoming.set_defaults(handler=cmd_upcoming)

    return parser


def main(argv: list[str] | None = None, clock: Clock | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_structured_logging(args.log_level)

    try:
        return args.handler(args, clock or SystemClock())
    except (DomainError, OSError) as e:
        logger.error("Command failed", extra={"command": args.command, "error": str(e)})
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
