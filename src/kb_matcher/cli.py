"""Command line access to the knowledge base matcher.

Examples::

    kb-matcher ask "How can I volunteer?"
    kb-matcher ask "office address" --documents pages.json --threshold 0.2
    kb-matcher chat "hello" "where is your office" --user demo
    kb-matcher tokenize "How can I volunteer at Wasilah?"
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from kb_matcher.config import Settings, get_settings
from kb_matcher.domain.model import Document
from kb_matcher.observability.logging import configure_logging
from kb_matcher.observability.metrics import get_metrics, init_metrics
from kb_matcher.observability.tracing import init_tracing
from kb_matcher.search.analyzers import tokenize
from kb_matcher.search.formatter import format_response
from kb_matcher.search.matcher import KnowledgeBaseMatcher
from kb_matcher.search.synonyms import expand_query
from kb_matcher.seeds.faqs import build_seed_documents
from kb_matcher.services.chat_responder import ChatResponder
from kb_matcher.services.rate_limit import RateLimitExceededError


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kb-matcher",
        description="Match chat questions against a knowledge base",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Root log level (default: LOG_LEVEL setting)",
    )
    parser.add_argument(
        "--plain-logs",
        action="store_true",
        help="Emit human-readable logs instead of JSON",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Write the Prometheus exposition to stderr after the command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Print the formatted reply for a question")
    ask.add_argument("query", help="Question text")
    ask.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Minimum combined score (default: MATCH_THRESHOLD setting)",
    )
    ask.add_argument(
        "--documents",
        type=Path,
        help="JSON file with a list of page or FAQ records (default: seed FAQs)",
    )
    ask.add_argument(
        "--explain",
        action="store_true",
        help="Include the matched page id and score breakdown",
    )

    chat = subparsers.add_parser("chat", help="Run messages through the chat responder in order")
    chat.add_argument("messages", nargs="+", metavar="MESSAGE", help="User messages")
    chat.add_argument("--user", default="cli", help="User id used for rate limiting (default: cli)")
    chat.add_argument("--chat-id", default="cli", help="Conversation id attached to log records (default: cli)")
    chat.add_argument(
        "--documents",
        type=Path,
        help="JSON file with a list of page or FAQ records (default: seed FAQs)",
    )

    tokenize_cmd = subparsers.add_parser("tokenize", help="Print the tokens of a text")
    tokenize_cmd.add_argument("text")

    expand = subparsers.add_parser("expand", help="Print the synonym-expanded tokens of a query")
    expand.add_argument("text")
    return parser


def _write_json(payload: Any) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode() + "\n")


def _record_to_document(record: Mapping[str, Any], position: int) -> Document:
    if "content" not in record and isinstance(record.get("answer"), str):
        keywords = record.get("keywords")
        return Document.from_faq(
            str(record.get("question") or ""),
            record["answer"],
            keywords if isinstance(keywords, list) else (),
            id=record.get("id") if isinstance(record.get("id"), str) else None,
            url=record.get("url") if isinstance(record.get("url"), str) else "",
        )
    return Document.from_record(record, position=position)


def load_documents(path: Path | None) -> list[Document]:
    """Read page or FAQ records from ``path``, or return the seed FAQs.

    Raises:
        ValueError: The file is not valid JSON or not a list of records.
    """
    if path is None:
        return build_seed_documents()
    try:
        payload = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"Invalid documents file {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError(f"Documents file {path} must contain a JSON list")
    return [
        _record_to_document(record, position) for position, record in enumerate(payload) if isinstance(record, Mapping)
    ]


def _run_ask(args: argparse.Namespace, settings: Settings) -> int:
    matcher = KnowledgeBaseMatcher.from_settings(settings)
    documents = load_documents(args.documents)
    match = matcher.find_best_match(args.query, documents, args.threshold)
    payload = format_response(match).to_payload()
    if args.explain:
        payload["explain"] = {
            "documentId": match.document.id if match else None,
            "tfidf": match.tfidf_score if match else 0.0,
            "fuzzy": match.fuzzy_score if match else 0.0,
            "queryTokens": matcher.expand_query(args.query),
        }
    _write_json(payload)
    return 0


def _run_chat(args: argparse.Namespace, settings: Settings) -> int:
    responder = ChatResponder(load_documents(args.documents), settings=settings)
    previous_meta: dict[str, Any] | None = None
    for message in args.messages:
        try:
            reply = responder.respond(args.user, message, chat_id=args.chat_id, previous_bot_meta=previous_meta)
        except RateLimitExceededError as exc:
            logger.error("%s", exc)
            return 2
        if reply is None:
            continue
        previous_meta = reply.meta
        _write_json({"message": message, "reply": reply.text, "matchType": reply.match_type, "meta": reply.meta})
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    try:
        settings = get_settings()
    except ValueError as exc:
        parser.error(f"invalid settings: {exc}")

    # stdout carries command output, logs go to stderr
    configure_logging(
        level=args.log_level or settings.log_level,
        json_output=settings.log_json and not args.plain_logs,
        stream=sys.stderr,
    )
    init_metrics(settings.service_name)
    init_tracing(settings.service_name)

    exit_code = _run_command(args, settings)
    if args.metrics:
        sys.stderr.write(get_metrics().decode())
    return exit_code


def _run_command(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "tokenize":
        _write_json(tokenize(args.text))
        return 0
    if args.command == "expand":
        _write_json(expand_query(args.text))
        return 0

    try:
        if args.command == "chat":
            return _run_chat(args, settings)
        return _run_ask(args, settings)
    except FileNotFoundError as exc:
        logger.error("Documents file not found: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Documents file unreadable: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
