"""Command-line entry point.

Seed the collection (destructive)::

    knowledge-seed seed --mode replace --count 10

Append another batch, check the store, or chat with the backend::

    knowledge-seed seed --mode append --count 5
    knowledge-seed ping
    knowledge-seed chat --url http://localhost:3000

Exit status is non-zero when the store is unreachable or generation fails.
"""

from __future__ import annotations

import argparse
import logging
import sys

from knowledge_seeder.config import settings
from knowledge_seeder.exceptions import GenerationError, IndexMismatchError, StoreConnectionError
from knowledge_seeder.ingestion.models import SeedMode

logger = logging.getLogger(__name__)

EXIT_CONNECTION = 2
EXIT_GENERATION = 3
EXIT_INDEX_MISMATCH = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="knowledge-seed", description="Vector store seeding")
    parser.add_argument("--log-level", default=settings.log_level, help="Root log level")
    sub = parser.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed", help="Generate, embed and store records")
    seed.add_argument(
        "--mode",
        choices=[m.value for m in SeedMode],
        default=SeedMode.REPLACE.value,
        help="'replace' clears the collection first; 'append' keeps existing documents",
    )
    seed.add_argument("--count", type=int, default=settings.default_record_count)
    seed.add_argument("--collection", default=settings.chroma_collection)

    sub.add_parser("ping", help="Check that the document store is reachable")

    chat = sub.add_parser("chat", help="Interactive chat against the /chat API")
    chat.add_argument("--url", default=settings.chat_api_url)
    return parser


def run_seed(args: argparse.Namespace) -> int:
    from knowledge_seeder.ingestion.pipeline import build_pipeline

    if args.count < 1:
        logger.error("--count must be positive, got %d", args.count)
        return 1
    try:
        report = build_pipeline(collection_name=args.collection).seed(args.mode, args.count)
    except StoreConnectionError as exc:
        logger.error("Error connecting to the document store: %s", exc)
        return EXIT_CONNECTION
    except IndexMismatchError as exc:
        logger.error("Collection does not match the configured index: %s", exc)
        return EXIT_INDEX_MISMATCH
    except GenerationError as exc:
        logger.error("Error generating records: %s", exc)
        return EXIT_GENERATION

    print(report.summary_line())
    for failure in report.failures:
        print(f"  - #{failure.index} ({failure.record_id or '?'}) {failure.stage}: {failure.reason}")
    return 0


def run_ping(args: argparse.Namespace) -> int:
    from knowledge_seeder.store.chroma_store import ChromaStoreGateway

    try:
        with ChromaStoreGateway().acquire():
            pass
    except StoreConnectionError as exc:
        logger.error("%s", exc)
        return EXIT_CONNECTION
    print(f"Connected to Chroma at {settings.chroma_host}:{settings.chroma_port}")
    return 0


def run_chat(args: argparse.Namespace) -> int:
    from knowledge_seeder.serving.client import ChatSession

    session = ChatSession(base_url=args.url)
    print("Type a message (Ctrl-D to quit).")
    for line in sys.stdin:
        reply = session.send(line)
        if reply is not None:
            print(f"agent> {reply}")
    return 0


COMMANDS = {"seed": run_seed, "ping": run_ping, "chat": run_chat}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
