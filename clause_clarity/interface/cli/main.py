"""CLI for clause analysis, follow-up questions, batch runs and strategy config.

Why: Thin delivery layer; all decisions live in the use cases.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from clause_clarity.application.dto.followup_dto import FollowupAnswer
from clause_clarity.config.composition import (
    build_analyze_use_case,
    build_followup_use_case,
    build_strategy_config_store,
)
from clause_clarity.config.settings import AppSettings
from clause_clarity.domain.models import AnalysisFacets
from clause_clarity.domain.services.strategy import describe_capabilities
from clause_clarity.infrastructure.settings_store.json_strategy_config_store import TOGGLES
from clause_clarity.interface.messages import describe_failure

logger = logging.getLogger(__name__)


def _fail(ex: Exception) -> int:
    failure = describe_failure(ex)
    if failure.status == 500:
        logger.exception("Unexpected failure")
    print(f"✗ Error ({failure.status}): {failure.message}")
    return 1


def _read_clause(args) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return args.clause or ""


def _print_facets(facets: AnalysisFacets, as_json: bool) -> None:
    if as_json:
        print(json.dumps(facets.to_dict(), indent=2, ensure_ascii=False))
        return
    print("\n" + "=" * 80)
    print("SIMPLIFIED:")
    print("=" * 80)
    print(facets.explanation)
    print("\nRISKY TERMS:")
    for t in facets.risky_terms:
        print(f"  - {t.term} [{t.severity}]: {t.explanation}")
    print("\nLEGAL REFERENCES:")
    for r in facets.legal_references:
        print(f"  - {r.title} ({r.url}): {r.relevance}")


def _print_answer(result: FollowupAnswer) -> None:
    print(f"[{result.strategy.value}] {result.answer}")
    if result.metrics is not None:
        m = result.metrics
        note = " (fallback)" if m.fallback_used else ""
        print(
            f"  → {m.chunks_used}/{m.total_chunks} chunks, "
            f"avg relevance {m.average_relevance:.3f}, ~{m.tokens_saved} chars saved{note}"
        )


def cmd_analyze(args) -> int:
    try:
        settings = AppSettings()
        config = build_strategy_config_store(settings).load()
        uc = build_analyze_use_case(settings)
        facets = asyncio.run(uc.analyze(_read_clause(args), config))
    except Exception as ex:  # noqa: BLE001
        return _fail(ex)
    _print_facets(facets, args.json)
    return 0


def cmd_ask(args) -> int:
    """Answer one or more questions about a clause; indexes are reused across questions."""
    try:
        settings = AppSettings()
        config = build_strategy_config_store(settings).load()
        uc = build_followup_use_case(settings)
        clause = _read_clause(args)
        facets = None
        if args.facets:
            facets = AnalysisFacets.from_dict(
                json.loads(Path(args.facets).read_text(encoding="utf-8"))
            )

        async def run() -> list[FollowupAnswer]:
            return [await uc.answer(q, clause, facets, config) for q in args.question]

        answers = asyncio.run(run())
    except Exception as ex:  # noqa: BLE001
        return _fail(ex)
    for answer in answers:
        _print_answer(answer)
    if args.stats:
        print(json.dumps(uc.index_cache.stats(), indent=2))
    return 0


def cmd_batch(args) -> int:
    try:
        settings = AppSettings()
        config = build_strategy_config_store(settings).load()
        clauses = list(args.clauses)
        if args.file:
            clauses += json.loads(Path(args.file).read_text(encoding="utf-8"))
        uc = build_followup_use_case(settings)
        results = asyncio.run(uc.process_batch(clauses, config))
    except Exception as ex:  # noqa: BLE001
        return _fail(ex)
    print(json.dumps([f.to_dict() for f in results], indent=2, ensure_ascii=False))
    return 0


def cmd_config(args) -> int:
    try:
        store = build_strategy_config_store(AppSettings())
        if args.set:
            changes = {}
            for item in args.set:
                key, _, value = item.partition("=")
                changes[key.strip()] = value.strip().lower() in ("1", "true", "yes", "on")
            config = store.update(**changes)
        else:
            config = store.load()
    except Exception as ex:  # noqa: BLE001
        return _fail(ex)
    print(json.dumps(describe_capabilities(config), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point with subcommands.

    Subcommands:
    - analyze: simplify a clause, list risky terms and legal references
    - ask:     follow-up question(s) about an analyzed clause
    - batch:   analyze several clauses concurrently
    - config:  show or change strategy toggles

    Returns:
        Exit code (0=success, 1=failure)
    """
    parser = argparse.ArgumentParser(
        prog="clause-clarity",
        description="Plain-language analysis of legal clauses",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p_analyze = subparsers.add_parser("analyze", help="Analyze one clause")
    p_analyze.add_argument("--clause", help="Clause text")
    p_analyze.add_argument("--file", help="Read the clause from a text file")
    p_analyze.add_argument("--json", action="store_true", help="Print facets as JSON")

    p_ask = subparsers.add_parser("ask", help="Ask follow-up questions about a clause")
    p_ask.add_argument("--clause", help="Clause text")
    p_ask.add_argument("--file", help="Read the clause from a text file")
    p_ask.add_argument("--facets", help="JSON file written by 'analyze --json'")
    p_ask.add_argument(
        "--question", action="append", required=True, help="Question (repeatable)"
    )
    p_ask.add_argument("--stats", action="store_true", help="Print index cache stats")

    p_batch = subparsers.add_parser("batch", help="Analyze several clauses")
    p_batch.add_argument("clauses", nargs="*", help="Clause texts")
    p_batch.add_argument("--file", help="JSON file with a list of clauses")

    p_config = subparsers.add_parser("config", help="Show or update strategy toggles")
    p_config.add_argument(
        "--set",
        action="append",
        metavar="TOGGLE=BOOL",
        help=f"One of: {', '.join(TOGGLES)}",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=AppSettings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "analyze":
        return cmd_analyze(args)
    elif args.command == "ask":
        return cmd_ask(args)
    elif args.command == "batch":
        return cmd_batch(args)
    elif args.command == "config":
        return cmd_config(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
