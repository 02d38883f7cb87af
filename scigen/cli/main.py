from __future__ import annotations

import argparse
import asyncio
import json
import random
import sys
from typing import Callable, List, Optional

from scigen.config import AppConfig, default_app_config, resolve_api_key
from scigen.data.schemas import (
    DEFAULT_TOPICS,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    OPTION_LABELS,
    Question,
    Statistics,
    Topic,
)
from scigen.errors import ConfigError, MissingCredentialError
from scigen.provider import ProblemProvider
from scigen.session import SessionSnapshot, SessionState
from scigen.utils.logging import setup_logging

PROMPT = "Answer [A-D], r = reset stats, q = quit: "


def build_provider(cfg: AppConfig) -> ProblemProvider:
    """Create the provider; raises MissingCredentialError when no key is configured."""
    return ProblemProvider(resolve_api_key(cfg.provider), cfg.provider)


def render_question(q: Question) -> str:
    lines = [f"[{q.topic.display_name} | Level {q.difficulty}/10]", q.question, ""]
    for i, opt in enumerate(q.options):
        lines.append(f"  {Question.option_label(i)}) {opt}")
    return "\n".join(lines)


def render_solution(snap: SessionSnapshot) -> str:
    q = snap.question
    if q is None:
        return ""
    verdict = "Correct!" if snap.is_correct else "Incorrect"
    return "\n".join([
        verdict,
        f"Answer: {Question.option_label(q.correct_answer)}) {q.correct_option}",
        f"Explanation: {q.explanation}",
    ])


def render_stats(stats: Statistics) -> str:
    return (
        f"Correct: {stats.correct} | Total: {stats.total} | "
        f"Accuracy: {stats.accuracy_percent}% | Streak: {stats.streak} | "
        f"Best streak: {stats.best_streak}"
    )


def _parse_topics(values: Optional[List[str]], cfg: AppConfig) -> List[Topic]:
    names = values if values else cfg.session.topics
    return [Topic.from_name(v) for v in names]


def _difficulty_arg(value: str) -> int:
    n = int(value)
    if not MIN_DIFFICULTY <= n <= MAX_DIFFICULTY:
        raise argparse.ArgumentTypeError(
            f"difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}"
        )
    return n


def cmd_topics(cfg: AppConfig) -> int:
    configured = {Topic.from_name(t) for t in cfg.session.topics}
    for topic in Topic:
        mark = "*" if topic in configured else " "
        print(f"{mark} {topic.short_label.lower():<14} {topic.display_name}")
    defaults = ", ".join(t.short_label.lower() for t in Topic if t in DEFAULT_TOPICS)
    print(f"\n* = selected by configuration (built-in defaults: {defaults})")
    return 0


async def _ask(session: SessionState, as_json: bool) -> int:
    if not await session.generate():
        print(f"Error: {session.error}")
        return 1
    q = session.current_question
    if q is None:
        print("Error: No question available")
        return 1
    if as_json:
        print(json.dumps(q.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_question(q))
        print()
        print(f"Answer: {Question.option_label(q.correct_answer)}) {q.correct_option}")
        print(f"Explanation: {q.explanation}")
    return 0


async def play(
    session: SessionState,
    rounds: Optional[int] = None,
    read: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> int:
    """Interactive loop: generate, read an answer, reveal, show stats."""
    played = 0
    while rounds is None or played < rounds:
        if not await session.generate():
            out(f"Error: {session.error}")
            try:
                raw = read("Press Enter to try again or q to quit: ").strip().lower()
            except EOFError:
                raw = "q"
            if raw == "q":
                break
            continue

        q = session.current_question
        if q is None:
            out("Error: No question available")
            return 1
        out(render_question(q))

        while True:
            try:
                raw = read(PROMPT).strip()
            except EOFError:
                raw = "q"
            if raw.lower() == "q":
                out(render_stats(session.stats))
                return 0
            if raw.lower() == "r":
                session.reset_statistics()
                out("Statistics reset")
                continue
            if raw.upper() in OPTION_LABELS:
                session.select_answer(OPTION_LABELS.index(raw.upper()))
                break
            out("Please enter A, B, C or D")

        session.reveal()
        out(render_solution(session.snapshot()))
        out(render_stats(session.stats))
        played += 1
    out(render_stats(session.stats))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="scigen",
        description="SciGen - AI-generated science practice questions",
        epilog="""Examples:
  # List available topics
  scigen topics

  # Print one physics question at difficulty 7 as JSON
  scigen ask --topic physics --difficulty 7 --json

  # Play five rounds with custom configuration
  scigen play --rounds 5 --config configs/scigen.yaml
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", default=None, help="Path to config file (.json, .yaml or .yml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Echo log messages to the console")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("topics", help="List available topics")

    for name, help_text in (("ask", "Generate and print a single question"), ("play", "Answer questions interactively")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--topic", "-t", action="append", dest="topics", help="Topic to draw from (repeatable)")
        sub.add_argument("--difficulty", "-d", type=_difficulty_arg, default=None, help="Difficulty 1-10")
        sub.add_argument("--seed", type=int, default=None, help="Seed for topic selection")
        if name == "ask":
            sub.add_argument("--json", action="store_true", help="Print the question as JSON")
        else:
            sub.add_argument("--rounds", "-n", type=int, default=None, help="Stop after N questions")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        cfg = AppConfig.from_file(args.config) if args.config else default_app_config()
    except FileNotFoundError:
        print(f"Error: Config file '{args.config}' not found")
        return 1
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    logger = setup_logging(
        cfg.logging.log_dir,
        cfg.logging.filename,
        "DEBUG" if args.verbose else cfg.logging.level,
        structured=cfg.logging.structured,
        console=args.verbose,
    )

    try:
        if args.command == "topics":
            return cmd_topics(cfg)

        topics = _parse_topics(args.topics, cfg)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    try:
        provider = build_provider(cfg)
    except MissingCredentialError as e:
        print(f"Error: {e}")
        logger.error("MissingCredentialError: %s", e)
        return 2

    seed = args.seed if args.seed is not None else cfg.session.seed
    session = SessionState(
        provider,
        topics=topics,
        difficulty=args.difficulty if args.difficulty is not None else cfg.session.difficulty,
        rng=random.Random(seed),
    )
    logger.info(
        "Session started: topics=%s difficulty=%d",
        ",".join(sorted(t.short_label for t in session.selected_topics)),
        session.difficulty,
    )

    try:
        if args.command == "ask":
            return asyncio.run(_ask(session, args.json))
        return asyncio.run(play(session, rounds=args.rounds))
    except KeyboardInterrupt:
        print()
        print(render_stats(session.stats))
        return 130


if __name__ == "__main__":
    sys.exit(main())
