"""CLI entry-point: run the reflection conversation in the terminal.

Usage:
    python -m ary.main
    # or via pyproject entry-point:  ary-reflect
"""

from __future__ import annotations

import argparse
import uuid

from dotenv import load_dotenv
from ary.graph import local_graph
from ary.logging_config import setup_logging
from ary.models.initial_state import new_reflection_state
from ary.workflow import build_graph, can_finish, forget, resume_answer, resume_finish

BANNER = """
╔══════════════════════════════════════════════════════════════╗
║                     Ary: a moment to reflect                ║
║                                                             ║
║  Answer in your own words. There are no right or wrong      ║
║  answers.                                                   ║
║  Type 'finish' to wrap up early, 'quit' to leave.           ║
╚══════════════════════════════════════════════════════════════╝
"""


def _print_profile(result: dict) -> None:
    profile = result.get("profile", {})
    print("\n" + "═" * 60)
    print(profile.get("title", "Reflection complete").upper())
    print("═" * 60)
    print(profile.get("summary", ""))
    if profile.get("competencies"):
        print("\nStrengths you showed: " + ", ".join(profile["competencies"]))
    if profile.get("detailed_evaluation"):
        print("\n" + profile["detailed_evaluation"])
    print("═" * 60)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="ary-reflect", description=__doc__.splitlines()[0])
    parser.add_argument(
        "--min-entries",
        type=int,
        default=None,
        help="answers required before 'finish' is accepted",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging("DEBUG" if args.verbose else None)
    local_graph.load_all()

    print(BANNER)

    graph = build_graph()
    thread_id = str(uuid.uuid4())
    config = {"configurable": {"thread_id": thread_id}}
    initial_state = new_reflection_state(thread_id, min_entries_to_finish=args.min_entries)

    # First invocation: router → interviewer → human_turn (interrupt)
    result = graph.invoke(initial_state, config)

    while True:
        messages = result.get("messages", [])

        if result.get("done") and result.get("profile"):
            if messages:
                print(f"\nAry: {messages[-1].content}")
            _print_profile(result)
            break

        if result.get("escalation_message"):
            print(f"\n⚠️  {result['escalation_message']}")
        if messages:
            print(f"\nAry: {messages[-1].content}\n")

        try:
            user_input = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nSession ended by user.")
            break

        if user_input.lower() == "quit":
            print("\nSession ended. Nothing was saved.")
            break

        if user_input.lower() == "finish":
            if not can_finish(result):
                print(
                    f"\nA few more answers first "
                    f"({len(result.get('evidence', []))} of "
                    f"{result.get('min_entries_to_finish')})."
                )
                continue
            result = resume_finish(graph, config)
            continue

        if not user_input:
            continue

        result = resume_answer(graph, config, user_input)

    forget(graph, config)


if __name__ == "__main__":
    main()
