"""Lightweight CLI helpers for inspecting the stored interview session."""
from __future__ import annotations

import argparse
from typing import Optional

from graph.state import Session
from services.countdown import format_clock
from services.report import build_report
from storage.session_store import SessionStore


def describe(session: Optional[Session], label: str = "session") -> str:
    if session is None:
        return f"no stored {label}"
    question = session.current_question.id if session.current_question else "-"
    remaining = session.time_remaining_seconds
    clock = format_clock(remaining) if remaining is not None else "-"
    return (
        f"[{label}] {session.session_id} candidate={session.candidate_name or '-'} "
        f"state={session.current_state} phase={session.interview_phase} question={question} "
        f"responses={len(session.responses)} weak={len(session.weak_areas)} remaining={clock}"
    )


def print_report(store: SessionStore) -> None:
    session = store.load()
    if session is None:
        print("no stored session")
        return
    report = build_report(session)
    print(
        f"{report.candidate_name or '-'}: answered={report.total_answered} strong={report.strong_count} "
        f"weak={report.weak_count} follow_ups={report.follow_up_count} strong_rate={report.strong_rate}%"
    )
    for insight in report.insights:
        verdict = "weak" if insight.is_weak else "ok"
        print(f"  {insight.question_id}: {verdict} {insight.reasoning}")


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dir", help="Storage directory (defaults to settings)")
    parser.add_argument("--show", action="store_true", help="Describe the current and backup snapshots")
    parser.add_argument("--report", action="store_true", help="Print the summary report of the stored session")
    parser.add_argument("--clear", action="store_true", help="Remove stored session and backup")
    args = parser.parse_args(argv)

    store = SessionStore(args.dir)
    if args.show:
        print(describe(store.load()))
        print(describe(store.load_backup(), "backup"))
    if args.report:
        print_report(store)
    if args.clear:
        store.clear_all()
        print("cleared")


if __name__ == "__main__":
    main()
