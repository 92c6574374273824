#!/usr/bin/env python3
"""
TIMEBOX CLI - Plan a session, then work it.

Every invocation is a fresh process, so any session found on disk has
already been suspended by the recovery guard. Live timing happens inside
`work` / `continue`, which keep one process (and one clock anchor) for the
duration of the working stretch.
"""

import sys
from pathlib import Path

from timebox import config, paths
from timebox.allocation import (
    AllocationResult,
    calculate_allocations,
    format_clock,
    format_duration,
    parse_duration,
    validate_duration,
)
from timebox.category_source import load_categories
from timebox.observability import configure_logging
from timebox.reminders import SessionReminderLog
from timebox.session import (
    ExhaustionWatch,
    SessionStateMachine,
    apply_preset,
    category_progress,
    elapsed_minutes,
    elapsed_seconds,
    find_preset,
    get_recovery_guard,
    remaining_for_category,
    remaining_for_session,
    save_preset,
    summarize,
)
from timebox.state_store import get_store

SAMPLE_CATEGORIES = """\
categories:
  - id: deep_work
    priority: 1
    weight: 2
    min_duration: 30
  - id: email
    priority: 3
    weight: 1
    max_duration: 20
  - id: admin
    priority: 4
    weight: 1
"""


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers))]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def status_color(status: str) -> str:
    """Return ANSI color code for a progress status."""
    if status == "overtime":
        return "\033[91m"  # Red
    if status in ("urgent", "warning"):
        return "\033[93m"  # Yellow
    return "\033[0m"  # Default


def _machine() -> SessionStateMachine:
    """State machine over the stored state, persisting after every transition."""
    store = get_store()
    machine = SessionStateMachine(state=store.load())
    machine.reminders = SessionReminderLog(lambda: machine.is_session_active)
    machine.subscribe(store.save)
    return machine


def _parse_total(text: str) -> int | None:
    minutes = parse_duration(text)
    if minutes is None:
        print(f"Invalid duration: {text}")
        return None
    valid, error = validate_duration(minutes)
    if not valid:
        print(error)
        return None
    return minutes


def _plan(args) -> tuple[int, AllocationResult] | None:
    if not args:
        print("Usage: plan <duration> [categories.yaml]")
        return None
    total = _parse_total(args[0])
    if total is None:
        return None
    path = Path(args[1]) if len(args) > 1 else None
    try:
        constraints = load_categories(path)
    except ValueError as exc:
        print(f"Invalid categories file: {exc}")
        return None
    return total, calculate_allocations(constraints, total)


def _show_plan(total: int, result: AllocationResult):
    print_header(f"PLAN · {format_duration(total)}")
    rows = [[a.category_id, a.allocated_minutes, format_duration(a.allocated_minutes)] for a in result.allocations]
    if rows:
        print_table(["Category", "Min", "Duration"], rows)
    for w in result.warnings:
        print(f"  ⚠ {w.type}: {w.message}")


def _show_session(machine: SessionStateMachine):
    session = machine.session
    if session is None:
        print("No session.")
        return

    now = machine.clock.now()
    elapsed = elapsed_seconds(session, now)
    print_header(f"SESSION · {session.status}")
    rows = []
    for alloc in session.allocations:
        live = elapsed if alloc.category_id == session.active_category_id else 0.0
        progress = category_progress(alloc, live)
        marker = "▶" if alloc.category_id == session.active_category_id else " "
        remaining = remaining_for_category(alloc, live)
        rows.append(
            [
                f"{marker} {alloc.category_id}",
                format_duration(alloc.allocated_minutes),
                f"{status_color(progress.status)}{format_clock(remaining * 60)}\033[0m",
                f"{progress.percentage:.0f}%",
            ]
        )
    print_table(["Category", "Budget", "Left", "Used"], rows, widths=[20, 8, 18, 6])
    left = remaining_for_session(session.total_duration, session.allocations, elapsed)
    print(f"\nSession left: {format_clock(left * 60)} of {format_duration(session.total_duration)}")


def _work_loop(machine: SessionStateMachine):
    """Interactive working stretch. Reads commands until suspend or end."""
    watch = ExhaustionWatch()
    print("Commands: s <category> · p(ause) · r(esume) · a <category> <minutes> · q(suspend) · e(nd) · <enter> refresh")

    while machine.session is not None:
        _show_session(machine)
        if watch.observe(machine.session, machine.clock.now()):
            print(f"\n  ⏰ Time for {machine.session.active_category_id} is up.")

        try:
            line = input("\n> ").strip().split()
        except EOFError:
            line = ["q"]

        if not line:
            continue
        cmd, rest = line[0], line[1:]

        if cmd == "s" and rest:
            machine.switch_context(rest[0])
        elif cmd == "p":
            machine.pause()
        elif cmd == "r":
            machine.resume()
        elif cmd == "a" and len(rest) == 2:
            try:
                minutes = float(rest[1])
            except ValueError:
                print(f"Invalid minutes: {rest[1]}")
                continue
            current = 0.0
            if rest[0] == machine.session.active_category_id:
                current = elapsed_minutes(machine.session, machine.clock.now())
            machine.adjust_context_time(rest[0], minutes, current)
        elif cmd == "q":
            machine.suspend()
            print("Session suspended. Run 'continue' to pick it up again.")
            return
        elif cmd == "e":
            _finish(machine)
            return
        else:
            print(f"Unknown command: {' '.join(line)}")


def _finish(machine: SessionStateMachine):
    session = machine.session
    if session is None:
        return
    summary = summarize(session, elapsed_minutes(session, machine.clock.now()))
    machine.end()

    print_header("SESSION SUMMARY")
    rows = [
        [c.category_id, format_duration(c.allocated_minutes), format_duration(c.used_minutes)]
        for c in summary.breakdown
    ]
    print_table(["Category", "Planned", "Used"], rows)
    print(
        f"\nUsed {format_duration(summary.total_used_minutes)} of "
        f"{format_duration(summary.total_duration_minutes)} ({summary.completion_pct}%)"
    )


# ==================== Commands ====================


def cmd_init(args):
    """Create the app home and a sample categories file."""
    print_header("TIMEBOX - Setup")
    for d in (paths.config_dir(), paths.data_dir()):
        print(f"  ✓ {d}")
    get_store()
    print(f"  ✓ {paths.db_path()}")

    categories = paths.categories_file()
    if categories.exists():
        print(f"  ✓ {categories} (kept)")
    else:
        categories.write_text(SAMPLE_CATEGORIES)
        print(f"  ✓ {categories} (sample written)")
    return 0


def cmd_plan(args):
    """Preview an allocation without starting."""
    planned = _plan(args)
    if planned is None:
        return 1
    _show_plan(*planned)
    return 0 if planned[1].is_valid else 1


def cmd_work(args):
    """Plan and start a session, then enter the working loop."""
    planned = _plan(args)
    if planned is None:
        return 1
    total, result = planned
    _show_plan(total, result)
    if not result.is_valid:
        return 1

    machine = _machine()
    if machine.session is not None:
        print("A suspended session exists. Use 'continue' or 'discard' first.")
        return 1
    machine.start(result.allocations, total)
    _work_loop(machine)
    return 0


def cmd_continue(args):
    """Resume the suspended session."""
    machine = _machine()
    if machine.session is None:
        print("No session to continue.")
        return 1
    machine.resume()
    get_recovery_guard().mark_handled()
    _work_loop(machine)
    return 0


def cmd_discard(args):
    """End the suspended session without resuming."""
    machine = _machine()
    if machine.session is None:
        print("No session to discard.")
        return 1
    _finish(machine)
    get_recovery_guard().mark_handled()
    return 0


def cmd_status(args):
    """Show the saved session."""
    machine = _machine()
    _show_session(machine)
    if get_recovery_guard().should_offer_recovery():
        print("\nA suspended session is waiting: 'continue' or 'discard'.")
    return 0


def cmd_preset(args):
    """Save the suspended session's plan, or start from a saved preset."""
    if len(args) < 2 or args[0] not in ("save", "start"):
        print("Usage: preset save <name> | preset start <name>")
        return 1

    machine = _machine()
    if args[0] == "save":
        session = machine.session
        if session is None:
            print("No session to save.")
            return 1
        save_preset(machine.state, args[1], session.total_duration, session.allocations, machine.clock.now())
        get_store().save(machine.state)
        print(f"Saved preset {args[1]!r}.")
        return 0

    preset = find_preset(machine.state, args[1])
    if preset is None:
        print(f"No preset named {args[1]!r}.")
        return 1
    if machine.session is not None:
        print("A suspended session exists. Use 'continue' or 'discard' first.")
        return 1
    machine.start(apply_preset(preset), preset.total_duration)
    _work_loop(machine)
    return 0


def cmd_help(args):
    """Show help."""
    print("""
TIMEBOX CLI

COMMANDS:
  init                         Create app home and sample categories.yaml
  plan <duration> [file]       Preview allocation (e.g. plan 2h, plan 1:30)
  work <duration> [file]       Start a session and enter the working loop
  continue                     Resume a suspended session
  discard                      End a suspended session, printing a summary
  status                       Show the saved session
  preset save <name>           Save the current session's plan
  preset start <name>          Start a session from a saved preset
  help                         Show this help

DURATIONS:
  90m, 90min, 1.5h, 1:30, 2 (bare numbers are hours)
""")
    return 0


COMMANDS = {
    "init": cmd_init,
    "plan": cmd_plan,
    "work": cmd_work,
    "w": cmd_work,
    "continue": cmd_continue,
    "c": cmd_continue,
    "discard": cmd_discard,
    "status": cmd_status,
    "s": cmd_status,
    "preset": cmd_preset,
    "help": cmd_help,
    "h": cmd_help,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON)

    if not argv:
        return cmd_help([])

    cmd, args = argv[0], argv[1:]
    if cmd in COMMANDS:
        return COMMANDS[cmd](args)

    print(f"Unknown command: {cmd}")
    print("Run 'help' for available commands.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
