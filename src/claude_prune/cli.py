"""CLI interface for claude-prune."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from . import __version__
from .analyzer import SessionAnalyzer
from .errors import NoBackupsFoundError, ResourceMissingError
from .pruner import prune_session_lines, prune_with_indices
from .session import (
    backup_dir,
    load_lines,
    locate_latest_backup,
    restore_backup,
    save_lines,
    transcript_path,
)
from .strategies.selection import AUTO_RECENT_START_FRACTION, recent_positions
from .tokens import context_pct, estimate_tokens, extract_usage_tokens
from .types import PruneResult

# Ensure all strategies are registered
import claude_prune.strategies  # noqa: F401

# Fix Windows stdout/stderr encoding for Unicode characters (box-drawing)
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")


# ─── Formatting ───────────────────────────────────────────────────────────────

def fmt_bytes(b: int) -> str:
    if b < 1024:
        return f"{b}B"
    elif b < 1024 * 1024:
        return f"{b / 1024:.1f}KB"
    else:
        return f"{b / (1024 * 1024):.2f}MB"


def fmt_pct(part: int, total: int) -> str:
    if total == 0:
        return "0%"
    return f"{part / total * 100:.1f}%"


def fmt_tokens(t: int) -> str:
    if t < 1000:
        return f"{t}"
    elif t < 1_000_000:
        return f"{t / 1000:.1f}K"
    else:
        return f"{t / 1_000_000:.2f}M"


def fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def ask_yes_no(question: str, default: bool = True) -> bool:
    """Plain yes/no confirmation; non-TTY stdin takes the default."""
    if not sys.stdin.isatty():
        return default
    from rich.prompt import Confirm
    try:
        return Confirm.ask(question, default=default)
    except (KeyboardInterrupt, EOFError):
        return False


def print_prune_result(result: PruneResult, lines: list[str]):
    before_bytes = sum(len(ln.encode("utf-8")) for ln in lines)
    after_bytes = sum(len(ln.encode("utf-8")) for ln in result.out_lines)
    before_tok = estimate_tokens(lines)
    after_tok = estimate_tokens(result.out_lines)

    print(f"\n  Strategy: {result.strategy}")
    print(f"  Turns:    {result.kept} kept, {result.dropped} dropped")
    print(f"  Lines:    {len(lines)} -> {len(result.out_lines)}")
    print(f"  Size:     {fmt_bytes(before_bytes)} -> {fmt_bytes(after_bytes)}"
          f" ({fmt_pct(before_bytes - after_bytes, before_bytes)} freed)")
    print(f"  Tokens:   ~{fmt_tokens(before_tok)} -> ~{fmt_tokens(after_tok)}")

    usage = extract_usage_tokens(lines)
    if usage is not None:
        print(f"  Context:  {fmt_tokens(usage['total'])} before pruning, reported by last turn"
              f" ({context_pct(usage['total'])}%)")
    print()


# ─── Commands ─────────────────────────────────────────────────────────────────

def _load_transcript(session_id: str, cwd: str | None) -> tuple[Path, list[str]]:
    path = transcript_path(session_id, cwd)
    try:
        return path, load_lines(path)
    except ResourceMissingError as e:
        fail(str(e))


def _auto_select(analyzer: SessionAnalyzer) -> tuple[list[int], str]:
    positions = analyzer.turn_positions
    indices = recent_positions(positions, AUTO_RECENT_START_FRACTION)
    start = len(positions) - len(indices)
    print(f"\n  Auto-pruning: keeping messages {start + 1}-{len(positions)}")
    return indices, "Auto: recent work"


def cmd_prune(args):
    path, lines = _load_transcript(args.session, args.cwd)
    print(f"  Scanned {len(lines)} lines from {path.name}")

    if args.keep is not None:
        result = prune_session_lines(lines, args.keep)
        print("  Using legacy mode. Run without -k for interactive pruning.")
        print(f"  Assistant turns: {result.assistant_count}")
        print_prune_result(result, lines)
        if not args.dry_run and not args.yes and not ask_yes_no("Proceed?"):
            print("  Cancelled")
            return
    else:
        analyzer = SessionAnalyzer(lines)
        if args.non_interactive:
            indices, label = _auto_select(analyzer)
            result = prune_with_indices(lines, indices, label)
            print_prune_result(result, lines)
            if not args.dry_run and not args.yes and not ask_yes_no("Proceed?"):
                print("  Cancelled")
                return
        else:
            from .interactive import InteractiveUI

            ui = InteractiveUI(analyzer)
            selection = ui.select_strategy()
            if selection is None:
                print("  Cancelled")
                return
            result = prune_with_indices(lines, selection.indices_to_keep, selection.strategy)
            print_prune_result(result, lines)
            if not args.dry_run and not args.yes and not ui.confirm_prune(selection):
                print("  Cancelled")
                return

    if args.dry_run:
        print("  DRY RUN — no files modified.")
        print()
        return

    backup = save_lines(path, result.out_lines, backup_dir(args.cwd), args.session)
    print(f"  Pruned {path}")
    print(f"  Backup: {backup.name}")
    print()


def cmd_restore(args):
    try:
        latest, backup_path = locate_latest_backup(args.session, args.cwd)
    except (ResourceMissingError, NoBackupsFoundError) as e:
        fail(str(e))

    target = transcript_path(args.session, args.cwd)
    when = datetime.fromtimestamp(latest.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    print(f"\n  Found latest backup from {when}")

    if args.dry_run:
        print(f"  Would restore from: {backup_path}")
        print(f"  Would restore to:   {target}")
        print()
        return

    if not args.yes and not ask_yes_no(f"Restore session from backup ({when})?", default=False):
        print("  Cancelled")
        return

    restore_backup(args.session, args.cwd)
    print(f"  Restored: {target}")
    print(f"  From backup: {backup_path}")
    print()


# ─── Parser ───────────────────────────────────────────────────────────────────

COMMANDS = ("prune", "restore")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claude-prune",
        description="Prune early messages from a Claude Code session .jsonl file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    session_help = "UUID of the session (without .jsonl)"
    cwd_help = "Project directory the session belongs to (default: current)"

    p_prune = sub.add_parser("prune", help="Intelligently prune messages from a session")
    p_prune.add_argument("session", help=session_help)
    p_prune.add_argument("-k", "--keep", type=int, default=None, help="Number of assistant messages to keep (legacy mode)")
    p_prune.add_argument("--dry-run", action="store_true", help="Show what would happen but don't write")
    p_prune.add_argument("--non-interactive", action="store_true", help="Skip the menu, keep recent work")
    p_prune.add_argument("-y", "--yes", action="store_true", help="Don't ask for confirmation")
    p_prune.add_argument("--cwd", help=cwd_help)

    p_restore = sub.add_parser("restore", help="Restore a session from the latest backup")
    p_restore.add_argument("session", help=session_help)
    p_restore.add_argument("--dry-run", action="store_true", help="Show what would be restored but don't write")
    p_restore.add_argument("-y", "--yes", action="store_true", help="Don't ask for confirmation")
    p_restore.add_argument("--cwd", help=cwd_help)

    return parser


def main(argv: list[str] | None = None):
    if argv is None:
        argv = sys.argv[1:]
    # A bare session id runs prune
    if argv and not argv[0].startswith("-") and argv[0] not in COMMANDS:
        argv = ["prune", *argv]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "prune": cmd_prune,
        "restore": cmd_restore,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
