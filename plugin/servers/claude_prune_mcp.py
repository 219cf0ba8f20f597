#!/usr/bin/env python3
"""claude-prune MCP Server — exposes session analysis, pruning and restore as Claude Code tools."""

from __future__ import annotations

from fastmcp import FastMCP

mcp = FastMCP("claude-prune")


@mcp.tool()
def analyze_session(session_id: str, cwd: str | None = None) -> str:
    """Analyze a Claude Code session transcript.

    Returns turn and token counts, detected work phases, and the candidate
    pruning strategies with the share of turns each would free.
    """
    from claude_prune.analyzer import SessionAnalyzer
    from claude_prune.errors import ResourceMissingError
    from claude_prune.registry import build_candidates
    from claude_prune.session import load_lines, transcript_path
    import claude_prune.strategies  # noqa: F401

    try:
        lines = load_lines(transcript_path(session_id, cwd))
    except ResourceMissingError as e:
        return str(e)

    analyzer = SessionAnalyzer(lines)
    analysis = analyzer.get_analysis()

    out = []
    out.append(f"Session: {session_id[:36]}")
    out.append(f"Turns: {analysis.total_messages} ({len(lines)} lines)")
    tok = analysis.total_tokens
    out.append(f"Tokens: ~{tok / 1000:.1f}K" if tok >= 1000 else f"Tokens: ~{tok}")
    out.append("")

    out.append("Work Phases:")
    for phase in analysis.work_phases:
        out.append(
            f"  {phase.start_rank + 1}-{phase.end_rank + 1}: {phase.description}"
            f" ({phase.message_count} turns, {phase.characteristics.errors} errors,"
            f" {phase.characteristics.file_edits} edits)"
        )
    if not analysis.work_phases:
        out.append("  (none)")
    out.append("")

    out.append(f"Key turns: {len(analysis.key_messages)}")
    out.append("")
    out.append("Strategies:")
    for cand in build_candidates(analyzer):
        out.append(f"  {cand.name:<10} {cand.label} — frees {cand.percent_freed}%")

    return "\n".join(out)


@mcp.tool()
def prune_session(
    session_id: str,
    strategy: str = "recent",
    keep: int | None = None,
    execute: bool = False,
    cwd: str | None = None,
) -> str:
    """Prune a session transcript.

    Args:
        session_id: Session UUID (without .jsonl).
        strategy: 'recent', 'bookends', 'smart', or a custom range such as '1-10,50-*'.
        keep: If set, use legacy mode and keep turns from the N-th-from-last assistant turn.
        execute: If False (default), dry-run only. If True, back up then apply.
        cwd: Project directory the session belongs to.
    """
    from claude_prune.analyzer import SessionAnalyzer
    from claude_prune.errors import InvalidRangeError, ResourceMissingError
    from claude_prune.pruner import prune_session_lines, prune_with_indices
    from claude_prune.registry import STRATEGIES
    from claude_prune.session import backup_dir, load_lines, save_lines, transcript_path
    from claude_prune.strategies.custom import custom_selection
    from claude_prune.tokens import estimate_tokens
    import claude_prune.strategies  # noqa: F401

    path = transcript_path(session_id, cwd)
    try:
        lines = load_lines(path)
    except ResourceMissingError as e:
        return str(e)

    if keep is not None:
        result = prune_session_lines(lines, keep)
    else:
        analyzer = SessionAnalyzer(lines)
        if strategy in STRATEGIES:
            cand = STRATEGIES[strategy].func(analyzer, {})
            result = prune_with_indices(lines, cand.indices, cand.label)
        else:
            try:
                selection = custom_selection(strategy, analyzer.turn_positions)
            except InvalidRangeError as e:
                return f"Invalid strategy '{strategy}': {e}. Options: {', '.join(STRATEGIES)} or a range."
            result = prune_with_indices(lines, selection.indices_to_keep, selection.strategy)

    before = estimate_tokens(lines)
    after = estimate_tokens(result.out_lines)

    out = []
    out.append(f"Strategy: {result.strategy}")
    out.append(f"Turns: {result.kept} kept, {result.dropped} dropped")
    out.append(f"Lines: {len(lines)} -> {len(result.out_lines)}")
    out.append(f"Tokens: ~{before / 1000:.1f}K -> ~{after / 1000:.1f}K")

    if execute:
        backup = save_lines(path, result.out_lines, backup_dir(cwd), session_id)
        out.append("")
        out.append(f"Pruned {path.name}")
        out.append(f"Backup: {backup.name}")
    else:
        out.append("")
        out.append("DRY RUN — no changes made. Set execute=True to apply.")

    return "\n".join(out)


@mcp.tool()
def restore_session(session_id: str, execute: bool = False, cwd: str | None = None) -> str:
    """Restore a session transcript from its most recent prune backup."""
    from claude_prune.errors import NoBackupsFoundError, ResourceMissingError
    from claude_prune.session import restore_backup, transcript_path

    try:
        latest, backup_path = restore_backup(session_id, cwd, dry_run=not execute)
    except (ResourceMissingError, NoBackupsFoundError) as e:
        return str(e)

    target = transcript_path(session_id, cwd)
    if not execute:
        return f"Would restore {target.name} from {latest.name}\nDRY RUN — set execute=True to apply."
    return f"Restored {target.name} from {backup_path.name}"


if __name__ == "__main__":
    mcp.run()
