"""Session discovery, backup and restore for Claude Code JSONL transcripts."""

from __future__ import annotations

import os
import re
import shutil
import time
from pathlib import Path

from .errors import NoBackupsFoundError, ResourceMissingError
from .types import BackupInfo

PROJECTS_DIR_ENV = "CLAUDE_PRUNE_PROJECTS_DIR"
BACKUP_DIR_NAME = "prune-backup"

_LINE_SPLIT = re.compile(r"\r?\n")


def get_claude_dir() -> Path:
    """Return the Claude configuration directory."""
    return Path.home() / ".claude"


def get_projects_dir() -> Path:
    """Return the Claude projects directory, honouring the env override."""
    override = os.environ.get(PROJECTS_DIR_ENV)
    if override:
        return Path(override)
    return get_claude_dir() / "projects"


def cwd_to_project_slug(cwd: str | None = None) -> str:
    """Convert a working directory path to the Claude project slug format.

    Claude stores projects under ~/.claude/projects/ using the path with
    slashes replaced by dashes, e.g. /Users/foo/myproject -> -Users-foo-myproject
    """
    if cwd is None:
        cwd = os.getcwd()
    return cwd.replace("/", "-")


def project_dir(cwd: str | None = None) -> Path:
    return get_projects_dir() / cwd_to_project_slug(cwd)


def transcript_path(session_id: str, cwd: str | None = None) -> Path:
    return project_dir(cwd) / f"{session_id}.jsonl"


def backup_dir(cwd: str | None = None) -> Path:
    return project_dir(cwd) / BACKUP_DIR_NAME


def load_lines(path: Path) -> list[str]:
    """Read a transcript into its non-empty lines.

    Raises ResourceMissingError if the file does not exist.
    """
    if not path.exists():
        raise ResourceMissingError(f"No transcript at {path}")
    raw = path.read_text(encoding="utf-8")
    return [line for line in _LINE_SPLIT.split(raw) if line]


def backup_name(session_id: str, timestamp_ms: int) -> str:
    return f"{session_id}.jsonl.{timestamp_ms}"


def write_backup(
    path: Path,
    dest_dir: Path,
    session_id: str,
    now_ms: int | None = None,
) -> Path:
    """Copy the transcript to ``<dest_dir>/<sessionId>.jsonl.<unixMillis>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    dest_dir.mkdir(parents=True, exist_ok=True)
    backup_path = dest_dir / backup_name(session_id, now_ms)
    shutil.copy2(path, backup_path)
    return backup_path


def save_lines(
    path: Path,
    lines: list[str],
    dest_dir: Path,
    session_id: str,
    now_ms: int | None = None,
) -> Path:
    """Back the transcript up, then overwrite it with ``lines``.

    The transcript is only written once the backup copy exists; a failed
    backup propagates and leaves the original untouched. Returns the backup path.
    """
    backup_path = write_backup(path, dest_dir, session_id, now_ms)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    return backup_path


def find_latest_backup(names: list[str], session_id: str) -> BackupInfo | None:
    """Pick the backup with the largest integer timestamp suffix.

    Names whose suffix does not parse as an integer are ignored.
    """
    prefix = f"{session_id}.jsonl."
    candidates: list[BackupInfo] = []
    for name in names:
        if not name.startswith(prefix):
            continue
        suffix = name.rsplit(".", 1)[-1]
        try:
            ts = int(suffix)
        except ValueError:
            continue
        candidates.append(BackupInfo(name=name, timestamp=ts))

    if not candidates:
        return None
    return max(candidates, key=lambda b: b.timestamp)


def locate_latest_backup(session_id: str, cwd: str | None = None) -> tuple[BackupInfo, Path]:
    """Find the newest backup for a session.

    Raises ResourceMissingError if the backup directory is absent, and
    NoBackupsFoundError if it holds no usable backup for the session.
    """
    bdir = backup_dir(cwd)
    if not bdir.is_dir():
        raise ResourceMissingError(f"No backup directory found at {bdir}")

    latest = find_latest_backup(sorted(p.name for p in bdir.iterdir()), session_id)
    if latest is None:
        raise NoBackupsFoundError(f"No backups found for session {session_id}")
    return latest, bdir / latest.name


def restore_backup(
    session_id: str,
    cwd: str | None = None,
    dry_run: bool = False,
) -> tuple[BackupInfo, Path]:
    """Copy the newest backup over the transcript (skipped when ``dry_run``)."""
    latest, backup_path = locate_latest_backup(session_id, cwd)
    if not dry_run:
        shutil.copyfile(backup_path, transcript_path(session_id, cwd))
    return latest, backup_path
