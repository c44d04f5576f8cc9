"""Map a working directory to the storage key each source uses for it."""

import hashlib
import re
from pathlib import Path

_CLAUDE_SEPARATORS = re.compile(r"[/._]")


def normalize_cwd(path: str | Path) -> str:
    """Canonicalize a working directory. Must run before any encoding below."""
    return str(Path(path).expanduser().resolve())


def claude_project_dir_name(cwd: str) -> str:
    """Claude Code's project directory: /home/me/v1.0_x -> -home-me-v1-0-x."""
    return _CLAUDE_SEPARATORS.sub("-", cwd)


def cursor_workspace_hash(cwd: str) -> str:
    return hashlib.md5(cwd.encode("utf-8")).hexdigest()


def gemini_project_hash(cwd: str) -> str:
    return hashlib.sha256(cwd.encode("utf-8")).hexdigest()
