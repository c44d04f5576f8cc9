"""Configuration and source directory layout for context-resume."""

from pathlib import Path

HOME = Path.home()

SOURCES = ("claude", "codex", "cursor", "gemini")

# Per-source data directories, relative to the home directory
SOURCE_DIRS = {
    "claude": ".claude",
    "codex": ".codex",
    "cursor": ".cursor",
    "gemini": ".gemini",
}

DEFAULT_LIMIT = 10

# Summary shaping
TITLE_MAX_CHARS = 50
PREVIEW_MAX_CHARS = 500
NEW_SESSION_TITLE = "New Session"
PLACEHOLDER_TITLES = ("New Agent", NEW_SESSION_TITLE)

# Codex: how much of each rollout file to read when matching its cwd
CODEX_PEEK_BYTES = 4096

# Cursor store.db query bounds
CURSOR_META_KEY = "0"
CURSOR_BLOB_LIMIT = 100
CURSOR_MAX_OUTPUT_BYTES = 50 * 1024 * 1024

# Share of letter/number/punctuation/space characters a decoded blob needs
PLAUSIBLE_TEXT_RATIO = 0.7


def source_root(source: str, home: Path | None = None) -> Path:
    """Return the top-level data directory of a source tool."""
    return (home or HOME) / SOURCE_DIRS[source]


def detect_sources(home: Path | None = None) -> list[str]:
    """Detect which AI coding tools have left data under the home directory."""
    return [s for s in SOURCES if source_root(s, home).is_dir()]
