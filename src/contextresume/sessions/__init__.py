"""Session discovery and summarization for Claude Code, Codex, Cursor and Gemini."""

from contextresume.sessions.aggregate import (
    build_sources,
    gather_sessions,
    load_recent_sessions,
    load_sessions,
    merge_sessions,
    recent_sessions,
)
from contextresume.sessions.models import SessionSummary

__all__ = [
    "SessionSummary",
    "build_sources",
    "gather_sessions",
    "load_recent_sessions",
    "load_sessions",
    "merge_sessions",
    "recent_sessions",
]
