"""Scan all sources concurrently and merge their summaries."""

import asyncio
from collections.abc import Iterable
from pathlib import Path

from contextresume import config
from contextresume.logging import get_logger
from contextresume.sessions.base import SessionSource
from contextresume.sessions.claude import ClaudeSource
from contextresume.sessions.codex import CodexSource
from contextresume.sessions.cursor import CursorSource
from contextresume.sessions.gemini import GeminiSource
from contextresume.sessions.models import SessionSummary
from contextresume.sessions.store import StoreQuery

logger = get_logger(__name__)


def build_sources(
    home: Path | None = None,
    names: Iterable[str] | None = None,
    store_query: StoreQuery | None = None,
) -> list[SessionSource]:
    """Instantiate sources in the fixed claude, codex, cursor, gemini order."""
    wanted = set(names) if names is not None else set(config.SOURCES)
    factories = {
        "claude": lambda: ClaudeSource(home),
        "codex": lambda: CodexSource(home),
        "cursor": lambda: CursorSource(home, query=store_query),
        "gemini": lambda: GeminiSource(home),
    }
    return [factories[name]() for name in config.SOURCES if name in wanted]


def _by_recency(summaries: Iterable[SessionSummary]) -> list[SessionSummary]:
    # sorted() is stable: equal timestamps keep discovery order
    return sorted(summaries, key=lambda s: s.timestamp, reverse=True)


async def gather_sessions(
    cwd: str | Path,
    limit: int = config.DEFAULT_LIMIT,
    sources: list[SessionSource] | None = None,
) -> dict[str, list[SessionSummary]]:
    """Per-source summaries, newest first. Sources are scanned in parallel threads."""
    if sources is None:
        sources = build_sources()

    results = await asyncio.gather(
        *(asyncio.to_thread(source.sessions, cwd, limit) for source in sources),
        return_exceptions=True,
    )

    grouped: dict[str, list[SessionSummary]] = {}
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.warning("source scan failed", source=source.name, error=repr(result))
            result = []
        grouped[source.name] = _by_recency(result)
    return grouped


def merge_sessions(
    groups: Iterable[list[SessionSummary]], limit: int = config.DEFAULT_LIMIT
) -> list[SessionSummary]:
    """One ranked list across sources, newest first, capped at limit."""
    return _by_recency(s for group in groups for s in group)[:limit]


async def recent_sessions(
    cwd: str | Path,
    limit: int = config.DEFAULT_LIMIT,
    sources: list[SessionSource] | None = None,
) -> list[SessionSummary]:
    """Merged view; limit applies per source, so the cap scales with source count."""
    grouped = await gather_sessions(cwd, limit, sources)
    return merge_sessions(grouped.values(), limit * max(len(grouped), 1))


def load_sessions(
    cwd: str | Path,
    limit: int = config.DEFAULT_LIMIT,
    sources: list[SessionSource] | None = None,
) -> dict[str, list[SessionSummary]]:
    return asyncio.run(gather_sessions(cwd, limit, sources))


def load_recent_sessions(
    cwd: str | Path,
    limit: int = config.DEFAULT_LIMIT,
    sources: list[SessionSource] | None = None,
) -> list[SessionSummary]:
    return asyncio.run(recent_sessions(cwd, limit, sources))
