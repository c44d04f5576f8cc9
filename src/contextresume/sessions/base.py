"""Common locate -> cap -> parse pipeline for session sources."""

from abc import ABC, abstractmethod
from pathlib import Path

from contextresume import config
from contextresume.logging import get_logger
from contextresume.sessions.models import (
    Candidate,
    SessionSourceError,
    SessionSummary,
    SourceName,
)
from contextresume.sessions.paths import normalize_cwd
from contextresume.sessions.preview import first_prompt, make_preview, make_title

logger = get_logger(__name__)


class SessionSource(ABC):
    """One AI coding tool's on-disk transcript history."""

    name: SourceName

    def __init__(self, home: Path | None = None):
        self.home = (home or config.HOME).expanduser().resolve()

    @property
    def root(self) -> Path:
        return config.source_root(self.name, self.home)

    @abstractmethod
    def locate(self, cwd: str) -> list[Candidate]:
        """Find transcript artifacts for a normalized working directory."""

    @abstractmethod
    def parse(self, candidate: Candidate) -> SessionSummary | None:
        """Summarize one artifact. Returns None when it holds no session."""

    def sessions(self, cwd: str | Path, limit: int = config.DEFAULT_LIMIT) -> list[SessionSummary]:
        """Summaries of the `limit` most recently modified transcripts for cwd."""
        cwd = normalize_cwd(cwd)
        try:
            candidates = self.locate(cwd)
        except OSError as e:
            logger.debug("locate failed", source=self.name, cwd=cwd, error=str(e))
            return []

        candidates.sort(key=lambda c: c.mtime_ms, reverse=True)

        summaries = []
        for candidate in candidates[:limit]:
            try:
                summary = self.parse(candidate)
            except (OSError, ValueError, SessionSourceError) as e:
                logger.debug(
                    "skipping artifact", source=self.name, path=str(candidate.path), error=str(e)
                )
                continue
            if summary is not None:
                summaries.append(summary)
        return summaries

    def summarize(
        self,
        candidate: Candidate,
        session_id: str,
        prompts: list[str],
        preview_text: str,
        title: str | None = None,
        timestamp: int | None = None,
    ) -> SessionSummary:
        return SessionSummary(
            id=session_id,
            title=make_title(title if title is not None else first_prompt(prompts)),
            preview=make_preview(preview_text),
            user_prompts=prompts,
            timestamp=timestamp if timestamp is not None else candidate.mtime_ms,
            source=self.name,
            path=str(candidate.path),
        )


def stat_candidates(paths) -> list[Candidate]:
    """Candidates for the regular files among paths. Files that vanish are dropped."""
    candidates = []
    for path in paths:
        try:
            if path.is_file():
                candidates.append(Candidate.from_path(path))
        except OSError as e:
            logger.debug("skipping vanished file", path=str(path), error=str(e))
    return candidates


def iter_json_lines(text: str):
    """Yield the non-blank lines of a JSONL document."""
    for line in text.splitlines():
        if line.strip():
            yield line
