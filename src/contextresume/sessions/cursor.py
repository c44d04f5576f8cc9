"""Cursor Agent chats: ~/.cursor/chats/<md5 of cwd>/<chat id>/store.db."""

from pathlib import Path

from contextresume.config import NEW_SESSION_TITLE, PLACEHOLDER_TITLES, PLAUSIBLE_TEXT_RATIO
from contextresume.logging import get_logger
from contextresume.sessions.base import SessionSource, stat_candidates
from contextresume.sessions.blobs import decode_blob, decode_metadata
from contextresume.sessions.models import Candidate, SessionSummary
from contextresume.sessions.paths import cursor_workspace_hash
from contextresume.sessions.store import (
    STORE_SQL,
    SqliteStoreQuery,
    StoreQuery,
    parse_store_output,
)

logger = get_logger(__name__)


def resolve_title(meta: dict | None, prompts: list[str]) -> str:
    """Chat name from metadata, unless it is a placeholder and a prompt exists."""
    name = meta.get("name") if meta else None
    title = name if isinstance(name, str) and name.strip() else NEW_SESSION_TITLE
    if title in PLACEHOLDER_TITLES and prompts:
        return prompts[0]
    return title


class CursorSource(SessionSource):
    name = "cursor"

    def __init__(
        self,
        home: Path | None = None,
        query: StoreQuery | None = None,
        min_ratio: float = PLAUSIBLE_TEXT_RATIO,
    ):
        super().__init__(home)
        self.query = query or SqliteStoreQuery()
        self.min_ratio = min_ratio

    def locate(self, cwd: str) -> list[Candidate]:
        workspace_dir = self.root / "chats" / cursor_workspace_hash(cwd)
        if not workspace_dir.is_dir():
            return []
        return stat_candidates(workspace_dir.glob("*/store.db"))

    def parse(self, candidate: Candidate) -> SessionSummary | None:
        rows = parse_store_output(self.query(candidate.path, STORE_SQL))

        meta = decode_metadata(rows.meta) if rows.meta else None
        if rows.meta and meta is None:
            logger.debug("undecodable chat metadata", path=str(candidate.path))

        # Rows come back newest first
        prompts = [
            text
            for text in (decode_blob(b, self.min_ratio) for b in reversed(rows.blobs))
            if text is not None
        ]
        return self.summarize(
            candidate,
            session_id=candidate.path.parent.name,
            prompts=prompts,
            preview_text="\n\n".join(prompts),
            title=resolve_title(meta, prompts),
        )
