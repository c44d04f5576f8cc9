"""Read-only queries against Cursor Agent's per-chat store.db.

A query facility takes a database path and SQL and returns tabular text, one
``tag|HEX`` row per line. Output beyond ``max_output`` bytes is an error.
"""

import shutil
import sqlite3
import subprocess
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from contextresume.config import CURSOR_BLOB_LIMIT, CURSOR_MAX_OUTPUT_BYTES, CURSOR_META_KEY
from contextresume.sessions.models import StoreQueryError

META_TAG = "meta"
BLOB_TAG = "blob"


def build_store_sql(meta_key: str = CURSOR_META_KEY, blob_limit: int = CURSOR_BLOB_LIMIT) -> str:
    """Metadata value plus the newest blobs, both hex-encoded."""
    return (
        f"SELECT '{META_TAG}', hex(value) FROM meta WHERE key = '{meta_key}'; "
        f"SELECT '{BLOB_TAG}', hex(data) FROM blobs ORDER BY rowid DESC LIMIT {int(blob_limit)};"
    )


STORE_SQL = build_store_sql()


class StoreQuery(Protocol):
    def __call__(self, db_path: Path, sql: str) -> str: ...


@dataclass
class StoreRows:
    meta: str | None = None
    blobs: list[str] = field(default_factory=list)


def parse_store_output(output: str) -> StoreRows:
    """Split query output into the metadata row and blob rows (newest first)."""
    rows = StoreRows()
    for line in output.splitlines():
        tag, sep, value = line.strip().partition("|")
        if not sep or not value:
            continue
        if tag == META_TAG and rows.meta is None:
            rows.meta = value
        elif tag == BLOB_TAG:
            rows.blobs.append(value)
    return rows


class SqliteStoreQuery:
    """Runs the query in-process with the sqlite3 module, opened read-only."""

    def __init__(self, max_output: int = CURSOR_MAX_OUTPUT_BYTES):
        self.max_output = max_output

    def __call__(self, db_path: Path, sql: str) -> str:
        lines = []
        size = 0
        try:
            with closing(sqlite3.connect(f"{db_path.as_uri()}?mode=ro", uri=True)) as conn:
                for statement in sql.split(";"):
                    if not statement.strip():
                        continue
                    for row in conn.execute(statement):
                        line = "|".join("" if v is None else str(v) for v in row)
                        size += len(line) + 1
                        if size > self.max_output:
                            raise StoreQueryError(
                                f"{db_path}: output exceeds {self.max_output} bytes"
                            )
                        lines.append(line)
        except sqlite3.Error as e:
            raise StoreQueryError(f"{db_path}: {e}") from e
        return "\n".join(lines)


class SqliteCliStoreQuery:
    """Runs the query through the sqlite3 command-line shell in a subprocess."""

    def __init__(self, executable: str = "sqlite3", max_output: int = CURSOR_MAX_OUTPUT_BYTES):
        self.executable = executable
        self.max_output = max_output

    def __call__(self, db_path: Path, sql: str) -> str:
        try:
            proc = subprocess.Popen(
                [self.executable, "-readonly", "-separator", "|", str(db_path), sql],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise StoreQueryError(f"{self.executable} not found") from e

        with proc:
            output = proc.stdout.read(self.max_output + 1)
            if len(output) > self.max_output:
                proc.kill()
                raise StoreQueryError(f"{db_path}: output exceeds {self.max_output} bytes")
            if proc.wait() != 0:
                raise StoreQueryError(f"{db_path}: sqlite3 exited with {proc.returncode}")
        return output.decode("utf-8", errors="replace")


def make_store_query(use_cli: bool = False) -> StoreQuery:
    if use_cli:
        return SqliteCliStoreQuery(shutil.which("sqlite3") or "sqlite3")
    return SqliteStoreQuery()
