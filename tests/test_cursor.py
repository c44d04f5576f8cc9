"""Tests for the Cursor Agent store.db source."""

import json
import os
import shutil
import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from contextresume.sessions.cursor import CursorSource, resolve_title
from contextresume.sessions.models import StoreQueryError
from contextresume.sessions.paths import cursor_workspace_hash, normalize_cwd
from contextresume.sessions.store import (
    STORE_SQL,
    SqliteCliStoreQuery,
    SqliteStoreQuery,
    build_store_sql,
    parse_store_output,
)


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home.resolve()


@pytest.fixture
def project(tmp_path):
    project = tmp_path / "proj"
    project.mkdir()
    return project


def field_blob(text: str) -> bytes:
    raw = text.encode("utf-8")
    assert len(raw) < 128
    return b"\x0a" + bytes([len(raw)]) + raw + b"\x12\x02id"


def json_blob(role: str, text: str) -> bytes:
    return json.dumps({"role": role, "content": [{"type": "text", "text": text}]}).encode("utf-8")


def make_store(home, project, chat_id, meta=None, blobs=(), mtime=None):
    db = home / ".cursor" / "chats" / cursor_workspace_hash(normalize_cwd(project)) / chat_id / "store.db"
    db.parent.mkdir(parents=True)
    with closing(sqlite3.connect(db)) as conn:
        conn.execute("CREATE TABLE meta (key TEXT PRIMARY KEY, value TEXT)")
        conn.execute("CREATE TABLE blobs (id TEXT PRIMARY KEY, data BLOB)")
        if meta is not None:
            # Cursor stores the metadata JSON as a hex string
            conn.execute(
                "INSERT INTO meta VALUES ('0', ?)", (json.dumps(meta).encode("utf-8").hex(),)
            )
        for i, blob in enumerate(blobs):
            conn.execute("INSERT INTO blobs VALUES (?, ?)", (f"blob-{i}", blob))
        conn.commit()
    if mtime is not None:
        os.utime(db, (mtime, mtime))
    return db


class TestCursorSource:
    def test_prompts_in_chronological_order(self, home, project):
        db = make_store(
            home,
            project,
            "chat-1",
            meta={"name": "Fix auth flow", "agentId": "chat-1"},
            blobs=[
                field_blob("first prompt"),
                json_blob("assistant", "working on it"),
                b"\x99\x00garbage",
                json_blob("user", "<user_query>\nsecond prompt\n</user_query>"),
            ],
        )

        sessions = CursorSource(home).sessions(project)

        assert len(sessions) == 1
        s = sessions[0]
        assert s.id == "chat-1"
        assert s.title == "Fix auth flow"
        assert s.user_prompts == ["first prompt", "second prompt"]
        assert s.preview == "first prompt\n\nsecond prompt"
        assert s.source == "cursor"
        assert s.path == str(db)

    def test_placeholder_name_replaced(self, home, project):
        make_store(home, project, "c", meta={"name": "New Agent"}, blobs=[field_blob("add caching")])
        assert CursorSource(home).sessions(project)[0].title == "add caching"

    def test_missing_metadata(self, home, project):
        make_store(home, project, "c", blobs=[field_blob("hello there")])
        assert CursorSource(home).sessions(project)[0].title == "hello there"

    def test_empty_store(self, home, project):
        make_store(home, project, "c")
        s = CursorSource(home).sessions(project)[0]
        assert s.title == "New Session"
        assert s.user_prompts == []

    def test_user_info_blob_ignored(self, home, project):
        make_store(
            home,
            project,
            "c",
            blobs=[json_blob("user", "<user_info>OS: linux</user_info>"), field_blob("real prompt")],
        )
        assert CursorSource(home).sessions(project)[0].user_prompts == ["real prompt"]

    def test_corrupt_store_skipped(self, home, project):
        make_store(home, project, "good", blobs=[field_blob("ok")], mtime=1_000)
        bad = home / ".cursor" / "chats" / cursor_workspace_hash(normalize_cwd(project)) / "bad" / "store.db"
        bad.parent.mkdir()
        bad.write_bytes(b"this is not a database" * 10)
        os.utime(bad, (2_000, 2_000))

        sessions = CursorSource(home).sessions(project)
        assert [s.id for s in sessions] == ["good"]

    def test_recency_cap(self, home, project):
        for i in range(3):
            make_store(home, project, f"chat-{i}", blobs=[field_blob(f"prompt {i}")], mtime=1_000 * (i + 1))

        sessions = CursorSource(home).sessions(project, limit=2)
        assert [s.id for s in sessions] == ["chat-2", "chat-1"]

    def test_injected_query(self, home, project):
        db = make_store(home, project, "c")
        calls = []

        def query(db_path, sql):
            calls.append((db_path, sql))
            meta = json.dumps({"name": "From fake"}).encode("utf-8").hex()
            return f"meta|{meta}\nblob|{field_blob('faked').hex()}\n"

        s = CursorSource(home, query=query).sessions(project)[0]
        assert calls == [(db, STORE_SQL)]
        assert s.title == "From fake"
        assert s.user_prompts == ["faked"]

    def test_failing_query_skips_store(self, home, project):
        make_store(home, project, "c")

        def query(db_path, sql):
            raise StoreQueryError("boom")

        assert CursorSource(home, query=query).sessions(project) == []

    def test_missing_directory(self, home, project):
        assert CursorSource(home).sessions(project) == []

    def test_relative_home(self, tmp_path, project, monkeypatch):
        db = make_store(tmp_path / "home", project, "c", blobs=[field_blob("relative")])
        monkeypatch.chdir(tmp_path)

        sessions = CursorSource(Path("home")).sessions(project)

        assert [s.user_prompts for s in sessions] == [["relative"]]
        assert sessions[0].path == str(db.resolve())


class TestResolveTitle:
    def test_named(self):
        assert resolve_title({"name": "Deploy"}, ["x"]) == "Deploy"

    def test_sentinels(self):
        assert resolve_title({"name": "New Session"}, ["x"]) == "x"
        assert resolve_title({"name": "New Agent"}, []) == "New Agent"
        assert resolve_title(None, []) == "New Session"


class TestStoreQuery:
    def test_sql_shape(self):
        assert "LIMIT 100" in STORE_SQL
        assert "ORDER BY rowid DESC" in STORE_SQL
        assert "LIMIT 5" in build_store_sql(blob_limit=5)

    def test_parse_output(self):
        rows = parse_store_output("meta|AABB\nblob|01\nblob|02\n\ngarbage\nblob|\n")
        assert rows.meta == "AABB"
        assert rows.blobs == ["01", "02"]

    def test_in_process_query(self, home, project):
        db = make_store(home, project, "c", meta={"name": "x"}, blobs=[b"\x01", b"\x02"])
        rows = parse_store_output(SqliteStoreQuery()(db, STORE_SQL))
        assert rows.blobs == ["02", "01"]
        assert bytes.fromhex(bytes.fromhex(rows.meta).decode()) == json.dumps({"name": "x"}).encode()

    def test_output_ceiling(self, home, project):
        db = make_store(home, project, "c", blobs=[b"\x01" * 100])
        with pytest.raises(StoreQueryError):
            SqliteStoreQuery(max_output=50)(db, STORE_SQL)

    def test_missing_database(self, tmp_path):
        with pytest.raises(StoreQueryError):
            SqliteStoreQuery()(tmp_path / "nope.db", STORE_SQL)

    @pytest.mark.skipif(shutil.which("sqlite3") is None, reason="sqlite3 binary not installed")
    def test_cli_query(self, home, project):
        db = make_store(home, project, "c", meta={"name": "x"}, blobs=[field_blob("via cli")])
        rows = parse_store_output(SqliteCliStoreQuery()(db, STORE_SQL))
        assert rows.meta is not None
        assert rows.blobs == [field_blob("via cli").hex().upper()]

    def test_cli_missing_binary(self, tmp_path):
        with pytest.raises(StoreQueryError):
            SqliteCliStoreQuery(executable="definitely-not-sqlite3")(tmp_path / "x.db", STORE_SQL)
