"""Tests for title truncation and preview elision."""

from contextresume.sessions.models import Fragment
from contextresume.sessions.preview import (
    first_prompt,
    make_preview,
    make_title,
    render_transcript,
)


class TestMakeTitle:
    def test_short_title_unchanged(self):
        assert make_title("fix bug") == "fix bug"
        assert make_title("x" * 50) == "x" * 50

    def test_long_title_truncated(self):
        assert make_title("x" * 51) == "x" * 50 + "..."
        assert make_title("y" * 200) == "y" * 50 + "..."


class TestMakePreview:
    def test_short_content_unchanged(self):
        assert make_preview("hello") == "hello"
        assert make_preview("a" * 500) == "a" * 500

    def test_long_content_keeps_both_ends(self):
        content = "a" * 250 + "m" * 500 + "z" * 250
        marker = "\n\n... [500 characters omitted] ...\n\n"

        preview = make_preview(content)

        assert preview == "a" * 250 + marker + "z" * 250
        assert len(preview) == 250 + 250 + len(marker)

    def test_head_and_tail_come_from_content(self):
        content = "".join(chr(ord("a") + i % 26) for i in range(1000))
        preview = make_preview(content)
        head, _, rest = preview.partition("\n\n...")
        tail = rest.rpartition("...\n\n")[2]
        assert head + tail == content[:250] + content[-250:]

    def test_custom_cap(self):
        assert make_preview("abcdefghij", max_chars=4) == "ab\n\n... [6 characters omitted] ...\n\nij"


class TestHelpers:
    def test_first_prompt_skips_blank(self):
        assert first_prompt(["", "  ", "real"]) == "real"

    def test_first_prompt_sentinel(self):
        assert first_prompt([]) == "New Session"

    def test_render_transcript(self):
        fragments = [Fragment("user", "hi"), Fragment("assistant", "hello"), Fragment("system", "/clear")]
        assert render_transcript(fragments) == "User: hi\nAssistant: hello\nSystem: /clear\n"
