"""Tests for result display helpers."""

from __future__ import annotations

import logging
import re

import pytest

from nvim_project_search.formatting import (
    build_metas,
    filter_results,
    wrap_text,
)
from nvim_project_search.index.store import ProjectIndex


class TestWrapText:
    """Tests for whitespace wrapping of display names."""

    def test_short_text_unchanged(self):
        assert wrap_text("api", 15) == "api"

    def test_text_exactly_width_unchanged(self):
        assert wrap_text("a" * 15, 15) == "a" * 15

    def test_breaks_at_last_space_within_width(self):
        assert wrap_text("my very long project", 10) == (
            "my very\nlong\nproject"
        )

    def test_name_without_spaces_is_never_split(self):
        name = "a-really-long-project-name"
        assert wrap_text(name, 15) == name

    def test_long_word_kept_whole(self):
        assert wrap_text("supercalifragilistic api", 10) == (
            "supercalifragilistic\napi"
        )

    def test_rewrap_is_noop(self):
        once = wrap_text("one two three four five six", 9)
        assert wrap_text(once, 9) == once

    @pytest.mark.parametrize(
        "text",
        [
            "alpha beta gamma delta",
            "x yy zzz wwww vvvvv",
            "project  with   gaps",
            "tabs\tand spaces here",
        ],
    )
    def test_never_splits_words(self, text):
        width = max(len(w) for w in text.split())
        wrapped = wrap_text(text, width)
        assert wrapped.split() == text.split()
        for line in wrapped.split("\n"):
            assert len(line) <= width or " " not in line

    def test_is_pure(self):
        assert wrap_text("a b c d e f", 3) == wrap_text("a b c d e f", 3)

    def test_rejects_non_positive_width(self):
        with pytest.raises(ValueError):
            wrap_text("api", 0)


class TestFilterResults:
    """Tests for result truncation."""

    @pytest.mark.parametrize("max_results", [0, 1, 2, 3, 10])
    def test_returns_min_of_max_and_length(self, max_results):
        results = ["a", "b", "c"]
        filtered = filter_results(results, max_results)
        assert len(filtered) == min(max_results, len(results))
        assert filtered == results[: len(filtered)]

    def test_large_max_returns_everything(self):
        assert filter_results(["a", "b"], 100) == ["a", "b"]

    def test_negative_max_returns_nothing(self):
        assert filter_results(["a", "b"], -1) == []

    def test_does_not_mutate_input(self):
        results = ["a", "b", "c"]
        filter_results(results, 1)
        assert results == ["a", "b", "c"]


class TestBuildMetas:
    """Tests for id -> metadata resolution."""

    def test_known_ids(self, index: ProjectIndex):
        metas = build_metas(index, ["web", "api"], 15)
        assert metas == [
            {"id": "web", "name": "web", "path": "/home/user/dev/web"},
            {"id": "api", "name": "api", "path": "/home/user/dev/api"},
        ]

    def test_unknown_ids_are_skipped_and_logged(
        self, index: ProjectIndex, caplog
    ):
        with caplog.at_level(logging.WARNING):
            metas = build_metas(index, ["api", "missing"], 15)

        assert [m["id"] for m in metas] == ["api"]
        assert "missing" in caplog.text

    def test_name_is_wrapped(self):
        index = ProjectIndex()
        index.upsert("/d/my long project", "my long project")
        (meta,) = build_metas(index, ["my long project"], 8)
        assert meta["id"] == "my long project"
        assert meta["name"] == "my long\nproject"
        assert re.search(r"\n", meta["name"])
