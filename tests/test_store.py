"""Tests for the in-memory ProjectIndex."""

from __future__ import annotations

from nvim_project_search.index.store import Project, ProjectIndex
from nvim_project_search.index.watcher import EventKind, WatchEvent

ROOT = "/home/user/dev"


def _paths(index: ProjectIndex) -> list[str]:
    return [p.path for p in index]


class TestUpsert:
    """Tests for insert-or-replace by path."""

    def test_inserts_new_project(self):
        index = ProjectIndex()
        project = index.upsert(f"{ROOT}/api", "api")
        assert project == Project(name="api", path=f"{ROOT}/api")
        assert len(index) == 1
        assert f"{ROOT}/api" in index

    def test_same_path_replaces_entry(self):
        """A rename reported for the same path replaces the name."""
        index = ProjectIndex()
        index.upsert(f"{ROOT}/api", "api")
        index.upsert(f"{ROOT}/api", "apiv2")

        assert len(index) == 1
        assert index.lookup("apiv2").path == f"{ROOT}/api"
        assert index.lookup("api") is None

    def test_replay_is_idempotent(self):
        index = ProjectIndex()
        index.upsert(f"{ROOT}/api", "api")
        index.upsert(f"{ROOT}/web", "web")
        before = index.projects()

        index.upsert(f"{ROOT}/web", "web")
        assert index.projects() == before

    def test_upsert_moves_entry_to_end(self):
        index = ProjectIndex()
        index.upsert(f"{ROOT}/api", "api")
        index.upsert(f"{ROOT}/web", "web")
        index.upsert(f"{ROOT}/api", "api")
        assert _paths(index) == [f"{ROOT}/web", f"{ROOT}/api"]

    def test_at_most_one_entry_per_path(self):
        index = ProjectIndex()
        for name in ["a", "b", "c", "a", "b"]:
            index.upsert(f"{ROOT}/x", name)
            index.upsert(f"{ROOT}/{name}", name)
        paths = _paths(index)
        assert len(paths) == len(set(paths))


class TestRemove:
    """Tests for removal by path."""

    def test_removes_existing(self, index: ProjectIndex):
        assert index.remove("/home/user/dev/api") is True
        assert index.lookup("api") is None
        assert len(index) == 2

    def test_missing_path_is_noop(self, index: ProjectIndex):
        before = index.projects()
        assert index.remove("/home/user/dev/missing") is False
        assert index.projects() == before

    def test_twice_is_noop(self, index: ProjectIndex):
        index.remove("/home/user/dev/web")
        before = index.projects()
        assert index.remove("/home/user/dev/web") is False
        assert index.projects() == before


class TestLookup:
    """Tests for lookup by name."""

    def test_finds_by_exact_name(self, index: ProjectIndex):
        project = index.lookup("web")
        assert project is not None
        assert project.path == "/home/user/dev/web"

    def test_is_case_sensitive(self, index: ProjectIndex):
        assert index.lookup("WEB") is None

    def test_unknown_name(self, index: ProjectIndex):
        assert index.lookup("missing") is None

    def test_duplicate_name_last_write_wins(self):
        index = ProjectIndex()
        index.upsert("/a/api", "api")
        index.upsert("/b/api", "api")
        assert index.lookup("api").path == "/b/api"

    def test_duplicate_name_falls_back_after_remove(self):
        index = ProjectIndex()
        index.upsert("/a/api", "api")
        index.upsert("/b/api", "api")
        index.remove("/b/api")
        assert index.lookup("api").path == "/a/api"

    def test_removing_older_duplicate_keeps_newer(self):
        index = ProjectIndex()
        index.upsert("/a/api", "api")
        index.upsert("/b/api", "api")
        index.remove("/a/api")
        assert index.lookup("api").path == "/b/api"


class TestApply:
    """Tests for applying watcher events."""

    def test_created_changed_and_hint_upsert(self):
        index = ProjectIndex()
        index.apply(WatchEvent(f"{ROOT}/api", EventKind.CREATED))
        index.apply(WatchEvent(f"{ROOT}/web", EventKind.CHANGED))
        index.apply(WatchEvent(f"{ROOT}/cli", EventKind.CHANGES_DONE_HINT))
        assert [p.name for p in index] == ["api", "web", "cli"]

    def test_deleted_removes(self, index: ProjectIndex):
        index.apply(WatchEvent("/home/user/dev/api", EventKind.DELETED))
        assert index.lookup("api") is None

    def test_deleted_unknown_is_noop(self, index: ProjectIndex):
        before = index.projects()
        index.apply(WatchEvent("/home/user/dev/nope", EventKind.DELETED))
        assert index.projects() == before

    def test_name_is_basename(self):
        index = ProjectIndex()
        index.apply(WatchEvent(f"{ROOT}/my project", EventKind.CREATED))
        assert index.lookup("my project").path == f"{ROOT}/my project"

    def test_empty_basename_is_ignored(self):
        index = ProjectIndex()
        index.apply(WatchEvent("/", EventKind.CREATED))
        assert len(index) == 0

    def test_event_sequence_keeps_paths_unique(self):
        index = ProjectIndex()
        kinds = [
            EventKind.CREATED,
            EventKind.CHANGED,
            EventKind.DELETED,
            EventKind.CREATED,
            EventKind.CHANGES_DONE_HINT,
        ]
        for kind in kinds:
            for name in ["api", "web"]:
                index.apply(WatchEvent(f"{ROOT}/{name}", kind))
                paths = _paths(index)
                assert len(paths) == len(set(paths))
        assert sorted(p.name for p in index) == ["api", "web"]


class TestClear:
    def test_clear_empties_both_views(self, index: ProjectIndex):
        index.clear()
        assert len(index) == 0
        assert index.lookup("api") is None
