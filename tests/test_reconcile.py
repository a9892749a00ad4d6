"""
Tests for Backup Reconciliation — create, describe and push per backup host.
"""

import logging
from unittest.mock import MagicMock, patch

from conftest import FakeHost, FakeMirror, make_registry
from repupdate.engine.reconcile import find_backup, reconcile, reconcile_one
from repupdate.errors import EXIT_OK, EXIT_PARTIAL_FAILURE
from repupdate.hosts.github import GitHubHost

TAG = "[backup] https://src/foo"


def _source():
    src = FakeHost("src", "source")
    return src, src.add("foo")


class TestFindBackup:

    def test_matches_normalized_name(self):
        backup = FakeHost("bk", "backup")
        foo = backup.add("Foo.git")
        backup.add("bar")

        assert find_backup(backup.repositories, "foo") is foo
        assert find_backup(backup.repositories, "baz") is None


class TestMissingBackup:

    def test_creates_tagged_repository_and_pushes(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        mirror.set_refs(foo, main="c1")

        code = reconcile_one(foo, "foo", backup, [], mirror)

        assert code == EXIT_OK
        assert backup.mutations == [("create", "foo", TAG)]
        assert len(mirror.pushes) == 1
        pushed_from, pushed_to = mirror.pushes[0]
        assert pushed_from is foo
        assert pushed_to.host is backup

    def test_create_failure_is_local(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup", fail_create=True)

        code = reconcile_one(foo, "foo", backup, [], mirror)

        assert code == EXIT_PARTIAL_FAILURE
        assert mirror.pushes == []

    def test_dry_run_creates_nothing(self, mirror, caplog):
        caplog.set_level(logging.INFO)
        _, foo = _source()
        backup = FakeHost("bk", "backup")

        code = reconcile_one(foo, "foo", backup, [], mirror, dry_run=True)

        assert code == EXIT_OK
        assert backup.mutations == []
        assert mirror.pushes == []
        assert "foo (foo) is missing from bk" in caplog.text
        assert "Creating repository foo on bk" in caplog.text
        assert "Updating foo on bk" in caplog.text


class TestExistingBackup:

    def test_up_to_date_does_nothing(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        existing = backup.add("foo", TAG)
        mirror.set_refs(foo, main="c1")
        mirror.set_refs(existing, main="c1")

        code = reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert code == EXIT_OK
        assert backup.mutations == []
        assert mirror.pushes == []

    def test_difference_triggers_push(self, mirror, caplog):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        existing = backup.add("foo", TAG)
        mirror.set_refs(foo, main="c2", dev="d1")
        mirror.set_refs(existing, main="c1")

        code = reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert code == EXIT_OK
        assert mirror.pushes == [(foo, existing)]
        assert "differing branch state between src and bk" in caplog.text

    def test_force_pushes_without_difference(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        existing = backup.add("foo", TAG)
        mirror.set_refs(foo, main="c1")
        mirror.set_refs(existing, main="c1")

        reconcile_one(foo, "foo", backup, backup.repositories, mirror, force=True)

        assert mirror.pushes == [(foo, existing)]

    def test_failed_comparison_triggers_push(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        existing = backup.add("foo", TAG)
        mirror.broken.add(existing.push_url)

        reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert mirror.pushes == [(foo, existing)]

    def test_push_failure_is_partial(self):
        mirror = FakeMirror(push_result=False)
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        backup.add("foo", TAG)
        mirror.set_refs(foo, main="c1")

        code = reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert code == EXIT_PARTIAL_FAILURE


class TestDescriptionRepair:

    def test_stale_description_is_rewritten(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        backup.add("foo", "hand edited")

        code = reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert code == EXIT_OK
        assert backup.mutations == [("update_description", "foo", TAG)]
        # Refs were identical (both empty), so no push
        assert mirror.pushes == []

    def test_missing_description_is_written(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        backup.add("foo", None)

        reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert backup.mutations == [("update_description", "foo", TAG)]

    def test_dry_run_logs_but_does_not_update(self, mirror, caplog):
        caplog.set_level(logging.INFO)
        _, foo = _source()
        backup = FakeHost("bk", "backup")
        backup.add("foo", "hand edited")

        reconcile_one(foo, "foo", backup, backup.repositories, mirror, dry_run=True)

        assert backup.mutations == []
        assert "Updating https://bk/foo description" in caplog.text

    def test_update_failure_still_pushes(self, mirror):
        _, foo = _source()
        backup = FakeHost("bk", "backup", fail_update=True)
        existing = backup.add("foo", "old")
        mirror.set_refs(foo, main="c2")

        code = reconcile_one(foo, "foo", backup, backup.repositories, mirror)

        assert code == EXIT_PARTIAL_FAILURE
        assert mirror.pushes == [(foo, existing)]


class TestReconcile:

    def test_every_name_against_every_backup_host(self, mirror):
        src = FakeHost("src", "source")
        foo = src.add("foo")
        bar = src.add("bar")
        bk1 = FakeHost("bk1", "backup")
        bk2 = FakeHost("bk2", "backup")
        registry = make_registry(src, bk1, bk2)

        code = reconcile(registry, {"foo": foo, "bar": bar}, {"bk1": [], "bk2": []}, mirror)

        assert code == EXIT_OK
        assert [c[1] for c in bk1.mutations] == ["foo", "bar"]
        assert [c[1] for c in bk2.mutations] == ["foo", "bar"]
        assert len(mirror.pushes) == 4

    def test_failure_does_not_stop_sweep(self, mirror):
        src = FakeHost("src", "source")
        foo = src.add("foo")
        bar = src.add("bar")
        broken = FakeHost("broken", "backup", fail_create=True)
        ok = FakeHost("ok", "backup")
        registry = make_registry(src, broken, ok)

        code = reconcile(registry, {"foo": foo, "bar": bar}, {"broken": [], "ok": []}, mirror)

        assert code == EXIT_PARTIAL_FAILURE
        assert [c[1] for c in ok.mutations] == ["foo", "bar"]
        assert [c[1] for c in broken.mutations] == ["foo", "bar"]

    def test_dry_run_has_no_mutations_and_same_exit_code(self):
        def scenario():
            src = FakeHost("src", "source")
            foo = src.add("foo")
            bk = FakeHost("bk", "backup")
            bk.add("foo", "stale")
            bk_bar = FakeHost("bk2", "backup")
            return make_registry(src, bk, bk_bar), foo, bk, bk_bar

        registry, foo, bk, bk2 = scenario()
        dry_mirror = FakeMirror()
        dry_mirror.set_refs(foo, main="c1")
        dry_code = reconcile(
            registry, {"foo": foo}, {"bk": bk.repositories, "bk2": []}, dry_mirror, dry_run=True
        )
        assert bk.mutations == [] and bk2.mutations == []
        assert dry_mirror.pushes == []

        registry, foo, bk, bk2 = scenario()
        real_mirror = FakeMirror()
        real_mirror.set_refs(foo, main="c1")
        real_code = reconcile(
            registry, {"foo": foo}, {"bk": bk.repositories, "bk2": []}, real_mirror
        )

        assert dry_code == real_code == EXIT_OK
        assert len(real_mirror.pushes) == 2

    def test_incomplete_create_response_does_not_stop_sweep(self, mirror, caplog):
        src = FakeHost("src", "source")
        foo = src.add("foo")
        bar = src.add("bar")
        backup = GitHubHost("gh-backup", "backup", token="t")
        registry = make_registry(src, backup)
        created = MagicMock(status_code=201, text="")
        created.json.return_value = {"name": "foo"}

        with patch("repupdate.hosts.http.httpx.request", return_value=created) as request:
            code = reconcile(registry, {"foo": foo, "bar": bar}, {"gh-backup": []}, mirror)

        assert code == EXIT_PARTIAL_FAILURE
        assert [c.kwargs["json"]["name"] for c in request.call_args_list] == ["foo", "bar"]
        assert mirror.pushes == []
        assert "Creating bar on gh-backup failed" in caplog.text
