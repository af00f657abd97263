# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_executor.py

"""
Tests for plan execution against a real target directory.

Failures of the link primitives are injected through a LinkOperations
subclass so error accounting can be checked without special privileges.
"""

import errno
import os
from pathlib import Path

import pytest

from linkview.core.executor import (
    MISSING_FILE, ExecuteOptions, ensure_target_dir, entry_source_dir, execute
)
from linkview.core.links import LocalLinkOperations
from linkview.core.planner import compute_plan
from linkview.data.catalog import LibraryCatalog
from linkview.data.models import ErrorCategory, LinkType, PlannedCreation, SyncMode, SyncPlan
from linkview.system.exceptions import (
    ConfigError, OperationFailedError, PermissionDeniedError, TargetDirUnavailableError
)


class FailingOps(LocalLinkOperations):
    """Local operations that raise a given error for chosen target names."""

    def __init__(self, fail_create=None, fail_remove=None):
        self.fail_create = fail_create or {}
        self.fail_remove = fail_remove or {}
        self.removed: list[Path] = []

    def create_file_link(self, source, target):
        if Path(target).name in self.fail_create:
            raise self.fail_create[Path(target).name]
        super().create_file_link(source, target)

    def copy_file(self, source, target):
        if Path(target).name in self.fail_create:
            raise self.fail_create[Path(target).name]
        super().copy_file(source, target)

    def remove(self, path):
        if Path(path).name in self.fail_remove:
            raise self.fail_remove[Path(path).name]
        self.removed.append(Path(path))
        super().remove(path)


def _desired(library_factory):
    return [item.to_item() for item in LibraryCatalog(library_factory.library).load()]


def _sync(desired, index, mode, target, options=None, ops=None):
    plan = compute_plan(desired, index, mode, target)
    return plan, execute(plan, mode, index, options, ops)


@pytest.fixture
def two_item_library(library_factory):
    library_factory.add_item("AAAAAAAA01", "sunset", "jpg", content=b"sun")
    library_factory.add_item("BBBBBBBB02", "harbour", "png", content=b"sea")
    return library_factory


class TestEnsureTargetDir:
    def test_creates_missing_directories(self, tmp_path):
        target = tmp_path / "a" / "b" / "view"
        assert ensure_target_dir(target) == target
        assert target.is_dir()

    def test_existing_directory_accepted(self, tmp_path):
        assert ensure_target_dir(tmp_path) == tmp_path

    def test_file_in_the_way_is_fatal(self, tmp_path):
        blocker = tmp_path / "view"
        blocker.write_text("not a directory")
        with pytest.raises(TargetDirUnavailableError) as exc_info:
            ensure_target_dir(blocker)
        assert exc_info.value.path == str(blocker)


class TestEntryFileMode:
    """Symlinks to item files, named after the item."""

    def test_first_run_links_every_item(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        _, result = _sync(_desired(two_item_library), {}, SyncMode.ENTRY_FILE, target)

        assert result.created == 2
        assert result.errors == []
        assert (target / "sunset.jpg").is_symlink()
        assert (target / "sunset.jpg").read_bytes() == b"sun"
        assert result.new_index == {
            "AAAAAAAA01": target / "sunset.jpg",
            "BBBBBBBB02": target / "harbour.png",
        }

    def test_second_run_changes_nothing(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        desired = _desired(two_item_library)
        _, first = _sync(desired, {}, SyncMode.ENTRY_FILE, target)

        plan, second = _sync(desired, first.new_index, SyncMode.ENTRY_FILE, target)

        assert plan.is_empty()
        assert (second.created, second.removed, second.skipped) == (0, 0, 0)
        assert second.new_index == first.new_index

    def test_item_leaving_view_is_unlinked(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        desired = _desired(two_item_library)
        _, first = _sync(desired, {}, SyncMode.ENTRY_FILE, target)

        _, second = _sync(desired[:1], first.new_index, SyncMode.ENTRY_FILE, target)

        assert second.removed == 1
        assert not os.path.lexists(target / "harbour.png")
        assert (target / "sunset.jpg").is_symlink()
        assert set(second.new_index) == {"AAAAAAAA01"}
        # the library file behind the link survives
        assert two_item_library.info_dir("BBBBBBBB02").joinpath("harbour.png").read_bytes() == b"sea"

    def test_missing_source_is_skipped_not_an_error(self, tmp_path, library_factory):
        library_factory.add_item("AAAAAAAA01", "present", "jpg")
        library_factory.add_item("BBBBBBBB02", "absent", "jpg", write_file=False)
        target = ensure_target_dir(tmp_path / "view")

        _, result = _sync(_desired(library_factory), {}, SyncMode.ENTRY_FILE, target)

        assert result.created == 1
        assert result.skipped == 1
        assert result.errors == []
        assert result.skipped_items[0].item.id == "BBBBBBBB02"
        assert result.skipped_items[0].reason == MISSING_FILE
        assert "BBBBBBBB02" not in result.new_index

    def test_skipped_item_retried_next_run(self, tmp_path, library_factory):
        library_factory.add_item("AAAAAAAA01", "late", "jpg", write_file=False)
        target = ensure_target_dir(tmp_path / "view")
        _, first = _sync(_desired(library_factory), {}, SyncMode.ENTRY_FILE, target)
        assert first.skipped == 1

        library_factory.add_item("AAAAAAAA01", "late", "jpg")
        _, second = _sync(_desired(library_factory), first.new_index, SyncMode.ENTRY_FILE, target)

        assert second.created == 1
        assert (target / "late.jpg").is_symlink()

    def test_unrelated_files_untouched(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        own = target / "notes.txt"
        own.write_text("mine")
        desired = _desired(two_item_library)
        _, first = _sync(desired, {}, SyncMode.ENTRY_FILE, target)

        _, second = _sync([], first.new_index, SyncMode.ENTRY_FILE, target)

        assert second.removed == 2
        assert own.read_text() == "mine"
        assert sorted(p.name for p in target.iterdir()) == ["notes.txt"]

    def test_previous_index_not_modified(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        index = {"GONE": target / "gone.png"}
        snapshot = dict(index)

        _sync(_desired(two_item_library), index, SyncMode.ENTRY_FILE, target)

        assert index == snapshot


class TestRemovalTolerance:
    def test_already_absent_path_is_not_an_error(self, tmp_path):
        target = ensure_target_dir(tmp_path / "view")
        index = {"GONE": target / "deleted-by-user.png"}

        _, result = _sync([], index, SyncMode.ENTRY_FILE, target)

        assert result.errors == []
        assert result.removed == 0
        assert result.new_index == {}

    def test_broken_link_is_removed(self, tmp_path):
        target = ensure_target_dir(tmp_path / "view")
        dangling = target / "dangling.png"
        os.symlink(tmp_path / "nowhere.png", dangling)

        _, result = _sync([], {"OLD": dangling}, SyncMode.ENTRY_FILE, target)

        assert result.removed == 1
        assert not os.path.lexists(dangling)

    def test_failed_removal_reported_and_dropped_from_index(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        desired = _desired(two_item_library)
        _, first = _sync(desired, {}, SyncMode.ENTRY_FILE, target)
        ops = FailingOps(fail_remove={"harbour.png": OSError(errno.EBUSY, "busy")})

        _, second = _sync(desired[:1], first.new_index, SyncMode.ENTRY_FILE, target, ops=ops)

        assert second.removed == 0
        assert len(second.errors) == 1
        record = second.errors[0]
        assert record.path == target / "harbour.png"
        assert record.item is None
        assert record.category == ErrorCategory.OTHER
        assert isinstance(record.error, OperationFailedError)
        assert "BBBBBBBB02" not in second.new_index


class TestTargetDirContainment:
    """Entries are only ever created or removed strictly inside the target directory."""

    @pytest.mark.parametrize("name", ["", "."])
    def test_dot_named_item_lands_inside_target(self, tmp_path, make_item, name):
        target = ensure_target_dir(tmp_path / "desktop" / "view")
        (target / "other.png").write_bytes(b"user file")
        (tmp_path / "desktop" / "precious.txt").write_text("keep")
        source = tmp_path / "dots.bin"
        source.write_bytes(b"dots")
        item = make_item("DOTS0001", name=name, extension="", source_path=source)
        options = ExecuteOptions(target_dir=target)

        plan, result = _sync([item], {}, SyncMode.ENTRY_FILE, target, options)

        assert plan.to_create[0].target_path == target / "DOTS0001."
        assert result.errors == []
        assert target.is_dir() and not target.is_symlink()
        assert (target / "other.png").read_bytes() == b"user file"
        assert (tmp_path / "desktop" / "precious.txt").exists()
        assert os.path.islink(target / "DOTS0001.")

    @pytest.mark.parametrize("bad_path", [".", ".."])
    def test_creation_outside_target_refused(self, tmp_path, make_item, bad_path):
        target = ensure_target_dir(tmp_path / "view")
        (target / "other.png").write_bytes(b"user file")
        source = tmp_path / "src.png"
        source.write_bytes(b"src")
        item = make_item("A1", source_path=source)
        plan = SyncPlan(to_create=[PlannedCreation(item, target / bad_path)])

        result = execute(plan, SyncMode.ENTRY_FILE, {}, ExecuteOptions(target_dir=target))

        assert result.created == 0
        assert len(result.errors) == 1
        assert "not inside target directory" in str(result.errors[0].error)
        assert (target / "other.png").exists()
        assert result.new_index == {}

    def test_removal_outside_target_refused(self, tmp_path):
        target = ensure_target_dir(tmp_path / "view")
        outside = tmp_path / "elsewhere"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        index = {"OLD": outside}

        _, result = _sync([], index, SyncMode.ENTRY_FILE, target, ExecuteOptions(target_dir=target))

        assert result.removed == 0
        assert len(result.errors) == 1
        assert (outside / "keep.txt").exists()
        assert result.new_index == {}


class TestCopyMode:
    def test_copies_are_regular_files(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        _, result = _sync(_desired(two_item_library), {}, SyncMode.COPY, target)

        copy = target / "harbour.png"
        assert result.created == 2
        assert copy.is_file() and not copy.is_symlink()
        assert copy.read_bytes() == b"sea"

    def test_copy_replaces_stale_link_without_touching_library(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        library_file = two_item_library.info_dir("BBBBBBBB02") / "harbour.png"
        other = tmp_path / "other.png"
        other.write_bytes(b"other")
        os.symlink(other, target / "harbour.png")

        _sync(_desired(two_item_library), {}, SyncMode.COPY, target)

        assert not (target / "harbour.png").is_symlink()
        assert other.read_bytes() == b"other"
        assert library_file.read_bytes() == b"sea"


class TestEntryDirectoryMode:
    def test_links_item_directories(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        options = ExecuteOptions(library_path=two_item_library.library,
                                 link_type=LinkType.SYMBOLIC_DIRECTORY_LINK)

        _, result = _sync(_desired(two_item_library), {}, SyncMode.ENTRY_DIRECTORY, target, options)

        entry = target / "AAAAAAAA01.info"
        assert result.created == 2
        assert entry.is_symlink()
        assert os.readlink(entry) == str(entry_source_dir(two_item_library.library, "AAAAAAAA01"))
        assert (entry / "sunset.jpg").read_bytes() == b"sun"

    def test_removal_keeps_library_directory(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        options = ExecuteOptions(library_path=two_item_library.library)
        desired = _desired(two_item_library)
        _, first = _sync(desired, {}, SyncMode.ENTRY_DIRECTORY, target, options)

        _, second = _sync([], first.new_index, SyncMode.ENTRY_DIRECTORY, target, options)

        assert second.removed == 2
        assert list(target.iterdir()) == []
        assert (two_item_library.info_dir("AAAAAAAA01") / "metadata.json").exists()

    def test_requires_library_path(self, tmp_path, make_item):
        plan = compute_plan([make_item("A1")], {}, SyncMode.ENTRY_DIRECTORY, tmp_path)
        with pytest.raises(ConfigError):
            execute(plan, SyncMode.ENTRY_DIRECTORY, {})


class TestPermissionErrors:
    """Refused link creation is collected, classified and isolated to its item."""

    def test_permission_denied_is_collected(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        ops = FailingOps(fail_create={"sunset.jpg": PermissionError(errno.EPERM, "not permitted")})

        _, result = _sync(_desired(two_item_library), {}, SyncMode.ENTRY_FILE, target, ops=ops)

        assert result.created == 1
        assert result.has_errors
        record = result.errors[0]
        assert record.category == ErrorCategory.PERMISSION_DENIED
        assert isinstance(record.error, PermissionDeniedError)
        assert record.error.item_id == "AAAAAAAA01"
        assert isinstance(record.error.__cause__, PermissionError)
        assert record.item.id == "AAAAAAAA01"
        assert set(result.new_index) == {"BBBBBBBB02"}
        assert result.errors_in(ErrorCategory.PERMISSION_DENIED) == [record]

    def test_failed_item_retried_next_run(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        desired = _desired(two_item_library)
        ops = FailingOps(fail_create={"sunset.jpg": PermissionError(errno.EACCES, "denied")})
        _, first = _sync(desired, {}, SyncMode.COPY, target, ops=ops)

        plan, second = _sync(desired, first.new_index, SyncMode.COPY, target)

        assert [c.item.id for c in plan.to_create] == ["AAAAAAAA01"]
        assert second.created == 1
        assert second.errors == []

    def test_summary_lists_errors(self, tmp_path, two_item_library):
        target = ensure_target_dir(tmp_path / "view")
        ops = FailingOps(fail_create={"harbour.png": OSError(errno.EIO, "io")})

        _, result = _sync(_desired(two_item_library), {}, SyncMode.ENTRY_FILE, target, ops=ops)
        summary = result.summary()

        assert summary["created"] == 1
        assert summary["errors_count"] == 1
        assert summary["errors"][0]["item_id"] == "BBBBBBBB02"
        assert summary["errors"][0]["category"] == "other"
        assert summary["total"] == 1
