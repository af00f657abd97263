# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/test_catalog.py

"""
Tests for reading library items from disk.
"""

import pytest

from linkview.data.catalog import CatalogItem, LibraryCatalog
from linkview.system.exceptions import CatalogError


class TestLibraryCatalog:
    def test_loads_items_in_directory_order(self, library_factory):
        library_factory.add_item("CCC", "third")
        library_factory.add_item("AAA", "first")
        library_factory.add_item("BBB", "second")

        items = LibraryCatalog(library_factory.library).load()

        assert [i.id for i in items] == ["AAA", "BBB", "CCC"]

    def test_source_path_points_at_item_file(self, library_factory):
        library_factory.add_item("AAA", "sunset", "jpg")
        item = LibraryCatalog(library_factory.library).load()[0]
        assert item.source_path == library_factory.info_dir("AAA") / "sunset.jpg"

    def test_metadata_fields(self, library_factory):
        library_factory.add_item(
            "AAA", "sunset", "jpg",
            tags=["beach", "favourite"], folders=["F1"], star=4, width=640, height=480,
            size=1234, url="https://example.org/p", annotation="golden hour",
            importedAt=1700000000000, modificationTime=1700000500000,
        )
        item = LibraryCatalog(library_factory.library).load()[0]

        assert item.tags == ["beach", "favourite"]
        assert item.folders == ["F1"]
        assert (item.star, item.width, item.height, item.size) == (4, 640, 480, 1234)
        assert item.annotation == "golden hour"
        assert item.imported_at == 1700000000000
        assert item.modified_at == 1700000500000

    def test_deleted_items_excluded(self, library_factory):
        library_factory.add_item("AAA", "kept")
        library_factory.add_item("BBB", "trashed", isDeleted=True)

        catalog = LibraryCatalog(library_factory.library)

        assert [i.id for i in catalog.load()] == ["AAA"]
        assert [i.id for i in catalog.load(include_deleted=True)] == ["AAA", "BBB"]

    def test_malformed_metadata_skipped(self, library_factory):
        library_factory.add_item("AAA", "good")
        library_factory.add_broken_item("BBB")
        library_factory.add_broken_item("CCC", payload=b'{"name": "no id"}')

        items = LibraryCatalog(library_factory.library).load()

        assert [i.id for i in items] == ["AAA"]

    def test_info_dir_without_metadata_skipped(self, library_factory):
        library_factory.add_item("AAA", "good")
        library_factory.info_dir("EMPTY").mkdir()
        assert len(LibraryCatalog(library_factory.library).load()) == 1

    def test_missing_images_dir_is_an_error(self, tmp_path):
        with pytest.raises(CatalogError, match="images"):
            LibraryCatalog(tmp_path / "nowhere").load()

    def test_empty_library(self, library_factory):
        assert LibraryCatalog(library_factory.library).load() == []


class TestCatalogItem:
    def test_unknown_keys_ignored(self):
        item = CatalogItem.model_validate({"id": "A", "name": "n", "ext": "png", "palettes": [1, 2]})
        assert item.id == "A"

    def test_to_item(self, tmp_path):
        item = CatalogItem.model_validate({"id": "A", "name": "n", "ext": "png"})
        item.source_path = tmp_path / "n.png"

        engine_item = item.to_item()

        assert engine_item.id == "A"
        assert engine_item.name == "n"
        assert engine_item.extension == "png"
        assert engine_item.source_path == tmp_path / "n.png"
