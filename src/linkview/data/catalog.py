# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/data/catalog.py

"""
Read library items from disk.

A library stores each item in its own directory:

    <library>/images/<ID>.info/metadata.json
    <library>/images/<ID>.info/<name>.<ext>

metadata.json carries the id, display name, extension, tags, folders and
the other properties the filter evaluator can match on.
"""

from pathlib import Path
from typing import Optional

import loguru
import orjson
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from linkview.data.models import Item
from linkview.system.exceptions import CatalogError

logger = loguru.logger

METADATA_FILE = "metadata.json"
IMAGES_DIR = "images"


class CatalogItem(BaseModel):
    """Full item record as stored in the library."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    ext: str = ""
    tags: list[str] = Field(default_factory=list)
    folders: list[str] = Field(default_factory=list)
    star: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = None
    url: str = ""
    annotation: str = ""
    imported_at: Optional[int] = Field(default=None, validation_alias=AliasChoices("importedAt", "btime"))
    modified_at: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("modifiedAt", "modificationTime", "mtime")
    )
    is_deleted: bool = Field(default=False, validation_alias=AliasChoices("isDeleted", "is_deleted"))

    source_path: Path = Field(default=Path(), exclude=True)

    def to_item(self) -> Item:
        return Item(id=self.id, name=self.name, extension=self.ext, source_path=self.source_path)


class LibraryCatalog:
    """Items of one library, loaded from its images/ directory."""

    def __init__(self, library_path: Path):
        self.library_path = Path(library_path)
        self.images_dir = self.library_path / IMAGES_DIR

    def load(self, include_deleted: bool = False) -> list[CatalogItem]:
        """Load all items, sorted by their .info directory name.

        Malformed metadata files are logged and skipped.

        Raises:
            CatalogError: If the library has no images directory
        """
        if not self.images_dir.is_dir():
            raise CatalogError(f"Not a library (no {IMAGES_DIR}/ directory): {self.library_path}")

        items = []
        broken = 0
        for info_dir in sorted(self.images_dir.glob("*.info")):
            if not info_dir.is_dir():
                continue
            item = self._load_item(info_dir)
            if item is None:
                broken += 1
                continue
            if item.is_deleted and not include_deleted:
                continue
            items.append(item)

        if broken:
            logger.warning(f"Skipped {broken} item(s) with unreadable metadata in {self.images_dir}")
        logger.debug(f"Loaded {len(items)} items from {self.library_path}")
        return items

    def _load_item(self, info_dir: Path) -> Optional[CatalogItem]:
        metadata_path = info_dir / METADATA_FILE
        try:
            data = orjson.loads(metadata_path.read_bytes())
            item = CatalogItem.model_validate(data)
        except (OSError, orjson.JSONDecodeError, ValidationError) as e:
            logger.debug(f"Cannot read {metadata_path}: {e}")
            return None

        filename = f"{item.name}.{item.ext}" if item.ext else item.name
        item.source_path = info_dir / filename
        return item
