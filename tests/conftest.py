# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# tests/conftest.py

"""
Shared test fixtures for the linkview test suite.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pytest
import yaml

from linkview.config.manager import Config
from linkview.data.models import Item, LinkType
from tests.fixtures.library_factory import LibraryFactory


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Point user config and state at tmp_path so tests never see real settings."""
    config_home = tmp_path / "config-home"
    config_home.mkdir()
    state_dir = tmp_path / "state"
    with (config_home / "linkview.yml").open("w") as f:
        yaml.safe_dump({"state_dir": str(state_dir)}, f)

    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("LINKVIEW_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def make_item():
    """Build engine Items; source_path defaults to a non-existent location."""
    def _make(item_id: str, name: str = "photo", extension: str = "png",
              source_path: Optional[Path] = None) -> Item:
        return Item(
            id=item_id,
            name=name,
            extension=extension,
            source_path=source_path or Path("/nonexistent") / f"{item_id}.info" / f"{name}.{extension}",
        )
    return _make


@pytest.fixture
def library_factory(tmp_path):
    return LibraryFactory(tmp_path)


@dataclass
class ViewSetup:
    factory: LibraryFactory
    config_path: Path
    target: Path
    state_dir: Path

    @property
    def library(self) -> Path:
        return self.factory.library

    def rewrite_config(self, **overrides: Any) -> Path:
        target = overrides.pop("target", self.target)
        return self.factory.write_view_config(self.config_path, target, **overrides)

    def load(self) -> Config:
        return Config.load(self.config_path)


@pytest.fixture
def view_setup(tmp_path, library_factory):
    """A library with three items and an entry-file view targeting tmp_path/target."""
    library_factory.add_item("AAAAAAAA1111", "sunset", "jpg", tags=["favourite"], star=5)
    library_factory.add_item("BBBBBBBB2222", "harbour", "png", tags=["travel"], star=3)
    library_factory.add_item("CCCCCCCC3333", "portrait", "jpg", tags=["favourite", "people"], star=4)

    target = tmp_path / "target"
    config_path = library_factory.write_view_config(tmp_path / "project" / ".linkview.yml", target)
    return ViewSetup(
        factory=library_factory,
        config_path=config_path,
        target=target,
        state_dir=tmp_path / "state",
    )


@pytest.fixture
def entry_directory_options(library_factory):
    from linkview.core.executor import ExecuteOptions
    return ExecuteOptions(library_path=library_factory.library,
                          link_type=LinkType.SYMBOLIC_DIRECTORY_LINK)
