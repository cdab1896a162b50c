# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parents[3]


def test_readme_is_a_short_project_readme() -> None:
	project = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))["project"]
	readme = ROOT / project["readme"]
	assert readme.name == "README.md"
	assert readme.read_text(encoding="utf-8").startswith("# confimport")


def test_grammar_ships_as_package_data() -> None:
	config = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
	assert "directive.lark" in config["tool"]["setuptools"]["package-data"]["confimport.config"]
	assert (ROOT / "confimport" / "config" / "directive.lark").is_file()
