from __future__ import annotations

"""
Unit tests for the configuration domain: persistence and BundleOptions.
"""

import dataclasses
import json
import os
from pathlib import Path

import pytest

from htmlfuse.domain.config import (
    BundleOptions,
    get_default_config,
    load_config,
    save_config,
)
from htmlfuse.domain.constants import CURRENT_CONFIG_VERSION


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """TC-01: Saved options are read back over the defaults."""
    path = tmp_path / "cfg" / "config.json"
    cfg = get_default_config()
    cfg["excludes"] = ["vendor/"]
    cfg["inline_css"] = True

    save_config(cfg, str(path))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == CURRENT_CONFIG_VERSION

    loaded = load_config(str(path))
    assert loaded["excludes"] == ["vendor/"]
    assert loaded["inline_css"] is True
    assert loaded["implicit_strip"] is True


def test_load_flat_file_ignores_unknown_keys(tmp_path: Path) -> None:
    """TC-02: Unwrapped files are accepted; unknown keys are dropped."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"strip_comments": True, "bogus": 1}), encoding="utf-8")

    loaded = load_config(str(path))

    assert loaded["strip_comments"] is True
    assert "bogus" not in loaded


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"options": 5}'])
def test_corrupted_file_falls_back_to_defaults(tmp_path: Path, content: str) -> None:
    """TC-03: Corrupted files never abort, defaults are returned."""
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    assert load_config(str(path)) == get_default_config()


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    """TC-04: A missing file yields the defaults."""
    assert load_config(str(tmp_path / "nope.json")) == get_default_config()


def test_bundle_options_from_config(tmp_path: Path) -> None:
    """TC-05: Lists become tuples and abspath becomes absolute."""
    cfg = get_default_config()
    cfg.update({"abspath": str(tmp_path), "excludes": ["a"], "inline_scripts": True, "max_workers": 2})

    options = BundleOptions.from_config(cfg)

    assert options.abspath == os.path.abspath(str(tmp_path))
    assert options.excludes == ("a",)
    assert options.inline_scripts is True
    assert options.max_workers == 2
    assert options.implicit_strip is True


def test_bundle_options_are_immutable() -> None:
    """TC-06: Options cannot be mutated in place."""
    options = BundleOptions()
    with pytest.raises(dataclasses.FrozenInstanceError):
        options.excludes = ("x",)  # type: ignore[misc]


def test_with_strip_excludes_returns_new_instance() -> None:
    """TC-07: Extra strip-excludes are appended once, in a copy."""
    options = BundleOptions(strip_excludes=("a",))

    extended = options.with_strip_excludes(["b", "a", "c"])

    assert extended.strip_excludes == ("a", "b", "c")
    assert options.strip_excludes == ("a",)
