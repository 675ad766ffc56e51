"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from patchprep.config import (
    PatchConfig,
    find_repo_root,
    load_config,
    save_config,
    set_config_value,
)
from patchprep.exceptions import ConfigError


class TestConfig:
    def test_default_config(self):
        config = PatchConfig()
        assert config.upstream_remote == "upstream"
        assert config.default_base == "upstream/maint"
        assert config.reviewers.recent_window_days == 364
        assert config.reviewers.top_n == 5
        assert config.mailing_list == "git@vger.kernel.org"

    def test_patch_root_expands_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert PatchConfig().patch_root == tmp_path / "temp" / "patches"

    def test_save_and_load(self, tmp_path: Path):
        config = PatchConfig(email="me@x.com")
        config.reviewers.top_n = 3

        save_config(tmp_path, config)
        loaded = load_config(tmp_path)

        assert loaded.email == "me@x.com"
        assert loaded.reviewers.top_n == 3
        assert (tmp_path / ".patchprep" / "config.json").exists()

    def test_load_missing_gives_defaults(self, tmp_path: Path):
        assert load_config(tmp_path) == PatchConfig()

    def test_find_repo_root(self, tmp_path: Path):
        # No .git dir - should return None
        assert find_repo_root(tmp_path) is None

        (tmp_path / ".git").mkdir()
        assert find_repo_root(tmp_path) == tmp_path

        # Should find from subdirectory
        sub = tmp_path / "t" / "lib"
        sub.mkdir(parents=True)
        assert find_repo_root(sub) == tmp_path

    def test_find_repo_root_worktree_file(self, tmp_path: Path):
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n")
        assert find_repo_root(tmp_path) == tmp_path

    def test_set_config_value(self):
        config = PatchConfig()
        updated = set_config_value(config, "email", "me@x.com")
        assert updated.email == "me@x.com"

    def test_set_config_nested(self):
        config = PatchConfig()
        updated = set_config_value(config, "reviewers.recent_boost", 1000)
        assert updated.reviewers.recent_boost == 1000

    def test_set_config_invalid_key(self):
        config = PatchConfig()
        with pytest.raises(KeyError):
            set_config_value(config, "nonexistent.key", "value")

    def test_invalid_file_raises(self, tmp_path: Path):
        (tmp_path / ".patchprep").mkdir()
        (tmp_path / ".patchprep" / "config.json").write_text('{"reviewers": {"top_n": "many"}}')
        with pytest.raises(ConfigError):
            load_config(tmp_path)
