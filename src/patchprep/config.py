"""Configuration management for patchprep."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from patchprep.exceptions import ConfigError

PATCHPREP_DIR = ".patchprep"
CONFIG_FILE = "config.json"

DEFAULT_RECENT_WINDOW_DAYS = 364
DEFAULT_TOP_N = 5
DEFAULT_RECENT_BOOST = 9_999_999


class ReviewerConfig(BaseModel):
    """Reviewer suggestion tuning."""

    recent_window_days: int = DEFAULT_RECENT_WINDOW_DAYS
    top_n: int = DEFAULT_TOP_N
    recent_boost: int = DEFAULT_RECENT_BOOST


class PatchConfig(BaseModel):
    """Full configuration for preparing a patch series.

    An empty `email` means "use `git config user.email`".
    """

    email: str = ""
    upstream_remote: str = "upstream"
    default_upstream_branch: str = "maint"
    publish_remote: str = "origin"
    patch_temp_dir: str = "~/temp/patches"
    web_url: str = "https://github.com/larsxschneider/git"
    mailing_list: str = "git@vger.kernel.org"
    test_dir: str = "t"
    fetch: bool = True
    open_editor: bool = True
    reviewers: ReviewerConfig = Field(default_factory=ReviewerConfig)

    @property
    def default_base(self) -> str:
        return f"{self.upstream_remote}/{self.default_upstream_branch}"

    @property
    def patch_root(self) -> Path:
        return Path(self.patch_temp_dir).expanduser()


def find_repo_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .git entry."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent
    if (current / ".git").exists():
        return current
    return None


def get_patchprep_dir(root: Path) -> Path:
    """Get the .patchprep directory for a repository root."""
    return root / PATCHPREP_DIR


def load_config(root: Path) -> PatchConfig:
    """Load configuration from .patchprep/config.json."""
    config_path = get_patchprep_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return PatchConfig(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
    return PatchConfig()


def save_config(root: Path, config: PatchConfig) -> None:
    """Save configuration to .patchprep/config.json."""
    pp_dir = get_patchprep_dir(root)
    pp_dir.mkdir(parents=True, exist_ok=True)
    config_path = pp_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: PatchConfig, key: str, value: Any) -> PatchConfig:
    """Set a nested config value using dot notation (e.g., 'reviewers.top_n')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    return PatchConfig(**data)
