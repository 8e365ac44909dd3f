#!/usr/bin/env python3
"""
jskill Configuration Manager

Persistent user configuration stored in a .jskill directory, plus the
per-run settings object that is handed to every component.
"""

import json
import os
import pathlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

IGNORE_FILENAME = ".jskillignore"
JSKILL_HOME_ENV = "JSKILL_HOME"

DEFAULT_EXTENSIONS = [".js", ".mjs", ".cjs", ".js.map", ".d.ts"]

DEFAULT_IGNORE_TEXT = """\
# jskill ignore file
#
# One literal path per line. A trailing '/' marks a directory: any directory
# with that name is skipped entirely, wherever it sits in the tree.
# Other lines protect single files (by relative path or by file name).

node_modules/
.git/
.jskill/

# Config files that are written in JavaScript on purpose
.eslintrc.js
babel.config.js
jest.config.js
webpack.config.js
"""


def default_jskill_dir() -> pathlib.Path:
    """Location of the per-user .jskill directory"""
    override = os.environ.get(JSKILL_HOME_ENV)
    if override:
        return pathlib.Path(override).expanduser()
    return pathlib.Path.home() / ".jskill"


@dataclass
class JskillConfig:
    """Persisted jskill configuration"""

    version: str = "1.0"
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    use_cache: bool = True
    last_run: Optional[str] = None
    stats: dict = field(default_factory=lambda: {"total_runs": 0, "total_purged_files": 0, "total_reclaimed_bytes": 0})

    def record_run(self, purged_files: int, reclaimed_bytes: int):
        """Add a finished purge to the cumulative statistics"""
        self.stats["total_runs"] = self.stats.get("total_runs", 0) + 1
        self.stats["total_purged_files"] = self.stats.get("total_purged_files", 0) + purged_files
        self.stats["total_reclaimed_bytes"] = self.stats.get("total_reclaimed_bytes", 0) + reclaimed_bytes
        self.last_run = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "JskillConfig":
        """Create from dictionary"""
        default = cls()
        return cls(
            version=data.get("version", default.version),
            extensions=list(data.get("extensions", default.extensions)),
            use_cache=bool(data.get("use_cache", default.use_cache)),
            last_run=data.get("last_run"),
            stats=dict(data.get("stats", default.stats)),
        )


class ConfigManager:
    """Manages the .jskill directory and its config.json"""

    def __init__(self, jskill_dir: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            jskill_dir: Override default .jskill directory location
        """
        self.jskill_dir = jskill_dir or default_jskill_dir()
        self.config_file = self.jskill_dir / "config.json"
        self.cache_dir = self.jskill_dir / "cache"

        self.jskill_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> JskillConfig:
        """Load configuration from file"""
        if self.config_file.exists():
            try:
                with self.config_file.open() as f:
                    data = json.load(f)
                    return JskillConfig.from_dict(data)
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError):
                # If config is corrupted, return default
                return JskillConfig()
        return JskillConfig()

    def save(self, config: JskillConfig):
        """Save configuration to file"""
        with self.config_file.open("w") as f:
            json.dump(config.to_dict(), f, indent=2)


@dataclass
class JskillSettings:
    """Settings for one run, built once at startup"""

    project_root: pathlib.Path
    jskill_dir: pathlib.Path
    cache_dir: pathlib.Path
    ignore_filename: str = IGNORE_FILENAME
    use_cache: bool = True
    use_ignore: bool = True
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    dry_run: bool = False
    assume_yes: bool = False

    @property
    def ignore_file(self) -> pathlib.Path:
        return self.project_root / self.ignore_filename

    @classmethod
    def build(
        cls,
        project_root: pathlib.Path,
        manager: ConfigManager,
        config: JskillConfig,
        no_cache: bool = False,
        no_ignore: bool = False,
        extensions: Optional[list[str]] = None,
        dry_run: bool = False,
        assume_yes: bool = False,
    ) -> "JskillSettings":
        """Combine persisted config with command line overrides"""
        return cls(
            project_root=project_root.resolve(),
            jskill_dir=manager.jskill_dir,
            cache_dir=manager.cache_dir,
            use_cache=config.use_cache and not no_cache,
            use_ignore=not no_ignore,
            extensions=list(extensions) if extensions else list(config.extensions),
            dry_run=dry_run,
            assume_yes=assume_yes,
        )
