#!/usr/bin/env python3
"""
Ignore File Cache for jskill

Keeps a raw copy of the last .jskillignore seen together with its parsed
rules, so an unchanged ignore file is not parsed again on every run.

The raw copy is compared byte for byte with the current file. On a match the
rules are read back from the JSON sidecar; otherwise the copy and the sidecar
are both rewritten.
"""

import json
import pathlib
from typing import Callable, Optional

from ignore_parser import IgnoreRule, parse_ignore_text, rules_from_data, rules_to_data

RAW_COPY_NAME = "jskillignore.raw"
PARSED_NAME = "jskillignore.json"


class IgnoreFileError(Exception):
    """The ignore file or its cache cannot be used"""

    def __init__(self, path: pathlib.Path, message: str):
        super().__init__(message)
        self.path = path


class IgnoreFileNotFoundError(IgnoreFileError):
    """The project has no ignore file"""

    def __init__(self, path: pathlib.Path):
        super().__init__(path, f"Ignore file not found: {path}")


class IgnoreCache:
    """Single-slot cache of the parsed ignore file"""

    def __init__(self, cache_dir: pathlib.Path, parser: Optional[Callable[[str], list[IgnoreRule]]] = None):
        """Initialize the cache

        Args:
            cache_dir: Directory holding the raw copy and the parsed sidecar
            parser: Text-to-rules function, parse_ignore_text by default
        """
        self.cache_dir = cache_dir
        self.raw_copy = cache_dir / RAW_COPY_NAME
        self.parsed_file = cache_dir / PARSED_NAME
        self.parser = parser or parse_ignore_text
        self.last_hit: Optional[bool] = None

    def resolve(self, ignore_file: pathlib.Path, use_cache: bool = True) -> list[IgnoreRule]:
        """Return the rules for *ignore_file*, reusing the cached parse when possible

        Raises:
            IgnoreFileNotFoundError: if *ignore_file* does not exist
            IgnoreFileError: if *ignore_file* cannot be read or decoded, or the cache cannot be written
        """
        if not ignore_file.is_file():
            raise IgnoreFileNotFoundError(ignore_file)

        try:
            current = ignore_file.read_bytes()
        except OSError as e:
            raise IgnoreFileError(ignore_file, f"Cannot read ignore file {ignore_file}: {e}") from e

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            if use_cache and self.raw_copy.is_file() and self.raw_copy.read_bytes() == current:
                rules = self._load_parsed()
                if rules is not None:
                    self.last_hit = True
                    return rules

            self.last_hit = False
            # A raw copy only exists next to the rules parsed from it
            self.raw_copy.unlink(missing_ok=True)
        except OSError as e:
            raise IgnoreFileError(self.cache_dir, f"Cannot use ignore cache {self.cache_dir}: {e}") from e

        try:
            text = current.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise IgnoreFileError(
                ignore_file, f"Ignore file is not valid UTF-8: {ignore_file} ({e.reason} at byte {e.start})"
            ) from e

        rules = self.parser(text)

        try:
            self._store_parsed(rules)
            self.raw_copy.write_bytes(current)
        except OSError as e:
            raise IgnoreFileError(self.cache_dir, f"Cannot write ignore cache {self.cache_dir}: {e}") from e
        return rules

    def clear(self) -> bool:
        """Remove cached files. Returns True if anything was removed."""
        removed = False
        for path in (self.raw_copy, self.parsed_file):
            if path.exists():
                path.unlink()
                removed = True
        return removed

    def describe(self) -> dict:
        """Summary of the cache state for display"""
        info = {
            "Cache directory": str(self.cache_dir),
            "Raw copy": "present" if self.raw_copy.is_file() else "absent",
            "Parsed rules": "absent",
        }
        rules = self._load_parsed() if self.parsed_file.is_file() else None
        if rules is not None:
            info["Parsed rules"] = f"{len(rules)} rules"
        return info

    def _load_parsed(self) -> Optional[list[IgnoreRule]]:
        try:
            with self.parsed_file.open(encoding="utf-8") as f:
                return rules_from_data(json.load(f))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            # Unreadable sidecar counts as a miss
            return None

    def _store_parsed(self, rules: list[IgnoreRule]):
        with self.parsed_file.open("w", encoding="utf-8") as f:
            json.dump(rules_to_data(rules), f, indent=2)
