#!/usr/bin/env python3
"""
Directory Scanner and File Collector for jskill

Walks a project tree depth-first, skipping every directory whose name matches
a directory ignore rule, then lists the files inside the directories found.
All returned paths are relative to the scan root and use '/' separators.
"""

import os
import pathlib
from typing import Callable, Optional

from ignore_parser import IgnoreRule, directory_names, file_rules

ROOT = ""


class ScanError(OSError):
    """A directory in the project tree could not be listed"""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"Cannot read directory {path or '.'}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


def _relative(root: pathlib.Path, path: str) -> str:
    rel = pathlib.Path(path).relative_to(root)
    return "" if rel == pathlib.Path(".") else rel.as_posix()


def is_root_excluded(root: pathlib.Path, rules: list[IgnoreRule]) -> bool:
    """The root is only excluded by a directory rule spelling out its absolute path"""
    resolved = root.resolve()
    for rule in rules:
        if not rule.is_directory:
            continue
        candidate = pathlib.Path(rule.path).expanduser()
        if candidate.is_absolute() and candidate.resolve() == resolved:
            return True
    return False


def scan_directories(
    root: pathlib.Path,
    rules: list[IgnoreRule],
    progress_callback: Optional[Callable[[int], None]] = None,
) -> list[str]:
    """Return the non-excluded directories below *root* in pre-order

    A directory is skipped, with its whole subtree, when its name equals the
    path of any directory rule. Parents always come before their descendants.

    Raises:
        ScanError: if a directory cannot be listed
    """
    root = pathlib.Path(root).resolve()
    if is_root_excluded(root, rules):
        return []

    excluded = directory_names(rules)
    found: list[str] = []

    def on_error(error: OSError):
        raise ScanError(_relative(root, error.filename) if error.filename else ROOT, error)

    for dirpath, dirs, _files in os.walk(root, topdown=True, onerror=on_error, followlinks=False):
        rel = _relative(root, dirpath)
        if rel:
            found.append(rel)
            if progress_callback:
                progress_callback(len(found))

        # Prune excluded names and fix the visiting order
        dirs[:] = sorted(d for d in dirs if d not in excluded)

    return found


def collect_files(root: pathlib.Path, directories: list[str], include_root: bool = True) -> list[str]:
    """List the files directly inside each directory, root first

    Order follows *directories*, then file names within each directory.

    Raises:
        ScanError: if a directory cannot be listed
    """
    root = pathlib.Path(root).resolve()
    files: list[str] = []
    targets = ([ROOT] if include_root else []) + list(directories)

    for rel_dir in targets:
        directory = root / rel_dir if rel_dir else root
        try:
            with os.scandir(directory) as entries:
                names = sorted(entry.name for entry in entries if entry.is_file())
        except OSError as e:
            raise ScanError(rel_dir, e) from e

        for name in names:
            files.append(f"{rel_dir}/{name}" if rel_dir else name)

    return files


def matches_file_rule(rel_path: str, rule: IgnoreRule) -> bool:
    """Return True if a file rule protects *rel_path*

    A rule matches the exact relative path, anything under it as a path
    prefix, or, when the rule holds no separator, the bare file name.
    """
    pattern = rule.path.replace("\\", "/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if rel_path == pattern or rel_path.startswith(pattern + "/"):
        return True
    if "/" not in pattern:
        return rel_path.rsplit("/", 1)[-1] == pattern
    return False


def has_extension(rel_path: str, extensions: list[str]) -> bool:
    if not extensions:
        return True
    name = rel_path.rsplit("/", 1)[-1]
    return any(name.endswith(ext) for ext in extensions)


def classify_candidates(
    files: list[str],
    rules: list[IgnoreRule],
    extensions: list[str],
    ignore_filename: Optional[str] = None,
) -> list[str]:
    """Pick the purge candidates out of the collected files, keeping order"""
    protected = file_rules(rules)
    candidates = []
    for rel_path in files:
        if ignore_filename and rel_path == ignore_filename:
            continue
        if any(matches_file_rule(rel_path, rule) for rule in protected):
            continue
        if has_extension(rel_path, extensions):
            candidates.append(rel_path)
    return candidates
