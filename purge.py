#!/usr/bin/env python3
"""
Purge workflow for jskill

Drives the destructive part of a run as a linear state machine:

    SCANNED -> SELECTED -> CONFIRMED -> DELETING -> EMPTY_DIRS_CHECKED
            -> DIRS_CONFIRMED -> DIRS_DELETING -> DONE

Every step may end the run early (empty selection, declined confirmation);
that is a clean exit, not a failure.

Deletion is best effort. A file that cannot be removed is reported and
skipped, and the batch carries on. The result still counts as completed, so
callers that need strict behaviour must look at PurgeResult.errors.
"""

import os
import pathlib
import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from auxiliary import file_size, format_bytes


class PurgeState(Enum):
    SCANNED = "scanned"
    SELECTED = "selected"
    CONFIRMED = "confirmed"
    DELETING = "deleting"
    EMPTY_DIRS_CHECKED = "empty_dirs_checked"
    DIRS_CONFIRMED = "dirs_confirmed"
    DIRS_DELETING = "dirs_deleting"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class PurgeResult:
    """Decisions and outcomes of one purge run"""

    state: PurgeState = PurgeState.SCANNED
    aborted_at: Optional[PurgeState] = None
    selected: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)
    total_reclaimed: int = 0
    empty_dirs: list[str] = field(default_factory=list)
    removed_dirs: list[str] = field(default_factory=list)
    dir_errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.state is PurgeState.ABORTED

    @property
    def completed(self) -> bool:
        return self.state is PurgeState.DONE


def _holds_content(directory: pathlib.Path) -> bool:
    """True if anything other than plain directories lives below *directory*

    Unreadable subdirectories and symlinked directories count as content.
    """
    blocked: list[OSError] = []
    for dirpath, dirs, files in os.walk(directory, onerror=blocked.append, followlinks=False):
        if files or blocked:
            return True
        if any(os.path.islink(os.path.join(dirpath, d)) for d in dirs):
            return True
    return bool(blocked)


def find_empty_directories(root: pathlib.Path, directories: list[str]) -> list[str]:
    """Return the deletion targets for directories left without files

    Each empty directory climbs towards the root for as long as its parent
    would hold nothing else, so a chain like a/b/c collapses into a single
    target "a". The root itself is never a target. Targets nested in another
    target are dropped.
    """
    root = pathlib.Path(root)
    targets: list[str] = []

    for rel in directories:
        path = root / rel
        if not path.is_dir() or path.is_symlink() or _holds_content(path):
            continue

        target = pathlib.PurePosixPath(rel)
        while target.parent != pathlib.PurePosixPath(".") and not _holds_content(root / target.parent):
            target = target.parent
        targets.append(target.as_posix())

    collapsed: list[str] = []
    for target in targets:
        if target in collapsed:
            continue
        if any(target.startswith(outer + "/") for outer in targets if outer != target):
            continue
        collapsed.append(target)
    return collapsed


class PurgeController:
    """Runs the select / confirm / delete workflow against a console UI

    The UI needs select_from_list(), confirm(), create_progress() and the
    print_* methods of ConsoleUI, so tests can hand in a scripted stand-in.
    """

    def __init__(self, root: pathlib.Path, directories: list[str], ui, assume_yes: bool = False):
        self.root = pathlib.Path(root)
        self.directories = list(directories)
        self.ui = ui
        self.assume_yes = assume_yes

    # -- prompts ---------------------------------------------------------------

    def _select(self, candidates: list[str]) -> list[str]:
        if self.assume_yes:
            return list(candidates)
        chosen = set(self.ui.select_from_list(candidates, title="Files to purge"))
        # Never trust the prompt with paths it was not offered
        return [path for path in candidates if path in chosen]

    def _confirm(self, question: str) -> bool:
        if self.assume_yes:
            return True
        try:
            return self.ui.confirm(question, default=False)
        except (KeyboardInterrupt, EOFError):
            self.ui.console.print()
            return False

    def _abort(self, result: PurgeResult, message: str) -> PurgeResult:
        result.aborted_at = result.state
        result.state = PurgeState.ABORTED
        self.ui.print_info(message)
        return result

    # -- stages ----------------------------------------------------------------

    def delete_files(self, result: PurgeResult):
        """Remove each selected file on its own; failures are recorded and skipped"""
        result.state = PurgeState.DELETING
        progress = self.ui.create_progress()
        with progress:
            task = progress.add_task("Purging...", total=len(result.selected))
            for rel in result.selected:
                path = self.root / rel
                progress.update(task, description=f"Purging... {format_bytes(result.total_reclaimed)} reclaimed")
                size = file_size(path)
                try:
                    path.unlink()
                    result.deleted.append(rel)
                    result.total_reclaimed += size
                except OSError as e:
                    result.errors.append((rel, str(e)))
                    self.ui.print_error(f"  Could not delete {rel}: {e}")
                progress.advance(task)

    def delete_directories(self, result: PurgeResult):
        result.state = PurgeState.DIRS_DELETING
        for rel in result.empty_dirs:
            path = self.root / rel
            # Files may have appeared since the check
            if _holds_content(path):
                result.dir_errors.append((rel, "directory is no longer empty"))
                self.ui.print_warning(f"  Skipped {rel}/: no longer empty")
                continue
            try:
                shutil.rmtree(path)
                result.removed_dirs.append(rel)
            except OSError as e:
                result.dir_errors.append((rel, str(e)))
                self.ui.print_error(f"  Could not remove {rel}/: {e}")

    # -- main workflow ---------------------------------------------------------

    def run(self, candidates: list[str]) -> PurgeResult:
        result = PurgeResult()
        if not candidates:
            return self._abort(result, "Nothing to purge.")

        result.selected = self._select(candidates)
        result.state = PurgeState.SELECTED
        if not result.selected:
            return self._abort(result, "No files selected.")

        if not self._confirm(f"Delete {len(result.selected)} selected files?"):
            return self._abort(result, "No files deleted.")
        result.state = PurgeState.CONFIRMED

        self.delete_files(result)

        result.empty_dirs = find_empty_directories(self.root, self.directories)
        result.state = PurgeState.EMPTY_DIRS_CHECKED
        if result.empty_dirs:
            self.ui.print_info("Directories left without files:")
            for rel in result.empty_dirs:
                self.ui.print_plain(f"  {rel}/")

            if not self._confirm(f"Remove {len(result.empty_dirs)} empty directories?"):
                return self._abort(result, "Empty directories kept.")
            result.state = PurgeState.DIRS_CONFIRMED

            self.delete_directories(result)

        result.state = PurgeState.DONE
        return result
