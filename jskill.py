#!/usr/bin/env python3
"""
jskill — find and purge compiled output files from a project tree

Scans a project for generated files (compiled JavaScript, source maps,
declaration files), honours the project's .jskillignore, shows what it found
as a tree and deletes what you select. Directories left without files can be
removed afterwards.

Usage:
    jskill [path]                      # Scan, select and purge
    jskill [path] --dry-run            # Just show candidates
    jskill [path] --no-cache           # Parse .jskillignore again
    jskill [path] --no-ignore          # Ignore .jskillignore entirely
    jskill [path] --ext .js --ext .map # Override the candidate suffixes
    jskill init [path] [--force]       # Write a default .jskillignore
    jskill cache [--clear]             # Show or clear the ignore cache
"""

import argparse
import pathlib
import sys
import time
from dataclasses import dataclass, field
from typing import Optional

from rich import box
from rich.table import Table

from auxiliary import format_bytes, format_path_for_display
from console_ui import ConsoleUI
from directory_scanner import ScanError, classify_candidates, collect_files, is_root_excluded, scan_directories
from ignore_cache import IgnoreCache, IgnoreFileError, IgnoreFileNotFoundError
from ignore_parser import IgnoreRule
from jskill_config import DEFAULT_IGNORE_TEXT, IGNORE_FILENAME, ConfigManager, JskillSettings
from purge import PurgeController, PurgeResult
from tree_renderer import render_tree

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_FAILURE = 1

COMMANDS = ("init", "cache")


class InitError(Exception):
    """The project already has an ignore file"""


@dataclass
class ScanResult:
    root_path: pathlib.Path
    rules: list[IgnoreRule] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    candidates: list[str] = field(default_factory=list)
    scan_duration: float = 0.0
    cache_hit: Optional[bool] = None


def init_project(project_root: pathlib.Path, force: bool = False) -> pathlib.Path:
    """Write the default ignore file into *project_root*

    Raises:
        InitError: if the file exists and *force* is not set
    """
    target = project_root / IGNORE_FILENAME
    if target.exists() and not force:
        raise InitError(f"{target} already exists (use --force to overwrite)")
    target.write_text(DEFAULT_IGNORE_TEXT, encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# jskill
# ---------------------------------------------------------------------------


class Jskill:
    """Main application class for the jskill purge tool"""

    def __init__(
        self,
        args: argparse.Namespace,
        ui: Optional[ConsoleUI] = None,
        jskill_dir: Optional[pathlib.Path] = None,
    ):
        self.args = args
        self.ui = ui or ConsoleUI()

        self.config_manager = ConfigManager(jskill_dir)
        self._config = self.config_manager.load()
        self.settings = JskillSettings.build(
            pathlib.Path(getattr(args, "path", None) or "."),
            self.config_manager,
            self._config,
            no_cache=getattr(args, "no_cache", False),
            no_ignore=getattr(args, "no_ignore", False),
            extensions=getattr(args, "ext", None),
            dry_run=getattr(args, "dry_run", False),
            assume_yes=getattr(args, "yes", False),
        )
        self.cache = IgnoreCache(self.settings.cache_dir)

    # -- commands without a scan ----------------------------------------------

    def init(self) -> int:
        try:
            target = init_project(self.settings.project_root, force=getattr(self.args, "force", False))
        except InitError as e:
            self.ui.print_error(str(e))
            return EXIT_FAILURE
        except OSError as e:
            self.ui.print_error(f"Could not write {IGNORE_FILENAME}: {e}")
            return EXIT_FAILURE
        self.ui.print_success(f"Created {format_path_for_display(str(target))}")
        return EXIT_OK

    def cache_command(self) -> int:
        if getattr(self.args, "clear", False):
            if self.cache.clear():
                self.ui.print_success("Ignore cache cleared.")
            else:
                self.ui.print_info("Ignore cache is already empty.")
            return EXIT_OK
        self.ui.show_configuration(self.cache.describe())
        return EXIT_OK

    # -- scanning --------------------------------------------------------------

    def load_rules(self) -> list[IgnoreRule]:
        """Resolve the ignore rules for this run

        Raises:
            IgnoreFileNotFoundError: if the project has no ignore file
            IgnoreFileError: if the ignore file cannot be read or cached
        """
        if not self.settings.use_ignore:
            return []
        return self.cache.resolve(self.settings.ignore_file, use_cache=self.settings.use_cache)

    def scan(self) -> ScanResult:
        root = self.settings.project_root
        result = ScanResult(root_path=root)
        start = time.monotonic()

        result.rules = self.load_rules()
        result.cache_hit = self.cache.last_hit if self.settings.use_ignore else None

        self.ui.print_header("jskill", f"Scanning {format_path_for_display(str(root))}")

        if is_root_excluded(root, result.rules):
            result.scan_duration = time.monotonic() - start
            return result

        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task("Scanning...", total=None)

            def on_directory(count: int):
                if count % 200 == 0:
                    progress.update(task, description=f"Scanning... {count} dirs")

            result.directories = scan_directories(root, result.rules, on_directory)
            progress.update(task, description="Collecting files...")
            result.files = collect_files(root, result.directories)

        result.candidates = classify_candidates(
            result.files,
            result.rules,
            self.settings.extensions,
            ignore_filename=self.settings.ignore_filename,
        )
        result.scan_duration = time.monotonic() - start
        return result

    # -- reporting -------------------------------------------------------------

    def report(self, result: ScanResult):
        table = Table(title="Scan Summary", box=box.ROUNDED, show_header=False)
        table.add_column("Item", style="cyan", min_width=20)
        table.add_column("Value", justify="right", min_width=10)

        if not self.settings.use_ignore:
            rules_note = "disabled"
        elif result.cache_hit:
            rules_note = f"{len(result.rules)} (cached)"
        else:
            rules_note = f"{len(result.rules)} (parsed)"

        table.add_row("Ignore rules", rules_note)
        table.add_row("Directories", f"{len(result.directories):,}")
        table.add_row("Files", f"{len(result.files):,}")
        table.add_row("Candidates", f"{len(result.candidates):,}")
        table.add_row("Scan time", f"{result.scan_duration:.1f}s")
        self.ui.console.print(table)

        if not result.candidates:
            self.ui.print_success("No compiled output found!")
            return

        self.ui.console.print()
        self.ui.print_lines(render_candidates(result))

    def summary(self, result: PurgeResult):
        self.ui.console.print()
        self.ui.print_info("Purge Complete")
        if result.deleted:
            self.ui.print_success(
                f"  Deleted: {len(result.deleted)} files, reclaimed {format_bytes(result.total_reclaimed)}"
            )
        if result.removed_dirs:
            self.ui.print_success(f"  Removed: {len(result.removed_dirs)} empty directories")
        if result.errors or result.dir_errors:
            self.ui.print_error(f"  Errors:  {len(result.errors) + len(result.dir_errors)}")
            for path, err in result.errors + result.dir_errors:
                self.ui.print_error(f"    {path}: {err}")

    def _record_run(self, result: PurgeResult):
        if not result.deleted:
            return
        self._config.record_run(len(result.deleted), result.total_reclaimed)
        try:
            self.config_manager.save(self._config)
        except OSError as e:
            self.ui.print_warning(f"Could not save run statistics: {e}")

    # -- main entry point ------------------------------------------------------

    def run(self) -> int:
        command = getattr(self.args, "command", None)
        if command == "init":
            return self.init()
        if command == "cache":
            return self.cache_command()

        root = self.settings.project_root
        if not root.is_dir():
            self.ui.print_error(f"Not a directory: {root}")
            return EXIT_FAILURE

        try:
            result = self.scan()
        except IgnoreFileNotFoundError as e:
            self.ui.print_error(str(e))
            self.ui.print_info("Run 'jskill init' to create one, or pass --no-ignore.")
            return EXIT_FAILURE
        except IgnoreFileError as e:
            self.ui.print_error(str(e))
            return EXIT_FAILURE
        except ScanError as e:
            self.ui.print_error(str(e))
            return EXIT_FAILURE

        self.report(result)
        if self.settings.dry_run or not result.candidates:
            return EXIT_OK

        self.ui.console.print()
        controller = PurgeController(root, result.directories, self.ui, assume_yes=self.settings.assume_yes)
        purge_result = controller.run(result.candidates)

        if purge_result.deleted or purge_result.errors:
            self.summary(purge_result)
        self._record_run(purge_result)
        return EXIT_OK


def render_candidates(result: ScanResult) -> list[str]:
    return render_tree(result.candidates, root_label=f"{result.root_path.name or result.root_path}/")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jskill",
        description="jskill — purge compiled output files from a project",
        epilog="Other commands: 'jskill init [path] [--force]', 'jskill cache [--clear]'",
    )
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("path", nargs="?", default=".", help="Project directory (default: current directory)")
    parser.add_argument("--dry-run", action="store_true", help="Show candidates without purging")
    parser.add_argument("--no-cache", action="store_true", help=f"Parse {IGNORE_FILENAME} even if it is unchanged")
    parser.add_argument("--no-ignore", action="store_true", help=f"Do not read {IGNORE_FILENAME}")
    parser.add_argument(
        "--ext",
        action="append",
        metavar="SUFFIX",
        help="File suffix to treat as compiled output (repeatable, replaces the configured list)",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Select everything and skip confirmations")
    parser.set_defaults(command=None)
    return parser


def build_command_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jskill")
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help=f"Add a default {IGNORE_FILENAME} to a project")
    init.add_argument("path", nargs="?", default=".", help="Project directory (default: current directory)")
    init.add_argument("-f", "--force", action="store_true", help=f"Overwrite an existing {IGNORE_FILENAME}")

    cache = commands.add_parser("cache", help="Show or clear the ignore file cache")
    cache.add_argument("--clear", action="store_true", help="Remove the cached ignore file and rules")
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] in COMMANDS:
        return build_command_parser().parse_args(argv)
    return build_parser().parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    app = Jskill(args)
    try:
        return app.run()
    except KeyboardInterrupt:
        app.ui.print_warning("\nInterrupted.")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
