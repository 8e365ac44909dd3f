import os

import pytest
from doubles import dir_rule, file_rule, make_tree

from directory_scanner import (
    ScanError,
    classify_candidates,
    collect_files,
    is_root_excluded,
    matches_file_rule,
    scan_directories,
)


def test_pre_order_depth_first(project):
    make_tree(project, ["b/y/", "a/x/deep/", "a/file.js", "c.js"])
    assert scan_directories(project, []) == ["a", "a/x", "a/x/deep", "b", "b/y"]


def test_empty_root(project):
    assert scan_directories(project, []) == []
    assert collect_files(project, []) == []


def test_excluded_name_anywhere_in_tree(project):
    make_tree(
        project,
        [
            "node_modules/pkg/index.js",
            "src/node_modules/lib/a.js",
            "src/app.js",
            "packages/web/node_modules/",
        ],
    )
    rules = [dir_rule("node_modules")]

    dirs = scan_directories(project, rules)

    assert dirs == ["packages", "packages/web", "src"]
    assert not any("node_modules" in d for d in dirs)


def test_file_rules_do_not_exclude_directories(project):
    make_tree(project, ["build/out.js"])
    assert scan_directories(project, [file_rule("build")]) == ["build"]


def test_directory_rule_matches_name_not_path(project):
    make_tree(project, ["src/build/x.js", "build/y.js"])
    assert scan_directories(project, [dir_rule("src/build")]) == ["build", "src", "src/build"]


def test_root_excluded_only_by_its_own_path(project):
    make_tree(project, ["a/b.js"])
    assert is_root_excluded(project, [dir_rule(project.name)]) is False
    assert is_root_excluded(project, [dir_rule(str(project))]) is True
    assert scan_directories(project, [dir_rule(str(project))]) == []


def test_symlinked_directories_are_not_followed(project, tmp_path):
    outside = make_tree(tmp_path / "outside", ["lib.js"])
    make_tree(project, ["src/"])
    os.symlink(outside, project / "src" / "linked", target_is_directory=True)

    assert scan_directories(project, []) == ["src"]


def test_unreadable_directory_aborts_scan(project, monkeypatch):
    make_tree(project, ["ok/", "locked/inner/"])
    real_scandir = os.scandir

    def guarded(path="."):
        if os.fspath(path).endswith("locked"):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded)

    with pytest.raises(ScanError) as excinfo:
        scan_directories(project, [])
    assert excinfo.value.path == "locked"


def test_collect_files_order(project):
    make_tree(project, ["z.js", "a.js", "lib/b.js", "lib/a.js", "lib/sub/"])
    files = collect_files(project, ["lib", "lib/sub"])
    assert files == ["a.js", "z.js", "lib/a.js", "lib/b.js"]


def test_collect_skips_directories(project):
    make_tree(project, ["only/dirs/here/"])
    assert collect_files(project, ["only", "only/dirs", "only/dirs/here"]) == []


def test_collect_without_root(project):
    make_tree(project, ["root.js", "src/a.js"])
    assert collect_files(project, ["src"], include_root=False) == ["src/a.js"]


def test_collect_unreadable_directory(project, monkeypatch):
    make_tree(project, ["src/a.js"])
    real_scandir = os.scandir

    def guarded(path="."):
        if os.fspath(path).endswith("src"):
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded)

    with pytest.raises(ScanError):
        collect_files(project, ["src"])


@pytest.mark.parametrize(
    "path, rule, expected",
    [
        ("app.js", "app.js", True),
        ("src/app.js", "app.js", True),
        ("src/app.js", "src/app.js", True),
        ("src/app.js", "./src/app.js", True),
        ("lib/app.js", "src/app.js", False),
        ("vendor/a/b.js", "vendor/a", True),
        ("vendor/ab.js", "vendor/a", False),
        ("myapp.js", "app.js", False),
    ],
)
def test_matches_file_rule(path, rule, expected):
    assert matches_file_rule(path, file_rule(rule)) is expected


def test_classify_candidates():
    files = [".jskillignore", "app.js", "app.ts", "src/keep.js", "src/main.js", "src/main.js.map", "types.d.ts"]
    rules = [file_rule("keep.js"), dir_rule("main.js")]

    candidates = classify_candidates(files, rules, [".js", ".js.map", ".d.ts"], ignore_filename=".jskillignore")

    assert candidates == ["app.js", "src/main.js", "src/main.js.map", "types.d.ts"]


def test_classify_without_extension_filter():
    assert classify_candidates(["a.txt", "b.js"], [], []) == ["a.txt", "b.js"]
