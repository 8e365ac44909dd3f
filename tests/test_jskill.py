import json

import pytest
from doubles import ScriptedUI, make_tree

from jskill import EXIT_FAILURE, EXIT_OK, InitError, Jskill, init_project, main, parse_args
from jskill_config import DEFAULT_IGNORE_TEXT, IGNORE_FILENAME


def run_app(argv, jskill_home, ui=None):
    app = Jskill(parse_args(argv), ui=ui or ScriptedUI(), jskill_dir=jskill_home)
    return app, app.run()


def test_parse_args_root_command():
    args = parse_args(["src", "--no-cache", "--ext", ".js", "--ext", ".map", "-y"])
    assert args.command is None
    assert args.path == "src"
    assert args.no_cache is True
    assert args.ext == [".js", ".map"]
    assert args.yes is True


def test_parse_args_subcommands():
    assert parse_args(["init", "--force"]).command == "init"
    assert parse_args(["init", "--force"]).force is True
    assert parse_args(["cache", "--clear"]).clear is True


def test_init_writes_default_file(project):
    target = init_project(project)
    assert target.read_text() == DEFAULT_IGNORE_TEXT


def test_init_refuses_to_overwrite(project):
    (project / IGNORE_FILENAME).write_text("mine/\n")
    with pytest.raises(InitError):
        init_project(project)
    assert (project / IGNORE_FILENAME).read_text() == "mine/\n"

    init_project(project, force=True)
    assert (project / IGNORE_FILENAME).read_text() == DEFAULT_IGNORE_TEXT


def test_init_command_exit_codes(project, jskill_home):
    _, code = run_app(["init", str(project)], jskill_home)
    assert code == EXIT_OK
    _, code = run_app(["init", str(project)], jskill_home)
    assert code == EXIT_FAILURE


def test_missing_ignore_file_is_fatal(project, jskill_home):
    make_tree(project, ["app.js"])
    ui = ScriptedUI()

    _, code = run_app([str(project)], jskill_home, ui)

    assert code == EXIT_FAILURE
    assert "Ignore file not found" in ui.output
    assert (project / "app.js").exists()


def test_no_ignore_runs_without_file(project, jskill_home):
    make_tree(project, ["app.js"])
    ui = ScriptedUI(confirms=[True])

    _, code = run_app([str(project), "--no-ignore"], jskill_home, ui)

    assert code == EXIT_OK
    assert not (project / "app.js").exists()


def test_not_a_directory(tmp_path, jskill_home):
    _, code = run_app([str(tmp_path / "missing")], jskill_home)
    assert code == EXIT_FAILURE


def test_dry_run_reports_tree_and_keeps_files(project, jskill_home):
    make_tree(project, [IGNORE_FILENAME, "src/app.js", "src/app.ts", "node_modules/dep/index.js"])
    (project / IGNORE_FILENAME).write_text("node_modules/\n")
    ui = ScriptedUI()

    app, code = run_app([str(project), "--dry-run"], jskill_home, ui)

    assert code == EXIT_OK
    assert ui.questions == []
    assert "└── src/" in ui.output
    assert "    └── app.js" in ui.output
    assert "index.js" not in ui.output
    assert (project / "src" / "app.js").exists()


def test_full_run_end_to_end(project, jskill_home):
    make_tree(
        project,
        [
            IGNORE_FILENAME,
            "app.js",
            "webpack.config.js",
            "build/bundle.js",
            "src/index.ts",
            "src/index.js",
            "src/gen/types.d.ts",
        ],
    )
    (project / IGNORE_FILENAME).write_text("build/\nwebpack.config.js\n")
    ui = ScriptedUI(confirms=[True, True])

    app, code = run_app([str(project)], jskill_home, ui)

    assert code == EXIT_OK
    assert ui.offered == [["app.js", "src/index.js", "src/gen/types.d.ts"]]
    assert not (project / "app.js").exists()
    assert not (project / "src" / "gen").exists()
    assert (project / "src" / "index.ts").exists()
    assert (project / "webpack.config.js").exists()
    assert (project / "build" / "bundle.js").exists()
    assert (project / IGNORE_FILENAME).exists()

    config = json.loads((jskill_home / "config.json").read_text())
    assert config["stats"]["total_runs"] == 1
    assert config["stats"]["total_purged_files"] == 3
    assert config["last_run"] is not None


def test_second_run_uses_cached_rules(project, jskill_home):
    make_tree(project, [IGNORE_FILENAME, "app.ts"])
    (project / IGNORE_FILENAME).write_text("dist/\n")

    first, _ = run_app([str(project), "--dry-run"], jskill_home)
    second, _ = run_app([str(project), "--dry-run"], jskill_home)
    third, _ = run_app([str(project), "--dry-run", "--no-cache"], jskill_home)

    assert first.cache.last_hit is False
    assert second.cache.last_hit is True
    assert third.cache.last_hit is False


def test_ext_override(project, jskill_home):
    make_tree(project, ["a.js", "b.css"])
    ui = ScriptedUI(confirms=[True])

    _, code = run_app([str(project), "--no-ignore", "--ext", ".css"], jskill_home, ui)

    assert code == EXIT_OK
    assert ui.offered == [["b.css"]]
    assert (project / "a.js").exists()


def test_declined_purge_records_nothing(project, jskill_home):
    make_tree(project, ["a.js"])
    ui = ScriptedUI(confirms=[False])

    _, code = run_app([str(project), "--no-ignore"], jskill_home, ui)

    assert code == EXIT_OK
    assert (project / "a.js").exists()
    assert not (jskill_home / "config.json").exists()


def test_cache_command(project, jskill_home):
    make_tree(project, [IGNORE_FILENAME])
    run_app([str(project), "--dry-run"], jskill_home)

    ui = ScriptedUI()
    _, code = run_app(["cache"], jskill_home, ui)
    assert code == EXIT_OK
    assert "present" in ui.output

    ui = ScriptedUI()
    _, code = run_app(["cache", "--clear"], jskill_home, ui)
    assert code == EXIT_OK
    assert "cleared" in ui.output
    assert not any((jskill_home / "cache").iterdir())


def test_undecodable_ignore_file_exits_with_failure(project, jskill_home, capsys):
    make_tree(project, ["app.js"])
    (project / IGNORE_FILENAME).write_bytes(b"\xff\xfe\n")

    code = main([str(project), "--dry-run"])

    assert code == EXIT_FAILURE
    assert "not valid UTF-8" in capsys.readouterr().out
    assert (project / "app.js").exists()


def test_unwritable_cache_exits_with_failure(project, jskill_home, monkeypatch):
    make_tree(project, [IGNORE_FILENAME, "app.js"])
    (project / IGNORE_FILENAME).write_text("dist/\n")
    ui = ScriptedUI()

    def read_only(self, rules):
        raise PermissionError(13, "Permission denied", str(self.parsed_file))

    monkeypatch.setattr("ignore_cache.IgnoreCache._store_parsed", read_only)
    _, code = run_app([str(project)], jskill_home, ui)

    assert code == EXIT_FAILURE
    assert "Cannot write ignore cache" in ui.output
    assert ui.questions == []
