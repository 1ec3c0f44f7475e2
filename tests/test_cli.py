"""Tests for the CLI module."""

import pytest
from click.testing import CliRunner

from led_migrate import cli as cli_module
from led_migrate.cli import cli, main, parse
from led_migrate.errors import UsageError
from led_migrate.request import FROM_DIR, TO_LED_VOLUME, OperationKind

from conftest import FakeEngine


@pytest.fixture
def fake_runtime(monkeypatch, runtime):
    """Make main() use a fake engine instead of probing the host."""
    engine = FakeEngine()
    monkeypatch.setattr(cli_module, "detect", lambda: runtime)
    monkeypatch.setattr(cli_module.DockerEngine, "for_runtime", lambda handle: engine)
    return engine


@pytest.fixture
def no_runtime(monkeypatch):
    """Fail the test if main() gets as far as detecting a runtime."""
    def detect():
        raise AssertionError("runtime detection should not run")
    monkeypatch.setattr(cli_module, "detect", detect)


def test_help_command():
    """Test the help output."""
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert "--from-dir PATH" in result.output
    assert "--to-led-volume NAME" in result.output
    assert "postgres_data" in result.output


def test_import_help_command():
    runner = CliRunner()
    result = runner.invoke(cli, ['import', '-h'])
    assert result.exit_code == 0
    assert "Import data into a new Lemmy-Easy-Deploy volume" in result.output
    assert "--from-dir PATH" in result.output
    assert "--to-tar-gz" not in result.output
    assert "--from-led-volume" not in result.output


def test_export_help_lists_export_options(capsys):
    assert parse(["export", "--help", "--bogus"]).kind is OperationKind.HELP
    out = capsys.readouterr().out
    assert "Export data out of a Lemmy-Easy-Deploy volume" in out
    assert "--to-tar-gz PATH" in out
    assert "--from-dir" not in out


def test_help_flag_as_option_value_is_not_help():
    request = parse(["import", "--from-dir", "-h", "--to-led-volume", "x"])
    assert request.kind is OperationKind.IMPORT
    assert request.get(FROM_DIR) == "-h"


def test_help_after_double_dash_is_not_help():
    with pytest.raises(UsageError):
        parse(["import", "--", "-h"])


def test_parse_empty_is_help(capsys):
    assert parse([]).kind is OperationKind.HELP
    assert "Usage: led-migrate" in capsys.readouterr().out


@pytest.mark.parametrize("args", [
    ["-h"],
    ["--help"],
    ["-h", "import", "--bogus"],
    ["--help", "export", "--from-led-volume"],
    ["import", "--from-dir", "d", "-h"],
    ["-h", "--bogus"],
    ["--help", "--to-led-volume"],
    ["import", "-h", "--bogus"],
    ["import", "-h", "--from-dir"],
    ["export", "--help", "--nope", "x"],
])
def test_parse_help_wins(args, capsys):
    assert parse(args).kind is OperationKind.HELP
    assert "Usage:" in capsys.readouterr().out


def test_parse_import():
    request = parse(["import", "--from-dir", "data", "--to-led-volume", "pictrs_data"])
    assert request.kind is OperationKind.IMPORT
    assert dict(request.options) == {FROM_DIR: "data", TO_LED_VOLUME: "pictrs_data"}


def test_parse_export():
    request = parse(["export", "--from-led-volume", "postgres_data", "--to-tar-gz", "pg.tar.gz"])
    assert request.kind is OperationKind.EXPORT
    assert request.get("to-tar-gz") == "pg.tar.gz"


def test_parse_last_occurrence_wins():
    request = parse(["import", "--from-dir", "a", "--from-dir", "b", "--to-led-volume", "x"])
    assert request.get(FROM_DIR) == "b"


def test_parse_options_before_operation():
    request = parse(["--from-dir", "a", "import", "--to-led-volume", "x", "--from-dir", "b"])
    assert request.kind is OperationKind.IMPORT
    assert request.get(FROM_DIR) == "b"
    assert request.get(TO_LED_VOLUME) == "x"


def test_parse_export_options_reach_import():
    request = parse(["import", "--from-dir", "a", "--to-tar-gz", "x.tar.gz"])
    assert request.get("to-tar-gz") == "x.tar.gz"


def test_parse_options_without_operation(capsys):
    request = parse(["--from-dir", "a"])
    assert request.kind is OperationKind.NONE
    assert "Usage:" in capsys.readouterr().out


@pytest.mark.parametrize("args, message", [
    (["migrate"], "No such command"),
    (["import", "--bogus"], "--bogus"),
    (["import", "stray"], "stray"),
    (["import", "--to-led-volume", "x", "--from-dir"], "requires an argument"),
    (["export", "--from-led-volume"], "requires an argument"),
])
def test_parse_usage_errors(args, message):
    with pytest.raises(UsageError, match=message) as excinfo:
        parse(args)
    assert "Usage:" in excinfo.value.usage


def test_main_help_exits_cleanly(no_runtime, capsys):
    main([])
    main(["--from-dir", "a"])
    assert "Usage: led-migrate" in capsys.readouterr().out


def test_main_usage_error(no_runtime, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["import", "--from-dir"])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR:" in err
    assert "Usage:" in err


def test_main_redundant_prefix_before_detection(no_runtime, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["import", "--from-dir", str(tmp_path), "--to-led-volume", "lemmy-easy-deploy_foo"])
    assert excinfo.value.code == 1
    assert "--to-led-volume foo" in capsys.readouterr().err


def test_main_bad_suffix_before_detection(no_runtime, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["export", "--from-led-volume", "x", "--to-tar-gz", "out.tar"])
    assert excinfo.value.code == 1
    assert "does not end in .tar.gz" in capsys.readouterr().err


def test_main_import_twice(fake_runtime, tmp_path, capsys):
    args = ["import", "--from-dir", str(tmp_path), "--to-led-volume", "x"]

    main(args)
    labels = dict(fake_runtime.volumes["lemmy-easy-deploy_x"])
    assert len(fake_runtime.runs) == 1

    with pytest.raises(SystemExit) as excinfo:
        main(args)
    assert excinfo.value.code == 1
    assert "already exists" in capsys.readouterr().err
    assert fake_runtime.volumes["lemmy-easy-deploy_x"] == labels
    assert len(fake_runtime.runs) == 1


def test_main_export_missing_source(fake_runtime, tmp_path, capsys):
    out = tmp_path / "out.tar.gz"
    with pytest.raises(SystemExit) as excinfo:
        main(["export", "--from-led-volume", "MISSING", "--to-tar-gz", str(out)])
    assert excinfo.value.code == 1
    assert "does not exist" in capsys.readouterr().err
    assert not out.exists()
    assert fake_runtime.runs == []


def test_main_transfer_failure(fake_runtime, tmp_path, capsys):
    fake_runtime.exit_status = 1
    with pytest.raises(SystemExit) as excinfo:
        main(["import", "--from-dir", str(tmp_path), "--to-led-volume", "x"])
    assert excinfo.value.code == 1
    assert "Helper container exited with status 1" in capsys.readouterr().err
