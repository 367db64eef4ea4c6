"""Tests for the command-line entry point and its exit codes."""

from unittest.mock import patch

import pytest

from mosdef import __version__
from mosdef.cli import main, build_parser
from mosdef.exceptions import BackendNotFoundError, DisplayApiError, NoMonitorsDetectedError
from mosdef.monitor_detection import Orientation


@pytest.fixture
def cli_env(test_config, temp_config_dir, fake_detector, monkeypatch):
    """Run main() against the fake display and the temp config dir."""
    monkeypatch.delenv("SSH_CONNECTION", raising=False)
    monkeypatch.delenv("SSH_TTY", raising=False)
    config_file = str(temp_config_dir / "config.toml")

    with patch("mosdef.cli.MonitorDetector", return_value=fake_detector), \
            patch("mosdef.cli.get_setter", return_value=fake_detector):
        yield lambda *argv: main(["-c", config_file, *argv])


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert f"mos-def {__version__}" in capsys.readouterr().out


def test_parser_accepts_selector_flags():
    args = build_parser().parse_args([
        "--dry-run", "--revert-seconds", "15", "toggle", "--include", "M1,M2", "--exclude", 'name:"TV"',
    ])
    assert args.command == "toggle"
    assert args.revert_seconds == 15
    assert args.include == "M1,M2"
    assert args.exclude == 'name:"TV"'


def test_negative_revert_seconds_rejected():
    with pytest.raises(SystemExit) as exc_info:
        main(["--revert-seconds", "-5", "portrait"])
    assert exc_info.value.code == 2


def test_list(cli_env, capsys):
    assert cli_env("list") == 0
    assert "DELL U2720Q" in capsys.readouterr().out


def test_rotate_success(cli_env, fake_detector, temp_config_dir):
    assert cli_env("--no-confirm", "portrait", "--only", "M1") == 0
    assert fake_detector.settings["DP-1"].orientation == Orientation.PORTRAIT
    assert '"last_action": "portrait"' in (temp_config_dir / "state.json").read_text()


def test_rotate_failure_exit_code(cli_env, fake_detector):
    fake_detector.failing["DP-1"] = -1
    assert cli_env("--no-confirm", "portrait") == 3


@pytest.mark.parametrize("argv", [
    ["--no-confirm", "portrait", "--only", "M9"],
    ["--no-confirm", "portrait", "--include", "M1,"],
    ["--no-confirm", "portrait", "--only", 'name:"Dell'],
])
def test_selection_errors_exit_2(cli_env, fake_detector, argv, capsys):
    assert cli_env(*argv) == 2
    assert "❌" in capsys.readouterr().err
    assert fake_detector.apply_calls == []


def test_remote_session_refused(cli_env, fake_detector, monkeypatch):
    monkeypatch.setenv("SSH_CONNECTION", "10.0.0.2 50000 10.0.0.1 22")
    assert cli_env("--no-confirm", "toggle") == 2
    assert fake_detector.apply_calls == []


def test_force_remote(cli_env, fake_detector, monkeypatch):
    monkeypatch.setenv("SSH_TTY", "/dev/pts/3")
    assert cli_env("--no-confirm", "--force-remote", "toggle", "--only", "M2") == 0
    assert fake_detector.settings["HDMI-1"].orientation == Orientation.PORTRAIT


def test_save_and_clear_default(cli_env, fake_detector, temp_config_dir):
    assert cli_env("portrait", "--save-default", "M2") == 0
    assert fake_detector.apply_calls == []
    assert '"default_selector": "M2"' in (temp_config_dir / "state.json").read_text()

    assert cli_env("--no-confirm", "portrait") == 0
    assert [call[0] for call in fake_detector.apply_calls] == ["HDMI-1"]

    assert cli_env("portrait", "--clear-default") == 0
    assert '"default_selector": null' in (temp_config_dir / "state.json").read_text()


def test_malformed_state_exit_3(cli_env, temp_config_dir):
    (temp_config_dir / "state.json").write_text("{oops")
    assert cli_env("--no-confirm", "portrait") == 3


def test_invalid_config_exit_78(temp_config_dir):
    config_file = temp_config_dir / "config.toml"
    config_file.write_text('[display]\nbackend = "wayfire"\n')
    assert main(["-c", str(config_file), "list"]) == 78


def test_backend_not_found_exit_69(cli_env, fake_detector):
    def no_backend(force_refresh=False):
        raise BackendNotFoundError("no DISPLAY")

    fake_detector.list_active_monitors = no_backend
    assert cli_env("--no-confirm", "portrait") == 69


def test_enumeration_failure_exit_3(cli_env, fake_detector):
    def no_monitors(force_refresh=False):
        raise NoMonitorsDetectedError("nothing connected")

    fake_detector.list_active_monitors = no_monitors
    assert cli_env("--no-confirm", "landscape") == 3


def test_keyboard_interrupt_exit_130(cli_env, fake_detector):
    def interrupted(force_refresh=False):
        raise KeyboardInterrupt

    fake_detector.list_active_monitors = interrupted
    assert cli_env("--no-confirm", "toggle") == 130


def test_init_writes_config(tmp_path, capsys):
    config_file = tmp_path / "mos-def" / "config.toml"
    assert main(["-c", str(config_file), "init"]) == 0
    assert config_file.exists()
    assert "Configuration initialized" in capsys.readouterr().out


def _fail_enumeration(fake_detector):
    def broken(force_refresh=False):
        raise DisplayApiError("swaymsg returned garbage")

    fake_detector.list_active_monitors = broken


def test_unexpected_error_exit_1(cli_env, fake_detector, capsys):
    _fail_enumeration(fake_detector)
    assert cli_env("--no-confirm", "portrait") == 1
    assert "❌ Error: swaymsg returned garbage" in capsys.readouterr().err


def test_verbose_in_config_reraises(cli_env, fake_detector, temp_config_dir):
    (temp_config_dir / "config.toml").write_text('[logging]\nlevel = "INFO"\nverbose = true\n')
    _fail_enumeration(fake_detector)

    with pytest.raises(DisplayApiError):
        cli_env("--no-confirm", "portrait")


def test_verbose_flag_reraises(cli_env, fake_detector):
    _fail_enumeration(fake_detector)

    with pytest.raises(DisplayApiError):
        cli_env("-v", "--no-confirm", "portrait")


def test_no_match_prints_suggestions(cli_env, capsys):
    assert cli_env("--no-confirm", "landscape", "--only", 'device:"DP-9"') == 2
    err = capsys.readouterr().err
    assert "No monitors match the specified selectors" in err
    assert "  M1: DELL U2720Q" in err
    assert 'Attempted selectors that didn\'t match:\n  device:"DP-9"' in err
