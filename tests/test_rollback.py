"""Tests for rollback snapshot and restore."""

from mosdef.display import DisplayChangeResult
from mosdef.monitor_detection import Orientation
from mosdef.rollback import RollbackEntry, RollbackManager


def test_snapshot_captures_live_settings(sample_monitors, fake_display):
    manager = RollbackManager(fake_display, fake_display)
    snapshot = manager.snapshot(sample_monitors)

    assert snapshot == (
        RollbackEntry("DP-1", Orientation.LANDSCAPE, 2560, 1440),
        RollbackEntry("HDMI-1", Orientation.LANDSCAPE, 1920, 1080),
        RollbackEntry("DP-2", Orientation.PORTRAIT, 1080, 1920),
    )


def test_snapshot_skips_unreadable(sample_monitors, fake_display):
    fake_display.unreadable.add("HDMI-1")
    snapshot = RollbackManager(fake_display, fake_display).snapshot(sample_monitors)

    assert [entry.device_path for entry in snapshot] == ["DP-1", "DP-2"]


def test_snapshot_none_when_nothing_readable(sample_monitors, fake_display):
    fake_display.unreadable.update({"DP-1", "HDMI-1", "DP-2"})
    assert RollbackManager(fake_display, fake_display).snapshot(sample_monitors) is None


def test_restore_puts_back_all_three_fields(sample_monitors, fake_display):
    manager = RollbackManager(fake_display, fake_display)
    snapshot = manager.snapshot(sample_monitors[:1])
    fake_display.apply("DP-1", Orientation.PORTRAIT, 1440, 2560)
    fake_display.apply_calls.clear()

    assert manager.restore(snapshot)
    assert fake_display.apply_calls == [("DP-1", Orientation.LANDSCAPE, 2560, 1440, True)]
    assert fake_display.settings["DP-1"].orientation == Orientation.LANDSCAPE


def test_restore_is_best_effort(sample_monitors, fake_display):
    manager = RollbackManager(fake_display, fake_display)
    snapshot = manager.snapshot(sample_monitors)
    fake_display.failing["DP-1"] = DisplayChangeResult.FAILED

    assert manager.restore(snapshot) is False
    assert [call[0] for call in fake_display.apply_calls] == ["DP-1", "HDMI-1", "DP-2"]


def test_restore_fails_on_unreadable_entry(sample_monitors, fake_display):
    manager = RollbackManager(fake_display, fake_display)
    snapshot = manager.snapshot(sample_monitors)
    fake_display.unreadable.add("DP-2")

    assert manager.restore(snapshot) is False
    assert [call[0] for call in fake_display.apply_calls] == ["DP-1", "HDMI-1"]


def test_restore_empty_is_trivially_true(fake_display):
    manager = RollbackManager(fake_display, fake_display)
    assert manager.restore(None)
    assert manager.restore(())
    assert fake_display.apply_calls == []


def test_restore_dry_run(sample_monitors, fake_display, capsys):
    manager = RollbackManager(fake_display, fake_display)
    snapshot = manager.snapshot(sample_monitors[:1])

    assert manager.restore(snapshot, dry_run=True)
    assert fake_display.apply_calls == []
    assert "[DRY RUN] Would rollback DP-1 to 0°" in capsys.readouterr().out
