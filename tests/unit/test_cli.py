from unittest.mock import patch

from click.testing import CliRunner

from git_timesync.__main__ import cli
from git_timesync.models import SyncSummary


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_defaults_to_dry_run_on_whole_tree(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    runner = CliRunner()
    result = runner.invoke(cli, [])

    assert result.exit_code == 0
    config = mock_sync_cls.call_args.kwargs["config"]
    assert config.dry_run is True
    assert config.verbose is True
    mock_sync_cls.return_value.synchronize.assert_called_once_with(())


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_flags_are_mapped(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    runner = CliRunner()
    result = runner.invoke(cli, ["-f", "-q", "--debug", "--", "-odd-name.txt", "web"])

    assert result.exit_code == 0
    config = mock_sync_cls.call_args.kwargs["config"]
    assert config.force is True
    assert config.dry_run is False
    assert config.verbose is False
    assert config.debug is True
    mock_sync_cls.return_value.synchronize.assert_called_once_with(("-odd-name.txt", "web"))


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_dry_run_wins_over_force(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    runner = CliRunner()
    for flag in ("-n", "--dryrun", "--dry-run"):
        result = runner.invoke(cli, ["-f", flag])
        assert result.exit_code == 0
        assert mock_sync_cls.call_args.kwargs["config"].dry_run is True


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_force_from_environment(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    monkeypatch.setenv("GIT_TIMESYNC_FORCE", "1")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0
    assert mock_sync_cls.call_args.kwargs["config"].force is True


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_fatal_errors_set_exit_status(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    summary = SyncSummary()
    summary.fail("/srv/repo.git: Cannot run this script on a bare Repository")
    mock_sync_cls.return_value.synchronize.return_value = summary

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 1


def test_unknown_platform(monkeypatch):
    monkeypatch.setenv("OS", "Plan9")

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 1
    assert "Unknown Operating System to perform timestamp update" in result.output


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_calendar_strategy_selected_for_darwin(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Darwin")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    CliRunner().invoke(cli, [])

    assert mock_sync_cls.call_args.kwargs["setter"].name == "calendar"


@patch("git_timesync.__main__.TimestampSynchronizer")
def test_options_end_at_first_path(mock_sync_cls, monkeypatch):
    monkeypatch.setenv("OS", "Linux")
    mock_sync_cls.return_value.synchronize.return_value = SyncSummary()

    result = CliRunner().invoke(cli, ["a.txt", "-f"])

    assert result.exit_code == 0
    config = mock_sync_cls.call_args.kwargs["config"]
    assert config.force is False
    assert config.dry_run is True
    mock_sync_cls.return_value.synchronize.assert_called_once_with(("a.txt", "-f"))
