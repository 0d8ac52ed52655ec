from __future__ import annotations

import pytest
from typer.testing import CliRunner

from polltail import __version__, cli
from polltail.config import DEFAULT_CONFIG, FollowConfig

runner = CliRunner()


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def fake_run_follow(patterns, config):
        calls.append((list(patterns), config))

    monkeypatch.setattr(cli, "run_follow", fake_run_follow)
    return calls


def test_version():
    r = runner.invoke(cli.app, ["--version"])
    assert r.exit_code == 0
    assert r.output.strip() == f"polltail {__version__}"


def test_help_exits_without_following(captured):
    r = runner.invoke(cli.app, ["-h"])
    assert r.exit_code == 0
    assert "--first-lines" in r.output
    assert captured == []


def test_files_are_required(captured):
    r = runner.invoke(cli.app, [])
    assert r.exit_code == 2
    assert captured == []


def test_unknown_option_is_fatal(captured):
    r = runner.invoke(cli.app, ["--bogus", "a.log"])
    assert r.exit_code == 2
    assert captured == []


def test_defaults_passed_to_monitor(captured):
    r = runner.invoke(cli.app, ["a.log", "b.log"])
    assert r.exit_code == 0, r.output
    assert captured == [(["a.log", "b.log"], DEFAULT_CONFIG)]


def test_flags_build_config(captured):
    r = runner.invoke(cli.app, ["-t", "-g", "--first-lines", "3", "--interval", "0.5", "logs/*.log"])
    assert r.exit_code == 0, r.output
    assert captured == [
        (["logs/*.log"], FollowConfig(show_time=True, glob_mode=True, first_lines=3, interval_s=0.5))
    ]


def test_first_lines_equals_syntax(captured):
    r = runner.invoke(cli.app, ["--first-lines=0", "a.log"])
    assert r.exit_code == 0, r.output
    assert captured[0][1].first_lines == 0


def test_negative_first_lines_rejected(captured):
    r = runner.invoke(cli.app, ["--first-lines", "-1", "a.log"])
    assert r.exit_code == 2
    assert captured == []


def test_config_file_then_flags(tmp_path, captured):
    p = tmp_path / "c.yaml"
    p.write_text("show_time: true\nfirst_lines: 4\ninterval: 2\n")
    r = runner.invoke(cli.app, ["--config", str(p), "--first-lines", "6", "a.log"])
    assert r.exit_code == 0, r.output
    assert captured[0][1] == FollowConfig(show_time=True, first_lines=6, interval_s=2.0)


def test_bad_config_file_is_fatal(tmp_path, captured):
    p = tmp_path / "c.yaml"
    p.write_text("interval: -3\n")
    r = runner.invoke(cli.app, ["--config", str(p), "a.log"])
    assert r.exit_code == 2
    assert captured == []


def test_ctrl_c_stops_cleanly(monkeypatch):
    def interrupted(patterns, config):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_follow", interrupted)
    r = runner.invoke(cli.app, ["a.log"])
    assert r.exit_code == 0


def test_end_to_end_one_poll(tmp_path, monkeypatch):
    from polltail.monitor import FollowMonitor

    log = tmp_path / "a.log"
    log.write_text("".join(f"{i}\n" for i in range(12)))

    def one_poll(self, stop=None):
        self.poll_once()

    monkeypatch.setattr(FollowMonitor, "run", one_poll)
    r = runner.invoke(cli.app, ["--first-lines", "2", str(log)])
    assert r.exit_code == 0, r.output
    assert f"==> {log} <== found\n==> {log} <==\n10\n11\n" in r.output
