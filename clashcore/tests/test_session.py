"""
Tests for sessions, the auto-pilot and the CLI.
"""

import sys
import time

import pytest

from ..cli import main
from ..config import settings
from ..engine_core.action import Action
from ..engine_core.errors import IllegalReason
from ..engine_core.state import RulesOptions
from ..engine_core.transcript import replay_transcript
from ..games.standard import DEMO_ROSTERS
from ..session import AutoPilot, LoopState, SessionManager, SessionState
from .conftest import ROSTERS


@pytest.fixture
def manager():
    return SessionManager()


class TestSessionManager:
    """Tests for the session lifecycle."""

    def test_create_and_get(self, manager, test_data):
        session = manager.create_session(test_data, ROSTERS, seed=5)

        assert manager.get_session(session.session_id) is session
        assert session.is_active()
        assert session.match.seed == 5
        assert manager.list_active_sessions() == [session.session_id]

    def test_submit_records(self, manager, test_data):
        session = manager.create_session(test_data, ROSTERS, seed=5)

        ok = session.submit(Action.pass_priority("p1"))
        rejected = session.submit(Action.pass_priority("p1"))

        assert ok.success
        assert rejected.error_code == IllegalReason.NOT_ACTIVE_TEAM.value
        assert [e.error_code for e in session.transcript.entries] == [None, "NOT_ACTIVE_TEAM"]

    def test_end_session_abandons(self, manager, test_data):
        session = manager.create_session(test_data, ROSTERS, seed=5)

        ended = manager.end_session(session.session_id)

        assert ended is session
        assert ended.state == SessionState.ABANDONED
        assert manager.get_session(session.session_id) is None
        assert manager.end_session(session.session_id) is None

    def test_cleanup_keeps_active_sessions(self, manager, test_data):
        finished = manager.create_session(test_data, ROSTERS, seed=1)
        running = manager.create_session(test_data, ROSTERS, seed=2)
        finished.state = SessionState.MATCH_OVER
        finished.created_at = time.time() - 7200
        running.created_at = time.time() - 7200

        manager.cleanup_stale_sessions(max_age_seconds=3600)

        assert manager.get_session(finished.session_id) is None
        assert manager.get_session(running.session_id) is running

    def test_default_rules_come_from_settings(self, manager, test_data):
        session = manager.create_session(test_data, ROSTERS, seed=3)

        assert session.recorder.rules == RulesOptions.from_settings(settings)


class TestAutoPilot:
    """Tests for unattended play."""

    def test_run_is_recorded_and_replays(self, manager, standard_data):
        session = manager.create_session(standard_data, DEMO_ROSTERS, seed=42)

        result = AutoPilot(session, policy_seed=3, max_turns=2).run()

        assert result.success
        assert result.loop_state in (LoopState.MATCH_OVER, LoopState.TURN_LIMIT)
        assert len(result.actions) == len(session.transcript.entries)
        replayed = replay_transcript(standard_data, session.transcript)
        assert len(replayed.events) == len(session.transcript.events)

    def test_same_seeds_same_run(self, manager, standard_data):
        first = manager.create_session(standard_data, DEMO_ROSTERS, seed=42)
        second = manager.create_session(standard_data, DEMO_ROSTERS, seed=42)

        AutoPilot(first, policy_seed=9, max_turns=2).run()
        AutoPilot(second, policy_seed=9, max_turns=2).run()

        assert first.transcript.to_json() == second.transcript.to_json()


class TestCli:
    """Tests for the command-line entry point."""

    def run_cli(self, monkeypatch, *argv):
        monkeypatch.setattr(sys, "argv", ["clashcore", *argv])
        main()

    def test_validate_standard(self, monkeypatch, capsys):
        self.run_cli(monkeypatch, "validate")

        assert "OK" in capsys.readouterr().out

    def test_demo_then_replay(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "demo.json"

        self.run_cli(monkeypatch, "demo", "--seed", "8", "--turns", "2", "-o", str(path))
        self.run_cli(monkeypatch, "replay", str(path))

        out = capsys.readouterr().out
        assert f"Transcript written to {path}" in out
        assert "OK:" in out

    def test_missing_file(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            self.run_cli(monkeypatch, "validate", str(tmp_path / "missing.json"))

        assert excinfo.value.code == 1
        assert "File not found" in capsys.readouterr().out
