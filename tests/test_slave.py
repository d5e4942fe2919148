"""Tests for the Slave facade and the module-level default instance."""

import threading

import pytest

import slaveplay.player.slave as slave_module
from slaveplay.config import PlayerConfig
from slaveplay.player import Slave


@pytest.fixture
def default_slave(monkeypatch, launcher, player_config):
    s = Slave(player_config, launcher=launcher)
    monkeypatch.setattr(slave_module, "_default", s)
    yield s
    s.stop()


class TestSlave:
    def test_config_flows_to_parts(self, launcher):
        config = PlayerConfig(binary="/usr/local/bin/mplayer", restart_timeout=3, poll_interval=0.5)
        s = Slave(config, launcher=launcher)
        assert s.supervisor.argv[0] == "/usr/local/bin/mplayer"
        assert s.supervisor.policy.backoff == 3
        assert s.controller.poll_interval == 0.5

    def test_defaults(self, launcher):
        s = Slave(launcher=launcher)
        assert s.supervisor.argv == ["mplayer", "-quiet", "-slave", "-idle"]
        assert s.supervisor.policy.backoff == 10.0
        assert s.controller.poll_interval == 1.0

    def test_status(self, slave, running_player):
        status = slave.status()
        assert status["state"] == "running"
        assert status["pid"] == running_player.pid
        assert status["session_active"] is False
        assert status["path"] is None
        assert status["pending_commands"] == 0

    def test_send_command(self, slave, running_player):
        slave.send_command("pause")
        assert running_player.received == ["pause"]

    def test_send_command_rejects_multiline(self, slave, running_player):
        with pytest.raises(ValueError):
            slave.send_command("pause\nquit")
        assert running_player.received == []


class TestDefaultSlave:
    def test_get_default_slave_is_shared(self, default_slave):
        assert slave_module.get_default_slave() is default_slave
        assert slave_module.get_default_slave() is slave_module.get_default_slave()

    def test_module_functions(self, default_slave, launcher, wait_until):
        slave_module.start_slave(lambda e: None)
        assert wait_until(lambda: launcher.current is not None)

        slave_module.send_command("volume 80 1")
        assert launcher.current.received == ["volume 80 1"]
        assert slave_module.skip() is False

    def test_module_play_and_wait(self, default_slave, launcher, wait_until):
        slave_module.start_slave(lambda e: None)
        assert wait_until(lambda: launcher.current is not None)
        result = {}

        t = threading.Thread(
            target=lambda: result.setdefault(
                "outcome", slave_module.play_and_wait_with_duration("/tmp/a.mp3", 0.1),
            ),
            daemon=True,
        )
        t.start()
        t.join(timeout=3)

        assert result["outcome"].value == "stopped"
        assert launcher.current.received[0] == "loadfile /tmp/a.mp3"
