"""Tests for the Occupancy Prober."""

import asyncio
from types import SimpleNamespace

import pytest

from pdb_manager.probe import status as status_module
from pdb_manager.probe.status import OccupancyProber, ProbeError


def _fake_server(behaviour):
    class FakeJavaServer:
        instances = []
        attempts = 0

        def __init__(self, host, port, timeout=3):
            self.host = host
            self.port = port
            self.timeout = timeout
            FakeJavaServer.instances.append(self)

        async def async_status(self, tries=3):
            self.tries = tries
            FakeJavaServer.attempts += 1
            return await behaviour()

    return FakeJavaServer


class TestOccupancyProber:
    def test_returns_player_counts(self, monkeypatch):
        async def ok():
            return SimpleNamespace(players=SimpleNamespace(online=3, max=20))

        server_cls = _fake_server(ok)
        monkeypatch.setattr(status_module, "JavaServer", server_cls)

        sample = asyncio.run(OccupancyProber("mc.local", 25565, timeout=2).probe())

        assert (sample.online, sample.max) == (3, 20)
        server = server_cls.instances[0]
        assert (server.host, server.port, server.timeout) == ("mc.local", 25565, 2)

    def test_connection_error_becomes_probe_error(self, monkeypatch):
        async def refused():
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(status_module, "JavaServer", _fake_server(refused))

        with pytest.raises(ProbeError, match="mc.local:25565"):
            asyncio.run(OccupancyProber("mc.local", 25565).probe())

    def test_timeout_becomes_probe_error(self, monkeypatch):
        async def hang():
            await asyncio.sleep(5)

        monkeypatch.setattr(status_module, "JavaServer", _fake_server(hang))

        with pytest.raises(ProbeError, match="timed out"):
            asyncio.run(OccupancyProber("mc.local", 25565, timeout=0.05).probe())

    def test_malformed_response_becomes_probe_error(self, monkeypatch):
        async def malformed():
            return SimpleNamespace(players=SimpleNamespace(online=-4, max=20))

        monkeypatch.setattr(status_module, "JavaServer", _fake_server(malformed))

        with pytest.raises(ProbeError, match="Malformed"):
            asyncio.run(OccupancyProber("mc.local", 25565).probe())

    def test_single_attempt_per_probe(self, monkeypatch):
        """A failed query is not retried; the next cycle is the only retry."""
        async def refused():
            raise ConnectionRefusedError("connection refused")

        server_cls = _fake_server(refused)
        monkeypatch.setattr(status_module, "JavaServer", server_cls)

        with pytest.raises(ProbeError):
            asyncio.run(OccupancyProber("mc.local", 25565).probe())

        assert server_cls.attempts == 1
        assert server_cls.instances[0].tries == 1
