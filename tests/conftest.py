from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable

import pytest

# Allow tests to import the backend package when it is not installed.
BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
BACKEND_STR = str(BACKEND_DIR)
if BACKEND_STR not in sys.path:
    sys.path.insert(0, BACKEND_STR)

from scaffolder.services.port_manager import PortManager  # noqa: E402


class FakeProcess:
    """Stands in for asyncio.subprocess.Process with scripted output"""

    def __init__(self, pid: int = 4321) -> None:
        self.pid = pid
        self.returncode: int | None = None
        self.terminated = False
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self._exited = asyncio.Event()

    def emit_stdout(self, text: str) -> None:
        self.stdout.feed_data(text.encode())

    def emit_stderr(self, text: str) -> None:
        self.stderr.feed_data(text.encode())

    def exit(self, code: int) -> None:
        if self.returncode is not None:
            return
        self.returncode = code
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._exited.set()

    def terminate(self) -> None:
        self.terminated = True
        self.exit(-15)

    async def wait(self) -> int:
        await self._exited.wait()
        assert self.returncode is not None
        return self.returncode


def spawner_for(process: FakeProcess, calls: list | None = None):
    async def spawn(command, cwd, env):
        if calls is not None:
            calls.append((list(command), cwd, dict(env)))
        return process
    return spawn


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def ports(monkeypatch: pytest.MonkeyPatch) -> PortManager:
    """PortManager over 8080-8089 where every port probes as free"""
    manager = PortManager(port_range_start=8080, port_range_size=10)
    monkeypatch.setattr(manager, "is_port_available", lambda port: True)
    return manager


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Directory holding the files the default start command needs"""
    (tmp_path / "package.json").write_text('{"scripts": {"start": "node server.js"}}')
    (tmp_path / "server.js").write_text("// server")
    return tmp_path
