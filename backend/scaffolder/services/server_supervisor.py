"""
Launches a scaffolded project's dev server and decides whether it started.

The child is spawned in its own session so it keeps running after the
request that launched it returns. Its stdout/stderr are read line by line
and matched against StartupMarkers:

    NOT_STARTED -> STARTING -> STARTED -> STOPPED
    NOT_STARTED -> STARTING -> FAILED_TO_START

A success marker on stdout, or the startup timeout elapsing with no
failure seen, moves the server to STARTED and registers it with the
PortManager. Failure markers on stderr, a spawn error or an early exit move
it to FAILED_TO_START and release the port. Once started, the process exit
releases the port again.
"""

import asyncio
import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Sequence, Set, Tuple

from ..core.config import settings
from ..core.errors import (
    CommandNotFoundError,
    ExitCause,
    MissingProjectFilesError,
    PortConflictError,
    PortNotAllocatedError,
    ProcessExitedError,
    ScaffoldError,
    ServerStartError,
    SpawnFailedError,
)
from .port_manager import PortManager, port_manager

logger = logging.getLogger(__name__)


class ServerState(str, Enum):
    NOT_STARTED = "not_started"
    STARTING = "starting"
    STARTED = "started"
    FAILED_TO_START = "failed_to_start"
    STOPPED = "stopped"


@dataclass
class StartupMarkers:
    """Substrings used to classify dev server output (matched case-insensitively)"""

    success: Tuple[str, ...] = (
        "server is running successfully",
        "server started",
        "listening on",
        "nest application successfully started",
        "compiled successfully",
    )
    port_conflict: Tuple[str, ...] = (
        "eaddrinuse",
        "address already in use",
    )
    command_not_found: Tuple[str, ...] = (
        "command not found",
        "is not recognized as an internal or external command",
    )

    def is_success(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.success)

    def is_port_conflict(self, text: str, port: int) -> bool:
        lowered = text.lower()
        if any(marker in lowered for marker in self.port_conflict):
            return True
        return re.search(rf"\b{port}\b.*\b(already in use|in use|is busy)\b", lowered) is not None

    def is_command_not_found(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.command_not_found)

    def exit_cause(self, text: str, port: int) -> ExitCause:
        if self.is_command_not_found(text):
            return ExitCause.MISSING_COMMAND
        if self.is_port_conflict(text, port):
            return ExitCause.PORT_CONFLICT
        return ExitCause.UNKNOWN


@dataclass
class DevServer:
    """A dev server launched by the supervisor"""
    project_name: str
    port: int
    command: Sequence[str]
    pid: Optional[int] = None
    state: ServerState = ServerState.NOT_STARTED
    stdout: str = ""
    stderr: str = ""
    error: Optional[ScaffoldError] = field(default=None, repr=False)

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"


# Read buffer per output stream; longer lines are skipped
STREAM_LIMIT = 1024 * 1024

Spawner = Callable[[Sequence[str], Path, Dict[str, str]], Awaitable[asyncio.subprocess.Process]]


async def spawn_detached(command: Sequence[str], cwd: Path, env: Dict[str, str]) -> asyncio.subprocess.Process:
    """Start command in its own session with piped output"""
    executable = shutil.which(command[0]) or command[0]
    return await asyncio.create_subprocess_exec(
        executable, *command[1:],
        cwd=str(cwd),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env={**os.environ, **env},
        start_new_session=True,
        limit=STREAM_LIMIT
    )


class DevServerSupervisor:
    """Starts dev servers and tracks them until they exit"""

    def __init__(
        self,
        port_manager: PortManager,
        startup_timeout: float = 8.0,
        markers: Optional[StartupMarkers] = None,
        spawner: Optional[Spawner] = None
    ):
        self.port_manager = port_manager
        self.startup_timeout = startup_timeout
        self.markers = markers or StartupMarkers()
        self._spawner = spawner or spawn_detached
        self._servers: Dict[int, DevServer] = {}
        self._watchers: Set[asyncio.Task] = set()

    def get_server(self, port: int) -> Optional[DevServer]:
        return self._servers.get(port)

    async def start_server(
        self,
        project_path: Path,
        port: int,
        project_name: str,
        command: Optional[Sequence[str]] = None,
        required_files: Sequence[str] = ("package.json", "server.js"),
        env: Optional[Dict[str, str]] = None
    ) -> DevServer:
        """
        Start a dev server and wait until it is classified.

        Args:
            project_path: Directory the start command runs in
            port: Port previously handed out by the PortManager
            project_name: Name recorded in the running-server registry
            command: Start command (defaults to settings.DEV_SERVER_COMMAND)
            required_files: Files that must exist in project_path
            env: Extra environment variables; PORT is always set

        Returns:
            The DevServer in STARTED state

        Raises:
            ServerStartError: one of its subclasses when startup fails
        """
        project_path = Path(project_path)
        command = list(command or settings.DEV_SERVER_COMMAND)

        if not self.port_manager.is_allocated(port):
            raise PortNotAllocatedError(port)

        missing = [name for name in required_files if not (project_path / name).exists()]
        if missing:
            self.port_manager.release_port(port)
            raise MissingProjectFilesError(port, project_path, missing)

        server = DevServer(project_name=project_name, port=port, command=command)
        logger.info(f"Starting dev server for '{project_name}' on port {port}: {' '.join(command)}")

        try:
            process = await self._spawner(command, project_path, {**(env or {}), "PORT": str(port)})
        except Exception as e:
            self.port_manager.release_port(port)
            server.state = ServerState.FAILED_TO_START
            logger.error(f"Failed to start server process: {e}")
            raise SpawnFailedError(port, command, str(e)) from e

        server.pid = process.pid
        server.state = ServerState.STARTING
        self._servers[port] = server

        outcome: asyncio.Future = asyncio.get_running_loop().create_future()
        watcher = asyncio.create_task(self._watch(server, process, outcome))
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)

        try:
            await asyncio.wait_for(asyncio.shield(outcome), timeout=self.startup_timeout)
        except asyncio.TimeoutError:
            logger.info(
                f"Startup timeout ({self.startup_timeout}s) reached for port {port}, "
                "assuming server started"
            )
            self._mark_started(server, process, outcome)

        error = outcome.result()
        if error is not None:
            raise error
        return server

    async def _watch(self, server: DevServer, process, outcome: asyncio.Future):
        """Follow the process output and exit for the lifetime of the process"""
        try:
            await asyncio.gather(
                self._read_stream(process.stdout, server, process, outcome, "stdout"),
                self._read_stream(process.stderr, server, process, outcome, "stderr"),
            )
        finally:
            code = await process.wait()
            self._on_exit(server, code, outcome)

    async def _read_stream(self, stream, server: DevServer, process, outcome: asyncio.Future, stream_type: str):
        if stream is None:
            return
        while True:
            try:
                line = await stream.readline()
            except ValueError:
                # readline drops a line longer than the stream limit
                logger.warning(f"[{server.project_name}:{server.port}] {stream_type}: skipped a line over the buffer limit")
                continue
            if not line:
                break

            text = line.decode("utf-8", errors="replace")
            logger.debug(f"[{server.project_name}:{server.port}] {stream_type}: {text.rstrip()}")

            # Output after classification is only logged
            if outcome.done():
                continue

            if stream_type == "stdout":
                server.stdout += text
                if self.markers.is_success(server.stdout):
                    self._mark_started(server, process, outcome)
            else:
                server.stderr += text
                if self.markers.is_port_conflict(server.stderr, server.port):
                    self._fail(server, process, outcome, PortConflictError(server.port))
                elif self.markers.is_command_not_found(server.stderr):
                    self._fail(server, process, outcome, CommandNotFoundError(server.port, server.command))

    def _mark_started(self, server: DevServer, process, outcome: asyncio.Future):
        if outcome.done():
            return
        try:
            self.port_manager.register_running_server(server.port, server.project_name, server.pid)
        except PortNotAllocatedError as e:
            # Port bookkeeping was cleared while the server was starting
            server.state = ServerState.FAILED_TO_START
            server.error = e
            logger.warning(f"Dev server for '{server.project_name}' lost its port: {e}")
            self._terminate(process)
            outcome.set_result(e)
            return
        server.state = ServerState.STARTED
        logger.info(f"Dev server for '{server.project_name}' started at {server.url}")
        outcome.set_result(None)

    def _fail(self, server: DevServer, process, outcome: asyncio.Future, error: ServerStartError):
        if outcome.done():
            return
        server.state = ServerState.FAILED_TO_START
        server.error = error
        self.port_manager.release_port(server.port)
        logger.warning(f"Dev server for '{server.project_name}' failed to start: {error}")
        self._terminate(process)
        outcome.set_result(error)

    def _terminate(self, process):
        if process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass

    def _on_exit(self, server: DevServer, code: Optional[int], outcome: asyncio.Future):
        if not outcome.done():
            cause = self.markers.exit_cause(server.stdout + server.stderr, server.port)
            server.state = ServerState.FAILED_TO_START
            server.error = ProcessExitedError(server.port, code, cause)
            self.port_manager.release_port(server.port)
            logger.error(f"Server process exited with code {code} before startup (cause: {cause.value})")
            outcome.set_result(server.error)
        elif server.state == ServerState.STARTED:
            server.state = ServerState.STOPPED
            self.port_manager.unregister_server(server.port)
            self.port_manager.release_port(server.port)
            logger.info(f"Dev server for '{server.project_name}' on port {server.port} exited with code {code}")

        if self._servers.get(server.port) is server:
            del self._servers[server.port]


# Global instance
dev_server_supervisor = DevServerSupervisor(
    port_manager,
    startup_timeout=settings.STARTUP_TIMEOUT
)
